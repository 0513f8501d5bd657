"""Interface Watcher Nodes"""
from .link_nodes import (
    route_link_event,
    make_interface_down_node,
    make_interface_up_node,
)

__all__ = [
    "route_link_event",
    "make_interface_down_node",
    "make_interface_up_node",
]
