"""Connectivity Monitor Nodes"""
from .load_node import make_load_state_node
from .outage_nodes import make_open_outage_node, make_close_outage_node
from .persist_node import (
    skip_transition_node,
    make_persist_state_node,
    make_prefetch_diagnostics_node,
)
from .conditions import route_transition

__all__ = [
    "make_load_state_node",
    "make_open_outage_node",
    "make_close_outage_node",
    "skip_transition_node",
    "make_persist_state_node",
    "make_prefetch_diagnostics_node",
    "route_transition",
]
