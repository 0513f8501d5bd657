"""Notification routing - decides which monitor, if any, handles an event"""
from typing import Literal, Optional

from reporter_template.config_loader import Config
from reporter_template.schemas.events import NetworkEvent

Route = Literal["connectivity_monitor", "interface_watcher"]


def route_event(event: NetworkEvent, config: Config) -> Optional[Route]:
    """
    Connectivity changes go to the outage detector, up/down on the watched
    interface to the interface watcher. Everything else is ignored.
    """
    if event.is_connectivity_change:
        return "connectivity_monitor"

    watched = config.interface.name
    if event.is_link_event and watched and event.interface == watched:
        return "interface_watcher"

    return None
