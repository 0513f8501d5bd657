"""Conditional Edge Functions - connectivity workflow transitions"""
from typing import Any, Literal

from ..schemas.connectivity import Transition


def route_transition(state: dict[str, Any]) -> Literal["open_outage", "close_outage", "skip_transition"]:
    """
    Route on the classified transition.
    Only connected -> disconnected and disconnected -> connected act.
    """
    transition = state.get("transition")
    if transition == Transition.OUTAGE_OPEN.value:
        return "open_outage"
    if transition == Transition.OUTAGE_CLOSE.value:
        return "close_outage"
    return "skip_transition"
