"""Interface Watcher State Schema"""
from typing import Optional, Any

from reporter_template.schemas.state import WorkflowState


class InterfaceWatcherState(WorkflowState, total=False):
    """
    LangGraph state for the watched-interface workflow.
    Flow: INTERFACE_DOWN | INTERFACE_UP
    """
    down_since: Optional[int]             # Time from the interface-down marker
    report: Optional[dict[str, Any]]      # LinkReport when the interface came back
    reported: bool                        # Whether a tag reached the API
    tag_outcome: Optional[str]            # created / updated / failed
