"""Connectivity Monitor State Schema"""
from typing import Optional, Any

from reporter_template.schemas.state import WorkflowState


class ConnectivityMonitorState(WorkflowState, total=False):
    """
    LangGraph state for the connectivity outage workflow.
    Flow: LOAD_STATE -> OPEN_OUTAGE | CLOSE_OUTAGE | SKIP_TRANSITION ->
          PERSIST_STATE -> PREFETCH_DIAGNOSTICS
    """
    # Notification
    incoming_state: str                   # Raw CONNECTIVITY_STATE
    previous_state: Optional[str]         # Raw persisted state, None on first run

    # Classification
    transition: str                       # Transition value

    # Outage tracking
    outage_start: Optional[int]           # Drop time from the outage marker
    report: Optional[dict[str, Any]]      # OutageReport when an outage closed
    reported: bool                        # Whether the report reached the API
    tag_outcome: Optional[str]            # created / updated / failed
    diagnostics: Optional[dict[str, Any]] # DiagnosticsBundle on close

    # Persistence
    state_persisted: bool
