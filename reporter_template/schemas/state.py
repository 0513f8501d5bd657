"""
LangGraph Workflow State Definition

This module defines the TypedDict that flows through all LangGraph nodes.
Monitors extend it with their own fields.
"""

from typing import TypedDict, Optional


class WorkflowState(TypedDict, total=False):
    """
    Base workflow state for all monitors.

    Common fields:
    - Event identification (event_id, interface, action)
    - Event time (now, epoch seconds)
    - Execution tracking (nodes_executed, status)
    - Outcome (status, error)
    """

    # ============== Event Identification ==============
    event_id: str                         # Unique id of the dispatcher notification
    interface: str                        # Interface name ("" for global events)
    action: str                           # Dispatcher action

    # ============== Event Time ==============
    now: int                              # Epoch seconds when the event was received

    # ============== Execution Tracking ==============
    started_at: str                       # ISO timestamp of start
    nodes_executed: list[str]             # List of executed node names

    # ============== Final Results ==============
    error: Optional[str]                  # Error message if a step failed
    status: str                           # "running", "success", "failed"
