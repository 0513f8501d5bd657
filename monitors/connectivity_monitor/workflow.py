"""Connectivity Monitor Workflow"""
from typing import Any, Optional
import structlog
from langgraph.graph import StateGraph, START, END

from reporter_template.config_loader import OutageConfig
from reporter_template.schemas.events import NetworkEvent
from reporter_template.tools.state_store import StateStore
from reporter_template.tools.tag_client import TagReporter
from reporter_template.workflow import BaseWorkflow
from .schemas.state import ConnectivityMonitorState
from .tools.diagnostics import DiagnosticsTrigger, NullDiagnostics
from .nodes import (
    make_load_state_node,
    make_open_outage_node,
    make_close_outage_node,
    skip_transition_node,
    make_persist_state_node,
    make_prefetch_diagnostics_node,
    route_transition,
)

logger = structlog.get_logger(__name__)


class ConnectivityMonitorWorkflow(BaseWorkflow):
    """
    Connectivity outage state machine, one run per connectivity-change.
    Flow: LOAD_STATE -> OPEN_OUTAGE | CLOSE_OUTAGE | SKIP_TRANSITION ->
          PERSIST_STATE -> PREFETCH_DIAGNOSTICS
    """

    def __init__(
        self,
        store: StateStore,
        reporter: TagReporter,
        outage: Optional[OutageConfig] = None,
        diagnostics: Optional[DiagnosticsTrigger] = None,
        powerline_tag: str = "powerline_detected",
        name: str = "connectivity_monitor",
        version: str = "1.0.0",
    ):
        super().__init__(name, version, store)
        self.reporter = reporter
        self.outage = outage or OutageConfig()
        self.diagnostics = diagnostics or NullDiagnostics()
        self.powerline_tag = powerline_tag

    def get_state_class(self) -> type:
        return ConnectivityMonitorState

    def get_initial_state(self, event: NetworkEvent) -> dict[str, Any]:
        base = super().get_initial_state(event)
        return {
            **base,
            "incoming_state": event.connectivity_state,
            "previous_state": None,
            "transition": None,
            "outage_start": None,
            "report": None,
            "reported": False,
            "tag_outcome": None,
            "diagnostics": None,
            "state_persisted": False,
        }

    def build_graph(self, graph: StateGraph) -> None:
        """Build the connectivity workflow graph"""

        graph.add_node("load_state", make_load_state_node(self.store))
        graph.add_node("open_outage", make_open_outage_node(self.store, self.diagnostics))
        graph.add_node(
            "close_outage",
            make_close_outage_node(
                self.store,
                self.reporter,
                self.diagnostics,
                self.outage,
                self.powerline_tag,
            ),
        )
        graph.add_node("skip_transition", skip_transition_node)
        graph.add_node("persist_state", make_persist_state_node(self.store))
        graph.add_node("prefetch_diagnostics", make_prefetch_diagnostics_node(self.diagnostics))

        graph.add_edge(START, "load_state")

        graph.add_conditional_edges(
            "load_state",
            route_transition,
            {
                "open_outage": "open_outage",
                "close_outage": "close_outage",
                "skip_transition": "skip_transition",
            },
        )

        # Every path persists the incoming state
        graph.add_edge("open_outage", "persist_state")
        graph.add_edge("close_outage", "persist_state")
        graph.add_edge("skip_transition", "persist_state")

        graph.add_edge("persist_state", "prefetch_diagnostics")
        graph.add_edge("prefetch_diagnostics", END)

        logger.debug("Connectivity workflow graph built")

    async def handle(self, event: NetworkEvent) -> dict[str, Any]:
        """
        Handle one connectivity-change notification.

        Returns:
            Final workflow state (transition, report, reported)
        """
        final_state = await self.execute(event)
        return {
            "event_id": event.event_id,
            "transition": final_state.get("transition"),
            "previous_state": final_state.get("previous_state"),
            "incoming_state": final_state.get("incoming_state"),
            "report": final_state.get("report"),
            "reported": final_state.get("reported", False),
            "tag_outcome": final_state.get("tag_outcome"),
            "diagnostics": final_state.get("diagnostics"),
            "error": final_state.get("error"),
        }
