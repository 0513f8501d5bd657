"""Interface Watcher Workflow"""
from typing import Any, Optional
import structlog
from langgraph.graph import StateGraph, START, END

from reporter_template.config_loader import InterfaceConfig
from reporter_template.schemas.events import NetworkEvent
from reporter_template.tools.state_store import StateStore
from reporter_template.tools.tag_client import TagReporter
from reporter_template.workflow import BaseWorkflow
from .schemas.state import InterfaceWatcherState
from .nodes import route_link_event, make_interface_down_node, make_interface_up_node

logger = structlog.get_logger(__name__)


class InterfaceWatcherWorkflow(BaseWorkflow):
    """
    Down/up tracking for the single watched interface, independent of
    global connectivity. The dispatcher only routes that interface here.
    """

    def __init__(
        self,
        store: StateStore,
        reporter: TagReporter,
        interface: Optional[InterfaceConfig] = None,
        name: str = "interface_watcher",
        version: str = "1.0.0",
    ):
        super().__init__(name, version, store)
        self.reporter = reporter
        self.interface = interface or InterfaceConfig()

    def get_state_class(self) -> type:
        return InterfaceWatcherState

    def get_initial_state(self, event: NetworkEvent) -> dict[str, Any]:
        base = super().get_initial_state(event)
        return {
            **base,
            "down_since": None,
            "report": None,
            "reported": False,
            "tag_outcome": None,
        }

    def build_graph(self, graph: StateGraph) -> None:
        """Build the interface watcher graph"""
        graph.add_node("interface_down", make_interface_down_node(self.store, self.reporter, self.interface))
        graph.add_node("interface_up", make_interface_up_node(self.store, self.reporter, self.interface))

        graph.add_conditional_edges(
            START,
            route_link_event,
            {"interface_down": "interface_down", "interface_up": "interface_up"},
        )
        graph.add_edge("interface_down", END)
        graph.add_edge("interface_up", END)

        logger.debug("Interface watcher graph built")

    async def handle(self, event: NetworkEvent) -> dict[str, Any]:
        """Handle one up/down event on the watched interface"""
        final_state = await self.execute(event)
        return {
            "event_id": event.event_id,
            "action": event.action,
            "down_since": final_state.get("down_since"),
            "report": final_state.get("report"),
            "reported": final_state.get("reported", False),
            "tag_outcome": final_state.get("tag_outcome"),
            "error": final_state.get("error"),
        }
