"""
Base LangGraph Workflow Template

Every monitor is a LangGraph workflow that handles exactly one
dispatcher notification per run. Customize by:
1. Extending WorkflowState for monitor-specific fields
2. Defining monitor-specific nodes
3. Configuring the graph edges
"""

from typing import Any, Optional
from datetime import datetime
from abc import ABC, abstractmethod

import structlog
from langgraph.graph import StateGraph

from .schemas.events import NetworkEvent
from .tools.state_store import StateStore

logger = structlog.get_logger(__name__)


class BaseWorkflow(ABC):
    """
    Abstract base class for monitor workflows.

    No state is kept between runs: nodes read what they need from the
    StateStore and write it back before the run ends. execute() holds the
    store's exclusive lock for the whole run, waiting without
    blocking the event loop.
    """

    def __init__(
        self,
        name: str,
        version: str,
        store: StateStore,
    ):
        """
        Initialize workflow.

        Args:
            name: Name of this monitor
            version: Version string
            store: Durable state store shared by all runs
        """
        self.name = name
        self.version = version
        self.store = store

        self._graph: Optional[StateGraph] = None
        self._compiled = None

    @abstractmethod
    def get_state_class(self) -> type:
        """Return the TypedDict class for this workflow's state"""
        pass

    @abstractmethod
    def build_graph(self, graph: StateGraph) -> None:
        """
        Build the workflow graph.

        Add nodes and edges to the graph.
        Called by compile() before compilation.
        """
        pass

    def get_initial_state(self, event: NetworkEvent) -> dict[str, Any]:
        """
        Create initial state for workflow execution.

        Override to add monitor-specific initial state.
        """
        return {
            "event_id": event.event_id,
            "interface": event.interface,
            "action": event.action,
            "now": event.timestamp,
            "started_at": datetime.utcnow().isoformat(),
            "nodes_executed": [],
            "status": "running",
            "error": None,
        }

    def compile(self) -> Any:
        """
        Compile the workflow graph.

        Returns the compiled LangGraph application.
        """
        if self._compiled:
            return self._compiled

        state_class = self.get_state_class()
        self._graph = StateGraph(state_class)

        # Let subclass build the graph
        self.build_graph(self._graph)

        self._compiled = self._graph.compile()
        logger.info("Compiled workflow", monitor=self.name)
        return self._compiled

    async def execute(self, event: NetworkEvent) -> dict[str, Any]:
        """
        Execute the workflow for one notification.

        Args:
            event: Dispatcher notification

        Returns:
            Final workflow state
        """
        app = self.compile()
        initial_state = self.get_initial_state(event)

        logger.info(
            "Executing workflow",
            monitor=self.name,
            event_id=event.event_id,
            interface=event.interface,
            action=event.action,
        )

        async with self.store.locked():
            final_state = await app.ainvoke(initial_state)

        if final_state.get("error"):
            logger.warning(
                "Workflow completed with errors",
                event_id=event.event_id,
                error=final_state.get("error"),
            )
        else:
            logger.info(
                "Workflow completed",
                event_id=event.event_id,
                nodes_executed=final_state.get("nodes_executed", []),
            )

        return final_state


# ============== Common Node Helpers ==============


def track_node_execution(state: dict, node_name: str) -> list[str]:
    """Return nodes_executed with node_name appended"""
    return state.get("nodes_executed", []) + [node_name]
