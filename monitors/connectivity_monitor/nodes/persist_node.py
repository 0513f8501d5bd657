"""Persist and Skip Nodes"""
from typing import Any, Callable, Awaitable
import structlog

from reporter_template.tools.state_store import StateStore, LAST_CONNECTION_STATE
from reporter_template.workflow import track_node_execution
from ..schemas.connectivity import ConnectivityReading, ConnectivityClass
from ..tools.diagnostics import DiagnosticsTrigger

logger = structlog.get_logger(__name__)


async def skip_transition_node(state: dict[str, Any]) -> dict[str, Any]:
    """Seed, steady and unexpected transitions only update the persisted record"""
    logger.debug(
        "No outage action for transition",
        event_id=state.get("event_id"),
        transition=state.get("transition"),
    )
    return {"nodes_executed": track_node_execution(state, "skip_transition")}


def make_persist_state_node(store: StateStore) -> Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]:
    """Create the node that records the incoming state, on every path"""

    async def persist_state_node(state: dict[str, Any]) -> dict[str, Any]:
        incoming = state["incoming_state"]
        store.write(LAST_CONNECTION_STATE, incoming)
        logger.debug("Connectivity state persisted", event_id=state.get("event_id"), state=incoming)
        return {
            "state_persisted": True,
            "status": "success",
            "nodes_executed": track_node_execution(state, "persist_state"),
        }

    return persist_state_node


def make_prefetch_diagnostics_node(
    diagnostics: DiagnosticsTrigger,
) -> Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]:
    """Create the node that pre-pulls the diagnostics image while connected"""

    async def prefetch_diagnostics_node(state: dict[str, Any]) -> dict[str, Any]:
        incoming = ConnectivityReading.parse(state.get("incoming_state"))
        if incoming.connectivity_class is ConnectivityClass.CONNECTED:
            try:
                await diagnostics.prefetch()
            except Exception as e:
                logger.warning("Diagnostics prefetch failed", error=str(e))
        return {"nodes_executed": track_node_execution(state, "prefetch_diagnostics")}

    return prefetch_diagnostics_node
