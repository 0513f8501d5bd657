"""Load State Node - reads the last persisted connectivity and classifies the transition"""
from typing import Any, Callable, Awaitable, Optional
import structlog

from reporter_template.tools.state_store import StateStore, CorruptRecordError, LAST_CONNECTION_STATE
from reporter_template.workflow import track_node_execution
from ..schemas.connectivity import ConnectivityReading, Transition, classify_transition

logger = structlog.get_logger(__name__)


def make_load_state_node(store: StateStore) -> Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]:
    """Create the node that reads the persisted record and classifies the transition"""

    async def load_state_node(state: dict[str, Any]) -> dict[str, Any]:
        """
        An unreadable record is classified as unexpected: no outage action
        is taken and persist_state replaces it with the incoming state.
        """
        event_id = state.get("event_id")
        incoming = ConnectivityReading.parse(state.get("incoming_state"))

        previous_raw: Optional[str] = None
        try:
            previous_raw = store.read(LAST_CONNECTION_STATE)
        except CorruptRecordError as e:
            logger.warning("Connectivity record is unreadable, replacing it", event_id=event_id, error=str(e))
            transition = Transition.UNEXPECTED
        else:
            previous = ConnectivityReading.parse(previous_raw) if previous_raw is not None else None
            transition = classify_transition(previous, incoming)

        log = logger.bind(
            event_id=event_id,
            previous_state=previous_raw,
            incoming_state=incoming.raw,
            transition=transition.value,
        )
        if transition is Transition.UNEXPECTED:
            log.warning("Unexpected connectivity transition, no outage action taken")
        elif transition is Transition.SEED:
            log.info("No previous connectivity record, seeding state")
        else:
            log.info("Connectivity transition classified")

        return {
            "previous_state": previous_raw,
            "incoming_state": incoming.raw,
            "transition": transition.value,
            "nodes_executed": track_node_execution(state, "load_state"),
        }

    return load_state_node
