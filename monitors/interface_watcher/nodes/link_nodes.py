"""Link Nodes - watched interface going down and coming back up"""
from typing import Any, Callable, Awaitable, Literal
import structlog

from reporter_template.config_loader import InterfaceConfig
from reporter_template.schemas.events import INTERFACE_UP
from reporter_template.tools.state_store import StateStore, CorruptRecordError, LAST_IF_DOWN
from reporter_template.tools.tag_client import TagReporter
from reporter_template.workflow import track_node_execution
from ..schemas.link import LinkReport

logger = structlog.get_logger(__name__)

Node = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


def route_link_event(state: dict[str, Any]) -> Literal["interface_up", "interface_down"]:
    """Route on the dispatcher action"""
    if state.get("action") == INTERFACE_UP:
        return "interface_up"
    return "interface_down"


def make_interface_down_node(
    store: StateStore,
    reporter: TagReporter,
    interface: InterfaceConfig,
) -> Node:
    """Create the node handling the watched interface going down"""

    async def interface_down_node(state: dict[str, Any]) -> dict[str, Any]:
        event_id = state.get("event_id")
        now = state["now"]

        store.write(LAST_IF_DOWN, str(now))
        logger.info("Watched interface down", event_id=event_id, interface=state.get("interface"), down_at=now)

        updates: dict[str, Any] = {
            "down_since": now,
            "reported": False,
            "tag_outcome": None,
        }
        try:
            result = await reporter.set_tag(interface.down_tag, str(now))
            updates["reported"] = result.success
            updates["tag_outcome"] = result.outcome
            if not result.success:
                logger.warning("Interface down report failed", event_id=event_id, error=result.error)
        except Exception as e:
            logger.warning("Interface down report error", event_id=event_id, error=str(e))

        updates["status"] = "success"
        updates["nodes_executed"] = track_node_execution(state, "interface_down")
        return updates

    return interface_down_node


def make_interface_up_node(
    store: StateStore,
    reporter: TagReporter,
    interface: InterfaceConfig,
) -> Node:
    """Create the node handling the watched interface coming back up"""

    async def interface_up_node(state: dict[str, Any]) -> dict[str, Any]:
        """
        Report the down/up pair when a down marker exists. No minimum
        duration applies here. The marker is removed whatever the outcome.
        """
        event_id = state.get("event_id")
        now = state["now"]
        updates: dict[str, Any] = {
            "down_since": None,
            "report": None,
            "reported": False,
            "tag_outcome": None,
        }

        try:
            down_at = store.read_int(LAST_IF_DOWN)
            if down_at is None:
                logger.info("Watched interface up without a recorded down", event_id=event_id)
            else:
                report = LinkReport.between(state.get("interface", ""), down_at, now)
                updates["down_since"] = down_at
                updates["report"] = report.model_dump()

                result = await reporter.set_tag(interface.up_tag, report.format_value())
                updates["reported"] = result.success
                updates["tag_outcome"] = result.outcome

                logger.info(
                    "Watched interface up",
                    event_id=event_id,
                    down_at=down_at,
                    up_at=now,
                    duration=report.duration,
                    reported=result.success,
                )
        except CorruptRecordError as e:
            logger.warning("Interface down marker is inconsistent, discarding it", event_id=event_id, error=str(e))
        except Exception as e:
            logger.error("Interface up report error", event_id=event_id, error=str(e))
            updates["error"] = f"Interface up report error: {str(e)}"
        finally:
            store.delete(LAST_IF_DOWN)

        updates["status"] = "success"
        updates["nodes_executed"] = track_node_execution(state, "interface_up")
        return updates

    return interface_up_node
