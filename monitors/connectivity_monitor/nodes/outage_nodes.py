"""Outage Nodes - open an outage on drop, close and report it on recovery"""
from typing import Any, Callable, Awaitable, Optional
import structlog

from reporter_template.config_loader import OutageConfig
from reporter_template.tools.state_store import (
    StateStore,
    CorruptRecordError,
    LAST_CONNECTION_DROP,
)
from reporter_template.tools.tag_client import TagReporter
from reporter_template.workflow import track_node_execution
from ..schemas.connectivity import OutageReport
from ..tools.diagnostics import DiagnosticsTrigger

logger = structlog.get_logger(__name__)

Node = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


def make_open_outage_node(store: StateStore, diagnostics: DiagnosticsTrigger) -> Node:
    """Create the node handling connected -> disconnected"""

    async def open_outage_node(state: dict[str, Any]) -> dict[str, Any]:
        """
        Record the drop time in the outage marker and start diagnostics.
        Only one outage is open at a time, a stale marker is overwritten.
        """
        event_id = state.get("event_id")
        now = state["now"]

        if store.exists(LAST_CONNECTION_DROP):
            try:
                stale_marker = store.read(LAST_CONNECTION_DROP)
            except CorruptRecordError:
                stale_marker = "<unreadable>"
            logger.warning(
                "Outage marker already present, replacing it",
                event_id=event_id,
                stale_marker=stale_marker,
            )

        store.write(LAST_CONNECTION_DROP, str(now))
        logger.info("Connectivity lost, outage opened", event_id=event_id, outage_start=now)

        try:
            await diagnostics.on_outage_open(now)
        except Exception as e:
            logger.warning("Diagnostics start failed", event_id=event_id, error=str(e))

        return {
            "outage_start": now,
            "nodes_executed": track_node_execution(state, "open_outage"),
        }

    return open_outage_node


def make_close_outage_node(
    store: StateStore,
    reporter: TagReporter,
    diagnostics: DiagnosticsTrigger,
    outage: OutageConfig,
    powerline_tag: str,
) -> Node:
    """Create the node handling disconnected -> connected"""

    async def close_outage_node(state: dict[str, Any]) -> dict[str, Any]:
        """
        Compute the outage duration from the marker and report it when it
        lasted at least outage.min_duration_seconds. The marker is always
        removed, whether or not a report was sent or succeeded.
        """
        event_id = state.get("event_id")
        now = state["now"]
        updates: dict[str, Any] = {
            "reported": False,
            "report": None,
            "tag_outcome": None,
        }

        start: Optional[int] = None
        try:
            start = store.read_int(LAST_CONNECTION_DROP)
        except CorruptRecordError as e:
            logger.warning("Outage marker is inconsistent, discarding it", event_id=event_id, error=str(e))

        report: Optional[OutageReport] = None
        try:
            if start is None:
                logger.warning("Connectivity fixed but never seen broken", event_id=event_id)
            else:
                report = OutageReport.between(start, now)
                updates["outage_start"] = start

                if report.duration >= outage.min_duration_seconds:
                    result = await reporter.set_tag(outage.tag, report.format_value())
                    updates["reported"] = result.success
                    updates["tag_outcome"] = result.outcome
                    if not result.success:
                        logger.error(
                            "Outage report failed",
                            event_id=event_id,
                            tag_key=outage.tag,
                            error=result.error,
                        )
                else:
                    logger.info(
                        "Outage shorter than minimum, not reported",
                        event_id=event_id,
                        duration=report.duration,
                        min_duration=outage.min_duration_seconds,
                    )
        except Exception as e:
            logger.error("Outage report error", event_id=event_id, error=str(e))
            updates["error"] = f"Outage report error: {str(e)}"
        finally:
            store.delete(LAST_CONNECTION_DROP)

        try:
            bundle = await diagnostics.on_outage_close(now, report.duration if report else None)
            if report is not None:
                report = report.model_copy(update={"diagnostics_dir": bundle.directory})
            updates["diagnostics"] = bundle.model_dump()

            if bundle.powerline_detected:
                await reporter.set_tag(powerline_tag, "true")
        except Exception as e:
            logger.warning("Diagnostics finalize failed", event_id=event_id, error=str(e))

        if report is not None:
            updates["report"] = report.model_dump()
            logger.info(
                "Connectivity restored, outage closed",
                event_id=event_id,
                outage_start=report.start,
                outage_end=report.end,
                duration=report.duration,
                reported=updates["reported"],
            )

        updates["nodes_executed"] = track_node_execution(state, "close_outage")
        return updates

    return close_outage_node
