"""
Dispatcher Entry Point

Called by the network manager dispatcher as:

    connectivity-reporter <interface> <action>

with CONNECTIVITY_STATE in the environment for connectivity-change.
Always exits 0; failures only ever show up in the logs.
"""

import argparse
import asyncio
import os
from typing import Any, Optional

import structlog
from dotenv import load_dotenv

from reporter_template.config_loader import Config, load_config
from reporter_template.logging_setup import configure_logging
from reporter_template.schemas.events import NetworkEvent
from reporter_template.tools.credentials import load_api_credentials
from reporter_template.tools.state_store import StateStore
from reporter_template.tools.tag_client import TagReporter
from ..connectivity_monitor.workflow import ConnectivityMonitorWorkflow
from ..connectivity_monitor.tools.diagnostics import get_diagnostics_trigger
from ..interface_watcher.workflow import InterfaceWatcherWorkflow
from .routing import route_event

logger = structlog.get_logger(__name__)

# Interface argument used by the dispatcher for global events
NO_INTERFACE = "none"


class ReporterRunner:
    """
    Builds the monitors from configuration and hands one event to the
    right one.
    """

    def __init__(self, config: Config, reporter: Optional[TagReporter] = None):
        self.config = config
        self.store = StateStore(
            config.state.directory,
            lock_timeout_seconds=config.state.lock_timeout_seconds,
        )
        self.reporter = reporter or TagReporter(
            credentials_provider=lambda: load_api_credentials(config.api.device_config_path),
            timeout_seconds=config.api.timeout_seconds,
            retries=config.api.retries,
            retry_max_wait_seconds=config.api.retry_max_wait_seconds,
        )

    def connectivity_monitor(self) -> ConnectivityMonitorWorkflow:
        return ConnectivityMonitorWorkflow(
            store=self.store,
            reporter=self.reporter,
            outage=self.config.outage,
            diagnostics=get_diagnostics_trigger(self.config.diagnostics),
            powerline_tag=self.config.diagnostics.powerline_tag,
            version=self.config.reporter.version,
        )

    def interface_watcher(self) -> InterfaceWatcherWorkflow:
        return InterfaceWatcherWorkflow(
            store=self.store,
            reporter=self.reporter,
            interface=self.config.interface,
            version=self.config.reporter.version,
        )

    async def dispatch(self, event: NetworkEvent) -> Optional[dict[str, Any]]:
        """
        Run the monitor responsible for this event.

        Returns:
            The monitor's result, or None when the event is ignored
        """
        route = route_event(event, self.config)
        if route is None:
            logger.debug("Ignoring event", interface=event.interface, action=event.action)
            return None

        try:
            if route == "connectivity_monitor":
                return await self.connectivity_monitor().handle(event)
            return await self.interface_watcher().handle(event)
        finally:
            await self.reporter.close()


def build_event(interface: str, action: str) -> NetworkEvent:
    """Create the event from dispatcher arguments and environment"""
    if interface == NO_INTERFACE:
        interface = ""
    return NetworkEvent(
        interface=interface,
        action=action,
        connectivity_state=os.getenv("CONNECTIVITY_STATE"),
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="connectivity-reporter",
        description="Report connectivity outages as device tags",
    )
    parser.add_argument("interface", help="Interface name, or 'none' for global events")
    parser.add_argument("action", help="Dispatcher action, e.g. connectivity-change, up, down")
    parser.add_argument("--config", default=None, help="Path to YAML config")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    try:
        args = parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on bad usage; the dispatcher must still see 0
        if e.code:
            configure_logging()
            logger.error("Invalid arguments, event dropped", argv=argv, exit_code=e.code)
        return 0

    load_dotenv()

    try:
        config = load_config(args.config)
    except Exception:
        configure_logging()
        logger.exception("Invalid configuration, event dropped", action=args.action)
        return 0

    configure_logging(config.observability.log_level, config.observability.log_format)

    try:
        event = build_event(args.interface, args.action)
        result = asyncio.run(ReporterRunner(config).dispatch(event))
        if result is not None:
            logger.info("Event handled", event_id=event.event_id, result=result)
    except Exception:
        logger.exception("Event handling failed", interface=args.interface, action=args.action)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
