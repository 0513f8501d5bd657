"""
Outage Diagnostics

Best-effort data collection while connectivity is down: log and routing
snapshots, the DHCP lease, a power-line adapter probe and a packet capture
inside a container. Every process is launched detached and never waited
on; failures are logged and ignored.
"""

import glob
import os
import shlex
import shutil
import subprocess
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog

from reporter_template.config_loader import DiagnosticsConfig
from ..schemas.connectivity import DiagnosticsBundle

logger = structlog.get_logger(__name__)

LATEST_LINK = "latest"
CAPTURE_CONTAINER = "connectivity-reporter-pcap"
PROBE_CONTAINER = "connectivity-reporter-plc"

POWERLINE_OUTPUT = "powerline.txt"
DURATION_FILE = "duration"


class DiagnosticsTrigger(ABC):
    """Side effects keyed off outage open and close"""

    @abstractmethod
    async def prefetch(self) -> None:
        """Prepare for a future outage while the network is up"""

    @abstractmethod
    async def on_outage_open(self, start: int) -> None:
        """Start collecting for an outage that began at `start`"""

    @abstractmethod
    async def on_outage_close(
        self,
        end: int,
        duration: Optional[int] = None,
    ) -> DiagnosticsBundle:
        """Stop collecting and summarize what was gathered"""


class NullDiagnostics(DiagnosticsTrigger):
    """Diagnostics disabled"""

    async def prefetch(self) -> None:
        return None

    async def on_outage_open(self, start: int) -> None:
        return None

    async def on_outage_close(
        self,
        end: int,
        duration: Optional[int] = None,
    ) -> DiagnosticsBundle:
        return DiagnosticsBundle()


class ContainerDiagnostics(DiagnosticsTrigger):
    """
    Diagnostics collected on the host and inside a container runtime.

    One directory per outage under config.directory, with a `latest`
    symlink pointing at the one currently open.
    """

    def __init__(self, config: DiagnosticsConfig):
        self.config = config
        self.root = Path(config.directory)

    # ============== Process helpers ==============

    def _spawn(self, argv: list[str], output: Optional[Path] = None) -> bool:
        """Launch a detached process, optionally sending its stdout to a file"""
        try:
            if output is None:
                subprocess.Popen(
                    argv,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
            else:
                with open(output, "wb") as out:
                    subprocess.Popen(
                        argv,
                        stdin=subprocess.DEVNULL,
                        stdout=out,
                        stderr=subprocess.DEVNULL,
                        start_new_session=True,
                    )
        except OSError as e:
            logger.warning("Failed to launch diagnostics command", command=argv[0], error=str(e))
            return False

        logger.debug("Launched diagnostics command", argv=argv)
        return True

    def _container_run(self, name: str, command: list[str], volume: Optional[Path] = None) -> list[str]:
        argv = [
            self.config.runtime, "run", "--rm",
            "--name", name,
            "--network", "host",
            "--cap-add", "NET_ADMIN",
            "--cap-add", "NET_RAW",
        ]
        if volume is not None:
            argv += ["-v", f"{volume}:/out"]
        return argv + [self.config.image] + command

    # ============== Bundle directory ==============

    def _bundle_name(self, start: int) -> str:
        stamp = datetime.fromtimestamp(start, tz=timezone.utc).strftime("%Y%m%dT%H%M%S")
        return f"{stamp}-{start}"

    def _create_bundle(self, start: int) -> Optional[Path]:
        bundle = self.root / self._bundle_name(start)
        try:
            bundle.mkdir(parents=True, exist_ok=True)
            link_tmp = self.root / f".{LATEST_LINK}.tmp"
            if link_tmp.is_symlink() or link_tmp.exists():
                link_tmp.unlink()
            link_tmp.symlink_to(bundle.name)
            os.replace(link_tmp, self.root / LATEST_LINK)
        except OSError as e:
            logger.warning("Failed to create diagnostics directory", path=str(bundle), error=str(e))
            return None
        return bundle

    def _latest_bundle(self) -> Optional[Path]:
        link = self.root / LATEST_LINK
        if not link.is_symlink():
            return None
        bundle = link.resolve()
        return bundle if bundle.is_dir() else None

    def _prune_bundles(self, current: Path) -> None:
        """Keep only the newest keep_bundles outage directories, current included"""
        try:
            bundles = sorted(
                p for p in self.root.iterdir()
                if p.is_dir() and not p.is_symlink()
                and not p.name.startswith(".") and p != current
            )
        except OSError as e:
            logger.warning("Failed to list diagnostics directory", error=str(e))
            return

        for old in bundles[: max(len(bundles) - (self.config.keep_bundles - 1), 0)]:
            try:
                shutil.rmtree(old)
                logger.info("Removed old diagnostics bundle", path=str(old))
            except OSError as e:
                logger.warning("Failed to remove diagnostics bundle", path=str(old), error=str(e))

    # ============== Collection steps ==============

    def _snapshot_logs(self, bundle: Path, suffix: str) -> None:
        self._spawn(["journalctl", "--no-pager", "--since", "-1h"], bundle / f"journal_{suffix}.log")
        self._spawn(["ip", "route", "show", "table", "all"], bundle / f"routes_{suffix}.txt")
        self._spawn(["ip", "address", "show"], bundle / f"addresses_{suffix}.txt")

    def _copy_leases(self, bundle: Path) -> None:
        for lease in glob.glob(self.config.lease_glob):
            try:
                shutil.copy2(lease, bundle / Path(lease).name)
            except OSError as e:
                logger.warning("Failed to copy lease file", path=lease, error=str(e))

    def _start_powerline_probe(self, bundle: Path) -> None:
        command = [
            part.replace("{interface}", self.config.powerline_interface)
            for part in self.config.probe_command
        ]
        self._spawn(
            self._container_run(
                PROBE_CONTAINER,
                ["timeout", str(self.config.probe_seconds)] + command,
            ),
            bundle / POWERLINE_OUTPUT,
        )

    def _start_capture(self, bundle: Path) -> None:
        remove_previous = [self.config.runtime, "rm", "-f", CAPTURE_CONTAINER]
        capture = self._container_run(
            CAPTURE_CONTAINER,
            [
                "timeout", str(self.config.capture_seconds),
                "tcpdump", "-i", self.config.capture_interface, "-w", "/out/capture.pcap",
            ],
            volume=bundle,
        )
        # Ordered in one detached shell so the old capture is gone before the new one starts
        script = f"{shlex.join(remove_previous)} >/dev/null 2>&1; exec {shlex.join(capture)}"
        self._spawn(["sh", "-c", script], bundle / "capture.log")

    # ============== DiagnosticsTrigger ==============

    async def prefetch(self) -> None:
        logger.debug("Pre-pulling diagnostics image", image=self.config.image)
        self._spawn([self.config.runtime, "pull", self.config.image])

    async def on_outage_open(self, start: int) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Diagnostics root unavailable", path=str(self.root), error=str(e))
            return

        bundle = self._create_bundle(start)
        if bundle is None:
            return
        self._prune_bundles(bundle)

        logger.info("Collecting outage diagnostics", path=str(bundle))
        self._snapshot_logs(bundle, "drop")
        self._copy_leases(bundle)
        self._start_powerline_probe(bundle)
        self._start_capture(bundle)

    async def on_outage_close(
        self,
        end: int,
        duration: Optional[int] = None,
    ) -> DiagnosticsBundle:
        self._spawn([self.config.runtime, "stop", CAPTURE_CONTAINER])

        bundle = self._latest_bundle()
        if bundle is None:
            logger.warning("No open diagnostics bundle", path=str(self.root / LATEST_LINK))
            return DiagnosticsBundle()

        self._snapshot_logs(bundle, "recovery")
        if duration is not None:
            try:
                (bundle / DURATION_FILE).write_text(f"{duration}\n")
            except OSError as e:
                logger.warning("Failed to record outage duration", error=str(e))

        powerline_detected: Optional[bool] = None
        try:
            powerline_detected = bool((bundle / POWERLINE_OUTPUT).read_text().strip())
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to read power-line probe output", error=str(e))

        logger.info(
            "Outage diagnostics finalized",
            path=str(bundle),
            recovered_at=end,
            powerline_detected=powerline_detected,
        )
        return DiagnosticsBundle(directory=str(bundle), powerline_detected=powerline_detected)


def get_diagnostics_trigger(config: DiagnosticsConfig) -> DiagnosticsTrigger:
    """Container diagnostics when enabled, otherwise a no-op trigger"""
    if config.enabled:
        return ContainerDiagnostics(config)
    return NullDiagnostics()
