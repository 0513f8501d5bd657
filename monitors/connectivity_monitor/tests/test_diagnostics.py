"""
Tests for outage diagnostics
"""

import pytest

from reporter_template.config_loader import DiagnosticsConfig
from ..tools import diagnostics as diagnostics_module
from ..tools.diagnostics import (
    ContainerDiagnostics,
    NullDiagnostics,
    get_diagnostics_trigger,
    CAPTURE_CONTAINER,
    LATEST_LINK,
    POWERLINE_OUTPUT,
    DURATION_FILE,
)


class FakePopen:
    """Records launched commands instead of running them"""

    def __init__(self):
        self.launched = []

    def __call__(self, argv, **kwargs):
        self.launched.append(argv)
        return object()


@pytest.fixture
def popen(monkeypatch):
    fake = FakePopen()
    monkeypatch.setattr(diagnostics_module.subprocess, "Popen", fake)
    return fake


@pytest.fixture
def config(tmp_path):
    return DiagnosticsConfig(
        enabled=True,
        runtime="balena-engine",
        image="netdiag:test",
        directory=str(tmp_path / "diagnostics"),
        lease_glob=str(tmp_path / "leases" / "*.lease"),
        keep_bundles=3,
    )


class TestFactory:
    """get_diagnostics_trigger"""

    def test_disabled(self):
        assert isinstance(get_diagnostics_trigger(DiagnosticsConfig(enabled=False)), NullDiagnostics)

    def test_enabled(self, config):
        assert isinstance(get_diagnostics_trigger(config), ContainerDiagnostics)

    @pytest.mark.asyncio
    async def test_null_bundle_is_empty(self):
        bundle = await NullDiagnostics().on_outage_close(100, 50)
        assert bundle.directory is None
        assert bundle.powerline_detected is None


class TestOutageOpen:
    """Collection started on a drop"""

    @pytest.mark.asyncio
    async def test_bundle_and_latest_link(self, config, popen):
        diagnostics = ContainerDiagnostics(config)

        await diagnostics.on_outage_open(1700000000)

        root = diagnostics.root
        link = root / LATEST_LINK
        assert link.is_symlink()
        assert link.resolve().name == "20231114T221320-1700000000"
        assert link.resolve().is_dir()

    @pytest.mark.asyncio
    async def test_commands_launched(self, config, popen):
        diagnostics = ContainerDiagnostics(config)

        await diagnostics.on_outage_open(1000)

        programs = [argv[0] for argv in popen.launched]
        assert programs.count("journalctl") == 1
        assert programs.count("ip") == 2

        probe = next(argv for argv in popen.launched if "plcstat" in argv)
        assert probe[:3] == ["balena-engine", "run", "--rm"]
        assert "netdiag:test" in probe
        assert probe[-4:] == ["plcstat", "-t", "-i", "eth0"]

        capture = next(argv for argv in popen.launched if argv[0] == "sh")
        script = capture[2]
        assert script.startswith(f"balena-engine rm -f {CAPTURE_CONTAINER}")
        assert "tcpdump -i any -w /out/capture.pcap" in script
        assert "timeout 600" in script

    @pytest.mark.asyncio
    async def test_leases_copied(self, config, popen, tmp_path):
        leases = tmp_path / "leases"
        leases.mkdir()
        (leases / "eth0.lease").write_text("lease")

        diagnostics = ContainerDiagnostics(config)
        await diagnostics.on_outage_open(1000)

        assert (diagnostics.root / LATEST_LINK / "eth0.lease").read_text() == "lease"

    @pytest.mark.asyncio
    async def test_old_bundles_pruned(self, config, popen):
        diagnostics = ContainerDiagnostics(config)

        for start in (1000, 2000, 3000, 4000, 5000):
            await diagnostics.on_outage_open(start)

        bundles = sorted(
            p.name for p in diagnostics.root.iterdir()
            if p.is_dir() and not p.is_symlink()
        )
        assert len(bundles) == 3
        assert bundles[-1].endswith("-5000")
        assert (diagnostics.root / LATEST_LINK).resolve().name.endswith("-5000")

    @pytest.mark.asyncio
    async def test_launch_failure_is_ignored(self, config, monkeypatch):
        def broken(argv, **kwargs):
            raise FileNotFoundError(argv[0])

        monkeypatch.setattr(diagnostics_module.subprocess, "Popen", broken)
        diagnostics = ContainerDiagnostics(config)

        await diagnostics.on_outage_open(1000)
        bundle = await diagnostics.on_outage_close(1200, 200)

        assert bundle.directory is not None


class TestOutageClose:
    """Finalizing the bundle on recovery"""

    @pytest.mark.asyncio
    async def test_no_open_bundle(self, config, popen):
        diagnostics = ContainerDiagnostics(config)

        bundle = await diagnostics.on_outage_close(1200, 200)

        assert bundle.directory is None
        assert ["balena-engine", "stop", CAPTURE_CONTAINER] in popen.launched

    @pytest.mark.asyncio
    async def test_duration_recorded(self, config, popen):
        diagnostics = ContainerDiagnostics(config)
        await diagnostics.on_outage_open(1000)

        bundle = await diagnostics.on_outage_close(1200, 200)

        directory = diagnostics.root / LATEST_LINK
        assert bundle.directory == str(directory.resolve())
        assert (directory / DURATION_FILE).read_text() == "200\n"
        assert (directory / "journal_recovery.log").exists()

    @pytest.mark.asyncio
    async def test_empty_probe_output(self, config, popen):
        diagnostics = ContainerDiagnostics(config)
        await diagnostics.on_outage_open(1000)

        bundle = await diagnostics.on_outage_close(1200)

        assert bundle.powerline_detected is False
        assert not (diagnostics.root / LATEST_LINK / DURATION_FILE).exists()

    @pytest.mark.asyncio
    async def test_powerline_detected(self, config, popen):
        diagnostics = ContainerDiagnostics(config)
        await diagnostics.on_outage_open(1000)
        (diagnostics.root / LATEST_LINK / POWERLINE_OUTPUT).write_text("P/L NET TEI ------ MAC ------ BDA\n")

        bundle = await diagnostics.on_outage_close(1200, 200)

        assert bundle.powerline_detected is True


class TestPrefetch:
    """Image pre-pull"""

    @pytest.mark.asyncio
    async def test_pull(self, config, popen):
        await ContainerDiagnostics(config).prefetch()

        assert popen.launched == [["balena-engine", "pull", "netdiag:test"]]
