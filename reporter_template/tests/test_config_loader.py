"""
Tests for configuration loading
"""

import pytest
from pydantic import ValidationError

from ..config_loader import Config, load_config, get_config, set_config, _substitute_env_vars


class TestSubstitution:
    """Tests for ${VAR:-default} expansion"""

    def test_env_value(self, monkeypatch):
        monkeypatch.setenv("STATE_DIR", "/data/state")
        assert _substitute_env_vars("${STATE_DIR}") == "/data/state"

    def test_default_value(self, monkeypatch):
        monkeypatch.delenv("STATE_DIR", raising=False)
        assert _substitute_env_vars("${STATE_DIR:-/mnt/data}") == "/mnt/data"

    def test_nested(self, monkeypatch):
        monkeypatch.setenv("TAG", "lost")
        assert _substitute_env_vars({"a": ["${TAG}", 3]}) == {"a": ["lost", 3]}


class TestLoadConfig:
    """Tests for load_config"""

    def test_missing_file_uses_defaults(self, tmp_path):
        """Missing file gives the built-in defaults"""
        config = load_config(str(tmp_path / "absent.yaml"))

        assert config.outage.min_duration_seconds == 60
        assert config.outage.tag == "connectivity_lost"
        assert config.interface.name == "eth0"
        assert config.api.timeout_seconds == 5.0
        assert config.api.retries == 3
        assert config.diagnostics.enabled is False

    def test_yaml_with_env(self, tmp_path, monkeypatch):
        """YAML values and env substitution are applied"""
        monkeypatch.setenv("REPORTER_DIAG", "true")
        path = tmp_path / "config.yaml"
        path.write_text(
            "state:\n"
            f"  directory: {tmp_path}/state\n"
            "outage:\n"
            "  min_duration_seconds: 120\n"
            "  tag: wan_lost\n"
            "diagnostics:\n"
            "  enabled: ${REPORTER_DIAG:-false}\n"
            "  capture_seconds: 30\n"
        )

        config = load_config(str(path))

        assert config.state.directory == f"{tmp_path}/state"
        assert config.outage.min_duration_seconds == 120
        assert config.outage.tag == "wan_lost"
        assert config.diagnostics.enabled is True
        assert config.diagnostics.capture_seconds == 30
        assert config.interface.up_tag == "interface_up"

    def test_empty_file(self, tmp_path):
        """Empty YAML gives defaults"""
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(str(path)) == Config()

    def test_env_path(self, tmp_path, monkeypatch):
        """CONNECTIVITY_REPORTER_CONFIG selects the file"""
        path = tmp_path / "config.yaml"
        path.write_text("outage:\n  min_duration_seconds: 5\n")
        monkeypatch.setenv("CONNECTIVITY_REPORTER_CONFIG", str(path))

        assert load_config().outage.min_duration_seconds == 5

    def test_invalid_value(self, tmp_path):
        """Negative minimum duration is rejected"""
        path = tmp_path / "config.yaml"
        path.write_text("outage:\n  min_duration_seconds: -1\n")

        with pytest.raises(ValidationError):
            load_config(str(path))


class TestGlobalConfig:
    """Tests for the global config accessor"""

    def test_set_and_get(self):
        config = Config()
        set_config(config)
        try:
            assert get_config() is config
        finally:
            set_config(None)
