"""
Configuration Loader

Loads reporter configuration from YAML file with environment variable substitution.
"""

import os
import re
from typing import Any, Optional
from pathlib import Path

import yaml
import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_PATH = "/etc/connectivity-reporter/config.yaml"


def _substitute_env_vars(value: Any) -> Any:
    """
    Recursively substitute environment variables in configuration.

    Supports format: ${VAR_NAME:-default_value}
    """
    if isinstance(value, str):
        # Pattern: ${VAR:-default} or ${VAR}
        pattern = r"\$\{([^}:]+)(?::-([^}]*))?\}"

        def replace(match):
            var_name = match.group(1)
            default = match.group(2) if match.group(2) is not None else ""
            return os.getenv(var_name, default)

        return re.sub(pattern, replace, value)

    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]

    return value


class ReporterConfig(BaseModel):
    """Reporter identification"""
    name: str = "connectivity-reporter"
    version: str = "1.0.0"


class StateConfig(BaseModel):
    """Durable state location (must survive reboots)"""
    directory: str = "/mnt/data/connectivity-reporter"
    lock_timeout_seconds: float = 30.0


class OutageConfig(BaseModel):
    """Connectivity outage reporting"""
    min_duration_seconds: int = Field(default=60, ge=0)
    tag: str = "connectivity_lost"


class InterfaceConfig(BaseModel):
    """Watched interface (empty name disables the watcher)"""
    name: str = "eth0"
    down_tag: str = "interface_down"
    up_tag: str = "interface_up"


class ApiConfig(BaseModel):
    """Device tag API transport settings"""
    timeout_seconds: float = 5.0
    retries: int = Field(default=3, ge=0)
    retry_max_wait_seconds: float = 4.0
    device_config_path: str = "/mnt/boot/config.json"


class DiagnosticsConfig(BaseModel):
    """Outage diagnostics collection"""
    enabled: bool = False
    runtime: str = "balena-engine"
    image: str = "connectivity-reporter/netdiag:latest"
    directory: str = "/mnt/data/connectivity-reporter/diagnostics"
    capture_seconds: int = Field(default=600, gt=0)
    probe_seconds: int = Field(default=60, gt=0)
    capture_interface: str = "any"
    powerline_interface: str = "eth0"
    # {interface} is replaced with powerline_interface
    probe_command: list[str] = Field(default_factory=lambda: ["plcstat", "-t", "-i", "{interface}"])
    powerline_tag: str = "powerline_detected"
    lease_glob: str = "/var/lib/NetworkManager/*.lease"
    keep_bundles: int = Field(default=10, ge=1)


class ObservabilityConfig(BaseModel):
    """Observability configuration"""
    log_level: str = "INFO"
    log_format: str = "json"


class Config(BaseModel):
    """Complete reporter configuration"""
    reporter: ReporterConfig = Field(default_factory=lambda: ReporterConfig())
    state: StateConfig = Field(default_factory=lambda: StateConfig())
    outage: OutageConfig = Field(default_factory=lambda: OutageConfig())
    interface: InterfaceConfig = Field(default_factory=lambda: InterfaceConfig())
    api: ApiConfig = Field(default_factory=lambda: ApiConfig())
    diagnostics: DiagnosticsConfig = Field(default_factory=lambda: DiagnosticsConfig())
    observability: ObservabilityConfig = Field(default_factory=lambda: ObservabilityConfig())


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses $CONNECTIVITY_REPORTER_CONFIG
            or the system-wide default.

    Returns:
        Parsed Config object
    """
    if config_path is None:
        config_path = os.getenv("CONNECTIVITY_REPORTER_CONFIG", DEFAULT_CONFIG_PATH)

    path = Path(config_path)
    if not path.exists():
        logger.warning(
            "Config file not found, using defaults",
            path=str(path),
        )
        return Config()

    logger.info("Loading configuration", path=str(path))

    with open(path, "r") as f:
        raw_config = yaml.safe_load(f) or {}

    # Substitute environment variables
    config_data = _substitute_env_vars(raw_config)

    config = Config(**config_data)

    logger.info(
        "Configuration loaded",
        reporter_name=config.reporter.name,
        diagnostics_enabled=config.diagnostics.enabled,
    )

    return config


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get global configuration (loads on first call)"""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Optional[Config]) -> None:
    """Set global configuration (for testing)"""
    global _config
    _config = config
