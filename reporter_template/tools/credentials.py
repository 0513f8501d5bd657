"""
API Credentials

Resolves the device tag API endpoint, key and device id. Loaded fresh before
every call so that key rotation by the host supervisor is picked up.
"""

import json
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

# config.json field -> ApiCredentials field
DEVICE_CONFIG_FIELDS = {
    "apiEndpoint": "api_url",
    "deviceApiKey": "api_key",
    "apiKey": "api_key",
    "deviceId": "device_id",
}


class ApiCredentials(BaseSettings):
    """Credentials read from BALENA_API_URL, BALENA_API_KEY, BALENA_DEVICE_ID"""

    model_config = SettingsConfigDict(env_prefix="BALENA_", extra="ignore")

    api_url: Optional[str] = None
    api_key: Optional[str] = None
    device_id: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.api_url and self.api_key and self.device_id)

    @property
    def device_ref(self) -> Union[int, str, None]:
        """Device id as sent to the API (numeric ids are integers)"""
        if self.device_id and self.device_id.isdigit():
            return int(self.device_id)
        return self.device_id


def _read_device_config(path: str) -> dict[str, str]:
    """Map the device's config.json onto credential fields"""
    try:
        data = json.loads(Path(path).read_text())
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        logger.warning("Unreadable device config", path=path, error=str(e))
        return {}

    values: dict[str, str] = {}
    for source, target in DEVICE_CONFIG_FIELDS.items():
        if data.get(source) and target not in values:
            values[target] = str(data[source])
    return values


def load_api_credentials(device_config_path: Optional[str] = None) -> ApiCredentials:
    """
    Load API credentials.

    Environment variables win; fields they leave unset are filled from the
    device config file when one is given.
    """
    credentials = ApiCredentials()
    if credentials.is_complete or not device_config_path:
        return credentials

    fallback = _read_device_config(device_config_path)
    updates = {
        field: value
        for field, value in fallback.items()
        if getattr(credentials, field) is None
    }
    if updates:
        credentials = credentials.model_copy(update=updates)

    return credentials
