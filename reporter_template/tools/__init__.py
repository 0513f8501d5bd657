"""Reporter Template Tools"""
from .state_store import (
    StateStore,
    StateStoreError,
    StateLockTimeout,
    CorruptRecordError,
    LAST_CONNECTION_STATE,
    LAST_CONNECTION_DROP,
    LAST_IF_DOWN,
)
from .credentials import ApiCredentials, load_api_credentials
from .tag_client import TagReporter

__all__ = [
    "StateStore",
    "StateStoreError",
    "StateLockTimeout",
    "CorruptRecordError",
    "LAST_CONNECTION_STATE",
    "LAST_CONNECTION_DROP",
    "LAST_IF_DOWN",
    "ApiCredentials",
    "load_api_credentials",
    "TagReporter",
]
