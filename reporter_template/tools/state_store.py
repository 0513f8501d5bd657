"""
State Store Tool

File-backed key/value records that survive process exit and device reboot.
Each key is one small file under the state directory.
"""

import asyncio
import fcntl
import os
import tempfile
import time
from contextlib import asynccontextmanager, contextmanager
from pathlib import Path
from typing import AsyncIterator, Iterator, Optional

import structlog

logger = structlog.get_logger(__name__)

# Record keys
LAST_CONNECTION_STATE = "last_connection_state"
LAST_CONNECTION_DROP = "last_connection_drop"
LAST_IF_DOWN = "last_if_down"

LOCK_FILE_NAME = ".lock"
LOCK_POLL_SECONDS = 0.1


class StateStoreError(Exception):
    """Base exception for state store errors"""
    pass


class StateLockTimeout(StateStoreError):
    """Exclusive access could not be acquired in time"""
    pass


class CorruptRecordError(StateStoreError):
    """A record exists but does not hold the expected value"""
    pass


class StateStore:
    """
    Durable key/value store for monitor state.

    Writes are atomic (temp file + rename). Callers wrap each
    read-modify-write cycle in exclusive(), or locked() from async code,
    so that two dispatcher invocations never interleave.
    """

    def __init__(self, directory: str, lock_timeout_seconds: float = 30.0):
        """
        Initialize state store.

        Args:
            directory: Directory on a persistent filesystem
            lock_timeout_seconds: How long exclusive() waits for the lock
        """
        self.directory = Path(directory)
        self.lock_timeout_seconds = lock_timeout_seconds

    def _ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not key or "/" in key or key.startswith("."):
            raise StateStoreError(f"Invalid record key: {key!r}")
        return self.directory / key

    def _lock_path(self) -> Path:
        self._ensure_directory()
        return self.directory / LOCK_FILE_NAME

    def _try_lock(self, lock_fd, lock_path: Path, deadline: float) -> bool:
        """One non-blocking lock attempt; raises once the deadline has passed"""
        try:
            fcntl.flock(lock_fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            if time.monotonic() >= deadline:
                raise StateLockTimeout(
                    f"Could not lock {lock_path} within {self.lock_timeout_seconds}s"
                )
            return False
        logger.debug("State lock acquired", path=str(lock_path))
        return True

    def _unlock(self, lock_fd, lock_path: Path) -> None:
        fcntl.flock(lock_fd, fcntl.LOCK_UN)
        logger.debug("State lock released", path=str(lock_path))

    @contextmanager
    def exclusive(self) -> Iterator["StateStore"]:
        """
        Hold an exclusive lock on the store for the duration of the block.

        Blocks the calling thread while waiting; use locked() from async code.

        Raises:
            StateLockTimeout: if another process keeps the lock past the timeout
        """
        lock_path = self._lock_path()
        deadline = time.monotonic() + self.lock_timeout_seconds

        with open(lock_path, "a") as lock_fd:
            while not self._try_lock(lock_fd, lock_path, deadline):
                time.sleep(LOCK_POLL_SECONDS)
            try:
                yield self
            finally:
                self._unlock(lock_fd, lock_path)

    @asynccontextmanager
    async def locked(self) -> AsyncIterator["StateStore"]:
        """
        Async variant of exclusive(): waits with asyncio.sleep so the event
        loop keeps running while another process holds the lock.

        Raises:
            StateLockTimeout: if another process keeps the lock past the timeout
        """
        lock_path = self._lock_path()
        deadline = time.monotonic() + self.lock_timeout_seconds

        with open(lock_path, "a") as lock_fd:
            while not self._try_lock(lock_fd, lock_path, deadline):
                await asyncio.sleep(LOCK_POLL_SECONDS)
            try:
                yield self
            finally:
                self._unlock(lock_fd, lock_path)

    def read(self, key: str) -> Optional[str]:
        """
        Read a record.

        Returns:
            Stripped record value, or None if the record is absent or empty

        Raises:
            CorruptRecordError: if the record is not valid UTF-8 text
        """
        try:
            value = self._path(key).read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise CorruptRecordError(f"Record {key} is not valid text: {e}")
        return value or None

    def read_int(self, key: str) -> Optional[int]:
        """
        Read a record holding an integer (epoch seconds).

        Raises:
            CorruptRecordError: if the record exists but is not an integer
        """
        value = self.read(key)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            raise CorruptRecordError(f"Record {key} holds non-integer value {value!r}")

    def write(self, key: str, value: str) -> None:
        """Atomically replace a record"""
        self._ensure_directory()
        path = self._path(key)

        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(f"{value}\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.debug("Record written", key=key, value=value)

    def delete(self, key: str) -> bool:
        """
        Delete a record.

        Returns:
            True if deleted, False if not found
        """
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            return False
        logger.debug("Record deleted", key=key)
        return True

    def exists(self, key: str) -> bool:
        return self._path(key).exists()

