"""Device-local key-value persistence: JSON file, Redis, or in-memory."""

import json
import logging
import os
import tempfile
from typing import Any, Dict, Optional

import redis

from config import REDIS_URL, STORAGE_BACKEND, STORAGE_PATH

logger = logging.getLogger(__name__)


class MalformedStateError(ValueError):
    """A persisted entry exists but cannot be decoded."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Malformed persisted state for {key!r}: {reason}")
        self.key = key


class StorageReadError(RuntimeError):
    """The backend could not be read; the entry may still exist."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Reading persisted state for {key!r} failed: {reason}")
        self.key = key


class KeyValueStorage:
    """String key -> JSON document store. Subclasses implement get_raw/set_raw."""

    def get_raw(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_raw(self, key: str, value: str) -> None:
        raise NotImplementedError

    def load_json(self, key: str) -> Optional[Any]:
        """Return the decoded entry, None if absent.

        Raises MalformedStateError for undecodable entries and StorageReadError
        when the backend itself cannot be read.
        """
        raw = self.get_raw(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            raise MalformedStateError(key, str(e)) from e

    def save_json(self, key: str, value: Any) -> bool:
        """Best-effort write. Failures are logged, never raised."""
        try:
            self.set_raw(key, json.dumps(value))
        except (OSError, redis.RedisError) as e:
            logger.warning("Persisting %s failed: %s", key, e)
            return False
        return True


class MemoryStorage(KeyValueStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.entries: Dict[str, str] = dict(initial or {})

    def get_raw(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    def set_raw(self, key: str, value: str) -> None:
        self.entries[key] = value


class JsonFileStorage(KeyValueStorage):
    """All entries live in one JSON object on disk, keyed like localStorage."""

    def __init__(self, path: str = STORAGE_PATH) -> None:
        self.path = path

    def _read_all(self) -> Dict[str, str]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Storage file %s unreadable, starting empty: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file %s is not a JSON object, starting empty", self.path)
            return {}
        return data

    def get_raw(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_raw(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".state-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class RedisStorage(KeyValueStorage):
    def __init__(self, client: Optional[redis.Redis] = None, url: str = REDIS_URL) -> None:
        self.client = client if client is not None else redis.from_url(url, decode_responses=True)

    def get_raw(self, key: str) -> Optional[str]:
        try:
            return self.client.get(key)
        except redis.RedisError as e:
            raise StorageReadError(key, str(e)) from e

    def set_raw(self, key: str, value: str) -> None:
        self.client.set(key, value)


def get_storage(backend: str = STORAGE_BACKEND) -> KeyValueStorage:
    """Build the configured storage backend."""
    if backend == "file":
        return JsonFileStorage(STORAGE_PATH)
    if backend == "redis":
        return RedisStorage(url=REDIS_URL)
    if backend == "memory":
        return MemoryStorage()
    raise ValueError(f"Unknown STORAGE_BACKEND {backend!r} (expected file, redis or memory)")
