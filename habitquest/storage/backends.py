"""
Key-value persistence backends for the stats store

Each backend stores opaque JSON strings under string keys:
- InMemoryBackend: process-local dict (tests, server-side sessions)
- JsonFileBackend: one <key>.json file per key under a data directory
- RedisBackend: a Redis server

Backend failures are raised as StorageReadError / StorageWriteError; the
store decides which of them to absorb.
"""

import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

import redis

from habitquest.config import DATA_PATH, REDIS_URL, STORAGE_BACKEND
from habitquest.exceptions import ConfigurationError, StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)


class KeyValueBackend(ABC):
    """Minimal string key-value store"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None if the key is absent"""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value"""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key (no error if absent)"""


class InMemoryBackend(KeyValueBackend):
    """Dict-backed backend"""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileBackend(KeyValueBackend):
    """
    One JSON document per key on the local filesystem

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so readers never see a half-written document.
    """

    _SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")

    def __init__(self, data_path: Path = DATA_PATH):
        self.data_path = Path(data_path)

    def _path_for(self, key: str) -> Path:
        return self.data_path / f"{self._SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str) -> Optional[str]:
        filepath = self._path_for(key)
        if not filepath.exists():
            return None
        try:
            return filepath.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read {filepath}", key=key, cause=e)

    def set(self, key: str, value: str) -> None:
        filepath = self._path_for(key)
        try:
            self.data_path.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.data_path, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                    tmp_file.write(value)
                os.replace(tmp_name, filepath)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageWriteError(f"Failed to write {filepath}", key=key, cause=e)
        logger.debug(f"Wrote {filepath}")

    def delete(self, key: str) -> None:
        try:
            self._path_for(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Failed to delete {key}", key=key, cause=e)


class RedisBackend(KeyValueBackend):
    """
    Redis-backed backend

    Args:
        redis_url: Connection URL (ignored when a client is supplied)
        client: Pre-built redis client
        namespace: Prefix applied to every key
    """

    def __init__(
        self,
        redis_url: str = REDIS_URL,
        client: Optional[Any] = None,
        namespace: str = "habitquest:"
    ):
        self.redis_url = redis_url
        self.namespace = namespace
        self._client = client or redis.Redis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
        )

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._client.get(self._key(key))
        except redis.RedisError as e:
            raise StorageReadError(f"Redis GET failed for '{key}'", key=key, cause=e)
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(self._key(key), value)
        except redis.RedisError as e:
            raise StorageWriteError(f"Redis SET failed for '{key}'", key=key, cause=e)

    def delete(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except redis.RedisError as e:
            raise StorageWriteError(f"Redis DELETE failed for '{key}'", key=key, cause=e)


def create_backend(name: str = STORAGE_BACKEND) -> KeyValueBackend:
    """
    Build the backend selected by configuration

    Raises:
        ConfigurationError: Unknown backend name
    """
    if name == "memory":
        return InMemoryBackend()
    if name == "file":
        return JsonFileBackend(DATA_PATH)
    if name == "redis":
        return RedisBackend(REDIS_URL)
    raise ConfigurationError(f"Unknown storage backend: '{name}'", config_key="HABITQUEST_STORAGE_BACKEND")
