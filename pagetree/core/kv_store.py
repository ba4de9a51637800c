"""
Key-Value Stores for Layout Documents

Provides:
1. InMemoryStore - process-local dict (default, tests)
2. FileStore - one JSON file per key under a directory
3. RedisStore - Redis strings under a key prefix

All stores speak the same small protocol (save/load/delete of a serialized
document). Callers treat every store as best-effort; errors propagate from
here and are handled by the layout storage adapter.
"""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

import redis

from pagetree.config import Settings, get_settings

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal document store interface."""

    def save(self, key: str, document: str) -> None: ...

    def load(self, key: str) -> str | None: ...

    def delete(self, key: str) -> None: ...


class InMemoryStore:
    """Dict-backed store, scoped to the process."""

    def __init__(self):
        self._documents: dict[str, str] = {}

    def save(self, key: str, document: str) -> None:
        self._documents[key] = document

    def load(self, key: str) -> str | None:
        return self._documents.get(key)

    def delete(self, key: str) -> None:
        self._documents.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._documents)


_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileStore:
    """
    Stores each document as ``<directory>/<key>.json``.

    Writes go to a temp file first and are moved into place, so a crash
    mid-write never leaves a truncated document behind.
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        """File path for a key (unsafe characters replaced with '_')."""
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def save(self, key: str, document: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(document)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"Saved layout document to {target}")

    def load(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


class RedisStore:
    """
    Redis-backed store.

    Keys are namespaced: ``{key_prefix}{key}`` (default ``pagetree:layout:``).
    """

    def __init__(
        self,
        redis_url: str | None = None,
        key_prefix: str | None = None,
        client: redis.Redis | None = None,
    ):
        if redis_url is None or key_prefix is None:
            settings = get_settings()
            redis_url = redis_url or settings.redis_url
            key_prefix = settings.redis_key_prefix if key_prefix is None else key_prefix
        self._redis_url = redis_url
        self.key_prefix = key_prefix
        self._redis = client

    def _get_redis(self) -> redis.Redis:
        """Get or create Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(self._redis_url, decode_responses=True)
        return self._redis

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def save(self, key: str, document: str) -> None:
        self._get_redis().set(self._key(key), document)
        logger.debug(f"Stored layout document: {self._key(key)}")

    def load(self, key: str) -> str | None:
        value = self._get_redis().get(self._key(key))
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def delete(self, key: str) -> None:
        self._get_redis().delete(self._key(key))


def create_store(settings: Settings | None = None) -> KeyValueStore:
    """
    Build the store selected by ``settings.storage_backend``.

    The testing environment always gets an in-memory store.
    """
    settings = settings or get_settings()
    if settings.is_testing:
        return InMemoryStore()
    if settings.storage_backend == "file":
        return FileStore(settings.storage_path)
    if settings.storage_backend == "redis":
        return RedisStore(settings.redis_url, settings.redis_key_prefix)
    return InMemoryStore()
