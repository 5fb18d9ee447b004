"""
Durable local key/value storage.

The host environment provides small, synchronous, capacity-bounded string
storage (browser localStorage in the web client, a directory of JSON
files here). Reads and writes are synchronous; bulk enumeration at
startup is asynchronous so large caches do not block the event loop.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import quote, unquote

import aiofiles
import aiofiles.os

from ..exceptions import PersistenceWriteError

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """Abstract durable string storage."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored string, or None if absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a string.

        Raises:
            PersistenceWriteError: If the write is rejected (quota, I/O)
        """
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key if present."""
        ...

    @abstractmethod
    async def items(self, prefix: str = "") -> dict[str, str]:
        """Return all stored entries whose key starts with prefix."""
        ...


class MemoryKeyValueStorage(KeyValueStorage):
    """In-process storage, optionally bounded by total size in characters.

    Useful for tests and for hosts with no writable filesystem.
    """

    def __init__(self, capacity: int | None = None) -> None:
        self.capacity = capacity
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.capacity is not None:
            used = sum(len(k) + len(v) for k, v in self._data.items() if k != key)
            if used + len(key) + len(value) > self.capacity:
                raise PersistenceWriteError(key, RuntimeError("storage quota exceeded"))
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def items(self, prefix: str = "") -> dict[str, str]:
        return {k: v for k, v in self._data.items() if k.startswith(prefix)}

    def __len__(self) -> int:
        return len(self._data)


class FileKeyValueStorage(KeyValueStorage):
    """Storage backed by one file per key in a directory.

    Directory structure:
    {base_path}/
      {quoted_key}.json

    Keys are percent-quoted into file names. Each file holds the raw
    string value.
    """

    SUFFIX = ".json"

    def __init__(self, base_path: Path, max_value_bytes: int | None = None) -> None:
        """Initialize file storage.

        Args:
            base_path: Directory holding the key files (created on first write)
            max_value_bytes: Optional per-value quota; larger writes are rejected
        """
        self.base_path = Path(base_path)
        self.max_value_bytes = max_value_bytes

    def _file(self, key: str) -> Path:
        return self.base_path / f"{quote(key, safe='')}{self.SUFFIX}"

    def get(self, key: str) -> str | None:
        path = self._file(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        encoded = value.encode("utf-8")
        if self.max_value_bytes is not None and len(encoded) > self.max_value_bytes:
            raise PersistenceWriteError(
                key, RuntimeError(f"value of {len(encoded)} bytes exceeds quota")
            )
        path = self._file(key)
        tmp = path.with_name(f".tmp_{path.name}")
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(encoded)
            tmp.replace(path)
        except OSError as e:
            raise PersistenceWriteError(key, e) from e

    def delete(self, key: str) -> None:
        try:
            self._file(key).unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceWriteError(key, e) from e

    async def items(self, prefix: str = "") -> dict[str, str]:
        if not await aiofiles.os.path.isdir(self.base_path):
            return {}

        entries: dict[str, str] = {}
        for name in await aiofiles.os.listdir(self.base_path):
            if not name.endswith(self.SUFFIX) or name.startswith(".tmp_"):
                continue
            key = unquote(name[: -len(self.SUFFIX)])
            if not key.startswith(prefix):
                continue
            try:
                async with aiofiles.open(self.base_path / name, encoding="utf-8") as f:
                    entries[key] = await f.read()
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unreadable cache file {name}: {e}")
        return entries


def dumps(value: object) -> str:
    """Serialize a cache payload."""
    return json.dumps(value, separators=(",", ":"), default=str)


def loads(raw: str) -> object:
    """Deserialize a cache payload."""
    return json.loads(raw)
