"""
Offline cache shared by the record store and the session manager.

Records live in an in-memory map mirrored to durable storage under the
``offline_`` prefix. Session values (auth flags, the cached hotel
profile) are stored durably without the prefix and are never replayed by
sync. One instance is created at process start and passed by reference
to every component that needs it.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterator
from typing import Any

from ..exceptions import PersistenceWriteError
from ..result import Result, classify, report
from .keys import RecordKey
from .storage import KeyValueStorage, MemoryKeyValueStorage, dumps, loads

logger = logging.getLogger(__name__)

RECORD_PREFIX = "offline_"


class OfflineCache:
    """In-memory record cache with a durable mirror."""

    def __init__(self, storage: KeyValueStorage | None = None) -> None:
        self.storage = storage if storage is not None else MemoryKeyValueStorage()
        self._records: dict[str, Any] = {}

    # Records

    def get(self, key: RecordKey) -> Any | None:
        """Return a cached record, reading through to durable storage on a miss."""
        encoded = key.encode()
        if encoded in self._records:
            return copy.deepcopy(self._records[encoded])

        try:
            raw = self.storage.get(RECORD_PREFIX + encoded)
            if raw is None:
                return None
            value = loads(raw)
        except (OSError, ValueError) as e:
            # ValueError covers undecodable bytes and invalid JSON
            logger.warning(f"Failed to retrieve offline data for {key}: {e}")
            return None

        self._records[encoded] = value
        return copy.deepcopy(value)

    def put(self, key: RecordKey, value: Any) -> bool:
        """Cache a record. Returns False if only the in-memory copy was kept."""
        encoded = key.encode()
        self._records[encoded] = copy.deepcopy(value)
        return self._write(RECORD_PREFIX + encoded, value)

    def entries(self) -> Iterator[tuple[RecordKey, Any]]:
        """Iterate over a snapshot of the in-memory records."""
        for encoded, value in list(self._records.items()):
            yield RecordKey.decode(encoded), value

    def __contains__(self, key: RecordKey) -> bool:
        return key.encode() in self._records

    def __len__(self) -> int:
        return len(self._records)

    async def hydrate(self) -> int:
        """Load records persisted by an earlier process into memory.

        Returns:
            Number of records loaded
        """
        loaded = 0
        for full_key, raw in (await self.storage.items(RECORD_PREFIX)).items():
            encoded = full_key[len(RECORD_PREFIX):]
            try:
                RecordKey.decode(encoded)
                self._records.setdefault(encoded, loads(raw))
                loaded += 1
            except ValueError as e:
                logger.warning(f"Skipping unreadable cache entry {full_key}: {e}")
        logger.debug(f"Hydrated {loaded} cached records")
        return loaded

    def clear(self) -> None:
        """Drop the in-memory records. Durable copies are left in place."""
        self._records.clear()

    # Session values

    def get_value(self, name: str) -> Any | None:
        try:
            raw = self.storage.get(name)
            return loads(raw) if raw is not None else None
        except (OSError, ValueError) as e:
            logger.error(f"Error reading {name} from offline store: {e}")
            return None

    def set_value(self, name: str, value: Any) -> bool:
        return self._write(name, value)

    def _write(self, key: str, value: Any) -> bool:
        try:
            self.storage.set(key, dumps(value))
        except PersistenceWriteError as e:
            report(f"save offline data for {key}", Result.failure(classify(e), e))
            return False
        return True
