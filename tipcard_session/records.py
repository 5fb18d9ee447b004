"""
Local-first record store.

Reads and writes go to the remote document store when it is reachable
and always leave a copy in the OfflineCache. When the remote store fails,
reads are served from the cache and writes are kept locally until
``sync_pending()`` replays them.

Remote failures never escape this module: they are captured as
``Result`` values and handled per ``ERROR_POLICIES``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .cache import OfflineCache, RecordKey
from .documents import DocumentStore
from .exceptions import RecordNotFoundError
from .logging_utils import ContextLoggerAdapter
from .result import ErrorKind, Result, capture

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    """Outcome of a ``sync_pending()`` pass."""

    online: bool
    synced: list[RecordKey] = field(default_factory=list)
    failed: list[RecordKey] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.online and not self.failed


class LocalFirstRecordStore:
    """Remote-backed JSON record store with a local cache fallback."""

    def __init__(self, documents: DocumentStore, cache: OfflineCache) -> None:
        self.documents = documents
        self.cache = cache

    async def fetch_remote(self, path: str, record_id: str) -> Result[dict[str, Any]]:
        """Read a record from the remote store only.

        A hit is written through to the cache. A failed call carries its
        classified error; a remote miss is reported as ``NOT_FOUND``.
        """
        key = RecordKey(path, record_id)
        result = await capture(f"fetch {key}", self.documents.get(path, record_id))
        if not result.ok:
            return result
        if result.value is None:
            return Result.failure(ErrorKind.NOT_FOUND, RecordNotFoundError(path, record_id))

        self.cache.put(key, result.value)
        return result

    async def fetch(self, path: str, record_id: str) -> dict[str, Any] | None:
        """Read a record, preferring the remote store.

        Returns:
            The remote value, else the cached value, else None
        """
        result = await self.fetch_remote(path, record_id)
        if result.ok:
            return result.value
        if not result.falls_back:
            return None
        return self.cache.get(RecordKey(path, record_id))

    async def save(self, path: str, record_id: str, data: dict[str, Any]) -> bool:
        """Upsert a record with merge semantics.

        The cache is updated whatever the remote outcome.

        Returns:
            True if the remote write succeeded, False if only cached
        """
        key = RecordKey(path, record_id)
        result = await capture(f"save {key}", self.documents.set(path, record_id, data, merge=True))
        self.cache.put(key, data)
        return result.ok

    async def is_online(self) -> bool:
        """Check the remote store. Advisory only; other operations never gate on it."""
        result = await capture("enable network", self.documents.enable_network())
        if result.ok:
            return True

        await capture("disable network", self.documents.disable_network())
        return False

    async def sync_pending(self) -> SyncReport:
        """Replay every cached record to the remote store once.

        Does not schedule retries; call again when connectivity returns.
        """
        if not await self.is_online():
            logger.info("Remote store offline, skipping sync")
            return SyncReport(online=False)

        report = SyncReport(online=True)
        for key, value in self.cache.entries():
            if not value:
                continue
            log = ContextLoggerAdapter(logger, {"record_key": str(key)})
            result = await capture(
                f"sync {key}", self.documents.set(key.path, key.record_id, value, merge=True)
            )
            if result.ok:
                report.synced.append(key)
            else:
                log.warning(f"Failed to sync offline data for {key}")
                report.failed.append(key)

        logger.info(f"Synced {len(report.synced)} cached records, {len(report.failed)} failed")
        return report
