"""Tests for the local-first record store."""

from __future__ import annotations

from typing import Any

from tipcard_session.cache import OfflineCache, RecordKey
from tipcard_session.documents import InMemoryDocumentStore
from tipcard_session.exceptions import (
    PersistenceWriteError,
    RecordNotFoundError,
    RemoteUnavailableError,
)
from tipcard_session.records import LocalFirstRecordStore
from tipcard_session.result import ErrorKind


class FlakyDocumentStore(InMemoryDocumentStore):
    """Document store that refuses writes to selected ids."""

    def __init__(self, failing_ids: set[str]) -> None:
        super().__init__()
        self.failing_ids = failing_ids

    async def set(
        self, path: str, doc_id: str, data: dict[str, Any], merge: bool = True
    ) -> None:
        if doc_id in self.failing_ids:
            self.set_calls += 1
            raise RemoteUnavailableError("flaky")
        await super().set(path, doc_id, data, merge)


class BrokenReadDocumentStore(InMemoryDocumentStore):
    """Document store whose reads fail with a local write error."""

    async def get(self, path: str, doc_id: str) -> dict[str, Any] | None:
        raise PersistenceWriteError(f"{path}/{doc_id}")


class TestFetch:
    """Tests for LocalFirstRecordStore.fetch."""

    async def test_remote_hit_is_written_through(
        self, records: LocalFirstRecordStore, documents: InMemoryDocumentStore, cache: OfflineCache
    ) -> None:
        """A remote hit is returned and cached."""
        documents.collections["hotels"] = {"h1": {"hotelName": "Acme Inn"}}

        assert await records.fetch("hotels", "h1") == {"hotelName": "Acme Inn"}
        assert cache.get(RecordKey("hotels", "h1")) == {"hotelName": "Acme Inn"}

    async def test_remote_miss_falls_back_to_cache(
        self, records: LocalFirstRecordStore, cache: OfflineCache
    ) -> None:
        cache.put(RecordKey("hotels", "h1"), {"hotelName": "Cached Inn"})

        assert await records.fetch("hotels", "h1") == {"hotelName": "Cached Inn"}

    async def test_remote_error_falls_back_to_cache(
        self,
        records: LocalFirstRecordStore,
        documents: InMemoryDocumentStore,
        cache: OfflineCache,
    ) -> None:
        cache.put(RecordKey("hotels", "h1"), {"hotelName": "Cached Inn"})
        documents.reachable = False

        assert await records.fetch("hotels", "h1") == {"hotelName": "Cached Inn"}

    async def test_nothing_anywhere_returns_none(
        self, records: LocalFirstRecordStore, documents: InMemoryDocumentStore
    ) -> None:
        """Neither a miss nor an outage raises."""
        assert await records.fetch("hotels", "missing") is None

        documents.reachable = False
        assert await records.fetch("hotels", "missing") is None

    async def test_fetch_remote_reports_error_kind(
        self, records: LocalFirstRecordStore, documents: InMemoryDocumentStore
    ) -> None:
        documents.reachable = False

        result = await records.fetch_remote("hotels", "h1")

        assert result.ok is False
        assert result.error == ErrorKind.REMOTE_UNAVAILABLE
        assert isinstance(result.cause, RemoteUnavailableError)

    async def test_remote_miss_is_not_found(
        self, records: LocalFirstRecordStore, cache: OfflineCache
    ) -> None:
        """A miss is classified as NOT_FOUND and nothing is cached."""
        result = await records.fetch_remote("hotels", "missing")

        assert result.error == ErrorKind.NOT_FOUND
        assert isinstance(result.cause, RecordNotFoundError)
        assert RecordKey("hotels", "missing") not in cache

    async def test_failures_without_fallback_skip_the_cache(
        self, documents: InMemoryDocumentStore, cache: OfflineCache
    ) -> None:
        """Only error kinds whose policy allows it are served from the cache."""
        cache.put(RecordKey("hotels", "h1"), {"hotelName": "Cached Inn"})
        records = LocalFirstRecordStore(BrokenReadDocumentStore(), cache)

        assert await records.fetch("hotels", "h1") is None


class TestSave:
    """Tests for LocalFirstRecordStore.save."""

    async def test_save_online(
        self, records: LocalFirstRecordStore, documents: InMemoryDocumentStore, cache: OfflineCache
    ) -> None:
        assert await records.save("hotels", "h1", {"hotelName": "Acme Inn"}) is True
        assert documents.collections["hotels"]["h1"] == {"hotelName": "Acme Inn"}
        assert cache.get(RecordKey("hotels", "h1")) == {"hotelName": "Acme Inn"}

    async def test_save_offline_keeps_local_copy(
        self, records: LocalFirstRecordStore, documents: InMemoryDocumentStore, cache: OfflineCache
    ) -> None:
        documents.reachable = False

        assert await records.save("hotels", "h1", {"hotelName": "Acme Inn"}) is False
        assert cache.get(RecordKey("hotels", "h1")) == {"hotelName": "Acme Inn"}

    async def test_save_then_fetch_while_unreachable(
        self, records: LocalFirstRecordStore, documents: InMemoryDocumentStore
    ) -> None:
        """The cache path alone round-trips a record."""
        documents.reachable = False

        await records.save("hotels", "h1", {"hotelName": "Acme Inn", "rooms": []})

        assert await records.fetch("hotels", "h1") == {"hotelName": "Acme Inn", "rooms": []}

    async def test_merge_preserves_unspecified_remote_fields(
        self, records: LocalFirstRecordStore, documents: InMemoryDocumentStore
    ) -> None:
        documents.collections["hotels"] = {"h1": {"hotelName": "Acme Inn", "phone": "555"}}

        await records.save("hotels", "h1", {"hotelName": "Acme Suites"})

        assert documents.collections["hotels"]["h1"] == {
            "hotelName": "Acme Suites",
            "phone": "555",
        }

    async def test_save_is_idempotent(
        self, records: LocalFirstRecordStore, documents: InMemoryDocumentStore, cache: OfflineCache
    ) -> None:
        data = {"hotelName": "Acme Inn", "staff": [{"id": "s1"}]}

        await records.save("hotels", "h1", data)
        remote_once = dict(documents.collections["hotels"])
        cached_once = dict(cache.entries())

        await records.save("hotels", "h1", data)

        assert documents.collections["hotels"] == remote_once
        assert dict(cache.entries()) == cached_once


class TestIsOnline:
    """Tests for LocalFirstRecordStore.is_online."""

    async def test_online(self, records: LocalFirstRecordStore) -> None:
        assert await records.is_online() is True

    async def test_offline_disables_network(
        self, records: LocalFirstRecordStore, documents: InMemoryDocumentStore
    ) -> None:
        documents.reachable = False

        assert await records.is_online() is False
        assert documents.network_enabled is False


class TestSyncPending:
    """Tests for LocalFirstRecordStore.sync_pending."""

    async def test_replays_offline_writes(
        self, records: LocalFirstRecordStore, documents: InMemoryDocumentStore
    ) -> None:
        documents.reachable = False
        await records.save("hotels", "h1", {"hotelName": "Acme Inn"})
        await records.save("staff_members", "s_1", {"name": "Ana"})

        documents.reachable = True
        report = await records.sync_pending()

        assert report.online is True
        assert report.complete is True
        assert set(report.synced) == {RecordKey("hotels", "h1"), RecordKey("staff_members", "s_1")}
        assert documents.collections["hotels"]["h1"] == {"hotelName": "Acme Inn"}
        assert documents.collections["staff_members"]["s_1"] == {"name": "Ana"}

    async def test_offline_attempts_nothing(
        self, records: LocalFirstRecordStore, documents: InMemoryDocumentStore
    ) -> None:
        documents.reachable = False
        await records.save("hotels", "h1", {"hotelName": "Acme Inn"})
        calls_before = documents.set_calls

        report = await records.sync_pending()

        assert report.online is False
        assert report.synced == []
        assert documents.set_calls == calls_before

    async def test_per_entry_failures_are_skipped(self) -> None:
        documents = FlakyDocumentStore(failing_ids={"bad"})
        cache = OfflineCache()
        cache.put(RecordKey("hotels", "good"), {"a": 1})
        cache.put(RecordKey("hotels", "bad"), {"b": 2})
        records = LocalFirstRecordStore(documents, cache)

        report = await records.sync_pending()

        assert report.synced == [RecordKey("hotels", "good")]
        assert report.failed == [RecordKey("hotels", "bad")]
        assert report.complete is False
        assert documents.collections["hotels"] == {"good": {"a": 1}}
