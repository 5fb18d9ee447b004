"""
Shared test configuration and fixtures.

Provides the in-memory collaborators (auth provider, document store,
durable storage) wired the same way ``TipcardApp`` wires the real ones,
plus a fake HTTP session for the aiohttp-based clients.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

import pytest

from tipcard_session.auth import InMemoryAuthProvider
from tipcard_session.cache import MemoryKeyValueStorage, OfflineCache
from tipcard_session.documents import InMemoryDocumentStore
from tipcard_session.records import LocalFirstRecordStore
from tipcard_session.session import SessionManager

logger = logging.getLogger(__name__)


class CountingKeyValueStorage(MemoryKeyValueStorage):
    """Memory storage that counts reads and writes."""

    def __init__(self, capacity: int | None = None) -> None:
        super().__init__(capacity)
        self.reads = 0
        self.writes = 0

    def get(self, key: str) -> str | None:
        self.reads += 1
        return super().get(key)

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        super().set(key, value)

    def reset_counters(self) -> None:
        self.reads = 0
        self.writes = 0


class FakeResponse:
    """Minimal stand-in for an aiohttp response."""

    def __init__(self, status: int, body: Any) -> None:
        self.status = status
        self._body = body

    async def json(self, content_type: str | None = "application/json") -> Any:
        return self._body

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc: object) -> None:
        return None


class FakeHttpSession:
    """Records POST requests and replays queued responses or errors."""

    def __init__(self) -> None:
        self.requests: list[dict[str, Any]] = []
        self._responses: list[FakeResponse | Exception] = []
        self.closed = False

    def queue(self, status: int, body: Any) -> None:
        self._responses.append(FakeResponse(status, body))

    def queue_error(self, error: Exception) -> None:
        self._responses.append(error)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append({"url": url, **kwargs})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def storage() -> CountingKeyValueStorage:
    return CountingKeyValueStorage()


@pytest.fixture
def cache(storage: CountingKeyValueStorage) -> OfflineCache:
    return OfflineCache(storage)


@pytest.fixture
def documents() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def auth() -> InMemoryAuthProvider:
    return InMemoryAuthProvider()


@pytest.fixture
def records(documents: InMemoryDocumentStore, cache: OfflineCache) -> LocalFirstRecordStore:
    return LocalFirstRecordStore(documents, cache)


@pytest.fixture
def routes() -> list[str]:
    """Routes the session manager navigated to."""
    return []


@pytest.fixture
async def manager(
    auth: InMemoryAuthProvider,
    records: LocalFirstRecordStore,
    cache: OfflineCache,
    routes: list[str],
) -> AsyncIterator[SessionManager]:
    """A started session manager over the in-memory collaborators."""
    manager = SessionManager(auth, records, cache, navigate=routes.append)
    await manager.start()
    await auth.flush_events()
    yield manager
    await manager.close()


@pytest.fixture
def http_session() -> FakeHttpSession:
    return FakeHttpSession()
