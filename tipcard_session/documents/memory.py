"""
In-memory document store.

Stands in for the remote store in local development and tests. The
``reachable`` flag simulates network loss; call counters let tests assert
that an operation made no remote calls.
"""

from __future__ import annotations

import copy
from typing import Any

from ..exceptions import RemoteUnavailableError
from .base import DocumentStore


class InMemoryDocumentStore(DocumentStore):
    """Document store kept in a dict of collections."""

    def __init__(self, reachable: bool = True) -> None:
        self.reachable = reachable
        self.network_enabled = True
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.get_calls = 0
        self.set_calls = 0

    @property
    def calls(self) -> int:
        return self.get_calls + self.set_calls

    def _check(self) -> None:
        if not self.reachable or not self.network_enabled:
            raise RemoteUnavailableError("memory-document-store")

    async def get(self, path: str, doc_id: str) -> dict[str, Any] | None:
        self.get_calls += 1
        self._check()
        doc = self.collections.get(path, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def set(
        self, path: str, doc_id: str, data: dict[str, Any], merge: bool = True
    ) -> None:
        self.set_calls += 1
        self._check()
        collection = self.collections.setdefault(path, {})
        existing = collection.get(doc_id) if merge else None
        updated = dict(existing) if existing else {}
        updated.update(copy.deepcopy(data))
        collection[doc_id] = updated

    async def enable_network(self) -> None:
        if not self.reachable:
            raise RemoteUnavailableError("memory-document-store")
        self.network_enabled = True

    async def disable_network(self) -> None:
        self.network_enabled = False
