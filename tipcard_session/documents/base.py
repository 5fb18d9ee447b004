"""
Abstract document store interface.

Defines the contract the remote document store must implement. Documents
are JSON objects addressed by a collection path and a document id.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class DocumentStore(ABC):
    """Abstract remote document store."""

    @abstractmethod
    async def get(self, path: str, doc_id: str) -> dict[str, Any] | None:
        """Read a document.

        Returns:
            The document data, or None if it does not exist

        Raises:
            RemoteUnavailableError: If the store cannot be reached
        """
        ...

    @abstractmethod
    async def set(
        self, path: str, doc_id: str, data: dict[str, Any], merge: bool = True
    ) -> None:
        """Write a document.

        With ``merge`` the given top-level fields are applied over the
        existing document and unspecified fields are preserved; without it
        the document is replaced.

        Raises:
            RemoteUnavailableError: If the store cannot be reached
        """
        ...

    @abstractmethod
    async def enable_network(self) -> None:
        """(Re)connect to the remote store.

        Raises:
            RemoteUnavailableError: If the connection cannot be established
        """
        ...

    @abstractmethod
    async def disable_network(self) -> None:
        """Disconnect from the remote store."""
        ...

    async def close(self) -> None:
        """Release client resources."""
        return None
