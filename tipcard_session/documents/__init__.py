"""
Remote document stores.

The in-memory store serves development and tests. The Cosmos DB store
lives in ``documents.cosmos`` and is imported on demand by ``bootstrap``.
"""

from .base import DocumentStore
from .memory import InMemoryDocumentStore

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
]
