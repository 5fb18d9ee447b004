"""
Process-start wiring.

Builds the offline cache, remote collaborators, record store and session
manager from a TipcardConfig. The returned ``TipcardApp`` owns all of them
and tears them down in ``close()``.

Usage:
    app = await TipcardApp.create(TipcardConfig.from_environment())
    await app.session.sign_in(email, password)
    ...
    await app.close()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .auth import AuthProvider, FirebaseAuthProvider, InMemoryAuthProvider
from .cache import FileKeyValueStorage, KeyValueStorage, OfflineCache
from .config import TipcardConfig
from .documents import DocumentStore, InMemoryDocumentStore
from .logging_utils import configure_logging
from .records import LocalFirstRecordStore
from .session import SessionManager
from .session.manager import Navigator

logger = logging.getLogger(__name__)


def create_document_store(config: TipcardConfig) -> DocumentStore:
    """Select the document store named by the configuration."""
    if config.document_store == "memory":
        return InMemoryDocumentStore()
    if config.document_store == "cosmos":
        from .documents.cosmos import CosmosDocumentStore

        return CosmosDocumentStore(config)
    raise ValueError(f"Unknown document store: {config.document_store}")


def create_auth_provider(config: TipcardConfig, storage: KeyValueStorage) -> AuthProvider:
    """Select the auth provider named by the configuration."""
    if config.auth_provider == "memory":
        return InMemoryAuthProvider()
    if config.auth_provider == "firebase":
        return FirebaseAuthProvider(api_key=config.firebase_api_key or "", storage=storage)
    raise ValueError(f"Unknown auth provider: {config.auth_provider}")


@dataclass
class TipcardApp:
    """Everything one process needs, constructed once at start."""

    config: TipcardConfig
    cache: OfflineCache
    documents: DocumentStore
    auth: AuthProvider
    records: LocalFirstRecordStore
    session: SessionManager

    @classmethod
    async def create(
        cls,
        config: TipcardConfig,
        storage: KeyValueStorage | None = None,
        documents: DocumentStore | None = None,
        auth: AuthProvider | None = None,
        navigate: Navigator | None = None,
    ) -> TipcardApp:
        """Build and start the app.

        Collaborators passed explicitly win over the configured ones.
        """
        configure_logging(config.log_level_value, config.log_format)

        if storage is None:
            storage = FileKeyValueStorage(config.cache_dir)
        cache = OfflineCache(storage)
        await cache.hydrate()

        if documents is None:
            documents = create_document_store(config)
        if auth is None:
            auth = create_auth_provider(config, storage)
        records = LocalFirstRecordStore(documents, cache)
        session = SessionManager(
            auth,
            records,
            cache,
            profile_collection=config.profile_collection,
            demo=config.demo,
            navigate=navigate,
        )
        await session.start()

        logger.info(
            f"Tipcard session started (auth={config.auth_provider}, "
            f"documents={config.document_store}, cached_records={len(cache)})"
        )
        return cls(config, cache, documents, auth, records, session)

    async def close(self) -> None:
        """Tear down in reverse order of construction."""
        await self.session.close()
        close_auth = getattr(self.auth, "close", None)
        if close_auth is not None:
            await close_auth()
        await self.documents.close()
        self.cache.clear()
