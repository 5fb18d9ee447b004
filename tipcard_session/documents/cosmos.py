"""
Cosmos DB document store.

Stores every collection in a single container partitioned by collection
path. Supports key-based and Azure AD authentication:
- Key-based authentication (if org policy allows)
- Azure AD via DefaultAzureCredential (recommended)
- Azure Managed Identity
- Service Principal
"""

from __future__ import annotations

import logging
from typing import Any

from azure.cosmos import PartitionKey
from azure.cosmos.aio import ContainerProxy, CosmosClient, DatabaseProxy
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError

from ..config import CosmosAuthMethod, TipcardConfig
from ..exceptions import RemoteUnavailableError, TipcardError
from .base import DocumentStore

logger = logging.getLogger(__name__)

PARTITION_KEY_PATH = "/collection"


def _get_credential(config: TipcardConfig) -> Any:
    """Get the appropriate credential based on auth method.

    Raises:
        TipcardError: If the credential cannot be created
    """
    auth_method = config.cosmos_auth_method

    if auth_method == CosmosAuthMethod.KEY:
        if not config.cosmos_key:
            raise TipcardError("cosmos_key required for KEY authentication")
        return config.cosmos_key

    if auth_method == CosmosAuthMethod.DEFAULT_CREDENTIAL:
        from azure.identity.aio import DefaultAzureCredential

        return DefaultAzureCredential()

    if auth_method == CosmosAuthMethod.MANAGED_IDENTITY:
        from azure.identity.aio import ManagedIdentityCredential

        if config.azure_client_id:
            return ManagedIdentityCredential(client_id=config.azure_client_id)
        return ManagedIdentityCredential()

    if auth_method == CosmosAuthMethod.SERVICE_PRINCIPAL:
        if not all([config.azure_tenant_id, config.azure_client_id, config.azure_client_secret]):
            raise TipcardError(
                "azure_tenant_id, azure_client_id, and azure_client_secret "
                "required for SERVICE_PRINCIPAL authentication"
            )
        from azure.identity.aio import ClientSecretCredential

        return ClientSecretCredential(
            tenant_id=config.azure_tenant_id,
            client_id=config.azure_client_id,
            client_secret=config.azure_client_secret,
        )

    raise TipcardError(f"Unsupported auth method: {auth_method}")


class CosmosDocumentStore(DocumentStore):
    """Document store on Azure Cosmos DB.

    Item schema:
    {
        "id": "{doc_id}",
        "collection": "{path}",
        "data": {...}
    }

    Merge writes read the current item, apply the new top-level fields
    over its data and upsert the result.
    """

    def __init__(self, config: TipcardConfig) -> None:
        if not config.cosmos_endpoint:
            raise TipcardError("Cosmos endpoint is required")

        self.config = config
        self._credential: Any = None
        self._client: CosmosClient | None = None
        self._database: DatabaseProxy | None = None
        self._container: ContainerProxy | None = None
        self._network_enabled = True

    async def _ensure_container(self) -> ContainerProxy:
        if not self._network_enabled:
            raise RemoteUnavailableError("cosmos", RuntimeError("network disabled"))
        if self._container is not None:
            return self._container

        try:
            self._credential = _get_credential(self.config)
            client = CosmosClient(
                self.config.cosmos_endpoint,  # type: ignore[arg-type]
                credential=self._credential,
            )
            self._client = client
            self._database = await client.create_database_if_not_exists(
                id=self.config.cosmos_database
            )
            self._container = await self._database.create_container_if_not_exists(
                id=self.config.cosmos_container,
                partition_key=PartitionKey(path=PARTITION_KEY_PATH),
            )
        except TipcardError:
            raise
        except Exception as e:
            await self._reset()
            raise RemoteUnavailableError("cosmos", e) from e

        logger.info(
            f"Connected to Cosmos DB: {self.config.cosmos_endpoint} "
            f"(database={self.config.cosmos_database}, "
            f"container={self.config.cosmos_container}, "
            f"auth={self.config.cosmos_auth_method.value})"
        )
        return self._container

    async def get(self, path: str, doc_id: str) -> dict[str, Any] | None:
        container = await self._ensure_container()
        try:
            item = await container.read_item(item=doc_id, partition_key=path)
        except CosmosResourceNotFoundError:
            return None
        except CosmosHttpResponseError as e:
            raise RemoteUnavailableError("cosmos", e) from e
        return dict(item.get("data") or {})

    async def set(
        self, path: str, doc_id: str, data: dict[str, Any], merge: bool = True
    ) -> None:
        container = await self._ensure_container()
        try:
            merged: dict[str, Any] = {}
            if merge:
                try:
                    existing = await container.read_item(item=doc_id, partition_key=path)
                    merged.update(existing.get("data") or {})
                except CosmosResourceNotFoundError:
                    pass
            merged.update(data)
            await container.upsert_item({"id": doc_id, "collection": path, "data": merged})
        except CosmosHttpResponseError as e:
            raise RemoteUnavailableError("cosmos", e) from e

    async def enable_network(self) -> None:
        self._network_enabled = True
        await self._ensure_container()
        try:
            await self._database.read()  # type: ignore[union-attr]
        except CosmosHttpResponseError as e:
            raise RemoteUnavailableError("cosmos", e) from e

    async def disable_network(self) -> None:
        self._network_enabled = False
        await self._reset()

    async def close(self) -> None:
        await self._reset()

    async def _reset(self) -> None:
        if self._client:
            await self._client.close()
        self._client = None
        self._database = None
        self._container = None

        # AAD credentials hold their own transport
        if self._credential is not None and hasattr(self._credential, "close"):
            await self._credential.close()
        self._credential = None
