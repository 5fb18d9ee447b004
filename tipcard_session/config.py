"""
Configuration for the tipping session core.

Configuration can be provided directly, via environment variables, or
from a YAML settings file:

```yaml
local_path: ~/.tipcard/cache
profile_collection: hotels
auth:
  provider: firebase
  firebase_api_key: "AIza..."
documents:
  store: cosmos
  cosmos_endpoint: "https://example.documents.azure.com:443/"
  cosmos_auth_method: default_credential
payments:
  api_base: "https://api.stripe.com"
  secret_key: "sk_test_..."
  currency: usd
logging:
  level: INFO
  format: json
```
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_LOCAL_PATH = Path.home() / ".tipcard" / "cache"
DEFAULT_SETTINGS_PATH = Path.home() / ".tipcard" / "settings.yaml"


class CosmosAuthMethod(Enum):
    """Authentication method for Cosmos DB.

    KEY: Use an account key
    DEFAULT_CREDENTIAL: Use Azure DefaultAzureCredential
    MANAGED_IDENTITY: Use Azure Managed Identity explicitly
    SERVICE_PRINCIPAL: Use Service Principal with client_id/client_secret
    """

    KEY = "key"
    DEFAULT_CREDENTIAL = "default_credential"
    MANAGED_IDENTITY = "managed_identity"
    SERVICE_PRINCIPAL = "service_principal"


@dataclass
class DemoCredentials:
    """Fixed credential pair that always signs in, even offline."""

    email: str = "demo@hotel.com"
    password: str = "demo123"
    org_id: str = "DEMO1234"


@dataclass
class TipcardConfig:
    """Configuration for the session core and its collaborators.

    Environment Variables:
        TIPCARD_LOCAL_PATH: Directory for the durable local cache
        TIPCARD_PROFILE_COLLECTION: Collection holding hotel profiles
        TIPCARD_AUTH_PROVIDER: memory | firebase
        TIPCARD_FIREBASE_API_KEY: Web API key for the Firebase project
        TIPCARD_DOCUMENT_STORE: memory | cosmos
        TIPCARD_COSMOS_ENDPOINT: Cosmos DB endpoint URL
        TIPCARD_COSMOS_KEY: Cosmos DB key (if using key auth)
        TIPCARD_COSMOS_DATABASE: Database name (default: tipcard)
        TIPCARD_COSMOS_CONTAINER: Container name (default: documents)
        TIPCARD_COSMOS_AUTH_METHOD: Auth method (default: default_credential)
        AZURE_TENANT_ID / AZURE_CLIENT_ID / AZURE_CLIENT_SECRET: Service principal
        TIPCARD_PAYMENT_API_BASE: Payment processor base URL
        TIPCARD_PAYMENT_SECRET_KEY: Payment processor secret key
        TIPCARD_CURRENCY: ISO currency code (default: usd)
        TIPCARD_LOG_LEVEL: Logging level name (default: INFO)
        TIPCARD_LOG_FORMAT: text | json
    """

    local_path: str | None = None
    profile_collection: str = "hotels"
    demo: DemoCredentials = field(default_factory=DemoCredentials)

    # Auth provider
    auth_provider: str = "memory"
    firebase_api_key: str | None = None

    # Document store
    document_store: str = "memory"
    cosmos_endpoint: str | None = None
    cosmos_auth_method: CosmosAuthMethod = CosmosAuthMethod.DEFAULT_CREDENTIAL
    cosmos_key: str | None = None
    cosmos_database: str = "tipcard"
    cosmos_container: str = "documents"
    azure_tenant_id: str | None = None
    azure_client_id: str | None = None
    azure_client_secret: str | None = None

    # Payments
    payment_api_base: str = "https://api.stripe.com"
    payment_secret_key: str | None = None
    currency: str = "usd"

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"

    @property
    def cache_dir(self) -> Path:
        """Directory used by the file-backed local cache."""
        if self.local_path:
            return Path(self.local_path).expanduser()
        return DEFAULT_LOCAL_PATH

    @property
    def log_level_value(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO

    @classmethod
    def from_environment(cls) -> TipcardConfig:
        """Create configuration from environment variables."""
        env = os.environ
        return cls(
            local_path=env.get("TIPCARD_LOCAL_PATH"),
            profile_collection=env.get("TIPCARD_PROFILE_COLLECTION", "hotels"),
            auth_provider=env.get("TIPCARD_AUTH_PROVIDER", "memory").lower(),
            firebase_api_key=env.get("TIPCARD_FIREBASE_API_KEY"),
            document_store=env.get("TIPCARD_DOCUMENT_STORE", "memory").lower(),
            cosmos_endpoint=env.get("TIPCARD_COSMOS_ENDPOINT"),
            cosmos_auth_method=_parse_auth_method(env.get("TIPCARD_COSMOS_AUTH_METHOD")),
            cosmos_key=env.get("TIPCARD_COSMOS_KEY"),
            cosmos_database=env.get("TIPCARD_COSMOS_DATABASE", "tipcard"),
            cosmos_container=env.get("TIPCARD_COSMOS_CONTAINER", "documents"),
            azure_tenant_id=env.get("AZURE_TENANT_ID"),
            azure_client_id=env.get("AZURE_CLIENT_ID"),
            azure_client_secret=env.get("AZURE_CLIENT_SECRET"),
            payment_api_base=env.get("TIPCARD_PAYMENT_API_BASE", "https://api.stripe.com"),
            payment_secret_key=env.get("TIPCARD_PAYMENT_SECRET_KEY"),
            currency=env.get("TIPCARD_CURRENCY", "usd").lower(),
            log_level=env.get("TIPCARD_LOG_LEVEL", "INFO"),
            log_format=env.get("TIPCARD_LOG_FORMAT", "text").lower(),
        )

    @classmethod
    def from_file(cls, path: Path | None = None) -> TipcardConfig:
        """Create configuration from a YAML settings file.

        A missing or unreadable file yields the default configuration.
        """
        data = _load_yaml(path or DEFAULT_SETTINGS_PATH)
        auth = data.get("auth", {})
        documents = data.get("documents", {})
        payments = data.get("payments", {})
        log = data.get("logging", {})
        demo = data.get("demo", {})

        return cls(
            local_path=data.get("local_path"),
            profile_collection=data.get("profile_collection", "hotels"),
            demo=DemoCredentials(**demo) if demo else DemoCredentials(),
            auth_provider=str(auth.get("provider", "memory")).lower(),
            firebase_api_key=auth.get("firebase_api_key"),
            document_store=str(documents.get("store", "memory")).lower(),
            cosmos_endpoint=documents.get("cosmos_endpoint"),
            cosmos_auth_method=_parse_auth_method(documents.get("cosmos_auth_method")),
            cosmos_key=documents.get("cosmos_key"),
            cosmos_database=documents.get("cosmos_database", "tipcard"),
            cosmos_container=documents.get("cosmos_container", "documents"),
            azure_tenant_id=documents.get("azure_tenant_id"),
            azure_client_id=documents.get("azure_client_id"),
            azure_client_secret=documents.get("azure_client_secret"),
            payment_api_base=payments.get("api_base", "https://api.stripe.com"),
            payment_secret_key=payments.get("secret_key"),
            currency=str(payments.get("currency", "usd")).lower(),
            log_level=str(log.get("level", "INFO")),
            log_format=str(log.get("format", "text")).lower(),
        )


def _parse_auth_method(value: str | None) -> CosmosAuthMethod:
    if not value:
        return CosmosAuthMethod.DEFAULT_CREDENTIAL
    try:
        return CosmosAuthMethod(value.lower())
    except ValueError:
        logger.warning(f"Unknown Cosmos auth method {value!r}, using default_credential")
        return CosmosAuthMethod.DEFAULT_CREDENTIAL


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    if not path.exists():
        return {}

    try:
        content = path.read_text()
        return yaml.safe_load(content) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not read settings file {path}: {e}")
        return {}
