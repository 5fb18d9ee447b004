"""
Tipcard Session

Session and local-first persistence core of the hotel tipping app.

Provides:
- SessionManager: sign-in (demo, remote, cached), registration, sign-out
- LocalFirstRecordStore: remote document reads/writes with a local cache fallback
- OfflineCache: explicit in-memory + durable cache shared by both
- Pluggable auth providers (in-memory, Firebase) and document stores
  (in-memory, Cosmos DB)
- PaymentIntentClient for guest tips

Usage:

    >>> from tipcard_session import TipcardApp, TipcardConfig
    >>> app = await TipcardApp.create(TipcardConfig.from_environment())
    >>> await app.session.register({
    ...     "hotelName": "Acme Inn",
    ...     "email": "a@b.com",
    ...     "password": "secret1",
    ... })
    True
    >>> app.session.state.to_dict()
    {'authenticated': True, 'onboarded': True, 'offline_mode': ...}
"""

from .auth import (
    AuthPersistence,
    AuthProvider,
    AuthUser,
    FirebaseAuthProvider,
    InMemoryAuthProvider,
)
from .bootstrap import TipcardApp
from .cache import (
    FileKeyValueStorage,
    KeyValueStorage,
    MemoryKeyValueStorage,
    OfflineCache,
    RecordKey,
)
from .config import CosmosAuthMethod, DemoCredentials, TipcardConfig
from .documents import DocumentStore, InMemoryDocumentStore
from .documents.cosmos import CosmosDocumentStore
from .exceptions import (
    InvalidCredentialsError,
    PaymentError,
    PersistenceWriteError,
    RecordNotFoundError,
    RemoteUnavailableError,
    TipcardError,
    ValidationError,
)
from .payments import PaymentIntentClient, TipPayment
from .records import LocalFirstRecordStore, SyncReport
from .result import ERROR_POLICIES, ErrorKind, ErrorPolicy, Result
from .session import (
    OrganizationProfile,
    RegistrationInput,
    SessionManager,
    SessionPhase,
    SessionState,
)

__all__ = [
    # Core
    "SessionManager",
    "SessionPhase",
    "SessionState",
    "LocalFirstRecordStore",
    "SyncReport",
    "TipcardApp",
    # Cache
    "OfflineCache",
    "RecordKey",
    "KeyValueStorage",
    "MemoryKeyValueStorage",
    "FileKeyValueStorage",
    # Collaborators
    "AuthProvider",
    "AuthPersistence",
    "AuthUser",
    "InMemoryAuthProvider",
    "FirebaseAuthProvider",
    "DocumentStore",
    "InMemoryDocumentStore",
    "CosmosDocumentStore",
    # Profile
    "OrganizationProfile",
    "RegistrationInput",
    # Payments
    "PaymentIntentClient",
    "TipPayment",
    # Config
    "TipcardConfig",
    "DemoCredentials",
    "CosmosAuthMethod",
    # Results
    "Result",
    "ErrorKind",
    "ErrorPolicy",
    "ERROR_POLICIES",
    # Exceptions
    "TipcardError",
    "RemoteUnavailableError",
    "InvalidCredentialsError",
    "RecordNotFoundError",
    "PersistenceWriteError",
    "ValidationError",
    "PaymentError",
]

__version__ = "0.1.0"
