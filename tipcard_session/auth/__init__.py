"""
Auth providers for the session core.

Provides the abstract provider contract, an in-memory provider for
development and tests, and a Firebase REST provider.
"""

from .firebase import FirebaseAuthProvider
from .memory import InMemoryAuthProvider
from .provider import AuthProvider
from .types import AuthPersistence, AuthStateCallback, AuthUser, Unsubscribe

__all__ = [
    # Types
    "AuthPersistence",
    "AuthStateCallback",
    "AuthUser",
    "Unsubscribe",
    # Providers
    "AuthProvider",
    "InMemoryAuthProvider",
    "FirebaseAuthProvider",
]
