"""
Auth provider abstract interface.

Defines the contract that remote auth providers must implement, plus the
listener bookkeeping they share.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

from .types import AuthPersistence, AuthStateCallback, AuthUser, Unsubscribe

logger = logging.getLogger(__name__)


class AuthProvider(ABC):
    """Abstract remote auth provider.

    Listeners registered with ``on_auth_state_changed`` receive the current
    user once after registering and again on every sign-in or sign-out.
    Deliveries run as tasks on the running event loop, never inline.
    """

    def __init__(self) -> None:
        self.persistence = AuthPersistence.LOCAL
        self._listeners: list[AuthStateCallback] = []
        self._pending: set[asyncio.Task[None]] = set()

    @property
    @abstractmethod
    def current_user(self) -> AuthUser | None:
        """The signed-in user, if any."""
        ...

    async def set_persistence(self, mode: AuthPersistence) -> None:
        """Set how long a sign-in is remembered."""
        self.persistence = mode

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthUser:
        """Sign in with email and password.

        Raises:
            InvalidCredentialsError: If the provider rejects the credentials
            RemoteUnavailableError: If the provider cannot be reached
        """
        ...

    @abstractmethod
    async def create_account(self, email: str, password: str) -> AuthUser:
        """Create an account and sign it in.

        Raises:
            RemoteUnavailableError: If the provider cannot be reached or refuses
        """
        ...

    @abstractmethod
    async def sign_out(self) -> None:
        """Sign out the current user."""
        ...

    def on_auth_state_changed(self, callback: AuthStateCallback) -> Unsubscribe:
        """Register a listener and deliver the current user to it."""
        self._listeners.append(callback)
        self._dispatch(callback, self.current_user)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def flush_events(self) -> None:
        """Wait until every scheduled listener delivery has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _notify(self) -> None:
        user = self.current_user
        for callback in list(self._listeners):
            self._dispatch(callback, user)

    def _dispatch(self, callback: AuthStateCallback, user: AuthUser | None) -> None:
        task = asyncio.get_running_loop().create_task(self._deliver(callback, user))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, callback: AuthStateCallback, user: AuthUser | None) -> None:
        try:
            await callback(user)
        except Exception:
            logger.exception("Auth state listener failed")
