"""
In-memory auth provider.

Keeps accounts in a dict. Used for local development and tests; the
``reachable`` flag simulates the provider being offline.
"""

from __future__ import annotations

import uuid

from ..exceptions import InvalidCredentialsError, RemoteUnavailableError, TipcardError
from .provider import AuthProvider
from .types import AuthUser


class InMemoryAuthProvider(AuthProvider):
    """Auth provider backed by a dict of email -> (password, uid)."""

    def __init__(self, reachable: bool = True) -> None:
        super().__init__()
        self.reachable = reachable
        self.accounts: dict[str, tuple[str, str]] = {}
        self.calls = 0
        self._user: AuthUser | None = None

    @property
    def current_user(self) -> AuthUser | None:
        return self._user

    def add_account(self, email: str, password: str, uid: str | None = None) -> str:
        """Register an account directly, bypassing create_account."""
        uid = uid or uuid.uuid4().hex
        self.accounts[email] = (password, uid)
        return uid

    def _check(self) -> None:
        self.calls += 1
        if not self.reachable:
            raise RemoteUnavailableError("memory-auth")

    async def sign_in(self, email: str, password: str) -> AuthUser:
        self._check()
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise InvalidCredentialsError("Wrong email or password", email=email)
        self._user = AuthUser(uid=account[1], email=email)
        self._notify()
        return self._user

    async def create_account(self, email: str, password: str) -> AuthUser:
        self._check()
        if email in self.accounts:
            raise TipcardError("Email already in use", {"email": email})
        uid = self.add_account(email, password)
        self._user = AuthUser(uid=uid, email=email)
        self._notify()
        return self._user

    async def sign_out(self) -> None:
        self._check()
        self._user = None
        self._notify()
