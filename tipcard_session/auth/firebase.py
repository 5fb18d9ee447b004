"""
Firebase Authentication provider.

Talks to the Identity Toolkit REST API with ``aiohttp``. With LOCAL
persistence the signed-in user is kept in a KeyValueStorage so the next
process start delivers it to auth-state listeners without a network call.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import aiohttp

from ..cache.storage import KeyValueStorage, MemoryKeyValueStorage
from ..exceptions import (
    InvalidCredentialsError,
    PersistenceWriteError,
    RemoteUnavailableError,
    TipcardError,
)
from .provider import AuthProvider
from .types import AuthPersistence, AuthUser

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
PERSISTED_USER_KEY = "firebase:authUser"

# Error codes the REST API returns for bad email/password pairs
CREDENTIAL_ERRORS = {
    "EMAIL_NOT_FOUND",
    "INVALID_PASSWORD",
    "INVALID_LOGIN_CREDENTIALS",
    "INVALID_EMAIL",
    "USER_DISABLED",
}


class FirebaseAuthProvider(AuthProvider):
    """Email/password auth against Firebase.

    Example:
        >>> provider = FirebaseAuthProvider(api_key="AIza...")
        >>> user = await provider.sign_in("manager@hotel.com", "secret1")
        >>> await provider.close()
    """

    def __init__(
        self,
        api_key: str,
        storage: KeyValueStorage | None = None,
        session: aiohttp.ClientSession | None = None,
        base_url: str = IDENTITY_TOOLKIT_URL,
        timeout: float = 10.0,
    ) -> None:
        """Initialize the provider.

        Args:
            api_key: Web API key of the Firebase project
            storage: Where LOCAL persistence keeps the signed-in user
            session: Optional shared HTTP session (created lazily otherwise)
            base_url: Identity Toolkit base URL (overridable for the emulator)
            timeout: Total request timeout in seconds
        """
        super().__init__()
        if not api_key:
            raise TipcardError("Firebase API key is required")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.storage = storage if storage is not None else MemoryKeyValueStorage()
        self._session = session
        self._owns_session = session is None
        self._user = self._load_persisted_user()

    @property
    def current_user(self) -> AuthUser | None:
        return self._user

    async def sign_in(self, email: str, password: str) -> AuthUser:
        data = await self._post(
            "accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
            email=email,
        )
        return self._signed_in(data)

    async def create_account(self, email: str, password: str) -> AuthUser:
        data = await self._post(
            "accounts:signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._signed_in(data)

    async def sign_out(self) -> None:
        # Tokens are stateless on the server side; forgetting them is enough
        self._user = None
        self._persist(None)
        self._notify()

    async def close(self) -> None:
        """Close the HTTP session if this provider created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    def _signed_in(self, data: dict[str, Any]) -> AuthUser:
        self._user = AuthUser(
            uid=data["localId"],
            email=data.get("email"),
            id_token=data.get("idToken"),
            refresh_token=data.get("refreshToken"),
        )
        self._persist(self._user)
        self._notify()
        return self._user

    async def _post(
        self, endpoint: str, payload: dict[str, Any], email: str | None = None
    ) -> dict[str, Any]:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )

        url = f"{self.base_url}/{endpoint}?key={self.api_key}"
        try:
            async with self._session.post(url, json=payload) as response:
                body = await response.json(content_type=None)
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError, json.JSONDecodeError) as e:
            raise RemoteUnavailableError("firebase-auth", e) from e

        if status == 200:
            return body

        code = str((body or {}).get("error", {}).get("message", "")).split(" ")[0]
        if code in CREDENTIAL_ERRORS:
            raise InvalidCredentialsError(f"Firebase rejected credentials: {code}", email=email)
        raise RemoteUnavailableError(
            "firebase-auth", RuntimeError(f"HTTP {status}: {code or 'unknown error'}")
        )

    def _load_persisted_user(self) -> AuthUser | None:
        raw = self.storage.get(PERSISTED_USER_KEY)
        if not raw:
            return None
        try:
            return AuthUser.from_dict(json.loads(raw))
        except (KeyError, TypeError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable persisted auth user: {e}")
            return None

    def _persist(self, user: AuthUser | None) -> None:
        try:
            if user is None or self.persistence != AuthPersistence.LOCAL:
                self.storage.delete(PERSISTED_USER_KEY)
            else:
                self.storage.set(PERSISTED_USER_KEY, json.dumps(user.to_dict()))
        except PersistenceWriteError as e:
            logger.warning(f"Auth persistence write failed: {e}")
