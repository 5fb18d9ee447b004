"""Tests for the Firebase REST auth provider."""

from __future__ import annotations

import aiohttp
import pytest

from conftest import FakeHttpSession
from tipcard_session.auth import AuthPersistence, AuthUser, FirebaseAuthProvider
from tipcard_session.auth.firebase import PERSISTED_USER_KEY
from tipcard_session.cache import MemoryKeyValueStorage
from tipcard_session.exceptions import (
    InvalidCredentialsError,
    RemoteUnavailableError,
    TipcardError,
)

SIGN_IN_BODY = {
    "localId": "uid-1",
    "email": "a@b.com",
    "idToken": "id-token",
    "refreshToken": "refresh-token",
}


@pytest.fixture
def kv() -> MemoryKeyValueStorage:
    return MemoryKeyValueStorage()


@pytest.fixture
def provider(kv: MemoryKeyValueStorage, http_session: FakeHttpSession) -> FirebaseAuthProvider:
    return FirebaseAuthProvider(
        api_key="test-key",
        storage=kv,
        session=http_session,  # type: ignore[arg-type]
        base_url="http://localhost:9099/identitytoolkit.googleapis.com/v1",
    )


class TestSignIn:
    """Tests for FirebaseAuthProvider.sign_in."""

    async def test_success_persists_user(
        self,
        provider: FirebaseAuthProvider,
        http_session: FakeHttpSession,
        kv: MemoryKeyValueStorage,
    ) -> None:
        http_session.queue(200, SIGN_IN_BODY)

        assert provider.storage is kv
        user = await provider.sign_in("a@b.com", "secret1")

        assert user == AuthUser("uid-1", "a@b.com", "id-token", "refresh-token")
        assert provider.current_user == user
        request = http_session.requests[0]
        assert request["url"].endswith("/accounts:signInWithPassword?key=test-key")
        assert request["json"]["returnSecureToken"] is True

        restarted = FirebaseAuthProvider(api_key="test-key", storage=kv)
        assert restarted.current_user == user

    async def test_session_persistence_is_not_stored(
        self,
        provider: FirebaseAuthProvider,
        http_session: FakeHttpSession,
        kv: MemoryKeyValueStorage,
    ) -> None:
        http_session.queue(200, SIGN_IN_BODY)
        await provider.set_persistence(AuthPersistence.SESSION)

        await provider.sign_in("a@b.com", "secret1")

        assert kv.get(PERSISTED_USER_KEY) is None

    async def test_invalid_credentials(
        self, provider: FirebaseAuthProvider, http_session: FakeHttpSession
    ) -> None:
        http_session.queue(400, {"error": {"message": "INVALID_LOGIN_CREDENTIALS"}})

        with pytest.raises(InvalidCredentialsError):
            await provider.sign_in("a@b.com", "wrong")
        assert provider.current_user is None

    async def test_server_error_is_remote_unavailable(
        self, provider: FirebaseAuthProvider, http_session: FakeHttpSession
    ) -> None:
        http_session.queue(503, {"error": {"message": "UNAVAILABLE"}})

        with pytest.raises(RemoteUnavailableError):
            await provider.sign_in("a@b.com", "secret1")

    async def test_network_error_is_remote_unavailable(
        self, provider: FirebaseAuthProvider, http_session: FakeHttpSession
    ) -> None:
        http_session.queue_error(aiohttp.ClientConnectionError("no route"))

        with pytest.raises(RemoteUnavailableError):
            await provider.sign_in("a@b.com", "secret1")


class TestAccountsAndEvents:
    """Tests for account creation, sign-out and listeners."""

    async def test_create_account_notifies_listeners(
        self, provider: FirebaseAuthProvider, http_session: FakeHttpSession
    ) -> None:
        seen: list[AuthUser | None] = []

        async def listener(user: AuthUser | None) -> None:
            seen.append(user)

        provider.on_auth_state_changed(listener)
        http_session.queue(200, SIGN_IN_BODY)
        await provider.create_account("a@b.com", "secret1")
        await provider.flush_events()

        assert http_session.requests[0]["url"].endswith("/accounts:signUp?key=test-key")
        assert [u.uid if u else None for u in seen] == [None, "uid-1"]

    async def test_sign_out_clears_persisted_user(
        self,
        provider: FirebaseAuthProvider,
        http_session: FakeHttpSession,
        kv: MemoryKeyValueStorage,
    ) -> None:
        http_session.queue(200, SIGN_IN_BODY)
        await provider.sign_in("a@b.com", "secret1")

        await provider.sign_out()
        await provider.flush_events()

        assert provider.current_user is None
        assert kv.get(PERSISTED_USER_KEY) is None

    async def test_failing_listener_does_not_break_others(
        self, provider: FirebaseAuthProvider
    ) -> None:
        seen: list[AuthUser | None] = []

        async def broken(user: AuthUser | None) -> None:
            raise RuntimeError("listener bug")

        async def listener(user: AuthUser | None) -> None:
            seen.append(user)

        provider.on_auth_state_changed(broken)
        provider.on_auth_state_changed(listener)
        await provider.flush_events()

        assert seen == [None]

    def test_api_key_required(self) -> None:
        with pytest.raises(TipcardError):
            FirebaseAuthProvider(api_key="")
