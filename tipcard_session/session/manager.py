"""
Session manager.

Owns the authentication and onboarding state of the hotel manager using
the app. Every operation degrades to the local cache when the remote auth
provider or document store is unavailable; only an exhausted sign-in or
invalid registration input reaches the caller as an exception.

State machine:
    LOADING -> SIGNED_OUT | AUTHENTICATED_NO_PROFILE | AUTHENTICATED_WITH_PROFILE

Cached session values (same names the web client uses):
    isAuthenticated, onboardingComplete, hotelDetails
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..auth import AuthPersistence, AuthProvider, AuthUser, Unsubscribe
from ..cache import OfflineCache, RecordKey
from ..config import DemoCredentials
from ..exceptions import InvalidCredentialsError
from ..records import LocalFirstRecordStore
from ..result import capture
from .profile import OrganizationProfile, RegistrationInput, generate_local_id
from .state import SessionPhase, SessionState

logger = logging.getLogger(__name__)

IS_AUTHENTICATED_KEY = "isAuthenticated"
ONBOARDING_COMPLETE_KEY = "onboardingComplete"
HOTEL_DETAILS_KEY = "hotelDetails"

SIGN_IN_ROUTE = "/signin"

SessionListener = Callable[[SessionState], None]
Navigator = Callable[[str], None]


class SessionManager:
    """Authentication and onboarding state for one app instance.

    Example:
        >>> manager = SessionManager(auth, records, cache, navigate=router.go)
        >>> await manager.start()
        >>> await manager.sign_in("demo@hotel.com", "demo123")
        True
        >>> manager.state.to_dict()
        {'authenticated': True, 'onboarded': True, 'offline_mode': True}
    """

    def __init__(
        self,
        auth: AuthProvider,
        records: LocalFirstRecordStore,
        cache: OfflineCache,
        profile_collection: str = "hotels",
        demo: DemoCredentials | None = None,
        navigate: Navigator | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            auth: Remote auth provider
            records: Record store used for profile reads and writes
            cache: Offline cache shared with the record store
            profile_collection: Collection holding hotel profiles
            demo: Demo credential pair accepted without any remote call
            navigate: Called with a route when the UI must move (e.g. after sign-out)
        """
        self.auth = auth
        self.records = records
        self.cache = cache
        self.profile_collection = profile_collection
        self.demo = demo or DemoCredentials()
        self.navigate = navigate

        self._state = SessionState.loading()
        self._listeners: list[SessionListener] = []
        self._unsubscribe: Unsubscribe | None = None
        self._first_event_seen = False
        self._closed = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def profile(self) -> dict[str, Any] | None:
        return dict(self._state.profile) if self._state.profile is not None else None

    @property
    def demo_credentials(self) -> DemoCredentials:
        """Credential pair the sign-in screen may offer as a shortcut."""
        return self.demo

    def subscribe(self, listener: SessionListener) -> Unsubscribe:
        """Register a listener called with every new state."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def start(self) -> None:
        """Subscribe to auth changes and restore any cached session.

        The cache check runs without awaiting anything, so a cached
        session is in place before the first auth event is delivered.
        """
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self.auth.on_auth_state_changed(self._on_auth_state_changed)

        cached_profile = self._cached_details()
        if cached_profile is not None:
            self._commit_authenticated(cached_profile, offline_mode=True)
        elif self.cache.get_value(IS_AUTHENTICATED_KEY) is True:
            self._set_state(SessionState.authenticated_no_profile())

    async def close(self) -> None:
        """Stop listening to the auth provider. No state changes after this."""
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._listeners.clear()

    async def sign_in(self, email: str, password: str) -> bool:
        """Sign in, trying demo credentials, the remote provider, then the cache.

        Raises:
            InvalidCredentialsError: If every path fails
        """
        if email == self.demo.email and password == self.demo.password:
            self._commit_authenticated(self._demo_profile(), offline_mode=True)
            return True

        await capture("set auth persistence", self.auth.set_persistence(AuthPersistence.LOCAL))
        signed_in = await capture("remote sign in", self.auth.sign_in(email, password))
        if signed_in.ok:
            fetched = await self.records.fetch_remote(self.profile_collection, signed_in.value.uid)
            if fetched.ok:
                self._commit_authenticated(fetched.value, offline_mode=False)
                return True

        cached = self._cached_details()
        if cached is not None and cached.get("email") == email:
            logger.info("Signed in from cached profile")
            self._commit_authenticated(cached, offline_mode=True)
            return True

        logger.error(f"Sign in error: no sign-in path succeeded for {email}")
        # A rejection by the provider is reported as is
        signed_in.raise_if_surfaced()
        raise InvalidCredentialsError(email=email)

    async def register(self, data: RegistrationInput | dict[str, Any]) -> bool:
        """Register a hotel and sign it in.

        The profile is always committed locally. ``True`` means the
        registration was accepted and stored on this device; it was also
        stored remotely only if ``state.offline_mode`` is False afterwards.

        Raises:
            ValidationError: If the input is invalid
        """
        registration = (
            data if isinstance(data, RegistrationInput) else RegistrationInput.from_dict(data)
        )
        registration.validate()

        profile_id = generate_local_id()
        await capture("set auth persistence", self.auth.set_persistence(AuthPersistence.LOCAL))
        account = await capture(
            "create account", self.auth.create_account(registration.email, registration.password)
        )
        if account.ok and account.value is not None:
            profile_id = account.value.uid

        profile = OrganizationProfile.new(registration, profile_id).to_dict()
        saved = await self.records.save(self.profile_collection, profile_id, profile)
        remote_ok = account.ok and saved
        if not remote_ok:
            logger.warning("Remote registration failed, profile stored offline")

        self._commit_authenticated(profile, offline_mode=not remote_ok)
        return True

    async def reset_onboarding(self) -> None:
        """Sign out and return to the sign-in screen.

        Cached records are kept; only the session values are cleared.
        """
        if self.auth.current_user is not None:
            await capture("sign out", self.auth.sign_out())

        self._commit_signed_out()
        if self.navigate is not None:
            self.navigate(SIGN_IN_ROUTE)

    async def _on_auth_state_changed(self, user: AuthUser | None) -> None:
        if self._closed:
            return

        first_event = not self._first_event_seen
        self._first_event_seen = True

        if user is None:
            if first_event and not self._state.is_loading:
                # Stale: a cache hit, sign-in or registration already resolved LOADING
                return
            self._commit_signed_out()
            return

        fetched = await self.records.fetch_remote(self.profile_collection, user.uid)
        if self._closed:
            return
        if fetched.ok:
            self._commit_authenticated(fetched.value, offline_mode=False)
            return

        # Offline: onboarding is decided by what the cache holds for this user
        logger.warning("Remote profile unavailable, falling back to offline mode")
        cached = self._cached_profile(user.uid)
        if cached is not None:
            self._commit_authenticated(cached, offline_mode=True)
        else:
            self.cache.set_value(IS_AUTHENTICATED_KEY, True)
            self._set_state(SessionState.authenticated_no_profile())

    def _cached_profile(self, uid: str) -> dict[str, Any] | None:
        cached = self.cache.get(RecordKey(self.profile_collection, uid))
        if isinstance(cached, dict) and cached:
            return cached
        details = self._cached_details()
        if details is not None and str(details.get("id")) == uid:
            return details
        return None

    def _cached_details(self) -> dict[str, Any] | None:
        details = self.cache.get_value(HOTEL_DETAILS_KEY)
        if isinstance(details, dict) and details:
            return details
        if details is not None and not isinstance(details, dict):
            logger.warning(f"Ignoring malformed cached {HOTEL_DETAILS_KEY}: {details!r}")
        return None

    def _commit_authenticated(self, profile: dict[str, Any], offline_mode: bool) -> None:
        self.cache.set_value(IS_AUTHENTICATED_KEY, True)
        self.cache.set_value(ONBOARDING_COMPLETE_KEY, True)
        self.cache.set_value(HOTEL_DETAILS_KEY, profile)
        self._set_state(SessionState.authenticated_with_profile(profile, offline_mode))

    def _commit_signed_out(self) -> None:
        self.cache.set_value(IS_AUTHENTICATED_KEY, False)
        self.cache.set_value(ONBOARDING_COMPLETE_KEY, False)
        self.cache.set_value(HOTEL_DETAILS_KEY, None)
        self._set_state(SessionState.signed_out())

    def _set_state(self, state: SessionState) -> None:
        if self._closed:
            return
        previous = self._state.phase
        self._state = state
        if previous != state.phase:
            logger.debug(f"Session {previous.value} -> {state.phase.value}")
        for listener in list(self._listeners):
            listener(state)

    def _demo_profile(self) -> dict[str, Any]:
        return {
            "id": f"demo-{self.demo.org_id.lower()}",
            "hotelName": "Demo Hotel",
            "email": self.demo.email,
            "phone": "+1 234 567 8900",
            "address": "123 Demo Street",
            "city": "Demo City",
            "state": "DS",
            "zipCode": "12345",
            "orgId": self.demo.org_id,
            "status": "active",
            "rooms": [],
            "staff": [],
        }
