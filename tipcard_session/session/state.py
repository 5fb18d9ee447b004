"""
Session state variant.

The session is always in exactly one phase. Each phase admits only the
field combinations that make sense for it; anything else is rejected
when the state is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SessionPhase(Enum):
    """Phase of the session state machine."""

    LOADING = "loading"  # Waiting for the first auth event or a cache hit
    SIGNED_OUT = "signed_out"
    AUTHENTICATED_NO_PROFILE = "authenticated_no_profile"
    AUTHENTICATED_WITH_PROFILE = "authenticated_with_profile"


_AUTHENTICATED = {SessionPhase.AUTHENTICATED_NO_PROFILE, SessionPhase.AUTHENTICATED_WITH_PROFILE}


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of the session.

    Attributes:
        phase: Current phase
        offline_mode: Identity established without a remote profile confirmation
        profile: The hotel profile, present only when onboarded
    """

    phase: SessionPhase
    offline_mode: bool = False
    profile: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        has_profile = self.profile is not None
        if has_profile != (self.phase == SessionPhase.AUTHENTICATED_WITH_PROFILE):
            raise ValueError(f"Profile must be set exactly in the onboarded phase, got {self.phase}")
        if self.offline_mode and self.phase not in _AUTHENTICATED:
            raise ValueError(f"Offline mode requires an authenticated phase, got {self.phase}")
        if self.phase == SessionPhase.AUTHENTICATED_NO_PROFILE and not self.offline_mode:
            raise ValueError("Authenticated sessions without a profile are always offline")

    @classmethod
    def loading(cls) -> SessionState:
        return cls(SessionPhase.LOADING)

    @classmethod
    def signed_out(cls) -> SessionState:
        return cls(SessionPhase.SIGNED_OUT)

    @classmethod
    def authenticated_no_profile(cls) -> SessionState:
        return cls(SessionPhase.AUTHENTICATED_NO_PROFILE, offline_mode=True)

    @classmethod
    def authenticated_with_profile(
        cls, profile: dict[str, Any], offline_mode: bool = False
    ) -> SessionState:
        return cls(SessionPhase.AUTHENTICATED_WITH_PROFILE, offline_mode, dict(profile))

    @property
    def is_loading(self) -> bool:
        return self.phase == SessionPhase.LOADING

    @property
    def authenticated(self) -> bool:
        return self.phase in _AUTHENTICATED

    @property
    def onboarded(self) -> bool:
        return self.phase == SessionPhase.AUTHENTICATED_WITH_PROFILE

    def to_dict(self) -> dict[str, bool]:
        return {
            "authenticated": self.authenticated,
            "onboarded": self.onboarded,
            "offline_mode": self.offline_mode,
        }
