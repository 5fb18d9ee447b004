"""
Auth types.

Defines the signed-in user as seen by the session core and the
persistence modes an auth provider can run in.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class AuthPersistence(Enum):
    """How long the provider remembers a signed-in user."""

    NONE = "none"  # Forget on every sign-in call
    SESSION = "session"  # Until the process exits
    LOCAL = "local"  # Across restarts


@dataclass
class AuthUser:
    """Identity returned by the remote auth provider."""

    uid: str
    email: str | None = None
    id_token: str | None = None
    refresh_token: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "uid": self.uid,
            "email": self.email,
            "id_token": self.id_token,
            "refresh_token": self.refresh_token,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthUser":
        """Deserialize from dictionary."""
        return cls(
            uid=data["uid"],
            email=data.get("email"),
            id_token=data.get("id_token"),
            refresh_token=data.get("refresh_token"),
        )


# Called with the new user, or None after sign-out
AuthStateCallback = Callable[[AuthUser | None], Awaitable[None]]

Unsubscribe = Callable[[], None]
