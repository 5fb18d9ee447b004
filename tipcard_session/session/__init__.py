"""
Session management: state variant, hotel profile records, and the
SessionManager that ties auth, records and the offline cache together.
"""

from .manager import (
    HOTEL_DETAILS_KEY,
    IS_AUTHENTICATED_KEY,
    ONBOARDING_COMPLETE_KEY,
    SIGN_IN_ROUTE,
    SessionManager,
)
from .profile import (
    OrganizationProfile,
    RegistrationInput,
    Room,
    StaffMember,
    generate_org_id,
    strip_credentials,
)
from .state import SessionPhase, SessionState

__all__ = [
    "SessionManager",
    "SessionPhase",
    "SessionState",
    "OrganizationProfile",
    "RegistrationInput",
    "Room",
    "StaffMember",
    "generate_org_id",
    "strip_credentials",
    "HOTEL_DETAILS_KEY",
    "IS_AUTHENTICATED_KEY",
    "ONBOARDING_COMPLETE_KEY",
    "SIGN_IN_ROUTE",
]
