"""
Organization profile records.

The hotel profile is stored as a plain JSON object with camelCase keys so
the web client and this package read the same documents. The dataclasses
here give typed access and build new profiles at registration.
"""

from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from ..exceptions import ValidationError

ORG_ID_PREFIX = "HTL-"
ORG_ID_LENGTH = 6
MIN_PASSWORD_LENGTH = 6

# Fields that authenticate the account and must never be persisted
CREDENTIAL_FIELDS = ("password", "confirmPassword")

_ORG_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_org_id() -> str:
    """Generate a human-readable organization id such as ``HTL-7QX2MA``.

    Not suitable as a secret: ids are drawn from the non-cryptographic
    ``random`` module.
    """
    return ORG_ID_PREFIX + "".join(random.choices(_ORG_ID_ALPHABET, k=ORG_ID_LENGTH))


def generate_local_id() -> str:
    """Id for a profile created while the auth provider was unreachable."""
    return str(int(time.time() * 1000))


def strip_credentials(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of data without credential-only fields."""
    return {k: v for k, v in data.items() if k not in CREDENTIAL_FIELDS}


@dataclass
class StaffMember:
    """A staff member who can receive tips."""

    id: str
    name: str
    role: str
    email: str = ""
    phone: str = ""
    image: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "email": self.email,
            "phone": self.phone,
        }
        if self.image is not None:
            data["image"] = self.image
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StaffMember:
        return cls(
            id=data["id"],
            name=data["name"],
            role=data.get("role", ""),
            email=data.get("email", ""),
            phone=data.get("phone", ""),
            image=data.get("image"),
        )


@dataclass
class Room:
    """A guest room with the staff assigned to it."""

    id: str
    number: str
    floor: str = ""
    type: str = ""
    assigned_staff: list[StaffMember] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "number": self.number,
            "floor": self.floor,
            "type": self.type,
            "assignedStaff": [s.to_dict() for s in self.assigned_staff],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Room:
        return cls(
            id=data["id"],
            number=str(data["number"]),
            floor=str(data.get("floor", "")),
            type=data.get("type", ""),
            assigned_staff=[StaffMember.from_dict(s) for s in data.get("assignedStaff", [])],
        )


@dataclass
class RegistrationInput:
    """Data submitted by the registration form."""

    hotel_name: str
    email: str
    password: str
    confirm_password: str | None = None
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    _PROFILE_KEYS = {"hotelName", "email", "phone", "address", "city", "state", "zipCode"}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RegistrationInput:
        return cls(
            hotel_name=str(data.get("hotelName", "")),
            email=str(data.get("email", "")),
            password=str(data.get("password", "")),
            confirm_password=data.get("confirmPassword"),
            phone=str(data.get("phone", "")),
            address=str(data.get("address", "")),
            city=str(data.get("city", "")),
            state=str(data.get("state", "")),
            zip_code=str(data.get("zipCode", "")),
            extra={
                k: v for k, v in strip_credentials(data).items() if k not in cls._PROFILE_KEYS
            },
        )

    def validate(self) -> None:
        """Check the form rules.

        Raises:
            ValidationError: On the first failing field
        """
        if not self.hotel_name.strip():
            raise ValidationError("hotelName", "is required")
        if not self.email.strip() or "@" not in self.email:
            raise ValidationError("email", "must be a valid email address", self.email)
        if len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                "password", f"must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValidationError("confirmPassword", "passwords do not match")

    def profile_fields(self) -> dict[str, Any]:
        """Submitted fields as stored on the profile, credentials excluded."""
        return {
            **self.extra,
            "hotelName": self.hotel_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
        }


@dataclass
class OrganizationProfile:
    """The onboarded hotel's configuration record."""

    id: str
    hotel_name: str
    email: str
    org_id: str
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    status: str = "active"
    subscription: str = "free"
    created_at: str = ""
    updated_at: str = ""
    rooms: list[Room] = field(default_factory=list)
    staff: list[StaffMember] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def new(cls, registration: RegistrationInput, profile_id: str) -> OrganizationProfile:
        """Build the profile for a fresh registration."""
        now = datetime.now(UTC).isoformat()
        return cls.from_dict(
            {
                **registration.profile_fields(),
                "id": profile_id,
                "orgId": generate_org_id(),
                "createdAt": now,
                "updatedAt": now,
            }
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored document shape."""
        return {
            **self.extra,
            "id": self.id,
            "hotelName": self.hotel_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
            "orgId": self.org_id,
            "status": self.status,
            "subscription": self.subscription,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "rooms": [r.to_dict() for r in self.rooms],
            "staff": [s.to_dict() for s in self.staff],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OrganizationProfile:
        known = {
            "id", "uid", "hotelName", "email", "phone", "address", "city", "state",
            "zipCode", "orgId", "status", "subscription", "createdAt", "updatedAt",
            "rooms", "staff",
        }
        return cls(
            id=str(data.get("id") or data.get("uid") or ""),
            hotel_name=data.get("hotelName", ""),
            email=data.get("email", ""),
            org_id=data.get("orgId", ""),
            phone=data.get("phone", ""),
            address=data.get("address", ""),
            city=data.get("city", ""),
            state=data.get("state", ""),
            zip_code=data.get("zipCode", ""),
            status=data.get("status", "active"),
            subscription=data.get("subscription", "free"),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
            rooms=[Room.from_dict(r) for r in data.get("rooms", [])],
            staff=[StaffMember.from_dict(s) for s in data.get("staff", [])],
            extra={k: v for k, v in data.items() if k not in known},
        )
