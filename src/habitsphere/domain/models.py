"""
Domain entities - plain dataclasses shared by services and adapters.
"""

from dataclasses import dataclass
from datetime import datetime

# Username every user holds until they pick one.
PLACEHOLDER_USERNAME = "pending_username"


@dataclass(frozen=True)
class PendingRegistration:
    """Unconfirmed signup awaiting code verification. Never persisted."""

    email: str
    first_name: str
    last_name: str
    hashed_password: str
    verification_code: str
    created_at: datetime


@dataclass(frozen=True)
class NewUser:
    """Fields required to create a user node."""

    email: str
    first_name: str
    last_name: str
    hashed_password: str


@dataclass(frozen=True)
class User:
    """Durable user node."""

    id: str
    email: str
    first_name: str
    last_name: str
    username: str
    hashed_password: str
    created_at: datetime


@dataclass(frozen=True)
class Habit:
    """Pre-existing habit node, referenced by name."""

    name: str
    description: str | None = None


@dataclass(frozen=True)
class SessionClaims:
    """Verified contents of a session token."""

    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class RegistrationForm:
    """Raw registration input as submitted by the client."""

    first_name: str
    last_name: str
    email: str
    password: str
    confirm_email: str
    confirm_password: str


@dataclass(frozen=True)
class VerifiedRegistration:
    """Outcome of a successful code redemption."""

    user: User
    token: str


@dataclass(frozen=True)
class AuthenticatedUser:
    """Outcome of a successful login."""

    user: User
    token: str
