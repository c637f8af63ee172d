"""
Domain layer - Identity pipeline and habit association logic.

This package contains the core business logic: credential hashing,
session tokens, the pending registration store, the email verification
state machine and habit linking. Infrastructure is reached only through
the port interfaces in ports.py.
"""

from .accounts import AccountService
from .credentials import PasswordHasher
from .exceptions import (
    AuthError,
    ConflictError,
    EmailAlreadyRegistered,
    HabitSphereError,
    NotFoundError,
    NotificationFailed,
    PersistenceError,
    ValidationError,
)
from .habits import HabitService
from .pending import PendingRegistrationStore
from .ports import EmailSender, HabitRepository, UserRepository
from .registration import RegistrationService
from .tokens import TokenService

__all__ = [
    "AccountService",
    "AuthError",
    "ConflictError",
    "EmailAlreadyRegistered",
    "EmailSender",
    "HabitRepository",
    "HabitService",
    "HabitSphereError",
    "NotFoundError",
    "NotificationFailed",
    "PasswordHasher",
    "PendingRegistrationStore",
    "PersistenceError",
    "RegistrationService",
    "TokenService",
    "UserRepository",
    "ValidationError",
]
