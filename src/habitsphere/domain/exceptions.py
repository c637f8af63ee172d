"""
Domain exceptions - Semantic error types for identity and habits.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
The API layer maps each family to an HTTP status.
"""


class HabitSphereError(Exception):
    """Base class for all domain errors."""

    pass


class ValidationError(HabitSphereError):
    """Malformed or inconsistent client input."""

    pass


class InvalidVerificationCode(ValidationError):
    """Supplied verification code does not match the pending one."""

    pass


class ConflictError(HabitSphereError):
    """A unique value is already taken."""

    pass


class EmailAlreadyRegistered(ConflictError):
    """A user with this email already exists."""

    pass


class UsernameTaken(ConflictError):
    """Another user already holds this username."""

    pass


class AuthError(HabitSphereError):
    """Missing, invalid or expired credentials."""

    pass


class TokenInvalid(AuthError):
    """Token signature or payload cannot be trusted."""

    pass


class TokenExpired(AuthError):
    """Token was valid but its expiry instant has passed."""

    pass


class InvalidCredentials(AuthError):
    """Email/password pair does not match a user."""

    pass


class NotFoundError(HabitSphereError):
    """Referenced entity does not exist."""

    pass


class NoPendingRegistration(NotFoundError):
    """No live pending registration exists for the email."""

    pass


class UserNotFound(NotFoundError):
    """User id does not resolve to a stored user."""

    pass


class PendingRegistrationNotFound(HabitSphereError):
    """Store-level miss: never registered, expired, or already consumed."""

    pass


class CodeMismatch(HabitSphereError):
    """Store-level mismatch between supplied and stored code."""

    pass


class PersistenceError(HabitSphereError):
    """Durable store failure. Carries no internal detail in its message."""

    retryable = False


class StoreUnavailable(PersistenceError):
    """Durable store unreachable or timed out; the caller may retry."""

    retryable = True


class NotificationFailed(HabitSphereError):
    """Outbound verification message could not be delivered."""

    pass
