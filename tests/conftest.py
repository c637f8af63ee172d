"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for TTL and token expiry tests
- Cheap bcrypt hashing (cost factor 4)
- Token service and pending store wired to the test clock
- A valid registration form
"""

from datetime import datetime, timedelta, timezone

import pytest

from habitsphere.domain.credentials import PasswordHasher
from habitsphere.domain.models import RegistrationForm
from habitsphere.domain.pending import PendingRegistrationStore
from habitsphere.domain.tokens import TokenService

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
VALID_PASSWORD = "Secret1!"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def hasher() -> PasswordHasher:
    """bcrypt hasher at the minimum cost factor to keep tests fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_service(clock: FakeClock) -> TokenService:
    return TokenService(secret=TEST_SECRET, ttl=timedelta(hours=1), clock=clock)


@pytest.fixture
def pending_store(clock: FakeClock) -> PendingRegistrationStore:
    return PendingRegistrationStore(ttl=timedelta(minutes=10), clock=clock)


@pytest.fixture
def valid_form() -> RegistrationForm:
    return RegistrationForm(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        password=VALID_PASSWORD,
        confirm_email="ada@example.com",
        confirm_password=VALID_PASSWORD,
    )
