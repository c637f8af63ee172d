"""
Unit tests for RegistrationService domain logic.

Tests the verification pipeline with mocked ports to verify:
- Validation gate runs before any store access
- Duplicate email detection
- Verification code generation and delivery
- Pending entry lifecycle (supersede, consume, expiry)
- User creation and token issuance on verification
"""

import logging
import re
from dataclasses import replace
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from habitsphere.domain.credentials import PasswordHasher
from habitsphere.domain.exceptions import (
    EmailAlreadyRegistered,
    InvalidVerificationCode,
    NoPendingRegistration,
    NotificationFailed,
    PersistenceError,
    ValidationError,
)
from habitsphere.domain.models import NewUser, RegistrationForm, User
from habitsphere.domain.pending import PendingRegistrationStore
from habitsphere.domain.registration import VERIFICATION_SUBJECT, RegistrationService
from habitsphere.domain.tokens import TokenService


def fake_create_user(new_user: NewUser) -> User:
    return User(
        id="3f2c1a9e-0000-4000-8000-000000000001",
        email=new_user.email,
        first_name=new_user.first_name,
        last_name=new_user.last_name,
        username="pending_username",
        hashed_password=new_user.hashed_password,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def users() -> Mock:
    repo = Mock()
    repo.email_exists.return_value = False
    repo.create_user.side_effect = fake_create_user
    return repo


@pytest.fixture
def sender() -> Mock:
    return Mock()


@pytest.fixture
def service(
    users: Mock,
    sender: Mock,
    pending_store: PendingRegistrationStore,
    hasher: PasswordHasher,
    token_service: TokenService,
    clock,
) -> RegistrationService:
    return RegistrationService(
        users=users,
        pending=pending_store,
        hasher=hasher,
        tokens=token_service,
        email_sender=sender,
        clock=clock,
    )


def sent_code(sender: Mock) -> str:
    body = sender.send.call_args[0][2]
    return re.search(r"(\d{6})", body).group(1)


class TestRegisterValidation:
    """The validation gate runs before any store access."""

    def test_mismatched_email_fails_before_store_access(
        self, service: RegistrationService, users: Mock, valid_form: RegistrationForm
    ) -> None:
        form = replace(valid_form, email="a@x.com", confirm_email="b@x.com")

        with pytest.raises(ValidationError):
            service.register(form)

        users.email_exists.assert_not_called()

    def test_weak_password_fails_before_store_access(
        self, service: RegistrationService, users: Mock, valid_form: RegistrationForm
    ) -> None:
        form = replace(valid_form, password="weakpass", confirm_password="weakpass")

        with pytest.raises(ValidationError):
            service.register(form)

        users.email_exists.assert_not_called()

    def test_invalid_email_creates_no_pending_entry(
        self,
        service: RegistrationService,
        pending_store: PendingRegistrationStore,
        valid_form: RegistrationForm,
    ) -> None:
        form = replace(valid_form, email="bad", confirm_email="bad")

        with pytest.raises(ValidationError):
            service.register(form)

        assert len(pending_store) == 0


class TestRegister:
    def test_returns_normalized_email(
        self, service: RegistrationService, valid_form: RegistrationForm
    ) -> None:
        form = replace(valid_form, email=" ADA@Example.com ", confirm_email="ada@example.com")
        assert service.register(form) == "ada@example.com"

    def test_existing_email_is_conflict_and_creates_nothing(
        self,
        service: RegistrationService,
        users: Mock,
        sender: Mock,
        pending_store: PendingRegistrationStore,
        valid_form: RegistrationForm,
    ) -> None:
        users.email_exists.return_value = True

        with pytest.raises(EmailAlreadyRegistered):
            service.register(valid_form)

        assert len(pending_store) == 0
        sender.send.assert_not_called()

    def test_pending_entry_holds_hashed_password(
        self,
        service: RegistrationService,
        pending_store: PendingRegistrationStore,
        hasher: PasswordHasher,
        valid_form: RegistrationForm,
    ) -> None:
        service.register(valid_form)

        entry = pending_store.get("ada@example.com")
        assert entry is not None
        assert entry.hashed_password != valid_form.password
        assert hasher.verify(valid_form.password, entry.hashed_password)
        assert (entry.first_name, entry.last_name) == ("Ada", "Lovelace")

    def test_sends_six_digit_code(
        self, service: RegistrationService, sender: Mock, valid_form: RegistrationForm
    ) -> None:
        service.register(valid_form)

        to_address, subject, body = sender.send.call_args[0]
        assert to_address == "ada@example.com"
        assert subject == VERIFICATION_SUBJECT
        assert re.fullmatch(r"Your verification code is: \d{6}", body)

    def test_sent_code_matches_stored_code(
        self,
        service: RegistrationService,
        sender: Mock,
        pending_store: PendingRegistrationStore,
        valid_form: RegistrationForm,
    ) -> None:
        service.register(valid_form)
        assert pending_store.get("ada@example.com").verification_code == sent_code(sender)

    def test_codes_vary(
        self, service: RegistrationService, sender: Mock, valid_form: RegistrationForm
    ) -> None:
        codes = set()
        for _ in range(10):
            service.register(valid_form)
            codes.add(sent_code(sender))

        # Probability of ten identical 6-digit codes is 1/10^54
        assert len(codes) >= 2

    def test_second_registration_invalidates_first_code(
        self,
        service: RegistrationService,
        sender: Mock,
        pending_store: PendingRegistrationStore,
        valid_form: RegistrationForm,
    ) -> None:
        service.register(valid_form)
        first = sent_code(sender)
        service.register(valid_form)
        second = sent_code(sender)

        assert len(pending_store) == 1
        assert pending_store.get("ada@example.com").verification_code == second
        if first != second:
            with pytest.raises(InvalidVerificationCode):
                service.verify_email("ada@example.com", first)

    def test_notification_failure_keeps_pending_entry(
        self,
        service: RegistrationService,
        sender: Mock,
        pending_store: PendingRegistrationStore,
        valid_form: RegistrationForm,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        sender.send.side_effect = NotificationFailed("smtp down")

        with caplog.at_level(logging.ERROR), pytest.raises(NotificationFailed):
            service.register(valid_form)

        assert pending_store.get("ada@example.com") is not None
        assert "could not be delivered" in caplog.text


class TestVerifyEmail:
    def test_success_creates_user_and_token(
        self,
        service: RegistrationService,
        users: Mock,
        sender: Mock,
        token_service: TokenService,
        valid_form: RegistrationForm,
    ) -> None:
        service.register(valid_form)

        result = service.verify_email("ada@example.com", sent_code(sender))

        new_user = users.create_user.call_args[0][0]
        assert new_user.email == "ada@example.com"
        assert new_user.first_name == "Ada"
        assert new_user.hashed_password.startswith("$2")
        assert result.user.username == "pending_username"

        claims = token_service.verify(result.token)
        assert claims.user_id == result.user.id
        assert claims.email == "ada@example.com"

    def test_email_is_normalized(
        self, service: RegistrationService, sender: Mock, valid_form: RegistrationForm
    ) -> None:
        service.register(valid_form)
        result = service.verify_email("  ADA@example.com", sent_code(sender))
        assert result.user.email == "ada@example.com"

    def test_no_pending_registration(self, service: RegistrationService, users: Mock) -> None:
        with pytest.raises(NoPendingRegistration):
            service.verify_email("ghost@example.com", "123456")
        users.create_user.assert_not_called()

    def test_wrong_code_keeps_pending_state(
        self,
        service: RegistrationService,
        users: Mock,
        sender: Mock,
        valid_form: RegistrationForm,
    ) -> None:
        service.register(valid_form)
        code = sent_code(sender)
        wrong = "000000" if code != "000000" else "111111"

        with pytest.raises(InvalidVerificationCode):
            service.verify_email("ada@example.com", wrong)
        users.create_user.assert_not_called()

        assert service.verify_email("ada@example.com", code).user.email == "ada@example.com"

    def test_code_redeemable_once(
        self, service: RegistrationService, sender: Mock, valid_form: RegistrationForm
    ) -> None:
        service.register(valid_form)
        code = sent_code(sender)
        service.verify_email("ada@example.com", code)

        with pytest.raises(NoPendingRegistration):
            service.verify_email("ada@example.com", code)

    def test_expired_code_reports_no_pending(
        self, service: RegistrationService, sender: Mock, valid_form: RegistrationForm, clock
    ) -> None:
        service.register(valid_form)
        clock.advance(minutes=10)

        with pytest.raises(NoPendingRegistration):
            service.verify_email("ada@example.com", sent_code(sender))

    @pytest.mark.parametrize("email,code", [("", "123456"), ("ada@example.com", ""), (" ", " ")])
    def test_missing_fields_rejected(self, service: RegistrationService, email: str, code: str) -> None:
        with pytest.raises(ValidationError, match="required"):
            service.verify_email(email, code)

    def test_persistence_failure_consumes_pending_entry(
        self,
        service: RegistrationService,
        users: Mock,
        sender: Mock,
        pending_store: PendingRegistrationStore,
        valid_form: RegistrationForm,
    ) -> None:
        """The entry is gone even if the user write fails (at-most-once)."""
        users.create_user.side_effect = PersistenceError("Database operation failed")
        service.register(valid_form)
        code = sent_code(sender)

        with pytest.raises(PersistenceError):
            service.verify_email("ada@example.com", code)

        assert pending_store.get("ada@example.com") is None
        with pytest.raises(NoPendingRegistration):
            service.verify_email("ada@example.com", code)
