"""
Registration domain service - email verification state machine.

This module contains the two-phase signup flow: a registration request
parks the user's data in the pending store and emails a one-time code;
redeeming that code promotes the data to a durable user node and issues
a session token.

Verification State Machine (per email)
======================================

States:
- NO_REGISTRATION: Nothing pending and no user exists
- PENDING_VERIFICATION: Data parked in the pending store, code outstanding
- VERIFIED: Terminal; a user node exists for the email

Transitions:
    NO_REGISTRATION      -> PENDING_VERIFICATION  (register)
    PENDING_VERIFICATION -> PENDING_VERIFICATION  (register again: new code
                                                   supersedes the old one)
    PENDING_VERIFICATION -> PENDING_VERIFICATION  (verify with wrong code)
    PENDING_VERIFICATION -> VERIFIED              (verify with right code)
    PENDING_VERIFICATION -> NO_REGISTRATION       (TTL elapsed)

Note: the pending entry is consumed before the user node is written. If
that write fails the user has to register again; the code can never be
redeemed twice.
"""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from .credentials import PasswordHasher
from .exceptions import (
    CodeMismatch,
    EmailAlreadyRegistered,
    InvalidVerificationCode,
    NoPendingRegistration,
    NotificationFailed,
    PendingRegistrationNotFound,
    ValidationError,
)
from .models import NewUser, PendingRegistration, RegistrationForm, VerifiedRegistration
from .pending import PendingRegistrationStore
from .ports import EmailSender, UserRepository
from .tokens import TokenService, utcnow
from .validation import normalize_email, validate_registration

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "HabitSphere Email Verification"
CODE_LENGTH = 6


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates the registration flow: validation, duplicate check,
    password hashing, code generation, pending storage and delivery,
    then code redemption and user creation.
    """

    users: UserRepository
    pending: PendingRegistrationStore
    hasher: PasswordHasher
    tokens: TokenService
    email_sender: EmailSender
    clock: Callable[[], datetime] = field(default=utcnow)

    def register(self, form: RegistrationForm) -> str:
        """
        Start a registration and send a verification code.

        Args:
            form: Raw registration input

        Returns:
            Normalized email address

        Raises:
            ValidationError: If the input fails the validation gate
            EmailAlreadyRegistered: If a user with this email exists
            NotificationFailed: If the code could not be sent; the pending
                entry is kept
        """
        form = validate_registration(form)
        email = form.email

        if self.users.email_exists(email):
            raise EmailAlreadyRegistered(email)

        code = self._generate_verification_code()
        self.pending.put(
            PendingRegistration(
                email=email,
                first_name=form.first_name,
                last_name=form.last_name,
                hashed_password=self.hasher.hash(form.password),
                verification_code=code,
                created_at=self.clock(),
            )
        )
        logger.info("Pending registration stored for %s", email)

        self._send_code(email, code)
        return email

    def verify_email(self, email: str, code: str) -> VerifiedRegistration:
        """
        Redeem a verification code and create the user.

        Args:
            email: Email the code was sent to
            code: Code from the verification message

        Returns:
            The created user and a session token for it

        Raises:
            ValidationError: If email or code is missing
            NoPendingRegistration: If nothing is pending for the email
            InvalidVerificationCode: If the code does not match
            EmailAlreadyRegistered: If a user appeared for the email meanwhile
            PersistenceError: If the user could not be written
        """
        if not email or not email.strip() or not code or not code.strip():
            raise ValidationError("Email and verification code are required")
        email = normalize_email(email)

        try:
            registration = self.pending.consume(email, code.strip())
        except PendingRegistrationNotFound:
            raise NoPendingRegistration("No verification code found for this email") from None
        except CodeMismatch:
            logger.warning("Verification code mismatch for %s", email)
            raise InvalidVerificationCode("Invalid verification code") from None

        user = self.users.create_user(
            NewUser(
                email=registration.email,
                first_name=registration.first_name,
                last_name=registration.last_name,
                hashed_password=registration.hashed_password,
            )
        )
        logger.info("User %s created for %s", user.id, user.email)

        token = self.tokens.issue_session(user.id, user.email)
        return VerifiedRegistration(user=user, token=token)

    def _send_code(self, email: str, code: str) -> None:
        body = f"Your verification code is: {code}"
        try:
            self.email_sender.send(email, VERIFICATION_SUBJECT, body)
        except NotificationFailed:
            logger.error("Verification email to %s could not be delivered", email)
            raise

    def _generate_verification_code(self) -> str:
        """
        Generate a cryptographically secure 6-digit verification code.

        Returns string to preserve leading zeros.
        """
        return "".join(secrets.choice("0123456789") for _ in range(CODE_LENGTH))
