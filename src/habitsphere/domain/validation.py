"""
Input validation for registration and profile updates.

All checks here run before any store access and raise ValidationError
with a message that is safe to show to the client.
"""

import re

from email_validator import EmailNotValidError, validate_email

from .credentials import MAX_PASSWORD_BYTES
from .exceptions import ValidationError
from .models import RegistrationForm

# At least one lowercase, uppercase, digit and symbol; only those classes allowed.
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[@$!%*?&])[A-Za-z0-9@$!%*?&]{8,}$")
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{8,}$")

PASSWORD_POLICY_MESSAGE = (
    "Password must be at least 8 characters, include uppercase, lowercase, numbers, and symbols"
)


def normalize_email(email: str) -> str:
    """Strip whitespace and lowercase."""
    return email.strip().lower()


def check_email(email: str) -> str:
    """
    Validate email syntax and return its normalized form.

    Deliverability (DNS) is not checked.
    """
    candidate = normalize_email(email)
    try:
        validate_email(candidate, check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Invalid email address") from None
    return candidate


def check_password_strength(password: str) -> None:
    if not PASSWORD_PATTERN.fullmatch(password):
        raise ValidationError(PASSWORD_POLICY_MESSAGE)
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")


def validate_registration(form: RegistrationForm) -> RegistrationForm:
    """
    Run the registration validation gate.

    Returns:
        A copy of the form with normalized email fields and trimmed names

    Raises:
        ValidationError: On the first failing check
    """
    email = check_email(form.email)
    if email != normalize_email(form.confirm_email):
        raise ValidationError("Emails do not match")
    if form.password != form.confirm_password:
        raise ValidationError("Passwords do not match")
    check_password_strength(form.password)

    first_name = form.first_name.strip()
    last_name = form.last_name.strip()
    if not first_name or not last_name:
        raise ValidationError("First and last name are required")

    return RegistrationForm(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password=form.password,
        confirm_email=email,
        confirm_password=form.confirm_password,
    )


def validate_username(username: str) -> str:
    """Usernames are at least 8 characters of letters, digits, '_' or '-'."""
    if not username or not USERNAME_PATTERN.fullmatch(username):
        raise ValidationError("Invalid username.")
    return username
