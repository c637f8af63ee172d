"""
Account domain service - login, logout and username updates for verified users.
"""

import logging
from dataclasses import dataclass

from .credentials import PasswordHasher
from .exceptions import InvalidCredentials, UsernameTaken, UserNotFound
from .models import AuthenticatedUser, SessionClaims
from .ports import UserRepository
from .tokens import TokenService
from .validation import normalize_email, validate_username

logger = logging.getLogger(__name__)


@dataclass
class AccountService:
    """Operations on existing users."""

    users: UserRepository
    hasher: PasswordHasher
    tokens: TokenService

    def login(self, email: str, password: str) -> AuthenticatedUser:
        """
        Check credentials and issue a session token.

        Unknown emails and wrong passwords fail identically, and both
        paths run one bcrypt comparison.

        Raises:
            InvalidCredentials: If the email/password pair does not match
        """
        email = normalize_email(email)
        user = self.users.find_by_email(email)

        if user is None:
            self.hasher.verify_against_dummy(password)
            raise InvalidCredentials("Invalid email or password")
        if not self.hasher.verify(password, user.hashed_password):
            raise InvalidCredentials("Invalid email or password")

        token = self.tokens.issue_session(user.id, user.email)
        return AuthenticatedUser(user=user, token=token)

    def logout(self, token: str) -> SessionClaims:
        """
        Acknowledge a logout.

        Tokens are stateless, so this only checks the token is still
        valid; nothing is revoked.

        Raises:
            TokenExpired: If the token already expired
            TokenInvalid: If the token cannot be verified
        """
        claims = self.tokens.verify(token)
        logger.info("User %s logged out", claims.user_id)
        return claims

    def update_username(self, user_id: str, username: str) -> None:
        """
        Set a user's username.

        Raises:
            ValidationError: If the username format is invalid
            UsernameTaken: If another user holds it
            UserNotFound: If the user no longer exists
        """
        username = validate_username(username)
        if self.users.username_exists(username):
            raise UsernameTaken("Username is already taken.")
        if not self.users.update_username(user_id, username):
            raise UserNotFound("User not found.")
        logger.info("User %s set username %s", user_id, username)
