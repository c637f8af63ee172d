"""
Token service - stateless, signed session tokens (JWT).

Verification is a pure function of the token, the signing secret and
the injected clock. Expiry is checked against that clock rather than
PyJWT's own wall-clock check, so tests can move time deterministically.
"""

import logging
import math
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from jwt.exceptions import InvalidTokenError

from .exceptions import TokenExpired, TokenInvalid
from .models import SessionClaims

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies expiring session tokens keyed by a shared secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl
        self._clock = clock

    def issue(self, claims: Mapping[str, Any], ttl: timedelta | None = None) -> str:
        """
        Sign a token carrying the claims plus issued-at and absolute expiry.

        Args:
            claims: Application claims (e.g. userId, email)
            ttl: Lifetime; defaults to the service's configured TTL

        Returns:
            Encoded token string
        """
        now = self._clock().timestamp()
        lifetime = ttl if ttl is not None else self._ttl
        # NumericDate is whole seconds; round exp up so the token never
        # expires before the full lifetime has elapsed.
        payload = {
            **claims,
            "iat": int(now),
            "exp": math.ceil(now + lifetime.total_seconds()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def issue_session(self, user_id: str, email: str) -> str:
        """Issue a session token bound to a user identity."""
        return self.issue({"userId": user_id, "email": email})

    def verify(self, token: str) -> SessionClaims:
        """
        Verify a session token and return its claims.

        Raises:
            TokenInvalid: Bad signature, malformed payload or missing claims
            TokenExpired: Current time is at or past the encoded expiry
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["exp", "iat"],
                },
            )
        except InvalidTokenError as e:
            logger.debug("Rejected token: %s", e)
            raise TokenInvalid("Invalid token") from None

        user_id = payload.get("userId")
        email = payload.get("email")
        exp = payload.get("exp")
        iat = payload.get("iat")
        if not isinstance(user_id, str) or not isinstance(email, str):
            raise TokenInvalid("Invalid token")
        if not isinstance(exp, int | float) or not isinstance(iat, int | float):
            raise TokenInvalid("Invalid token")

        if self._clock().timestamp() >= exp:
            raise TokenExpired("Token has expired")

        return SessionClaims(
            user_id=user_id,
            email=email,
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
