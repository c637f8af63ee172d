"""
Credential codec - one-way password hashing with bcrypt.

Digests are salted per call, so hashing the same password twice yields
two different digests that both verify.
"""

from dataclasses import dataclass, field

import bcrypt

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


@dataclass
class PasswordHasher:
    """Hashes and verifies passwords with a tunable bcrypt cost factor."""

    rounds: int = 10
    _dummy_hash: bytes = field(init=False, repr=False)

    def __post_init__(self) -> None:
        # Compared against when no stored digest exists, so that the
        # "unknown user" path costs the same as a real comparison.
        self._dummy_hash = bcrypt.hashpw(
            b"dummy_password_for_timing_safety", bcrypt.gensalt(self.rounds)
        )

    def hash(self, plaintext: str) -> str:
        """Hash a password with a fresh salt."""
        return bcrypt.hashpw(plaintext.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, plaintext: str, digest: str) -> bool:
        """
        Check a password against a stored digest.

        Returns False for malformed or empty digests instead of raising.
        """
        if not digest:
            return False
        try:
            return bcrypt.checkpw(plaintext.encode(), digest.encode())
        except ValueError:
            return False

    def verify_against_dummy(self, plaintext: str) -> bool:
        """Burn one comparison's worth of time. Always False."""
        try:
            bcrypt.checkpw(plaintext.encode(), self._dummy_hash)
        except ValueError:
            pass
        return False
