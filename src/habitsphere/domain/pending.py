"""
Pending registration store - process-local, time-limited signup cache.

Holds at most one PendingRegistration per email. Entries expire a fixed
TTL after creation; expiry is decided by comparing the entry timestamp
with the injected clock on every access, so no background timer is
involved and an expired entry is unusable even if it was never swept.

Concurrency
===========
put() and consume() for the same email are serialized by a per-email
lock, which is what makes consumption exactly-once. Locks are reference
counted and dropped once no thread holds or waits on them, so different
emails never contend and the lock table does not grow without bound.
"""

import logging
import secrets
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .exceptions import CodeMismatch, PendingRegistrationNotFound
from .models import PendingRegistration
from .tokens import utcnow

logger = logging.getLogger(__name__)


@dataclass
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class PendingRegistrationStore:
    """In-memory mapping of email to pending registration."""

    def __init__(
        self,
        ttl: timedelta = timedelta(minutes=10),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, PendingRegistration] = {}
        self._locks: dict[str, _KeyLock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _locked(self, email: str) -> Iterator[None]:
        with self._locks_guard:
            slot = self._locks.get(email)
            if slot is None:
                slot = self._locks[email] = _KeyLock()
            slot.holders += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._locks_guard:
                slot.holders -= 1
                if slot.holders == 0:
                    del self._locks[email]

    def _is_expired(self, entry: PendingRegistration) -> bool:
        return self._clock() >= entry.created_at + self._ttl

    def put(self, registration: PendingRegistration) -> None:
        """
        Store a pending registration, superseding any previous one.

        The previous entry's code stops working immediately.
        """
        self.purge_expired()
        with self._locked(registration.email):
            if registration.email in self._entries:
                logger.info("Superseding pending registration for %s", registration.email)
            self._entries[registration.email] = registration

    def consume(self, email: str, code: str) -> PendingRegistration:
        """
        Redeem a verification code, removing the entry on success.

        Args:
            email: Normalized email address
            code: Code supplied by the client

        Returns:
            The pending registration that was removed

        Raises:
            PendingRegistrationNotFound: No live entry (never registered,
                expired or already consumed)
            CodeMismatch: Code differs; the entry is kept for retry
        """
        with self._locked(email):
            entry = self._entries.get(email)
            if entry is None:
                raise PendingRegistrationNotFound(email)
            if self._is_expired(entry):
                del self._entries[email]
                logger.info("Pending registration for %s expired", email)
                raise PendingRegistrationNotFound(email)
            if not secrets.compare_digest(entry.verification_code.encode(), code.encode()):
                raise CodeMismatch(email)
            del self._entries[email]
            return entry

    def get(self, email: str) -> PendingRegistration | None:
        """Return the live entry for an email without consuming it."""
        with self._locked(email):
            entry = self._entries.get(email)
            if entry is None or self._is_expired(entry):
                return None
            return entry

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        removed = 0
        for email in list(self._entries):
            with self._locked(email):
                entry = self._entries.get(email)
                if entry is not None and self._is_expired(entry):
                    del self._entries[email]
                    removed += 1
        if removed:
            logger.debug("Purged %d expired pending registration(s)", removed)
        return removed

    def __len__(self) -> int:
        return len(self._entries)
