"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from collections.abc import Sequence
from typing import Protocol

from .models import Habit, NewUser, User


class UserRepository(Protocol):
    """Port interface for user node persistence."""

    def email_exists(self, email: str) -> bool:
        """Return True if a user node with this email exists."""
        ...

    def create_user(self, new_user: NewUser) -> User:
        """
        Create a user node with a freshly generated id and placeholder username.

        Creation is existence-checked on email: implementations raise
        EmailAlreadyRegistered instead of creating a second node.

        Raises:
            EmailAlreadyRegistered: If the email is already bound to a user
            PersistenceError: If the store fails
        """
        ...

    def find_by_email(self, email: str) -> User | None:
        """Look up a user by normalized email."""
        ...

    def username_exists(self, username: str) -> bool:
        """Return True if any user already holds this username."""
        ...

    def update_username(self, user_id: str, username: str) -> bool:
        """
        Set the username of a user.

        Returns:
            True if the user exists and was updated, False otherwise

        Raises:
            UsernameTaken: If another user claimed the name concurrently
        """
        ...


class HabitRepository(Protocol):
    """Port interface for habit nodes and HAS edges."""

    def list_habits(self) -> list[Habit]:
        """Return every habit node."""
        ...

    def link_habits(self, user_id: str, habit_names: Sequence[str]) -> None:
        """
        Merge a HAS edge from the user to each named habit, atomically.

        Names with no matching habit are skipped. Existing edges are left
        as they are. Either every edge is committed or none is.
        """
        ...

    def list_user_habits(self, user_id: str) -> list[str]:
        """Return the names of habits the user HAS."""
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send(self, to_address: str, subject: str, body: str) -> None:
        """
        Deliver a plain-text message.

        Raises:
            NotificationFailed: If delivery fails
        """
        ...
