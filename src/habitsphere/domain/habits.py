"""
Habit association service - links users to habit nodes.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .exceptions import ValidationError
from .models import Habit
from .ports import HabitRepository

logger = logging.getLogger(__name__)


@dataclass
class HabitService:
    """
    Links an authenticated user to habits by name.

    Saving is "merge what matches": unknown names are skipped, existing
    links are kept, and the whole batch commits in one transaction.
    """

    habits: HabitRepository

    def save_habits(self, user_id: str, habit_names: Iterable[str]) -> int:
        """
        Link the user to each named habit.

        Args:
            user_id: Id from the verified session claims
            habit_names: Non-empty collection of habit names

        Returns:
            Number of distinct names submitted to the store

        Raises:
            ValidationError: If the collection is empty or holds blank names
            PersistenceError: If the transaction fails (nothing is linked)
        """
        names = list(dict.fromkeys(habit_names))
        if not names:
            raise ValidationError("Invalid or empty habit list")
        if any(not isinstance(name, str) or not name.strip() for name in names):
            raise ValidationError("Invalid or empty habit list")

        self.habits.link_habits(user_id, names)
        logger.info("Saved %d habit(s) for user %s", len(names), user_id)
        return len(names)

    def list_user_habits(self, user_id: str) -> list[str]:
        """Names of the habits the user has, sorted."""
        return sorted(set(self.habits.list_user_habits(user_id)))

    def list_habits(self) -> list[Habit]:
        """Every habit in the catalogue."""
        return self.habits.list_habits()
