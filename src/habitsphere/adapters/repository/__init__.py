"""Repository adapters - Database implementations."""

from .postgres import PostgresHabitRepository, PostgresUserRepository, run_migrations

__all__ = ["PostgresHabitRepository", "PostgresUserRepository", "run_migrations"]
