"""
PostgreSQL repository adapters - Implement the UserRepository and HabitRepository protocols.

This module stores the graph model (User nodes, Habit nodes, HAS edges)
in PostgreSQL using psycopg3 with raw SQL:

- users:       one row per User node, email unique
- habits:      one row per Habit node, name unique
- user_habits: one row per HAS edge, (user_id, habit_id) primary key

Edge creation is a merge: INSERT ... ON CONFLICT DO NOTHING never
produces a duplicate edge and never fails on an existing one.

Error Translation:
-----------------
Driver errors never leave this module. Pool timeouts and connection
failures become StoreUnavailable (retryable); any other database error
becomes PersistenceError. The original exception is logged here and
chained, but the domain error message stays generic.
"""

import logging
import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

import psycopg
from psycopg import errors
from psycopg_pool import ConnectionPool

from habitsphere.domain.exceptions import (
    EmailAlreadyRegistered,
    PersistenceError,
    StoreUnavailable,
    UsernameTaken,
)
from habitsphere.domain.models import PLACEHOLDER_USERNAME, Habit, NewUser, User

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"

_USER_COLUMNS = "id, email, first_name, last_name, username, password_hash, created_at"


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Translate psycopg failures into domain persistence errors."""
    try:
        yield
    except psycopg.OperationalError as e:
        # Includes psycopg_pool.PoolTimeout
        logger.error("Store unavailable during %s: %s", operation, e)
        raise StoreUnavailable("Database temporarily unavailable") from e
    except psycopg.Error as e:
        logger.error("Store failure during %s: %s", operation, e)
        raise PersistenceError("Database operation failed") from e


def _row_to_user(row: tuple) -> User:
    return User(
        id=row[0],
        email=row[1],
        first_name=row[2],
        last_name=row[3],
        username=row[4],
        hashed_password=row[5],
        created_at=row[6],
    )


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def email_exists(self, email: str) -> bool:
        sql = "SELECT 1 FROM users WHERE email = %s"
        with _store_errors("email_exists"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (email,))
                return cursor.fetchone() is not None

    def create_user(self, new_user: NewUser) -> User:
        """
        Create a user node, existence-checked on email.

        The id is generated here; the username starts as the placeholder.
        ON CONFLICT (email) DO NOTHING makes the existence check and the
        insert a single atomic statement.

        Raises:
            EmailAlreadyRegistered: If a user with this email exists
        """
        sql = f"""
            INSERT INTO users (id, email, first_name, last_name, username, password_hash, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, NOW())
            ON CONFLICT (email) DO NOTHING
            RETURNING {_USER_COLUMNS}
        """
        user_id = str(uuid.uuid4())
        with _store_errors("create_user"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(
                    sql,
                    (
                        user_id,
                        new_user.email,
                        new_user.first_name,
                        new_user.last_name,
                        PLACEHOLDER_USERNAME,
                        new_user.hashed_password,
                    ),
                )
                row = cursor.fetchone()
                conn.commit()

        if row is None:
            raise EmailAlreadyRegistered(new_user.email)
        return _row_to_user(row)

    def find_by_email(self, email: str) -> User | None:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s"
        with _store_errors("find_by_email"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (email,))
                row = cursor.fetchone()
        return _row_to_user(row) if row is not None else None

    def username_exists(self, username: str) -> bool:
        sql = "SELECT 1 FROM users WHERE username = %s"
        with _store_errors("username_exists"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (username,))
                return cursor.fetchone() is not None

    def update_username(self, user_id: str, username: str) -> bool:
        """
        Set a username; the partial unique index settles concurrent claims.

        Returns:
            True if the user exists and was updated, False otherwise

        Raises:
            UsernameTaken: If the unique index rejects the name
        """
        sql = "UPDATE users SET username = %s WHERE id = %s"
        with _store_errors("update_username"):
            try:
                with self._pool.connection() as conn, conn.cursor() as cursor:
                    cursor.execute(sql, (username, user_id))
                    updated = cursor.rowcount == 1
                    conn.commit()
            except errors.UniqueViolation:
                raise UsernameTaken("Username is already taken.") from None
        return updated


class PostgresHabitRepository:
    """
    Implements HabitRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def list_habits(self) -> list[Habit]:
        sql = "SELECT name, description FROM habits ORDER BY name"
        with _store_errors("list_habits"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql)
                rows = cursor.fetchall()
        return [Habit(name=row[0], description=row[1]) for row in rows]

    def link_habits(self, user_id: str, habit_names: Sequence[str]) -> None:
        """
        Merge a HAS edge from the user to each named habit in one transaction.

        The join yields no row when either the user or the habit is
        missing, so unknown names are skipped rather than failing. Any
        error rolls back every edge written by this call.
        """
        sql = """
            INSERT INTO user_habits (user_id, habit_id)
            SELECT u.id, h.id
            FROM users u
            JOIN habits h ON h.name = %s
            WHERE u.id = %s
            ON CONFLICT (user_id, habit_id) DO NOTHING
        """
        with _store_errors("link_habits"):
            with self._pool.connection() as conn:
                with conn.transaction(), conn.cursor() as cursor:
                    linked = 0
                    for name in habit_names:
                        cursor.execute(sql, (name, user_id))
                        linked += cursor.rowcount
        logger.debug("Linked %d new habit edge(s) for user %s", linked, user_id)

    def list_user_habits(self, user_id: str) -> list[str]:
        sql = """
            SELECT h.name
            FROM user_habits uh
            JOIN habits h ON h.id = uh.habit_id
            WHERE uh.user_id = %s
            ORDER BY h.name
        """
        with _store_errors("list_user_habits"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (user_id,))
                rows = cursor.fetchall()
        return [row[0] for row in rows]


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    if not MIGRATIONS_DIR.exists():
        logger.warning("Migrations directory not found: %s", MIGRATIONS_DIR)
        return

    sql_files = sorted(MIGRATIONS_DIR.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
