"""
Fixtures for integration tests against a real PostgreSQL database.

Requires PostgreSQL to be running (via docker-compose) at the configured
DATABASE_URL. When it cannot be reached the database tests are skipped.
"""

from collections.abc import Iterator

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from habitsphere.adapters.repository.postgres import run_migrations
from habitsphere.config.settings import get_settings


@pytest.fixture(scope="session")
def pool() -> Iterator[ConnectionPool]:
    """Create a migrated connection pool shared by the whole session."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    try:
        pool.wait(timeout=3)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not reachable")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Iterator[None]:
    """Remove users and their habit links; the habit catalogue is kept."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM user_habits")
        conn.execute("DELETE FROM users")
        conn.commit()
    yield
