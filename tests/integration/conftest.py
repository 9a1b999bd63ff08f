"""
Shared fixtures for integration tests.

Integration tests need a running PostgreSQL (DATABASE_URL); the whole
directory is skipped when the database cannot be reached.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from useraccounts.adapters.repository.postgres import (
    PostgresCountryRepository,
    PostgresUserRepository,
    run_migrations,
)
from useraccounts.config.settings import get_settings


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool and apply migrations once per session."""
    settings = get_settings()
    pool = ConnectionPool(conninfo=settings.database_url, min_size=1, max_size=10, open=True)
    try:
        pool.wait(timeout=3)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not reachable")

    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def repository(pool: ConnectionPool) -> PostgresUserRepository:
    return PostgresUserRepository(pool)


@pytest.fixture
def country_repository(pool: ConnectionPool) -> PostgresCountryRepository:
    return PostgresCountryRepository(pool)


@pytest.fixture(autouse=True)
def clean_database(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    """Delete users (cascading to tokens and addresses) before each database test."""
    if "pool" in request.fixturenames:
        pool = request.getfixturevalue("pool")
        with pool.connection() as conn:
            conn.execute("DELETE FROM users")
            conn.commit()
    yield
