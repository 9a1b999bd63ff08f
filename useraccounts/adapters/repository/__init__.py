"""Repository adapters - Database implementations."""

from .postgres import PostgresCountryRepository, PostgresUserRepository, run_migrations

__all__ = ["PostgresCountryRepository", "PostgresUserRepository", "run_migrations"]
