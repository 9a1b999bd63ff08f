"""
PostgreSQL repository adapters - Implement the domain repository protocols.

This module provides the PostgreSQL implementations of the domain's
UserRepository and CountryRepository ports using psycopg3 with raw SQL.

Consistency Design:
-------------------
1. **Email uniqueness**: enforced by the UNIQUE constraint on users.email.
   Registration uses INSERT ... ON CONFLICT DO NOTHING so concurrent
   registrations of one email yield exactly one row.

2. **Forward-only activation**: the activation UPDATE only ever sets
   is_activated to TRUE, so repeated link visits are harmless.

3. **Address buckets**: each address row carries (user_id, type); every
   update/delete filters on all three of id, user_id and type, so an
   address can never be reached through another user's or bucket's path.
   Ordering within a bucket follows the position sequence.

4. **Sessions**: each refresh_tokens row carries a session_id shared by
   the access and refresh token of one login. Rotation rewrites the
   token in place, logout deletes the row, and access tokens are only
   honoured while their session row exists.
"""

import logging
from pathlib import Path
from uuid import UUID

from psycopg import errors
from psycopg_pool import ConnectionPool

from useraccounts.domain.exceptions import EmailAlreadyRegistered
from useraccounts.domain.models import Address, AddressFields, AddressType, Country, User

logger = logging.getLogger(__name__)

_USER_COLUMNS = "id, email, password_hash, is_activated, activation_link"
_ADDRESS_COLUMNS = "id, type, first_name, last_name, street, city, postal_code, country, phone"
_COUNTRY_COLUMNS = "id, abbrev, name, postal_code_pattern, postal_regex"

# Shipped as package data: useraccounts/adapters/repository/postgres.py -> useraccounts/migrations/
MIGRATIONS_DIR = Path(__file__).resolve().parent.parent.parent / "migrations"


def _address_from_row(row: tuple) -> Address:
    return Address(
        id=row[0],
        type=AddressType(row[1]),
        first_name=row[2],
        last_name=row[3],
        street=row[4],
        city=row[5],
        postal_code=row[6],
        country=row[7],
        phone=row[8],
    )


def _country_from_row(row: tuple) -> Country:
    return Country(
        id=row[0],
        abbrev=row[1],
        name=row[2],
        postal_code_pattern=row[3],
        postal_regex=row[4],
    )


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, email: str, password_hash: str, activation_link: str) -> User | None:
        sql = f"""
            INSERT INTO users (email, password_hash, activation_link)
            VALUES (%s, %s, %s)
            ON CONFLICT (email) DO NOTHING
            RETURNING {_USER_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email, password_hash, activation_link))
            row = cursor.fetchone()
            conn.commit()

        if row is None:
            return None
        return self._user_from_row(row, {address_type: [] for address_type in AddressType})

    def get_by_id(self, user_id: UUID) -> User | None:
        return self._fetch_user("id", user_id)

    def get_by_email(self, email: str) -> User | None:
        return self._fetch_user("email", email)

    def email_exists(self, email: str) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT 1 FROM users WHERE email = %s", (email,))
            return cursor.fetchone() is not None

    def activate(self, activation_link: str) -> bool:
        sql = """
            UPDATE users
            SET is_activated = TRUE
            WHERE activation_link = %s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (activation_link,))
            conn.commit()
            return cursor.rowcount == 1

    def update_user(
        self,
        user_id: UUID,
        email: str | None = None,
        password_hash: str | None = None,
    ) -> User | None:
        sql = """
            UPDATE users
            SET email = COALESCE(%s, email),
                password_hash = COALESCE(%s, password_hash)
            WHERE id = %s
            RETURNING id
        """

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (email, password_hash, user_id))
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation:
            raise EmailAlreadyRegistered(email or "") from None

        if row is None:
            return None
        return self.get_by_id(user_id)

    # ------------------------------------------------------------------
    # Refresh tokens
    # ------------------------------------------------------------------

    def save_refresh_token(self, user_id: UUID, session_id: UUID, token: str) -> None:
        with self._pool.connection() as conn:
            conn.execute(
                "INSERT INTO refresh_tokens (token, session_id, user_id) VALUES (%s, %s, %s)",
                (token, session_id, user_id),
            )
            conn.commit()

    def replace_refresh_token(self, old_token: str, new_token: str) -> bool:
        sql = """
            UPDATE refresh_tokens
            SET token = %s, created_at = NOW()
            WHERE token = %s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (new_token, old_token))
            conn.commit()
            return cursor.rowcount == 1

    def remove_refresh_token(self, token: str) -> int:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM refresh_tokens WHERE token = %s", (token,))
            conn.commit()
            return cursor.rowcount

    def has_refresh_token(self, token: str) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT 1 FROM refresh_tokens WHERE token = %s", (token,))
            return cursor.fetchone() is not None

    def has_session(self, session_id: UUID) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT 1 FROM refresh_tokens WHERE session_id = %s", (session_id,))
            return cursor.fetchone() is not None

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------

    def add_address(self, user_id: UUID, address_type: AddressType, fields: AddressFields) -> Address:
        sql = f"""
            INSERT INTO addresses
                (user_id, type, first_name, last_name, street, city, postal_code, country, phone)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {_ADDRESS_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (user_id, address_type.value, *self._field_values(fields)))
            row = cursor.fetchone()
            conn.commit()
        return _address_from_row(row)

    def update_address(
        self,
        user_id: UUID,
        address_type: AddressType,
        address_id: UUID,
        fields: AddressFields,
    ) -> Address | None:
        sql = f"""
            UPDATE addresses
            SET first_name = %s, last_name = %s, street = %s, city = %s,
                postal_code = %s, country = %s, phone = %s
            WHERE id = %s AND user_id = %s AND type = %s
            RETURNING {_ADDRESS_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql,
                (*self._field_values(fields), address_id, user_id, address_type.value),
            )
            row = cursor.fetchone()
            conn.commit()
        return _address_from_row(row) if row is not None else None

    def delete_address(self, user_id: UUID, address_type: AddressType, address_id: UUID) -> bool:
        sql = "DELETE FROM addresses WHERE id = %s AND user_id = %s AND type = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (address_id, user_id, address_type.value))
            conn.commit()
            return cursor.rowcount == 1

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fetch_user(self, column: str, value: object) -> User | None:
        # column is one of two literals chosen by this class, never user input
        user_sql = f"SELECT {_USER_COLUMNS} FROM users WHERE {column} = %s"
        address_sql = f"""
            SELECT {_ADDRESS_COLUMNS}
            FROM addresses
            WHERE user_id = %s
            ORDER BY position
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(user_sql, (value,))
            row = cursor.fetchone()
            if row is None:
                return None

            cursor.execute(address_sql, (row[0],))
            addresses: dict[AddressType, list[Address]] = {t: [] for t in AddressType}
            for address_row in cursor.fetchall():
                address = _address_from_row(address_row)
                addresses[address.type].append(address)

        return self._user_from_row(row, addresses)

    @staticmethod
    def _user_from_row(row: tuple, addresses: dict[AddressType, list[Address]]) -> User:
        return User(
            id=row[0],
            email=row[1],
            password_hash=row[2],
            is_activated=row[3],
            activation_link=row[4],
            addresses=addresses,
        )

    @staticmethod
    def _field_values(fields: AddressFields) -> tuple:
        return (
            fields.first_name,
            fields.last_name,
            fields.street,
            fields.city,
            fields.postal_code,
            fields.country,
            fields.phone,
        )


class PostgresCountryRepository:
    """Implements CountryRepository protocol via psycopg3."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def list_countries(self) -> list[Country]:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(f"SELECT {_COUNTRY_COLUMNS} FROM countries ORDER BY name")
            return [_country_from_row(row) for row in cursor.fetchall()]

    def get_by_abbrev(self, abbrev: str) -> Country | None:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                f"SELECT {_COUNTRY_COLUMNS} FROM countries WHERE abbrev = UPPER(%s)",
                (abbrev,),
            )
            row = cursor.fetchone()
        return _country_from_row(row) if row is not None else None


def run_migrations(pool: ConnectionPool, migrations_dir: Path = MIGRATIONS_DIR) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
        migrations_dir: Directory holding the .sql files

    Raises:
        RuntimeError: If no migration can be found or one fails
    """
    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        raise RuntimeError(f"No migration files found in {migrations_dir}")

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
