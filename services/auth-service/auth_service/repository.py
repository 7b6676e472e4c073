"""Database repository for account credentials."""

from __future__ import annotations

import logging

import psycopg
from psycopg import errors as pg_errors
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account, Role
from .domain.errors import ConflictError, StoreUnavailable

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    username VARCHAR(30) NOT NULL,
    email VARCHAR(255) NOT NULL,
    password_hash TEXT NOT NULL,
    role VARCHAR(16) NOT NULL DEFAULT 'user',
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    CONSTRAINT users_username_key UNIQUE (username),
    CONSTRAINT users_email_key UNIQUE (email),
    CONSTRAINT users_role_check CHECK (role IN ('user', 'admin'))
)
"""

_COLUMNS = "id, username, email, password_hash, role, created_at"


def conflict_field(constraint_name: str | None) -> str | None:
    """Map a violated unique constraint to the account field it guards."""
    if not constraint_name:
        return None
    if "email" in constraint_name:
        return "email"
    if "username" in constraint_name:
        return "username"
    return None


class AccountRepository:
    """Postgres-backed credential store.

    Uniqueness of email and username is enforced by table constraints, so
    concurrent inserts for the same identity cannot both commit.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def ensure_schema(self) -> None:
        """Create the ``users`` table and its constraints when missing."""
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(SCHEMA_SQL)
                conn.commit()
        except psycopg.OperationalError as exc:
            raise StoreUnavailable("could not initialise account schema") from exc
        logger.info("account schema ready")

    def find_by_email(self, email: str) -> Account | None:
        return self._fetch_one(f"SELECT {_COLUMNS} FROM users WHERE email = %s", (email,))

    def find_by_username(self, username: str) -> Account | None:
        return self._fetch_one(f"SELECT {_COLUMNS} FROM users WHERE username = %s", (username,))

    def insert(self, username: str, email: str, password_hash: str, role: Role) -> Account:
        """Insert an account row, translating unique violations to ``ConflictError``."""
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO users (username, email, password_hash, role)
                        VALUES (%s, %s, %s, %s)
                        RETURNING {_COLUMNS}
                        """,
                        (username, email, password_hash, Role(role).value),
                    )
                    row = cur.fetchone()
                conn.commit()
        except pg_errors.UniqueViolation as exc:
            field = conflict_field(exc.diag.constraint_name)
            if field is None:
                raise StoreUnavailable("unexpected unique violation") from exc
            raise ConflictError(field) from exc
        except psycopg.OperationalError as exc:
            raise StoreUnavailable("account insert failed") from exc
        return self._map_record(row)

    def _fetch_one(self, query: str, params: tuple) -> Account | None:
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(query, params)
                    row = cur.fetchone()
        except psycopg.OperationalError as exc:
            raise StoreUnavailable("account lookup failed") from exc
        if not row:
            return None
        return self._map_record(row)

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            account_id=row[0],
            username=row[1],
            email=row[2],
            password_hash=row[3],
            role=Role(row[4]),
            created_at=row[5],
        )
