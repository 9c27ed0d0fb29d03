"""
Database connection utilities for the layoffs pipeline.

The record store reads the raw `layoffs` table and writes `layoffs_clean`
through a single synchronous psycopg connection per operation. Connection
attempts retry transient failures using tenacity.
"""

from __future__ import annotations

import psycopg
from psycopg import Connection, sql
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from layoffs.config import get_settings


def build_dsn() -> str:
    """Compose a DSN string from settings."""
    return get_settings().dsn


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn_override: str | None = None) -> Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn_override or build_dsn())


def apply_statement_timeout(cursor: psycopg.Cursor, timeout_ms: int) -> None:
    """Bound every statement on this session; 0 disables the limit."""
    cursor.execute(
        sql.SQL("SET statement_timeout = {}").format(sql.Literal(int(timeout_ms)))
    )


__all__ = [
    "apply_statement_timeout",
    "build_dsn",
    "get_sync_connection",
]
