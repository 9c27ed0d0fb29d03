"""
Pytest configuration for the layoffs pipeline.

Provides fixtures for:
- Building layoff records with sensible defaults
- A small raw dataset exhibiting every defect the pipeline cleans
- Database connection management for integration tests
"""

from __future__ import annotations

import os
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Generator, List

import psycopg
import pytest

from layoffs.config import Settings
from layoffs.domain.models import LayoffRecord

RAW_TEST_TABLE = "layoffs_test_raw"
CLEAN_TEST_TABLE = "layoffs_test_clean"


def _record(**overrides: Any) -> LayoffRecord:
    values: dict[str, Any] = {
        "company": "Acme",
        "location": "NYC",
        "industry": "Retail",
        "total_laid_off": 100,
        "percentage_laid_off": Decimal("0.1"),
        "layoff_date": date(2022, 1, 15),
        "stage": "Series B",
        "country": "United States",
        "funds_raised_millions": 50,
    }
    values.update(overrides)
    return LayoffRecord(**values)


@pytest.fixture
def make_record() -> Callable[..., LayoffRecord]:
    """Factory for records; keyword arguments override the defaults."""
    return _record


@pytest.fixture
def raw_records() -> List[LayoffRecord]:
    """
    A raw record set with duplicates, whitespace, spelling variants,
    a fillable blank industry and an unusable row.
    """
    return [
        _record(company="Acme", total_laid_off=500),
        _record(company="Acme", total_laid_off=500),
        _record(company=" Zeta ", location="SF", industry="Crypto-lending", total_laid_off=40,
                country="United States.", layoff_date=date(2022, 3, 2)),
        _record(company="Zeta", location="SF", industry=None, total_laid_off=60,
                layoff_date=date(2023, 2, 1)),
        _record(company="Nova", location="Austin", industry="Fintech", total_laid_off=300,
                percentage_laid_off=Decimal("1.00"), funds_raised_millions=50,
                layoff_date=date(2022, 3, 20)),
        _record(company="Ghost", location="Remote", total_laid_off=None, percentage_laid_off=None),
    ]


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "world_layoffs"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    return test_settings.dsn


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to skip integration tests when the DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def clean_test_tables(db_connection: psycopg.Connection) -> Generator[tuple[str, str], None, None]:
    """
    Drop the test tables before and after each test; yields (raw, clean) names.
    """

    def _drop() -> None:
        with db_connection.cursor() as cur:
            cur.execute(f"DROP TABLE IF EXISTS {RAW_TEST_TABLE}, {CLEAN_TEST_TABLE};")
        db_connection.commit()

    _drop()
    yield RAW_TEST_TABLE, CLEAN_TEST_TABLE
    _drop()
