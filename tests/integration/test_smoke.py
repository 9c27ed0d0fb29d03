"""
Integration tests for the Postgres record store.

These tests run against a real PostgreSQL instance and verify that:
1. Raw rows COPY-loaded by the generator read back as records
2. The clean set written by the pipeline round-trips through a table
3. Analytics over the stored clean set match the in-memory run

Run with: RUN_INTEGRATION_TESTS=1 pytest tests/integration/
"""

from __future__ import annotations

import os
from collections import Counter
from pathlib import Path

import pytest

from layoffs.analytics import build_report
from layoffs.infrastructure.record_store import CsvRecordStore, PostgresRecordStore
from layoffs.pipeline import run_pipeline
from scripts import generate_data

ROWS = 300
SEED = 7

pytestmark = pytest.mark.skipif(
    os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
    reason="Integration tests require RUN_INTEGRATION_TESTS=1 and reachable Postgres",
)


@pytest.fixture
def seeded_raw_table(tmp_path: Path, test_dsn: str, clean_test_tables: tuple[str, str]) -> Path:
    raw_table, _ = clean_test_tables
    csv_path = tmp_path / "layoffs.csv"
    generate_data._generate_rows_csv(csv_path, rows=ROWS, seed=SEED)
    generate_data._copy_into_db(test_dsn, csv_path, raw_table)
    return csv_path


def test_table_load_matches_csv_load(
    seeded_raw_table: Path, test_dsn: str, clean_test_tables: tuple[str, str]
):
    raw_table, _ = clean_test_tables
    from_table = PostgresRecordStore(raw_table, dsn_override=test_dsn).load()
    from_csv = CsvRecordStore(seeded_raw_table).load()

    assert len(from_table) == ROWS
    assert Counter(r.identity_key for r in from_table) == Counter(r.identity_key for r in from_csv)


def test_clean_set_round_trips_through_table(
    seeded_raw_table: Path, test_dsn: str, clean_test_tables: tuple[str, str]
):
    raw_table, clean_table = clean_test_tables
    raw = CsvRecordStore(seeded_raw_table).load()
    clean = run_pipeline(raw).records

    store = PostgresRecordStore(clean_table, dsn_override=test_dsn)
    store.save(clean)
    # Saving again replaces rather than appends.
    store.save(clean)
    stored = store.load()

    assert len(stored) == len(clean)
    assert build_report(stored) == build_report(clean)
