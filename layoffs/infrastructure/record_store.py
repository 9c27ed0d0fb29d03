"""
Record stores: where raw layoff rows come from and where the clean set goes.

Two interchangeable stores implement the same `load()` / `save()` contract:

- `CsvRecordStore`   a CSV file with the nine-column header; nulls are written
                     as a configurable token ("NULL") so they round-trip, and
                     text equal to the token (or starting with a backslash)
                     is written with a leading backslash.
- `PostgresRecordStore`  a Postgres table with the `layoffs` DDL; writes use COPY.

Rows that cannot form a record (missing company or location, unparseable
numbers) abort the load with `RecordStoreError`. Data-quality issues that are
not fatal (malformed dates, percentages outside [0, 1]) are logged as
warnings and the values are kept as parsed, never clamped.
"""

from __future__ import annotations

import csv
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from psycopg import sql
from psycopg.rows import dict_row
from pydantic import ValidationError

from layoffs.config import get_settings
from layoffs.domain.models import FIELD_NAMES, LayoffRecord
from layoffs.infrastructure.db_factory import apply_statement_timeout, get_sync_connection
from layoffs.utils.logging import get_logger

log = get_logger(__name__)

TEXT_FIELDS = ("company", "location", "industry", "stage", "country")
INTEGER_FIELDS = ("total_laid_off", "funds_raised_millions")
TEXT_ESCAPE = "\\"

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    company VARCHAR(100),
    location VARCHAR(100),
    industry VARCHAR(100),
    total_laid_off INTEGER,
    percentage_laid_off DECIMAL(3,2),
    layoff_date DATE,
    stage VARCHAR(100),
    country VARCHAR(100),
    funds_raised_millions INTEGER
)
"""


class RecordStoreError(Exception):
    """Raised when input rows cannot be turned into records."""

    def __init__(self, message: str, row_number: Optional[int] = None) -> None:
        self.row_number = row_number
        prefix = f"row {row_number}: " if row_number is not None else ""
        super().__init__(f"{prefix}{message}")


class RecordStore(Protocol):
    name: str

    def load(self) -> List[LayoffRecord]:
        ...

    def save(self, records: Sequence[LayoffRecord]) -> int:
        ...


# ---------------------------------------------------------------------------
# Row parsing
# ---------------------------------------------------------------------------


def _parse_integer(raw: str, field: str, row_number: int) -> int:
    value = _parse_decimal(raw, field, row_number)
    if value != value.to_integral_value():
        raise RecordStoreError(f"{field}={raw!r} is not a whole number", row_number)
    return int(value)


def _parse_decimal(raw: str, field: str, row_number: int) -> Decimal:
    try:
        value = Decimal(raw)
    except InvalidOperation as exc:
        raise RecordStoreError(f"{field}={raw!r} is not a number", row_number) from exc
    # Decimal accepts "NaN" and "Infinity"
    if not value.is_finite():
        raise RecordStoreError(f"{field}={raw!r} is not a finite number", row_number)
    return value


def _unescape_text(raw: str) -> str:
    return raw[len(TEXT_ESCAPE):] if raw.startswith(TEXT_ESCAPE) else raw


def _escape_text(value: str, null_token: str) -> str:
    if value == null_token or value.startswith(TEXT_ESCAPE):
        return TEXT_ESCAPE + value
    return value


def parse_row(
    row: Mapping[str, Optional[str]], row_number: int, null_token: str = "NULL"
) -> LayoffRecord:
    """
    Build a record from one CSV row of strings.

    `null_token` marks null in any column. Empty text stays an empty string
    (a blank industry is distinct from a null one); empty numeric or date
    cells are null. A text cell starting with a backslash loses that one
    backslash, so "\\NULL" reads as the literal string "NULL".
    """
    values: Dict[str, Any] = {}
    for field in FIELD_NAMES:
        raw = row.get(field)
        if raw is None or raw == null_token:
            values[field] = None
            continue
        if field in TEXT_FIELDS:
            values[field] = _unescape_text(raw)
            continue
        raw = raw.strip()
        if not raw:
            values[field] = None
        elif field in INTEGER_FIELDS:
            values[field] = _parse_integer(raw, field, row_number)
        elif field == "percentage_laid_off":
            values[field] = _parse_decimal(raw, field, row_number)
        else:
            values[field] = raw
    return build_record(values, row_number)


def build_record(values: Mapping[str, Any], row_number: int) -> LayoffRecord:
    """Validate a mapping of typed values into a record, logging quality warnings."""
    try:
        record = LayoffRecord(**values)
    except ValidationError as exc:
        raise RecordStoreError(str(exc), row_number) from exc

    raw_date = values.get("layoff_date")
    if raw_date not in (None, "") and record.layoff_date is None:
        log.warning(
            "Malformed layoff_date treated as null",
            extra={"row": row_number, "layoff_date": str(raw_date)},
        )
    if not record.percentage_in_range:
        log.warning(
            "percentage_laid_off outside [0, 1]",
            extra={
                "row": row_number,
                "company": record.company,
                "percentage_laid_off": str(record.percentage_laid_off),
            },
        )
    return record


def _format_cell(value: Any, null_token: str) -> str:
    if value is None:
        return null_token
    if isinstance(value, str):
        return _escape_text(value, null_token)
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class CsvRecordStore:
    """
    Layoff records in a CSV file with a header row naming the nine columns.
    """

    name: str = "csv"

    def __init__(self, path: Path | str, null_token: Optional[str] = None) -> None:
        self.path = Path(path)
        self.null_token = null_token if null_token is not None else get_settings().csv_null_token

    def load(self) -> List[LayoffRecord]:
        with self.path.open("r", newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            missing = [name for name in FIELD_NAMES if name not in (reader.fieldnames or [])]
            if missing:
                raise RecordStoreError(f"{self.path} is missing columns: {', '.join(missing)}")
            # header is line 1
            records = [
                parse_row(row, row_number, self.null_token)
                for row_number, row in enumerate(reader, start=2)
            ]
        log.info("Loaded records", extra={"store": self.name, "path": str(self.path), "rows": len(records)})
        return records

    def save(self, records: Sequence[LayoffRecord]) -> int:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(FIELD_NAMES)
            for record in records:
                writer.writerow(
                    [_format_cell(value, self.null_token) for value in record.identity_key]
                )
        log.info("Saved records", extra={"store": self.name, "path": str(self.path), "rows": len(records)})
        return len(records)


class PostgresRecordStore:
    """
    Layoff records in a Postgres table shaped like the `layoffs` source table.
    """

    name: str = "postgres"

    def __init__(self, table: str, dsn_override: Optional[str] = None) -> None:
        self.table = table
        self._dsn_override = dsn_override

    def _columns(self) -> sql.Composable:
        return sql.SQL(", ").join(sql.Identifier(name) for name in FIELD_NAMES)

    def load(self) -> List[LayoffRecord]:
        query = sql.SQL("SELECT {} FROM {}").format(self._columns(), sql.Identifier(self.table))
        timeout_ms = get_settings().db_statement_timeout_ms

        conn = get_sync_connection(self._dsn_override)
        try:
            with conn.cursor(row_factory=dict_row) as cur:
                apply_statement_timeout(cur, timeout_ms)
                cur.execute(query)
                records = [
                    build_record(row, row_number)
                    for row_number, row in enumerate(cur.fetchall(), start=1)
                ]
        finally:
            conn.close()
        log.info("Loaded records", extra={"store": self.name, "table": self.table, "rows": len(records)})
        return records

    def save(self, records: Sequence[LayoffRecord], replace: bool = True) -> int:
        """
        Write records into the table, creating it if needed.

        With `replace`, existing rows are truncated first so the table holds
        exactly `records`.
        """
        table = sql.Identifier(self.table)
        copy_sql = sql.SQL("COPY {} ({}) FROM STDIN").format(table, self._columns())

        with get_sync_connection(self._dsn_override) as conn:
            with conn.cursor() as cur:
                cur.execute(sql.SQL(CREATE_TABLE_SQL).format(table=table))
                if replace:
                    cur.execute(sql.SQL("TRUNCATE TABLE {}").format(table))
                with cur.copy(copy_sql) as copy:
                    for row in _rows(records):
                        copy.write_row(row)
            conn.commit()
        log.info("Saved records", extra={"store": self.name, "table": self.table, "rows": len(records)})
        return len(records)


def _rows(records: Iterable[LayoffRecord]) -> Iterable[tuple]:
    for record in records:
        yield record.identity_key


def resolve_store(source: str, location: str) -> RecordStore:
    """
    Build a store from a CLI-style source name.

    `location` is a file path for "csv" and a table name for "postgres".
    """
    if source == CsvRecordStore.name:
        return CsvRecordStore(location)
    if source == PostgresRecordStore.name:
        return PostgresRecordStore(location)
    raise ValueError(f"Unknown record store '{source}'. Available: csv, postgres")


__all__ = [
    "CREATE_TABLE_SQL",
    "CsvRecordStore",
    "PostgresRecordStore",
    "RecordStore",
    "RecordStoreError",
    "build_record",
    "parse_row",
    "resolve_store",
]
