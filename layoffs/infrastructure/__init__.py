"""
Infrastructure package for the layoffs pipeline.

Centralizes I/O: database connectivity and the CSV/Postgres record stores.
Keep this layer focused on loading and saving records, decoupled from the
cleaning stages and the analytics views.
"""

from layoffs.infrastructure.db_factory import build_dsn, get_sync_connection
from layoffs.infrastructure.record_store import (
    CsvRecordStore,
    PostgresRecordStore,
    RecordStore,
    RecordStoreError,
    resolve_store,
)

__all__ = [
    "build_dsn",
    "get_sync_connection",
    "CsvRecordStore",
    "PostgresRecordStore",
    "RecordStore",
    "RecordStoreError",
    "resolve_store",
]
