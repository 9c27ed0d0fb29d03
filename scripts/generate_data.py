"""
Synthetic raw layoffs data for the cleaning pipeline.

Generates a deterministic CSV shaped like the `layoffs` source table, seeded
with the defects the pipeline cleans up: exact duplicates, stray whitespace,
"Crypto ..." industry variants, "United States." country spellings, blank
industries that another row of the same company can fill, and rows with no
layoff figures. Optionally loads the CSV into Postgres with COPY.
"""

from __future__ import annotations

import csv
import random
import sys
import tempfile
import time
from datetime import date, timedelta
from pathlib import Path

import psycopg
import typer
from psycopg import sql

from layoffs.domain.models import FIELD_NAMES
from layoffs.infrastructure.db_factory import build_dsn
from layoffs.infrastructure.record_store import CREATE_TABLE_SQL

app = typer.Typer(help="Generate synthetic raw layoffs data and load into Postgres (CSV + COPY).")

COMPANIES = [
    ("Amazon", "Seattle", "Retail"),
    ("Meta", "SF Bay Area", "Consumer"),
    ("Coinbase", "SF Bay Area", "Crypto"),
    ("Gemini", "New York City", "Crypto Currency"),
    ("Booking.com", "Amsterdam", "Travel"),
    ("Shopify", "Ottawa", "Retail"),
    ("Carvana", "Phoenix", "Transportation"),
    ("Airbnb", "SF Bay Area", "Travel"),
    ("Juul", "SF Bay Area", "Consumer"),
    ("Bally's Interactive", "Providence", "Other"),
]
COUNTRIES = {
    "Amsterdam": "Netherlands",
    "Ottawa": "Canada",
}
STAGES = ["Post-IPO", "Series B", "Series C", "Acquired", "Unknown"]
PERCENTAGES = ["0.05", "0.1", "0.15", "0.2", "0.25", "0.5", "1"]


def _build_dsn(dsn_override: str | None) -> str:
    if dsn_override:
        return dsn_override
    return build_dsn()


def _random_row(rng: random.Random, null_token: str) -> list[str]:
    company, location, industry = rng.choice(COMPANIES)
    country = COUNTRIES.get(location, "United States")
    layoff_date = date(2020, 3, 1) + timedelta(days=rng.randint(0, 3 * 365))

    if industry == "Crypto" and rng.random() < 0.5:
        industry = "CryptoCurrency"
    if country == "United States" and rng.random() < 0.1:
        country = "United States."
    if rng.random() < 0.1:
        industry = rng.choice(["", null_token])
    if rng.random() < 0.1:
        company = f" {company}"

    total = str(rng.randint(10, 2000)) if rng.random() < 0.8 else null_token
    pct = rng.choice(PERCENTAGES) if rng.random() < 0.6 else null_token
    funds = str(rng.randint(1, 5000)) if rng.random() < 0.7 else null_token
    date_text = layoff_date.strftime("%m/%d/%Y") if rng.random() < 0.95 else null_token

    return [company, location, industry, total, pct, date_text, rng.choice(STAGES), country, funds]


def _generate_rows_csv(
    csv_path: Path, rows: int, seed: int, duplicate_rate: float = 0.05, null_token: str = "NULL"
) -> None:
    rng = random.Random(seed)
    emitted: list[list[str]] = []

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(FIELD_NAMES)
        for _ in range(rows):
            if emitted and rng.random() < duplicate_rate:
                row = list(rng.choice(emitted))
            else:
                row = _random_row(rng, null_token)
            emitted.append(row)
            writer.writerow(row)


def _copy_into_db(dsn: str, csv_path: Path, table: str, null_token: str = "NULL") -> int:
    columns = sql.SQL(", ").join(sql.Identifier(name) for name in FIELD_NAMES)
    copy_sql = sql.SQL(
        "COPY {} ({}) FROM STDIN WITH (FORMAT csv, HEADER TRUE, NULL {})"
    ).format(sql.Identifier(table), columns, sql.Literal(null_token))

    with psycopg.connect(dsn) as conn:
        with conn.cursor() as cur:
            cur.execute(sql.SQL(CREATE_TABLE_SQL).format(table=sql.Identifier(table)))
            cur.execute("SET datestyle = 'ISO, MDY'")
            with cur.copy(copy_sql) as copy:
                with csv_path.open("r", encoding="utf-8") as f:
                    for line in f:
                        copy.write(line)
            conn.commit()
    return 0


@app.command()
def main(
    rows: int = typer.Option(
        2_000,
        "--rows",
        "-r",
        help="Number of rows to generate.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    duplicate_rate: float = typer.Option(
        0.05,
        "--duplicate-rate",
        help="Share of rows that repeat an earlier row verbatim.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Optional CSV output path (if omitted, a temp file will be used).",
    ),
    table: str = typer.Option(
        "layoffs",
        "--table",
        help="Target table for the COPY load.",
    ),
    dsn: str | None = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for Postgres.",
    ),
    no_load: bool = typer.Option(
        False,
        "--no-load",
        help="Only generate CSV; skip loading into Postgres.",
    ),
) -> None:
    """
    Generate synthetic raw layoffs and optionally load them into Postgres using COPY.
    """
    start = time.perf_counter()
    if output:
        csv_path = output
        csv_path.parent.mkdir(parents=True, exist_ok=True)
    else:
        tmpdir = Path(tempfile.mkdtemp(prefix="layoffs_csv_"))
        csv_path = tmpdir / "layoffs.csv"

    typer.echo(f"Generating {rows:,} rows -> {csv_path} (seed={seed})")
    _generate_rows_csv(csv_path, rows=rows, seed=seed, duplicate_rate=duplicate_rate)
    typer.echo(f"CSV generation completed in {time.perf_counter() - start:.2f}s")

    if no_load:
        typer.echo("Skipping load (no-load flag set).")
        return

    load_start = time.perf_counter()
    typer.echo(f"Loading CSV into Postgres table '{table}' via COPY...")
    _copy_into_db(_build_dsn(dsn), csv_path, table)
    typer.echo(f"Load completed in {time.perf_counter() - load_start:.2f}s.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
