from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List, Optional

import typer

from layoffs.analytics import available_views, build_report, compute_view, to_jsonable
from layoffs.config import get_settings
from layoffs.infrastructure.record_store import CsvRecordStore, RecordStoreError, resolve_store
from layoffs.pipeline import available_stages, run_pipeline
from layoffs.reporter import print_report, print_stage_results, print_view
from layoffs.stages.dedup import find_duplicates
from layoffs.stages.impute import find_missing_industry
from layoffs.utils.logging import configure_logging

app = typer.Typer(help="World layoffs cleaning pipeline and analytics CLI.")


def _setup() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _default_location(source: str, clean: bool) -> str:
    settings = get_settings()
    if source == "postgres":
        return settings.clean_table if clean else settings.raw_table
    raise typer.BadParameter("a file path is required for csv sources")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"raw={settings.raw_table} clean={settings.clean_table} | "
        f"null_token={settings.csv_null_token!r} top_n={settings.top_n_per_year}"
    )


@app.command()
def stages() -> None:
    """List cleaning stages in execution order."""
    typer.echo("Stages: " + " -> ".join(available_stages()))


@app.command()
def views() -> None:
    """List analytics views."""
    for name in available_views():
        typer.echo(name)


@app.command()
def inspect(
    source: str = typer.Option("csv", "--source", help="Record store: csv or postgres."),
    input_location: Optional[str] = typer.Option(
        None, "--input", "-i", help="CSV path or table name (default: RAW_TABLE)."
    ),
) -> None:
    """
    Report duplicates and records with a missing industry, without cleaning.
    """
    _setup()
    records = resolve_store(source, input_location or _default_location(source, clean=False)).load()
    duplicates = find_duplicates(records)
    typer.echo(f"{len(records):,} records, {len(duplicates):,} duplicates")
    print_view("duplicates", duplicates, limit=20)
    missing = find_missing_industry(records)
    typer.echo(f"{len(missing):,} companies with a missing industry")
    for company, industry in missing:
        typer.echo(f"  {company}: {industry!r}")


@app.command()
def clean(
    source: str = typer.Option("csv", "--source", help="Record store to read: csv or postgres."),
    input_location: Optional[str] = typer.Option(
        None, "--input", "-i", help="CSV path or table name (default: RAW_TABLE)."
    ),
    target: str = typer.Option("csv", "--target", help="Record store to write: csv or postgres."),
    output_location: Optional[str] = typer.Option(
        None, "--output", "-o", help="CSV path or table name (default: CLEAN_TABLE)."
    ),
    stage: List[str] = typer.Option(
        ["all"], "--stage", "-s", help="Stage(s) to run; repeatable (default: all)."
    ),
    persist: bool = typer.Option(True, "--persist/--no-persist", help="Write the run summary JSON."),
) -> None:
    """
    Load raw records, run the cleaning pipeline, and save the clean set.
    """
    _setup()
    raw_store = resolve_store(source, input_location or _default_location(source, clean=False))
    clean_store = resolve_store(target, output_location or _default_location(target, clean=True))

    result = run_pipeline(raw_store.load(), stage_names=stage, persist=persist)
    saved = clean_store.save(result.records)

    print_stage_results(result.stages)
    typer.echo(f"Saved {saved:,} clean records via {clean_store.name}.")


@app.command()
def report(
    source: str = typer.Option("csv", "--source", help="Record store with the clean set: csv or postgres."),
    input_location: Optional[str] = typer.Option(
        None, "--input", "-i", help="CSV path or table name (default: CLEAN_TABLE)."
    ),
    view: Optional[str] = typer.Option(None, "--view", "-v", help="Single view to compute."),
    top_n: Optional[int] = typer.Option(None, "--top-n", help="Companies per year to rank."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of tables."),
    limit: int = typer.Option(20, "--limit", help="Rows shown per table."),
) -> None:
    """
    Compute analytics views over a clean dataset.
    """
    _setup()
    records = resolve_store(source, input_location or _default_location(source, clean=True)).load()
    n = top_n if top_n is not None else get_settings().top_n_per_year

    try:
        if view:
            results = {view: compute_view(view, records, top_n=n)}
        else:
            results = build_report(records, top_n=n)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if as_json:
        typer.echo(json.dumps(to_jsonable(results), indent=2))
    else:
        print_report(results, limit=limit)


@app.command()
def run(
    input_path: Path = typer.Argument(..., help="Raw layoffs CSV."),
    output_path: Path = typer.Option(Path("layoffs_clean.csv"), "--output", "-o", help="Clean CSV path."),
) -> None:
    """
    Clean a raw CSV and print the full analytics report.
    """
    _setup()
    result = run_pipeline(CsvRecordStore(input_path).load(), persist=False)
    CsvRecordStore(output_path).save(result.records)
    print_stage_results(result.stages)
    print_report(build_report(result.records, top_n=get_settings().top_n_per_year))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
    except RecordStoreError as exc:
        typer.echo(f"Invalid input: {exc}", err=True)
        sys.exit(2)


if __name__ == "__main__":
    main()
