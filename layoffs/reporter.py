from __future__ import annotations

import dataclasses
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel
from rich import box
from rich.console import Console
from rich.table import Table

from layoffs.domain.models import FIELD_NAMES
from layoffs.stages.abstract import StageResult


def _cell(value: Any) -> str:
    if value is None:
        return "[dim]NULL[/dim]"
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, Decimal):
        return f"{value:.4f}"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _columns_for(rows: Sequence[Any]) -> List[str]:
    first = rows[0]
    if isinstance(first, BaseModel):
        return list(FIELD_NAMES)
    return [f.name for f in dataclasses.fields(first)]


def _title(name: str) -> str:
    return name.replace("_", " ").title()


def print_stage_results(results: List[StageResult], console: Optional[Console] = None) -> None:
    """
    Render per-stage pipeline metrics as a rich table.
    """
    console = console or Console()

    if not results:
        console.print("[yellow]No stages were run.[/yellow]")
        return

    table = Table(title="Cleaning Pipeline", box=box.ROUNDED)
    table.add_column("Stage", style="cyan", no_wrap=True)
    table.add_column("Rows In", justify="right", style="magenta")
    table.add_column("Rows Out", justify="right", style="magenta")
    table.add_column("Removed", justify="right", style="red")
    table.add_column("Changed", justify="right", style="yellow")
    table.add_column("Duration (s)", justify="right", style="green")
    table.add_column("Peak Memory (MB)", justify="right", style="blue")

    for res in results:
        mem_bytes = res.get("peak_rss_bytes") or 0
        table.add_row(
            res.get("stage", "unknown"),
            f"{res.get('rows_in', 0):,}",
            f"{res.get('rows_out', 0):,}",
            f"{res.get('rows_removed', 0):,}",
            f"{res.get('rows_changed', 0):,}",
            f"{res.get('duration_seconds', 0.0):.4f}",
            f"{mem_bytes / (1024 * 1024):.2f}",
        )

    console.print(table)


def print_view(name: str, value: Any, console: Optional[Console] = None, limit: Optional[int] = None) -> None:
    """
    Render one analytics view.

    Scalars print on one line; lists of rows and single dataclass rows print as
    tables. `limit` caps the number of rows shown.
    """
    console = console or Console()

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = [value]

    if not isinstance(value, list):
        console.print(f"[bold cyan]{_title(name)}:[/bold cyan] {_cell(value)}")
        return

    if not value:
        console.print(f"[bold cyan]{_title(name)}:[/bold cyan] [yellow]no rows[/yellow]")
        return

    rows = value[:limit] if limit else value
    columns = _columns_for(rows)
    caption = f"showing {len(rows)} of {len(value)}" if len(rows) < len(value) else None

    table = Table(title=_title(name), box=box.ROUNDED, caption=caption)
    for column in columns:
        table.add_column(column, style="cyan" if column in ("company", "key", "month") else None)
    for row in rows:
        table.add_row(*[_cell(getattr(row, column)) for column in columns])

    console.print(table)


def print_report(report: Dict[str, Any], console: Optional[Console] = None, limit: Optional[int] = 20) -> None:
    """Render every view of a report, in report order."""
    console = console or Console()
    for name, value in report.items():
        print_view(name, value, console=console, limit=limit)


__all__ = ["print_report", "print_stage_results", "print_view"]
