"""
Pipeline runner: applies the cleaning stages in order, profiles each one, and
persists a run summary.

Usage (example from CLI):
    from layoffs.pipeline import run_pipeline

    result = run_pipeline(raw_records)
    clean = result.records

Run summaries are saved to `results/` by default:
- `results/latest.json` (last run)
- `results/run-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from layoffs.config import get_settings
from layoffs.domain.models import LayoffRecord
from layoffs.stages.abstract import PipelineStage, StageResult
from layoffs.stages.dedup import Deduplicator
from layoffs.stages.impute import Imputer
from layoffs.stages.normalize import Normalizer
from layoffs.stages.row_filter import RowFilter
from layoffs.utils.logging import get_logger
from layoffs.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)


@dataclass
class PipelineResult:
    """Clean records plus the per-stage metrics of the run that produced them."""

    records: List[LayoffRecord]
    stages: List[StageResult] = field(default_factory=list)

    @property
    def rows_in(self) -> int:
        return self.stages[0]["rows_in"] if self.stages else len(self.records)

    @property
    def rows_out(self) -> int:
        return len(self.records)


def _stage_factories() -> Dict[str, Callable[[], PipelineStage]]:
    """Registry of stages, in execution order."""
    return {
        "dedup": lambda: Deduplicator(),
        "normalize": lambda: Normalizer(),
        "impute": lambda: Imputer(),
        "row_filter": lambda: RowFilter(),
    }


def available_stages() -> List[str]:
    """List stage names in execution order."""
    return list(_stage_factories().keys())


def _resolve_stages(names: Optional[Iterable[str]]) -> List[PipelineStage]:
    factories = _stage_factories()
    requested = list(names) if names is not None else ["all"]
    if requested == ["all"]:
        requested = list(factories)
    unknown = [name for name in requested if name not in factories]
    if unknown:
        raise ValueError(
            f"Unknown stage '{unknown[0]}'. Available: {', '.join(factories)}"
        )
    # Execution order is fixed regardless of how the names were given.
    return [factories[name]() for name in factories if name in requested]


def _count_changed(before: Sequence[LayoffRecord], after: Sequence[LayoffRecord]) -> int:
    if len(before) != len(after):
        return 0
    return sum(1 for old, new in zip(before, after) if old != new)


def _stage_result(
    stage: PipelineStage,
    before: Sequence[LayoffRecord],
    after: Sequence[LayoffRecord],
    stats: ProfileStats,
) -> StageResult:
    return StageResult(
        stage=stage.name,
        rows_in=len(before),
        rows_out=len(after),
        rows_removed=len(before) - len(after),
        rows_changed=_count_changed(before, after),
        duration_seconds=round(stats.duration_seconds, 4),
        peak_rss_bytes=stats.peak_rss_bytes,
        cpu_percent=round(stats.cpu_percent, 1) if stats.cpu_percent is not None else None,
    )


def _profiled_apply(
    stage: PipelineStage, records: List[LayoffRecord]
) -> tuple[List[LayoffRecord], StageResult]:
    log.info(f"[STAGE START] {stage.name}", extra={"stage": stage.name, "rows_in": len(records)})
    with profile_block(stage.name) as stats:
        try:
            output = stage.apply(records)
        except Exception:
            log.exception(f"[STAGE FAILED] {stage.name}", extra={"stage": stage.name})
            raise
    result = _stage_result(stage, records, output, stats)
    log.info(
        f"[STAGE SUCCESS] {stage.name}",
        extra={
            "stage": stage.name,
            "rows_out": result["rows_out"],
            "rows_removed": result["rows_removed"],
            "rows_changed": result["rows_changed"],
        },
    )
    return output, result


def _persist_summary(payload: dict, results_dir: Path) -> None:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"run-{timestamp}.json"

    for path in (latest_path, archive_path):
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, sort_keys=True)

    log.info("Run summary persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})


def run_pipeline(
    records: Sequence[LayoffRecord],
    stage_names: Optional[Iterable[str]] = None,
    results_dir: Path | str | None = None,
    persist: bool = False,
) -> PipelineResult:
    """
    Run the cleaning stages over `records` and return the clean set.

    Parameters
    ----------
    records : sequence of LayoffRecord
        The raw record set. It is not modified.
    stage_names : iterable[str] | None
        Stages to run. None or ["all"] runs every stage; a subset still runs in
        the fixed order dedup -> normalize -> impute -> row_filter.
    results_dir : Path | str | None
        Directory for the JSON run summary. Defaults to settings.results_dir.
    persist : bool
        Whether to write the run summary to disk.

    Raises
    ------
    Exception
        Whatever a stage raised; the run is aborted and nothing is persisted.
    """
    stages = _resolve_stages(stage_names)
    current: List[LayoffRecord] = list(records)
    results: List[StageResult] = []

    for stage in stages:
        current, stage_result = _profiled_apply(stage, current)
        results.append(stage_result)

    outcome = PipelineResult(records=current, stages=results)

    if persist:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "rows_in": outcome.rows_in,
            "rows_out": outcome.rows_out,
            "stages": results,
        }
        _persist_summary(payload, Path(results_dir or get_settings().results_dir))

    log.info(
        f"[PIPELINE COMPLETE] {len(stages)} stage(s) executed",
        extra={"stages": [s.name for s in stages], "rows_in": outcome.rows_in, "rows_out": outcome.rows_out},
    )
    return outcome


__all__ = [
    "PipelineResult",
    "available_stages",
    "run_pipeline",
]
