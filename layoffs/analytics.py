"""
Read-only analytics over the clean layoffs dataset.

Each view is a plain function of the clean record set and can be computed on
its own; `build_report` runs all of them. Descending orderings use Python's
stable sort, so equal values keep the order in which they first appear in the
dataset. Every view returns an empty list or None on an empty dataset.

Usage:
    from layoffs.analytics import build_report, compute_view

    top = compute_view("top_companies_per_year", clean_records, top_n=3)
    report = build_report(clean_records)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic_core import to_jsonable_python

from layoffs.domain.models import LayoffRecord

Records = Sequence[LayoffRecord]


@dataclass(frozen=True)
class ShutdownFigure:
    company: str
    industry: Optional[str]
    value: int


@dataclass(frozen=True)
class GroupTotal:
    key: Optional[str]
    total_laid_off: int


@dataclass(frozen=True)
class DateRange:
    earliest: Optional[date]
    latest: Optional[date]


@dataclass(frozen=True)
class MonthlyTotal:
    month: str
    monthly_total: int
    rolling_total: int


@dataclass(frozen=True)
class YearRanking:
    year: int
    company: str
    total_laid_off: int
    rank: int


@dataclass(frozen=True)
class GroupAverage:
    key: Optional[str]
    average_percentage: Optional[Decimal]


def _mean(values: Sequence[Decimal]) -> Optional[Decimal]:
    if not values:
        return None
    return sum(values, Decimal(0)) / len(values)


# ---------------------------------------------------------------------------
# Headcount
# ---------------------------------------------------------------------------


def peak_layoff(records: Records) -> Optional[int]:
    """Largest single-event headcount, or None when no record reports one."""
    totals = [r.total_laid_off for r in records if r.total_laid_off is not None]
    return max(totals) if totals else None


def total_shutdowns(records: Records) -> List[LayoffRecord]:
    """Records where the whole workforce was laid off."""
    return [r for r in records if r.is_full_shutdown]


def total_shutdown_count(records: Records) -> int:
    return len(total_shutdowns(records))


def _shutdown_ranking(records: Records, field: str) -> List[ShutdownFigure]:
    figures = [
        ShutdownFigure(company=r.company, industry=r.industry, value=getattr(r, field))
        for r in total_shutdowns(records)
        if getattr(r, field) is not None
    ]
    return sorted(figures, key=lambda f: f.value, reverse=True)


def shutdown_headcount_ranking(records: Records) -> List[ShutdownFigure]:
    """Companies that went under, by headcount laid off."""
    return _shutdown_ranking(records, "total_laid_off")


def shutdown_funding_ranking(records: Records) -> List[ShutdownFigure]:
    """Companies that went under, by funds raised (USD millions)."""
    return _shutdown_ranking(records, "funds_raised_millions")


# ---------------------------------------------------------------------------
# Grouped totals
# ---------------------------------------------------------------------------


def _totals_by(records: Records, field: str) -> List[GroupTotal]:
    sums: Dict[Optional[str], int] = {}
    for record in records:
        if record.total_laid_off is None:
            continue
        key = getattr(record, field)
        sums[key] = sums.get(key, 0) + record.total_laid_off
    ordered = sorted(sums.items(), key=lambda item: item[1], reverse=True)
    return [GroupTotal(key=key, total_laid_off=total) for key, total in ordered]


def layoffs_by_company(records: Records) -> List[GroupTotal]:
    return _totals_by(records, "company")


def layoffs_by_industry(records: Records) -> List[GroupTotal]:
    return _totals_by(records, "industry")


def layoffs_by_country(records: Records) -> List[GroupTotal]:
    return _totals_by(records, "country")


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


def date_range(records: Records) -> DateRange:
    """Earliest and latest layoff date; both None when no record is dated."""
    dates = [r.layoff_date for r in records if r.layoff_date is not None]
    if not dates:
        return DateRange(earliest=None, latest=None)
    return DateRange(earliest=min(dates), latest=max(dates))


def monthly_rolling_total(records: Records) -> List[MonthlyTotal]:
    """
    Cumulative headcount by calendar month.

    Months are keyed only by dated records; a dated record without a headcount
    still opens its month and contributes zero to it.
    """
    buckets: Dict[Tuple[int, int], int] = {}
    for record in records:
        if record.layoff_date is None:
            continue
        key = (record.layoff_date.year, record.layoff_date.month)
        buckets[key] = buckets.get(key, 0) + (record.total_laid_off or 0)

    rolling = 0
    rows: List[MonthlyTotal] = []
    for year, month in sorted(buckets):
        monthly = buckets[(year, month)]
        rolling += monthly
        rows.append(
            MonthlyTotal(month=f"{year:04d}-{month:02d}", monthly_total=monthly, rolling_total=rolling)
        )
    return rows


def top_companies_per_year(records: Records, top_n: int = 5) -> List[YearRanking]:
    """
    Companies with the largest yearly headcount, dense-ranked within each year.

    Tied totals share a rank and ranks have no gaps, so a year can return more
    than `top_n` rows when ties sit at or above the cut-off.
    """
    if top_n < 1:
        raise ValueError(f"top_n must be >= 1, got {top_n}")

    by_year: Dict[int, Dict[str, int]] = {}
    for record in records:
        if record.layoff_date is None or record.total_laid_off is None:
            continue
        companies = by_year.setdefault(record.layoff_date.year, {})
        companies[record.company] = companies.get(record.company, 0) + record.total_laid_off

    rows: List[YearRanking] = []
    for year in sorted(by_year):
        ordered = sorted(by_year[year].items(), key=lambda item: item[1], reverse=True)
        rank = 0
        previous: Optional[int] = None
        for company, total in ordered:
            if total != previous:
                rank += 1
                previous = total
            if rank > top_n:
                break
            rows.append(YearRanking(year=year, company=company, total_laid_off=total, rank=rank))
    return rows


# ---------------------------------------------------------------------------
# Percentages
# ---------------------------------------------------------------------------


def average_percentage(records: Records) -> Optional[Decimal]:
    """Mean share of workforce laid off, over records that report one."""
    return _mean([r.percentage_laid_off for r in records if r.percentage_laid_off is not None])


def average_percentage_by_industry(records: Records) -> List[GroupAverage]:
    """
    Mean percentage per industry, highest first.

    Industries without any reported percentage have a None average and are
    listed first, in order of first appearance, the way a descending SQL
    ORDER BY places NULLs.
    """
    values: Dict[Optional[str], List[Decimal]] = {}
    for record in records:
        bucket = values.setdefault(record.industry, [])
        if record.percentage_laid_off is not None:
            bucket.append(record.percentage_laid_off)

    averages = [GroupAverage(key=key, average_percentage=_mean(pcts)) for key, pcts in values.items()]
    known = [a for a in averages if a.average_percentage is not None]
    unknown = [a for a in averages if a.average_percentage is None]
    known.sort(key=lambda a: a.average_percentage, reverse=True)  # type: ignore[arg-type, return-value]
    return unknown + known


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def _view_registry(top_n: int) -> Dict[str, Callable[[Records], Any]]:
    """Registry of available views, in report order."""
    return {
        "peak_layoff": peak_layoff,
        "total_shutdowns": total_shutdowns,
        "total_shutdown_count": total_shutdown_count,
        "shutdown_headcount_ranking": shutdown_headcount_ranking,
        "shutdown_funding_ranking": shutdown_funding_ranking,
        "layoffs_by_company": layoffs_by_company,
        "layoffs_by_industry": layoffs_by_industry,
        "layoffs_by_country": layoffs_by_country,
        "date_range": date_range,
        "monthly_rolling_total": monthly_rolling_total,
        "top_companies_per_year": partial(top_companies_per_year, top_n=top_n),
        "average_percentage": average_percentage,
        "average_percentage_by_industry": average_percentage_by_industry,
    }


def available_views() -> List[str]:
    """List view names in report order."""
    return list(_view_registry(top_n=5))


def compute_view(name: str, records: Records, top_n: int = 5) -> Any:
    views = _view_registry(top_n)
    if name not in views:
        raise ValueError(f"Unknown view '{name}'. Available: {', '.join(views)}")
    return views[name](records)


def build_report(records: Records, top_n: int = 5) -> Dict[str, Any]:
    """Compute every view over `records`, keyed by view name."""
    return {name: view(records) for name, view in _view_registry(top_n).items()}


def to_jsonable(value: Any) -> Any:
    """Convert view output (dataclasses, records, Decimals, dates) to JSON-ready data."""
    return to_jsonable_python(value)


__all__ = [
    "DateRange",
    "GroupAverage",
    "GroupTotal",
    "MonthlyTotal",
    "ShutdownFigure",
    "YearRanking",
    "available_views",
    "average_percentage",
    "average_percentage_by_industry",
    "build_report",
    "compute_view",
    "date_range",
    "layoffs_by_company",
    "layoffs_by_country",
    "layoffs_by_industry",
    "monthly_rolling_total",
    "peak_layoff",
    "shutdown_funding_ranking",
    "shutdown_headcount_ranking",
    "to_jsonable",
    "top_companies_per_year",
    "total_shutdown_count",
    "total_shutdowns",
]
