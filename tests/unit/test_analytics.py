from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from layoffs import analytics
from layoffs.analytics import (
    DateRange,
    GroupAverage,
    GroupTotal,
    MonthlyTotal,
    ShutdownFigure,
    YearRanking,
)

TOP_N = 5


@pytest.fixture
def clean(make_record):
    return [
        make_record(company="Acme", total_laid_off=500, layoff_date=date(2022, 1, 15)),
        make_record(company="Zeta", location="SF", industry="Crypto", total_laid_off=40,
                    layoff_date=date(2022, 3, 2)),
        make_record(company="Zeta", location="SF", industry="Crypto", total_laid_off=60,
                    layoff_date=date(2023, 2, 1)),
        make_record(company="Nova", location="Austin", industry="Fintech", total_laid_off=300,
                    percentage_laid_off=Decimal("1.00"), funds_raised_millions=50,
                    layoff_date=date(2022, 3, 20), country="Canada"),
    ]


def test_peak_layoff(clean, make_record):
    assert analytics.peak_layoff(clean) == 500
    assert analytics.peak_layoff([make_record(total_laid_off=None)]) is None


def test_total_shutdown_views(clean):
    roster = analytics.total_shutdowns(clean)
    assert [r.company for r in roster] == ["Nova"]
    assert analytics.total_shutdown_count(clean) == 1
    assert analytics.shutdown_headcount_ranking(clean) == [ShutdownFigure("Nova", "Fintech", 300)]
    assert analytics.shutdown_funding_ranking(clean) == [ShutdownFigure("Nova", "Fintech", 50)]


def test_shutdown_rankings_skip_nulls_and_keep_tie_order(make_record):
    records = [
        make_record(company="A", percentage_laid_off=Decimal("1"), total_laid_off=10),
        make_record(company="B", percentage_laid_off=Decimal("1"), total_laid_off=None,
                    funds_raised_millions=None),
        make_record(company="C", percentage_laid_off=Decimal("1"), total_laid_off=30),
        make_record(company="D", percentage_laid_off=Decimal("1"), total_laid_off=10),
        make_record(company="E", percentage_laid_off=Decimal("0.99"), total_laid_off=99),
    ]
    ranking = analytics.shutdown_headcount_ranking(records)
    assert [(f.company, f.value) for f in ranking] == [("C", 30), ("A", 10), ("D", 10)]
    assert [f.company for f in analytics.shutdown_funding_ranking(records)] == ["A", "C", "D"]


def test_grouped_totals(clean):
    assert analytics.layoffs_by_company(clean) == [
        GroupTotal("Acme", 500), GroupTotal("Nova", 300), GroupTotal("Zeta", 100),
    ]
    assert analytics.layoffs_by_industry(clean) == [
        GroupTotal("Retail", 500), GroupTotal("Fintech", 300), GroupTotal("Crypto", 100),
    ]
    assert analytics.layoffs_by_country(clean) == [
        GroupTotal("United States", 600), GroupTotal("Canada", 300),
    ]


def test_grouped_totals_exclude_null_totals_and_keep_null_keys(make_record):
    records = [
        make_record(industry=None, total_laid_off=5),
        make_record(industry="Retail", total_laid_off=None),
    ]
    assert analytics.layoffs_by_industry(records) == [GroupTotal(None, 5)]


def test_date_range(clean, make_record):
    assert analytics.date_range(clean) == DateRange(date(2022, 1, 15), date(2023, 2, 1))
    assert analytics.date_range([make_record(layoff_date=None)]) == DateRange(None, None)


def test_monthly_rolling_total(clean):
    assert analytics.monthly_rolling_total(clean) == [
        MonthlyTotal("2022-01", 500, 500),
        MonthlyTotal("2022-03", 340, 840),
        MonthlyTotal("2023-02", 60, 900),
    ]


def test_rolling_total_counts_months_without_headcount(make_record):
    records = [
        make_record(total_laid_off=5, layoff_date=date(2023, 3, 9)),
        make_record(total_laid_off=10, layoff_date=date(2023, 1, 5)),
        make_record(total_laid_off=None, layoff_date=date(2023, 2, 1)),
        make_record(total_laid_off=99, layoff_date=None),
    ]
    rows = analytics.monthly_rolling_total(records)
    assert [(r.month, r.rolling_total) for r in rows] == [
        ("2023-01", 10), ("2023-02", 10), ("2023-03", 15),
    ]


def test_rolling_total_is_monotonic(make_record):
    records = [
        make_record(company=str(i), total_laid_off=i * 7 % 11, layoff_date=date(2020 + i % 3, 1 + i % 12, 1))
        for i in range(40)
    ]
    totals = [r.rolling_total for r in analytics.monthly_rolling_total(records)]
    assert totals == sorted(totals)


def test_top_companies_per_year(clean):
    assert analytics.top_companies_per_year(clean, top_n=TOP_N) == [
        YearRanking(2022, "Acme", 500, 1),
        YearRanking(2022, "Nova", 300, 2),
        YearRanking(2022, "Zeta", 40, 3),
        YearRanking(2023, "Zeta", 60, 1),
    ]


def test_top_companies_dense_rank_with_ties(make_record):
    totals = {"A": 100, "B": 90, "C": 90, "D": 80, "E": 70, "F": 60, "G": 50, "H": 50}
    records = [
        make_record(company=name, total_laid_off=total, layoff_date=date(2022, 6, 1))
        for name, total in totals.items()
    ]
    rows = analytics.top_companies_per_year(records, top_n=TOP_N)

    assert [(r.company, r.rank) for r in rows] == [
        ("A", 1), ("B", 2), ("C", 2), ("D", 3), ("E", 4), ("F", 5),
    ]
    assert len({r.rank for r in rows}) <= TOP_N
    kept = min(r.total_laid_off for r in rows)
    dropped = [t for name, t in totals.items() if name not in {r.company for r in rows}]
    assert all(kept >= t for t in dropped)


def test_top_companies_sums_per_company_and_skips_nulls(make_record):
    records = [
        make_record(company="A", total_laid_off=10, layoff_date=date(2021, 1, 1)),
        make_record(company="A", total_laid_off=15, layoff_date=date(2021, 8, 1)),
        make_record(company="B", total_laid_off=20, layoff_date=date(2021, 2, 1)),
        make_record(company="C", total_laid_off=None, layoff_date=date(2021, 2, 1)),
        make_record(company="D", total_laid_off=999, layoff_date=None),
    ]
    rows = analytics.top_companies_per_year(records)
    assert rows == [YearRanking(2021, "A", 25, 1), YearRanking(2021, "B", 20, 2)]


def test_top_companies_rejects_non_positive_n(clean):
    with pytest.raises(ValueError):
        analytics.top_companies_per_year(clean, top_n=0)


def test_average_percentage(clean, make_record):
    assert analytics.average_percentage(clean) == Decimal("0.325")
    assert analytics.average_percentage([make_record(percentage_laid_off=None)]) is None


def test_average_percentage_by_industry(clean, make_record):
    records = clean + [make_record(industry="Travel", percentage_laid_off=None)]
    assert analytics.average_percentage_by_industry(records) == [
        GroupAverage("Travel", None),
        GroupAverage("Fintech", Decimal("1.00")),
        GroupAverage("Retail", Decimal("0.1")),
        GroupAverage("Crypto", Decimal("0.1")),
    ]


def test_every_view_handles_empty_dataset():
    report = analytics.build_report([])
    assert report["peak_layoff"] is None
    assert report["total_shutdown_count"] == 0
    assert report["date_range"] == DateRange(None, None)
    assert report["average_percentage"] is None
    for name in (
        "total_shutdowns",
        "shutdown_headcount_ranking",
        "shutdown_funding_ranking",
        "layoffs_by_company",
        "layoffs_by_industry",
        "layoffs_by_country",
        "monthly_rolling_total",
        "top_companies_per_year",
        "average_percentage_by_industry",
    ):
        assert report[name] == [], name


def test_compute_view_matches_report(clean):
    report = analytics.build_report(clean, top_n=2)
    for name in analytics.available_views():
        assert analytics.compute_view(name, clean, top_n=2) == report[name]


def test_compute_view_unknown_name(clean):
    with pytest.raises(ValueError, match="Unknown view"):
        analytics.compute_view("median_layoff", clean)


def test_to_jsonable(clean):
    payload = analytics.to_jsonable(analytics.build_report(clean))
    assert payload["date_range"] == {"earliest": "2022-01-15", "latest": "2023-02-01"}
    assert payload["monthly_rolling_total"][0] == {
        "month": "2022-01", "monthly_total": 500, "rolling_total": 500,
    }
    assert payload["total_shutdowns"][0]["company"] == "Nova"
