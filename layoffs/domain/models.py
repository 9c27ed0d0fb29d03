"""
Domain models for the layoffs pipeline.

Defines the record schema aligned with the `layoffs` table DDL in
`layoffs.infrastructure.record_store`. Records are frozen: pipeline stages
derive new records with `model_copy(update=...)` instead of mutating.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

# Column order shared by the CSV header, the table DDL and the identity key.
FIELD_NAMES: Tuple[str, ...] = (
    "company",
    "location",
    "industry",
    "total_laid_off",
    "percentage_laid_off",
    "layoff_date",
    "stage",
    "country",
    "funds_raised_millions",
)

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y")

FULL_SHUTDOWN = Decimal("1")


def parse_layoff_date(value: Any) -> Optional[date]:
    """
    Coerce a raw date value into a `date`.

    Accepts `date`/`datetime` objects, ISO strings and US `M/D/YYYY` strings.
    Anything unparseable becomes None; a malformed date is not fatal.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


class LayoffRecord(BaseModel):
    """
    A single layoff event report (one row of the `layoffs` table).
    """

    company: str = Field(..., description="Company name.")
    location: str = Field(..., description="City or metro area of the layoff.")
    industry: Optional[str] = Field(None, description="Industry label; may be blank.")
    total_laid_off: Optional[int] = Field(None, description="Headcount laid off.")
    percentage_laid_off: Optional[Decimal] = Field(
        None, description="Share of workforce laid off; 1 means the company went under."
    )
    layoff_date: Optional[date] = Field(None, description="Date the layoff was reported.")
    stage: Optional[str] = Field(None, description="Funding stage, e.g. 'Series B'.")
    country: Optional[str] = Field(None, description="Country of the layoff.")
    funds_raised_millions: Optional[int] = Field(None, description="Funding raised, USD millions.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    @field_validator("layoff_date", mode="before")
    @classmethod
    def _lenient_date(cls, value: Any) -> Optional[date]:
        return parse_layoff_date(value)

    @property
    def identity_key(self) -> Tuple[Any, ...]:
        """All nine fields, in column order."""
        return tuple(getattr(self, name) for name in FIELD_NAMES)

    @property
    def entity_key(self) -> Tuple[str, str]:
        return (self.company, self.location)

    @property
    def has_null_field(self) -> bool:
        return any(value is None for value in self.identity_key)

    @property
    def industry_missing(self) -> bool:
        return self.industry is None or self.industry == ""

    @property
    def is_full_shutdown(self) -> bool:
        return self.percentage_laid_off is not None and self.percentage_laid_off == FULL_SHUTDOWN

    @property
    def percentage_in_range(self) -> bool:
        pct = self.percentage_laid_off
        return pct is None or Decimal(0) <= pct <= FULL_SHUTDOWN


__all__ = ["FIELD_NAMES", "FULL_SHUTDOWN", "LayoffRecord", "parse_layoff_date"]
