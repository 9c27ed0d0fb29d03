"""
Field normalization: whitespace trimming plus industry and country spellings.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from layoffs.domain.models import LayoffRecord
from layoffs.stages.abstract import AbstractPipelineStage

TRIMMED_FIELDS = ("company", "location", "industry", "stage", "country")

CRYPTO_PREFIX = "Crypto"
UNITED_STATES_PREFIX = "United States"


def _trim(value: Optional[str]) -> Optional[str]:
    return value.strip() if value is not None else None


def canonical_industry(industry: Optional[str]) -> Optional[str]:
    """'Crypto Currency', 'CryptoCurrency', ... all collapse to 'Crypto'."""
    if industry is not None and industry.startswith(CRYPTO_PREFIX):
        return CRYPTO_PREFIX
    return industry


def canonical_country(country: Optional[str]) -> Optional[str]:
    """'United States.' loses its trailing periods (and any spaces between them)."""
    if country is not None and country.startswith(UNITED_STATES_PREFIX):
        return country.rstrip(". ")
    return country


def normalize_record(record: LayoffRecord) -> LayoffRecord:
    """
    Return `record` with canonical text fields; the input is left untouched.
    """
    updates: Dict[str, Any] = {name: _trim(getattr(record, name)) for name in TRIMMED_FIELDS}
    updates["industry"] = canonical_industry(updates["industry"])
    updates["country"] = canonical_country(updates["country"])

    changed = {name: value for name, value in updates.items() if getattr(record, name) != value}
    if not changed:
        return record
    return record.model_copy(update=changed)


class Normalizer(AbstractPipelineStage):
    name: str = "normalize"
    description: str = "Trim text fields and canonicalize industry and country spellings."

    def apply(self, records: Sequence[LayoffRecord]) -> List[LayoffRecord]:
        return [normalize_record(record) for record in records]


__all__ = [
    "Normalizer",
    "canonical_country",
    "canonical_industry",
    "normalize_record",
]
