"""
Industry imputation.

A record with a null or blank industry takes the industry of another record
for the same company at the same location. Candidates are resolved in source
order: the first record of an entity with a known industry wins, so the
outcome is deterministic even when an entity carries conflicting labels.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from layoffs.domain.models import LayoffRecord
from layoffs.stages.abstract import AbstractPipelineStage
from layoffs.utils.logging import get_logger

log = get_logger(__name__)

EntityKey = Tuple[str, str]


def known_industries(records: Sequence[LayoffRecord]) -> Dict[EntityKey, str]:
    """
    Map each (company, location) to the first non-blank industry seen for it.
    """
    lookup: Dict[EntityKey, str] = {}
    for record in records:
        if not record.industry_missing:
            lookup.setdefault(record.entity_key, record.industry)  # type: ignore[arg-type]
    return lookup


def find_missing_industry(records: Sequence[LayoffRecord]) -> List[Tuple[str, Optional[str]]]:
    """
    Distinct (company, industry) pairs whose industry is null or blank.
    """
    seen: Dict[Tuple[str, Optional[str]], None] = {}
    for record in records:
        if record.industry_missing:
            seen.setdefault((record.company, record.industry), None)
    return list(seen)


class Imputer(AbstractPipelineStage):
    name: str = "impute"
    description: str = "Fill missing industries from another record of the same company and location."

    def apply(self, records: Sequence[LayoffRecord]) -> List[LayoffRecord]:
        lookup = known_industries(records)
        filled: List[LayoffRecord] = []
        unresolved = 0
        for record in records:
            if record.industry_missing:
                industry = lookup.get(record.entity_key)
                if industry is not None:
                    record = record.model_copy(update={"industry": industry})
                else:
                    unresolved += 1
            filled.append(record)
        if unresolved:
            log.debug(
                "Industry left blank for records without a same-entity source",
                extra={"stage": self.name, "unresolved": unresolved},
            )
        return filled


__all__ = ["Imputer", "find_missing_industry", "known_industries"]
