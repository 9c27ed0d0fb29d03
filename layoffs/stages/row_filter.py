"""
Unusable-row filter.
"""

from __future__ import annotations

from typing import List, Sequence

from layoffs.domain.models import LayoffRecord
from layoffs.stages.abstract import AbstractPipelineStage


def has_layoff_figures(record: LayoffRecord) -> bool:
    return record.total_laid_off is not None or record.percentage_laid_off is not None


class RowFilter(AbstractPipelineStage):
    """
    Drop records that report neither a headcount nor a percentage.
    """

    name: str = "row_filter"
    description: str = "Drop records where total and percentage laid off are both null."

    def apply(self, records: Sequence[LayoffRecord]) -> List[LayoffRecord]:
        return [record for record in records if has_layoff_figures(record)]


__all__ = ["RowFilter", "has_layoff_figures"]
