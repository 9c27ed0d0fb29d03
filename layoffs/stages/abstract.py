"""
Stage interfaces and result contracts for the cleaning pipeline.

Concrete stages (dedup, normalize, impute, row_filter) implement the
PipelineStage protocol: they take the full output of the previous stage and
return a new list of records without mutating their input. The pipeline
runner wraps each call and reports a StageResult.
"""

from __future__ import annotations

import abc
from typing import List, Optional, Protocol, Sequence, TypedDict, runtime_checkable

from layoffs.domain.models import LayoffRecord


class StageResult(TypedDict, total=False):
    """
    Per-stage metrics reported by the pipeline runner.
    """

    stage: str
    rows_in: int
    rows_out: int
    rows_removed: int
    rows_changed: int
    duration_seconds: float
    peak_rss_bytes: Optional[int]
    cpu_percent: Optional[float]


@runtime_checkable
class PipelineStage(Protocol):
    """
    Common interface all cleaning stages implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of what the stage does.
    """

    name: str
    description: str

    def apply(self, records: Sequence[LayoffRecord]) -> List[LayoffRecord]:
        """
        Transform the full record set and return a new one.
        """
        ...


class AbstractPipelineStage(abc.ABC):
    """
    ABC helper for class-based stages.

    Subclasses set `name` and `description` and implement `apply`.
    """

    name: str
    description: str

    @abc.abstractmethod
    def apply(self, records: Sequence[LayoffRecord]) -> List[LayoffRecord]:  # pragma: no cover
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"


__all__ = [
    "StageResult",
    "PipelineStage",
    "AbstractPipelineStage",
]
