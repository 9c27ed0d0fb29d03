"""
Cleaning stages for the layoffs pipeline.

Re-exports the stage interfaces and the four concrete stages so downstream
code can import from `layoffs.stages` directly.
"""

from layoffs.stages.abstract import AbstractPipelineStage, PipelineStage, StageResult
from layoffs.stages.dedup import Deduplicator, find_duplicates
from layoffs.stages.impute import Imputer, find_missing_industry
from layoffs.stages.normalize import Normalizer
from layoffs.stages.row_filter import RowFilter

__all__ = [
    # Abstracts
    "AbstractPipelineStage",
    "PipelineStage",
    "StageResult",
    # Concrete stages
    "Deduplicator",
    "Imputer",
    "Normalizer",
    "RowFilter",
    # Inspection helpers
    "find_duplicates",
    "find_missing_industry",
]
