"""
World Layoffs - cleaning pipeline and analytics for corporate layoff events.

The package turns a raw layoffs record set into a clean dataset through four
stages and computes a fixed set of analytics views over the result:

- Deduplication on the full nine-field record
- Text normalization (whitespace, industry and country spellings)
- Industry imputation from records of the same company and location
- Removal of rows with no layoff figures

Records load from and save to CSV files or Postgres tables.
"""

from __future__ import annotations

__version__ = "0.1.0"

# Public API exports
from layoffs.analytics import available_views, build_report, compute_view
from layoffs.config import Settings, get_settings
from layoffs.domain.models import LayoffRecord
from layoffs.pipeline import PipelineResult, available_stages, run_pipeline
from layoffs.stages.abstract import AbstractPipelineStage, PipelineStage, StageResult
from layoffs.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "LayoffRecord",
    # Pipeline
    "PipelineResult",
    "available_stages",
    "run_pipeline",
    # Stage abstractions
    "AbstractPipelineStage",
    "PipelineStage",
    "StageResult",
    # Analytics
    "available_views",
    "build_report",
    "compute_view",
    # Logging
    "configure_logging",
    "get_logger",
]
