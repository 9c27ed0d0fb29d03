"""
Domain package for the layoffs pipeline.

Exports the record model shared by the stages, the analytics views and the
record store. Keep this package focused on data definitions and validation.
"""

from layoffs.domain.models import FIELD_NAMES, FULL_SHUTDOWN, LayoffRecord, parse_layoff_date

__all__ = [
    "FIELD_NAMES",
    "FULL_SHUTDOWN",
    "LayoffRecord",
    "parse_layoff_date",
]
