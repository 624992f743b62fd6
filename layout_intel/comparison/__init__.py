"""
Tolerance-based layout comparison and scoring.
"""

from .engine import (
    ALL_CHECK_TYPES,
    CheckType,
    ComparisonEngine,
    ComparisonResult,
    Deviation,
    compare_layouts,
    relative_deviation,
)

__all__ = [
    'ALL_CHECK_TYPES',
    'CheckType',
    'ComparisonEngine',
    'ComparisonResult',
    'Deviation',
    'compare_layouts',
    'relative_deviation',
]
