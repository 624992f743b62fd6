"""
Plain-text rendering of analysis results.
"""

from .report import (
    format_comparison,
    format_decision_log,
    format_document_state,
    format_layout_metrics,
    format_readiness,
)

__all__ = [
    'format_comparison',
    'format_decision_log',
    'format_document_state',
    'format_layout_metrics',
    'format_readiness',
]
