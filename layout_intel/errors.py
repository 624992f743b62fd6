"""
Exceptions raised by the layout intelligence layer.

Analysis never raises on well-typed input; these cover the boundaries
where real failures happen: fetching facts and loading configuration.
"""

from __future__ import annotations

from typing import Optional


class LayoutIntelError(Exception):
    """Base class for layout intelligence errors."""
    pass


class ExtractionError(LayoutIntelError):
    """
    The fact-fetch collaborator failed.

    The collaborator's message is kept verbatim; the error is passed to
    the caller as-is and never retried here.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class ConfigError(LayoutIntelError):
    """Configuration file unreadable or malformed."""
    pass
