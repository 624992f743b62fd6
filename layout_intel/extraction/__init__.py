"""
Boundary to the document fact extraction collaborator.
"""

from .source import CURRENT_PAGE, FactSource, JsonFileSource, StaticSource

__all__ = [
    'CURRENT_PAGE',
    'FactSource',
    'JsonFileSource',
    'StaticSource',
]
