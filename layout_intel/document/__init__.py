"""
Document state snapshot and classification.
"""

from .classifier import ClassifierInput, classify_document_type
from .state import DocumentState, DocumentType

__all__ = [
    'ClassifierInput',
    'classify_document_type',
    'DocumentState',
    'DocumentType',
]
