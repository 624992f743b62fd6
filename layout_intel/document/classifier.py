"""
Document Classifier

Maps page count, frame count and threading presence to a coarse
document type. The rules form a strict decision list: the first
matching rule wins, so their order decides boundary cases. For example
five pages with two frames and no threading fall through the magazine
rule (which needs threading) and land on report.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Tuple

from .state import DocumentState, DocumentType


@dataclass(frozen=True)
class ClassifierInput:
    """The only facts the classifier looks at."""
    page_count: int
    frame_count: int
    has_threading: bool = False

    @classmethod
    def from_state(cls, state: DocumentState) -> 'ClassifierInput':
        return cls(
            page_count=state.page_count,
            frame_count=state.frame_count,
            has_threading=state.spatial_analysis.has_threading,
        )


Rule = Tuple[str, Callable[[ClassifierInput], bool], DocumentType]

CLASSIFICATION_RULES: List[Rule] = [
    ('empty', lambda d: d.page_count == 0, DocumentType.EMPTY),
    ('single_page_few_frames',
     lambda d: d.page_count == 1 and d.frame_count <= 2,
     DocumentType.BROCHURE),
    ('short_many_frames',
     lambda d: 1 < d.page_count <= 4 and d.frame_count > 3,
     DocumentType.NEWSLETTER),
    ('medium_threaded',
     lambda d: 4 < d.page_count <= 20 and d.has_threading,
     DocumentType.MAGAZINE),
    ('long', lambda d: d.page_count > 20, DocumentType.BOOK),
    ('multi_page_few_frames',
     lambda d: d.page_count >= 2 and d.frame_count <= 3,
     DocumentType.REPORT),
]


def classify_document_type(facts: ClassifierInput) -> DocumentType:
    """
    Classify a document.

    Args:
        facts: Page count, frame count and threading presence

    Returns:
        The type of the first matching rule, or UNKNOWN
    """
    for _name, matches, doc_type in CLASSIFICATION_RULES:
        if matches(facts):
            return doc_type
    return DocumentType.UNKNOWN
