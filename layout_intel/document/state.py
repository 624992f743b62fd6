"""
Document State

A DocumentState is produced fresh on each state check and replaced,
never mutated. It aggregates the extracted facts with everything
derived from them: spatial analysis, document type and issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..layout.facts import PageInfo, TextFrameInfo
from ..layout.spatial import SpatialAnalysis
from ..validation.issues import DocumentIssue, IssueSeverity


class DocumentType(Enum):
    """Coarse document classification used to pick a workflow."""
    EMPTY = "empty"
    BROCHURE = "brochure"
    NEWSLETTER = "newsletter"
    MAGAZINE = "magazine"
    REPORT = "report"
    BOOK = "book"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DocumentState:
    """
    Snapshot of a document's health.

    A partially filled state is acceptable input for issue detection and
    readiness checks: only ``is_valid`` and ``text_frames`` are needed.
    """
    is_valid: bool = False
    pages: Tuple[PageInfo, ...] = ()
    text_frames: Tuple[TextFrameInfo, ...] = ()
    text_content: str = ''
    has_overset_text: bool = False
    threading_integrity: bool = True
    document_type: DocumentType = DocumentType.UNKNOWN
    spatial_analysis: SpatialAnalysis = field(default_factory=SpatialAnalysis)
    issues: Tuple[DocumentIssue, ...] = ()
    document_name: Optional[str] = None

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def frame_count(self) -> int:
        return len(self.text_frames)

    @property
    def has_text(self) -> bool:
        return bool(self.text_content and self.text_content.strip())

    @property
    def critical_issues(self) -> List[DocumentIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.CRITICAL]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-shaped state."""
        return {
            'isValid': self.is_valid,
            'documentName': self.document_name,
            'pageInfo': [p.to_dict() for p in self.pages],
            'textFrames': [f.to_dict() for f in self.text_frames],
            'textContent': self.text_content,
            'hasOversetText': self.has_overset_text,
            'threadingIntegrity': self.threading_integrity,
            'documentType': self.document_type.value,
            'spatialAnalysis': self.spatial_analysis.to_dict(),
            'issues': [i.to_dict() for i in self.issues],
        }
