"""
Document Issue Detection

Applies a fixed, ordered rule set to a document state snapshot and
emits typed, severity-ranked issues.

Rule Order (the order issues are presented to the caller):
1. Overset text            - critical
2. Broken threading        - critical
3. Empty text frames       - warning
4. Overlapping text frames - warning

Design Philosophy:
- Flag issues, don't fix them
- Every issue carries a suggested remediation
- Absence of data yields no issues, never an exception
- Issues are derived, not stored; they are recomputed on every check
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..layout.spatial import detect_spatial_overlaps

if TYPE_CHECKING:
    from ..document.state import DocumentState

logger = logging.getLogger(__name__)


class IssueType(Enum):
    """Kinds of document problems."""
    OVERSET_TEXT = "overset_text"
    BROKEN_THREADING = "broken_threading"
    POOR_SPACING = "poor_spacing"
    INCONSISTENT_STYLES = "inconsistent_styles"
    SPATIAL_OVERLAP = "spatial_overlap"
    EMPTY_FRAMES = "empty_frames"
    MISSING_CONTENT = "missing_content"


class IssueSeverity(Enum):
    """Severity levels for document issues."""
    CRITICAL = "critical"   # Blocks further layout work
    WARNING = "warning"     # Should be reviewed
    INFO = "info"           # Informational


@dataclass(frozen=True)
class IssueLocation:
    """Where an issue was found."""
    page: Optional[int] = None
    frame: Optional[int] = None

    def to_dict(self) -> Dict[str, int]:
        result = {}
        if self.page is not None:
            result['page'] = self.page
        if self.frame is not None:
            result['frame'] = self.frame
        return result


@dataclass(frozen=True)
class DocumentIssue:
    """
    A single document problem.

    Provides what is wrong, how bad it is and what to do about it,
    so a calling agent can act on it without further analysis.
    """
    type: IssueType
    severity: IssueSeverity
    description: str
    suggested_fix: str
    location: Optional[IssueLocation] = None

    @property
    def is_critical(self) -> bool:
        return self.severity == IssueSeverity.CRITICAL

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: Dict[str, Any] = {
            'type': self.type.value,
            'severity': self.severity.value,
            'description': self.description,
            'suggestedFix': self.suggested_fix,
        }
        if self.location is not None:
            result['location'] = self.location.to_dict()
        return result

    def __str__(self) -> str:
        return f"[{self.severity.value.upper()}] {self.type.value}: {self.description}"


class IssueRule:
    """
    Base class for document issue rules.

    Subclass this to add a rule; register it with IssueDetector.
    """

    name: str = 'unnamed_rule'

    def check(self, state: 'DocumentState') -> List[DocumentIssue]:
        """
        Inspect the state and return any issues found.

        Override this in subclasses.
        """
        raise NotImplementedError


class OversetTextRule(IssueRule):
    """Text that does not fit its frame and is not rendered."""

    name = 'overset_text'

    def check(self, state: 'DocumentState') -> List[DocumentIssue]:
        if not state.has_overset_text:
            return []

        location = None
        for frame in state.text_frames:
            if frame.overflows:
                location = IssueLocation(page=frame.page_number, frame=frame.index)
                break

        return [DocumentIssue(
            type=IssueType.OVERSET_TEXT,
            severity=IssueSeverity.CRITICAL,
            description="Document contains overset text that is not visible",
            suggested_fix="Resolve overset text (enlarge or thread the frame) before adding content",
            location=location,
        )]


class BrokenThreadingRule(IssueRule):
    """Text flow between frames is interrupted."""

    name = 'broken_threading'

    def check(self, state: 'DocumentState') -> List[DocumentIssue]:
        if state.threading_integrity:
            return []

        location = None
        for connection in state.spatial_analysis.threading_map:
            if not connection.is_valid:
                location = IssueLocation(
                    page=connection.source_page,
                    frame=connection.source_frame,
                )
                break

        return [DocumentIssue(
            type=IssueType.BROKEN_THREADING,
            severity=IssueSeverity.CRITICAL,
            description="Text frame threading is broken",
            suggested_fix="Repair threading connections between text frames",
            location=location,
        )]


class EmptyFramesRule(IssueRule):
    """Text frames with no content."""

    name = 'empty_frames'

    def check(self, state: 'DocumentState') -> List[DocumentIssue]:
        empty = [f for f in state.text_frames if f.content_length == 0]
        if not empty:
            return []

        first = empty[0]
        return [DocumentIssue(
            type=IssueType.EMPTY_FRAMES,
            severity=IssueSeverity.WARNING,
            description=f"{len(empty)} text frames are empty",
            suggested_fix="Add content to empty frames or remove unnecessary frames",
            location=IssueLocation(page=first.page_number, frame=first.index),
        )]


class SpatialOverlapRule(IssueRule):
    """Text frames on the same page whose bounds intersect."""

    name = 'spatial_overlap'

    def check(self, state: 'DocumentState') -> List[DocumentIssue]:
        pairs = detect_spatial_overlaps(state.text_frames)
        if not pairs:
            return []

        first, second = pairs[0]
        listed = ', '.join(f"{a.index}/{b.index}" for a, b in pairs)
        return [DocumentIssue(
            type=IssueType.SPATIAL_OVERLAP,
            severity=IssueSeverity.WARNING,
            description=f"Some text frames overlap inappropriately (frames {listed})",
            suggested_fix="Reposition or resize the overlapping frames",
            location=IssueLocation(page=first.page_number, frame=first.index),
        )]


DEFAULT_RULES = (
    OversetTextRule,
    BrokenThreadingRule,
    EmptyFramesRule,
    SpatialOverlapRule,
)


class IssueDetector:
    """
    Runs issue rules over a document state.

    Usage:
        detector = IssueDetector()
        issues = detector.detect(state)

        for issue in issues:
            print(issue.severity.value, issue.description)
    """

    def __init__(self, rules: Optional[List[IssueRule]] = None):
        """
        Initialize the detector.

        Args:
            rules: Rules to apply in order; defaults to the built-in set
        """
        if rules is None:
            rules = [rule_cls() for rule_cls in DEFAULT_RULES]
        self.rules: List[IssueRule] = list(rules)

    def add_rule(self, rule: IssueRule) -> None:
        """Append a rule; it runs after the existing ones."""
        self.rules.append(rule)

    def detect(self, state: 'DocumentState') -> List[DocumentIssue]:
        """Apply every rule in order and collect the issues."""
        issues: List[DocumentIssue] = []
        for rule in self.rules:
            found = rule.check(state)
            if found:
                logger.debug(f"Rule {rule.name} reported {len(found)} issue(s)")
            issues.extend(found)
        return issues

    def critical_issues(self, state: 'DocumentState') -> List[DocumentIssue]:
        """Only the critical issues, in rule order."""
        return [i for i in self.detect(state) if i.is_critical]


def detect_document_issues(state: 'DocumentState') -> List[DocumentIssue]:
    """Detect issues with the built-in rule set."""
    return IssueDetector().detect(state)
