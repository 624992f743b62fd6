"""
Tests for issue detection, document classification and the readiness
gate.
"""

import pytest
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from layout_intel.decision.readiness import (
    Operation,
    ReadinessGate,
    validate_operation_readiness,
)
from layout_intel.document.classifier import ClassifierInput, classify_document_type
from layout_intel.document.state import DocumentState, DocumentType
from layout_intel.layout.box import Bounds
from layout_intel.layout.facts import PageInfo, TextFrameInfo
from layout_intel.validation.issues import (
    DocumentIssue,
    IssueDetector,
    IssueRule,
    IssueSeverity,
    IssueType,
    detect_document_issues,
)


def frame(index, bounds=(0, 0, 10, 10), page=1, content_length=100, **kwargs):
    return TextFrameInfo(
        index=index,
        page_number=page,
        bounds=Bounds(*bounds),
        content_length=content_length,
        **kwargs
    )


class TestIssueDetector:

    def setup_method(self):
        self.detector = IssueDetector()

    def test_healthy_state(self):
        state = DocumentState(is_valid=True, text_frames=(frame(0),))
        assert self.detector.detect(state) == []

    def test_empty_state_yields_no_issues(self):
        assert detect_document_issues(DocumentState()) == []

    def test_rule_order(self):
        state = DocumentState(
            is_valid=True,
            has_overset_text=True,
            threading_integrity=False,
            text_frames=(
                frame(0, (100, 0, 0, 50), content_length=0),
                frame(1, (100, 40, 0, 90)),
            ),
        )
        issues = self.detector.detect(state)
        assert [i.type for i in issues] == [
            IssueType.OVERSET_TEXT,
            IssueType.BROKEN_THREADING,
            IssueType.EMPTY_FRAMES,
            IssueType.SPATIAL_OVERLAP,
        ]
        assert [i.severity for i in issues] == [
            IssueSeverity.CRITICAL,
            IssueSeverity.CRITICAL,
            IssueSeverity.WARNING,
            IssueSeverity.WARNING,
        ]

    def test_empty_frames_counted(self):
        state = DocumentState(
            is_valid=True,
            text_frames=(
                frame(0, (0, 0, 10, 10), content_length=0),
                frame(1, (20, 0, 30, 10), content_length=5),
                frame(2, (40, 0, 50, 10), page=2, content_length=0),
            ),
        )
        issues = self.detector.detect(state)
        assert len(issues) == 1
        assert issues[0].description == "2 text frames are empty"
        assert issues[0].location.frame == 0

    def test_overlap_lists_frames(self):
        state = DocumentState(
            is_valid=True,
            text_frames=(frame(3, (100, 0, 0, 50)), frame(4, (100, 40, 0, 90))),
        )
        issue = self.detector.detect(state)[0]
        assert issue.type == IssueType.SPATIAL_OVERLAP
        assert "3/4" in issue.description
        assert issue.location.page == 1

    def test_no_overlap_for_separate_frames(self):
        state = DocumentState(
            is_valid=True,
            text_frames=(frame(0, (100, 0, 0, 50)), frame(1, (100, 60, 0, 90))),
        )
        assert self.detector.detect(state) == []

    def test_overset_location(self):
        state = DocumentState(
            is_valid=True,
            has_overset_text=True,
            text_frames=(frame(0), frame(1, (20, 0, 30, 10), page=2, overflows=True)),
        )
        issue = self.detector.detect(state)[0]
        assert issue.is_critical
        assert issue.location.page == 2
        assert issue.location.frame == 1

    def test_critical_issues(self):
        state = DocumentState(
            is_valid=True,
            has_overset_text=True,
            text_frames=(frame(0, content_length=0),),
        )
        critical = self.detector.critical_issues(state)
        assert [i.type for i in critical] == [IssueType.OVERSET_TEXT]

    def test_custom_rule_runs_last(self):
        class MissingContentRule(IssueRule):
            name = 'missing_content'

            def check(self, state):
                if state.has_text:
                    return []
                return [DocumentIssue(
                    type=IssueType.MISSING_CONTENT,
                    severity=IssueSeverity.INFO,
                    description="Document has no text",
                    suggested_fix="Add copy",
                )]

        self.detector.add_rule(MissingContentRule())
        state = DocumentState(is_valid=True, has_overset_text=True)
        types = [i.type for i in self.detector.detect(state)]
        assert types == [IssueType.OVERSET_TEXT, IssueType.MISSING_CONTENT]

    def test_issue_serialization(self):
        state = DocumentState(is_valid=True, threading_integrity=False)
        data = self.detector.detect(state)[0].to_dict()
        assert data['type'] == 'broken_threading'
        assert data['severity'] == 'critical'
        assert 'suggestedFix' in data


class TestDocumentClassifier:

    @pytest.mark.parametrize("page_count,frame_count,threading,expected", [
        (0, 0, False, DocumentType.EMPTY),
        (0, 10, True, DocumentType.EMPTY),
        (1, 2, False, DocumentType.BROCHURE),
        (1, 3, False, DocumentType.UNKNOWN),
        (3, 4, False, DocumentType.NEWSLETTER),
        (2, 2, False, DocumentType.REPORT),
        (5, 2, False, DocumentType.REPORT),
        (5, 2, True, DocumentType.MAGAZINE),
        (10, 5, True, DocumentType.MAGAZINE),
        (10, 5, False, DocumentType.UNKNOWN),
        (21, 1, False, DocumentType.BOOK),
        (40, 80, True, DocumentType.BOOK),
    ])
    def test_decision_list(self, page_count, frame_count, threading, expected):
        facts = ClassifierInput(page_count, frame_count, threading)
        assert classify_document_type(facts) == expected

    def test_from_state(self):
        state = DocumentState(
            is_valid=True,
            pages=(PageInfo(number=1), PageInfo(number=2)),
            text_frames=(frame(0), frame(1, (20, 0, 30, 10))),
        )
        facts = ClassifierInput.from_state(state)
        assert facts == ClassifierInput(page_count=2, frame_count=2, has_threading=False)
        assert classify_document_type(facts) == DocumentType.REPORT


class TestReadinessGate:

    def setup_method(self):
        self.gate = ReadinessGate()
        self.state = DocumentState(
            is_valid=True,
            text_frames=(frame(0), frame(1, (20, 0, 30, 10))),
            text_content="Body copy",
        )

    def test_invalid_state_blocks_everything(self):
        result = self.gate.check('export_document', DocumentState())
        assert not result.ready
        assert result.blockers == ("Document state is invalid",)
        assert result.recommendations == ("Run document state analysis first",)

    def test_add_text_blocked_by_overset(self):
        state = DocumentState(is_valid=True, has_overset_text=True)
        result = self.gate.check('add_text', state)
        assert not result.ready
        assert "Existing overset text must be resolved first" in result.blockers

    def test_thread_needs_two_frames(self):
        single = DocumentState(is_valid=True, text_frames=(frame(0),))
        assert not self.gate.check('thread_text_frames', single).ready
        assert self.gate.check('thread_text_frames', self.state).ready

    def test_style_needs_text(self):
        blank = DocumentState(is_valid=True, text_content="   \n")
        result = self.gate.check('apply_paragraph_style', blank)
        assert result.blockers == ("No text content to apply styles to",)
        assert self.gate.check('apply_paragraph_style', self.state).ready

    def test_case_insensitive(self):
        result = self.gate.check('ADD_TEXT', self.state)
        assert result.resolved == Operation.ADD_TEXT
        assert result.ready

    def test_unknown_operation_universal_rule_only(self):
        result = self.gate.check('rotate_spread', self.state)
        assert result.ready
        assert result.resolved is None
        assert not self.gate.check('rotate_spread', DocumentState()).ready

    def test_blockers_accumulate(self):
        state = DocumentState(is_valid=False, has_overset_text=True)
        result = validate_operation_readiness('add_text', state)
        assert len(result.blockers) == 2
        assert len(result.recommendations) == 2

    def test_register_rule(self):
        def needs_pages(state):
            if state.page_count == 0:
                return ("Document has no pages", "Add a page first")
            return None

        self.gate.register_rule(Operation.PLACE_IMAGE, needs_pages)
        assert self.gate.rules_for(Operation.PLACE_IMAGE) == [needs_pages]
        result = self.gate.check('place_image', self.state)
        assert result.blockers == ("Document has no pages",)
        assert ReadinessGate().check('place_image', self.state).ready

    def test_result_serialization(self):
        data = self.gate.check('Thread_Text_Frames', self.state).to_dict()
        assert data == {
            'operation': 'Thread_Text_Frames',
            'knownOperation': 'thread_text_frames',
            'ready': True,
            'blockers': [],
            'recommendations': [],
        }
