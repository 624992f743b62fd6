"""
Document Intelligence

Entry point for calling agents. Wires the fact source to the spatial
analyzer, classifier, issue detector, readiness gate, comparison engine
and decision log, and exposes each as one named operation with a
serializable result.

Usage:
    source = JsonFileSource('facts.json', 'metrics.json')
    intel = DocumentIntelligence(source)

    check = intel.perform_mandatory_state_check()
    if not check.can_proceed:
        print(check.next_recommended_action)

    result = intel.compare_to_reference(reference, tolerance=0.05)
    print(result.score)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .comparison.engine import ComparisonEngine, ComparisonResult, FontFallbacks
from .config import IntelligenceConfig
from .decision.decision_log import DecisionCheckpoint, DecisionLog
from .decision.readiness import ReadinessGate, ReadinessResult
from .document.classifier import ClassifierInput, classify_document_type
from .document.state import DocumentState, DocumentType
from .extraction.source import CURRENT_PAGE, FactSource
from .layout.facts import DocumentFacts
from .layout.metrics import LayoutMetrics
from .layout.spatial import SpaceRegion, SpatialAnalyzer, check_threading_integrity
from .validation.issues import DocumentIssue, IssueDetector

logger = logging.getLogger(__name__)

INVALID_STATE_ACTION = "Check the host application and document status"
PROCEED_ACTION = "Proceed with intended operation"


class ContentType(Enum):
    """Kinds of content a free region can be chosen for."""
    TEXT = "text"
    IMAGE = "image"
    TABLE = "table"


@dataclass(frozen=True)
class StateCheckResult:
    """Outcome of the check run before any major operation."""
    state: DocumentState
    can_proceed: bool
    critical_issues: Tuple[DocumentIssue, ...]
    next_recommended_action: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'state': self.state.to_dict(),
            'canProceed': self.can_proceed,
            'criticalIssues': [i.to_dict() for i in self.critical_issues],
            'nextRecommendedAction': self.next_recommended_action,
        }


def find_optimal_content_locations(
    state: DocumentState,
    content_type: Union[str, ContentType],
    required_size: Optional[Tuple[float, float]] = None,
) -> List[SpaceRegion]:
    """
    Choose free regions for new content.

    Args:
        state: Analysed document state
        content_type: 'text', 'image' or 'table'
        required_size: Minimum (width, height), if any

    Returns:
        Candidate regions; for text, text-friendly regions come first,
        otherwise largest first

    Raises:
        ValueError: If the content type is not known
    """
    kind = ContentType(content_type)
    regions = list(state.spatial_analysis.available_space)

    if required_size is not None:
        width, height = required_size
        regions = [r for r in regions if r.fits(width, height)]

    if kind == ContentType.TEXT:
        regions.sort(key=lambda r: (not r.is_optimal_for_text, -r.area))
    else:
        regions.sort(key=lambda r: -r.area)
    return regions


class DocumentIntelligence:
    """
    Layout intelligence operations over one document.

    The instance owns its decision log for its lifetime; pass a shared
    DecisionLog to let several instances record into the same log.
    """

    def __init__(
        self,
        source: FactSource,
        config: Optional[IntelligenceConfig] = None,
        decision_log: Optional[DecisionLog] = None,
        issue_detector: Optional[IssueDetector] = None,
        readiness_gate: Optional[ReadinessGate] = None,
    ):
        """
        Initialize the facade.

        Args:
            source: Extraction collaborator
            config: Defaults for analysis and comparison
            decision_log: Store for decisions (a fresh one if None)
            issue_detector: Issue rules (built-in rules if None)
            readiness_gate: Readiness rules (built-in table if None)
        """
        self.source = source
        self.config = config or IntelligenceConfig()
        self.decision_log = decision_log if decision_log is not None else DecisionLog()
        self.issue_detector = issue_detector or IssueDetector()
        self.readiness_gate = readiness_gate or ReadinessGate()
        self.spatial_analyzer = SpatialAnalyzer(
            min_text_region_width=self.config.min_text_region_width,
            min_text_region_height=self.config.min_text_region_height,
            min_free_region_side=self.config.min_free_region_side,
            respect_margins=self.config.respect_margins,
        )
        self.comparison_engine = ComparisonEngine(
            tolerance=self.config.tolerance,
            check_types=self.config.check_types,
            font_fallbacks=self.config.font_fallbacks,
        )

    # ------------------------------------------------------------------
    # State analysis
    # ------------------------------------------------------------------

    def analyze_document_state(self) -> DocumentState:
        """
        Fetch facts and build a fresh document state.

        Raises:
            ExtractionError: If the fact source fails
        """
        facts = self.source.fetch_document_facts()
        return self.build_state(facts)

    def build_state(self, facts: DocumentFacts) -> DocumentState:
        """Derive a document state from already extracted facts."""
        if not facts.document_open:
            logger.warning("No document open; returning invalid state")
            state = DocumentState(is_valid=False, document_name=facts.document_name)
            return replace(state, issues=tuple(self.issue_detector.detect(state)))

        analysis = self.spatial_analyzer.analyze(facts.pages, facts.text_frames)

        integrity = facts.threading_integrity
        if integrity is None:
            integrity = check_threading_integrity(facts.text_frames, analysis.threading_map)

        state = DocumentState(
            is_valid=True,
            pages=facts.pages,
            text_frames=facts.text_frames,
            text_content=facts.text_content,
            has_overset_text=facts.has_overset_text,
            threading_integrity=integrity,
            spatial_analysis=analysis,
            document_name=facts.document_name,
        )
        state = replace(
            state,
            document_type=self.classify_document_type(ClassifierInput.from_state(state)),
        )
        state = replace(state, issues=tuple(self.detect_document_issues(state)))

        logger.info(
            f"Document state: {state.page_count} pages, {state.frame_count} frames, "
            f"type={state.document_type.value}, {len(state.issues)} issue(s)"
        )
        return state

    def detect_document_issues(self, state: DocumentState) -> List[DocumentIssue]:
        return self.issue_detector.detect(state)

    @staticmethod
    def classify_document_type(facts: ClassifierInput) -> DocumentType:
        return classify_document_type(facts)

    def validate_operation_readiness(self, operation: str, state: DocumentState) -> ReadinessResult:
        return self.readiness_gate.check(operation, state)

    def find_optimal_content_locations(
        self,
        state: DocumentState,
        content_type: Union[str, ContentType],
        required_size: Optional[Tuple[float, float]] = None,
    ) -> List[SpaceRegion]:
        return find_optimal_content_locations(state, content_type, required_size)

    def perform_mandatory_state_check(self) -> StateCheckResult:
        """
        Analyse the document and decide whether work can go ahead.

        Raises:
            ExtractionError: If the fact source fails
        """
        state = self.analyze_document_state()
        critical = tuple(i for i in state.issues if i.is_critical)
        can_proceed = state.is_valid and not critical

        if critical:
            action = critical[0].suggested_fix
        elif not state.is_valid:
            action = INVALID_STATE_ACTION
        else:
            action = PROCEED_ACTION

        return StateCheckResult(
            state=state,
            can_proceed=can_proceed,
            critical_issues=critical,
            next_recommended_action=action,
        )

    # ------------------------------------------------------------------
    # Metrics and comparison
    # ------------------------------------------------------------------

    def extract_layout_metrics(self, page_selector: int = CURRENT_PAGE) -> LayoutMetrics:
        """
        Fetch a layout snapshot from the source.

        Raises:
            ExtractionError: If the fact source fails
        """
        return self.source.fetch_layout_metrics(page_selector)

    def compare_to_reference(
        self,
        reference: Union[LayoutMetrics, Mapping[str, Any]],
        tolerance: Optional[float] = None,
        check_types: Optional[Iterable[Any]] = None,
        font_fallbacks: Optional[FontFallbacks] = None,
        page_selector: int = CURRENT_PAGE,
    ) -> ComparisonResult:
        """
        Capture the current layout and score it against a reference.

        A reference given in its JSON shape may carry its own
        ``fontFallbacks``; explicit ``font_fallbacks`` win over those.

        Raises:
            ExtractionError: If the current snapshot cannot be fetched
            ValueError: If the reference shape or a check type is invalid
        """
        fallbacks: Dict[str, Sequence[str]] = {}
        if not isinstance(reference, LayoutMetrics):
            fallbacks.update(reference.get('fontFallbacks') or {})
            reference = LayoutMetrics.from_dict(reference)
        fallbacks.update(font_fallbacks or {})

        current = self.extract_layout_metrics(page_selector)
        return self.comparison_engine.compare(
            reference,
            current,
            tolerance=tolerance,
            check_types=check_types,
            font_fallbacks=fallbacks,
        )

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def record_decision(
        self,
        stage: Any,
        decision: str,
        alternatives: Iterable[str] = (),
        reasoning: str = '',
    ) -> DecisionCheckpoint:
        return self.decision_log.record(stage, decision, alternatives, reasoning)

    def get_decision_log(self) -> List[DecisionCheckpoint]:
        return self.decision_log.list()
