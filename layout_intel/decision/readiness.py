"""
Operation Readiness Gate

Pre-flight check that says whether a requested document operation
should go ahead given the current document health, and what to do first
when it should not.

The gate is advisory: it never blocks anything itself. Callers are
expected to check it before invoking an operation on the host.

Rule Table:
- Every operation requires a valid document state
- add_text is blocked while overset text exists
- thread_text_frames needs at least two text frames
- apply_paragraph_style needs text content to style
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..document.state import DocumentState

logger = logging.getLogger(__name__)


class Operation(Enum):
    """Document operations the gate knows about."""
    ADD_TEXT = "add_text"
    THREAD_TEXT_FRAMES = "thread_text_frames"
    APPLY_PARAGRAPH_STYLE = "apply_paragraph_style"
    CREATE_TEXT_FRAME = "create_text_frame"
    PLACE_IMAGE = "place_image"
    EXPORT_DOCUMENT = "export_document"

    @classmethod
    def parse(cls, name: str) -> Optional['Operation']:
        """Case-insensitive lookup; None for unknown operations."""
        key = name.strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return None


# A rule returns (blocker, recommendation) when the operation is blocked
ReadinessRule = Callable[[DocumentState], Optional[Tuple[str, str]]]


def _no_overset_text(state: DocumentState) -> Optional[Tuple[str, str]]:
    if state.has_overset_text:
        return (
            "Existing overset text must be resolved first",
            "Resolve overset text before adding new content",
        )
    return None


def _two_text_frames(state: DocumentState) -> Optional[Tuple[str, str]]:
    if len(state.text_frames) < 2:
        return (
            "Need at least 2 text frames to establish threading",
            "Create additional text frames first",
        )
    return None


def _has_text_content(state: DocumentState) -> Optional[Tuple[str, str]]:
    if not state.has_text:
        return (
            "No text content to apply styles to",
            "Add text content before applying styles",
        )
    return None


DEFAULT_RULES: Dict[Operation, List[ReadinessRule]] = {
    Operation.ADD_TEXT: [_no_overset_text],
    Operation.THREAD_TEXT_FRAMES: [_two_text_frames],
    Operation.APPLY_PARAGRAPH_STYLE: [_has_text_content],
}


@dataclass(frozen=True)
class ReadinessResult:
    """Verdict for one requested operation."""
    operation: str
    resolved: Optional[Operation]
    blockers: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()

    @property
    def ready(self) -> bool:
        return len(self.blockers) == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'operation': self.operation,
            'knownOperation': self.resolved.value if self.resolved else None,
            'ready': self.ready,
            'blockers': list(self.blockers),
            'recommendations': list(self.recommendations),
        }


class ReadinessGate:
    """
    Evaluates operation readiness against a document state.

    Usage:
        gate = ReadinessGate()
        result = gate.check('add_text', state)

        if not result.ready:
            for blocker in result.blockers:
                print(f"  - {blocker}")
    """

    def __init__(self, rules: Optional[Dict[Operation, List[ReadinessRule]]] = None):
        source = DEFAULT_RULES if rules is None else rules
        self._rules: Dict[Operation, List[ReadinessRule]] = {
            op: list(op_rules) for op, op_rules in source.items()
        }

    def register_rule(self, operation: Operation, rule: ReadinessRule) -> None:
        """Add a rule for an operation; it runs after the existing ones."""
        self._rules.setdefault(operation, []).append(rule)

    def rules_for(self, operation: Operation) -> List[ReadinessRule]:
        return list(self._rules.get(operation, []))

    def check(self, operation: str, state: DocumentState) -> ReadinessResult:
        """
        Check whether an operation can proceed.

        Args:
            operation: Operation name, matched case-insensitively. Unknown
                names are only checked against the universal precondition.
            state: Current document state

        Returns:
            ReadinessResult with blockers and recommendations
        """
        blockers: List[str] = []
        recommendations: List[str] = []

        if not state.is_valid:
            blockers.append("Document state is invalid")
            recommendations.append("Run document state analysis first")

        resolved = Operation.parse(operation)
        if resolved is None:
            logger.debug(f"No readiness rules for operation '{operation}'")
        else:
            for rule in self.rules_for(resolved):
                outcome = rule(state)
                if outcome is not None:
                    blocker, recommendation = outcome
                    blockers.append(blocker)
                    recommendations.append(recommendation)

        result = ReadinessResult(
            operation=operation,
            resolved=resolved,
            blockers=tuple(blockers),
            recommendations=tuple(recommendations),
        )
        if not result.ready:
            logger.info(f"Operation '{operation}' blocked: {'; '.join(blockers)}")
        return result


def validate_operation_readiness(operation: str, state: DocumentState) -> ReadinessResult:
    """Check readiness with the default rule table."""
    return ReadinessGate().check(operation, state)
