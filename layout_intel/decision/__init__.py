"""
Decision Support

Operation readiness gating and the audit log of agent decisions.
"""

from .decision_log import DecisionCheckpoint, DecisionLog, DecisionStage
from .readiness import (
    Operation,
    ReadinessGate,
    ReadinessResult,
    validate_operation_readiness,
)

__all__ = [
    'DecisionCheckpoint',
    'DecisionLog',
    'DecisionStage',
    'Operation',
    'ReadinessGate',
    'ReadinessResult',
    'validate_operation_readiness',
]
