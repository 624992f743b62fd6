"""
Layout Intelligence

Reasoning layer in front of a page-layout automation host: inspects
extracted document facts, classifies the document, detects structural
problems, gates operations on document health, and scores an observed
layout against a reference within a tolerance.

Quick start:
    from layout_intel import DocumentIntelligence, JsonFileSource

    intel = DocumentIntelligence(JsonFileSource('facts.json', 'metrics.json'))
    state = intel.analyze_document_state()
"""

from .comparison import CheckType, ComparisonEngine, ComparisonResult, Deviation
from .config import ConfigLoader, IntelligenceConfig
from .decision import DecisionCheckpoint, DecisionLog, DecisionStage, Operation, ReadinessGate
from .document import DocumentState, DocumentType, classify_document_type
from .errors import ConfigError, ExtractionError, LayoutIntelError
from .extraction import FactSource, JsonFileSource, StaticSource
from .intelligence import DocumentIntelligence, StateCheckResult
from .layout import Bounds, DocumentFacts, LayoutMetrics
from .validation import DocumentIssue, IssueSeverity, IssueType

__version__ = "0.1.0"

__all__ = [
    'DocumentIntelligence',
    'StateCheckResult',
    'IntelligenceConfig',
    'ConfigLoader',
    'LayoutIntelError',
    'ExtractionError',
    'ConfigError',
    'FactSource',
    'JsonFileSource',
    'StaticSource',
    'Bounds',
    'DocumentFacts',
    'LayoutMetrics',
    'DocumentState',
    'DocumentType',
    'classify_document_type',
    'DocumentIssue',
    'IssueSeverity',
    'IssueType',
    'Operation',
    'ReadinessGate',
    'DecisionLog',
    'DecisionStage',
    'DecisionCheckpoint',
    'CheckType',
    'ComparisonEngine',
    'ComparisonResult',
    'Deviation',
]
