"""
Document Issue Detection

Ordered rule set that flags overset text, broken threading, empty
frames and overlapping frames.
"""

from .issues import (
    DocumentIssue,
    IssueDetector,
    IssueLocation,
    IssueRule,
    IssueSeverity,
    IssueType,
    detect_document_issues,
)

__all__ = [
    'DocumentIssue',
    'IssueDetector',
    'IssueLocation',
    'IssueRule',
    'IssueSeverity',
    'IssueType',
    'detect_document_issues',
]
