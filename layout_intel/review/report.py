"""
Plain-Text Reports

Renders comparison results, the decision log, layout metrics and
document state as short text blocks for a calling agent or a terminal.
"""

from __future__ import annotations

from typing import Iterable, List

from ..comparison.engine import ComparisonResult
from ..decision.decision_log import DecisionCheckpoint
from ..decision.readiness import ReadinessResult
from ..document.state import DocumentState
from ..layout.metrics import LayoutMetrics

NO_DECISIONS = "No decisions recorded yet. Use record_decision to track decision-making."


def _number(value: float) -> str:
    """Format a point value without a trailing .0."""
    return f"{value:g}"


def format_comparison(result: ComparisonResult) -> str:
    lines = [
        "Layout Comparison Results",
        "",
        f"Overall Match: {'PASS' if result.match else 'FAIL'}",
        f"Score: {result.score}%",
        f"Tolerance: ±{_number(result.tolerance * 100)}%",
        "",
    ]

    if result.deviations:
        lines.append(f"Deviations Found ({len(result.deviations)}):")
        for dev in result.deviations:
            lines.append(
                f"  - {dev.type} - {dev.field}: Expected {dev.expected}, "
                f"Got {dev.actual} ({dev.deviation}% off)"
            )
    else:
        lines.append("Layout matches reference within tolerance.")

    return "\n".join(lines)


def format_decision_log(checkpoints: Iterable[DecisionCheckpoint]) -> str:
    """Numbered decision list, oldest first."""
    checkpoints = list(checkpoints)
    if not checkpoints:
        return NO_DECISIONS

    lines: List[str] = ["Decision Log", ""]
    for idx, checkpoint in enumerate(checkpoints, 1):
        lines.append(f"{idx}. {checkpoint.stage.value.upper()} Stage")
        lines.append(f"Time: {checkpoint.timestamp.isoformat()}")
        lines.append(f"Decision: {checkpoint.decision}")
        lines.append(f"Reasoning: {checkpoint.reasoning}")
        if checkpoint.alternatives:
            lines.append(f"Alternatives considered: {', '.join(checkpoint.alternatives)}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def format_layout_metrics(metrics: LayoutMetrics, page_selector: int = -1) -> str:
    page = "Current" if page_selector == -1 else str(page_selector)
    lines = ["Layout Metrics", "", f"Page: {page}"]

    if metrics.margins is not None:
        m = metrics.margins
        lines.append(
            f"Margins: Top: {_number(m.top)}pt, Left: {_number(m.left)}pt, "
            f"Bottom: {_number(m.bottom)}pt, Right: {_number(m.right)}pt"
        )
    lines.append(f"Columns: {metrics.columns}")
    lines.append("")

    frames = metrics.frames or ()
    lines.append(f"Text Frames ({len(frames)} total):")
    for idx, frame in enumerate(frames, 1):
        line = (
            f"  {idx}. Position: ({_number(frame.x)}, {_number(frame.y)}), "
            f"Size: {_number(frame.width)}x{_number(frame.height)}pt"
        )
        if frame.has_text:
            line += f", {frame.content_length} chars"
            if frame.overflows:
                line += " OVERFLOWS"
        else:
            line += ", Empty"
        lines.append(line)

    if metrics.styles:
        lines.append("")
        lines.append("Styles Used:")
        for style in metrics.styles:
            lines.append(f"  - {style.name}: {_number(style.font_size)}pt, {style.font_family}")

    if metrics.text_regions:
        lines.append("")
        lines.append("Text Regions:")
        for region in metrics.text_regions:
            lines.append(f"  Frame {region.frame_index}:")
            for idx, segment in enumerate(region.regions, 1):
                va = segment.visual_attributes
                lines.append(f"    {idx}. \"{segment.text_snippet}\"")
                lines.append(
                    f"       Font: {va.font_family} {va.font_style}, "
                    f"{_number(va.font_size)}/{_number(va.leading)}pt"
                )
                align = f"       Align: {va.alignment.value}"
                if va.first_line_indent > 0:
                    align += f", First indent: {_number(va.first_line_indent)}pt"
                if va.left_indent > 0:
                    align += f", Left indent: {_number(va.left_indent)}pt"
                lines.append(align)

    return "\n".join(lines)


def format_readiness(result: ReadinessResult) -> str:
    lines = [f"Operation: {result.operation}", f"Ready: {'yes' if result.ready else 'no'}"]
    for blocker, recommendation in zip(result.blockers, result.recommendations):
        lines.append(f"  - {blocker} -> {recommendation}")
    return "\n".join(lines)


def format_document_state(state: DocumentState) -> str:
    """
    Summary of a document state: validity, type, counts and issues.
    """
    if not state.is_valid:
        return "Document state: INVALID (no document open)"

    analysis = state.spatial_analysis
    lines = [
        f"Document: {state.document_name or '(unnamed)'}",
        f"Type: {state.document_type.value}",
        f"Pages: {state.page_count}",
        f"Text frames: {state.frame_count}",
        f"Average text density: {analysis.average_text_density:.1f} chars/page",
        f"White space ratio: {analysis.margin_usage.white_space_ratio:.0%}",
        f"Threading: {len(analysis.threading_map)} connection(s), "
        f"{'intact' if state.threading_integrity else 'BROKEN'}",
        f"Free regions: {len(analysis.available_space)}",
        "",
    ]

    if state.issues:
        lines.append(f"Issues ({len(state.issues)}):")
        for issue in state.issues:
            lines.append(f"  {issue}")
            lines.append(f"    Fix: {issue.suggested_fix}")
    else:
        lines.append("No issues found.")

    return "\n".join(lines)
