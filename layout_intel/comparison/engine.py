"""
Layout Comparison Engine

Scores a current layout snapshot against a reference snapshot within a
tolerance and reports every field that falls outside it.

Scoring Model:
- Numeric fields: deviation = |actual - expected| / |expected|
- Expected 0: actual 0 is a 0% deviation, anything else is 100%
- A field is recorded only when its deviation exceeds the tolerance
- Percentages are rounded half-up to whole numbers
- score = max(0, 100 - mean(recorded percentages)), or 100 when clean

Categories:
- frames: frame count first; a count mismatch skips per-frame checks
- margins: the four margins independently
- styles: reference styles looked up by name in the current snapshot
- textRegions: segments matched by frame index, with font fallbacks

A category missing from either snapshot is skipped: there is no
comparable data, which is not the same as a mismatch.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..layout.metrics import LayoutMetrics, TextRegion, VisualAttributes

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.05

FontFallbacks = Mapping[str, Sequence[str]]


class CheckType(Enum):
    """Comparison categories."""
    FRAMES = "frames"
    MARGINS = "margins"
    STYLES = "styles"
    TEXT_REGIONS = "textRegions"

    @classmethod
    def parse(cls, value: Any) -> 'CheckType':
        """
        Parse a category name (``textRegions`` or ``text_regions``).

        Raises:
            ValueError: If the category is not known
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().replace('_', '').lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        valid = ', '.join(m.value for m in cls)
        raise ValueError(f"Unknown check type '{value}' (expected one of: {valid})")


DEFAULT_CHECK_TYPES: Tuple[CheckType, ...] = (
    CheckType.FRAMES,
    CheckType.MARGINS,
    CheckType.STYLES,
)

ALL_CHECK_TYPES: Tuple[CheckType, ...] = tuple(CheckType)


@dataclass(frozen=True)
class Deviation:
    """One field outside tolerance."""
    type: str
    field: str
    expected: Any
    actual: Any
    deviation: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'field': self.field,
            'expected': self.expected,
            'actual': self.actual,
            'deviation': self.deviation,
        }

    def __str__(self) -> str:
        return (
            f"{self.type}.{self.field}: expected {self.expected}, "
            f"got {self.actual} ({self.deviation}% off)"
        )


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of one comparison."""
    score: int
    deviations: Tuple[Deviation, ...] = ()
    tolerance: float = DEFAULT_TOLERANCE
    check_types: Tuple[CheckType, ...] = DEFAULT_CHECK_TYPES

    @property
    def match(self) -> bool:
        return not self.deviations

    def to_dict(self) -> Dict[str, Any]:
        return {
            'match': self.match,
            'score': self.score,
            'deviations': [d.to_dict() for d in self.deviations],
            'tolerance': self.tolerance,
            'checkTypes': [c.value for c in self.check_types],
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def relative_deviation(expected: float, actual: float) -> float:
    """
    Relative deviation of actual from expected as a fraction.

    An expected value of zero never divides: equal values deviate by 0,
    anything else by 1 (100%).
    """
    if expected == 0:
        return 0.0 if actual == 0 else 1.0
    return abs(actual - expected) / abs(expected)


def score_deviations(deviations: Sequence[Deviation]) -> int:
    """100 minus the mean deviation percentage, floored at 0."""
    if not deviations:
        return 100
    mean = sum(d.deviation for d in deviations) / len(deviations)
    return max(0, _round_half_up(100 - mean))


class _Collector:
    """Accumulates deviations for one comparison run."""

    def __init__(self, tolerance: float):
        self.tolerance = tolerance
        self.deviations: List[Deviation] = []

    def add(self, type_: str, field: str, expected: Any, actual: Any, percent: int) -> None:
        self.deviations.append(Deviation(type_, field, expected, actual, percent))

    def numeric(self, type_: str, field: str, expected: float, actual: float) -> None:
        deviation = relative_deviation(expected, actual)
        if deviation > self.tolerance:
            self.add(type_, field, expected, actual, _round_half_up(deviation * 100))

    def exact(self, type_: str, field: str, expected: Any, actual: Any) -> None:
        if expected != actual:
            self.add(type_, field, expected, actual, 100)


class ComparisonEngine:
    """
    Compares layout snapshots.

    The engine holds only defaults; every call is a pure function of its
    arguments, so repeated calls with the same inputs give the same
    result.

    Usage:
        engine = ComparisonEngine(tolerance=0.05)
        result = engine.compare(reference, current)

        if not result.match:
            for deviation in result.deviations:
                print(deviation)
    """

    def __init__(
        self,
        tolerance: float = DEFAULT_TOLERANCE,
        check_types: Iterable[Any] = DEFAULT_CHECK_TYPES,
        font_fallbacks: Optional[FontFallbacks] = None,
    ):
        """
        Initialize the engine.

        Args:
            tolerance: Default allowed deviation fraction
            check_types: Default categories to compare
            font_fallbacks: Default map of family -> acceptable substitutes
        """
        self.tolerance = tolerance
        self.check_types = tuple(CheckType.parse(c) for c in check_types)
        self.font_fallbacks: Dict[str, Tuple[str, ...]] = {
            k: tuple(v) for k, v in (font_fallbacks or {}).items()
        }

    def compare(
        self,
        reference: LayoutMetrics,
        current: LayoutMetrics,
        tolerance: Optional[float] = None,
        check_types: Optional[Iterable[Any]] = None,
        font_fallbacks: Optional[FontFallbacks] = None,
    ) -> ComparisonResult:
        """
        Compare a current snapshot against a reference.

        Args:
            reference: Target layout
            current: Observed layout
            tolerance: Allowed deviation fraction (engine default if None)
            check_types: Categories to compare (engine default if None)
            font_fallbacks: Extra substitutes, merged over the defaults

        Returns:
            ComparisonResult with ordered deviations and a score

        Raises:
            ValueError: If a check type is not known
        """
        if tolerance is None:
            tolerance = self.tolerance
        if tolerance < 0:
            logger.warning(f"Negative tolerance {tolerance} treated as 0")
            tolerance = 0.0

        types = self.check_types if check_types is None else tuple(
            CheckType.parse(c) for c in check_types
        )
        fallbacks = dict(self.font_fallbacks)
        for family, substitutes in (font_fallbacks or {}).items():
            fallbacks[family] = tuple(substitutes)

        collector = _Collector(tolerance)
        if CheckType.FRAMES in types:
            self._compare_frames(reference, current, collector)
        if CheckType.MARGINS in types:
            self._compare_margins(reference, current, collector)
        if CheckType.STYLES in types:
            self._compare_styles(reference, current, collector)
        if CheckType.TEXT_REGIONS in types:
            self._compare_text_regions(reference, current, collector, fallbacks)

        result = ComparisonResult(
            score=score_deviations(collector.deviations),
            deviations=tuple(collector.deviations),
            tolerance=tolerance,
            check_types=types,
        )
        self._notify(result)
        return result

    def _compare_frames(self, reference, current, collector: _Collector) -> None:
        if reference.frames is None or current.frames is None:
            logger.debug("Frames not captured in both snapshots, skipping")
            return

        if len(reference.frames) != len(current.frames):
            collector.add('frames', 'count', len(reference.frames), len(current.frames), 100)
            return

        for i, (ref, cur) in enumerate(zip(reference.frames, current.frames)):
            for name in ('x', 'y', 'width', 'height'):
                collector.numeric('frame', f'frame[{i}].{name}', getattr(ref, name), getattr(cur, name))

    def _compare_margins(self, reference, current, collector: _Collector) -> None:
        if reference.margins is None or current.margins is None:
            logger.debug("Margins not captured in both snapshots, skipping")
            return

        for name in ('top', 'left', 'bottom', 'right'):
            collector.numeric(
                'margins', name,
                getattr(reference.margins, name), getattr(current.margins, name),
            )

    def _compare_styles(self, reference, current, collector: _Collector) -> None:
        if reference.styles is None or current.styles is None:
            logger.debug("Styles not captured in both snapshots, skipping")
            return

        current_styles = current.style_map()
        for ref_style in reference.styles:
            cur_style = current_styles.get(ref_style.name)
            if cur_style is None:
                collector.add('style', 'missing', ref_style.name, 'not found', 100)
                continue
            collector.numeric(
                'style', f'{ref_style.name}.fontSize',
                ref_style.font_size, cur_style.font_size,
            )

    def _compare_text_regions(
        self,
        reference: LayoutMetrics,
        current: LayoutMetrics,
        collector: _Collector,
        fallbacks: Dict[str, Tuple[str, ...]],
    ) -> None:
        if reference.text_regions is None or current.text_regions is None:
            logger.debug("Text regions not captured in both snapshots, skipping")
            return

        for ref_region in reference.text_regions:
            prefix = f'frame[{ref_region.frame_index}]'
            cur_region = current.region_for_frame(ref_region.frame_index)
            if cur_region is None:
                collector.add(
                    'textRegion', prefix,
                    f'{len(ref_region.regions)} regions', 'no regions found', 100,
                )
                continue

            self._compare_region_counts(prefix, ref_region, cur_region, collector)

            for j, (ref_seg, cur_seg) in enumerate(zip(ref_region.regions, cur_region.regions)):
                self._compare_attributes(
                    f'{prefix}.region[{j}]',
                    ref_seg.visual_attributes,
                    cur_seg.visual_attributes,
                    collector,
                    fallbacks,
                )

    @staticmethod
    def _compare_region_counts(
        prefix: str,
        ref_region: TextRegion,
        cur_region: TextRegion,
        collector: _Collector,
    ) -> None:
        expected = len(ref_region.regions)
        actual = len(cur_region.regions)
        if expected != actual:
            percent = _round_half_up(relative_deviation(expected, actual) * 100)
            collector.add('textRegion', f'{prefix}.regionCount', expected, actual, percent)

    @staticmethod
    def _compare_attributes(
        prefix: str,
        ref: VisualAttributes,
        cur: VisualAttributes,
        collector: _Collector,
        fallbacks: Dict[str, Tuple[str, ...]],
    ) -> None:
        collector.numeric('textRegion', f'{prefix}.fontSize', ref.font_size, cur.font_size)
        collector.numeric('textRegion', f'{prefix}.leading', ref.leading, cur.leading)
        collector.exact(
            'textRegion', f'{prefix}.alignment',
            ref.alignment.value, cur.alignment.value,
        )

        if ref.font_family != cur.font_family:
            if cur.font_family in fallbacks.get(ref.font_family, ()):
                logger.debug(
                    f"{prefix}: accepted fallback font {cur.font_family} for {ref.font_family}"
                )
            else:
                collector.add(
                    'textRegion', f'{prefix}.fontFamily',
                    ref.font_family, cur.font_family, 100,
                )

        collector.numeric(
            'textRegion', f'{prefix}.firstLineIndent',
            ref.first_line_indent, cur.first_line_indent,
        )
        collector.numeric('textRegion', f'{prefix}.leftIndent', ref.left_indent, cur.left_indent)

    @staticmethod
    def _notify(result: ComparisonResult) -> None:
        status = 'PASS' if result.match else 'FAIL'
        message = (
            f"Layout comparison {status}: score {result.score}, "
            f"{len(result.deviations)} deviation(s)"
        )
        extra = {
            'patches': [{
                'op': 'add',
                'path': '/comparison/latest',
                'value': result.to_dict(),
            }],
        }
        if result.match:
            logger.info(message, extra=extra)
        else:
            logger.warning(message, extra=extra)


def compare_layouts(
    reference: LayoutMetrics,
    current: LayoutMetrics,
    tolerance: float = DEFAULT_TOLERANCE,
    check_types: Iterable[Any] = DEFAULT_CHECK_TYPES,
    font_fallbacks: Optional[FontFallbacks] = None,
) -> ComparisonResult:
    """Compare two snapshots with a one-off engine."""
    return ComparisonEngine().compare(
        reference, current,
        tolerance=tolerance,
        check_types=check_types,
        font_fallbacks=font_fallbacks,
    )
