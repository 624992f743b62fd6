"""
Spatial Analyzer

Derives aggregate spatial facts from raw page and frame records:

- Frame distribution per page (frame count, text density, overflow)
- Average text density across the document
- Threading map (frame-to-frame text flow)
- Overlapping frame pairs
- Margin usage and white space ratio
- Available space for new content

Complexity Notes:
- Overlap detection compares every frame pair on a page, O(n^2) per page.
  Layout documents carry a handful of frames per page, so a spatial
  index is not worth building here.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .box import Bounds, union_area
from .free_space import find_free_regions
from .facts import PageInfo, TextFrameInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameDistribution:
    """Text frame statistics for one page."""
    page_number: int
    frame_count: int
    text_density: int
    has_overflow: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pageNumber': self.page_number,
            'frameCount': self.frame_count,
            'textDensity': self.text_density,
            'hasOverflow': self.has_overflow,
        }


@dataclass(frozen=True)
class MarginUsage:
    """Averaged page margins and the share of page area left empty."""
    top_margin_average: float = 0.0
    bottom_margin_average: float = 0.0
    left_margin_average: float = 0.0
    right_margin_average: float = 0.0
    white_space_ratio: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            'topMarginAverage': round(self.top_margin_average, 2),
            'bottomMarginAverage': round(self.bottom_margin_average, 2),
            'leftMarginAverage': round(self.left_margin_average, 2),
            'rightMarginAverage': round(self.right_margin_average, 2),
            'whiteSpaceRatio': round(self.white_space_ratio, 4),
        }


@dataclass(frozen=True)
class ThreadingConnection:
    """A text flow link from one frame into its successor."""
    source_frame: int
    target_frame: int
    source_page: int
    target_page: int
    is_valid: bool
    explicit: bool = False  # False when guessed from the has_next flag

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sourceFrame': self.source_frame,
            'targetFrame': self.target_frame,
            'sourcePage': self.source_page,
            'targetPage': self.target_page,
            'isValid': self.is_valid,
            'explicit': self.explicit,
        }


@dataclass(frozen=True)
class SpaceRegion:
    """An empty page area that could receive new content."""
    page_number: int
    bounds: Bounds
    area: float
    is_optimal_for_text: bool

    @property
    def width(self) -> float:
        return self.bounds.width

    @property
    def height(self) -> float:
        return self.bounds.height

    def fits(self, width: float, height: float) -> bool:
        """Whether content of the given size fits inside the region."""
        return self.bounds.width >= width and self.bounds.height >= height

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pageNumber': self.page_number,
            'bounds': self.bounds.to_list(),
            'area': round(self.area, 2),
            'isOptimalForText': self.is_optimal_for_text,
        }


@dataclass(frozen=True)
class SpatialAnalysis:
    """Aggregate spatial facts for a document."""
    total_pages: int = 0
    average_text_density: float = 0.0
    frame_distribution: Tuple[FrameDistribution, ...] = ()
    margin_usage: MarginUsage = field(default_factory=MarginUsage)
    threading_map: Tuple[ThreadingConnection, ...] = ()
    available_space: Tuple[SpaceRegion, ...] = ()

    @property
    def has_threading(self) -> bool:
        return len(self.threading_map) > 0

    @property
    def threading_valid(self) -> bool:
        return all(c.is_valid for c in self.threading_map)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalPages': self.total_pages,
            'averageTextDensity': round(self.average_text_density, 2),
            'frameDistribution': [d.to_dict() for d in self.frame_distribution],
            'marginUsage': self.margin_usage.to_dict(),
            'threadingMap': [c.to_dict() for c in self.threading_map],
            'availableSpace': [r.to_dict() for r in self.available_space],
        }


def detect_spatial_overlaps(
    frames: Sequence[TextFrameInfo],
) -> List[Tuple[TextFrameInfo, TextFrameInfo]]:
    """
    Find every pair of frames on the same page whose bounds intersect.

    Returns:
        Overlapping pairs in frame order
    """
    by_page: Dict[int, List[TextFrameInfo]] = defaultdict(list)
    for frame in frames:
        by_page[frame.page_number].append(frame)

    pairs: List[Tuple[TextFrameInfo, TextFrameInfo]] = []
    for page_number in sorted(by_page):
        page_frames = by_page[page_number]
        for i, first in enumerate(page_frames):
            for second in page_frames[i + 1:]:
                if first.bounds.intersects(second.bounds):
                    pairs.append((first, second))
    return pairs


def overlapping_frames(frames: Sequence[TextFrameInfo]) -> List[TextFrameInfo]:
    """Frames involved in at least one overlap, without duplicates."""
    seen = set()
    result: List[TextFrameInfo] = []
    for first, second in detect_spatial_overlaps(frames):
        for frame in (first, second):
            if frame.index not in seen:
                seen.add(frame.index)
                result.append(frame)
    return result


def build_threading_map(frames: Sequence[TextFrameInfo]) -> List[ThreadingConnection]:
    """
    Build frame-to-frame text flow connections.

    Explicit ``next_frame`` links are used when the extractor reports
    them; otherwise a set ``has_next`` flag is taken to mean the
    following index. Explicit links are valid when their target exists.
    Guessed links are always marked valid, since the flag alone says
    nothing about where the text really flows.
    """
    by_index = {f.index: f for f in frames}
    connections: List[ThreadingConnection] = []

    for frame in frames:
        target_index = frame.successor_index()
        if target_index is None:
            continue
        explicit = frame.next_frame is not None
        target = by_index.get(target_index)
        connections.append(ThreadingConnection(
            source_frame=frame.index,
            target_frame=target_index,
            source_page=frame.page_number,
            target_page=target.page_number if target else frame.page_number,
            is_valid=target is not None or not explicit,
            explicit=explicit,
        ))

    return connections


def check_threading_integrity(
    frames: Sequence[TextFrameInfo],
    connections: Sequence[ThreadingConnection],
) -> bool:
    """
    Whether the threading map is intact.

    Only explicit links are checked: each must reach an existing frame,
    and a frame naming a ``previous_frame`` needs that frame to exist
    and, when it names its own successor, to name this frame back.
    Flag-only threading is trusted.
    """
    if not all(c.is_valid for c in connections if c.explicit):
        return False

    by_index = {f.index: f for f in frames}
    for frame in frames:
        if frame.previous_frame is None:
            continue
        predecessor = by_index.get(frame.previous_frame)
        if predecessor is None:
            return False
        if predecessor.next_frame is not None and predecessor.next_frame != frame.index:
            return False
    return True


class SpatialAnalyzer:
    """
    Computes a SpatialAnalysis from page and frame facts.

    Usage:
        analyzer = SpatialAnalyzer(min_text_region_width=72)
        analysis = analyzer.analyze(pages, frames)

        for region in analysis.available_space:
            print(region.page_number, region.area)
    """

    def __init__(
        self,
        min_text_region_width: float = 72.0,
        min_text_region_height: float = 36.0,
        min_free_region_side: float = 1.0,
        respect_margins: bool = True,
    ):
        """
        Initialize the analyzer.

        Args:
            min_text_region_width: Minimum width of a text-friendly region
            min_text_region_height: Minimum height of a text-friendly region
            min_free_region_side: Slivers thinner than this are not reported
            respect_margins: Search for free space inside the page margins
        """
        self.min_text_region_width = min_text_region_width
        self.min_text_region_height = min_text_region_height
        self.min_free_region_side = min_free_region_side
        self.respect_margins = respect_margins

    def analyze(
        self,
        pages: Sequence[PageInfo],
        frames: Sequence[TextFrameInfo],
    ) -> SpatialAnalysis:
        """Run every spatial analysis step."""
        distribution = self.frame_distribution(pages, frames)
        total_pages = len(pages)
        total_density = sum(d.text_density for d in distribution)
        average = total_density / total_pages if total_pages > 0 else 0.0

        analysis = SpatialAnalysis(
            total_pages=total_pages,
            average_text_density=average,
            frame_distribution=tuple(distribution),
            margin_usage=self.margin_usage(pages, frames),
            threading_map=tuple(build_threading_map(frames)),
            available_space=tuple(self.available_space(pages, frames)),
        )

        logger.debug(
            f"Spatial analysis: {total_pages} pages, {len(frames)} frames, "
            f"{len(analysis.threading_map)} threads, "
            f"{len(analysis.available_space)} free regions"
        )
        return analysis

    def frame_distribution(
        self,
        pages: Sequence[PageInfo],
        frames: Sequence[TextFrameInfo],
    ) -> List[FrameDistribution]:
        """Per-page frame count, summed content length and overflow."""
        distribution = []
        for page in pages:
            page_frames = [f for f in frames if f.page_number == page.number]
            distribution.append(FrameDistribution(
                page_number=page.number,
                frame_count=len(page_frames),
                text_density=sum(f.content_length for f in page_frames),
                has_overflow=any(f.overflows for f in page_frames),
            ))
        return distribution

    def margin_usage(
        self,
        pages: Sequence[PageInfo],
        frames: Sequence[TextFrameInfo],
    ) -> MarginUsage:
        """Average margins and the share of page area not covered by frames."""
        with_margins = [p.margins for p in pages if p.margins is not None]
        count = len(with_margins)

        def average(values: Iterable[float]) -> float:
            return sum(values) / count if count else 0.0

        total_area = 0.0
        occupied_area = 0.0
        for page in pages:
            page_bounds = page.bounds()
            if page_bounds is None:
                continue
            total_area += page_bounds.area
            clipped = [
                clip for clip in (
                    f.bounds.intersection(page_bounds)
                    for f in frames if f.page_number == page.number
                )
                if clip is not None
            ]
            occupied_area += union_area(clipped)

        ratio = 0.0
        if total_area > 0:
            ratio = min(1.0, max(0.0, 1.0 - occupied_area / total_area))

        return MarginUsage(
            top_margin_average=average(m.top for m in with_margins),
            bottom_margin_average=average(m.bottom for m in with_margins),
            left_margin_average=average(m.left for m in with_margins),
            right_margin_average=average(m.right for m in with_margins),
            white_space_ratio=ratio,
        )

    def available_space(
        self,
        pages: Sequence[PageInfo],
        frames: Sequence[TextFrameInfo],
    ) -> List[SpaceRegion]:
        """
        Free rectangles on every page with known dimensions.

        Returns:
            Regions across all pages, largest first
        """
        regions: List[SpaceRegion] = []
        for page in pages:
            container: Optional[Bounds] = (
                page.live_area() if self.respect_margins else page.bounds()
            )
            if container is None:
                continue

            occupied = [f.bounds for f in frames if f.page_number == page.number]
            for rect in find_free_regions(container, occupied, self.min_free_region_side):
                regions.append(SpaceRegion(
                    page_number=page.number,
                    bounds=rect,
                    area=rect.area,
                    is_optimal_for_text=self.is_text_friendly(rect),
                ))

        regions.sort(key=lambda r: (-r.area, r.page_number, r.bounds.y_min, r.bounds.x_min))
        return regions

    def is_text_friendly(self, rect: Bounds) -> bool:
        """Whether a free rectangle is large enough to hold a text frame."""
        return (
            rect.width >= self.min_text_region_width and
            rect.height >= self.min_text_region_height
        )
