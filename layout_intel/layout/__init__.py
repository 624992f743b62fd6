"""
Layout Geometry and Metric Model

Bounds primitives, layout metric snapshots, raw document facts and the
spatial analysis derived from them.
"""

from .box import Bounds, boxes_overlap, union_area
from .facts import DocumentFacts, PageInfo, TextFrameInfo
from .free_space import find_free_regions
from .metrics import (
    Frame,
    LayoutMetrics,
    Margins,
    Style,
    TextAlignment,
    TextRegion,
    TextSegment,
    VisualAttributes,
)
from .spatial import (
    FrameDistribution,
    MarginUsage,
    SpaceRegion,
    SpatialAnalysis,
    SpatialAnalyzer,
    ThreadingConnection,
    build_threading_map,
    check_threading_integrity,
    detect_spatial_overlaps,
)

__all__ = [
    'Bounds',
    'boxes_overlap',
    'union_area',
    'DocumentFacts',
    'PageInfo',
    'TextFrameInfo',
    'find_free_regions',
    'Frame',
    'LayoutMetrics',
    'Margins',
    'Style',
    'TextAlignment',
    'TextRegion',
    'TextSegment',
    'VisualAttributes',
    'FrameDistribution',
    'MarginUsage',
    'SpaceRegion',
    'SpatialAnalysis',
    'SpatialAnalyzer',
    'ThreadingConnection',
    'build_threading_map',
    'check_threading_integrity',
    'detect_spatial_overlaps',
]
