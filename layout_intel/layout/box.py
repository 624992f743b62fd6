"""
Frame Bounds Primitive

This module provides the geometric primitive used for page frames.
It is the foundation for overlap detection and free-space computation.

Design Decisions:
- Bounds are stored in host order (top, left, bottom, right), in points
- The host reports y growing downward, but reference fixtures are sometimes
  written with y growing upward; geometric tests use normalized extents
  so both orientations behave the same
- Immutable design for thread safety and caching
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Dict, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Bounds:
    """
    Immutable rectangle in page coordinates.

    Coordinates:
    - top, bottom: vertical edges (either order is accepted)
    - left, right: horizontal edges (either order is accepted)

    Example:
        frame = Bounds(top=72, left=72, bottom=300, right=540)
        print(f"Width: {frame.width}, Height: {frame.height}")

        if frame.intersects(other):
            ...
    """
    top: float
    left: float
    bottom: float
    right: float

    @cached_property
    def x_min(self) -> float:
        return min(self.left, self.right)

    @cached_property
    def x_max(self) -> float:
        return max(self.left, self.right)

    @cached_property
    def y_min(self) -> float:
        return min(self.top, self.bottom)

    @cached_property
    def y_max(self) -> float:
        return max(self.top, self.bottom)

    @cached_property
    def width(self) -> float:
        """Width of the rectangle."""
        return self.x_max - self.x_min

    @cached_property
    def height(self) -> float:
        """Height of the rectangle."""
        return self.y_max - self.y_min

    @cached_property
    def area(self) -> float:
        """Area of the rectangle."""
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        """True for degenerate rectangles with no area."""
        return self.width <= 0 or self.height <= 0

    def to_list(self) -> List[float]:
        """Return as [top, left, bottom, right], the host bounds order."""
        return [self.top, self.left, self.bottom, self.right]

    def to_dict(self) -> Dict[str, float]:
        """Return as dictionary for JSON serialization."""
        return {
            'top': round(self.top, 2),
            'left': round(self.left, 2),
            'bottom': round(self.bottom, 2),
            'right': round(self.right, 2),
        }

    def intersects(self, other: 'Bounds') -> bool:
        """
        Check if this rectangle intersects with another.

        Touching edges count as an intersection.
        """
        return not (
            self.x_max < other.x_min or
            other.x_max < self.x_min or
            self.y_max < other.y_min or
            other.y_max < self.y_min
        )

    def overlaps_interior(self, other: 'Bounds') -> bool:
        """Check if the rectangles share a region of positive area."""
        return (
            min(self.x_max, other.x_max) > max(self.x_min, other.x_min) and
            min(self.y_max, other.y_max) > max(self.y_min, other.y_min)
        )

    def contains_box(self, other: 'Bounds') -> bool:
        """Check if this rectangle fully contains another."""
        return (
            self.x_min <= other.x_min and
            self.y_min <= other.y_min and
            self.x_max >= other.x_max and
            self.y_max >= other.y_max
        )

    def intersection(self, other: 'Bounds') -> Optional['Bounds']:
        """
        Get the intersection of two rectangles.

        Returns:
            Normalized intersection Bounds or None if they only touch or
            do not intersect
        """
        if not self.overlaps_interior(other):
            return None

        return Bounds(
            top=max(self.y_min, other.y_min),
            left=max(self.x_min, other.x_min),
            bottom=min(self.y_max, other.y_max),
            right=min(self.x_max, other.x_max),
        )

    def normalized(self) -> 'Bounds':
        """Return a copy with top <= bottom and left <= right."""
        return Bounds(
            top=self.y_min,
            left=self.x_min,
            bottom=self.y_max,
            right=self.x_max,
        )

    def inset(
        self,
        top: float = 0,
        left: float = 0,
        bottom: float = 0,
        right: float = 0,
    ) -> 'Bounds':
        """Shrink the rectangle by per-side amounts (normalized result)."""
        y0 = self.y_min + top
        x0 = self.x_min + left
        y1 = max(y0, self.y_max - bottom)
        x1 = max(x0, self.x_max - right)
        return Bounds(top=y0, left=x0, bottom=y1, right=x1)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> 'Bounds':
        """
        Create bounds from a [top, left, bottom, right] sequence.

        Raises:
            ValueError: If the sequence does not hold four numbers
        """
        if len(values) != 4:
            raise ValueError(f"Bounds need 4 values, got {len(values)}")
        top, left, bottom, right = (float(v) for v in values)
        return cls(top=top, left=left, bottom=bottom, right=right)

    @classmethod
    def from_rect(cls, x: float, y: float, width: float, height: float) -> 'Bounds':
        """Create bounds from an origin point and dimensions."""
        return cls(top=y, left=x, bottom=y + height, right=x + width)


def boxes_overlap(box1: Bounds, box2: Bounds) -> bool:
    """Check if two rectangles overlap."""
    return box1.intersects(box2)


def union_area(boxes: List[Bounds]) -> float:
    """
    Area covered by the union of rectangles.

    Uses coordinate compression over the distinct x and y edges, so
    overlapping rectangles are only counted once.
    """
    boxes = [b for b in boxes if not b.is_empty]
    if not boxes:
        return 0.0

    xs = sorted({b.x_min for b in boxes} | {b.x_max for b in boxes})
    ys = sorted({b.y_min for b in boxes} | {b.y_max for b in boxes})

    total = 0.0
    for x0, x1 in zip(xs, xs[1:]):
        for y0, y1 in zip(ys, ys[1:]):
            cx = (x0 + x1) / 2
            cy = (y0 + y1) / 2
            if any(
                b.x_min <= cx <= b.x_max and b.y_min <= cy <= b.y_max
                for b in boxes
            ):
                total += (x1 - x0) * (y1 - y0)
    return total


def page_rectangle(width: float, height: float) -> Bounds:
    """Rectangle covering a whole page with the origin at the top-left."""
    return Bounds(top=0.0, left=0.0, bottom=height, right=width)


def bounds_tuple(bounds: Bounds) -> Tuple[float, float, float, float]:
    """Normalized (y_min, x_min, y_max, x_max) tuple, used as a sort key."""
    return (bounds.y_min, bounds.x_min, bounds.y_max, bounds.x_max)
