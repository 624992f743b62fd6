"""
Free Space Computation

Finds the empty rectangles left on a page once its frames are placed,
using the maximal-rectangles method:

1. Start with the container (page or live area) as the only free rectangle
2. For every occupied frame, split each free rectangle it overlaps into
   up to four maximal remainders (above, below, left of, right of it)
3. Drop remainders contained in another free rectangle and slivers
   thinner than the minimum side

The free rectangles may overlap each other; each one is maximal, which
is what a caller placing new content wants to choose from.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from .box import Bounds, bounds_tuple

logger = logging.getLogger(__name__)


def _split(rect: Bounds, obstacle: Bounds) -> List[Bounds]:
    """Maximal remainders of ``rect`` around ``obstacle``."""
    pieces: List[Bounds] = []

    if obstacle.y_min > rect.y_min:
        pieces.append(Bounds(top=rect.y_min, left=rect.x_min,
                             bottom=obstacle.y_min, right=rect.x_max))
    if obstacle.y_max < rect.y_max:
        pieces.append(Bounds(top=obstacle.y_max, left=rect.x_min,
                             bottom=rect.y_max, right=rect.x_max))
    if obstacle.x_min > rect.x_min:
        pieces.append(Bounds(top=rect.y_min, left=rect.x_min,
                             bottom=rect.y_max, right=obstacle.x_min))
    if obstacle.x_max < rect.x_max:
        pieces.append(Bounds(top=rect.y_min, left=obstacle.x_max,
                             bottom=rect.y_max, right=rect.x_max))

    return pieces


def _prune(rects: List[Bounds], min_side: float) -> List[Bounds]:
    """Remove slivers, duplicates and rectangles contained in others."""
    candidates = [
        r for r in rects
        if r.width >= min_side and r.height >= min_side
    ]

    kept: List[Bounds] = []
    for i, rect in enumerate(candidates):
        contained = False
        for j, other in enumerate(candidates):
            if i == j or not other.contains_box(rect):
                continue
            # Identical rectangles: keep the first occurrence only
            if other == rect and j > i:
                continue
            contained = True
            break
        if not contained:
            kept.append(rect)
    return kept


def find_free_regions(
    container: Bounds,
    occupied: Iterable[Bounds],
    min_side: float = 1.0,
) -> List[Bounds]:
    """
    Compute maximal free rectangles inside a container.

    Args:
        container: Page rectangle (or live area inside the margins)
        occupied: Bounds of frames already on the page
        min_side: Minimum width and height of a reported rectangle

    Returns:
        Free rectangles sorted by descending area, then top-left position
    """
    container = container.normalized()
    if container.is_empty:
        return []

    free: List[Bounds] = [container]

    for obstacle in occupied:
        obstacle = obstacle.normalized()
        if not obstacle.overlaps_interior(container):
            continue

        next_free: List[Bounds] = []
        for rect in free:
            if rect.overlaps_interior(obstacle):
                next_free.extend(_split(rect, obstacle))
            else:
                next_free.append(rect)
        free = _prune(next_free, min_side)

        if not free:
            break

    logger.debug(f"Found {len(free)} free regions in {container.to_list()}")
    return sorted(free, key=lambda r: (-r.area, bounds_tuple(r)))
