#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/utils/geometry.py
"""Rectangle and numeric helpers shared by the PDF skeleton detectors.

Coordinates follow PyMuPDF's page space: the origin is the top-left corner,
x grows to the right and y grows downward, so ``y0`` is the top edge of a
rectangle and ``y1`` its bottom edge.

None of these helpers raise on degenerate input. Inverted or zero-size
rectangles have zero area, and statistics over empty sequences return the
caller's fallback.
"""

from __future__ import annotations

import math
from bisect import bisect_left
from dataclasses import dataclass
from typing import Iterable, Sequence

__all__ = ["Rect", "nearest_index", "percentile", "median", "union_rects"]


@dataclass(frozen=True)
class Rect:
    """Axis-aligned bounding box ``(x0, y0, x1, y1)`` in page coordinates."""

    x0: float
    y0: float
    x1: float
    y1: float

    @classmethod
    def from_tuple(cls, bbox: Sequence[float]) -> Rect:
        """Build a rectangle from any 4-item sequence, e.g. a PyMuPDF ``bbox``."""
        x0, y0, x1, y1 = bbox
        return cls(float(x0), float(y0), float(x1), float(y1))

    @property
    def width(self) -> float:
        return max(0.0, self.x1 - self.x0)

    @property
    def height(self) -> float:
        return max(0.0, self.y1 - self.y0)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center_y(self) -> float:
        return (self.y0 + self.y1) / 2.0

    @property
    def is_degenerate(self) -> bool:
        """True when the rectangle has no positive area or non-finite corners."""
        corners = (self.x0, self.y0, self.x1, self.y1)
        if not all(math.isfinite(c) for c in corners):
            return True
        return self.x1 <= self.x0 or self.y1 <= self.y0

    def union(self, other: Rect) -> Rect:
        """Return the smallest rectangle containing both rectangles."""
        return Rect(
            min(self.x0, other.x0),
            min(self.y0, other.y0),
            max(self.x1, other.x1),
            max(self.y1, other.y1),
        )

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x0, self.y0, self.x1, self.y1)


def union_rects(rects: Iterable[Rect]) -> Rect | None:
    """Return the union of all rectangles, or None for an empty iterable."""
    result: Rect | None = None
    for rect in rects:
        result = rect if result is None else result.union(rect)
    return result


def percentile(values: Iterable[float], p: float, fallback: float) -> float:
    """Compute a percentile by linear interpolation between order statistics.

    The values are sorted and the fractional index ``(n - 1) * p`` is
    interpolated between its floor and ceiling entries.

    Parameters
    ----------
    values : iterable of float
        Observations; non-finite values are ignored
    p : float
        Percentile as a fraction in [0, 1]
    fallback : float
        Returned when no finite values remain

    Returns
    -------
    float
        The interpolated percentile

    Examples
    --------
    >>> percentile([1, 2, 3, 4], 0.5, fallback=0.0)
    2.5
    >>> percentile([], 0.5, fallback=12.0)
    12.0

    """
    ordered = sorted(v for v in values if math.isfinite(v))
    if not ordered:
        return fallback

    p = min(1.0, max(0.0, p))
    position = (len(ordered) - 1) * p
    lower = math.floor(position)
    upper = math.ceil(position)
    if lower == upper:
        return ordered[lower]
    fraction = position - lower
    return ordered[lower] + (ordered[upper] - ordered[lower]) * fraction


def median(values: Iterable[float], fallback: float) -> float:
    """Return the interpolated median of ``values``, or ``fallback`` if empty."""
    return percentile(values, 0.5, fallback)


def nearest_index(sorted_values: Sequence[float], x: float) -> int:
    """Return the index of the value closest to ``x`` in an ascending sequence.

    Uses binary search; when ``x`` is equidistant from two neighbours the
    lower index wins. Returns -1 for an empty sequence.
    """
    if not sorted_values:
        return -1
    pos = bisect_left(sorted_values, x)
    if pos == 0:
        return 0
    if pos == len(sorted_values):
        return len(sorted_values) - 1
    before = sorted_values[pos - 1]
    after = sorted_values[pos]
    return pos - 1 if x - before <= after - x else pos
