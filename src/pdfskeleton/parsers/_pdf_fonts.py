#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/parsers/_pdf_fonts.py
"""PDF font statistics.

This private module estimates the document-wide body text size that the line
classifier uses as the baseline for heading detection. A single global median
is used rather than per-page medians, which are noisy on pages dominated by
images or tables.

"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from pdfskeleton.options import SkeletonOptions
from pdfskeleton.parsers._pdf_provider import TextLine
from pdfskeleton.utils.geometry import median

__all__ = ["FontStatistics", "estimate_body_font_size"]

logger = logging.getLogger(__name__)


def estimate_body_font_size(lines: Iterable[TextLine], fallback: float) -> float:
    """Return the interpolated median of the line sizes.

    Parameters
    ----------
    lines : iterable of TextLine
        Lines from any number of pages
    fallback : float
        Returned when no line has a positive size

    """
    return median((line.size for line in lines if line.size > 0 and line.text.strip()), fallback)


class FontStatistics:
    """Accumulate line sizes across pages and derive the body size.

    Parameters
    ----------
    options : SkeletonOptions
        Supplies the body size override and the fallback

    Examples
    --------
    >>> stats = FontStatistics(SkeletonOptions())
    >>> stats.add_lines(provider.get_lines(0))
    >>> stats.body_size
    11.0

    """

    def __init__(self, options: SkeletonOptions):
        self.options = options
        self._sizes: list[float] = []
        self._body_size: float | None = None

    def add_lines(self, lines: Iterable[TextLine]) -> None:
        """Record the sizes of non-empty lines."""
        for line in lines:
            if not line.text.strip():
                continue
            size = line.size
            if size > 0:
                self._sizes.append(size)
        self._body_size = None

    @property
    def sample_count(self) -> int:
        return len(self._sizes)

    @property
    def body_size(self) -> float:
        """Body text size: the configured override, else the median, else the fallback."""
        if self._body_size is None:
            if self.options.body_font_size is not None:
                self._body_size = self.options.body_font_size
            else:
                self._body_size = median(self._sizes, self.options.fallback_body_font_size)
        return self._body_size

    def ratio(self, line: TextLine) -> float:
        """Size of ``line`` relative to the body size."""
        return line.size / self.body_size

    def debug_info(self) -> dict[str, Any]:
        """Summary of the collected statistics for debug logging."""
        return {
            "samples": self.sample_count,
            "body_size": self.body_size,
            "min_size": min(self._sizes) if self._sizes else None,
            "max_size": max(self._sizes) if self._sizes else None,
            "override": self.options.body_font_size,
        }
