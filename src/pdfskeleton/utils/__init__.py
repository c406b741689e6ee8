#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/utils/__init__.py
"""Utility modules for pdfskeleton package.

This package contains geometry helpers, input normalization, dependency
checking decorators and package version utilities.
"""

from pdfskeleton.utils.geometry import Rect, median, nearest_index, percentile, union_rects

__all__ = [
    "Rect",
    "median",
    "nearest_index",
    "percentile",
    "union_rects",
]
