"""Configuration options for pdfskeleton."""

from pdfskeleton.options.base import BaseParserOptions, CloneFrozenMixin
from pdfskeleton.options.common import OCROptions
from pdfskeleton.options.skeleton import SkeletonOptions

__all__ = [
    "BaseParserOptions",
    "CloneFrozenMixin",
    "OCROptions",
    "SkeletonOptions",
]
