#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/parsers/_pdf_images.py
"""PDF image region processing.

This private module decides, for each image region on a page, whether OCR is
worth attempting and where any recognized text should go:

- tiny regions (or no OCR engine): image only
- OCR output that is not texty: image only
- texty output on a large region (scan, slide): text on the image block
- texty output on a smaller region: image plus a linked paragraph

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from pdfskeleton.options import SkeletonOptions
from pdfskeleton.parsers._pdf_ocr import OcrEngine
from pdfskeleton.parsers._pdf_provider import ImageRegion, TextLine
from pdfskeleton.utils.geometry import Rect, union_rects

__all__ = ["ImageRoute", "ImageDecision", "ImageProcessor", "estimate_page_rect", "is_texty"]

logger = logging.getLogger(__name__)


class ImageRoute(Enum):
    IMAGE_ONLY = "image_only"
    TEXT_ON_IMAGE = "text_on_image"
    LINKED_PARAGRAPH = "linked_paragraph"


@dataclass(frozen=True)
class ImageDecision:
    """Outcome of processing one image region.

    ``text`` is the stripped OCR output for the two text routes and None for
    ``IMAGE_ONLY``.
    """

    route: ImageRoute
    area_ratio: float
    ocr_attempted: bool
    text: Optional[str] = None


def estimate_page_rect(lines: Iterable[TextLine], options: SkeletonOptions) -> Rect:
    """Estimate the page extent as the union of all text rectangles.

    Falls back to ``(0, 0, fallback_page_width, fallback_page_height)`` when the
    page has no usable text.
    """
    rect = union_rects(line.bbox for line in lines if line.text.strip() and not line.bbox.is_degenerate)
    if rect is None:
        return Rect(0.0, 0.0, options.fallback_page_width, options.fallback_page_height)
    return rect


def is_texty(text: Optional[str], options: SkeletonOptions) -> bool:
    """Decide whether OCR output looks like meaningful prose.

    True when any of these hold on the stripped text: enough non-whitespace
    characters, enough non-empty lines, or enough words together with a high
    enough share of alphanumeric characters.

    Examples
    --------
    >>> is_texty("x" * 80, SkeletonOptions())
    True
    >>> is_texty("| ~ |", SkeletonOptions())
    False

    """
    if text is None or not text.strip():
        return False

    stripped = text.strip()
    char_count = sum(1 for c in stripped if not c.isspace())
    if char_count >= options.texty_min_chars:
        return True

    line_count = sum(1 for ln in stripped.split("\n") if ln)
    if line_count >= options.texty_min_lines:
        return True

    words = stripped.split()
    if len(words) >= options.texty_min_words:
        alnum = sum(1 for c in stripped if c.isalnum())
        if alnum / max(1, len(stripped)) >= options.texty_min_alnum_ratio:
            return True

    return False


class ImageProcessor:
    """Route image regions through OCR according to their size.

    Parameters
    ----------
    options : SkeletonOptions
        Area thresholds and texty thresholds
    ocr_engine : OcrEngine or None
        OCR capability; None disables OCR entirely

    Notes
    -----
    OCR text is stripped of leading and trailing whitespace before it is
    attached to an image block or a linked paragraph.

    """

    def __init__(self, options: SkeletonOptions, ocr_engine: Optional[OcrEngine] = None):
        self.options = options
        self.ocr_engine = ocr_engine

    def _recognize(self, region: ImageRegion) -> Optional[str]:
        if self.ocr_engine is None:
            return None
        try:
            return self.ocr_engine.recognize(region.data)
        except Exception as e:
            logger.warning(f"OCR failed for image region {region.bbox.as_tuple()}: {e}")
            return None

    def process(self, region: ImageRegion, page_rect: Rect) -> ImageDecision:
        """Decide how an image region is emitted.

        Parameters
        ----------
        region : ImageRegion
            The image and its bounding box
        page_rect : Rect
            Estimated page extent, see :func:`estimate_page_rect`

        Returns
        -------
        ImageDecision
            The route, the area ratio and any OCR text to emit

        """
        page_area = max(1.0, page_rect.area)
        area_ratio = region.bbox.area / page_area

        if area_ratio < self.options.image_tiny_area_ratio or self.ocr_engine is None:
            return ImageDecision(ImageRoute.IMAGE_ONLY, area_ratio, ocr_attempted=False)

        text = self._recognize(region)
        if not is_texty(text, self.options):
            logger.debug(f"Image region ratio={area_ratio:.3f}: OCR output not texty")
            return ImageDecision(ImageRoute.IMAGE_ONLY, area_ratio, ocr_attempted=True)

        assert text is not None
        if area_ratio >= self.options.image_large_area_ratio:
            logger.debug(f"Image region ratio={area_ratio:.3f}: OCR text attached to image")
            return ImageDecision(ImageRoute.TEXT_ON_IMAGE, area_ratio, ocr_attempted=True, text=text.strip())

        logger.debug(f"Image region ratio={area_ratio:.3f}: OCR text emitted as linked paragraph")
        return ImageDecision(ImageRoute.LINKED_PARAGRAPH, area_ratio, ocr_attempted=True, text=text.strip())
