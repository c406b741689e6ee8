#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/parsers/__init__.py
"""Parsers package initialization.

This package contains the PDF skeleton parser and its private helper modules
(font statistics, line classification, table detection, image routing, OCR
and page text providers).
"""

from pdfskeleton.parsers._pdf_ocr import OcrEngine, TesseractOcrEngine
from pdfskeleton.parsers._pdf_provider import (
    ImageRegion,
    InMemoryPageProvider,
    PageContent,
    PageTextProvider,
    PyMuPdfPageProvider,
    TextLine,
    TextWord,
)
from pdfskeleton.parsers.base import BaseParser
from pdfskeleton.parsers.pdf import PdfSkeletonParser

__all__ = [
    "BaseParser",
    "PdfSkeletonParser",
    "PageTextProvider",
    "PyMuPdfPageProvider",
    "InMemoryPageProvider",
    "PageContent",
    "TextLine",
    "TextWord",
    "ImageRegion",
    "OcrEngine",
    "TesseractOcrEngine",
]
