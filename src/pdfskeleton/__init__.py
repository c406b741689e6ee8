"""pdfskeleton - Rebuild the structure of PDF documents from text geometry.

pdfskeleton converts the positioned text lines and image regions of a PDF into
a document skeleton: sections headed by detected headings, each holding an
ordered sequence of paragraphs, list items, tables, images and page breaks.
The skeleton is meant as the input of chunking and retrieval pipelines.

Everything is derived from geometry and font sizes only. Headings come from
font-size statistics, tables from the alignment of line and word positions,
and image regions are routed through an optional OCR engine by their share of
the page area.

Key Features
------------
- Document-wide body font estimation and three heading levels
- Geometric table detection with resolution-independent tolerances
- Bullet and numbered list grouping with marker stripping
- Table and figure caption attachment
- Optional OCR of image regions (Tesseract or any injected engine)
- Immutable skeleton model with visitor traversal and JSON serialization

Requirements
------------
- Python 3.10+
- PyMuPDF for reading PDF files
- pytesseract and Pillow for the built-in OCR engine (optional)

Examples
--------
Basic usage:

    >>> from pdfskeleton import parse_pdf
    >>> skeleton = parse_pdf("report.pdf")
    >>> for section in skeleton.sections:
    ...     print(section.level, section.heading, len(section.blocks))

Serializing the result:

    >>> from pdfskeleton.ast import skeleton_to_json
    >>> json_str = skeleton_to_json(skeleton, indent=2)

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

# Check Python version before any imports
import sys

if sys.version_info < (3, 10):
    raise ImportError(
        "pdfskeleton requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "1.0.0"

from pdfskeleton.api import parse_pages, parse_pdf
from pdfskeleton.ast import DocumentSkeleton, Section
from pdfskeleton.exceptions import (
    DependencyError,
    DocumentLoadError,
    ParsingCancelledError,
    ParsingError,
    PasswordProtectedError,
    SkeletonError,
    ValidationError,
)
from pdfskeleton.options import OCROptions, SkeletonOptions
from pdfskeleton.parsers import InMemoryPageProvider, PageContent, PageTextProvider, PdfSkeletonParser
from pdfskeleton.progress import ProgressCallback, ProgressEvent

__all__ = [
    "__version__",
    "parse_pdf",
    "parse_pages",
    "DocumentSkeleton",
    "Section",
    "SkeletonOptions",
    "OCROptions",
    "PdfSkeletonParser",
    "PageTextProvider",
    "InMemoryPageProvider",
    "PageContent",
    "ProgressCallback",
    "ProgressEvent",
    "SkeletonError",
    "ValidationError",
    "ParsingError",
    "DocumentLoadError",
    "PasswordProtectedError",
    "ParsingCancelledError",
    "DependencyError",
]
