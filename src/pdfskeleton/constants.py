#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for the pdfskeleton library.

This module centralizes the thresholds, tolerances and magic numbers used by
the skeleton extraction pipeline so they can be discovered in one place and
overridden through :class:`pdfskeleton.options.SkeletonOptions`.

Constants are organized by category:
1. Type Definitions - Literal types and type aliases
2. Font Statistics and Headings
3. Paragraphs and Lists
4. Table Detection
5. Image Processing and OCR
6. Dependencies
"""

from __future__ import annotations

import re
from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

TableFragmentSource = Literal["lines", "words"]

# =============================================================================
# Font Statistics and Headings
# =============================================================================

DEFAULT_BODY_FONT_SIZE = 12.0  # Used when a document has no measurable text
DEFAULT_HEADING_SIZE_RATIO = 1.25
DEFAULT_HEADING_LEVEL1_RATIO = 1.8
DEFAULT_HEADING_LEVEL2_RATIO = 1.4
DEFAULT_SECTION_HEADING = "Document"

# =============================================================================
# Paragraphs and Lists
# =============================================================================

DEFAULT_MAX_WORDS_PER_PARAGRAPH = 800
DEFAULT_MERGE_PARAGRAPH_LINES = False

NUMBERED_LIST_PATTERN = re.compile(r"^\s*(\d+[.)]|[A-Za-z][.)])\s+")
BULLET_LIST_PATTERN = re.compile(r"^\s*[-–•▪●□■➤*]\s+")
CAPTION_PATTERN = re.compile(r"^\s*(Table|Fig(?:ure)?\.?)\s*\d+[:.\-\s]", re.IGNORECASE)

# =============================================================================
# Table Detection
# =============================================================================

DEFAULT_DETECT_TABLES = True
DEFAULT_TABLE_MAX_COLUMNS = 10
DEFAULT_TABLE_MIN_ROWS = 2
DEFAULT_TABLE_MIN_FRAGMENTS = 4
DEFAULT_TABLE_MIN_ALIGN_SCORE = 0.75
DEFAULT_TABLE_BAND_GAP_FACTOR = 3.0
DEFAULT_TABLE_FRAGMENT_SOURCE: TableFragmentSource = "lines"

# Dynamic tolerances are derived from the median line height
TABLE_ROW_TOLERANCE_MIN = 1.5
TABLE_ROW_TOLERANCE_FACTOR = 0.5
TABLE_COLUMN_TOLERANCE_MIN = 2.0
TABLE_CHAR_WIDTH_FACTOR = 0.35  # approximate glyph width / line height
TABLE_COLUMN_TOLERANCE_FACTOR = 0.6
TABLE_FALLBACK_LINE_HEIGHT = 12.0
TABLE_MIN_LINE_HEIGHT = 0.1

# =============================================================================
# Image Processing and OCR
# =============================================================================

DEFAULT_EXTRACT_IMAGES = True
DEFAULT_IMAGE_TINY_AREA_RATIO = 0.05
DEFAULT_IMAGE_LARGE_AREA_RATIO = 0.40
DEFAULT_IMAGE_RENDER_DPI = 220

# US Letter at 72 dpi, used when a page carries no text to estimate its extent
DEFAULT_FALLBACK_PAGE_WIDTH = 612.0
DEFAULT_FALLBACK_PAGE_HEIGHT = 792.0

DEFAULT_TEXTY_MIN_CHARS = 80
DEFAULT_TEXTY_MIN_LINES = 3
DEFAULT_TEXTY_MIN_WORDS = 12
DEFAULT_TEXTY_MIN_ALNUM_RATIO = 0.60

DEFAULT_OCR_ENABLED = False
DEFAULT_OCR_LANGUAGES = "eng"
DEFAULT_OCR_TESSERACT_CONFIG = ""
DEFAULT_OCR_TIMEOUT = 0

DEFAULT_EMIT_PAGE_BREAKS = False

# =============================================================================
# Dependencies
# =============================================================================

PDF_MIN_PYMUPDF_VERSION = "1.26.4"
DEPS_PDF = [("pymupdf", "fitz", ">=1.26.4")]
DEPS_PDF_OCR = [("pytesseract", "pytesseract", ">=0.3.10"), ("Pillow", "PIL", ">=9.0.0")]
