#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/options/skeleton.py
"""Configuration options for PDF skeleton extraction.

This module defines the single configuration struct that carries every
threshold, tolerance and cap used by the font statistics, line classifier,
table detector, image processor and assembler. Instances are immutable, so
documents with different tuning can be parsed side by side.
"""

from dataclasses import dataclass, field

from pdfskeleton.constants import (
    DEFAULT_BODY_FONT_SIZE,
    DEFAULT_DETECT_TABLES,
    DEFAULT_EMIT_PAGE_BREAKS,
    DEFAULT_EXTRACT_IMAGES,
    DEFAULT_FALLBACK_PAGE_HEIGHT,
    DEFAULT_FALLBACK_PAGE_WIDTH,
    DEFAULT_HEADING_LEVEL1_RATIO,
    DEFAULT_HEADING_LEVEL2_RATIO,
    DEFAULT_HEADING_SIZE_RATIO,
    DEFAULT_IMAGE_LARGE_AREA_RATIO,
    DEFAULT_IMAGE_RENDER_DPI,
    DEFAULT_IMAGE_TINY_AREA_RATIO,
    DEFAULT_MAX_WORDS_PER_PARAGRAPH,
    DEFAULT_MERGE_PARAGRAPH_LINES,
    DEFAULT_TABLE_BAND_GAP_FACTOR,
    DEFAULT_TABLE_FRAGMENT_SOURCE,
    DEFAULT_TABLE_MAX_COLUMNS,
    DEFAULT_TABLE_MIN_ALIGN_SCORE,
    DEFAULT_TABLE_MIN_FRAGMENTS,
    DEFAULT_TABLE_MIN_ROWS,
    DEFAULT_TEXTY_MIN_ALNUM_RATIO,
    DEFAULT_TEXTY_MIN_CHARS,
    DEFAULT_TEXTY_MIN_LINES,
    DEFAULT_TEXTY_MIN_WORDS,
    TableFragmentSource,
)
from pdfskeleton.options.base import BaseParserOptions
from pdfskeleton.options.common import OCROptions


@dataclass(frozen=True)
class SkeletonOptions(BaseParserOptions):
    """Configuration options for PDF-to-skeleton extraction.

    Parameters
    ----------
    password : str or None, default None
        Password for encrypted PDF documents.

    # Font statistics and headings
    body_font_size : float or None, default None
        Body text size to use instead of the document-wide median.
    fallback_body_font_size : float, default 12.0
        Body size assumed when no line in the document has a measurable size.
    heading_size_ratio : float, default 1.25
        Minimum ratio of line size to body size for a line to start a section.
    heading_level1_ratio : float, default 1.8
        Ratio at or above which a heading is level 1.
    heading_level2_ratio : float, default 1.4
        Ratio at or above which a heading is level 2 (otherwise level 3).
    heading_max_line_length : int or None, default None
        Lines longer than this many characters are never headings.

    # Paragraphs
    max_words_per_paragraph : int, default 800
        Paragraph text longer than this is soft-split at word boundaries.
    merge_paragraph_lines : bool, default False
        Join consecutive plain lines into one paragraph instead of emitting
        one paragraph per line.

    # Table detection
    detect_tables : bool, default True
        Run geometric table detection before line classification.
    table_max_columns : int, default 10
        Regions with more inferred columns are rejected.
    table_min_rows : int, default 2
        Minimum number of row bands in a candidate region.
    table_min_fragments : int, default 4
        Minimum number of line/word fragments in a candidate region.
    table_min_align_score : float, default 0.75
        Fraction of fragments that must sit within the column tolerance.
    table_row_tolerance : float or None, default None
        Fixed row-banding tolerance; None derives it from the median line height.
    table_column_tolerance : float or None, default None
        Fixed column-clustering tolerance; None derives it from the median line height.
    table_band_gap_factor : float, default 3.0
        Consecutive row bands further apart than this many median line heights
        start a new candidate region.
    table_fragment_source : {"lines", "words"}, default "lines"
        Use whole lines or the words inside them as table cell fragments.

    # Images
    extract_images : bool, default True
        Emit Image blocks for image regions reported by the page provider.
    image_tiny_area_ratio : float, default 0.05
        Image regions below this fraction of the page area are never OCR'd.
    image_large_area_ratio : float, default 0.40
        Texty regions at or above this fraction keep their OCR text on the
        Image block; smaller ones get a linked Paragraph.
    image_render_dpi : int, default 220
        Resolution used by the PyMuPDF provider to rasterize image regions.
    fallback_page_width / fallback_page_height : float, default 612 / 792
        Page extent assumed when a page has no text to estimate it from.
    texty_min_chars / texty_min_lines / texty_min_words / texty_min_alnum_ratio
        Thresholds deciding whether OCR output is meaningful prose.

    # Output
    emit_page_breaks : bool, default False
        Insert a PageBreak block between consecutive pages.
    ocr : OCROptions
        Settings for the built-in Tesseract engine.

    Examples
    --------
    Tighter heading detection and a fixed column tolerance:
        >>> options = SkeletonOptions(heading_size_ratio=1.4, table_column_tolerance=5.0)

    Enable the built-in OCR engine:
        >>> options = SkeletonOptions(ocr=OCROptions(enabled=True))

    """

    password: str | None = field(
        default=None,
        metadata={"help": "Password for encrypted PDF documents", "importance": "security"},
    )

    # Font statistics and headings
    body_font_size: float | None = field(
        default=None,
        metadata={"help": "Body text size override (None = document-wide median)", "importance": "advanced"},
    )
    fallback_body_font_size: float = field(
        default=DEFAULT_BODY_FONT_SIZE,
        metadata={"help": "Body size assumed when no text size is observed", "importance": "advanced"},
    )
    heading_size_ratio: float = field(
        default=DEFAULT_HEADING_SIZE_RATIO,
        metadata={"help": "Minimum size/body ratio for a heading line", "importance": "core"},
    )
    heading_level1_ratio: float = field(
        default=DEFAULT_HEADING_LEVEL1_RATIO,
        metadata={"help": "Size/body ratio for level-1 headings", "importance": "advanced"},
    )
    heading_level2_ratio: float = field(
        default=DEFAULT_HEADING_LEVEL2_RATIO,
        metadata={"help": "Size/body ratio for level-2 headings", "importance": "advanced"},
    )
    heading_max_line_length: int | None = field(
        default=None,
        metadata={"help": "Maximum characters for a heading line (None = unlimited)", "importance": "advanced"},
    )

    # Paragraphs
    max_words_per_paragraph: int = field(
        default=DEFAULT_MAX_WORDS_PER_PARAGRAPH,
        metadata={"help": "Soft-split paragraphs longer than this many words", "importance": "core"},
    )
    merge_paragraph_lines: bool = field(
        default=DEFAULT_MERGE_PARAGRAPH_LINES,
        metadata={"help": "Join consecutive plain lines into one paragraph", "importance": "core"},
    )

    # Table detection
    detect_tables: bool = field(
        default=DEFAULT_DETECT_TABLES,
        metadata={"help": "Detect tables from line geometry", "importance": "core"},
    )
    table_max_columns: int = field(
        default=DEFAULT_TABLE_MAX_COLUMNS,
        metadata={"help": "Maximum inferred columns for a table", "importance": "advanced"},
    )
    table_min_rows: int = field(
        default=DEFAULT_TABLE_MIN_ROWS,
        metadata={"help": "Minimum row bands for a table", "importance": "advanced"},
    )
    table_min_fragments: int = field(
        default=DEFAULT_TABLE_MIN_FRAGMENTS,
        metadata={"help": "Minimum text fragments in a candidate table region", "importance": "advanced"},
    )
    table_min_align_score: float = field(
        default=DEFAULT_TABLE_MIN_ALIGN_SCORE,
        metadata={"help": "Minimum fraction of fragments aligned to a column center", "importance": "advanced"},
    )
    table_row_tolerance: float | None = field(
        default=None,
        metadata={"help": "Fixed row tolerance in points (None = dynamic)", "importance": "advanced"},
    )
    table_column_tolerance: float | None = field(
        default=None,
        metadata={"help": "Fixed column tolerance in points (None = dynamic)", "importance": "advanced"},
    )
    table_band_gap_factor: float = field(
        default=DEFAULT_TABLE_BAND_GAP_FACTOR,
        metadata={"help": "Max gap between row bands, in median line heights", "importance": "advanced"},
    )
    table_fragment_source: TableFragmentSource = field(
        default=DEFAULT_TABLE_FRAGMENT_SOURCE,
        metadata={
            "help": "Table cell fragments: whole 'lines' or the 'words' inside them",
            "choices": ["lines", "words"],
            "importance": "advanced",
        },
    )

    # Images
    extract_images: bool = field(
        default=DEFAULT_EXTRACT_IMAGES,
        metadata={"help": "Emit Image blocks for image regions", "importance": "core"},
    )
    image_tiny_area_ratio: float = field(
        default=DEFAULT_IMAGE_TINY_AREA_RATIO,
        metadata={"help": "Page-area ratio below which images are not OCR'd", "importance": "advanced"},
    )
    image_large_area_ratio: float = field(
        default=DEFAULT_IMAGE_LARGE_AREA_RATIO,
        metadata={"help": "Page-area ratio at which OCR text stays on the image block", "importance": "advanced"},
    )
    image_render_dpi: int = field(
        default=DEFAULT_IMAGE_RENDER_DPI,
        metadata={"help": "DPI for rasterizing image regions", "importance": "advanced"},
    )
    fallback_page_width: float = field(
        default=DEFAULT_FALLBACK_PAGE_WIDTH,
        metadata={"help": "Page width assumed for pages without text", "importance": "advanced"},
    )
    fallback_page_height: float = field(
        default=DEFAULT_FALLBACK_PAGE_HEIGHT,
        metadata={"help": "Page height assumed for pages without text", "importance": "advanced"},
    )
    texty_min_chars: int = field(
        default=DEFAULT_TEXTY_MIN_CHARS,
        metadata={"help": "Non-whitespace characters that make OCR output texty", "importance": "advanced"},
    )
    texty_min_lines: int = field(
        default=DEFAULT_TEXTY_MIN_LINES,
        metadata={"help": "Line count that makes OCR output texty", "importance": "advanced"},
    )
    texty_min_words: int = field(
        default=DEFAULT_TEXTY_MIN_WORDS,
        metadata={"help": "Word count that, with enough alphanumerics, makes OCR output texty", "importance": "advanced"},
    )
    texty_min_alnum_ratio: float = field(
        default=DEFAULT_TEXTY_MIN_ALNUM_RATIO,
        metadata={"help": "Alphanumeric character ratio paired with texty_min_words", "importance": "advanced"},
    )

    # Output
    emit_page_breaks: bool = field(
        default=DEFAULT_EMIT_PAGE_BREAKS,
        metadata={"help": "Insert PageBreak blocks between pages", "importance": "core"},
    )
    ocr: OCROptions = field(
        default_factory=OCROptions,
        metadata={"help": "Built-in OCR engine settings", "importance": "core"},
    )

    def __post_init__(self) -> None:
        """Validate numeric ranges for skeleton options.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        super().__post_init__()

        if self.body_font_size is not None and self.body_font_size <= 0:
            raise ValueError(f"body_font_size must be positive, got {self.body_font_size}")
        if self.fallback_body_font_size <= 0:
            raise ValueError(f"fallback_body_font_size must be positive, got {self.fallback_body_font_size}")

        if self.heading_size_ratio <= 0:
            raise ValueError(f"heading_size_ratio must be positive, got {self.heading_size_ratio}")
        if not self.heading_size_ratio <= self.heading_level2_ratio <= self.heading_level1_ratio:
            raise ValueError(
                "heading ratios must satisfy heading_size_ratio <= heading_level2_ratio <= heading_level1_ratio, "
                f"got {self.heading_size_ratio}, {self.heading_level2_ratio}, {self.heading_level1_ratio}"
            )
        if self.heading_max_line_length is not None and self.heading_max_line_length <= 0:
            raise ValueError(f"heading_max_line_length must be positive, got {self.heading_max_line_length}")

        if self.max_words_per_paragraph < 1:
            raise ValueError(f"max_words_per_paragraph must be at least 1, got {self.max_words_per_paragraph}")

        if self.table_max_columns < 2:
            raise ValueError(f"table_max_columns must be at least 2, got {self.table_max_columns}")
        if self.table_min_rows < 1:
            raise ValueError(f"table_min_rows must be at least 1, got {self.table_min_rows}")
        if self.table_min_fragments < 0:
            raise ValueError(f"table_min_fragments must be non-negative, got {self.table_min_fragments}")
        if not 0.0 <= self.table_min_align_score <= 1.0:
            raise ValueError(f"table_min_align_score must be in range [0.0, 1.0], got {self.table_min_align_score}")
        for name in ("table_row_tolerance", "table_column_tolerance"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.table_band_gap_factor <= 0:
            raise ValueError(f"table_band_gap_factor must be positive, got {self.table_band_gap_factor}")
        if self.table_fragment_source not in ("lines", "words"):
            raise ValueError(f"table_fragment_source must be 'lines' or 'words', got {self.table_fragment_source!r}")

        if not 0.0 <= self.image_tiny_area_ratio <= 1.0:
            raise ValueError(f"image_tiny_area_ratio must be in range [0.0, 1.0], got {self.image_tiny_area_ratio}")
        if not 0.0 <= self.image_large_area_ratio <= 1.0:
            raise ValueError(f"image_large_area_ratio must be in range [0.0, 1.0], got {self.image_large_area_ratio}")
        if self.image_tiny_area_ratio > self.image_large_area_ratio:
            raise ValueError("image_tiny_area_ratio must not exceed image_large_area_ratio")
        if not 72 <= self.image_render_dpi <= 1200:
            raise ValueError(f"image_render_dpi must be in range [72, 1200], got {self.image_render_dpi}")
        if self.fallback_page_width <= 0 or self.fallback_page_height <= 0:
            raise ValueError("fallback page dimensions must be positive")

        for name in ("texty_min_chars", "texty_min_lines", "texty_min_words"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        if not 0.0 <= self.texty_min_alnum_ratio <= 1.0:
            raise ValueError(f"texty_min_alnum_ratio must be in range [0.0, 1.0], got {self.texty_min_alnum_ratio}")
