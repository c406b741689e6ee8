#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/parsers/_pdf_lines.py
"""PDF line classification.

This private module decides what each text line is: a heading, a bullet or
numbered list item, a table/figure caption, or plain paragraph text. It also
holds the reading-order sort and the word-boundary soft split applied to long
paragraphs.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from pdfskeleton.constants import BULLET_LIST_PATTERN, CAPTION_PATTERN, NUMBERED_LIST_PATTERN
from pdfskeleton.options import SkeletonOptions
from pdfskeleton.parsers._pdf_fonts import FontStatistics
from pdfskeleton.parsers._pdf_provider import TextLine

__all__ = ["LineKind", "ClassifiedLine", "LineClassifier", "sort_reading_order", "soft_split_words"]


class LineKind(Enum):
    EMPTY = "empty"
    HEADING = "heading"
    BULLET = "bullet"
    NUMBERED = "numbered"
    CAPTION = "caption"
    PARAGRAPH = "paragraph"


@dataclass(frozen=True)
class ClassifiedLine:
    """Classification result for one line.

    ``text`` is the stripped line text with any list marker removed. ``level``
    is only set for headings.
    """

    kind: LineKind
    text: str
    line: TextLine
    level: Optional[int] = None
    size_ratio: float = 0.0


def sort_reading_order(lines: Iterable[TextLine]) -> list[TextLine]:
    """Sort lines top to bottom, then left to right."""
    return sorted(lines, key=lambda line: (line.bbox.y0, line.bbox.x0))


def soft_split_words(text: str, max_words: int) -> list[str]:
    """Split text into chunks of at most ``max_words`` words.

    Words are never broken; joining the chunks with single spaces gives back
    the original word sequence. Text within the cap is returned unchanged
    apart from surrounding whitespace.

    Examples
    --------
    >>> soft_split_words("a b c d e", 2)
    ['a b', 'c d', 'e']

    """
    words = text.split()
    if len(words) <= max_words:
        stripped = text.strip()
        return [stripped] if stripped else []
    return [" ".join(words[i : i + max_words]) for i in range(0, len(words), max_words)]


class LineClassifier:
    """Classify lines using text patterns and the document body size.

    Parameters
    ----------
    fonts : FontStatistics
        Document-wide font statistics; only ``body_size`` is used
    options : SkeletonOptions
        Heading ratios and heading length cap

    """

    def __init__(self, fonts: FontStatistics, options: SkeletonOptions):
        self.fonts = fonts
        self.options = options

    def heading_level(self, ratio: float) -> int:
        """Map a size ratio to a heading level (1 is the largest)."""
        if ratio >= self.options.heading_level1_ratio:
            return 1
        if ratio >= self.options.heading_level2_ratio:
            return 2
        return 3

    def is_heading(self, line: TextLine, text: str, ratio: float) -> bool:
        if ratio < self.options.heading_size_ratio:
            return False
        max_len = self.options.heading_max_line_length
        return max_len is None or len(text) <= max_len

    @staticmethod
    def is_caption(text: str) -> bool:
        return CAPTION_PATTERN.match(text) is not None

    def classify(self, line: TextLine) -> ClassifiedLine:
        """Classify a single line.

        The tests run in order: empty, heading, bullet, numbered, caption, and
        paragraph as the fallback, so every line gets exactly one kind.
        """
        text = line.text.strip()
        if not text:
            return ClassifiedLine(LineKind.EMPTY, "", line)

        ratio = self.fonts.ratio(line)
        if self.is_heading(line, text, ratio):
            return ClassifiedLine(LineKind.HEADING, text, line, level=self.heading_level(ratio), size_ratio=ratio)

        bullet = BULLET_LIST_PATTERN.match(text)
        if bullet:
            return ClassifiedLine(LineKind.BULLET, text[bullet.end() :].strip(), line, size_ratio=ratio)

        numbered = NUMBERED_LIST_PATTERN.match(text)
        if numbered:
            return ClassifiedLine(LineKind.NUMBERED, text[numbered.end() :].strip(), line, size_ratio=ratio)

        if self.is_caption(text):
            return ClassifiedLine(LineKind.CAPTION, text, line, size_ratio=ratio)

        return ClassifiedLine(LineKind.PARAGRAPH, text, line, size_ratio=ratio)
