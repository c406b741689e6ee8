"""Test utilities for the pdfskeleton test suite.

Helpers for building positioned text lines, pages and OCR stand-ins without a
real PDF backend.
"""

import re
from typing import Optional, Sequence

from pdfskeleton.ast import (
    BulletListItem,
    DocumentSkeleton,
    Image,
    NumberedListItem,
    PageBreak,
    Paragraph,
    Section,
    Table,
    TableBlock,
)
from pdfskeleton.parsers import ImageRegion, PageContent, PageTextProvider, TextLine, TextWord
from pdfskeleton.progress import EventType, ProgressEvent
from pdfskeleton.utils.geometry import Rect

# Stand-in raster bytes; only OCR engines and equality checks look at them
FAKE_IMAGE_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"

CHAR_WIDTH_FACTOR = 0.5


def make_line(
    text: str,
    x0: float,
    y0: float,
    size: float = 12.0,
    width: Optional[float] = None,
    with_words: bool = False,
) -> TextLine:
    """Build a TextLine whose box height equals its font size."""
    char_width = size * CHAR_WIDTH_FACTOR
    width = len(text) * char_width if width is None else width
    words: tuple[TextWord, ...] = ()
    if with_words:
        words = tuple(
            TextWord(m.group(), Rect(x0 + m.start() * char_width, y0, x0 + m.end() * char_width, y0 + size))
            for m in re.finditer(r"\S+", text)
        )
    return TextLine(text=text, bbox=Rect(x0, y0, x0 + width, y0 + size), glyph_sizes=(size,), words=words)


def make_image(x0: float, y0: float, x1: float, y1: float, data: bytes = FAKE_IMAGE_BYTES) -> ImageRegion:
    return ImageRegion(bbox=Rect(x0, y0, x1, y1), data=data)


def make_page(lines: Sequence[TextLine] = (), images: Sequence[ImageRegion] = ()) -> PageContent:
    return PageContent(lines=tuple(lines), images=tuple(images))


def grid_lines(rows: Sequence[Sequence[str]], xs: Sequence[float], top: float, step: float = 20.0, size: float = 10.0):
    """Lay out one line per cell at the given column x positions."""
    return [
        make_line(cell, x, top + r * step, size=size)
        for r, row in enumerate(rows)
        for cell, x in zip(row, xs)
    ]


class StaticOcr:
    """OCR engine returning fixed text and recording every call."""

    def __init__(self, text: Optional[str]):
        self.text = text
        self.calls: list[bytes] = []

    def recognize(self, image_bytes: bytes) -> Optional[str]:
        self.calls.append(image_bytes)
        return self.text


class FailingOcr:
    """OCR engine that always raises."""

    def recognize(self, image_bytes: bytes) -> Optional[str]:
        raise RuntimeError("tesseract crashed")


class RecordingProvider(PageTextProvider):
    """In-memory provider that records lifecycle calls and can fail pages."""

    def __init__(self, pages: Sequence[PageContent], failing_pages: Sequence[int] = ()):
        self.pages = list(pages)
        self.failing_pages = set(failing_pages)
        self.released: list[int] = []
        self.closed = False

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def get_lines(self, page_index: int) -> Sequence[TextLine]:
        if page_index in self.failing_pages:
            raise RuntimeError(f"cannot decode page {page_index}")
        return self.pages[page_index].lines

    def get_image_regions(self, page_index: int) -> Sequence[ImageRegion]:
        return self.pages[page_index].images

    def release_page(self, page_index: int) -> None:
        self.released.append(page_index)

    def close(self) -> None:
        self.closed = True


class ProgressTracker:
    """Helper class to track progress events during testing."""

    def __init__(self):
        self.events: list[ProgressEvent] = []

    def callback(self, event: ProgressEvent) -> None:
        self.events.append(event)

    def get_events_by_type(self, event_type: EventType) -> list[ProgressEvent]:
        return [e for e in self.events if e.event_type == event_type]

    def has_event_type(self, event_type: EventType) -> bool:
        return any(e.event_type == event_type for e in self.events)


def sample_skeleton() -> DocumentSkeleton:
    """A skeleton holding one block of every type."""
    return DocumentSkeleton(
        source_id="sample",
        sections=(
            Section("Document", 1, (Paragraph("p_1_1", 1, "Preface"),)),
            Section(
                "Results",
                2,
                (
                    BulletListItem("list_1_1", 1, "first"),
                    NumberedListItem("list_1_2", 1, "second"),
                    Table("t_1_1", 1, TableBlock(rows=(("a", "b"), ("c", "d")), caption="Table 1: Data")),
                    PageBreak("pb_1", 1),
                    Image("img_2_p2_img1", 2, "p2_img1", b"\x89PNG", text="scanned"),
                    Paragraph("p_ocr_2_1", 2, "linked text", image_id="p2_img1"),
                ),
            ),
        ),
        metadata={"page_count": 2, "failed_pages": [3]},
    )
