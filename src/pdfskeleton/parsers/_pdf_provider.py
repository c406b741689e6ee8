#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/parsers/_pdf_provider.py
"""Page text providers.

A page text provider is the only component that understands the PDF container
format. It reports, per page, positioned text lines and image regions; the
skeleton parser consumes nothing else. Two providers ship with the package:

- :class:`PyMuPdfPageProvider` reads PDF bytes with PyMuPDF.
- :class:`InMemoryPageProvider` serves geometry that some other rendering or
  OCR layer already produced.

"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Optional, Sequence

from pdfskeleton.constants import DEPS_PDF, PDF_MIN_PYMUPDF_VERSION
from pdfskeleton.exceptions import DependencyError, DocumentLoadError, PasswordProtectedError
from pdfskeleton.options import SkeletonOptions
from pdfskeleton.utils.decorators import requires_dependencies
from pdfskeleton.utils.geometry import Rect

if TYPE_CHECKING:
    import fitz

logger = logging.getLogger(__name__)

__all__ = [
    "TextWord",
    "TextLine",
    "ImageRegion",
    "PageContent",
    "PageTextProvider",
    "InMemoryPageProvider",
    "PyMuPdfPageProvider",
]


@dataclass(frozen=True)
class TextWord:
    """A single word with its bounding box."""

    text: str
    bbox: Rect


@dataclass(frozen=True)
class TextLine:
    """A positioned line of text.

    Parameters
    ----------
    text : str
        Raw line text
    bbox : Rect
        Line bounding box in page coordinates
    glyph_sizes : tuple of float, default ()
        Font sizes of the glyphs or spans making up the line
    words : tuple of TextWord, default ()
        Words inside the line, used when tables are built from words

    """

    text: str
    bbox: Rect
    glyph_sizes: tuple[float, ...] = ()
    words: tuple[TextWord, ...] = ()

    @property
    def size(self) -> float:
        """Average glyph size, or the line height when no sizes are known."""
        sizes = [s for s in self.glyph_sizes if s > 0]
        if sizes:
            return sum(sizes) / len(sizes)
        return self.bbox.height


@dataclass(frozen=True)
class ImageRegion:
    """An image placed on a page together with its raster bytes."""

    bbox: Rect
    data: bytes


@dataclass(frozen=True)
class PageContent:
    """Everything a provider reports for one page."""

    lines: tuple[TextLine, ...] = ()
    images: tuple[ImageRegion, ...] = ()


class PageTextProvider(ABC):
    """Source of positioned text and images, one page at a time.

    Providers are context managers; the parser enters them for the duration of
    one parse and ``close`` releases any document handle on every exit path.
    """

    @property
    @abstractmethod
    def page_count(self) -> int:
        """Number of pages in the document."""

    @abstractmethod
    def get_lines(self, page_index: int) -> Sequence[TextLine]:
        """Return the text lines of a page (0-based index)."""

    @abstractmethod
    def get_image_regions(self, page_index: int) -> Sequence[ImageRegion]:
        """Return the image regions of a page (0-based index)."""

    def release_page(self, page_index: int) -> None:
        """Drop any resources held for a page. The default does nothing."""
        pass

    def close(self) -> None:
        """Release the underlying document. The default does nothing."""
        pass

    def __enter__(self) -> PageTextProvider:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()


class InMemoryPageProvider(PageTextProvider):
    """Provider over pre-computed page geometry.

    Parameters
    ----------
    pages : sequence of PageContent
        One entry per page, in order

    Examples
    --------
    >>> provider = InMemoryPageProvider([
    ...     PageContent(lines=(TextLine("Hello", Rect(50, 100, 120, 112)),)),
    ... ])
    >>> provider.page_count
    1

    """

    def __init__(self, pages: Sequence[PageContent]):
        self._pages = tuple(pages)

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def get_lines(self, page_index: int) -> Sequence[TextLine]:
        return self._pages[page_index].lines

    def get_image_regions(self, page_index: int) -> Sequence[ImageRegion]:
        return self._pages[page_index].images


def _check_pymupdf_version() -> None:
    """Check that the PyMuPDF version meets minimum requirements.

    Raises
    ------
    DependencyError
        If PyMuPDF version is too old

    """
    import fitz

    min_version = tuple(map(int, PDF_MIN_PYMUPDF_VERSION.split(".")))
    if fitz.pymupdf_version_tuple < min_version:
        raise DependencyError(
            converter_name="pdf",
            missing_packages=[],
            version_mismatches=[
                ("pymupdf", f">={PDF_MIN_PYMUPDF_VERSION}", ".".join(map(str, fitz.pymupdf_version_tuple)))
            ],
        )


class PyMuPdfPageProvider(PageTextProvider):
    """Provider that reads PDF bytes with PyMuPDF.

    Text comes from ``page.get_text("dict")``: each horizontal line becomes a
    :class:`TextLine` whose glyph sizes are its span sizes. Words come from
    ``page.get_text("words")`` and are assigned to the line that contains
    their center. Each placed image is rasterized from the page at
    ``options.image_render_dpi`` and encoded as JPEG.

    Parameters
    ----------
    data : bytes
        PDF document bytes
    options : SkeletonOptions
        Supplies the password and render resolution
    source_id : str, optional
        Identifier used in error messages

    Raises
    ------
    DependencyError
        If PyMuPDF is not installed or too old
    PasswordProtectedError
        If the document is encrypted and the password is missing or wrong
    DocumentLoadError
        If the bytes cannot be opened as a PDF

    """

    @requires_dependencies("pdf", DEPS_PDF)
    def __init__(self, data: bytes, options: SkeletonOptions, source_id: Optional[str] = None):
        import fitz

        _check_pymupdf_version()

        self.options = options
        self.source_id = source_id
        self._current_index: Optional[int] = None
        self._current_page: Optional["fitz.Page"] = None

        try:
            self._doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise DocumentLoadError(
                f"Failed to open PDF document: {e!r}", source_id=source_id, original_error=e
            ) from e

        if self._doc.needs_pass:
            if not options.password:
                self._doc.close()
                raise PasswordProtectedError(
                    message="PDF document is password-protected. Please provide a password using the 'password' option.",
                    source_id=source_id,
                )
            # 0 means the password was rejected
            if self._doc.authenticate(options.password) == 0:
                self._doc.close()
                raise PasswordProtectedError(
                    message="Failed to authenticate PDF with provided password. Please check the password is correct.",
                    source_id=source_id,
                )

        logger.debug(f"Opened PDF {source_id or '<bytes>'} with {self._doc.page_count} pages")

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def _page(self, page_index: int) -> "fitz.Page":
        if self._current_index != page_index or self._current_page is None:
            self._current_page = self._doc[page_index]
            self._current_index = page_index
        return self._current_page

    def get_lines(self, page_index: int) -> Sequence[TextLine]:
        import fitz

        page = self._page(page_index)
        text_dict = page.get_text("dict", flags=fitz.TEXTFLAGS_TEXT)

        raw_lines: list[tuple[str, Rect, tuple[float, ...]]] = []
        for block in text_dict.get("blocks", []):
            if block.get("type") != 0:
                continue
            for line in block.get("lines", []):
                # Horizontal text only
                if abs(line.get("dir", (1, 0))[1]) > 1e-3:
                    continue
                spans = [s for s in line.get("spans", []) if s.get("text")]
                text = "".join(s["text"] for s in spans).strip()
                if not text:
                    continue
                sizes = tuple(float(s["size"]) for s in spans if s.get("size"))
                raw_lines.append((text, Rect.from_tuple(line["bbox"]), sizes))

        words_by_line: list[list[TextWord]] = [[] for _ in raw_lines]
        for x0, y0, x1, y1, word, *_ in page.get_text("words"):
            cx = (x0 + x1) / 2.0
            cy = (y0 + y1) / 2.0
            for index, (_, bbox, _) in enumerate(raw_lines):
                if bbox.x0 <= cx <= bbox.x1 and bbox.y0 <= cy <= bbox.y1:
                    words_by_line[index].append(TextWord(word, Rect(x0, y0, x1, y1)))
                    break

        return [
            TextLine(text=text, bbox=bbox, glyph_sizes=sizes, words=tuple(sorted(words, key=lambda w: w.bbox.x0)))
            for (text, bbox, sizes), words in zip(raw_lines, words_by_line)
        ]

    def get_image_regions(self, page_index: int) -> Sequence[ImageRegion]:
        page = self._page(page_index)
        regions: list[ImageRegion] = []

        for info in page.get_image_info():
            bbox = Rect.from_tuple(info["bbox"])
            if bbox.is_degenerate:
                continue
            pix = page.get_pixmap(clip=bbox.as_tuple(), dpi=self.options.image_render_dpi, alpha=False)
            regions.append(ImageRegion(bbox=bbox, data=pix.tobytes("jpeg")))

        return regions

    def release_page(self, page_index: int) -> None:
        if self._current_index == page_index:
            self._current_page = None
            self._current_index = None

    def close(self) -> None:
        self._current_page = None
        self._current_index = None
        if not self._doc.is_closed:
            self._doc.close()
