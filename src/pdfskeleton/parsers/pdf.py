#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/parsers/pdf.py
"""PDF to document skeleton parser.

This module turns a PDF into a :class:`~pdfskeleton.ast.nodes.DocumentSkeleton`
in two passes over the pages:

1. Gather line sizes from every page and estimate the body font size.
2. Walk each page in reading order, detect tables, route images through OCR
   and run the section/paragraph/list state machine.

Pages are processed strictly in order; section state persists across pages
while paragraph and list buffers are flushed at every page end.

"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Generator, Optional, Sequence, Union

from pdfskeleton.ast.nodes import (
    BulletListItem,
    ContentBlock,
    DocumentSkeleton,
    Image,
    NumberedListItem,
    PageBreak,
    Paragraph,
    Section,
    Table,
    TableBlock,
)
from pdfskeleton.constants import DEFAULT_SECTION_HEADING
from pdfskeleton.exceptions import DocumentLoadError, ParsingCancelledError, SkeletonError
from pdfskeleton.options import SkeletonOptions
from pdfskeleton.parsers._pdf_fonts import FontStatistics
from pdfskeleton.parsers._pdf_images import ImageProcessor, ImageRoute, estimate_page_rect
from pdfskeleton.parsers._pdf_lines import ClassifiedLine, LineClassifier, LineKind, soft_split_words, sort_reading_order
from pdfskeleton.parsers._pdf_ocr import OcrCallable, OcrEngine, resolve_ocr_engine
from pdfskeleton.parsers._pdf_provider import ImageRegion, PageTextProvider, PyMuPdfPageProvider, TextLine
from pdfskeleton.parsers._pdf_tables import TableSpan, detect_tables
from pdfskeleton.parsers.base import BaseParser
from pdfskeleton.progress import ProgressCallback
from pdfskeleton.utils.decorators import debug_timer
from pdfskeleton.utils.geometry import Rect
from pdfskeleton.utils.inputs import InputType, read_document_bytes

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[bytes, SkeletonOptions, Optional[str]], PageTextProvider]
CancelCheck = Callable[[], bool]


@dataclass
class _SectionBuilder:
    heading: str
    level: int
    blocks: list[ContentBlock] = field(default_factory=list)

    def build(self) -> Section:
        return Section(heading=self.heading, level=self.level, blocks=tuple(self.blocks))


@dataclass
class _AssemblyState:
    """Mutable state for skeleton assembly.

    Sections and id counters live for the whole document. The paragraph and
    list buffers are per page and must be empty between pages.
    """

    sections: list[_SectionBuilder] = field(default_factory=list)
    paragraph_lines: list[str] = field(default_factory=list)
    list_kind: Optional[LineKind] = None
    list_items: list[str] = field(default_factory=list)
    paragraph_count: int = 0
    list_count: int = 0
    table_count: int = 0
    image_count: int = 0
    ocr_paragraph_count: int = 0

    @property
    def current(self) -> _SectionBuilder:
        return self.sections[-1]

    def reset_list(self) -> None:
        self.list_kind = None
        self.list_items = []


class _SkeletonAssembler:
    """Drive classification, table and image handling for each page.

    Parameters
    ----------
    options : SkeletonOptions
        Parser configuration
    classifier : LineClassifier
        Line classifier bound to the document's font statistics
    image_processor : ImageProcessor
        Image routing with the resolved OCR engine

    """

    def __init__(self, options: SkeletonOptions, classifier: LineClassifier, image_processor: ImageProcessor):
        self.options = options
        self.classifier = classifier
        self.image_processor = image_processor
        self.state = _AssemblyState(sections=[_SectionBuilder(DEFAULT_SECTION_HEADING, 1)])
        self._last_page: Optional[int] = None

    # Buffers

    def _append(self, block: ContentBlock) -> None:
        self.state.current.blocks.append(block)

    def _flush_paragraph(self, page: int) -> None:
        state = self.state
        if not state.paragraph_lines:
            return
        text = " ".join(state.paragraph_lines).strip()
        state.paragraph_lines = []
        for chunk in soft_split_words(text, self.options.max_words_per_paragraph):
            state.paragraph_count += 1
            self._append(Paragraph(block_id=f"p_{page}_{state.paragraph_count}", page=page, text=chunk))

    def _flush_list(self, page: int) -> None:
        state = self.state
        if state.list_kind is None:
            return
        block_class = BulletListItem if state.list_kind is LineKind.BULLET else NumberedListItem
        for item in state.list_items:
            state.list_count += 1
            self._append(block_class(block_id=f"list_{page}_{state.list_count}", page=page, text=item.strip()))
        state.reset_list()

    def _flush_all(self, page: int) -> None:
        self._flush_list(page)
        self._flush_paragraph(page)

    # Line handlers

    def _handle_heading(self, classified: ClassifiedLine, page: int) -> None:
        self._flush_all(page)
        assert classified.level is not None
        self.state.sections.append(_SectionBuilder(classified.text, classified.level))

    def _handle_list_item(self, classified: ClassifiedLine, page: int) -> None:
        state = self.state
        if state.list_kind is None:
            self._flush_paragraph(page)
        elif state.list_kind is not classified.kind:
            self._flush_list(page)
        state.list_kind = classified.kind
        state.list_items.append(classified.text)

    def _handle_paragraph_line(self, text: str, page: int) -> None:
        if self.state.list_kind is not None:
            self._flush_list(page)
        self.state.paragraph_lines.append(text)
        if not self.options.merge_paragraph_lines:
            self._flush_paragraph(page)

    def _emit_table(self, span: TableSpan, caption: Optional[str], page: int) -> None:
        self._flush_all(page)
        self.state.table_count += 1
        table = TableBlock(rows=span.table.rows, caption=caption)
        self._append(Table(block_id=f"t_{page}_{self.state.table_count}", page=page, table=table))

    def _emit_image(self, region: ImageRegion, image_seq: int, page_rect: Rect, page: int) -> None:
        self._flush_all(page)
        state = self.state
        decision = self.image_processor.process(region, page_rect)
        image_id = f"p{page}_img{image_seq}"
        state.image_count += 1
        text_on_image = decision.text if decision.route is ImageRoute.TEXT_ON_IMAGE else None
        self._append(
            Image(block_id=f"img_{page}_{image_id}", page=page, image_id=image_id, data=region.data, text=text_on_image)
        )
        if decision.route is ImageRoute.LINKED_PARAGRAPH and decision.text:
            state.ocr_paragraph_count += 1
            self._append(
                Paragraph(
                    block_id=f"p_ocr_{page}_{state.ocr_paragraph_count}",
                    page=page,
                    text=decision.text,
                    image_id=image_id,
                )
            )

    # Captions

    def _assign_captions(
        self, classified: Sequence[ClassifiedLine], spans: Sequence[TableSpan], claimed: set[int]
    ) -> dict[int, str]:
        """Attach caption lines to the nearest uncaptioned table.

        Returns a mapping from span position to caption text. Assigned caption
        line indices are added to ``claimed``.
        """
        captions: dict[int, str] = {}
        if not spans:
            return captions
        for index, item in enumerate(classified):
            if index in claimed or item.kind is not LineKind.CAPTION:
                continue
            free = [pos for pos in range(len(spans)) if pos not in captions]
            if not free:
                break
            bottom = item.line.bbox.y1
            nearest = min(free, key=lambda pos: abs(bottom - spans[pos].area.y0))
            captions[nearest] = item.text
            claimed.add(index)
        return captions

    # Pages

    def add_page(self, page: int, lines: Sequence[TextLine], images: Sequence[ImageRegion]) -> tuple[int, int]:
        """Assemble one page.

        Parameters
        ----------
        page : int
            1-based page number
        lines : sequence of TextLine
            Lines as reported by the provider, in any order
        images : sequence of ImageRegion
            Image regions as reported by the provider

        Returns
        -------
        tuple[int, int]
            Number of tables and images emitted for the page

        """
        if self.options.emit_page_breaks and self._last_page is not None:
            self._append(PageBreak(block_id=f"pb_{self._last_page}", page=self._last_page))

        ordered = sort_reading_order(line for line in lines if line.text.strip())
        spans = detect_tables(ordered, self.options)

        claimed: set[int] = set()
        span_at: dict[int, int] = {}
        for pos, span in enumerate(spans):
            # A line belongs to at most one table
            indices = span.line_indices - claimed
            claimed |= indices
            span_at[span.start_index] = pos

        classified = [self.classifier.classify(line) for line in ordered]
        captions = self._assign_captions(classified, spans, claimed)

        page_rect = estimate_page_rect(ordered, self.options)
        pending_images = sorted(images, key=lambda r: (r.bbox.y0, r.bbox.x0)) if self.options.extract_images else []
        image_seq = 0
        tables_emitted = 0

        for index, item in enumerate(classified):
            top = item.line.bbox.y0
            while pending_images and pending_images[0].bbox.y0 < top:
                image_seq += 1
                self._emit_image(pending_images.pop(0), image_seq, page_rect, page)

            if index in span_at:
                pos = span_at[index]
                self._emit_table(spans[pos], captions.get(pos), page)
                tables_emitted += 1
                continue
            if index in claimed:
                continue

            if item.kind is LineKind.HEADING:
                self._handle_heading(item, page)
            elif item.kind in (LineKind.BULLET, LineKind.NUMBERED):
                self._handle_list_item(item, page)
            else:
                # Unassigned captions read as plain text
                self._handle_paragraph_line(item.text, page)

        for region in pending_images:
            image_seq += 1
            self._emit_image(region, image_seq, page_rect, page)

        self._flush_all(page)
        self._last_page = page
        return tables_emitted, image_seq

    def build(self, source_id: str, metadata: dict) -> DocumentSkeleton:
        metadata = {
            **metadata,
            "table_count": self.state.table_count,
            "image_count": self.state.image_count,
        }
        return DocumentSkeleton(
            source_id=source_id,
            sections=tuple(builder.build() for builder in self.state.sections),
            metadata=metadata,
        )


@contextmanager
def _page_scope(provider: PageTextProvider, page_index: int) -> Generator[None, None, None]:
    """Hold a provider page only while it is being processed."""
    try:
        yield
    finally:
        provider.release_page(page_index)


class PdfSkeletonParser(BaseParser):
    """Convert a PDF into a document skeleton.

    Parameters
    ----------
    options : SkeletonOptions or None, default None
        Parser configuration
    progress_callback : ProgressCallback or None, default None
        Receives started / item_done / detected / error / finished events
    ocr_engine : OcrEngine, callable or None, default None
        OCR capability for image regions. When None and ``options.ocr.enabled``
        is set, a Tesseract engine is built; otherwise images are never OCR'd.
    provider_factory : callable or None, default None
        ``(data, options, source_id) -> PageTextProvider``; defaults to
        :class:`PyMuPdfPageProvider`
    cancel_check : callable or None, default None
        Polled between pages; returning True aborts with
        :class:`~pdfskeleton.exceptions.ParsingCancelledError`

    Examples
    --------
    >>> parser = PdfSkeletonParser(SkeletonOptions(emit_page_breaks=True))
    >>> skeleton = parser.parse("report.pdf", source_id="report")

    """

    def __init__(
        self,
        options: SkeletonOptions | None = None,
        progress_callback: Optional[ProgressCallback] = None,
        ocr_engine: Union[OcrEngine, OcrCallable, None] = None,
        provider_factory: Optional[ProviderFactory] = None,
        cancel_check: Optional[CancelCheck] = None,
    ):
        BaseParser._validate_options_type(options, SkeletonOptions, "pdf")
        options = options or SkeletonOptions()
        super().__init__(options, progress_callback)
        self.options: SkeletonOptions = options
        self.ocr_engine = ocr_engine
        self.provider_factory: ProviderFactory = provider_factory or PyMuPdfPageProvider
        self.cancel_check = cancel_check

    def parse(self, input_data: InputType, source_id: str = "pdf") -> DocumentSkeleton:
        """Parse PDF input into a skeleton.

        Parameters
        ----------
        input_data : str, Path, IO[bytes], or bytes
            The PDF document
        source_id : str, default "pdf"
            Identifier stored on the skeleton

        Returns
        -------
        DocumentSkeleton
            The parsed skeleton

        Raises
        ------
        DocumentLoadError
            If the document cannot be read or opened; no page is processed
        PasswordProtectedError
            If the document is encrypted and the password is missing or wrong
        DependencyError
            If PyMuPDF (or the OCR extras, when OCR is enabled) are missing
        ParsingCancelledError
            If ``cancel_check`` requested a stop

        """
        data = read_document_bytes(input_data, source_id)
        if not data:
            raise DocumentLoadError("Document is empty", source_id=source_id)

        ocr = resolve_ocr_engine(self.ocr_engine, self.options.ocr)
        provider = self._open_provider(data, source_id)
        return self._parse_with(provider, source_id, ocr)

    def parse_provider(self, provider: PageTextProvider, source_id: str = "pdf") -> DocumentSkeleton:
        """Parse pages from an already constructed provider.

        The provider is closed when parsing ends, whether it succeeds or not.
        """
        try:
            ocr = resolve_ocr_engine(self.ocr_engine, self.options.ocr)
        except Exception:
            provider.close()
            raise
        return self._parse_with(provider, source_id, ocr)

    def _open_provider(self, data: bytes, source_id: str) -> PageTextProvider:
        try:
            return self.provider_factory(data, self.options, source_id)
        except SkeletonError:
            raise
        except Exception as e:
            raise DocumentLoadError(f"Failed to open document: {e!r}", source_id=source_id, original_error=e) from e

    def _check_cancelled(self, page_num: int) -> None:
        if self.cancel_check is not None and self.cancel_check():
            logger.info(f"Parsing cancelled before page {page_num}")
            raise ParsingCancelledError(page_num)

    def _collect_font_statistics(
        self, provider: PageTextProvider, page_count: int, failed_pages: set[int]
    ) -> FontStatistics:
        """First pass: record line sizes from every readable page."""
        fonts = FontStatistics(self.options)
        for page_index in range(page_count):
            page_num = page_index + 1
            self._check_cancelled(page_num)
            with _page_scope(provider, page_index):
                try:
                    lines = provider.get_lines(page_index)
                except Exception as e:
                    self._record_page_failure(page_num, page_count, "font_statistics", e, failed_pages)
                    continue
                fonts.add_lines(lines)

        logger.debug(f"Font statistics: {fonts.debug_info()}")
        return fonts

    def _record_page_failure(
        self, page_num: int, total: int, stage: str, error: Exception, failed_pages: set[int]
    ) -> None:
        logger.warning(f"Skipping page {page_num}: text/image extraction failed: {error}")
        failed_pages.add(page_num)
        self._emit_progress(
            "error",
            f"Failed to extract page {page_num}",
            current=page_num,
            total=total,
            error=str(error),
            stage=stage,
            page=page_num,
        )

    def _parse_with(
        self, provider: PageTextProvider, source_id: str, ocr_engine: Optional[OcrEngine]
    ) -> DocumentSkeleton:
        with provider, debug_timer(logger, f"Skeleton extraction ({source_id})"):
            try:
                page_count = provider.page_count
            except Exception as e:
                raise DocumentLoadError(
                    f"Failed to read page count: {e!r}", source_id=source_id, original_error=e
                ) from e

            self._emit_progress("started", f"Parsing {source_id}", current=0, total=page_count)

            failed_pages: set[int] = set()
            fonts = self._collect_font_statistics(provider, page_count, failed_pages)
            assembler = _SkeletonAssembler(
                self.options,
                LineClassifier(fonts, self.options),
                ImageProcessor(self.options, ocr_engine),
            )

            for page_index in range(page_count):
                page_num = page_index + 1
                self._check_cancelled(page_num)
                if page_num in failed_pages:
                    continue

                with _page_scope(provider, page_index):
                    try:
                        lines = provider.get_lines(page_index)
                        images = provider.get_image_regions(page_index) if self.options.extract_images else []
                    except Exception as e:
                        self._record_page_failure(page_num, page_count, "extraction", e, failed_pages)
                        continue

                    table_count, image_count = assembler.add_page(page_num, lines, images)

                if table_count:
                    self._emit_progress(
                        "detected",
                        f"Found {table_count} table(s) on page {page_num}",
                        current=page_num,
                        total=page_count,
                        detected_type="table",
                        table_count=table_count,
                        page=page_num,
                    )
                if image_count:
                    self._emit_progress(
                        "detected",
                        f"Found {image_count} image(s) on page {page_num}",
                        current=page_num,
                        total=page_count,
                        detected_type="image",
                        image_count=image_count,
                        page=page_num,
                    )
                self._emit_progress(
                    "item_done",
                    f"Page {page_num} of {page_count}",
                    current=page_num,
                    total=page_count,
                    item_type="page",
                    page=page_num,
                )

            skeleton = assembler.build(
                source_id,
                {
                    "page_count": page_count,
                    "body_font_size": fonts.body_size,
                    "failed_pages": sorted(failed_pages),
                },
            )

        self._emit_progress("finished", f"Parsed {source_id}", current=page_count, total=page_count)
        return skeleton
