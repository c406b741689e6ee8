#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for skeleton assembly from pre-extracted page geometry."""

import logging

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pdfskeleton import parse_pages
from pdfskeleton.ast import (
    BulletListItem,
    Image,
    NumberedListItem,
    PageBreak,
    Paragraph,
    Table,
)
from pdfskeleton.exceptions import InvalidOptionsError, ParsingCancelledError
from pdfskeleton.options import OCROptions, SkeletonOptions
from pdfskeleton.parsers import PdfSkeletonParser
from utils import FailingOcr, RecordingProvider, StaticOcr, grid_lines, make_image, make_line, make_page

TEXT_120 = "abcdefghij" * 12
TEXT_90 = "The quick brown fox jumps over the lazy dog and keeps running across the quiet field today"


def _texts(blocks):
    return [getattr(block, "text", None) for block in blocks]


@pytest.mark.unit
class TestSectionsAndParagraphs:
    def test_heading_followed_by_plain_lines(self):
        page = make_page(
            [
                make_line("Introduction", 50, 50, size=24),
                make_line("First line of text.", 50, 100),
                make_line("Second line of text.", 50, 120),
                make_line("Third line of text.", 50, 140),
            ]
        )
        skeleton = parse_pages([page], source_id="doc")

        assert skeleton.source_id == "doc"
        assert [s.heading for s in skeleton.sections] == ["Document", "Introduction"]
        intro = skeleton.sections[1]
        assert intro.level == 1
        assert all(isinstance(b, Paragraph) for b in intro.blocks)
        assert _texts(intro.blocks) == ["First line of text.", "Second line of text.", "Third line of text."]
        assert [b.block_id for b in intro.blocks] == ["p_1_1", "p_1_2", "p_1_3"]

    def test_default_section_exists_without_headings(self):
        skeleton = parse_pages([make_page()])
        assert len(skeleton.sections) == 1
        assert skeleton.sections[0].heading == "Document"
        assert skeleton.sections[0].level == 1
        assert skeleton.sections[0].blocks == ()

    def test_empty_document(self):
        skeleton = parse_pages([])
        assert [s.heading for s in skeleton.sections] == ["Document"]
        assert skeleton.metadata["page_count"] == 0

    def test_heading_levels(self):
        page = make_page(
            [
                make_line("Chapter", 50, 50, size=20),
                make_line("Part", 50, 100, size=15),
                make_line("Detail", 50, 150, size=13),
                make_line("body", 50, 200, size=10),
                make_line("body", 50, 220, size=10),
            ]
        )
        skeleton = parse_pages([page], body_font_size=10.0)
        assert [(s.heading, s.level) for s in skeleton.sections[1:]] == [("Chapter", 1), ("Part", 2), ("Detail", 3)]

    def test_section_spans_pages(self):
        pages = [
            make_page([make_line("Methods", 50, 50, size=24), make_line("on page one", 50, 100)]),
            make_page([make_line("on page two", 50, 100), make_line("more", 50, 120)]),
        ]
        skeleton = parse_pages(pages)
        methods = skeleton.sections[1]
        assert _texts(methods.blocks) == ["on page one", "on page two", "more"]
        assert [b.page for b in methods.blocks] == [1, 2, 2]

    def test_merge_paragraph_lines(self):
        page = make_page([make_line("one", 50, 100), make_line("two", 50, 120), make_line("three", 50, 140)])
        skeleton = parse_pages([page], merge_paragraph_lines=True)
        assert _texts(skeleton.blocks) == ["one two three"]

    def test_merged_paragraph_does_not_cross_pages(self):
        pages = [make_page([make_line("end of one", 50, 700)]), make_page([make_line("start of two", 50, 50)])]
        skeleton = parse_pages(pages, merge_paragraph_lines=True)
        assert _texts(skeleton.blocks) == ["end of one", "start of two"]

    def test_long_paragraph_soft_split(self):
        words = [f"w{i}" for i in range(23)]
        page = make_page([make_line(" ".join(words), 50, 100, width=400)])
        skeleton = parse_pages([page], max_words_per_paragraph=10)
        chunks = _texts(skeleton.blocks)
        assert [len(c.split()) for c in chunks] == [10, 10, 3]
        assert " ".join(chunks).split() == words

    def test_lines_sorted_into_reading_order(self):
        page = make_page([make_line("second", 50, 200), make_line("first", 50, 100)])
        assert _texts(parse_pages([page]).blocks) == ["first", "second"]

    def test_blank_lines_skipped(self):
        page = make_page([make_line("1. one", 50, 100), make_line("   ", 50, 120), make_line("2. two", 50, 140)])
        blocks = parse_pages([page]).blocks
        assert all(isinstance(b, NumberedListItem) for b in blocks)
        assert _texts(blocks) == ["one", "two"]


@pytest.mark.unit
class TestLists:
    def test_numbered_list_then_paragraph(self):
        page = make_page(
            [
                make_line("1. First item", 50, 100),
                make_line("2. Second item", 50, 120),
                make_line("A closing remark.", 50, 140),
            ]
        )
        blocks = parse_pages([page]).blocks
        assert [type(b) for b in blocks] == [NumberedListItem, NumberedListItem, Paragraph]
        assert _texts(blocks) == ["First item", "Second item", "A closing remark."]
        assert [b.block_id for b in blocks] == ["list_1_1", "list_1_2", "p_1_1"]

    def test_list_type_change(self):
        page = make_page(
            [
                make_line("• apples", 50, 100),
                make_line("• pears", 50, 120),
                make_line("1. step one", 50, 140),
            ]
        )
        blocks = parse_pages([page]).blocks
        assert [type(b) for b in blocks] == [BulletListItem, BulletListItem, NumberedListItem]

    def test_paragraph_then_list(self):
        page = make_page(
            [make_line("Ingredients:", 50, 100), make_line("- flour", 50, 120), make_line("- water", 50, 140)]
        )
        skeleton = parse_pages([page], merge_paragraph_lines=True)
        assert [type(b) for b in skeleton.blocks] == [Paragraph, BulletListItem, BulletListItem]

    def test_heading_ends_list(self):
        page = make_page(
            [make_line("- a", 50, 100), make_line("Next Part", 50, 130, size=24), make_line("- b", 50, 170)]
        )
        skeleton = parse_pages([page])
        assert _texts(skeleton.sections[0].blocks) == ["a"]
        assert _texts(skeleton.sections[1].blocks) == ["b"]


@pytest.mark.unit
class TestTablesInFlow:
    def test_table_replaces_its_lines(self):
        lines = [make_line("Before the table.", 50, 60, size=10)]
        lines += grid_lines([["Name", "Age"], ["Alice", "30"]], xs=[50, 200], top=100)
        lines += [make_line("After the table.", 50, 200, size=10)]
        skeleton = parse_pages([make_page(lines)], table_column_tolerance=5.0)

        blocks = skeleton.blocks
        assert [type(b) for b in blocks] == [Paragraph, Table, Paragraph]
        table = blocks[1]
        assert table.block_id == "t_1_1"
        assert table.table.rows == (("Name", "Age"), ("Alice", "30"))
        assert table.table.caption is None
        assert skeleton.metadata["table_count"] == 1

    def test_caption_attached_to_nearest_table(self):
        lines = [make_line("Table 1: Staff", 50, 80, size=10)]
        lines += grid_lines([["Name", "Age"], ["Alice", "30"]], xs=[50, 200], top=100)
        lines += [make_line("Some text between tables.", 50, 180, size=10)]
        lines += grid_lines([["City", "Pop"], ["Oslo", "700k"]], xs=[50, 200], top=260)
        lines += [make_line("Table 2: Cities", 50, 310, size=10)]
        blocks = parse_pages([make_page(lines)]).blocks

        tables = [b for b in blocks if isinstance(b, Table)]
        assert [t.table.caption for t in tables] == ["Table 1: Staff", "Table 2: Cities"]
        assert _texts([b for b in blocks if isinstance(b, Paragraph)]) == ["Some text between tables."]

    def test_caption_without_table_is_paragraph(self):
        page = make_page([make_line("Figure 2. A chart", 50, 100, size=10)])
        blocks = parse_pages([page]).blocks
        assert isinstance(blocks[0], Paragraph)
        assert blocks[0].text == "Figure 2. A chart"

    def test_second_caption_for_single_table_is_paragraph(self):
        lines = [make_line("Table 1: Staff", 50, 80, size=10)]
        lines += grid_lines([["Name", "Age"], ["Alice", "30"]], xs=[50, 200], top=100)
        lines += [make_line("Figure 9: unrelated", 50, 300, size=10)]
        blocks = parse_pages([make_page(lines)]).blocks
        assert blocks[0].table.caption == "Table 1: Staff"
        assert blocks[1].text == "Figure 9: unrelated"

    def test_table_flushes_open_list(self):
        lines = [make_line("- item", 50, 60, size=10)]
        lines += grid_lines([["a1", "b1"], ["a2", "b2"]], xs=[50, 200], top=100)
        blocks = parse_pages([make_page(lines)]).blocks
        assert [type(b) for b in blocks] == [BulletListItem, Table]

    def test_table_ids_are_document_wide(self):
        grid = grid_lines([["a1", "b1"], ["a2", "b2"]], xs=[50, 200], top=100)
        skeleton = parse_pages([make_page(grid), make_page(grid)])
        assert [b.block_id for b in skeleton.blocks] == ["t_1_1", "t_2_2"]

    def test_detection_disabled(self):
        grid = grid_lines([["a1", "b1"], ["a2", "b2"]], xs=[50, 200], top=100)
        skeleton = parse_pages([make_page(grid)], detect_tables=False)
        assert all(isinstance(b, Paragraph) for b in skeleton.blocks)
        assert len(skeleton.blocks) == 4


@pytest.mark.unit
class TestImagesInFlow:
    def test_large_texty_image_carries_text(self):
        # No text on the page: the area ratio is taken against 612 x 792
        region = make_image(0, 0, 306, 792 * 0.9)
        skeleton = parse_pages([make_page(images=[region])], ocr_engine=StaticOcr(TEXT_120))
        blocks = skeleton.blocks
        assert len(blocks) == 1
        image = blocks[0]
        assert isinstance(image, Image)
        assert image.image_id == "p1_img1"
        assert image.block_id == "img_1_p1_img1"
        assert image.text == TEXT_120
        assert image.data == region.data

    def test_medium_texty_image_gets_linked_paragraph(self):
        region = make_image(0, 0, 306, 316.8)
        skeleton = parse_pages([make_page(images=[region])], ocr_engine=StaticOcr(TEXT_90))
        image, paragraph = skeleton.blocks
        assert isinstance(image, Image)
        assert image.text is None
        assert isinstance(paragraph, Paragraph)
        assert paragraph.text == TEXT_90
        assert paragraph.image_id == image.image_id
        assert paragraph.page == image.page == 1
        assert paragraph.block_id == "p_ocr_1_1"

    def test_callable_ocr_engine(self):
        region = make_image(0, 0, 306, 316.8)
        skeleton = parse_pages([make_page(images=[region])], ocr_engine=lambda data: TEXT_90)
        assert skeleton.blocks[1].text == TEXT_90

    def test_without_ocr_images_are_plain(self):
        region = make_image(0, 0, 500, 700)
        skeleton = parse_pages([make_page(images=[region])])
        assert len(skeleton.blocks) == 1
        assert skeleton.blocks[0].text is None

    def test_ocr_failure_does_not_abort(self, caplog):
        region = make_image(0, 0, 306, 316.8)
        with caplog.at_level(logging.WARNING):
            skeleton = parse_pages([make_page(images=[region])], ocr_engine=FailingOcr())
        assert [type(b) for b in skeleton.blocks] == [Image]
        assert "OCR failed" in caplog.text

    def test_images_interleaved_by_position(self):
        page = make_page(
            [make_line("above", 50, 100), make_line("below", 50, 400)],
            [make_image(50, 600, 150, 650), make_image(50, 200, 150, 300)],
        )
        skeleton = parse_pages([page])
        assert [type(b) for b in skeleton.blocks] == [Paragraph, Image, Paragraph, Image]
        assert [b.image_id for b in skeleton.blocks if isinstance(b, Image)] == ["p1_img1", "p1_img2"]
        assert skeleton.metadata["image_count"] == 2

    def test_image_flushes_merged_paragraph(self):
        page = make_page(
            [make_line("one", 50, 100), make_line("two", 50, 120), make_line("three", 50, 400)],
            [make_image(50, 200, 150, 300)],
        )
        skeleton = parse_pages([page], merge_paragraph_lines=True)
        assert _texts(skeleton.blocks) == ["one two", None, "three"]

    def test_extract_images_disabled(self):
        page = make_page([make_line("text", 50, 100)], [make_image(50, 200, 150, 300)])
        skeleton = parse_pages([page], extract_images=False)
        assert [type(b) for b in skeleton.blocks] == [Paragraph]
        assert skeleton.metadata["image_count"] == 0

    def test_enabled_ocr_options_ignored_when_engine_injected(self):
        region = make_image(0, 0, 306, 316.8)
        options = SkeletonOptions(ocr=OCROptions(enabled=True))
        ocr = StaticOcr(TEXT_90)
        skeleton = parse_pages([make_page(images=[region])], options=options, ocr_engine=ocr)
        assert len(ocr.calls) == 1
        assert len(skeleton.blocks) == 2


@pytest.mark.unit
class TestPages:
    def test_page_breaks_between_pages(self):
        pages = [make_page([make_line("one", 50, 100)]), make_page([make_line("two", 50, 100)])]
        skeleton = parse_pages(pages, emit_page_breaks=True)
        assert [type(b) for b in skeleton.blocks] == [Paragraph, PageBreak, Paragraph]
        assert skeleton.blocks[1].block_id == "pb_1"
        assert skeleton.blocks[1].page == 1

    def test_no_page_breaks_by_default(self):
        pages = [make_page([make_line("one", 50, 100)]), make_page([make_line("two", 50, 100)])]
        assert not any(isinstance(b, PageBreak) for b in parse_pages(pages).blocks)

    def test_failed_page_is_skipped(self, tracker, caplog):
        provider = RecordingProvider(
            [make_page([make_line("one", 50, 100)]), make_page([make_line("two", 50, 100)]),
             make_page([make_line("three", 50, 100)])],
            failing_pages=[1],
        )
        parser = PdfSkeletonParser(progress_callback=tracker.callback)
        with caplog.at_level(logging.WARNING):
            skeleton = parser.parse_provider(provider, source_id="partial")

        assert _texts(skeleton.blocks) == ["one", "three"]
        assert skeleton.metadata["failed_pages"] == (2,)
        assert "Skipping page 2" in caplog.text
        errors = tracker.get_events_by_type("error")
        assert len(errors) == 1
        assert errors[0].metadata["page"] == 2
        assert provider.closed

    def test_pages_released_after_processing(self):
        provider = RecordingProvider([make_page([make_line("one", 50, 100)]), make_page()])
        PdfSkeletonParser().parse_provider(provider)
        # Once for the font pass, once for assembly
        assert provider.released == [0, 1, 0, 1]
        assert provider.closed

    def test_metadata(self):
        pages = [make_page([make_line("body", 50, 100, size=11), make_line("Title", 50, 50, size=22)])]
        skeleton = parse_pages(pages)
        assert skeleton.metadata["page_count"] == 1
        assert skeleton.metadata["body_font_size"] == 16.5
        assert skeleton.metadata["failed_pages"] == ()
        assert skeleton.metadata["table_count"] == 0


@pytest.mark.unit
class TestCancellation:
    def test_cancel_before_first_page(self):
        provider = RecordingProvider([make_page([make_line("one", 50, 100)])])
        parser = PdfSkeletonParser(cancel_check=lambda: True)
        with pytest.raises(ParsingCancelledError) as exc_info:
            parser.parse_provider(provider)
        assert exc_info.value.page_num == 1
        assert provider.closed

    def test_cancel_during_assembly(self):
        calls = []

        def cancel_check():
            calls.append(1)
            # Two font-pass checks, then stop before assembling page 2
            return len(calls) > 3

        provider = RecordingProvider([make_page([make_line("one", 50, 100)]), make_page([make_line("two", 50, 100)])])
        with pytest.raises(ParsingCancelledError) as exc_info:
            PdfSkeletonParser(cancel_check=cancel_check).parse_provider(provider)
        assert exc_info.value.page_num == 2
        assert provider.closed


@pytest.mark.unit
class TestParserConstruction:
    def test_wrong_options_type(self):
        with pytest.raises(InvalidOptionsError):
            PdfSkeletonParser(OCROptions())

    def test_invalid_ocr_engine(self):
        provider = RecordingProvider([make_page()])
        with pytest.raises(TypeError):
            PdfSkeletonParser(ocr_engine=42).parse_provider(provider)
        assert provider.closed


@pytest.mark.unit
def test_parsing_is_idempotent():
    lines = [make_line("Results", 50, 40, size=24), make_line("1. first", 50, 80)]
    lines += grid_lines([["Name", "Age"], ["Alice", "30"]], xs=[50, 200], top=100)
    pages = [make_page(lines, [make_image(0, 300, 300, 500)]), make_page([make_line("tail", 50, 100)])]
    ocr = StaticOcr(TEXT_90)
    first = parse_pages(pages, ocr_engine=ocr, emit_page_breaks=True)
    second = parse_pages(pages, ocr_engine=ocr, emit_page_breaks=True)
    assert first == second
    ids = [b.block_id for b in first.blocks]
    assert len(ids) == len(set(ids))


@pytest.mark.unit
@given(st.lists(st.sampled_from([10.0, 12.5, 13.0, 14.0, 16.0, 18.0, 24.0, 30.0]), min_size=1, max_size=12))
def test_heading_levels_follow_size_ratio(sizes):
    lines = [make_line(f"H{i}", 50, 40 + 40 * i, size=size) for i, size in enumerate(sizes)]
    skeleton = parse_pages([make_page(lines)], body_font_size=10.0)
    size_of = {f"H{i}": size for i, size in enumerate(sizes)}

    headings = [s for s in skeleton.sections[1:]]
    assert [s.heading for s in headings] == [f"H{i}" for i, size in enumerate(sizes) if size >= 12.5]
    for a in headings:
        for b in headings:
            if a.level < b.level:
                assert size_of[a.heading] >= size_of[b.heading]


@pytest.mark.unit
@given(
    st.lists(st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=7), min_size=1, max_size=80),
    st.integers(min_value=1, max_value=15),
)
def test_soft_split_paragraphs_preserve_words(words, max_words):
    page = make_page([make_line(" ".join(words), 50, 100, width=500)])
    skeleton = parse_pages([page], max_words_per_paragraph=max_words)
    paragraphs = [b for b in skeleton.blocks if isinstance(b, Paragraph)]
    assert " ".join(p.text for p in paragraphs).split() == words
    assert all(len(p.text.split()) <= max_words for p in paragraphs)
