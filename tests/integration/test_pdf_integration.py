#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Integration tests running real PDFs through the PyMuPDF provider."""

import pytest

pytest.importorskip("fitz")

from fixtures.generators.pdf_fixtures import (  # noqa: E402
    TABLE_ROWS,
    USER_PASSWORD,
    create_encrypted_pdf,
    create_multipage_pdf,
    create_pdf_with_heading,
    create_pdf_with_image,
    create_pdf_with_numbered_list,
    create_pdf_with_table,
)

from pdfskeleton import parse_pdf  # noqa: E402
from pdfskeleton.ast import Image, NumberedListItem, PageBreak, Paragraph, Table  # noqa: E402
from pdfskeleton.exceptions import DocumentLoadError, PasswordProtectedError  # noqa: E402
from pdfskeleton.parsers import PyMuPdfPageProvider  # noqa: E402
from pdfskeleton.options import SkeletonOptions  # noqa: E402


@pytest.mark.integration
class TestPdfStructure:
    def test_heading_and_body(self):
        skeleton = parse_pdf(create_pdf_with_heading(), source_id="report.pdf")

        assert skeleton.source_id == "report.pdf"
        assert [s.heading for s in skeleton.sections] == ["Document", "Introduction"]
        intro = skeleton.sections[1]
        assert intro.level == 1
        assert [b.text for b in intro.blocks] == [
            "This report describes the quarterly results",
            "for every region we operate in",
            "and the outlook for next year",
        ]
        assert skeleton.metadata["page_count"] == 1
        assert skeleton.metadata["failed_pages"] == ()

    def test_merged_paragraph(self):
        skeleton = parse_pdf(create_pdf_with_heading(), merge_paragraph_lines=True)
        blocks = skeleton.sections[1].blocks
        assert len(blocks) == 1
        assert blocks[0].text.startswith("This report describes")
        assert blocks[0].text.endswith("outlook for next year")

    def test_numbered_list(self):
        skeleton = parse_pdf(create_pdf_with_numbered_list())
        blocks = skeleton.sections[0].blocks

        assert isinstance(blocks[0], Paragraph)
        assert blocks[0].text == "Steps to follow"
        items = blocks[1:]
        assert all(isinstance(b, NumberedListItem) for b in items)
        assert [b.text for b in items] == ["Open the valve", "Check the gauge", "Close the valve"]

    def test_table_from_words(self):
        skeleton = parse_pdf(create_pdf_with_table(), table_fragment_source="words")
        tables = [b for b in skeleton.blocks if isinstance(b, Table)]

        assert len(tables) == 1
        assert tables[0].table.rows == tuple(tuple(row) for row in TABLE_ROWS)
        assert skeleton.metadata["table_count"] == 1
        paragraphs = [b.text for b in skeleton.blocks if isinstance(b, Paragraph)]
        assert paragraphs == ["Staff directory"]

    def test_table_detection_disabled(self):
        skeleton = parse_pdf(create_pdf_with_table(), detect_tables=False)
        assert not any(isinstance(b, Table) for b in skeleton.blocks)

    def test_image_region(self):
        skeleton = parse_pdf(create_pdf_with_image())
        blocks = skeleton.sections[0].blocks

        images = [b for b in blocks if isinstance(b, Image)]
        assert len(images) == 1
        image = images[0]
        assert image.image_id == "p1_img1"
        assert image.data.startswith(b"\xff\xd8")
        assert image.text is None
        assert [type(b) for b in blocks] == [Paragraph, Image, Paragraph]
        assert skeleton.metadata["image_count"] == 1

    def test_images_disabled(self):
        skeleton = parse_pdf(create_pdf_with_image(), extract_images=False)
        assert not any(isinstance(b, Image) for b in skeleton.blocks)

    def test_ocr_engine_on_real_image(self):
        calls = []

        def ocr(image_bytes: bytes):
            calls.append(image_bytes)
            return "Scanned text " * 10

        skeleton = parse_pdf(create_pdf_with_image(), ocr_engine=ocr)
        image = next(b for b in skeleton.blocks if isinstance(b, Image))
        assert len(calls) == 1
        assert calls[0] == image.data
        assert image.text == ("Scanned text " * 10).strip()

    def test_page_breaks(self):
        skeleton = parse_pdf(create_multipage_pdf(["first page", "second page", "third page"]), emit_page_breaks=True)
        blocks = skeleton.sections[0].blocks

        assert [b.block_id for b in blocks if isinstance(b, PageBreak)] == ["pb_1", "pb_2"]
        assert [b.page for b in blocks if isinstance(b, Paragraph)] == [1, 2, 3]


@pytest.mark.integration
class TestPdfLoading:
    def test_password_required(self):
        with pytest.raises(PasswordProtectedError):
            parse_pdf(create_encrypted_pdf())

    def test_wrong_password(self):
        with pytest.raises(PasswordProtectedError, match="authenticate"):
            parse_pdf(create_encrypted_pdf(), password="wrong")

    def test_correct_password(self):
        skeleton = parse_pdf(create_encrypted_pdf(), password=USER_PASSWORD)
        assert [s.heading for s in skeleton.sections] == ["Document", "Introduction"]

    def test_corrupt_bytes(self):
        with pytest.raises(DocumentLoadError):
            parse_pdf(b"this is not a pdf document at all")

    def test_path_input(self, tmp_path):
        pdf = tmp_path / "heading.pdf"
        pdf.write_bytes(create_pdf_with_heading())
        skeleton = parse_pdf(pdf)
        assert skeleton.source_id == "heading.pdf"

    def test_provider_lines_and_words(self):
        provider = PyMuPdfPageProvider(create_pdf_with_table(), SkeletonOptions())
        with provider:
            assert provider.page_count == 1
            lines = provider.get_lines(0)
            words = [w.text for line in lines for w in line.words]
            provider.release_page(0)
        assert "Staff directory" in [line.text for line in lines]
        assert {"Name", "Alice", "Rome"} <= set(words)


@pytest.mark.integration
def test_parsing_is_idempotent():
    data = create_pdf_with_table()
    assert parse_pdf(data, table_fragment_source="words") == parse_pdf(data, table_fragment_source="words")
