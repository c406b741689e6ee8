#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for document input normalization."""

from io import BytesIO, StringIO
from pathlib import Path

import pytest

from pdfskeleton.exceptions import DocumentLoadError, ValidationError
from pdfskeleton.utils.inputs import is_file_like, is_path_like, read_document_bytes


@pytest.mark.unit
class TestReadDocumentBytes:
    def test_bytes(self):
        assert read_document_bytes(b"%PDF-1.7") == b"%PDF-1.7"

    @pytest.mark.parametrize("data", [bytearray(b"%PDF"), memoryview(b"%PDF")])
    def test_bytes_like(self, data):
        assert read_document_bytes(data) == b"%PDF"

    def test_path_and_string_path(self, tmp_path: Path):
        pdf = tmp_path / "doc.pdf"
        pdf.write_bytes(b"%PDF-data")
        assert read_document_bytes(pdf) == b"%PDF-data"
        assert read_document_bytes(str(pdf)) == b"%PDF-data"

    def test_missing_path(self, tmp_path: Path):
        with pytest.raises(DocumentLoadError, match="File not found"):
            read_document_bytes(tmp_path / "missing.pdf")

    def test_directory(self, tmp_path: Path):
        with pytest.raises(DocumentLoadError, match="not a file"):
            read_document_bytes(tmp_path)

    def test_binary_stream(self):
        assert read_document_bytes(BytesIO(b"%PDF-stream")) == b"%PDF-stream"

    def test_binary_file_handle(self, tmp_path: Path):
        pdf = tmp_path / "doc.pdf"
        pdf.write_bytes(b"%PDF-handle")
        with open(pdf, "rb") as f:
            assert read_document_bytes(f) == b"%PDF-handle"

    def test_text_file_handle_rejected(self, tmp_path: Path):
        txt = tmp_path / "doc.txt"
        txt.write_text("hello")
        with open(txt, "r") as f:
            with pytest.raises(ValidationError, match="binary mode"):
                read_document_bytes(f)

    def test_text_stream_rejected(self):
        with pytest.raises(ValidationError):
            read_document_bytes(StringIO("text"))

    def test_unsupported_type(self):
        with pytest.raises(ValidationError, match="Unsupported input type"):
            read_document_bytes(42)  # type: ignore[arg-type]


@pytest.mark.unit
def test_type_predicates():
    assert is_path_like("a.pdf")
    assert is_path_like(Path("a.pdf"))
    assert not is_path_like(b"a.pdf")
    assert is_file_like(BytesIO())
    assert not is_file_like("a.pdf")
