"""Utilities for uniform input handling.

The public entry points accept a PDF as raw bytes, a filesystem path or a
binary file-like object. This module normalizes all of them to bytes so the
page provider never has to care where the document came from.
"""

#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/utils/inputs.py
import os
from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO, Union

from pdfskeleton.exceptions import DocumentLoadError, ValidationError

PathLike = Union[str, Path]
InputType = Union[PathLike, BinaryIO, BytesIO, bytes, bytearray, memoryview]


def is_path_like(obj: Any) -> bool:
    """Check if an object is path-like (string or pathlib.Path).

    Examples
    --------
    >>> is_path_like("document.pdf")
    True
    >>> is_path_like(BytesIO(b"data"))
    False

    """
    return isinstance(obj, (str, Path))


def is_file_like(obj: Any) -> bool:
    """Check if an object is file-like (has a callable ``read``)."""
    return hasattr(obj, "read") and callable(obj.read)


def read_document_bytes(input_data: InputType, source_id: str | None = None) -> bytes:
    """Read a document from any supported input into memory.

    Parameters
    ----------
    input_data : str, Path, bytes, bytearray, memoryview or binary file-like
        The document to read
    source_id : str, optional
        Identifier used in error messages

    Returns
    -------
    bytes
        Raw document bytes

    Raises
    ------
    ValidationError
        If the input type is not supported or a file-like object yields text
    DocumentLoadError
        If a path does not exist, is not a file, or cannot be read

    """
    if isinstance(input_data, bytes):
        return input_data

    if isinstance(input_data, (bytearray, memoryview)):
        return bytes(input_data)

    if is_path_like(input_data):
        path_str = os.fspath(input_data)
        if not os.path.exists(path_str):
            raise DocumentLoadError(f"File not found: {path_str}", source_id=source_id or path_str)
        if not os.path.isfile(path_str):
            raise DocumentLoadError(f"Path is not a file: {path_str}", source_id=source_id or path_str)
        try:
            with open(path_str, "rb") as f:
                return f.read()
        except OSError as e:
            raise DocumentLoadError(
                f"Could not read {path_str}: {e}", source_id=source_id or path_str, original_error=e
            ) from e

    if is_file_like(input_data):
        if hasattr(input_data, "mode") and "b" not in str(input_data.mode):
            raise ValidationError(
                f"File must be opened in binary mode, got mode: {input_data.mode}",
                parameter_name="input_data",
                parameter_value=input_data,
            )
        data = input_data.read()
        if isinstance(data, str):
            raise ValidationError(
                "File-like input returned text; open the file in binary mode",
                parameter_name="input_data",
                parameter_value=input_data,
            )
        return bytes(data)

    raise ValidationError(
        f"Unsupported input type: {type(input_data).__name__}. Supported types: path-like, file-like, bytes",
        parameter_name="input_data",
        parameter_value=input_data,
    )
