#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/api.py
"""Public entry points for building document skeletons.

Two functions are exposed:

- :func:`parse_pdf` parses PDF bytes, paths or binary streams with the
  PyMuPDF backend.
- :func:`parse_pages` assembles a skeleton from pages whose geometry was
  already produced by an external rendering or OCR layer.

Both accept a :class:`~pdfskeleton.options.SkeletonOptions` instance and/or
individual option keyword arguments; keyword arguments override the fields of
the options object. Keyword arguments naming fields of the nested
:class:`~pdfskeleton.options.OCROptions` (``enabled``, ``languages``, ...)
are routed to ``options.ocr``.

"""

from __future__ import annotations

import logging
from dataclasses import fields
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from pdfskeleton.ast.nodes import DocumentSkeleton
from pdfskeleton.exceptions import ValidationError
from pdfskeleton.options import OCROptions, SkeletonOptions
from pdfskeleton.parsers._pdf_ocr import OcrCallable, OcrEngine
from pdfskeleton.parsers._pdf_provider import InMemoryPageProvider, PageContent
from pdfskeleton.parsers.pdf import CancelCheck, PdfSkeletonParser, ProviderFactory
from pdfskeleton.progress import ProgressCallback
from pdfskeleton.utils.inputs import InputType, is_path_like

logger = logging.getLogger(__name__)

# Nested dataclass fields of SkeletonOptions and their option classes
_NESTED_OPTIONS: dict[str, type] = {"ocr": OCROptions}


def _collect_nested_kwargs(kwargs: dict[str, Any]) -> tuple[dict[str, dict[str, Any]], dict[str, Any]]:
    """Split kwargs into nested dataclass kwargs and remaining top-level kwargs.

    Top-level field names win over nested ones with the same name.

    Examples
    --------
    >>> _collect_nested_kwargs({"enabled": True, "detect_tables": False})
    ({'ocr': {'enabled': True}}, {'detect_tables': False})

    """
    top_level = {f.name for f in fields(SkeletonOptions)}
    nested: dict[str, dict[str, Any]] = {}
    remaining: dict[str, Any] = {}

    for key, value in kwargs.items():
        if key in top_level:
            remaining[key] = value
            continue
        for field_name, nested_class in _NESTED_OPTIONS.items():
            if key in {f.name for f in fields(nested_class)}:
                nested.setdefault(field_name, {})[key] = value
                break
        else:
            remaining[key] = value

    return nested, remaining


def _create_options_from_kwargs(options: Optional[SkeletonOptions], **kwargs: Any) -> SkeletonOptions:
    """Build or update skeleton options from keyword arguments.

    Parameters
    ----------
    options : SkeletonOptions or None
        Base options; defaults are used when None
    **kwargs
        Option overrides. Unknown names are logged and skipped.

    Returns
    -------
    SkeletonOptions
        The resulting options instance

    Raises
    ------
    ValidationError
        If an override produces an invalid configuration

    """
    base = options or SkeletonOptions()
    if not kwargs:
        return base

    nested, flat = _collect_nested_kwargs(kwargs)

    option_names = {f.name for f in fields(SkeletonOptions)}
    valid_kwargs = {k: v for k, v in flat.items() if k in option_names}
    missing = [k for k in flat if k not in valid_kwargs]
    if missing:
        logger.debug(f"Skipping unknown skeleton options: {missing}")

    try:
        for field_name, nested_kwargs in nested.items():
            current = valid_kwargs.get(field_name, getattr(base, field_name))
            valid_kwargs[field_name] = current.create_updated(**nested_kwargs)
        return base.create_updated(**valid_kwargs)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid skeleton options: {e}", original_error=e) from e


def _default_source_id(source: InputType) -> str:
    if is_path_like(source):
        return Path(source).name  # type: ignore[arg-type]
    name = getattr(source, "name", None)
    if isinstance(name, str) and name:
        return Path(name).name
    return "pdf"


def parse_pdf(
    source: InputType,
    *,
    source_id: Optional[str] = None,
    options: Optional[SkeletonOptions] = None,
    ocr_engine: Union[OcrEngine, OcrCallable, None] = None,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_check: Optional[CancelCheck] = None,
    provider_factory: Optional[ProviderFactory] = None,
    **kwargs: Any,
) -> DocumentSkeleton:
    """Parse a PDF document into a skeleton.

    Parameters
    ----------
    source : str, Path, IO[bytes], or bytes
        The PDF as a path, a binary stream or raw bytes
    source_id : str, optional
        Identifier stored on the skeleton. Defaults to the file name for path
        and named stream inputs, otherwise ``"pdf"``.
    options : SkeletonOptions, optional
        Pre-configured options
    ocr_engine : OcrEngine or callable, optional
        OCR capability for image regions
    progress_callback : ProgressCallback, optional
        Receives ProgressEvent objects while pages are processed
    cancel_check : callable, optional
        Polled between pages; returning True aborts the parse
    provider_factory : callable, optional
        Replacement for the PyMuPDF page provider
    kwargs : Any
        Individual option overrides, e.g. ``detect_tables=False`` or
        ``languages="eng+deu"`` for the OCR options

    Returns
    -------
    DocumentSkeleton
        The parsed skeleton

    Raises
    ------
    DocumentLoadError
        If the input cannot be read or opened as a PDF
    PasswordProtectedError
        If the PDF is encrypted and no valid password was given
    DependencyError
        If PyMuPDF, or the OCR extras when OCR is enabled, are unavailable
    ValidationError
        If the input type or an option override is invalid
    ParsingCancelledError
        If ``cancel_check`` requested a stop

    Examples
    --------
    >>> skeleton = parse_pdf("report.pdf", emit_page_breaks=True)
    >>> [section.heading for section in skeleton.sections]
    ['Document', 'Introduction', 'Results']

    """
    final_options = _create_options_from_kwargs(options, **kwargs)
    parser = PdfSkeletonParser(
        final_options,
        progress_callback=progress_callback,
        ocr_engine=ocr_engine,
        provider_factory=provider_factory,
        cancel_check=cancel_check,
    )
    return parser.parse(source, source_id=source_id or _default_source_id(source))


def parse_pages(
    pages: Sequence[PageContent],
    *,
    source_id: str = "pages",
    options: Optional[SkeletonOptions] = None,
    ocr_engine: Union[OcrEngine, OcrCallable, None] = None,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_check: Optional[CancelCheck] = None,
    **kwargs: Any,
) -> DocumentSkeleton:
    """Assemble a skeleton from pre-extracted page content.

    Parameters
    ----------
    pages : sequence of PageContent
        Lines and image regions for each page, in page order
    source_id : str, default "pages"
        Identifier stored on the skeleton
    options, ocr_engine, progress_callback, cancel_check, kwargs
        As for :func:`parse_pdf`

    Returns
    -------
    DocumentSkeleton
        The assembled skeleton

    """
    final_options = _create_options_from_kwargs(options, **kwargs)
    parser = PdfSkeletonParser(
        final_options,
        progress_callback=progress_callback,
        ocr_engine=ocr_engine,
        cancel_check=cancel_check,
    )
    return parser.parse_provider(InMemoryPageProvider(pages), source_id=source_id)
