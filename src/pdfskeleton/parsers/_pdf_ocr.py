#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/parsers/_pdf_ocr.py
"""OCR capability for image regions.

This private module defines the OCR contract consumed by the image processor
and the built-in Tesseract implementation. Callers can inject any object with
a ``recognize(image_bytes)`` method, or a plain callable with the same
signature.

"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Callable, Optional, Protocol, Union, runtime_checkable

from pdfskeleton.constants import DEPS_PDF_OCR
from pdfskeleton.options.common import OCROptions
from pdfskeleton.utils.decorators import requires_dependencies

__all__ = ["OcrEngine", "OcrCallable", "TesseractOcrEngine", "resolve_ocr_engine"]

logger = logging.getLogger(__name__)


@runtime_checkable
class OcrEngine(Protocol):
    """Anything that can turn image bytes into text.

    ``recognize`` returns the recognized text, or None / an empty string when
    nothing was recognized. It may raise; the image processor treats any
    exception as "no usable text".
    """

    def recognize(self, image_bytes: bytes) -> Optional[str]: ...


OcrCallable = Callable[[bytes], Optional[str]]


class _CallableOcrEngine:
    """Adapt a plain function to the OcrEngine protocol."""

    def __init__(self, func: OcrCallable):
        self._func = func

    def recognize(self, image_bytes: bytes) -> Optional[str]:
        return self._func(image_bytes)


class TesseractOcrEngine:
    """OCR engine backed by pytesseract and Pillow.

    Parameters
    ----------
    options : OCROptions, optional
        Languages, custom config flags and timeout

    Raises
    ------
    DependencyError
        If pytesseract or Pillow are not installed

    Notes
    -----
    The Tesseract binary itself must be installed on the system. When it is
    missing, ``recognize`` raises ``pytesseract.TesseractNotFoundError``,
    which the image processor logs once per image and treats as no text.

    """

    @requires_dependencies("ocr", DEPS_PDF_OCR)
    def __init__(self, options: OCROptions | None = None):
        self.options = options or OCROptions()

    def recognize(self, image_bytes: bytes) -> Optional[str]:
        import pytesseract
        from PIL import Image

        with Image.open(BytesIO(image_bytes)) as img:
            text = pytesseract.image_to_string(
                img,
                lang=self.options.language_string,
                config=self.options.tesseract_config,
                timeout=self.options.timeout,
            )

        logger.debug(f"OCR extracted {len(text)} characters using language '{self.options.language_string}'")
        return text


def resolve_ocr_engine(
    engine: Union[OcrEngine, OcrCallable, None], options: OCROptions
) -> Optional[OcrEngine]:
    """Pick the OCR engine for a parse.

    Parameters
    ----------
    engine : OcrEngine, callable or None
        Injected engine; wins over the options when given
    options : OCROptions
        Used to build a :class:`TesseractOcrEngine` when no engine is injected
        and ``options.enabled`` is set

    Returns
    -------
    OcrEngine or None
        None means OCR is unavailable and images are never OCR'd

    """
    if engine is not None:
        if isinstance(engine, OcrEngine):
            return engine
        if callable(engine):
            return _CallableOcrEngine(engine)
        raise TypeError(f"ocr_engine must have a recognize() method or be callable, got {type(engine).__name__}")

    if options.enabled:
        return TesseractOcrEngine(options)
    return None
