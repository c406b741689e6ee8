#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/options/common.py
"""Shared option classes used by the skeleton parser."""

from __future__ import annotations

from dataclasses import dataclass, field

from pdfskeleton.constants import (
    DEFAULT_OCR_ENABLED,
    DEFAULT_OCR_LANGUAGES,
    DEFAULT_OCR_TESSERACT_CONFIG,
    DEFAULT_OCR_TIMEOUT,
)
from pdfskeleton.options.base import CloneFrozenMixin


@dataclass(frozen=True)
class OCROptions(CloneFrozenMixin):
    """Configuration options for the built-in Tesseract OCR engine.

    These settings only matter when no OCR engine is injected into the parser.
    With ``enabled=False`` (the default) and no injected engine, image regions
    are never OCR'd and every image becomes a plain Image block.

    Parameters
    ----------
    enabled : bool, default False
        Build a :class:`~pdfskeleton.parsers._pdf_ocr.TesseractOcrEngine`
        automatically when the caller does not inject one.
    languages : str or list[str], default "eng"
        Tesseract language code(s). Can be a single code ("eng"), a
        plus-joined string ("eng+fra") or a list (["eng", "fra"]).
    tesseract_config : str, default ""
        Custom Tesseract configuration flags, e.g. "--psm 6".
    timeout : int, default 0
        Seconds before a single recognition call is abandoned (0 = no limit).

    Notes
    -----
    OCR requires the optional dependencies pytesseract and Pillow, plus the
    Tesseract engine installed on the system::

        pip install pdfskeleton[ocr]

    Examples
    --------
    >>> ocr = OCROptions(enabled=True, languages=["eng", "deu"])

    """

    enabled: bool = field(
        default=DEFAULT_OCR_ENABLED,
        metadata={"help": "Enable the built-in Tesseract OCR engine for image regions", "importance": "core"},
    )
    languages: str | list[str] = field(
        default=DEFAULT_OCR_LANGUAGES,
        metadata={
            "help": "Tesseract language code(s), e.g. 'eng', 'eng+fra', or ['eng', 'fra']",
            "importance": "core",
        },
    )
    tesseract_config: str = field(
        default=DEFAULT_OCR_TESSERACT_CONFIG,
        metadata={"help": "Custom Tesseract configuration flags (advanced)", "importance": "advanced"},
    )
    timeout: int = field(
        default=DEFAULT_OCR_TIMEOUT,
        metadata={"help": "Seconds before a recognition call is abandoned (0 = no limit)", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate OCR option values.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        if self.timeout < 0:
            raise ValueError(f"timeout must be non-negative, got {self.timeout}")

        if isinstance(self.languages, list):
            if not self.languages:
                raise ValueError("languages list cannot be empty")
            for lang in self.languages:
                if not isinstance(lang, str) or not lang.strip():
                    raise ValueError(f"Invalid language code in list: {lang}")
        elif not self.languages.strip():
            raise ValueError("languages cannot be empty")

    @property
    def language_string(self) -> str:
        """Return languages in Tesseract's plus-joined form."""
        if isinstance(self.languages, list):
            return "+".join(self.languages)
        return self.languages
