#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/parsers/base.py
"""Base class for skeleton parsers.

The BaseParser fixes the constructor shape, the options type check and the
progress reporting shared by parser implementations.

"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from pdfskeleton.ast.nodes import DocumentSkeleton
from pdfskeleton.exceptions import InvalidOptionsError
from pdfskeleton.options.base import BaseParserOptions
from pdfskeleton.progress import ProgressCallback, ProgressEvent
from pdfskeleton.utils.inputs import InputType

logger = logging.getLogger(__name__)


class BaseParser(ABC):
    """Abstract base class for document parsers.

    Parameters
    ----------
    options : BaseParserOptions or None, default = None
        Format-specific parsing options
    progress_callback : ProgressCallback or None, default = None
        Optional callback for progress updates during parsing

    """

    def __init__(self, options: BaseParserOptions | None = None, progress_callback: Optional[ProgressCallback] = None):
        self.options: BaseParserOptions | None = options
        self.progress_callback: Optional[ProgressCallback] = progress_callback

    @staticmethod
    def _validate_options_type(options: BaseParserOptions | None, expected_type: type, parser_name: str) -> None:
        """Validate that options are of the correct type for this parser.

        Raises
        ------
        InvalidOptionsError
            If options are not None and not an instance of expected_type

        """
        if options is not None and not isinstance(options, expected_type):
            raise InvalidOptionsError(
                converter_name=parser_name,
                expected_type=expected_type,
                received_type=type(options),
            )

    @abstractmethod
    def parse(self, input_data: InputType, source_id: str = "pdf") -> DocumentSkeleton:
        """Parse the input document into a skeleton.

        Parameters
        ----------
        input_data : str, Path, IO[bytes], or bytes
            The input document
        source_id : str
            Identifier stored on the returned skeleton

        Returns
        -------
        DocumentSkeleton
            The parsed skeleton

        Raises
        ------
        DocumentLoadError
            If the document cannot be opened
        DependencyError
            If required dependencies are not installed
        ValidationError
            If input data is invalid

        """
        raise NotImplementedError

    def _emit_progress(self, event_type: str, message: str, current: int = 0, total: int = 0, **metadata: Any) -> None:
        """Emit a progress event to the callback if registered.

        Parameters
        ----------
        event_type : str
            Type of progress event (started, item_done, detected, finished, error)
        message : str
            Human-readable description of the event
        current : int, default 0
            Current progress position
        total : int, default 0
            Total items to process
        **metadata
            Additional event-specific information

        Notes
        -----
        Exceptions raised by the callback are logged and do not interrupt
        parsing.

        """
        if not self.progress_callback:
            return

        try:
            event = ProgressEvent(
                event_type=event_type,  # type: ignore[arg-type]
                message=message,
                current=current,
                total=total,
                metadata=metadata,
            )
            self.progress_callback(event)
        except Exception as e:
            logger.warning(f"Progress callback raised exception: {e}", exc_info=True)
