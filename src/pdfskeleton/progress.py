#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/progress.py
"""Progress callback system for skeleton extraction.

Long documents are processed page by page; embedders can observe that work by
passing a ``progress_callback`` to :func:`pdfskeleton.parse_pdf` or to
:class:`pdfskeleton.parsers.pdf.PdfSkeletonParser`.

Examples
--------
    >>> from pdfskeleton import parse_pdf
    >>> from pdfskeleton.progress import ProgressEvent
    >>>
    >>> def on_progress(event: ProgressEvent):
    ...     if event.event_type == "detected" and event.metadata.get("detected_type") == "table":
    ...         print(f"{event.metadata['table_count']} table(s) on page {event.current}")
    ...     elif event.event_type == "error":
    ...         print(f"Page {event.current} failed: {event.metadata['error']}")
    >>>
    >>> skeleton = parse_pdf("report.pdf", progress_callback=on_progress)

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Literal

EventType = Literal["started", "item_done", "detected", "finished", "error"]


@dataclass
class ProgressEvent:
    """Progress event emitted while a document is being parsed.

    Parameters
    ----------
    event_type : EventType
        One of:

        - "started": parsing has begun; ``total`` is the page count.
        - "item_done": a page has been assembled (``metadata["item_type"] == "page"``).
        - "detected": tables or images were found on a page
          (``metadata["detected_type"]`` is "table" or "image").
        - "finished": the skeleton is complete; ``current == total``.
        - "error": a page failed and was skipped. ``metadata`` carries
          ``"error"``, ``"stage"`` and ``"page"``.

    message : str
        Human-readable description of the event
    current : int, default 0
        1-based page number the event refers to
    total : int, default 0
        Total number of pages, 0 if unknown
    metadata : dict, default empty
        Additional event-specific information

    """

    event_type: EventType
    message: str
    current: int = 0
    total: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Return human-readable string representation."""
        progress = f"({self.current}/{self.total})" if self.total > 0 else ""
        return f"[{self.event_type.upper()}] {self.message} {progress}".strip()


ProgressCallback = Callable[[ProgressEvent], None]
"""Callable that accepts a ProgressEvent and returns None.

Exceptions raised by a callback are logged and otherwise ignored.
"""
