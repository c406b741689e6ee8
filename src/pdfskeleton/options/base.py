#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/options/base.py
"""Base classes for parser options.

This module defines the foundation classes for the immutable configuration
objects passed into the skeleton parser.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities.

    This mixin adds the ability to create modified copies of frozen dataclass
    instances, which is useful for immutable configuration objects.
    """

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)


@dataclass(frozen=True)
class BaseParserOptions(CloneFrozenMixin):
    """Base class for all parser options.

    Notes
    -----
    Subclasses define their parsing options as frozen dataclass fields, each
    with ``metadata={"help": ..., "importance": ...}`` describing the knob.

    """

    def __post_init__(self) -> None:
        """Validate option values. Subclasses extend this."""
        pass
