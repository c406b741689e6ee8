#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/ast/nodes.py
"""Node classes for the document skeleton.

A :class:`DocumentSkeleton` is the immutable result of parsing one PDF. It owns
an ordered tuple of :class:`Section` objects, each of which owns an ordered
tuple of content blocks.

Node Hierarchy
--------------
- DocumentSkeleton
  - Section (heading, level 1-3)
    - ContentBlock variants:
      Paragraph, BulletListItem, NumberedListItem, Table, Image, PageBreak

Every content block variant only carries the fields that make sense for it, so
for example a Table block cannot hold OCR text and an Image block cannot hold
rows. All nodes support the visitor pattern through ``accept``; see
:mod:`pdfskeleton.ast.visitors`.

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Optional, Sequence


class BlockType(str, Enum):
    """Discriminator for the content block variants."""

    PARAGRAPH = "paragraph"
    BULLET_LIST_ITEM = "bullet_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TABLE = "table"
    IMAGE = "image"
    PAGE_BREAK = "page_break"


@dataclass(frozen=True)
class TableBlock:
    """Rectangular table payload.

    Parameters
    ----------
    rows : sequence of sequence of str
        Table rows; every row must have the same number of cells
    caption : str or None, default None
        Caption text attached from a nearby "Table N" / "Figure N" line

    Raises
    ------
    ValueError
        If the rows are not rectangular

    """

    rows: tuple[tuple[str, ...], ...]
    caption: Optional[str] = None

    def __post_init__(self) -> None:
        rows = tuple(tuple(str(cell) for cell in row) for row in self.rows)
        if rows:
            width = len(rows[0])
            for index, row in enumerate(rows):
                if len(row) != width:
                    raise ValueError(f"Table rows must have equal length: row {index} has {len(row)}, expected {width}")
        object.__setattr__(self, "rows", rows)

    @property
    def column_count(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class ContentBlock(ABC):
    """Base class for all content blocks.

    Parameters
    ----------
    block_id : str
        Identifier unique within the document, derived from type, page and
        a document-wide sequence number
    page : int
        1-based page number the block came from

    """

    block_type: ClassVar[BlockType]

    block_id: str
    page: int

    @abstractmethod
    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this block.

        Parameters
        ----------
        visitor : Any
            A visitor object with visit_* methods

        Returns
        -------
        Any
            Result from the visitor's processing

        """
        pass


@dataclass(frozen=True)
class Paragraph(ContentBlock):
    """Narrative text.

    Parameters
    ----------
    text : str
        Paragraph text
    image_id : str or None, default None
        Set when the paragraph carries OCR text recognized from the image with
        this identifier on the same page

    """

    block_type: ClassVar[BlockType] = BlockType.PARAGRAPH

    text: str
    image_id: Optional[str] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_paragraph(self)


@dataclass(frozen=True)
class BulletListItem(ContentBlock):
    """A bullet list item with its marker stripped."""

    block_type: ClassVar[BlockType] = BlockType.BULLET_LIST_ITEM

    text: str

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_bullet_list_item(self)


@dataclass(frozen=True)
class NumberedListItem(ContentBlock):
    """A numbered (or lettered) list item with its marker stripped."""

    block_type: ClassVar[BlockType] = BlockType.NUMBERED_LIST_ITEM

    text: str

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_numbered_list_item(self)


@dataclass(frozen=True)
class Table(ContentBlock):
    """A table detected from line geometry."""

    block_type: ClassVar[BlockType] = BlockType.TABLE

    table: TableBlock

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_table(self)


@dataclass(frozen=True)
class Image(ContentBlock):
    """A raster image region.

    Parameters
    ----------
    image_id : str
        Page-scoped image identifier such as ``p3_img1``
    data : bytes
        Raster bytes as supplied by the page provider
    text : str or None, default None
        OCR text, only set for large texty regions such as scanned pages

    """

    block_type: ClassVar[BlockType] = BlockType.IMAGE

    image_id: str
    data: bytes = field(repr=False)
    text: Optional[str] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_image(self)


@dataclass(frozen=True)
class PageBreak(ContentBlock):
    """Marker placed between two pages when page breaks are enabled."""

    block_type: ClassVar[BlockType] = BlockType.PAGE_BREAK

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_page_break(self)


@dataclass(frozen=True)
class Section:
    """A heading and the blocks that follow it until the next heading.

    Parameters
    ----------
    heading : str
        Heading text
    level : int
        Heading level, 1 (largest) to 3
    blocks : tuple of ContentBlock
        Blocks in reading order

    """

    heading: str
    level: int
    blocks: tuple[ContentBlock, ...] = ()

    def __post_init__(self) -> None:
        if not 1 <= self.level <= 3:
            raise ValueError(f"Section level must be between 1 and 3, got {self.level}")
        object.__setattr__(self, "blocks", tuple(self.blocks))

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_section(self)


def _freeze_metadata(metadata: Mapping[str, Any]) -> Mapping[str, Any]:
    frozen = {key: tuple(value) if isinstance(value, list) else value for key, value in metadata.items()}
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class DocumentSkeleton:
    """Root of a parsed document.

    Parameters
    ----------
    source_id : str
        Caller-supplied identifier of the document
    sections : sequence of Section
        Sections in reading order; never empty
    metadata : mapping, default empty
        Document facts gathered while parsing (``page_count``,
        ``body_font_size``, ``failed_pages``, ``table_count``,
        ``image_count``). Lists are stored as tuples and the mapping is
        read-only.

    Raises
    ------
    ValueError
        If ``sections`` is empty

    """

    source_id: str
    sections: tuple[Section, ...]
    metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        sections: Sequence[Section] = tuple(self.sections)
        if not sections:
            raise ValueError("A document skeleton must contain at least one section")
        object.__setattr__(self, "sections", sections)
        object.__setattr__(self, "metadata", _freeze_metadata(self.metadata))

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_skeleton(self)

    @property
    def blocks(self) -> tuple[ContentBlock, ...]:
        """All content blocks across sections, in document order."""
        return tuple(block for section in self.sections for block in section.blocks)
