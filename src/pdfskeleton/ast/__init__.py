#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/ast/__init__.py
"""Document skeleton model.

The module consists of three components:

- nodes: immutable section and content block classes
- visitors: visitor base class plus traversal helpers for chunkers
- serialization: JSON serialization and deserialization of skeletons

Examples
--------
    >>> from pdfskeleton import parse_pdf
    >>> from pdfskeleton.ast import iter_blocks, extract_text
    >>>
    >>> skeleton = parse_pdf("report.pdf")
    >>> for section, block in iter_blocks(skeleton):
    ...     print(section.heading, block.block_type.value, extract_text(block))

"""

from __future__ import annotations

from pdfskeleton.ast.nodes import (
    BlockType,
    BulletListItem,
    ContentBlock,
    DocumentSkeleton,
    Image,
    NumberedListItem,
    PageBreak,
    Paragraph,
    Section,
    Table,
    TableBlock,
)
from pdfskeleton.ast.serialization import (
    block_to_dict,
    dict_to_block,
    dict_to_skeleton,
    json_to_skeleton,
    skeleton_to_dict,
    skeleton_to_json,
)
from pdfskeleton.ast.visitors import SkeletonVisitor, extract_text, iter_blocks

__all__ = [
    "BlockType",
    "BulletListItem",
    "ContentBlock",
    "DocumentSkeleton",
    "Image",
    "NumberedListItem",
    "PageBreak",
    "Paragraph",
    "Section",
    "Table",
    "TableBlock",
    "SkeletonVisitor",
    "extract_text",
    "iter_blocks",
    "block_to_dict",
    "dict_to_block",
    "dict_to_skeleton",
    "json_to_skeleton",
    "skeleton_to_dict",
    "skeleton_to_json",
]
