#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/ast/visitors.py
"""Visitor pattern implementation for skeleton traversal.

Consumers dispatch on block type through ``block.accept(visitor)`` instead of
``isinstance`` chains. :class:`SkeletonVisitor` provides a default traversal
that walks sections and blocks and does nothing else, so subclasses override
only the hooks they care about.

Examples
--------
Count the tables in a skeleton:

    >>> class TableCounter(SkeletonVisitor):
    ...     def __init__(self):
    ...         self.count = 0
    ...
    ...     def visit_table(self, node):
    ...         self.count += 1
    ...
    >>> counter = TableCounter()
    >>> skeleton.accept(counter)
    >>> counter.count

"""

from __future__ import annotations

from typing import Any, Iterator

from pdfskeleton.ast.nodes import (
    BulletListItem,
    ContentBlock,
    DocumentSkeleton,
    Image,
    NumberedListItem,
    PageBreak,
    Paragraph,
    Section,
    Table,
)


class SkeletonVisitor:
    """Base visitor with a depth-first default traversal."""

    def visit_skeleton(self, node: DocumentSkeleton) -> Any:
        for section in node.sections:
            section.accept(self)

    def visit_section(self, node: Section) -> Any:
        for block in node.blocks:
            block.accept(self)

    def visit_paragraph(self, node: Paragraph) -> Any:
        pass

    def visit_bullet_list_item(self, node: BulletListItem) -> Any:
        pass

    def visit_numbered_list_item(self, node: NumberedListItem) -> Any:
        pass

    def visit_table(self, node: Table) -> Any:
        pass

    def visit_image(self, node: Image) -> Any:
        pass

    def visit_page_break(self, node: PageBreak) -> Any:
        pass


class _TextExtractor(SkeletonVisitor):
    """Return the plain text a single block contributes to a chunk."""

    def visit_paragraph(self, node: Paragraph) -> str | None:
        return node.text

    def visit_bullet_list_item(self, node: BulletListItem) -> str | None:
        return node.text

    def visit_numbered_list_item(self, node: NumberedListItem) -> str | None:
        return node.text

    def visit_table(self, node: Table) -> str | None:
        lines = [" | ".join(row) for row in node.table.rows]
        if node.table.caption:
            lines.insert(0, node.table.caption)
        return "\n".join(lines)

    def visit_image(self, node: Image) -> str | None:
        return node.text

    def visit_page_break(self, node: PageBreak) -> str | None:
        return None


_TEXT_EXTRACTOR = _TextExtractor()


def extract_text(block: ContentBlock) -> str | None:
    """Return the text carried by a block, or None if it has none.

    Tables are flattened to one ``" | "``-joined line per row, preceded by
    the caption when present.
    """
    return block.accept(_TEXT_EXTRACTOR)


def iter_blocks(skeleton: DocumentSkeleton) -> Iterator[tuple[Section, ContentBlock]]:
    """Yield ``(section, block)`` pairs in document order."""
    for section in skeleton.sections:
        for block in section.blocks:
            yield section, block
