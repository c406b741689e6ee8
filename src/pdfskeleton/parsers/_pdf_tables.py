#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/parsers/_pdf_tables.py
"""PDF table detection from text geometry.

This private module finds tables using only the positions of text lines (or
the words inside them); ruling lines and pipe/tab characters are ignored. The
algorithm works on one page at a time:

1. Cluster lines into row bands by their bottom edge.
2. Group vertically close bands into candidate regions.
3. Infer column centers from the left edges of all fragments in a region.
4. Assign fragments to their nearest column, score alignment and require
   every row to fill the same number of cells.
5. Pad or truncate rows to a rectangle.

Tolerances are derived from the median line height unless fixed values are
configured, so detection does not depend on the render resolution.

"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from pdfskeleton.ast.nodes import TableBlock
from pdfskeleton.constants import (
    TABLE_CHAR_WIDTH_FACTOR,
    TABLE_COLUMN_TOLERANCE_FACTOR,
    TABLE_COLUMN_TOLERANCE_MIN,
    TABLE_FALLBACK_LINE_HEIGHT,
    TABLE_MIN_LINE_HEIGHT,
    TABLE_ROW_TOLERANCE_FACTOR,
    TABLE_ROW_TOLERANCE_MIN,
)
from pdfskeleton.options import SkeletonOptions
from pdfskeleton.parsers._pdf_provider import TextLine
from pdfskeleton.utils.geometry import Rect, median, nearest_index, union_rects

__all__ = ["TableSpan", "TableTolerances", "compute_tolerances", "detect_tables"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableSpan:
    """A detected table and the lines it consumed.

    Parameters
    ----------
    line_indices : frozenset of int
        Indices into the line list passed to :func:`detect_tables`
    table : TableBlock
        Rectangular table payload
    area : Rect
        Union of all participating fragment rectangles

    """

    line_indices: frozenset[int]
    table: TableBlock
    area: Rect

    @property
    def start_index(self) -> int:
        return min(self.line_indices)


@dataclass(frozen=True)
class TableTolerances:
    median_line_height: float
    row: float
    column: float


@dataclass(frozen=True)
class _Fragment:
    text: str
    bbox: Rect


def compute_tolerances(lines: Sequence[TextLine], options: SkeletonOptions) -> TableTolerances:
    """Derive row and column tolerances from the median line height."""
    med_h = median(
        (line.bbox.height for line in lines if line.bbox.height > TABLE_MIN_LINE_HEIGHT),
        TABLE_FALLBACK_LINE_HEIGHT,
    )
    row_tol = options.table_row_tolerance
    if row_tol is None:
        row_tol = max(TABLE_ROW_TOLERANCE_MIN, TABLE_ROW_TOLERANCE_FACTOR * med_h)
    col_tol = options.table_column_tolerance
    if col_tol is None:
        col_tol = max(TABLE_COLUMN_TOLERANCE_MIN, TABLE_COLUMN_TOLERANCE_FACTOR * (TABLE_CHAR_WIDTH_FACTOR * med_h))
    return TableTolerances(median_line_height=med_h, row=row_tol, column=col_tol)


def _fragments(line: TextLine, options: SkeletonOptions) -> list[_Fragment]:
    if options.table_fragment_source == "words" and line.words:
        return [_Fragment(w.text, w.bbox) for w in line.words if w.text.strip() and not w.bbox.is_degenerate]
    return [_Fragment(line.text.strip(), line.bbox)]


def _build_row_bands(lines: Sequence[TextLine], candidates: Sequence[int], row_tol: float) -> list[list[int]]:
    """Cluster line indices by bottom edge against the first member of each band."""
    bands: list[list[int]] = []
    for i in candidates:
        y1 = lines[i].bbox.y1
        for band in bands:
            if abs(lines[band[0]].bbox.y1 - y1) <= row_tol:
                band.append(i)
                break
        else:
            bands.append([i])
    return bands


def _group_bands(
    lines: Sequence[TextLine],
    bands: list[list[int]],
    band_fragments: list[int],
    max_gap: float,
) -> list[tuple[int, int]]:
    """Split the band sequence into runs of vertically close bands.

    A band with fewer than two fragments can never be a table row, so it also
    ends the current run.
    """
    regions: list[tuple[int, int]] = []
    start = 0
    while start < len(bands):
        if band_fragments[start] < 2:
            start += 1
            continue
        end = start
        while (
            end + 1 < len(bands)
            and band_fragments[end + 1] >= 2
            and abs(lines[bands[end + 1][0]].bbox.center_y - lines[bands[end][0]].bbox.center_y) <= max_gap
        ):
            end += 1
        regions.append((start, end))
        start = end + 1
    return regions


def _column_centers(xs: list[float], col_tol: float) -> list[float]:
    centers: list[float] = []
    for x in sorted(xs):
        if not centers or abs(centers[-1] - x) > col_tol:
            centers.append(x)
    return centers


def _rectangularize(rows: list[list[str]], width: int) -> tuple[tuple[str, ...], ...]:
    """Drop columns empty in every row, then pad or truncate each row to ``width``.

    Cells beyond ``width`` are discarded even when they hold text.
    """
    used = [j for j in range(len(rows[0])) if any(row[j].strip() for row in rows)] if rows else []
    compact = [[row[j] for j in used] for row in rows]
    dropped = [cell for row in compact for cell in row[width:] if cell.strip()]
    if dropped:
        logger.debug(f"Table rectangularization dropped {len(dropped)} non-empty cell(s): {dropped}")
    return tuple(tuple((row + [""] * width)[:width]) for row in compact)


def _try_make_table(
    lines: Sequence[TextLine],
    bands: list[list[int]],
    fragments: dict[int, list[_Fragment]],
    band_start: int,
    band_end: int,
    col_tol: float,
    options: SkeletonOptions,
) -> TableSpan | None:
    region = bands[band_start : band_end + 1]
    region_fragments = [frag for band in region for i in band for frag in fragments[i]]

    if len(region_fragments) < options.table_min_fragments:
        logger.debug(f"Table candidate rejected: {len(region_fragments)} fragments")
        return None

    centers = _column_centers([f.bbox.x0 for f in region_fragments], col_tol)
    if len(centers) < 2 or len(centers) > options.table_max_columns:
        logger.debug(f"Table candidate rejected: {len(centers)} column centers")
        return None

    rows: list[list[str]] = []
    non_empty_per_row: list[int] = []
    aligned = 0
    total = 0

    for band in region:
        row_fragments = sorted((frag for i in band for frag in fragments[i]), key=lambda f: f.bbox.x0)
        cells = [""] * len(centers)
        for frag in row_fragments:
            total += 1
            j = nearest_index(centers, frag.bbox.x0)
            if abs(centers[j] - frag.bbox.x0) <= col_tol:
                aligned += 1
            cells[j] = f"{cells[j]} {frag.text}" if cells[j] else frag.text
        non_empty_per_row.append(sum(1 for c in cells if c.strip()))
        rows.append(cells)

    if total == 0:
        return None

    align_score = aligned / total
    # Ties between equally frequent counts go to the count seen first
    mode_cols = Counter(non_empty_per_row).most_common(1)[0][0]
    cols_ok = 2 <= mode_cols <= options.table_max_columns
    consistent = all(count == mode_cols for count in non_empty_per_row)

    if not (align_score >= options.table_min_align_score and consistent and cols_ok):
        logger.debug(
            f"Table candidate rejected: align_score={align_score:.2f}, mode_cols={mode_cols}, "
            f"consistent={consistent}"
        )
        return None

    area = union_rects(frag.bbox for frag in region_fragments)
    if area is None:
        return None

    table = TableBlock(rows=_rectangularize(rows, mode_cols))
    line_indices = frozenset(i for band in region for i in band)
    logger.debug(f"Table accepted: {table.row_count}x{table.column_count}, align_score={align_score:.2f}")
    return TableSpan(line_indices=line_indices, table=table, area=area)


def detect_tables(lines: Sequence[TextLine], options: SkeletonOptions) -> list[TableSpan]:
    """Detect tables among the lines of one page.

    Parameters
    ----------
    lines : sequence of TextLine
        Page lines in reading order
    options : SkeletonOptions
        Table thresholds and tolerances

    Returns
    -------
    list[TableSpan]
        Accepted tables ordered by their first line. Lines not claimed by any
        span fall through to normal classification.

    Notes
    -----
    Lines with empty text or degenerate boxes never take part in a table.
    Empty input returns an empty list.
    Unlike grouping on vertical gap alone, a band with fewer than two
    fragments (a caption or prose line) ends the current candidate region.

    """
    if not options.detect_tables or not lines:
        return []

    candidates = [i for i, line in enumerate(lines) if line.text.strip() and not line.bbox.is_degenerate]
    if not candidates:
        return []

    tolerances = compute_tolerances([lines[i] for i in candidates], options)
    bands = _build_row_bands(lines, candidates, tolerances.row)
    fragments = {i: _fragments(lines[i], options) for i in candidates}
    band_fragments = [sum(len(fragments[i]) for i in band) for band in bands]

    spans: list[TableSpan] = []
    max_gap = options.table_band_gap_factor * tolerances.median_line_height
    for band_start, band_end in _group_bands(lines, bands, band_fragments, max_gap):
        if band_end - band_start + 1 < options.table_min_rows:
            continue
        span = _try_make_table(lines, bands, fragments, band_start, band_end, tolerances.column, options)
        if span is not None:
            spans.append(span)

    return sorted(spans, key=lambda s: s.start_index)
