"""Span constructors and pure predicates over grid cells."""

from typing import List

from ..models.grid import CellAddress, CellSpan, GridConfig


def single_cell(row: int, column: int) -> CellSpan:
    """1x1 span at (row, column)."""
    return CellSpan(start_row=row, start_column=column, row_span=1, column_span=1)


def cell_span(start_row: int, start_column: int, row_span: int, column_span: int) -> CellSpan:
    """Span with both dimensions clamped to a minimum of 1."""
    return CellSpan(
        start_row=start_row,
        start_column=start_column,
        row_span=max(1, row_span),
        column_span=max(1, column_span),
    )


def cell_spans_overlap(a: CellSpan, b: CellSpan) -> bool:
    """Check whether two spans share at least one cell.

    End indices are inclusive, so spans that merely touch along an edge
    do not overlap.
    """
    return not (
        a.end_row < b.start_row or
        a.start_row > b.end_row or
        a.end_column < b.start_column or
        a.start_column > b.end_column
    )


def is_within_grid(span: CellSpan, config: GridConfig) -> bool:
    """Check that every cell of the span lies inside the grid."""
    return (
        span.start_row >= 0 and
        span.start_column >= 0 and
        span.start_row + span.row_span <= config.rows and
        span.start_column + span.column_span <= config.columns
    )


def get_cells_in_span(span: CellSpan) -> List[CellAddress]:
    """All cells covered by a span, row-major."""
    return [
        CellAddress(row=row, column=column)
        for row in range(span.start_row, span.start_row + span.row_span)
        for column in range(span.start_column, span.start_column + span.column_span)
    ]
