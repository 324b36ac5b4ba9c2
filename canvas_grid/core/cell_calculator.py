"""
Cell Calculator

Pixel arithmetic for a grid laid over a monitor work area, and conversion
between cell addresses and spreadsheet notation (A1, B2, AA10, ...).

Layout per axis:
1. available = work area - both margins
2. total_gap = (count - 1) * gap
3. cell = floor((available - total_gap) / count)

Floor division keeps ``cell * count + total_gap <= available``. The
leftover pixels (at most ``count - 1``) are reported by
``calculate_remaining_space`` and never redistributed here.
"""

import re
from typing import Optional, Tuple

from ..models.grid import (
    CellAddress,
    CellDimensions,
    CellRect,
    CellSize,
    CellSpan,
    GridConfig,
    MonitorInfo,
    PixelPoint,
    PixelRect,
    RemainingSpace,
)
from .primitives import single_cell

_EXCEL_CELL_PATTERN = re.compile(r"([A-Z]+)([0-9]+)")


def _axis_layout(available: int, count: int, gap: int) -> Tuple[int, int]:
    """Return (cell_size, total_gap) for one axis."""
    total_gap = (count - 1) * gap
    return (available - total_gap) // count, total_gap


def _available_area(config: GridConfig, monitor: MonitorInfo) -> Tuple[int, int]:
    width = monitor.work_area_width - config.margin_left - config.margin_right
    height = monitor.work_area_height - config.margin_top - config.margin_bottom
    return width, height


def calculate_single_cell_size(config: GridConfig, monitor: MonitorInfo) -> CellSize:
    """Size of one unit cell in pixels."""
    available_width, available_height = _available_area(config, monitor)
    cell_width, _ = _axis_layout(available_width, config.columns, config.cell_gap_horizontal)
    cell_height, _ = _axis_layout(available_height, config.rows, config.cell_gap_vertical)
    return CellSize(width=cell_width, height=cell_height)


def calculate_cell_rect(span: CellSpan, config: GridConfig, monitor: MonitorInfo) -> PixelRect:
    """Pixel rectangle covered by a span.

    A multi-cell span includes the gaps between its own cells but no gap
    at its outer edges, so it lines up with neighbouring cells.
    """
    size = calculate_single_cell_size(config, monitor)
    gap_h = config.cell_gap_horizontal
    gap_v = config.cell_gap_vertical

    x = monitor.work_area_x + config.margin_left + span.start_column * (size.width + gap_h)
    y = monitor.work_area_y + config.margin_top + span.start_row * (size.height + gap_v)
    width = span.column_span * size.width + (span.column_span - 1) * gap_h
    height = span.row_span * size.height + (span.row_span - 1) * gap_v

    return PixelRect(x=x, y=y, width=width, height=height)


def calculate_all_cells(config: GridConfig, monitor: MonitorInfo) -> CellDimensions:
    """Rectangles of every unit cell, row-major."""
    size = calculate_single_cell_size(config, monitor)
    cells = tuple(
        CellRect(
            row=row,
            column=column,
            rect=calculate_cell_rect(single_cell(row, column), config, monitor),
        )
        for row in range(config.rows)
        for column in range(config.columns)
    )
    return CellDimensions(cell_width=size.width, cell_height=size.height, cells=cells)


def get_cell_at_position(
    x: int,
    y: int,
    config: GridConfig,
    monitor: MonitorInfo,
) -> Optional[CellAddress]:
    """Cell containing a pixel, or None for gaps, margins and off-grid points.

    Linear scan; grids are small (typically <= 100 cells).
    """
    for cell in calculate_all_cells(config, monitor).cells:
        if cell.rect.contains_point(x, y):
            return CellAddress(row=cell.row, column=cell.column)
    return None


def get_cell_center(row: int, column: int, config: GridConfig, monitor: MonitorInfo) -> PixelPoint:
    """Center pixel of a unit cell (rounded down)."""
    rect = calculate_cell_rect(single_cell(row, column), config, monitor)
    return PixelPoint(x=rect.x + rect.width // 2, y=rect.y + rect.height // 2)


def calculate_remaining_space(config: GridConfig, monitor: MonitorInfo) -> RemainingSpace:
    """Pixels per axis not covered by cells and gaps."""
    available_width, available_height = _available_area(config, monitor)
    cell_width, total_h_gap = _axis_layout(available_width, config.columns, config.cell_gap_horizontal)
    cell_height, total_v_gap = _axis_layout(available_height, config.rows, config.cell_gap_vertical)

    return RemainingSpace(
        horizontal=available_width - (cell_width * config.columns + total_h_gap),
        vertical=available_height - (cell_height * config.rows + total_v_gap),
    )


# ============================================================================
# Spreadsheet notation
# ============================================================================

def column_to_letters(column: int) -> str:
    """Encode a zero-based column as bijective base-26 letters.

    0 -> A, 25 -> Z, 26 -> AA, 701 -> ZZ, 702 -> AAA. Each letter is a
    digit in 1..26; there is no zero digit.
    """
    if column < 0:
        raise ValueError(f"Column must be non-negative, got {column}")

    letters = ""
    remaining = column + 1
    while remaining > 0:
        remaining, digit = divmod(remaining - 1, 26)
        letters = chr(ord("A") + digit) + letters
    return letters


def letters_to_column(letters: str) -> int:
    """Decode bijective base-26 letters to a zero-based column."""
    value = 0
    for letter in letters.upper():
        value = value * 26 + (ord(letter) - ord("A") + 1)
    return value - 1


def cell_to_excel_notation(row: int, column: int) -> str:
    """Spreadsheet address for a cell: (0, 0) -> "A1", (1, 27) -> "AB2"."""
    if row < 0:
        raise ValueError(f"Row must be non-negative, got {row}")
    return f"{column_to_letters(column)}{row + 1}"


def excel_notation_to_cell(notation: str) -> Optional[CellAddress]:
    """Parse "A1"-style notation (case-insensitive).

    Returns None for empty input, missing letters or digits, or row 0.
    """
    if not notation or not notation.isascii():
        return None

    match = _EXCEL_CELL_PATTERN.fullmatch(notation.upper())
    if not match:
        return None

    letters, digits = match.groups()
    row = int(digits) - 1
    column = letters_to_column(letters)

    if row < 0 or column < 0:
        return None

    return CellAddress(row=row, column=column)


def format_cell_span(span: CellSpan) -> str:
    """Spreadsheet form: "A1" for one cell, "A1:C2" for a range."""
    start = cell_to_excel_notation(span.start_row, span.start_column)
    if span.is_single_cell:
        return start
    return f"{start}:{cell_to_excel_notation(span.end_row, span.end_column)}"


def format_cell_span_coords(span: CellSpan) -> str:
    """Coordinate form: "0,0" for one cell, "0,0:2x3" for a range."""
    if span.is_single_cell:
        return f"{span.start_row},{span.start_column}"
    return f"{span.start_row},{span.start_column}:{span.row_span}x{span.column_span}"
