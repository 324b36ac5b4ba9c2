"""Unit tests for pixel geometry and spreadsheet notation.

Reference layout: 1920x1040 work area, 3x3 grid, 4px gaps, no margins.
Cells are 637x344 with one pixel left over horizontally.
"""

import pytest

from canvas_grid.core.cell_calculator import (
    calculate_all_cells,
    calculate_cell_rect,
    calculate_remaining_space,
    calculate_single_cell_size,
    cell_to_excel_notation,
    column_to_letters,
    excel_notation_to_cell,
    format_cell_span,
    format_cell_span_coords,
    get_cell_at_position,
    get_cell_center,
    letters_to_column,
)
from canvas_grid.core.primitives import cell_span, single_cell
from canvas_grid.models.grid import (
    CellAddress,
    CellSize,
    GridConfig,
    MonitorInfo,
    PixelPoint,
    PixelRect,
    RemainingSpace,
)


class TestCellSize:
    """Test calculate_single_cell_size and calculate_remaining_space."""

    def test_reference_cell_size(self, monitor):
        assert calculate_single_cell_size(GridConfig(), monitor) == CellSize(width=637, height=344)

    def test_reference_remaining_space(self, monitor):
        assert calculate_remaining_space(GridConfig(), monitor) == RemainingSpace(horizontal=1, vertical=0)

    def test_margins_reduce_available_area(self, monitor):
        config = GridConfig(margin_left=10, margin_right=10, margin_top=20, margin_bottom=20)
        size = calculate_single_cell_size(config, monitor)
        # (1900 - 8) // 3, (1000 - 8) // 3
        assert size == CellSize(width=630, height=330)

    def test_cells_and_gaps_never_exceed_area(self, monitor):
        for rows in range(1, 8):
            for columns in range(1, 8):
                config = GridConfig(rows=rows, columns=columns, cell_gap_horizontal=7, cell_gap_vertical=3)
                size = calculate_single_cell_size(config, monitor)
                remaining = calculate_remaining_space(config, monitor)
                assert size.width * columns + (columns - 1) * 7 + remaining.horizontal == 1920
                assert size.height * rows + (rows - 1) * 3 + remaining.vertical == 1040
                assert 0 <= remaining.horizontal < columns
                assert 0 <= remaining.vertical < rows

    def test_single_cell_grid_fills_work_area(self, monitor):
        config = GridConfig(rows=1, columns=1)
        assert calculate_single_cell_size(config, monitor) == CellSize(width=1920, height=1040)


class TestCellRect:
    """Test calculate_cell_rect."""

    def test_origin_cell(self, monitor):
        assert calculate_cell_rect(single_cell(0, 0), GridConfig(), monitor) == PixelRect(
            x=0, y=0, width=637, height=344
        )

    def test_two_by_two_span_includes_inner_gaps(self, monitor):
        rect = calculate_cell_rect(cell_span(0, 0, 2, 2), GridConfig(), monitor)
        assert rect == PixelRect(x=0, y=0, width=1278, height=692)

    def test_offset_cell(self, monitor):
        rect = calculate_cell_rect(single_cell(1, 2), GridConfig(), monitor)
        assert rect == PixelRect(x=2 * 641, y=348, width=637, height=344)

    def test_work_area_offset_and_margins(self, second_monitor):
        config = GridConfig(rows=2, columns=2, monitor_index=1, margin_left=8, margin_top=6)
        rect = calculate_cell_rect(single_cell(1, 1), config, second_monitor)
        size = calculate_single_cell_size(config, second_monitor)
        assert rect.x == 1920 + 8 + size.width + 4
        assert rect.y == 30 + 6 + size.height + 4

    def test_adjacent_cells_separated_by_gap(self, monitor):
        config = GridConfig()
        left = calculate_cell_rect(single_cell(0, 0), config, monitor)
        right = calculate_cell_rect(single_cell(0, 1), config, monitor)
        assert right.x - (left.x + left.width) == config.cell_gap_horizontal


class TestAllCells:
    """Test calculate_all_cells."""

    def test_row_major_and_complete(self, monitor):
        dims = calculate_all_cells(GridConfig(), monitor)
        assert (dims.cell_width, dims.cell_height) == (637, 344)
        assert [(c.row, c.column) for c in dims.cells] == [(r, c) for r in range(3) for c in range(3)]

    def test_rects_match_single_cell_rects(self, monitor):
        config = GridConfig(rows=2, columns=4)
        for cell in calculate_all_cells(config, monitor).cells:
            assert cell.rect == calculate_cell_rect(single_cell(cell.row, cell.column), config, monitor)


class TestHitTesting:
    """Test get_cell_at_position and get_cell_center."""

    def test_point_in_center_cell(self, monitor):
        assert get_cell_at_position(700, 400, GridConfig(), monitor) == CellAddress(row=1, column=1)

    def test_point_off_screen(self, monitor):
        assert get_cell_at_position(2000, 500, GridConfig(), monitor) is None

    def test_point_in_gap(self, monitor):
        assert get_cell_at_position(638, 10, GridConfig(), monitor) is None

    def test_right_edge_is_exclusive(self, monitor):
        """x = 637 is the first pixel after cell A1."""
        assert get_cell_at_position(636, 0, GridConfig(), monitor) == CellAddress(row=0, column=0)
        assert get_cell_at_position(637, 0, GridConfig(), monitor) is None

    def test_leftover_pixel_column_is_unassigned(self, monitor):
        assert get_cell_at_position(1919, 0, GridConfig(), monitor) is None

    def test_center_maps_back_to_cell(self, monitor):
        config = GridConfig()
        for row in range(3):
            for column in range(3):
                center = get_cell_center(row, column, config, monitor)
                assert get_cell_at_position(center.x, center.y, config, monitor) == CellAddress(
                    row=row, column=column
                )

    def test_center_rounds_down(self, monitor):
        assert get_cell_center(0, 0, GridConfig(), monitor) == PixelPoint(x=318, y=172)


class TestExcelNotation:
    """Test column letters and A1 notation."""

    @pytest.mark.parametrize("column,letters", [
        (0, "A"), (25, "Z"), (26, "AA"), (27, "AB"), (51, "AZ"), (52, "BA"), (701, "ZZ"), (702, "AAA"),
    ])
    def test_column_letters(self, column, letters):
        assert column_to_letters(column) == letters
        assert letters_to_column(letters) == column

    def test_cell_to_excel_notation(self):
        assert cell_to_excel_notation(0, 0) == "A1"
        assert cell_to_excel_notation(1, 27) == "AB2"
        assert cell_to_excel_notation(9, 2) == "C10"

    def test_negative_indices_rejected(self):
        with pytest.raises(ValueError):
            cell_to_excel_notation(-1, 0)
        with pytest.raises(ValueError):
            cell_to_excel_notation(0, -1)

    def test_parse_is_case_insensitive(self):
        assert excel_notation_to_cell("ab2") == CellAddress(row=1, column=27)

    @pytest.mark.parametrize("notation", ["", "A", "1", "A0", "1A", "A-1", "A1B", "Ä1", " A1", "A1\n", "ß1", "ı1"])
    def test_invalid_notation(self, notation):
        assert excel_notation_to_cell(notation) is None

    def test_notation_round_trip(self):
        for row in range(100):
            for column in range(100):
                notation = cell_to_excel_notation(row, column)
                assert excel_notation_to_cell(notation) == CellAddress(row=row, column=column)


class TestSpanFormatting:
    """Test format_cell_span and format_cell_span_coords."""

    def test_single_cell(self):
        assert format_cell_span(single_cell(1, 1)) == "B2"
        assert format_cell_span_coords(single_cell(1, 1)) == "1,1"

    def test_range(self):
        span = cell_span(0, 0, 2, 3)
        assert format_cell_span(span) == "A1:C2"
        assert format_cell_span_coords(span) == "0,0:2x3"


def test_monitor_work_area_property(monitor):
    assert monitor.work_area == PixelRect(x=0, y=0, width=1920, height=1040)


def test_monitor_requires_positive_scale():
    with pytest.raises(ValueError):
        MonitorInfo(index=0, name="X", width=1, height=1, work_area_width=1, work_area_height=1, scale_factor=0)
