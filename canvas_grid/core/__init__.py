"""Grid layout engine: primitives, pixel calculator and grid manager."""

from .primitives import (
    single_cell,
    cell_span,
    cell_spans_overlap,
    is_within_grid,
    get_cells_in_span,
)
from .cell_calculator import (
    calculate_single_cell_size,
    calculate_cell_rect,
    calculate_all_cells,
    get_cell_at_position,
    get_cell_center,
    calculate_remaining_space,
    cell_to_excel_notation,
    excel_notation_to_cell,
    format_cell_span,
    format_cell_span_coords,
)
from .grid_manager import (
    initialize_grid_state,
    parse_cell_spec,
    require_cell_spec,
    format_cell_spec,
    format_cell_spec_coords,
    validate_cell_span,
    get_available_cells,
    find_available_span,
    assign_window_to_grid,
    place_window,
    auto_place_window,
    remove_window_from_grid,
    get_window_cell_span,
    swap_window_positions,
    visualize_grid,
    calculate_window_rect,
    position_window,
    get_cell_dimensions,
    get_grid_layout_info,
)

__all__ = [
    "single_cell",
    "cell_span",
    "cell_spans_overlap",
    "is_within_grid",
    "get_cells_in_span",
    "calculate_single_cell_size",
    "calculate_cell_rect",
    "calculate_all_cells",
    "get_cell_at_position",
    "get_cell_center",
    "calculate_remaining_space",
    "cell_to_excel_notation",
    "excel_notation_to_cell",
    "format_cell_span",
    "format_cell_span_coords",
    "initialize_grid_state",
    "parse_cell_spec",
    "require_cell_spec",
    "format_cell_spec",
    "format_cell_spec_coords",
    "validate_cell_span",
    "get_available_cells",
    "find_available_span",
    "assign_window_to_grid",
    "place_window",
    "auto_place_window",
    "remove_window_from_grid",
    "get_window_cell_span",
    "swap_window_positions",
    "visualize_grid",
    "calculate_window_rect",
    "position_window",
    "get_cell_dimensions",
    "get_grid_layout_info",
]
