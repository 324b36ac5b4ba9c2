"""
Grid Manager

Operations over a GridState: parsing cell specifications, validating and
searching for placements, assigning windows, and building layout views.

Every mutating operation is pure: it takes a GridState and returns a new
one. Validation and mutation are separate so that callers can dry-run
checks against hypothetical states. ``place_window`` combines them and is
the entry point production code should use; ``assign_window_to_grid``
alone does not check for overlaps.

The async operations at the bottom fetch monitor geometry from a
monitor service (exactly one lookup per call) and hand placements to a
window positioner. They apply no retry or timeout of their own.

Concurrency: none of this is thread-safe in the multi-writer sense. Two
writers must serialize their read-compute-store cycle themselves.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol, Set, Tuple, Union

from ..config import build_grid_config
from ..errors import ErrorCode, NotFoundError, PreconditionError
from ..models.grid import (
    CellAddress,
    CellAssignment,
    CellDimensions,
    CellSpan,
    GridConfig,
    GridLayoutInfo,
    AssignmentLayout,
    GridState,
    MonitorInfo,
    PixelRect,
    PositionOptions,
)
from ..models.results import CellSpecParseResult, PlacementResult, SpanValidationResult
from . import cell_calculator as calculator
from .primitives import cell_spans_overlap, get_cells_in_span, is_within_grid, single_cell

logger = logging.getLogger(__name__)

_COORD_SPEC_PATTERN = re.compile(
    r"([0-9]+)\s*,\s*([0-9]+)(?:\s*:\s*([0-9]+)\s*[xX]\s*([0-9]+))?"
)
_EXCEL_SPEC_PATTERN = re.compile(r"([A-Z]+)([0-9]+)(?::([A-Z]+)([0-9]+))?")

VISUALIZE_CELL_WIDTH = 16
CONTINUATION_MARKER = "..."


class MonitorLookup(Protocol):
    async def get_monitor(self, index: int) -> Optional[MonitorInfo]: ...


class PositionSink(Protocol):
    async def set_window_position(
        self,
        window_handle: int,
        rect: PixelRect,
        options: Optional[PositionOptions] = None,
    ) -> None: ...


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _describe_span(span: CellSpan) -> str:
    """Spreadsheet form when the span can be expressed in it, else coordinates."""
    if span.start_row >= 0 and span.start_column >= 0:
        return calculator.format_cell_span(span)
    return calculator.format_cell_span_coords(span)


# ============================================================================
# State construction
# ============================================================================

def initialize_grid_state(
    desktop_index: int = 0,
    config: Optional[Union[GridConfig, Mapping[str, Any]]] = None,
    **overrides: Any,
) -> GridState:
    """Create an empty grid state for a virtual desktop.

    Args:
        desktop_index: Virtual desktop index
        config: Complete GridConfig, or a partial mapping of config fields
        **overrides: Individual config fields (win over ``config``)

    Returns:
        GridState with no assignments and a fresh timestamp
    """
    if isinstance(config, GridConfig):
        config = config.model_dump()
    full_config = build_grid_config(config, **overrides)

    logger.debug(
        f"Initialized grid state for desktop {desktop_index}: "
        f"{full_config.rows}x{full_config.columns} on monitor {full_config.monitor_index}"
    )

    return GridState(
        desktop_index=desktop_index,
        config=full_config,
        assignments=(),
        last_updated=_timestamp(),
    )


# ============================================================================
# Cell specification parsing / formatting
# ============================================================================

def parse_cell_spec(spec: str) -> CellSpecParseResult:
    """Parse a cell specification string. Never raises.

    Supported formats:
    - "0,0"      single cell at row 0, column 0
    - "0,0:2x3"  span at (0,0), 2 rows by 3 columns
    - "A1"       spreadsheet-style single cell
    - "A1:C2"    spreadsheet-style range (any two opposite corners)
    """
    if not isinstance(spec, str):
        return CellSpecParseResult(success=False, error=f"Invalid cell specification: {spec!r}")

    # upper() maps some non-ASCII letters onto ASCII ones ("ß" -> "SS")
    if not spec.isascii():
        return CellSpecParseResult(success=False, spec=spec, error=f"Invalid cell specification: {spec}")

    trimmed = spec.strip().upper()

    coord_match = _COORD_SPEC_PATTERN.fullmatch(trimmed)
    if coord_match:
        row_str, col_str, row_span_str, col_span_str = coord_match.groups()
        row_span = int(row_span_str) if row_span_str else 1
        col_span = int(col_span_str) if col_span_str else 1

        if row_span < 1 or col_span < 1:
            return CellSpecParseResult(
                success=False,
                spec=spec,
                error="Span dimensions must be at least 1",
            )

        return CellSpecParseResult(
            success=True,
            spec=spec,
            cell_span=CellSpan(
                start_row=int(row_str),
                start_column=int(col_str),
                row_span=row_span,
                column_span=col_span,
            ),
        )

    excel_match = _EXCEL_SPEC_PATTERN.fullmatch(trimmed)
    if excel_match:
        start_letters, start_digits, end_letters, end_digits = excel_match.groups()

        start = calculator.excel_notation_to_cell(start_letters + start_digits)
        if start is None:
            return CellSpecParseResult(
                success=False,
                spec=spec,
                error=f"Invalid cell notation: {start_letters}{start_digits}",
            )

        if end_letters is None:
            return CellSpecParseResult(
                success=True,
                spec=spec,
                cell_span=single_cell(start.row, start.column),
            )

        end = calculator.excel_notation_to_cell(end_letters + end_digits)
        if end is None:
            return CellSpecParseResult(
                success=False,
                spec=spec,
                error=f"Invalid cell notation: {end_letters}{end_digits}",
            )

        # Normalize so the span starts at the top-left corner
        min_row, max_row = sorted((start.row, end.row))
        min_col, max_col = sorted((start.column, end.column))

        return CellSpecParseResult(
            success=True,
            spec=spec,
            cell_span=CellSpan(
                start_row=min_row,
                start_column=min_col,
                row_span=max_row - min_row + 1,
                column_span=max_col - min_col + 1,
            ),
        )

    return CellSpecParseResult(success=False, spec=spec, error=f"Invalid cell specification: {spec}")


def require_cell_spec(spec: str) -> CellSpan:
    """Parse a cell specification, raising ParseError on failure."""
    return parse_cell_spec(spec).unwrap()


def format_cell_spec(span: CellSpan) -> str:
    """Spreadsheet notation for a span ("A1" / "A1:C2")."""
    return calculator.format_cell_span(span)


def format_cell_spec_coords(span: CellSpan) -> str:
    """Coordinate notation for a span ("0,0" / "0,0:2x3")."""
    return calculator.format_cell_span_coords(span)


# ============================================================================
# Validation and search
# ============================================================================

def validate_cell_span(
    span: CellSpan,
    grid_state: GridState,
    exclude_window_id: Optional[str] = None,
) -> SpanValidationResult:
    """Check a span against grid bounds, then against existing assignments.

    Args:
        span: Candidate span
        grid_state: Current state
        exclude_window_id: Assignment to ignore (the window being moved)

    Returns:
        SpanValidationResult describing the first failure, if any
    """
    config = grid_state.config

    if not is_within_grid(span, config):
        return SpanValidationResult(
            valid=False,
            reason="bounds",
            rows=config.rows,
            columns=config.columns,
            error=(
                f"Cell span {_describe_span(span)} is outside grid bounds "
                f"({config.rows}x{config.columns})"
            ),
        )

    for assignment in grid_state.assignments:
        if exclude_window_id is not None and assignment.window_id == exclude_window_id:
            continue

        if cell_spans_overlap(span, assignment.cell_span):
            existing_spec = _describe_span(assignment.cell_span)
            return SpanValidationResult(
                valid=False,
                reason="overlap",
                conflicting_window_id=assignment.window_id,
                conflicting_span=assignment.cell_span,
                conflicting_cell_spec=existing_spec,
                error=f"Cell span overlaps with window {assignment.window_id} at {existing_spec}",
            )

    return SpanValidationResult(valid=True)


def _occupied_cells(grid_state: GridState) -> Set[Tuple[int, int]]:
    return {
        (cell.row, cell.column)
        for assignment in grid_state.assignments
        for cell in get_cells_in_span(assignment.cell_span)
    }


def get_available_cells(grid_state: GridState) -> List[CellAddress]:
    """Unoccupied cells, row-major."""
    occupied = _occupied_cells(grid_state)
    return [
        CellAddress(row=row, column=column)
        for row in range(grid_state.config.rows)
        for column in range(grid_state.config.columns)
        if (row, column) not in occupied
    ]


def find_available_span(row_span: int, column_span: int, grid_state: GridState) -> Optional[CellSpan]:
    """First free span of the requested size, searching origins row-major.

    Sizes below 1 are clamped to 1. Returns None when nothing fits, without
    scanning assignments at all if the size exceeds the grid.
    """
    row_span = max(1, row_span)
    column_span = max(1, column_span)
    config = grid_state.config

    for row in range(config.rows - row_span + 1):
        for column in range(config.columns - column_span + 1):
            candidate = CellSpan(
                start_row=row,
                start_column=column,
                row_span=row_span,
                column_span=column_span,
            )
            if validate_cell_span(candidate, grid_state).valid:
                return candidate

    logger.debug(
        f"No free {row_span}x{column_span} span in "
        f"{config.rows}x{config.columns} grid ({len(grid_state.assignments)} assignments)"
    )
    return None


# ============================================================================
# Mutations
# ============================================================================

def assign_window_to_grid(
    window_id: str,
    span: CellSpan,
    grid_state: GridState,
    z_index: Optional[int] = None,
) -> GridState:
    """Assign a window to a span, replacing any earlier assignment for it.

    Does not validate the span; see ``place_window``.
    """
    assignments = tuple(a for a in grid_state.assignments if a.window_id != window_id)
    assignments += (CellAssignment(window_id=window_id, cell_span=span, z_index=z_index),)

    logger.debug(f"Assigned window {window_id} to {_describe_span(span)}")

    return grid_state.model_copy(update={
        "assignments": assignments,
        "last_updated": _timestamp(),
    })


def place_window(
    window_id: str,
    position: Union[str, CellSpan],
    grid_state: GridState,
) -> PlacementResult:
    """Parse (if needed), validate, then assign.

    The window's own current assignment is ignored during validation so
    moving a window onto a span that overlaps its old one succeeds.
    """
    if isinstance(position, CellSpan):
        span = position
    else:
        parsed = parse_cell_spec(position)
        if not parsed.success or parsed.cell_span is None:
            return PlacementResult(success=False, error=parsed.error or "Invalid cell specification")
        span = parsed.cell_span

    validation = validate_cell_span(span, grid_state, exclude_window_id=window_id)
    if not validation.valid:
        return PlacementResult(success=False, cell_span=span, error=validation.error)

    return PlacementResult(
        success=True,
        cell_span=span,
        grid_state=assign_window_to_grid(window_id, span, grid_state),
    )


def auto_place_window(
    window_id: str,
    grid_state: GridState,
    row_span: int = 1,
    column_span: int = 1,
) -> PlacementResult:
    """Assign a window to the first free span of the given size.

    The window's current assignment, if any, is released first so it can
    be reused by the search.
    """
    search_state = remove_window_from_grid(window_id, grid_state)
    span = find_available_span(row_span, column_span, search_state)
    if span is None:
        return PlacementResult(
            success=False,
            error=(
                f"No free {max(1, row_span)}x{max(1, column_span)} span in "
                f"{grid_state.config.rows}x{grid_state.config.columns} grid"
            ),
        )

    return PlacementResult(
        success=True,
        cell_span=span,
        grid_state=assign_window_to_grid(window_id, span, search_state),
    )


def remove_window_from_grid(window_id: str, grid_state: GridState) -> GridState:
    """Drop a window's assignment. Returns the state unchanged if it had none."""
    if grid_state.get_assignment(window_id) is None:
        return grid_state

    logger.debug(f"Removed window {window_id} from grid")

    return grid_state.model_copy(update={
        "assignments": tuple(a for a in grid_state.assignments if a.window_id != window_id),
        "last_updated": _timestamp(),
    })


def get_window_cell_span(window_id: str, grid_state: GridState) -> Optional[CellSpan]:
    """Span assigned to a window, or None."""
    assignment = grid_state.get_assignment(window_id)
    return assignment.cell_span if assignment else None


def swap_window_positions(window_id_1: str, window_id_2: str, grid_state: GridState) -> GridState:
    """Exchange the spans of two assigned windows.

    Raises:
        PreconditionError: Either window has no assignment (nothing is swapped)
    """
    span_1 = get_window_cell_span(window_id_1, grid_state)
    span_2 = get_window_cell_span(window_id_2, grid_state)

    if span_1 is None or span_2 is None:
        missing = [
            window_id
            for window_id, span in ((window_id_1, span_1), (window_id_2, span_2))
            if span is None
        ]
        raise PreconditionError(
            "Both windows must have grid assignments to swap",
            context={"missing": missing},
        )

    def _swapped(assignment: CellAssignment) -> CellAssignment:
        if assignment.window_id == window_id_1:
            return assignment.model_copy(update={"cell_span": span_2})
        if assignment.window_id == window_id_2:
            return assignment.model_copy(update={"cell_span": span_1})
        return assignment

    logger.debug(f"Swapped windows {window_id_1} and {window_id_2}")

    return grid_state.model_copy(update={
        "assignments": tuple(_swapped(a) for a in grid_state.assignments),
        "last_updated": _timestamp(),
    })


# ============================================================================
# Views
# ============================================================================

def visualize_grid(grid_state: GridState, window_names: Optional[Mapping[str, str]] = None) -> str:
    """ASCII rendering of the grid for diagnostics.

    Example (2x2 grid, window "editor" in A1)::

        +----------------+----------------+
        |     editor     |      [B1]      |
        +----------------+----------------+
        |      [A2]      |      [B2]      |
        +----------------+----------------+
    """
    window_names = window_names or {}
    rows = grid_state.config.rows
    columns = grid_state.config.columns
    width = VISUALIZE_CELL_WIDTH

    labels: Dict[Tuple[int, int], str] = {}
    for assignment in grid_state.assignments:
        span = assignment.cell_span
        name = window_names.get(assignment.window_id) or assignment.window_id[:10]
        for cell in get_cells_in_span(span):
            if 0 <= cell.row < rows and 0 <= cell.column < columns:
                is_origin = cell.row == span.start_row and cell.column == span.start_column
                labels[(cell.row, cell.column)] = name if is_origin else CONTINUATION_MARKER

    separator = "+" + ("-" * width + "+") * columns
    lines = [separator]
    for row in range(rows):
        line = "|"
        for column in range(columns):
            content = labels.get((row, column)) or f"[{calculator.cell_to_excel_notation(row, column)}]"
            content = content[:width]
            line += content.rjust((width + len(content)) // 2).ljust(width) + "|"
        lines.append(line)
        lines.append(separator)

    return "\n".join(lines)


# ============================================================================
# Operations that need monitor geometry
# ============================================================================

async def _require_monitor(monitor_index: int, monitors: MonitorLookup) -> MonitorInfo:
    monitor = await monitors.get_monitor(monitor_index)
    if monitor is None:
        raise NotFoundError(
            ErrorCode.MONITOR_NOT_FOUND,
            f"Monitor {monitor_index} not found",
            context={"monitor_index": monitor_index},
        )
    return monitor


async def calculate_window_rect(
    window_id: str,
    grid_state: GridState,
    monitors: MonitorLookup,
) -> Optional[PixelRect]:
    """Pixel rectangle for a window's assignment, or None if unassigned.

    Raises:
        NotFoundError: The grid's monitor index is unknown
    """
    span = get_window_cell_span(window_id, grid_state)
    if span is None:
        return None

    monitor = await _require_monitor(grid_state.config.monitor_index, monitors)
    return calculator.calculate_cell_rect(span, grid_state.config, monitor)


async def position_window(
    window_id: str,
    window_handle: int,
    grid_state: GridState,
    monitors: MonitorLookup,
    positioner: PositionSink,
) -> PixelRect:
    """Move a window to the rectangle of its grid assignment.

    Positioner failures propagate unchanged.

    Returns:
        The rectangle the window was moved to

    Raises:
        NotFoundError: Window unassigned or monitor unknown
    """
    rect = await calculate_window_rect(window_id, grid_state, monitors)
    if rect is None:
        raise NotFoundError(
            ErrorCode.WINDOW_NOT_ASSIGNED,
            f"No grid assignment found for window {window_id}",
            context={"window_id": window_id},
        )

    await positioner.set_window_position(window_handle, rect, PositionOptions(show_window=True))
    logger.info(
        f"Positioned window {window_id} (handle {window_handle}) at "
        f"{rect.x},{rect.y} {rect.width}x{rect.height}"
    )
    return rect


async def get_cell_dimensions(config: GridConfig, monitors: MonitorLookup) -> CellDimensions:
    """Cell rectangles for a config on its monitor."""
    monitor = await _require_monitor(config.monitor_index, monitors)
    return calculator.calculate_all_cells(config, monitor)


async def get_grid_layout_info(
    grid_state: GridState,
    monitors: MonitorLookup,
    window_kinds: Optional[Mapping[str, Optional[str]]] = None,
) -> GridLayoutInfo:
    """Join state, monitor geometry, assignment rects and free cells."""
    window_kinds = window_kinds or {}
    config = grid_state.config
    monitor = await _require_monitor(config.monitor_index, monitors)

    assignments = tuple(
        AssignmentLayout(
            window_id=a.window_id,
            canvas_kind=window_kinds.get(a.window_id),
            cell_spec=_describe_span(a.cell_span),
            position=calculator.calculate_cell_rect(a.cell_span, config, monitor),
        )
        for a in grid_state.assignments
    )

    return GridLayoutInfo(
        config=config,
        monitor=monitor,
        dimensions=calculator.calculate_all_cells(config, monitor),
        assignments=assignments,
        available_cells=tuple(get_available_cells(grid_state)),
    )
