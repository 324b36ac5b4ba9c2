"""Rich formatters for canvas-grid CLI output."""

from typing import Iterable, Mapping, Optional

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.cell_calculator import cell_to_excel_notation, format_cell_span, format_cell_span_coords
from ..core.grid_manager import visualize_grid
from ..errors import GridError
from ..models.grid import CellAddress, CellSpan, GridLayoutInfo, GridState


def format_assignments(state: GridState) -> Table:
    """Table of a state's assignments in both notations."""
    config = state.config
    table = Table(
        title=f"Desktop {state.desktop_index} ({config.rows}x{config.columns}, monitor {config.monitor_index})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Window", style="bold green")
    table.add_column("Cells", style="yellow")
    table.add_column("Coords", style="blue")
    table.add_column("Size", justify="right", style="magenta")

    for assignment in state.assignments:
        span = assignment.cell_span
        table.add_row(
            escape(assignment.window_id),
            format_cell_span(span),
            format_cell_span_coords(span),
            f"{span.row_span}x{span.column_span}",
        )

    if not state.assignments:
        table.add_row("[dim](no windows)[/dim]", "", "", "")

    return table


def format_layout(layout: GridLayoutInfo) -> Table:
    """Table of assignments with their pixel rectangles."""
    monitor = layout.monitor
    table = Table(
        title=(
            f"{monitor.name}: {monitor.work_area_width}x{monitor.work_area_height}"
            f"+{monitor.work_area_x}+{monitor.work_area_y} "
            f"(cell {layout.dimensions.cell_width}x{layout.dimensions.cell_height})"
        ),
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Window", style="bold green")
    table.add_column("Kind", style="dim")
    table.add_column("Cells", style="yellow")
    table.add_column("Position", justify="right")
    table.add_column("Size", justify="right", style="magenta")

    for item in layout.assignments:
        rect = item.position
        table.add_row(
            escape(item.window_id),
            escape(item.canvas_kind or "-"),
            item.cell_spec,
            f"{rect.x},{rect.y}",
            f"{rect.width}x{rect.height}",
        )

    return table


def format_available(cells: Iterable[CellAddress]) -> Text:
    cells = list(cells)
    if not cells:
        return Text("Grid is full", style="yellow")
    labels = ", ".join(cell_to_excel_notation(c.row, c.column) for c in cells)
    return Text(f"{len(cells)} free: {labels}")


def format_span(span: CellSpan) -> str:
    return f"[bold]{format_cell_span(span)}[/bold] ({format_cell_span_coords(span)})"


def format_grid(state: GridState, window_names: Optional[Mapping[str, str]] = None) -> Panel:
    """ASCII grid in a panel; markup is disabled so [A1] labels survive."""
    return Panel(
        Text(visualize_grid(state, window_names)),
        title=f"Desktop {state.desktop_index}",
        expand=False,
    )


def format_error(error: GridError) -> str:
    message = f"[red]Error:[/red] {escape(error.message)}"
    if error.suggestion:
        message += f"\n[dim]{escape(error.suggestion)}[/dim]"
    return message
