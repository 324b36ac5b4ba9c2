"""
canvas-grid CLI

Usage:
    canvas-grid init [--rows R] [--columns C] [--gap PX] [--monitor M] [--force]
    canvas-grid parse SPEC [--json]
    canvas-grid assign WINDOW SPEC
    canvas-grid auto WINDOW [--rows R] [--columns C]
    canvas-grid remove WINDOW
    canvas-grid swap WINDOW_A WINDOW_B
    canvas-grid find ROWS COLUMNS [--json]
    canvas-grid available [--json]
    canvas-grid status [--json]
    canvas-grid show [--name WINDOW=LABEL ...]
    canvas-grid layout [--kind WINDOW=KIND ...] [--json]
    canvas-grid position WINDOW HANDLE

Exit codes:
    0 - Success
    1 - Invalid placement, parse error or unknown window/monitor
    2 - Sway IPC unavailable or command rejected
"""

import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from ..config import GridSettings, load_settings
from ..core import grid_manager
from ..errors import GridError, WindowCommandError
from ..models.grid import GridState
from ..services.monitor_service import MonitorCache, SwayMonitorService
from ..services.state_store import GridStateStore
from ..services.window_positioner import SwayWindowPositioner
from . import formatters
from .logging_config import log_timing, setup_logging

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

EXIT_USER_ERROR = 1
EXIT_IPC_ERROR = 2


@dataclass
class CliContext:
    settings: GridSettings
    store: GridStateStore
    desktop: int


async def connect_sway():
    """Open an i3ipc async connection to the running Sway/i3 instance."""
    from i3ipc.aio import Connection

    return await Connection(auto_reconnect=False).connect()


def _print_error(message: Optional[str]) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message or 'unknown error')}", highlight=False)


def _fail(error: GridError) -> None:
    err_console.print(formatters.format_error(error))
    exit_code = EXIT_IPC_ERROR if isinstance(error, WindowCommandError) else EXIT_USER_ERROR
    sys.exit(exit_code)


def _parse_pairs(values: Tuple[str, ...], option: str) -> Dict[str, str]:
    """Turn ('win=Label', ...) into {'win': 'Label'}."""
    pairs = {}
    for value in values:
        key, sep, label = value.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected WINDOW=VALUE, got '{value}'", param_hint=option)
        pairs[key] = label
    return pairs


def _load_state(obj: CliContext) -> GridState:
    """Stored state for the selected desktop, or a fresh default one."""
    try:
        state = obj.store.load(obj.desktop)
    except GridError as e:
        _fail(e)
    if state is None:
        logger.info(f"No grid state for desktop {obj.desktop}, using defaults")
        state = grid_manager.initialize_grid_state(obj.desktop, obj.settings.grid_config())
    return state


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2))


def _run_with_sway(coro_factory):
    """Run ``coro_factory(conn)`` against a fresh Sway connection.

    Connection and IPC query failures exit with EXIT_IPC_ERROR; GridError
    propagates to the command.
    """

    async def runner():
        with log_timing("Sway connect", logger):
            try:
                conn = await connect_sway()
            except Exception as e:
                raise ConnectionError(f"Cannot connect to Sway/i3 IPC: {e}") from e
        try:
            return await coro_factory(conn)
        finally:
            conn.main_quit()

    try:
        return asyncio.run(runner())
    except ConnectionError as e:
        _print_error(str(e))
        sys.exit(EXIT_IPC_ERROR)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Settings file (default: ~/.config/canvas-grid/config.json)")
@click.option("--state-dir", type=click.Path(path_type=Path), default=None,
              help="Directory for stored grid states")
@click.option("--desktop", "-d", type=click.IntRange(min=0), default=0, show_default=True,
              help="Virtual desktop index")
@click.pass_context
def cli(ctx, verbose: bool, debug: bool, config_path: Optional[Path],
        state_dir: Optional[Path], desktop: int):
    """Place canvas windows on a logical screen grid."""
    setup_logging(verbose=verbose, debug=debug, console=err_console)

    try:
        settings = load_settings(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))

    if state_dir is not None:
        settings = settings.model_copy(update={"state_dir": state_dir})

    ctx.obj = CliContext(settings=settings, store=GridStateStore(settings.state_dir), desktop=desktop)


@cli.command()
@click.option("--rows", type=int, default=None, help="Grid rows")
@click.option("--columns", type=int, default=None, help="Grid columns")
@click.option("--gap", type=int, default=None, help="Gap between cells (pixels, both axes)")
@click.option("--margin", type=int, default=None, help="Margin on all four edges (pixels)")
@click.option("--monitor", type=int, default=None, help="Monitor index")
@click.option("--force", is_flag=True, help="Replace an existing grid state")
@click.pass_obj
def init(obj: CliContext, rows, columns, gap, margin, monitor, force: bool):
    """Create the grid for a desktop."""
    if obj.store.path_for(obj.desktop).exists() and not force:
        raise click.ClickException(
            f"Desktop {obj.desktop} already has a grid (use --force to replace it)"
        )

    try:
        config = obj.settings.grid_config(
            rows=rows,
            columns=columns,
            monitor_index=monitor,
            cell_gap_horizontal=gap,
            cell_gap_vertical=gap,
            margin_top=margin,
            margin_bottom=margin,
            margin_left=margin,
            margin_right=margin,
        )
    except ValidationError as e:
        for error in e.errors():
            field_name = ".".join(str(part) for part in error["loc"])
            _print_error(f"{field_name}: {error['msg']}")
        sys.exit(EXIT_USER_ERROR)

    state = grid_manager.initialize_grid_state(obj.desktop, config)
    path = obj.store.save(state)
    console.print(f"Created {config.rows}x{config.columns} grid for desktop {obj.desktop}: {path}")
    console.print(formatters.format_grid(state))


@cli.command()
@click.argument("spec")
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
def parse(spec: str, output_json: bool):
    """Parse a cell specification (A1, A1:C2, 0,0, 0,0:2x3)."""
    result = grid_manager.parse_cell_spec(spec)

    if output_json:
        _echo_json(result.model_dump(mode="json"))
    elif result.success:
        console.print(formatters.format_span(result.cell_span))

    if not result.success:
        if not output_json:
            _print_error(result.error)
        sys.exit(EXIT_USER_ERROR)


@cli.command()
@click.argument("window_id")
@click.argument("spec")
@click.pass_obj
def assign(obj: CliContext, window_id: str, spec: str):
    """Place WINDOW_ID on SPEC if the cells are free."""
    state = _load_state(obj)
    result = grid_manager.place_window(window_id, spec, state)
    if not result.success:
        _print_error(result.error)
        sys.exit(EXIT_USER_ERROR)

    obj.store.save(result.grid_state)
    console.print(f"{escape(window_id)} -> {formatters.format_span(result.cell_span)}")


@cli.command()
@click.argument("window_id")
@click.option("--rows", type=int, default=1, show_default=True, help="Rows to occupy")
@click.option("--columns", type=int, default=1, show_default=True, help="Columns to occupy")
@click.pass_obj
def auto(obj: CliContext, window_id: str, rows: int, columns: int):
    """Place WINDOW_ID on the first free span of the given size."""
    state = _load_state(obj)
    result = grid_manager.auto_place_window(window_id, state, row_span=rows, column_span=columns)
    if not result.success:
        _print_error(result.error)
        sys.exit(EXIT_USER_ERROR)

    obj.store.save(result.grid_state)
    console.print(f"{escape(window_id)} -> {formatters.format_span(result.cell_span)}")


@cli.command()
@click.argument("window_id")
@click.pass_obj
def remove(obj: CliContext, window_id: str):
    """Release the cells held by WINDOW_ID."""
    state = _load_state(obj)
    if grid_manager.get_window_cell_span(window_id, state) is None:
        console.print(f"[yellow]{escape(window_id)} is not on the grid[/yellow]")
        return

    obj.store.save(grid_manager.remove_window_from_grid(window_id, state))
    console.print(f"Removed {escape(window_id)}")


@cli.command()
@click.argument("window_a")
@click.argument("window_b")
@click.pass_obj
def swap(obj: CliContext, window_a: str, window_b: str):
    """Exchange the cells of two windows."""
    state = _load_state(obj)
    try:
        new_state = grid_manager.swap_window_positions(window_a, window_b, state)
    except GridError as e:
        _fail(e)

    obj.store.save(new_state)
    console.print(f"Swapped {escape(window_a)} and {escape(window_b)}")


@cli.command()
@click.argument("rows", type=int)
@click.argument("columns", type=int)
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
@click.pass_obj
def find(obj: CliContext, rows: int, columns: int, output_json: bool):
    """Report the first free ROWS x COLUMNS span."""
    span = grid_manager.find_available_span(rows, columns, _load_state(obj))

    if output_json:
        _echo_json(span.model_dump(mode="json") if span else None)
    elif span is not None:
        console.print(formatters.format_span(span))
    else:
        console.print(f"[yellow]No free {rows}x{columns} span[/yellow]")

    if span is None:
        sys.exit(EXIT_USER_ERROR)


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
@click.pass_obj
def available(obj: CliContext, output_json: bool):
    """List unoccupied cells."""
    cells = grid_manager.get_available_cells(_load_state(obj))
    if output_json:
        _echo_json([c.model_dump() for c in cells])
    else:
        console.print(formatters.format_available(cells))


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
@click.pass_obj
def status(obj: CliContext, output_json: bool):
    """Show the stored grid state."""
    state = _load_state(obj)
    if output_json:
        _echo_json(state.model_dump(mode="json"))
    else:
        console.print(formatters.format_assignments(state))


@cli.command()
@click.option("--name", "names", multiple=True, help="Display name as WINDOW=LABEL")
@click.pass_obj
def show(obj: CliContext, names: Tuple[str, ...]):
    """Draw the grid as ASCII."""
    state = _load_state(obj)
    console.print(formatters.format_grid(state, _parse_pairs(names, "--name")))


@cli.command()
@click.option("--kind", "kinds", multiple=True, help="Canvas kind as WINDOW=KIND")
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
@click.pass_obj
def layout(obj: CliContext, kinds: Tuple[str, ...], output_json: bool):
    """Show pixel rectangles of every assignment (queries Sway)."""
    state = _load_state(obj)
    window_kinds = _parse_pairs(kinds, "--kind")

    async def query(conn):
        monitors = MonitorCache(SwayMonitorService(conn), ttl_seconds=obj.settings.monitor_cache_ttl_seconds)
        return await grid_manager.get_grid_layout_info(state, monitors, window_kinds)

    try:
        info = _run_with_sway(query)
    except GridError as e:
        _fail(e)

    if output_json:
        _echo_json(info.model_dump(mode="json"))
    else:
        console.print(formatters.format_layout(info))


@cli.command()
@click.argument("window_id")
@click.argument("handle", type=int)
@click.pass_obj
def position(obj: CliContext, window_id: str, handle: int):
    """Move Sway container HANDLE to the cells of WINDOW_ID."""
    state = _load_state(obj)

    async def place(conn):
        monitors = SwayMonitorService(conn)
        positioner = SwayWindowPositioner(conn)
        return await grid_manager.position_window(window_id, handle, state, monitors, positioner)

    try:
        rect = _run_with_sway(place)
    except GridError as e:
        _fail(e)

    console.print(f"{escape(window_id)} -> {rect.x},{rect.y} {rect.width}x{rect.height}")


def main() -> None:
    cli(prog_name="canvas-grid")
