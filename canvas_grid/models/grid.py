"""Grid layout models.

Pydantic models for the logical grid that partitions a monitor's work
area into cells, plus the pixel geometry derived from it. All models are
frozen: every grid mutation returns a new value instead of updating one
in place, so callers can keep or discard earlier snapshots freely.
"""

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Domain 1: Logical cells
# ============================================================================

class CellAddress(BaseModel):
    """Zero-indexed cell coordinate."""

    model_config = ConfigDict(frozen=True)

    row: int = Field(..., description="Row index (0 = top)")
    column: int = Field(..., description="Column index (0 = left)")


class CellSpan(BaseModel):
    """Rectangular run of cells, anchored at its top-left cell.

    Use ``cell_span()``/``single_cell()`` to build spans from untrusted
    numbers; they clamp the dimensions to 1 instead of rejecting them.
    """

    model_config = ConfigDict(frozen=True)

    start_row: int = Field(..., description="Top row of the span")
    start_column: int = Field(..., description="Left column of the span")
    row_span: int = Field(default=1, ge=1, description="Number of rows covered")
    column_span: int = Field(default=1, ge=1, description="Number of columns covered")

    @property
    def end_row(self) -> int:
        """Last covered row (inclusive)."""
        return self.start_row + self.row_span - 1

    @property
    def end_column(self) -> int:
        """Last covered column (inclusive)."""
        return self.start_column + self.column_span - 1

    @property
    def is_single_cell(self) -> bool:
        return self.row_span == 1 and self.column_span == 1


# ============================================================================
# Domain 2: Screen geometry
# ============================================================================

class PixelRect(BaseModel):
    """Absolute pixel rectangle."""

    model_config = ConfigDict(frozen=True)

    x: int = Field(..., description="Left edge (pixels)")
    y: int = Field(..., description="Top edge (pixels)")
    width: int = Field(..., description="Width (pixels)")
    height: int = Field(..., description="Height (pixels)")

    def contains_point(self, x: int, y: int) -> bool:
        """Half-open containment: the right and bottom edges are outside."""
        return (self.x <= x < self.x + self.width and
                self.y <= y < self.y + self.height)


class PixelPoint(BaseModel):
    """Absolute pixel coordinate."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int


class CellSize(BaseModel):
    """Size of one grid cell in pixels."""

    model_config = ConfigDict(frozen=True)

    width: int
    height: int


class RemainingSpace(BaseModel):
    """Pixels left over per axis after laying out whole cells and gaps."""

    model_config = ConfigDict(frozen=True)

    horizontal: int
    vertical: int


class MonitorInfo(BaseModel):
    """Physical display geometry as reported by the monitor service.

    ``work_area_*`` already excludes bars/docks reserved by the compositor.
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0, description="Zero-based monitor index")
    name: str = Field(..., description="Output identifier (HDMI-A-1, eDP-1, etc.)")
    width: int = Field(..., ge=0, description="Output width in pixels")
    height: int = Field(..., ge=0, description="Output height in pixels")
    work_area_x: int = Field(default=0, description="Work area left edge")
    work_area_y: int = Field(default=0, description="Work area top edge")
    work_area_width: int = Field(..., ge=0, description="Work area width")
    work_area_height: int = Field(..., ge=0, description="Work area height")
    scale_factor: float = Field(default=1.0, gt=0.0, description="DPI scale factor")
    is_primary: bool = Field(default=False, description="Primary output flag")

    @property
    def work_area(self) -> PixelRect:
        return PixelRect(
            x=self.work_area_x,
            y=self.work_area_y,
            width=self.work_area_width,
            height=self.work_area_height,
        )


# ============================================================================
# Domain 3: Grid configuration and state
# ============================================================================

class GridConfig(BaseModel):
    """Parameters of one grid partition.

    Defaults describe a 3x3 grid on monitor 0 with 4px gaps and no margins.
    Build partial configurations with ``canvas_grid.config.build_grid_config``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    rows: int = Field(default=3, ge=1, description="Number of grid rows")
    columns: int = Field(default=3, ge=1, description="Number of grid columns")
    monitor_index: int = Field(default=0, ge=0, description="Monitor this grid applies to")

    cell_gap_horizontal: int = Field(default=4, ge=0, description="Gap between columns (pixels)")
    cell_gap_vertical: int = Field(default=4, ge=0, description="Gap between rows (pixels)")

    margin_top: int = Field(default=0, ge=0, description="Top margin (pixels)")
    margin_bottom: int = Field(default=0, ge=0, description="Bottom margin (pixels)")
    margin_left: int = Field(default=0, ge=0, description="Left margin (pixels)")
    margin_right: int = Field(default=0, ge=0, description="Right margin (pixels)")

    @property
    def cell_count(self) -> int:
        return self.rows * self.columns


DEFAULT_GRID_CONFIG = GridConfig()


class CellAssignment(BaseModel):
    """Binds one window identifier to one cell span."""

    model_config = ConfigDict(frozen=True)

    window_id: str = Field(..., description="Opaque window identifier")
    cell_span: CellSpan = Field(..., description="Cells occupied by the window")
    z_index: Optional[int] = Field(default=None, description="Stacking hint (unused by placement)")


class GridState(BaseModel):
    """Layout of one virtual desktop.

    Plain data: ``model_dump(mode="json")`` is the persisted shape.
    """

    model_config = ConfigDict(frozen=True)

    desktop_index: int = Field(default=0, ge=0, description="Virtual desktop index")
    config: GridConfig = Field(default_factory=GridConfig)
    assignments: Tuple[CellAssignment, ...] = Field(default=())
    last_updated: str = Field(..., description="ISO-8601 timestamp of the last mutation")

    @property
    def window_ids(self) -> Tuple[str, ...]:
        return tuple(a.window_id for a in self.assignments)

    def get_assignment(self, window_id: str) -> Optional[CellAssignment]:
        """Return the assignment for a window, or None."""
        for assignment in self.assignments:
            if assignment.window_id == window_id:
                return assignment
        return None


# ============================================================================
# Domain 4: Derived views (computed on demand, never stored)
# ============================================================================

class CellRect(BaseModel):
    """Pixel rectangle of one unit cell."""

    model_config = ConfigDict(frozen=True)

    row: int
    column: int
    rect: PixelRect


class CellDimensions(BaseModel):
    """Unit cell size plus every cell's rectangle, row-major."""

    model_config = ConfigDict(frozen=True)

    cell_width: int
    cell_height: int
    cells: Tuple[CellRect, ...] = ()


class AssignmentLayout(BaseModel):
    """One assignment joined with its display kind and pixel position."""

    model_config = ConfigDict(frozen=True)

    window_id: str
    canvas_kind: Optional[str] = None
    cell_spec: str
    position: PixelRect


class GridLayoutInfo(BaseModel):
    """Everything a presentation layer needs to draw the grid."""

    model_config = ConfigDict(frozen=True)

    config: GridConfig
    monitor: MonitorInfo
    dimensions: CellDimensions
    assignments: Tuple[AssignmentLayout, ...] = ()
    available_cells: Tuple[CellAddress, ...] = ()


# ============================================================================
# Domain 5: Window positioning options
# ============================================================================

class PositionOptions(BaseModel):
    """Flags for a single window placement."""

    model_config = ConfigDict(frozen=True)

    no_activate: bool = Field(default=False, description="Do not focus the window")
    show_window: bool = Field(default=True, description="Bring the window back if hidden")
    top_most: bool = Field(default=False, description="Keep the window visible across workspaces")


class FrameSize(BaseModel):
    """Decoration extents around a window's client area (pixels)."""

    model_config = ConfigDict(frozen=True)

    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0
