"""
Pydantic models for canvas-grid.

- grid.py: cells, spans, monitor geometry, grid config/state, layout views
- results.py: structured outcomes of parsing, validation and placement
"""

from .grid import (
    CellAddress,
    CellSpan,
    PixelRect,
    PixelPoint,
    CellSize,
    RemainingSpace,
    MonitorInfo,
    GridConfig,
    DEFAULT_GRID_CONFIG,
    CellAssignment,
    GridState,
    CellRect,
    CellDimensions,
    AssignmentLayout,
    GridLayoutInfo,
    PositionOptions,
    FrameSize,
)
from .results import (
    CellSpecParseResult,
    SpanValidationResult,
    PlacementResult,
)

__all__ = [
    "CellAddress",
    "CellSpan",
    "PixelRect",
    "PixelPoint",
    "CellSize",
    "RemainingSpace",
    "MonitorInfo",
    "GridConfig",
    "DEFAULT_GRID_CONFIG",
    "CellAssignment",
    "GridState",
    "CellRect",
    "CellDimensions",
    "AssignmentLayout",
    "GridLayoutInfo",
    "PositionOptions",
    "FrameSize",
    "CellSpecParseResult",
    "SpanValidationResult",
    "PlacementResult",
]
