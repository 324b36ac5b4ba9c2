"""Result models for grid operations that fail on user input.

Parsing, validation and placement report failure as data: the caller
decides whether to show the message, try another span, or raise.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..errors import BoundsError, OverlapError, ParseError
from .grid import CellSpan, GridState


class CellSpecParseResult(BaseModel):
    """Outcome of parsing a cell specification string."""

    model_config = ConfigDict(frozen=True)

    success: bool
    spec: str = Field(default="", description="Text that was parsed")
    cell_span: Optional[CellSpan] = None
    error: Optional[str] = None

    def unwrap(self) -> CellSpan:
        """Return the parsed span or raise ParseError."""
        if not self.success or self.cell_span is None:
            raise ParseError(self.spec, self.error or "Invalid cell specification")
        return self.cell_span


class SpanValidationResult(BaseModel):
    """Outcome of checking a span against a grid state."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    error: Optional[str] = None
    reason: Optional[Literal["bounds", "overlap"]] = None
    rows: Optional[int] = None
    columns: Optional[int] = None
    conflicting_window_id: Optional[str] = None
    conflicting_span: Optional[CellSpan] = None
    conflicting_cell_spec: Optional[str] = None

    def raise_for_error(self) -> None:
        """Raise BoundsError or OverlapError if the span was rejected."""
        if self.valid:
            return
        if self.reason == "overlap":
            raise OverlapError(
                self.error or "Cell span overlaps an existing assignment",
                window_id=self.conflicting_window_id or "",
                cell_spec=self.conflicting_cell_spec or "",
            )
        raise BoundsError(
            self.error or "Cell span is outside grid bounds",
            rows=self.rows or 0,
            columns=self.columns or 0,
        )


class PlacementResult(BaseModel):
    """Outcome of an atomic validate-then-assign placement."""

    model_config = ConfigDict(frozen=True)

    success: bool
    grid_state: Optional[GridState] = None
    cell_span: Optional[CellSpan] = None
    error: Optional[str] = None
