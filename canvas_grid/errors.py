"""
Error handling for the canvas grid layout engine.

Structured error codes shared by the grid algebra, the Sway adapters and
the CLI. Functions that validate user input return result models instead
of raising; the exceptions below are for conditions the caller was
expected to rule out (unknown monitor, swap of an unassigned window) and
for adapter failures.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(Enum):
    """
    Error codes for canvas-grid.

    - 1000-1099: Cell specification / placement errors
    - 1100-1199: Lookup errors
    - 1200-1299: Window positioning errors
    - 1300-1399: State store errors
    """

    # Placement errors (1000-1099)
    PARSE_ERROR = 1000
    OUT_OF_BOUNDS = 1001
    OVERLAP = 1002
    PRECONDITION_FAILED = 1003

    # Lookup errors (1100-1199)
    MONITOR_NOT_FOUND = 1100
    WINDOW_NOT_ASSIGNED = 1101
    WINDOW_NOT_FOUND = 1102

    # Window positioning errors (1200-1299)
    WINDOW_COMMAND_FAILED = 1200

    # State store errors (1300-1399)
    STATE_LOAD_FAILED = 1300


class GridError(Exception):
    """Base exception for grid layout errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize grid error.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            suggestion: Suggested recovery action
            context: Additional context for debugging
        """
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to a JSON-friendly dictionary.

        Returns:
            Error dictionary with code, message, suggestion, and context
        """
        result = {
            "code": self.code.value,
            "name": self.code.name,
            "message": self.message
        }

        if self.suggestion:
            result["suggestion"] = self.suggestion

        if self.context:
            result["context"] = self.context

        return result


class ParseError(GridError):
    """Malformed cell specification text or zero/negative span dimension."""

    def __init__(self, spec: str, reason: str):
        super().__init__(
            code=ErrorCode.PARSE_ERROR,
            message=reason,
            suggestion="Use 'row,col', 'row,col:RxC', 'A1' or 'A1:C2'",
            context={"spec": spec}
        )


class BoundsError(GridError):
    """Cell span extends past the grid extents."""

    def __init__(self, message: str, rows: int, columns: int):
        super().__init__(
            code=ErrorCode.OUT_OF_BOUNDS,
            message=message,
            suggestion=f"Pick a span inside the {rows}x{columns} grid",
            context={"rows": rows, "columns": columns}
        )


class OverlapError(GridError):
    """Cell span collides with an existing assignment."""

    def __init__(self, message: str, window_id: str, cell_spec: str):
        super().__init__(
            code=ErrorCode.OVERLAP,
            message=message,
            suggestion=f"Remove or move window {window_id} first",
            context={"window_id": window_id, "cell_spec": cell_spec}
        )


class NotFoundError(GridError):
    """Unknown monitor index, unassigned window or unknown window handle."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(code=code, message=message, context=context)


class PreconditionError(GridError):
    """Operation requested on windows that are not in the required state."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.PRECONDITION_FAILED,
            message=message,
            suggestion="Assign both windows to the grid before swapping",
            context=context
        )


class WindowCommandError(GridError):
    """Sway/i3 rejected a window positioning command."""

    def __init__(self, command: str, reason: str):
        super().__init__(
            code=ErrorCode.WINDOW_COMMAND_FAILED,
            message=f"Window command failed: {reason}",
            suggestion="Ensure Sway is running and the window still exists",
            context={"command": command, "reason": reason}
        )


class StateLoadError(GridError):
    """Stored grid state could not be read back."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(
            code=ErrorCode.STATE_LOAD_FAILED,
            message=f"Failed to load grid state from {file_path}: {reason}",
            suggestion="Delete the file or re-run 'canvas-grid init --force'",
            context={"file_path": file_path, "reason": reason}
        )
