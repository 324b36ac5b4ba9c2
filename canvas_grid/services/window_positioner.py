"""
Window positioning over Sway/i3 IPC.

Windows are addressed by container id (``con_id``). A placement restores
the window first (leaves fullscreen, pulls it out of the scratchpad), then
floats it, resizes it and moves it to the absolute pixel position. All
commands for one window are chained with commas so they share the same
``[con_id=N]`` criteria.

No retries: a failed command raises WindowCommandError and the caller
decides what to do.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Protocol

from ..errors import ErrorCode, NotFoundError, WindowCommandError
from ..models.grid import FrameSize, PixelRect, PositionOptions

if TYPE_CHECKING:
    from i3ipc.aio import Connection, Con

logger = logging.getLogger(__name__)

SCRATCHPAD_WORKSPACE = "__i3_scratch"


class WindowPositioner(Protocol):
    """Operations the grid needs from a window system."""

    async def set_window_position(
        self,
        window_handle: int,
        rect: PixelRect,
        options: Optional[PositionOptions] = None,
    ) -> None: ...

    async def get_window_position(self, window_handle: int) -> PixelRect: ...

    async def is_window_valid(self, window_handle: int) -> bool: ...

    async def bring_to_foreground(self, window_handle: int) -> None: ...

    async def minimize_window(self, window_handle: int) -> None: ...

    async def restore_window(self, window_handle: int) -> None: ...

    async def get_window_frame_size(self, window_handle: int) -> FrameSize: ...


def build_position_commands(
    rect: PixelRect,
    options: PositionOptions,
    fullscreen: bool = False,
    in_scratchpad: bool = False,
) -> List[str]:
    """Sway commands (without criteria) that place a window at ``rect``."""
    commands = []
    if fullscreen:
        commands.append("fullscreen disable")
    if in_scratchpad and options.show_window:
        commands.append("scratchpad show")
    commands.extend([
        "floating enable",
        f"resize set {rect.width} px {rect.height} px",
        f"move absolute position {rect.x} px {rect.y} px",
    ])
    if options.top_most:
        commands.append("sticky enable")
    if not options.no_activate:
        commands.append("focus")
    return commands


class SwayWindowPositioner:
    """WindowPositioner backed by an i3ipc async connection."""

    def __init__(self, conn: Connection):
        """
        Args:
            conn: Connected i3ipc.aio.Connection
        """
        self.conn = conn

    async def _find_window(self, window_handle: int) -> Con:
        tree = await self.conn.get_tree()
        window = tree.find_by_id(window_handle)
        if window is None:
            raise NotFoundError(
                ErrorCode.WINDOW_NOT_FOUND,
                f"Window {window_handle} not found",
                context={"window_handle": window_handle},
            )
        return window

    @staticmethod
    def _in_scratchpad(window: Con) -> bool:
        workspace = window.workspace()
        return workspace is not None and workspace.name == SCRATCHPAD_WORKSPACE

    async def _run(self, window_handle: int, commands: List[str]) -> None:
        command = f"[con_id={window_handle}] " + ", ".join(commands)
        logger.debug(f"Sway command: {command}")

        replies = await self.conn.command(command)
        for reply in replies:
            if not reply.success:
                reason = getattr(reply, "error", None) or "unknown error"
                logger.error(f"Sway command failed: {command}: {reason}")
                raise WindowCommandError(command, reason)

    async def set_window_position(
        self,
        window_handle: int,
        rect: PixelRect,
        options: Optional[PositionOptions] = None,
    ) -> None:
        """Restore, float, resize and move a window to ``rect``."""
        options = options or PositionOptions()
        window = await self._find_window(window_handle)

        commands = build_position_commands(
            rect,
            options,
            fullscreen=bool(getattr(window, "fullscreen_mode", 0)),
            in_scratchpad=self._in_scratchpad(window),
        )
        await self._run(window_handle, commands)

    async def get_window_position(self, window_handle: int) -> PixelRect:
        window = await self._find_window(window_handle)
        return PixelRect(
            x=window.rect.x,
            y=window.rect.y,
            width=window.rect.width,
            height=window.rect.height,
        )

    async def is_window_valid(self, window_handle: int) -> bool:
        tree = await self.conn.get_tree()
        return tree.find_by_id(window_handle) is not None

    async def bring_to_foreground(self, window_handle: int) -> None:
        window = await self._find_window(window_handle)
        commands = ["scratchpad show"] if self._in_scratchpad(window) else []
        commands.append("focus")
        await self._run(window_handle, commands)

    async def minimize_window(self, window_handle: int) -> None:
        """Hide a window in the scratchpad."""
        await self._find_window(window_handle)
        await self._run(window_handle, ["move scratchpad"])

    async def restore_window(self, window_handle: int) -> None:
        """Bring a window back from the scratchpad or fullscreen."""
        window = await self._find_window(window_handle)
        commands = []
        if getattr(window, "fullscreen_mode", 0):
            commands.append("fullscreen disable")
        if self._in_scratchpad(window):
            commands.append("scratchpad show")
        if commands:
            await self._run(window_handle, commands)

    async def get_window_frame_size(self, window_handle: int) -> FrameSize:
        """Border and title bar extents around the client area."""
        window = await self._find_window(window_handle)
        outer = window.rect
        inner = window.window_rect
        title_height = window.deco_rect.height if window.deco_rect else 0

        return FrameSize(
            left=max(0, inner.x),
            top=max(0, inner.y + title_height),
            right=max(0, outer.width - inner.x - inner.width),
            bottom=max(0, outer.height - inner.y - inner.height),
        )
