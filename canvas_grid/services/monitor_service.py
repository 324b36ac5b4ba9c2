"""
Monitor service: output geometry from Sway/i3 IPC, with a TTL cache.

``SwayMonitorService`` reads GET_OUTPUTS and GET_WORKSPACES. Active outputs
are indexed in IPC order. The work area of an output is the rect of its
visible workspace, which already excludes bars; if no workspace is
visible on it the full output rect is used.

``MonitorCache`` fronts any monitor source with an explicit TTL and an
injectable clock, so tests can control time.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Protocol

from ..errors import ErrorCode, NotFoundError
from ..models.grid import MonitorInfo

if TYPE_CHECKING:
    from i3ipc.aio import Connection

logger = logging.getLogger(__name__)


class MonitorSource(Protocol):
    """Anything that can enumerate monitors."""

    async def get_all_monitors(self) -> List[MonitorInfo]: ...


class SwayMonitorService:
    """Monitor enumeration over an i3ipc async connection.

    Example:
        >>> conn = await i3ipc.aio.Connection(auto_reconnect=True).connect()
        >>> service = SwayMonitorService(conn)
        >>> monitor = await service.get_monitor(0)
    """

    def __init__(self, conn: Connection):
        """
        Args:
            conn: Connected i3ipc.aio.Connection
        """
        self.conn = conn

    async def get_all_monitors(self) -> List[MonitorInfo]:
        """Enumerate active outputs.

        Raises:
            ConnectionError: IPC query failed
        """
        try:
            outputs = await self.conn.get_outputs()
            workspaces = await self.conn.get_workspaces()
        except Exception as e:
            logger.error(f"Monitor query failed: {type(e).__name__}: {e}")
            raise ConnectionError(f"Failed to query outputs: {type(e).__name__}: {e}") from e

        active = [o for o in outputs if o.active]
        work_areas = {ws.output: ws.rect for ws in workspaces if ws.visible}

        primary_index = next(
            (i for i, o in enumerate(active) if getattr(o, "primary", False)),
            0,
        )

        monitors = []
        for index, output in enumerate(active):
            work_area = work_areas.get(output.name, output.rect)
            monitors.append(MonitorInfo(
                index=index,
                name=output.name,
                width=output.rect.width,
                height=output.rect.height,
                work_area_x=work_area.x,
                work_area_y=work_area.y,
                work_area_width=work_area.width,
                work_area_height=work_area.height,
                scale_factor=getattr(output, "scale", None) or 1.0,
                is_primary=index == primary_index,
            ))

        logger.debug(f"Found {len(monitors)} active outputs: {[m.name for m in monitors]}")
        return monitors

    async def get_monitor(self, index: int) -> Optional[MonitorInfo]:
        """Monitor by zero-based index, or None."""
        for monitor in await self.get_all_monitors():
            if monitor.index == index:
                return monitor
        return None


class MonitorCache:
    """TTL cache in front of a monitor source.

    Example:
        >>> cache = MonitorCache(SwayMonitorService(conn), ttl_seconds=5.0)
        >>> monitors = await cache.get_all_monitors()   # fetch
        >>> monitors = await cache.get_all_monitors()   # hit (within 5s)
    """

    def __init__(
        self,
        source: MonitorSource,
        ttl_seconds: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            source: Monitor source to cache
            ttl_seconds: Entry lifetime in seconds
            clock: Monotonic time source in seconds
        """
        self.source = source
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._monitors: Optional[List[MonitorInfo]] = None
        self._fetched_at = 0.0
        self._hits = 0
        self._misses = 0

    @property
    def is_fresh(self) -> bool:
        return (
            self._monitors is not None and
            (self.clock() - self._fetched_at) < self.ttl_seconds
        )

    async def get_all_monitors(self, force_refresh: bool = False) -> List[MonitorInfo]:
        """Cached monitor list, refreshed when stale or forced."""
        if not force_refresh and self.is_fresh:
            self._hits += 1
            return list(self._monitors)

        self._misses += 1
        self._monitors = list(await self.source.get_all_monitors())
        self._fetched_at = self.clock()
        logger.debug(f"Monitor cache refreshed ({len(self._monitors)} monitors)")
        return list(self._monitors)

    async def get_monitor(self, index: int) -> Optional[MonitorInfo]:
        """Monitor by index, or None."""
        for monitor in await self.get_all_monitors():
            if monitor.index == index:
                return monitor
        return None

    async def get_primary_monitor(self) -> MonitorInfo:
        """Primary monitor, falling back to the first one.

        Raises:
            NotFoundError: No monitors detected
        """
        monitors = await self.get_all_monitors()
        if not monitors:
            raise NotFoundError(ErrorCode.MONITOR_NOT_FOUND, "No monitors detected")
        return next((m for m in monitors if m.is_primary), monitors[0])

    async def get_monitor_count(self) -> int:
        return len(await self.get_all_monitors())

    def clear(self) -> None:
        """Drop the cached list (call when outputs change)."""
        self._monitors = None
        self._fetched_at = 0.0

    @property
    def stats(self) -> Dict[str, int]:
        return {"hits": self._hits, "misses": self._misses}
