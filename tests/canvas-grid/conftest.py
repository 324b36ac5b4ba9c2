"""Pytest configuration for canvas-grid tests.

Shared fixtures: the reference 1920x1040 monitor, in-memory monitor
sources, a recording window positioner and mock i3ipc objects.
"""

from typing import List, Optional

import pytest

from canvas_grid.core.grid_manager import initialize_grid_state
from canvas_grid.models.grid import MonitorInfo, PixelRect, PositionOptions
from sway_mocks import make_connection, make_container


# ============================================================================
# Monitors
# ============================================================================

@pytest.fixture
def monitor() -> MonitorInfo:
    """1920x1080 output with a 40px bar at the bottom."""
    return MonitorInfo(
        index=0,
        name="HDMI-A-1",
        width=1920,
        height=1080,
        work_area_x=0,
        work_area_y=0,
        work_area_width=1920,
        work_area_height=1040,
        is_primary=True,
    )


@pytest.fixture
def second_monitor() -> MonitorInfo:
    """Output placed to the right of the primary one."""
    return MonitorInfo(
        index=1,
        name="DP-1",
        width=2560,
        height=1440,
        work_area_x=1920,
        work_area_y=30,
        work_area_width=2560,
        work_area_height=1410,
    )


class FakeMonitorSource:
    """In-memory monitor source that counts queries."""

    def __init__(self, monitors: List[MonitorInfo]):
        self.monitors = list(monitors)
        self.calls = 0

    async def get_all_monitors(self) -> List[MonitorInfo]:
        self.calls += 1
        return list(self.monitors)

    async def get_monitor(self, index: int) -> Optional[MonitorInfo]:
        for monitor in await self.get_all_monitors():
            if monitor.index == index:
                return monitor
        return None


@pytest.fixture
def monitor_source(monitor, second_monitor) -> FakeMonitorSource:
    return FakeMonitorSource([monitor, second_monitor])


# ============================================================================
# Window positioner
# ============================================================================

class RecordingPositioner:
    """Records set_window_position calls instead of moving windows."""

    def __init__(self):
        self.calls: List[tuple] = []

    async def set_window_position(
        self,
        window_handle: int,
        rect: PixelRect,
        options: Optional[PositionOptions] = None,
    ) -> None:
        self.calls.append((window_handle, rect, options))


@pytest.fixture
def positioner() -> RecordingPositioner:
    return RecordingPositioner()


# ============================================================================
# Grid state
# ============================================================================

@pytest.fixture
def empty_state():
    """Default 3x3 grid, 4px gaps, monitor 0."""
    return initialize_grid_state(0)


# ============================================================================
# Mock i3ipc objects
# ============================================================================

@pytest.fixture
def sway_connection():
    """Factory fixture for mock i3ipc connections."""
    return make_connection


@pytest.fixture
def sway_container():
    """Factory fixture for mock i3ipc containers."""
    return make_container
