"""Adapters around the grid engine: monitors, window positioning, storage."""

from .monitor_service import MonitorCache, MonitorSource, SwayMonitorService
from .window_positioner import SwayWindowPositioner, WindowPositioner, build_position_commands
from .state_store import GridStateStore

__all__ = [
    "MonitorCache",
    "MonitorSource",
    "SwayMonitorService",
    "SwayWindowPositioner",
    "WindowPositioner",
    "build_position_commands",
    "GridStateStore",
]
