"""Integration tests for the Sway/i3 monitor service and window positioner.

The i3ipc connection is mocked; these tests pin the IPC queries made and
the exact command strings sent.
"""

import pytest
from unittest.mock import AsyncMock

from canvas_grid.core.grid_manager import assign_window_to_grid, initialize_grid_state, position_window
from canvas_grid.core.primitives import cell_span
from canvas_grid.errors import ErrorCode, NotFoundError, WindowCommandError
from canvas_grid.models.grid import FrameSize, PixelRect, PositionOptions
from canvas_grid.services.monitor_service import MonitorCache, SwayMonitorService
from canvas_grid.services.window_positioner import (
    SCRATCHPAD_WORKSPACE,
    SwayWindowPositioner,
    build_position_commands,
)
from sway_mocks import MockCommandReply, MockOutput, MockRect, MockWorkspace


@pytest.fixture
def dual_head(sway_connection):
    """HDMI-A-1 with a bar, a disabled output, and a HiDPI primary eDP-1."""
    return sway_connection(
        outputs=[
            MockOutput(name="HDMI-A-1", rect=MockRect(0, 0, 1920, 1080)),
            MockOutput(name="DP-2", active=False),
            MockOutput(name="eDP-1", primary=True, scale=2.0, rect=MockRect(1920, 0, 2560, 1440)),
        ],
        workspaces=[
            MockWorkspace(name="1", output="HDMI-A-1", rect=MockRect(0, 0, 1920, 1040)),
            MockWorkspace(name="2", output="HDMI-A-1", visible=False, rect=MockRect(0, 0, 1, 1)),
        ],
    )


class TestSwayMonitorService:
    """Test monitor enumeration from GET_OUTPUTS/GET_WORKSPACES."""

    @pytest.mark.asyncio
    async def test_active_outputs_indexed_in_order(self, dual_head):
        monitors = await SwayMonitorService(dual_head).get_all_monitors()
        assert [(m.index, m.name) for m in monitors] == [(0, "HDMI-A-1"), (1, "eDP-1")]

    @pytest.mark.asyncio
    async def test_work_area_from_visible_workspace(self, dual_head):
        monitor = await SwayMonitorService(dual_head).get_monitor(0)
        assert (monitor.width, monitor.height) == (1920, 1080)
        assert monitor.work_area == PixelRect(x=0, y=0, width=1920, height=1040)
        assert monitor.scale_factor == 1.0

    @pytest.mark.asyncio
    async def test_work_area_falls_back_to_output_rect(self, dual_head):
        monitor = await SwayMonitorService(dual_head).get_monitor(1)
        assert monitor.work_area == PixelRect(x=1920, y=0, width=2560, height=1440)
        assert monitor.scale_factor == 2.0
        assert monitor.is_primary

    @pytest.mark.asyncio
    async def test_first_output_is_primary_without_flag(self, sway_connection):
        conn = sway_connection(outputs=[MockOutput(name="A"), MockOutput(name="B", scale=None)])
        monitors = await SwayMonitorService(conn).get_all_monitors()
        assert [m.is_primary for m in monitors] == [True, False]
        assert monitors[1].scale_factor == 1.0

    @pytest.mark.asyncio
    async def test_unknown_index(self, dual_head):
        assert await SwayMonitorService(dual_head).get_monitor(5) is None

    @pytest.mark.asyncio
    async def test_ipc_failure_raises_connection_error(self, sway_connection):
        conn = sway_connection()
        conn.get_outputs = AsyncMock(side_effect=OSError("socket closed"))
        with pytest.raises(ConnectionError, match="socket closed"):
            await SwayMonitorService(conn).get_all_monitors()

    @pytest.mark.asyncio
    async def test_cached_service_queries_once(self, dual_head):
        cache = MonitorCache(SwayMonitorService(dual_head), ttl_seconds=60)
        await cache.get_monitor(0)
        await cache.get_monitor(1)
        assert dual_head.get_outputs.await_count == 1


class TestBuildPositionCommands:
    """Test the command chain for a placement."""

    RECT = PixelRect(x=641, y=348, width=637, height=344)

    def test_default_options(self):
        assert build_position_commands(self.RECT, PositionOptions()) == [
            "floating enable",
            "resize set 637 px 344 px",
            "move absolute position 641 px 348 px",
            "focus",
        ]

    def test_restore_before_move(self):
        commands = build_position_commands(
            self.RECT,
            PositionOptions(top_most=True, no_activate=True),
            fullscreen=True,
            in_scratchpad=True,
        )
        assert commands == [
            "fullscreen disable",
            "scratchpad show",
            "floating enable",
            "resize set 637 px 344 px",
            "move absolute position 641 px 348 px",
            "sticky enable",
        ]

    def test_hidden_window_stays_hidden(self):
        commands = build_position_commands(self.RECT, PositionOptions(show_window=False), in_scratchpad=True)
        assert "scratchpad show" not in commands


class TestSwayWindowPositioner:
    """Test SwayWindowPositioner against a mocked connection."""

    @pytest.mark.asyncio
    async def test_set_window_position(self, sway_connection, sway_container):
        conn = sway_connection(containers=[sway_container(42)])
        rect = PixelRect(x=0, y=0, width=1278, height=692)

        await SwayWindowPositioner(conn).set_window_position(42, rect)

        conn.command.assert_awaited_once_with(
            "[con_id=42] floating enable, resize set 1278 px 692 px, "
            "move absolute position 0 px 0 px, focus"
        )

    @pytest.mark.asyncio
    async def test_set_position_of_fullscreen_scratchpad_window(self, sway_connection, sway_container):
        window = sway_container(7, workspace_name=SCRATCHPAD_WORKSPACE, fullscreen_mode=1)
        conn = sway_connection(containers=[window])

        await SwayWindowPositioner(conn).set_window_position(
            7, PixelRect(x=10, y=20, width=30, height=40), PositionOptions(no_activate=True)
        )

        command = conn.command.await_args.args[0]
        assert command.startswith("[con_id=7] fullscreen disable, scratchpad show, floating enable")
        assert not command.endswith("focus")

    @pytest.mark.asyncio
    async def test_unknown_window(self, sway_connection):
        conn = sway_connection()
        with pytest.raises(NotFoundError) as exc_info:
            await SwayWindowPositioner(conn).set_window_position(99, PixelRect(x=0, y=0, width=1, height=1))
        assert exc_info.value.code == ErrorCode.WINDOW_NOT_FOUND
        conn.command.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejected_command(self, sway_connection, sway_container):
        conn = sway_connection(
            containers=[sway_container(42)],
            replies=[MockCommandReply(success=False, error="No matching node")],
        )
        with pytest.raises(WindowCommandError) as exc_info:
            await SwayWindowPositioner(conn).bring_to_foreground(42)
        assert exc_info.value.context["reason"] == "No matching node"
        assert exc_info.value.context["command"] == "[con_id=42] focus"

    @pytest.mark.asyncio
    async def test_get_window_position(self, sway_container, sway_connection):
        conn = sway_connection(containers=[sway_container(42, rect=MockRect(5, 6, 700, 500))])
        assert await SwayWindowPositioner(conn).get_window_position(42) == PixelRect(
            x=5, y=6, width=700, height=500
        )

    @pytest.mark.asyncio
    async def test_is_window_valid(self, sway_connection, sway_container):
        conn = sway_connection(containers=[sway_container(42)])
        positioner = SwayWindowPositioner(conn)
        assert await positioner.is_window_valid(42)
        assert not await positioner.is_window_valid(43)

    @pytest.mark.asyncio
    async def test_minimize_and_restore(self, sway_connection, sway_container):
        hidden = sway_container(8, workspace_name=SCRATCHPAD_WORKSPACE)
        conn = sway_connection(containers=[sway_container(42), hidden])
        positioner = SwayWindowPositioner(conn)

        await positioner.minimize_window(42)
        conn.command.assert_awaited_with("[con_id=42] move scratchpad")

        await positioner.restore_window(8)
        conn.command.assert_awaited_with("[con_id=8] scratchpad show")

    @pytest.mark.asyncio
    async def test_restore_visible_window_sends_nothing(self, sway_connection, sway_container):
        conn = sway_connection(containers=[sway_container(42)])
        await SwayWindowPositioner(conn).restore_window(42)
        conn.command.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_frame_size(self, sway_connection, sway_container):
        window = sway_container(
            42,
            rect=MockRect(100, 50, 800, 600),
            window_rect=MockRect(2, 0, 796, 598),
            deco_rect=MockRect(0, 0, 800, 24),
        )
        conn = sway_connection(containers=[window])
        assert await SwayWindowPositioner(conn).get_window_frame_size(42) == FrameSize(
            left=2, top=24, right=2, bottom=2
        )


@pytest.mark.asyncio
async def test_position_window_end_to_end(dual_head, sway_container):
    """Grid assignment -> monitor geometry -> Sway command."""
    dual_head.get_tree.return_value.find_by_id.side_effect = (
        lambda con_id: sway_container(con_id) if con_id == 42 else None
    )
    state = assign_window_to_grid("term", cell_span(1, 1, 1, 2), initialize_grid_state(0))

    rect = await position_window(
        "term",
        42,
        state,
        SwayMonitorService(dual_head),
        SwayWindowPositioner(dual_head),
    )

    assert rect == PixelRect(x=641, y=348, width=1278, height=344)
    dual_head.command.assert_awaited_once_with(
        "[con_id=42] floating enable, resize set 1278 px 344 px, "
        "move absolute position 641 px 348 px, focus"
    )
