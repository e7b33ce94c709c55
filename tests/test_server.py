"""
Tests for the MCP tool layer and the main-thread command bridge.

The MCP tools only enqueue commands; the tests drain the queue against a
canvas the same way the pygame loop does.
"""
import asyncio
import queue
import threading

import pytest

import server
from tools import clamp, create_mcp_server
from conftest import RED, paint


def _request(action, **kwargs):
    cmd = {"action": action, "_event": threading.Event(), "_result": {}, **kwargs}
    return cmd


@pytest.fixture
def command_queue():
    return queue.Queue()


@pytest.fixture
def mcp(command_queue):
    return create_mcp_server(command_queue)


# ── Request/response bridge ─────────────────────────────────────────────

class TestHandleRequest:

    def test_get_info(self, canvas):
        cmd = _request("get_info")
        server._handle_request(cmd, canvas)
        assert cmd["_event"].is_set()
        info = cmd["_result"]["data"]
        assert (info["width"], info["height"]) == (8, 8)
        assert info["selection"] == [0, 0, 0]
        assert info["layers"] == [{"name": "Layer 1", "visible": True, "opacity": 1.0}]

    def test_delete_last_layer_reports_status(self, canvas):
        cmd = _request("delete_layer")
        server._handle_request(cmd, canvas)
        assert cmd["_result"]["data"] == "Cannot delete the only layer."

    def test_get_pixels(self, canvas):
        paint(canvas, 0, 0, RED)
        cmd = _request("get_pixels", x=0, y=0, w=1, h=1)
        server._handle_request(cmd, canvas)
        assert cmd["_result"]["data"] == [[[255, 0, 0, 1.0]]]

    def test_save_file(self, canvas, tmp_path):
        path = str(tmp_path / "out.png")
        cmd = _request("save_file", path=path)
        server._handle_request(cmd, canvas)
        assert cmd["_result"]["data"] == f"Canvas saved to {path}"
        assert (tmp_path / "out.png").exists()

    def test_failure_becomes_error(self, canvas, tmp_path):
        cmd = _request("import_palette", path=str(tmp_path / "missing.json"))
        server._handle_request(cmd, canvas)
        assert "error" in cmd["_result"]
        assert cmd["_event"].is_set()

    def test_unknown_request(self, canvas):
        cmd = _request("teleport")
        server._handle_request(cmd, canvas)
        assert cmd["_result"]["error"] == "Unknown request action: teleport"


class TestDrainCommands:

    def test_runs_commands_in_order(self, canvas, command_queue):
        command_queue.put({"action": "set_color", "r": 255, "g": 0, "b": 0})
        command_queue.put({"action": "draw_point", "x": 2, "y": 3})
        server.drain_commands(command_queue, canvas)
        assert canvas.get_pixel(2, 3).color == RED
        assert command_queue.empty()

    def test_bad_command_does_not_stop_the_queue(self, canvas, command_queue):
        command_queue.put({"action": "no_such_action"})
        command_queue.put({"action": "set_pen_size", "size": 4})
        server.drain_commands(command_queue, canvas)
        assert canvas.state.pen_size == 4


# ── MCP tools ───────────────────────────────────────────────────────────

class TestTools:

    def test_clamp(self):
        assert clamp(300, 0, 255) == 255
        assert clamp(-1, 0, 255) == 0

    def test_registers_drawing_tools(self, mcp):
        names = {tool.name for tool in asyncio.run(mcp.list_tools())}
        assert {"draw_point", "draw_path", "flood_fill", "spray", "undo",
                "merge_down", "palette_from_image", "save_canvas"} <= names

    def test_set_color_clamps_and_enqueues(self, mcp, command_queue):
        asyncio.run(mcp.call_tool("set_color", {"r": 300, "g": 0, "b": -5}))
        assert command_queue.get_nowait() == {"action": "set_color", "r": 255, "g": 0, "b": 0}

    def test_invalid_hex_is_not_enqueued(self, mcp, command_queue):
        asyncio.run(mcp.call_tool("set_hex_color", {"hex_color": "#XYZ"}))
        assert command_queue.empty()

    def test_commands_from_tools_drive_canvas(self, mcp, command_queue, canvas):
        asyncio.run(mcp.call_tool("set_tool", {"tool": "darker"}))
        asyncio.run(mcp.call_tool("draw_path", {"points": [[0, 0], [3, 0]]}))
        server.drain_commands(command_queue, canvas)
        assert canvas.can_undo()

    def test_set_spray_sends_only_given_settings(self, mcp, command_queue, canvas):
        asyncio.run(mcp.call_tool("set_spray", {"intensity": 0.5}))
        assert command_queue.queue[0] == {"action": "set_spray", "intensity": 0.5}
        server.drain_commands(command_queue, canvas)
        assert (canvas.state.spray_size, canvas.state.spray_speed) == (5, 3)
        assert canvas.state.spray_intensity == 0.5

    def test_set_spray_without_settings_is_not_enqueued(self, mcp, command_queue):
        asyncio.run(mcp.call_tool("set_spray", {}))
        assert command_queue.empty()


# ── Preview rendering ───────────────────────────────────────────────────

class TestPreview:

    def test_checkerboard_alternates(self):
        board = server.checkerboard(8, 8)
        assert board.shape == (8, 8, 3)
        assert board[0, 0, 0] == server.CHECKER_LIGHT
        assert board[0, server.CHECKER_SIZE, 0] == server.CHECKER_DARK

    def test_render_scales_canvas(self, canvas):
        paint(canvas, 0, 0, RED)
        surface = server.render_canvas(canvas, 3)
        assert surface.get_size() == (24, 24)
        assert tuple(surface.get_at((1, 1)))[:3] == RED

    def test_window_has_room_for_toolbar(self, small_canvas):
        width, height = server.window_size(small_canvas)
        assert width >= server.MIN_WINDOW_W
        assert height == small_canvas.height * server.SCALE + server.TOOLBAR_H
