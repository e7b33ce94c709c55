"""
Tests for flood fill on the active layer.
"""
import pytest

from palettes import Tool
from pixels import EMPTY_PIXEL, Pixel
from conftest import BLUE, RED


class TestFloodFill:

    def test_fills_whole_empty_layer(self, canvas):
        assert canvas.fill_from_point(0, 0, RED, 1.0)
        assert canvas.active_layer.alpha.min() == 1.0
        assert canvas.get_pixel(7, 7) == Pixel(RED, 1.0)

    def test_stops_at_boundary(self, canvas):
        canvas.state.selection = BLUE
        canvas.draw_path([[3, 0], [3, 7]])
        canvas.fill_from_point(0, 0, RED, 1.0)
        for y in range(8):
            assert canvas.get_pixel(2, y) == Pixel(RED, 1.0)
            assert canvas.get_pixel(3, y) == Pixel(BLUE, 1.0)
            assert canvas.get_pixel(4, y) == EMPTY_PIXEL

    def test_fill_is_four_connected(self, canvas):
        canvas.state.selection = BLUE
        canvas.draw_path([[0, 1], [1, 0]])
        canvas.fill_from_point(0, 0, RED, 1.0)
        assert canvas.get_pixel(0, 0) == Pixel(RED, 1.0)
        assert canvas.get_pixel(5, 5) == EMPTY_PIXEL

    def test_second_identical_fill_is_noop(self, canvas):
        canvas.fill_from_point(0, 0, RED, 0.3)
        depth = len(canvas._undo_stack)
        assert not canvas.fill_from_point(0, 0, RED, 0.3)
        assert len(canvas._undo_stack) == depth

    def test_fill_is_undoable(self, canvas):
        canvas.fill_from_point(0, 0, RED, 1.0)
        canvas.undo()
        assert not canvas.composited.alpha.any()

    def test_out_of_bounds_seed(self, canvas):
        assert not canvas.fill_from_point(8, 0, RED, 1.0)
        assert not canvas.can_undo()

    def test_alpha_above_one_is_clamped(self, canvas):
        assert canvas.fill_from_point(0, 0, (10, 20, 30), 1.5)
        assert canvas.get_pixel(3, 3) == Pixel((10, 20, 30), 1.0)

    def test_out_of_range_channel_is_rejected(self, canvas):
        canvas.execute({"action": "flood_fill", "x": 0, "y": 0, "r": 300, "g": 0, "b": 0})
        assert canvas.status_message.startswith("Invalid fill color")
        assert not canvas.can_undo()
        assert not canvas.active_layer.alpha.any()


class TestFillArea:

    def test_uses_selection_and_opacity(self, canvas):
        canvas.execute({"action": "set_color", "r": 255, "g": 0, "b": 0})
        canvas.execute({"action": "set_opacity", "opacity": 0.5})
        canvas.execute({"action": "flood_fill", "x": 2, "y": 2})
        assert canvas.active_layer.get_pixel(5, 5) == Pixel(RED, 0.5)
        assert canvas.cursor_pos == (2, 2)

    def test_explicit_fill_value(self, canvas):
        canvas.execute({"action": "flood_fill", "x": 0, "y": 0,
                        "r": 0, "g": 0, "b": 255, "alpha": 0.25})
        assert canvas.active_layer.get_pixel(1, 1).alpha == pytest.approx(0.25)

    def test_rejected_with_tool_selected(self, canvas):
        canvas.state.selection = Tool.BLUR
        assert not canvas.fill_area(0, 0)
        assert canvas.status_message == "Select a color to fill."
        assert not canvas.can_undo()
