"""
Tests for the spray tool. A seeded random source keeps these deterministic.
"""
import random

import numpy as np

from canvas import Canvas
from palettes import Tool
from conftest import RED


def _painted(canvas):
    ys, xs = np.nonzero(canvas.active_layer.alpha)
    return set(zip(xs.tolist(), ys.tolist()))


class TestSpray:

    def test_stays_within_radius(self, canvas):
        canvas.state.selection = RED
        canvas.execute({"action": "set_spray", "size": 5, "speed": 40, "intensity": 1.0})
        canvas.apply_spray(4, 4)
        painted = _painted(canvas)
        assert painted
        assert all(2 <= x <= 6 and 2 <= y <= 6 for x, y in painted)

    def test_zero_intensity_paints_nothing(self, canvas):
        canvas.state.selection = RED
        canvas.state.spray_intensity = 0.0
        canvas.state.spray_speed = 50
        canvas.apply_spray(4, 4)
        assert not _painted(canvas)

    def test_uses_cursor_when_no_point_given(self, canvas):
        canvas.state.selection = RED
        canvas.state.spray_intensity = 1.0
        canvas.state.spray_size = 1
        canvas.execute({"action": "set_cursor", "x": 6, "y": 1})
        canvas.apply_spray()
        assert _painted(canvas) == {(6, 1)}

    def test_same_seed_same_result(self):
        results = []
        for _ in range(2):
            c = Canvas(16, 16, rng=random.Random(99))
            c.state.selection = RED
            c.state.spray_speed = 30
            c.state.spray_intensity = 0.5
            c.apply_spray(8, 8)
            results.append(_painted(c))
        assert results[0] == results[1]

    def test_rejected_with_tool_selected(self, canvas):
        canvas.state.selection = Tool.DARKER
        assert not canvas.apply_spray(4, 4)
        assert canvas.status_message == "Select a color to spray."

    def test_spray_command_is_one_undo_step(self, canvas):
        canvas.state.selection = RED
        canvas.state.spray_intensity = 1.0
        canvas.execute({"action": "spray", "x": 4, "y": 4, "bursts": 5})
        assert _painted(canvas)
        assert len(canvas._undo_stack) == 1
        canvas.undo()
        assert not _painted(canvas)

    def test_edge_samples_are_clipped(self, canvas):
        canvas.state.selection = RED
        canvas.state.spray_intensity = 1.0
        canvas.state.spray_speed = 40
        canvas.apply_spray(0, 0)
        assert all(x >= 0 and y >= 0 for x, y in _painted(canvas))
