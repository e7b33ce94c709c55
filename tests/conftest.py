"""
Shared fixtures for the paint engine tests.

Provides seeded canvases and a couple of reference colours. pygame runs
against the SDL dummy drivers so no window or audio device is needed.
"""
import os
import random
import sys

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

# Modules live at the repository root (flat layout)
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from canvas import Canvas  # noqa: E402


# ── Colours ─────────────────────────────────────────────────────────────

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
GREY = (100, 100, 100)


# ── Canvases ────────────────────────────────────────────────────────────

@pytest.fixture
def canvas():
    """8x8 canvas with a seeded random source."""
    return Canvas(8, 8, rng=random.Random(1234))


@pytest.fixture
def small_canvas():
    return Canvas(4, 4, rng=random.Random(1234))


@pytest.fixture
def wide_canvas():
    """10x10 canvas, large enough for 3-wide brushes away from the edges."""
    return Canvas(10, 10, rng=random.Random(1234))


def paint(canvas, x, y, color, opacity=1.0):
    """Single opaque (or translucent) stamp at (x, y) with a 1px pen."""
    canvas.state.selection = color
    canvas.state.opacity = opacity
    canvas.execute({"action": "draw_point", "x": x, "y": y})
