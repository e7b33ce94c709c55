"""Palette entries, built-in palettes and palette files.

A palette entry is either an RGB tuple or a Tool. The session's current
selection uses the same union, so the stroke engine can dispatch on it.
"""

import colorsys
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Union

from pixels import RGB

logger = logging.getLogger(__name__)


class Tool(Enum):
    LIGHTER = "lighter"
    DARKER = "darker"
    BLUR = "blur"


PaletteEntry = Union[RGB, Tool]

DEFAULT_TOOL_PALETTE: list[Tool] = [Tool.LIGHTER, Tool.DARKER, Tool.BLUR]


def _hsv(h: float, s: float, v: float) -> RGB:
    r, g, b = colorsys.hsv_to_rgb((h % 360.0) / 360.0, s, v)
    return (int(r * 255.0), int(g * 255.0), int(b * 255.0))


_DEFAULT = [
    # greys
    (255, 255, 255), (245, 245, 245), (220, 220, 220), (192, 192, 192),
    (169, 169, 169), (128, 128, 128), (64, 64, 64), (64, 64, 64),
    (40, 40, 40), (20, 20, 20), (0, 0, 0),
    # pinks
    (255, 240, 245), (255, 192, 203), (255, 182, 193), (255, 105, 180),
    (255, 20, 147), (219, 112, 147), (199, 21, 133),
    # reds
    (255, 228, 225), (255, 218, 185), (255, 160, 122), (255, 128, 128),
    (255, 99, 71), (255, 0, 0), (220, 20, 60), (178, 34, 34), (139, 0, 0),
    (128, 0, 0),
    # oranges and browns
    (255, 250, 205), (255, 239, 213), (255, 228, 181), (255, 218, 185),
    (255, 165, 0), (255, 140, 0), (255, 127, 80), (210, 105, 30),
    (184, 134, 11), (160, 82, 45), (139, 69, 19),
    # yellows
    (255, 255, 224), (255, 255, 128), (255, 250, 205), (255, 255, 0),
    (255, 215, 0), (218, 165, 32), (189, 183, 107), (154, 205, 50),
    (128, 128, 0),
    # greens
    (245, 255, 250), (240, 255, 240), (144, 238, 144), (152, 251, 152),
    (128, 255, 128), (124, 252, 0), (0, 255, 127), (0, 250, 154),
    (50, 205, 50), (34, 139, 34), (0, 255, 0), (0, 128, 0), (0, 100, 0),
    (85, 107, 47), (107, 142, 35),
    # cyans
    (240, 255, 255), (224, 255, 255), (175, 238, 238), (127, 255, 212),
    (64, 224, 208), (128, 255, 255), (72, 209, 204), (0, 255, 255),
    (0, 206, 209), (0, 139, 139), (0, 128, 128),
    # blues
    (240, 248, 255), (230, 230, 250), (176, 224, 230), (128, 128, 255),
    (135, 206, 250), (135, 206, 235), (0, 191, 255), (30, 144, 255),
    (0, 0, 255), (0, 0, 205), (0, 0, 139), (25, 25, 112), (0, 0, 128),
    # purples
    (230, 230, 250), (221, 160, 221), (238, 130, 238), (255, 128, 255),
    (218, 112, 214), (186, 85, 211), (255, 0, 255), (147, 112, 219),
    (138, 43, 226), (148, 0, 211), (128, 0, 128), (75, 0, 130),
    (106, 90, 205), (72, 61, 139),
    # tans
    (245, 222, 179), (222, 184, 135), (210, 180, 140), (188, 143, 143),
    (244, 164, 96), (205, 133, 63),
]

_ANSI = [
    (0, 0, 0), (64, 64, 64), (255, 0, 0), (255, 128, 128),
    (0, 255, 0), (128, 255, 128), (255, 255, 0), (255, 255, 128),
    (0, 0, 255), (128, 128, 255), (255, 0, 255), (255, 128, 255),
    (0, 255, 255), (128, 255, 255), (128, 128, 128), (255, 255, 255),
]


def default_palette() -> list[RGB]:
    return list(_DEFAULT)


def ansi_palette() -> list[RGB]:
    return list(_ANSI)


def xterm256_palette() -> list[RGB]:
    levels = (0, 95, 135, 175, 215, 255)
    colors = ansi_palette()
    colors += [(r, g, b) for r in levels for g in levels for b in levels]
    colors += [(8 + i * 10,) * 3 for i in range(24)]
    return colors


def _cube(levels) -> list[RGB]:
    return [(r, g, b) for r in levels for g in levels for b in levels]


def websafe_palette() -> list[RGB]:
    return _cube((0, 51, 102, 153, 204, 255))


def websafe_extended_palette() -> list[RGB]:
    return _cube((0, 25, 51, 76, 102, 127, 153, 178, 204, 229, 255))


def spectrum_palette() -> list[RGB]:
    colors = [(i * 8,) * 3 for i in range(32)]
    for h in range(32):
        for s in range(1, 5):
            for v in range(1, 5):
                colors.append(_hsv(h / 32 * 360.0, s / 4, v / 4))
    return colors


def toned_palette() -> list[RGB]:
    bases = [(0.0, 0.0), (0.0, 1.0), (30.0, 1.0), (60.0, 1.0), (90.0, 1.0),
             (120.0, 1.0), (150.0, 1.0), (180.0, 1.0), (210.0, 1.0),
             (240.0, 1.0), (270.0, 1.0), (300.0, 1.0), (330.0, 1.0),
             (30.0, 0.8)]
    return [_hsv(hue, sat, 0.15 + 0.85 * (j / 7))
            for hue, sat in bases for j in range(8)]


def tones_palette(hue: float, base_sat: float = 1.0,
                  value_span: float = 0.8) -> list[RGB]:
    """50 steps of one hue from dark and saturated to light and washed out."""
    return [_hsv(hue, base_sat - (i / 49) * 0.3, 0.2 + (i / 49) * value_span)
            for i in range(50)]


BUILT_IN_PALETTES = {
    "default": default_palette,
    "ansi": ansi_palette,
    "xterm256": xterm256_palette,
    "spectrum": spectrum_palette,
    "websafe": websafe_palette,
    "websafe_2": websafe_extended_palette,
    "toned": toned_palette,
    "red_tones": lambda: tones_palette(0.0),
    "blue_tones": lambda: tones_palette(240.0),
    "green_tones": lambda: tones_palette(120.0),
    "pink_tones": lambda: tones_palette(330.0),
    "brown_tones": lambda: tones_palette(30.0, base_sat=0.8, value_span=0.6),
    "cyan_tones": lambda: tones_palette(180.0),
}


def get_palette(name: str) -> list[RGB]:
    try:
        return BUILT_IN_PALETTES[name]()
    except KeyError:
        raise KeyError(f"Unknown palette '{name}'. Available: "
                       f"{', '.join(sorted(BUILT_IN_PALETTES))}") from None


def palette_colors(entries) -> list[RGB]:
    """Only the RGB entries of a mixed palette."""
    return [tuple(e) for e in entries if not isinstance(e, Tool)]


def add_unique(palette: list, new_colors) -> int:
    """Append colors that are not already in `palette`. Returns the count added."""
    existing = set(palette_colors(palette))
    added = 0
    for color in new_colors:
        color = tuple(int(c) for c in color)
        if color not in existing:
            palette.append(color)
            existing.add(color)
            added += 1
    return added


# --- Palette files: a JSON list of [r, g, b] triples ---

def _validate_color(value) -> RGB:
    if (not isinstance(value, (list, tuple)) or len(value) != 3
            or not all(isinstance(c, int) and 0 <= c <= 255 for c in value)):
        raise ValueError(f"Invalid palette color: {value!r}")
    return tuple(value)


def load_palette_file(path) -> list[RGB]:
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Palette file {path} is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise ValueError(f"Palette file {path} must contain a list of colors")
    colors = [_validate_color(c) for c in data]
    logger.info("Loaded %d colors from %s", len(colors), path)
    return colors


def save_palette_file(path, colors) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps([list(c) for c in palette_colors(colors)], indent=2))
    logger.info("Saved palette to %s", path)
    return path
