"""Pixel/colour model: RGB + float alpha, channel blending and the over operator."""

import math
from typing import NamedTuple, Optional

RGB = tuple[int, int, int]

WHITE: RGB = (255, 255, 255)
BLACK: RGB = (0, 0, 0)


class Pixel(NamedTuple):
    color: RGB
    alpha: float


EMPTY_PIXEL = Pixel(BLACK, 0.0)


def round_channel(value: float) -> int:
    """Round half away from zero and clamp into 0..255."""
    return max(0, min(255, int(math.floor(value + 0.5))))


def blend_colors(c1: RGB, c2: RGB, factor: float) -> RGB:
    """Mix two colors. factor=1.0 means all c2, 0.0 means all c1."""
    return tuple(round_channel(a * (1.0 - factor) + b * factor)
                 for a, b in zip(c1, c2))


def over(dest: Pixel, src_color: RGB, src_alpha: float) -> Pixel:
    """Composite a source color at src_alpha over dest."""
    if src_alpha <= 0.0:
        return dest
    if dest.alpha == 0.0:
        return Pixel(tuple(src_color), src_alpha)
    final_alpha = src_alpha + dest.alpha * (1.0 - src_alpha)
    factor = src_alpha / final_alpha
    return Pixel(blend_colors(dest.color, src_color, factor), final_alpha)


def brightness(color: RGB) -> int:
    return color[0] + color[1] + color[2]


def rgb_distance(c1: RGB, c2: RGB) -> float:
    dr = c1[0] - c2[0]
    dg = c1[1] - c2[1]
    db = c1[2] - c2[2]
    return math.sqrt(dr * dr + dg * dg + db * db)


def rgb_to_hue(color: RGB) -> float:
    """HSV hue in degrees, 0.0 for greys."""
    r, g, b = (c / 255.0 for c in color)
    hi = max(r, g, b)
    lo = min(r, g, b)
    delta = hi - lo
    if delta == 0.0:
        return 0.0
    if hi == r:
        hue = 60.0 * math.fmod((g - b) / delta, 6.0)
    elif hi == g:
        hue = 60.0 * ((b - r) / delta + 2.0)
    else:
        hue = 60.0 * ((r - g) / delta + 4.0)
    return hue + 360.0 if hue < 0.0 else hue


def hue_distance(h1: float, h2: float) -> float:
    diff = abs(h1 - h2)
    return 360.0 - diff if diff > 180.0 else diff


def parse_hex_color(text: str) -> Optional[RGB]:
    """Parse '#RRGGBB' (leading '#' optional). Returns None when malformed."""
    s = text.strip().lstrip("#")
    if len(s) != 6:
        return None
    try:
        return (int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))
    except ValueError:
        return None


def to_hex(color: RGB) -> str:
    return "#{:02X}{:02X}{:02X}".format(*color)
