"""Snap-to-palette searches used by the Lighter/Darker/Blur tools.

Every search returns the input colour when no palette entry qualifies, so a
tool application degrades to a no-op instead of picking something random.
"""

from pixels import RGB, brightness, hue_distance, rgb_distance, rgb_to_hue
from palettes import palette_colors

VALID_SNAP_MODES = ("closest_rgb", "closest_hue")

# Weight of the green/blue-to-red ratio mismatch in closest_rgb scoring.
RATIO_WEIGHT = 500.0
# Weight of the hue angle (degrees) in closest_hue scoring.
HUE_WEIGHT = 10.0
MAX_HUE_DISTANCE = 45.0


def find_closest_color(target: RGB, palette) -> RGB:
    closest = target
    min_dist = float("inf")
    for color in palette_colors(palette):
        dist = rgb_distance(target, color)
        if dist < min_dist:
            min_dist = dist
            closest = color
    return closest


def _candidates(current: RGB, palette, lighter: bool):
    level = brightness(current)
    for color in palette_colors(palette):
        b = brightness(color)
        if (b > level) if lighter else (b < level):
            yield color


def _channel_ratios(color: RGB) -> tuple[float, float]:
    total = float(max(color[0], 1))
    return color[1] / total, color[2] / total


def _shift_rgb(current: RGB, palette, lighter: bool) -> RGB:
    ratio_g, ratio_b = _channel_ratios(current)
    closest = current
    min_score = float("inf")
    for color in _candidates(current, palette, lighter):
        cand_g, cand_b = _channel_ratios(color)
        ratio_diff = abs(ratio_g - cand_g) + abs(ratio_b - cand_b)
        score = rgb_distance(current, color) + ratio_diff * RATIO_WEIGHT
        if score < min_score:
            min_score = score
            closest = color
    return closest


def _shift_hue(current: RGB, palette, lighter: bool) -> RGB:
    current_hue = rgb_to_hue(current)
    closest = current
    min_score = float("inf")
    for color in _candidates(current, palette, lighter):
        hue_dist = hue_distance(current_hue, rgb_to_hue(color))
        if hue_dist > MAX_HUE_DISTANCE:
            continue
        score = rgb_distance(current, color) + hue_dist * HUE_WEIGHT
        if score < min_score:
            min_score = score
            closest = color
    return closest


def find_lighter_rgb(current: RGB, palette) -> RGB:
    return _shift_rgb(current, palette, lighter=True)


def find_darker_rgb(current: RGB, palette) -> RGB:
    return _shift_rgb(current, palette, lighter=False)


def find_lighter_hue(current: RGB, palette) -> RGB:
    return _shift_hue(current, palette, lighter=True)


def find_darker_hue(current: RGB, palette) -> RGB:
    return _shift_hue(current, palette, lighter=False)


def shift_color(current: RGB, palette, lighter: bool, mode: str) -> RGB:
    if mode == "closest_rgb":
        return _shift_rgb(current, palette, lighter)
    if mode == "closest_hue":
        return _shift_hue(current, palette, lighter)
    raise ValueError(f"Unknown snap mode: {mode}")
