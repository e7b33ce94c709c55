"""Brush geometry: pen footprints and symmetry mirroring.

Everything here is a pure function of coordinates and canvas size, so the
stroke engine can stay ignorant of shapes and mirror axes.
"""

import math
from typing import Optional

VALID_PEN_SHAPES = ("circular", "square")
VALID_SYMMETRY_MODES = ("off", "vertical", "horizontal",
                        "diagonal_forward", "diagonal_backward")


def brush_cells(cx: int, cy: int, size: int, shape: str,
                width: int, height: int) -> list[tuple[int, int]]:
    """Return the in-bounds cells covered by a pen of `size` centred at (cx, cy).

    The footprint is the size x size box starting at center - size//2.
    A circular pen keeps the cells whose offset from the box centre lies
    within the discrete disk dx*dx + dy*dy <= radius*radius.
    """
    if shape not in VALID_PEN_SHAPES:
        raise ValueError(f"Unknown pen shape: {shape}")
    size = max(1, size)
    radius = size // 2
    start_x = cx - radius
    start_y = cy - radius
    cells = []
    for y_off in range(size):
        for x_off in range(size):
            if shape == "circular":
                dx = x_off - radius
                dy = y_off - radius
                if dx * dx + dy * dy > radius * radius:
                    continue
            x = start_x + x_off
            y = start_y + y_off
            if 0 <= x < width and 0 <= y < height:
                cells.append((x, y))
    return cells


def mirror_point(x: int, y: int, mode: str, axis: int,
                 width: int, height: int) -> list[tuple[int, int]]:
    """Mirror (x, y) under a symmetry mode. Returns zero or one point.

    vertical/horizontal mirror across column/row `axis`; on an even-sized
    dimension there is no centre cell, so the image is shifted by one.
    diagonal_forward mirrors across y = x + axis, diagonal_backward across
    y = -x + axis.
    """
    if mode == "off":
        return []
    if mode == "vertical":
        mx = 2 * axis - x - 1 if width % 2 == 0 else 2 * axis - x
        my = y
    elif mode == "horizontal":
        mx = x
        my = 2 * axis - y - 1 if height % 2 == 0 else 2 * axis - y
    elif mode == "diagonal_forward":
        mx, my = y - axis, x + axis
    elif mode == "diagonal_backward":
        mx, my = axis - y, axis - x
    else:
        raise ValueError(f"Unknown symmetry mode: {mode}")
    if 0 <= mx < width and 0 <= my < height:
        return [(mx, my)]
    return []


def brush_targets(cx: int, cy: int, size: int, shape: str, mode: str,
                  axis: int, width: int, height: int) -> list[tuple[int, int]]:
    """Every brush cell followed by its mirror image, in application order.

    Duplicates are kept: each entry is a separate effect application and
    stroke protection decides whether it lands.
    """
    targets = []
    for x, y in brush_cells(cx, cy, size, shape, width, height):
        targets.append((x, y))
        targets.extend(mirror_point(x, y, mode, axis, width, height))
    return targets


def next_symmetry(mode: str, width: int, height: int) -> tuple[str, int]:
    """Cycle off -> vertical -> diagonal_forward -> horizontal -> diagonal_backward."""
    cx = width // 2
    cy = height // 2
    if mode == "off":
        return "vertical", cx
    if mode == "vertical":
        return "diagonal_forward", cy - cx
    if mode == "diagonal_forward":
        return "horizontal", cy
    if mode == "horizontal":
        return "diagonal_backward", cy + cx
    return "off", 0


def clip_segment(x1: int, y1: int, x2: int, y2: int, lo_x: int, lo_y: int,
                 hi_x: int, hi_y: int) -> Optional[tuple[int, int, int, int]]:
    """Clip a segment to the rectangle [lo_x, hi_x] x [lo_y, hi_y].

    Liang-Barsky parametric clipping. Returns the clipped endpoints rounded
    to cells, or None when the segment misses the rectangle entirely.
    """
    dx, dy = x2 - x1, y2 - y1
    t0, t1 = 0.0, 1.0
    for p, q in ((-dx, x1 - lo_x), (dx, hi_x - x1), (-dy, y1 - lo_y), (dy, hi_y - y1)):
        if p == 0:
            if q < 0:
                return None
            continue
        t = q / p
        if p < 0:
            if t > t1:
                return None
            t0 = max(t0, t)
        else:
            if t < t0:
                return None
            t1 = min(t1, t)

    def cell(v: float) -> int:
        return int(math.floor(v + 0.5))

    return cell(x1 + t0 * dx), cell(y1 + t0 * dy), cell(x1 + t1 * dx), cell(y1 + t1 * dy)


def interpolate(x1: int, y1: int, x2: int, y2: int,
                spacing: float = 1.0) -> list[tuple[int, int]]:
    """Return evenly-spaced points along a line segment."""
    dx, dy = x2 - x1, y2 - y1
    dist = math.hypot(dx, dy)
    steps = max(1, int(dist / spacing))
    return [(int(round(x1 + dx * t / steps)), int(round(y1 + dy * t / steps)))
            for t in range(steps + 1)]
