"""Layers and the alpha compositor.

Each layer stores its grid as two numpy arrays: ``colors`` (H, W, 3) uint8
and ``alpha`` (H, W) float32. Index 0 of a layer list is the bottom layer.
"""

import numpy as np

from pixels import Pixel


class Layer:
    def __init__(self, name: str, width: int, height: int):
        self.name = name
        self.visible = True
        self.opacity = 1.0
        self.colors = np.zeros((height, width, 3), dtype=np.uint8)
        self.alpha = np.zeros((height, width), dtype=np.float32)

    @property
    def width(self) -> int:
        return self.alpha.shape[1]

    @property
    def height(self) -> int:
        return self.alpha.shape[0]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_pixel(self, x: int, y: int) -> Pixel:
        r, g, b = self.colors[y, x]
        return Pixel((int(r), int(g), int(b)), float(self.alpha[y, x]))

    def set_pixel(self, x: int, y: int, pixel: Pixel):
        self.colors[y, x] = pixel.color
        self.alpha[y, x] = pixel.alpha

    def clear(self):
        self.colors[:] = 0
        self.alpha[:] = 0.0

    def reallocate(self, width: int, height: int):
        """Replace the grid with a blank one of the new size (no resampling)."""
        self.colors = np.zeros((height, width, 3), dtype=np.uint8)
        self.alpha = np.zeros((height, width), dtype=np.float32)

    def snapshot(self) -> tuple[np.ndarray, np.ndarray]:
        return self.colors.copy(), self.alpha.copy()

    def restore(self, snapshot: tuple[np.ndarray, np.ndarray]):
        colors, alpha = snapshot
        self.colors = colors.copy()
        self.alpha = alpha.copy()

    def copy(self) -> "Layer":
        dup = Layer(self.name, self.width, self.height)
        dup.visible = self.visible
        dup.opacity = self.opacity
        dup.colors, dup.alpha = self.snapshot()
        return dup

    def grid_equals(self, other: "Layer") -> bool:
        return (np.array_equal(self.colors, other.colors)
                and np.array_equal(self.alpha, other.alpha))

    def __repr__(self):
        return (f"Layer({self.name!r}, {self.width}x{self.height}, "
                f"visible={self.visible}, opacity={self.opacity})")


def composite_onto(dest: Layer, src: Layer):
    """Blend src over dest in place with the "over" operator.

    The source contribution of each pixel is ``src.alpha * src.opacity``.
    dest's own opacity and visibility are not consulted.
    """
    src_alpha = src.alpha * np.float32(src.opacity)
    painted = src_alpha > 0.0
    if not painted.any():
        return

    empty = painted & (dest.alpha == 0.0)
    dest.colors[empty] = src.colors[empty]
    dest.alpha[empty] = src_alpha[empty]

    blend = painted & ~empty
    if not blend.any():
        return
    sa = src_alpha[blend].astype(np.float64)
    da = dest.alpha[blend].astype(np.float64)
    final_alpha = sa + da * (1.0 - sa)
    factor = (sa / final_alpha)[:, np.newaxis]
    mixed = dest.colors[blend] * (1.0 - factor) + src.colors[blend] * factor
    dest.colors[blend] = np.clip(np.floor(mixed + 0.5), 0, 255).astype(np.uint8)
    dest.alpha[blend] = np.minimum(final_alpha, 1.0).astype(np.float32)


def composite(layers: list[Layer], width: int, height: int) -> Layer:
    """Flatten visible layers bottom-to-top into a fresh layer."""
    result = Layer("composite", width, height)
    for layer in layers:
        if layer.visible:
            composite_onto(result, layer)
    return result


# --- Serialization (data shape only; framing is the caller's concern) ---

def layer_to_dict(layer: Layer) -> dict:
    grid = []
    for y in range(layer.height):
        row = []
        for x in range(layer.width):
            color, alpha = layer.get_pixel(x, y)
            row.append({"color": list(color), "alpha": alpha})
        grid.append(row)
    return {
        "name": layer.name,
        "grid": grid,
        "visible": layer.visible,
        "opacity": layer.opacity,
    }


def layer_from_dict(data: dict, width: int, height: int) -> Layer:
    try:
        grid = data["grid"]
        layer = Layer(str(data.get("name", "Layer")), width, height)
        layer.visible = bool(data.get("visible", True))
        layer.opacity = float(data.get("opacity", 1.0))
        if len(grid) != height or any(len(row) != width for row in grid):
            raise ValueError(f"grid of layer {layer.name!r} does not match {width}x{height}")
        for y, row in enumerate(grid):
            for x, cell in enumerate(row):
                alpha = float(cell["alpha"])
                if not 0.0 <= alpha <= 1.0:
                    raise ValueError(f"alpha {alpha} out of range at ({x}, {y})")
                layer.set_pixel(x, y, Pixel(tuple(int(c) for c in cell["color"]), alpha))
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed layer data: {e}") from e
    return layer
