"""Drawing session: layered pixel canvas with brush, fill, spray and undo stack."""

import logging
import random
from collections import deque
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pygame

from brush import (VALID_PEN_SHAPES, VALID_SYMMETRY_MODES, brush_targets,
                   clip_segment, interpolate, next_symmetry)
from kmeans import generate_palette, load_image_pixels
from layers import Layer, composite, composite_onto, layer_from_dict, layer_to_dict
from palettes import (DEFAULT_TOOL_PALETTE, PaletteEntry, Tool, add_unique,
                      default_palette, get_palette, load_palette_file,
                      palette_colors, save_palette_file)
from pixels import BLACK, EMPTY_PIXEL, RGB, WHITE, Pixel, blend_colors, over
from snapping import VALID_SNAP_MODES, find_closest_color, shift_color

logger = logging.getLogger(__name__)

DEFAULT_SHADE_FACTOR = 0.03


@dataclass
class DrawState:
    selection: PaletteEntry = BLACK
    pen_size: int = 1
    pen_shape: str = "circular"
    opacity: float = 1.0
    shade_factor: float = DEFAULT_SHADE_FACTOR
    protect_stroke: bool = True
    symmetry_mode: str = "off"
    symmetry_axis: int = 0
    spray_size: int = 5
    spray_speed: int = 3
    spray_intensity: float = 0.1
    snap_to_palette: bool = False
    snap_mode: str = "closest_hue"


class Canvas:
    MAX_UNDO = 100

    def __init__(self, width: int, height: int, state: Optional[DrawState] = None,
                 rng: Optional[random.Random] = None, palette: Optional[list] = None):
        self.width = max(1, width)
        self.height = max(1, height)
        self.state = state if state is not None else DrawState()
        self.rng = rng if rng is not None else random.Random()
        self.layers: list[Layer] = [Layer("Layer 1", self.width, self.height)]
        self.active_layer_index = 0
        self.color_palette: list = list(palette) if palette is not None else default_palette()
        self.tool_palette: list[Tool] = list(DEFAULT_TOOL_PALETTE)
        self.last_generated_palette: Optional[list[RGB]] = None
        self.cursor_pos = (0, 0)
        self.status_message: Optional[str] = None
        self._undo_stack: deque = deque(maxlen=self.MAX_UNDO)
        self._redo_stack: deque = deque(maxlen=self.MAX_UNDO)
        self._stroke_pixels: set[tuple[int, int]] = set()
        self._in_stroke = False
        self.composited = composite(self.layers, self.width, self.height)

    # --- Bookkeeping ---

    @property
    def active_layer(self) -> Layer:
        return self.layers[self.active_layer_index]

    def _notify(self, message: str):
        self.status_message = message
        logger.info(message)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def recompose(self):
        """Rebuild the composited canvas from every visible layer."""
        self.composited = composite(self.layers, self.width, self.height)

    def get_pixel(self, x: int, y: int) -> Pixel:
        """Read the composited (displayed) pixel."""
        return self.composited.get_pixel(x, y)

    def execute(self, cmd: dict):
        action = cmd.get("action")
        method = getattr(self, f"_do_{action}", None)
        if method is None:
            raise ValueError(f"Unknown action: {action}")
        method(cmd)

    # --- Undo / redo ---

    def save_state_for_undo(self):
        self._undo_stack.append(self.active_layer.snapshot())
        self._redo_stack.clear()

    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def undo(self) -> bool:
        if not self._undo_stack:
            self._notify("Nothing to undo")
            return False
        self._redo_stack.append(self.active_layer.snapshot())
        self.active_layer.restore(self._undo_stack.pop())
        self.recompose()
        self._notify("Undo")
        return True

    def redo(self) -> bool:
        if not self._redo_stack:
            self._notify("Nothing to redo")
            return False
        self._undo_stack.append(self.active_layer.snapshot())
        self.active_layer.restore(self._redo_stack.pop())
        self.recompose()
        self._notify("Redo")
        return True

    def _clear_history(self):
        self._undo_stack.clear()
        self._redo_stack.clear()

    # --- Stroke engine ---

    def begin_stroke(self):
        """Start one continuous gesture: reset stroke protection and snapshot."""
        self._stroke_pixels.clear()
        self._in_stroke = True
        self.save_state_for_undo()

    def end_stroke(self):
        self._stroke_pixels.clear()
        self._in_stroke = False

    def _apply_tracked(self, x: int, y: int, effect):
        if not self.in_bounds(x, y):
            return
        # Cells are only deduplicated inside an open stroke
        if self._in_stroke and self.state.protect_stroke:
            if (x, y) in self._stroke_pixels:
                return
            self._stroke_pixels.add((x, y))
        effect(x, y)

    def _brush_targets(self, x: int, y: int) -> list[tuple[int, int]]:
        s = self.state
        return brush_targets(x, y, s.pen_size, s.pen_shape, s.symmetry_mode,
                             s.symmetry_axis, self.width, self.height)

    def apply_brush(self, x: int, y: int):
        """Apply the current selection under the pen at (x, y), mirrored."""
        for tx, ty in self._brush_targets(x, y):
            self._apply_tracked(tx, ty, self._apply_effect)
        self.recompose()

    def erase_brush(self, x: int, y: int):
        for tx, ty in self._brush_targets(x, y):
            self._apply_tracked(tx, ty, self._erase_pixel)
        self.recompose()

    def _erase_pixel(self, x: int, y: int):
        self.active_layer.set_pixel(x, y, EMPTY_PIXEL)

    def apply_effect_at_pixel(self, x: int, y: int):
        """Apply the current selection to a single cell, then recompose."""
        if not self.in_bounds(x, y):
            return
        self._apply_effect(x, y)
        self.recompose()

    def _apply_effect(self, x: int, y: int):
        selection = self.state.selection
        layer = self.active_layer
        original = layer.get_pixel(x, y)

        if isinstance(selection, Tool):
            if selection is Tool.BLUR:
                layer.set_pixel(x, y, self.calculate_blur_at(x, y, self.state.opacity))
            elif original.alpha == 0.0:
                return
            elif selection is Tool.LIGHTER:
                layer.set_pixel(x, y, Pixel(self._shade(original.color, lighter=True),
                                            original.alpha))
            elif selection is Tool.DARKER:
                layer.set_pixel(x, y, Pixel(self._shade(original.color, lighter=False),
                                            original.alpha))
            else:
                raise ValueError(f"Unhandled tool: {selection}")
            return

        layer.set_pixel(x, y, over(original, tuple(selection), self.state.opacity))

    def _shade(self, color: RGB, lighter: bool) -> RGB:
        if self.state.snap_to_palette:
            return shift_color(color, self.color_palette, lighter, self.state.snap_mode)
        return blend_colors(color, WHITE if lighter else BLACK, self.state.shade_factor)

    def calculate_blur_at(self, x: int, y: int, opacity: float) -> Pixel:
        """3x3 box blur of the active layer at (x, y), mixed in by `opacity`.

        Colour sums only include non-transparent neighbours but are divided
        by the number of in-bounds cells, so blurring next to empty space
        also darkens.
        """
        layer = self.active_layer
        original = layer.get_pixel(x, y)
        y_lo, y_hi = max(0, y - 1), min(self.height, y + 2)
        x_lo, x_hi = max(0, x - 1), min(self.width, x + 2)
        colors = layer.colors[y_lo:y_hi, x_lo:x_hi].reshape(-1, 3).astype(np.int64)
        alphas = layer.alpha[y_lo:y_hi, x_lo:x_hi].reshape(-1).astype(np.float64)
        count = len(alphas)

        colored = alphas > 0.0
        center = (y - y_lo) * (x_hi - x_lo) + (x - x_lo)
        neighbours = colored.copy()
        neighbours[center] = False
        if original.alpha == 0.0 and not neighbours.any():
            return original

        sums = colors[colored].sum(axis=0)
        blurred = tuple(int(c) // count for c in sums)
        blurred_alpha = float(alphas.sum()) / count

        color = blend_colors(original.color, blurred, opacity)
        if self.state.snap_to_palette:
            color = find_closest_color(color, self.color_palette)
        alpha = original.alpha * (1.0 - opacity) + blurred_alpha * opacity
        return Pixel(color, min(1.0, max(0.0, alpha)))

    def use_current_tool(self, x: int, y: int):
        """One stamp of the current selection as its own stroke and undo step."""
        self._stroke([(x, y)], self.apply_brush)

    def erase_at(self, x: int, y: int):
        self._stroke([(x, y)], self.erase_brush)

    def _stroke(self, points, stamp):
        # Segments are clipped to the area a pen stamp can still reach
        margin = self.state.pen_size
        bounds = (-margin, -margin, self.width - 1 + margin, self.height - 1 + margin)
        self.begin_stroke()
        try:
            if len(points) == 1:
                stamp(*points[0])
            for (x1, y1), (x2, y2) in zip(points, points[1:]):
                segment = clip_segment(x1, y1, x2, y2, *bounds)
                if segment is None:
                    continue
                for px, py in interpolate(*segment):
                    stamp(px, py)
            if points:
                self.cursor_pos = tuple(points[-1])
        finally:
            self.end_stroke()

    def draw_path(self, points: list):
        """Paint one continuous stroke through the given [x, y] points."""
        self._stroke([tuple(p) for p in points], self.apply_brush)

    def erase_path(self, points: list):
        self._stroke([tuple(p) for p in points], self.erase_brush)

    # --- Spray ---

    def apply_spray(self, x: Optional[int] = None, y: Optional[int] = None) -> bool:
        """Scatter single-pixel paint around (x, y), or the cursor if omitted."""
        if isinstance(self.state.selection, Tool):
            self._notify("Select a color to spray.")
            return False
        cx, cy = self.cursor_pos if x is None or y is None else (x, y)
        radius = self.state.spray_size // 2
        for _ in range(self.state.spray_speed):
            tx = cx + self.rng.randint(-radius, radius)
            ty = cy + self.rng.randint(-radius, radius)
            if self.rng.random() < self.state.spray_intensity and self.in_bounds(tx, ty):
                self._apply_effect(tx, ty)
        self.recompose()
        return True

    # --- Fill ---

    def fill_from_point(self, x: int, y: int, color: RGB, alpha: float) -> bool:
        """Flood-fill the 4-connected region equal to the seed pixel."""
        if not self.in_bounds(x, y):
            return False
        if len(color) != 3 or not all(0 <= int(c) <= 255 for c in color):
            self._notify(f"Invalid fill color: {tuple(color)}")
            return False
        layer = self.active_layer
        target = layer.get_pixel(x, y)
        alpha = max(0.0, min(1.0, float(alpha)))
        fill = Pixel(tuple(int(c) for c in color), float(np.float32(alpha)))
        if target == fill:
            return False

        self.save_state_for_undo()
        queue = deque([(x, y)])
        while queue:
            cx, cy = queue.popleft()
            if layer.get_pixel(cx, cy) != target:
                continue
            layer.set_pixel(cx, cy, fill)
            if cx > 0:
                queue.append((cx - 1, cy))
            if cx + 1 < self.width:
                queue.append((cx + 1, cy))
            if cy > 0:
                queue.append((cx, cy - 1))
            if cy + 1 < self.height:
                queue.append((cx, cy + 1))
        self.recompose()
        return True

    def fill_area(self, x: int, y: int) -> bool:
        """Fill with the current colour selection at the current opacity."""
        if isinstance(self.state.selection, Tool):
            self._notify("Select a color to fill.")
            return False
        self.cursor_pos = (x, y)
        return self.fill_from_point(x, y, self.state.selection, self.state.opacity)

    # --- Tool parameters ---

    def set_pen_shape(self, shape: str):
        if shape not in VALID_PEN_SHAPES:
            raise ValueError(f"Unknown pen shape: {shape}")
        self.state.pen_shape = shape

    def set_symmetry(self, mode: str, axis: Optional[int] = None):
        """Set the mirror mode. Without an axis the canvas centre is used."""
        if mode not in VALID_SYMMETRY_MODES:
            raise ValueError(f"Unknown symmetry mode: {mode}")
        if axis is None:
            cx, cy = self.width // 2, self.height // 2
            axis = {"vertical": cx, "horizontal": cy, "diagonal_forward": cy - cx,
                    "diagonal_backward": cy + cx}.get(mode, 0)
        self.state.symmetry_mode = mode
        self.state.symmetry_axis = axis

    def cycle_symmetry(self):
        self.state.symmetry_mode, self.state.symmetry_axis = next_symmetry(
            self.state.symmetry_mode, self.width, self.height)
        self._notify(f"Symmetry: {self.state.symmetry_mode}")

    def set_snap(self, enabled: bool, mode: Optional[str] = None):
        if mode is not None:
            if mode not in VALID_SNAP_MODES:
                raise ValueError(f"Unknown snap mode: {mode}")
            self.state.snap_mode = mode
        self.state.snap_to_palette = enabled

    def pick_color(self, x: int, y: int) -> Optional[RGB]:
        """Eyedropper on the composited canvas; the colour joins the palette."""
        if not self.in_bounds(x, y):
            return None
        pixel = self.get_pixel(x, y)
        if pixel.alpha == 0.0:
            self._notify("Cannot pick color from a transparent pixel.")
            return None
        add_unique(self.color_palette, [pixel.color])
        self.state.selection = pixel.color
        self._notify("Color picked: ({}, {}, {})".format(*pixel.color))
        return pixel.color

    # --- Layers ---

    def add_layer(self, name: Optional[str] = None) -> Layer:
        layer = Layer(name or f"Layer {len(self.layers) + 1}", self.width, self.height)
        self.layers.append(layer)
        self.active_layer_index = len(self.layers) - 1
        self.recompose()
        self._notify(f"Added {layer.name}")
        return layer

    def delete_active_layer(self) -> bool:
        if len(self.layers) <= 1:
            self._notify("Cannot delete the only layer.")
            return False
        del self.layers[self.active_layer_index]
        self.active_layer_index = min(self.active_layer_index, len(self.layers) - 1)
        self.recompose()
        self._notify("Layer deleted.")
        return True

    def select_layer(self, index: int):
        self.active_layer_index = max(0, min(index, len(self.layers) - 1))
        self.recompose()

    def change_layer_selection(self, delta: int):
        self.select_layer(self.active_layer_index + delta)

    def move_layer_up(self) -> bool:
        """Swap the active layer with the one above it (towards the top)."""
        i = self.active_layer_index
        if i >= len(self.layers) - 1:
            return False
        self.layers[i], self.layers[i + 1] = self.layers[i + 1], self.layers[i]
        self.active_layer_index = i + 1
        self.recompose()
        return True

    def move_layer_down(self) -> bool:
        i = self.active_layer_index
        if i <= 0:
            return False
        self.layers[i], self.layers[i - 1] = self.layers[i - 1], self.layers[i]
        self.active_layer_index = i - 1
        self.recompose()
        return True

    def toggle_layer_visibility(self):
        self.active_layer.visible = not self.active_layer.visible
        self.recompose()

    def set_layer_opacity(self, opacity: float):
        self.active_layer.opacity = max(0.0, min(1.0, opacity))
        self.recompose()

    def rename_layer(self, name: str):
        if name:
            self.active_layer.name = name

    def merge_down(self) -> bool:
        """Composite the active layer into the one below, then remove it."""
        if self.active_layer_index == 0:
            self._notify("Cannot merge bottom layer.")
            return False
        src = self.layers.pop(self.active_layer_index)
        self.active_layer_index -= 1
        composite_onto(self.active_layer, src)
        self.recompose()
        self._notify("Layer merged down.")
        return True

    def clear_layer(self):
        self.save_state_for_undo()
        self.active_layer.clear()
        self.recompose()
        self._notify("Active layer cleared.")

    def resize_canvas(self, width: int, height: int):
        """Reallocate every layer at the new size. Content is discarded."""
        self.width = max(1, width)
        self.height = max(1, height)
        for layer in self.layers:
            layer.reallocate(self.width, self.height)
        self._clear_history()
        self._stroke_pixels.clear()
        self.cursor_pos = (min(self.cursor_pos[0], self.width - 1),
                           min(self.cursor_pos[1], self.height - 1))
        if self.state.symmetry_mode != "off":
            self.set_symmetry(self.state.symmetry_mode)
        self.recompose()
        self._notify(f"Canvas resized to {self.width}x{self.height}")

    # --- Palettes ---

    def use_palette(self, name: str):
        self.color_palette = get_palette(name)
        self._notify(f"Palette '{name}' loaded.")

    def import_palette(self, path):
        self.color_palette = load_palette_file(path)
        self._notify(f"Palette imported from {path}")

    def save_palette(self, path, last_generated: bool = False):
        colors = self.last_generated_palette if last_generated else self.color_palette
        if colors is None:
            self._notify("No image palette has been generated yet.")
            return None
        written = save_palette_file(path, colors)
        self._notify(f"Palette saved to {written}")
        return written

    def generate_palette_from_image(self, path, add_to_current: bool = False,
                                    target_size: int = 16) -> bool:
        try:
            pixels = load_image_pixels(path)
        except (pygame.error, FileNotFoundError) as e:
            self._notify(f"Error opening image: {e}")
            return False
        return self.apply_generated_palette(pixels, add_to_current, target_size)

    def apply_generated_palette(self, pixels, add_to_current: bool = False,
                                target_size: int = 16) -> bool:
        colors = generate_palette(pixels, target_size,
                                  rng=np.random.default_rng(self.rng.getrandbits(32)))
        if not colors:
            self._notify("Image contains no colors.")
            return False
        self.last_generated_palette = colors
        if add_to_current:
            added = add_unique(self.color_palette, colors)
            self._notify(f"Added {added} new colors to the palette.")
        else:
            self.color_palette = list(colors)
            self._notify("Palette generated from image.")
        return True

    # --- Project data shape ---

    def to_project_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "layers": [layer_to_dict(layer) for layer in self.layers],
            "active_layer_index": self.active_layer_index,
            "palette": [list(c) for c in palette_colors(self.color_palette)],
        }

    def load_project_dict(self, data: dict):
        try:
            width, height = int(data["width"]), int(data["height"])
            layers = [layer_from_dict(d, width, height) for d in data["layers"]]
            palette = [tuple(int(c) for c in rgb) for rgb in data.get("palette", [])]
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed project data: {e}") from e
        if width < 1 or height < 1 or not layers:
            raise ValueError("Project needs a positive size and at least one layer")
        self.width, self.height = width, height
        self.layers = layers
        index = int(data.get("active_layer_index") or 0)
        self.active_layer_index = max(0, min(index, len(layers) - 1))
        if palette:
            self.color_palette = palette
        self._clear_history()
        self._stroke_pixels.clear()
        self.cursor_pos = (0, 0)
        self.recompose()
        self._notify(f"Loaded {len(layers)} layer(s)")

    # --- Read-only / export ---

    def get_pixels_rgba(self, x: int = 0, y: int = 0,
                        w: int | None = None, h: int | None = None) -> list:
        """Return a 2D list of [r, g, b, alpha] (row-major) for the given region."""
        if w is None:
            w = self.width - x
        if h is None:
            h = self.height - y
        # Clamp to canvas bounds
        x = max(0, min(x, self.width - 1))
        y = max(0, min(y, self.height - 1))
        w = min(w, self.width - x)
        h = min(h, self.height - y)
        rows = []
        for row in range(y, y + h):
            r_list = []
            for col in range(x, x + w):
                (r, g, b), alpha = self.get_pixel(col, row)
                r_list.append([r, g, b, round(alpha, 4)])
            rows.append(r_list)
        return rows

    def flatten_rgb(self, background: np.ndarray) -> np.ndarray:
        """Composited canvas blended over an (H, W, 3) background."""
        a = self.composited.alpha.astype(np.float32)[:, :, np.newaxis]
        out = background * (1.0 - a) + self.composited.colors * a
        return np.clip(out + 0.5, 0, 255).astype(np.uint8)

    @staticmethod
    def _layer_surface(layer: Layer, opacity: float, transparent: bool,
                       scale: int) -> pygame.Surface:
        alpha = layer.alpha.astype(np.float64) * opacity
        if transparent:
            rgb = np.where((alpha > 0)[:, :, np.newaxis], layer.colors, 0)
            a = np.floor(alpha * 255.0 + 0.5)
        else:
            rgb = np.floor(layer.colors * alpha[:, :, np.newaxis] + 0.5)
            a = np.full(alpha.shape, 255)
        rgba = np.dstack([rgb, a]).clip(0, 255).astype(np.uint8)
        if scale > 1:
            rgba = rgba.repeat(scale, axis=0).repeat(scale, axis=1)
        h, w = rgba.shape[:2]
        return pygame.image.frombuffer(rgba.tobytes(), (w, h), "RGBA").copy()

    def export_png(self, path: str, scale: int = 1, transparent: bool = True,
                   separate: bool = False) -> list[str]:
        """Write the composited canvas, or each visible layer, as PNG."""
        scale = max(1, scale)
        if not separate:
            pygame.image.save(self._layer_surface(self.composited, 1.0, transparent, scale), path)
            self._notify(f"Exported to {path}")
            return [path]
        stem = path[:-len(".png")] if path.endswith(".png") else path
        written = []
        for idx, layer in enumerate(self.layers):
            if not layer.visible:
                continue
            layer_path = f"{stem}_{idx + 1}.png"
            pygame.image.save(
                self._layer_surface(layer, layer.opacity, transparent, scale), layer_path)
            written.append(layer_path)
        self._notify(f"Exported {len(written)} layers")
        return written

    # --- Command handlers: state (no undo) ---

    def _do_set_color(self, cmd: dict):
        self.state.selection = (cmd["r"], cmd["g"], cmd["b"])

    def _do_set_tool(self, cmd: dict):
        self.state.selection = Tool(cmd["tool"])

    def _do_set_opacity(self, cmd: dict):
        self.state.opacity = max(0.0, min(1.0, float(cmd["opacity"])))

    def _do_set_pen_size(self, cmd: dict):
        self.state.pen_size = max(1, int(cmd["size"]))

    def _do_set_pen_shape(self, cmd: dict):
        self.set_pen_shape(cmd["shape"])

    def _do_set_symmetry(self, cmd: dict):
        self.set_symmetry(cmd["mode"], cmd.get("axis"))

    def _do_cycle_symmetry(self, cmd: dict):
        self.cycle_symmetry()

    def _do_set_snap(self, cmd: dict):
        self.set_snap(cmd["enabled"], cmd.get("mode"))

    def _do_set_shade_factor(self, cmd: dict):
        self.state.shade_factor = max(0.0, min(1.0, float(cmd["factor"])))

    def _do_set_protect_stroke(self, cmd: dict):
        self.state.protect_stroke = bool(cmd["enabled"])

    def _do_set_spray(self, cmd: dict):
        if "size" in cmd:
            self.state.spray_size = max(1, int(cmd["size"]))
        if "speed" in cmd:
            self.state.spray_speed = max(1, int(cmd["speed"]))
        if "intensity" in cmd:
            self.state.spray_intensity = max(0.0, min(1.0, float(cmd["intensity"])))

    def _do_set_cursor(self, cmd: dict):
        self.cursor_pos = (max(0, min(cmd["x"], self.width - 1)),
                           max(0, min(cmd["y"], self.height - 1)))

    def _do_pick_color(self, cmd: dict):
        self.pick_color(cmd["x"], cmd["y"])

    def _do_use_palette(self, cmd: dict):
        self.use_palette(cmd["name"])

    def _do_import_palette(self, cmd: dict):
        self.import_palette(cmd["path"])

    # --- Command handlers: drawing (undoable) ---

    def _do_draw_point(self, cmd: dict):
        self._stroke([(cmd["x"], cmd["y"])], self.apply_brush)

    def _do_draw_path(self, cmd: dict):
        self.draw_path(cmd["points"])

    def _do_erase_point(self, cmd: dict):
        self._stroke([(cmd["x"], cmd["y"])], self.erase_brush)

    def _do_erase_path(self, cmd: dict):
        self.erase_path(cmd["points"])

    def _do_flood_fill(self, cmd: dict):
        if "r" in cmd:
            self.fill_from_point(cmd["x"], cmd["y"], (cmd["r"], cmd["g"], cmd["b"]),
                                 cmd.get("alpha", 1.0))
        else:
            self.fill_area(cmd["x"], cmd["y"])

    def _do_spray(self, cmd: dict):
        if isinstance(self.state.selection, Tool):
            self._notify("Select a color to spray.")
            return
        self.save_state_for_undo()
        for _ in range(max(1, cmd.get("bursts", 1))):
            self.apply_spray(cmd.get("x"), cmd.get("y"))

    def _do_clear(self, cmd: dict):
        self.clear_layer()

    def _do_undo(self, cmd: dict):
        self.undo()

    def _do_redo(self, cmd: dict):
        self.redo()

    # --- Command handlers: layers and canvas ---

    def _do_add_layer(self, cmd: dict):
        self.add_layer(cmd.get("name"))

    def _do_delete_layer(self, cmd: dict):
        self.delete_active_layer()

    def _do_select_layer(self, cmd: dict):
        self.select_layer(cmd["index"])

    def _do_move_layer(self, cmd: dict):
        if cmd["direction"] == "up":
            self.move_layer_up()
        else:
            self.move_layer_down()

    def _do_toggle_layer_visibility(self, cmd: dict):
        self.toggle_layer_visibility()

    def _do_set_layer_opacity(self, cmd: dict):
        self.set_layer_opacity(float(cmd["opacity"]))

    def _do_rename_layer(self, cmd: dict):
        self.rename_layer(cmd["name"])

    def _do_merge_down(self, cmd: dict):
        self.merge_down()

    def _do_resize(self, cmd: dict):
        self.resize_canvas(cmd["width"], cmd["height"])
