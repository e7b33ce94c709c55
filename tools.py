"""MCP tool definitions. Pushes drawing commands onto a thread-safe queue."""

import json
import queue
import threading
from typing import Optional
from mcp.server.fastmcp import FastMCP

from brush import VALID_PEN_SHAPES, VALID_SYMMETRY_MODES
from palettes import BUILT_IN_PALETTES, Tool
from pixels import parse_hex_color
from snapping import VALID_SNAP_MODES


def clamp(value, lo, hi):
    return max(lo, min(hi, value))


def create_mcp_server(command_queue: queue.Queue) -> FastMCP:
    mcp = FastMCP("layer-paint-mcp")

    def _request_response(cmd: dict, timeout: float = 5.0):
        """Send a command to the main thread and wait for a response."""
        event = threading.Event()
        result: dict = {}
        cmd["_event"] = event
        cmd["_result"] = result
        command_queue.put(cmd)
        if not event.wait(timeout):
            raise TimeoutError("Main thread did not respond in time")
        if "error" in result:
            raise RuntimeError(result["error"])
        return result["data"]

    # --- Session info ---

    @mcp.tool()
    def get_canvas_info() -> str:
        """Get canvas dimensions, layers, and current drawing settings as JSON."""
        return json.dumps(_request_response({"action": "get_info"}))

    @mcp.tool()
    def get_status() -> str:
        """Return the most recent status message (e.g. why an operation was rejected)."""
        return _request_response({"action": "get_status"}) or "No status"

    # --- Selection and tool parameters ---

    @mcp.tool()
    def set_color(r: int, g: int, b: int) -> str:
        """Select a paint color (RGB, each 0-255)."""
        r, g, b = clamp(r, 0, 255), clamp(g, 0, 255), clamp(b, 0, 255)
        command_queue.put({"action": "set_color", "r": r, "g": g, "b": b})
        return f"Color set to rgb({r}, {g}, {b})"

    @mcp.tool()
    def set_hex_color(hex_color: str) -> str:
        """Select a paint color given as #RRGGBB."""
        color = parse_hex_color(hex_color)
        if color is None:
            return f"Invalid color '{hex_color}', expected #RRGGBB"
        r, g, b = color
        command_queue.put({"action": "set_color", "r": r, "g": g, "b": b})
        return f"Color set to rgb({r}, {g}, {b})"

    @mcp.tool()
    def set_tool(tool: str) -> str:
        """Select a shading tool instead of a color: lighter, darker, or blur."""
        valid = [t.value for t in Tool]
        if tool not in valid:
            return f"Unknown tool '{tool}'. Choose one of: {', '.join(valid)}"
        command_queue.put({"action": "set_tool", "tool": tool})
        return f"Tool set to {tool}"

    @mcp.tool()
    def set_opacity(opacity: float) -> str:
        """Set paint opacity (0.0-1.0). Also the blur strength."""
        opacity = clamp(opacity, 0.0, 1.0)
        command_queue.put({"action": "set_opacity", "opacity": opacity})
        return f"Opacity set to {opacity:.2f}"

    @mcp.tool()
    def set_pen_size(size: int) -> str:
        """Set the pen size in pixels (1-50)."""
        size = clamp(size, 1, 50)
        command_queue.put({"action": "set_pen_size", "size": size})
        return f"Pen size set to {size}"

    @mcp.tool()
    def set_pen_shape(shape: str) -> str:
        """Set the pen shape: circular or square."""
        if shape not in VALID_PEN_SHAPES:
            return f"Unknown pen shape '{shape}'. Choose one of: {', '.join(VALID_PEN_SHAPES)}"
        command_queue.put({"action": "set_pen_shape", "shape": shape})
        return f"Pen shape set to {shape}"

    @mcp.tool()
    def set_symmetry(mode: str, axis: Optional[int] = None) -> str:
        """Mirror brush and eraser strokes.

        mode: off, vertical (mirror across column `axis`), horizontal (row
        `axis`), diagonal_forward (line y = x + axis) or diagonal_backward
        (line y = -x + axis). Omit axis to mirror around the canvas centre.
        Fill and spray are never mirrored."""
        if mode not in VALID_SYMMETRY_MODES:
            return f"Unknown symmetry mode '{mode}'. Choose one of: {', '.join(VALID_SYMMETRY_MODES)}"
        command_queue.put({"action": "set_symmetry", "mode": mode, "axis": axis})
        return f"Symmetry set to {mode}" + ("" if axis is None else f" at {axis}")

    @mcp.tool()
    def set_snap_to_palette(enabled: bool, mode: Optional[str] = None) -> str:
        """Confine lighter/darker/blur results to the active palette.

        mode: closest_rgb (RGB distance plus channel-ratio penalty) or
        closest_hue (RGB distance plus hue penalty, hues further than 45
        degrees apart are never chosen)."""
        if mode is not None and mode not in VALID_SNAP_MODES:
            return f"Unknown snap mode '{mode}'. Choose one of: {', '.join(VALID_SNAP_MODES)}"
        command_queue.put({"action": "set_snap", "enabled": enabled, "mode": mode})
        return f"Snap to palette {'enabled' if enabled else 'disabled'}"

    @mcp.tool()
    def set_spray(size: Optional[int] = None, speed: Optional[int] = None,
                  intensity: Optional[float] = None) -> str:
        """Configure the spray: area size, attempts per burst, and hit probability.

        Omitted parameters keep their current values."""
        cmd: dict = {"action": "set_spray"}
        if size is not None:
            cmd["size"] = clamp(size, 1, 50)
        if speed is not None:
            cmd["speed"] = clamp(speed, 1, 100)
        if intensity is not None:
            cmd["intensity"] = clamp(intensity, 0.01, 1.0)
        if len(cmd) == 1:
            return "No spray settings given"
        command_queue.put(cmd)
        changed = ", ".join(f"{k} {v}" for k, v in cmd.items() if k != "action")
        return f"Spray set to {changed}"

    # --- Drawing ---

    @mcp.tool()
    def draw_point(x: int, y: int) -> str:
        """Apply the current color or tool with the pen at (x, y)."""
        command_queue.put({"action": "draw_point", "x": x, "y": y})
        return f"Drew point at ({x}, {y})"

    @mcp.tool()
    def draw_path(points: list[list[int]]) -> str:
        """Draw one continuous stroke through a list of [x, y] coordinate pairs.

        Within a stroke each pixel is painted at most once."""
        command_queue.put({"action": "draw_path", "points": points})
        return f"Drew path through {len(points)} points"

    @mcp.tool()
    def erase_point(x: int, y: int) -> str:
        """Erase with the pen at (x, y) on the active layer."""
        command_queue.put({"action": "erase_point", "x": x, "y": y})
        return f"Erased at ({x}, {y})"

    @mcp.tool()
    def erase_path(points: list[list[int]]) -> str:
        """Erase along a list of [x, y] coordinate pairs on the active layer."""
        command_queue.put({"action": "erase_path", "points": points})
        return f"Erased path through {len(points)} points"

    @mcp.tool()
    def flood_fill(x: int, y: int) -> str:
        """Bucket-fill the region at (x, y) of the active layer with the current color and opacity."""
        command_queue.put({"action": "flood_fill", "x": x, "y": y})
        return f"Flood filled at ({x}, {y})"

    @mcp.tool()
    def spray(x: int, y: int, bursts: int = 1) -> str:
        """Spray the current color around (x, y) `bursts` times (1-100)."""
        bursts = clamp(bursts, 1, 100)
        command_queue.put({"action": "spray", "x": x, "y": y, "bursts": bursts})
        return f"Sprayed {bursts} bursts at ({x}, {y})"

    @mcp.tool()
    def pick_color(x: int, y: int) -> str:
        """Select the visible color at (x, y) and add it to the palette."""
        command_queue.put({"action": "pick_color", "x": x, "y": y})
        return f"Picked color at ({x}, {y})"

    @mcp.tool()
    def clear_layer() -> str:
        """Clear the active layer to transparent."""
        command_queue.put({"action": "clear"})
        return "Active layer cleared"

    @mcp.tool()
    def undo() -> str:
        """Undo the last change to the active layer."""
        command_queue.put({"action": "undo"})
        return "Undo performed"

    @mcp.tool()
    def redo() -> str:
        """Redo the last undone change."""
        command_queue.put({"action": "redo"})
        return "Redo performed"

    @mcp.tool()
    def resize_canvas(new_width: int, new_height: int) -> str:
        """Resize the canvas (1-512 per side). All layer content is discarded."""
        new_width, new_height = clamp(new_width, 1, 512), clamp(new_height, 1, 512)
        command_queue.put({"action": "resize", "width": new_width, "height": new_height})
        return f"Canvas resized to {new_width}x{new_height}"

    # --- Layers ---

    @mcp.tool()
    def add_layer(name: Optional[str] = None) -> str:
        """Add an empty layer on top of the stack and make it active."""
        command_queue.put({"action": "add_layer", "name": name})
        return "Layer added"

    @mcp.tool()
    def delete_layer() -> str:
        """Delete the active layer. The last remaining layer cannot be deleted."""
        return _request_response({"action": "delete_layer"})

    @mcp.tool()
    def select_layer(index: int) -> str:
        """Make layer `index` active (0 is the bottom layer)."""
        command_queue.put({"action": "select_layer", "index": index})
        return f"Selected layer {index}"

    @mcp.tool()
    def move_layer(direction: str) -> str:
        """Move the active layer up (towards the top) or down."""
        if direction not in ("up", "down"):
            return "Direction must be 'up' or 'down'"
        command_queue.put({"action": "move_layer", "direction": direction})
        return f"Moved layer {direction}"

    @mcp.tool()
    def toggle_layer_visibility() -> str:
        """Show or hide the active layer."""
        command_queue.put({"action": "toggle_layer_visibility"})
        return "Toggled layer visibility"

    @mcp.tool()
    def set_layer_opacity(opacity: float) -> str:
        """Set the active layer's opacity (0.0-1.0)."""
        opacity = clamp(opacity, 0.0, 1.0)
        command_queue.put({"action": "set_layer_opacity", "opacity": opacity})
        return f"Layer opacity set to {opacity:.2f}"

    @mcp.tool()
    def rename_layer(name: str) -> str:
        """Rename the active layer."""
        command_queue.put({"action": "rename_layer", "name": name})
        return f"Layer renamed to {name}"

    @mcp.tool()
    def merge_down() -> str:
        """Merge the active layer into the layer below it."""
        return _request_response({"action": "merge_down"})

    # --- Palettes ---

    @mcp.tool()
    def use_palette(name: str) -> str:
        """Switch the active color palette to a built-in one."""
        if name not in BUILT_IN_PALETTES:
            return f"Unknown palette '{name}'. Available: {', '.join(sorted(BUILT_IN_PALETTES))}"
        command_queue.put({"action": "use_palette", "name": name})
        return f"Palette set to {name}"

    @mcp.tool()
    def get_palette() -> str:
        """Return the active color palette as a JSON list of [r, g, b]."""
        return json.dumps(_request_response({"action": "get_palette"}))

    @mcp.tool()
    def palette_from_image(file_path: str, add_to_current: bool = False) -> str:
        """Extract a 16-color palette from an image with k-means.

        Replaces the active palette, or with add_to_current merges in the
        colors that are not already present."""
        return _request_response({"action": "palette_from_image", "path": file_path,
                                  "add": add_to_current}, timeout=30.0)

    @mcp.tool()
    def import_palette(file_path: str) -> str:
        """Load a palette file (JSON list of [r, g, b]) as the active palette."""
        return _request_response({"action": "import_palette", "path": file_path})

    @mcp.tool()
    def save_palette(file_path: str, last_generated: bool = False) -> str:
        """Save the active palette (or the last image palette) to a JSON file."""
        return _request_response({"action": "save_palette", "path": file_path,
                                  "last_generated": last_generated})

    # --- Readback ---

    @mcp.tool()
    def get_canvas_pixels(x: Optional[int] = None, y: Optional[int] = None,
                          width: Optional[int] = None, height: Optional[int] = None) -> str:
        """Return composited pixels as a JSON 2D array of [r, g, b, alpha] (row-major).

        All parameters are optional. Omit them to get the full canvas."""
        cmd: dict = {"action": "get_pixels"}
        if x is not None:
            cmd["x"] = x
        if y is not None:
            cmd["y"] = y
        if width is not None:
            cmd["w"] = width
        if height is not None:
            cmd["h"] = height
        pixels = _request_response(cmd)
        return json.dumps(pixels)

    @mcp.tool()
    def save_canvas(file_path: str, scale: int = 1, transparent: bool = True,
                    separate_layers: bool = False) -> str:
        """Save the canvas to PNG, optionally upscaled, or one PNG per visible layer."""
        return _request_response({
            "action": "save_file", "path": file_path, "scale": clamp(scale, 1, 64),
            "transparent": transparent, "separate": separate_layers,
        })

    return mcp
