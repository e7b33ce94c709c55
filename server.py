"""Entry point: starts MCP server thread + pygame preview loop."""

import os
# Suppress pygame welcome message before importing; it prints to stdout
# which would corrupt the MCP stdio JSON-RPC stream.
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"

import functools
import logging
import sys
import queue
import threading

import numpy as np
import pygame
from canvas import Canvas
from palettes import palette_colors
from tools import create_mcp_server

logger = logging.getLogger("server")

WIDTH = int(os.environ.get("PAINT_WIDTH", "64"))
HEIGHT = int(os.environ.get("PAINT_HEIGHT", "64"))
SCALE = int(os.environ.get("PAINT_SCALE", "8"))
TOOLBAR_H = 40
MIN_WINDOW_W = 200
FPS = 30
CHECKER_SIZE = 4

# Toolbar colours
TB_BG = (220, 220, 220)
TB_BTN = (180, 180, 180)
TB_BTN_HOVER = (160, 160, 160)
TB_TEXT = (30, 30, 30)
CHECKER_LIGHT = 204
CHECKER_DARK = 153


def configure_logging():
    # stdout belongs to the MCP transport
    logging.basicConfig(
        stream=sys.stderr,
        level=os.environ.get("PAINT_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run_mcp_server(mcp_server):
    """Target for the daemon thread: runs the MCP stdio server."""
    mcp_server.run(transport="stdio")


@functools.lru_cache(maxsize=4)
def checkerboard(width: int, height: int) -> np.ndarray:
    """(H, W, 3) grey checkerboard shown under transparent pixels."""
    ys, xs = np.indices((height, width))
    light = ((xs // CHECKER_SIZE + ys // CHECKER_SIZE) % 2) == 0
    board = np.where(light, CHECKER_LIGHT, CHECKER_DARK).astype(np.float32)
    return np.repeat(board[:, :, np.newaxis], 3, axis=2)


def window_size(canvas: Canvas) -> tuple[int, int]:
    return max(canvas.width * SCALE, MIN_WINDOW_W), canvas.height * SCALE + TOOLBAR_H


def render_canvas(canvas: Canvas, scale: int) -> pygame.Surface:
    rgb = canvas.flatten_rgb(checkerboard(canvas.width, canvas.height))
    surface = pygame.surfarray.make_surface(np.transpose(rgb, (1, 0, 2)))
    return pygame.transform.scale(surface, (canvas.width * scale, canvas.height * scale))


def draw_toolbar(screen: pygame.Surface, font, button: pygame.Rect, hovered: bool,
                 status: str | None):
    """Save button on the left, latest status message beside it."""
    screen.fill(TB_BG)
    pygame.draw.rect(screen, TB_BTN_HOVER if hovered else TB_BTN, button, border_radius=4)
    pygame.draw.rect(screen, TB_TEXT, button, width=1, border_radius=4)
    label = font.render("Save", True, TB_TEXT)
    screen.blit(label, label.get_rect(center=button.center))
    if status:
        screen.blit(font.render(status, True, TB_TEXT), (button.right + 12, 12))


def _save_dialog_and_write(canvas: Canvas):
    """Open a Tk file-save dialog (runs on main thread) and write the PNG."""
    import tkinter as tk
    from tkinter import filedialog
    root = tk.Tk()
    root.withdraw()
    path = filedialog.asksaveasfilename(
        defaultextension=".png",
        filetypes=[("PNG image", "*.png"), ("All files", "*.*")],
        title="Save canvas as…",
    )
    root.destroy()
    if path:
        canvas.export_png(path)


def _canvas_info(canvas: Canvas) -> dict:
    state = canvas.state
    selection = state.selection
    return {
        "width": canvas.width,
        "height": canvas.height,
        "selection": getattr(selection, "value", None) or list(selection),
        "opacity": state.opacity,
        "pen_size": state.pen_size,
        "pen_shape": state.pen_shape,
        "symmetry": {"mode": state.symmetry_mode, "axis": state.symmetry_axis},
        "snap_to_palette": state.snap_to_palette,
        "snap_mode": state.snap_mode,
        "active_layer_index": canvas.active_layer_index,
        "layers": [{"name": layer.name, "visible": layer.visible, "opacity": layer.opacity}
                   for layer in canvas.layers],
        "palette_size": len(canvas.color_palette),
        "can_undo": canvas.can_undo(),
        "can_redo": canvas.can_redo(),
    }


def _handle_request(cmd: dict, canvas: Canvas):
    """Process a request/response command from the MCP tool thread."""
    event: threading.Event = cmd["_event"]
    result: dict = cmd["_result"]
    action = cmd.get("action")
    try:
        if action == "get_pixels":
            result["data"] = canvas.get_pixels_rgba(
                cmd.get("x", 0), cmd.get("y", 0),
                cmd.get("w"), cmd.get("h"),
            )
        elif action == "get_info":
            result["data"] = _canvas_info(canvas)
        elif action == "get_status":
            result["data"] = canvas.status_message
        elif action == "get_palette":
            result["data"] = [list(c) for c in palette_colors(canvas.color_palette)]
        elif action == "delete_layer":
            canvas.delete_active_layer()
            result["data"] = canvas.status_message
        elif action == "merge_down":
            canvas.merge_down()
            result["data"] = canvas.status_message
        elif action == "palette_from_image":
            canvas.generate_palette_from_image(cmd["path"], cmd.get("add", False))
            result["data"] = canvas.status_message
        elif action == "import_palette":
            canvas.import_palette(cmd["path"])
            result["data"] = canvas.status_message
        elif action == "save_palette":
            canvas.save_palette(cmd["path"], cmd.get("last_generated", False))
            result["data"] = canvas.status_message
        elif action == "save_file":
            written = canvas.export_png(cmd["path"], cmd.get("scale", 1),
                                        cmd.get("transparent", True),
                                        cmd.get("separate", False))
            result["data"] = f"Canvas saved to {', '.join(written)}"
        else:
            result["error"] = f"Unknown request action: {action}"
    except Exception as e:
        logger.exception("Request %s failed", action)
        result["error"] = str(e)
    finally:
        event.set()


def drain_commands(command_queue: queue.Queue, canvas: Canvas):
    """Run every pending command against the canvas on the calling thread."""
    while True:
        try:
            cmd = command_queue.get_nowait()
        except queue.Empty:
            break

        # Request/response bridge commands have an _event key
        if "_event" in cmd:
            _handle_request(cmd, canvas)
        else:
            try:
                canvas.execute(cmd)
            except Exception:
                logger.exception("Command error: %s", cmd.get("action"))


def main():
    configure_logging()

    # Shared command queue between MCP thread and pygame main thread
    command_queue = queue.Queue()

    # Create MCP server with tool definitions
    mcp_server = create_mcp_server(command_queue)

    # Start MCP server in a background daemon thread
    mcp_thread = threading.Thread(target=run_mcp_server, args=(mcp_server,), daemon=True)
    mcp_thread.start()

    # Initialize pygame on the main thread
    pygame.init()
    canvas = Canvas(WIDTH, HEIGHT)
    size = (canvas.width, canvas.height)
    screen = pygame.display.set_mode(window_size(canvas))
    pygame.display.set_caption("Layer Paint MCP")
    clock = pygame.time.Clock()

    font = pygame.font.SysFont(None, 24)
    save_button = pygame.Rect(10, 8, 70, 26)

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif (event.type == pygame.MOUSEBUTTONDOWN and event.button == 1
                    and save_button.collidepoint(event.pos)):
                _save_dialog_and_write(canvas)

        drain_commands(command_queue, canvas)

        # Resize commands change the canvas under the window
        if (canvas.width, canvas.height) != size:
            size = (canvas.width, canvas.height)
            screen = pygame.display.set_mode(window_size(canvas))

        hovered = save_button.collidepoint(pygame.mouse.get_pos())
        draw_toolbar(screen, font, save_button, hovered, canvas.status_message)
        screen.blit(render_canvas(canvas, SCALE), (0, TOOLBAR_H))
        pygame.display.flip()
        clock.tick(FPS)

    pygame.quit()


if __name__ == "__main__":
    main()
