# --------------------------------------------------------
# File: src/rendering/arcade_renderer.py
# Window renderer: the hex grid drawn tile by tile, with
# pause (SPACE), single step (S) and zoom (mouse wheel).
# --------------------------------------------------------

import arcade
import numpy as np

from .colors import hex_color
from .hexdraw import hex_center, hex_corners, image_size
from .renderer import Renderer

DEFAULT_BG = arcade.color.BLACK


class ArcadeRenderer(arcade.Window):

    def __init__(self, simulation, tile_size: float = 6.0, ticks_per_frame: int = 1):
        grid = simulation.grid
        w, h = image_size(grid.width, grid.height, tile_size)
        super().__init__(w, h + 24, "Hex Colony", resizable=True)

        self.sim = simulation
        self.tile_size = tile_size
        self.ticks_per_frame = ticks_per_frame
        self.scale = 1.0
        self.remaining = None

    def attach(self, simulation):
        self.sim = simulation

    # --------------------------------------------------------
    # UPDATE LOOP
    # --------------------------------------------------------

    def on_update(self, delta_time):
        if self.sim.paused:
            return
        for _ in range(self.ticks_per_frame):
            if self.remaining is not None:
                if self.remaining <= 0:
                    self.sim.paused = True
                    return
                self.remaining -= 1
            self.sim.step()

    # --------------------------------------------------------
    # RENDER
    # --------------------------------------------------------

    def on_draw(self):
        self.clear()
        arcade.set_background_color(DEFAULT_BG)

        grid = self.sim.grid
        size = self.tile_size * self.scale
        top = self.height - 24
        for i, tile in enumerate(grid.tiles):
            x, y = grid.coord(i)
            cx, cy = hex_center(x, y, size)
            points = [(px, top - py) for px, py in hex_corners(cx, cy, size)]
            rgb = np.clip(np.asarray(hex_color(tile)[:3]), 0.0, 1.0)
            arcade.draw_polygon_filled(points, tuple(int(c * 255.0) for c in rgb))
            if tile.cell is not None:
                arcade.draw_polygon_outline(points, arcade.color.WHITE, 1)

        state = "paused" if self.sim.paused else "running"
        arcade.draw_text(
            f"tick {self.sim.tick}  cells {grid.population()}  {state}",
            8, self.height - 18, arcade.color.WHITE_SMOKE, 11,
        )

    # --------------------------------------------------------
    # INPUT
    # --------------------------------------------------------

    def on_mouse_scroll(self, x, y, scroll_x, scroll_y):
        self.scale *= 1.1 ** scroll_y
        self.scale = max(0.2, min(6.0, self.scale))

    def on_key_press(self, symbol, modifiers):
        if symbol == arcade.key.SPACE:
            self.sim.paused = not self.sim.paused
        elif symbol == arcade.key.S and self.sim.paused:
            self.sim.paused = False
            self.sim.step()
            self.sim.paused = True

    def run(self, ticks=None):
        self.remaining = ticks
        arcade.run()


# pyglet windows carry their own metaclass, so register instead of inheriting
Renderer.register(ArcadeRenderer)
