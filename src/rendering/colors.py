# --------------------------------------------------------
# File: src/rendering/colors.py
"""
Colour mapping of a tile's fluids.

  red   = distance of the kill chemistry from its normal value
  green = food
  blue  = terrain
and every signal channel adds its own tint on top.
"""
from typing import List

import numpy as np

from world.config import (
    FOOD,
    FOOD_FLUID_COLOR_NORMAL,
    KILL,
    KILL_FLUID_COLOR_NORMAL,
    KILL_FLUID_NORMAL,
    SIGNAL_FLUID_COLOR_NORMAL,
    SIGNAL_FLUID_SQRT_NORMAL,
    SIGNALS,
    TERRAIN,
)

SIGNAL_COLORS = (
    (0.0, 0.5, 0.5),
    (0.5, 0.5, 0.5),
    (0.5, 0.0, 0.5),
    (0.5, 0.5, 0.0),
)


def hex_color(tile) -> List[float]:
    """Return [r, g, b, a] floats for a tile (not clipped)."""
    fluids = tile.solution.fluids
    killf = (fluids[KILL] - KILL_FLUID_NORMAL) / KILL_FLUID_COLOR_NORMAL
    color = [
        abs(float(killf)),
        float(fluids[FOOD] / FOOD_FLUID_COLOR_NORMAL),
        0.25 * float(fluids[TERRAIN]),
        1.0,
    ]
    for channel, tint in zip(SIGNALS, SIGNAL_COLORS):
        signalf = np.sqrt(abs(fluids[channel] / SIGNAL_FLUID_SQRT_NORMAL)) / SIGNAL_FLUID_COLOR_NORMAL
        for j in range(3):
            color[j] += tint[j] * float(signalf)
    return color


def color_map(grid) -> np.ndarray:
    """Return an (h, w, 3) uint8 colour image, one pixel per tile."""
    img = np.zeros((grid.height, grid.width, 3), dtype=np.uint8)
    for i, tile in enumerate(grid.tiles):
        x, y = grid.coord(i)
        rgb = np.clip(np.asarray(hex_color(tile)[:3]), 0.0, 1.0)
        img[y, x] = (rgb * 255.0).astype(np.uint8)
    return img
