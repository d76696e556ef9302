# --------------------------------------------------------
# File: src/rendering/hexdraw.py
"""
Hex geometry for drawing and a Pillow preview of the grid.

Pointy-top hexes; even rows are shifted half a hex to the right, which is
the layout the topology in world.hexgrid assumes.
"""
import math
import os
from typing import List, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw

from .colors import hex_color

SQRT3 = math.sqrt(3.0)
OCCUPIED_OUTLINE = (255, 255, 255)


def hex_center(x: int, y: int, size: float) -> Tuple[float, float]:
    shift = 0.5 if y % 2 == 0 else 0.0
    return SQRT3 * size * (x + 0.5 + shift), size + 1.5 * size * y


def hex_corners(cx: float, cy: float, size: float) -> List[Tuple[float, float]]:
    corners = []
    for k in range(6):
        angle = math.radians(60 * k - 30)
        corners.append((cx + size * math.cos(angle), cy + size * math.sin(angle)))
    return corners


def image_size(width: int, height: int, size: float) -> Tuple[int, int]:
    return int(math.ceil(SQRT3 * size * (width + 0.5))), int(math.ceil(size * (1.5 * height + 0.5)))


def render_image(grid, tile_size: float = 6.0) -> Image.Image:
    img = Image.new("RGB", image_size(grid.width, grid.height, tile_size), (0, 0, 0))
    draw = ImageDraw.Draw(img)
    for i, tile in enumerate(grid.tiles):
        x, y = grid.coord(i)
        rgb = np.clip(np.asarray(hex_color(tile)[:3]), 0.0, 1.0)
        fill = tuple(int(c * 255.0) for c in rgb)
        outline = OCCUPIED_OUTLINE if tile.occupied else None
        draw.polygon(hex_corners(*hex_center(x, y, tile_size), tile_size), fill=fill, outline=outline)
    return img


def save_preview(grid, path: str, tile_size: float = 6.0) -> Optional[str]:
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)
    render_image(grid, tile_size).save(path)
    return path
