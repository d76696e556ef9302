# --------------------------------------------------------
# File: src/world/terrain.py
"""
Terrain seeding: one fractal Perlin scalar per tile.

The generator draws its offsets from the simulation RNG, so two grids
built from equally seeded generators get the same terrain.
"""
import numpy as np
from noise import pnoise2

from .config import TERRAIN_OCTAVES, TERRAIN_WAVELENGTH


class TerrainGenerator:
    def __init__(
        self,
        width: int,
        height: int,
        rng: np.random.Generator,
        wavelength: float = TERRAIN_WAVELENGTH,
        octaves: int = TERRAIN_OCTAVES,
    ):
        self.width = width
        self.height = height
        self.wavelength = float(wavelength)
        self.octaves = int(octaves)
        # Offsets de-correlate different worlds while keeping determinism per seed
        self._offset_x = float(rng.uniform(0.0, 10_000.0))
        self._offset_y = float(rng.uniform(0.0, 10_000.0))
        self._base = int(rng.integers(0, 256))

    def generate(self) -> np.ndarray:
        """Return a (height, width) float64 array, roughly in [-1, 1]."""
        arr = np.zeros((self.height, self.width), dtype=np.float64)
        freq = 1.0 / self.wavelength

        for y in range(self.height):
            ny = y * freq + self._offset_y
            for x in range(self.width):
                nx = x * freq + self._offset_x
                arr[y, x] = pnoise2(nx, ny, octaves=self.octaves, base=self._base)

        return arr
