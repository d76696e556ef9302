# --------------------------------------------------------
# File: src/world/solution.py
"""
Fluid solution carried by every tile.

A Solution holds the 8 fluid channels (see world.config for the layout),
six directional diffusion coefficients and a pending-change buffer.

Diffusion is split in two steps so that all tiles can be processed in any
order (or in parallel):
  - diffuse_from() only reads the neighbour and adds to *this* buffer
  - end_cycle() commits the buffer into the channels

Food regrowth is a separate step (regrow()) run after the commit, so the
diffusion itself only ever moves fluid around.

The exchange across an edge uses a symmetric coefficient (the mean of both
sides' directional coefficients), so with the same regime on both sides
whatever leaves one tile arrives in the other.
"""
from enum import Enum
from typing import Sequence

import numpy as np

from .config import (
    DYN_RATES,
    FLAT_RATES,
    FLUID_CHANNELS,
    FOOD,
    FOOD_CAP,
    FOOD_REGEN_RATE,
    TERRAIN,
)

_DYN = np.asarray(DYN_RATES, dtype=np.float64)
_FLAT = np.asarray(FLAT_RATES, dtype=np.float64)


class DiffusionType(Enum):
    FLAT_SIGNALS = "flat"   # neighbour is occupied: signals spread slowly
    DYN_SIGNALS = "dyn"     # neighbour is empty: every channel spreads freely


class Solution:
    def __init__(self, fluids: Sequence[float], coefficients: Sequence[float]):
        self.fluids = np.array(fluids, dtype=np.float64)
        self.coefficients = np.array(coefficients, dtype=np.float64)
        if self.fluids.shape != (FLUID_CHANNELS,):
            raise ValueError(f"fluids must have {FLUID_CHANNELS} channels, got {self.fluids.shape}")
        if self.coefficients.shape != (6,):
            raise ValueError(f"coefficients must have shape (6,), got {self.coefficients.shape}")
        self.diffuse = np.zeros(FLUID_CHANNELS, dtype=np.float64)

    def diffuse_from(self, other: "Solution", kind: DiffusionType, index: int) -> None:
        """Accumulate the exchange with `other`.

        `index` is the direction of this tile as seen from `other`; this
        tile's own coefficient towards `other` is at (index + 3) % 6.
        """
        k = 0.5 * (self.coefficients[(index + 3) % 6] + other.coefficients[index])
        rates = _FLAT if kind is DiffusionType.FLAT_SIGNALS else _DYN
        self.diffuse += k * rates * (other.fluids - self.fluids)

    def end_cycle(self) -> None:
        self.fluids += self.diffuse
        self.diffuse[:] = 0.0

    def regrow(self) -> None:
        food = self.fluids[FOOD]
        if food < FOOD_CAP:
            self.fluids[FOOD] = min(FOOD_CAP, food + FOOD_REGEN_RATE * self.fertility())

    def fertility(self) -> float:
        """Food regrowth factor in [0, 1] derived from the terrain channel."""
        return float(np.clip(0.5 + 0.5 * self.fluids[TERRAIN], 0.0, 1.0))

