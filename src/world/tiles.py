# --------------------------------------------------------
# File: src/world/tiles.py
"""
Tile store types.

A grid owns a flat, row-major list of Hex tiles (index = x + y * width).
Delta is the per-tick scratch record built by the gather pass of delta
resolution; it is never stored on a tile.
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional

import numpy as np

from .config import KILL_FLUID_NORMAL, NORMAL_DIFFUSION
from .hexgrid import Coord
from .solution import Solution

MAX_ATTEMPTS = 2


@dataclass
class Hex:
    solution: Solution
    cell: Optional[Any] = None
    decision: Optional[Any] = None

    @property
    def occupied(self) -> bool:
        return self.cell is not None


@dataclass(frozen=True)
class MateAttempt:
    mate: Coord
    source: Coord


@dataclass
class Delta:
    movement_attempts: List[Coord] = field(default_factory=list)
    mate_attempts: List[MateAttempt] = field(default_factory=list)
    explode: float = 0.0
    suicide: bool = False

    def full(self) -> bool:
        return len(self.movement_attempts) == MAX_ATTEMPTS or len(self.mate_attempts) == MAX_ATTEMPTS


def initial_solution(terrain: float) -> Solution:
    return Solution(
        [0.0, 1.0, terrain, KILL_FLUID_NORMAL, 0.0, 0.0, 0.0, 0.0],
        [NORMAL_DIFFUSION] * 6,
    )


def make_tiles(width: int, height: int, terrain: np.ndarray) -> List[Hex]:
    if terrain.shape != (height, width):
        raise ValueError(f"terrain must be shape {(height, width)}, got {terrain.shape}")
    return [Hex(solution=initial_solution(float(terrain[y, x]))) for y in range(height) for x in range(width)]
