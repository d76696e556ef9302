# --------------------------------------------------------
# File: src/world/config.py
#
# Constants for the fluid chemistry and the default
# simulation parameters of a grid.
# Kept separate so tweaking the ecology is easy.
# --------------------------------------------------------

import os
from dataclasses import dataclass

# Fluid channel layout of every tile
FLUID_CHANNELS = 8
FOOD = 0
STRUCTURE = 1   # 1.0 at creation; never diffuses and does not gate the exchange
TERRAIN = 2     # seeded from noise, moved by explosions
KILL = 3
SIGNALS = (4, 5, 6, 7)

# Kill chemistry: organisms die outside of [LOWER, UPPER]
KILL_FLUID_NORMAL = 1.0
KILL_FLUID_UPPER_THRESHOLD = 1.05
KILL_FLUID_LOWER_THRESHOLD = 0.95

# Diffusion coefficients (per direction). Six neighbours must not
# move more than the whole tile, so MAX_DIFFUSION stays below 1/6.
NORMAL_DIFFUSION = 0.08
MAX_DIFFUSION = 0.16

# Per-channel diffusion rates for the two regimes
DYN_RATES = (1.0, 0.0, 0.0, 1.0, 1.0, 1.0, 1.0, 1.0)
FLAT_SIGNAL_RATE = 0.25
FLAT_RATES = (1.0, 0.0, 0.0, 1.0) + (FLAT_SIGNAL_RATE,) * 4

# Food regrowth, scaled by terrain fertility
FOOD_REGEN_RATE = 4.0
FOOD_CAP = 1200.0

# Colour normalisation used by the renderers
KILL_FLUID_COLOR_NORMAL = 0.01
SIGNAL_FLUID_SQRT_NORMAL = 5.0
SIGNAL_FLUID_COLOR_NORMAL = 0.4
FOOD_FLUID_COLOR_NORMAL = 600.0

# Terrain noise
TERRAIN_WAVELENGTH = 24.0
TERRAIN_OCTAVES = 4


@dataclass
class GridParams:
    consumption: float = 2.0
    spawn_rate: float = 0.5
    inhale_minimum: int = 1
    inhale_cap: int = 60
    movement_cost: int = 1
    divide_cost: int = 12
    explode_requirement: int = 30
    death_release_coefficient: float = 1.0
    explode_amount: float = 0.25


def default_workers() -> int:
    """Worker threads for the data-parallel phases."""
    value = os.getenv("HEXCOLONY_WORKERS")
    if value:
        return max(1, int(value))
    return os.cpu_count() or 1
