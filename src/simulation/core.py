# -------------------------------------------------
# File: src/simulation/core.py
#
# Core simulation loop, decoupled from any GUI framework.
# It owns the grid and the single RNG stream, advances one
# tick at a time and exposes a lightweight snapshot for
# renderers / UIs. Ticks are the unit of resumability:
# save() between two ticks and load() continues bit-identically.
# -------------------------------------------------

import json
import logging
import os
from dataclasses import asdict
from typing import Any, Dict, Optional

import numpy as np

from world.config import GridParams
from world.grid import CycleStats, Grid

from .metrics import RunRecorder

logger = logging.getLogger(__name__)


def _npz_path(path: str) -> str:
    # numpy appends the suffix on save when it is missing
    return path if path.endswith(".npz") else path + ".npz"


class Simulation:
    def __init__(self, grid: Grid, rng: np.random.Generator, tick: int = 0):
        """
        Parameters
        ----------
        grid : world.grid.Grid
            The hex grid with its tiles and organisms.
        rng : numpy.random.Generator
            The only source of randomness (spawn, divide, mate).
        """
        self.grid = grid
        self.rng = rng
        self.tick = tick

        # optional metrics recorder (can be attached by callers)
        self.metrics: Optional[RunRecorder] = None

        self.paused: bool = False
        self.last_stats: Optional[CycleStats] = None

    @classmethod
    def create(
        cls,
        width: int,
        height: int,
        seed: Optional[int] = None,
        params: Optional[GridParams] = None,
        workers: Optional[int] = None,
    ) -> "Simulation":
        rng = np.random.default_rng(seed)
        grid = Grid(width, height, rng, params=params, workers=workers)
        return cls(grid, rng)

    # -------------------------------------------------
    # MAIN STEP
    # -------------------------------------------------

    def step(self) -> Optional[CycleStats]:
        """Advance the simulation by one tick unless paused."""
        if self.paused:
            return None

        stats = self.grid.cycle(self.rng)
        self.tick += 1
        self.last_stats = stats

        if self.metrics is not None:
            try:
                self.metrics.update(self, stats)
            except Exception:
                # Metrics collection must never break the main simulation loop.
                logger.exception("Metrics update failed at tick %d", self.tick)
        return stats

    def run(self, ticks: int) -> None:
        for _ in range(ticks):
            self.step()

    def close(self) -> None:
        self.grid.close()

    # -------------------------------------------------
    # SNAPSHOT FOR RENDERERS
    # -------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        """Return a lightweight view of the current state.

        Renderers should treat this as read-only.
        """
        return {
            "tick": self.tick,
            "grid": self.grid,
            "population": self.grid.population(),
            "stats": self.last_stats,
            "paused": self.paused,
        }

    # -------------------------------------------------
    # PERSISTENCE
    # -------------------------------------------------

    def save(self, path: str) -> str:
        path = _npz_path(path)
        d = os.path.dirname(path)
        if d:
            os.makedirs(d, exist_ok=True)
        np.savez_compressed(
            path,
            params=json.dumps(asdict(self.grid.params)),
            rng_state=json.dumps(self.rng.bit_generator.state),
            tick=np.int64(self.tick),
            spawning=np.bool_(self.grid.spawning),
            **self.grid.to_arrays(),
        )
        logger.info("Saved tick %d (%d cells) to %s", self.tick, self.grid.population(), path)
        return path

    @classmethod
    def load(cls, path: str, workers: Optional[int] = None) -> "Simulation":
        path = _npz_path(path)
        with np.load(path) as data:
            params = GridParams(**json.loads(str(data["params"])))
            grid = Grid.from_arrays({k: data[k] for k in data.files}, params=params, workers=workers)
            grid.spawning = bool(data["spawning"])
            rng = np.random.default_rng()
            rng.bit_generator.state = json.loads(str(data["rng_state"]))
            tick = int(data["tick"])
        logger.info("Loaded tick %d (%d cells) from %s", tick, grid.population(), path)
        return cls(grid, rng, tick=tick)
