# --------------------------------------------------------
# File: src/rendering/debug_renderer.py
"""
Very small headless/debug renderer that prints basic stats to console every tick.
Useful for long runs and for testing without a window.
"""
import sys

from .renderer import Renderer


class DebugRenderer(Renderer):
    def __init__(self, simulation=None, out=None, every: int = 1):
        self.sim = simulation
        self.out = out if out is not None else sys.stdout
        self.every = max(1, every)

    def attach(self, simulation):
        self.sim = simulation

    def run(self, ticks=100):
        for _ in range(ticks):
            stats = self.sim.step()
            if stats is None or self.sim.tick % self.every != 0:
                continue
            print(
                f"Tick {self.sim.tick:05d} | Cells: {self.sim.grid.population():5d} | "
                f"+{stats.spawned + stats.divided + stats.mated} "
                f"-{stats.died + stats.starved} | moves {stats.moved} | collisions {stats.collisions}",
                file=self.out,
            )
