import numpy as np
import pytest

from cell.decision import Decision, Rest
from world.config import NORMAL_DIFFUSION, GridParams
from world.grid import Grid


class StubCell:
    """Organism with a fixed choice, recording how it was born."""

    def __init__(self, choice=None, inhale=10, coefficients=None):
        self.choice = choice if choice is not None else Rest()
        self.inhale = inhale
        self.suicide = False
        self.coefficients = tuple(coefficients) if coefficients is not None else (NORMAL_DIFFUSION,) * 6
        self.parents = ()

    def decide(self, own, neighbors, presents):
        return Decision(choice=self.choice, coefficients=self.coefficients)

    def divide(self, rng):
        child = StubCell(inhale=5)
        child.parents = (self,)
        return child

    def mate(self, other, rng):
        child = StubCell(inhale=5)
        child.parents = (self, other)
        return child


@pytest.fixture
def stub_cell():
    return StubCell


@pytest.fixture
def make_grid():
    def _make(width=6, height=6, workers=2, **params):
        params.setdefault("spawn_rate", 0.0)
        grid = Grid(
            width,
            height,
            params=GridParams(**params),
            terrain=np.zeros((height, width)),
            organism_factory=lambda rng: StubCell(),
            workers=workers,
        )
        grid.spawning = False
        return grid

    return _make
