# -------------------------------------------------
# src/cell/cell.py
"""
The organism living on a tile.

A Cell only knows its genome and two pieces of bookkeeping the grid
reads and writes directly:
  - inhale: unsigned energy counter (grows while fed, paid for moves/divisions)
  - suicide: set by the grid when the cell decides to die

decide() is a pure function of what the cell sees, divide()/mate() draw
from the RNG handed over by the grid.
"""
from typing import Sequence

import numpy as np

from world.config import (
    FLUID_CHANNELS,
    FOOD,
    FOOD_FLUID_COLOR_NORMAL,
    KILL,
    KILL_FLUID_NORMAL,
    MAX_DIFFUSION,
    SIGNALS,
)
from world.hexgrid import Direction

from .decision import Decision, Divide, Explode, Move, Rest, Suicide
from .genome import (
    ACTION_SLICE,
    COEFFICIENT_SLICE,
    EXPLODE_INDEX,
    MATE_SLICE,
    MOVE_SLICE,
    SPAWN_SLICE,
    Genome,
    crossover,
    mutate,
    random_genome,
)

INITIAL_INHALE = 12
INHALE_INPUT_SCALE = 30.0

# Fluids are centred and scaled before going through tanh so that every
# channel lands in a useful range for the policy.
_INPUT_OFFSET = np.zeros(FLUID_CHANNELS, dtype=np.float64)
_INPUT_OFFSET[KILL] = KILL_FLUID_NORMAL
_INPUT_SCALE = np.ones(FLUID_CHANNELS, dtype=np.float64)
_INPUT_SCALE[FOOD] = 1.0 / FOOD_FLUID_COLOR_NORMAL
_INPUT_SCALE[KILL] = 20.0
_INPUT_SCALE[list(SIGNALS)] = 0.2


def _normalise(fluids) -> np.ndarray:
    return np.tanh((np.asarray(fluids, dtype=np.float64) - _INPUT_OFFSET) * _INPUT_SCALE)


class Cell:
    def __init__(self, genome: Genome, inhale: int = INITIAL_INHALE):
        self.genome = genome
        self.inhale = int(inhale)
        self.suicide = False

    @classmethod
    def new(cls, rng: np.random.Generator) -> "Cell":
        return cls(random_genome(rng))

    def decide(self, own: Sequence[float], neighbors: Sequence[Sequence[float]], presents: Sequence[bool]) -> Decision:
        inputs = np.concatenate(
            [
                _normalise(own),
                np.concatenate([_normalise(n) for n in neighbors]),
                np.where(np.asarray(presents, dtype=bool), 1.0, -1.0),
                [np.tanh(self.inhale / INHALE_INPUT_SCALE)],
            ]
        )
        out = self.genome.weights @ inputs + self.genome.bias

        coefficients = MAX_DIFFUSION / (1.0 + np.exp(-out[COEFFICIENT_SLICE]))
        action = int(np.argmax(out[ACTION_SLICE]))
        if action == 1:
            choice = Move(Direction(int(np.argmax(out[MOVE_SLICE]))))
        elif action == 2:
            choice = Divide(
                mate=Direction(int(np.argmax(out[MATE_SLICE]))),
                spawn=Direction(int(np.argmax(out[SPAWN_SLICE]))),
            )
        elif action == 3:
            choice = Explode(positive=bool(out[EXPLODE_INDEX] >= 0.0))
        elif action == 4:
            choice = Suicide()
        else:
            choice = Rest()
        return Decision(choice=choice, coefficients=tuple(float(c) for c in coefficients))

    def divide(self, rng: np.random.Generator) -> "Cell":
        return Cell(mutate(self.genome, rng))

    def mate(self, other: "Cell", rng: np.random.Generator) -> "Cell":
        return Cell(mutate(crossover(self.genome, other.genome, rng), rng))

    def __repr__(self) -> str:
        return f"Cell(inhale={self.inhale}, suicide={self.suicide})"
