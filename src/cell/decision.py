# -------------------------------------------------
# src/cell/decision.py
"""
What an organism wants to do this tick.

A Decision pairs one choice with the six diffusion coefficients the
organism wants on its tile. A tile without an organism has no Decision
at all (None), which is different from an organism choosing Rest.
"""
from dataclasses import dataclass
from typing import Tuple, Union

from world.hexgrid import Direction


@dataclass(frozen=True)
class Rest:
    pass


@dataclass(frozen=True)
class Move:
    direction: Direction


@dataclass(frozen=True)
class Divide:
    # mate == spawn means self-division into the spawn tile
    mate: Direction
    spawn: Direction


@dataclass(frozen=True)
class Explode:
    positive: bool


@dataclass(frozen=True)
class Suicide:
    pass


Choice = Union[Rest, Move, Divide, Explode, Suicide]


@dataclass(frozen=True)
class Decision:
    choice: Choice
    coefficients: Tuple[float, ...]
