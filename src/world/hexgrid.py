# --------------------------------------------------------
# File: src/world/hexgrid.py
"""
Toroidal hex topology.

Tiles live on an offset ("shoved row") layout: even rows sit half a tile
to the right of odd rows, so the neighbour offsets depend on the parity of y.
Every coordinate is wrapped modulo the grid size, the left edge touches the
right edge and the top row touches the bottom row.

Neighbours are always listed in the canonical Direction order. A neighbour
found at position i sees this tile at position (i + 3) % 6.
"""
from enum import IntEnum
from typing import List, Tuple

Coord = Tuple[int, int]


class Direction(IntEnum):
    UP_RIGHT = 0
    UP_LEFT = 1
    LEFT = 2
    DOWN_LEFT = 3
    DOWN_RIGHT = 4
    RIGHT = 5

    def flip(self) -> "Direction":
        return Direction((self + 3) % 6)

    def delta(self, even_row: bool) -> Coord:
        return EVEN_ROW_DELTAS[self] if even_row else ODD_ROW_DELTAS[self]


# (dx, dy) in Direction order
EVEN_ROW_DELTAS: Tuple[Coord, ...] = (
    (1, -1),   # UP_RIGHT
    (0, -1),   # UP_LEFT
    (-1, 0),   # LEFT
    (0, 1),    # DOWN_LEFT
    (1, 1),    # DOWN_RIGHT
    (1, 0),    # RIGHT
)
ODD_ROW_DELTAS: Tuple[Coord, ...] = (
    (0, -1),
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, 1),
    (1, 0),
)


def in_direction(x: int, y: int, width: int, height: int, direction: Direction) -> Coord:
    """Return the wrapped coordinate next to (x, y) in `direction`."""
    dx, dy = direction.delta(y % 2 == 0)
    return (x + dx) % width, (y + dy) % height


def neighbor_coords(x: int, y: int, width: int, height: int) -> List[Coord]:
    deltas = EVEN_ROW_DELTAS if y % 2 == 0 else ODD_ROW_DELTAS
    return [((x + dx) % width, (y + dy) % height) for dx, dy in deltas]


def row_shards(height: int, workers: int) -> List[range]:
    """Split rows into contiguous, disjoint ranges, one per worker.

    Ranges that would be empty (more workers than rows) are dropped.
    """
    n = max(1, workers)
    shards = [range(height * i // n, height * (i + 1) // n) for i in range(n)]
    return [r for r in shards if len(r) > 0]
