# --------------------------------------------------------
# File: src/world/grid.py
"""
Grid: the tile store and the per-tick engine.

One tick (cycle) runs these phases, each one a full barrier:

  1. spawn      new organisms on random empty tiles (single thread, shared RNG)
  2. decide     every organism picks a Decision from what it sees
  3. deltas     gather move/mate claims per empty tile, then apply them
  4. fluids     accumulate diffusion from the 6 neighbours, then commit
  5. regrow     food grows back on every tile, scaled by terrain fertility
  6. death      feeding, starvation and poisoning

Phases 2, 3a, 4, 5 and 6 are split in row shards and run on a thread pool.
Shards read any tile but only ever write tiles inside their own rows;
decide and gather do not write at all, they return their results and the
main thread stores them after the join. The apply step of phase 3 moves
organisms between tiles whose identity depends on the data, so it runs
sequentially.

Tiles are stored flat in row-major order (index = x + y * width) and the
neighbour indices of every tile are computed once at construction.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from cell.cell import Cell
from cell.decision import Decision, Divide, Explode, Move, Suicide
from cell.genome import Genome

from .config import (
    FLUID_CHANNELS,
    FOOD,
    KILL,
    KILL_FLUID_LOWER_THRESHOLD,
    KILL_FLUID_UPPER_THRESHOLD,
    NORMAL_DIFFUSION,
    TERRAIN,
    GridParams,
    default_workers,
)
from .hexgrid import Coord, Direction, in_direction, neighbor_coords, row_shards
from .solution import DiffusionType
from .terrain import TerrainGenerator
from .tiles import Delta, Hex, MateAttempt, make_tiles

logger = logging.getLogger(__name__)

# A neighbour found in direction i reaches this tile by heading in _FACING[i]
_FACING = tuple(d.flip() for d in Direction)


@dataclass
class CycleStats:
    spawned: int = 0
    moved: int = 0
    divided: int = 0
    mated: int = 0
    collisions: int = 0
    exploded: int = 0
    died: int = 0
    starved: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def _read_only(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.flags.writeable = False
    return view


class Grid:
    def __init__(
        self,
        width: int,
        height: int,
        rng: Optional[np.random.Generator] = None,
        params: Optional[GridParams] = None,
        terrain: Optional[np.ndarray] = None,
        organism_factory: Optional[Callable[[np.random.Generator], object]] = None,
        workers: Optional[int] = None,
    ):
        if width < 1 or height < 1:
            raise ValueError(f"grid dimensions must be >= 1, got {width}x{height}")
        if height % 2 != 0:
            logger.warning("Odd grid height %d: row parity does not match across the vertical seam", height)

        self.width = width
        self.height = height
        self.params = params if params is not None else GridParams()
        self.spawning = True
        self.organism_factory = organism_factory if organism_factory is not None else Cell.new
        self.workers = workers if workers is not None else default_workers()

        self._shards = row_shards(height, self.workers)
        self._pool: Optional[ThreadPoolExecutor] = None
        self._neighbors: List[Tuple[int, ...]] = [
            tuple(nx + ny * width for nx, ny in neighbor_coords(i % width, i // width, width, height))
            for i in range(width * height)
        ]

        self.tiles: List[Hex] = make_tiles(width, height, self._terrain(terrain, rng))

    def _terrain(self, terrain: Optional[np.ndarray], rng: Optional[np.random.Generator]) -> np.ndarray:
        if terrain is not None:
            return np.asarray(terrain, dtype=np.float64)
        if rng is None:
            raise ValueError("Grid needs either a terrain array or an rng to generate one")
        return TerrainGenerator(self.width, self.height, rng).generate()

    def randomize(self, rng: np.random.Generator) -> None:
        """Throw away every tile and organism and seed a fresh terrain."""
        self.tiles = make_tiles(self.width, self.height, self._terrain(None, rng))

    # --------------------------------------------------------
    # TILE ACCESS
    # --------------------------------------------------------

    def index(self, x: int, y: int) -> int:
        return (x % self.width) + (y % self.height) * self.width

    def coord(self, index: int) -> Coord:
        return index % self.width, index // self.width

    def hex(self, x: int, y: int) -> Hex:
        return self.tiles[self.index(x, y)]

    def neighbors(self, x: int, y: int) -> List[Hex]:
        """The 6 neighbours of (x, y) in canonical Direction order."""
        return [self.tiles[j] for j in self._neighbors[self.index(x, y)]]

    def cells(self) -> Iterator[Tuple[int, int, object]]:
        for i, tile in enumerate(self.tiles):
            if tile.cell is not None:
                x, y = self.coord(i)
                yield x, y, tile.cell

    def population(self) -> int:
        return sum(1 for tile in self.tiles if tile.occupied)

    # --------------------------------------------------------
    # WORKER POOL
    # --------------------------------------------------------

    def _indices(self, rows: range) -> range:
        return range(rows.start * self.width, rows.stop * self.width)

    def _map_shards(self, fn: Callable[[range], object]) -> List[object]:
        """Run fn over every row shard and return the results in shard order."""
        if len(self._shards) == 1:
            return [fn(self._shards[0])]
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=len(self._shards), thread_name_prefix="grid")
        futures = [self._pool.submit(fn, rows) for rows in self._shards]
        # result() re-raises any exception from the worker
        return [f.result() for f in futures]

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def __enter__(self) -> "Grid":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # --------------------------------------------------------
    # TICK
    # --------------------------------------------------------

    def cycle(self, rng: np.random.Generator) -> CycleStats:
        stats = CycleStats()
        if self.spawning:
            self.cycle_spawn(rng, stats)

        self.cycle_cells()

        self.cycle_decisions(rng, stats)

        self.cycle_fluids()

        self.cycle_regrow()

        self.cycle_death(stats)

        logger.debug("cycle stats %s", stats)
        return stats

    # ---------------------------- spawn ----------------------------

    def cycle_spawn(self, rng: np.random.Generator, stats: Optional[CycleStats] = None) -> None:
        rate = self.params.spawn_rate
        if rate >= 1.0:
            attempts = int(rate)
        else:
            attempts = 1 if rng.random() < rate else 0
        for _ in range(attempts):
            tile = self.tiles[int(rng.integers(0, len(self.tiles)))]
            if tile.cell is None:
                tile.cell = self.organism_factory(rng)
                if stats is not None:
                    stats.spawned += 1

    # ---------------------------- decide ---------------------------

    def cycle_cells(self) -> None:
        results = self._map_shards(self._decide_rows)
        for rows, decisions in zip(self._shards, results):
            for i, decision in zip(self._indices(rows), decisions):
                self.tiles[i].decision = decision

    def _decide_rows(self, rows: range) -> List[Optional[Decision]]:
        tiles = self.tiles
        out: List[Optional[Decision]] = []
        for i in self._indices(rows):
            this = tiles[i]
            if this.cell is None:
                out.append(None)
                continue
            neighbors = [tiles[j] for j in self._neighbors[i]]
            out.append(
                this.cell.decide(
                    _read_only(this.solution.fluids),
                    [_read_only(n.solution.fluids) for n in neighbors],
                    [n.cell is not None for n in neighbors],
                )
            )
        return out

    # ---------------------------- deltas ---------------------------

    def cycle_decisions(self, rng: np.random.Generator, stats: Optional[CycleStats] = None) -> None:
        if stats is None:
            stats = CycleStats()
        deltas: List[Delta] = []
        for part in self._map_shards(self._gather_rows):
            deltas.extend(part)
        self._apply_deltas(deltas, rng, stats)

    def _gather_rows(self, rows: range) -> List[Delta]:
        tiles = self.tiles
        explode_requirement = self.params.explode_requirement
        explode_amount = self.params.explode_amount
        out: List[Delta] = []
        for i in self._indices(rows):
            this = tiles[i]
            neighbors = self._neighbors[i]
            delta = Delta()

            if this.decision is not None and isinstance(this.decision.choice, Suicide):
                delta.suicide = True

            # Only empty tiles can be moved or spawned into.
            if this.cell is None:
                for pos, j in enumerate(neighbors):
                    decision = tiles[j].decision
                    if decision is None:
                        continue
                    choice = decision.choice
                    if isinstance(choice, Move) and choice.direction == _FACING[pos]:
                        delta.movement_attempts.append(self.coord(j))
                    elif isinstance(choice, Divide) and choice.spawn == _FACING[pos]:
                        sx, sy = self.coord(j)
                        delta.mate_attempts.append(
                            MateAttempt(
                                mate=in_direction(sx, sy, self.width, self.height, choice.mate),
                                source=(sx, sy),
                            )
                        )
                    else:
                        continue
                    # Two claims already cancel each other, no need to look further.
                    if delta.full():
                        break

            for j in neighbors:
                n = tiles[j]
                if n.decision is None or not isinstance(n.decision.choice, Explode):
                    continue
                if n.cell is not None and n.cell.inhale >= explode_requirement:
                    delta.explode += explode_amount if n.decision.choice.positive else -explode_amount

            out.append(delta)
        return out

    def _apply_deltas(self, deltas: Sequence[Delta], rng: np.random.Generator, stats: CycleStats) -> None:
        tiles = self.tiles
        for x in range(self.width):
            for y in range(self.height):
                i = x + y * self.width
                this = tiles[i]
                delta = deltas[i]

                if len(delta.movement_attempts) == 1:
                    if self._apply_move(this, delta.movement_attempts[0]):
                        stats.moved += 1
                elif len(delta.mate_attempts) == 1:
                    outcome = self._apply_mate(this, (x, y), delta.mate_attempts[0], rng)
                    if outcome == "divide":
                        stats.divided += 1
                    elif outcome == "mate":
                        stats.mated += 1
                elif delta.movement_attempts or delta.mate_attempts:
                    stats.collisions += 1

                if delta.explode:
                    this.solution.diffuse[TERRAIN] += delta.explode
                    stats.exploded += 1
                if delta.suicide and this.cell is not None:
                    this.cell.suicide = True

                if this.decision is not None:
                    this.solution.coefficients[:] = this.decision.coefficients
                else:
                    this.solution.coefficients[:] = NORMAL_DIFFUSION
                this.decision = None

    def _charge(self, cell, cost: int) -> None:
        cell.inhale = max(0, cell.inhale - cost)

    def _apply_move(self, this: Hex, source: Coord) -> bool:
        src = self.hex(*source)
        if this.cell is not None or src.cell is None:
            return False
        cell = src.cell
        src.cell = None
        this.cell = cell
        self._charge(cell, self.params.movement_cost)
        return True

    def _apply_mate(self, this: Hex, here: Coord, attempt: MateAttempt, rng: np.random.Generator) -> Optional[str]:
        src = self.hex(*attempt.source)
        if this.cell is not None or src.cell is None:
            return None
        cost = self.params.movement_cost + self.params.divide_cost
        if attempt.mate == here:
            self._charge(src.cell, cost)
            this.cell = src.cell.divide(rng)
            return "divide"
        partner = self.hex(*attempt.mate).cell
        if partner is None:
            return None
        self._charge(src.cell, cost)
        this.cell = src.cell.mate(partner, rng)
        return "mate"

    # ---------------------------- fluids ---------------------------

    def cycle_fluids(self) -> None:
        self._map_shards(self._diffuse_rows)
        self._map_shards(self._commit_rows)

    def _diffuse_rows(self, rows: range) -> None:
        tiles = self.tiles
        for i in self._indices(rows):
            this = tiles[i].solution
            for pos, j in enumerate(self._neighbors[i]):
                n = tiles[j]
                kind = DiffusionType.FLAT_SIGNALS if n.cell is not None else DiffusionType.DYN_SIGNALS
                this.diffuse_from(n.solution, kind, (pos + 3) % 6)

    def _commit_rows(self, rows: range) -> None:
        for i in self._indices(rows):
            self.tiles[i].solution.end_cycle()

    def cycle_regrow(self) -> None:
        self._map_shards(self._regrow_rows)

    def _regrow_rows(self, rows: range) -> None:
        for i in self._indices(rows):
            self.tiles[i].solution.regrow()

    # ---------------------------- death ----------------------------

    def cycle_death(self, stats: Optional[CycleStats] = None) -> None:
        results = self._map_shards(self._death_rows)
        if stats is not None:
            for died, starved in results:
                stats.died += died
                stats.starved += starved

    def _death_rows(self, rows: range) -> Tuple[int, int]:
        p = self.params
        release = p.death_release_coefficient * p.consumption
        died = starved = 0
        for i in self._indices(rows):
            tile = self.tiles[i]
            cell = tile.cell
            if cell is None:
                continue
            fluids = tile.solution.fluids
            if (
                cell.suicide
                or fluids[KILL] > KILL_FLUID_UPPER_THRESHOLD
                or fluids[KILL] < KILL_FLUID_LOWER_THRESHOLD
                or cell.inhale < p.inhale_minimum
            ):
                fluids[FOOD] += release * cell.inhale
                tile.cell = None
                died += 1
            elif fluids[FOOD] <= p.consumption:
                if cell.inhale != 0:
                    cell.inhale -= 1
                else:
                    tile.cell = None
                    starved += 1
            else:
                fluids[FOOD] -= p.consumption
                if fluids[FOOD] < 0.0:
                    if cell.inhale != 0:
                        cell.inhale -= 1
                    else:
                        fluids[FOOD] += release * cell.inhale
                        tile.cell = None
                        starved += 1
                elif cell.inhale < p.inhale_cap:
                    cell.inhale += 1
        return died, starved

    # --------------------------------------------------------
    # ARRAY STATE (snapshots)
    # --------------------------------------------------------

    def to_arrays(self) -> Dict[str, np.ndarray]:
        """Pack the committed state between ticks into plain arrays.

        Organisms must be Cells (genome + inhale + suicide).
        """
        h, w = self.height, self.width
        occupied = [i for i, t in enumerate(self.tiles) if t.cell is not None]
        cells = [self.tiles[i].cell for i in occupied]
        return {
            "fluids": np.stack([t.solution.fluids for t in self.tiles]).reshape(h, w, -1),
            "coefficients": np.stack([t.solution.coefficients for t in self.tiles]).reshape(h, w, 6),
            "cell_index": np.asarray(occupied, dtype=np.int64),
            "inhale": np.asarray([c.inhale for c in cells], dtype=np.int64),
            "suicide": np.asarray([c.suicide for c in cells], dtype=np.bool_),
            "weights": np.asarray([c.genome.weights for c in cells], dtype=np.float64),
            "bias": np.asarray([c.genome.bias for c in cells], dtype=np.float64),
        }

    @classmethod
    def from_arrays(
        cls,
        arrays: Dict[str, np.ndarray],
        params: Optional[GridParams] = None,
        workers: Optional[int] = None,
    ) -> "Grid":
        fluids = np.asarray(arrays["fluids"], dtype=np.float64)
        if fluids.ndim != 3 or fluids.shape[2] != FLUID_CHANNELS:
            raise ValueError(f"fluids must be shape (h, w, {FLUID_CHANNELS}), got {fluids.shape}")
        h, w = fluids.shape[:2]
        coefficients = np.asarray(arrays["coefficients"], dtype=np.float64)
        if coefficients.shape != (h, w, 6):
            raise ValueError(f"coefficients must be shape {(h, w, 6)}, got {coefficients.shape}")

        grid = cls(w, h, params=params, terrain=fluids[:, :, TERRAIN], workers=workers)
        for i, tile in enumerate(grid.tiles):
            y, x = divmod(i, w)
            tile.solution.fluids[:] = fluids[y, x]
            tile.solution.coefficients[:] = coefficients[y, x]

        index = np.asarray(arrays["cell_index"], dtype=np.int64)
        if index.size and (index.min() < 0 or index.max() >= w * h):
            raise ValueError("cell_index out of range for the grid")
        for k, i in enumerate(index):
            cell = Cell(
                Genome(weights=np.array(arrays["weights"][k]), bias=np.array(arrays["bias"][k])),
                inhale=int(arrays["inhale"][k]),
            )
            cell.suicide = bool(arrays["suicide"][k])
            grid.tiles[int(i)].cell = cell
        return grid
