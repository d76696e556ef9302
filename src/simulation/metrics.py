# --------------------------------------------------------
# File: src/simulation/metrics.py
#
# Lightweight metrics recorder for the hex colony.
#
# Goal: collect just enough aggregated data to follow a run
# (population, energy, food, births and deaths) without
# overloading the main tick loop.
# --------------------------------------------------------

from __future__ import annotations

import csv
import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import numpy as np

from cell.genome import similarity
from world.config import FOOD, TERRAIN

if TYPE_CHECKING:  # pragma: no cover
    from world.grid import CycleStats

    from .core import Simulation

logger = logging.getLogger(__name__)


@dataclass
class RunRecorder:
    """
    Collects coarse-grained metrics over the course of a run.

    It is intentionally light:
      - samples every `sample_every` ticks
      - stores only aggregated values, not per-tile state
      - writes a single CSV at the end of the run
    """

    out_dir: str = os.path.join("data", "metrics")
    label: str = ""
    seed: int = 0
    # unique identifier for this run (for cross-file tracking)
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    # optional extra metadata (global params, code version, etc.)
    meta: Dict[str, Any] = field(default_factory=dict)
    sample_every: int = 1

    rows: List[Dict[str, Any]] = field(default_factory=list)

    def update(self, sim: "Simulation", stats: "CycleStats") -> None:
        """
        Sample metrics from the current simulation state.
        """
        if sim.tick % max(1, self.sample_every) != 0:
            return

        grid = sim.grid
        cells = [cell for _, _, cell in grid.cells()]
        inhales = np.asarray([c.inhale for c in cells], dtype=np.float64)
        fluids = np.stack([t.solution.fluids for t in grid.tiles])

        row: Dict[str, Any] = {
            "tick": int(sim.tick),
            "population": len(cells),
            "mean_inhale": float(inhales.mean()) if cells else 0.0,
            "max_inhale": int(inhales.max()) if cells else 0,
            "total_food": float(fluids[:, FOOD].sum()),
            "mean_terrain": float(fluids[:, TERRAIN].mean()),
            "genome_similarity": self._genome_similarity(cells),
        }
        row.update(stats.as_dict())
        self.rows.append(row)

    @staticmethod
    def _genome_similarity(cells) -> float:
        """Mean similarity between consecutive living genomes (1 = clonal)."""
        genomes = [c.genome for c in cells if hasattr(c, "genome")]
        if len(genomes) < 2:
            return 1.0
        return float(np.mean([similarity(a, b) for a, b in zip(genomes, genomes[1:])]))

    # --------------------------------------------------------
    # OUTPUT
    # --------------------------------------------------------

    def save(self) -> Optional[str]:
        """
        Write collected rows to a CSV file.
        Returns the path if something was written, else None.
        """
        if not self.rows:
            return None

        os.makedirs(self.out_dir, exist_ok=True)

        base_label = self.label or "run"
        fname = f"metrics_{base_label}_{self.run_id[:8]}_{len(self.rows)}.csv"
        path = os.path.join(self.out_dir, fname)

        # embed seed/run_id into each row so the CSV is self-describing
        for row in self.rows:
            row.setdefault("seed", self.seed)
            row.setdefault("run_id", self.run_id)

        fieldnames = list(self.rows[0].keys())

        with open(path, "w", newline="", encoding="utf-8") as f:
            dt_str = datetime.now(timezone.utc).isoformat(timespec="seconds")
            f.write(f"# datetime={dt_str}\n")
            f.write(f"# run_id={self.run_id}\n")
            f.write(f"# seed={self.seed}\n")
            if self.label:
                f.write(f"# label={self.label}\n")
            for k, v in (self.meta or {}).items():
                f.write(f"# {k}={v}\n")

            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for row in self.rows:
                writer.writerow(row)

        logger.info("Saved %d samples to %s", len(self.rows), path)
        return path
