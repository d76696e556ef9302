# File: src/main.py
"""
Entry point for the Hex Colony simulator.
Run this file from the `src/` directory (or use the `hexcolony` script):

    python main.py --size 96 64 --seed 7 --ticks 2000 --headless

It will:
  - create a Grid (or load a saved simulation with --load)
  - run the tick loop headless (stats on stdout) or in an Arcade window
  - optionally write metrics CSV, a PNG preview and a resumable .npz snapshot

This script is intentionally lightweight: most behaviour lives in the modules under
`world/`, `cell/` and `simulation/`.
"""
import argparse
import logging
import os
import sys
from dataclasses import fields

# ensure src/ is on sys.path when running main from within src/
HERE = os.path.dirname(os.path.abspath(__file__))
if HERE not in sys.path:
    sys.path.insert(0, HERE)

from world.config import GridParams
from simulation.core import Simulation
from simulation.metrics import RunRecorder
from rendering.debug_renderer import DebugRenderer
from rendering.hexdraw import save_preview

# Arcade window (optional extra)
try:
    from rendering.arcade_renderer import ArcadeRenderer
except ImportError:
    ArcadeRenderer = None

logger = logging.getLogger("main")


def build_args(argv=None):
    p = argparse.ArgumentParser("Hex Colony simulator")
    p.add_argument("--size", type=int, nargs=2, default=[96, 64], help="Grid size: width height (height should be even)")
    p.add_argument("--seed", type=int, default=0, help="Seed of the simulation RNG")
    p.add_argument("--ticks", type=int, default=1000, help="Ticks to run (headless) or before pausing (window)")
    p.add_argument("--workers", type=int, default=None, help="Worker threads (default: HEXCOLONY_WORKERS or CPU count)")
    p.add_argument("--no-spawn", action="store_true", help="Disable spontaneous spawning")
    p.add_argument("--load", default=None, help="Resume from a saved simulation (.npz appended when missing)")
    p.add_argument("--save", default=None, help="Save the simulation at the end (.npz appended when missing)")
    p.add_argument("--snapshot", default=None, help="Write a PNG preview of the final grid")
    p.add_argument("--metrics-dir", default=None, help="Record metrics and write a CSV into this directory")
    p.add_argument("--sample-every", type=int, default=10, help="Metrics sampling interval in ticks")
    p.add_argument("--tile-size", type=float, default=6.0, help="Hex radius in pixels for rendering")
    p.add_argument("--headless", action="store_true", help="Run headless debug renderer instead of the window")
    p.add_argument("--verbose", action="store_true", help="Debug logging")

    params = p.add_argument_group("simulation parameters")
    for f in fields(GridParams):
        params.add_argument("--" + f.name.replace("_", "-"), type=type(f.default), default=f.default)
    return p.parse_args(argv)


def main(argv=None):
    args = build_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(name)s] %(message)s",
    )

    if args.load:
        logger.info("Loading simulation from %s", args.load)
        sim = Simulation.load(args.load, workers=args.workers)
    else:
        params = GridParams(**{f.name: getattr(args, f.name) for f in fields(GridParams)})
        width, height = int(args.size[0]), int(args.size[1])
        logger.info("Creating grid size=%dx%d seed=%s", width, height, args.seed)
        sim = Simulation.create(width, height, seed=args.seed, params=params, workers=args.workers)
    if args.no_spawn:
        sim.grid.spawning = False

    if args.metrics_dir:
        sim.metrics = RunRecorder(
            out_dir=args.metrics_dir,
            seed=args.seed,
            sample_every=args.sample_every,
            meta={"size": "x".join(str(s) for s in args.size), "load": args.load or ""},
        )

    try:
        if args.headless:
            logger.info("Running %d ticks headless", args.ticks)
            DebugRenderer(sim, every=max(1, args.sample_every)).run(ticks=args.ticks)
        elif ArcadeRenderer is None:
            logger.error("The Arcade window is not available. Install the 'gui' extra or use --headless.")
            return 1
        else:
            logger.info("Launching Arcade renderer")
            ArcadeRenderer(sim, tile_size=args.tile_size).run(ticks=args.ticks)

        if sim.metrics is not None:
            sim.metrics.save()
        if args.snapshot:
            save_preview(sim.grid, args.snapshot, tile_size=args.tile_size)
            logger.info("Preview written to %s", args.snapshot)
        if args.save:
            sim.save(args.save)
    finally:
        sim.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
