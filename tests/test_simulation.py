import io

import numpy as np

from rendering.debug_renderer import DebugRenderer
from simulation.core import Simulation
from simulation.metrics import RunRecorder
from world.config import GridParams


def _make_sim(seed=7, workers=2, size=(10, 8)):
    return Simulation.create(*size, seed=seed, params=GridParams(spawn_rate=2.0), workers=workers)


def _assert_same_state(a, b):
    assert a.tick == b.tick
    arrays_a, arrays_b = a.grid.to_arrays(), b.grid.to_arrays()
    assert arrays_a.keys() == arrays_b.keys()
    for key in arrays_a:
        np.testing.assert_array_equal(arrays_a[key], arrays_b[key])


def test_same_seed_same_run():
    a, b = _make_sim(), _make_sim()
    a.run(30)
    b.run(30)
    _assert_same_state(a, b)
    a.close()
    b.close()


def test_worker_count_does_not_change_the_run():
    a, b = _make_sim(workers=1), _make_sim(workers=4)
    a.run(30)
    b.run(30)
    _assert_same_state(a, b)
    a.close()
    b.close()


def test_population_appears():
    sim = _make_sim()
    spawned = sum(sim.step().spawned for _ in range(20))
    assert sim.tick == 20
    assert spawned > 0
    sim.close()


def test_paused_step_does_nothing():
    sim = _make_sim()
    sim.paused = True
    assert sim.step() is None
    assert sim.tick == 0
    sim.close()


def test_save_and_resume(tmp_path):
    straight = _make_sim()
    straight.run(10)
    path = str(tmp_path / "run.npz")
    straight.save(path)
    straight.run(10)

    resumed = Simulation.load(path, workers=3)
    assert resumed.tick == 10
    resumed.run(10)

    _assert_same_state(straight, resumed)
    assert resumed.grid.params == straight.grid.params
    straight.close()
    resumed.close()


def test_snapshot():
    sim = _make_sim()
    sim.step()
    snap = sim.snapshot()
    assert snap["tick"] == 1
    assert snap["grid"] is sim.grid
    assert snap["population"] == sim.grid.population()
    assert snap["stats"] is sim.last_stats
    sim.close()


def test_metrics_recorder(tmp_path):
    sim = _make_sim()
    sim.metrics = RunRecorder(out_dir=str(tmp_path), label="test", seed=7, sample_every=2)
    sim.run(6)

    assert [row["tick"] for row in sim.metrics.rows] == [2, 4, 6]
    row = sim.metrics.rows[-1]
    assert row["population"] == sim.grid.population()
    assert "spawned" in row and "genome_similarity" in row

    path = sim.metrics.save()
    with open(path, encoding="utf-8") as f:
        lines = f.read().splitlines()
    assert lines[0].startswith("# datetime=")
    assert "# seed=7" in lines
    header = [line for line in lines if not line.startswith("#")][0]
    assert header.startswith("tick,population")
    sim.close()


def test_metrics_failure_does_not_stop_the_run(caplog):
    class Broken:
        def update(self, sim, stats):
            raise RuntimeError("boom")

    sim = _make_sim()
    sim.metrics = Broken()
    sim.run(2)
    assert sim.tick == 2
    assert "Metrics update failed" in caplog.text
    sim.close()


def test_debug_renderer_prints():
    out = io.StringIO()
    sim = _make_sim()
    DebugRenderer(sim, out=out, every=2).run(ticks=4)
    lines = out.getvalue().splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("Tick 00002 | Cells:")
    sim.close()


def test_save_and_load_without_suffix(tmp_path):
    sim = _make_sim()
    sim.run(3)
    written = sim.save(str(tmp_path / "run"))
    assert written.endswith("run.npz")

    resumed = Simulation.load(str(tmp_path / "run"), workers=1)
    assert resumed.tick == 3
    _assert_same_state(sim, resumed)
    sim.close()
    resumed.close()
