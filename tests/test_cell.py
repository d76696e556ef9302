import numpy as np
import pytest

from cell.cell import INITIAL_INHALE, Cell
from cell.decision import Decision, Divide, Explode, Move, Rest, Suicide
from cell.genome import (
    ACTION_SLICE,
    MOVE_SLICE,
    N_INPUTS,
    N_OUTPUTS,
    Genome,
    crossover,
    mutate,
    random_genome,
    similarity,
)
from world.config import MAX_DIFFUSION
from world.hexgrid import Direction
from world.tiles import initial_solution


def _inputs():
    own = initial_solution(0.1).fluids
    neighbors = [initial_solution(t).fluids for t in np.linspace(-1.0, 1.0, 6)]
    presents = [True, False, False, True, False, False]
    return own, neighbors, presents


def _fixed_genome(action, direction=0):
    weights = np.zeros((N_OUTPUTS, N_INPUTS))
    bias = np.zeros(N_OUTPUTS)
    bias[ACTION_SLICE] = -5.0
    bias[ACTION_SLICE.start + action] = 5.0
    bias[MOVE_SLICE.start + direction] = 1.0
    return Genome(weights=weights, bias=bias)


def test_new_cell():
    cell = Cell.new(np.random.default_rng(0))
    assert cell.inhale == INITIAL_INHALE
    assert not cell.suicide
    assert cell.genome.weights.shape == (N_OUTPUTS, N_INPUTS)
    assert cell.genome.bias.shape == (N_OUTPUTS,)


def test_decide_output_is_valid():
    rng = np.random.default_rng(5)
    for _ in range(20):
        decision = Cell.new(rng).decide(*_inputs())
        assert isinstance(decision, Decision)
        assert isinstance(decision.choice, (Rest, Move, Divide, Explode, Suicide))
        assert len(decision.coefficients) == 6
        assert all(0.0 <= c <= MAX_DIFFUSION for c in decision.coefficients)


def test_decide_follows_genome():
    cell = Cell(_fixed_genome(action=1, direction=Direction.LEFT))
    decision = cell.decide(*_inputs())
    assert decision.choice == Move(Direction.LEFT)
    # zero logits give half the maximum coefficient
    assert decision.coefficients == pytest.approx((MAX_DIFFUSION / 2,) * 6)

    assert Cell(_fixed_genome(action=0)).decide(*_inputs()).choice == Rest()
    assert Cell(_fixed_genome(action=4)).decide(*_inputs()).choice == Suicide()


def test_decide_is_pure():
    cell = Cell.new(np.random.default_rng(2))
    assert cell.decide(*_inputs()) == cell.decide(*_inputs())


def test_divide_is_seeded():
    parent = Cell.new(np.random.default_rng(0))
    a = parent.divide(np.random.default_rng(9))
    b = parent.divide(np.random.default_rng(9))
    np.testing.assert_array_equal(a.genome.weights, b.genome.weights)
    assert a.inhale == INITIAL_INHALE
    assert a.genome is not parent.genome


def test_mate_mixes_parents():
    rng = np.random.default_rng(0)
    a, b = Cell.new(rng), Cell.new(rng)
    child = a.mate(b, np.random.default_rng(1))
    assert child.genome.weights.shape == a.genome.weights.shape
    assert 0.0 < similarity(child.genome, a.genome) < 1.0


def test_crossover_takes_whole_rows():
    rng = np.random.default_rng(3)
    a, b = random_genome(rng), random_genome(rng)
    child = crossover(a, b, rng)
    for row in range(N_OUTPUTS):
        from_a = np.array_equal(child.weights[row], a.weights[row])
        from_b = np.array_equal(child.weights[row], b.weights[row])
        assert from_a or from_b


def test_crossover_rejects_mismatch():
    rng = np.random.default_rng(3)
    small = Genome(weights=np.zeros((2, 2)), bias=np.zeros(2))
    with pytest.raises(ValueError):
        crossover(random_genome(rng), small, rng)


def test_mutate_zero_rate_copies():
    rng = np.random.default_rng(3)
    genome = random_genome(rng)
    copy = mutate(genome, rng, rate=0.0)
    np.testing.assert_array_equal(copy.weights, genome.weights)
    assert copy.weights is not genome.weights


def test_similarity():
    rng = np.random.default_rng(4)
    a, b = random_genome(rng), random_genome(rng)
    assert similarity(a, Genome(weights=a.weights.copy(), bias=a.bias.copy())) == 1.0
    assert 0.0 < similarity(a, b) < 1.0
