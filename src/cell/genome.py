# -------------------------------------------------
# src/cell/genome.py
"""
Genome representation + helpers.

The genome is the weight matrix and bias of a single-layer policy:
    outputs = weights @ inputs + bias

Input layout (N_INPUTS):
    own fluids (8) | 6 neighbour fluids (6 x 8) | 6 occupancy flags | inhale

Output layout (N_OUTPUTS), see the *_SLICE constants below:
    action scores | move direction | mate direction | spawn direction |
    explode sign | 6 diffusion coefficient logits

All randomness comes from the numpy Generator passed in, so offspring are
reproducible for a given RNG state.
"""
from dataclasses import dataclass

import numpy as np

from world.config import FLUID_CHANNELS

N_INPUTS = FLUID_CHANNELS * 7 + 6 + 1

# ACTION_SLICE scores rest, move, divide, explode, suicide in this order
ACTION_SLICE = slice(0, 5)
MOVE_SLICE = slice(5, 11)
MATE_SLICE = slice(11, 17)
SPAWN_SLICE = slice(17, 23)
EXPLODE_INDEX = 23
COEFFICIENT_SLICE = slice(24, 30)
N_OUTPUTS = 30

# Primordial organisms lean towards resting and almost never kill themselves
ACTION_BIAS = (1.0, 0.0, -0.5, -1.0, -3.0)

INIT_SCALE = 0.3
MUTATION_RATE = 0.05
MUTATION_SCALE = 0.1


@dataclass
class Genome:
    weights: np.ndarray
    bias: np.ndarray


def random_genome(rng: np.random.Generator) -> Genome:
    weights = rng.normal(loc=0.0, scale=INIT_SCALE, size=(N_OUTPUTS, N_INPUTS))
    bias = np.zeros((N_OUTPUTS,), dtype=np.float64)
    bias[ACTION_SLICE] = ACTION_BIAS
    return Genome(weights=weights, bias=bias)


def mutate(genome: Genome, rng: np.random.Generator, rate: float = MUTATION_RATE, scale: float = MUTATION_SCALE) -> Genome:
    """Return a copy with a random subset of genes nudged by gaussian noise."""
    w_mask = rng.random(genome.weights.shape) < rate
    b_mask = rng.random(genome.bias.shape) < rate
    weights = genome.weights + w_mask * rng.normal(scale=scale, size=genome.weights.shape)
    bias = genome.bias + b_mask * rng.normal(scale=scale, size=genome.bias.shape)
    return Genome(weights=weights, bias=bias)


def crossover(a: Genome, b: Genome, rng: np.random.Generator) -> Genome:
    """Row-wise recombination: every output neuron comes whole from one parent."""
    if a.weights.shape != b.weights.shape:
        raise ValueError(f"incompatible genomes {a.weights.shape} vs {b.weights.shape}")
    from_a = rng.random(a.bias.shape) < 0.5
    weights = np.where(from_a[:, None], a.weights, b.weights)
    bias = np.where(from_a, a.bias, b.bias)
    return Genome(weights=weights, bias=bias)


def similarity(a: Genome, b: Genome) -> float:
    """Return similarity in range 0..1 (1 = identical)."""
    if a.weights.shape != b.weights.shape:
        return 0.0
    d = np.linalg.norm(a.weights - b.weights) + np.linalg.norm(a.bias - b.bias)
    scale = np.sqrt(a.weights.size + a.bias.size) * INIT_SCALE
    return float(1.0 / (1.0 + d / scale))
