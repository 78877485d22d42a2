"""Shared fixtures for the genalg test suite."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from genalg.core import Chromosome, IntGene
from genalg.evolution import EvolutionConfig, Population


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(12345)


def int_chromosome(values, min_value=0, max_value=9, **kwargs):
    """Chromosome of IntGenes holding `values`."""
    return Chromosome([IntGene(v, min_value, max_value) for v in values], **kwargs)


@pytest.fixture
def make_population():
    """
    Factory for evaluated populations whose fitness is the gene value sum.

    Usage: make_population([[1, 2], [3, 4]], evaluate=True)
    """
    def factory(value_lists, evaluate=True, fitness_function=None, alter_fitness_function=None):
        config = EvolutionConfig(
            population_size=max(2, len(value_lists)),
            fitness_function=fitness_function or (lambda ch: float(sum(ch.values()))),
            alter_fitness_function=alter_fitness_function,
        )
        population = Population(config, [int_chromosome(v) for v in value_lists])
        if evaluate:
            population.fitness()
        return population

    return factory
