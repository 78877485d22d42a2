"""
Fitness evaluation strategies.

The engine maximizes fitness. A FitnessFunction scores a chromosome; an
optional AlterFitnessFunction transforms that raw score before selection,
e.g. to turn a minimization problem into a maximization one or to penalize
old chromosomes.

Selection operators sample in proportion to fitness, so the value that
reaches the population (altered or not) must be >= 0.
"""

from typing import Callable

from .chromosome import Chromosome
from .errors import PreconditionError


class FitnessFunction:
    """Scores a chromosome. Higher is better."""

    def evaluate(self, chromosome: Chromosome) -> float:
        raise NotImplementedError

    def __call__(self, chromosome: Chromosome) -> float:
        return self.evaluate(chromosome)


class AlterFitnessFunction:
    """Transforms the real fitness of a chromosome into the fitness used for selection."""

    def evaluate(self, chromosome: Chromosome, real_fitness: float) -> float:
        raise NotImplementedError

    def __call__(self, chromosome: Chromosome, real_fitness: float) -> float:
        return self.evaluate(chromosome, real_fitness)


class SimpleFitness(FitnessFunction):
    """Fitness function delegating to a plain callable."""

    def __init__(self, func: Callable[[Chromosome], float]):
        if func is None:
            raise PreconditionError("SimpleFitness requires a callable")
        self.func = func

    def evaluate(self, chromosome: Chromosome) -> float:
        return float(self.func(chromosome))

    def __repr__(self) -> str:
        return f"SimpleFitness({getattr(self.func, '__name__', self.func)!s})"


class AlterFitness(AlterFitnessFunction):
    """Alter-fitness function delegating to a plain callable."""

    def __init__(self, func: Callable[[Chromosome, float], float], name: str = ''):
        if func is None:
            raise PreconditionError("AlterFitness requires a callable")
        self.func = func
        self.name = name or getattr(func, '__name__', 'custom')

    def evaluate(self, chromosome: Chromosome, real_fitness: float) -> float:
        return float(self.func(chromosome, real_fitness))

    def __repr__(self) -> str:
        return f"AlterFitness({self.name})"


def alter_fitness_minimize(max_fitness: float) -> AlterFitness:
    """
    Invert the search direction: smaller real fitness becomes larger fitness.

    Args:
        max_fitness: Upper bound of the real fitness, so that
            max_fitness - real_fitness stays non-negative

    Returns:
        AlterFitness returning max(0, max_fitness - real_fitness)
    """
    def minimize(chromosome: Chromosome, real_fitness: float) -> float:
        return max(0.0, max_fitness - real_fitness)

    return AlterFitness(minimize, name=f"minimize(max={max_fitness})")


def alter_fitness_age_penalty(rate: float) -> AlterFitness:
    """
    Prefer younger chromosomes: fitness / (1 + rate * age).

    Args:
        rate: Penalty per generation of age (>= 0)
    """
    if rate < 0:
        raise PreconditionError(f"Age penalty rate must be >= 0, got {rate}")

    def age_penalty(chromosome: Chromosome, real_fitness: float) -> float:
        return real_fitness / (1.0 + rate * chromosome.age)

    return AlterFitness(age_penalty, name=f"age_penalty(rate={rate})")
