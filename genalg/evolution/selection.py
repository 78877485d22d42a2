"""
Selection operators.

Selection chooses chromosomes of the current population either to survive
unchanged (elitism) or to become parents. The engine calls prepare() once
per generation and then select_pair() once per mating event.

Operators:
- EliteSelection: the best K chromosomes
- TruncationSelection: uniform draws among the best chromosomes
- WeightedRouletteSelection: fitness-proportionate (alias method)
- LinearRankSelection / NonlinearRankSelection: rank-proportionate (alias method)
- TournamentSelection: best-biased pick from random pools
- StochasticUniversalSampling: evenly spaced pointers over cumulative fitness
"""

from typing import List, Optional, Tuple

import numpy as np

from ..core.chromosome import Chromosome
from ..core.errors import InvalidStateError, NonconvergenceError, PreconditionError
from ..numeric.polynomial import Polynomial
from ..numeric.sampling import AliasSampler
from .population import Population
from .status import StatusInfo


class SelectionOperator:
    """Base class of selection operators."""

    @property
    def needs_sorted(self) -> bool:
        """Whether the population must be sorted (best first) before selection."""
        return False

    def prepare(self, status: StatusInfo, population: Population, rng: np.random.Generator) -> None:
        """
        Per-generation precomputation; sorts the population when required.

        Args:
            status: Current run status
            population: Evaluated population to select from
            rng: Random generator
        """
        if not population.evaluated:
            raise InvalidStateError("Population must be evaluated before selection")
        if self.needs_sorted:
            population.sort_chromosomes()
        self._prepare(status, population, rng)

    def _prepare(self, status: StatusInfo, population: Population, rng: np.random.Generator) -> None:
        pass

    def select_pair(self, population: Population, rng: np.random.Generator) -> Tuple[Chromosome, Chromosome]:
        """Select two parents from the population."""
        self._check_population(population)
        first, second = self._select_pair(population, rng)
        return population[first], population[second]

    def _select_pair(self, population: Population, rng: np.random.Generator) -> Tuple[int, int]:
        raise NotImplementedError

    def _check_population(self, population: Population) -> None:
        if len(population) == 0:
            raise PreconditionError("Cannot select from an empty population")
        if self.needs_sorted and not population.sorted:
            raise PreconditionError(f"{self!r} requires a sorted population")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# =============================================================================
# Survival
# =============================================================================

class EliteSelection(SelectionOperator):
    """
    Selects the best chromosomes, which survive into the next population
    without change.
    """

    def __init__(self, n_elite: int = 1):
        if n_elite < 1:
            raise PreconditionError(f"n_elite must be >= 1, got {n_elite}")
        self.n_elite = n_elite

    @property
    def needs_sorted(self) -> bool:
        return True

    def select_many(self, population: Population) -> List[Chromosome]:
        """
        Returns:
            The n_elite best chromosomes (references, not copies)
        """
        self._check_population(population)
        if len(population) < self.n_elite:
            raise PreconditionError(
                f"Population of {len(population)} cannot supply {self.n_elite} elites"
            )
        return population.chromosomes[:self.n_elite]

    def _select_pair(self, population: Population, rng: np.random.Generator) -> Tuple[int, int]:
        return 0, min(1, len(population) - 1)

    def __repr__(self) -> str:
        return f"EliteSelection(n_elite={self.n_elite})"


# =============================================================================
# Parent selection
# =============================================================================

class TruncationSelection(SelectionOperator):
    """
    Draws both parents uniformly (with replacement) from the best `sub_size`
    chromosomes.
    """

    def __init__(self, sub_size: int):
        if sub_size < 2:
            raise PreconditionError(f"sub_size must be > 1, got {sub_size}")
        self.sub_size = sub_size

    @property
    def needs_sorted(self) -> bool:
        return True

    def _select_pair(self, population: Population, rng: np.random.Generator) -> Tuple[int, int]:
        if len(population) < self.sub_size:
            raise PreconditionError(
                f"Population of {len(population)} is smaller than sub_size {self.sub_size}"
            )
        first, second = rng.integers(0, self.sub_size, size=2)
        return int(first), int(second)

    def __repr__(self) -> str:
        return f"TruncationSelection(sub_size={self.sub_size})"


class _AliasSelection(SelectionOperator):
    """Selection drawing both parents independently from an alias table."""

    def __init__(self):
        self._sampler: Optional[AliasSampler] = None
        self._size = 0

    def _select_pair(self, population: Population, rng: np.random.Generator) -> Tuple[int, int]:
        if self._sampler is None or self._size != len(population):
            raise InvalidStateError(f"{self!r} was not prepared for this population")
        return self._sampler.sample(rng), self._sampler.sample(rng)

    def _install(self, weights: np.ndarray, total: Optional[float] = None) -> None:
        self._sampler = AliasSampler(weights, total)
        self._size = len(weights)


class WeightedRouletteSelection(_AliasSelection):
    """
    Fitness-proportionate selection.

    Note:
        A dominating chromosome leaves little chance to the others.
    """

    def _prepare(self, status: StatusInfo, population: Population, rng: np.random.Generator) -> None:
        self._install(population.fitness_values(), population.total_fitness)


class LinearRankSelection(_AliasSelection):
    """
    Linear ranking.

    Rank weight for position pos (0 = worst, N-1 = best):
        2 - SP + 2 * (SP - 1) * pos / (N - 1)

    Args:
        selective_pressure: SP in [1, 2]; 1 is uniform, 2 gives the worst
            chromosome no chance
    """

    def __init__(self, selective_pressure: float = 2.0):
        super().__init__()
        if not 1.0 <= selective_pressure <= 2.0:
            raise PreconditionError(
                f"Linear rank selective pressure must be in [1, 2], got {selective_pressure}"
            )
        self.selective_pressure = selective_pressure

    @property
    def needs_sorted(self) -> bool:
        return True

    def rank_weights(self, n: int) -> np.ndarray:
        """Weights by rank position, worst first."""
        if n < 1:
            raise PreconditionError("Population size must be positive")
        if n == 1:
            return np.ones(1)
        sp = self.selective_pressure
        pos = np.arange(n, dtype=float)
        return 2.0 - sp + 2.0 * (sp - 1.0) * pos / (n - 1)

    def _prepare(self, status: StatusInfo, population: Population, rng: np.random.Generator) -> None:
        # Population is sorted best first, weights are worst first
        self._install(self.rank_weights(len(population))[::-1])

    def __repr__(self) -> str:
        return f"LinearRankSelection(selective_pressure={self.selective_pressure})"


class NonlinearRankSelection(_AliasSelection):
    """
    Nonlinear (exponential) ranking.

    The weight of position pos (0 = worst) is N * x^pos / sum(x^i), where x is
    the positive root of
        (SP - N) x^(N-1) + SP x^(N-2) + ... + SP x + SP = 0

    The root is recomputed only when the population size changes.

    Args:
        selective_pressure: SP in [1, N - 2]
    """

    def __init__(self, selective_pressure: float):
        super().__init__()
        if selective_pressure < 1.0:
            raise PreconditionError(
                f"Nonlinear rank selective pressure must be >= 1, got {selective_pressure}"
            )
        self.selective_pressure = selective_pressure
        self._cached_n: Optional[int] = None
        self._root: Optional[float] = None
        self._weights: Optional[np.ndarray] = None

    @property
    def needs_sorted(self) -> bool:
        return True

    def polynomial(self, n: int) -> Polynomial:
        """Ranking polynomial for population size n, coefficients ascending."""
        sp = self.selective_pressure
        return Polynomial([sp] * (n - 1) + [sp - n])

    def root(self, n: int) -> float:
        """Positive real root of the ranking polynomial."""
        self._compute(n)
        return self._root

    def rank_weights(self, n: int) -> np.ndarray:
        """Weights by rank position, worst first."""
        self._compute(n)
        return self._weights.copy()

    def _compute(self, n: int) -> None:
        if self._cached_n == n:
            return
        if n < 3 or self.selective_pressure > n - 2:
            raise PreconditionError(
                f"Selective pressure {self.selective_pressure} outside [1, {n - 2}] "
                f"for population size {n}"
            )

        # Solve for y = 1/x: (SP - N) + SP y + ... + SP y^(N-1) = 0 is
        # increasing and convex for y > 0, negative at 0 and >= 0 at 1, so
        # Newton from y = 1 descends monotonically onto the root in (0, 1]
        poly = self.polynomial(n).reciprocal().monic()
        y = poly.find_root(guess=1.0, precision=1e-12)
        if not 0 < y <= 1:
            raise NonconvergenceError(f"No root in (0, 1] found for {poly} (got {y})")

        # x^pos / sum(x^i) == y^(N-1-pos) / sum(y^i)
        powers = y ** np.arange(n - 1, -1, -1, dtype=float)
        self._root = 1.0 / y
        self._weights = n * powers / powers.sum()
        self._cached_n = n

    def _prepare(self, status: StatusInfo, population: Population, rng: np.random.Generator) -> None:
        self._install(self.rank_weights(len(population))[::-1])

    def __repr__(self) -> str:
        return f"NonlinearRankSelection(selective_pressure={self.selective_pressure})"


class TournamentSelection(SelectionOperator):
    """
    Tournament selection with replacement.

    For each parent, `tournament_size` chromosomes are drawn uniformly; the
    pool is sorted best first and the k-th member wins with probability
    p * (1 - p)^k (the last member takes the remaining probability).

    Args:
        tournament_size: Chromosomes per tournament
        probability: Probability that the best of the pool wins
    """

    def __init__(self, tournament_size: int = 3, probability: float = 1.0):
        if tournament_size < 1:
            raise PreconditionError(f"tournament_size must be >= 1, got {tournament_size}")
        if not 0.0 < probability <= 1.0:
            raise PreconditionError(f"probability must be in (0, 1], got {probability}")
        self.tournament_size = tournament_size
        self.probability = probability

    def _select_one(self, population: Population, rng: np.random.Generator) -> int:
        pool = rng.integers(0, len(population), size=self.tournament_size)
        # Stable sort by fitness, best first
        pool = sorted((int(i) for i in pool), key=lambda i: population[i].fitness, reverse=True)

        draw = rng.random()
        cumulative = 0.0
        p = self.probability
        for k, index in enumerate(pool):
            cumulative += p * (1.0 - p) ** k
            if draw < cumulative:
                return index
        return pool[-1]

    def _select_pair(self, population: Population, rng: np.random.Generator) -> Tuple[int, int]:
        return self._select_one(population, rng), self._select_one(population, rng)

    def __repr__(self) -> str:
        return (
            f"TournamentSelection(tournament_size={self.tournament_size}, "
            f"probability={self.probability})"
        )


class StochasticUniversalSampling(SelectionOperator):
    """
    Stochastic universal sampling.

    prepare() lays `selection_size` evenly spaced pointers over the cumulative
    fitness with a random phase and records the chromosome under each
    pointer; parents are then drawn uniformly from those pointers.
    """

    def __init__(self, selection_size: int):
        if selection_size < 1:
            raise PreconditionError(f"selection_size must be >= 1, got {selection_size}")
        self.selection_size = selection_size
        self._pointers: Optional[np.ndarray] = None
        self._size = 0

    @property
    def pointers(self) -> Optional[np.ndarray]:
        """Chromosome index under each pointer (after prepare)."""
        return self._pointers

    def _prepare(self, status: StatusInfo, population: Population, rng: np.random.Generator) -> None:
        n = len(population)
        total = population.total_fitness
        self._size = n
        if n == 0:
            self._pointers = np.zeros(0, dtype=np.int64)
            return
        if total <= 0:
            self._pointers = rng.integers(0, n, size=self.selection_size)
            return

        spacing = total / self.selection_size
        start = rng.uniform(0.0, spacing)
        positions = start + spacing * np.arange(self.selection_size)
        cumulative = np.cumsum(population.fitness_values())
        indexes = np.searchsorted(cumulative, positions, side='right')
        self._pointers = np.minimum(indexes, n - 1)

    def _select_pair(self, population: Population, rng: np.random.Generator) -> Tuple[int, int]:
        if self._pointers is None or self._size != len(population):
            raise InvalidStateError(f"{self!r} was not prepared for this population")
        first, second = rng.integers(0, len(self._pointers), size=2)
        return int(self._pointers[first]), int(self._pointers[second])

    def __repr__(self) -> str:
        return f"StochasticUniversalSampling(selection_size={self.selection_size})"
