"""
Population management for evolutionary search.

Handles:
- Random population creation from a template chromosome
- Fitness evaluation and aggregation (best, total, average)
- Sorting by fitness for rank-based operators
- Population statistics and diversity
"""

import math
from typing import Any, Dict, Iterator, List, Optional, TYPE_CHECKING

import numpy as np

from ..core.chromosome import Chromosome
from ..core.errors import InvalidStateError, PreconditionError

if TYPE_CHECKING:
    from .engine import EvolutionConfig


class Population:
    """
    The chromosomes of one generation.

    Order is insertion order until sort_chromosomes() is called, rank order
    (best first) afterwards. `best` always points into the chromosome list.
    """

    def __init__(self, config: 'EvolutionConfig', chromosomes: Optional[List[Chromosome]] = None):
        self.config = config
        self._chromosomes: List[Chromosome] = []
        self._best: Optional[Chromosome] = None
        self._total_fitness = 0.0
        self._total_real_fitness = 0.0
        self._evaluated = False
        self._sorted = False
        self._changed = False
        if chromosomes:
            self.append(*chromosomes)

    @classmethod
    def random(cls, config: 'EvolutionConfig', rng: np.random.Generator) -> 'Population':
        """Population of config.population_size chromosomes instantiated from the template."""
        if config.sample_chromosome is None:
            raise PreconditionError("A sample chromosome is required to create a random population")
        return cls(config, [
            config.sample_chromosome.instantiate(rng)
            for _ in range(config.population_size)
        ])

    @property
    def chromosomes(self) -> List[Chromosome]:
        return self._chromosomes

    @property
    def best(self) -> Optional[Chromosome]:
        """Chromosome with maximal fitness (None until evaluated)."""
        return self._best

    @property
    def total_fitness(self) -> float:
        return self._total_fitness

    @property
    def total_real_fitness(self) -> float:
        return self._total_real_fitness

    @property
    def average_fitness(self) -> float:
        return self._total_fitness / len(self._chromosomes) if self._chromosomes else 0.0

    @property
    def average_real_fitness(self) -> float:
        return self._total_real_fitness / len(self._chromosomes) if self._chromosomes else 0.0

    @property
    def evaluated(self) -> bool:
        return self._evaluated

    @property
    def sorted(self) -> bool:
        return self._sorted

    @property
    def changed(self) -> bool:
        """Whether chromosomes were added since the last evaluation."""
        return self._changed

    def append(self, *chromosomes: Chromosome) -> 'Population':
        """Add chromosomes; the population must be evaluated again."""
        if not chromosomes:
            raise PreconditionError("Nothing to append")
        self._chromosomes.extend(chromosomes)
        self._changed = True
        self._sorted = False
        self._evaluated = False
        return self

    def fitness(self) -> int:
        """
        Evaluate every chromosome that has no fitness yet.

        Totals and the best chromosome are recomputed over the whole
        population on every call.

        Returns:
            Number of chromosomes evaluated by this call

        Raises:
            PreconditionError: if a fitness value is negative or not finite
        """
        fitness_function = self.config.fitness_function
        alter_function = self.config.alter_fitness_function

        n_evaluated = 0
        total = 0.0
        total_real = 0.0
        best = None
        for ch in self._chromosomes:
            if not ch.is_evaluated:
                real = float(fitness_function.evaluate(ch))
                if alter_function is not None:
                    value = float(alter_function.evaluate(ch, real))
                else:
                    value = real

                if not math.isfinite(value) or value < 0:
                    raise PreconditionError(
                        f"Fitness has to be finite and non-negative, got {value} for {ch!r}"
                    )
                ch.real_fitness = real
                ch.fitness = value
                n_evaluated += 1

            total += ch.fitness
            total_real += ch.real_fitness if ch.real_fitness is not None else ch.fitness
            if best is None or best.fitness < ch.fitness:
                best = ch

        self._total_fitness = total
        self._total_real_fitness = total_real
        self._best = best
        self._changed = False
        self._evaluated = True

        return n_evaluated

    def sort_chromosomes(self) -> None:
        """Stable sort by fitness, best first. No-op when already sorted."""
        if not self._evaluated:
            raise InvalidStateError("Population must be evaluated before sorting")
        if not self._sorted:
            self._chromosomes.sort(key=lambda ch: ch.fitness, reverse=True)
            self._sorted = True

    def fitness_values(self) -> np.ndarray:
        """Fitness of every chromosome, in current order."""
        if not self._evaluated:
            raise InvalidStateError("Population has not been evaluated")
        return np.array([ch.fitness for ch in self._chromosomes], dtype=float)

    def diversity(self) -> float:
        """Fraction of distinct gene-value sequences in the population."""
        if not self._chromosomes:
            return 0.0
        signatures = {tuple(ch.values()) for ch in self._chromosomes}
        return len(signatures) / len(self._chromosomes)

    def stats(self) -> Dict[str, Any]:
        """
        Compute statistics about the population.

        Returns:
            Dictionary with size, age and (if evaluated) fitness statistics
        """
        if not self._chromosomes:
            return {'size': 0}

        ages = [ch.age for ch in self._chromosomes]
        lengths = [len(ch) for ch in self._chromosomes]

        evaluated = [ch for ch in self._chromosomes if ch.is_evaluated]
        if evaluated:
            fitnesses = np.array([ch.fitness for ch in evaluated])
            fitness_stats = {
                'min_fitness': float(fitnesses.min()),
                'max_fitness': float(fitnesses.max()),
                'mean_fitness': float(fitnesses.mean()),
                'std_fitness': float(fitnesses.std()),
                'evaluated_count': len(evaluated),
            }
        else:
            fitness_stats = {'evaluated_count': 0}

        return {
            'size': len(self._chromosomes),
            'mean_age': float(np.mean(ages)),
            'max_age': max(ages),
            'length_range': (min(lengths), max(lengths)),
            'diversity': self.diversity(),
            **fitness_stats,
        }

    def __len__(self) -> int:
        return len(self._chromosomes)

    def __getitem__(self, index: int) -> Chromosome:
        return self._chromosomes[index]

    def __iter__(self) -> Iterator[Chromosome]:
        return iter(self._chromosomes)

    def __repr__(self) -> str:
        lines = ['Population(']
        lines.extend(f"  {ch!r}" for ch in self._chromosomes)
        lines.append(')')
        return '\n'.join(lines)
