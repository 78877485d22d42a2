"""
Run status and generation history.

StatusInfo is the per-generation snapshot handed to terminate functions and
callbacks. EvolutionHistory keeps one snapshot per generation for analysis
and plotting.
"""

from dataclasses import dataclass, asdict, replace
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .population import Population


@dataclass
class StatusInfo:
    """
    Status of a running algorithm.

    Attributes:
        generations: Evaluated generations so far (1 after the first)
        evaluations: Cumulative fitness function calls
        best_fitness: Fitness of the best chromosome of the current generation
        best_real_fitness: Real (unaltered) fitness of that chromosome
        average_fitness: Mean fitness of the current generation
        average_real_fitness: Mean real fitness of the current generation
        crossovers: Cumulative number of chromosomes produced by crossover
        mutated_genes: Cumulative number of mutated genes
    """
    generations: int = 0
    evaluations: int = 0
    best_fitness: float = 0.0
    best_real_fitness: float = 0.0
    average_fitness: float = 0.0
    average_real_fitness: float = 0.0
    crossovers: int = 0
    mutated_genes: int = 0

    def snapshot(self) -> 'StatusInfo':
        """Independent copy safe to hand to callbacks."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EvolutionHistory:
    """
    Tracks evolution progress over generations.

    Records per-generation status snapshots for analysis and visualization.
    """

    def __init__(self):
        self.generations: List[StatusInfo] = []
        self.best_chromosome_per_gen: List[Optional[List[Any]]] = []
        self.fitness_trajectory: List[float] = []
        self.diversity_trajectory: List[float] = []

    def __len__(self) -> int:
        return len(self.generations)

    def record_generation(self, status: StatusInfo, population: 'Population') -> StatusInfo:
        """
        Record a completed (evaluated) generation.

        Args:
            status: Current status
            population: Evaluated population of that generation

        Returns:
            The stored snapshot
        """
        snapshot = status.snapshot()
        self.generations.append(snapshot)
        best = population.best
        self.best_chromosome_per_gen.append(best.values() if best is not None else None)
        self.fitness_trajectory.append(snapshot.best_fitness)
        self.diversity_trajectory.append(population.diversity())
        return snapshot

    def series(self, name: str) -> List[Any]:
        """Values of one StatusInfo field across generations."""
        return [getattr(s, name) for s in self.generations]

    def to_dict(self) -> Dict[str, Any]:
        """Convert history to a dictionary for reporting."""
        return {
            'generations': [s.to_dict() for s in self.generations],
            'best_chromosome_per_gen': self.best_chromosome_per_gen,
            'fitness_trajectory': self.fitness_trajectory,
            'diversity_trajectory': self.diversity_trajectory,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EvolutionHistory':
        """Restore history from dictionary."""
        history = cls()
        history.generations = [StatusInfo(**s) for s in data.get('generations', [])]
        history.best_chromosome_per_gen = data.get('best_chromosome_per_gen', [])
        history.fitness_trajectory = data.get('fitness_trajectory', [])
        history.diversity_trajectory = data.get('diversity_trajectory', [])
        return history
