"""
Evolutionary loop and genetic operators.

Key components:
- Population: chromosomes of one generation with fitness bookkeeping
- Selection, crossover, mutation and terminate operator families
- EvolutionEngine: the generational loop
- StatusInfo / EvolutionHistory: per-generation run status
- Callbacks: optional observability hooks

Example usage:
    from genalg.core import ChromosomeTemplate, BoolGene
    from genalg.evolution import (
        EvolutionEngine, EvolutionConfig, TournamentSelection,
        SinglePointCrossover, UniformMutation, MaxGenerations,
    )

    config = EvolutionConfig(
        population_size=50,
        sample_chromosome=ChromosomeTemplate.from_gene(BoolGene(), 32),
        fitness_function=lambda ch: sum(ch.values()),
        terminate_function=MaxGenerations(40),
        parent_selection=TournamentSelection(3),
        crossover=SinglePointCrossover(),
        mutation=UniformMutation(),
        seed=42,
    )
    result = EvolutionEngine(config).run()

    print(f"Best fitness: {result.best_fitness:.1f}")
"""

from .status import StatusInfo, EvolutionHistory
from .callbacks import Callbacks
from .population import Population
from .selection import (
    SelectionOperator,
    EliteSelection,
    TruncationSelection,
    WeightedRouletteSelection,
    LinearRankSelection,
    NonlinearRankSelection,
    TournamentSelection,
    StochasticUniversalSampling,
)
from .crossover import (
    CrossoverOperator,
    SinglePointCrossover,
    TwoPointCrossover,
    UniformCrossover,
    HalfUniformCrossover,
    OrderedCrossover,
    PartiallyMappedCrossover,
    CutAndSpliceCrossover,
    ordered_crossover,
    partially_mapped_crossover,
)
from .mutation import MutationOperator, UniformMutation, SwapMutation, GaussianMutation
from .terminate import (
    TerminateFunction,
    MaxGenerations,
    MaxEvaluations,
    TargetFitness,
    NoImprovement,
    TimeLimit,
    SimpleTerminate,
    CompositeTerminate,
)
from .engine import EvolutionEngine, EvolutionConfig, EvolutionResult

__all__ = [
    # Core classes
    'EvolutionEngine',
    'EvolutionConfig',
    'EvolutionResult',
    'Population',
    'StatusInfo',
    'EvolutionHistory',
    'Callbacks',
    # Selection
    'SelectionOperator',
    'EliteSelection',
    'TruncationSelection',
    'WeightedRouletteSelection',
    'LinearRankSelection',
    'NonlinearRankSelection',
    'TournamentSelection',
    'StochasticUniversalSampling',
    # Crossover
    'CrossoverOperator',
    'SinglePointCrossover',
    'TwoPointCrossover',
    'UniformCrossover',
    'HalfUniformCrossover',
    'OrderedCrossover',
    'PartiallyMappedCrossover',
    'CutAndSpliceCrossover',
    'ordered_crossover',
    'partially_mapped_crossover',
    # Mutation
    'MutationOperator',
    'UniformMutation',
    'SwapMutation',
    'GaussianMutation',
    # Termination
    'TerminateFunction',
    'MaxGenerations',
    'MaxEvaluations',
    'TargetFitness',
    'NoImprovement',
    'TimeLimit',
    'SimpleTerminate',
    'CompositeTerminate',
]
