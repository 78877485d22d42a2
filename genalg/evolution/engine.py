"""
Main evolutionary optimization engine.

Orchestrates the generational loop:
1. Seed a random population from the sample chromosome
2. Evaluate fitness of unevaluated chromosomes
3. Stop if the terminate function fires
4. Carry over elites (fitness kept, age + 1)
5. Select parent pairs, cross them with probability p_c
6. Mutate each offspring gene with probability p_m
7. Replace the population and repeat from 2
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union
import time

import numpy as np

from ..core.chromosome import Chromosome, ChromosomeTemplate
from ..core.errors import InvalidStateError, PreconditionError
from ..core.fitness import AlterFitness, AlterFitnessFunction, FitnessFunction, SimpleFitness
from .callbacks import Callbacks
from .crossover import CrossoverOperator
from .mutation import MutationOperator
from .population import Population
from .selection import EliteSelection, SelectionOperator
from .status import EvolutionHistory, StatusInfo
from .terminate import SimpleTerminate, TerminateFunction


@dataclass
class EvolutionResult:
    """Results from an evolution run."""
    generations_completed: int
    total_evaluations: int
    best_fitness: float
    best_real_fitness: float
    best_chromosome: Optional[Chromosome]
    history: EvolutionHistory
    final_population: Population
    runtime_seconds: float
    termination_reason: Optional[str] = None

    def summary(self) -> str:
        """Generate summary string."""
        lines = [
            f"Generations: {self.generations_completed}",
            f"Total evaluations: {self.total_evaluations}",
            f"Best fitness: {self.best_fitness:.4f}",
            f"Best real fitness: {self.best_real_fitness:.4f}",
            f"Runtime: {self.runtime_seconds:.1f}s",
            f"Stopped: {self.termination_reason}",
        ]
        if self.best_chromosome is not None:
            lines.append(f"Best chromosome: {self.best_chromosome.values()}")
        return '\n'.join(lines)


@dataclass
class EvolutionConfig:
    """
    Configuration for an evolution run.

    Plain callables are accepted for the fitness, alter-fitness and terminate
    functions; they are wrapped on construction.
    """
    # Population parameters
    population_size: int = 100
    sample_chromosome: Optional[ChromosomeTemplate] = None

    # Fitness
    fitness_function: Optional[Union[FitnessFunction, Callable[[Chromosome], float]]] = None
    alter_fitness_function: Optional[Union[AlterFitnessFunction, Callable[[Chromosome, float], float]]] = None

    # Operators
    terminate_function: Optional[Union[TerminateFunction, Callable[[StatusInfo], bool]]] = None
    elite_selection: Optional[EliteSelection] = None
    parent_selection: Optional[SelectionOperator] = None
    crossover: Optional[CrossoverOperator] = None
    mutation: Optional[MutationOperator] = None

    # Evolution rates
    crossover_probability: float = 0.8
    mutation_probability: float = 0.01

    # Observability
    callbacks: Callbacks = field(default_factory=Callbacks)
    verbose: bool = False

    # Reproducibility
    seed: Optional[int] = None

    def __post_init__(self):
        if self.fitness_function is not None and not isinstance(self.fitness_function, FitnessFunction):
            self.fitness_function = SimpleFitness(self.fitness_function)
        if (self.alter_fitness_function is not None
                and not isinstance(self.alter_fitness_function, AlterFitnessFunction)):
            self.alter_fitness_function = AlterFitness(self.alter_fitness_function)
        if self.terminate_function is not None and not isinstance(self.terminate_function, TerminateFunction):
            self.terminate_function = SimpleTerminate(self.terminate_function)

    def validate(self) -> None:
        """
        Check that the configuration can drive a run.

        Raises:
            PreconditionError: describing the first problem found
        """
        if self.sample_chromosome is None:
            raise PreconditionError("sample_chromosome is required")
        if self.fitness_function is None:
            raise PreconditionError("fitness_function is required")
        if self.terminate_function is None:
            raise PreconditionError("terminate_function is required")
        if self.parent_selection is None:
            raise PreconditionError("parent_selection is required")
        if self.population_size < 2:
            raise PreconditionError(f"population_size must be >= 2, got {self.population_size}")
        for name in ('crossover_probability', 'mutation_probability'):
            p = getattr(self, name)
            if not 0.0 <= p <= 1.0:
                raise PreconditionError(f"{name} must be in [0, 1], got {p}")
        if self.crossover_probability > 0 and self.crossover is None:
            raise PreconditionError("crossover operator is required when crossover_probability > 0")
        if self.mutation_probability > 0 and self.mutation is None:
            raise PreconditionError("mutation operator is required when mutation_probability > 0")
        if self.elite_selection is not None and self.elite_selection.n_elite >= self.population_size:
            raise PreconditionError(
                f"Elite count ({self.elite_selection.n_elite}) must be smaller than "
                f"population_size ({self.population_size})"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'population_size': self.population_size,
            'crossover_probability': self.crossover_probability,
            'mutation_probability': self.mutation_probability,
            'seed': self.seed,
            'sample_chromosome': repr(self.sample_chromosome),
            'fitness_function': repr(self.fitness_function),
            'alter_fitness_function': repr(self.alter_fitness_function),
            'terminate_function': repr(self.terminate_function),
            'elite_selection': repr(self.elite_selection),
            'parent_selection': repr(self.parent_selection),
            'crossover': repr(self.crossover),
            'mutation': repr(self.mutation),
        }


class EvolutionEngine:
    """
    Generational genetic algorithm.

    The engine owns the random generator, the current population and the
    run status. Each generation is built into a new Population; chromosomes
    are never shared between generations.
    """

    def __init__(self, config: EvolutionConfig, rng: Optional[np.random.Generator] = None):
        """
        Initialize evolution engine.

        Args:
            config: Evolution configuration (validated here)
            rng: Random generator (default: np.random.default_rng(config.seed))
        """
        config.validate()
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)
        self.callbacks = config.callbacks

        self.population: Optional[Population] = None
        self.status = StatusInfo()
        self.history = EvolutionHistory()

    def initialize_population(self) -> None:
        """Create the first, unevaluated population and reset the run state."""
        self.population = Population.random(self.config, self.rng)
        self.status = StatusInfo()
        self.history = EvolutionHistory()
        self.callbacks.clear_errors()
        self.callbacks.invoke('on_init_population', self)

    def evaluate_population(self) -> int:
        """
        Score unevaluated chromosomes and refresh the fitness aggregates of
        the status.

        Returns:
            Number of fitness evaluations performed
        """
        if self.population is None:
            raise InvalidStateError("Population has not been initialized")

        evaluations = self.population.fitness()
        status = self.status
        status.evaluations += evaluations

        best = self.population.best
        status.best_fitness = best.fitness
        status.best_real_fitness = best.real_fitness
        status.average_fitness = self.population.average_fitness
        status.average_real_fitness = self.population.average_real_fitness
        return evaluations

    def run_generation(self) -> None:
        """Build the next generation from the evaluated current one and evaluate it."""
        if self.population is None or not self.population.evaluated:
            raise InvalidStateError("Current population must be evaluated before breeding")

        self.population = self._breed()
        self._complete_generation()

    def run(self) -> EvolutionResult:
        """
        Run until the terminate function fires.

        Continues from the current population when one exists.

        Returns:
            EvolutionResult with final population and statistics
        """
        start_time = time.time()

        if self.population is None:
            self.initialize_population()
        if self.status.generations == 0:
            self._complete_generation()

        while not self._should_terminate():
            self.run_generation()

        runtime = time.time() - start_time

        terminate = self.config.terminate_function
        best = self.population.best
        result = EvolutionResult(
            generations_completed=self.status.generations,
            total_evaluations=self.status.evaluations,
            best_fitness=self.status.best_fitness,
            best_real_fitness=self.status.best_real_fitness,
            best_chromosome=best.clone() if best is not None else None,
            history=self.history,
            final_population=self.population,
            runtime_seconds=runtime,
            termination_reason=getattr(terminate, 'reason', None),
        )

        if self.config.verbose:
            print(result.summary())

        return result

    def _complete_generation(self) -> None:
        self.evaluate_population()
        self.status.generations += 1
        snapshot = self.history.record_generation(self.status, self.population)
        self.callbacks.invoke('on_fitness', self, snapshot)

        if self.config.verbose:
            s = self.status
            print(f"Gen {s.generations:3d} | best {s.best_fitness:.4f} | avg {s.average_fitness:.4f} | "
                  f"evals {s.evaluations} | cross {s.crossovers} | mut {s.mutated_genes}")

    def _should_terminate(self) -> bool:
        return bool(self.config.terminate_function(self.status.snapshot()))

    def _breed(self) -> Population:
        config = self.config
        current = self.population
        rng = self.rng
        offspring: List[Chromosome] = []

        # Elites survive with their fitness, only older
        if config.elite_selection is not None:
            config.elite_selection.prepare(self.status, current, rng)
            elites = []
            for ch in config.elite_selection.select_many(current):
                survivor = ch.clone()
                survivor.age += 1
                elites.append(survivor)
            offspring.extend(elites)
            self.callbacks.invoke('on_elite_selected', self, elites)

        config.parent_selection.prepare(self.status, current, rng)

        while len(offspring) < config.population_size:
            first, second = config.parent_selection.select_pair(current, rng)
            pair = (first.clone(reset=True), second.clone(reset=True))
            self.callbacks.invoke('on_parents_selected', self, pair)

            crossed = False
            if config.crossover is not None and rng.random() < config.crossover_probability:
                self.callbacks.invoke('on_before_crossover', self, pair)
                config.crossover.cross(self.status, pair[0], pair[1], rng)
                self.status.crossovers += 2
                crossed = True
                self.callbacks.invoke('on_after_crossover', self, pair)

            # Odd sizes: the second child of the last pair is dropped
            for child in pair[:config.population_size - len(offspring)]:
                self._mutate(child, crossed)
                offspring.append(child)

        return Population(config, offspring)

    def _mutate(self, chromosome: Chromosome, crossed: bool) -> None:
        config = self.config
        self.callbacks.invoke('on_before_chromosome_mutate', self, chromosome)

        if config.mutation is not None and config.mutation_probability > 0:
            n_mutated = chromosome.mutate(
                config.mutation, config.mutation_probability, self.rng, self.callbacks
            )
        else:
            n_mutated = 0
            chromosome.invalidate()

        self.status.mutated_genes += n_mutated
        if n_mutated > 0:
            chromosome.age = 0
        elif not crossed:
            chromosome.age += 1

        self.callbacks.invoke('on_after_chromosome_mutate', self, chromosome, n_mutated)
