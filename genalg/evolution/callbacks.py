"""
Observability hooks fired by the engine.

Every hook is optional. A hook that raises never interrupts the run: the
failure is recorded in Callbacks.errors and evolution continues.

Hook signatures:
    on_init_population(engine)
    on_fitness(engine, status)
    on_elite_selected(engine, elites)
    on_parents_selected(engine, parents)
    on_before_crossover(engine, pair)
    on_after_crossover(engine, pair)
    on_before_chromosome_mutate(engine, chromosome)
    on_after_chromosome_mutate(engine, chromosome, n_mutated)
    on_before_mutate(chromosome, gene_index)
    on_after_mutate(chromosome, gene_index)

`status` is a snapshot copy. The engine, population and chromosome arguments
are the live objects the run is using; hooks must treat them as read-only.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple


Hook = Optional[Callable[..., Any]]


@dataclass
class Callbacks:
    """
    Bundle of optional engine hooks.

    Attributes:
        errors: (hook name, repr of the exception) for the first
            `max_errors` swallowed failures of the current run
        error_count: Number of swallowed failures, including unrecorded ones
    """
    on_init_population: Hook = None
    on_fitness: Hook = None
    on_elite_selected: Hook = None
    on_parents_selected: Hook = None
    on_before_crossover: Hook = None
    on_after_crossover: Hook = None
    on_before_chromosome_mutate: Hook = None
    on_after_chromosome_mutate: Hook = None
    on_before_mutate: Hook = None
    on_after_mutate: Hook = None

    max_errors: int = 100
    errors: List[Tuple[str, str]] = field(default_factory=list)
    error_count: int = 0

    def invoke(self, name: str, *args: Any) -> None:
        """Call hook `name` if set; failures are recorded, never raised."""
        hook = getattr(self, name)
        if hook is None:
            return
        try:
            hook(*args)
        except Exception as e:
            self.error_count += 1
            if len(self.errors) < self.max_errors:
                self.errors.append((name, repr(e)))

    def clear_errors(self) -> None:
        self.errors = []
        self.error_count = 0
