"""
Tests for the evolution engine.

Run with: python -m pytest tests/test_engine.py -v
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from genalg.core import (
    BoolGene,
    CharGene,
    ChromosomeTemplate,
    IntGene,
    InvalidStateError,
    PreconditionError,
    SimpleFitness,
    alter_fitness_minimize,
)
from genalg.evolution import (
    Callbacks,
    CompositeTerminate,
    CutAndSpliceCrossover,
    EliteSelection,
    EvolutionConfig,
    EvolutionEngine,
    EvolutionResult,
    MaxGenerations,
    NoImprovement,
    OrderedCrossover,
    SimpleTerminate,
    SinglePointCrossover,
    SwapMutation,
    TournamentSelection,
    UniformMutation,
    WeightedRouletteSelection,
)


def one_max(chromosome):
    return float(sum(chromosome.values()))


@pytest.fixture
def config():
    """OneMax on 20 bits."""
    return EvolutionConfig(
        population_size=30,
        sample_chromosome=ChromosomeTemplate.from_gene(BoolGene(), 20),
        fitness_function=one_max,
        terminate_function=MaxGenerations(10),
        elite_selection=EliteSelection(1),
        parent_selection=TournamentSelection(3),
        crossover=SinglePointCrossover(),
        mutation=UniformMutation(),
        crossover_probability=0.8,
        mutation_probability=0.05,
        seed=42,
    )


class TestEvolutionConfig:
    """Tests for configuration checks."""

    def test_valid(self, config):
        config.validate()

    def test_callables_are_wrapped(self, config):
        assert isinstance(config.fitness_function, SimpleFitness)

        wrapped = EvolutionConfig(terminate_function=lambda s: True)
        assert isinstance(wrapped.terminate_function, SimpleTerminate)

    @pytest.mark.parametrize('field, value', [
        ('sample_chromosome', None),
        ('fitness_function', None),
        ('terminate_function', None),
        ('parent_selection', None),
        ('crossover', None),
        ('mutation', None),
        ('population_size', 1),
        ('crossover_probability', 1.5),
        ('mutation_probability', -0.1),
        ('elite_selection', EliteSelection(30)),
    ])
    def test_invalid(self, config, field, value):
        setattr(config, field, value)
        with pytest.raises(PreconditionError):
            config.validate()

    def test_operators_optional_without_probability(self, config):
        config.crossover = None
        config.crossover_probability = 0.0
        config.mutation = None
        config.mutation_probability = 0.0
        config.validate()

    def test_engine_validates(self, config):
        config.parent_selection = None
        with pytest.raises(PreconditionError):
            EvolutionEngine(config)

    def test_to_dict(self, config):
        d = config.to_dict()
        assert d['population_size'] == 30
        assert d['parent_selection'] == 'TournamentSelection(tournament_size=3, probability=1.0)'
        assert d['terminate_function'] == 'MaxGenerations(10)'


class TestEngineRun:
    """Tests for complete runs."""

    def test_max_generations(self, config):
        result = EvolutionEngine(config).run()

        assert isinstance(result, EvolutionResult)
        assert result.generations_completed == 10
        assert len(result.history) == 10
        assert result.history.series('generations') == list(range(1, 11))
        assert len(result.final_population) == 30
        assert 'reached 10 generations' in result.termination_reason

    def test_no_improvement_stops_after_stall(self, config):
        config.fitness_function = SimpleFitness(lambda ch: 1.0)
        config.terminate_function = NoImprovement(10)

        engine = EvolutionEngine(config)
        engine.run()

        assert engine.status.generations == 11

    def test_best_fitness_never_decreases_with_elite(self, config):
        config.terminate_function = MaxGenerations(40)

        result = EvolutionEngine(config).run()

        trajectory = result.history.fitness_trajectory
        assert all(b >= a for a, b in zip(trajectory, trajectory[1:]))
        assert result.best_fitness == trajectory[-1]
        assert result.best_fitness >= 16

    def test_evaluation_count(self, config):
        """Only non-elite chromosomes are evaluated after the first generation."""
        config.terminate_function = MaxGenerations(3)

        result = EvolutionEngine(config).run()

        assert result.total_evaluations == 30 + 29 + 29

    def test_same_seed_same_result(self, config):
        first = EvolutionEngine(config).run()
        config.terminate_function = MaxGenerations(10)
        second = EvolutionEngine(config).run()

        assert first.history.fitness_trajectory == second.history.fitness_trajectory
        assert first.best_chromosome.values() == second.best_chromosome.values()

    def test_explicit_rng(self, config):
        engine = EvolutionEngine(config, rng=np.random.default_rng(7))
        result = engine.run()
        assert result.generations_completed == 10

    def test_odd_population_size(self, config):
        config.population_size = 7
        config.elite_selection = None
        sizes = []
        config.callbacks = Callbacks(on_fitness=lambda engine, status: sizes.append(len(engine.population)))

        EvolutionEngine(config).run()

        assert sizes == [7] * 10

    def test_status_counters(self, config):
        result = EvolutionEngine(config).run()
        status = result.history.generations[-1]

        assert status.crossovers > 0
        assert status.crossovers % 2 == 0
        assert status.mutated_genes > 0
        assert status.average_fitness <= status.best_fitness

    def test_verbose_output(self, config, capsys):
        config.verbose = True
        config.terminate_function = MaxGenerations(2)

        EvolutionEngine(config).run()

        out = capsys.readouterr().out
        assert 'Gen   1 | best ' in out
        assert 'Gen   2 | best ' in out
        assert 'Generations: 2' in out

    def test_silent_by_default(self, config, capsys):
        EvolutionEngine(config).run()
        assert capsys.readouterr().out == ''


class TestGenerationStep:
    """Tests for the bookkeeping of a single generation transition."""

    def _seeded_engine(self, config):
        engine = EvolutionEngine(config)
        engine.initialize_population()
        engine.evaluate_population()
        engine.status.generations = 1
        return engine

    def test_elite_carried_over(self, config):
        engine = self._seeded_engine(config)
        best = engine.population.best
        values, fitness, age = best.values(), best.fitness, best.age

        engine.run_generation()

        elite = engine.population[0]
        assert elite is not best
        assert elite.values() == values
        assert elite.fitness == fitness
        assert elite.age == age + 1

    def test_offspring_are_invalidated_and_young(self, config):
        records = []
        crossed = []

        def after_mutate(engine, chromosome, n_mutated):
            records.append((chromosome.fitness, chromosome.age, n_mutated))

        config.callbacks = Callbacks(
            on_after_crossover=lambda engine, pair: crossed.extend(pair),
            on_after_chromosome_mutate=after_mutate,
        )
        engine = self._seeded_engine(config)
        engine.run_generation()

        assert len(records) == 29
        for fitness, age, n_mutated in records:
            assert fitness is None
            if n_mutated > 0:
                assert age == 0
        assert crossed
        assert all(ch.age == 0 for ch in crossed)

    def test_unchanged_offspring_age(self, config):
        """Without crossover and mutation every chromosome only grows older."""
        config.crossover = None
        config.crossover_probability = 0.0
        config.mutation = None
        config.mutation_probability = 0.0
        engine = self._seeded_engine(config)

        engine.run_generation()

        assert all(ch.age == 1 for ch in engine.population)
        # Copies are scored again, the elite is not
        assert engine.status.evaluations == 30 + 29

    def test_parent_copies_restart_age(self, config):
        """Offspring copied from old parents start at age 0, elites keep counting."""
        config.crossover = None
        config.crossover_probability = 0.0
        config.mutation = None
        config.mutation_probability = 0.0
        copies = []
        config.callbacks = Callbacks(
            on_parents_selected=lambda engine, pair: copies.extend((ch.age, ch.fitness) for ch in pair)
        )
        engine = self._seeded_engine(config)
        for ch in engine.population:
            ch.age = 5

        engine.run_generation()

        assert copies and all(copy == (0, None) for copy in copies)
        ages = [ch.age for ch in engine.population]
        assert ages[0] == 6
        assert ages[1:] == [1] * 29

    def test_populations_are_not_shared(self, config):
        engine = self._seeded_engine(config)
        old = set(id(ch) for ch in engine.population)

        engine.run_generation()

        assert not old & set(id(ch) for ch in engine.population)

    def test_run_generation_requires_evaluation(self, config):
        engine = EvolutionEngine(config)
        with pytest.raises(InvalidStateError):
            engine.run_generation()
        with pytest.raises(InvalidStateError):
            engine.evaluate_population()

        engine.initialize_population()
        with pytest.raises(InvalidStateError):
            engine.run_generation()


class TestCallbacks:
    """Tests for engine hooks."""

    def test_hooks_fire(self, config):
        events = []
        config.terminate_function = MaxGenerations(2)
        config.callbacks = Callbacks(
            on_init_population=lambda engine: events.append('init'),
            on_fitness=lambda engine, status: events.append(('fitness', status.generations)),
            on_elite_selected=lambda engine, elites: events.append(('elite', len(elites))),
            on_parents_selected=lambda engine, pair: events.append('parents'),
        )

        EvolutionEngine(config).run()

        assert events[0] == 'init'
        assert events[1] == ('fitness', 1)
        assert events[2] == ('elite', 1)
        assert events.count('parents') == 15
        assert events[-1] == ('fitness', 2)

    def test_failing_hook_does_not_abort(self, config):
        def broken(*args):
            raise ValueError('hook failure')

        config.callbacks = Callbacks(on_fitness=broken, on_before_mutate=broken)

        result = EvolutionEngine(config).run()

        assert result.generations_completed == 10
        names = {name for name, _ in config.callbacks.errors}
        assert names == {'on_fitness', 'on_before_mutate'}
        assert len(config.callbacks.errors) <= config.callbacks.max_errors

    def test_errors_reset_between_runs(self, config):
        def broken(*args):
            raise ValueError('hook failure')

        config.terminate_function = MaxGenerations(2)
        config.callbacks = Callbacks(on_fitness=broken)

        EvolutionEngine(config).run()
        config.terminate_function = MaxGenerations(2)
        EvolutionEngine(config).run()

        assert config.callbacks.error_count == 2

    def test_status_snapshot_is_read_only_copy(self, config):
        snapshots = []
        config.terminate_function = MaxGenerations(3)
        config.callbacks = Callbacks(on_fitness=lambda engine, status: snapshots.append(status))

        engine = EvolutionEngine(config)
        engine.run()

        assert [s.generations for s in snapshots] == [1, 2, 3]
        assert snapshots[0] is not engine.status

    def test_hooks_receive_live_offspring(self, config):
        """Pairs handed to hooks are the chromosomes inserted into the next generation."""
        pairs = []
        config.terminate_function = MaxGenerations(2)
        config.elite_selection = None
        config.callbacks = Callbacks(on_parents_selected=lambda engine, pair: pairs.append(pair))

        engine = EvolutionEngine(config)
        engine.run()

        inserted = set(id(ch) for ch in engine.population)
        assert all(id(ch) in inserted for pair in pairs for ch in pair)


class TestProblems:
    """End-to-end runs on small problems."""

    def test_permutation_problem(self):
        """Sort letters: fitness counts adjacent pairs in order."""
        letters = 'abcdefgh'

        def ordered_pairs(ch):
            values = ch.values()
            return float(sum(1 for a, b in zip(values, values[1:]) if a < b))

        config = EvolutionConfig(
            population_size=40,
            sample_chromosome=ChromosomeTemplate(
                [CharGene(c, 'a', 'h') for c in letters], is_permutation=True
            ),
            fitness_function=ordered_pairs,
            terminate_function=MaxGenerations(30),
            elite_selection=EliteSelection(2),
            parent_selection=TournamentSelection(3, 0.9),
            crossover=OrderedCrossover(),
            mutation=SwapMutation(),
            mutation_probability=0.05,
            seed=1,
        )

        result = EvolutionEngine(config).run()

        for ch in result.final_population:
            assert sorted(ch.values()) == list(letters)
        assert result.best_fitness >= 5

    def test_minimization(self):
        """Minimize the gene sum through alter_fitness_minimize."""
        config = EvolutionConfig(
            population_size=20,
            sample_chromosome=ChromosomeTemplate.from_gene(IntGene(0, 0, 9), 5),
            fitness_function=lambda ch: float(sum(ch.values())),
            alter_fitness_function=alter_fitness_minimize(45.0),
            terminate_function=MaxGenerations(30),
            elite_selection=EliteSelection(1),
            parent_selection=WeightedRouletteSelection(),
            crossover=SinglePointCrossover(),
            mutation=UniformMutation(),
            mutation_probability=0.1,
            seed=3,
        )

        result = EvolutionEngine(config).run()

        assert result.best_real_fitness == 45.0 - result.best_fitness
        assert result.best_real_fitness <= result.history.generations[0].best_real_fitness
        assert result.best_real_fitness <= 15

    def test_variable_length_problem(self):
        config = EvolutionConfig(
            population_size=20,
            sample_chromosome=ChromosomeTemplate.from_gene(IntGene(0, 0, 5), 10, is_fixed_length=False),
            fitness_function=lambda ch: float(len(ch)),
            terminate_function=CompositeTerminate(MaxGenerations(20), NoImprovement(5)),
            elite_selection=EliteSelection(1),
            parent_selection=TournamentSelection(5, 0.9),
            crossover=CutAndSpliceCrossover(),
            mutation=UniformMutation(),
            seed=5,
        )

        result = EvolutionEngine(config).run()

        assert result.generations_completed <= 20
        assert result.best_fitness >= 10


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
