"""
Tests for genes, chromosomes and fitness functions.

Run with: python -m pytest tests/test_core.py -v
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
    Chromosome,
    ChromosomeTemplate,
    ConstraintViolation,
    FloatGene,
    IntGene,
    InvalidStateError,
    PreconditionError,
    SimpleFitness,
    alter_fitness_age_penalty,
    alter_fitness_minimize,
)
from genalg.evolution import Callbacks, SwapMutation, UniformMutation


def make_chromosome(values, **kwargs):
    return Chromosome([IntGene(v, 0, 9) for v in values], **kwargs)


class TestGenes:
    """Tests for gene types."""

    def test_int_gene_bounds(self):
        """Values outside the range are rejected."""
        gene = IntGene(5, 0, 10)
        assert gene.value == 5

        gene.value = 10
        assert gene.value == 10

        with pytest.raises(ConstraintViolation):
            gene.value = 11
        with pytest.raises(ConstraintViolation):
            gene.value = -1
        assert gene.value == 10

    def test_invalid_range(self):
        with pytest.raises(PreconditionError):
            IntGene(0, 5, 1)
        with pytest.raises(PreconditionError):
            FloatGene(0.5, 1.0, 0.0)

    def test_default_value_is_min(self):
        assert IntGene(None, 3, 7).value == 3
        assert CharGene().value == 'a'

    def test_constraint_checker(self):
        """A custom checker is consulted on every assignment."""
        gene = IntGene(None, 0, 10, constraint_checker=lambda g, v: v % 2 == 0)
        gene.value = 4
        with pytest.raises(ConstraintViolation):
            gene.value = 3
        assert gene.value == 4

    def test_constraint_violation_is_precondition_error(self):
        with pytest.raises(PreconditionError):
            IntGene(20, 0, 10)

    def test_random_values_in_range(self, rng):
        int_gene = IntGene(0, -3, 3)
        float_gene = FloatGene(0.0, 1.5, 2.5)
        char_gene = CharGene('a', 'c', 'f')

        int_values = set()
        for _ in range(200):
            int_gene.set_random_value(rng)
            float_gene.set_random_value(rng)
            char_gene.set_random_value(rng)
            int_values.add(int_gene.value)
            assert 1.5 <= float_gene.value <= 2.5
            assert char_gene.value in 'cdef'

        # Both bounds are reachable
        assert int_values == set(range(-3, 4))

    def test_bool_gene_mutation_flips(self, rng):
        gene = BoolGene(False)
        gene.mutate(rng)
        assert gene.value is True
        gene.mutate(rng)
        assert gene.value is False

    def test_int_gene_mutation_stays_in_range(self, rng):
        gene = IntGene(5, 0, 10)
        for _ in range(50):
            gene.mutate(rng)
            assert 0 <= gene.value <= 10

    def test_clone_is_independent(self):
        gene = IntGene(4, 0, 9)
        copy = gene.clone()

        assert copy is not gene
        assert copy == gene
        assert (copy.min_value, copy.max_value) == (0, 9)

        copy.value = 7
        assert gene.value == 4

    def test_equality_by_value(self):
        """Genes compare by value only, regardless of bounds."""
        assert IntGene(3, 0, 9) == IntGene(3, 0, 100)
        assert IntGene(3, 0, 9) != IntGene(4, 0, 9)
        assert IntGene(3, 0, 9) == 3
        assert hash(IntGene(3, 0, 9)) == hash(IntGene(3, 1, 5))
        assert len({CharGene('a'), CharGene('a'), CharGene('b')}) == 2

    def test_char_gene_validation(self):
        with pytest.raises(PreconditionError):
            CharGene('a', 'ab', 'z')
        gene = CharGene('b', 'a', 'c')
        with pytest.raises(ConstraintViolation):
            gene.value = 'd'
        with pytest.raises(ConstraintViolation):
            gene.value = 'bb'

    def test_size(self):
        assert IntGene(1, 0, 2).size == 1


class TestChromosome:
    """Tests for live chromosomes."""

    def test_initial_state(self):
        ch = make_chromosome([1, 2, 3])

        assert len(ch) == 3
        assert ch.values() == [1, 2, 3]
        assert ch.fitness is None
        assert ch.real_fitness is None
        assert ch.age == 0
        assert not ch.is_evaluated

    def test_indexing_and_iteration(self):
        ch = make_chromosome([4, 5, 6])
        assert ch[1].value == 5
        assert [g.value for g in ch] == [4, 5, 6]

    def test_mutate_all_genes(self, rng):
        """Probability 1 mutates every gene and always drops fitness."""
        ch = make_chromosome([0] * 6)
        ch.fitness = 10.0
        ch.real_fitness = 10.0

        n = ch.mutate(UniformMutation(), 1.0, rng)

        assert n == 6
        assert not ch.is_evaluated
        assert ch.real_fitness is None

    def test_mutate_nothing_still_invalidates(self, rng):
        ch = make_chromosome([1, 2, 3])
        ch.fitness = 5.0

        n = ch.mutate(UniformMutation(), 0.0, rng)

        assert n == 0
        assert not ch.is_evaluated

    def test_mutate_fires_gene_callbacks(self, rng):
        calls = []
        callbacks = Callbacks(
            on_before_mutate=lambda ch, i: calls.append(('before', i)),
            on_after_mutate=lambda ch, i: calls.append(('after', i)),
        )
        ch = make_chromosome([1, 2, 3])

        ch.mutate(UniformMutation(), 1.0, rng, callbacks)

        assert calls == [
            ('before', 0), ('after', 0),
            ('before', 1), ('after', 1),
            ('before', 2), ('after', 2),
        ]

    def test_swap_mutation_preserves_permutation(self, rng):
        ch = make_chromosome(list(range(10)), is_permutation=True)

        ch.mutate(SwapMutation(), 0.5, rng)

        assert sorted(ch.values()) == list(range(10))

    def test_clone_keeps_fitness_and_age(self):
        ch = make_chromosome([1, 2])
        ch.fitness = 3.0
        ch.real_fitness = 6.0
        ch.age = 4

        copy = ch.clone()

        assert copy.fitness == 3.0
        assert copy.real_fitness == 6.0
        assert copy.age == 4
        assert copy.values() == [1, 2]
        assert all(a is not b for a, b in zip(copy.genes, ch.genes))

    def test_clone_reset(self):
        ch = make_chromosome([1, 2], is_permutation=True)
        ch.fitness = 3.0
        ch.age = 4

        copy = ch.clone(reset=True)

        assert copy.fitness is None
        assert copy.age == 0
        assert copy.is_permutation

    def test_replace_genes_fixed_length(self):
        ch = make_chromosome([1, 2, 3])
        ch.replace_genes([IntGene(v, 0, 9) for v in [3, 2, 1]])
        assert ch.values() == [3, 2, 1]

        with pytest.raises(PreconditionError):
            ch.replace_genes([IntGene(1, 0, 9)])

    def test_replace_genes_permutation(self):
        ch = make_chromosome([1, 2, 3], is_permutation=True)
        ch.replace_genes([IntGene(v, 0, 9) for v in [2, 3, 1]])
        assert ch.values() == [2, 3, 1]

        with pytest.raises(PreconditionError):
            ch.replace_genes([IntGene(v, 0, 9) for v in [1, 1, 3]])

    def test_replace_genes_variable_length(self):
        ch = make_chromosome([1, 2, 3], is_fixed_length=False)
        ch.replace_genes([IntGene(5, 0, 9)])
        assert ch.values() == [5]

    def test_clean(self):
        ch = make_chromosome([1, 2, 3])
        ch.fitness = 1.0
        ch.clean()
        assert len(ch) == 0
        assert not ch.is_evaluated

    def test_randomize(self, rng):
        ch = make_chromosome([0] * 20)
        ch.fitness = 1.0
        ch.randomize(rng)
        assert not ch.is_evaluated
        assert all(0 <= v <= 9 for v in ch.values())
        assert len(set(ch.values())) > 1


class TestChromosomeTemplate:
    """Tests for sample chromosomes."""

    def test_fixed_length_instantiation(self, rng):
        template = ChromosomeTemplate.from_gene(IntGene(0, 0, 9), 8)

        ch = template.instantiate(rng)

        assert isinstance(ch, Chromosome)
        assert len(ch) == 8
        assert all(0 <= v <= 9 for v in ch.values())
        assert not ch.is_evaluated
        assert ch.age == 0
        assert ch.is_fixed_length

    def test_instances_own_their_genes(self, rng):
        sample = IntGene(0, 0, 9)
        template = ChromosomeTemplate.from_gene(sample, 4)

        first = template.instantiate(rng)
        second = template.instantiate(rng)

        assert all(g is not sample for g in first.genes)
        assert all(a is not b for a, b in zip(first.genes, second.genes))
        assert sample.value == 0

    def test_variable_length_instantiation(self, rng):
        template = ChromosomeTemplate.from_gene(IntGene(0, 0, 5), 10, is_fixed_length=False)

        lengths = [len(template.instantiate(rng)) for _ in range(300)]

        assert min(lengths) >= 0
        assert max(lengths) <= 10
        assert len(set(lengths)) > 5

    def test_permutation_instantiation(self, rng):
        genes = [CharGene(c, 'a', 'j') for c in 'abcdefghij']
        template = ChromosomeTemplate(genes, is_permutation=True)

        orders = set()
        for _ in range(20):
            ch = template.instantiate(rng)
            assert ch.is_permutation
            assert sorted(ch.values()) == list('abcdefghij')
            orders.add(''.join(ch.values()))

        assert len(orders) > 1

    def test_template_has_no_state(self):
        template = ChromosomeTemplate([IntGene(1, 0, 9)])

        with pytest.raises(InvalidStateError):
            template.fitness
        with pytest.raises(InvalidStateError):
            template.real_fitness
        with pytest.raises(InvalidStateError):
            template.age
        with pytest.raises(InvalidStateError):
            template.clean()

    @pytest.mark.parametrize('attribute, value', [
        ('fitness', 1.0),
        ('real_fitness', 1.0),
        ('age', 3),
    ])
    def test_template_state_cannot_be_set(self, attribute, value):
        template = ChromosomeTemplate([IntGene(1, 0, 9)])
        with pytest.raises(InvalidStateError):
            setattr(template, attribute, value)

    def test_invalid_templates(self):
        with pytest.raises(PreconditionError):
            ChromosomeTemplate([])
        with pytest.raises(PreconditionError):
            ChromosomeTemplate([IntGene(1, 0, 9)], is_permutation=True, is_fixed_length=False)
        with pytest.raises(PreconditionError):
            ChromosomeTemplate.from_gene(IntGene(1, 0, 9), 0)


class TestFitness:
    """Tests for fitness and alter-fitness functions."""

    def test_simple_fitness(self):
        fitness = SimpleFitness(lambda ch: sum(ch.values()))
        ch = make_chromosome([1, 2, 3])

        assert fitness.evaluate(ch) == 6.0
        assert fitness(ch) == 6.0
        assert isinstance(fitness(ch), float)

    def test_alter_fitness_minimize(self):
        alter = alter_fitness_minimize(10.0)
        ch = make_chromosome([1])

        assert alter.evaluate(ch, 3.0) == 7.0
        assert alter(ch, 0.0) == 10.0
        # Never negative
        assert alter(ch, 12.0) == 0.0

    def test_alter_fitness_age_penalty(self):
        alter = alter_fitness_age_penalty(0.5)
        ch = make_chromosome([1])

        assert alter(ch, 6.0) == 6.0
        ch.age = 2
        assert alter(ch, 6.0) == pytest.approx(3.0)

    def test_age_penalty_rejects_negative_rate(self):
        with pytest.raises(PreconditionError):
            alter_fitness_age_penalty(-1.0)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
