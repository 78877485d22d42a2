"""
Mutation operators.

A mutation operator perturbs the gene at one index of a chromosome. Which
indexes are mutated is decided by Chromosome.mutate(), which draws the
per-gene mutation probability and hands each selected index to the operator.
"""

import numpy as np

from ..core.chromosome import Chromosome
from ..core.errors import PreconditionError
from ..core.gene import FloatGene, IntGene


class MutationOperator:
    """Base class of mutation operators."""

    def mutate(self, chromosome: Chromosome, index: int, rng: np.random.Generator) -> None:
        """
        Mutate the gene at `index` in place.

        Args:
            chromosome: Chromosome to modify
            index: Gene index selected for mutation
            rng: Random generator
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class UniformMutation(MutationOperator):
    """Delegate to the gene's own mutate(): re-randomize, or flip for BoolGene."""

    def mutate(self, chromosome: Chromosome, index: int, rng: np.random.Generator) -> None:
        if chromosome.is_permutation:
            raise PreconditionError("UniformMutation would break a permutation chromosome")
        chromosome.genes[index].mutate(rng)


class SwapMutation(MutationOperator):
    """
    Exchange the gene at `index` with the gene at a uniformly drawn index.

    The only mutation that preserves the value multiset, so the one to use
    with permutation chromosomes.
    """

    def mutate(self, chromosome: Chromosome, index: int, rng: np.random.Generator) -> None:
        genes = chromosome.genes
        other = int(rng.integers(0, len(genes)))
        genes[index], genes[other] = genes[other], genes[index]


class GaussianMutation(MutationOperator):
    """
    Bounded perturbation of numeric genes.

    Adds a normal step with standard deviation sigma * (max - min) and clips
    the result to the gene range; IntGene values are rounded.

    Args:
        sigma: Step size relative to the gene range
    """

    def __init__(self, sigma: float = 0.1):
        if sigma <= 0:
            raise PreconditionError(f"sigma must be positive, got {sigma}")
        self.sigma = sigma

    def mutate(self, chromosome: Chromosome, index: int, rng: np.random.Generator) -> None:
        if chromosome.is_permutation:
            raise PreconditionError("GaussianMutation would break a permutation chromosome")
        gene = chromosome.genes[index]
        if not isinstance(gene, (IntGene, FloatGene)):
            raise PreconditionError(f"GaussianMutation needs an IntGene or FloatGene, got {type(gene).__name__}")

        scale = self.sigma * (gene.max_value - gene.min_value)
        new_value = np.clip(gene.value + rng.normal(0.0, scale), gene.min_value, gene.max_value)
        if isinstance(gene, IntGene):
            gene.value = int(np.clip(round(float(new_value)), gene.min_value, gene.max_value))
        else:
            gene.value = float(new_value)

    def __repr__(self) -> str:
        return f"GaussianMutation(sigma={self.sigma})"
