"""
Chromosome representation for the genetic algorithm.

A Chromosome is an ordered sequence of genes plus the bookkeeping the engine
needs: fitness (altered and real), age and evaluation state. A
ChromosomeTemplate describes what every chromosome of a population looks like
(gene type, count, permutation and fixed-length flags) and is only ever used
to instantiate live chromosomes.

Key features:
- Fixed or variable length encodings
- Permutation encodings whose value multiset never changes
- Per-gene mutation driven by a pluggable mutation operator
"""

from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, TYPE_CHECKING

import numpy as np

from .errors import InvalidStateError, PreconditionError
from .gene import Gene

if TYPE_CHECKING:
    from ..evolution.callbacks import Callbacks
    from ..evolution.mutation import MutationOperator


@dataclass(eq=False)
class Chromosome:
    """
    A live candidate solution.

    Attributes:
        genes: Ordered genes, exclusively owned by this chromosome
        is_permutation: Only the order of gene values may change
        is_fixed_length: Gene count may not change
        fitness: Altered fitness used for selection (None if not evaluated)
        real_fitness: Score returned by the fitness function before alteration
        age: Generations survived unchanged (0 for new or modified chromosomes)
    """
    genes: List[Gene]
    is_permutation: bool = False
    is_fixed_length: bool = True
    fitness: Optional[float] = None
    real_fitness: Optional[float] = None
    age: int = 0

    @property
    def is_evaluated(self) -> bool:
        """Whether the chromosome holds a fitness value."""
        return self.fitness is not None

    def values(self) -> List[Any]:
        """Gene values in order."""
        return [g.value for g in self.genes]

    def invalidate(self) -> None:
        """Drop fitness so the chromosome is evaluated again."""
        self.fitness = None
        self.real_fitness = None

    def randomize(self, rng: np.random.Generator) -> None:
        """Assign a random value to every gene."""
        for gene in self.genes:
            gene.set_random_value(rng)
        self.invalidate()

    def mutate(
        self,
        operator: 'MutationOperator',
        probability: float,
        rng: np.random.Generator,
        callbacks: Optional['Callbacks'] = None,
    ) -> int:
        """
        Mutate each gene independently with the given probability.

        Args:
            operator: Mutation operator applied to selected gene indexes
            probability: Per-gene mutation probability
            rng: Random generator
            callbacks: Optional hooks fired around every mutated gene

        Returns:
            Number of mutated genes
        """
        n_mutated = 0
        for i in range(len(self.genes)):
            if rng.random() <= probability:
                if callbacks is not None:
                    callbacks.invoke('on_before_mutate', self, i)
                operator.mutate(self, i, rng)
                n_mutated += 1
                if callbacks is not None:
                    callbacks.invoke('on_after_mutate', self, i)

        self.invalidate()
        return n_mutated

    def replace_genes(self, genes: List[Gene]) -> None:
        """
        Install a new gene sequence (used by crossover operators).

        Raises:
            PreconditionError: if the length of a fixed-length chromosome or
                the value multiset of a permutation chromosome would change
        """
        if self.is_fixed_length and len(genes) != len(self.genes):
            raise PreconditionError(
                f"Fixed-length chromosome cannot change length ({len(self.genes)} -> {len(genes)})"
            )
        if self.is_permutation and Counter(g.value for g in genes) != Counter(self.values()):
            raise PreconditionError("Permutation chromosome cannot change its gene values")
        self.genes = list(genes)

    def clone(self, reset: bool = False) -> 'Chromosome':
        """
        Deep copy of this chromosome.

        Args:
            reset: If True the copy is a fresh individual (no fitness, age 0);
                otherwise fitness and age are kept

        Returns:
            New Chromosome with cloned genes
        """
        return Chromosome(
            genes=[g.clone() for g in self.genes],
            is_permutation=self.is_permutation,
            is_fixed_length=self.is_fixed_length,
            fitness=None if reset else self.fitness,
            real_fitness=None if reset else self.real_fitness,
            age=0 if reset else self.age,
        )

    def clean(self) -> None:
        """Release all genes and drop fitness."""
        for gene in self.genes:
            gene.clean()
        self.genes = []
        self.invalidate()

    def __len__(self) -> int:
        return len(self.genes)

    def __getitem__(self, index: int) -> Gene:
        return self.genes[index]

    def __iter__(self) -> Iterator[Gene]:
        return iter(self.genes)

    def __repr__(self) -> str:
        return (
            f"Chromosome(age={self.age}, fitness={self.fitness}, "
            f"genes={self.values()})"
        )


class ChromosomeTemplate:
    """
    Sample chromosome describing how every chromosome of a population looks.

    The template carries no fitness or age; asking for them raises
    InvalidStateError.
    """

    def __init__(
        self,
        genes: List[Gene],
        is_permutation: bool = False,
        is_fixed_length: bool = True,
        size: Optional[int] = None,
    ):
        """
        Create a template from explicit genes.

        Args:
            genes: Sample genes (cloned for every instantiated chromosome)
            is_permutation: Instantiated chromosomes are shuffles of genes
            is_fixed_length: Instantiated chromosomes always have `size` genes
            size: Number of genes (defaults to len(genes))
        """
        if not genes:
            raise PreconditionError("ChromosomeTemplate needs at least one sample gene")
        if is_permutation and not is_fixed_length:
            raise PreconditionError("Permutation chromosomes must be fixed length")

        self._genes = list(genes)
        self.is_permutation = is_permutation
        self.is_fixed_length = is_fixed_length
        self.size = len(genes) if size is None else size
        if self.size < 1:
            raise PreconditionError(f"Chromosome size must be positive, got {self.size}")
        if is_permutation and self.size != len(genes):
            raise PreconditionError("Permutation template size must equal the number of genes")

    @classmethod
    def from_gene(
        cls,
        sample_gene: Gene,
        size: int,
        is_fixed_length: bool = True,
    ) -> 'ChromosomeTemplate':
        """Template whose chromosomes hold `size` randomized copies of one gene."""
        return cls([sample_gene], is_fixed_length=is_fixed_length, size=size)

    @property
    def genes(self) -> List[Gene]:
        return list(self._genes)

    @property
    def fitness(self) -> float:
        raise InvalidStateError("Template chromosome has no fitness")

    @fitness.setter
    def fitness(self, value: float) -> None:
        raise InvalidStateError("Template chromosome has no fitness")

    @property
    def real_fitness(self) -> float:
        raise InvalidStateError("Template chromosome has no real fitness")

    @real_fitness.setter
    def real_fitness(self, value: float) -> None:
        raise InvalidStateError("Template chromosome has no real fitness")

    @property
    def age(self) -> int:
        raise InvalidStateError("Template chromosome has no age")

    @age.setter
    def age(self, value: int) -> None:
        raise InvalidStateError("Template chromosome has no age")

    def clean(self) -> None:
        raise InvalidStateError("Template chromosome cannot be cleaned")

    def instantiate(self, rng: np.random.Generator) -> Chromosome:
        """
        Create a random live chromosome.

        Permutation templates yield a shuffled copy of the sample genes;
        other templates yield randomized genes, `size` of them when fixed
        length or a uniformly drawn count in [0, size] otherwise.
        """
        if self.is_permutation:
            order = rng.permutation(len(self._genes))
            genes = [self._genes[int(i)].clone() for i in order]
        else:
            if self.is_fixed_length:
                n_genes = self.size
            else:
                n_genes = int(rng.integers(0, self.size, endpoint=True))
            genes = [self._genes[i % len(self._genes)].clone() for i in range(n_genes)]
            for gene in genes:
                gene.set_random_value(rng)

        return Chromosome(
            genes=genes,
            is_permutation=self.is_permutation,
            is_fixed_length=self.is_fixed_length,
        )

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        flags = []
        if self.is_permutation:
            flags.append('permutation')
        if not self.is_fixed_length:
            flags.append('variable')
        flag_str = f", {'+'.join(flags)}" if flags else ''
        return f"ChromosomeTemplate(size={self.size}{flag_str}, genes={self._genes})"
