"""
Crossover operators.

A crossover operator recombines two parent chromosomes in place: both
objects receive new gene content, their age is reset to 0 and their fitness
is dropped. The engine always hands clones of the selected parents to the
operator, never chromosomes of the current population.

Operators for fixed-length, non-permutation chromosomes:
- SinglePointCrossover: swap a random tail
- TwoPointCrossover: swap a random interior span
- UniformCrossover: swap each differing position with a probability
- HalfUniformCrossover: swap exactly half of the differing positions

Operators for permutation chromosomes (value multiset preserved):
- OrderedCrossover (OX)
- PartiallyMappedCrossover (PMX)

Operator for variable-length chromosomes:
- CutAndSpliceCrossover: independent cut points, lengths may change
"""

from collections import Counter
from typing import Any, List, Sequence, Tuple

import numpy as np

from ..core.chromosome import Chromosome
from ..core.errors import PreconditionError
from ..core.gene import Gene
from .status import StatusInfo


class CrossoverOperator:
    """Base class of crossover operators."""

    def cross(
        self,
        status: StatusInfo,
        first: Chromosome,
        second: Chromosome,
        rng: np.random.Generator,
    ) -> None:
        """
        Recombine two chromosomes in place.

        Args:
            status: Current run status
            first: First chromosome (modified)
            second: Second chromosome (modified)
            rng: Random generator
        """
        self._check(first, second)
        self._cross(first, second, rng)
        for ch in (first, second):
            ch.age = 0
            ch.invalidate()

    def _check(self, first: Chromosome, second: Chromosome) -> None:
        if len(first) != len(second):
            raise PreconditionError(
                f"Parents must have equal gene counts ({len(first)} != {len(second)})"
            )

    def _cross(self, first: Chromosome, second: Chromosome, rng: np.random.Generator) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class _FixedLengthCrossover(CrossoverOperator):
    """Crossover that breaks gene order, so permutation encodings are rejected."""

    def _check(self, first: Chromosome, second: Chromosome) -> None:
        for ch in (first, second):
            if ch.is_permutation:
                raise PreconditionError(f"{self!r} cannot recombine permutation chromosomes")
            if not ch.is_fixed_length:
                raise PreconditionError(f"{self!r} requires fixed-length chromosomes")
        super()._check(first, second)


def _swap_span(first: Chromosome, second: Chromosome, start: int, stop: int) -> None:
    first.genes[start:stop], second.genes[start:stop] = second.genes[start:stop], first.genes[start:stop]


class SinglePointCrossover(_FixedLengthCrossover):
    """Swap the genes of both parents after a random index."""

    def _cross(self, first: Chromosome, second: Chromosome, rng: np.random.Generator) -> None:
        if len(first) == 0:
            return
        idx = int(rng.integers(0, len(first)))
        _swap_span(first, second, idx, len(first))


class TwoPointCrossover(_FixedLengthCrossover):
    """Swap the genes between two random indexes (inclusive)."""

    def _cross(self, first: Chromosome, second: Chromosome, rng: np.random.Generator) -> None:
        if len(first) == 0:
            return
        idx1, idx2 = sorted(int(i) for i in rng.integers(0, len(first), size=2))
        _swap_span(first, second, idx1, idx2 + 1)


class UniformCrossover(_FixedLengthCrossover):
    """
    Swap each position where the parents differ with probability
    `swap_probability`.
    """

    def __init__(self, swap_probability: float = 0.5):
        if not 0.0 <= swap_probability <= 1.0:
            raise PreconditionError(f"swap_probability must be in [0, 1], got {swap_probability}")
        self.swap_probability = swap_probability

    def _cross(self, first: Chromosome, second: Chromosome, rng: np.random.Generator) -> None:
        for i in range(len(first)):
            if first.genes[i] != second.genes[i] and rng.random() < self.swap_probability:
                first.genes[i], second.genes[i] = second.genes[i], first.genes[i]

    def __repr__(self) -> str:
        return f"UniformCrossover(swap_probability={self.swap_probability})"


class HalfUniformCrossover(_FixedLengthCrossover):
    """Swap exactly half (rounded down) of the positions where the parents differ."""

    def _cross(self, first: Chromosome, second: Chromosome, rng: np.random.Generator) -> None:
        differing = [i for i in range(len(first)) if first.genes[i] != second.genes[i]]
        rng.shuffle(differing)
        for i in differing[:len(differing) // 2]:
            first.genes[i], second.genes[i] = second.genes[i], first.genes[i]


# =============================================================================
# Permutation-preserving crossovers
# =============================================================================

def ordered_crossover(a: Sequence[Any], b: Sequence[Any], start: int, end: int) -> List[Any]:
    """
    Order crossover (OX) of one child.

    a[start:end + 1] is copied in place; the remaining positions are filled,
    starting after `end` and wrapping around, with the values of `b` read
    cyclically from after `end`, skipping those already copied from `a`.

    Example:
        >>> ordered_crossover([8, 4, 7, 3, 6, 2, 5, 1, 9, 0], list(range(10)), 3, 7)
        [0, 4, 7, 3, 6, 2, 5, 1, 8, 9]
    """
    n = len(a)
    _check_range(n, len(b), start, end)

    child: List[Any] = [None] * n
    child[start:end + 1] = a[start:end + 1]
    copied = Counter(a[start:end + 1])

    pos = (end + 1) % n
    for k in range(n):
        value = b[(end + 1 + k) % n]
        if copied[value] > 0:
            copied[value] -= 1
            continue
        child[pos] = value
        pos = (pos + 1) % n
    return child


def partially_mapped_crossover(a: Sequence[Any], b: Sequence[Any], start: int, end: int) -> List[Any]:
    """
    Partially-mapped crossover (PMX) of one child.

    b[start:end + 1] is copied in place; every other position takes the
    value of `a`, following the mapping b[i] -> a[i] of the copied span
    until the value is not part of that span.

    Values must be distinct.
    """
    n = len(a)
    _check_range(n, len(b), start, end)
    if len(set(a)) != n or len(set(b)) != n:
        raise PreconditionError("Partially-mapped crossover requires distinct values")

    position_in_b = {b[i]: i for i in range(start, end + 1)}
    child = list(a)
    child[start:end + 1] = b[start:end + 1]
    for i in list(range(0, start)) + list(range(end + 1, n)):
        value = a[i]
        while value in position_in_b:
            value = a[position_in_b[value]]
        child[i] = value
    return child


def _check_range(n: int, n_other: int, start: int, end: int) -> None:
    if n != n_other:
        raise PreconditionError(f"Parents must have equal length ({n} != {n_other})")
    if not 0 <= start <= end < n:
        raise PreconditionError(f"Invalid crossover range [{start}, {end}] for length {n}")


class _PermutationCrossover(CrossoverOperator):
    """Crossover on a random [start, end] range that preserves the value multiset."""

    def _check(self, first: Chromosome, second: Chromosome) -> None:
        super()._check(first, second)
        if Counter(first.values()) != Counter(second.values()):
            raise PreconditionError("Permutation parents must hold the same values")

    def _recombine(self, a: Sequence[Any], b: Sequence[Any], start: int, end: int) -> List[Any]:
        raise NotImplementedError

    def _cross(self, first: Chromosome, second: Chromosome, rng: np.random.Generator) -> None:
        n = len(first)
        if n == 0:
            return
        start, end = sorted(int(i) for i in rng.integers(0, n, size=2))

        first_genes = list(first.genes)
        second_genes = list(second.genes)
        first_child = self._recombine(first_genes, second_genes, start, end)
        second_child = self._recombine(second_genes, first_genes, start, end)

        first.replace_genes(_own_genes(first_child))
        second.replace_genes(_own_genes(second_child))


def _own_genes(genes: List[Gene]) -> List[Gene]:
    # Recombined lists may reference genes of the other parent
    return [g.clone() for g in genes]


class OrderedCrossover(_PermutationCrossover):
    """Order crossover (OX); see ordered_crossover()."""

    def _recombine(self, a: Sequence[Any], b: Sequence[Any], start: int, end: int) -> List[Any]:
        return ordered_crossover(a, b, start, end)


class PartiallyMappedCrossover(_PermutationCrossover):
    """Partially-mapped crossover (PMX); see partially_mapped_crossover()."""

    def _recombine(self, a: Sequence[Any], b: Sequence[Any], start: int, end: int) -> List[Any]:
        return partially_mapped_crossover(a, b, start, end)


# =============================================================================
# Variable-length crossover
# =============================================================================

class CutAndSpliceCrossover(CrossoverOperator):
    """
    Cut each parent at its own random point and exchange the tails.

    Children lengths may differ from the parents', so only variable-length,
    non-permutation chromosomes are accepted.
    """

    def _check(self, first: Chromosome, second: Chromosome) -> None:
        for ch in (first, second):
            if ch.is_permutation or ch.is_fixed_length:
                raise PreconditionError(f"{self!r} requires variable-length, non-permutation chromosomes")

    def _cross(self, first: Chromosome, second: Chromosome, rng: np.random.Generator) -> None:
        cut1, cut2 = self.cut_points(first, second, rng)
        head1, tail1 = first.genes[:cut1], first.genes[cut1:]
        head2, tail2 = second.genes[:cut2], second.genes[cut2:]
        first.replace_genes(head1 + tail2)
        second.replace_genes(head2 + tail1)

    @staticmethod
    def cut_points(first: Chromosome, second: Chromosome, rng: np.random.Generator) -> Tuple[int, int]:
        """Draw a cut point for each parent, both in [0, len]."""
        return (
            int(rng.integers(0, len(first), endpoint=True)),
            int(rng.integers(0, len(second), endpoint=True)),
        )
