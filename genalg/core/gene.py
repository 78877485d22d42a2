"""
Gene types: the smallest mutable units of a candidate solution.

A gene owns a single value and knows how to randomize, mutate and clone
itself. Genes compare and hash by value only, so permutation-preserving
operators can match symbols across chromosomes regardless of which gene
object carries them.

Available genes:
- BoolGene: True/False, mutation flips the value
- IntGene: integer in an inclusive [min, max] range
- FloatGene: real number in an inclusive [min, max] range
- CharGene: single character in an inclusive code point range
"""

import copy
from typing import Any, Callable, Optional

import numpy as np

from .errors import ConstraintViolation, PreconditionError


ConstraintChecker = Callable[['Gene', Any], bool]


class Gene:
    """
    Base class for all genes.

    Attributes:
        constraint_checker: Optional callable(gene, value) -> bool consulted
            every time a value is assigned
    """

    def __init__(self, value: Any = None, constraint_checker: Optional[ConstraintChecker] = None):
        self.constraint_checker = constraint_checker
        self._value = None
        if value is not None:
            self.value = value

    @property
    def value(self) -> Any:
        """Current value of the gene."""
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        self._check(value)
        self._value = value

    @property
    def size(self) -> int:
        """Number of atomic elements held by the gene."""
        return 1

    def _check(self, value: Any) -> None:
        if self.constraint_checker is not None and not self.constraint_checker(self, value):
            raise ConstraintViolation(f"Value {value!r} rejected by constraint checker of {self!r}")

    def set_random_value(self, rng: np.random.Generator) -> None:
        """Assign a uniformly drawn value."""
        raise NotImplementedError

    def mutate(self, rng: np.random.Generator) -> None:
        """Mutate the gene in place. Defaults to re-randomization."""
        self.set_random_value(rng)

    def clean(self) -> None:
        """Release any resources held by the gene."""

    def clone(self) -> 'Gene':
        """New, independently owned gene with the same value, bounds and checker."""
        return copy.copy(self)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Gene):
            return self._value == other._value
        return self._value == other

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return repr(self._value)


class BoolGene(Gene):
    """Gene with two possible values."""

    def __init__(self, value: bool = False, constraint_checker: Optional[ConstraintChecker] = None):
        super().__init__(bool(value), constraint_checker)

    def set_random_value(self, rng: np.random.Generator) -> None:
        self.value = bool(rng.integers(0, 2))

    def mutate(self, rng: np.random.Generator) -> None:
        """Flip the value."""
        self.value = not self._value


class RangedGene(Gene):
    """
    Scalar gene constrained to an inclusive [min_value, max_value] range.

    Assigning a value outside the range raises ConstraintViolation.
    Mutation re-randomizes the value over the whole range.
    """

    def __init__(
        self,
        value: Any,
        min_value: Any,
        max_value: Any,
        constraint_checker: Optional[ConstraintChecker] = None,
    ):
        if min_value > max_value:
            raise PreconditionError(
                f"min_value ({min_value!r}) must not exceed max_value ({max_value!r})"
            )
        self.min_value = min_value
        self.max_value = max_value
        super().__init__(min_value if value is None else value, constraint_checker)

    def _check(self, value: Any) -> None:
        if not self.min_value <= value <= self.max_value:
            raise ConstraintViolation(
                f"Value {value!r} outside [{self.min_value!r}, {self.max_value!r}]"
            )
        super()._check(value)


class IntGene(RangedGene):
    """Integer gene in an inclusive range."""

    def __init__(
        self,
        value: Optional[int] = None,
        min_value: int = 0,
        max_value: int = 1,
        constraint_checker: Optional[ConstraintChecker] = None,
    ):
        super().__init__(value, int(min_value), int(max_value), constraint_checker)

    def set_random_value(self, rng: np.random.Generator) -> None:
        self.value = int(rng.integers(self.min_value, self.max_value, endpoint=True))


class FloatGene(RangedGene):
    """Real-valued gene in an inclusive range."""

    def __init__(
        self,
        value: Optional[float] = None,
        min_value: float = 0.0,
        max_value: float = 1.0,
        constraint_checker: Optional[ConstraintChecker] = None,
    ):
        super().__init__(value, float(min_value), float(max_value), constraint_checker)

    def set_random_value(self, rng: np.random.Generator) -> None:
        self.value = float(rng.uniform(self.min_value, self.max_value))


class CharGene(RangedGene):
    """Single character gene, ordered by code point."""

    def __init__(
        self,
        value: Optional[str] = None,
        min_value: str = 'a',
        max_value: str = 'z',
        constraint_checker: Optional[ConstraintChecker] = None,
    ):
        if len(min_value) != 1 or len(max_value) != 1:
            raise PreconditionError("CharGene bounds must be single characters")
        super().__init__(value, min_value, max_value, constraint_checker)

    def _check(self, value: Any) -> None:
        if not isinstance(value, str) or len(value) != 1:
            raise ConstraintViolation(f"CharGene value must be a single character, got {value!r}")
        super()._check(value)

    def set_random_value(self, rng: np.random.Generator) -> None:
        code = rng.integers(ord(self.min_value), ord(self.max_value), endpoint=True)
        self.value = chr(int(code))
