"""
Polynomials with a Newton root finder.

Used by nonlinear rank selection, whose rank weights are powers of the
positive real root of a polynomial built from the population size and the
selective pressure.
"""

import math
from typing import List

import numpy as np
from numpy.polynomial import polynomial as P

from ..core.errors import NonconvergenceError, PreconditionError


class Polynomial:
    """
    Polynomial with coefficients in ascending order.

    Example:
        Polynomial(1, 0, 1, 2) is 1 + x^2 + 2x^3
    """

    def __init__(self, *coefficients: float):
        if len(coefficients) == 1 and isinstance(coefficients[0], (list, tuple, np.ndarray)):
            coefficients = tuple(coefficients[0])
        if not coefficients:
            raise PreconditionError("Polynomial needs at least one coefficient")
        self.coefficients = np.asarray(coefficients, dtype=float)

    @property
    def degree(self) -> int:
        return len(self.coefficients) - 1

    def evaluate(self, x: float) -> float:
        """Value at x (Horner's method)."""
        return float(P.polyval(x, self.coefficients))

    def __call__(self, x: float) -> float:
        return self.evaluate(x)

    def derivative(self) -> 'Polynomial':
        if self.degree < 1:
            raise PreconditionError("Derivative of a constant polynomial is not defined here")
        return Polynomial(P.polyder(self.coefficients))

    def monic(self) -> 'Polynomial':
        """Same roots, leading coefficient scaled to 1."""
        leading = self.coefficients[-1]
        if leading == 0:
            raise PreconditionError("Leading coefficient is zero")
        return Polynomial(self.coefficients / leading)

    def reciprocal(self) -> 'Polynomial':
        """
        Coefficients reversed: x^n p(1/x).

        Its roots are the reciprocals of the nonzero roots of this polynomial.
        """
        return Polynomial(self.coefficients[::-1])

    def find_root(
        self,
        guess: float = 1.0,
        precision: float = 1e-5,
        max_iterations: int = 1000,
    ) -> float:
        """
        Find a real root with Newton's method.

        Args:
            guess: Starting point
            precision: Stop once |p(x)| <= precision or the Newton step is
                below precision relative to max(1, |x|)
            max_iterations: Iteration budget

        Returns:
            The root

        Raises:
            NonconvergenceError: if the derivative vanishes, an iterate is not
                finite or the budget is exhausted
        """
        if self.degree < 1:
            raise PreconditionError("Root finding requires degree >= 1")

        dp = self.derivative()
        root = float(guess)
        value = self.evaluate(root)
        for _ in range(max_iterations):
            if abs(value) <= precision:
                return root
            slope = dp.evaluate(root)
            if slope == 0:
                raise NonconvergenceError(f"Derivative vanished at x={root} for {self}")
            step = value / slope
            root -= step
            value = self.evaluate(root)
            if not (math.isfinite(root) and math.isfinite(value)):
                raise NonconvergenceError(f"Newton iteration diverged for {self}")
            if abs(step) <= precision * max(1.0, abs(root)):
                return root

        if abs(value) <= precision:
            return root
        raise NonconvergenceError(
            f"No root of {self} within {max_iterations} iterations (last x={root})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Polynomial):
            return NotImplemented
        return np.array_equal(self.coefficients, other.coefficients)

    def __hash__(self) -> int:
        return hash(tuple(self.coefficients))

    def __str__(self) -> str:
        terms: List[str] = []
        for i, c in enumerate(self.coefficients):
            if c == 0:
                continue
            coef = _format_number(c)
            if i == 0:
                terms.append(coef)
            elif i == 1:
                terms.append('x' if c == 1 else f"{coef}x")
            else:
                terms.append(f"x^{i}" if c == 1 else f"{coef}x^{i}")
        return ' + '.join(terms) if terms else 'ZERO POLY'

    def __repr__(self) -> str:
        return f"Polynomial({', '.join(_format_number(c) for c in self.coefficients)})"


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(float(value))
