"""
Weighted discrete sampling with Vose's alias method.

Building the tables is O(n); every draw afterwards is O(1): pick a column
uniformly, then either keep it or jump to its alias.

See: http://www.keithschwarz.com/darts-dice-coins/
"""

from typing import Optional, Sequence

import numpy as np

from ..core.errors import PreconditionError


class AliasSampler:
    """
    O(1) sampler of indexes in proportion to non-negative weights.

    The tables are not incrementally updatable; call build() again whenever
    the weights change.

    Attributes:
        prob: Probability of keeping each column
        alias: Index drawn instead when a column is not kept
    """

    def __init__(self, weights: Optional[Sequence[float]] = None, total: Optional[float] = None):
        self.prob = np.zeros(0)
        self.alias = np.zeros(0, dtype=np.int64)
        if weights is not None:
            self.build(weights, total)

    def __len__(self) -> int:
        return len(self.prob)

    def build(self, weights: Sequence[float], total: Optional[float] = None) -> None:
        """
        Build the probability and alias tables.

        Args:
            weights: Non-negative weights, one per index
            total: Sum of weights if already known (checked against the weights)

        Raises:
            PreconditionError: on empty or negative weights, or a wrong total
        """
        w = np.asarray(weights, dtype=float)
        n = len(w)
        if n == 0:
            raise PreconditionError("AliasSampler needs at least one weight")
        if np.any(w < 0) or not np.all(np.isfinite(w)):
            raise PreconditionError("AliasSampler weights must be finite and non-negative")

        weight_sum = float(w.sum())
        if total is not None and not np.isclose(total, weight_sum, rtol=1e-9, atol=1e-12):
            raise PreconditionError(f"Supplied total {total} does not match weight sum {weight_sum}")

        self.prob = np.ones(n)
        self.alias = np.zeros(n, dtype=np.int64)
        if weight_sum <= 0:
            # Nothing to prefer: every column keeps itself
            return

        scaled = w * n / weight_sum
        small = []
        large = []
        for i in range(n):
            if scaled[i] >= 1.0:
                large.append(i)
            else:
                small.append(i)

        while small and large:
            less = small.pop()
            more = large.pop()

            self.prob[less] = scaled[less]
            self.alias[less] = more

            scaled[more] = (scaled[more] + scaled[less]) - 1.0
            if scaled[more] >= 1.0:
                large.append(more)
            else:
                small.append(more)

        # Leftovers are 1.0 up to rounding, whichever stack they ended in
        for i in small + large:
            self.prob[i] = 1.0

    def sample(self, rng: np.random.Generator) -> int:
        """Draw one index."""
        if len(self.prob) == 0:
            raise PreconditionError("AliasSampler has not been built")
        column = int(rng.integers(0, len(self.prob)))
        return column if rng.random() < self.prob[column] else int(self.alias[column])

    def sample_many(self, rng: np.random.Generator, size: int) -> np.ndarray:
        """Draw `size` indexes at once."""
        if len(self.prob) == 0:
            raise PreconditionError("AliasSampler has not been built")
        columns = rng.integers(0, len(self.prob), size=size)
        keep = rng.random(size) < self.prob[columns]
        return np.where(keep, columns, self.alias[columns])
