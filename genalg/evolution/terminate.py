"""
Termination predicates.

A terminate function is called once per evaluated generation with the
current StatusInfo and returns True to stop the run. Predicates that track
progress (NoImprovement, TimeLimit, CompositeTerminate) carry state for a
single run; build a fresh instance for every run.

After firing, `reason` describes why the run stopped.
"""

import time
from typing import Callable, List, Optional

from ..core.errors import PreconditionError
from .status import StatusInfo


class TerminateFunction:
    """Base class of terminate predicates."""

    def __init__(self):
        self.reason: Optional[str] = None

    def __call__(self, status: StatusInfo) -> bool:
        stop = self._should_stop(status)
        if stop and self.reason is None:
            self.reason = self._describe()
        return stop

    def _should_stop(self, status: StatusInfo) -> bool:
        raise NotImplementedError

    def _describe(self) -> str:
        return repr(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class MaxGenerations(TerminateFunction):
    """Stop once `generations` evaluated generations are reached."""

    def __init__(self, generations: int):
        super().__init__()
        if generations < 1:
            raise PreconditionError(f"generations must be >= 1, got {generations}")
        self.generations = generations

    def _should_stop(self, status: StatusInfo) -> bool:
        return status.generations >= self.generations

    def _describe(self) -> str:
        return f"reached {self.generations} generations"

    def __repr__(self) -> str:
        return f"MaxGenerations({self.generations})"


class MaxEvaluations(TerminateFunction):
    """Stop once the fitness function was called `evaluations` times."""

    def __init__(self, evaluations: int):
        super().__init__()
        if evaluations < 1:
            raise PreconditionError(f"evaluations must be >= 1, got {evaluations}")
        self.evaluations = evaluations

    def _should_stop(self, status: StatusInfo) -> bool:
        return status.evaluations >= self.evaluations

    def _describe(self) -> str:
        return f"reached {self.evaluations} evaluations"

    def __repr__(self) -> str:
        return f"MaxEvaluations({self.evaluations})"


class TargetFitness(TerminateFunction):
    """
    Stop when the best fitness reaches `target`.

    Args:
        target: Fitness to reach
        real: Compare against the real (unaltered) best fitness
    """

    def __init__(self, target: float, real: bool = False):
        super().__init__()
        self.target = target
        self.real = real

    def _should_stop(self, status: StatusInfo) -> bool:
        best = status.best_real_fitness if self.real else status.best_fitness
        return best >= self.target

    def _describe(self) -> str:
        kind = 'real fitness' if self.real else 'fitness'
        return f"reached target {kind} {self.target}"

    def __repr__(self) -> str:
        return f"TargetFitness({self.target}, real={self.real})"


class NoImprovement(TerminateFunction):
    """
    Stop when the monitored metric did not strictly increase for
    `generations` consecutive calls.

    Args:
        generations: Calls without improvement before stopping
        monitor: 'best' (best fitness) or 'average' (average fitness)
    """

    MONITORS = {'best': 'best_fitness', 'average': 'average_fitness'}

    def __init__(self, generations: int, monitor: str = 'best'):
        super().__init__()
        if generations < 1:
            raise PreconditionError(f"generations must be >= 1, got {generations}")
        if monitor not in self.MONITORS:
            raise PreconditionError(f"monitor must be one of {sorted(self.MONITORS)}, got {monitor!r}")
        self.generations = generations
        self.monitor = monitor
        self.last_value: Optional[float] = None
        self.stalled = 0

    def _should_stop(self, status: StatusInfo) -> bool:
        value = getattr(status, self.MONITORS[self.monitor])
        if self.last_value is None or value > self.last_value:
            self.last_value = value
            self.stalled = 0
        else:
            self.stalled += 1
        return self.stalled >= self.generations

    def _describe(self) -> str:
        return f"no {self.monitor} fitness improvement for {self.generations} generations"

    def __repr__(self) -> str:
        return f"NoImprovement({self.generations}, monitor={self.monitor!r})"


class TimeLimit(TerminateFunction):
    """Stop once `seconds` of wall-clock time passed since the first call."""

    def __init__(self, seconds: float):
        super().__init__()
        if seconds <= 0:
            raise PreconditionError(f"seconds must be positive, got {seconds}")
        self.seconds = seconds
        self._start: Optional[float] = None

    def _should_stop(self, status: StatusInfo) -> bool:
        now = time.monotonic()
        if self._start is None:
            self._start = now
        return now - self._start >= self.seconds

    def _describe(self) -> str:
        return f"time limit of {self.seconds}s exceeded"

    def __repr__(self) -> str:
        return f"TimeLimit({self.seconds})"


class SimpleTerminate(TerminateFunction):
    """Wrap a plain `func(status) -> bool`."""

    def __init__(self, func: Callable[[StatusInfo], bool], name: str = ''):
        super().__init__()
        self.func = func
        self.name = name or getattr(func, '__name__', 'terminate')

    def _should_stop(self, status: StatusInfo) -> bool:
        return bool(self.func(status))

    def __repr__(self) -> str:
        return f"SimpleTerminate({self.name})"


class CompositeTerminate(TerminateFunction):
    """
    Any-of composition.

    Children are called in registration order; the first that fires stops the
    evaluation (later children are not called) and is kept in `fired`.
    """

    def __init__(self, *functions: TerminateFunction):
        super().__init__()
        if not functions:
            raise PreconditionError("CompositeTerminate needs at least one terminate function")
        self.functions: List[TerminateFunction] = [
            f if isinstance(f, TerminateFunction) else SimpleTerminate(f)
            for f in functions
        ]
        self.fired: Optional[TerminateFunction] = None

    def _should_stop(self, status: StatusInfo) -> bool:
        for func in self.functions:
            if func(status):
                self.fired = func
                return True
        return False

    def _describe(self) -> str:
        return self.fired.reason or repr(self.fired)

    def __repr__(self) -> str:
        return f"CompositeTerminate({', '.join(repr(f) for f in self.functions)})"
