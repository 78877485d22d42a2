"""
Exception hierarchy for the genetic algorithm engine.

All failures raised by the library are programming errors (a violated
precondition, a gene value out of bounds, state used before it exists) or a
numerical failure. None of them are meant to be retried.
"""


class GeneticError(Exception):
    """Base class for all errors raised by genalg."""


class PreconditionError(GeneticError, ValueError):
    """An operation was called with arguments or state it does not accept."""


class ConstraintViolation(PreconditionError):
    """A gene value lies outside its bounds or was rejected by its checker."""


class InvalidStateError(GeneticError, RuntimeError):
    """An object was used in a state that does not support the operation."""


class NonconvergenceError(GeneticError, ArithmeticError):
    """An iterative numerical method failed to produce a usable result."""
