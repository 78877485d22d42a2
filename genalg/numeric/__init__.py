"""Numerical helpers used by the selection operators."""

from .sampling import AliasSampler
from .polynomial import Polynomial

__all__ = [
    'AliasSampler',
    'Polynomial',
]
