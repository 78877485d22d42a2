"""Visualization utilities for evolution runs."""

from .plots import (
    plot_fitness_history,
    plot_fitness_distribution,
)

__all__ = [
    'plot_fitness_history',
    'plot_fitness_distribution',
]
