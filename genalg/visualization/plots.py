"""
Matplotlib-based visualization of evolution runs.

These functions create static plots for analysis and reports.
"""

import numpy as np
from typing import Optional, Tuple

# Matplotlib imports with non-GUI backend
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from ..core.errors import PreconditionError
from ..evolution.population import Population
from ..evolution.status import EvolutionHistory


def plot_fitness_history(
    history: EvolutionHistory,
    figsize: Tuple[int, int] = (10, 4),
    title: Optional[str] = None
) -> plt.Figure:
    """
    Plot best/average fitness and operator counts per generation.

    Args:
        history: History of a run (one entry per evaluated generation)
        figsize: Figure size
        title: Plot title

    Returns:
        matplotlib Figure
    """
    if len(history) == 0:
        raise PreconditionError("Cannot plot an empty history")

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)

    generations = history.series('generations')

    # Fitness plot
    ax1.plot(generations, history.series('best_fitness'), 'b-', linewidth=2, label='Best')
    ax1.plot(generations, history.series('average_fitness'), 'g--', linewidth=1.5, label='Average')
    ax1.set_xlabel('Generation')
    ax1.set_ylabel('Fitness')
    ax1.set_title('Fitness')
    ax1.grid(True, alpha=0.3)
    ax1.legend()

    # Operator activity
    ax2.plot(generations, history.series('crossovers'), 'r-', linewidth=2, label='Crossovers')
    ax2.plot(generations, history.series('mutated_genes'), 'm-', linewidth=2, label='Mutated genes')
    ax2.set_xlabel('Generation')
    ax2.set_ylabel('Cumulative count')
    ax2.set_title('Operators')
    ax2.grid(True, alpha=0.3)
    ax2.legend()

    if title:
        fig.suptitle(title)

    plt.tight_layout()
    return fig


def plot_fitness_distribution(
    population: Population,
    bins: int = 20,
    figsize: Tuple[int, int] = (6, 4),
    ax: Optional[plt.Axes] = None
) -> plt.Figure:
    """
    Histogram of the fitness values of an evaluated population.

    Args:
        population: Evaluated population
        bins: Number of histogram bins
        figsize: Figure size
        ax: Existing axes to plot on

    Returns:
        matplotlib Figure
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    values = population.fitness_values()
    ax.hist(values, bins=bins, color='steelblue', edgecolor='white', alpha=0.8)
    ax.axvline(np.mean(values), color='red', linestyle='--', label=f'Mean: {np.mean(values):.3f}')
    ax.set_xlabel('Fitness')
    ax.set_ylabel('Count')
    ax.set_title('Fitness Distribution')
    ax.legend()

    return fig
