"""
Tests for run visualization.

Run with: python -m pytest tests/test_plots.py -v
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from genalg.core import BoolGene, ChromosomeTemplate, PreconditionError
from genalg.evolution import (
    EvolutionConfig,
    EvolutionEngine,
    EvolutionHistory,
    MaxGenerations,
    SinglePointCrossover,
    TournamentSelection,
    UniformMutation,
)
from genalg.visualization import plot_fitness_distribution, plot_fitness_history

import matplotlib.pyplot as plt


@pytest.fixture(scope='module')
def result():
    config = EvolutionConfig(
        population_size=10,
        sample_chromosome=ChromosomeTemplate.from_gene(BoolGene(), 8),
        fitness_function=lambda ch: float(sum(ch.values())),
        terminate_function=MaxGenerations(5),
        parent_selection=TournamentSelection(2),
        crossover=SinglePointCrossover(),
        mutation=UniformMutation(),
        seed=0,
    )
    return EvolutionEngine(config).run()


class TestPlots:
    """Tests for matplotlib plots."""

    def test_fitness_history(self, result, tmp_path):
        fig = plot_fitness_history(result.history, title='OneMax')

        assert len(fig.axes) == 2
        best_line = fig.axes[0].get_lines()[0]
        assert list(best_line.get_ydata()) == result.history.fitness_trajectory

        path = tmp_path / 'history.png'
        fig.savefig(path)
        assert path.stat().st_size > 0
        plt.close(fig)

    def test_empty_history(self):
        with pytest.raises(PreconditionError):
            plot_fitness_history(EvolutionHistory())

    def test_fitness_distribution(self, result):
        fig = plot_fitness_distribution(result.final_population, bins=5)

        assert fig.axes[0].get_title() == 'Fitness Distribution'
        plt.close(fig)

    def test_existing_axes(self, result):
        fig, ax = plt.subplots()
        returned = plot_fitness_distribution(result.final_population, ax=ax)
        assert returned is fig
        plt.close(fig)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
