#!/usr/bin/env python3
"""
Travelling salesman example.

Random cities are placed in a 100x100 square and named by letters. A route
is a permutation chromosome of CharGenes; order crossover and swap mutation
keep every city exactly once. The path length is minimized by inverting the
fitness with alter_fitness_minimize.

Usage:
    python examples/tsp.py [options]

Options:
    --cities N          Number of cities, at most 26 (default: 20)
    --population N      Population size (default: 20)
    --generations N     Maximum number of generations (default: 100)
    --patience N        Stop after N generations without improvement (default: 10)
    --seed N            Random seed for reproducibility
    --plot PATH         Save the fitness history plot to PATH
"""

import argparse
import sys
from pathlib import Path
from typing import Dict

import numpy as np

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from genalg.core import CharGene, ChromosomeTemplate, alter_fitness_minimize
from genalg.evolution import (
    Callbacks,
    CompositeTerminate,
    EliteSelection,
    EvolutionConfig,
    EvolutionEngine,
    MaxGenerations,
    NoImprovement,
    OrderedCrossover,
    SwapMutation,
    TournamentSelection,
)
from genalg.visualization import plot_fitness_history


SQUARE_SIZE = 100


def parse_args():
    parser = argparse.ArgumentParser(
        description='Solve a random travelling salesman problem with a genetic algorithm'
    )
    parser.add_argument(
        '--cities', type=int, default=20,
        help='Number of cities, at most 26 (default: 20)'
    )
    parser.add_argument(
        '--population', type=int, default=20,
        help='Population size (default: 20)'
    )
    parser.add_argument(
        '--generations', type=int, default=100,
        help='Maximum number of generations (default: 100)'
    )
    parser.add_argument(
        '--patience', type=int, default=10,
        help='Generations without improvement before stopping (default: 10)'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for reproducibility'
    )
    parser.add_argument(
        '--plot', type=str, default=None,
        help='Save the fitness history plot to this path'
    )
    return parser.parse_args()


def print_banner():
    print("=" * 70)
    print("   GENALG - Travelling salesman")
    print("=" * 70)


def make_cities(n_cities: int, rng: np.random.Generator) -> Dict[str, np.ndarray]:
    """Cities 'a', 'b', ... at random integer coordinates in the square."""
    coords = rng.integers(0, SQUARE_SIZE, size=(n_cities, 2), endpoint=True)
    return {chr(ord('a') + i): coords[i].astype(float) for i in range(n_cities)}


def route_length(route, cities: Dict[str, np.ndarray]) -> float:
    """Length of the open path visiting cities in order."""
    points = np.array([cities[name] for name in route])
    return float(np.sum(np.linalg.norm(np.diff(points, axis=0), axis=1)))


def on_fitness(engine, status):
    """Print progress during evolution."""
    print(
        f"\r   Gen {status.generations:3d} | "
        f"Best distance: {status.best_real_fitness:8.2f} | "
        f"Avg distance: {status.average_real_fitness:8.2f} | "
        f"Cross: {status.crossovers} | Mut: {status.mutated_genes}",
        end='', flush=True
    )


def main():
    args = parse_args()
    if not 2 <= args.cities <= 26:
        print("Error: --cities must be between 2 and 26")
        return 1

    print_banner()

    rng = np.random.default_rng(args.seed)
    cities = make_cities(args.cities, rng)
    last = chr(ord('a') + args.cities - 1)
    genes = [CharGene(name, 'a', last) for name in cities]

    # Longest possible leg is sqrt(2) * 100, so 150 per city bounds any route
    max_distance = 150 * args.cities

    config = EvolutionConfig(
        population_size=args.population,
        sample_chromosome=ChromosomeTemplate(genes, is_permutation=True),
        fitness_function=lambda ch: route_length(ch.values(), cities),
        alter_fitness_function=alter_fitness_minimize(max_distance),
        terminate_function=CompositeTerminate(
            MaxGenerations(args.generations),
            NoImprovement(args.patience),
        ),
        elite_selection=EliteSelection(1),
        parent_selection=TournamentSelection(5, 0.9),
        crossover=OrderedCrossover(),
        mutation=SwapMutation(),
        mutation_probability=0.05,
        callbacks=Callbacks(on_fitness=on_fitness),
    )

    print("\nCities:")
    for name, (x, y) in cities.items():
        print(f"   {name}: ({x:5.1f}, {y:5.1f})")
    print()

    result = EvolutionEngine(config, rng=rng).run()

    print("\n\nResults:")
    print(result.summary())
    route = ''.join(result.best_chromosome.values())
    print(f"\nBest route: {route}, distance travelled: {result.best_real_fitness:.2f}")

    if args.plot:
        fig = plot_fitness_history(result.history, title='TSP fitness (inverted distance)')
        fig.savefig(args.plot, dpi=100, bbox_inches='tight')
        print(f"Saved plot to {args.plot}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
