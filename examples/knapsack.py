#!/usr/bin/env python3
"""
Knapsack example: the xkcd 287 appetizer order.

Find an order of appetizers whose total price is as close as possible to
$15.05, preferring orders that are quick to prepare. An order is a
variable-length chromosome of IntGenes, each gene holding an index into the
menu; cut-and-splice crossover lets the order grow and shrink.

Usage:
    python examples/knapsack.py [options]

Options:
    --population N      Population size (default: 20)
    --generations N     Maximum number of generations (default: 100)
    --patience N        Stop after N generations without improvement (default: 10)
    --seed N            Random seed for reproducibility
    --verbose           Print one status line per generation
"""

import argparse
import sys
from pathlib import Path
from typing import List, NamedTuple, Tuple

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from genalg.core import ChromosomeTemplate, IntGene
from genalg.evolution import (
    Callbacks,
    CompositeTerminate,
    CutAndSpliceCrossover,
    EliteSelection,
    EvolutionConfig,
    EvolutionEngine,
    MaxGenerations,
    NoImprovement,
    TournamentSelection,
    UniformMutation,
)


class Appetizer(NamedTuple):
    name: str
    price: float
    time: int  # minutes to prepare


MENU = [
    Appetizer('mixed fruit', 2.15, 3),
    Appetizer('french fries', 2.75, 2),
    Appetizer('side salad', 3.35, 5),
    Appetizer('hot wings', 3.55, 3),
    Appetizer('mozzarella sticks', 4.20, 4),
    Appetizer('sampler plate', 5.80, 7),
]

MAX_ITEMS = 10
TARGET_PRICE = 15.05
WEIGHT_OF_PRICE = 2.0
WEIGHT_OF_TIME = 1.0


def order_totals(values: List[int]) -> Tuple[float, int]:
    """Total price and preparation time of an order."""
    items = [MENU[v] for v in values]
    return sum(a.price for a in items), sum(a.time for a in items)


def order_fitness(chromosome) -> float:
    """Closeness to the target price, weighted above a short preparation time."""
    if len(chromosome) == 0:
        return 0.0
    price, prep_time = order_totals(chromosome.values())
    return WEIGHT_OF_PRICE / (1.0 + abs(TARGET_PRICE - price)) + WEIGHT_OF_TIME / prep_time


def parse_args():
    parser = argparse.ArgumentParser(
        description='Solve the xkcd 287 appetizer knapsack with a genetic algorithm'
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
        '--verbose', action='store_true',
        help='Print one status line per generation'
    )
    return parser.parse_args()


def print_banner():
    print("=" * 70)
    print("   GENALG - Knapsack: xkcd 287 appetizers")
    print("=" * 70)


def on_fitness(engine, status):
    """Print progress during evolution."""
    print(
        f"\r   Gen {status.generations:3d} | "
        f"Best: {status.best_fitness:.4f} | "
        f"Avg: {status.average_fitness:.4f} | "
        f"Cross: {status.crossovers} | Mut: {status.mutated_genes}",
        end='', flush=True
    )


def main():
    args = parse_args()
    print_banner()

    sample_gene = IntGene(0, 0, len(MENU) - 1)
    config = EvolutionConfig(
        population_size=args.population,
        sample_chromosome=ChromosomeTemplate.from_gene(sample_gene, MAX_ITEMS, is_fixed_length=False),
        fitness_function=order_fitness,
        terminate_function=CompositeTerminate(
            MaxGenerations(args.generations),
            NoImprovement(args.patience),
        ),
        elite_selection=EliteSelection(1),
        parent_selection=TournamentSelection(5, 0.9),
        crossover=CutAndSpliceCrossover(),
        mutation=UniformMutation(),
        mutation_probability=0.05,
        callbacks=Callbacks(on_fitness=None if args.verbose else on_fitness),
        seed=args.seed,
        verbose=args.verbose,
    )

    print("\nConfiguration:")
    for key, value in config.to_dict().items():
        print(f"   {key + ':':<24}{value}")
    print()

    result = EvolutionEngine(config).run()

    print("\n\nResults:")
    print(result.summary())

    best = result.best_chromosome
    price, prep_time = order_totals(best.values())
    print(f"\nTotal price: ${price:.2f}, Total time: {prep_time} min")
    for value in best.values():
        item = MENU[value]
        print(f"   {item.name:<20} ${item.price:.2f}  {item.time} min")


if __name__ == '__main__':
    main()
