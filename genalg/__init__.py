"""
genalg - a generic genetic algorithm engine.

Clients describe candidate solutions with genes and a sample chromosome and
score them with a fitness function; the engine evolves a population with
pluggable selection, crossover, mutation and termination strategies.

Subpackages:
- core: genes, chromosomes, fitness functions, errors
- numeric: alias-method sampling and polynomial root finding
- evolution: population, operators and the engine loop
- visualization: matplotlib plots of a finished run
"""

__version__ = '0.1.0'
