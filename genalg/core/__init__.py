"""Core data model: genes, chromosomes, fitness functions and errors."""

from .errors import (
    GeneticError,
    PreconditionError,
    ConstraintViolation,
    InvalidStateError,
    NonconvergenceError,
)
from .gene import Gene, BoolGene, RangedGene, IntGene, FloatGene, CharGene
from .chromosome import Chromosome, ChromosomeTemplate
from .fitness import (
    FitnessFunction,
    AlterFitnessFunction,
    SimpleFitness,
    AlterFitness,
    alter_fitness_minimize,
    alter_fitness_age_penalty,
)

__all__ = [
    # Errors
    'GeneticError',
    'PreconditionError',
    'ConstraintViolation',
    'InvalidStateError',
    'NonconvergenceError',
    # Genes
    'Gene',
    'BoolGene',
    'RangedGene',
    'IntGene',
    'FloatGene',
    'CharGene',
    # Chromosomes
    'Chromosome',
    'ChromosomeTemplate',
    # Fitness
    'FitnessFunction',
    'AlterFitnessFunction',
    'SimpleFitness',
    'AlterFitness',
    'alter_fitness_minimize',
    'alter_fitness_age_penalty',
]
