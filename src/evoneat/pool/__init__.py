"""
NEAT Pool Package

This package implements population management for the NEAT algorithm:
the grouping of genomes into species and the generational loop.

Modules:
    species:    Species class
    population: Population class

Exported Classes:
    Species:    A cluster of genetically similar genomes
    Population: Top-level evolutionary coordinator
"""

from evoneat.pool.species    import Species
from evoneat.pool.population import Population

__all__ = ['Population',
           'Species']
