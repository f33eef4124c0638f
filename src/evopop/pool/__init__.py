"""
Pool Package

This package implements the evolutionary population manager: the population of
genomes, its division into species, and the generational loop.

Modules:
    population:      Population class and the default fitness function
    species:         Species class
    species_manager: SpeciesManager and CullResult classes
    selection:       Parent selection schemes

Exported Classes:
    Population:     Generational coordinator managing genomes and species
    Species:        A cluster of structurally compatible genomes
    SpeciesManager: Manages all species across generations
    CullResult:     The species surviving a cull, with their summed average fitness
"""

from evopop.pool.population      import Population, default_fitness
from evopop.pool.species         import Species
from evopop.pool.species_manager import CullResult, SpeciesManager

__all__ = ['CullResult',
           'Population',
           'Species',
           'SpeciesManager',
           'default_fitness']
