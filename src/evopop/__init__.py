"""
evopop - an evolutionary population manager for NEAT-style neuroevolution.

A population of neural-network genomes is scored by fitness, clustered into
species by structural similarity, culled, and bred across generations.

Main components:
- genotype:    Genetic encoding (genomes, genes, innovation tracking, mutation operators)
- phenotype:   Neural network expression, used to measure a genome's error
- pool:        Population, species and the generational loop
- run:         Configuration and the Trial runner
- activations: Activation functions for neural networks
- cost:        Cost functions measuring a network's error

Example:
    >>> from evopop import Config, Population
    >>> config = Config("config.ini")
    >>> population = Population(config, dataset=[{"input": [0, 1], "output": [1]}])
    >>> for _ in range(10):
    ...     population.evolve()
"""

__version__ = "0.1.0"

from evopop.errors          import (EvolutionError, ConfigurationError, InvariantError,
                                    IncompatibleOperatorError, EvaluationError)
from evopop.run.config      import Config
from evopop.run.trial       import Trial
from evopop.genotype        import Genome, InnovationTracker, Mutation
from evopop.pool            import CullResult, Population, Species, SpeciesManager

__all__ = [
    "Config",
    "Trial",
    "Genome",
    "InnovationTracker",
    "Mutation",
    "Population",
    "Species",
    "SpeciesManager",
    "CullResult",
    "EvolutionError",
    "ConfigurationError",
    "InvariantError",
    "IncompatibleOperatorError",
    "EvaluationError",
]
