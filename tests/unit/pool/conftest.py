"""
Shared fixtures for the pool tests.
"""

import pytest

from evopop.genotype import Genome


@pytest.fixture
def make_genome(config, tracker, rng):
    """
    Factory of 2 inputs -> 1 output genomes, both connections of weight 'weight'.

    Genomes with the same weight are at distance 0; with 'distance_includes_nodes'
    off, genomes whose weights differ by d are at distance distance_params_coeff * d.
    """
    config.distance_includes_nodes = False

    def factory(fitness=None, weight=0.0):
        genome = Genome.from_dict({
            'activation': 'identity',
            'nodes': [
                {'id': 0, 'type': 'input'},
                {'id': 1, 'type': 'input'},
                {'id': 2, 'type': 'output', 'bias': 0.0},
            ],
            'connections': [
                {'from': 0, 'to': 2, 'weight': weight},
                {'from': 1, 'to': 2, 'weight': weight},
            ]
        }, config, tracker, rng)
        genome.fitness = fitness
        return genome

    return factory
