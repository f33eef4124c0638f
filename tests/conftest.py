"""Pytest configuration and shared fixtures."""

import random
import pytest

from evopop.run.config import Config
from evopop.genotype import Genome, InnovationTracker


@pytest.fixture
def config():
    """A default configuration for small networks: 2 inputs -> 1 output."""
    config = Config()
    config.num_inputs = 2
    config.num_outputs = 1
    config.population_size = 10
    config.activation_initial = 'identity'
    return config


@pytest.fixture
def tracker(config):
    """A fresh innovation tracker for the 'config' network shape."""
    return InnovationTracker(config.num_inputs, config.num_outputs)


@pytest.fixture
def rng():
    """A seeded source of randomness."""
    return random.Random(42)


@pytest.fixture
def simple_genome_dict():
    """Minimal genome: 2 inputs -> 1 output."""
    return {
        'activation': 'identity',
        'nodes': [
            {'id': 0, 'type': 'input'},
            {'id': 1, 'type': 'input'},
            {'id': 2, 'type': 'output', 'bias': 0.0},
        ],
        'connections': [
            {'from': 0, 'to': 2, 'weight': 1.0, 'enabled': True},
            {'from': 1, 'to': 2, 'weight': 1.0, 'enabled': True},
        ]
    }


@pytest.fixture
def simple_genome(simple_genome_dict, config, tracker, rng):
    """The 'simple_genome_dict' genome."""
    return Genome.from_dict(simple_genome_dict, config, tracker, rng)
