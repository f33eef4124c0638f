"""
Shared fixtures for integration tests.
"""

import random
import pytest
import numpy as np

from evopop.run.config import Config


@pytest.fixture(autouse=True)
def set_random_seeds():
    """Seed the global sources of randomness, for code paths not given an rng."""
    np.random.seed(42)
    random.seed(42)

    yield

    np.random.seed(None)
    random.seed(None)


@pytest.fixture
def xor_dataset():
    """XOR samples in dataset format."""
    return [{'input': [0.0, 0.0], 'output': [0.0]},
            {'input': [0.0, 1.0], 'output': [1.0]},
            {'input': [1.0, 0.0], 'output': [1.0]},
            {'input': [1.0, 1.0], 'output': [0.0]}]


@pytest.fixture
def sum_dataset():
    """Samples of the sum of two inputs."""
    return [{'input': [a, b], 'output': [a + b]}
            for a in (0.0, 0.25, 0.5, 1.0) for b in (0.0, 0.5, 1.0)]


@pytest.fixture
def evolution_config():
    """A configuration for small, quick, evolutions."""
    config = Config()
    config.num_inputs             = 2
    config.num_outputs            = 1
    config.population_size        = 50
    config.activation_initial     = 'identity'
    config.max_number_generations = 20   # below stagnant_limit: no top-two narrowing
    return config
