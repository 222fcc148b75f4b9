"""
Shared fixtures for integration tests.
"""

import pytest

from evoneat.run.config import Config


@pytest.fixture
def xor_inputs():
    """XOR inputs."""
    return [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]


@pytest.fixture
def xor_outputs():
    """XOR expected outputs."""
    return [0.0, 1.0, 1.0, 0.0]


@pytest.fixture
def xor_config():
    """A small, seeded configuration for the XOR problem."""
    config = Config()
    config.population_size = 60
    config.num_inputs = 2
    config.num_outputs = 1
    config.start_fully_connected = True
    config.seed = 42
    config.max_number_generations = 30
    return config
