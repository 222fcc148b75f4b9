"""Pytest configuration and shared fixtures."""

import random
import sys
from pathlib import Path

import pytest

# Add the source directory to the Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))


@pytest.fixture
def default_config():
    """A configuration holding the default value of every parameter."""
    from evoneat.run.config import Config
    return Config()


@pytest.fixture
def rng():
    """A seeded random number generator."""
    return random.Random(42)


@pytest.fixture
def tracker():
    """An innovation tracker for genomes with 2 inputs and 1 output."""
    from evoneat.genotype.innovation_tracker import InnovationTracker
    return InnovationTracker(2, 1)
