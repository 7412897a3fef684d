"""Pytest configuration and shared fixtures."""

import importlib
import os
import random

import pytest

from subnetlab import config


@pytest.fixture(autouse=True)
def reset_environment():
    """Reset environment variables before each test."""
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def reload_config():
    """Reload subnetlab.config after changing the environment, and restore it afterwards."""
    original_env = os.environ.copy()

    yield lambda: importlib.reload(config)

    os.environ.clear()
    os.environ.update(original_env)
    importlib.reload(config)


@pytest.fixture
def rng():
    """Seeded random source so generated problems are reproducible."""
    return random.Random(1234)
