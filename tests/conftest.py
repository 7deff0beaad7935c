"""Shared pytest fixtures for Gridlock tests."""

import random
from typing import Callable

import pytest


@pytest.fixture
def rng() -> Callable[[], float]:
    return random.Random(1234).random


@pytest.fixture
def const_rng() -> Callable[[], float]:
    return lambda: 0.42
