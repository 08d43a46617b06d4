"""
Shared fixtures: seeded randomness, a controllable clock and a node builder.
"""

import numpy as np
import pytest

from organic_type.core.geometry import EAST, Point
from organic_type.core.graph import Node


class FakeClock:
    """Deterministic clock: every call returns the current time, then advances."""

    def __init__(self, start: float = 1000.0, step: float = 0.0):
        self.now = start
        self.step = step

    def __call__(self) -> float:
        current = self.now
        self.now += self.step
        return current

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def rng():
    """Seeded RandomState so branching and curvature are reproducible."""
    return np.random.RandomState(42)


@pytest.fixture
def clock():
    """Clock advancing 10 ms per reading."""
    return FakeClock(start=1000.0, step=0.01)


@pytest.fixture
def make_node():
    """Build a Node with sensible defaults for the fields a test does not care about."""

    def build(node_id, char, x, y, **overrides):
        fields = dict(
            id=node_id,
            char=char,
            position=Point(x, y),
            velocity=EAST,
            energy=100.0,
            generation=0,
            text_index=0,
        )
        fields.update(overrides)
        return Node(**fields)

    return build
