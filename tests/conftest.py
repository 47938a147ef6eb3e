"""
Pytest configuration and shared fixtures for the clustering tests.

This module provides:
- Reusable point sets (separated groups, outlier scenarios)
- A stub random generator for deterministic k-means++ draws
"""

from typing import List

import pytest

from src.clustering.types import Point


class StubRng:
    """Minimal stand-in for numpy.random.Generator with scripted draws."""

    def __init__(self, first_index: int = 0, draws=None):
        self.first_index = first_index
        self.draws = list(draws or [])

    def integers(self, high):
        return self.first_index

    def random(self):
        return self.draws.pop(0)


@pytest.fixture
def separated_points() -> List[Point]:
    """Two tight groups near [1, 0] and [-1, 0], interleaved."""
    return [
        Point(text="a0", embedding=[1.0, 0.0]),
        Point(text="b0", embedding=[-1.0, 0.0]),
        Point(text="a1", embedding=[0.95, 0.05]),
        Point(text="b1", embedding=[-0.95, -0.05]),
        Point(text="a2", embedding=[1.05, -0.05]),
        Point(text="b2", embedding=[-1.05, 0.05]),
    ]


@pytest.fixture
def outlier_points() -> List[dict]:
    """Two groups of three tight points, each with one distant member."""
    return [
        {"text": "c1_1", "embedding": [1, 0]},
        {"text": "c1_2", "embedding": [0.9, 0.1]},
        {"text": "c1_3", "embedding": [1.1, -0.1]},
        {"text": "c1_outlier", "embedding": [0.2, 0.2]},
        {"text": "c2_1", "embedding": [0, 1]},
        {"text": "c2_2", "embedding": [0.1, 0.9]},
        {"text": "c2_3", "embedding": [-0.1, 1.1]},
        {"text": "c2_outlier", "embedding": [-0.8, 0.5]},
    ]


@pytest.fixture
def stub_rng():
    return StubRng
