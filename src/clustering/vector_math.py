"""
Vector primitives used by the clustering engine and outlier detector.
"""

from typing import Sequence

import numpy as np


def _as_vector(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def squared_euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Sum of per-dimension squared differences."""
    va, vb = _as_vector(a), _as_vector(b)
    if va.shape != vb.shape:
        raise ValueError(f"Vectors must have the same length ({va.shape[0]} vs {vb.shape[0]})")
    diff = va - vb
    return float(np.dot(diff, diff))


def vector_norm(a: Sequence[float]) -> float:
    return float(np.linalg.norm(_as_vector(a)))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity in [-1, 1].

    Returns NaN when either vector has zero magnitude; callers decide how to
    treat that case.
    """
    va, vb = _as_vector(a), _as_vector(b)
    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    if denom == 0.0:
        return float("nan")
    return float(np.dot(va, vb) / denom)


def centroid_of(vectors: Sequence[Sequence[float]]) -> np.ndarray:
    """Arithmetic mean per dimension of a non-empty set of vectors."""
    if len(vectors) == 0:
        raise ValueError("Cannot compute the centroid of an empty set of vectors")
    return np.asarray(vectors, dtype=np.float64).mean(axis=0)
