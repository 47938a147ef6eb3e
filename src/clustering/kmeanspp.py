"""
k-means++ seeding and Lloyd's-algorithm refinement on dense numpy matrices.

Both functions operate on an ``(n_points, n_dims)`` float matrix and never
modify it; centroids are always fresh arrays.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 100
CONVERGENCE_TOLERANCE = 1e-6


@dataclass
class RefinementResult:
    """Outcome of :func:`lloyd_refine`."""

    labels: np.ndarray      # (n_points,) int cluster index per point
    centroids: np.ndarray   # (k, n_dims)
    iterations: int
    converged: bool


def pairwise_squared_distances(data: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Squared Euclidean distance from every point to every centroid, shape (n, k)."""
    diff = data[:, np.newaxis, :] - centroids[np.newaxis, :, :]
    return np.einsum("nkd,nkd->nk", diff, diff)


def _sample_index(probs: np.ndarray, rng: np.random.Generator) -> int:
    # Inverse-CDF draw: first index whose cumulative probability reaches r.
    r = rng.random()
    idx = int(np.searchsorted(np.cumsum(probs), r, side="left"))
    return min(idx, probs.shape[0] - 1)


def kmeanspp_init(
    data: np.ndarray,
    k: int,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Choose `k` initial centroids with k-means++ weighting.

    The first centroid is a uniformly drawn row. Each further centroid is drawn
    with probability proportional to the squared distance between a point and
    its nearest already-chosen centroid.

    Args:
        data: Embedding matrix (n_points, n_dims)
        k: Number of centroids, 1 <= k <= n_points
        rng: Random generator (a fresh unseeded one if omitted)

    Returns:
        Array of shape (k, n_dims) holding copies of the chosen rows
    """
    n_points = data.shape[0]
    if not 1 <= k <= n_points:
        raise ValueError(f"k must be between 1 and the number of points ({n_points}), got {k}")
    rng = rng if rng is not None else np.random.default_rng()

    chosen = [int(rng.integers(n_points))]
    while len(chosen) < k:
        nearest = pairwise_squared_distances(data, data[chosen]).min(axis=1)
        total = float(nearest.sum())
        if total > 0.0:
            probs = nearest / total
        else:
            # Every point coincides with a chosen centroid.
            probs = np.full(n_points, 1.0 / n_points)
        chosen.append(_sample_index(probs, rng))

    logger.debug("k-means++ selected seed rows %s", chosen)
    return data[chosen].copy()


def assign_to_nearest(data: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid per point; ties resolve to the lowest index."""
    return np.argmin(pairwise_squared_distances(data, centroids), axis=1)


def update_centroids(data: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Mean of assigned points per cluster; empty clusters keep their previous centroid."""
    new_centroids = centroids.copy()
    for j in range(centroids.shape[0]):
        mask = labels == j
        if np.any(mask):
            new_centroids[j] = data[mask].mean(axis=0)
    return new_centroids


def lloyd_refine(
    data: np.ndarray,
    initial_centroids: np.ndarray,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    tolerance: float = CONVERGENCE_TOLERANCE,
) -> RefinementResult:
    """
    Alternate assignment and centroid updates until the summed squared centroid
    displacement drops below `tolerance` or `max_iterations` is reached.

    Hitting the iteration cap is not an error; the latest assignments are
    returned with ``converged=False``.
    """
    centroids = np.array(initial_centroids, dtype=np.float64, copy=True)
    labels = assign_to_nearest(data, centroids)

    for iteration in range(1, max_iterations + 1):
        new_centroids = update_centroids(data, labels, centroids)
        shift = float(np.sum((new_centroids - centroids) ** 2))
        centroids = new_centroids
        if shift < tolerance:
            logger.debug("Lloyd refinement converged after %d iteration(s) (shift=%.3g)", iteration, shift)
            return RefinementResult(labels=labels, centroids=centroids, iterations=iteration, converged=True)
        labels = assign_to_nearest(data, centroids)

    logger.warning(
        "Lloyd refinement did not converge within %d iterations; using last assignments",
        max_iterations,
    )
    return RefinementResult(labels=labels, centroids=centroids, iterations=max_iterations, converged=False)
