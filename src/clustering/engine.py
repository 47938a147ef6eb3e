"""
Clustering engine for pre-computed text embeddings.

This module:
- Validates the input points (non-empty, consistent embedding length).
- Clamps the requested cluster count to the supported range.
- Short-circuits inputs whose embeddings are all (numerically) identical.
- Seeds centroids with k-means++ and refines them with Lloyd's algorithm.
- Partitions the points into ``cluster_0`` ... ``cluster_{k-1}`` preserving
  input order within each cluster.
"""

import asyncio
import logging
from concurrent.futures import Executor
from typing import Optional, Sequence, Union

import numpy as np

from .kmeanspp import kmeanspp_init, lloyd_refine
from .types import (
    ClusteringOptions,
    DimensionMismatchError,
    EmptyInputError,
    Partition,
    PointLike,
    as_points,
    cluster_key,
)
from .workspace import NumericWorkspace

logger = logging.getLogger(__name__)

MIN_CLUSTERS = 2
MAX_CLUSTERS = 6
IDENTICAL_TOLERANCE = 1e-6


def resolve_options(options: Union[int, ClusteringOptions, None]) -> ClusteringOptions:
    """Accept a bare cluster count, an options object, or None for defaults."""
    if options is None:
        return ClusteringOptions()
    if isinstance(options, ClusteringOptions):
        return options
    if isinstance(options, bool) or not isinstance(options, (int, np.integer)):
        raise TypeError(f"options must be an int or ClusteringOptions, got {type(options).__name__}")
    return ClusteringOptions(n_clusters=int(options))


def effective_cluster_count(n_clusters: int, n_points: int) -> int:
    """clamp(n_clusters, 2, min(6, n_points))."""
    return min(max(MIN_CLUSTERS, n_clusters), min(MAX_CLUSTERS, n_points))


def _all_identical(data: np.ndarray) -> bool:
    return bool(np.all(np.abs(data - data[0]) < IDENTICAL_TOLERANCE))


def cluster_embeddings(
    inputs: Sequence[PointLike],
    options: Union[int, ClusteringOptions, None] = None,
) -> Partition:
    """
    Group embeddings into clusters with k-means++ seeding and Lloyd refinement.

    Args:
        inputs: Points (or ``{"text", "embedding"}`` mappings)
        options: Requested cluster count or a ClusteringOptions instance

    Returns:
        Partition with exactly ``effective_k`` keys, or a single ``cluster_0``
        when every embedding is identical

    Raises:
        EmptyInputError: `inputs` is empty
        DimensionMismatchError: embeddings differ in length
    """
    opts = resolve_options(options)
    if len(inputs) == 0:
        raise EmptyInputError()

    points = as_points(inputs)
    dim = len(points[0].embedding)
    if any(len(p.embedding) != dim for p in points):
        raise DimensionMismatchError()

    k = effective_cluster_count(opts.n_clusters, len(points))

    with NumericWorkspace() as workspace:
        data = workspace.hold(
            "embeddings",
            np.array([p.embedding for p in points], dtype=np.float64).reshape(len(points), dim),
        )

        if _all_identical(data):
            logger.info("All %d embeddings are identical; returning a single cluster", len(points))
            return {cluster_key(0): [p.with_outlier(False) for p in points]}

        logger.info(
            "Clustering %d points (dim=%d) into %d clusters (requested %d)",
            len(points),
            dim,
            k,
            opts.n_clusters,
        )
        rng = np.random.default_rng(opts.random_state)
        seeds = workspace.hold("seeds", kmeanspp_init(data, k, rng))
        result = lloyd_refine(data, seeds, max_iterations=opts.max_iterations)
        labels = workspace.hold("labels", result.labels)
        workspace.hold("centroids", result.centroids)

        partition: Partition = {cluster_key(i): [] for i in range(k)}
        for point, label in zip(points, labels):
            partition[cluster_key(int(label) % k)].append(point)

    logger.debug(
        "Cluster sizes: %s (iterations=%d, converged=%s)",
        {key: len(members) for key, members in partition.items()},
        result.iterations,
        result.converged,
    )
    return partition


async def cluster_embeddings_async(
    inputs: Sequence[PointLike],
    options: Union[int, ClusteringOptions, None] = None,
    executor: Optional[Executor] = None,
) -> Partition:
    """Run :func:`cluster_embeddings` in an executor without blocking the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, lambda: cluster_embeddings(inputs, options))
