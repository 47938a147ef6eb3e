"""
Outlier annotation for clustering partitions.

Points are scored by cosine similarity to their cluster centroid:
- Clusters smaller than ``min_cluster_size`` are flagged wholesale.
- Otherwise a point is an outlier when its similarity falls below an absolute
  floor of 0.8, or when its z-score within the cluster is below
  ``-std_dev_threshold``.

When every point in the partition is nearly identical to the global centroid
(mean similarity > 0.95, std < 0.01) nothing is flagged.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from .types import OutlierOptions, Partition, Point
from .vector_math import centroid_of

logger = logging.getLogger(__name__)

SIMILARITY_FLOOR = 0.8
STD_DEV_FLOOR = 1e-4
HOMOGENEOUS_MEAN = 0.95
HOMOGENEOUS_STD = 0.01


def _similarities_to_centroid(points: Sequence[Point]) -> np.ndarray:
    embeddings = np.asarray([p.embedding for p in points], dtype=np.float64)
    centroid = centroid_of(embeddings)
    # Zero-magnitude vectors (or a zero centroid) score 0, i.e. dissimilar.
    return cosine_similarity(embeddings, centroid[np.newaxis, :]).ravel()


def _mean_and_std(values: np.ndarray) -> Tuple[float, float]:
    return float(values.mean()), float(values.std())


def is_homogeneous(partition: Partition) -> bool:
    """True when all points sit tightly around the global centroid direction."""
    all_points = [p for points in partition.values() for p in points]
    if not all_points:
        return False
    mean, std = _mean_and_std(_similarities_to_centroid(all_points))
    return mean > HOMOGENEOUS_MEAN and std < HOMOGENEOUS_STD


def _flag_cluster(points: List[Point], opts: OutlierOptions) -> List[Point]:
    if not points:
        return []
    if len(points) < opts.min_cluster_size:
        return [p.with_outlier(True) for p in points]

    sims = _similarities_to_centroid(points)
    mean, std = _mean_and_std(sims)
    z_scores = (sims - mean) / max(std, STD_DEV_FLOOR)
    flags = (sims < SIMILARITY_FLOOR) | (z_scores < -opts.std_dev_threshold)
    return [p.with_outlier(bool(flag)) for p, flag in zip(points, flags)]


def detect_outliers(partition: Partition, options: Optional[OutlierOptions] = None) -> Partition:
    """
    Annotate every point in `partition` with ``is_outlier``.

    Cluster keys, their order and membership are preserved; no point is moved
    or dropped.
    """
    opts = options or OutlierOptions()

    if is_homogeneous(partition):
        logger.info("Partition is homogeneous; no outliers flagged")
        return {key: [p.with_outlier(False) for p in points] for key, points in partition.items()}

    result: Partition = {key: _flag_cluster(points, opts) for key, points in partition.items()}

    n_outliers = sum(1 for points in result.values() for p in points if p.is_outlier)
    logger.info(
        "Flagged %d outlier(s) across %d cluster(s) (min_cluster_size=%d, std_dev_threshold=%.2f)",
        n_outliers,
        len(result),
        opts.min_cluster_size,
        opts.std_dev_threshold,
    )
    return result
