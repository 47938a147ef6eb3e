"""
Unsupervised clustering and outlier detection over pre-computed embeddings.
"""

from .engine import cluster_embeddings, cluster_embeddings_async
from .outliers import detect_outliers
from .pipeline import cluster_and_detect_outliers
from .types import (
    ClusterOptions,
    ClusteringError,
    ClusteringOptions,
    DimensionMismatchError,
    EmptyInputError,
    OutlierOptions,
    Partition,
    Point,
    partition_to_dict,
)

__all__ = [
    "cluster_embeddings",
    "cluster_embeddings_async",
    "detect_outliers",
    "cluster_and_detect_outliers",
    "ClusterOptions",
    "ClusteringError",
    "ClusteringOptions",
    "DimensionMismatchError",
    "EmptyInputError",
    "OutlierOptions",
    "Partition",
    "Point",
    "partition_to_dict",
]
