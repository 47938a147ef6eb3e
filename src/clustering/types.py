"""
Shared data types and errors for the clustering engine.

A clustering call consumes an ordered sequence of :class:`Point` objects and
returns a :data:`Partition` (``cluster_0`` ... ``cluster_{k-1}`` mapped to the
points assigned to each cluster, in input order).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union


class ClusteringError(ValueError):
    """Base class for caller-input errors raised by the clustering engine."""


class EmptyInputError(ClusteringError):
    """Raised when no points are supplied."""

    def __init__(self, message: str = "Input array cannot be empty"):
        super().__init__(message)


class DimensionMismatchError(ClusteringError):
    """Raised when embeddings do not all share the same length."""

    def __init__(self, message: str = "All embeddings must have the same length"):
        super().__init__(message)


@dataclass(frozen=True)
class Point:
    """
    A labelled embedding.

    `text` is carried through unchanged and never inspected. `is_outlier` is
    ``None`` until outlier detection has evaluated the point.
    """

    text: str
    embedding: Tuple[float, ...]
    is_outlier: Optional[bool] = None

    def __post_init__(self):
        # Own a copy so no caller-side list is ever aliased.
        object.__setattr__(self, "embedding", tuple(self.embedding))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Point:
        return cls(
            text=data["text"],
            embedding=data["embedding"],
            is_outlier=data.get("isOutlier", data.get("is_outlier")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"text": self.text, "embedding": list(self.embedding)}
        if self.is_outlier is not None:
            out["isOutlier"] = self.is_outlier
        return out

    def with_outlier(self, is_outlier: bool) -> Point:
        return Point(text=self.text, embedding=self.embedding, is_outlier=is_outlier)


Partition = Dict[str, List[Point]]
PointLike = Union[Point, Mapping[str, Any]]


def cluster_key(label: int) -> str:
    return f"cluster_{label}"


def as_points(inputs: Sequence[PointLike]) -> List[Point]:
    """Coerce mappings (e.g. decoded JSON) into Point objects."""
    return [item if isinstance(item, Point) else Point.from_dict(item) for item in inputs]


def partition_to_dict(partition: Partition) -> Dict[str, List[Dict[str, Any]]]:
    """Render a partition as JSON-ready data, preserving key order."""
    return {key: [p.to_dict() for p in points] for key, points in partition.items()}


@dataclass
class ClusteringOptions:
    """Parameters for :func:`src.clustering.engine.cluster_embeddings`."""

    n_clusters: int = 3
    max_iterations: int = 100
    random_state: Optional[int] = None


@dataclass
class OutlierOptions:
    """Parameters for :func:`src.clustering.outliers.detect_outliers`."""

    min_cluster_size: int = 3
    std_dev_threshold: float = 2.0


@dataclass
class ClusterOptions:
    """Combined options for clustering followed by outlier detection."""

    n_clusters: int = 3
    min_cluster_size: int = 3
    std_dev_threshold: float = 2.0
    max_iterations: int = 100
    random_state: Optional[int] = None

    def clustering(self) -> ClusteringOptions:
        return ClusteringOptions(
            n_clusters=self.n_clusters,
            max_iterations=self.max_iterations,
            random_state=self.random_state,
        )

    def outliers(self) -> OutlierOptions:
        return OutlierOptions(
            min_cluster_size=self.min_cluster_size,
            std_dev_threshold=self.std_dev_threshold,
        )
