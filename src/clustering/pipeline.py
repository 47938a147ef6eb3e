"""
Cluster-then-annotate pipeline and command-line entry point.

Usage:
    python -m src.clustering.pipeline --input items.json --n-clusters 4

`items.json` holds a list of ``{"text": ..., "embedding": [...]}`` objects.
The resulting partition is written as JSON to stdout or ``--output``.
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional, Sequence

from src.common.logging_utils import setup_logging

from .config import CONFIG_PATH, get_cluster_options
from .engine import cluster_embeddings
from .outliers import detect_outliers
from .types import ClusterOptions, ClusteringError, Partition, PointLike, partition_to_dict

logger = logging.getLogger(__name__)


def cluster_and_detect_outliers(
    inputs: Sequence[PointLike],
    options: Optional[ClusterOptions] = None,
) -> Partition:
    """Cluster `inputs`, then flag outliers within the resulting partition."""
    opts = options or ClusterOptions()
    partition = cluster_embeddings(inputs, opts.clustering())
    return detect_outliers(partition, opts.outliers())


def load_inputs(path: str) -> List[dict]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("inputs", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a list of {{text, embedding}} objects")
    return data


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Cluster text embeddings and flag outliers.")
    parser.add_argument("--input", required=True, help="JSON file with a list of {text, embedding} objects.")
    parser.add_argument("--output", help="Write the partition JSON here instead of stdout.")
    parser.add_argument("--config", default=CONFIG_PATH, help=f"Config file (default: {CONFIG_PATH}).")
    parser.add_argument("--n-clusters", type=int, help="Requested number of clusters (clamped to 2-6).")
    parser.add_argument("--min-cluster-size", type=int, help="Clusters smaller than this are outlier groups.")
    parser.add_argument("--std-dev-threshold", type=float, help="z-score threshold for outliers.")
    parser.add_argument("--seed", type=int, help="Random seed for k-means++ initialization.")
    parser.add_argument(
        "--no-outliers",
        action="store_true",
        help="Only cluster; skip outlier detection.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.config)

    opts = get_cluster_options(args.config)
    if args.n_clusters is not None:
        opts.n_clusters = args.n_clusters
    if args.min_cluster_size is not None:
        opts.min_cluster_size = args.min_cluster_size
    if args.std_dev_threshold is not None:
        opts.std_dev_threshold = args.std_dev_threshold
    if args.seed is not None:
        opts.random_state = args.seed

    try:
        inputs = load_inputs(args.input)
        if args.no_outliers:
            partition = cluster_embeddings(inputs, opts.clustering())
        else:
            partition = cluster_and_detect_outliers(inputs, opts)
    except FileNotFoundError as exc:
        logger.error("Input file not found: %s", exc)
        return 1
    except ClusteringError as exc:
        logger.error("Rejected clustering input in %s: %s", args.input, exc)
        return 2
    except (ValueError, KeyError) as exc:
        logger.error("Malformed input file %s: %s", args.input, exc)
        return 2

    payload = json.dumps(partition_to_dict(partition), indent=2)
    if args.output:
        out_dir = os.path.dirname(args.output)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(payload)
        logger.info("Wrote %d cluster(s) to %s", len(partition), args.output)
    else:
        sys.stdout.write(payload + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
