"""
Clustering configuration management.

Loads default clustering, outlier-detection and API settings from
`config.yaml`. Missing files or sections fall back to built-in defaults.
"""

import os
from typing import Any, Dict

import yaml

from .types import ClusterOptions, ClusteringOptions, OutlierOptions

CONFIG_PATH = "config.yaml"
DEFAULT_RATE_LIMIT = "60/minute"


def load_config(config_path: str = CONFIG_PATH) -> Dict[str, Any]:
    """Load configuration from YAML file ({} when the file is absent)."""
    if not os.path.exists(config_path):
        return {}
    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}
    return config if isinstance(config, dict) else {}


def _section(name: str, config_path: str) -> Dict[str, Any]:
    section = load_config(config_path).get(name) or {}
    return section if isinstance(section, dict) else {}


def get_clustering_options(config_path: str = CONFIG_PATH) -> ClusteringOptions:
    cfg = _section("clustering", config_path)
    random_state = cfg.get("random_state")
    return ClusteringOptions(
        n_clusters=int(cfg.get("n_clusters", 3)),
        max_iterations=int(cfg.get("max_iterations", 100)),
        random_state=int(random_state) if random_state is not None else None,
    )


def get_outlier_options(config_path: str = CONFIG_PATH) -> OutlierOptions:
    cfg = _section("outliers", config_path)
    return OutlierOptions(
        min_cluster_size=int(cfg.get("min_cluster_size", 3)),
        std_dev_threshold=float(cfg.get("std_dev_threshold", 2.0)),
    )


def get_cluster_options(config_path: str = CONFIG_PATH) -> ClusterOptions:
    """Combined clustering + outlier defaults."""
    clustering = get_clustering_options(config_path)
    outliers = get_outlier_options(config_path)
    return ClusterOptions(
        n_clusters=clustering.n_clusters,
        min_cluster_size=outliers.min_cluster_size,
        std_dev_threshold=outliers.std_dev_threshold,
        max_iterations=clustering.max_iterations,
        random_state=clustering.random_state,
    )


def get_api_config(config_path: str = CONFIG_PATH) -> Dict[str, Any]:
    cfg = _section("api", config_path)
    return {"rate_limit": str(cfg.get("rate_limit", DEFAULT_RATE_LIMIT))}
