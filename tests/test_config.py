"""
Tests for YAML configuration loading and logging setup.
"""

import logging

import pytest

from src.clustering.config import (
    get_api_config,
    get_cluster_options,
    get_clustering_options,
    get_outlier_options,
    load_config,
)
from src.common.logging_utils import build_logging_config, resolve_level, setup_logging


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "clustering:\n"
        "  n_clusters: 5\n"
        "  max_iterations: 25\n"
        "  random_state: 7\n"
        "outliers:\n"
        "  min_cluster_size: 4\n"
        "  std_dev_threshold: 1.5\n"
        "api:\n"
        "  rate_limit: 10/minute\n"
    )
    return str(path)


def test_missing_config_uses_defaults(tmp_path):
    path = str(tmp_path / "absent.yaml")

    assert load_config(path) == {}
    clustering = get_clustering_options(path)
    assert (clustering.n_clusters, clustering.max_iterations, clustering.random_state) == (3, 100, None)
    outliers = get_outlier_options(path)
    assert (outliers.min_cluster_size, outliers.std_dev_threshold) == (3, 2.0)
    assert get_api_config(path) == {"rate_limit": "60/minute"}


def test_sections_are_read(config_file):
    opts = get_cluster_options(config_file)

    assert opts.n_clusters == 5
    assert opts.max_iterations == 25
    assert opts.random_state == 7
    assert opts.min_cluster_size == 4
    assert opts.std_dev_threshold == 1.5
    assert get_api_config(config_file)["rate_limit"] == "10/minute"


def test_empty_config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    assert get_clustering_options(str(path)).n_clusters == 3


class TestLogging:
    """Logging configuration from config.yaml."""

    def test_env_level_overrides_config(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert resolve_level("WARNING") == "DEBUG"

    def test_unknown_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert resolve_level("chatty") == "INFO"

    def test_file_handler_added_when_configured(self, tmp_path, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        cfg = build_logging_config({"level": "warning", "file": str(tmp_path / "app.log")})

        assert cfg["root"]["handlers"] == ["console", "file"]
        assert cfg["root"]["level"] == "WARNING"
        assert cfg["handlers"]["file"]["filename"] == str(tmp_path / "app.log")

    def test_setup_logging_creates_log_directory(self, tmp_path, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        log_file = tmp_path / "logs" / "clustering.log"
        config = tmp_path / "config.yaml"
        config.write_text(f"logging:\n  level: DEBUG\n  file: {log_file.as_posix()}\n")

        setup_logging(str(config))
        try:
            assert log_file.parent.is_dir()
            assert logging.getLogger().level == logging.DEBUG
        finally:
            for handler in list(logging.getLogger().handlers):
                if isinstance(handler, logging.FileHandler):
                    handler.close()
                    logging.getLogger().removeHandler(handler)
            setup_logging(str(tmp_path / "absent.yaml"))
