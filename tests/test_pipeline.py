"""
Tests for the cluster-then-annotate pipeline and its CLI.
"""

import json
import logging
from unittest.mock import patch

import pytest

from src.clustering.pipeline import cluster_and_detect_outliers, load_inputs, main
from src.clustering.types import ClusterOptions, EmptyInputError


def _flagged(partition):
    return sorted(p.text for points in partition.values() for p in points if p.is_outlier)


def test_identifies_outliers_in_clusters(outlier_points):
    # Seed is fixed on purpose: some seeds settle in a local minimum with a
    # singleton cluster, which flags the whole merged group.
    result = cluster_and_detect_outliers(
        outlier_points,
        ClusterOptions(n_clusters=2, std_dev_threshold=1.5, random_state=42),
    )

    assert len(result) == 2
    assert _flagged(result) == ["c1_outlier", "c2_outlier"]


def test_marks_small_clusters_as_outliers():
    inputs = [
        {"text": "c1_1", "embedding": [1, 0]},
        {"text": "c1_2", "embedding": [0.9, 0.1]},
        {"text": "c1_3", "embedding": [1.1, -0.1]},
        {"text": "c2_1", "embedding": [0, 1]},
        {"text": "c2_2", "embedding": [0.1, 0.9]},
    ]

    result = cluster_and_detect_outliers(inputs, ClusterOptions(n_clusters=2, min_cluster_size=3, random_state=0))

    assert len(result) == 2
    assert _flagged(result) == ["c2_1", "c2_2"]


def test_similar_points_have_no_outliers():
    inputs = [
        {"text": "1", "embedding": [1, 0]},
        {"text": "2", "embedding": [0.99, 0.01]},
        {"text": "3", "embedding": [1.01, -0.01]},
    ]

    result = cluster_and_detect_outliers(inputs, ClusterOptions(n_clusters=1, std_dev_threshold=0.5))

    assert sum(len(m) for m in result.values()) == 3
    assert _flagged(result) == []


def test_identical_points_single_cluster_no_outliers():
    inputs = [{"text": str(i), "embedding": [0.5, 0.5]} for i in range(4)]

    result = cluster_and_detect_outliers(inputs)

    assert list(result.keys()) == ["cluster_0"]
    assert _flagged(result) == []


def test_errors_propagate():
    with pytest.raises(EmptyInputError):
        cluster_and_detect_outliers([])


def test_load_inputs_accepts_wrapped_payload(tmp_path):
    path = tmp_path / "payload.json"
    path.write_text(json.dumps({"inputs": [{"text": "a", "embedding": [1, 2]}]}))

    assert load_inputs(str(path)) == [{"text": "a", "embedding": [1, 2]}]


def test_load_inputs_rejects_non_list(tmp_path):
    path = tmp_path / "payload.json"
    path.write_text(json.dumps("not a list"))

    with pytest.raises(ValueError):
        load_inputs(str(path))


class TestCLI:
    """Command-line entry point."""

    def test_writes_partition_to_stdout(self, tmp_path, capsys, outlier_points):
        path = tmp_path / "items.json"
        path.write_text(json.dumps(outlier_points))

        code = main(
            [
                "--input", str(path),
                "--config", str(tmp_path / "missing.yaml"),
                "--n-clusters", "2",
                "--seed", "42",
            ]
        )

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert list(payload.keys()) == ["cluster_0", "cluster_1"]
        items = [item for members in payload.values() for item in members]
        assert len(items) == len(outlier_points)
        assert all("isOutlier" in item for item in items)

    def test_writes_output_file_without_outliers(self, tmp_path, outlier_points):
        path = tmp_path / "items.json"
        path.write_text(json.dumps(outlier_points))
        out = tmp_path / "out" / "partition.json"

        code = main(["--input", str(path), "--output", str(out), "--no-outliers", "--n-clusters", "3"])

        assert code == 0
        payload = json.loads(out.read_text())
        assert len(payload) == 3
        items = [item for members in payload.values() for item in members]
        assert all("isOutlier" not in item for item in items)

    def test_empty_input_exits_non_zero(self, tmp_path, caplog):
        path = tmp_path / "items.json"
        path.write_text("[]")

        with patch("src.clustering.pipeline.setup_logging"), caplog.at_level(logging.ERROR):
            assert main(["--input", str(path)]) == 2

        assert "Rejected clustering input" in caplog.text
        assert "Input array cannot be empty" in caplog.text

    def test_malformed_json_is_reported_separately(self, tmp_path, caplog):
        path = tmp_path / "items.json"
        path.write_text("{not json")

        with patch("src.clustering.pipeline.setup_logging"), caplog.at_level(logging.ERROR):
            assert main(["--input", str(path)]) == 2

        assert "Malformed input file" in caplog.text
        assert "Rejected clustering input" not in caplog.text

    def test_missing_input_file(self, tmp_path):
        assert main(["--input", str(tmp_path / "nope.json")]) == 1
