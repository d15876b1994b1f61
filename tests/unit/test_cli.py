"""
Unit tests for the command-line interface.
"""

import json

import pytest

import cli


@pytest.fixture
def run_cli(config_file, capsys):
    """Run the CLI against a minimal settings file and capture stdout."""
    path = config_file("logging:\n  level: WARNING\n")

    def _run(*argv):
        exit_code = 0
        try:
            cli.main(["--config", path, *argv])
        except SystemExit as e:
            exit_code = e.code
        return exit_code, capsys.readouterr()

    return _run


@pytest.mark.unit
class TestCLI:
    """Test suite for cli.py."""

    def test_run_json(self, run_cli):
        exit_code, captured = run_cli(
            "run", "-a", "agglomerative", "--dataset", "blobs", "-n", "40", "--k", "4", "--seed", "2", "--json"
        )

        assert exit_code == 0
        outcome = json.loads(captured.out)
        assert outcome["success"] is True
        assert outcome["message"] == "Agglomerative clustering completed with 4 clusters"
        assert outcome["summary"]["total_points"] == 40
        assert "points" not in outcome

    def test_run_text(self, run_cli):
        exit_code, captured = run_cli("run", "-a", "dbscan", "--dataset", "moons", "-n", "60", "--seed", "1")

        assert exit_code == 0
        assert "DBSCAN found" in captured.out
        assert "Total Points: 60" in captured.out

    def test_generate_then_cluster(self, run_cli, tmp_path):
        points_file = tmp_path / "points.json"
        labeled_file = tmp_path / "labeled.json"

        exit_code, captured = run_cli("generate", "--dataset", "circles", "-n", "30", "--seed", "4", "-o", str(points_file))
        assert exit_code == 0
        assert len(json.loads(points_file.read_text())) == 30

        exit_code, captured = run_cli(
            "cluster", str(points_file), "-a", "hdbscan", "--min-cluster-size", "3", "--min-samples", "2",
            "-o", str(labeled_file),
        )
        assert exit_code == 0
        labeled = json.loads(labeled_file.read_text())
        assert len(labeled) == 30
        assert all(isinstance(point["cluster"], int) for point in labeled)

    def test_cluster_accepts_pairs(self, run_cli, tmp_path):
        points_file = tmp_path / "pairs.json"
        points_file.write_text(json.dumps([[0, 0], [1, 0], [0, 1], [50, 50], [51, 50], [50, 51]]))

        exit_code, captured = run_cli("cluster", str(points_file), "-a", "dbscan", "--epsilon", "5", "--min-pts", "2", "--json")

        assert exit_code == 0
        assert json.loads(captured.out)["summary"]["n_clusters"] == 2

    def test_cluster_empty_file_fails(self, run_cli, tmp_path):
        points_file = tmp_path / "empty.json"
        points_file.write_text("[]")

        exit_code, captured = run_cli("cluster", str(points_file))

        assert exit_code == 1
        assert "No data points to cluster" in captured.out

    def test_unknown_algorithm(self, run_cli):
        exit_code, captured = run_cli("run", "-a", "spectral")

        assert exit_code == 1
        assert "Unsupported algorithm" in captured.err

    def test_unknown_dataset(self, run_cli):
        exit_code, captured = run_cli("generate", "--dataset", "swiss-roll", "-o", "unused.json")

        assert exit_code == 1
        assert "Unknown dataset" in captured.err

    def test_estimate_k(self, run_cli):
        exit_code, captured = run_cli("estimate-k", "--dataset", "blobs", "-n", "80", "--seed", "0")

        assert exit_code == 0
        assert "Estimated k:" in captured.out

    def test_listings(self, run_cli):
        _, algorithms = run_cli("algorithms")
        _, datasets = run_cli("datasets")

        assert "hdbscan" in algorithms.out
        assert "noisy-circles" in datasets.out

    def test_missing_config(self, capsys, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--config", str(tmp_path / "missing.yaml"), "algorithms"])

        assert exc_info.value.code == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_no_command(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 1

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--version"])

        assert exc_info.value.code == 0
        assert capsys.readouterr().out.startswith("clustersim ")

    def test_hdbscan_reuses_k_and_min_pts(self):
        from clustersim.config.settings_loader import Settings

        args = cli.build_parser().parse_args(["run", "-a", "hdbscan", "--k", "4", "--min-pts", "6"])

        params = cli.filter_overrides("hdbscan", cli.algorithm_overrides(args), Settings())

        assert params == {"min_cluster_size": 4, "min_samples": 6}
