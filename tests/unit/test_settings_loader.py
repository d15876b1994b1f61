"""
Unit tests for configuration loading.

Tests:
- Built-in defaults when no file exists
- YAML loading with environment substitution
- Validation errors
"""

import pytest

from clustersim.config.settings_loader import ConfigManager, Settings, get_settings, substitute_env_vars
from clustersim.utils.error_handling import ConfigurationError, InvalidAlgorithmError


@pytest.mark.unit
class TestSettings:
    """Test suite for the settings models."""

    def test_defaults(self):
        settings = Settings()

        assert settings.clustering.default_algorithm == "kmeans"
        assert settings.clustering.algorithms.kmeans.n_clusters == 3
        assert settings.clustering.algorithms.dbscan.epsilon == 40.0
        assert settings.datasets.num_points == 200
        assert settings.logging.level == "INFO"

    def test_algorithm_params(self):
        settings = Settings()

        assert settings.algorithm_params("hdbscan") == {"min_cluster_size": 3, "min_samples": 5}
        assert settings.algorithm_params("Agglomerative") == {
            "n_clusters": 3,
            "scaling_warning_threshold": 2000,
        }

    def test_algorithm_params_unknown(self):
        with pytest.raises(InvalidAlgorithmError):
            Settings().algorithm_params("birch")

    def test_parameter_ranges_as_dict(self):
        ranges = Settings().clustering.parameter_ranges.as_dict()

        assert ranges["epsilon"] == (10, 100)
        assert set(ranges) == {"n_clusters", "epsilon", "min_pts", "min_cluster_size", "min_samples"}


@pytest.mark.unit
class TestConfigManager:
    """Test suite for ConfigManager."""

    def test_load_from_file(self, config_file):
        path = config_file(
            "clustering:\n"
            "  default_algorithm: DBSCAN\n"
            "  algorithms:\n"
            "    dbscan:\n"
            "      epsilon: 12\n"
            "datasets:\n"
            "  num_points: 50\n"
        )

        settings = ConfigManager.load_config(path)

        assert settings.clustering.default_algorithm == "dbscan"
        assert settings.clustering.algorithms.dbscan.epsilon == 12
        assert settings.clustering.algorithms.dbscan.min_pts == 5
        assert settings.datasets.num_points == 50

    def test_settings_are_cached(self, config_file):
        path = config_file("datasets:\n  num_points: 10\n")

        first = ConfigManager.load_config(path)

        assert get_settings() is first
        assert ConfigManager.load_config() is first

    def test_reload(self, config_file):
        ConfigManager.load_config(config_file("datasets:\n  num_points: 10\n"))

        reloaded = ConfigManager.reload_config(config_file("datasets:\n  num_points: 20\n"))

        assert reloaded.datasets.num_points == 20

    def test_env_substitution(self, config_file, monkeypatch):
        monkeypatch.setenv("CLUSTERSIM_TEST_POINTS", "75")
        path = config_file(
            "datasets:\n"
            "  num_points: ${CLUSTERSIM_TEST_POINTS}\n"
            "logging:\n"
            "  level: ${CLUSTERSIM_UNSET_LEVEL:warning}\n"
        )

        settings = ConfigManager.load_config(path)

        assert settings.datasets.num_points == 75
        assert settings.logging.level == "WARNING"

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("CLUSTERSIM_CONFIG", raising=False)

        settings = ConfigManager.load_config()

        assert settings.model_dump() == Settings().model_dump()

    def test_env_config_path(self, config_file, monkeypatch):
        monkeypatch.setenv("CLUSTERSIM_CONFIG", config_file("datasets:\n  num_points: 33\n"))

        assert ConfigManager.load_config().datasets.num_points == 33

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager.load_config(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, config_file):
        with pytest.raises(ConfigurationError):
            ConfigManager.load_config(config_file("clustering: [unclosed\n"))

    def test_invalid_values(self, config_file):
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigManager.load_config(config_file("clustering:\n  default_algorithm: optics\n"))

        assert "path" in exc_info.value.details

    def test_unknown_default_dataset(self, config_file):
        with pytest.raises(ConfigurationError):
            ConfigManager.load_config(config_file("datasets:\n  default_type: torus\n"))

    def test_invalid_range(self, config_file):
        with pytest.raises(ConfigurationError):
            ConfigManager.load_config(
                config_file("clustering:\n  parameter_ranges:\n    epsilon: [100, 10]\n")
            )

    def test_repository_config_file(self):
        """The shipped settings.yaml loads and matches the built-in defaults."""
        from pathlib import Path

        path = Path(__file__).resolve().parents[2] / "config" / "settings.yaml"
        settings = ConfigManager.load_config(str(path))

        assert settings.clustering.model_dump() == Settings().clustering.model_dump()
        assert settings.datasets.model_dump() == Settings().datasets.model_dump()

    def test_non_mapping_yaml(self, config_file):
        with pytest.raises(ConfigurationError):
            ConfigManager.load_config(config_file("- just\n- a list\n"))


@pytest.mark.unit
class TestSubstituteEnvVars:
    """Test suite for ${VAR} expansion."""

    def test_nested_values(self, monkeypatch):
        monkeypatch.setenv("CLUSTERSIM_TEST_NAME", "sim")
        monkeypatch.delenv("CLUSTERSIM_TEST_MISSING", raising=False)

        expanded = substitute_env_vars({
            "name": "${CLUSTERSIM_TEST_NAME}-1",
            "items": ["${CLUSTERSIM_TEST_MISSING:fallback}", "${CLUSTERSIM_TEST_MISSING}"],
            "count": 3,
        })

        assert expanded == {"name": "sim-1", "items": ["fallback", ""], "count": 3}
