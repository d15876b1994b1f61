"""
Pytest configuration and shared fixtures for Clustering Simulator tests.

This module provides:
- Shared test fixtures
- Point and coordinate generators
- Settings isolation
"""

import os
import numpy as np
import pytest
from typing import List

from clustersim.config.settings_loader import ConfigManager, Settings
from clustersim.schemas.data_models import Point

# Set test environment variables
os.environ["CLUSTERSIM_ENV"] = "testing"
os.environ["LOG_LEVEL"] = "DEBUG"


# =============================================================================
# Test Data Generators
# =============================================================================

@pytest.fixture
def two_groups() -> List[Point]:
    """Two tight, well separated groups of three points."""
    return [
        Point(x=0, y=0),
        Point(x=1, y=0),
        Point(x=0, y=1),
        Point(x=50, y=50),
        Point(x=51, y=50),
        Point(x=50, y=51),
    ]


@pytest.fixture
def two_groups_array(two_groups) -> np.ndarray:
    """Coordinates of the two_groups fixture."""
    return np.array([[p.x, p.y] for p in two_groups], dtype=np.float64)


@pytest.fixture
def blob_vectors():
    """
    Generate coordinates with clear cluster structure.

    Creates 3 distinct blobs of 30 points each:
    - Cluster 0: centered at (100, 100)
    - Cluster 1: centered at (400, 100)
    - Cluster 2: centered at (250, 400)
    """
    rng = np.random.default_rng(42)
    centers = [(100.0, 100.0), (400.0, 100.0), (250.0, 400.0)]
    n_per_cluster = 30

    vectors = []
    labels = []
    for cluster_id, center in enumerate(centers):
        vectors.append(rng.normal(0.0, 8.0, size=(n_per_cluster, 2)) + center)
        labels.extend([cluster_id] * n_per_cluster)

    return np.vstack(vectors), np.array(labels)


@pytest.fixture
def blobs_with_outliers(blob_vectors):
    """The three blobs plus three far-away isolated points."""
    vectors, labels = blob_vectors
    outliers = np.array([[700.0, 550.0], [-300.0, 600.0], [750.0, -250.0]])
    return np.vstack([vectors, outliers]), np.concatenate([labels, [-1, -1, -1]])


@pytest.fixture
def blob_points(blob_vectors) -> List[Point]:
    """The blob_vectors fixture as unlabeled points."""
    vectors, _ = blob_vectors
    return [Point(x=float(x), y=float(y)) for x, y in vectors]


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_settings():
    """Isolate the cached global settings between tests."""
    ConfigManager._settings = None
    yield
    ConfigManager._settings = None


@pytest.fixture
def settings() -> Settings:
    """Built-in default settings with a fixed dataset seed."""
    defaults = Settings()
    return defaults.model_copy(
        update={"datasets": defaults.datasets.model_copy(update={"random_state": 7})}
    )


@pytest.fixture
def config_file(tmp_path):
    """Write a YAML settings file and return its path."""

    def _write(content: str) -> str:
        path = tmp_path / "settings.yaml"
        path.write_text(content)
        return str(path)

    return _write


# =============================================================================
# Test Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast tests of a single module")
    config.addinivalue_line("markers", "e2e: end-to-end simulation scenarios")
    config.addinivalue_line("markers", "slow: tests on larger generated datasets")
