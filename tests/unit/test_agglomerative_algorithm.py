"""
Unit tests for single-linkage Agglomerative clustering.

Tests the AgglomerativeAlgorithm class including:
- Basic clustering functionality
- Chaining behavior of single linkage
- Cluster count clamping
- Quality metrics
"""

import pytest
import numpy as np
from clustersim.core.agglomerative_algorithm import AgglomerativeAlgorithm, agglomerative
from clustersim.core.base_clustering import ClusteringConfig


def make_clusterer(**params) -> AgglomerativeAlgorithm:
    return AgglomerativeAlgorithm(ClusteringConfig(algorithm_name="agglomerative", params=params))


@pytest.mark.unit
class TestAgglomerativeAlgorithm:
    """Test suite for Agglomerative clustering algorithm."""

    def test_init(self):
        """Test Agglomerative algorithm initialization."""
        clusterer = make_clusterer(n_clusters=5)

        assert clusterer.n_clusters == 5
        assert clusterer.scaling_warning_threshold == 2000

    def test_cluster_basic(self, blob_vectors):
        """Test basic clustering on vectors with clear structure."""
        vectors, truth = blob_vectors

        result = make_clusterer(n_clusters=3).cluster(vectors)

        assert result.n_clusters == 3
        assert len(result.labels) == len(vectors)
        # Agglomerative assigns all points to clusters
        assert result.outlier_count == 0
        for cluster_id in range(3):
            assert len(set(result.labels[truth == cluster_id])) == 1
        assert result.quality_metrics["merge_count"] == len(vectors) - 3

    def test_two_groups(self, two_groups_array):
        result = make_clusterer(n_clusters=2).cluster(two_groups_array)

        assert list(result.labels) == [0, 0, 0, 1, 1, 1]

    def test_single_linkage_chains(self):
        """Evenly spaced points on a line merge before a wider gap is bridged."""
        vectors = np.array([[0.0, 0.0], [2.0, 0.0], [4.0, 0.0], [6.0, 0.0], [20.0, 0.0], [22.0, 0.0]])

        result = make_clusterer(n_clusters=2).cluster(vectors)

        assert list(result.labels) == [0, 0, 0, 0, 1, 1]

    def test_one_cluster(self, two_groups_array):
        result = make_clusterer(n_clusters=1).cluster(two_groups_array)

        assert result.n_clusters == 1
        assert np.all(result.labels == 0)

    def test_n_clusters_equal_to_points(self, two_groups_array):
        result = make_clusterer(n_clusters=6).cluster(two_groups_array)

        assert list(result.labels) == [0, 1, 2, 3, 4, 5]
        assert result.quality_metrics["merge_count"] == 0

    def test_n_clusters_clamped(self, two_groups_array):
        """Targets outside [1, n] are clamped."""
        too_many = make_clusterer(n_clusters=50).cluster(two_groups_array)
        too_few = make_clusterer(n_clusters=0).cluster(two_groups_array)

        assert too_many.n_clusters == 6
        assert too_few.n_clusters == 1

    def test_tie_merges_lowest_pair_first(self):
        """Equal distances merge the pair found first in an ascending scan."""
        vectors = np.array([[0.0, 0.0], [1.0, 0.0], [10.0, 0.0], [11.0, 0.0]])

        result = make_clusterer(n_clusters=3).cluster(vectors)

        assert list(result.labels) == [0, 0, 1, 2]

    def test_quality_metrics(self, blob_vectors):
        vectors, _ = blob_vectors

        metrics = make_clusterer(n_clusters=3).cluster(vectors).quality_metrics

        assert metrics["silhouette_score"] > 0.7
        assert metrics["davies_bouldin_index"] >= 0
        assert metrics["avg_intra_cluster_distance"] > 0

    def test_empty_input(self):
        result = make_clusterer(n_clusters=3).cluster(np.zeros((0, 2)))

        assert result.n_clusters == 0
        assert len(result.labels) == 0


@pytest.mark.unit
class TestAgglomerativeFunction:
    """Test suite for the point-sequence agglomerative function."""

    def test_returns_labeled_copies(self, two_groups):
        labeled = agglomerative(two_groups, 2)

        assert [p.cluster for p in labeled] == [0, 0, 0, 1, 1, 1]
        assert all(p.cluster is None for p in two_groups)

    def test_empty(self):
        assert agglomerative([], 2) == []
