"""
Unit tests for clustering summary statistics.
"""

import pytest

from clustersim.schemas.data_models import Point
from clustersim.services.statistics import summarize


@pytest.mark.unit
class TestSummarize:
    """Test suite for summarize."""

    def test_counts(self):
        points = [
            Point(x=0, y=0, cluster=1),
            Point(x=1, y=0, cluster=0),
            Point(x=2, y=0, cluster=1),
            Point(x=3, y=0, cluster=-1),
            Point(x=4, y=0, cluster=1),
        ]

        summary = summarize(points)

        assert summary.total_points == 5
        assert summary.n_clusters == 2
        assert summary.noise_points == 1
        assert summary.cluster_sizes == [(0, 1), (1, 3)]

    def test_unlabeled_points_count_as_noise(self):
        summary = summarize([Point(x=0, y=0), Point(x=1, y=1, cluster=0)])

        assert summary.noise_points == 1
        assert summary.n_clusters == 1

    def test_empty(self):
        summary = summarize([])

        assert summary.total_points == 0
        assert summary.n_clusters == 0
        assert summary.cluster_sizes == []

    def test_is_noise(self):
        assert Point(x=0, y=0).is_noise
        assert Point(x=0, y=0, cluster=-1).is_noise
        assert not Point(x=0, y=0, cluster=0).is_noise
