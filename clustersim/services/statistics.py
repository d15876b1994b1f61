"""
Summary statistics for labeled point sets.
"""

from collections import Counter
from typing import Sequence

from clustersim.schemas.data_models import ClusteringSummary, Point


def summarize(points: Sequence[Point]) -> ClusteringSummary:
    """
    Count points, clusters and noise.

    Points labeled -1 or not labeled at all count as noise.
    """
    sizes = Counter(point.cluster for point in points if not point.is_noise)

    return ClusteringSummary(
        total_points=len(points),
        n_clusters=len(sizes),
        noise_points=len(points) - sum(sizes.values()),
        cluster_sizes=sorted(sizes.items()),
    )
