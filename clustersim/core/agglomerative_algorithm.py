"""
Agglomerative Hierarchical Clustering Algorithm Implementation.

Single-linkage agglomerative clustering is ideal for:
- Chained or elongated groups
- When the number of clusters is known
- Small datasets

Every merge step scans all cluster pairs, so the full run is O(n^3) in the
worst case and only suitable for a few hundred points.
"""

import logging
from typing import List, Sequence
import numpy as np

from clustersim.core.base_clustering import (
    BaseClusteringAlgorithm,
    ClusteringResult,
    ClusteringConfig,
    apply_labels,
    compute_centroids,
    count_clusters,
    points_to_array,
)
from clustersim.core.distance import pairwise_distances
from clustersim.schemas.data_models import Point

logger = logging.getLogger(__name__)


class AgglomerativeAlgorithm(BaseClusteringAlgorithm):
    """
    Single-linkage agglomerative clustering implementation.

    Best for: Well separated groups of arbitrary shape
    Strengths: Deterministic, follows chains of close points
    Weaknesses: Slow (O(n^3)), a single bridge point can merge two groups
    """

    def __init__(self, config: ClusteringConfig):
        """
        Initialize Agglomerative algorithm.

        Args:
            config: Clustering configuration
        """
        super().__init__(config)

        # Extract Agglomerative-specific parameters
        self.n_clusters = config.params.get("n_clusters", 3)
        self.scaling_warning_threshold = config.params.get("scaling_warning_threshold", 2000)

        logger.info(f"Initialized Agglomerative: n_clusters={self.n_clusters}, linkage=single")

    def cluster(self, vectors: np.ndarray) -> ClusteringResult:
        """
        Perform Agglomerative clustering.

        Args:
            vectors: Point coordinates (N x 2)

        Returns:
            ClusteringResult with labels and metrics
        """
        vectors = np.asarray(vectors, dtype=np.float64)
        n_points = len(vectors)
        logger.info(f"Starting Agglomerative clustering on {n_points} points")

        if n_points == 0:
            return self._empty_result()

        # Check dataset size (Agglomerative is O(n³), warn for large datasets)
        if n_points > self.scaling_warning_threshold:
            logger.warning(
                f"Agglomerative clustering on {n_points} points "
                "may be slow. Consider using K-Means or HDBSCAN."
            )

        # Clamp the target cluster count to [1, n]
        target = min(max(int(self.n_clusters), 1), n_points)
        if target != self.n_clusters:
            logger.warning(
                f"Adjusting n_clusters from {self.n_clusters} to {target} "
                f"for {n_points} points"
            )

        clusters = self._merge_until(pairwise_distances(vectors), target)

        labels = np.empty(n_points, dtype=np.int32)
        for position, members in enumerate(clusters):
            labels[members] = position

        n_clusters = count_clusters(labels)
        logger.info(f"Agglomerative created {n_clusters} clusters")

        centroids = compute_centroids(vectors, labels)
        quality_metrics = self._calculate_quality_metrics(vectors, labels, centroids)
        quality_metrics["merge_count"] = int(n_points - len(clusters))

        return ClusteringResult(
            cluster_labels=labels,
            n_clusters=n_clusters,
            outlier_count=0,
            quality_metrics=quality_metrics,
            centroids=centroids,
        )

    @staticmethod
    def _merge_until(distances: np.ndarray, target: int) -> List[List[int]]:
        """
        Merge the closest pair of clusters until target clusters remain.

        linkage[i, j] holds the single-linkage distance between the clusters
        at positions i and j. After merging j into i, row i becomes the
        element-wise minimum of rows i and j, which equals the minimum over
        all cross-cluster point pairs. The argmin over the strict upper
        triangle in row-major order picks the first pair of an ascending
        (i, j) scan on ties.
        """
        clusters: List[List[int]] = [[idx] for idx in range(len(distances))]
        linkage = distances.copy()

        while len(clusters) > target:
            candidates = np.where(
                np.triu(np.ones_like(linkage, dtype=bool), k=1),
                linkage,
                np.inf,
            )
            merge_i, merge_j = np.unravel_index(np.argmin(candidates), candidates.shape)

            clusters[merge_i].extend(clusters[merge_j])
            del clusters[merge_j]

            merged = np.minimum(linkage[merge_i], linkage[merge_j])
            linkage[merge_i, :] = merged
            linkage[:, merge_i] = merged
            linkage = np.delete(np.delete(linkage, merge_j, axis=0), merge_j, axis=1)

        return clusters


def agglomerative(points: Sequence[Point], n_clusters: int) -> List[Point]:
    """
    Single-linkage agglomerative clustering down to n_clusters groups.

    n_clusters is clamped to [1, len(points)].

    Args:
        points: Input points
        n_clusters: Target number of clusters

    Returns:
        New list of points labeled with cluster positions in [0, n_clusters)
    """
    config = ClusteringConfig(
        algorithm_name="agglomerative",
        params={"n_clusters": n_clusters},
    )
    result = AgglomerativeAlgorithm(config).cluster(points_to_array(points))
    return apply_labels(points, result.cluster_labels)
