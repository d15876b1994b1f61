"""
DBSCAN Clustering Algorithm Implementation.

Density-Based Spatial Clustering of Applications with Noise (DBSCAN) is
ideal for:
- Arbitrarily shaped clusters (moons, rings, spirals)
- Detecting isolated points as noise
- Not requiring the number of clusters as input

Neighborhood queries scan the full distance matrix, which is O(n^2) in time
and memory. That is fine for interactive datasets of a few hundred points
but does not scale to large inputs.
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
from clustersim.schemas.data_models import Point, NOISE_LABEL

logger = logging.getLogger(__name__)


class DBSCANAlgorithm(BaseClusteringAlgorithm):
    """
    DBSCAN clustering implementation.

    Best for: Non-convex shapes of similar density, outlier detection
    Strengths: Finds the number of clusters, labels noise
    Weaknesses: A single global epsilon cannot follow varying densities
    """

    def __init__(self, config: ClusteringConfig):
        """
        Initialize DBSCAN algorithm.

        Args:
            config: Clustering configuration
        """
        super().__init__(config)

        # Extract DBSCAN-specific parameters
        self.epsilon = config.params.get("epsilon", 40.0)
        self.min_pts = config.params.get("min_pts", 5)
        self.scaling_warning_threshold = config.params.get("scaling_warning_threshold", 5000)

        logger.info(
            f"Initialized DBSCAN: epsilon={self.epsilon}, min_pts={self.min_pts}"
        )

    def cluster(self, vectors: np.ndarray) -> ClusteringResult:
        """
        Perform DBSCAN clustering.

        Args:
            vectors: Point coordinates (N x 2)

        Returns:
            ClusteringResult with labels and metrics
        """
        vectors = np.asarray(vectors, dtype=np.float64)
        n_points = len(vectors)
        logger.info(f"Starting DBSCAN clustering on {n_points} points")

        if n_points == 0:
            return self._empty_result()

        if n_points > self.scaling_warning_threshold:
            logger.warning(
                f"DBSCAN on {n_points} points uses O(n^2) neighborhood queries "
                "and may be slow and memory-intensive."
            )

        neighborhoods = self._neighborhoods(pairwise_distances(vectors))
        labels = self._expand_clusters(neighborhoods)

        n_clusters = count_clusters(labels)
        outlier_count = int(np.sum(labels == NOISE_LABEL))

        logger.info(f"DBSCAN found {n_clusters} clusters with {outlier_count} noise points")

        centroids = compute_centroids(vectors, labels)
        quality_metrics = self._calculate_quality_metrics(vectors, labels, centroids)
        quality_metrics["core_point_count"] = int(
            sum(1 for neighbors in neighborhoods if len(neighbors) >= self.min_pts)
        )

        return ClusteringResult(
            cluster_labels=labels,
            n_clusters=n_clusters,
            outlier_count=outlier_count,
            quality_metrics=quality_metrics,
            centroids=centroids,
        )

    def _neighborhoods(self, distances: np.ndarray) -> List[np.ndarray]:
        """Indices of every other point within epsilon, in ascending order."""
        neighborhoods = []
        for idx in range(len(distances)):
            within = distances[idx] <= self.epsilon
            within[idx] = False
            neighborhoods.append(np.flatnonzero(within))
        return neighborhoods

    def _expand_clusters(self, neighborhoods: List[np.ndarray]) -> np.ndarray:
        """
        Scan points in input order and grow a cluster from every dense seed.

        Noise is provisional: a point left as noise by its own scan can still
        be absorbed when a later cluster expands through it.
        """
        n_points = len(neighborhoods)
        labels = np.full(n_points, NOISE_LABEL, dtype=np.int32)
        cluster_id = 0

        for idx in range(n_points):
            if labels[idx] != NOISE_LABEL:
                continue

            neighbors = neighborhoods[idx]
            if len(neighbors) < self.min_pts:
                continue

            labels[idx] = cluster_id
            seeds = list(neighbors)
            queued = np.zeros(n_points, dtype=bool)
            queued[neighbors] = True

            position = 0
            while position < len(seeds):
                seed = seeds[position]
                position += 1

                if labels[seed] != NOISE_LABEL and labels[seed] != cluster_id:
                    # Already claimed by an earlier cluster
                    continue
                labels[seed] = cluster_id

                seed_neighbors = neighborhoods[seed]
                if len(seed_neighbors) >= self.min_pts:
                    for neighbor in seed_neighbors:
                        if not queued[neighbor] and labels[neighbor] == NOISE_LABEL:
                            queued[neighbor] = True
                            seeds.append(neighbor)

            cluster_id += 1

        return labels


def dbscan(points: Sequence[Point], epsilon: float, min_pts: int) -> List[Point]:
    """
    Density-based clustering with provisional noise.

    Args:
        points: Input points
        epsilon: Neighborhood radius
        min_pts: Minimum number of other points within epsilon for a point
            to be dense

    Returns:
        New list of points labeled with cluster ids in discovery order or -1
    """
    config = ClusteringConfig(
        algorithm_name="dbscan",
        params={"epsilon": epsilon, "min_pts": min_pts},
    )
    result = DBSCANAlgorithm(config).cluster(points_to_array(points))
    return apply_labels(points, result.cluster_labels)
