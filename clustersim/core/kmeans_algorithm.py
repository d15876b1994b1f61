"""
K-Means Clustering Algorithm Implementation.

K-Means is ideal for:
- Partitioning every point into a known number of clusters
- Spherical, evenly-sized clusters
- Fast iteration on small interactive datasets

Initial centroids are sampled at random, so results differ between calls
unless a random_state is supplied.
"""

import logging
from typing import List, Optional, Sequence, Union
import numpy as np

from clustersim.core.base_clustering import (
    BaseClusteringAlgorithm,
    ClusteringResult,
    ClusteringConfig,
    apply_labels,
    count_clusters,
    points_to_array,
)
from clustersim.schemas.data_models import Point

logger = logging.getLogger(__name__)

CONVERGENCE_TOLERANCE = 0.001

RandomState = Union[None, int, np.random.Generator]


class KMeansAlgorithm(BaseClusteringAlgorithm):
    """
    K-Means clustering implementation (Lloyd iterations).

    Best for: Compact, well separated groups
    Strengths: Simple, every point is assigned
    Weaknesses: Requires k as input, assumes spherical clusters, sensitive to
    the random initialization
    """

    def __init__(self, config: ClusteringConfig):
        """
        Initialize K-Means algorithm.

        Args:
            config: Clustering configuration
        """
        super().__init__(config)

        # Extract K-Means-specific parameters
        self.n_clusters = config.params.get("n_clusters", 3)
        self.max_iter = config.params.get("max_iter", 100)
        self.random_state = config.params.get("random_state", None)
        self.tol = config.params.get("tol", CONVERGENCE_TOLERANCE)

        logger.info(
            f"Initialized K-Means: n_clusters={self.n_clusters}, max_iter={self.max_iter}"
        )

    def cluster(self, vectors: np.ndarray) -> ClusteringResult:
        """
        Perform K-Means clustering.

        Args:
            vectors: Point coordinates (N x 2)

        Returns:
            ClusteringResult with labels, centroids and metrics
        """
        vectors = np.asarray(vectors, dtype=np.float64)
        n_points = len(vectors)
        logger.info(f"Starting K-Means clustering on {n_points} points")

        if n_points == 0 or self.n_clusters <= 0:
            logger.debug("Nothing to cluster, returning points unlabeled")
            return ClusteringResult(
                cluster_labels=np.full(n_points, -1, dtype=np.int32),
                n_clusters=0,
                outlier_count=n_points,
                quality_metrics={},
            )

        rng = np.random.default_rng(self.random_state)
        centroids = vectors[self._initial_indices(n_points, rng)].copy()
        labels = self._assign(vectors, centroids)

        iterations = 0
        converged = False
        for _ in range(max(self.max_iter, 0)):
            iterations += 1
            new_centroids = self._update_centroids(vectors, labels, centroids)

            converged = bool(
                np.all(np.abs(new_centroids - centroids) < self.tol)
            )
            centroids = new_centroids
            if converged:
                break

            labels = self._assign(vectors, centroids)

        if converged:
            logger.info(f"K-Means converged after {iterations} iterations")
        else:
            logger.info(f"K-Means stopped after {iterations} iterations without converging")

        n_clusters = count_clusters(labels)

        quality_metrics = self._calculate_quality_metrics(vectors, labels, centroids)
        quality_metrics["inertia"] = float(
            np.sum((vectors - centroids[labels]) ** 2)
        )
        quality_metrics["iterations"] = int(iterations)

        return ClusteringResult(
            cluster_labels=labels,
            n_clusters=n_clusters,
            outlier_count=0,
            quality_metrics=quality_metrics,
            centroids=centroids,
        )

    def _initial_indices(self, n_points: int, rng: np.random.Generator) -> np.ndarray:
        """
        Pick the point indices used as initial centroids.

        Distinct indices when there are enough points; otherwise every point
        once and the remainder drawn with repetition.
        """
        if n_points >= self.n_clusters:
            return rng.choice(n_points, size=self.n_clusters, replace=False)

        logger.warning(
            f"Requested {self.n_clusters} clusters for {n_points} points, "
            f"initial centroids will repeat"
        )
        extra = rng.choice(n_points, size=self.n_clusters - n_points, replace=True)
        return np.concatenate([rng.permutation(n_points), extra])

    @staticmethod
    def _assign(vectors: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        """Label of the nearest centroid for every point, lowest index on ties."""
        diff = vectors[:, np.newaxis, :] - centroids[np.newaxis, :, :]
        distances = np.sqrt(np.sum(diff * diff, axis=-1))
        return np.argmin(distances, axis=1).astype(np.int32)

    @staticmethod
    def _update_centroids(
        vectors: np.ndarray,
        labels: np.ndarray,
        centroids: np.ndarray,
    ) -> np.ndarray:
        """Mean of each cluster's members; empty clusters keep their centroid."""
        new_centroids = centroids.copy()
        for cluster_id in range(len(centroids)):
            members = vectors[labels == cluster_id]
            if len(members) > 0:
                new_centroids[cluster_id] = members.mean(axis=0)
        return new_centroids


def kmeans(
    points: Sequence[Point],
    k: int,
    max_iterations: int = 100,
    random_state: RandomState = None,
) -> List[Point]:
    """
    Label every point with the index of its nearest final centroid.

    Returns the points copied and unchanged when there are no points or
    k <= 0.

    Args:
        points: Input points
        k: Number of clusters
        max_iterations: Upper bound on refinement rounds
        random_state: Seed or generator for the initial centroids

    Returns:
        New list of points with cluster in [0, k)
    """
    if len(points) == 0 or k <= 0:
        return [point.model_copy() for point in points]

    config = ClusteringConfig(
        algorithm_name="kmeans",
        params={"n_clusters": k, "max_iter": max_iterations, "random_state": random_state},
    )
    result = KMeansAlgorithm(config).cluster(points_to_array(points))
    return apply_labels(points, result.cluster_labels)
