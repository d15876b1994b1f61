"""
Shared building blocks of the 2-D clustering algorithms.

Holds the configuration and result containers used by every algorithm and
the conversions between Point sequences and coordinate arrays.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional, Sequence
import numpy as np
from dataclasses import dataclass

from clustersim.schemas.data_models import Point, NOISE_LABEL


@dataclass
class ClusteringConfig:
    """Algorithm name plus its keyword parameters."""

    algorithm_name: str
    params: Dict[str, Any]


class ClusteringResult:
    """Labels and diagnostics produced by one clustering run."""

    def __init__(
        self,
        cluster_labels: np.ndarray,
        n_clusters: int,
        outlier_count: int,
        quality_metrics: Dict[str, float],
        centroids: Optional[np.ndarray] = None,
    ):
        self.cluster_labels = cluster_labels
        self.n_clusters = n_clusters
        self.outlier_count = outlier_count
        self.quality_metrics = quality_metrics
        self.centroids = centroids

    @property
    def labels(self) -> np.ndarray:
        """Alias for cluster_labels."""
        return self.cluster_labels

    def to_dict(self) -> Dict[str, Any]:
        """Serializable summary; the per-point labels are left out."""
        return {
            "n_clusters": self.n_clusters,
            "outlier_count": self.outlier_count,
            "quality_metrics": self.quality_metrics,
            "total_items": len(self.cluster_labels),
        }


def points_to_array(points: Sequence[Point]) -> np.ndarray:
    """Stack point coordinates into an (N x 2) float array."""
    if len(points) == 0:
        return np.zeros((0, 2), dtype=np.float64)
    return np.array([[p.x, p.y] for p in points], dtype=np.float64)


def apply_labels(points: Sequence[Point], labels: Sequence[int]) -> List[Point]:
    """
    Copy points with their new cluster labels.

    The caller's point objects are never modified.
    """
    if len(points) != len(labels):
        raise ValueError(
            f"Label count {len(labels)} does not match point count {len(points)}"
        )
    return [
        point.model_copy(update={"cluster": int(label)})
        for point, label in zip(points, labels)
    ]


def count_clusters(labels: np.ndarray) -> int:
    """Number of distinct non-noise labels."""
    if len(labels) == 0:
        return 0
    unique_labels = set(int(label) for label in labels)
    unique_labels.discard(NOISE_LABEL)
    return len(unique_labels)


def compute_centroids(vectors: np.ndarray, labels: np.ndarray) -> Optional[np.ndarray]:
    """
    Mean position of every cluster, indexed by label.

    Returns None when there are no clusters. Labels that do not occur get a
    row of NaN.
    """
    cluster_ids = [label for label in set(int(label) for label in labels) if label != NOISE_LABEL]
    if not cluster_ids:
        return None

    centroids = np.full((max(cluster_ids) + 1, vectors.shape[1]), np.nan)
    for label in cluster_ids:
        centroids[label] = np.mean(vectors[labels == label], axis=0)
    return centroids


class BaseClusteringAlgorithm(ABC):
    """
    Abstract base class for clustering algorithms.

    All clustering algorithms (K-Means, DBSCAN, HDBSCAN, Agglomerative) must
    inherit from this class and implement the cluster() method. Algorithms
    never raise for degenerate input: empty arrays and out-of-range counts are
    handled as documented no-ops.
    """

    def __init__(self, config: ClusteringConfig):
        """
        Store the configuration; subclasses read their parameters from it.

        Args:
            config: Clustering configuration
        """
        self.config = config
        self.name = config.algorithm_name

    @abstractmethod
    def cluster(self, vectors: np.ndarray) -> ClusteringResult:
        """
        Perform clustering on point coordinates.

        Args:
            vectors: Point coordinates (N x 2)

        Returns:
            ClusteringResult with labels and metrics
        """
        pass

    def cluster_points(self, points: Sequence[Point]) -> List[Point]:
        """Cluster a point sequence and return labeled copies."""
        result = self.cluster(points_to_array(points))
        return apply_labels(points, result.cluster_labels)

    def _empty_result(self) -> ClusteringResult:
        return ClusteringResult(
            cluster_labels=np.zeros(0, dtype=np.int32),
            n_clusters=0,
            outlier_count=0,
            quality_metrics={},
        )

    def _calculate_quality_metrics(
        self,
        vectors: np.ndarray,
        labels: np.ndarray,
        centroids: Optional[np.ndarray] = None,
    ) -> Dict[str, float]:
        """
        Silhouette and Davies-Bouldin scores over non-noise points, plus the
        mean member-to-centroid distance when centroids are known.

        Args:
            vectors: Input coordinates
            labels: Cluster labels
            centroids: Optional cluster centroids

        Returns:
            Dictionary of quality metrics
        """
        from sklearn.metrics import silhouette_score, davies_bouldin_score

        metrics = {}

        # Filter out noise (-1 labels) for metrics calculation
        non_outlier_mask = labels != NOISE_LABEL
        n_labeled = int(np.sum(non_outlier_mask))
        n_distinct = len(np.unique(labels[non_outlier_mask]))

        # Both scores need 2 <= n_labels <= n_samples - 1
        if n_labeled > 2 and 1 < n_distinct < n_labeled:
            metrics["silhouette_score"] = float(
                silhouette_score(vectors[non_outlier_mask], labels[non_outlier_mask])
            )
            metrics["davies_bouldin_index"] = float(
                davies_bouldin_score(vectors[non_outlier_mask], labels[non_outlier_mask])
            )

        # Mean distance of members to their centroid
        if centroids is not None:
            intra_distances = []
            for cluster_id in np.unique(labels):
                if cluster_id == NOISE_LABEL or cluster_id >= len(centroids):
                    continue
                cluster_vectors = vectors[labels == cluster_id]
                if len(cluster_vectors) > 0:
                    distances = np.linalg.norm(cluster_vectors - centroids[cluster_id], axis=1)
                    intra_distances.append(np.mean(distances))

            if intra_distances:
                metrics["avg_intra_cluster_distance"] = float(np.mean(intra_distances))

        return metrics
