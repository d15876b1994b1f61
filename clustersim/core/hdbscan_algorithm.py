"""
HDBSCAN Clustering Algorithm Implementation.

Hierarchical Density-Based Spatial Clustering of Applications with Noise
(HDBSCAN) is ideal for:
- Finding clusters of varying densities
- Handling outliers/noise
- Not requiring the number of clusters as input

This implementation builds a minimum spanning tree over mutual reachability
distances and extracts clusters by cutting it. A single fixed cut is too
brittle across datasets of different density, so several cut thresholds are
tried and the one that keeps the most structure wins.
"""

import logging
from typing import Dict, List, Sequence, Tuple
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
from clustersim.core.graph import MSTEdge, UnionFind, minimum_spanning_tree
from clustersim.schemas.data_models import Point, NOISE_LABEL

logger = logging.getLogger(__name__)

# Ranks in the sorted MST weight list used as candidate cut thresholds
CUT_PERCENTILES = (0.4, 0.5, 0.6, 0.7, 0.8)
TIEBREAK_PERCENTILE = 0.9
TIEBREAK_MIN_EDGES = 10


class HDBSCANAlgorithm(BaseClusteringAlgorithm):
    """
    HDBSCAN clustering implementation (MST cut with threshold search).

    Best for: Clusters of varying density with background noise
    Strengths: Handles variable density, automatic outlier detection
    Weaknesses: O(n^2) memory for the distance matrix
    """

    def __init__(self, config: ClusteringConfig):
        """
        Initialize HDBSCAN algorithm.

        Args:
            config: Clustering configuration
        """
        super().__init__(config)

        # Extract HDBSCAN-specific parameters
        self.min_cluster_size = config.params.get("min_cluster_size", 3)
        self.min_samples = config.params.get("min_samples", 5)

        if self.min_samples < 1:
            logger.warning(
                f"min_samples={self.min_samples} is below 1, using min_samples=1"
            )
            self.min_samples = 1

        logger.info(
            f"Initialized HDBSCAN: min_cluster_size={self.min_cluster_size}, "
            f"min_samples={self.min_samples}"
        )

    def cluster(self, vectors: np.ndarray) -> ClusteringResult:
        """
        Perform HDBSCAN clustering.

        Args:
            vectors: Point coordinates (N x 2)

        Returns:
            ClusteringResult with labels and metrics
        """
        vectors = np.asarray(vectors, dtype=np.float64)
        n_points = len(vectors)
        logger.info(f"Starting HDBSCAN clustering on {n_points} points")

        if n_points == 0:
            return self._empty_result()

        distances = pairwise_distances(vectors)
        core = self.core_distances(distances)
        mst = minimum_spanning_tree(self.mutual_reachability(distances, core))

        labels, threshold, n_candidates = self._select_cut(n_points, mst)

        n_clusters = count_clusters(labels)
        outlier_count = int(np.sum(labels == NOISE_LABEL))

        logger.info(
            f"HDBSCAN found {n_clusters} clusters with {outlier_count} outliers "
            f"(threshold={threshold}, candidates={n_candidates})"
        )

        centroids = compute_centroids(vectors, labels)
        quality_metrics = self._calculate_quality_metrics(vectors, labels, centroids)
        quality_metrics["selected_threshold"] = float(threshold)
        quality_metrics["candidate_count"] = int(n_candidates)

        return ClusteringResult(
            cluster_labels=labels,
            n_clusters=n_clusters,
            outlier_count=outlier_count,
            quality_metrics=quality_metrics,
            centroids=centroids,
        )

    def core_distances(self, distances: np.ndarray) -> np.ndarray:
        """
        Distance from each point to its min_samples-th nearest other point.

        Infinite when fewer than min_samples other points exist.
        """
        n_points = len(distances)
        if n_points - 1 < self.min_samples:
            return np.full(n_points, np.inf)

        core = np.empty(n_points)
        for idx in range(n_points):
            others = np.delete(distances[idx], idx)
            core[idx] = np.sort(others)[self.min_samples - 1]
        return core

    @staticmethod
    def mutual_reachability(distances: np.ndarray, core: np.ndarray) -> np.ndarray:
        """max(d(a, b), core(a), core(b)) for every pair."""
        return np.maximum(
            distances,
            np.maximum(core[:, np.newaxis], core[np.newaxis, :]),
        )

    @staticmethod
    def candidate_thresholds(weights: Sequence[float]) -> List[float]:
        """
        Cut thresholds at fixed ranks of the ascending weight list.

        Duplicates are dropped, first occurrence kept.
        """
        sorted_weights = sorted(weights)
        n_edges = len(sorted_weights)
        if n_edges == 0:
            return []

        percentiles = list(CUT_PERCENTILES)
        if n_edges >= TIEBREAK_MIN_EDGES:
            percentiles.append(TIEBREAK_PERCENTILE)

        thresholds: List[float] = []
        for percentile in percentiles:
            rank = min(int(n_edges * percentile), n_edges - 1)
            value = sorted_weights[rank]
            if value not in thresholds:
                thresholds.append(value)
        return thresholds

    def label_components(
        self,
        n_points: int,
        mst: Sequence[MSTEdge],
        threshold: float,
    ) -> np.ndarray:
        """
        Cut the tree at threshold and keep components of sufficient size.

        Edges with infinite weight are never joined. Cluster ids follow the
        lowest point index of each kept component.
        """
        components = UnionFind(n_points)
        for a, b, weight in mst:
            if np.isfinite(weight) and weight <= threshold:
                components.union(a, b)

        labels = np.full(n_points, NOISE_LABEL, dtype=np.int32)
        cluster_ids: Dict[int, int] = {}
        for idx in range(n_points):
            root = components.find(idx)
            if components.component_size(root) < self.min_cluster_size:
                continue
            if root not in cluster_ids:
                cluster_ids[root] = len(cluster_ids)
            labels[idx] = cluster_ids[root]
        return labels

    def _select_cut(
        self,
        n_points: int,
        mst: Sequence[MSTEdge],
    ) -> Tuple[np.ndarray, float, int]:
        """
        Try every candidate threshold and keep the best labeling.

        Candidates are scored by (non-noise points, clusters), higher is
        better; the earliest candidate wins ties.
        """
        finite_weights = [weight for _, _, weight in mst if np.isfinite(weight)]
        thresholds = self.candidate_thresholds(finite_weights)
        if not thresholds:
            # No finite edges: every point stands alone
            thresholds = [0.0]
            mst = []

        best_labels = None
        best_score = None
        best_threshold = thresholds[0]

        for threshold in thresholds:
            labels = self.label_components(n_points, mst, threshold)
            score = (int(np.sum(labels != NOISE_LABEL)), count_clusters(labels))
            logger.debug(
                f"HDBSCAN candidate threshold={threshold}: "
                f"{score[0]} clustered points in {score[1]} clusters"
            )
            if best_score is None or score > best_score:
                best_labels = labels
                best_score = score
                best_threshold = threshold

        return best_labels, best_threshold, len(thresholds)


def hdbscan(
    points: Sequence[Point],
    min_cluster_size: int,
    min_samples: int,
) -> List[Point]:
    """
    Density-based clustering by cutting a mutual reachability MST.

    Args:
        points: Input points
        min_cluster_size: Smallest component kept as a cluster
        min_samples: Neighbor rank used for the core distance

    Returns:
        New list of points labeled with cluster ids or -1
    """
    config = ClusteringConfig(
        algorithm_name="hdbscan",
        params={"min_cluster_size": min_cluster_size, "min_samples": min_samples},
    )
    result = HDBSCANAlgorithm(config).cluster(points_to_array(points))
    return apply_labels(points, result.cluster_labels)
