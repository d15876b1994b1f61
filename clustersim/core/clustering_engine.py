"""
Clustering Engine.

Looks algorithms up by name, runs them on coordinate arrays or Point
sequences, and offers the advisory helpers used by the simulator (suggested
parameter ranges, elbow estimate of k).
"""

import logging
import numbers
from typing import Dict, Any, List, Optional, Sequence, Tuple
import numpy as np

from clustersim.core.base_clustering import (
    ClusteringResult,
    ClusteringConfig,
    apply_labels,
    points_to_array,
)
from clustersim.core.agglomerative_algorithm import AgglomerativeAlgorithm
from clustersim.core.dbscan_algorithm import DBSCANAlgorithm
from clustersim.core.hdbscan_algorithm import HDBSCANAlgorithm
from clustersim.core.kmeans_algorithm import KMeansAlgorithm
from clustersim.schemas.data_models import Point
from clustersim.utils.error_handling import InvalidAlgorithmError, InvalidParameterError

logger = logging.getLogger(__name__)

COUNT_PARAMS = (
    "n_clusters",
    "max_iter",
    "min_pts",
    "min_cluster_size",
    "min_samples",
)
NUMERIC_PARAMS = COUNT_PARAMS + (
    "tol",
    "epsilon",
    "scaling_warning_threshold",
)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_count(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


class ClusteringEngine:
    """
    Name-based front end to the four clustering algorithms.
    """

    ALGORITHMS = {
        "kmeans": KMeansAlgorithm,
        "dbscan": DBSCANAlgorithm,
        "hdbscan": HDBSCANAlgorithm,
        "agglomerative": AgglomerativeAlgorithm,
    }

    def __init__(self, parameter_ranges: Optional[Dict[str, Tuple[float, float]]] = None):
        """
        Initialize clustering engine.

        Args:
            parameter_ranges: Suggested (min, max) per parameter name used by
                validate_clustering_config
        """
        self.parameter_ranges = parameter_ranges or {
            "n_clusters": (2, 10),
            "epsilon": (10, 100),
            "min_pts": (2, 10),
            "min_cluster_size": (2, 10),
            "min_samples": (2, 10),
        }
        logger.info("Initialized ClusteringEngine")

    def _create(self, algorithm: str, algorithm_params: Dict[str, Any]):
        algorithm = algorithm.lower()
        if algorithm not in self.ALGORITHMS:
            raise InvalidAlgorithmError(
                f"Unsupported algorithm '{algorithm}'. "
                f"Supported: {list(self.ALGORITHMS.keys())}",
                details={"algorithm": algorithm},
            )

        for name in NUMERIC_PARAMS:
            if name in algorithm_params and not _is_number(algorithm_params[name]):
                raise InvalidParameterError(
                    f"Parameter '{name}' must be a number, got {algorithm_params[name]!r}",
                    details={"algorithm": algorithm, "parameter": name},
                )
        for name in COUNT_PARAMS:
            if name in algorithm_params and not _is_count(algorithm_params[name]):
                raise InvalidParameterError(
                    f"Parameter '{name}' must be a whole number, got {algorithm_params[name]!r}",
                    details={"algorithm": algorithm, "parameter": name},
                )

        config = ClusteringConfig(algorithm_name=algorithm, params=dict(algorithm_params))
        return self.ALGORITHMS[algorithm](config)

    def cluster(
        self,
        vectors: np.ndarray,
        algorithm: str,
        algorithm_params: Dict[str, Any],
    ) -> ClusteringResult:
        """
        Run one algorithm on a coordinate array.

        Args:
            vectors: Point coordinates (N x 2)
            algorithm: Algorithm name (kmeans/dbscan/hdbscan/agglomerative)
            algorithm_params: Algorithm-specific parameters

        Returns:
            ClusteringResult with labels and metrics

        Raises:
            InvalidAlgorithmError: If algorithm is not supported
            InvalidParameterError: If a numeric parameter has the wrong type
        """
        clusterer = self._create(algorithm, algorithm_params)

        logger.info(f"Starting {clusterer.name} clustering on {len(vectors)} points")
        result = clusterer.cluster(vectors)
        logger.info(
            f"{clusterer.name} clustering complete: {result.n_clusters} clusters, "
            f"{result.outlier_count} outliers"
        )

        return result

    def cluster_points(
        self,
        points: Sequence[Point],
        algorithm: str,
        algorithm_params: Dict[str, Any],
    ) -> Tuple[List[Point], ClusteringResult]:
        """
        Cluster a point sequence and return labeled copies with the result.

        K-Means with no points or k <= 0 returns the points unlabeled.
        """
        result = self.cluster(points_to_array(points), algorithm, algorithm_params)

        if algorithm.lower() == "kmeans" and result.n_clusters == 0:
            return [point.model_copy() for point in points], result

        return apply_labels(points, result.cluster_labels), result

    def estimate_optimal_k(
        self,
        vectors: np.ndarray,
        min_k: int = 2,
        max_k: int = 10,
        random_state: int = 42,
    ) -> int:
        """
        Estimate optimal number of clusters using the elbow method.

        Args:
            vectors: Point coordinates (N x 2)
            min_k: Minimum number of clusters to try
            max_k: Maximum number of clusters to try
            random_state: Seed for the K-Means initializations

        Returns:
            Estimated optimal k
        """
        # k must stay below the number of points
        max_k = min(max_k, len(vectors) - 1)
        if max_k <= min_k:
            return max(1, min(min_k, len(vectors)))

        inertias = []
        k_values = list(range(min_k, max_k + 1))

        for k in k_values:
            config = ClusteringConfig(
                algorithm_name="kmeans",
                params={"n_clusters": k, "max_iter": 100, "random_state": random_state},
            )
            result = KMeansAlgorithm(config).cluster(vectors)
            inertias.append(result.quality_metrics["inertia"])

        # Elbow: largest second difference of the inertia curve
        if len(inertias) > 2:
            deltas = np.diff(inertias)
            second_deltas = np.diff(deltas)

            # Point where second derivative is maximum (elbow)
            elbow_idx = int(np.argmax(second_deltas)) + 1
            optimal_k = k_values[elbow_idx]
        else:
            optimal_k = k_values[len(k_values) // 2]

        logger.info(f"Estimated optimal k={optimal_k} (tried k={min_k} to {max_k})")

        return optimal_k

    def validate_clustering_config(
        self,
        algorithm: str,
        params: Dict[str, Any],
    ) -> Dict[str, str]:
        """
        Check parameters against the suggested ranges.

        Advisory only: the algorithms accept out-of-range values.

        Args:
            algorithm: Algorithm name
            params: Algorithm parameters

        Returns:
            Parameter name -> message for values outside the suggested range
        """
        errors = {}

        algorithm = algorithm.lower()
        if algorithm not in self.ALGORITHMS:
            errors["algorithm"] = f"Unsupported algorithm '{algorithm}'"
            return errors

        expected = {
            "kmeans": ["n_clusters"],
            "dbscan": ["epsilon", "min_pts"],
            "hdbscan": ["min_cluster_size", "min_samples"],
            "agglomerative": ["n_clusters"],
        }[algorithm]

        for name in expected:
            value = params.get(name)
            if name not in self.parameter_ranges or not _is_number(value):
                continue
            low, high = self.parameter_ranges[name]
            if not low <= value <= high:
                errors[name] = f"Must be between {low} and {high}"

        max_iter = params.get("max_iter")
        if algorithm == "kmeans" and _is_number(max_iter) and max_iter < 0:
            errors["max_iter"] = "Must be >= 0"

        return errors
