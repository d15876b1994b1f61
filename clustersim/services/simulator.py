"""
Clustering Simulator Service

Caller-facing wrapper around the core algorithms:
- Generates synthetic datasets from the configured defaults
- Runs a named algorithm with defaults merged with overrides
- Reports unexpected failures as a generic notice instead of raising
"""

import uuid
from typing import Any, Dict, List, Optional, Sequence

from clustersim.config.settings_loader import Settings, get_settings
from clustersim.core.clustering_engine import ClusteringEngine
from clustersim.datasets.generators import generate_dataset
from clustersim.schemas.data_models import Point, SimulationOutcome
from clustersim.services.statistics import summarize
from clustersim.utils.advanced_logging import LogContext, PerformanceLogger, get_logger, timed
from clustersim.utils.error_handling import ClusterSimError

logger = get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "Error running clustering algorithm"
EMPTY_INPUT_MESSAGE = "No data points to cluster"

ALGORITHM_LABELS = {
    "kmeans": "K-Means",
    "dbscan": "DBSCAN",
    "hdbscan": "HDBSCAN",
    "agglomerative": "Agglomerative clustering",
}


class ClusteringSimulator:
    """
    Runs clustering algorithms on generated or supplied points.

    Holds no state between runs other than its settings and engine.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        engine: Optional[ClusteringEngine] = None,
    ):
        """
        Initialize the simulator.

        Args:
            settings: Settings to use (defaults to the global settings)
            engine: Clustering engine (created from the settings if None)
        """
        self.settings = settings or get_settings()
        self.engine = engine or ClusteringEngine(
            parameter_ranges=self.settings.clustering.parameter_ranges.as_dict()
        )

    @timed(operation="generate_dataset", log_level="debug")
    def generate(
        self,
        dataset: Optional[str] = None,
        num_points: Optional[int] = None,
        random_state: Optional[int] = None,
    ) -> List[Point]:
        """Generate a dataset, falling back to the configured defaults."""
        config = self.settings.datasets
        dataset = dataset or config.default_type
        num_points = config.num_points if num_points is None else num_points
        seed = config.random_state if random_state is None else random_state

        return generate_dataset(dataset, num_points, config.width, config.height, random_state=seed)

    def resolve_params(
        self,
        algorithm: str,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Configured defaults for the algorithm updated with non-None overrides."""
        params = self.settings.algorithm_params(algorithm)
        for key, value in (overrides or {}).items():
            if value is not None:
                params[key] = value
        return params

    def run(
        self,
        points: Sequence[Point],
        algorithm: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        dataset: Optional[str] = None,
    ) -> SimulationOutcome:
        """
        Cluster points and summarize the outcome.

        Never raises: an empty point set and any exception from the core are
        reported through the outcome.

        Args:
            points: Points to cluster
            algorithm: Algorithm name (defaults to the configured default)
            params: Parameter overrides
            dataset: Dataset name, recorded in the outcome

        Returns:
            SimulationOutcome
        """
        algorithm = (algorithm or self.settings.clustering.default_algorithm).lower()

        if len(points) == 0:
            logger.warning("clustering_skipped", algorithm=algorithm, reason="empty_input")
            return SimulationOutcome(
                success=False,
                message=EMPTY_INPUT_MESSAGE,
                algorithm=algorithm,
                dataset=dataset,
            )

        with LogContext.correlation_context(f"run-{uuid.uuid4().hex[:12]}"):
            try:
                resolved = self.resolve_params(algorithm, params)
                warnings = self.engine.validate_clustering_config(algorithm, resolved)
                if warnings:
                    logger.warning("parameters_outside_suggested_range", algorithm=algorithm, **warnings)

                with PerformanceLogger(
                    "cluster", logger=logger, item_count=len(points), algorithm=algorithm
                ) as timer:
                    labeled, result = self.engine.cluster_points(points, algorithm, resolved)
            except Exception as e:
                logger.error(
                    "clustering_failed",
                    algorithm=algorithm,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                return SimulationOutcome(
                    success=False,
                    message=GENERIC_FAILURE_MESSAGE,
                    algorithm=algorithm,
                    dataset=dataset,
                    points=list(points),
                    error=e.to_dict() if isinstance(e, ClusterSimError) else {
                        "error_type": type(e).__name__,
                        "message": str(e),
                    },
                )

        summary = summarize(labeled)
        return SimulationOutcome(
            success=True,
            message=self._success_message(algorithm, resolved, summary.n_clusters),
            algorithm=algorithm,
            dataset=dataset,
            points=labeled,
            summary=summary,
            result=result.to_dict(),
            duration_ms=round(timer.elapsed_time * 1000, 3),
        )

    def simulate(
        self,
        algorithm: Optional[str] = None,
        dataset: Optional[str] = None,
        num_points: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
        random_state: Optional[int] = None,
    ) -> SimulationOutcome:
        """Generate a dataset and cluster it."""
        dataset = dataset or self.settings.datasets.default_type
        points = self.generate(dataset, num_points, random_state)
        return self.run(points, algorithm, params, dataset=dataset)

    @staticmethod
    def _success_message(algorithm: str, params: Dict[str, Any], n_clusters: int) -> str:
        label = ALGORITHM_LABELS.get(algorithm, algorithm)
        if algorithm in ("kmeans", "agglomerative"):
            return f"{label} completed with {params.get('n_clusters')} clusters"
        return f"{label} found {n_clusters} clusters"
