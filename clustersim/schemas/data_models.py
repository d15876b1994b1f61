"""
data_models.py

Pydantic data models for the Clustering Simulator.
Defines the point shape shared by generators, algorithms and consumers, plus
the summary and outcome structures returned to callers.

Schema Design:
- Input: unlabeled points from dataset generators or JSON files
- Output: the same points, copied, with a cluster label (-1 = noise)
"""

from typing import List, Dict, Any, Optional, Tuple
from enum import Enum
from pydantic import BaseModel, Field


NOISE_LABEL = -1


# =============================================================================
# ENUMS
# =============================================================================


class ClusterAlgorithm(str, Enum):
    """Supported clustering algorithms."""

    KMEANS = "kmeans"
    DBSCAN = "dbscan"
    HDBSCAN = "hdbscan"
    AGGLOMERATIVE = "agglomerative"


class DatasetType(str, Enum):
    """Synthetic dataset shapes."""

    RANDOM = "random"
    CIRCLES = "circles"
    MOONS = "moons"
    BLOBS = "blobs"
    SPIRAL = "spiral"
    ANISOTROPIC = "anisotropic"
    VARIED = "varied"
    NOISY_CIRCLES = "noisy-circles"


# =============================================================================
# POINT MODELS
# =============================================================================


class Point(BaseModel):
    """A 2-D point with an optional cluster label."""

    x: float = Field(..., description="X coordinate")
    y: float = Field(..., description="Y coordinate")
    cluster: Optional[int] = Field(None, description="Cluster label (-1 or None = noise/unassigned)")

    @property
    def is_noise(self) -> bool:
        return self.cluster is None or self.cluster == NOISE_LABEL


# =============================================================================
# RESULT MODELS
# =============================================================================


class ClusteringSummary(BaseModel):
    """Summary statistics for a labeled point set."""

    total_points: int = Field(..., ge=0)
    n_clusters: int = Field(..., ge=0)
    noise_points: int = Field(..., ge=0)
    cluster_sizes: List[Tuple[int, int]] = Field(
        default_factory=list, description="(cluster_id, size) pairs ordered by cluster id"
    )


class SimulationOutcome(BaseModel):
    """Result of one simulator run, including failures."""

    success: bool
    message: str
    algorithm: str
    dataset: Optional[str] = None
    points: List[Point] = Field(default_factory=list)
    summary: Optional[ClusteringSummary] = None
    result: Dict[str, Any] = Field(default_factory=dict)
    duration_ms: float = 0.0
    error: Optional[Dict[str, Any]] = None
