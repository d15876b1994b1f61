"""
Core clustering module.

Exports:
- ClusteringEngine: Main orchestration class
- BaseClusteringAlgorithm: Base class for algorithms
- ClusteringResult: Result container
- ClusteringConfig: Configuration container
- Individual algorithm implementations and their point-sequence functions
- euclidean_distance: Shared distance primitive
"""

from clustersim.core.base_clustering import (
    BaseClusteringAlgorithm,
    ClusteringResult,
    ClusteringConfig,
)
from clustersim.core.clustering_engine import ClusteringEngine
from clustersim.core.distance import euclidean_distance, pairwise_distances
from clustersim.core.kmeans_algorithm import KMeansAlgorithm, kmeans
from clustersim.core.dbscan_algorithm import DBSCANAlgorithm, dbscan
from clustersim.core.hdbscan_algorithm import HDBSCANAlgorithm, hdbscan
from clustersim.core.agglomerative_algorithm import AgglomerativeAlgorithm, agglomerative

__all__ = [
    "ClusteringEngine",
    "BaseClusteringAlgorithm",
    "ClusteringResult",
    "ClusteringConfig",
    "euclidean_distance",
    "pairwise_distances",
    "KMeansAlgorithm",
    "DBSCANAlgorithm",
    "HDBSCANAlgorithm",
    "AgglomerativeAlgorithm",
    "kmeans",
    "dbscan",
    "hdbscan",
    "agglomerative",
]
