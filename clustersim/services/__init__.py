"""
Simulator services.

- ClusteringSimulator: dataset generation + clustering with failure reporting
- summarize: summary statistics for labeled points
"""

from clustersim.services.simulator import ClusteringSimulator
from clustersim.services.statistics import summarize

__all__ = ["ClusteringSimulator", "summarize"]
