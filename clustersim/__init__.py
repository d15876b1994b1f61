"""
Clustering Simulator.

Four classical clustering algorithms (K-Means, DBSCAN, HDBSCAN, single-linkage
Agglomerative) over 2-D point sets, plus synthetic dataset generators, summary
statistics and a command-line simulator.
"""

__version__ = "1.0.0"
