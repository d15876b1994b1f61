"""
Synthetic dataset generators for the simulator.
"""

from clustersim.datasets.generators import DATASET_GENERATORS, generate_dataset

__all__ = ["DATASET_GENERATORS", "generate_dataset"]
