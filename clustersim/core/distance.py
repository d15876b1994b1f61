"""
Euclidean distance primitive shared by every clustering algorithm.

euclidean_distance is the scalar form for a single pair of points. The
algorithms read distances from pairwise_distances, which evaluates the same
sqrt(dx^2 + dy^2) for all pairs at once; every matrix entry equals the scalar
result for that pair.
"""

import math
from typing import Sequence, Union

import numpy as np

from clustersim.schemas.data_models import Point

PointLike = Union[Point, Sequence[float], np.ndarray]


def _coords(point: PointLike):
    if isinstance(point, Point):
        return point.x, point.y
    return point[0], point[1]


def euclidean_distance(a: PointLike, b: PointLike) -> float:
    """
    Distance between two 2-D points.

    Args:
        a: Point model, (x, y) pair or coordinate array
        b: Point model, (x, y) pair or coordinate array

    Returns:
        sqrt((x1 - x2)^2 + (y1 - y2)^2), 0.0 for coincident points
    """
    ax, ay = _coords(a)
    bx, by = _coords(b)
    dx = float(ax) - float(bx)
    dy = float(ay) - float(by)
    return math.sqrt(dx * dx + dy * dy)


def pairwise_distances(vectors: np.ndarray) -> np.ndarray:
    """
    Full symmetric distance matrix for an N x D coordinate array.

    Memory is O(n^2); intended for the few hundred points the simulator
    works with.
    """
    vectors = np.asarray(vectors, dtype=np.float64)
    if len(vectors) == 0:
        return np.zeros((0, 0), dtype=np.float64)

    diff = vectors[:, np.newaxis, :] - vectors[np.newaxis, :, :]
    distances = np.sqrt(np.sum(diff * diff, axis=-1))
    np.fill_diagonal(distances, 0.0)
    return distances
