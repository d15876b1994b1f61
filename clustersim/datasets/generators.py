"""
Synthetic 2-D dataset generators.

Every generator takes the number of points and the canvas size and returns
unlabeled points. Shapes:
- random: a few disk-shaped clusters at random centers
- circles: a filled inner disk inside a ring
- moons: two interleaved half circles
- blobs: four disks near the canvas corners
- spiral: two interleaved spiral arms
- anisotropic: three sheared (elongated) blobs
- varied: three blobs of very different spread
- noisy-circles: circles with uniform background noise
"""

from typing import Callable, Dict, List, Optional, Union

import numpy as np

from clustersim.schemas.data_models import Point
from clustersim.utils.advanced_logging import get_logger
from clustersim.utils.error_handling import UnknownDatasetError

logger = get_logger(__name__)

RandomState = Union[None, int, np.random.Generator]


def _to_points(xs: np.ndarray, ys: np.ndarray) -> List[Point]:
    return [Point(x=float(x), y=float(y)) for x, y in zip(xs, ys)]


def _disk(
    rng: np.random.Generator,
    count: int,
    center_x: float,
    center_y: float,
    spread: float,
):
    """Points at uniform angle and uniform radius, denser towards the center."""
    angles = rng.uniform(0.0, 2 * np.pi, count)
    radii = rng.uniform(0.0, spread, count)
    return center_x + np.cos(angles) * radii, center_y + np.sin(angles) * radii


def generate_random_clusters(
    num_points: int,
    width: float,
    height: float,
    num_clusters: int = 3,
    random_state: RandomState = None,
) -> List[Point]:
    rng = np.random.default_rng(random_state)
    padding = 100
    points_per_cluster = num_points // num_clusters if num_clusters > 0 else 0

    xs, ys = [], []
    for _ in range(num_clusters):
        center_x = padding + rng.uniform() * (width - 2 * padding)
        center_y = padding + rng.uniform() * (height - 2 * padding)
        spread = 30 + rng.uniform() * 40
        cluster_x, cluster_y = _disk(rng, points_per_cluster, center_x, center_y, spread)
        xs.append(cluster_x)
        ys.append(cluster_y)

    if not xs:
        return []
    return _to_points(np.concatenate(xs), np.concatenate(ys))


def generate_circles(
    num_points: int,
    width: float,
    height: float,
    random_state: RandomState = None,
) -> List[Point]:
    rng = np.random.default_rng(random_state)
    center_x, center_y = width / 2, height / 2

    # Inner disk
    inner_count = int(num_points * 0.4)
    inner_x, inner_y = _disk(rng, inner_count, center_x, center_y, 80)

    # Outer ring
    outer_count = num_points - inner_count
    angles = rng.uniform(0.0, 2 * np.pi, outer_count)
    radii = 180 + (rng.uniform(size=outer_count) - 0.5) * 30
    outer_x = center_x + np.cos(angles) * radii
    outer_y = center_y + np.sin(angles) * radii

    return _to_points(np.concatenate([inner_x, outer_x]), np.concatenate([inner_y, outer_y]))


def generate_moons(
    num_points: int,
    width: float,
    height: float,
    random_state: RandomState = None,
) -> List[Point]:
    rng = np.random.default_rng(random_state)
    center_x, center_y = width / 2, height / 2
    radius = 100
    noise = 15

    upper_count = num_points // 2
    lower_count = num_points - upper_count

    upper_angles = np.pi * np.arange(upper_count) / max(upper_count, 1)
    upper_x = center_x + np.cos(upper_angles) * radius + (rng.uniform(size=upper_count) - 0.5) * noise
    upper_y = center_y + np.sin(upper_angles) * radius + (rng.uniform(size=upper_count) - 0.5) * noise

    lower_angles = np.pi + np.pi * np.arange(lower_count) / max(lower_count, 1)
    lower_x = (
        center_x + np.cos(lower_angles) * radius + radius / 2
        + (rng.uniform(size=lower_count) - 0.5) * noise
    )
    lower_y = (
        center_y + np.sin(lower_angles) * radius - radius / 2
        + (rng.uniform(size=lower_count) - 0.5) * noise
    )

    return _to_points(np.concatenate([upper_x, lower_x]), np.concatenate([upper_y, lower_y]))


def generate_blobs(
    num_points: int,
    width: float,
    height: float,
    random_state: RandomState = None,
) -> List[Point]:
    rng = np.random.default_rng(random_state)
    padding = 80
    spread = 50
    positions = [
        (padding + 100, padding + 80),
        (width - padding - 100, padding + 80),
        (padding + 100, height - padding - 80),
        (width - padding - 100, height - padding - 80),
    ]
    points_per_blob = num_points // len(positions)

    xs, ys = [], []
    for center_x, center_y in positions:
        blob_x, blob_y = _disk(rng, points_per_blob, center_x, center_y, spread)
        xs.append(blob_x)
        ys.append(blob_y)

    return _to_points(np.concatenate(xs), np.concatenate(ys))


def generate_spiral(
    num_points: int,
    width: float,
    height: float,
    random_state: RandomState = None,
) -> List[Point]:
    rng = np.random.default_rng(random_state)
    center_x, center_y = width / 2, height / 2
    max_radius = min(width, height) * 0.4
    turns = 1.75
    noise = 8

    xs, ys = [], []
    arm_counts = [num_points // 2, num_points - num_points // 2]
    for arm, count in enumerate(arm_counts):
        t = np.linspace(0.05, 1.0, count) if count > 0 else np.zeros(0)
        angles = t * turns * 2 * np.pi + arm * np.pi
        radii = t * max_radius
        xs.append(center_x + np.cos(angles) * radii + rng.normal(0.0, noise / 2, count))
        ys.append(center_y + np.sin(angles) * radii + rng.normal(0.0, noise / 2, count))

    return _to_points(np.concatenate(xs), np.concatenate(ys))


def generate_anisotropic(
    num_points: int,
    width: float,
    height: float,
    random_state: RandomState = None,
) -> List[Point]:
    rng = np.random.default_rng(random_state)
    transformation = np.array([[0.6, -0.6], [-0.4, 0.8]])
    offsets = [(-1.0, -0.6), (0.0, 0.6), (1.0, -0.6)]
    points_per_blob = num_points // len(offsets)
    scale = min(width, height) / 4

    blobs = []
    for offset_x, offset_y in offsets:
        blob = rng.normal(0.0, 0.35, size=(points_per_blob, 2)) + (offset_x, offset_y)
        blobs.append(blob)

    stretched = np.vstack(blobs) @ transformation * scale
    return _to_points(stretched[:, 0] + width / 2, stretched[:, 1] + height / 2)


def generate_varied_density(
    num_points: int,
    width: float,
    height: float,
    random_state: RandomState = None,
) -> List[Point]:
    rng = np.random.default_rng(random_state)
    blobs = [
        (width * 0.25, height * 0.3, 15),
        (width * 0.7, height * 0.35, 45),
        (width * 0.45, height * 0.72, 80),
    ]
    points_per_blob = num_points // len(blobs)

    xs, ys = [], []
    for center_x, center_y, spread in blobs:
        blob_x, blob_y = _disk(rng, points_per_blob, center_x, center_y, spread)
        xs.append(blob_x)
        ys.append(blob_y)

    return _to_points(np.concatenate(xs), np.concatenate(ys))


def generate_noisy_circles(
    num_points: int,
    width: float,
    height: float,
    random_state: RandomState = None,
) -> List[Point]:
    rng = np.random.default_rng(random_state)
    noise_count = int(num_points * 0.15)
    circles = generate_circles(num_points - noise_count, width, height, random_state=rng)

    noise_x = rng.uniform(0.0, width, noise_count)
    noise_y = rng.uniform(0.0, height, noise_count)
    return circles + _to_points(noise_x, noise_y)


DATASET_GENERATORS: Dict[str, Callable[..., List[Point]]] = {
    "random": generate_random_clusters,
    "circles": generate_circles,
    "moons": generate_moons,
    "blobs": generate_blobs,
    "spiral": generate_spiral,
    "anisotropic": generate_anisotropic,
    "varied": generate_varied_density,
    "noisy-circles": generate_noisy_circles,
}


def generate_dataset(
    name: str,
    num_points: int,
    width: float,
    height: float,
    random_state: RandomState = None,
) -> List[Point]:
    """
    Generate a named synthetic dataset.

    Args:
        name: Dataset name (see DATASET_GENERATORS)
        num_points: Requested number of points (shapes split into equal
            groups may return slightly fewer)
        width: Canvas width
        height: Canvas height
        random_state: Seed or generator

    Returns:
        Unlabeled points

    Raises:
        UnknownDatasetError: If the name is not registered
    """
    generator = DATASET_GENERATORS.get(name.lower())
    if generator is None:
        raise UnknownDatasetError(
            f"Unknown dataset '{name}'. Supported: {list(DATASET_GENERATORS.keys())}",
            details={"dataset": name},
        )

    points = generator(num_points, width, height, random_state=random_state)
    logger.debug("dataset_generated", dataset=name, requested=num_points, generated=len(points))
    return points
