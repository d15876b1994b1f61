#!/usr/bin/env python3
"""
Clustering Simulator CLI

Command-line interface for generating datasets and running the clustering
algorithms on them.

Usage:
    python cli.py run                                  # Cluster the default dataset
    python cli.py run -a dbscan --dataset moons        # DBSCAN on two moons
    python cli.py run -a hdbscan --min-cluster-size 5  # HDBSCAN with overrides
    python cli.py generate --dataset circles -o pts.json
    python cli.py cluster pts.json -a agglomerative --k 2
    python cli.py estimate-k --dataset blobs           # Elbow estimate of k
    python cli.py algorithms                           # List algorithms
    python cli.py datasets                             # List dataset generators
"""

import sys
import json
import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from clustersim import __version__
from clustersim.config.settings_loader import ConfigManager, Settings
from clustersim.core.base_clustering import points_to_array
from clustersim.core.clustering_engine import ClusteringEngine
from clustersim.datasets.generators import DATASET_GENERATORS
from clustersim.schemas.data_models import Point, SimulationOutcome
from clustersim.services.simulator import ClusteringSimulator
from clustersim.utils.advanced_logging import configure_logging, get_logger, log_exceptions
from clustersim.utils.error_handling import ClusterSimError, DatasetError

logger = get_logger(__name__)


def print_json(data: Any, indent: int = 2):
    """Pretty print JSON."""
    print(json.dumps(data, indent=indent, default=str))


def print_outcome(outcome: SimulationOutcome):
    """Print a simulation outcome."""
    status_icon = "✅" if outcome.success else "❌"
    print(f"{status_icon} {outcome.message}")
    print(f"   Algorithm: {outcome.algorithm}")
    if outcome.dataset:
        print(f"   Dataset: {outcome.dataset}")

    if outcome.error:
        print(f"   Error: {outcome.error.get('message', 'unknown')}")

    if outcome.summary is None:
        return

    summary = outcome.summary
    print("\n📊 Statistics\n")
    print(f"Total Points: {summary.total_points}")
    print(f"Clusters Found: {summary.n_clusters}")
    if summary.noise_points > 0:
        print(f"Noise Points: {summary.noise_points}")

    if summary.cluster_sizes:
        print("\nCluster Sizes:")
        for cluster_id, size in summary.cluster_sizes:
            print(f"  Cluster {cluster_id + 1}: {size}")

    metrics = outcome.result.get("quality_metrics", {})
    if metrics:
        print("\nQuality Metrics:")
        for name, value in metrics.items():
            print(f"  {name}: {value:.4f}" if isinstance(value, float) else f"  {name}: {value}")

    print(f"\nDuration: {outcome.duration_ms:.1f} ms")


def load_points(path: str) -> List[Point]:
    """
    Read points from a JSON file.

    Accepts a list of {"x": .., "y": ..} objects or of [x, y] pairs.
    """
    with log_exceptions(logger=logger, operation="load_points"):
        raw = json.loads(Path(path).read_text())

    if not isinstance(raw, list):
        raise DatasetError(f"Expected a JSON list of points in {path}", details={"path": path})

    points = []
    for item in raw:
        if isinstance(item, dict):
            points.append(Point(x=item["x"], y=item["y"]))
        else:
            points.append(Point(x=item[0], y=item[1]))
    return points


def save_points(points: List[Point], path: str):
    """Write points (with labels, if any) as JSON."""
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps([p.model_dump() for p in points], indent=2))
    logger.info("points_saved", path=str(output), count=len(points))


def algorithm_overrides(args: argparse.Namespace) -> Dict[str, Optional[Any]]:
    """Map command-line options onto algorithm parameter names."""
    return {
        "n_clusters": args.k,
        "epsilon": args.epsilon,
        "min_pts": args.min_pts,
        "min_cluster_size": args.min_cluster_size,
        "min_samples": args.min_samples,
        "max_iter": args.max_iter,
        "random_state": args.seed,
    }


def filter_overrides(algorithm: str, overrides: Dict[str, Optional[Any]], settings: Settings) -> Dict[str, Any]:
    """Keep only the overrides the algorithm understands."""
    known = settings.algorithm_params(algorithm)
    params = {key: value for key, value in overrides.items() if key in known and value is not None}

    # HDBSCAN reuses k/min_pts like the parameter panel does
    if algorithm == "hdbscan":
        if "min_cluster_size" not in params and overrides.get("n_clusters") is not None:
            params["min_cluster_size"] = overrides["n_clusters"]
        if "min_samples" not in params and overrides.get("min_pts") is not None:
            params["min_samples"] = overrides["min_pts"]
    return params


def finish(outcome: SimulationOutcome, args: argparse.Namespace):
    """Print or dump an outcome and exit non-zero on failure."""
    if args.output and outcome.points:
        save_points(outcome.points, args.output)

    if args.json:
        print_json(outcome.model_dump(exclude={"points"}))
    else:
        print_outcome(outcome)

    if not outcome.success:
        sys.exit(1)


def add_algorithm_options(parser: argparse.ArgumentParser):
    parser.add_argument("--algorithm", "-a", help="Algorithm (kmeans/dbscan/hdbscan/agglomerative)")
    parser.add_argument("--k", "--n-clusters", dest="k", type=int, help="Number of clusters (K-Means, Agglomerative)")
    parser.add_argument("--epsilon", type=float, help="Neighborhood radius (DBSCAN)")
    parser.add_argument("--min-pts", type=int, help="Min points (DBSCAN)")
    parser.add_argument("--min-cluster-size", type=int, help="Min cluster size (HDBSCAN)")
    parser.add_argument("--min-samples", type=int, help="Min samples (HDBSCAN)")
    parser.add_argument("--max-iter", type=int, help="Max iterations (K-Means)")
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument("--output", "-o", help="Write labeled points to this JSON file")
    parser.add_argument("--json", action="store_true", help="Print the outcome as JSON")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Clustering Simulator CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"clustersim {__version__}")
    parser.add_argument("--config", help="Path to settings YAML")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )

    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Generate a dataset and cluster it")
    run_parser.add_argument("--dataset", "-d", help="Dataset generator name")
    run_parser.add_argument("--num-points", "-n", type=int, help="Number of points")
    add_algorithm_options(run_parser)

    cluster_parser = subparsers.add_parser("cluster", help="Cluster points from a JSON file")
    cluster_parser.add_argument("file", help="JSON file with points")
    add_algorithm_options(cluster_parser)

    generate_parser = subparsers.add_parser("generate", help="Write a generated dataset as JSON")
    generate_parser.add_argument("--dataset", "-d", help="Dataset generator name")
    generate_parser.add_argument("--num-points", "-n", type=int, help="Number of points")
    generate_parser.add_argument("--seed", type=int, help="Random seed")
    generate_parser.add_argument("--output", "-o", required=True, help="Output JSON file")

    estimate_parser = subparsers.add_parser("estimate-k", help="Elbow estimate of k for a dataset")
    estimate_parser.add_argument("--dataset", "-d", help="Dataset generator name")
    estimate_parser.add_argument("--num-points", "-n", type=int, help="Number of points")
    estimate_parser.add_argument("--seed", type=int, help="Random seed")
    estimate_parser.add_argument("--min-k", type=int, default=2)
    estimate_parser.add_argument("--max-k", type=int, default=10)

    subparsers.add_parser("algorithms", help="List clustering algorithms")
    subparsers.add_parser("datasets", help="List dataset generators")

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        settings = ConfigManager.reload_config(args.config)
    except (FileNotFoundError, ClusterSimError) as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    log_file = settings.logging.file.path if settings.logging.file.enabled else None
    configure_logging(
        log_level=args.log_level or settings.logging.level,
        log_format=settings.logging.format,
        log_file=log_file,
        service_name=settings.service.name,
    )

    simulator = ClusteringSimulator(settings=settings)

    try:
        if args.command == "algorithms":
            for name in ClusteringEngine.ALGORITHMS:
                print(f"  {name}: {settings.algorithm_params(name)}")

        elif args.command == "datasets":
            for name in DATASET_GENERATORS:
                print(f"  {name}")

        elif args.command == "generate":
            points = simulator.generate(args.dataset, args.num_points, args.seed)
            save_points(points, args.output)
            print(f"✅ Wrote {len(points)} points to {args.output}")

        elif args.command == "estimate-k":
            points = simulator.generate(args.dataset, args.num_points, args.seed)
            k = simulator.engine.estimate_optimal_k(points_to_array(points), args.min_k, args.max_k)
            print(f"📈 Estimated k: {k}")

        elif args.command in ("run", "cluster"):
            algorithm = (args.algorithm or settings.clustering.default_algorithm).lower()
            params = filter_overrides(algorithm, algorithm_overrides(args), settings)

            if args.command == "run":
                outcome = simulator.simulate(
                    algorithm=algorithm,
                    dataset=args.dataset,
                    num_points=args.num_points,
                    params=params,
                    random_state=args.seed,
                )
            else:
                points = load_points(args.file)
                outcome = simulator.run(points, algorithm, params, dataset=args.file)

            finish(outcome, args)

    except ClusterSimError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        sys.exit(1)
    except (OSError, ValueError, KeyError, IndexError) as e:
        print(f"❌ Failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
