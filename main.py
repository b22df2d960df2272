#!/usr/bin/env python3
"""
Main entry point for the collision filter.

Supports:
  - Single-job execution (default)
  - Distributed execution via --batch-index / --total-batches, where each job
    scans its own collision-aligned slice of the input
  - Shared run directory via --run-dir

Architecture:
  Clusters are read from the input ROOT file, split into batches at collision
  boundaries and scanned concurrently (--workers threads). Every collision
  yields exactly one trigger decision; histograms and statistics are written
  under the run directory.
"""

import sys
import json
import os
import logging
import argparse
import yaml

from domain.config import PipelineConfig
from pipeline.executor import FilterExecutor
from services.reading.record_reader import RecordReader
from utils.batching import get_batch_slice
from services.filtering.boundary import iter_groups
from utils.paths import create_timestamped_run_dir


def setup_logging(level: str = "INFO"):
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def load_config(config_path: str) -> dict:
    """Load configuration from YAML file."""
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def apply_cli_overrides(config_dict: dict, args) -> dict:
    """Inject CLI values into the configuration dictionary (override YAML values)."""
    config_dict = dict(config_dict)
    if args.input:
        config_dict.setdefault("input", {})
        config_dict["input"]["path"] = args.input
    if args.workers is not None:
        config_dict.setdefault("performance", {})
        config_dict["performance"]["workers"] = args.workers
    if args.validate_order:
        config_dict.setdefault("trigger_config", {})
        config_dict["trigger_config"]["validate_order"] = True
    return config_dict


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Collision filter - trigger decisions and same-event pairs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Single job with default config
  python main.py --input data/clusters.root

  # Custom config, 8 worker threads, fail on unsorted input
  python main.py --config my_config.yaml --workers 8 --validate-order

  # Distributed job 2 of 4 writing into a shared directory
  python main.py --batch-index 2 --total-batches 4 --run-dir ./output/run_shared

  # Dry-run to validate config
  python main.py --dry-run
        """
    )

    parser.add_argument(
        "--config", type=str, default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Validate configuration without running"
    )
    parser.add_argument(
        "--input", type=str, default=None,
        help="Input ROOT file (overrides input.path)"
    )
    parser.add_argument(
        "--workers", type=int, default=None,
        help="Number of worker threads (overrides performance.workers)"
    )
    parser.add_argument(
        "--validate-order", action="store_true",
        help="Fail if a collision id reappears after it was closed"
    )

    batch_group = parser.add_argument_group("Batch Job Options")
    batch_group.add_argument(
        "--batch-index", type=int, default=None,
        help="This job's index (1-based)"
    )
    batch_group.add_argument(
        "--total-batches", type=int, default=None,
        help="Total number of batch jobs"
    )
    batch_group.add_argument(
        "--run-dir", type=str, default=None,
        help="Pre-created shared run directory (skips timestamped dir creation)"
    )

    args = parser.parse_args(argv)

    if args.batch_index is not None and args.total_batches is None:
        parser.error("--total-batches is required when --batch-index is set")
    if args.total_batches is not None and args.batch_index is None:
        parser.error("--batch-index is required when --total-batches is set")

    return args


def run_batch_job(executor: FilterExecutor, config: PipelineConfig, args, run_dir: str) -> int:
    """Scan only this job's slice of collisions and save its decisions."""
    logger = logging.getLogger(__name__)
    clusters = RecordReader.read_clusters(config.input_path, config.clusters_tree)
    groups = [
        group for _key, group in iter_groups(clusters, validate_order=config.trigger_config.validate_order)
    ]
    job_groups = get_batch_slice(groups, args.batch_index, args.total_batches)
    job_clusters = [record for group in job_groups for record in group]

    decisions, scan_stats = executor.run_trigger_scan(job_clusters)

    logs_dir = os.path.join(run_dir, "logs")
    os.makedirs(logs_dir, exist_ok=True)
    executor.sink.write_root(os.path.join(run_dir, "histograms", f"batch_{args.batch_index}.root"))

    stats_path = os.path.join(logs_dir, f"batch_{args.batch_index}_stats.json")
    with open(stats_path, "w") as f:
        json.dump({
            "batch_index": args.batch_index,
            "scan": scan_stats.to_dict(),
            "decisions": [d.to_dict() for d in decisions],
        }, f, indent=2, default=str)
    logger.info(f"Saved batch stats to: {stats_path}")
    return 0


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info("Collision Filter")
    logger.info("=" * 60)

    try:
        logger.info(f"Loading configuration from: {args.config}")
        config_dict = apply_cli_overrides(load_config(args.config), args)
        config = PipelineConfig.from_dict(config_dict)
        logger.info("Configuration loaded and validated successfully")

        if args.dry_run:
            logger.info("Dry run mode - configuration is valid, exiting")
            logger.info(f"Enabled tasks: {[k for k, v in vars(config.tasks).items() if v]}")
            return 0

        if args.run_dir:
            run_dir = args.run_dir
            os.makedirs(run_dir, exist_ok=True)
            logger.info(f"Using shared run directory: {run_dir}")
        else:
            run_dir = create_timestamped_run_dir(config.output_dir, config.run_name)
            logger.info(f"Created timestamped run directory: {run_dir}")

        executor = FilterExecutor(config)

        if args.batch_index is not None:
            logger.info(f"Batch job {args.batch_index}/{args.total_batches}")
            return run_batch_job(executor, config, args, run_dir)

        executor.run(run_dir)
        logger.info("✓ Run completed successfully")
        return 0

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
