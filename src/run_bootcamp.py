#!/usr/bin/env python3
"""
===============================================================================
EFFICIENT STATISTICAL COMPUTING BOOTCAMP - MAIN ENTRY POINT
===============================================================================
Runs the worked examples from the bootcamp and writes their results.

USAGE:
    python run_bootcamp.py                 # Benchmark suite
    python run_bootcamp.py --quick         # Quick run (reduced problem sizes)
    python run_bootcamp.py --profile       # Profile the bootstrap example
    python run_bootcamp.py --io            # Text vs binary storage
    python run_bootcamp.py --duplication   # Copy tracing table
    python run_bootcamp.py --parallel      # Sequential vs process pool
    python run_bootcamp.py --all           # Everything

OUTPUTS (under --output, default output/benchmarks):
    *.csv            - One table per scenario plus summary.csv
    *.png            - Speedup and timing charts
    report.md        - Markdown summary of the benchmark suite
    bootcamp.log     - Run log

DEPENDENCIES:
    numpy, pandas, matplotlib, pyyaml
    Install: pip install -e .
===============================================================================
"""

import sys
import os
import argparse
import time
import logging
from pathlib import Path
from datetime import datetime

import pandas as pd

# ---------------------------------------------------------------------------
# Path setup: ensure all project modules are importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import apply_quick_mode, load_config
from performance.benchmarks import Benchmark
from performance.profiling import bootstrap_regression, profile_function, save_profile_table
from techniques.binary_io import benchmark_formats, chunked_column_means, make_example_frame, write_frame
from techniques.duplication import duplication_summary
from techniques.parallel import ParallelRunner, bootstrap_mean, make_bootstrap_tasks

logger = logging.getLogger('BOOTCAMP_MAIN')


def setup_logging(output_dir: str) -> None:
    """Log to stdout and to <output_dir>/bootcamp.log."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(os.path.join(output_dir, 'bootcamp.log'), mode='w')
        ],
        force=True,
    )


def run_benchmarks(config: dict, output_dir: str) -> pd.DataFrame:
    logger.info("=" * 60)
    logger.info("BENCHMARK SUITE")
    logger.info("=" * 60)
    summary = Benchmark.run_all_benchmarks(config, output_dir=output_dir)
    Benchmark.generate_report(output_dir=output_dir)
    return summary


def run_profile(config: dict, output_dir: str) -> pd.DataFrame:
    """Profile the bootstrap regression example and save the table."""
    logger.info("=" * 60)
    logger.info("PROFILING")
    logger.info("=" * 60)
    cfg = config['profiling']
    slopes, table = profile_function(
        bootstrap_regression, cfg['n_boot'], cfg['n_obs'], config['benchmark']['seed'],
        sort_by='total_time', limit=cfg['limit'],
    )
    logger.info(f"Bootstrap slope: mean {slopes.mean():.4f}, sd {slopes.std(ddof=1):.4f}")
    print(table.to_string())
    save_profile_table(table, os.path.join(output_dir, 'profile.csv'))
    return table


def run_io(config: dict, output_dir: str) -> pd.DataFrame:
    """Compare storage formats and demonstrate chunked reading."""
    logger.info("=" * 60)
    logger.info("BINARY I/O")
    logger.info("=" * 60)
    cfg = config['binary_io']
    io_dir = os.path.join(output_dir, 'io')
    frame = make_example_frame(cfg['nrow'], config['benchmark']['seed'])
    table = benchmark_formats(frame, io_dir, num_runs=cfg['num_runs'])
    print(table.to_string())
    table.to_csv(os.path.join(output_dir, 'binary_io_formats.csv'))

    csv_path = write_frame(frame, os.path.join(io_dir, 'example.csv'), 'csv')
    means = chunked_column_means(csv_path, cfg['chunksize'], columns=['x', 'y', 'z'])
    logger.info(f"Chunked column means ({cfg['chunksize']} rows/chunk): {means.round(4).to_dict()}")
    return table


def run_duplication(config: dict, output_dir: str) -> pd.DataFrame:
    logger.info("=" * 60)
    logger.info("COPY TRACING")
    logger.info("=" * 60)
    table = duplication_summary(config['duplication']['n'])
    print(table.to_string())
    table.to_csv(os.path.join(output_dir, 'duplication.csv'))
    return table


def run_parallel(config: dict, output_dir: str) -> dict:
    logger.info("=" * 60)
    logger.info("PARALLEL REPLICATION")
    logger.info("=" * 60)
    cfg = config['parallel']
    tasks = make_bootstrap_tasks(cfg['sample_size'], cfg['n_reps'], config['benchmark']['seed'])
    runner = ParallelRunner(cfg['num_workers'])
    timings = runner.compare(bootstrap_mean, tasks)
    pd.Series(timings).to_csv(os.path.join(output_dir, 'parallel.csv'), header=['value'])
    return timings


def main(argv=None):
    """
    Main entry point. Parses command line arguments and runs
    the requested mode(s).
    """
    parser = argparse.ArgumentParser(
        description='Efficient statistical computing: worked examples and benchmarks',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_bootcamp.py                  Benchmark suite
  python run_bootcamp.py --quick --all    Everything, small problem sizes
  python run_bootcamp.py --profile        Profile the bootstrap example
        """
    )

    parser.add_argument('--config', type=str, default=None,
                        help='Path to run config YAML')
    parser.add_argument('--output', type=str, default=None,
                        help='Output directory (default: from config)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed (default: from config)')
    parser.add_argument('--quick', action='store_true',
                        help='Quick mode (reduced problem sizes)')
    parser.add_argument('--benchmark', action='store_true',
                        help='Run the benchmark suite')
    parser.add_argument('--profile', action='store_true',
                        help='Profile the bootstrap regression example')
    parser.add_argument('--io', action='store_true',
                        help='Compare text and binary storage')
    parser.add_argument('--duplication', action='store_true',
                        help='Trace copies made by common operations')
    parser.add_argument('--parallel', action='store_true',
                        help='Compare sequential and process-pool replication')
    parser.add_argument('--all', action='store_true',
                        help='Run everything')

    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.quick:
        config = apply_quick_mode(config)
    if args.seed is not None:
        config['benchmark']['seed'] = args.seed

    output_dir = args.output or config['benchmark']['output_dir']
    os.makedirs(output_dir, exist_ok=True)
    setup_logging(output_dir)

    print("=" * 70)
    print("  EFFICIENT STATISTICAL COMPUTING BOOTCAMP")
    print("=" * 70)
    print(f"  Start time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"  Random seed: {config['benchmark']['seed']}")
    print("=" * 70)

    if args.all:
        args.benchmark = args.profile = args.io = args.duplication = args.parallel = True
    if not (args.benchmark or args.profile or args.io or args.duplication or args.parallel):
        args.benchmark = True

    start = time.time()

    if args.benchmark:
        run_benchmarks(config, output_dir)
    if args.profile:
        run_profile(config, output_dir)
    if args.io:
        run_io(config, output_dir)
    if args.duplication:
        run_duplication(config, output_dir)
    if args.parallel:
        run_parallel(config, output_dir)

    print("\n" + "=" * 70)
    print("  RUN COMPLETE")
    print(f"  Total wall time: {time.time() - start:.1f} seconds")
    print(f"  Outputs saved to: {os.path.abspath(output_dir)}")
    print("=" * 70)
    return 0


if __name__ == '__main__':
    sys.exit(main())
