"""
config.py - Run configuration for the bootcamp benchmark suite

The configuration is a plain nested dict, one section per technique, loaded
from YAML and merged over :data:`DEFAULT_CONFIG`. Any section or key missing
from the file keeps its default, so a config file only needs to list what it
changes.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / 'config' / 'bootcamp_config.yaml'

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    'benchmark': {'num_runs': 10, 'seed': 42, 'output_dir': 'output/benchmarks'},
    'constant_vector': {'n': 10_000, 'value': 1.0},
    'random_matrix': {'nrow': 200, 'ncol': 50},
    'compiled': {'n': 100_000},
    'vectorization': {'n': 100_000, 'threshold': 0.5},
    'binary_io': {'nrow': 50_000, 'num_runs': 3, 'chunksize': 10_000},
    'duplication': {'n': 1_000_000, 'frame_rows': 500},
    'profiling': {'n_boot': 200, 'n_obs': 500, 'limit': 15},
    'parallel': {'num_workers': None, 'n_reps': 16, 'sample_size': 100_000},
}

# Keys that must be strictly positive integers
_POSITIVE_INT_KEYS = {
    ('benchmark', 'num_runs'),
    ('constant_vector', 'n'),
    ('random_matrix', 'nrow'),
    ('random_matrix', 'ncol'),
    ('compiled', 'n'),
    ('vectorization', 'n'),
    ('binary_io', 'nrow'),
    ('binary_io', 'num_runs'),
    ('binary_io', 'chunksize'),
    ('duplication', 'n'),
    ('duplication', 'frame_rows'),
    ('profiling', 'n_boot'),
    ('profiling', 'n_obs'),
    ('profiling', 'limit'),
    ('parallel', 'n_reps'),
    ('parallel', 'sample_size'),
}

# Quick mode divisors, applied to the sizes above (never below 1)
_QUICK_SCALE = {
    ('constant_vector', 'n'): 10,
    ('random_matrix', 'nrow'): 4,
    ('compiled', 'n'): 10,
    ('vectorization', 'n'): 10,
    ('binary_io', 'nrow'): 10,
    ('binary_io', 'chunksize'): 10,
    ('duplication', 'n'): 10,
    ('duplication', 'frame_rows'): 5,
    ('profiling', 'n_boot'): 4,
    ('parallel', 'n_reps'): 4,
    ('parallel', 'sample_size'): 10,
}


def merge_config(overrides: Optional[dict]) -> dict:
    """
    Deep-merge *overrides* over :data:`DEFAULT_CONFIG` and validate the result.

    Raises
    ------
    ValueError
        If *overrides* names an unknown section or key, or a size is invalid.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if not overrides:
        return config
    if not isinstance(overrides, dict):
        raise ValueError(f"Config must be a mapping, got {type(overrides).__name__}")

    for section, values in overrides.items():
        if section not in config:
            raise ValueError(f"Unknown config section: {section!r}")
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ValueError(f"Config section {section!r} must be a mapping")
        for key, value in values.items():
            if key not in config[section]:
                raise ValueError(f"Unknown config key: {section}.{key}")
            config[section][key] = value

    validate_config(config)
    return config


def validate_config(config: dict) -> None:
    """Check sizes, run counts and worker counts; raise ValueError on the first bad one."""
    for section, key in sorted(_POSITIVE_INT_KEYS):
        value = config[section][key]
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValueError(
                f"{section}.{key} must be a positive integer, got {value!r}"
            )

    workers = config['parallel']['num_workers']
    if workers is not None and (isinstance(workers, bool) or not isinstance(workers, int) or workers < 1):
        raise ValueError(f"parallel.num_workers must be null or a positive integer, got {workers!r}")

    for section, key in (('vectorization', 'threshold'), ('constant_vector', 'value')):
        value = config[section][key]
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ValueError(f"{section}.{key} must be a number, got {value!r}")

    seed = config['benchmark']['seed']
    if isinstance(seed, bool) or not isinstance(seed, int) or seed < 0:
        raise ValueError(f"benchmark.seed must be a non-negative integer, got {seed!r}")

    output_dir = config['benchmark']['output_dir']
    if not isinstance(output_dir, str) or not output_dir:
        raise ValueError(f"benchmark.output_dir must be a non-empty string, got {output_dir!r}")


def load_config(config_path: Optional[str] = None) -> dict:
    """
    Load the run configuration from a YAML file.

    Args:
        config_path: Path to YAML config. Defaults to config/bootcamp_config.yaml,
            falling back to built-in defaults when that file is absent

    Returns:
        Validated configuration dictionary
    """
    if config_path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            logger.info("No config file found; using built-in defaults")
            return merge_config(None)
        config_path = str(DEFAULT_CONFIG_PATH)

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.info(f"Loading configuration from: {config_path}")
    with open(path, 'r') as f:
        overrides = yaml.safe_load(f)
    return merge_config(overrides)


def apply_quick_mode(config: dict) -> dict:
    """Return a copy of *config* with every problem size scaled down for a fast run."""
    quick = copy.deepcopy(config)
    for (section, key), divisor in _QUICK_SCALE.items():
        quick[section][key] = max(1, quick[section][key] // divisor)
    quick['benchmark']['num_runs'] = max(1, quick['benchmark']['num_runs'] // 5)
    quick['binary_io']['num_runs'] = 1
    return quick
