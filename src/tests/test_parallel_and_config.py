"""
===============================================================================
BOOTCAMP - Parallel Replication, Configuration and CLI Test Suite
===============================================================================
Pooled replication returns exactly the sequential results in order; the YAML
configuration merges over defaults and rejects bad values; the command line
runs end to end in quick mode.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
import yaml

from core.config import (
    DEFAULT_CONFIG, DEFAULT_CONFIG_PATH, apply_quick_mode, load_config, merge_config,
)
from techniques.parallel import ParallelRunner, bootstrap_mean, make_bootstrap_tasks
import run_bootcamp


# =============================================================================
# Parallel replication
# =============================================================================

@pytest.fixture
def tasks():
    return make_bootstrap_tasks(sample_size=2_000, n_reps=6, seed=5)


class TestParallelRunner:

    def test_tasks_share_data_with_distinct_seeds(self, tasks):
        assert len(tasks) == 6
        assert all(t[0] is tasks[0][0] for t in tasks)
        assert len({t[1] for t in tasks}) == 6

    def test_bootstrap_mean_reproducible(self, tasks):
        assert bootstrap_mean(tasks[0]) == bootstrap_mean(tasks[0])
        assert bootstrap_mean(tasks[0]) != bootstrap_mean(tasks[1])

    def test_parallel_matches_sequential(self, tasks):
        runner = ParallelRunner(num_workers=2)
        seq = runner.replicate_sequential(bootstrap_mean, tasks)
        par = runner.replicate(bootstrap_mean, tasks)
        assert par == seq

    def test_compare(self, tasks):
        timings = ParallelRunner(num_workers=2).compare(bootstrap_mean, tasks)
        assert timings["num_tasks"] == 6
        assert timings["num_workers"] == 2
        assert timings["sequential_s"] > 0
        assert timings["parallel_s"] > 0

    def test_default_workers(self):
        assert ParallelRunner().num_workers >= 1

    def test_compare_array_results(self):
        tasks = [np.arange(3.0), np.arange(4.0), np.array([np.nan, 1.0])]
        timings = ParallelRunner(num_workers=2).compare(np.cumsum, tasks)
        assert timings["num_tasks"] == 3

    def test_compare_detects_mismatch(self):
        runner = ParallelRunner(num_workers=2)
        runner.replicate = lambda func, tasks: [np.zeros(3) for _ in tasks]
        with pytest.raises(RuntimeError):
            runner.compare(np.cumsum, [np.ones(3)])

    def test_invalid_workers(self):
        with pytest.raises(ValueError):
            ParallelRunner(num_workers=0)

    def test_bootstrap_means_near_population_mean(self):
        tasks = make_bootstrap_tasks(sample_size=20_000, n_reps=4, seed=0)
        means = ParallelRunner.replicate_sequential(bootstrap_mean, tasks)
        # Exponential(scale=2) has mean 2
        assert np.mean(means) == pytest.approx(2.0, abs=0.1)


# =============================================================================
# Configuration
# =============================================================================

class TestConfig:

    def test_defaults(self):
        config = merge_config(None)
        assert config == DEFAULT_CONFIG
        assert config is not DEFAULT_CONFIG

    def test_shipped_config_loads(self):
        assert DEFAULT_CONFIG_PATH.exists()
        config = load_config()
        assert config['benchmark']['seed'] == 42

    def test_partial_override(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text(yaml.safe_dump({'random_matrix': {'nrow': 7}}))
        config = load_config(str(path))
        assert config['random_matrix'] == {'nrow': 7, 'ncol': DEFAULT_CONFIG['random_matrix']['ncol']}
        assert config['compiled'] == DEFAULT_CONFIG['compiled']

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == DEFAULT_CONFIG

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    @pytest.mark.parametrize("overrides", [
        {'nonsense': {}},
        {'benchmark': {'unknown_key': 1}},
        {'benchmark': {'num_runs': 0}},
        {'constant_vector': {'n': -3}},
        {'random_matrix': {'nrow': 2.5}},
        {'profiling': {'limit': True}},
        {'parallel': {'num_workers': 0}},
        {'vectorization': {'threshold': 'high'}},
        {'constant_vector': {'value': 'one'}},
        {'benchmark': {'seed': '42'}},
        {'benchmark': {'seed': -1}},
        {'benchmark': {'output_dir': 5}},
        {'benchmark': {'output_dir': ''}},
        {'benchmark': [1, 2]},
        [1, 2],
    ])
    def test_invalid_overrides(self, overrides):
        with pytest.raises(ValueError):
            merge_config(overrides)

    def test_quick_mode_shrinks_sizes(self):
        config = merge_config(None)
        quick = apply_quick_mode(config)
        assert quick['constant_vector']['n'] < config['constant_vector']['n']
        assert quick['benchmark']['num_runs'] >= 1
        assert quick['binary_io']['num_runs'] == 1
        # Original untouched
        assert config == DEFAULT_CONFIG


# =============================================================================
# Command line
# =============================================================================

class TestCommandLine:

    def test_quick_run_all_modes(self, tmp_path):
        cfg = tmp_path / "tiny.yaml"
        cfg.write_text(yaml.safe_dump({
            'benchmark': {'num_runs': 5},
            'constant_vector': {'n': 100},
            'random_matrix': {'nrow': 8, 'ncol': 4},
            'compiled': {'n': 200},
            'vectorization': {'n': 200},
            'binary_io': {'nrow': 200, 'chunksize': 50},
            'duplication': {'n': 1000, 'frame_rows': 10},
            'profiling': {'n_boot': 8, 'n_obs': 40},
            'parallel': {'num_workers': 2, 'n_reps': 4, 'sample_size': 500},
        }))
        out = tmp_path / "out"
        code = run_bootcamp.main([
            '--config', str(cfg), '--output', str(out), '--quick', '--all', '--seed', '3',
        ])
        assert code == 0
        for name in ("summary.csv", "report.md", "profile.csv", "binary_io_formats.csv",
                     "duplication.csv", "parallel.csv", "bootcamp.log"):
            assert (out / name).exists(), name

    def test_default_mode_is_benchmark(self, tmp_path):
        cfg = tmp_path / "tiny.yaml"
        cfg.write_text(yaml.safe_dump({
            'benchmark': {'num_runs': 1},
            'constant_vector': {'n': 50},
            'random_matrix': {'nrow': 4, 'ncol': 4},
            'compiled': {'n': 100},
            'vectorization': {'n': 100},
            'binary_io': {'nrow': 50, 'num_runs': 1},
            'duplication': {'n': 100, 'frame_rows': 5},
        }))
        out = tmp_path / "out"
        assert run_bootcamp.main(['--config', str(cfg), '--output', str(out)]) == 0
        assert (out / "summary.csv").exists()
        assert not (out / "profile.csv").exists()
