"""
parallel.py - Replicating Independent Work Across Processes

Bootstrap resampling, simulation studies and cross-validation folds are
*embarrassingly parallel*: each replicate needs only its own inputs and a
seed.  :class:`ParallelRunner` runs the same list of tasks either in a plain
loop or over a :class:`multiprocessing.Pool`, so the two can be timed
against each other and checked for identical results.

Each worker is a separate interpreter, so the GIL does not serialise the
work, but every task's arguments are pickled to the worker.  Parallelism
pays off only when a replicate costs much more than shipping its inputs.
"""

import logging
import os
import time
from multiprocessing import Pool
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


def bootstrap_mean(task: Tuple[np.ndarray, int]) -> float:
    """
    Mean of one bootstrap resample.

    Top-level so that multiprocessing.Pool can pickle it.
    """
    data, seed = task
    rng = np.random.default_rng(seed)
    idx = rng.integers(0, len(data), size=len(data))
    return float(data[idx].mean())


def make_bootstrap_tasks(sample_size: int, n_reps: int, seed: int = 42) -> List[Tuple[np.ndarray, int]]:
    """One (data, seed) task per replicate, all sharing the same simulated sample."""
    rng = np.random.default_rng(seed)
    data = rng.exponential(2.0, sample_size)
    return [(data, seed + 1 + rep) for rep in range(n_reps)]


def _same_result(a: Any, b: Any) -> bool:
    """Element-wise equality that also works for array results; NaN equals NaN."""
    a_arr = np.asarray(a)
    b_arr = np.asarray(b)
    return bool(np.array_equal(a_arr, b_arr, equal_nan=a_arr.dtype.kind in "fc"))


class ParallelRunner:
    """Run independent tasks sequentially or on a process pool."""

    def __init__(self, num_workers: Optional[int] = None):
        """
        Parameters
        ----------
        num_workers : int or None
            Number of worker processes. Defaults to ``os.cpu_count()``.
        """
        if num_workers is not None and num_workers < 1:
            raise ValueError(f"num_workers must be >= 1, got {num_workers}")
        self.num_workers = num_workers or os.cpu_count() or 1

    @staticmethod
    def replicate_sequential(func: Callable[[Any], Any], tasks: Sequence[Any]) -> List[Any]:
        return [func(task) for task in tasks]

    def replicate(self, func: Callable[[Any], Any], tasks: Sequence[Any]) -> List[Any]:
        """
        Apply *func* to every task on a process pool; results keep task order.

        *func* and the tasks must be picklable.
        """
        with Pool(processes=self.num_workers) as pool:
            results = pool.map(func, tasks)
        return results

    def compare(self, func: Callable[[Any], Any], tasks: Sequence[Any]) -> Dict[str, float]:
        """
        Time sequential vs pooled execution of the same tasks.

        Returns
        -------
        dict with keys: sequential_s, parallel_s, speedup, num_workers, num_tasks

        Raises
        ------
        RuntimeError
            If the two runs disagree.
        """
        t0 = time.perf_counter()
        seq = self.replicate_sequential(func, tasks)
        t_seq = time.perf_counter() - t0

        t0 = time.perf_counter()
        par = self.replicate(func, tasks)
        t_par = time.perf_counter() - t0

        if len(seq) != len(par) or not all(_same_result(a, b) for a, b in zip(seq, par)):
            raise RuntimeError("Parallel results differ from sequential results")

        logger.info(f"{len(tasks)} tasks: sequential {t_seq:.3f}s, "
                    f"parallel {t_par:.3f}s on {self.num_workers} workers")
        return {
            "sequential_s": t_seq,
            "parallel_s": t_par,
            "speedup": t_seq / t_par if t_par > 0 else float("nan"),
            "num_workers": float(self.num_workers),
            "num_tasks": float(len(tasks)),
        }
