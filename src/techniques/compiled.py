"""
compiled.py - Interpreted Loops vs Compiled Primitives

The same statistic computed at different distances from compiled code:

    mean_loop      - every addition dispatched by the interpreter
    mean_builtin   - sum() runs its loop in C but still unboxes each float
    mean_fsum      - math.fsum, compiled and exactly rounded
    mean_numpy     - np.mean over a contiguous float64 buffer (pairwise sum)

The loop versions read like the textbook formula; the compiled versions are
what production scripts should call.
"""

import math
from typing import Callable, Dict, Sequence

import numpy as np


def _check_non_empty(x: Sequence[float], minimum: int = 1) -> None:
    if len(x) < minimum:
        raise ValueError(f"Need at least {minimum} value(s), got {len(x)}")


def mean_loop(x: Sequence[float]) -> float:
    _check_non_empty(x)
    total = 0.0
    count = 0
    for value in x:
        total += value
        count += 1
    return total / count


def mean_builtin(x: Sequence[float]) -> float:
    _check_non_empty(x)
    return sum(x) / len(x)


def mean_fsum(x: Sequence[float]) -> float:
    _check_non_empty(x)
    return math.fsum(x) / len(x)


def mean_numpy(x: Sequence[float]) -> float:
    _check_non_empty(x)
    return float(np.mean(x))


def variance_loop(x: Sequence[float]) -> float:
    """Two-pass sample variance (ddof=1)."""
    _check_non_empty(x, minimum=2)
    mu = mean_loop(x)
    ss = 0.0
    for value in x:
        ss += (value - mu) ** 2
    return ss / (len(x) - 1)


def variance_numpy(x: Sequence[float]) -> float:
    _check_non_empty(x, minimum=2)
    return float(np.var(x, ddof=1))


def cumulative_sum_loop(x: Sequence[float]) -> np.ndarray:
    out = np.empty(len(x), dtype=np.float64)
    running = 0.0
    for i, value in enumerate(x):
        running += value
        out[i] = running
    return out


def cumulative_sum_numpy(x: Sequence[float]) -> np.ndarray:
    return np.cumsum(np.asarray(x, dtype=np.float64))


MEAN_IMPLEMENTATIONS: Dict[str, Callable[[Sequence[float]], float]] = {
    "mean_loop": mean_loop,
    "mean_builtin": mean_builtin,
    "mean_fsum": mean_fsum,
    "mean_numpy": mean_numpy,
}
