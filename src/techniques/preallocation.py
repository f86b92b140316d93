"""
preallocation.py - Constant-Vector Construction: Growth vs Pre-allocation

Four ways to build a length-n vector holding the same value everywhere,
ordered from slowest to fastest:

    1. grow_by_concatenation  - concatenate one element per iteration.
                                Every step allocates a new array of size i+1
                                and copies the previous i values into it, so
                                the total work is O(n^2).
    2. grow_by_append         - append to a Python list. Lists over-allocate
                                geometrically, so appends are amortised O(1),
                                but every element is a boxed float object.
    3. preallocate_and_fill   - allocate the final float64 array once and
                                assign each slot in a Python loop. One
                                allocation, but still n interpreted stores.
    4. repeat_value           - a single call to np.full. One allocation and
                                the fill runs in compiled code.

All four return identical float64 arrays for the same inputs.
"""

from typing import Callable, Dict

import numpy as np


def _check_length(n: int) -> None:
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise ValueError(f"n must be an integer, got {type(n).__name__}")
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")


def grow_by_concatenation(n: int, value: float = 1.0) -> np.ndarray:
    """Grow the result one element at a time with np.append (quadratic copying)."""
    _check_length(n)
    vec = np.empty(0, dtype=np.float64)
    for _ in range(n):
        vec = np.append(vec, value)
    return vec


def grow_by_append(n: int, value: float = 1.0) -> np.ndarray:
    """Append to a list, then convert once at the end."""
    _check_length(n)
    values = []
    for _ in range(n):
        values.append(value)
    return np.array(values, dtype=np.float64)


def preallocate_and_fill(n: int, value: float = 1.0) -> np.ndarray:
    """Allocate exact-size storage up front, then write each element."""
    _check_length(n)
    vec = np.empty(n, dtype=np.float64)
    for i in range(n):
        vec[i] = value
    return vec


def repeat_value(n: int, value: float = 1.0) -> np.ndarray:
    """Built-in repeat primitive: no Python-level loop at all."""
    _check_length(n)
    return np.full(n, value, dtype=np.float64)


CONSTANT_VECTOR_BUILDERS: Dict[str, Callable[..., np.ndarray]] = {
    "grow_by_concatenation": grow_by_concatenation,
    "grow_by_append": grow_by_append,
    "preallocate_and_fill": preallocate_and_fill,
    "repeat_value": repeat_value,
}
