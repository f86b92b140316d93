"""
vectorization.py - Random-Matrix Construction and Loop vs Vectorized Transforms

Random-matrix builders
----------------------
Each builder returns an (nrow, ncol) float64 matrix of uniform [0, 1) draws
from ``numpy.random.default_rng(seed)``, filled in row-major order:

    1. grow_by_rbind      - stack one new row per iteration (np.vstack). The
                            whole matrix is copied every time it grows.
    2. preallocate_rows   - allocate once, draw and assign a row per iteration.
    3. preallocate_cells  - allocate once, draw a single scalar per cell.
    4. bulk_reshape       - draw nrow*ncol values in one call, then reshape.

The Generator produces one 64-bit draw per double regardless of how the
request is chunked, so all four builders consume the same stream and the
matrices are bit-for-bit identical for a given seed.

Vectorized transforms
---------------------
Three small element-wise computations, each written once as an explicit loop
and once as a single numpy expression.
"""

from typing import Callable, Dict

import numpy as np


def _check_shape(nrow: int, ncol: int) -> None:
    for name, dim in (("nrow", nrow), ("ncol", ncol)):
        if isinstance(dim, bool) or not isinstance(dim, (int, np.integer)):
            raise ValueError(f"{name} must be an integer, got {type(dim).__name__}")
        if dim < 0:
            raise ValueError(f"{name} must be non-negative, got {dim}")


# ---------------------------------------------------------------------------
# Random-matrix builders
# ---------------------------------------------------------------------------

def grow_by_rbind(nrow: int, ncol: int, seed: int = 42) -> np.ndarray:
    _check_shape(nrow, ncol)
    rng = np.random.default_rng(seed)
    mat = np.empty((0, ncol), dtype=np.float64)
    for _ in range(nrow):
        mat = np.vstack([mat, rng.random(ncol)])
    return mat


def preallocate_rows(nrow: int, ncol: int, seed: int = 42) -> np.ndarray:
    _check_shape(nrow, ncol)
    rng = np.random.default_rng(seed)
    mat = np.empty((nrow, ncol), dtype=np.float64)
    for i in range(nrow):
        mat[i, :] = rng.random(ncol)
    return mat


def preallocate_cells(nrow: int, ncol: int, seed: int = 42) -> np.ndarray:
    _check_shape(nrow, ncol)
    rng = np.random.default_rng(seed)
    mat = np.empty((nrow, ncol), dtype=np.float64)
    for i in range(nrow):
        for j in range(ncol):
            mat[i, j] = rng.random()
    return mat


def bulk_reshape(nrow: int, ncol: int, seed: int = 42) -> np.ndarray:
    """Generate once, shape once."""
    _check_shape(nrow, ncol)
    rng = np.random.default_rng(seed)
    return rng.random(nrow * ncol).reshape(nrow, ncol)


RANDOM_MATRIX_BUILDERS: Dict[str, Callable[..., np.ndarray]] = {
    "grow_by_rbind": grow_by_rbind,
    "preallocate_rows": preallocate_rows,
    "preallocate_cells": preallocate_cells,
    "bulk_reshape": bulk_reshape,
}


# ---------------------------------------------------------------------------
# Loop vs vectorized transforms
# ---------------------------------------------------------------------------

def log_transform_loop(x: np.ndarray) -> np.ndarray:
    out = np.empty(len(x), dtype=np.float64)
    for i in range(len(x)):
        out[i] = np.log1p(x[i])
    return out


def log_transform_vectorized(x: np.ndarray) -> np.ndarray:
    return np.log1p(np.asarray(x, dtype=np.float64))


def row_means_loop(mat: np.ndarray) -> np.ndarray:
    """Per-row mean with explicit loops over rows and columns."""
    nrow, ncol = mat.shape
    if ncol == 0:
        raise ValueError("Cannot take row means of a matrix with no columns")
    out = np.empty(nrow, dtype=np.float64)
    for i in range(nrow):
        total = 0.0
        for j in range(ncol):
            total += mat[i, j]
        out[i] = total / ncol
    return out


def row_means_vectorized(mat: np.ndarray) -> np.ndarray:
    if mat.shape[1] == 0:
        raise ValueError("Cannot take row means of a matrix with no columns")
    return mat.mean(axis=1)


def clip_loop(x: np.ndarray, threshold: float) -> np.ndarray:
    """Element-wise if/else: keep values above *threshold*, zero the rest."""
    out = np.empty(len(x), dtype=np.float64)
    for i in range(len(x)):
        if x[i] > threshold:
            out[i] = x[i]
        else:
            out[i] = 0.0
    return out


def clip_vectorized(x: np.ndarray, threshold: float) -> np.ndarray:
    x = np.asarray(x, dtype=np.float64)
    return np.where(x > threshold, x, 0.0)
