"""
===============================================================================
BOOTCAMP - Vector and Matrix Construction Test Suite
===============================================================================
The classroom claims behind the two construction micro-benchmarks: the four
constant-vector builders return identical vectors for the same inputs, and
the four random-matrix builders return identical matrices for the same seed.
Also covers the loop-vs-vectorized transform pairs.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from techniques.preallocation import (
    CONSTANT_VECTOR_BUILDERS, grow_by_concatenation, preallocate_and_fill, repeat_value,
)
from techniques.vectorization import (
    RANDOM_MATRIX_BUILDERS, bulk_reshape, clip_loop, clip_vectorized,
    log_transform_loop, log_transform_vectorized, row_means_loop, row_means_vectorized,
)


# =============================================================================
# Constant-vector construction
# =============================================================================

class TestConstantVectorBuilders:
    """All four builders agree; edge cases are handled identically."""

    @pytest.mark.parametrize("n, value", [(1, 1.0), (7, -2.5), (1000, 3.14159)])
    def test_builders_identical(self, n, value):
        expected = np.full(n, value)
        for name, builder in CONSTANT_VECTOR_BUILDERS.items():
            result = builder(n, value)
            assert result.dtype == np.float64, name
            assert_array_equal(result, expected, err_msg=name)

    def test_default_value_is_one(self):
        assert_array_equal(repeat_value(5), np.ones(5))

    def test_zero_length(self):
        for name, builder in CONSTANT_VECTOR_BUILDERS.items():
            result = builder(0, 9.0)
            assert result.shape == (0,), name
            assert result.dtype == np.float64, name

    @pytest.mark.parametrize("bad_n", [-1, 2.5, "3", True])
    def test_invalid_length_rejected(self, bad_n):
        for builder in CONSTANT_VECTOR_BUILDERS.values():
            with pytest.raises(ValueError):
                builder(bad_n)

    def test_numpy_integer_length_accepted(self):
        assert_array_equal(preallocate_and_fill(np.int64(4), 2.0), np.full(4, 2.0))

    def test_builders_ordered_slowest_first(self):
        names = list(CONSTANT_VECTOR_BUILDERS)
        assert names[0] == "grow_by_concatenation"
        assert names[-1] == "repeat_value"

    def test_growth_returns_new_array_each_call(self):
        a = grow_by_concatenation(3)
        b = grow_by_concatenation(3)
        assert not np.shares_memory(a, b)


# =============================================================================
# Random-matrix construction
# =============================================================================

class TestRandomMatrixBuilders:
    """Same seed -> same matrix, whichever way it is built."""

    @pytest.mark.parametrize("nrow, ncol", [(1, 1), (10, 3), (25, 40)])
    def test_builders_identical_for_same_seed(self, nrow, ncol):
        reference = bulk_reshape(nrow, ncol, seed=123)
        assert reference.shape == (nrow, ncol)
        for name, builder in RANDOM_MATRIX_BUILDERS.items():
            assert_array_equal(builder(nrow, ncol, 123), reference, err_msg=name)

    def test_reproducible(self):
        for builder in RANDOM_MATRIX_BUILDERS.values():
            assert_array_equal(builder(5, 4, 7), builder(5, 4, 7))

    def test_different_seeds_differ(self):
        assert not np.array_equal(bulk_reshape(5, 5, 1), bulk_reshape(5, 5, 2))

    def test_values_in_unit_interval(self):
        mat = bulk_reshape(50, 50, 0)
        assert mat.min() >= 0.0
        assert mat.max() < 1.0

    @pytest.mark.parametrize("nrow, ncol", [(0, 5), (5, 0), (0, 0)])
    def test_empty_shapes(self, nrow, ncol):
        for name, builder in RANDOM_MATRIX_BUILDERS.items():
            assert builder(nrow, ncol, 1).shape == (nrow, ncol), name

    def test_negative_dimension_rejected(self):
        for builder in RANDOM_MATRIX_BUILDERS.values():
            with pytest.raises(ValueError):
                builder(-1, 3, 1)
            with pytest.raises(ValueError):
                builder(3, -1, 1)


# =============================================================================
# Loop vs vectorized transforms
# =============================================================================

@pytest.fixture
def sample():
    return np.random.default_rng(42).random(500)


class TestVectorizedTransforms:

    def test_log_transform(self, sample):
        assert_allclose(log_transform_loop(sample), log_transform_vectorized(sample))

    def test_row_means(self):
        mat = np.random.default_rng(0).random((30, 7))
        assert_allclose(row_means_loop(mat), row_means_vectorized(mat), rtol=1e-12)
        assert_allclose(row_means_vectorized(mat), mat.mean(axis=1))

    def test_row_means_no_columns(self):
        mat = np.empty((3, 0))
        with pytest.raises(ValueError):
            row_means_loop(mat)
        with pytest.raises(ValueError):
            row_means_vectorized(mat)

    def test_clip(self, sample):
        loop = clip_loop(sample, 0.5)
        vec = clip_vectorized(sample, 0.5)
        assert_array_equal(loop, vec)
        assert (vec[sample <= 0.5] == 0.0).all()
        assert_array_equal(vec[sample > 0.5], sample[sample > 0.5])

    def test_clip_empty(self):
        assert clip_loop(np.array([]), 0.0).shape == (0,)
        assert clip_vectorized(np.array([]), 0.0).shape == (0,)
