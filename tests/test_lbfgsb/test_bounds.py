import numpy as np

from lbfgsb_rc.bounds import ConstraintKind, encode_bounds, solver_bounds


def test_encode_bounds_covers_all_kinds():
    lower = np.array([-np.inf, 0.0, -np.inf, 2.0])
    upper = np.array([np.inf, np.inf, 5.0, 5.0])
    kinds = encode_bounds(lower, upper)
    assert kinds.tolist() == [
        ConstraintKind.NONE,
        ConstraintKind.LOWER,
        ConstraintKind.UPPER,
        ConstraintKind.BOTH,
    ]
    assert kinds.tolist() == [0, 1, 3, 2]


def test_encode_bounds_is_repeatable(rng):
    lower = rng.normal(size=20)
    upper = lower + rng.uniform(0.0, 1.0, size=20)
    lower[rng.random(20) < 0.3] = -np.inf
    upper[rng.random(20) < 0.3] = np.inf
    first = encode_bounds(lower, upper)
    second = encode_bounds(lower.copy(), upper.copy())
    np.testing.assert_array_equal(first, second)


def test_encode_bounds_treats_nan_as_free():
    kinds = encode_bounds(np.array([np.nan]), np.array([1.0]))
    assert kinds.tolist() == [ConstraintKind.UPPER]


def test_encode_bounds_respects_dtype():
    kinds = encode_bounds(np.zeros(3), np.ones(3), dtype=np.int64)
    assert kinds.dtype == np.int64


def test_solver_bounds_zeroes_free_sides():
    lo, hi = solver_bounds(np.array([-np.inf, 1.0]), np.array([2.0, np.inf]))
    np.testing.assert_array_equal(lo, [0.0, 1.0])
    np.testing.assert_array_equal(hi, [2.0, 0.0])
    assert lo.dtype == np.float64 and hi.dtype == np.float64
