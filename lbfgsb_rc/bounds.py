"""Translate ``(lower, upper)`` bound vectors into solver constraint codes.

``-inf``/``+inf`` (or any non-finite value) on one side means that side is
free. The codes are the ones L-BFGS-B expects in its ``nbd`` argument.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Tuple

import numpy as np


class ConstraintKind(IntEnum):
    """Which bounds of a coordinate are active."""

    NONE = 0
    LOWER = 1
    BOTH = 2
    UPPER = 3


def encode_bounds(lower: np.ndarray, upper: np.ndarray, dtype=np.int32) -> np.ndarray:
    """Return the :class:`ConstraintKind` code of every coordinate.

    >>> encode_bounds(np.array([-np.inf, 0.0, -np.inf, 2.0]),
    ...               np.array([np.inf, np.inf, 5.0, 5.0])).tolist()
    [0, 1, 3, 2]
    """
    has_lower = np.isfinite(np.asarray(lower, dtype=float)).reshape(-1)
    has_upper = np.isfinite(np.asarray(upper, dtype=float)).reshape(-1)
    kinds = np.where(
        has_lower & has_upper,
        ConstraintKind.BOTH,
        np.where(
            has_lower,
            ConstraintKind.LOWER,
            np.where(has_upper, ConstraintKind.UPPER, ConstraintKind.NONE),
        ),
    )
    return kinds.astype(dtype)


def solver_bounds(lower: np.ndarray, upper: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Float64 copies of the bounds with unbounded entries set to zero.

    The compiled routine ignores entries its ``nbd`` code marks as free but
    still reads them, so they must hold finite numbers.
    """
    lo = np.asarray(lower, dtype=np.float64).reshape(-1)
    hi = np.asarray(upper, dtype=np.float64).reshape(-1)
    return (
        np.where(np.isfinite(lo), lo, 0.0).astype(np.float64),
        np.where(np.isfinite(hi), hi, 0.0).astype(np.float64),
    )


__all__ = ["ConstraintKind", "encode_bounds", "solver_bounds"]
