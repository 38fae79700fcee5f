"""Validation and defaults for the driver options.

Options arrive as a sparse mapping using the keys below. Unknown keys are
an error, not something to ignore, and every value is range checked before
the solver is touched.

====================  =========  ==========================================
key                   default    meaning
====================  =========  ==========================================
``x0``                zeros(n)   starting point
``m``                 5          limited-memory corrections (3..20 advised)
``factr``             1e7        relative f-decrease tolerance, in units of
                                 machine epsilon
``pgtol``             1e-5       projected gradient infinity-norm tolerance
``maxIts``            100        outer iterations
``maxTotalIts``       5000       solver calls, line search steps included
``printEvery``        500        progress line cadence, 0 disables it
``errFcn``            ()         diagnostics shown on progress lines
``outputFcn``         ()         diagnostics recorded in the history
====================  =========  ==========================================
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

import numpy as np

from .core import Array, Diagnostic
from .errors import DimensionMismatch, InvalidBounds, InvalidOption, UnrecognizedOption

DEFAULTS: Mapping[str, Any] = {
    "m": 5,
    "factr": 1e7,
    "pgtol": 1e-5,
    "maxIts": 100,
    "maxTotalIts": 5000,
    "printEvery": 500,
    "errFcn": (),
    "outputFcn": (),
}

RECOGNIZED = frozenset(DEFAULTS) | {"x0"}


@dataclass(frozen=True)
class Options:
    """Fully resolved driver configuration."""

    m: int = 5
    factr: float = 1e7
    pgtol: float = 1e-5
    max_its: int = 100
    max_total_its: int = 5000
    print_every: int = 500
    err_fcn: Tuple[Diagnostic, ...] = ()
    output_fcn: Tuple[Diagnostic, ...] = ()


def _as_vector(name: str, value: Any) -> Array:
    arr = np.asarray(value, dtype=np.float64)
    if arr.ndim == 2 and arr.shape[1] == 1:
        return arr[:, 0]
    if arr.ndim != 1:
        raise DimensionMismatch(f"{name} must be a column vector, got shape {arr.shape}")
    return arr


def bound_vectors(lower: Any, upper: Any) -> Tuple[Array, Array]:
    """Check that ``lower`` and ``upper`` are columns of one length."""
    lo = _as_vector("l", lower)
    hi = _as_vector("u", upper)
    if lo.size != hi.size:
        raise DimensionMismatch(f"l and u must be the same length, got {lo.size} and {hi.size}")
    return lo, hi


def validate_shapes(x0: Any, lower: Any, upper: Any) -> Tuple[Array, Array, Array]:
    """Check that ``x0``, ``lower`` and ``upper`` are columns of one length.

    Returns flat float64 versions of the three vectors.
    """
    lo, hi = bound_vectors(lower, upper)
    x = _as_vector("x0", x0)
    if x.size != lo.size:
        raise DimensionMismatch(f"x0 and l have mismatched sizes, got {x.size} and {lo.size}")
    return x, lo, hi


def check_bounds(lower: Array, upper: Array) -> None:
    """Reject coordinates whose finite lower bound exceeds the upper one."""
    both = np.isfinite(lower) & np.isfinite(upper)
    bad = np.flatnonzero(both & (lower > upper))
    if bad.size:
        raise InvalidBounds(f"lower bound exceeds upper bound at indices {bad.tolist()}")


def _integer(key: str, value: Any, minimum: int) -> int:
    if isinstance(value, bool):
        raise InvalidOption(key, value, "expected an integer")
    if not isinstance(value, numbers.Integral):
        # Whole floats such as 5e3 are accepted.
        if not (isinstance(value, numbers.Real) and float(value).is_integer()):
            raise InvalidOption(key, value, "expected an integer")
    value = int(value)
    if value < minimum:
        raise InvalidOption(key, value, f"must be >= {minimum}")
    return value


def _real(key: str, value: Any, minimum: float) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidOption(key, value, "expected a real number")
    value = float(value)
    if not value >= minimum:
        raise InvalidOption(key, value, f"must be >= {minimum}")
    return value


def _callables(key: str, value: Any) -> Tuple[Callable, ...]:
    if value is None:
        return ()
    if callable(value):
        return (value,)
    if isinstance(value, Sequence) and not isinstance(value, str):
        funcs = tuple(value)
        for func in funcs:
            if not callable(func):
                raise InvalidOption(key, func, "entries must be callable")
        return funcs
    raise InvalidOption(key, value, "expected a callable or a sequence of callables")


def resolve_options(n: int, opts: Optional[Mapping[str, Any]] = None) -> Tuple[Options, Array]:
    """Fill in defaults, validate, and return ``(Options, x0)``.

    Raises:
        UnrecognizedOption: ``opts`` holds keys outside the recognized set.
        InvalidOption: a value is outside its documented range.
    """
    opts = dict(opts or {})
    unknown = set(opts) - RECOGNIZED
    if unknown:
        raise UnrecognizedOption(unknown)

    merged = {**DEFAULTS, **opts}
    x0 = opts.get("x0")
    if x0 is None:
        x0 = np.zeros(n)

    options = Options(
        m=_integer("m", merged["m"], 0),
        factr=_real("factr", merged["factr"], 0.0),
        pgtol=_real("pgtol", merged["pgtol"], 0.0),
        max_its=_integer("maxIts", merged["maxIts"], 1),
        max_total_its=_integer("maxTotalIts", merged["maxTotalIts"], 1),
        print_every=_integer("printEvery", merged["printEvery"], 0),
        err_fcn=_callables("errFcn", merged["errFcn"]),
        output_fcn=_callables("outputFcn", merged["outputFcn"]),
    )
    return options, x0


__all__ = [
    "DEFAULTS",
    "Options",
    "RECOGNIZED",
    "bound_vectors",
    "check_bounds",
    "resolve_options",
    "validate_shapes",
]
