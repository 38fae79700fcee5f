"""Per-iteration history and diagnostic callbacks."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .core import Array, Diagnostic
from .errors import CallbackFailure


def _call_diagnostics(funcs: Sequence[Diagnostic], x: Array, iteration: int) -> List[float]:
    values = []
    for func in funcs:
        try:
            values.append(float(func(x)))
        except Exception as exc:
            raise CallbackFailure(func, iteration) from exc
    return values


class History:
    """Append-only record of completed outer iterations.

    Each row holds ``f``, ``||g||_inf`` and one column per recording
    diagnostic, in registration order. Storage is allocated once for
    ``capacity`` rows.
    """

    def __init__(
        self,
        capacity: int,
        output_fcn: Sequence[Diagnostic] = (),
        err_fcn: Sequence[Diagnostic] = (),
    ) -> None:
        self.output_fcn = tuple(output_fcn)
        self.err_fcn = tuple(err_fcn)
        self._rows = np.zeros((capacity, 2 + len(self.output_fcn)), dtype=np.float64)
        self._count = 0

    def __len__(self) -> int:
        return self._count

    @property
    def width(self) -> int:
        return self._rows.shape[1]

    @property
    def capacity(self) -> int:
        return self._rows.shape[0]

    def append(self, row: Sequence[float]) -> None:
        if self._count >= self.capacity:
            raise IndexError(f"history is full ({self.capacity} rows)")
        if len(row) != self.width:
            raise ValueError(f"expected a row of width {self.width}, got {len(row)}")
        self._rows[self._count] = row
        self._count += 1

    def record(self, f: float, g: Array, x: Array) -> None:
        """Append the row for the iterate just completed."""
        gnorm = float(np.linalg.norm(g, np.inf)) if g.size else 0.0
        extras = _call_diagnostics(self.output_fcn, x, self._count + 1)
        self.append([f, gnorm, *extras])

    def display_values(self, x: Array) -> List[float]:
        """Evaluate the display diagnostics at ``x``."""
        return _call_diagnostics(self.err_fcn, x, self._count + 1)

    def rows(self) -> Array:
        """Read-only copy of the rows recorded so far."""
        out = self._rows[: self._count].copy()
        out.flags.writeable = False
        return out


def format_progress(iteration: int, f: float, gnorm: float, errors: Sequence[float]) -> str:
    """Progress line printed every ``printEvery`` iterations."""
    line = f"Iteration {iteration:4d}, f = {f:5.2e}, ||g||_inf = {gnorm:5.2e}"
    return line + "".join(f"; err {value:.2e}" for value in errors)


__all__ = ["History", "format_progress"]
