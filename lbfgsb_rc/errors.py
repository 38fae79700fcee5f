"""Exceptions raised by lbfgsb_rc.

Structural problems (shapes, options, bounds) are raised before the solver
is ever called. Run-time outcomes such as iteration caps or a solver
declaring failure are reported through :class:`lbfgsb_rc.core.Status`
instead. :class:`Infeasible` is not an error of this package: an evaluator
raises it to cancel the run.
"""

from __future__ import annotations

from typing import Any, Iterable


class LbfgsbError(Exception):
    """Base class for errors raised by lbfgsb_rc."""


class DimensionMismatch(LbfgsbError, ValueError):
    """Vectors that must share length ``n`` do not, or are not columns."""


class InvalidOption(LbfgsbError, ValueError):
    """An option value lies outside its documented range."""

    def __init__(self, key: str, value: Any, reason: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid value for option {key!r}: {value!r} ({reason})")


class UnrecognizedOption(LbfgsbError, KeyError):
    """One or more option keys are not understood."""

    def __init__(self, keys: Iterable[str]) -> None:
        self.keys = tuple(sorted(keys))
        super().__init__(f"Unrecognized option(s): {', '.join(self.keys)}")

    def __str__(self) -> str:
        return self.args[0]


class InvalidBounds(LbfgsbError, ValueError):
    """A finite lower bound exceeds its finite upper bound."""


class CallbackFailure(LbfgsbError, RuntimeError):
    """A diagnostic callback raised during a run."""

    def __init__(self, callback: Any, iteration: int) -> None:
        self.callback = callback
        self.iteration = iteration
        name = getattr(callback, "__name__", repr(callback))
        super().__init__(f"Diagnostic callback {name} failed at iteration {iteration}")


class Infeasible(Exception):
    """Raised by an evaluator to stop the run as infeasible.

    The driver catches it, keeps the history recorded so far and returns a
    result with :attr:`lbfgsb_rc.core.Status.INFEASIBLE`.
    """


__all__ = [
    "CallbackFailure",
    "DimensionMismatch",
    "Infeasible",
    "InvalidBounds",
    "InvalidOption",
    "LbfgsbError",
    "UnrecognizedOption",
]
