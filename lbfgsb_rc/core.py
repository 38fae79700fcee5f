"""Core types shared by the driver and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

import numpy as np

from .task import Task

Array = np.ndarray
Evaluator = Callable[[Array], Tuple[float, Array]]
Objective = Callable[[Array], float]
Gradient = Callable[[Array], Array]
Diagnostic = Callable[[Array], float]


class Status(Enum):
    """Why a run ended."""

    CONVERGED = "converged"
    SOLVER_STOP = "solver_stop"
    WARNING = "warning"
    ABNORMAL = "abnormal"
    ERROR = "error"
    MAX_ITER = "max_iter"
    MAX_TOTAL_ITER = "max_total_iter"
    INFEASIBLE = "infeasible"

    @classmethod
    def from_task(cls, task: Task) -> "Status":
        """Classify a terminal task declared by the solver."""
        if task is Task.CONVERGENCE:
            return cls.CONVERGED
        if task is Task.STOP:
            return cls.SOLVER_STOP
        if task is Task.WARNING:
            return cls.WARNING
        if task is Task.ABNORMAL:
            return cls.ABNORMAL
        return cls.ERROR


class Cancellation:
    """Out-of-band request to stop a run as infeasible.

    Pass one to :func:`lbfgsb_rc.lbfgsb` and set it from the evaluator or a
    diagnostic callback. The driver looks at it after every evaluation and
    after every completed iteration.

    >>> cancel = Cancellation()
    >>> cancel.set("left the feasible region")
    >>> cancel.is_set, cancel.reason
    (True, 'left the feasible region')
    """

    def __init__(self) -> None:
        self._reason: Optional[str] = None

    @property
    def is_set(self) -> bool:
        return self._reason is not None

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def set(self, reason: str = "infeasible") -> None:
        self._reason = reason

    def clear(self) -> None:
        self._reason = None


@dataclass(frozen=True)
class Result:
    """Outcome of one driver run.

    Attributes:
        x: Final iterate.
        fun: Objective value from the last evaluation.
        grad: Gradient from the last evaluation.
        nit: Completed outer iterations (``NEW_X`` events).
        total_its: Calls made to the solver.
        status: Classification of the exit.
        task: Last task decoded from the solver.
        message: Trimmed status text of the solver.
        solver_message: Secondary solver text (``csave``), empty when the
            backend has none.
        history: ``(nit, 2 + k)`` array of ``f``, ``||g||_inf`` and the
            recorded diagnostics.
    """

    x: Array
    fun: float
    grad: Array
    nit: int
    total_its: int
    status: Status
    task: Task
    message: str
    solver_message: str
    history: Array

    @property
    def success(self) -> bool:
        return self.status is Status.CONVERGED


__all__ = [
    "Array",
    "Cancellation",
    "Diagnostic",
    "Evaluator",
    "Gradient",
    "Objective",
    "Result",
    "Status",
]
