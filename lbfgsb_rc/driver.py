"""Reverse-communication driver for bound-constrained L-BFGS-B.

The solver never calls the objective. Each exchange returns a task: for
``REQUEST_FG`` the driver evaluates ``f`` and ``g`` at the solver's current
``x`` and calls back; for ``NEW_X`` an iteration has been accepted and the
driver records it. Any other task ends the run.

Example
-------
>>> import numpy as np
>>> from lbfgsb_rc import lbfgsb
>>> res = lbfgsb(lambda x: ((x[0] - 3) ** 2, 2 * (x - 3)), [-np.inf], [np.inf])
>>> bool(abs(res.x[0] - 3.0) < 1e-4)
True
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Mapping, Optional, TextIO

import numpy as np

from .bounds import encode_bounds, solver_bounds
from .core import Array, Cancellation, Evaluator, Result, Status
from .errors import DimensionMismatch, Infeasible
from .evaluators import as_evaluator
from .history import History, format_progress
from .logging import get_logger
from .options import Options, bound_vectors, check_bounds, resolve_options, validate_shapes
from .solver import ReverseCommunicationSolver, ScipyLbfgsb
from .task import Task
from .workspace import Workspace

logger = get_logger(__name__)


@dataclass
class RunState:
    """Mutable state of a run, owned by the driver.

    ``x`` is the one buffer the solver updates in place; it is passed to
    every call as is.
    """

    x: Array
    f: float
    g: Array
    workspace: Workspace
    task: Task = Task.START
    message: str = "START"
    outer: int = 0
    total: int = 0


class Driver:
    """Run the request/response loop against a reverse-communication solver.

    Parameters
    ----------
    evaluator:
        Callable returning ``(f, g)`` at a point.
    x0, lower, upper:
        Starting point and bounds, validated vectors of equal length.
    options:
        Resolved configuration.
    solver:
        Solver implementing the protocol. Defaults to :class:`ScipyLbfgsb`.
    cancel:
        Optional cancellation checked after each evaluation and after each
        completed iteration.
    file:
        Stream for progress lines. Defaults to ``sys.stdout``.
    """

    def __init__(
        self,
        evaluator: Evaluator,
        x0: Array,
        lower: Array,
        upper: Array,
        options: Options,
        solver: Optional[ReverseCommunicationSolver] = None,
        cancel: Optional[Cancellation] = None,
        file: Optional[TextIO] = None,
    ) -> None:
        self.evaluator = evaluator
        self.options = options
        self.solver = solver if solver is not None else ScipyLbfgsb()
        self.cancel = cancel if cancel is not None else Cancellation()
        self.file = file
        # Reason given by an evaluator that raised Infeasible; never copied
        # into the caller's Cancellation.
        self._infeasible: Optional[str] = None
        self.n = x0.size

        workspace = self.solver.allocate(self.n, options.m)
        self.nbd = encode_bounds(lower, upper, dtype=workspace.iwa.dtype)
        self.lower, self.upper = solver_bounds(lower, upper)
        self.state = RunState(
            x=np.array(x0, dtype=np.float64),
            f=0.0,
            g=np.zeros(self.n, dtype=np.float64),
            workspace=workspace,
        )
        self.history = History(options.max_its, options.output_fcn, options.err_fcn)

    def run(self) -> Result:
        """Drive the solver until it stops, a cap is hit, or the run is cancelled."""
        opts = self.options
        state = self.state
        logger.debug(
            "starting run: n=%d, m=%d, factr=%g, pgtol=%g", self.n, opts.m, opts.factr, opts.pgtol
        )
        status: Optional[Status] = None
        while state.total < opts.max_total_its:
            state.task, state.message = self.solver.step(
                opts.m,
                state.x,
                self.lower,
                self.upper,
                self.nbd,
                state.f,
                state.g,
                opts.factr,
                opts.pgtol,
                state.workspace,
            )
            state.total += 1

            if not state.task.keeps_running:
                status = Status.from_task(state.task)
            elif state.task is Task.REQUEST_FG:
                status = self._request_fg()
            else:
                status = self._new_x()
            if status is not None:
                break
        else:
            logger.warning("Maxed-out the total iteration counter (%d), exiting", opts.max_total_its)
            status = Status.MAX_TOTAL_ITER

        return self._assemble(status)

    def _request_fg(self) -> Optional[Status]:
        state = self.state
        try:
            f, g = self.evaluator(state.x)
        except Infeasible as exc:
            self._infeasible = str(exc) or "infeasible"
        else:
            state.f = float(f)
            state.g = self._as_gradient(g)
        return self._check_cancel()

    def _new_x(self) -> Optional[Status]:
        state = self.state
        opts = self.options
        state.outer += 1

        if opts.print_every > 0 and state.outer % opts.print_every == 0:
            errors = self.history.display_values(state.x)
            gnorm = float(np.linalg.norm(state.g, np.inf)) if state.g.size else 0.0
            print(format_progress(state.outer, state.f, gnorm, errors), file=self.file or sys.stdout)

        self.history.record(state.f, state.g, state.x)

        status = self._check_cancel()
        if status is not None:
            return status
        if state.outer >= opts.max_its:
            logger.info("Maxed-out iteration counter (%d), exiting", opts.max_its)
            return Status.MAX_ITER
        return None

    def _check_cancel(self) -> Optional[Status]:
        if self._infeasible is not None:
            reason = self._infeasible
        elif self.cancel.is_set:
            reason = self.cancel.reason
        else:
            return None
        logger.warning("Infeasible, exiting: %s", reason)
        return Status.INFEASIBLE

    def _as_gradient(self, g: Any) -> Array:
        # The solver writes into g, so it gets a buffer of its own.
        grad = np.array(g, dtype=np.float64).reshape(-1)
        if grad.size != self.n:
            raise DimensionMismatch(f"gradient has {grad.size} entries, expected {self.n}")
        return grad

    def _assemble(self, status: Status) -> Result:
        state = self.state
        x = state.x.copy()
        g = state.g.copy()
        x.flags.writeable = False
        g.flags.writeable = False
        return Result(
            x=x,
            fun=state.f,
            grad=g,
            nit=state.outer,
            total_its=state.total,
            status=status,
            task=state.task,
            message=state.message,
            solver_message=self.solver.solver_message(state.workspace),
            history=self.history.rows(),
        )


def lbfgsb(
    fcn: Any,
    l: Any,
    u: Any,
    opts: Optional[Mapping[str, Any]] = None,
    *,
    solver: Optional[ReverseCommunicationSolver] = None,
    cancel: Optional[Cancellation] = None,
    file: Optional[TextIO] = None,
) -> Result:
    """Minimize ``f(x)`` subject to ``l <= x <= u``.

    Parameters
    ----------
    fcn:
        Callable returning ``(f, g)``, or a ``(fun, grad)`` pair. It may
        raise :class:`~lbfgsb_rc.errors.Infeasible` to stop the run.
    l, u:
        Bound vectors of length ``n``. Use ``-inf``/``inf`` for free sides.
    opts:
        Sparse option mapping, see :mod:`lbfgsb_rc.options`.
    solver:
        Reverse-communication solver, :class:`ScipyLbfgsb` by default.
    cancel:
        Cancellation the evaluator or diagnostics may set.
    file:
        Stream for progress lines, ``sys.stdout`` by default.

    Returns
    -------
    Result
        Final point, value, gradient, counts, status and history. Iteration
        caps, cancellation and solver-declared failures are reported through
        ``Result.status`` rather than raised.

    Raises
    ------
    DimensionMismatch, InvalidOption, UnrecognizedOption, InvalidBounds
        Before any solver call, on malformed input.
    CallbackFailure
        When a diagnostic callback raises during the run.
    """
    evaluator = as_evaluator(fcn)
    lower, upper = bound_vectors(l, u)
    options, x0 = resolve_options(lower.size, opts)
    x0, lower, upper = validate_shapes(x0, lower, upper)
    check_bounds(lower, upper)
    driver = Driver(evaluator, x0, lower, upper, options, solver=solver, cancel=cancel, file=file)
    return driver.run()


__all__ = ["Driver", "RunState", "lbfgsb"]
