"""The reverse-communication solver boundary.

The driver never runs the L-BFGS-B algorithm itself. It calls an object
implementing :class:`ReverseCommunicationSolver`, which advances the
algorithm by one exchange, updates ``x`` and the save state in place and
reports the next :class:`~lbfgsb_rc.task.Task`.

:class:`ScipyLbfgsb` wraps the compiled ``setulb`` routine shipped with
SciPy. SciPy 1.15 replaced the Fortran build with a C port whose call
signature and task encoding differ; both are handled here so the driver
sees a single protocol.
"""

from __future__ import annotations

import re
from typing import Protocol, Tuple

import numpy as np
import scipy
from scipy.optimize import _lbfgsb

from .task import Task, decode_codes, decode_text, normalize_text
from .workspace import Workspace, allocate


def _scipy_version() -> Tuple[int, int]:
    match = re.match(r"(\d+)\.(\d+)", scipy.__version__)
    if match is None:  # pragma: no cover - malformed version string
        return (0, 0)
    return int(match.group(1)), int(match.group(2))


USES_C_IMPLEMENTATION = _scipy_version() >= (1, 15)


def _fortran_int():
    try:
        return _lbfgsb.types.intvar.dtype
    except AttributeError:
        # Older builds only used int32.
        return np.int32


class ReverseCommunicationSolver(Protocol):
    """One step of a bound-constrained quasi-Newton solver."""

    def allocate(self, n: int, m: int) -> Workspace:
        """Return zeroed work areas for dimension ``n`` and memory ``m``."""
        ...

    def step(
        self,
        m: int,
        x: np.ndarray,
        lower: np.ndarray,
        upper: np.ndarray,
        nbd: np.ndarray,
        f: float,
        g: np.ndarray,
        factr: float,
        pgtol: float,
        workspace: Workspace,
    ) -> Tuple[Task, str]:
        """Advance by one exchange; ``x`` and ``workspace`` change in place."""
        ...

    def solver_message(self, workspace: Workspace) -> str:
        """Secondary status text kept by the solver, if any."""
        ...


class ScipyLbfgsb:
    """Adapter over ``scipy.optimize._lbfgsb.setulb``.

    Parameters
    ----------
    maxls:
        Maximum number of line search steps per iteration.
    iprint:
        Verbosity of the solver's own output. Only the Fortran backend
        honours it; the C backend is always silent.
    """

    def __init__(self, maxls: int = 20, iprint: int = -1) -> None:
        if maxls <= 0:
            raise ValueError("maxls must be positive.")
        self.maxls = int(maxls)
        self.iprint = int(iprint)
        self.uses_c_implementation = USES_C_IMPLEMENTATION

    @property
    def int_dtype(self):
        return np.int32 if self.uses_c_implementation else _fortran_int()

    def allocate(self, n: int, m: int) -> Workspace:
        return allocate(n, m, int_dtype=self.int_dtype, text_task=not self.uses_c_implementation)

    def step(
        self,
        m: int,
        x: np.ndarray,
        lower: np.ndarray,
        upper: np.ndarray,
        nbd: np.ndarray,
        f: float,
        g: np.ndarray,
        factr: float,
        pgtol: float,
        workspace: Workspace,
    ) -> Tuple[Task, str]:
        ws = workspace
        if self.uses_c_implementation:
            _lbfgsb.setulb(
                m, x, lower, upper, nbd, f, g, factr, pgtol,
                ws.wa, ws.iwa, ws.task, ws.lsave, ws.isave, ws.dsave,
                self.maxls, ws.ln_task,
            )
            return decode_codes(ws.task)
        _lbfgsb.setulb(
            m, x, lower, upper, nbd, f, g, factr, pgtol,
            ws.wa, ws.iwa, ws.task, self.iprint, ws.csave,
            ws.lsave, ws.isave, ws.dsave, self.maxls,
        )
        return decode_text(ws.task.tobytes())

    def solver_message(self, workspace: Workspace) -> str:
        if self.uses_c_implementation:
            return ""
        return normalize_text(workspace.csave.tobytes())


__all__ = ["ReverseCommunicationSolver", "ScipyLbfgsb", "USES_C_IMPLEMENTATION"]
