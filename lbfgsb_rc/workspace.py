"""Scratch storage handed to the L-BFGS-B routine on every call.

The sizes are fixed by the solver's documentation and must not be
approximated: a short ``wa`` makes the compiled code write out of bounds.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .task import TASK_WIDTH

LSAVE_SIZE = 4
ISAVE_SIZE = 44
DSAVE_SIZE = 29


def wa_size(n: int, m: int) -> int:
    """Length of the floating point work array."""
    return 2 * m * n + 5 * n + 11 * m * m + 8 * m


def iwa_size(n: int) -> int:
    """Length of the integer work array."""
    return 3 * n


@dataclass
class Workspace:
    """Work arrays and the solver-private save state of one run.

    ``task`` is either a one element ``S60`` text buffer or a two element
    integer code array, depending on the backend that allocated it.
    ``csave`` and ``ln_task`` are only read by the backend that uses them.
    """

    wa: np.ndarray
    iwa: np.ndarray
    task: np.ndarray
    csave: np.ndarray
    lsave: np.ndarray
    isave: np.ndarray
    dsave: np.ndarray
    ln_task: np.ndarray


def allocate(n: int, m: int, int_dtype=np.int32, text_task: bool = True) -> Workspace:
    """Allocate zeroed work areas for a problem of dimension ``n``.

    Args:
        n: Number of variables.
        m: Number of limited-memory corrections.
        int_dtype: Integer type of the compiled routine.
        text_task: Use a fixed-width text task field initialised to
            ``START``; otherwise a zeroed code pair, where 0 means start.
    """
    if text_task:
        task = np.zeros(1, f"S{TASK_WIDTH}")
        task[:] = "START"
    else:
        task = np.zeros(2, dtype=np.int32)
    return Workspace(
        wa=np.zeros(wa_size(n, m), dtype=np.float64),
        iwa=np.zeros(iwa_size(n), dtype=int_dtype),
        task=task,
        csave=np.zeros(1, f"S{TASK_WIDTH}"),
        lsave=np.zeros(LSAVE_SIZE, dtype=int_dtype),
        isave=np.zeros(ISAVE_SIZE, dtype=int_dtype),
        dsave=np.zeros(DSAVE_SIZE, dtype=np.float64),
        ln_task=np.zeros(2, dtype=np.int32),
    )


__all__ = [
    "DSAVE_SIZE",
    "ISAVE_SIZE",
    "LSAVE_SIZE",
    "Workspace",
    "allocate",
    "iwa_size",
    "wa_size",
]
