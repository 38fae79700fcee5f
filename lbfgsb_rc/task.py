"""Task codes exchanged with the reverse-communication solver.

The solver reports what it wants next through a status field. The Fortran
build of ``setulb`` writes a blank padded 60 character text, the C build a
pair of integers. Both are decoded into :class:`Task` right after each call
so that nothing downstream ever matches on raw text.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence, Tuple

TASK_WIDTH = 60


class Task(Enum):
    """Request or verdict returned by the solver."""

    START = "START"
    REQUEST_FG = "FG"
    NEW_X = "NEW_X"
    RESTART = "RESTART"
    CONVERGENCE = "CONVERGENCE"
    STOP = "STOP"
    WARNING = "WARNING"
    ERROR = "ERROR"
    ABNORMAL = "ABNORMAL"
    UNKNOWN = "UNKNOWN"

    @property
    def keeps_running(self) -> bool:
        """True for the two requests the driver answers and calls back on."""
        return self in (Task.REQUEST_FG, Task.NEW_X)


# Order matters: the first matching prefix wins.
_PREFIXES: Tuple[Tuple[str, Task], ...] = (
    ("FG", Task.REQUEST_FG),
    ("NEW_X", Task.NEW_X),
    ("START", Task.START),
    ("RESTART", Task.RESTART),
    ("CONV", Task.CONVERGENCE),
    ("STOP", Task.STOP),
    ("WARNING", Task.WARNING),
    ("ERROR", Task.ERROR),
    ("ABNO", Task.ABNORMAL),
)

# Numeric status codes of the C implementation (task[0]).
STATUS_CODES = {
    0: Task.START,
    1: Task.NEW_X,
    2: Task.RESTART,
    3: Task.REQUEST_FG,
    4: Task.CONVERGENCE,
    5: Task.STOP,
    6: Task.WARNING,
    7: Task.ERROR,
    8: Task.ABNORMAL,
}

# Detail codes of the C implementation (task[1]).
MESSAGE_CODES = {
    401: "NORM OF PROJECTED GRADIENT <= PGTOL",
    402: "RELATIVE REDUCTION OF F <= FACTR*EPSMCH",
    501: "CPU EXCEEDING THE TIME LIMIT",
    502: "TOTAL NO. OF F,G EVALUATIONS EXCEEDS LIMIT",
    503: "PROJECTED GRADIENT IS SUFFICIENTLY SMALL",
    504: "TOTAL NO. OF ITERATIONS REACHED LIMIT",
    505: "CALLBACK REQUESTED HALT",
    601: "ROUNDING ERRORS PREVENT PROGRESS",
    602: "STP = STPMAX",
    603: "STP = STPMIN",
    604: "XTOL TEST SATISFIED",
    701: "NO FEASIBLE SOLUTION",
    702: "FACTR < 0",
    703: "FTOL < 0",
    704: "GTOL < 0",
    705: "XTOL < 0",
    706: "STP < STPMIN",
    707: "STP > STPMAX",
    708: "STPMIN < 0",
    709: "STPMAX < STPMIN",
    710: "INITIAL G >= 0",
    711: "M <= 0",
    712: "N <= 0",
    713: "INVALID NBD",
}


def normalize_text(raw: bytes | str) -> str:
    """Cut a status field to its protocol width and strip the padding."""
    if isinstance(raw, bytes):
        raw = raw.decode("ascii", errors="replace")
    return raw[:TASK_WIDTH].rstrip("\x00 ")


def decode_text(raw: bytes | str) -> Tuple[Task, str]:
    """Decode a fixed-width status text into ``(Task, trimmed text)``.

    >>> decode_text(b"FG_LNSRCH" + b" " * 51)
    (<Task.REQUEST_FG: 'FG'>, 'FG_LNSRCH')
    """
    text = normalize_text(raw)
    for prefix, task in _PREFIXES:
        if text.startswith(prefix):
            return task, text
    return Task.UNKNOWN, text


def decode_codes(codes: Sequence[int]) -> Tuple[Task, str]:
    """Decode the ``(status, detail)`` integer pair of the C solver."""
    status, detail = int(codes[0]), int(codes[1])
    task = STATUS_CODES.get(status, Task.UNKNOWN)
    message = MESSAGE_CODES.get(detail, "")
    name = "FG" if task is Task.REQUEST_FG else task.name
    return task, f"{name}: {message}" if message else name


__all__ = [
    "MESSAGE_CODES",
    "STATUS_CODES",
    "TASK_WIDTH",
    "Task",
    "decode_codes",
    "decode_text",
    "normalize_text",
]
