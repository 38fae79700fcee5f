"""lbfgsb_rc - a reverse-communication host for bound-constrained L-BFGS-B.

Example
-------
>>> import numpy as np
>>> from lbfgsb_rc import lbfgsb
>>> def quad(x):
...     return float((x[0] - 3.0) ** 2), 2.0 * (x - 3.0)
>>> res = lbfgsb(quad, [5.0], [np.inf])
>>> float(res.x[0])
5.0
"""

__version__ = "0.1.0"

from .bounds import ConstraintKind, encode_bounds, solver_bounds
from .core import Cancellation, Result, Status
from .driver import Driver, RunState, lbfgsb
from .errors import (
    CallbackFailure,
    DimensionMismatch,
    Infeasible,
    InvalidBounds,
    InvalidOption,
    LbfgsbError,
    UnrecognizedOption,
)
from .evaluators import as_evaluator, combine, torch_evaluator
from .history import History
from .logging import configure_logging, get_logger, set_log_level
from .options import DEFAULTS, Options, resolve_options, validate_shapes
from .solver import ReverseCommunicationSolver, ScipyLbfgsb
from .task import Task, decode_codes, decode_text
from .workspace import Workspace, allocate, iwa_size, wa_size

__all__ = [
    "__version__",
    # Entry point
    "lbfgsb",
    "Driver",
    "RunState",
    # Results
    "Result",
    "Status",
    "Cancellation",
    # Bounds and options
    "ConstraintKind",
    "encode_bounds",
    "solver_bounds",
    "DEFAULTS",
    "Options",
    "resolve_options",
    "validate_shapes",
    # Solver boundary
    "ReverseCommunicationSolver",
    "ScipyLbfgsb",
    "Task",
    "decode_codes",
    "decode_text",
    "Workspace",
    "allocate",
    "iwa_size",
    "wa_size",
    # Instrumentation
    "History",
    "as_evaluator",
    "combine",
    "torch_evaluator",
    # Errors
    "LbfgsbError",
    "DimensionMismatch",
    "InvalidOption",
    "UnrecognizedOption",
    "InvalidBounds",
    "CallbackFailure",
    "Infeasible",
    # Logging
    "configure_logging",
    "get_logger",
    "set_log_level",
]
