"""Adapter tests for ScipyLbfgsb with a stand-in compiled module."""

from types import SimpleNamespace

import numpy as np

import lbfgsb_rc.solver as solver_module
from lbfgsb_rc import ScipyLbfgsb, Status, Task, lbfgsb
from lbfgsb_rc.task import TASK_WIDTH


class FakeFortranSetulb:
    """Replays padded S60 task texts through the Fortran call signature."""

    def __init__(self, texts, csave="CONVERGENCE"):
        self.texts = list(texts)
        self.csave = csave
        self.seen = []

    def __call__(self, m, x, l, u, nbd, f, g, factr, pgtol, wa, iwa, task, iprint, csave,
                 lsave, isave, dsave, maxls):
        self.seen.append((task.tobytes(), iprint, maxls, iwa.dtype))
        task[:] = self.texts.pop(0).ljust(TASK_WIDTH)
        csave[:] = self.csave.ljust(TASK_WIDTH)
        if task.tobytes().startswith(b"FG"):
            x -= 1.0


class FakeCSetulb:
    """Replays integer task codes through the C call signature."""

    def __init__(self, codes):
        self.codes = list(codes)

    def __call__(self, m, x, l, u, nbd, f, g, factr, pgtol, wa, iwa, task, lsave, isave, dsave,
                 maxls, ln_task):
        task[:] = self.codes.pop(0)


def fortran_solver(monkeypatch, setulb, **kwargs):
    monkeypatch.setattr(solver_module, "_lbfgsb", SimpleNamespace(setulb=setulb))
    solver = ScipyLbfgsb(**kwargs)
    solver.uses_c_implementation = False
    return solver


def test_fortran_branch_decodes_padded_text(monkeypatch):
    setulb = FakeFortranSetulb(
        ["FG_START", "NEW_X", "CONVERGENCE: NORM_OF_PROJECTED_GRADIENT_<=_PGTOL"]
    )
    solver = fortran_solver(monkeypatch, setulb, maxls=7, iprint=1)
    res = lbfgsb(lambda x: (float(x @ x), 2 * x), [-np.inf], [np.inf], solver=solver)

    assert res.status is Status.CONVERGED
    assert res.task is Task.CONVERGENCE
    assert res.message == "CONVERGENCE: NORM_OF_PROJECTED_GRADIENT_<=_PGTOL"
    assert res.solver_message == "CONVERGENCE"
    assert res.nit == 1
    np.testing.assert_allclose(res.x, [-1.0])
    first_task, iprint, maxls, int_dtype = setulb.seen[0]
    assert first_task.startswith(b"START")
    assert (iprint, maxls) == (1, 7)
    assert int_dtype == np.int32


def test_fortran_branch_reports_solver_error(monkeypatch):
    solver = fortran_solver(monkeypatch, FakeFortranSetulb(["ERROR: N .LE. 0"]))
    res = lbfgsb(lambda x: (0.0, np.zeros(1)), [0.0], [1.0], solver=solver)
    assert res.status is Status.ERROR
    assert res.message == "ERROR: N .LE. 0"
    assert res.total_its == 1


def test_c_branch_decodes_codes(monkeypatch):
    setulb = FakeCSetulb([[3, 0], [1, 0], [4, 402]])
    monkeypatch.setattr(solver_module, "_lbfgsb", SimpleNamespace(setulb=setulb))
    solver = ScipyLbfgsb()
    solver.uses_c_implementation = True
    res = lbfgsb(lambda x: (float(x @ x), 2 * x), [-np.inf], [np.inf], solver=solver)

    assert res.status is Status.CONVERGED
    assert res.message == "CONVERGENCE: RELATIVE REDUCTION OF F <= FACTR*EPSMCH"
    assert res.solver_message == ""
    assert res.nit == 1
