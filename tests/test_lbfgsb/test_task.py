import numpy as np
import pytest

from lbfgsb_rc.task import TASK_WIDTH, Task, decode_codes, decode_text, normalize_text


@pytest.mark.parametrize(
    "text, expected",
    [
        ("FG_START", Task.REQUEST_FG),
        ("FG_LNSRCH", Task.REQUEST_FG),
        ("NEW_X", Task.NEW_X),
        ("START", Task.START),
        ("RESTART_FROM_LNSRCH", Task.RESTART),
        ("CONVERGENCE: NORM_OF_PROJECTED_GRADIENT_<=_PGTOL", Task.CONVERGENCE),
        ("STOP: TOTAL NO. of f AND g EVALUATIONS EXCEEDS LIMIT", Task.STOP),
        ("WARNING: ROUNDING ERRORS PREVENT PROGRESS", Task.WARNING),
        ("ERROR: M .LE. 0", Task.ERROR),
        ("ABNORMAL_TERMINATION_IN_LNSRCH", Task.ABNORMAL),
        ("SOMETHING ELSE", Task.UNKNOWN),
    ],
)
def test_decode_text_prefixes(text, expected):
    task, message = decode_text(text.ljust(TASK_WIDTH).encode())
    assert task is expected
    assert message == text


def test_normalize_text_trims_padding_and_width():
    raw = b"CONVERGENCE" + b"\x00" * 49 + b"trailing garbage"
    assert normalize_text(raw) == "CONVERGENCE"
    assert normalize_text("NEW_X   ") == "NEW_X"
    assert len(normalize_text("A" * 80)) == TASK_WIDTH


def test_decode_text_from_solver_buffer():
    buf = np.zeros(1, f"S{TASK_WIDTH}")
    buf[:] = "FG_START"
    assert decode_text(buf.tobytes()) == (Task.REQUEST_FG, "FG_START")


def test_decode_codes():
    assert decode_codes(np.array([3, 301], dtype=np.int32)) == (Task.REQUEST_FG, "FG")
    assert decode_codes([1, 0]) == (Task.NEW_X, "NEW_X")
    task, message = decode_codes([4, 401])
    assert task is Task.CONVERGENCE
    assert message == "CONVERGENCE: NORM OF PROJECTED GRADIENT <= PGTOL"
    task, message = decode_codes([7, 711])
    assert task is Task.ERROR
    assert message.endswith("M <= 0")
    assert decode_codes([42, 0])[0] is Task.UNKNOWN


def test_keeps_running():
    running = {task for task in Task if task.keeps_running}
    assert running == {Task.REQUEST_FG, Task.NEW_X}
