"""Pytest configuration and shared fixtures for lbfgsb_rc tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- A scripted reverse-communication solver for driver tests
"""

import os
from typing import List, Sequence, Tuple

import numpy as np
import pytest
import torch

from lbfgsb_rc.task import Task
from lbfgsb_rc.workspace import allocate


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Seed numpy and torch globally before every test."""
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    np.random.seed(seed)
    torch.manual_seed(seed)


class ScriptedSolver:
    """Solver that replays a fixed list of tasks.

    Every step nudges ``x`` by ``step`` so tests can see that the driver
    evaluates at the point the solver proposed. Each call is logged with
    the ``x`` object and the ``f`` it received.
    """

    def __init__(self, tasks: Sequence[Task], step: float = 1.0) -> None:
        self.tasks = list(tasks)
        self.step_size = step
        self.calls: List[Tuple[np.ndarray, float, np.ndarray]] = []

    def allocate(self, n, m):
        return allocate(n, m)

    def step(self, m, x, lower, upper, nbd, f, g, factr, pgtol, workspace):
        self.calls.append((x, f, g.copy()))
        index = len(self.calls) - 1
        task = self.tasks[index] if index < len(self.tasks) else Task.REQUEST_FG
        if task is Task.REQUEST_FG:
            x += self.step_size
        return task, "FG_LNSRCH" if task is Task.REQUEST_FG else task.value

    def solver_message(self, workspace):
        return "scripted"


@pytest.fixture
def scripted():
    """Factory for :class:`ScriptedSolver`."""
    return ScriptedSolver
