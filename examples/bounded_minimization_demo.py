"""
Example: Bound-constrained minimization with lbfgsb_rc

Runs the reverse-communication driver on a few small problems: a box
constrained Rosenbrock valley, a torch objective with autograd gradients,
and a run that an evaluator cancels part way through.
"""

import numpy as np
import torch

from lbfgsb_rc import Cancellation, Status, lbfgsb, set_log_level, torch_evaluator


def rosenbrock(x):
    return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2


def rosenbrock_grad(x):
    return np.array(
        [
            -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
            200 * (x[1] - x[0] ** 2),
        ]
    )


def example_box_constrained_rosenbrock():
    """Rosenbrock restricted to x0 <= 0.5, printing progress every 5 iterations."""
    print("=" * 60)
    print("Example 1: Rosenbrock with an active upper bound")
    print("=" * 60)

    lower = np.array([-2.0, -2.0])
    upper = np.array([0.5, 2.0])
    opts = {
        "x0": np.array([-1.2, 1.0]),
        "printEvery": 5,
        "errFcn": lambda x: float(np.linalg.norm(x - np.array([0.5, 0.25]))),
    }
    result = lbfgsb((rosenbrock, rosenbrock_grad), lower, upper, opts)
    print(f"Status: {result.status.value} ({result.message})")
    print(f"x = {result.x}, f = {result.fun:.3e}")
    print(f"Iterations: {result.nit} outer, {result.total_its} total")
    print()


def example_torch_objective():
    """Gradient supplied by torch autograd."""
    print("=" * 60)
    print("Example 2: torch objective")
    print("=" * 60)

    target = torch.tensor([1.0, -2.0, 0.5], dtype=torch.float64)
    evaluator = torch_evaluator(lambda t: ((t - target) ** 2).sum() + 0.1 * t.abs().sum())
    result = lbfgsb(evaluator, np.full(3, -1.0), np.full(3, 1.0), {"outputFcn": lambda x: float(x.sum())})
    print(f"Status: {result.status.value}")
    print(f"x = {result.x}")
    print("History (f, ||g||_inf, sum(x)):")
    print(result.history)
    print()


def example_cancellation():
    """Stop the run once the objective drops below a threshold."""
    print("=" * 60)
    print("Example 3: cancelling from the evaluator")
    print("=" * 60)

    cancel = Cancellation()

    def evaluator(x):
        f = rosenbrock(x)
        if f < 1.0:
            cancel.set(f"f = {f:.3f} is good enough")
        return f, rosenbrock_grad(x)

    result = lbfgsb(evaluator, [-5.0, -5.0], [5.0, 5.0], {"x0": [-1.2, 1.0]}, cancel=cancel)
    assert result.status is Status.INFEASIBLE
    print(f"Stopped after {result.nit} iterations: {cancel.reason}")
    print()


if __name__ == "__main__":
    set_log_level("INFO")
    example_box_constrained_rosenbrock()
    example_torch_objective()
    example_cancellation()
