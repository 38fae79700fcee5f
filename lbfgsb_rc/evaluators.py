"""Build the ``x -> (f, g)`` evaluator the driver calls.

Callers may hand over a single function returning both values, a
``(fun, grad)`` pair, or a torch function whose gradient comes from
autograd.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Tuple

import numpy as np
import torch

from .core import Array, Evaluator


def combine(fun: Callable[[Array], float], grad: Callable[[Array], Array]) -> Evaluator:
    """Join separate objective and gradient functions into one evaluator."""

    def evaluator(x: Array) -> Tuple[float, Array]:
        return fun(x), grad(x)

    return evaluator


def as_evaluator(fcn: Any) -> Evaluator:
    """Normalise ``fcn`` into an evaluator.

    Args:
        fcn: A callable returning ``(f, g)`` or a two element sequence of
            callables ``(fun, grad)``.

    Raises:
        TypeError: ``fcn`` is neither form.
    """
    if isinstance(fcn, (tuple, list)):
        if len(fcn) != 2 or not all(callable(part) for part in fcn):
            raise TypeError("expected a (fun, grad) pair of callables")
        return combine(fcn[0], fcn[1])
    if callable(fcn):
        return fcn
    raise TypeError(f"expected a callable or a (fun, grad) pair, got {type(fcn).__name__}")


def torch_evaluator(
    fn: Callable[[torch.Tensor], torch.Tensor],
    device: Optional[torch.device] = None,
) -> Evaluator:
    """Evaluator computing the gradient of a torch scalar function.

    Parameters
    ----------
    fn:
        Maps a float64 tensor of shape ``(n,)`` to a scalar tensor.
    device:
        Device the tensor is placed on. Defaults to the CPU.

    Example
    -------
    >>> evaluator = torch_evaluator(lambda t: ((t - 3.0) ** 2).sum())
    >>> f, g = evaluator(np.zeros(2))
    >>> f, g.tolist()
    (18.0, [-6.0, -6.0])
    """
    target = device if device is not None else torch.device("cpu")

    def evaluator(x: Array) -> Tuple[float, Array]:
        t = torch.tensor(x, dtype=torch.float64, device=target, requires_grad=True)
        value = fn(t)
        if value.numel() != 1:
            raise ValueError(f"objective must return a scalar, got shape {tuple(value.shape)}")
        grad = None
        if value.requires_grad:
            (grad,) = torch.autograd.grad(value.reshape(()), t, allow_unused=True)
        if grad is None:
            grad = torch.zeros_like(t)
        return float(value.detach().cpu()), grad.detach().cpu().numpy().astype(np.float64)

    return evaluator


__all__ = ["as_evaluator", "combine", "torch_evaluator"]
