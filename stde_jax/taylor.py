"""Second-order directional derivatives ``v^T H v`` of a scalar function.

A backend maps ``(fn, x, v)`` to ``(fn(x), v^T H v)`` for a single probe.

Coefficient convention
----------------------
``jax.experimental.jet`` propagates *derivative* coefficients: for the input
path ``x(t) = x + t v`` (series ``(v, 0)``), the ``k``-th output term is
``d^k/dt^k fn(x(t))`` at ``t = 0``, not divided by ``k!``. The second term is
therefore ``v^T H v`` exactly and the ``jet`` backend applies no correction.
Code that works with normalized Taylor coefficients (``c_2 = v^T H v / 2``)
should go through :func:`directional_from_coefficient`.

Backends
--------
- ``jet``: Taylor-mode AD, one forward pass per probe (default).
- ``hvp``: forward-over-reverse Hessian-vector product, ``v . (H v)``.
- ``fd``: central second difference along ``v``; approximate, but only needs
  function evaluations, so ``fn`` may be plain NumPy code.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Tuple

import jax
import numpy as np
from jax.experimental import jet

from ._compat import jnp
from .errors import NonDifferentiableFunction


BACKENDS = ("jet", "hvp", "fd")


def directional_from_coefficient(coef, order: int = 2, *, normalized: bool = False):
    """Convert an order-``order`` Taylor term into a directional derivative.

    ``normalized=True`` means ``coef`` is the power-series coefficient
    (derivative / order!), which must be scaled back by ``order!``.
    """
    if normalized:
        return coef * math.factorial(int(order))
    return coef


def _check_scalar(f0) -> None:
    if jnp.ndim(f0) != 0:
        raise ValueError(f"fn must return a scalar, got shape {jnp.shape(f0)}")


def taylor_coefficients(fn: Callable, x, v, order: int = 2):
    """Return ``(fn(x), [d^k/dt^k fn(x + t v) at t=0 for k=1..order])``."""
    order = int(order)
    if order < 1:
        raise ValueError("order must be >= 1")
    series = (v,) + tuple(jnp.zeros_like(v) for _ in range(order - 1))
    try:
        f0, terms = jet.jet(fn, (x,), (series,))
    except KeyError as e:
        # jet looks rules up in a dict keyed by primitive; a miss is a KeyError
        prim = e.args[0] if e.args else None
        if not hasattr(prim, "bind"):
            raise
        raise NonDifferentiableFunction(
            f"no Taylor (jet) rule for primitive {getattr(prim, 'name', prim)!r}"
        ) from e
    _check_scalar(f0)
    return f0, list(terms)


def jet_directional(fn: Callable, x, v):
    f0, terms = taylor_coefficients(fn, x, v, order=2)
    return f0, directional_from_coefficient(terms[1], 2, normalized=False)


def hvp_directional(fn: Callable, x, v):
    f0 = fn(x)
    _check_scalar(f0)
    _, hv = jax.jvp(jax.grad(fn), (x,), (v,))
    return f0, jnp.vdot(v, hv)


def fd_directional(fn: Callable, x, v, step: float = 1e-3):
    h = float(step)
    f0 = fn(x)
    _check_scalar(f0)
    fp = fn(x + h * v)
    fm = fn(x - h * v)
    return f0, (fp - 2.0 * f0 + fm) / (h * h)


@dataclass(frozen=True)
class Backend:
    name: str
    directional: Callable[..., Tuple[Any, Any]]
    traceable: bool  # safe to vmap/jit over probes


_REGISTRY = {
    "jet": Backend("jet", jet_directional, True),
    "hvp": Backend("hvp", hvp_directional, True),
    "fd": Backend("fd", fd_directional, False),
}


def get_backend(name: str) -> Backend:
    try:
        return _REGISTRY[name]
    except KeyError:
        raise ValueError(f"backend must be one of {BACKENDS}, got {name!r}") from None


def directional_second_derivatives(
    fn: Callable,
    x,
    vectors,
    *,
    backend: str = "jet",
    fd_step: float = 1e-3,
):
    """Evaluate ``(fn(x), v^T H v)`` for every row of ``vectors``.

    Returns two ``(num_samples,)`` arrays. Traceable backends are vectorised
    with ``jax.vmap``; ``fd`` loops over probes with concrete arrays so that
    ``fn`` does not have to be traceable.
    """
    b = get_backend(backend)
    try:
        if b.traceable:
            return jax.vmap(lambda v: b.directional(fn, x, v))(vectors)
        f0s = []
        d2s = []
        for v in vectors:
            f0, d2 = fd_directional(fn, x, v, step=fd_step)
            f0s.append(np.asarray(f0))
            d2s.append(np.asarray(d2))
        return jnp.asarray(np.stack(f0s)), jnp.asarray(np.stack(d2s))
    except NonDifferentiableFunction:
        raise
    except NotImplementedError as e:
        raise NonDifferentiableFunction(
            f"{backend} backend cannot expand fn to second order: {e}"
        ) from e
