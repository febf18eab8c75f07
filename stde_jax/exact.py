"""Exact Laplacians, used to check the stochastic estimate.

Two deterministic references:

- :func:`exact_laplacian` forms the dense Hessian with ``jax.hessian``
  (``O(d^2)`` memory; fine for the small dimensions used in checks).
- :func:`exact_laplacian_forward` sums ``e_i^T H e_i`` over all basis
  directions with the same Taylor-mode primitive the estimator uses, so it
  never materialises ``H``.

:func:`reference_functions` lists test functions with closed-form Laplacians.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict

import jax
import numpy as np

from ._compat import jnp
from .estimator import as_point
from .taylor import directional_second_derivatives


def exact_laplacian(fn: Callable, x) -> float:
    x = as_point(x)
    return float(jnp.trace(jax.hessian(fn)(x)))


def exact_laplacian_forward(fn: Callable, x, *, backend: str = "jet") -> float:
    x = as_point(x)
    basis = jnp.eye(x.shape[0], dtype=x.dtype)
    _, d2 = directional_second_derivatives(fn, x, basis, backend=backend)
    return float(jnp.sum(d2))


@dataclass(frozen=True)
class ReferenceFunction:
    name: str
    fn: Callable
    laplacian: Callable  # x -> exact Laplacian (float)


def sum_of_squares() -> ReferenceFunction:
    """``sum x_i^2``: Hessian ``2I``, Laplacian ``2d``."""
    return ReferenceFunction(
        "sum_of_squares",
        lambda x: jnp.sum(x**2),
        lambda x: 2.0 * np.asarray(x).size,
    )


def scaled_sum_of_squares(c: float) -> ReferenceFunction:
    c = float(c)
    return ReferenceFunction(
        f"scaled_sum_of_squares({c:g})",
        lambda x: c * jnp.sum(x**2),
        lambda x: 2.0 * c * np.asarray(x).size,
    )


def quadratic_form(A) -> ReferenceFunction:
    """``x^T A x`` for a (not necessarily symmetric) matrix; Laplacian ``tr(A + A^T)``."""
    A = jnp.asarray(A)
    tr = float(2.0 * jnp.trace(A))
    return ReferenceFunction("quadratic_form", lambda x: x @ A @ x, lambda x: tr)


def sum_of_sines() -> ReferenceFunction:
    return ReferenceFunction(
        "sum_of_sines",
        lambda x: jnp.sum(jnp.sin(x)),
        lambda x: float(-np.sum(np.sin(np.asarray(x)))),
    )


def gaussian_bump() -> ReferenceFunction:
    """``exp(-|x|^2/2)``: Laplacian ``(|x|^2 - d) exp(-|x|^2/2)``."""

    def lap(x):
        x = np.asarray(x, dtype=float)
        r2 = float(x @ x)
        return (r2 - x.size) * np.exp(-0.5 * r2)

    return ReferenceFunction("gaussian_bump", lambda x: jnp.exp(-0.5 * jnp.sum(x**2)), lap)


def coupled_quartic() -> ReferenceFunction:
    """``(|x|^2)^2``: dense Hessian ``4|x|^2 I + 8 x x^T``, Laplacian ``(4d + 8)|x|^2``."""

    def lap(x):
        x = np.asarray(x, dtype=float)
        return (4.0 * x.size + 8.0) * float(x @ x)

    return ReferenceFunction("coupled_quartic", lambda x: jnp.sum(x**2) ** 2, lap)


def reference_functions(dim: int, *, seed: int = 0) -> Dict[str, ReferenceFunction]:
    """Catalogue of test functions for dimension ``dim``."""
    rng = np.random.default_rng(seed)
    A = rng.standard_normal((int(dim), int(dim)))
    funcs = [
        sum_of_squares(),
        scaled_sum_of_squares(3.0),
        quadratic_form(A),
        sum_of_sines(),
        gaussian_bump(),
        coupled_quartic(),
    ]
    return {f.name: f for f in funcs}
