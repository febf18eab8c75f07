"""Stochastic Taylor derivative estimator (STDE) for the Laplacian.

For a scalar ``fn`` and a point ``x`` the Laplacian ``trace(H(x))`` is
estimated without forming ``H``:

1. draw ``num_samples`` probes ``v`` (see :mod:`stde_jax.probes`),
2. for each probe take the second-order term of ``t -> fn(x + t v)`` at
   ``t = 0``, which is ``v^T H v`` (see :mod:`stde_jax.taylor` for the
   coefficient convention),
3. average, and multiply by ``dim`` for sparse (one-hot) probes.

Because ``E[v v^T] = I`` for dense probes, ``E[v^T H v] = trace(H)`` whatever
the structure of ``H``; the estimate is unbiased and its variance decays as
``1 / num_samples``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple

import jax
import numpy as np

from ._compat import asarray, jnp
from .config import EstimatorConfig
from .errors import InvalidDimension
from .probes import check_sampling, sample_probes
from .taylor import directional_second_derivatives


class TraceEstimate(NamedTuple):
    """``(fn(x), trace estimate)``; unpacks as a pair."""

    value: float
    trace: float


@dataclass(frozen=True)
class TraceSamples:
    """Per-probe contributions behind one estimate.

    ``samples`` already carry the sparse ``dim`` rescale, so ``trace`` is
    their plain mean.
    """

    value: float
    trace: float
    samples: np.ndarray  # (num_samples,)
    std: float
    stderr: float
    mode: str

    @property
    def num_samples(self) -> int:
        return int(self.samples.size)

    def as_estimate(self) -> TraceEstimate:
        return TraceEstimate(self.value, self.trace)


def as_point(x: Any):
    """Convert ``x`` to a float vector, rejecting empty or non-1D input."""
    arr = jnp.asarray(x)
    if not jnp.issubdtype(arr.dtype, jnp.floating):
        arr = asarray(arr)
    if arr.ndim != 1:
        raise InvalidDimension(f"x must be a 1-D vector, got shape {arr.shape}")
    if arr.shape[0] <= 0:
        raise InvalidDimension("x must have at least one component (dim >= 1)")
    return arr


def as_key(rng_seed: Any):
    """Accept an integer seed or an existing ``jax.random`` key."""
    if isinstance(rng_seed, (int, np.integer)):
        return jax.random.PRNGKey(int(rng_seed))
    return rng_seed


def _probe_terms(fn: Callable, x, key, num_samples: int, mode: str, backend: str, fd_step: float):
    batch = sample_probes(key, num_samples, x.shape[0], mode, dtype=x.dtype)
    f0s, d2s = directional_second_derivatives(fn, x, batch.vectors, backend=backend, fd_step=fd_step)
    return f0s, d2s * batch.scale


def standard_error(samples, mode: str, dim: int) -> tuple[float, float]:
    """Return ``(std, stderr)`` of the mean of per-probe contributions.

    ``std`` uses ``ddof=1``. Sparse probes are drawn without replacement from
    ``dim`` directions, so the variance of their mean carries the
    finite-population factor ``(dim - N) / dim`` and vanishes at ``N == dim``.
    """
    samples = np.asarray(samples)
    n = samples.size
    if n < 2:
        stderr = 0.0 if (mode == "sparse" and n == dim) else float("nan")
        return float("nan"), stderr
    std = float(np.std(samples, ddof=1))
    stderr = std / math.sqrt(n)
    if mode == "sparse":
        stderr *= math.sqrt((dim - n) / dim)
    return std, float(stderr)


def hess_trace(fn: Callable, config: EstimatorConfig) -> Callable:
    """Build ``fn_trace(x, key) -> (fn(x), trace estimate)`` as JAX scalars.

    The returned function is pure and, for the ``jet``/``hvp`` backends, can
    be wrapped in ``jax.jit`` or differentiated further (e.g. a Laplacian
    term inside a PDE residual loss).
    """

    def fn_trace(x, key):
        if jnp.shape(x) != (config.dim,):
            raise InvalidDimension(f"x must have shape ({config.dim},), got {jnp.shape(x)}")
        x = as_point(x)
        f0s, terms = _probe_terms(fn, x, key, config.num_samples, config.mode, config.backend, config.fd_step)
        return f0s[0], jnp.mean(terms)

    return fn_trace


def estimate_samples(
    fn: Callable,
    x,
    num_samples: int = 1000,
    mode: str = "dense",
    rng_seed: Any = 0,
    *,
    backend: str = "jet",
    fd_step: float = 1e-3,
) -> TraceSamples:
    """Run the estimator and keep every per-probe contribution.

    ``stderr`` is the standard error of the mean, see :func:`standard_error`.
    """
    x = as_point(x)
    dim = int(x.shape[0])
    check_sampling(dim, num_samples, mode)
    f0s, terms = _probe_terms(fn, x, as_key(rng_seed), int(num_samples), mode, backend, fd_step)

    samples = np.asarray(terms)
    std, stderr = standard_error(samples, mode, dim)
    return TraceSamples(
        value=float(f0s[0]),
        trace=float(jnp.mean(terms)),
        samples=samples,
        std=std,
        stderr=float(stderr),
        mode=mode,
    )


def estimate(
    fn: Callable,
    x,
    num_samples: int = 1000,
    mode: str = "dense",
    rng_seed: Any = 0,
    *,
    backend: str = "jet",
    fd_step: float = 1e-3,
) -> TraceEstimate:
    """Estimate ``(fn(x), trace(Hessian of fn at x))``.

    Raises ``InvalidDimension`` for an empty ``x``, ``InvalidSampleCount`` for
    ``num_samples <= 0`` or sparse sampling with ``num_samples > dim`` and
    ``NonDifferentiableFunction`` when the backend cannot expand ``fn``.
    """
    x = as_point(x)
    check_sampling(int(x.shape[0]), num_samples, mode)
    f0s, terms = _probe_terms(fn, x, as_key(rng_seed), int(num_samples), mode, backend, fd_step)
    return TraceEstimate(float(f0s[0]), float(jnp.mean(terms)))


def estimate_with_config(fn: Callable, x, config: EstimatorConfig) -> TraceEstimate:
    x = as_point(x)
    if x.shape[0] != config.dim:
        raise InvalidDimension(f"x has dim {x.shape[0]} but config.dim={config.dim}")
    return estimate(
        fn,
        x,
        num_samples=config.num_samples,
        mode=config.mode,
        rng_seed=config.seed,
        backend=config.backend,
        fd_step=config.fd_step,
    )


def laplacian(fn: Callable, x, num_samples: int = 1000, mode: str = "dense", rng_seed: Any = 0, **kwargs) -> float:
    """Only the trace part of :func:`estimate`."""
    return estimate(fn, x, num_samples, mode, rng_seed, **kwargs).trace
