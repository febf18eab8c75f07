"""High-level helpers for driver scripts.

These functions wrap the estimator with the bookkeeping a script wants
(exact comparison, standard errors, printing) while the core routines in
:mod:`stde_jax.estimator` stay silent and pure.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

import numpy as np

from ._compat import jnp
from .config import EstimatorConfig, load_config
from .diagnostics import print_estimate_report, print_summary, summarize_array
from .errors import InvalidDimension
from .estimator import as_point, estimate_samples
from .exact import sum_of_squares


@dataclass(frozen=True)
class LaplacianRun:
    """Container returned by ``run_laplacian``."""

    config: EstimatorConfig
    x: np.ndarray
    value: float
    trace: float
    stderr: float
    exact: Optional[float]
    samples: np.ndarray

    @property
    def abs_error(self) -> float:
        if self.exact is None:
            return float("nan")
        return abs(self.trace - self.exact)


@dataclass(frozen=True)
class ConvergenceStudy:
    """Estimates for increasing sample counts at a fixed point."""

    sample_counts: np.ndarray
    traces: np.ndarray
    stderrs: np.ndarray
    exact: Optional[float]
    mode: str


def run_laplacian(
    fn: Callable,
    x,
    config: EstimatorConfig,
    *,
    exact: Optional[float] = None,
    verbose: bool = True,
) -> LaplacianRun:
    """Estimate the Laplacian of ``fn`` at ``x`` with ``config``.

    Parameters
    ----------
    exact:
        Known Laplacian at ``x``; only used for reporting.
    verbose:
        If True (default), print the estimate, its standard error and the
        error against ``exact``.
    """
    x = as_point(x)
    if x.shape[0] != config.dim:
        raise InvalidDimension(f"x has dim {x.shape[0]} but config.dim={config.dim}")
    ts = estimate_samples(
        fn,
        x,
        num_samples=config.num_samples,
        mode=config.mode,
        rng_seed=config.seed,
        backend=config.backend,
        fd_step=config.fd_step,
    )
    run = LaplacianRun(
        config=config,
        x=np.asarray(x),
        value=ts.value,
        trace=ts.trace,
        stderr=ts.stderr,
        exact=None if exact is None else float(exact),
        samples=ts.samples,
    )
    if verbose:
        print_estimate_report(run)
        print_summary(summarize_array("v^T H v (scaled)", ts.samples), indent="  ")
    return run


def run_reference_scenario(config: EstimatorConfig | None = None, *, verbose: bool = True) -> LaplacianRun:
    """``fn(x) = sum x_i^2`` at ``x = (1, ..., 1)``; exact Laplacian ``2 * dim``.

    The default is ``dim=5``, 1000 dense probes, seed 0: ``fn(x) = 5`` and the
    estimate is compared against ``10``.
    """
    if config is None:
        config = EstimatorConfig(dim=5, num_samples=1000, mode="dense", seed=0)
    ref = sum_of_squares()
    x = jnp.ones((config.dim,))
    if verbose:
        print(f"[run_reference_scenario] fn=sum(x**2) x=ones({config.dim})")
    return run_laplacian(ref.fn, x, config, exact=ref.laplacian(x), verbose=verbose)


def run_from_namelist(fn: Callable, x, path: str | Path, *, exact: Optional[float] = None, verbose: bool = True):
    """Read an ``&STDE`` namelist and run the estimator with it."""
    cfg, _ = load_config(path)
    if verbose:
        print(f"[run_from_namelist] config={path}")
    return run_laplacian(fn, x, cfg, exact=exact, verbose=verbose)


def convergence_study(
    fn: Callable,
    x,
    sample_counts: Sequence[int],
    *,
    mode: str = "dense",
    seed: int = 0,
    backend: str = "jet",
    exact: Optional[float] = None,
    verbose: bool = False,
) -> ConvergenceStudy:
    """Estimate with each sample count in ``sample_counts`` (same seed)."""
    x = as_point(x)
    counts = np.asarray([int(n) for n in sample_counts], dtype=int)
    traces = np.zeros(counts.shape, dtype=float)
    stderrs = np.zeros(counts.shape, dtype=float)
    for i, n in enumerate(counts):
        ts = estimate_samples(fn, x, num_samples=int(n), mode=mode, rng_seed=seed, backend=backend)
        traces[i] = ts.trace
        stderrs[i] = ts.stderr
        if verbose:
            print(f"[convergence_study] n={int(n):6d} trace={ts.trace:.8e} stderr={ts.stderr:.3e}")
    return ConvergenceStudy(
        sample_counts=counts,
        traces=traces,
        stderrs=stderrs,
        exact=None if exact is None else float(exact),
        mode=mode,
    )


def save_npz(path: str | Path, **arrays) -> Path:
    """Save arrays into a NumPy `.npz` file and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savez(path, **arrays)
    return path


def save_run(path: str | Path, run: LaplacianRun) -> Path:
    """Store a run (config scalars, x, samples) in an `.npz` file."""
    cfg = run.config
    return save_npz(
        path,
        x=run.x,
        samples=run.samples,
        value=run.value,
        trace=run.trace,
        stderr=run.stderr,
        exact=np.nan if run.exact is None else run.exact,
        dim=cfg.dim,
        num_samples=cfg.num_samples,
        mode=cfg.mode,
        seed=cfg.seed,
        backend=cfg.backend,
    )
