"""Printing helpers for estimator runs.

NumPy-only, so they work on JAX arrays, NumPy arrays and plain lists alike.
Library functions never print; drivers call these behind ``verbose=``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Summary:
    name: str
    n: int
    dtype: str
    min: float
    max: float
    mean: float
    std: float
    n_nan: int
    n_inf: int
    q: Tuple[float, float, float]


def summarize_array(name: str, x: Any, *, q: Sequence[float] = (0.05, 0.5, 0.95)) -> Summary:
    """Basic stats of the finite entries of a flattened array."""
    a = np.asarray(x).reshape(-1)
    if a.size == 0:
        nan = float("nan")
        return Summary(name, 0, str(a.dtype), nan, nan, nan, nan, 0, 0, (nan,) * len(q))

    is_float = np.issubdtype(a.dtype, np.floating)
    n_nan = int(np.sum(np.isnan(a))) if is_float else 0
    n_inf = int(np.sum(np.isinf(a))) if is_float else 0
    finite = a[np.isfinite(a)] if is_float else a
    if finite.size == 0:
        finite = a

    return Summary(
        name=name,
        n=int(a.size),
        dtype=str(a.dtype),
        min=float(np.min(finite)),
        max=float(np.max(finite)),
        mean=float(np.mean(finite)),
        std=float(np.std(finite)),
        n_nan=n_nan,
        n_inf=n_inf,
        q=tuple(float(np.quantile(finite, qq)) for qq in q),
    )


def print_summary(s: Summary, *, indent: str = "") -> None:
    print(
        f"{indent}{s.name}: n={s.n} dtype={s.dtype} "
        f"min={s.min:.6g} max={s.max:.6g} mean={s.mean:.6g} std={s.std:.6g}"
    )
    print(f"{indent}  q={tuple(round(v, 6) for v in s.q)}")
    if s.n_nan or s.n_inf:
        print(f"{indent}  counts: nan={s.n_nan} inf={s.n_inf}")


def relative_error(estimate: float, exact: Optional[float]) -> float:
    if exact is None:
        return float("nan")
    if exact == 0.0:
        return abs(estimate)
    return abs(estimate - exact) / abs(exact)


def print_estimate_report(run, *, indent: str = "") -> None:
    """Print fn(x), the estimate and, when known, the exact Laplacian."""
    cfg = run.config
    print(
        f"{indent}[stde] dim={cfg.dim} num_samples={cfg.num_samples} "
        f"mode={cfg.mode} backend={cfg.backend} seed={cfg.seed}"
    )
    print(f"{indent}  fn(x)            = {run.value:.10g}")
    print(f"{indent}  laplacian (stde) = {run.trace:.10g}  +- {run.stderr:.3g}")
    if run.exact is not None:
        err = abs(run.trace - run.exact)
        print(f"{indent}  laplacian (exact)= {run.exact:.10g}")
        print(f"{indent}  abs err={err:.3e} rel err={relative_error(run.trace, run.exact):.3e}")
        if run.stderr > 0.0 and math.isfinite(run.stderr):
            print(f"{indent}  err/stderr={err / run.stderr:.2f}")
