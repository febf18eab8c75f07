"""Figures for estimator convergence.

Matplotlib is optional and imported lazily (headless ``Agg`` backend), so the
rest of the package does not depend on it.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np


def convergence_band(study, *, nsigma: float = 1.0) -> tuple[np.ndarray, np.ndarray]:
    """Lower/upper curves ``trace -+ nsigma * stderr``."""
    traces = np.asarray(study.traces, dtype=float)
    err = float(nsigma) * np.nan_to_num(np.asarray(study.stderrs, dtype=float))
    return traces - err, traces + err


def plot_convergence(study, path: str | Path | None = None, *, ax=None, title: str | None = None):
    """Plot the estimate and a +-1 stderr band versus sample count.

    Returns the matplotlib figure; writes it to ``path`` when given.
    """
    import matplotlib as mpl

    mpl.use("Agg", force=True)
    import matplotlib.pyplot as plt

    if ax is None:
        fig, ax = plt.subplots(figsize=(6.0, 4.0))
    else:
        fig = ax.figure

    n = np.asarray(study.sample_counts)
    lo, hi = convergence_band(study)
    ax.fill_between(n, lo, hi, color="C0", alpha=0.25, lw=0, label="+-1 stderr")
    ax.plot(n, study.traces, "o-", color="C0", ms=3, label=f"STDE ({study.mode})")
    if study.exact is not None:
        ax.axhline(study.exact, color="k", ls="--", lw=1.0, label="exact")
    ax.set_xscale("log")
    ax.set_xlabel("number of probes")
    ax.set_ylabel("Laplacian estimate")
    ax.set_title(title or "Hessian trace estimate vs probe count")
    ax.legend(loc="best")
    fig.tight_layout()

    if path is not None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path, dpi=180)
    return fig
