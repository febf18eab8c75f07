#!/usr/bin/env python
"""Estimate vs number of probes, with a +-1 standard error band."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import numpy as np

from stde_jax.driver import convergence_study, save_npz
from stde_jax.exact import gaussian_bump
from stde_jax.plotting import plot_convergence


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--dim", type=int, default=50)
    ap.add_argument("--outdir", default=str(_ROOT / "examples" / "outputs"))
    args = ap.parse_args()

    ref = gaussian_bump()
    x = np.linspace(-0.3, 0.3, args.dim)
    counts = np.unique(np.logspace(0, 4, 13).astype(int))
    study = convergence_study(ref.fn, x, counts, exact=ref.laplacian(x), verbose=True)

    outdir = Path(args.outdir)
    plot_convergence(study, outdir / "convergence.png")
    save_npz(outdir / "convergence.npz", n=study.sample_counts, trace=study.traces, stderr=study.stderrs)
    print(f"[convergence] wrote {outdir / 'convergence.png'}")


if __name__ == "__main__":
    main()
