#!/usr/bin/env python
"""Compare probe distributions on a function with a dense Hessian.

``(|x|^2)^2`` has Hessian ``4|x|^2 I + 8 x x^T``, so dense probes are no longer
exact and the three modes show their different variances.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import jax

from stde_jax.config import EstimatorConfig
from stde_jax.driver import run_laplacian
from stde_jax.exact import coupled_quartic


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--dim", type=int, default=16)
    ap.add_argument("--num-samples", type=int, default=1000)
    ap.add_argument("--seed", type=int, default=0)
    args = ap.parse_args()

    ref = coupled_quartic()
    x = jax.random.normal(jax.random.PRNGKey(args.seed), (args.dim,))
    exact = ref.laplacian(x)

    for mode in ("dense", "gaussian"):
        cfg = EstimatorConfig(dim=args.dim, num_samples=args.num_samples, mode=mode, seed=args.seed)
        run_laplacian(ref.fn, x, cfg, exact=exact)
    for n in (args.dim // 4, args.dim):
        cfg = EstimatorConfig(dim=args.dim, num_samples=max(n, 1), mode="sparse", seed=args.seed)
        run_laplacian(ref.fn, x, cfg, exact=exact)


if __name__ == "__main__":
    main()
