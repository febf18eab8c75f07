#!/usr/bin/env python
"""Laplacian of sum(x**2) at x = (1, 1, 1, 1, 1).

fn(x) = 5 and the exact Laplacian is 2 * dim = 10. Settings are read from
``examples/data/stde.nml``.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Allow running from the examples/ directory without installing the package.
_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from stde_jax.config import load_config
from stde_jax.driver import run_reference_scenario


def main():
    cfg, _ = load_config(_ROOT / "examples" / "data" / "stde.nml")
    run_reference_scenario(cfg)

    # Sparse probes with num_samples == dim enumerate every basis direction once.
    run_reference_scenario(cfg.with_(mode="sparse", num_samples=cfg.dim))


if __name__ == "__main__":
    main()
