"""Shared fixtures: x64 on, the repo root importable, a seeded quadratic form."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))


def require_slow() -> None:
    """Skip unless RUN_SLOW=1; used by the many-seed statistical checks."""
    if os.environ.get("RUN_SLOW", "") != "1":
        pytest.skip("Set RUN_SLOW=1 to run slow statistical tests")


@pytest.fixture(scope="session", autouse=True)
def _x64():
    from stde_jax._compat import enable_x64

    enable_x64(True)


@pytest.fixture(scope="session")
def quadratic_case():
    """Random non-symmetric quadratic form in 6 dimensions and a point."""
    from stde_jax.exact import quadratic_form

    rng = np.random.default_rng(1234)
    A = rng.standard_normal((6, 6))
    x = rng.standard_normal(6)
    return quadratic_form(A), x
