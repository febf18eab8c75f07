"""Small compatibility layer around JAX.

Notes on float64
----------------
Second-order Taylor terms lose precision quickly in float32, and the
exact-enumeration check (sparse probes with ``num_samples == dim``) is only
meaningful at ~1e-12. JAX defaults to float32 unless x64 is enabled, so we
*default* to enabling x64 when this package is imported, unless the user has
explicitly set ``JAX_ENABLE_X64``.
"""

from __future__ import annotations

from typing import Any

import os

os.environ.setdefault("JAX_ENABLE_X64", "1")

import jax
import jax.numpy as jnp

# Also set via config (works even if the env var was ignored because JAX was
# already imported elsewhere, as long as it happens before first use).
jax.config.update("jax_enable_x64", os.environ.get("JAX_ENABLE_X64", "0") == "1")


def enable_x64(enable: bool = True) -> None:
    """Enable/disable float64 for JAX.

    Useful in scripts/tests to be explicit about the dtype policy.
    """
    jax.config.update("jax_enable_x64", bool(enable))


def x64_enabled() -> bool:
    return bool(jax.config.jax_enable_x64)


def default_float():
    """Floating dtype matching the active x64 policy."""
    return jnp.float64 if x64_enabled() else jnp.float32


def asarray(x: Any, dtype: Any | None = None):
    """Create a JAX array, defaulting to the active float dtype."""
    return jnp.asarray(x, dtype=default_float() if dtype is None else dtype)
