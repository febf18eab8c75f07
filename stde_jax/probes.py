"""Random probe vectors for Hessian trace estimation.

Every mode draws ``v`` with ``E[v] = 0``. The estimator relies on

    E[v^T H v] = trace(H E[v v^T])

so the second moment decides the rescale applied to the raw mean:

- ``dense``: Rademacher components (i.i.d. +-1), ``E[v v^T] = I``, scale 1.
- ``gaussian``: i.i.d. standard normal components, ``E[v v^T] = I``, scale 1.
- ``sparse``: one-hot basis vectors, indices drawn uniformly *without
  replacement* from ``{0, ..., dim-1}``. Each index is equally likely, so
  ``E[v v^T] = I / dim`` and the mean must be multiplied by ``dim``.

With ``num_samples == dim`` the sparse batch is a permutation of the identity
and the rescaled mean is the exact trace.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import jax

from ._compat import default_float, jnp
from .errors import InvalidDimension, InvalidSampleCount


PROBE_MODES = ("dense", "sparse", "gaussian")


@dataclass(frozen=True)
class ProbeBatch:
    vectors: Any  # (num_samples, dim)
    scale: float  # multiply the raw mean by this to stay unbiased

    @property
    def num_samples(self) -> int:
        return int(self.vectors.shape[0])

    @property
    def dim(self) -> int:
        return int(self.vectors.shape[1])


def check_sampling(dim: int, num_samples: int, mode: str) -> None:
    """Validate a (dim, num_samples, mode) triple before any sampling happens."""
    if mode not in PROBE_MODES:
        raise ValueError(f"mode must be one of {PROBE_MODES}, got {mode!r}")
    if int(dim) <= 0:
        raise InvalidDimension(f"dim must be >= 1, got {dim}")
    if int(num_samples) <= 0:
        raise InvalidSampleCount(f"num_samples must be >= 1, got {num_samples}")
    if mode == "sparse" and int(num_samples) > int(dim):
        raise InvalidSampleCount(
            f"sparse sampling draws without replacement: num_samples={num_samples} exceeds dim={dim}"
        )


def rademacher_probes(key, num_samples: int, dim: int, dtype=None):
    """(num_samples, dim) array of independent +-1 entries."""
    dtype = default_float() if dtype is None else dtype
    return jax.random.rademacher(key, (int(num_samples), int(dim)), dtype=dtype)


def gaussian_probes(key, num_samples: int, dim: int, dtype=None):
    dtype = default_float() if dtype is None else dtype
    return jax.random.normal(key, (int(num_samples), int(dim)), dtype=dtype)


def sparse_indices(key, num_samples: int, dim: int):
    """Basis indices drawn uniformly without replacement."""
    return jax.random.choice(key, int(dim), shape=(int(num_samples),), replace=False)


def sparse_probes(key, num_samples: int, dim: int, dtype=None):
    """(num_samples, dim) one-hot rows, no basis direction repeated."""
    dtype = default_float() if dtype is None else dtype
    idx = sparse_indices(key, num_samples, dim)
    return jnp.eye(int(dim), dtype=dtype)[idx]


def probe_scale(mode: str, dim: int) -> float:
    return float(dim) if mode == "sparse" else 1.0


def sample_probes(key, num_samples: int, dim: int, mode: str = "dense", dtype=None) -> ProbeBatch:
    """Draw a validated batch of probes for ``mode``."""
    check_sampling(dim, num_samples, mode)
    if mode == "dense":
        vectors = rademacher_probes(key, num_samples, dim, dtype)
    elif mode == "gaussian":
        vectors = gaussian_probes(key, num_samples, dim, dtype)
    else:
        vectors = sparse_probes(key, num_samples, dim, dtype)
    return ProbeBatch(vectors=vectors, scale=probe_scale(mode, dim))
