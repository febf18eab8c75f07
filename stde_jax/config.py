"""Estimator configuration.

Groups the knobs of a Laplacian estimate (dimension, probe count, sampling
mode, seed, derivative backend) into one frozen object that is passed to the
estimator explicitly. It can be read from an ``&STDE`` namelist file.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from .namelist import Namelist, read_namelist
from .probes import PROBE_MODES, check_sampling
from .taylor import BACKENDS


@dataclass(frozen=True)
class EstimatorConfig:
    dim: int
    num_samples: int = 1000
    mode: str = "dense"
    seed: int = 0
    backend: str = "jet"
    fd_step: float = 1e-3

    def __post_init__(self):
        check_sampling(self.dim, self.num_samples, self.mode)
        if self.backend not in BACKENDS:
            raise ValueError(f"backend must be one of {BACKENDS}, got {self.backend!r}")
        if not self.fd_step > 0.0:
            raise ValueError(f"fd_step must be > 0, got {self.fd_step}")

    @property
    def sparse(self) -> bool:
        return self.mode == "sparse"

    def with_(self, **changes) -> "EstimatorConfig":
        """Return a copy with some fields replaced (re-validated)."""
        return replace(self, **changes)


def config_from_namelist(nml: Namelist) -> EstimatorConfig:
    dim = nml.get_int("DIM", 0)
    num_samples = nml.get_int("NUM_SAMPLES", nml.get_int("RAND_BATCH_SIZE", 1000))
    if "MODE" in nml:
        mode = nml.get_str("MODE").lower()
        if "SPARSE" in nml and nml.get_bool("SPARSE") != (mode == "sparse"):
            raise ValueError(f"SPARSE={nml.get_bool('SPARSE')} contradicts MODE={mode!r}")
    else:
        mode = "sparse" if nml.get_bool("SPARSE", False) else "dense"
    if mode not in PROBE_MODES:
        raise ValueError(f"MODE must be one of {PROBE_MODES}, got {mode!r}")
    return EstimatorConfig(
        dim=dim,
        num_samples=num_samples,
        mode=mode,
        seed=nml.get_int("SEED", 0),
        backend=nml.get_str("BACKEND", "jet").lower(),
        fd_step=nml.get_float("FD_STEP", 1e-3),
    )


def load_config(path: str | Path) -> tuple[EstimatorConfig, Namelist]:
    nml = read_namelist(path)
    cfg = config_from_namelist(nml)
    return cfg, nml
