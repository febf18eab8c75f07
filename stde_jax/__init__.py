"""stde_jax: Laplacians by stochastic Taylor derivative estimation (STDE) in JAX.

The trace of the Hessian of a scalar function is estimated from second-order
directional derivatives ``v^T H v`` along random probes, each obtained from a
Taylor-mode (jet) expansion of ``t -> fn(x + t v)``. The dense Hessian is never
formed.

Contents:
- probe sampling (dense Rademacher, Gaussian, sparse one-hot)
- second-order directional derivative backends (jet, hvp, finite differences)
- the estimator and a jit-able closure form
- exact references and test functions with closed-form Laplacians
- ``&STDE`` namelist configuration, drivers and plotting helpers
"""

from .errors import InvalidDimension, InvalidSampleCount, NonDifferentiableFunction
from .config import EstimatorConfig, config_from_namelist, load_config
from .namelist import Namelist, read_namelist, parse_namelist
from .probes import (
    PROBE_MODES,
    ProbeBatch,
    check_sampling,
    gaussian_probes,
    rademacher_probes,
    sample_probes,
    sparse_probes,
)
from .taylor import (
    BACKENDS,
    directional_from_coefficient,
    directional_second_derivatives,
    taylor_coefficients,
)
from .estimator import (
    TraceEstimate,
    TraceSamples,
    estimate,
    estimate_samples,
    estimate_with_config,
    hess_trace,
    laplacian,
    standard_error,
)
from .exact import ReferenceFunction, exact_laplacian, exact_laplacian_forward, reference_functions
from .diagnostics import Summary, print_estimate_report, print_summary, summarize_array
from .driver import (
    ConvergenceStudy,
    LaplacianRun,
    convergence_study,
    run_from_namelist,
    run_laplacian,
    run_reference_scenario,
    save_npz,
    save_run,
)
from .plotting import convergence_band, plot_convergence

__all__ = [
    "InvalidDimension",
    "InvalidSampleCount",
    "NonDifferentiableFunction",
    "EstimatorConfig",
    "config_from_namelist",
    "load_config",
    "Namelist",
    "read_namelist",
    "parse_namelist",
    "PROBE_MODES",
    "ProbeBatch",
    "check_sampling",
    "gaussian_probes",
    "rademacher_probes",
    "sample_probes",
    "sparse_probes",
    "BACKENDS",
    "directional_from_coefficient",
    "directional_second_derivatives",
    "taylor_coefficients",
    "TraceEstimate",
    "TraceSamples",
    "estimate",
    "estimate_samples",
    "estimate_with_config",
    "hess_trace",
    "laplacian",
    "standard_error",
    "ReferenceFunction",
    "exact_laplacian",
    "exact_laplacian_forward",
    "reference_functions",
    "Summary",
    "print_estimate_report",
    "print_summary",
    "summarize_array",
    "ConvergenceStudy",
    "LaplacianRun",
    "convergence_study",
    "run_from_namelist",
    "run_laplacian",
    "run_reference_scenario",
    "save_npz",
    "save_run",
    "convergence_band",
    "plot_convergence",
]
