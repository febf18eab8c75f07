from __future__ import annotations

import itertools

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from stde_jax.config import EstimatorConfig
from stde_jax.errors import InvalidDimension, InvalidSampleCount
from stde_jax.estimator import (
    TraceEstimate,
    estimate,
    estimate_samples,
    estimate_with_config,
    hess_trace,
    laplacian,
    standard_error,
)
from stde_jax.exact import coupled_quartic, sum_of_sines


def sum_of_squares(x):
    return jnp.sum(x**2)


def test_reference_scenario_sum_of_squares():
    value, trace = estimate(sum_of_squares, jnp.ones(5), num_samples=1000, mode="dense", rng_seed=0)
    assert value == 5.0
    assert abs(trace - 10.0) < 0.5
    # H = 2I, so every Rademacher probe gives v^T H v = 2 * dim exactly
    assert np.isclose(trace, 10.0, rtol=0.0, atol=1e-12)


def test_estimate_is_a_pair():
    out = estimate(sum_of_squares, [1.0, 2.0], num_samples=4)
    assert isinstance(out, TraceEstimate)
    value, trace = out
    assert value == out.value == 5.0
    assert trace == out.trace


def test_integer_point_is_promoted_to_float():
    value, trace = estimate(sum_of_squares, [1, 1, 1], num_samples=8)
    assert value == 3.0
    assert np.isclose(trace, 6.0)


def test_same_seed_is_bit_identical(quadratic_case):
    ref, x = quadratic_case
    for mode, n in (("dense", 200), ("sparse", 4), ("gaussian", 50)):
        a = estimate(ref.fn, x, num_samples=n, mode=mode, rng_seed=7)
        b = estimate(ref.fn, x, num_samples=n, mode=mode, rng_seed=7)
        assert a == b


def test_different_seeds_differ(quadratic_case):
    ref, x = quadratic_case
    a = estimate(ref.fn, x, num_samples=20, rng_seed=0)
    b = estimate(ref.fn, x, num_samples=20, rng_seed=1)
    assert a.value == b.value
    assert a.trace != b.trace


def test_key_and_int_seed_are_equivalent(quadratic_case):
    ref, x = quadratic_case
    a = estimate(ref.fn, x, num_samples=32, rng_seed=3)
    b = estimate(ref.fn, x, num_samples=32, rng_seed=jax.random.PRNGKey(3))
    assert a == b


def test_scale_consistency(quadratic_case):
    ref, x = quadratic_case
    base = estimate(ref.fn, x, num_samples=100, rng_seed=2).trace
    for c in (0.5, 3.0, -2.0):
        scaled = estimate(lambda y: c * ref.fn(y), x, num_samples=100, rng_seed=2).trace
        assert np.isclose(scaled, c * base, rtol=1e-12, atol=1e-12)


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_sparse_full_enumeration_is_exact(quadratic_case, seed):
    ref, x = quadratic_case
    dim = len(x)
    ts = estimate_samples(ref.fn, x, num_samples=dim, mode="sparse", rng_seed=seed)
    assert np.isclose(ts.trace, ref.laplacian(x), rtol=1e-12, atol=1e-10)
    assert ts.stderr == 0.0


def test_sparse_full_enumeration_of_nonquadratic_function():
    ref = coupled_quartic()
    x = jnp.linspace(-1.0, 1.5, 4)
    _, trace = estimate(ref.fn, x, num_samples=4, mode="sparse", rng_seed=9)
    assert np.isclose(trace, ref.laplacian(x), rtol=1e-12)


def test_dense_estimate_within_standard_error(quadratic_case):
    ref, x = quadratic_case
    exact = ref.laplacian(x)
    ts = estimate_samples(ref.fn, x, num_samples=20000, mode="dense", rng_seed=0)
    assert ts.num_samples == 20000
    assert np.isfinite(ts.stderr) and ts.stderr > 0.0
    assert abs(ts.trace - exact) < 5.0 * ts.stderr


def test_sparse_and_dense_agree():
    ref = coupled_quartic()
    x = jnp.asarray([0.4, -0.3, 1.1, 0.2, -0.8])
    exact = ref.laplacian(x)
    dense = estimate_samples(ref.fn, x, num_samples=20000, mode="dense", rng_seed=1)
    gauss = estimate_samples(ref.fn, x, num_samples=20000, mode="gaussian", rng_seed=1)
    sparse = estimate(ref.fn, x, num_samples=5, mode="sparse", rng_seed=1)
    assert np.isclose(sparse.trace, exact, rtol=1e-12)
    assert abs(dense.trace - exact) < 5.0 * dense.stderr
    assert abs(gauss.trace - exact) < 5.0 * gauss.stderr


def test_mean_over_seeds_is_unbiased(quadratic_case):
    ref, x = quadratic_case
    traces = [estimate(ref.fn, x, num_samples=500, rng_seed=s).trace for s in range(10)]
    assert abs(np.mean(traces) - ref.laplacian(x)) < 0.3


def test_backends_give_same_estimate():
    ref = sum_of_sines()
    x = jnp.asarray([0.1, 0.9, -1.3, 2.0])
    jet = estimate(ref.fn, x, num_samples=16, rng_seed=4, backend="jet")
    hvp = estimate(ref.fn, x, num_samples=16, rng_seed=4, backend="hvp")
    fd = estimate(ref.fn, x, num_samples=16, rng_seed=4, backend="fd", fd_step=1e-3)
    assert np.isclose(jet.trace, hvp.trace, rtol=1e-12, atol=1e-12)
    assert np.isclose(jet.trace, fd.trace, atol=1e-5)
    # diagonal Hessian: Rademacher probes are exact
    assert np.isclose(jet.trace, ref.laplacian(x), atol=1e-12)


def test_invalid_inputs():
    with pytest.raises(InvalidDimension):
        estimate(sum_of_squares, jnp.zeros((0,)))
    with pytest.raises(InvalidDimension):
        estimate(sum_of_squares, jnp.ones((2, 2)))
    with pytest.raises(InvalidSampleCount):
        estimate(sum_of_squares, jnp.ones(3), num_samples=4, mode="sparse")
    with pytest.raises(InvalidSampleCount):
        estimate(sum_of_squares, jnp.ones(3), num_samples=0)
    with pytest.raises(ValueError):
        estimate(sum_of_squares, jnp.ones(3), mode="banded")


def test_estimate_with_config_checks_dim():
    cfg = EstimatorConfig(dim=3, num_samples=3, mode="sparse", seed=5)
    _, trace = estimate_with_config(sum_of_squares, jnp.ones(3), cfg)
    assert np.isclose(trace, 6.0)
    with pytest.raises(InvalidDimension):
        estimate_with_config(sum_of_squares, jnp.ones(4), cfg)


def test_laplacian_shortcut():
    assert np.isclose(laplacian(sum_of_squares, jnp.ones(4), num_samples=10), 8.0)


def test_hess_trace_is_jittable_and_matches_estimate(quadratic_case):
    ref, x = quadratic_case
    cfg = EstimatorConfig(dim=len(x), num_samples=64)
    key = jax.random.PRNGKey(8)
    fn_trace = jax.jit(hess_trace(ref.fn, cfg))
    f0, tr = fn_trace(jnp.asarray(x), key)
    expected = estimate(ref.fn, x, num_samples=64, rng_seed=key)
    assert np.isclose(float(f0), expected.value, rtol=1e-12)
    assert np.isclose(float(tr), expected.trace, rtol=1e-10, atol=1e-10)


def test_hess_trace_rejects_wrong_shape():
    cfg = EstimatorConfig(dim=3, num_samples=4)
    with pytest.raises(InvalidDimension):
        hess_trace(sum_of_squares, cfg)(jnp.ones(4), jax.random.PRNGKey(0))
    with pytest.raises(InvalidDimension):
        hess_trace(sum_of_squares, cfg)([1.0, 1.0], jax.random.PRNGKey(0))
    with pytest.raises(InvalidDimension):
        hess_trace(sum_of_squares, cfg)(np.float64(1.0), jax.random.PRNGKey(0))


def test_hess_trace_accepts_lists():
    cfg = EstimatorConfig(dim=3, num_samples=3, mode="sparse")
    f0, tr = hess_trace(sum_of_squares, cfg)([1, 1, 1], jax.random.PRNGKey(0))
    assert float(f0) == 3.0
    assert np.isclose(float(tr), 6.0)


def test_sparse_standard_error_matches_subset_variance(quadratic_case):
    # Per-direction contributions dim * e_i^T H e_i; averaging stderr**2 over
    # every n-subset must give the exact variance of the subset means.
    ref, x = quadratic_case
    dim = len(x)
    contrib = dim * np.diag(np.asarray(jax.hessian(ref.fn)(jnp.asarray(x))))
    for n in (2, 3, 5):
        subsets = [list(c) for c in itertools.combinations(range(dim), n)]
        means = np.asarray([contrib[c].mean() for c in subsets])
        true_var = np.mean((means - contrib.mean()) ** 2)
        mean_se2 = np.mean([standard_error(contrib[c], "sparse", dim)[1] ** 2 for c in subsets])
        assert np.isclose(mean_se2, true_var, rtol=1e-10)
    assert standard_error(contrib, "sparse", dim)[1] == 0.0


def test_gradient_of_estimated_laplacian():
    # fn = sum x^4 has diagonal Hessian 12 x^2, so dense probes are exact and
    # d/dx Laplacian = 24 x.
    cfg = EstimatorConfig(dim=3, num_samples=8, backend="hvp")
    fn_trace = hess_trace(lambda y: jnp.sum(y**4), cfg)
    x = jnp.asarray([0.5, -1.0, 2.0])
    g = jax.grad(lambda y: fn_trace(y, jax.random.PRNGKey(0))[1])(x)
    assert np.allclose(np.asarray(g), 24.0 * np.asarray(x), rtol=1e-10)
