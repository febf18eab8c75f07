"""Exception types raised by stde_jax.

The two input-validation errors subclass ``ValueError`` so callers that only
care about "bad arguments" can keep catching that.
"""

from __future__ import annotations


class InvalidDimension(ValueError):
    """The point ``x`` has no components (``dim <= 0``) or is not a vector."""


class InvalidSampleCount(ValueError):
    """``num_samples <= 0``, or sparse sampling asked for more probes than ``dim``."""


class NonDifferentiableFunction(NotImplementedError):
    """``fn`` uses an operation the differentiation backend cannot expand.

    Subclasses ``NotImplementedError`` (what JAX raises for a primitive without
    a Taylor rule) so existing handlers for the engine's error still match.
    """
