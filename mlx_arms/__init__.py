"""
MLX-ARMS: Adaptive Rejection Metropolis Sampling

Draws from an arbitrary univariate distribution given only a function
that evaluates the log of its (possibly unnormalised) density. The
density does not need to be log-concave when the Metropolis correction
is enabled. Randomness comes from explicit MLX random keys.

Example:
    >>> from mlx_arms import ARMS
    >>>
    >>> def log_density(x):
    ...     return -0.5 * x * x
    >>>
    >>> sampler = ARMS(log_density, metropolis=False)
    >>> samples = sampler.run(num_samples=1000)
"""

__version__ = "0.1.0-alpha"
__license__ = "MIT"

# Import core components
from mlx_arms.config import ARMSConfig
from mlx_arms.envelope import Envelope, Point, init_envelope, update
from mlx_arms.errors import (
    ARMSError,
    ConfigurationError,
    EnvelopeViolation,
    NumericGuardTripped,
    SamplerExhausted,
)
from mlx_arms.inference.sampler import ARMS
from mlx_arms.kernels.arms import acceptance_test, arms, draw
from mlx_arms.kernels.invert import invert, sample
from mlx_arms.uniform import KeyedUniform, SequenceUniform

__all__ = [
    "ARMS",
    "ARMSConfig",
    "ARMSError",
    "ConfigurationError",
    "Envelope",
    "EnvelopeViolation",
    "KeyedUniform",
    "NumericGuardTripped",
    "Point",
    "SamplerExhausted",
    "SequenceUniform",
    "acceptance_test",
    "arms",
    "draw",
    "init_envelope",
    "invert",
    "sample",
    "update",
]
