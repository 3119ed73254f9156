"""Shared fixtures for the ARMS tests."""

import math

import pytest

from mlx_arms import ARMSConfig, init_envelope


def std_normal(x):
    """Standard normal log density up to a constant."""
    return -0.5 * x * x


def bimodal(x):
    """Equal mixture of N(-2, 1) and N(2, 1), up to a constant."""
    a = -0.5 * (x + 2.0) ** 2
    b = -0.5 * (x - 2.0) ** 2
    m = max(a, b)
    return m + math.log(math.exp(a - m) + math.exp(b - m))


@pytest.fixture
def normal_config():
    return ARMSConfig(std_normal, metropolis=False)


@pytest.fixture
def normal_envelope(normal_config):
    return init_envelope(normal_config)


def start_inverse(prob):
    """Closed-form inverse CDF of the starting std_normal envelope on [-1, 0].

    Valid for the default settings (xinit -1, 0, 1 on [-10.1, 10.1]) and
    probabilities landing in that piece (roughly 0.24 to 0.5).
    """
    a = 2.0 * (math.exp(-0.5) - math.exp(-5.05))
    b = 2.0 * (math.exp(0.5) - 1.0)
    prop = (prob * 2.0 * (a + b) - a) / b
    return -2.0 * math.log((1.0 - prop) * math.exp(0.5) + prop)
