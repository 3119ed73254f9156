"""ARMS sampling kernels."""

from mlx_arms.kernels.arms import acceptance_test, arms, draw, draw_counted
from mlx_arms.kernels.invert import invert, sample

__all__ = ["acceptance_test", "arms", "draw", "draw_counted", "invert", "sample"]
