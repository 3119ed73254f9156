"""High-level inference API."""

from mlx_arms.inference.sampler import ARMS

__all__ = ["ARMS"]
