"""Envelope construction and refinement."""

from mlx_arms.envelope.envelope import Envelope, Point
from mlx_arms.envelope.initializer import init_envelope
from mlx_arms.envelope.updater import update

__all__ = ["Envelope", "Point", "init_envelope", "update"]
