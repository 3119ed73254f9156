"""Sampler configuration."""

from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from mlx_arms.errors import ConfigurationError


@dataclass
class ARMSConfig:
    """Settings for one ARMS sampling session.

    Parameters
    ----------
    log_density : callable
        Function returning the log of the (unnormalised) target density
        at a float ``x``. May return a float, numpy scalar or 0-d MLX array.
    xinit : sequence of float, optional
        Starting abscissae, strictly increasing, at least three
        (default: (-1, 0, 1))
    xl, xr : float, optional
        Domain bounds. Default to ``min(xinit[0]/10, xinit[0]*10) - 0.1``
        and ``max(xinit[-1]/10, xinit[-1]*10) + 0.1``.
    convex : float, optional
        Convexity adjustment used by the Metropolis correction, >= 0
        (default: 0.0)
    npoint : int, optional
        Maximum number of envelope points, >= 2*len(xinit) + 1
        (default: 100)
    metropolis : bool, optional
        Whether to apply the Metropolis correction. Leave on unless the
        target is known to be log-concave (default: True)
    xprev : float, optional
        Starting Markov-chain iterate for the Metropolis step
        (default: midpoint of ``xinit[0]`` and ``xinit[-1]``)
    max_attempts : int, optional
        Candidates tried per draw before giving up (default: 10000)

    Attributes
    ----------
    neval : int
        Number of log-density evaluations since the envelope was built.
    """

    log_density: Callable[[float], float]
    xinit: Sequence[float] = (-1.0, 0.0, 1.0)
    xl: Optional[float] = None
    xr: Optional[float] = None
    convex: float = 0.0
    npoint: int = 100
    metropolis: bool = True
    xprev: Optional[float] = None
    max_attempts: int = 10000
    neval: int = field(default=0, compare=False)

    def __post_init__(self):
        self.xinit = tuple(float(x) for x in self.xinit)
        if not self.xinit:
            raise ConfigurationError("xinit must not be empty")
        first, last = self.xinit[0], self.xinit[-1]
        if self.xl is None:
            self.xl = min(first / 10.0, first * 10.0) - 0.1
        if self.xr is None:
            self.xr = max(last / 10.0, last * 10.0) + 0.1
        if self.xprev is None:
            self.xprev = (first + last) / 2.0

    def validate(self):
        """Raise ConfigurationError if the settings cannot build an envelope."""
        if not callable(self.log_density):
            raise ConfigurationError("log_density must be callable")
        ninit = len(self.xinit)
        if ninit < 3:
            raise ConfigurationError(
                f"too few initial points: got {ninit}, need at least 3"
            )
        if self.npoint < 2 * ninit + 1:
            raise ConfigurationError(
                f"npoint={self.npoint} cannot hold {ninit} initial points "
                f"(need at least {2 * ninit + 1})"
            )
        if not (self.xinit[0] > self.xl and self.xinit[-1] < self.xr):
            raise ConfigurationError(
                f"initial points must lie strictly inside ({self.xl}, {self.xr})"
            )
        for a, b in zip(self.xinit, self.xinit[1:]):
            if not b > a:
                raise ConfigurationError("initial points are not strictly increasing")
        if not self.convex >= 0.0:
            raise ConfigurationError("convexity parameter must be non-negative")
        if self.metropolis and not self.xl <= self.xprev <= self.xr:
            raise ConfigurationError(
                f"previous Markov chain iterate {self.xprev} out of range"
            )
        if self.max_attempts < 0:
            raise ConfigurationError("max_attempts must be non-negative")

    def evaluate(self, x):
        """Evaluate the log density at ``x`` and count the call."""
        self.neval += 1
        return float(self.log_density(x))
