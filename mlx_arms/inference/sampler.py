"""High-level ARMS sampling interface."""

import copy

import numpy as np

from mlx_arms.config import ARMSConfig
from mlx_arms.envelope.initializer import init_envelope
from mlx_arms.kernels.arms import draw_counted
from mlx_arms.uniform import KeyedUniform


class ARMS:
    """Sampling session for one univariate target.

    The envelope is built on first use and kept across calls, so every
    draw benefits from the refinement done by earlier ones.

    Parameters
    ----------
    target : callable or object with ``log_prob``
        Log density of the target, up to an additive constant
    **settings
        Sampler settings passed to :class:`mlx_arms.config.ARMSConfig`:
        xinit, xl, xr, convex, npoint, metropolis, xprev, max_attempts

    Examples
    --------
    >>> sampler = ARMS(lambda x: -0.5 * x * x, metropolis=False)
    >>> samples = sampler.run(num_samples=1000, verbose=False)
    >>> print(f"Mean: {np.mean(samples):.3f}")
    """

    def __init__(self, target, **settings):
        log_density = target.log_prob if hasattr(target, "log_prob") else target
        self.config = ARMSConfig(log_density, **settings)
        self.config.validate()
        self.envelope = None
        self.uniform = None
        self.samples = None
        self.acceptance_rate = None

    @property
    def neval(self):
        """Log-density evaluations since the envelope was built."""
        return self.config.neval

    def _ensure_envelope(self):
        if self.envelope is None:
            self.envelope = init_envelope(self.config)

    def reset(self):
        """Discard the envelope, e.g. after the target density changed."""
        self.envelope = None
        self.config.neval = 0

    def copy(self):
        """Independent copy of this session, envelope included.

        The copy starts without a random source of its own; pass one to
        ``draw`` or call ``run`` with a different seed.
        """
        other = copy.copy(self)
        other.config = copy.copy(self.config)
        other.envelope = None if self.envelope is None else self.envelope.copy()
        other.uniform = None
        if self.samples is not None:
            other.samples = self.samples.copy()
        return other

    def draw(self, uniform=None):
        """
        Draw a single value.

        Parameters
        ----------
        uniform : callable, optional
            Uniform [0, 1) source. Defaults to the session's own source,
            seeded with 0 on first use.

        Returns
        -------
        x : float
            Sampled value
        """
        self._ensure_envelope()
        if uniform is None:
            if self.uniform is None:
                self.uniform = KeyedUniform(seed=0)
            uniform = self.uniform
        x, _ = draw_counted(
            self.envelope, self.config, uniform, self.config.max_attempts
        )
        return x

    def run(
        self,
        num_samples=1000,
        num_warmup=0,
        random_seed=0,
        verbose=True,
    ):
        """
        Draw a batch of samples.

        Parameters
        ----------
        num_samples : int, optional
            Number of samples to keep (default: 1000)
        num_warmup : int, optional
            Number of initial draws to discard. Only useful with the
            Metropolis correction, whose output is a Markov chain
            (default: 0)
        random_seed : int, optional
            Random seed for reproducibility (default: 0)
        verbose : bool, optional
            If True, print progress information (default: True)

        Returns
        -------
        samples : np.ndarray
            Sampled values
        """
        self._ensure_envelope()
        self.uniform = KeyedUniform(seed=random_seed)

        if verbose:
            print(f"\n{'='*70}")
            print(f"MLX-ARMS: {'Metropolis' if self.config.metropolis else 'Rejection'} Sampling")
            print(f"{'='*70}\n")

        if num_warmup > 0:
            if verbose:
                print(f"Warmup phase: {num_warmup} draws")
            for _ in range(num_warmup):
                draw_counted(
                    self.envelope, self.config, self.uniform,
                    self.config.max_attempts,
                )

        if verbose:
            print(f"Sampling phase: {num_samples} draws")

        samples = []
        n_proposed = 0
        for i in range(num_samples):
            x, attempts = draw_counted(
                self.envelope, self.config, self.uniform, self.config.max_attempts
            )
            samples.append(x)
            n_proposed += attempts

            if verbose and (i + 1) % 500 == 0:
                print(f"  Draw {i+1}/{num_samples} "
                      f"(accept rate: {(i+1)/n_proposed:.2%}, "
                      f"envelope points: {len(self.envelope)})")

        self.samples = np.array(samples)
        self.acceptance_rate = num_samples / n_proposed if n_proposed else 1.0

        if verbose:
            print(f"Sampling acceptance rate: {self.acceptance_rate:.2%}")
            print(f"Log-density evaluations: {self.neval}")
            print(f"\n{'='*70}")
            print("Sampling complete!")
            print(f"{'='*70}\n")

        return self.samples

    def summary(self, credible_interval=0.95):
        """
        Compute summary statistics for the last batch of samples.

        Parameters
        ----------
        credible_interval : float, optional
            Interval width (default: 0.95 for 95% interval)

        Returns
        -------
        summary : dict
            Sample statistics plus sampler diagnostics

        Raises
        ------
        ValueError
            If sampling hasn't been run yet
        """
        if self.samples is None:
            raise ValueError("Must run sampling first. Call run() method.")

        alpha = 1 - credible_interval
        lower_pct = 100 * alpha / 2
        upper_pct = 100 * (1 - alpha / 2)

        return {
            'mean': float(np.mean(self.samples)),
            'std': float(np.std(self.samples)),
            'median': float(np.median(self.samples)),
            f'{lower_pct:.1f}%': float(np.percentile(self.samples, lower_pct)),
            f'{upper_pct:.1f}%': float(np.percentile(self.samples, upper_pct)),
            'acceptance_rate': self.acceptance_rate,
            'neval': self.neval,
            'envelope_points': len(self.envelope),
        }

    def print_summary(self, credible_interval=0.95):
        """Print summary statistics in a formatted table."""
        summary = self.summary(credible_interval)
        ci_lower, ci_upper = list(summary.values())[3:5]
        ci_str = f"[{ci_lower:.3f}, {ci_upper:.3f}]"

        print("\nSample Summary:")
        print("="*80)
        print(f"{'Mean':<10} {'Std':<10} {'Median':<10} {f'{int(credible_interval*100)}% CI':<20} {'Accept':<10} {'Evals':<8}")
        print("-"*80)
        print(f"{summary['mean']:<10.3f} {summary['std']:<10.3f} "
              f"{summary['median']:<10.3f} {ci_str:<20} "
              f"{summary['acceptance_rate']:<10.2%} {summary['neval']:<8d}")
        print("="*80)
