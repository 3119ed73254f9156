"""Adaptive rejection Metropolis sampling (ARMS) kernel.

Based on Gilks, Best & Tan (1995): "Adaptive Rejection Metropolis
Sampling within Gibbs Sampling".
"""

import math

from mlx_arms.config import ARMSConfig
from mlx_arms.envelope.envelope import Point
from mlx_arms.envelope.initializer import init_envelope
from mlx_arms.envelope.numerics import YCEIL, expshift, logshift
from mlx_arms.envelope.updater import update
from mlx_arms.errors import SamplerExhausted
from mlx_arms.kernels.invert import sample
from mlx_arms.uniform import KeyedUniform


def acceptance_test(envelope, point, config, uniform):
    """Run the squeezing, rejection and Metropolis tests on a candidate.

    Parameters
    ----------
    envelope : Envelope
        Envelope the candidate was drawn from; refined on rejection
    point : Point
        Candidate from :func:`mlx_arms.kernels.invert.sample`
    config : ARMSConfig
        Supplies the log density
    uniform : callable
        Uniform [0, 1) source

    Returns
    -------
    accepted : bool
        Whether a value was produced
    point : Point
        The produced point. With the Metropolis correction this may be
        the previous chain iterate rather than the candidate.
    """
    points = envelope.points
    left, right = points[point.left], points[point.right]

    # height for the rejection test
    y = logshift(uniform() * point.ey, envelope.ymax)

    squeeze = left.left is not None and right.right is not None
    if not envelope.metropolis and squeeze:
        # squeezing test against the chord between on-curve neighbours
        ql = left if left.on_curve else points[left.left]
        qr = right if right.on_curve else points[right.right]
        ysqueez = (qr.y * (point.x - ql.x) + ql.y * (qr.x - point.x)) / (
            qr.x - ql.x
        )
        if y <= ysqueez:
            return True, point

    ynew = config.evaluate(point.x)

    if not envelope.metropolis or y >= ynew:
        point.y = ynew
        point.ey = expshift(ynew, envelope.ymax)
        point.on_curve = True
        update(envelope, point, config)
        return y < ynew, point

    # Metropolis step
    yold = envelope.yprev
    zold, ql, qr = envelope.height_at(envelope.xprev)
    znew = point.y
    zold = min(zold, yold)
    znew = min(znew, ynew)
    w = min(ynew - znew - yold + zold, 0.0)
    w = math.exp(w) if w > -YCEIL else 0.0

    if uniform() > w:
        # chain stays where it was
        point = Point(
            x=envelope.xprev,
            y=envelope.yprev,
            ey=expshift(envelope.yprev, envelope.ymax),
            on_curve=True,
            left=ql,
            right=qr,
        )
    else:
        envelope.xprev = point.x
        envelope.yprev = ynew
    return True, point


def draw_counted(envelope, config, uniform, max_attempts):
    """Like :func:`draw`, but also return the number of candidates tried."""
    for attempt in range(1, max_attempts + 1):
        point = sample(envelope, uniform)
        accepted, point = acceptance_test(envelope, point, config, uniform)
        if accepted:
            return point.x, attempt
    raise SamplerExhausted(max_attempts)


def draw(envelope, config, uniform, max_attempts=None):
    """Draw one value, refining ``envelope`` along the way.

    Parameters
    ----------
    envelope : Envelope
        Envelope from :func:`mlx_arms.envelope.init_envelope`. Reuse it
        across calls; it improves as more points are evaluated.
    config : ARMSConfig
        Settings the envelope was built from
    uniform : callable
        Uniform [0, 1) source
    max_attempts : int, optional
        Override for ``config.max_attempts``

    Returns
    -------
    x : float
        The sampled value

    Raises
    ------
    SamplerExhausted
        If no candidate is accepted within ``max_attempts`` tries
    EnvelopeViolation
        If the target turns out not to be log-concave while the
        Metropolis correction is disabled
    """
    if max_attempts is None:
        max_attempts = config.max_attempts
    x, _ = draw_counted(envelope, config, uniform, max_attempts)
    return x


def arms(
    log_density,
    num_samples=1000,
    xinit=(-1.0, 0.0, 1.0),
    xl=None,
    xr=None,
    convex=0.0,
    npoint=100,
    metropolis=True,
    xprev=None,
    max_attempts=10000,
    random_seed=0,
    verbose=False
):
    """
    Adaptive rejection Metropolis sampler for univariate densities.

    Builds an envelope around the log density and draws from it, refining
    the envelope with every evaluated point. The target need not be
    log-concave when ``metropolis`` is True.

    Parameters
    ----------
    log_density : callable
        Function returning log p(x) up to a constant for a float x
    num_samples : int, optional
        Number of samples to draw (default: 1000)
    xinit : sequence of float, optional
        Starting abscissae, strictly increasing (default: (-1, 0, 1))
    xl, xr : float, optional
        Domain bounds (default: derived from ``xinit``)
    convex : float, optional
        Convexity adjustment, >= 0 (default: 0.0)
    npoint : int, optional
        Maximum number of envelope points (default: 100)
    metropolis : bool, optional
        Apply the Metropolis correction (default: True)
    xprev : float, optional
        Starting Markov-chain iterate (default: middle of ``xinit``)
    max_attempts : int, optional
        Candidates tried per sample before giving up (default: 10000)
    random_seed : int, optional
        Random seed for reproducibility (default: 0)
    verbose : bool, optional
        If True, print progress updates (default: False)

    Returns
    -------
    samples : list of float
        The sampled values
    acceptance_rate : float
        Samples produced per candidate proposed

    Examples
    --------
    >>> samples, accept_rate = arms(
    ...     lambda x: -0.5 * x * x, num_samples=1000, metropolis=False
    ... )
    """
    config = ARMSConfig(
        log_density,
        xinit=xinit,
        xl=xl,
        xr=xr,
        convex=convex,
        npoint=npoint,
        metropolis=metropolis,
        xprev=xprev,
        max_attempts=max_attempts,
    )
    envelope = init_envelope(config)
    uniform = KeyedUniform(seed=random_seed)

    samples = []
    n_proposed = 0

    if verbose:
        print(f"Running {num_samples} ARMS draws on [{config.xl:.3g}, {config.xr:.3g}]...")

    for i in range(num_samples):
        x, attempts = draw_counted(envelope, config, uniform, config.max_attempts)
        samples.append(x)
        n_proposed += attempts

        # Progress indicator
        if verbose and (i + 1) % 500 == 0:
            print(f"  Draw {i+1}/{num_samples} "
                  f"(accept rate: {(i+1)/n_proposed:.2%}, "
                  f"envelope points: {len(envelope)}, evaluations: {config.neval})")

    acceptance_rate = num_samples / n_proposed if n_proposed else 1.0

    return samples, acceptance_rate
