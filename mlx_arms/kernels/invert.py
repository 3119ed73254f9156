"""Sampling from the piecewise-exponential envelope by CDF inversion."""

import math

from mlx_arms.envelope.envelope import Point
from mlx_arms.envelope.numerics import EYEPS, YEPS, expshift, logshift
from mlx_arms.errors import NumericGuardTripped


def invert(envelope, prob):
    """Return the working point at cumulative probability ``prob``.

    Parameters
    ----------
    envelope : Envelope
        Current envelope
    prob : float
        Cumulative probability in [0, 1)

    Returns
    -------
    point : Point
        Point not yet in the envelope, with ``left``/``right`` set to the
        straddling envelope points and ``x``, ``y``, ``ey`` on the envelope

    Raises
    ------
    NumericGuardTripped
        If rounding puts the abscissa outside its segment
    """
    points = envelope.points
    qi = envelope.tail
    q = points[qi]

    # find exponential piece containing the point implied by prob
    u = prob * q.cum
    while points[q.left].cum > u:
        qi = q.left
        q = points[qi]
    left = points[q.left]

    p = Point(cum=u, on_curve=False, left=q.left, right=qi)
    xl, xr = left.x, q.x

    if xl == xr:
        p.x, p.y, p.ey = q.x, q.y, q.ey
    else:
        mass = q.cum - left.cum
        prop = (u - left.cum) / mass if mass > 0.0 else 0.0
        yl, yr = left.y, q.y
        eyl, eyr = left.ey, q.ey
        if abs(yr - yl) < YEPS:
            # piece was integrated as a straight line
            if abs(eyr - eyl) > EYEPS * abs(eyr + eyl):
                p.x = xl + ((xr - xl) / (eyr - eyl)) * (
                    -eyl + math.sqrt((1.0 - prop) * eyl * eyl + prop * eyr * eyr)
                )
            else:
                p.x = xl + (xr - xl) * prop
            p.ey = ((p.x - xl) / (xr - xl)) * (eyr - eyl) + eyl
            p.y = logshift(p.ey, envelope.ymax)
        else:
            # piece was integrated exactly
            if eyl > 0.0:
                dy = math.log1p(prop * (eyr / eyl - 1.0))
            else:
                # left height underflowed, so no mass lies left of xl
                w = (1.0 - prop) * eyl + prop * eyr
                dy = max(-yl + logshift(w, envelope.ymax), 0.0)
            p.x = xl + ((xr - xl) / (yr - yl)) * dy
            p.y = ((p.x - xl) / (xr - xl)) * (yr - yl) + yl
            p.ey = expshift(p.y, envelope.ymax)

    if not xl <= p.x <= xr:
        raise NumericGuardTripped(
            f"sampled x={p.x} outside its segment [{xl}, {xr}]"
        )
    return p


def sample(envelope, uniform):
    """Draw a candidate point from the envelope."""
    return invert(envelope, uniform())
