"""Numeric helpers for the piecewise-exponential envelope.

Heights are kept in log space. Before exponentiating they are shifted by
the envelope maximum so that ``exp`` stays within ``[0, e**YCEIL]``.
"""

import math

from mlx_arms.errors import EnvelopeViolation, NumericGuardTripped

XEPS = 0.00001  # critical relative x-value difference
YEPS = 0.1  # critical y-value difference
EYEPS = 0.001  # critical relative exp(y) difference
YCEIL = 50.0  # maximum y avoiding overflow in exp(y)


def expshift(y, y0):
    """Exponentiate ``y`` shifted by ``y0``, returning 0 on underflow."""
    if y - y0 > -2.0 * YCEIL:
        return math.exp(y - y0 + YCEIL)
    return 0.0


def logshift(u, y0):
    """Inverse of :func:`expshift`."""
    if u <= 0.0:
        return -math.inf
    return math.log(u) + y0 - YCEIL


def segment_integral(left, right):
    """Integrate the exponentiated envelope over ``[left.x, right.x]``.

    Both points must carry ``ey`` values from the same shift. Nearly flat
    pieces use the trapezoid rule to avoid cancellation in the exact
    formula.
    """
    if left.x == right.x:
        return 0.0
    if abs(right.y - left.y) < YEPS:
        return 0.5 * (right.ey + left.ey) * (right.x - left.x)
    return ((right.ey - left.ey) / (right.y - left.y)) * (right.x - left.x)


def chord_intersection(x, left, right, far_left, far_right, convex=0.0,
                       metropolis=False):
    """Locate the point where the bounding chords around a piece cross.

    Parameters
    ----------
    x : float
        Current abscissa of the intersection point. Only used when the
        point is a domain bound, whose abscissa is fixed.
    left, right : Point or None
        On-curve neighbours of the intersection point (None at a bound).
    far_left, far_right : Point or None
        The next on-curve points beyond ``left`` and ``right``. The outer
        chords run from these through ``left`` and ``right``.
    convex : float
        Relaxation applied to convexity violations when ``metropolis``.
    metropolis : bool
        If False, a convexity violation raises EnvelopeViolation.

    Returns
    -------
    x, y : float
        Coordinates of the intersection.
    """
    gl = gr = grl = None
    if left is not None and far_left is not None:
        gl = (left.y - far_left.y) / (left.x - far_left.x)
    if right is not None and far_right is not None:
        gr = (right.y - far_right.y) / (right.x - far_right.x)
    if left is not None and right is not None:
        grl = (right.y - left.y) / (right.x - left.x)

    if grl is not None and gl is not None and gl < grl:
        if not metropolis:
            raise EnvelopeViolation(
                f"log density is convex left of x={left.x}; "
                "enable the Metropolis correction"
            )
        gl = gl + (1.0 + convex) * (grl - gl)

    if grl is not None and gr is not None and gr > grl:
        if not metropolis:
            raise EnvelopeViolation(
                f"log density is convex right of x={right.x}; "
                "enable the Metropolis correction"
            )
        gr = gr + (1.0 + convex) * (grl - gr)

    if gl is not None and grl is not None:
        dr = max((gl - grl) * (right.x - left.x), YEPS)
    if gr is not None and grl is not None:
        dl = max((grl - gr) * (right.x - left.x), YEPS)

    if gl is not None and gr is not None and grl is not None:
        # gradients on both sides
        x = (dl * right.x + dr * left.x) / (dl + dr)
        y = (dl * right.y + dr * left.y + dl * dr) / (dl + dr)
    elif gl is not None and grl is not None:
        x = right.x
        y = right.y + dr
    elif gr is not None and grl is not None:
        x = left.x
        y = left.y + dl
    elif gl is not None:
        # right-hand bound
        y = left.y + gl * (x - left.x)
    elif gr is not None:
        # left-hand bound
        y = right.y - gr * (right.x - x)
    else:
        raise EnvelopeViolation("no chord gradient on either side of intersection")

    if (left is not None and x < left.x) or (right is not None and x > right.x):
        raise NumericGuardTripped(
            f"intersection x={x} fell outside its interval through imprecision"
        )
    return x, y
