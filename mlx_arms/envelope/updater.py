"""Refinement of the envelope with newly evaluated points."""

from mlx_arms.envelope.envelope import Point
from mlx_arms.envelope.numerics import XEPS
from mlx_arms.errors import EnvelopeViolation


def update(envelope, candidate, config):
    """Insert an evaluated candidate into the envelope.

    The candidate is spliced between its straddling points together with
    a new intersection point, the affected intersections are recomputed
    and the envelope is re-integrated. If the envelope is full, or the
    candidate was not evaluated, nothing happens.

    If recomputing any intersection fails, or the log density raises while
    re-evaluating a nudged point, the envelope is left exactly as it was
    before the call and the error propagates.

    Parameters
    ----------
    envelope : Envelope
        Envelope to refine
    candidate : Point
        Working point produced by the sampler, with ``left``/``right``
        set and ``on_curve`` True
    config : ARMSConfig
        Used to re-evaluate the log density if the point must be nudged

    Returns
    -------
    inserted : bool
        Whether the envelope changed
    """
    if not candidate.on_curve or envelope.full:
        return False

    saved = envelope.snapshot()
    try:
        _insert(envelope, candidate, config)
    except BaseException:
        envelope.restore(saved)
        raise
    envelope.cumulate()
    return True


def _insert(envelope, candidate, config):
    points = envelope.points
    left, right = points[candidate.left], points[candidate.right]

    qi = envelope.add(Point(x=candidate.x, y=candidate.y, on_curve=True))
    mi = envelope.add(Point())
    q, m = points[qi], points[mi]

    if left.on_curve and not right.on_curve:
        # new intersection goes between the left point and q
        m.left, m.right = candidate.left, qi
        q.left, q.right = mi, candidate.right
        left.right = mi
        right.left = qi
    elif not left.on_curve and right.on_curve:
        # new intersection goes between q and the right point
        q.left, q.right = candidate.left, mi
        m.left, m.right = qi, candidate.right
        left.right = qi
        right.left = mi
    else:
        raise EnvelopeViolation(
            "candidate must lie between one on-curve and one intersection point"
        )

    # keep q away from the on-curve points either side of it
    ql = envelope.point(envelope.neighbour(qi, -2)) or points[q.left]
    qr = envelope.point(envelope.neighbour(qi, 2)) or points[q.right]
    lo = (1.0 - XEPS) * ql.x + XEPS * qr.x
    hi = XEPS * ql.x + (1.0 - XEPS) * qr.x
    if q.x < lo:
        q.x = lo
        q.y = config.evaluate(q.x)
    elif q.x > hi:
        q.x = hi
        q.y = config.evaluate(q.x)

    envelope.meet(q.left)
    envelope.meet(q.right)
    far_left = envelope.neighbour(qi, -3)
    if far_left is not None:
        envelope.meet(far_left)
    far_right = envelope.neighbour(qi, 3)
    if far_right is not None:
        envelope.meet(far_right)
