"""Construction of the starting envelope."""

from mlx_arms.envelope.envelope import Envelope, Point


def init_envelope(config):
    """Build the initial envelope from ``config.xinit``.

    The points are laid out as: left bound, then alternately an on-curve
    point (one per initial abscissa) and an intersection point, ending
    with the right bound. Both bounds act as intersection points whose
    abscissa is pinned to the domain limit.

    Parameters
    ----------
    config : ARMSConfig
        Sampler settings. ``config.neval`` is reset and then counts the
        evaluations made here.

    Returns
    -------
    envelope : Envelope
        Envelope ready for sampling

    Raises
    ------
    ConfigurationError
        If the settings are invalid
    EnvelopeViolation
        If the initial points already reveal a convex log density while
        the Metropolis correction is disabled
    """
    config.validate()
    config.neval = 0

    envelope = Envelope(
        config.npoint, convex=config.convex, metropolis=config.metropolis
    )
    mpoint = 2 * len(config.xinit) + 1

    envelope.add(Point(x=config.xl))
    for j in range(1, mpoint - 1):
        if j % 2:
            x = config.xinit[j // 2]
            envelope.add(Point(x=x, y=config.evaluate(x), on_curve=True))
        else:
            envelope.add(Point())
    envelope.add(Point(x=config.xr))

    for i, point in enumerate(envelope.points):
        point.left = i - 1 if i > 0 else None
        point.right = i + 1 if i < mpoint - 1 else None
    envelope.head = 0
    envelope.tail = mpoint - 1

    for i in range(0, mpoint, 2):
        envelope.meet(i)
    envelope.cumulate()

    if config.metropolis:
        envelope.xprev = config.xprev
        envelope.yprev = config.evaluate(config.xprev)
    return envelope
