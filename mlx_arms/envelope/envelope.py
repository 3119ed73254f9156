"""Piecewise bound on the target log density."""

import copy
import sys
from dataclasses import dataclass
from typing import Optional

from mlx_arms.envelope.numerics import (
    chord_intersection,
    expshift,
    segment_integral,
)
from mlx_arms.errors import EnvelopeViolation


@dataclass
class Point:
    """A point of the envelope.

    ``left`` and ``right`` are indices into ``Envelope.points`` (None at
    the domain bounds). ``on_curve`` is True iff the log density was
    evaluated at ``x``; otherwise ``y`` comes from chord geometry.
    """

    x: float = 0.0
    y: float = 0.0
    ey: float = 0.0
    cum: float = 0.0
    on_curve: bool = False
    left: Optional[int] = None
    right: Optional[int] = None


class Envelope:
    """Adaptively refined upper bound on a log density.

    Points live in a fixed-capacity arena (``points``) and are linked in
    increasing ``x`` order through their ``left``/``right`` indices. The
    arena only grows; the two domain bounds are never moved, so the
    leftmost and rightmost points keep their indices for the lifetime of
    the envelope.

    Use :func:`mlx_arms.envelope.init_envelope` to build one.

    Parameters
    ----------
    capacity : int
        Maximum number of points
    convex : float, optional
        Convexity adjustment for the Metropolis correction (default: 0.0)
    metropolis : bool, optional
        Whether the Metropolis correction is applied (default: True)
    """

    def __init__(self, capacity, convex=0.0, metropolis=True):
        self.capacity = capacity
        self.convex = convex
        self.metropolis = metropolis
        self.points = []
        self.head = None
        self.tail = None
        self.ymax = 0.0
        # previous Markov chain iterate, used only with the Metropolis step
        self.xprev = None
        self.yprev = None

    def __len__(self):
        return len(self.points)

    def __repr__(self):
        return (
            f"Envelope(points={len(self.points)}/{self.capacity}, "
            f"metropolis={self.metropolis})"
        )

    @property
    def full(self):
        """True once there is no room for another point pair."""
        return len(self.points) > self.capacity - 2

    @property
    def total_mass(self):
        """Integral of the exponentiated envelope over the whole domain."""
        return self.points[self.tail].cum

    def add(self, point):
        """Append ``point`` to the arena and return its index."""
        if len(self.points) >= self.capacity:
            raise IndexError("envelope capacity exhausted")
        self.points.append(point)
        return len(self.points) - 1

    def neighbour(self, index, steps):
        """Follow ``steps`` links from ``index`` (negative = leftwards).

        Returns None if the walk falls off either end.
        """
        for _ in range(abs(steps)):
            if index is None:
                return None
            point = self.points[index]
            index = point.left if steps < 0 else point.right
        return index

    def point(self, index):
        return None if index is None else self.points[index]

    def indices(self):
        """Yield point indices from left to right."""
        index = self.head
        while index is not None:
            yield index
            index = self.points[index].right

    def ordered(self):
        """Return the points sorted by ``x``."""
        return [self.points[i] for i in self.indices()]

    def meet(self, index):
        """Recompute the intersection point at ``index`` from its neighbours."""
        q = self.points[index]
        if q.on_curve:
            raise EnvelopeViolation(f"point {index} is not an intersection point")
        q.x, q.y = chord_intersection(
            q.x,
            self.point(q.left),
            self.point(q.right),
            self.point(self.neighbour(index, -3)),
            self.point(self.neighbour(index, 3)),
            convex=self.convex,
            metropolis=self.metropolis,
        )

    def cumulate(self):
        """Refresh ``ymax``, exponentiated heights and cumulative integrals."""
        points = self.ordered()
        self.ymax = max(p.y for p in points)
        for p in points:
            p.ey = expshift(p.y, self.ymax)
        points[0].cum = 0.0
        for left, right in zip(points, points[1:]):
            right.cum = left.cum + segment_integral(left, right)

    def height_at(self, x):
        """Interpolate the envelope height at ``x``.

        Returns
        -------
        y : float
            Envelope log-height at ``x``
        left, right : int
            Indices of the points straddling ``x``
        """
        ql = self.head
        qr = self.points[ql].right
        while self.points[qr].x < x and self.points[qr].right is not None:
            ql, qr = qr, self.points[qr].right
        left, right = self.points[ql], self.points[qr]
        if right.x == left.x:
            return left.y, ql, qr
        w = (x - left.x) / (right.x - left.x)
        return left.y + w * (right.y - left.y), ql, qr

    def snapshot(self):
        return [copy.copy(p) for p in self.points]

    def restore(self, snapshot):
        self.points = snapshot

    def copy(self):
        """Deep copy, for handing the envelope to another sampling session."""
        return copy.deepcopy(self)

    def display(self, file=None):
        """Print one line per point, left to right."""
        file = sys.stdout if file is None else file
        print(
            f"envelope: {len(self.points)} of {self.capacity} points, "
            f"ymax={self.ymax:.6g}",
            file=file,
        )
        for i in self.indices():
            p = self.points[i]
            flag = "*" if p.on_curve else " "
            print(
                f"{i:5d}{flag} x={p.x:<14.6g} y={p.y:<14.6g} "
                f"ey={p.ey:<14.6g} cum={p.cum:.6g}",
                file=file,
            )
