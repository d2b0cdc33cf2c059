"""circles

Intersections and tangents involving circles.  Circles are given by a
radius and a center point, always in that order, and all functions
here except ``circle_3points()`` work in the x-y plane.

Square roots of differences of nearly equal squares lose most of their
precision in double arithmetic, which matters for chords of nearly
tangent lines and for tangent lines between nearly concentric circles.
Those roots are taken with ``mpmath`` at extended precision.
"""

import logging
from math import acos, atan2, cos, sin
from typing import NamedTuple, Optional

import mpmath as mpm
import numpy as np

from geokernel.errors import InvalidInputError
from geokernel.geom import (EPSILON, check_eps, check_line, close, isgoodnum,
                            mag, point, vclose)
from geokernel.lines import LINE, as_bounds

logger = logging.getLogger(__name__)


class Circle(NamedTuple):
    """A circle; ``normal`` is ``None`` for circles computed in 2D."""

    center: np.ndarray
    radius: float
    normal: Optional[np.ndarray]


def _check_radius(r, name='radius'):
    if not isgoodnum(r) or not np.isfinite(r) or r <= 0:
        raise InvalidInputError('{} must be a positive number, got {!r}'.format(name, r))
    return float(r)


def _mp_sqrt_diff(a, b):
    """``sqrt(a*a - b*b)`` at extended precision, clamped at zero."""
    mpa = mpm.mpf(a)
    mpb = mpm.mpf(b)
    dd = (mpa - mpb) * (mpa + mpb)
    if dd <= 0:
        return 0.0
    return float(mpm.sqrt(dd))


## circle-line
## -----------

def circle_line_intersection(r, cp, line, bounded=LINE, eps=EPSILON):
    """Intersect a 2D circle with a line, ray or segment.

    Returns a list of zero, one (tangent) or two points.  The points of
    a secant are returned in the order they occur along the line
    direction, and ones outside a bounded end are dropped.
    """
    eps = check_eps(eps)
    r = _check_radius(r)
    bounds = as_bounds(bounded)
    c = point(cp, 2)
    ln = check_line(line, 2, eps)
    d = ln[1] - ln[0]
    dd = float(np.dot(d, d))
    u0 = float(np.dot(c - ln[0], d)) / dd
    foot = ln[0] + u0 * d
    h = mag(c - foot)
    if close(h, r, eps, scale=r):
        hits = [foot]
    elif h > r:
        return []
    else:
        half = _mp_sqrt_diff(r, h)
        du = d / mag(d)
        hits = [foot - half * du, foot + half * du]

    result = []
    for p in hits:
        ## sign tests on the projections onto the line direction
        tol = eps * max(mag(p), mag(d)) * mag(d)
        if bounds.start and float(np.dot(p - ln[0], d)) < -tol:
            continue
        if bounds.end and float(np.dot(p - ln[1], d)) > tol:
            continue
        result.append(p)
    return result


## circle-circle
## -------------

def circle_circle_intersection(r1, cp1, r2, cp2, eps=EPSILON):
    """Intersect two 2D circles.

    Returns a list of zero, one (tangent) or two points, or ``None``
    when the circles coincide and so share every point.
    """
    eps = check_eps(eps)
    r1 = _check_radius(r1, 'r1')
    r2 = _check_radius(r2, 'r2')
    c1 = point(cp1, 2)
    c2 = point(cp2, 2)
    scale = max(mag(c1), mag(c2), r1, r2)
    delta = c2 - c1
    d = mag(delta)
    if d <= eps * scale:
        if close(r1, r2, eps):
            return None
        return []
    u = delta / d
    ## signed distance from c1 to the radical line
    a = (d * d + r1 * r1 - r2 * r2) / (2 * d)
    if close(d, r1 + r2, eps, scale) or close(d, abs(r1 - r2), eps, scale):
        return [c1 + a * u]
    if d > r1 + r2 or d < abs(r1 - r2):
        return []
    h = _mp_sqrt_diff(r1, a)
    perp = np.array([-u[1], u[0]])
    base = c1 + a * u
    return [base + h * perp, base - h * perp]


## tangents
## --------

def circle_point_tangents(r, cp, pt, eps=EPSILON):
    """Points of tangency on a 2D circle for lines through ``pt``.

    Returns two points, or one when ``pt`` lies on the circle.  A point
    inside the circle has no tangents and gives ``None``.
    """
    eps = check_eps(eps)
    r = _check_radius(r)
    c = point(cp, 2)
    p = point(pt, 2)
    delta = p - c
    d = mag(delta)
    if close(d, r, eps, scale=max(r, mag(p))):
        return [p]
    if d < r:
        return None
    phi = atan2(delta[1], delta[0])
    alpha = acos(r / d)
    return [c + r * np.array([cos(phi + alpha), sin(phi + alpha)]),
            c + r * np.array([cos(phi - alpha), sin(phi - alpha)])]


def circle_circle_tangents(r1, cp1, r2, cp2, eps=EPSILON):
    """Common tangent lines of two 2D circles.

    Each line runs from its tangent point on the first circle to its
    tangent point on the second.  The two external tangents come
    first, then the two internal ones.  Internal tangents only exist
    for disjoint circles, and no tangents exist when one circle lies
    inside the other.  Where two circles touch, the tangent through
    the touching point has coincident ends and is left out.  Returns
    ``None`` when there are no tangent lines.
    """
    eps = check_eps(eps)
    r1 = _check_radius(r1, 'r1')
    r2 = _check_radius(r2, 'r2')
    c1 = point(cp1, 2)
    c2 = point(cp2, 2)
    scale = max(mag(c1), mag(c2), r1, r2)
    delta = c2 - c1
    d = mag(delta)
    if d <= eps * scale:
        return None
    u = delta / d
    perp = np.array([-u[1], u[0]])

    ## (ratio, side, sense of the second tangent point)
    cases = [((r2 - r1) / d, -1, 1), ((r2 - r1) / d, 1, 1),
             (-(r1 + r2) / d, -1, -1), (-(r1 + r2) / d, 1, -1)]
    lines = []
    for ratio, side, ext in cases:
        if abs(ratio) > 1:
            continue
        s = _mp_sqrt_diff(1.0, ratio)
        coef = ratio * u + side * s * perp
        t1 = c1 - r1 * coef
        t2 = c2 - ext * r2 * coef
        if vclose(t1, t2, eps, scale):
            logger.debug('circle_circle_tangents: dropping tangent at touching point')
            continue
        lines.append(np.array([t1, t2]))
    if not lines:
        return None
    return lines


## construction
## ------------

def circle_3points(p1, p2, p3, eps=EPSILON):
    """Circle through three 2D or 3D points, or ``None`` if they are
    collinear.

    For 3D points the circle normal follows the right hand rule for
    ``p1 -> p2 -> p3``.
    """
    eps = check_eps(eps)
    a0 = point(p1)
    dim = len(a0)
    pts = [np.append(q, 0.0) if dim == 2 else q
           for q in (a0, point(p2, dim), point(p3, dim))]
    a = pts[0] - pts[2]
    b = pts[1] - pts[2]
    axb = np.cross(a, b)
    if mag(axb) <= eps * mag(a) * mag(b) or mag(axb) == 0.0:
        return None
    num = np.cross(np.dot(a, a) * b - np.dot(b, b) * a, axb)
    center = pts[2] + num / (2 * float(np.dot(axb, axb)))
    radius = mag(center - pts[0])
    if dim == 2:
        return Circle(center[:2], radius, None)
    return Circle(center, radius, axb / mag(axb))


__all__ = [
    'Circle',
    'circle_line_intersection',
    'circle_circle_intersection',
    'circle_point_tangents',
    'circle_circle_tangents',
    'circle_3points',
]
