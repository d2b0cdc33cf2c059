## lines, rays and segments for geokernel

## Copyright (c) 2025 geokernel contributors

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""lines, rays and segments

A line is a pair of distinct points.  Lines are parameterized over
``u`` so that ``u=0`` is the first point and ``u=1`` the second.
Whether the figure stops at either point is carried separately by a
``Bounds`` pair:

- ``LINE = Bounds(False, False)`` extends both ways,
- ``RAY = Bounds(True, False)`` starts at the first point,
- ``SEGMENT = Bounds(True, True)`` stops at both points.

Any function taking a ``bounded`` argument also accepts a single
boolean (``True`` for a segment, ``False`` for a line) or a pair of
booleans, normalized with ``as_bounds()``.
"""

import logging
from typing import NamedTuple

import numpy as np

from geokernel.errors import DegenerateGeometryError, InvalidInputError
from geokernel.geom import (EPSILON, check_eps, check_line, cross2, mag,
                            point, points)
from geokernel.proximity import _closest_s1, convex_distance

logger = logging.getLogger(__name__)


class Bounds(NamedTuple):
    """Which ends of a line are bounding."""

    start: bool
    end: bool

    @classmethod
    def line(cls):
        return cls(False, False)

    @classmethod
    def ray(cls):
        return cls(True, False)

    @classmethod
    def segment(cls):
        return cls(True, True)


LINE = Bounds.line()
RAY = Bounds.ray()
SEGMENT = Bounds.segment()


def as_bounds(value):
    """Normalize a boundedness argument to a ``Bounds`` pair."""
    if isinstance(value, Bounds):
        return value
    if isinstance(value, (bool, np.bool_)):
        return Bounds(bool(value), bool(value))
    if isinstance(value, (list, tuple)) and len(value) == 2 and \
       all(isinstance(v, (bool, np.bool_)) for v in value):
        return Bounds(bool(value[0]), bool(value[1]))
    raise InvalidInputError('bad boundedness value: {!r}'.format(value))


## closest point and distance
## --------------------------

def _clamp_param(u, bounds):
    if bounds.start and u < 0:
        u = 0.0
    if bounds.end and u > 1:
        u = 1.0
    return u


def _closest(line, p, bounds, eps):
    ## line and p already validated
    if bounds == SEGMENT:
        c, _ = _closest_s1([line[0] - p, line[1] - p], eps)
        return p + c
    d = line[1] - line[0]
    u = float(np.dot(p - line[0], d)) / float(np.dot(d, d))
    u = _clamp_param(u, bounds)
    return line[0] + u * d


def line_closest_point(line, pt, bounded=LINE, eps=EPSILON):
    """Return the point on ``line`` closest to ``pt``.

    For a segment the computation is shared with the GJK 1-simplex
    reduction; for a line it is the orthogonal projection; for a ray
    (or any single bounded end) the projection parameter is clamped at
    the bounded end.
    """
    eps = check_eps(eps)
    bounds = as_bounds(bounded)
    p = point(pt)
    line = check_line(line, len(p), eps)
    return _closest(line, p, bounds, eps)


def point_line_distance(pt, line, bounded=LINE, eps=EPSILON):
    """Distance from ``pt`` to the (possibly bounded) ``line``."""
    eps = check_eps(eps)
    bounds = as_bounds(bounded)
    p = point(pt)
    line = check_line(line, len(p), eps)
    return mag(p - _closest(line, p, bounds, eps))


def segment_distance(seg1, seg2, eps=EPSILON):
    """Minimum distance between two segments in 2D or 3D."""
    eps = check_eps(eps)
    s1 = check_line(seg1, eps=eps, name='seg1')
    s2 = check_line(seg2, len(s1[0]), eps, name='seg2')
    return convex_distance(s1, s2, eps)


def is_point_on_line(pt, line, bounded=LINE, eps=EPSILON):
    """Does ``pt`` lie on ``line`` within ``eps`` relative to the size
    of the figure?"""
    eps = check_eps(eps)
    bounds = as_bounds(bounded)
    p = point(pt)
    line = check_line(line, len(p), eps)
    scale = max(mag(line[0]), mag(line[1]), mag(p), mag(line[1] - line[0]))
    return mag(p - _closest(line, p, bounds, eps)) <= eps * scale


## intersection
## ------------

def _line_params(l1, l2, eps):
    """Return ``(t, u)`` for the intersection of two 2D lines, or
    ``None`` when they are parallel."""
    d1 = l1[1] - l1[0]
    d2 = l2[1] - l2[0]
    denom = cross2(d1, d2)
    if abs(denom) <= eps * mag(d1) * mag(d2):
        return None
    w = l2[0] - l1[0]
    t = cross2(w, d2) / denom
    u = cross2(w, d1) / denom
    return t, u


def _inside_bounds(u, bounds, eps):
    if bounds.start and u < -eps:
        return False
    if bounds.end and u > 1 + eps:
        return False
    return True


def line_intersection(line1, line2, bounded1=LINE, bounded2=LINE, eps=EPSILON):
    """Compute the intersection of two 2D lines, rays or segments.

    Returns the intersection point, or ``None`` when the lines are
    parallel or coincident, or when the intersection falls outside a
    bounded end of either figure.  Each end of each figure is checked
    independently, so a segment can be intersected with a ray.
    """
    eps = check_eps(eps)
    b1 = as_bounds(bounded1)
    b2 = as_bounds(bounded2)
    l1 = check_line(line1, 2, eps, name='line1')
    l2 = check_line(line2, 2, eps, name='line2')
    tu = _line_params(l1, l2, eps)
    if tu is None:
        logger.debug('line_intersection: lines are parallel')
        return None
    t, u = tu
    if not (_inside_bounds(t, b1, eps) and _inside_bounds(u, b2, eps)):
        return None
    return l1[0] + t * (l1[1] - l1[0])


## construction
## ------------

def line_normal(p1, p2, eps=EPSILON):
    """Unit normal of the 2D line from ``p1`` to ``p2``, pointing left."""
    line = check_line([p1, p2], 2, check_eps(eps))
    d = line[1] - line[0]
    return np.array([-d[1], d[0]]) / mag(d)


def _furthest(pts, i):
    return int(np.argmax(np.linalg.norm(pts - pts[i], axis=1)))


def noncollinear_triple(pts, error=True, eps=EPSILON):
    """Find three indices of points in ``pts`` that are not collinear.

    The triple starts at index 0, takes the point furthest from it,
    and then the point furthest from the line through those two.
    Returns ``None`` (or raises ``DegenerateGeometryError`` when
    ``error`` is true) if all the points are collinear or coincident.
    """
    eps = check_eps(eps)
    pts = points(pts)
    if len(pts) < 3:
        raise InvalidInputError('need at least three points, got {}'.format(len(pts)))
    b = _furthest(pts, 0)
    span = mag(pts[b] - pts[0])
    if span <= eps * max(mag(pts[0]), mag(pts[b])):
        if error:
            raise DegenerateGeometryError('all points are coincident')
        return None
    n = (pts[b] - pts[0]) / span
    rel = pts - pts[0]
    offsets = rel - np.outer(rel @ n, n)
    dists = np.linalg.norm(offsets, axis=1)
    c = int(np.argmax(dists))
    if dists[c] <= eps * span:
        if error:
            raise DegenerateGeometryError('points are collinear')
        return None
    return (0, b, c)


def is_collinear(pts, eps=EPSILON):
    """Are all the points of ``pts`` on one line?"""
    return noncollinear_triple(pts, error=False, eps=eps) is None


def line_from_points(pts, fast=False, eps=EPSILON):
    """Return a line through a list of collinear points.

    The line runs from the first point to the point furthest from it.
    Returns ``None`` if the points are not collinear, unless ``fast``
    is set, in which case collinearity is not checked.
    """
    eps = check_eps(eps)
    pts = points(pts, minlen=2)
    b = _furthest(pts, 0)
    if mag(pts[b] - pts[0]) <= eps * max(mag(pts[0]), mag(pts[b])):
        return None
    if not fast and len(pts) > 2 and not is_collinear(pts, eps):
        return None
    return np.array([pts[0], pts[b]])


__all__ = [
    'Bounds',
    'LINE',
    'RAY',
    'SEGMENT',
    'as_bounds',
    'line_closest_point',
    'point_line_distance',
    'segment_distance',
    'is_point_on_line',
    'line_intersection',
    'line_normal',
    'noncollinear_triple',
    'is_collinear',
    'line_from_points',
]
