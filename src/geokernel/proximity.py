"""Convex hull distance and collision by the GJK algorithm.

The distance between the convex hulls of two point sets equals the
distance from the origin to their Minkowski difference.  GJK never
forms that difference explicitly.  Instead it keeps a small simplex
of *support points* (differences of one point from each set) and
repeatedly replaces it with the sub-simplex nearest the origin.

The simplex reduction helpers ``_closest_s1``, ``_closest_s2`` and
``_closest_s3`` return ``(closest_point, sub_simplex)`` where
``sub_simplex`` is the smallest face of the input that still contains
the closest point.  Each one falls back to a lower-dimensional face
when its simplex is degenerate.  ``geokernel.lines`` reuses
``_closest_s1`` for point-segment queries.

2D point sets are lifted into the z=0 plane before iterating.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import numpy as np

from geokernel.errors import InvalidInputError
from geokernel.geom import EPSILON, bbox_diagonal, check_eps, mag, points, to3d

logger = logging.getLogger(__name__)

## the GJK loop is capped at MAX_ITERATION_FACTOR*(n1+n2+4) steps
MAX_ITERATION_FACTOR = 8

Simplex = List[np.ndarray]


def _closest_s1(s: Sequence[np.ndarray], eps: float = EPSILON) -> Tuple[np.ndarray, Simplex]:
    """Closest point to the origin on the segment ``s``."""

    a, b = s[0], s[1]
    c = b - a
    if mag(c) <= eps * (mag(a) + mag(b)) / 2:
        return a, [a]
    t = -float(np.dot(a, c)) / float(np.dot(c, c))
    if t <= 0:
        return a, [a]
    if t >= 1:
        return b, [b]
    return a + t * c, [a, b]


def _closest_s2(s: Sequence[np.ndarray], eps: float = EPSILON) -> Tuple[np.ndarray, Simplex]:
    """Closest point to the origin on the 3D triangle ``s``."""

    a, b, c = s[0], s[1], s[2]
    ab = b - a
    ac = c - a
    n = np.cross(ab, ac)
    edges = ((a, b), (b, c), (c, a))
    if mag(n) <= eps * mag(ab) * mag(ac):
        ## collinear or coincident vertices
        return _nearest([_closest_s1(e, eps) for e in edges])
    ## projection of the origin onto the triangle plane
    q = n * (float(np.dot(a, n)) / float(np.dot(n, n)))
    outside = [e for e in edges
               if float(np.dot(np.cross(e[1] - e[0], q - e[0]), n)) < 0]
    if not outside:
        return q, [a, b, c]
    return _nearest([_closest_s1(e, eps) for e in outside])


def _closest_s3(s: Sequence[np.ndarray], eps: float = EPSILON) -> Tuple[np.ndarray, Simplex]:
    """Closest point to the origin on the tetrahedron ``s``."""

    faces = (((0, 1, 2), 3), ((0, 1, 3), 2), ((0, 2, 3), 1), ((1, 2, 3), 0))
    a = s[0]
    vol = float(np.dot(np.cross(s[1] - a, s[2] - a), s[3] - a))
    if abs(vol) <= eps * mag(s[1] - a) * mag(s[2] - a) * mag(s[3] - a):
        ## flat tetrahedron, any face may hold the answer
        return _nearest([_closest_s2([s[i] for i in f], eps) for f, _ in faces])
    facing = []
    for (i, j, k), opp in faces:
        n = np.cross(s[j] - s[i], s[k] - s[i])
        side_opp = float(np.dot(n, s[opp] - s[i]))
        side_org = float(np.dot(n, -s[i]))
        if side_opp * side_org < 0:
            facing.append([s[i], s[j], s[k]])
    if not facing:
        ## origin enclosed
        return np.zeros_like(a), list(s)
    return _nearest([_closest_s2(f, eps) for f in facing])


def _nearest(candidates):
    return min(candidates, key=lambda r: mag(r[0]))


def _closest_simplex(s: Sequence[np.ndarray], eps: float = EPSILON) -> Tuple[np.ndarray, Simplex]:
    if len(s) == 1:
        return s[0], [s[0]]
    if len(s) == 2:
        return _closest_s1(s, eps)
    if len(s) == 3:
        return _closest_s2(s, eps)
    if len(s) == 4:
        return _closest_s3(s, eps)
    raise InvalidInputError('simplex must have 1 to 4 points, got {}'.format(len(s)))


def _support_diff(p1: np.ndarray, p2: np.ndarray, d: np.ndarray) -> np.ndarray:
    """Support point of the Minkowski difference ``p1 - p2`` in direction ``d``."""

    return p1[int(np.argmax(p1 @ d))] - p2[int(np.argmin(p2 @ d))]


def _prepare(points1, points2, eps):
    eps = check_eps(eps)
    p1 = points(points1, minlen=1)
    p2 = points(points2, minlen=1)
    if p1.shape[1] != p2.shape[1]:
        raise InvalidInputError('point sets must have the same dimension, got {}D and {}D'
                                .format(p1.shape[1], p2.shape[1]))
    p1 = to3d(p1)
    p2 = to3d(p2)
    scale = bbox_diagonal(np.vstack([p1, p2]))
    maxiter = MAX_ITERATION_FACTOR * (len(p1) + len(p2) + 4)
    return p1, p2, eps, scale, maxiter


def _in_simplex(v, simplex, tol):
    return any(mag(v - w) <= tol for w in simplex)


def convex_distance(points1, points2, eps=EPSILON):
    """Return the distance between the convex hulls of two point sets.

    ``points1`` and ``points2`` are lists of 2D or 3D points of the same
    dimension.  The result is ``0`` when the hulls touch or overlap.
    """

    return _gjk_distance(*_prepare(points1, points2, eps))


def _gjk_distance(p1, p2, eps, scale, maxiter):
    tol = eps * scale
    d = p1[0] - p2[0]
    simplex = [d]
    lbd = 0.0
    for i in range(maxiter):
        dn = mag(d)
        if dn <= tol:
            logger.debug('convex_distance: hulls intersect after %d iterations', i)
            return 0.0
        v = _support_diff(p1, p2, -d)
        lbd = max(lbd, float(np.dot(d, v)) / dn)
        if dn - lbd <= eps * dn:
            logger.debug('convex_distance: converged after %d iterations', i)
            return dn
        if _in_simplex(v, simplex, tol):
            ## no new support point, d is already optimal
            return dn
        d, simplex = _closest_simplex(simplex + [v], eps)
    logger.warning('convex_distance: no convergence after %d iterations, '
                   'returning upper bound', maxiter)
    return mag(d)


def convex_collision(points1, points2, eps=EPSILON):
    """Return ``True`` if the convex hulls of two point sets intersect.

    Hulls that only touch count as colliding.  Agrees with
    ``convex_distance(points1, points2) == 0``.
    """

    p1, p2, eps, scale, maxiter = _prepare(points1, points2, eps)
    tol = eps * scale
    d = p1[0] - p2[0]
    simplex = [d]
    for i in range(maxiter):
        dn = mag(d)
        if dn <= tol:
            return True
        v = _support_diff(p1, p2, -d)
        if float(np.dot(v, d)) > tol * dn:
            ## v.d/|d| bounds the hull distance from below
            logger.debug('convex_collision: separated after %d iterations', i)
            return False
        closest, simplex = _closest_simplex(simplex + [v], eps)
        if mag(closest - d) <= tol:
            ## stalled inside the tolerance band; settle it by distance
            return _gjk_distance(p1, p2, eps, scale, maxiter) == 0.0
        d = closest
    logger.warning('convex_collision: no convergence after %d iterations', maxiter)
    return _gjk_distance(p1, p2, eps, scale, maxiter) == 0.0


__all__ = [
    'MAX_ITERATION_FACTOR',
    'convex_distance',
    'convex_collision',
]
