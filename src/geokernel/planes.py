## planes for geokernel

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

"""planes

A plane is a 4-vector ``[A, B, C, D]`` describing ``Ax+By+Cz = D``.
All planes returned by this module are normalized, which is to say
``|[A,B,C]| = 1`` and ``D`` is the signed distance of the plane from
the origin.  Functions that accept a plane normalize it on entry.

The best-fit plane through a point cloud is found from the covariance
matrix of the centered points: the plane normal is the eigenvector of
the smallest eigenvalue.  Eigenvalues come from the closed-form
trigonometric solution for symmetric 3x3 matrices and the eigenvector
from the Cayley-Hamilton product of the other two shifted matrices, so
no iterative solver is involved.
"""

import logging
from math import acos, atan2, cos, degrees, pi, sqrt
from typing import NamedTuple

import numpy as np

from geokernel.errors import DegenerateGeometryError, InvalidInputError
from geokernel.geom import (EPSILON, bbox_diagonal, check_eps, check_line,
                            check_plane, mag, point, points, scale_of, unit)
from geokernel.lines import LINE, as_bounds, noncollinear_triple

logger = logging.getLogger(__name__)


## construction
## ------------

def plane3pt(p1, p2, p3, eps=EPSILON):
    """Plane through three 3D points, or ``None`` if they are collinear.

    The normal follows the right hand rule for ``p1 -> p2 -> p3``.
    """
    eps = check_eps(eps)
    a = point(p1, 3)
    b = point(p2, 3)
    c = point(p3, 3)
    ab = b - a
    ac = c - a
    n = np.cross(ab, ac)
    if mag(n) <= eps * mag(ab) * mag(ac) or mag(n) == 0.0:
        return None
    n = n / mag(n)
    return np.append(n, np.dot(n, a))


def plane3pt_indexed(pts, i1, i2, i3, eps=EPSILON):
    """Plane through three points of ``pts`` picked by index."""
    pts = points(pts, 3)
    return plane3pt(pts[i1], pts[i2], pts[i3], eps)


def plane_from_normal(normal, pt=(0, 0, 0), eps=EPSILON):
    """Plane with the given normal passing through ``pt``."""
    eps = check_eps(eps)
    n = unit(point(normal, 3), eps)
    if n is None:
        raise InvalidInputError('plane normal must be nonzero')
    return np.append(n, np.dot(n, point(pt, 3)))


## eigen-decomposition of symmetric 3x3 matrices
## ---------------------------------------------

def _eigenvals_symm_3(m, eps):
    """Eigenvalues of the symmetric 3x3 matrix ``m`` in ascending order."""
    p1 = m[0, 1] ** 2 + m[0, 2] ** 2 + m[1, 2] ** 2
    size = float(np.max(np.abs(m)))
    if p1 <= (eps * size) ** 2:
        ## already diagonal
        return np.sort(np.diag(m)), True
    q = np.trace(m) / 3
    p2 = (m[0, 0] - q) ** 2 + (m[1, 1] - q) ** 2 + (m[2, 2] - q) ** 2 + 2 * p1
    p = sqrt(p2 / 6)
    b = (m - q * np.eye(3)) / p
    r = np.linalg.det(b) / 2
    ## r leaves [-1, 1] only through rounding
    if r <= -1:
        phi = pi / 3
    elif r >= 1:
        phi = 0.0
    else:
        phi = acos(r) / 3
    e_big = q + 2 * p * cos(phi)
    e_small = q + 2 * p * cos(phi + 2 * pi / 3)
    e_mid = 3 * q - e_big - e_small
    return np.array([e_small, e_mid, e_big]), False


def _eigenvec_symm_3(m, evals, diagonal, i=0):
    """Unit eigenvector of ``m`` for ``evals[i]``, or ``None``."""
    if diagonal:
        k = int(np.argmin(np.abs(np.diag(m) - evals[i])))
        v = np.zeros(3)
        v[k] = 1.0
        return v
    ident = np.eye(3)
    a = (m - evals[(i + 1) % 3] * ident) @ (m - evals[(i + 2) % 3] * ident)
    norms = np.linalg.norm(a, axis=1)
    k = int(np.argmax(norms))
    if norms[k] == 0.0:
        return None
    return a[k] / norms[k]


def _covariance_evec_eval(pts, eps):
    """Return ``(centroid, normal, smallest_eigenvalue)`` of a point cloud."""
    pm = pts.mean(axis=0)
    centered = pts - pm
    cov = centered.T @ centered / len(pts)
    evals, diagonal = _eigenvals_symm_3(cov, eps)
    evec = _eigenvec_symm_3(cov, evals, diagonal)
    return pm, evec, evals[0]


## best fit
## --------

def plane_from_points(pts, fast=False, eps=EPSILON):
    """Plane through a list of 3 or more 3D points.

    Three points are handled by ``plane3pt()``.  For more points the
    plane is fitted through the centroid using the smallest-eigenvalue
    eigenvector of the covariance matrix.  Unless ``fast`` is true the
    points must be coplanar within ``eps`` relative to their spread, or
    ``None`` is returned.  With ``fast`` the best-fit plane is returned
    without that check.  Collinear points have no plane and give
    ``None``.
    """
    eps = check_eps(eps)
    pts = points(pts, 3)
    if len(pts) < 3:
        raise DegenerateGeometryError('a plane needs at least 3 points, got {}'.format(len(pts)))
    if len(pts) == 3:
        return plane3pt(pts[0], pts[1], pts[2], eps)
    if noncollinear_triple(pts, error=False, eps=eps) is None:
        return None
    pm, evec, _ = _covariance_evec_eval(pts, eps)
    if evec is None:
        logger.debug('plane_from_points: repeated smallest eigenvalue')
        return None
    plane = np.append(evec, np.dot(evec, pm))
    if not fast:
        size = bbox_diagonal(pts)
        err = float(np.max(np.abs(pts @ evec - plane[3])))
        if err > eps * size:
            return None
    return plane


## plane queries
## -------------

def plane_normal(plane, eps=EPSILON):
    """Unit normal of ``plane``."""
    return check_plane(plane, check_eps(eps))[:3]


def plane_offset(plane, eps=EPSILON):
    """Signed distance of ``plane`` from the origin along its normal."""
    return float(check_plane(plane, check_eps(eps))[3])


def plane_point_nearest_origin(plane, eps=EPSILON):
    """The point of ``plane`` closest to the origin."""
    p = check_plane(plane, check_eps(eps))
    return p[:3] * p[3]


def point_plane_distance(plane, pt, eps=EPSILON):
    """Signed distance from ``pt`` to ``plane``; positive on the side
    the normal points to."""
    p = check_plane(plane, check_eps(eps))
    return float(np.dot(p[:3], point(pt, 3)) - p[3])


def plane_closest_point(plane, pts, eps=EPSILON):
    """Project a point, or a list of points, onto ``plane``."""
    p = check_plane(plane, check_eps(eps))
    single = np.ndim(pts) == 1
    arr = point(pts, 3)[None, :] if single else points(pts, 3)
    proj = arr - np.outer(arr @ p[:3] - p[3], p[:3])
    return proj[0] if single else proj


def are_points_on_plane(pts, plane, eps=EPSILON):
    """Do all of ``pts`` lie on ``plane`` within ``eps`` relative to
    their magnitude?"""
    eps = check_eps(eps)
    p = check_plane(plane, eps)
    pts = points(pts, 3)
    scale = max(scale_of(pts), abs(p[3]))
    return bool(np.all(np.abs(pts @ p[:3] - p[3]) <= eps * scale))


def is_coplanar(pts, eps=EPSILON):
    """Are the 3D points ``pts`` coplanar?  Collinear points are not."""
    eps = check_eps(eps)
    pts = points(pts, 3)
    if len(pts) < 3:
        return False
    if len(pts) == 3:
        return plane3pt(pts[0], pts[1], pts[2], eps) is not None
    return plane_from_points(pts, fast=False, eps=eps) is not None


def plane_line_angle(plane, line, eps=EPSILON):
    """Angle in degrees between ``line`` and ``plane``, in ``[-90, 90]``.

    The angle is positive when the line direction points to the side of
    the plane its normal points to.
    """
    eps = check_eps(eps)
    n = check_plane(plane, eps)[:3]
    ln = check_line(line, 3, eps)
    d = unit(ln[1] - ln[0])
    return degrees(atan2(float(np.dot(d, n)), mag(np.cross(d, n))))


## intersections
## -------------

def _general_plane_line_intersection(plane, line, eps):
    """Return ``(point, u)``, ``(None, None)`` when the line lies in the
    plane, or ``None`` when it is parallel to and off the plane."""
    a = float(np.dot(plane[:3], line[0]) - plane[3])
    delta = line[1] - line[0]
    b = float(np.dot(plane[:3], delta))
    scale = max(mag(line[0]), mag(line[1]), abs(plane[3]))
    if abs(b) <= eps * mag(delta):
        if abs(a) <= eps * scale:
            return None, None
        return None
    u = -a / b
    return line[0] + u * delta, u


def plane_line_intersection(plane, line, bounded=LINE, eps=EPSILON):
    """Intersection of a 3D ``line`` with ``plane``.

    Returns the intersection point; the line itself, as a ``(2, 3)``
    array, if it lies in the plane; or ``None`` if it is parallel to
    the plane or the intersection is outside a bounded end.
    """
    eps = check_eps(eps)
    bounds = as_bounds(bounded)
    p = check_plane(plane, eps)
    ln = check_line(line, 3, eps)
    res = _general_plane_line_intersection(p, ln, eps)
    if res is None:
        return None
    pt, u = res
    if pt is None:
        return ln
    if bounds.start and u < -eps:
        return None
    if bounds.end and u > 1 + eps:
        return None
    return pt


def plane_intersection(plane1, plane2, plane3=None, eps=EPSILON):
    """Intersection of two or three planes.

    Two planes meet in a line, returned as two points, or ``None`` if
    they are parallel.  Three planes meet in a point, or ``None`` if
    the system is singular.
    """
    eps = check_eps(eps)
    planes = [check_plane(plane1, eps), check_plane(plane2, eps)]
    if plane3 is not None:
        planes.append(check_plane(plane3, eps))
        m = np.array([p[:3] for p in planes])
        if abs(np.linalg.det(m)) <= eps:
            return None
        return np.linalg.solve(m, np.array([p[3] for p in planes]))
    direction = np.cross(planes[0][:3], planes[1][:3])
    if mag(direction) <= eps:
        return None
    m = np.array([p[:3] for p in planes])
    rhs = np.array([p[3] for p in planes])
    ## minimum norm point on the intersection line
    pt = np.linalg.lstsq(m, rhs, rcond=None)[0]
    return np.array([pt, pt + direction / mag(direction)])


## local frames
## ------------

class PlaneFrame(NamedTuple):
    """Orthonormal 2D coordinate frame embedded in a plane."""

    origin: np.ndarray
    xaxis: np.ndarray
    yaxis: np.ndarray
    normal: np.ndarray

    def project(self, pts):
        """3D point(s) to 2D frame coordinates."""
        rel = np.asarray(pts, dtype=float) - self.origin
        return np.stack([rel @ self.xaxis, rel @ self.yaxis], axis=-1)

    def lift(self, pts2d):
        """2D frame coordinates back to 3D point(s)."""
        pts2d = np.asarray(pts2d, dtype=float)
        return self.origin + pts2d[..., :1] * self.xaxis + pts2d[..., 1:2] * self.yaxis


def plane_frame(plane, origin=None, xdir=None, eps=EPSILON):
    """Build a right-handed ``PlaneFrame`` on ``plane``.

    ``origin`` is projected onto the plane (default: the plane point
    nearest the world origin).  ``xdir`` is projected into the plane to
    give the x axis; by default the world axis least aligned with the
    normal is used.
    """
    eps = check_eps(eps)
    p = check_plane(plane, eps)
    n = p[:3]
    if origin is None:
        o = n * p[3]
    else:
        o = plane_closest_point(p, origin)
    x = None
    if xdir is not None:
        xd = point(xdir, 3)
        x = unit(xd - np.dot(xd, n) * n, eps * max(mag(xd), 1.0))
    if x is None:
        axis = np.zeros(3)
        axis[int(np.argmin(np.abs(n)))] = 1.0
        x = unit(axis - np.dot(axis, n) * n)
    y = np.cross(n, x)
    return PlaneFrame(o, x, y, n)


__all__ = [
    'plane3pt',
    'plane3pt_indexed',
    'plane_from_normal',
    'plane_from_points',
    'plane_normal',
    'plane_offset',
    'plane_point_nearest_origin',
    'point_plane_distance',
    'plane_closest_point',
    'are_points_on_plane',
    'is_coplanar',
    'plane_line_angle',
    'plane_line_intersection',
    'plane_intersection',
    'PlaneFrame',
    'plane_frame',
]
