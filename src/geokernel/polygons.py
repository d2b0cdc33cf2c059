## polygon classification for geokernel

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

"""polygons

A polygon is a list of three or more 2D or 3D points, implicitly
closed (the first point is not repeated at the end).  In 2D a polygon
listed counter-clockwise has positive signed area.  3D polygons must
be planar for area, centroid and convexity; this is checked, and
non-planar input gives ``None``.

``point_in_polygon()`` returns ``1`` for inside, ``0`` for on the
boundary and ``-1`` for outside.  Inside is decided by the even-odd
rule unless ``nonzero`` is set, in which case any nonzero winding
number counts as inside.  The two rules differ only for
self-intersecting polygons.
"""

import logging
from math import pi
from typing import NamedTuple, Sequence

import numpy as np

from geokernel.errors import DegenerateGeometryError, InvalidInputError
from geokernel.geom import (EPSILON, bbox, bbox_diagonal, check_eps,
                            check_line, cross2, isinsidebbox, iszero, mag, point,
                            points, scale_of)
from geokernel.lines import LINE, as_bounds, is_collinear
from geokernel.planes import (are_points_on_plane, plane_frame,
                              plane_from_normal, plane_line_intersection)

logger = logging.getLogger(__name__)

## unbounded ends of a line are cut off this many polygon bounding box
## diagonals away when a 2D line is clipped against a polygon
LINE_EXTENSION_SCALE = 100


class Mesh(NamedTuple):
    """A closed polyhedral surface: ``vertices`` plus ``faces`` given as
    lists of vertex indices, wound counter-clockwise seen from outside."""

    vertices: Sequence
    faces: Sequence


def _poly(poly, dim=None):
    return points(poly, dim, minlen=3)


def _area_vector(pts):
    ## Newell's method on points made relative to the first vertex
    q = pts - pts[0]
    return 0.5 * np.cross(q, np.roll(q, -1, axis=0)).sum(axis=0)


def _signed_area_2d(pts):
    q = pts - pts[0]
    qn = np.roll(q, -1, axis=0)
    return 0.5 * float(np.sum(q[:, 0] * qn[:, 1] - qn[:, 0] * q[:, 1]))


## area and orientation
## --------------------

def polygon_area(poly, signed=False, eps=EPSILON):
    """Area of a polygon.

    In 2D, ``signed=True`` gives a positive area for counter-clockwise
    polygons and a negative one for clockwise polygons.  In 3D the area
    is always non-negative and ``None`` is returned if the polygon is
    not planar.
    """
    eps = check_eps(eps)
    pts = _poly(poly)
    if pts.shape[1] == 2:
        a = _signed_area_2d(pts)
        return a if signed else abs(a)
    av = _area_vector(pts)
    area = mag(av)
    size = bbox_diagonal(pts)
    if area <= eps * size * size:
        return 0.0
    plane = plane_from_normal(av, pts[0])
    if not are_points_on_plane(pts, plane, eps):
        return None
    return area


def triangle_area(a, b, c, eps=EPSILON):
    """Area of a triangle; signed (positive when counter-clockwise) in
    2D, non-negative in 3D.  Areas within ``eps`` times the squared
    size of the triangle are returned as exactly ``0.0``."""
    eps = check_eps(eps)
    pa = point(a)
    dim = len(pa)
    pb = point(b, dim)
    pc = point(c, dim)
    size = bbox_diagonal(np.array([pa, pb, pc]))
    if dim == 2:
        area = 0.5 * cross2(pb - pa, pc - pa)
    else:
        area = 0.5 * mag(np.cross(pb - pa, pc - pa))
    if iszero(area, eps, scale=size * size):
        return 0.0
    return area


def polygon_normal(poly, eps=EPSILON):
    """Unit normal of a polygon by Newell's method.

    The normal points toward the side from which the polygon is seen
    winding clockwise.  2D polygons are treated as lying in the z=0
    plane.  A polygon with zero area has no normal and gives ``None``.
    """
    eps = check_eps(eps)
    pts = _poly(poly)
    if pts.shape[1] == 2:
        pts = np.hstack([pts, np.zeros((len(pts), 1))])
    av = _area_vector(pts)
    size = bbox_diagonal(pts)
    if mag(av) <= eps * size * size:
        return None
    return -av / mag(av)


def plane_from_polygon(poly, fast=False, eps=EPSILON):
    """Plane containing a 3D polygon, with the polygon's normal.

    Returns ``None`` for zero-area polygons, and for non-planar ones
    unless ``fast`` is set.
    """
    eps = check_eps(eps)
    pts = _poly(poly, 3)
    n = polygon_normal(pts, eps)
    if n is None:
        return None
    plane = plane_from_normal(n, pts[0])
    if fast or are_points_on_plane(pts, plane, eps):
        return plane
    return None


def is_polygon_clockwise(poly, eps=EPSILON):
    """Is the 2D polygon ``poly`` wound clockwise?

    A polygon whose area is within ``eps`` times its squared size has
    no winding and is reported as not clockwise.
    """
    eps = check_eps(eps)
    pts = _poly(poly)
    if pts.shape[1] != 2:
        raise InvalidInputError('is_polygon_clockwise() needs a 2D polygon')
    size = bbox_diagonal(pts)
    area = _signed_area_2d(pts)
    return area < 0 and not iszero(area, eps, scale=size * size)


def clockwise_polygon(poly, eps=EPSILON):
    """Return ``poly`` wound clockwise, reversing it if needed."""
    return reverse_polygon(poly) if not is_polygon_clockwise(poly, eps) else _poly(poly)


def ccw_polygon(poly, eps=EPSILON):
    """Return ``poly`` wound counter-clockwise, reversing it if needed."""
    return reverse_polygon(poly) if is_polygon_clockwise(poly, eps) else _poly(poly)


def reverse_polygon(poly):
    """Reverse the winding of ``poly``, keeping the same first point."""
    pts = _poly(poly)
    return np.vstack([pts[:1], pts[:0:-1]])


def is_polygon_convex(poly, eps=EPSILON):
    """Is ``poly`` convex?

    Repeated consecutive points are ignored.  A 3D polygon must be
    planar to be convex.  Raises ``DegenerateGeometryError`` if all the
    points are collinear.
    """
    eps = check_eps(eps)
    pts = _poly(poly)
    if is_collinear(pts, eps):
        raise DegenerateGeometryError('is_polygon_convex(): polygon points are collinear')
    if pts.shape[1] == 3:
        plane = plane_from_polygon(pts, eps=eps)
        if plane is None:
            return False
        pts = plane_frame(plane, origin=pts[0]).project(pts)
    size = bbox_diagonal(pts)
    e = np.roll(pts, -1, axis=0) - pts
    lens = np.linalg.norm(e, axis=1)
    keep = lens > eps * size
    e = e[keep]
    lens = lens[keep]
    en = np.roll(e, -1, axis=0)
    cr = e[:, 0] * en[:, 1] - e[:, 1] * en[:, 0]
    dt = np.sum(e * en, axis=1)
    tol = eps * lens * np.roll(lens, -1)
    if np.any(cr > tol) and np.any(cr < -tol):
        return False
    if np.any((np.abs(cr) <= tol) & (dt < 0)):
        ## doubles back on itself
        return False
    ## a star polygon turns the same way at every vertex but winds
    ## more than once
    turning = float(np.sum(np.arctan2(cr, dt)))
    return abs(turning) < 3 * pi


## centroids
## ---------

def polygon_centroid(poly, eps=EPSILON):
    """Centroid of the area of a 2D or planar 3D polygon.

    Returns ``None`` for zero-area or non-planar polygons.
    """
    eps = check_eps(eps)
    pts = _poly(poly)
    if pts.shape[1] == 3:
        plane = plane_from_polygon(pts, eps=eps)
        if plane is None:
            return None
        frame = plane_frame(plane, origin=pts[0])
        c = polygon_centroid(frame.project(pts), eps)
        return None if c is None else frame.lift(c)
    q = pts - pts[0]
    qn = np.roll(q, -1, axis=0)
    cr = q[:, 0] * qn[:, 1] - qn[:, 0] * q[:, 1]
    area = 0.5 * float(cr.sum())
    size = bbox_diagonal(pts)
    if abs(area) <= eps * size * size:
        return None
    c = np.array([np.sum((q[:, 0] + qn[:, 0]) * cr),
                  np.sum((q[:, 1] + qn[:, 1]) * cr)]) / (6 * area)
    return pts[0] + c


def region_centroid(region, eps=EPSILON):
    """Centroid of a polygon with holes.

    ``region`` is a list of polygons; the first is the outer boundary
    and the rest are holes.  Windings are ignored.
    """
    eps = check_eps(eps)
    if not region:
        raise InvalidInputError('region_centroid() needs at least one polygon')
    total = 0.0
    acc = None
    for i, poly in enumerate(region):
        area = polygon_area(poly, eps=eps)
        if area is None:
            return None
        c = polygon_centroid(poly, eps) if area > 0 else None
        if c is None:
            if i == 0:
                return None
            continue
        w = area if i == 0 else -area
        total += w
        acc = w * c if acc is None else acc + w * c
    outer = polygon_area(region[0], eps=eps)
    if total <= eps * outer:
        return None
    return acc / total


def mesh_centroid(mesh, eps=EPSILON):
    """Centroid of the volume enclosed by a closed ``Mesh``.

    Faces with more than three vertices are fanned from their first
    vertex.  Returns ``None`` if the enclosed volume is zero.
    """
    eps = check_eps(eps)
    verts = points(mesh.vertices, 3, minlen=4)
    origin = verts.mean(axis=0)
    q = verts - origin
    vol = 0.0
    acc = np.zeros(3)
    for face in mesh.faces:
        if len(face) < 3:
            raise InvalidInputError('mesh faces need at least 3 vertices, got {}'.format(len(face)))
        a = q[face[0]]
        for i in range(1, len(face) - 1):
            b = q[face[i]]
            c = q[face[i + 1]]
            ## six times the signed volume of (origin, a, b, c)
            v = float(np.dot(a, np.cross(b, c)))
            vol += v
            acc += v * (a + b + c)
    size = bbox_diagonal(verts)
    if abs(vol) <= eps * size ** 3:
        return None
    return origin + acc / (4 * vol)


def centroid(obj, eps=EPSILON):
    """Centroid of a polygon, a region (list of polygons) or a ``Mesh``."""
    if isinstance(obj, Mesh):
        return mesh_centroid(obj, eps)
    if len(obj) and np.ndim(obj[0]) == 2:
        return region_centroid(obj, eps)
    return polygon_centroid(obj, eps)


## point in polygon
## ----------------

def _on_boundary(p, a, b, tol):
    e = b - a
    ee = np.sum(e * e, axis=1)
    t = np.sum((p - a) * e, axis=1) / np.where(ee > 0, ee, 1.0)
    t = np.clip(t, 0.0, 1.0)
    closest = a + t[:, None] * e
    return bool(np.any(np.linalg.norm(p - closest, axis=1) <= tol))


def _pip(p, pts, nonzero, eps):
    size = max(bbox_diagonal(pts), scale_of(pts, p))
    tol = eps * size
    if not isinsidebbox(bbox(pts), p, tol):
        return -1
    a = pts
    b = np.roll(pts, -1, axis=0)
    if _on_boundary(p, a, b, tol):
        return 0
    ay = a[:, 1]
    by = b[:, 1]
    if nonzero:
        c = (b[:, 0] - a[:, 0]) * (p[1] - ay) - (by - ay) * (p[0] - a[:, 0])
        up = (ay <= p[1]) & (by > p[1]) & (c > 0)
        down = (ay > p[1]) & (by <= p[1]) & (c < 0)
        winding = int(np.count_nonzero(up)) - int(np.count_nonzero(down))
        return 1 if winding != 0 else -1
    crosses = (ay > p[1]) != (by > p[1])
    with np.errstate(divide='ignore', invalid='ignore'):
        xint = a[:, 0] + (p[1] - ay) * (b[:, 0] - a[:, 0]) / (by - ay)
    count = int(np.count_nonzero(crosses & (p[0] < xint)))
    return 1 if count % 2 else -1


def point_in_polygon(pt, poly, nonzero=False, eps=EPSILON):
    """Classify a 2D point against a 2D polygon.

    Returns ``1`` inside, ``0`` on the boundary and ``-1`` outside.
    The boundary test uses ``eps`` relative to the polygon's size.
    """
    eps = check_eps(eps)
    p = point(pt, 2)
    pts = _poly(poly, 2)
    return _pip(p, pts, nonzero, eps)


## polygon-line intersection
## -------------------------

def _split_params(pts, s0, s1, eps):
    """Parameters along ``s0 -> s1`` where the polygon boundary meets it."""
    seg = s1 - s0
    seglen = mag(seg)
    size = max(scale_of(pts, s0, s1), bbox_diagonal(pts))
    tol = eps * size
    params = [0.0, 1.0]
    b = np.roll(pts, -1, axis=0)
    for a, e in zip(pts, b - pts):
        denom = cross2(seg, e)
        if abs(denom) > eps * seglen * mag(e):
            w = a - s0
            t = cross2(w, e) / denom
            u = cross2(w, seg) / denom
            if -eps <= t <= 1 + eps and -eps <= u <= 1 + eps:
                params.append(min(max(t, 0.0), 1.0))
    ## vertices lying on the segment, including collinear edges
    t = (pts - s0) @ seg / (seglen * seglen)
    off = np.linalg.norm(s0 + np.outer(t, seg) - pts, axis=1)
    for ti, oi in zip(t, off):
        if oi <= tol and 0.0 <= ti <= 1.0:
            params.append(float(ti))
    params.sort()
    ttol = tol / seglen
    merged = [params[0]]
    for t in params[1:]:
        if t - merged[-1] > ttol:
            merged.append(t)
    merged[-1] = 1.0
    return merged


def _polygon_line_2d(pts, ln, bounds, nonzero, eps, extend):
    d = ln[1] - ln[0]
    dd = float(np.dot(d, d))
    lo, hi = bbox(pts)
    reach = extend * mag(hi - lo) / mag(d)
    uc = float(np.dot((lo + hi) / 2 - ln[0], d)) / dd
    u0 = 0.0 if bounds.start else min(0.0, uc) - reach
    u1 = 1.0 if bounds.end else max(1.0, uc) + reach
    s0 = ln[0] + u0 * d
    s1 = ln[0] + u1 * d
    params = _split_params(pts, s0, s1, eps)
    seg = s1 - s0

    def at(t):
        return s0 + t * seg

    kept = [_pip(at((t0 + t1) / 2), pts, nonzero, eps) >= 0
            for t0, t1 in zip(params, params[1:])]
    result = []
    run_start = None
    for i, t in enumerate(params):
        before = i > 0 and kept[i - 1]
        after = i < len(kept) and kept[i]
        if after and not before:
            run_start = t
        elif before and not after:
            result.append(np.array([at(run_start), at(t)]))
        elif not before and not after and _pip(at(t), pts, nonzero, eps) >= 0:
            result.append(np.array([at(t)]))
    logger.debug('polygon_line_intersection: %d split points, %d pieces',
                 len(params), len(result))
    return result


def polygon_line_intersection(poly, line, bounded=LINE, nonzero=False,
                              eps=EPSILON, extend=LINE_EXTENSION_SCALE):
    """Intersect a line, ray or segment with a polygon.

    Returns a list of pieces in order along the line direction.  A
    piece is either a ``(2, d)`` array, a stretch of the line inside or
    on the polygon, or a ``(1, d)`` array, a single point where the
    line only touches the boundary.  Returns ``None`` when they do not
    meet.

    In 2D an unbounded end is cut off ``extend`` polygon bounding box
    diagonals beyond the polygon.  For 3D polygons the line either
    crosses the polygon plane, giving at most one point, or lies in it
    and is handled in 2D on that plane.  A non-planar 3D polygon raises
    ``DegenerateGeometryError``.
    """
    eps = check_eps(eps)
    bounds = as_bounds(bounded)
    pts = _poly(poly)
    dim = pts.shape[1]
    ln = check_line(line, dim, eps)
    if dim == 2:
        result = _polygon_line_2d(pts, ln, bounds, nonzero, eps, extend)
        return result or None

    plane = plane_from_polygon(pts, eps=eps)
    if plane is None:
        raise DegenerateGeometryError('polygon_line_intersection(): polygon is not planar')
    hit = plane_line_intersection(plane, ln, bounds, eps)
    if hit is None:
        return None
    frame = plane_frame(plane, origin=pts[0])
    pts2 = frame.project(pts)
    if hit.ndim == 1:
        if _pip(frame.project(hit), pts2, nonzero, eps) >= 0:
            return [hit[None, :]]
        return None
    result = _polygon_line_2d(pts2, frame.project(ln), bounds, nonzero, eps, extend)
    return [frame.lift(r) for r in result] or None


__all__ = [
    'LINE_EXTENSION_SCALE',
    'Mesh',
    'polygon_area',
    'triangle_area',
    'polygon_normal',
    'plane_from_polygon',
    'is_polygon_clockwise',
    'clockwise_polygon',
    'ccw_polygon',
    'reverse_polygon',
    'is_polygon_convex',
    'polygon_centroid',
    'region_centroid',
    'mesh_centroid',
    'centroid',
    'point_in_polygon',
    'polygon_line_intersection',
]
