"""Ear-clipping triangulation of simple polygons.

Polygons are triangulated through an index list into their point
array, so a sub-selection of a larger point list can be triangulated
and the resulting triangles refer back to the original points.  3D
polygons are projected onto a 2D frame in their best-fit plane first.

Besides simple polygons, the clipper handles "non-twisted" polygons
that touch themselves: repeated vertices, vertices touching other
vertices, edges in contact with other edges, and whiskers (spikes that
go out and come straight back).  Points that coincide with a
candidate ear's vertices do not block the ear, unless the polygon
passes through the ear's tip again and heads into the triangle.
Self-crossing input either leaves the clipper with no ear to cut or
leaves a remainder that winds backwards, and is reported as an error.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from geokernel.errors import DegenerateGeometryError, InvalidInputError
from geokernel.geom import EPSILON, bbox_diagonal, check_eps, cross2, mag, points
from geokernel.lines import is_collinear
from geokernel.planes import are_points_on_plane, plane_from_points

logger = logging.getLogger(__name__)

Triangle = Tuple[int, int, int]


def polygon_triangulate(poly: Sequence[Sequence[float]],
                        ind: Optional[Sequence[int]] = None,
                        error: bool = True,
                        eps: float = EPSILON) -> Optional[List[Triangle]]:
    """Triangulate a 2D or planar 3D polygon.

    ``ind`` optionally selects and orders the points of ``poly`` that
    make up the polygon.  Returns a list of index triples into ``poly``
    wound the same way as the polygon.  Collinear input, and zero-area
    input that does not cross itself, give ``None``.  Self-crossing or
    non-coplanar input raises ``DegenerateGeometryError``, or gives
    ``None`` if ``error`` is false.
    """

    eps = check_eps(eps)
    pts = points(poly, minlen=3)
    if ind is None:
        ind = list(range(len(pts)))
    else:
        ind = [int(i) for i in ind]
        if len(ind) < 3:
            raise InvalidInputError('need at least 3 indices, got {}'.format(len(ind)))
        bad = [i for i in ind if not -len(pts) <= i < len(pts)]
        if bad:
            raise InvalidInputError('polygon indices out of range: {}'.format(bad))
        ind = [i % len(pts) for i in ind]

    if pts.shape[1] == 3:
        pts = _project(pts, ind, error, eps)
        if pts is None:
            return None

    sub = pts[ind]
    if is_collinear(sub, eps):
        return None
    size = bbox_diagonal(sub)
    area = _loop_area(pts, ind)
    if abs(area) <= eps * size * size:
        if _crosses_itself(sub, eps * size * size):
            if error:
                raise DegenerateGeometryError('polygon_triangulate(): zero-area polygon is self-crossing',
                                              details={'indices': ind})
        return None

    ccw = area > 0
    tris = _ear_clip(pts, ind if ccw else ind[::-1], size, eps)
    if tris is None:
        if error:
            raise DegenerateGeometryError('polygon_triangulate(): polygon is self-crossing',
                                          details={'indices': ind})
        return None
    if not ccw:
        tris = [(a, c, b) for a, b, c in tris]
    logger.debug('polygon_triangulate: %d points, %d triangles', len(ind), len(tris))
    return tris or None


def _project(pts: np.ndarray, ind: List[int], error: bool, eps: float) -> Optional[np.ndarray]:
    """Project 3D points into 2D coordinates in the best-fit plane of
    ``pts[ind]``; ``None`` if those points are collinear."""

    sub = pts[ind]
    plane = plane_from_points(sub, fast=True, eps=eps)
    if plane is None:
        return None
    if not are_points_on_plane(sub, plane, eps):
        if error:
            raise DegenerateGeometryError('polygon_triangulate(): polygon is not coplanar')
        return None
    n = plane[:3]
    p0 = sub[0]
    far = sub[int(np.argmax(np.linalg.norm(sub - p0, axis=1)))] - p0
    v1 = far - np.dot(far, n) * n
    v1 = v1 / mag(v1)
    v2 = np.cross(n, v1)
    rel = pts - p0
    return np.stack([rel @ v1, rel @ v2], axis=1)


def _crosses_itself(sub: np.ndarray, atol: float) -> bool:
    """Do two non-adjacent edges of the closed loop ``sub`` cross at a
    point interior to both?"""

    n = len(sub)
    for i in range(n):
        a, b = sub[i], sub[(i + 1) % n]
        for j in range(i + 2, n):
            if i == 0 and j == n - 1:
                continue
            c, d = sub[j], sub[(j + 1) % n]
            o1 = cross2(b - a, c - a)
            o2 = cross2(b - a, d - a)
            o3 = cross2(d - c, a - c)
            o4 = cross2(d - c, b - c)
            if ((o1 > atol and o2 < -atol) or (o1 < -atol and o2 > atol)) and \
               ((o3 > atol and o4 < -atol) or (o3 < -atol and o4 > atol)):
                return True
    return False


def _in_closed_triangle(p: np.ndarray, a, b, c, atol: float) -> np.ndarray:
    ## p is (k, 2); triangle a, b, c is counter-clockwise
    def side(u, v):
        e = v - u
        return e[0] * (p[:, 1] - u[1]) - e[1] * (p[:, 0] - u[0])
    return (side(a, b) >= -atol) & (side(b, c) >= -atol) & (side(c, a) >= -atol)


def _loop_area(pts: np.ndarray, idx: List[int]) -> float:
    q = pts[idx] - pts[idx[0]]
    qn = np.roll(q, -1, axis=0)
    return 0.5 * float(np.sum(q[:, 0] * qn[:, 1] - qn[:, 0] * q[:, 1]))


def _is_ear(pts: np.ndarray, idx: List[int], pos: int, tol: float, atol: float) -> bool:
    n = len(idx)
    i0, i1, i2 = idx[(pos - 1) % n], idx[pos], idx[(pos + 1) % n]
    a, b, c = pts[i0], pts[i1], pts[i2]
    if cross2(b - a, c - b) <= atol:
        return False
    for q in range(n):
        j = idx[q]
        if q in ((pos - 1) % n, pos, (pos + 1) % n):
            continue
        p = pts[j]
        if mag(p - a) <= tol or mag(p - c) <= tol:
            continue
        if mag(p - b) <= tol:
            ## another pass through the tip blocks the ear if one of
            ## its edges heads into the triangle
            for w in (pts[idx[(q - 1) % n]], pts[idx[(q + 1) % n]]):
                v = w - b
                if cross2(c - b, v) > atol and cross2(v, a - b) > atol:
                    return False
            continue
        if _in_closed_triangle(p[np.newaxis], a, b, c, atol)[0]:
            return False
    return True


def _ear_clip(pts: np.ndarray, ind: List[int], size: float, eps: float) -> Optional[List[Triangle]]:
    """Clip ears off the counter-clockwise index loop ``ind``.

    Every pass removes at least one index, so the loop is bounded by
    the number of indices.  Returns ``None`` when no ear can be found,
    or when the loop left after clipping winds backwards.
    """

    tol = eps * size
    atol = eps * size * size
    idx = list(ind)
    tris: List[Triangle] = []
    for _ in range(len(ind)):
        n = len(idx)
        if n <= 3:
            break
        area = _loop_area(pts, idx)
        if area < -atol:
            logger.debug('_ear_clip: remaining loop of %d points winds backwards', n)
            return None
        if area <= atol:
            logger.debug('_ear_clip: dropping zero-area remainder of %d points', n)
            idx = []
            break
        dup = next((i for i in range(n)
                    if mag(pts[idx[i]] - pts[idx[(i + 1) % n]]) <= tol), None)
        if dup is not None:
            del idx[(dup + 1) % n]
            continue
        whisker = next((i for i in range(n)
                        if mag(pts[idx[(i - 1) % n]] - pts[idx[(i + 1) % n]]) <= tol), None)
        if whisker is not None:
            for k in sorted((whisker, (whisker + 1) % n), reverse=True):
                del idx[k]
            continue
        ear = next((i for i in range(n) if _is_ear(pts, idx, i, tol, atol)), None)
        if ear is not None:
            tris.append((idx[(ear - 1) % n], idx[ear], idx[(ear + 1) % n]))
            del idx[ear]
            continue
        return None
    else:
        if len(idx) > 3:
            logger.warning('_ear_clip: step bound reached with %d points left', len(idx))
            return None

    if len(idx) == 3:
        a, b, c = (pts[i] for i in idx)
        turn = cross2(b - a, c - a)
        if turn < -atol:
            return None
        if turn > atol:
            tris.append(tuple(idx))
    return tris


__all__ = ['polygon_triangulate']
