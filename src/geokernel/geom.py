## tolerance kernel and vector foundations for geokernel

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

"""tolerance kernel for **geokernel**

====================
OVERVIEW
====================

Every other geokernel module routes its "effectively equal" and
"effectively zero" decisions through the predicates defined here.

constants
=========

``EPSILON`` (``1e-9``) is the default relative tolerance.  Every public
entry point accepts an ``eps`` keyword and validates it with
``check_eps()``.  Redefine the constant at your peril.

points
======

A point is a sequence of two or three real numbers.  Points are
converted on entry to ``numpy`` float arrays with ``point()`` (one
point) or ``points()`` (a list of points), which reject booleans,
non-finite values and mismatched dimensions.  All returned points are
``numpy`` arrays.

relative tolerance
==================

Comparisons are never absolute.  ``close(a, b, eps)`` passes when
``|a-b| <= eps*max(|a|,|b|)``; functions that know a more meaningful
size (a polygon diagonal, a segment length) pass it as ``scale``.
Because of this, scaling a whole problem by any positive factor does
not change any yes/no answer produced by the kernel.

"""

from math import isfinite

import numpy as np

from geokernel.errors import InvalidInputError


## constants
EPSILON = 1e-9

## operations on scalars
## -----------------------

## utility function to determine if argument is a "real" python
## number, since booleans are considered ints (True=1 and False=0 for
## integer arithmetic) but 1 and 0 are not considered boolean

def isgoodnum(n):
    """ determine if an argument is actually a scalar number, and not boolean
    """
    return (not isinstance(n, (bool, np.bool_))) and \
        isinstance(n, (int, float, np.integer, np.floating))

def check_eps(eps):
    """Validate a tolerance argument and return it as a float.

    The tolerance must be a finite, non-negative real number.  Anything
    else raises ``InvalidInputError``.
    """
    if not isgoodnum(eps):
        raise InvalidInputError('tolerance must be a real number, got {!r}'.format(eps))
    eps = float(eps)
    if not isfinite(eps):
        raise InvalidInputError('tolerance must be finite, got {}'.format(eps))
    if eps < 0:
        raise InvalidInputError('tolerance must be non-negative, got {}'.format(eps))
    return eps

## determine if scalars a and b are the same to within eps, relative
## to their magnitude or to an explicit scale
def close(a, b, eps=EPSILON, scale=None):
    """ are two scalars the same within ``eps`` relative to their size
    (or to ``scale``, when given)?
    """
    if scale is None:
        scale = max(abs(a), abs(b))
    return abs(a - b) <= eps * scale

def iszero(x, eps=EPSILON, scale=1.0):
    """ is the scalar or vector ``x`` zero within ``eps*scale``?"""
    if np.ndim(x) == 0:
        return abs(x) <= eps * scale
    return mag(x) <= eps * scale

## operations on vectors
## ------------------------

def point(p, dim=None):
    """Convert ``p`` to a 2D or 3D point.

    If ``dim`` is given the point must have exactly that many
    coordinates.
    """
    if isinstance(p, np.ndarray):
        if p.ndim != 1:
            raise InvalidInputError('a point must be a flat sequence, got shape {}'.format(p.shape))
        coords = p.tolist()
    elif isinstance(p, (list, tuple)):
        coords = list(p)
    else:
        raise InvalidInputError('a point must be a sequence of numbers, got {!r}'.format(p))
    if len(coords) not in (2, 3):
        raise InvalidInputError('a point must have 2 or 3 coordinates, got {}'.format(len(coords)))
    if dim is not None and len(coords) != dim:
        raise InvalidInputError('expected a {}D point, got {}D'.format(dim, len(coords)))
    for x in coords:
        if not isgoodnum(x) or not isfinite(x):
            raise InvalidInputError('bad point coordinate: {!r}'.format(x))
    return np.array(coords, dtype=float)

def points(ps, dim=None, minlen=1):
    """Convert a list of points to an ``(n, d)`` array.

    All points must share one dimension (``dim`` when given) and there
    must be at least ``minlen`` of them.
    """
    if isinstance(ps, np.ndarray) and ps.ndim == 2:
        rows = list(ps)
    elif isinstance(ps, (list, tuple, np.ndarray)):
        rows = list(ps)
    else:
        raise InvalidInputError('expected a list of points, got {!r}'.format(ps))
    if len(rows) < minlen:
        raise InvalidInputError('expected at least {} points, got {}'.format(minlen, len(rows)))
    if not rows:
        return np.zeros((0, dim or 2))
    first = point(rows[0], dim)
    d = len(first)
    return np.array([first] + [point(r, d) for r in rows[1:]], dtype=float)

def mag(a):
    """ compute the magnitude of vector ``a``"""
    return float(np.linalg.norm(a))

def dist(a, b):
    """ compute the euclidean distance between points ``a`` and ``b``"""
    return mag(np.asarray(a, dtype=float) - np.asarray(b, dtype=float))

def vclose(a, b, eps=EPSILON, scale=None):
    """ are two vectors the same within ``eps`` relative to their
    magnitudes (or to ``scale``)?
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape != b.shape:
        return False
    if scale is None:
        scale = max(mag(a), mag(b))
    return mag(a - b) <= eps * scale

def unit(v, eps=EPSILON):
    """Return ``v`` scaled to unit length, or ``None`` if ``|v| <= eps``."""
    v = np.asarray(v, dtype=float)
    m = mag(v)
    if m <= eps or m == 0.0:
        return None
    return v / m

def cross2(a, b):
    """ scalar 2D cross product ``a.x*b.y - a.y*b.x``"""
    return float(a[0] * b[1] - a[1] * b[0])

def to3d(p):
    """ lift 2D point(s) into the z=0 plane; 3D input is returned as is"""
    p = np.asarray(p, dtype=float)
    if p.shape[-1] == 3:
        return p
    pad = np.zeros(p.shape[:-1] + (1,))
    return np.concatenate([p, pad], axis=-1)

def scale_of(*arrays):
    """ the largest point magnitude among all points in ``arrays``"""
    best = 0.0
    for a in arrays:
        a = np.asarray(a, dtype=float)
        if a.size == 0:
            continue
        if a.ndim == 1:
            best = max(best, mag(a))
        else:
            best = max(best, float(np.max(np.linalg.norm(a, axis=-1))))
    return best

## bounding boxes
## --------------

def bbox(pts):
    """ return the ``[lo, hi]`` axis aligned bounding box of ``pts``"""
    pts = np.asarray(pts, dtype=float)
    return [pts.min(axis=0), pts.max(axis=0)]

def bbox_diagonal(pts):
    """ length of the bounding box diagonal of ``pts``"""
    lo, hi = bbox(pts)
    return mag(hi - lo)

def isinsidebbox(box, p, tol=0.0):
    """ does point ``p`` lie inside bounding box ``box``, grown by ``tol``?"""
    lo, hi = box
    return bool(np.all(p >= lo - tol) and np.all(p <= hi + tol))

## validity predicates
## -------------------

def is_valid_line(line, dim=None, eps=EPSILON):
    """Is ``line`` a pair of points separated by more than ``eps``
    relative to their magnitudes?"""
    try:
        pts = points(line, dim)
    except InvalidInputError:
        return False
    if len(pts) != 2:
        return False
    return mag(pts[1] - pts[0]) > eps * max(mag(pts[0]), mag(pts[1]))

def check_line(line, dim=None, eps=EPSILON, name='line'):
    """Validate ``line`` and return it as a ``(2, d)`` array."""
    pts = points(line, dim)
    if len(pts) != 2:
        raise InvalidInputError('{} must have exactly two points, got {}'.format(name, len(pts)))
    if not mag(pts[1] - pts[0]) > eps * max(mag(pts[0]), mag(pts[1])):
        raise InvalidInputError('{} has coincident endpoints'.format(name))
    return pts

def is_valid_plane(plane, eps=EPSILON):
    """Is ``plane`` a 4-tuple ``[A,B,C,D]`` with a nonzero normal?"""
    if not isinstance(plane, (list, tuple, np.ndarray)) or len(plane) != 4:
        return False
    if not all(isgoodnum(x) and isfinite(x) for x in plane):
        return False
    return mag(np.asarray(plane[:3], dtype=float)) > eps

def check_plane(plane, eps=EPSILON):
    """Validate ``plane`` and return it normalized."""
    if not is_valid_plane(plane, eps):
        raise InvalidInputError('invalid plane: {!r}'.format(plane))
    p = np.asarray(plane, dtype=float)
    return p / mag(p[:3])


__all__ = [
    'EPSILON',
    'isgoodnum',
    'check_eps',
    'close',
    'iszero',
    'point',
    'points',
    'mag',
    'dist',
    'vclose',
    'unit',
    'cross2',
    'to3d',
    'scale_of',
    'bbox',
    'bbox_diagonal',
    'isinsidebbox',
    'is_valid_line',
    'check_line',
    'is_valid_plane',
    'check_plane',
]
