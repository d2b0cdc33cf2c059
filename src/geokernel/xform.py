## rigid transformations in 3D homogeneous coordinates for geokernel

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

from math import atan2, cos, degrees, isfinite, radians, sin, sqrt
from typing import NamedTuple

import numpy as np

from geokernel.errors import InvalidInputError
from geokernel.geom import EPSILON, check_eps, isgoodnum, iszero, mag, point

## a transformation is a 4x4 numpy array acting on column vectors, so
## that M @ [x, y, z, 1] is the transformed point.  Angles are in
## degrees throughout.

## Any rigid motion is a screw motion: a rotation about some axis line
## followed by a translation along that same axis.  rot_decode()
## recovers the screw from a matrix and rigid_transform() builds the
## matrix back from it.


class RotDecoded(NamedTuple):
    """Screw decomposition of a rigid transform."""

    angle: float
    axis: np.ndarray
    center: np.ndarray
    translation: np.ndarray


def translation(delta, inverse=False):
    """4x4 matrix translating by ``delta``."""
    d = point(delta, 3)
    if inverse:
        d = -d
    T = np.eye(4)
    T[:3, 3] = d
    return T


def _check_angle(angle):
    if not (isgoodnum(angle) and isfinite(angle)):
        raise InvalidInputError('rotation angle must be a finite number, got {!r}'.format(angle))
    return float(angle)


def rotation(axis, angle, cp=None, inverse=False, eps=EPSILON):
    """4x4 matrix rotating by ``angle`` degrees about ``axis``.

    The rotation is right-handed about ``axis``.  If ``cp`` is given
    the axis passes through that point instead of the origin.  The axis
    is a direction, so its length is compared against ``eps`` directly.
    """
    eps = check_eps(eps)
    u = point(axis, 3)
    if iszero(u, eps):
        raise InvalidInputError('zero-length rotation axis not allowed')
    angle = _check_angle(angle)
    u = u / mag(u)
    if inverse:
        angle = -angle
    rad = radians(angle % 360.0)

    ux, uy, uz = u
    cang = cos(rad)
    cmin = 1.0 - cang
    sang = sin(rad)

    # see http://www.opengl-tutorial.org/assets/faq_quaternions/index.html#Q38
    R = np.array([[cang + ux*ux*cmin, ux*uy*cmin - uz*sang, ux*uz*cmin + uy*sang, 0],
                  [uy*ux*cmin + uz*sang, cang + uy*uy*cmin, uy*uz*cmin - ux*sang, 0],
                  [uz*ux*cmin - uy*sang, uz*uy*cmin + ux*sang, cang + uz*uz*cmin, 0],
                  [0, 0, 0, 1]])
    if cp is None:
        return R
    return translation(cp) @ R @ translation(cp, inverse=True)


def rigid_transform(angle, axis, center=(0, 0, 0), translation=(0, 0, 0)):
    """Build the transform that rotates by ``angle`` degrees about the
    line through ``center`` along ``axis`` and then translates by
    ``translation``.  Undoes ``rot_decode()``:

    ``rigid_transform(*rot_decode(M))`` reproduces ``M``.
    """
    angle = _check_angle(angle)
    T = np.eye(4)
    T[:3, 3] = point(translation, 3)
    if angle == 0:
        return T
    return T @ rotation(axis, angle, cp=center)


def _check_matrix(M):
    try:
        A = np.asarray(M, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError('transform must be a 4x4 numeric matrix') from exc
    if A.shape != (4, 4):
        raise InvalidInputError('transform must be 4x4, got shape {}'.format(A.shape))
    if not np.all(np.isfinite(A)):
        raise InvalidInputError('transform has non-finite entries')
    return A


def _rigid_error(A):
    R = A[:3, :3]
    ortho = float(np.max(np.abs(R.T @ R - np.eye(3))))
    bottom = float(np.max(np.abs(A[3] - np.array([0, 0, 0, 1]))))
    return max(ortho, bottom, abs(np.linalg.det(R) - 1.0))


def is_rigid_transform(M, eps=EPSILON):
    """Is ``M`` a 4x4 rotation plus translation, within ``eps``?"""
    eps = check_eps(eps)
    try:
        A = _check_matrix(M)
    except InvalidInputError:
        return False
    return _rigid_error(A) <= eps


def rot_decode(M, long=False, eps=EPSILON):
    """Decode a rigid transform into ``RotDecoded(angle, axis, center,
    translation)``.

    ``angle`` is in degrees, in ``[0, 180]``; with ``long`` set the
    rotation is given the long way round instead, as an angle in
    ``[180, 360)`` about the reversed axis.  ``center`` is the point of
    the rotation axis closest to the origin and ``translation`` is
    parallel to the axis.  A transform with no rotation decodes to
    angle ``0`` about ``[0, 0, 1]`` with its whole translation.  Raises
    ``InvalidInputError`` if ``M`` is not a rigid transform.
    """
    eps = check_eps(eps)
    A = _check_matrix(M)
    if _rigid_error(A) > eps:
        raise InvalidInputError('rot_decode(): matrix is not a rotation plus translation',
                                details={'error': _rigid_error(A)})
    R = A[:3, :3]
    t = A[:3, 3]
    tr = float(np.trace(R))

    ## Each row of axis_matrix is 4*q_k*q_im for the unit quaternion
    ## (q_re, q_im).  Extract the quaternion from whichever of the four
    ## squared components is largest.
    axis_matrix = R + R.T - (tr - 1.0) * np.eye(3)
    diag = np.diag(axis_matrix)
    k = int(np.argmax(diag))
    if 1.0 + tr >= diag[k]:
        q_re = sqrt(max(1.0 + tr, 0.0)) / 2
        q_im = np.array([R[2, 1] - R[1, 2], R[0, 2] - R[2, 0], R[1, 0] - R[0, 1]]) / (4 * q_re)
    else:
        qk = sqrt(diag[k]) / 2
        q_im = axis_matrix[k] / (4 * qk)
        q_re = (R[(k + 2) % 3, (k + 1) % 3] - R[(k + 1) % 3, (k + 2) % 3]) / (4 * qk)

    c_sin = mag(q_im)
    c_cos = abs(q_re)
    if c_sin <= eps:
        return RotDecoded(0.0, np.array([0.0, 0.0, 1.0]), np.zeros(3), t.copy())

    sign = 1.0 if q_re >= 0 else -1.0
    axis = sign * q_im / c_sin
    angle = degrees(2 * atan2(c_sin, c_cos))

    along = float(np.dot(t, axis)) * axis
    tproj = t - along
    center = (tproj + np.cross(axis, tproj) * c_cos / c_sin) / 2

    if long and angle < 180:
        return RotDecoded(360.0 - angle, -axis, center, along)
    return RotDecoded(angle, axis, center, along)


__all__ = [
    'RotDecoded',
    'translation',
    'rotation',
    'rigid_transform',
    'is_rigid_transform',
    'rot_decode',
]
