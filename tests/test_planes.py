import math

import numpy as np
import pytest
from geokernel.planes import *
from geokernel.geom import close, mag, vclose
from geokernel.lines import RAY, SEGMENT
from geokernel.errors import DegenerateGeometryError, InvalidInputError
## unit tests for geokernel planes.py


def same_plane(p, q):
    return vclose(p, q, scale=1.0)


class TestConstruction:
    def test_plane3pt(self):
        p = plane3pt([0, 0, 2], [1, 0, 2], [0, 1, 2])
        assert same_plane(p, [0, 0, 1, 2])
        ## reversed order flips the normal
        q = plane3pt([0, 0, 2], [0, 1, 2], [1, 0, 2])
        assert same_plane(q, [0, 0, -1, -2])
        assert plane3pt([0, 0, 0], [1, 1, 1], [2, 2, 2]) is None

    def test_plane3pt_indexed(self):
        pts = [[9, 9, 9], [0, 0, 0], [1, 0, 0], [0, 0, 1]]
        assert same_plane(plane3pt_indexed(pts, 1, 2, 3), [0, -1, 0, 0])

    def test_plane_from_normal(self):
        assert same_plane(plane_from_normal([0, 0, 5], [1, 2, 3]), [0, 0, 1, 3])
        with pytest.raises(InvalidInputError):
            plane_from_normal([0, 0, 0])


class TestBestFit:
    def test_square(self):
        pts = [[0, 0, 1], [2, 0, 1], [2, 2, 1], [0, 2, 1]]
        p = plane_from_points(pts)
        assert close(abs(p[2]), 1.0)
        assert close(p[3] * p[2], 1.0)

    def test_tilted(self):
        n = np.array([1.0, 2.0, 2.0]) / 3
        u = np.array([2.0, -1.0, 0.0]) / math.sqrt(5)
        v = np.cross(n, u)
        pts = [7 * n + a * u + b * v for a, b in ((0, 0), (3, 1), (-2, 4), (5, -3), (1, 1))]
        p = plane_from_points(pts)
        assert p is not None
        sgn = 1 if p[0] > 0 else -1
        assert vclose(sgn * p, np.append(n, 7), scale=10.0)

    def test_diagonal_covariance(self):
        ## axis-aligned rectangle: the covariance is already diagonal
        pts = [[-3, -1, 5], [3, -1, 5], [3, 1, 5], [-3, 1, 5]]
        p = plane_from_points(pts)
        assert close(abs(p[2]), 1.0)

    def test_nonplanar(self):
        pts = [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0.5]]
        assert plane_from_points(pts) is None
        assert plane_from_points(pts, fast=True) is not None

    def test_degenerate(self):
        assert plane_from_points([[0, 0, 0], [1, 1, 1], [2, 2, 2], [3, 3, 3]]) is None
        with pytest.raises(DegenerateGeometryError):
            plane_from_points([[0, 0, 0], [1, 1, 1]])

    def test_scale_invariance(self):
        pts = np.array([[0, 0, 0], [1, 0, 0.001], [1, 1, 0.002], [0, 1, 0.001]])
        for s in (1e-6, 1.0, 1e6):
            p = plane_from_points(pts * s)
            assert p is not None
            assert close(abs(p[2]), 1 / math.sqrt(1 + 2e-6), scale=1.0)

    def test_is_coplanar(self):
        assert is_coplanar([[0, 0, 0], [1, 0, 0], [0, 1, 0], [3, 3, 0]])
        assert not is_coplanar([[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]])
        assert not is_coplanar([[0, 0, 0], [1, 0, 0], [2, 0, 0]])


class TestQueries:
    plane = [0, 0, 2, 4]  # z = 2

    def test_parts(self):
        assert vclose(plane_normal(self.plane), [0, 0, 1])
        assert close(plane_offset(self.plane), 2.0)
        assert vclose(plane_point_nearest_origin(self.plane), [0, 0, 2])

    def test_distance(self):
        assert close(point_plane_distance(self.plane, [5, 5, 7]), 5.0)
        assert close(point_plane_distance(self.plane, [5, 5, -1]), -3.0)

    def test_closest_point(self):
        assert vclose(plane_closest_point(self.plane, [1, 2, 3]), [1, 2, 2])
        proj = plane_closest_point(self.plane, [[1, 2, 3], [4, 5, 6]])
        assert proj.shape == (2, 3)
        assert vclose(proj[1], [4, 5, 2])

    def test_on_plane(self):
        assert are_points_on_plane([[1, 2, 2], [-4, 0, 2]], self.plane)
        assert not are_points_on_plane([[1, 2, 2], [-4, 0, 2.01]], self.plane)

    def test_angle(self):
        assert close(plane_line_angle(self.plane, [[0, 0, 0], [0, 0, 1]]), 90.0)
        assert close(plane_line_angle(self.plane, [[0, 0, 0], [1, 0, -1]]), -45.0)
        assert abs(plane_line_angle(self.plane, [[0, 0, 0], [1, 0, 0]])) < 1e-9


class TestIntersection:
    plane = [0, 0, 1, 2]

    def test_line(self):
        pt = plane_line_intersection(self.plane, [[1, 1, 0], [1, 1, 1]])
        assert vclose(pt, [1, 1, 2])

    def test_bounded(self):
        ln = [[1, 1, 0], [1, 1, 1]]
        assert plane_line_intersection(self.plane, ln, bounded=SEGMENT) is None
        assert vclose(plane_line_intersection(self.plane, ln, bounded=RAY), [1, 1, 2])
        assert plane_line_intersection(self.plane, ln[::-1], bounded=RAY) is None

    def test_parallel_and_inside(self):
        assert plane_line_intersection(self.plane, [[0, 0, 0], [1, 0, 0]]) is None
        res = plane_line_intersection(self.plane, [[0, 0, 2], [1, 0, 2]])
        assert res.shape == (2, 3)

    def test_two_planes(self):
        ln = plane_intersection([0, 0, 1, 0], [1, 0, 0, 3])
        assert ln.shape == (2, 3)
        for p in ln:
            assert close(p[2], 0.0, scale=1.0)
            assert close(p[0], 3.0)
        assert close(abs(ln[1][1] - ln[0][1]), 1.0)
        assert plane_intersection([0, 0, 1, 0], [0, 0, 2, 5]) is None

    def test_three_planes(self):
        pt = plane_intersection([1, 0, 0, 1], [0, 1, 0, 2], [0, 0, 1, 3])
        assert vclose(pt, [1, 2, 3])
        assert plane_intersection([1, 0, 0, 1], [1, 0, 0, 2], [0, 0, 1, 3]) is None


class TestFrame:
    def test_roundtrip(self):
        plane = plane3pt([1, 0, 0], [0, 1, 0], [0, 0, 1])
        f = plane_frame(plane, origin=[1, 0, 0])
        assert close(mag(f.xaxis), 1.0) and close(mag(f.yaxis), 1.0)
        assert abs(np.dot(f.xaxis, f.yaxis)) < 1e-12
        assert vclose(np.cross(f.xaxis, f.yaxis), f.normal)
        pts = np.array([[1, 0, 0], [0, 1, 0], [0, 0, 1]], dtype=float)
        flat = f.project(pts)
        assert flat.shape == (3, 2)
        assert np.allclose(f.lift(flat), pts)

    def test_xdir(self):
        f = plane_frame([0, 0, 1, 0], xdir=[0, 1, 1])
        assert vclose(f.xaxis, [0, 1, 0])
        assert vclose(f.yaxis, [-1, 0, 0])
