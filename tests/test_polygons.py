import math

import numpy as np
import pytest
from geokernel.polygons import *
from geokernel.geom import close, vclose
from geokernel.lines import RAY, SEGMENT
from geokernel.errors import DegenerateGeometryError, InvalidInputError
## unit tests for geokernel polygons.py

square = [[0, 0], [4, 0], [4, 4], [0, 4]]
## an L shaped (non-convex) hexagon, counter-clockwise
ell = [[0, 0], [6, 0], [6, 2], [2, 2], [2, 6], [0, 6]]
## five pointed star drawn without lifting the pen
star = [[math.cos(math.radians(90 + 144 * i)), math.sin(math.radians(90 + 144 * i))]
        for i in range(5)]


def lift(poly, z=0.0):
    ## place a 2D polygon in a tilted 3D plane
    a = np.array([1.0, 0.0, 1.0]) / math.sqrt(2)
    b = np.array([0.0, 1.0, 0.0])
    return [x * a + y * b + np.array([0, 0, z]) for x, y in poly]


class TestArea:
    def test_2d(self):
        assert close(polygon_area(square), 16.0)
        assert close(polygon_area(square, signed=True), 16.0)
        assert close(polygon_area(square[::-1], signed=True), -16.0)
        assert close(polygon_area(ell), 20.0)

    def test_3d(self):
        assert close(polygon_area(lift(ell, 3)), 20.0)
        assert close(polygon_area(lift(ell[::-1])), 20.0)
        bent = [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 1]]
        assert polygon_area(bent) is None

    def test_degenerate(self):
        assert polygon_area([[0, 0, 0], [1, 1, 1], [2, 2, 2]]) == 0.0
        with pytest.raises(InvalidInputError):
            polygon_area([[0, 0], [1, 1]])

    def test_triangle_area(self):
        assert close(triangle_area([0, 0], [2, 0], [0, 2]), 2.0)
        assert close(triangle_area([0, 0], [0, 2], [2, 0]), -2.0)
        assert close(triangle_area([0, 0, 0], [0, 2, 0], [2, 0, 0]), 2.0)

    def test_triangle_area_tolerance(self):
        sliver = ([0, 0], [1, 0], [2, 1e-12])
        assert triangle_area(*sliver) == 0.0
        assert triangle_area(*sliver, eps=0) > 0
        assert triangle_area([0, 0, 0], [1, 0, 0], [2, 1e-12, 0]) == 0.0


class TestOrientation:
    def test_clockwise_agrees_with_area(self):
        for poly in (square, ell, star, [[0, 0], [1, 0], [0, 1]]):
            for p in (poly, poly[::-1]):
                assert is_polygon_clockwise(p) == (polygon_area(p, signed=True) < 0)

    def test_clockwise(self):
        assert not is_polygon_clockwise(square)
        assert is_polygon_clockwise(square[::-1])
        with pytest.raises(InvalidInputError):
            is_polygon_clockwise(lift(square))

    def test_clockwise_tolerance(self):
        ## a sliver with a tiny clockwise area has no winding at the
        ## default tolerance
        sliver = [[0, 0], [2, 1e-12], [1, 0]]
        assert not is_polygon_clockwise(sliver)
        assert is_polygon_clockwise(sliver, eps=0)
        with pytest.raises(InvalidInputError):
            is_polygon_clockwise(square, eps=-1)

    def test_reorder(self):
        cw = clockwise_polygon(square)
        assert is_polygon_clockwise(cw)
        assert vclose(cw[0], square[0])
        assert not is_polygon_clockwise(ccw_polygon(cw))
        assert np.array_equal(ccw_polygon(square), np.array(square, dtype=float))
        r = reverse_polygon([[0, 0], [1, 0], [1, 1]])
        assert r.tolist() == [[0.0, 0.0], [1.0, 1.0], [1.0, 0.0]]

    def test_normal(self):
        ## seen from +z the counter-clockwise square winds the other way
        assert vclose(polygon_normal(square), [0, 0, -1])
        assert vclose(polygon_normal(square[::-1]), [0, 0, 1])
        assert polygon_normal([[0, 0, 0], [1, 0, 0], [2, 0, 0]]) is None
        n = polygon_normal(lift(square))
        assert vclose(n, np.array([1.0, 0.0, -1.0]) / math.sqrt(2))

    def test_plane_from_polygon(self):
        p = plane_from_polygon(lift(square, 2))
        assert vclose(p[:3], polygon_normal(lift(square, 2)))
        assert plane_from_polygon([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 1]]) is None


class TestConvexity:
    def test_convex(self):
        assert is_polygon_convex(square)
        assert is_polygon_convex(square[::-1])
        assert not is_polygon_convex(ell)
        assert is_polygon_convex(lift(square))

    def test_repeated_and_collinear_points(self):
        assert is_polygon_convex([[0, 0], [2, 0], [2, 0], [4, 0], [4, 4], [0, 4]])

    def test_star(self):
        assert not is_polygon_convex(star)

    def test_collinear(self):
        with pytest.raises(DegenerateGeometryError):
            is_polygon_convex([[0, 0], [1, 1], [2, 2]])


class TestCentroid:
    def test_polygon(self):
        assert vclose(polygon_centroid(square), [2, 2])
        c = polygon_centroid(ell)
        ## two rectangles: 12 at (3, 1) and 8 at (1, 4)
        assert vclose(c, [(12 * 3 + 8 * 1) / 20, (12 * 1 + 8 * 4) / 20])
        assert polygon_centroid([[0, 0], [1, 1], [2, 2]]) is None

    def test_3d(self):
        c = polygon_centroid(lift(square, 1))
        assert vclose(c, lift([[2, 2]], 1)[0])

    def test_region(self):
        hole = [[1, 1], [3, 1], [3, 3], [1, 3]]
        assert vclose(region_centroid([square, hole]), [2, 2])
        off = [[0, 0], [2, 0], [2, 2], [0, 2]]
        ## 16 at (2, 2) minus 4 at (1, 1)
        assert vclose(region_centroid([square, off]), [(32 - 4) / 12, (32 - 4) / 12])
        assert vclose(centroid([square, hole]), [2, 2])

    def test_mesh(self):
        verts = [[0, 0, 0], [2, 0, 0], [2, 2, 0], [0, 2, 0],
                 [0, 0, 2], [2, 0, 2], [2, 2, 2], [0, 2, 2]]
        faces = [[0, 3, 2, 1], [4, 5, 6, 7], [0, 1, 5, 4],
                 [1, 2, 6, 5], [2, 3, 7, 6], [3, 0, 4, 7]]
        cube = Mesh(verts, faces)
        assert vclose(mesh_centroid(cube), [1, 1, 1])
        assert vclose(centroid(cube), [1, 1, 1])
        flat = Mesh(verts[:4] + verts[:4], [[0, 1, 2], [0, 2, 3]])
        assert mesh_centroid(flat) is None

    def test_dispatch(self):
        assert vclose(centroid(square), [2, 2])


class TestPointInPolygon:
    def test_classify(self):
        assert point_in_polygon([2, 2], square) == 1
        assert point_in_polygon([5, 2], square) == -1
        assert point_in_polygon([4, 2], square) == 0
        assert point_in_polygon([3, 3], ell) == -1
        assert point_in_polygon([1, 5], ell) == 1

    def test_boundary(self):
        for poly in (square, ell, star):
            pts = np.array(poly, dtype=float)
            for a, b in zip(pts, np.roll(pts, -1, axis=0)):
                assert point_in_polygon(a, poly) == 0
                assert point_in_polygon((a + b) / 2, poly) == 0

    def test_winding_rules(self):
        ## the star's center is wound twice
        assert point_in_polygon([0, 0], star) == -1
        assert point_in_polygon([0, 0], star, nonzero=True) == 1
        ## a point of the star is wound once
        p = [0, 0.8]
        assert point_in_polygon(p, star) == 1
        assert point_in_polygon(p, star, nonzero=True) == 1

    def test_bad_input(self):
        with pytest.raises(InvalidInputError):
            point_in_polygon([0, 0, 0], square)


class TestPolygonLine:
    def test_through(self):
        res = polygon_line_intersection(square, [[-1, 2], [0, 2]])
        assert len(res) == 1
        assert res[0].shape == (2, 2)
        assert vclose(res[0][0], [0, 2]) and vclose(res[0][1], [4, 2])

    def test_segment_inside(self):
        res = polygon_line_intersection(square, [[1, 1], [2, 3]], bounded=SEGMENT)
        assert len(res) == 1
        assert vclose(res[0][0], [1, 1]) and vclose(res[0][1], [2, 3])

    def test_ray(self):
        res = polygon_line_intersection(square, [[2, 2], [3, 2]], bounded=RAY)
        assert len(res) == 1
        assert vclose(res[0][0], [2, 2]) and vclose(res[0][1], [4, 2])

    def test_nonconvex_splits(self):
        res = polygon_line_intersection(ell, [[-1, 1], [0, 1]])
        assert len(res) == 1
        res = polygon_line_intersection(ell, [[1, -1], [1, 0]])
        assert len(res) == 1
        ## across both arms of the L: it only touches the two outer corners
        res = polygon_line_intersection(ell, [[1, 7], [7, 1]])
        assert len(res) == 2
        assert all(r.shape == (1, 2) for r in res)
        assert vclose(res[0][0], [2, 6]) and vclose(res[1][0], [6, 2])

    def test_touch_corner(self):
        res = polygon_line_intersection(square, [[-1, 1], [1, -1]])
        assert len(res) == 1
        assert res[0].shape == (1, 2)
        assert vclose(res[0][0], [0, 0], scale=1.0)
        res = polygon_line_intersection(square, [[3, 5], [5, 3]])
        assert len(res) == 1
        assert res[0].shape == (1, 2)
        assert vclose(res[0][0], [4, 4])

    def test_along_edge(self):
        res = polygon_line_intersection(square, [[-1, 0], [0, 0]])
        assert len(res) == 1
        assert vclose(res[0][0], [0, 0], scale=1.0) and vclose(res[0][1], [4, 0])

    def test_miss(self):
        assert polygon_line_intersection(square, [[-1, 5], [0, 5]]) is None
        assert polygon_line_intersection(square, [[5, 2], [6, 2]], bounded=RAY) is None

    def test_3d_crossing(self):
        poly = [[0, 0, 0], [4, 0, 0], [4, 4, 0], [0, 4, 0]]
        res = polygon_line_intersection(poly, [[1, 1, -1], [1, 1, 1]])
        assert len(res) == 1 and res[0].shape == (1, 3)
        assert vclose(res[0][0], [1, 1, 0], scale=1.0)
        assert polygon_line_intersection(poly, [[5, 1, -1], [5, 1, 1]]) is None
        assert polygon_line_intersection(poly, [[1, 1, 1], [1, 1, 2]], bounded=SEGMENT) is None

    def test_3d_in_plane(self):
        poly = [[0, 0, 1], [4, 0, 1], [4, 4, 1], [0, 4, 1]]
        res = polygon_line_intersection(poly, [[-1, 2, 1], [0, 2, 1]])
        assert len(res) == 1 and res[0].shape == (2, 3)
        ends = sorted(res[0].tolist())
        assert vclose(ends[0], [0, 2, 1]) and vclose(ends[1], [4, 2, 1])

    def test_3d_nonplanar(self):
        with pytest.raises(DegenerateGeometryError):
            polygon_line_intersection([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 1]],
                                      [[0, 0, -1], [0, 0, 1]])

    def test_extension_scale(self):
        assert LINE_EXTENSION_SCALE == 100
        ## a line whose given points lie far from the polygon still reaches it
        res = polygon_line_intersection(square, [[1000, 2], [1001, 2]])
        assert len(res) == 1
        assert vclose(res[0][0], [0, 2]) and vclose(res[0][1], [4, 2])
