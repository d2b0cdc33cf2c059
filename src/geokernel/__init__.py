# -*- coding: utf-8 -*-
"""geokernel: tolerance-aware computational geometry primitives.

The submodules can be used directly (``geokernel.polygons``,
``geokernel.proximity`` and so on); the most used functions are also
re-exported here.
"""

import logging

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("geokernel")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from geokernel.errors import (DegenerateGeometryError, GeometryError,  # noqa: E402
                              InvalidInputError)
from geokernel.geom import EPSILON  # noqa: E402
from geokernel.lines import (LINE, RAY, SEGMENT, Bounds, as_bounds,  # noqa: E402
                             is_collinear, line_closest_point,
                             line_intersection, noncollinear_triple,
                             point_line_distance, segment_distance)
from geokernel.planes import (PlaneFrame, plane3pt, plane_frame,  # noqa: E402
                              plane_from_normal, plane_from_points,
                              plane_intersection, plane_line_intersection)
from geokernel.circles import (Circle, circle_3points,  # noqa: E402
                               circle_circle_intersection,
                               circle_circle_tangents,
                               circle_line_intersection,
                               circle_point_tangents)
from geokernel.polygons import (LINE_EXTENSION_SCALE, Mesh, centroid,  # noqa: E402
                                is_polygon_clockwise, is_polygon_convex,
                                plane_from_polygon, point_in_polygon,
                                polygon_area, polygon_line_intersection,
                                polygon_normal, triangle_area)
from geokernel.triangulator import polygon_triangulate  # noqa: E402
from geokernel.proximity import (MAX_ITERATION_FACTOR,  # noqa: E402
                                 convex_collision, convex_distance)
from geokernel.xform import (RotDecoded, is_rigid_transform,  # noqa: E402
                             rigid_transform, rot_decode)
