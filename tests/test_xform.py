import math

import numpy as np
import pytest
from geokernel.xform import *
from geokernel.geom import close, vclose
from geokernel.errors import InvalidInputError
## unit tests for geokernel xform.py


def apply(M, p):
    return (M @ np.append(np.asarray(p, dtype=float), 1.0))[:3]


class TestBuild:
    def test_translation(self):
        T = translation([1, 2, 3])
        assert vclose(apply(T, [0, 0, 0]), [1, 2, 3])
        assert np.allclose(T @ translation([1, 2, 3], inverse=True), np.eye(4))

    def test_rotation(self):
        R = rotation([0, 0, 1], 90)
        assert np.allclose(apply(R, [1, 0, 0]), [0, 1, 0])
        R = rotation([1, 0, 0], 90)
        assert np.allclose(apply(R, [0, 1, 0]), [0, 0, 1])
        R = rotation([0, 0, 2], 30)
        assert np.allclose(R @ rotation([0, 0, 2], 30, inverse=True), np.eye(4))

    def test_rotation_center(self):
        R = rotation([0, 0, 1], 180, cp=[1, 1, 0])
        assert np.allclose(apply(R, [0, 0, 0]), [2, 2, 0])
        assert np.allclose(apply(R, [1, 1, 5]), [1, 1, 5])

    def test_rotation_bad_input(self):
        with pytest.raises(InvalidInputError):
            rotation([0, 0, 0], 10)
        with pytest.raises(InvalidInputError):
            rotation([0, 0, 1], math.nan)
        with pytest.raises(InvalidInputError):
            rotation([0, 0, 1], math.inf)
        with pytest.raises(InvalidInputError):
            rotation([0, 0, 1], True)
        ## a short axis is still a direction
        assert np.allclose(rotation([0, 0, 1e-6], 90), rotation([0, 0, 1], 90))
        with pytest.raises(InvalidInputError):
            rotation([0, 0, 1e-6], 90, eps=1e-5)

    def test_rigid_transform_bad_angle(self):
        for bad in (math.nan, math.inf, -math.inf, '90', None):
            with pytest.raises(InvalidInputError):
                rigid_transform(bad, [0, 0, 1])

    def test_rigid_transform(self):
        M = rigid_transform(90, [0, 0, 1], center=[1, 0, 0], translation=[0, 0, 2])
        assert np.allclose(apply(M, [1, 0, 0]), [1, 0, 2])
        assert np.allclose(apply(M, [2, 0, 0]), [1, 1, 2])
        assert np.allclose(rigid_transform(0, [0, 0, 1], translation=[4, 5, 6]),
                           translation([4, 5, 6]))


class TestRigid:
    def test_is_rigid(self):
        assert is_rigid_transform(np.eye(4))
        assert is_rigid_transform(rigid_transform(33, [1, 2, 3], [4, 5, 6], [7, 8, 9]))
        assert not is_rigid_transform(np.diag([2.0, 1, 1, 1]))
        ## a reflection is orthogonal but not a rotation
        assert not is_rigid_transform(np.diag([-1.0, 1, 1, 1]))
        assert not is_rigid_transform(np.eye(3))
        skew = np.eye(4)
        skew[3, 0] = 0.5
        assert not is_rigid_transform(skew)


class TestDecode:
    def test_known(self):
        M = rigid_transform(90, [0, 0, 1], center=[1, 0, 0], translation=[0, 0, 2])
        dec = rot_decode(M)
        assert close(dec.angle, 90.0)
        assert vclose(dec.axis, [0, 0, 1])
        assert vclose(dec.center, [1, 0, 0], scale=1.0)
        assert vclose(dec.translation, [0, 0, 2], scale=1.0)

    def test_reversed_axis(self):
        dec = rot_decode(rotation([0, 0, 1], 270))
        assert close(dec.angle, 90.0)
        assert vclose(dec.axis, [0, 0, -1])

    def test_pure_translation(self):
        dec = rot_decode(translation([1, -2, 3]))
        assert dec.angle == 0
        assert vclose(dec.axis, [0, 0, 1])
        assert vclose(dec.center, [0, 0, 0], scale=1.0)
        assert vclose(dec.translation, [1, -2, 3])
        assert np.allclose(rigid_transform(*dec), translation([1, -2, 3]))

    def test_half_turn(self):
        M = rigid_transform(180, [0, 1, 0], center=[2, 0, 0])
        dec = rot_decode(M)
        assert close(dec.angle, 180.0)
        assert close(abs(dec.axis[1]), 1.0)
        assert np.allclose(rigid_transform(*dec), M)

    def test_long(self):
        M = rotation([1, 1, 0], 60, cp=[0, 0, 3])
        dec = rot_decode(M, long=True)
        assert close(dec.angle, 300.0)
        assert vclose(dec.axis, -np.array([1, 1, 0]) / math.sqrt(2))
        assert np.allclose(rigid_transform(*dec), M)

    def test_roundtrip(self):
        rng = np.random.default_rng(3)
        for angle in (0.5, 17, 90, 135, 179.999, 180, 250):
            axis = rng.normal(size=3)
            center = rng.uniform(-5, 5, 3)
            shift = rng.uniform(-5, 5, 3)
            M = rigid_transform(angle, axis, center, shift)
            dec = rot_decode(M)
            assert 0 <= dec.angle <= 180
            assert close(np.linalg.norm(dec.axis), 1.0)
            ## translation runs along the axis, center is the axis point
            ## nearest the origin
            assert np.linalg.norm(np.cross(dec.translation, dec.axis)) < 1e-8
            assert abs(np.dot(dec.center, dec.axis)) < 1e-8
            assert np.allclose(rigid_transform(*dec), M, atol=1e-9)
            assert np.allclose(rigid_transform(*rot_decode(M, long=True)), M, atol=1e-9)

    def test_not_rigid(self):
        with pytest.raises(InvalidInputError):
            rot_decode(np.diag([1.0, 1, 2, 1]))
        with pytest.raises(InvalidInputError):
            rot_decode(np.eye(3))
        with pytest.raises(InvalidInputError):
            rot_decode([[1, 0, 0, 0]] * 4)
