import math

import pytest

from vrm_face_puppet.core import Point2D
from vrm_face_puppet.core.geometry import vector_angle, vector_sub


def test_vector_sub():
    assert vector_sub(Point2D(5.0, 7.0), Point2D(2.0, 3.0)) == Point2D(3.0, 4.0)


@pytest.mark.parametrize("vector, expected", [
    ((1.0, 0.0), 0.0),
    ((0.0, 1.0), math.pi / 2),
    ((-1.0, 0.0), math.pi),
    ((0.0, -1.0), 3 * math.pi / 2),
    ((1.0, 1.0), math.pi / 4),
])
def test_vector_angle_measured_from_positive_x(vector, expected):
    assert vector_angle(Point2D(*vector)) == pytest.approx(expected)


def test_vector_angle_range():
    for degrees in range(0, 360, 15):
        rad = math.radians(degrees)
        angle = vector_angle(Point2D(math.cos(rad), math.sin(rad)))
        assert 0.0 <= angle < 2 * math.pi
