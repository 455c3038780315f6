"""2D vector helpers operating on plain points."""

import math

from .types import Point2D


def vector_sub(a: Point2D, b: Point2D) -> Point2D:
    """Return the vector a - b."""
    return Point2D(a.x - b.x, a.y - b.y)


def vector_angle(v: Point2D) -> float:
    """
    Angle of the vector measured from the positive x axis.

    Returns a value in [0, 2*pi).
    """
    return math.atan2(-v.y, -v.x) + math.pi
