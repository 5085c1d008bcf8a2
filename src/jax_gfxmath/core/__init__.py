"""Value types for JAX Graphics Math.

This module provides the vector, point and camera data structures, all
immutable and registered as JAX pytrees.
"""

from .nearly_equal import assert_nearly_equal, close, nearly_equal
from .vector import Vector2, Vector3, Vector4
from .point import Point
from .camera import Camera

__all__ = [
    "Vector2",
    "Vector3",
    "Vector4",
    "Point",
    "Camera",
    "nearly_equal",
    "assert_nearly_equal",
    "close",
]
