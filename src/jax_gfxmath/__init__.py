"""
JAX Graphics Math: a small 3D linear-algebra library for graphics code.

Vectors, points and 4x4 transform matrices (view, projection, rigid
transforms, composition and inversion) as immutable float32 pytrees that
work with jit, vmap and grad.
"""

from . import core
from . import transforms
from . import camera
from .core import Camera, Point, Vector2, Vector3, Vector4, assert_nearly_equal, nearly_equal
from .transforms import Matrix4

__version__ = "0.1.0"
__all__ = [
    "core",
    "transforms",
    "camera",
    "Vector2",
    "Vector3",
    "Vector4",
    "Point",
    "Matrix4",
    "Camera",
    "nearly_equal",
    "assert_nearly_equal",
]
