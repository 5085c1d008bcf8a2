"""
JAX-based 4x4 transform matrices for 3D graphics.

This module provides:
- mat4: pure functions over (..., 4, 4) arrays (construction, composition,
  application, cofactor inversion)
- Matrix4: an immutable value type wrapping them with operators

All functions are pure, stateless and JIT-compilable.
"""

from . import mat4
from .matrix import Matrix4

__all__ = [
    "mat4",
    "Matrix4",
]
