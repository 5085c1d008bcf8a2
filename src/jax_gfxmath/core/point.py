"""Affine positions in 3D space.

A Point is not a Vector3: positions can be displaced by vectors
and subtracted from each other, but adding two points or scaling a point has
no meaning and raises TypeError.
"""

from __future__ import annotations

from dataclasses import dataclass

import jax
from jax.tree_util import register_pytree_node_class

from .vector import Components, Vector3, Vector4, _component

Array = jax.Array


@register_pytree_node_class
@dataclass(frozen=True, eq=False)
class Point(Components):
    """A point (or batch of points) in 3D space."""
    data: Array  # shape (..., 3)

    size = 3
    x = _component(0)
    y = _component(1)
    z = _component(2)

    @classmethod
    def from_vector(cls, vector: Vector3) -> "Point":
        """The point reached by displacing the origin by *vector*."""
        return cls(vector.data)

    @classmethod
    def from_homogeneous(cls, vector: Vector4) -> "Point":
        """Divide x, y, z by w."""
        return cls(vector.data[..., :3] / vector.data[..., 3:])

    def to_vector(self) -> Vector3:
        return Vector3(self.data)

    def __add__(self, other):
        if isinstance(other, Vector3):
            return Point(self.data + other.data)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Point):
            return Vector3(self.data - other.data)
        if isinstance(other, Vector3):
            return Point(self.data - other.data)
        return NotImplemented
