"""Matrix4: an immutable 4x4 float32 transform with operator support."""

from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import jax
import jax.numpy as jnp
from jax.tree_util import register_pytree_node_class

from ..config import DTYPE, EPSILON
from ..core import Point, Vector3, Vector4, nearly_equal
from . import mat4

Array = jax.Array
Scalar = Union[float, Array]


def _check_index(index) -> int:
    try:
        index = operator.index(index)
    except TypeError:
        raise TypeError(f"Matrix4 indices must be integers, not {type(index).__name__}") from None
    if not 0 <= index < 4:
        raise IndexError(f"Matrix4 index {index} out of range 0..3")
    return index


def _vector_data(value) -> Array:
    # Accept Vector4 values or anything array-like
    return jnp.asarray(getattr(value, "data", value), dtype=DTYPE)


@register_pytree_node_class  # let Matrix4 work with jit / grad / vmap …
@dataclass(frozen=True, eq=False)
class Matrix4:
    """Immutable 4x4 matrix (or batch of them), column vectors on the right.

    ``matrix`` is indexed ``[..., row, col]``. ``A @ B`` (also written
    ``A * B``) applies B first, then A; ``M @ point`` transforms a Point,
    ``M @ vector`` a Vector3 direction (translation ignored) and
    ``M @ vector4`` a homogeneous Vector4.
    """
    matrix: Array  # shape (..., 4, 4)

    # Constructors
    @classmethod
    def from_matrix(cls, matrix) -> "Matrix4":
        matrix = jnp.asarray(matrix, dtype=DTYPE)
        if matrix.ndim < 2 or matrix.shape[-2:] != (4, 4):
            raise ValueError(f"matrix must have shape (...,4,4), got {matrix.shape}")
        return cls(matrix)

    @classmethod
    def from_rows(cls, rows: Sequence) -> "Matrix4":
        return cls.from_matrix(jnp.stack([_vector_data(r) for r in rows], axis=-2))

    @classmethod
    def from_columns(cls, columns: Sequence) -> "Matrix4":
        return cls.from_matrix(jnp.stack([_vector_data(c) for c in columns], axis=-1))

    @classmethod
    def from_flat(cls, values) -> "Matrix4":
        """16 scalars listed column by column, the layout graphics APIs expect."""
        return cls(mat4.from_flat(values))

    @classmethod
    def identity(cls, batch_shape: Tuple[int, ...] = ()) -> "Matrix4":
        return cls(mat4.identity(batch_shape))

    @classmethod
    def zero(cls, batch_shape: Tuple[int, ...] = ()) -> "Matrix4":
        return cls(mat4.zero(batch_shape))

    @classmethod
    def translation(cls, v: Vector3) -> "Matrix4":
        return cls(mat4.translation(v.data))

    @classmethod
    def rotation_x(cls, angle_radians: Scalar) -> "Matrix4":
        return cls(mat4.rotation_x(angle_radians))

    @classmethod
    def rotation_y(cls, angle_radians: Scalar) -> "Matrix4":
        return cls(mat4.rotation_y(angle_radians))

    @classmethod
    def rotation_z(cls, angle_radians: Scalar) -> "Matrix4":
        return cls(mat4.rotation_z(angle_radians))

    @classmethod
    def rotation(cls, axis: Vector3, angle_radians: Scalar) -> "Matrix4":
        return cls(mat4.rotation(axis.data, angle_radians))

    @classmethod
    def uniform_scale(cls, factor: Scalar) -> "Matrix4":
        return cls(mat4.uniform_scale(factor))

    @classmethod
    def scale(cls, factors: Vector3) -> "Matrix4":
        return cls(mat4.scale(factors.data))

    @classmethod
    def look_at(cls, eye: Point, target: Point, up: Vector3) -> "Matrix4":
        """A view matrix positioning a camera at *eye* looking at *target*."""
        return cls(mat4.look_at(eye.data, target.data, up.data))

    @classmethod
    def perspective(cls, aspect_ratio: Scalar, fov_radians: Scalar, znear: Scalar, zfar: Scalar) -> "Matrix4":
        """A perspective projection suitable for use with look_at()."""
        return cls(mat4.perspective(aspect_ratio, fov_radians, znear, zfar))

    @classmethod
    def orthographic(cls, left: Scalar, right: Scalar, bottom: Scalar, top: Scalar,
                     znear: Scalar, zfar: Scalar) -> "Matrix4":
        return cls(mat4.orthographic(left, right, bottom, top, znear, zfar))

    # PyTree boiler-plate
    def tree_flatten(self):
        return (self.matrix,), None

    @classmethod
    def tree_unflatten(cls, aux, children):
        (matrix,) = children
        return cls(matrix)

    # Accessors
    def row(self, index: int) -> Vector4:
        index = _check_index(index)
        return Vector4(self.matrix[..., index, :])

    def column(self, index: int) -> Vector4:
        """Column 0-2 are the basis vectors, column 3 the translation."""
        index = _check_index(index)
        return Vector4(self.matrix[..., :, index])

    def to_flat(self) -> Array:
        """The 16 entries column by column as one contiguous float32 array."""
        return mat4.to_flat(self.matrix)

    # Basic operations
    def compose(self, other: "Matrix4") -> "Matrix4":
        """Self ∘ other (apply *other* first, then self)."""
        return Matrix4(mat4.multiply(self.matrix, other.matrix))

    def transpose(self) -> "Matrix4":
        return Matrix4(mat4.transpose(self.matrix))

    def invert(self) -> "Matrix4":
        """General inverse; a singular matrix gives inf/NaN entries."""
        return Matrix4(mat4.invert(self.matrix))

    def determinant(self) -> Array:
        return mat4.determinant(self.matrix)

    def project_point(self, point: Point) -> Point:
        """Transform *point* homogeneously and divide by w."""
        return Point(mat4.project_point(self.matrix, point.data))

    def __matmul__(self, other):
        if isinstance(other, Matrix4):
            return self.compose(other)
        if isinstance(other, Point):
            return Point(mat4.apply_point(self.matrix, other.data))
        if isinstance(other, Vector3):
            return Vector3(mat4.apply_vector(self.matrix, other.data))
        if isinstance(other, Vector4):
            return Vector4(mat4.apply_homogeneous(self.matrix, other.data))
        return NotImplemented

    __mul__ = __matmul__

    # Equality: exact with ==, epsilon-based with nearly_equals
    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix4):
            return NotImplemented
        return bool(jnp.array_equal(self.matrix, other.matrix))

    def nearly_equals(self, other, epsilon: float = EPSILON) -> bool:
        return nearly_equal(self, other, epsilon)
