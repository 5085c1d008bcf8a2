"""Fixed-size float32 vectors in JAX.

Vector2, Vector3 and Vector4 share one implementation of the
dimension-independent algebra (dot product, magnitude, normalization, lerp,
componentwise arithmetic). Only the cross products and the homogeneous
conversions are written per dimension.

Each type keeps its components in a single ``data`` array of shape (..., N),
so a value may hold one vector or a whole batch of them and passes through
``jax.jit`` / ``jax.vmap`` like any other pytree.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from numbers import Number
from typing import TYPE_CHECKING, Tuple, Union

import jax
import jax.numpy as jnp
import numpy as np
from jax.tree_util import register_pytree_node_class

from ..config import DTYPE, EPSILON
from .nearly_equal import nearly_equal

if TYPE_CHECKING:
    from .point import Point

Array = jax.Array
Scalar = Union[float, Array]


def _component(index: int) -> property:
    return property(lambda self: self.data[..., index])


def _is_scalar(value, batch_shape: Tuple[int, ...]) -> bool:
    """A number, or an array holding one scalar per batch entry."""
    if isinstance(value, Number):
        return True
    if isinstance(value, (jax.Array, np.ndarray)):
        try:
            return np.broadcast_shapes(value.shape, batch_shape) == tuple(batch_shape)
        except ValueError:
            return False
    return False


def cross3(a: Array, b: Array) -> Array:
    """Right-handed cross product of (..., 3) arrays."""
    ax, ay, az = a[..., 0], a[..., 1], a[..., 2]
    bx, by, bz = b[..., 0], b[..., 1], b[..., 2]
    return jnp.stack(jnp.broadcast_arrays(ay * bz - az * by, az * bx - ax * bz, ax * by - ay * bx), axis=-1)


def _broadcast(value: Scalar) -> Array:
    # (...,) -> (..., 1) so a scalar (or one scalar per batch entry) meets every component
    return jnp.asarray(value, dtype=DTYPE)[..., None]


class Components:
    """Storage shared by every fixed-size value type: one (..., size) array."""

    size = 0

    # numpy defers to our reflected operators instead of building object arrays
    __array_ufunc__ = None

    # Constructors
    @classmethod
    def new(cls, *components: Scalar):
        """Build from individual components; any float, NaN and inf included."""
        if len(components) != cls.size:
            raise TypeError(f"{cls.__name__}.new takes {cls.size} components, got {len(components)}")
        parts = jnp.broadcast_arrays(*(jnp.asarray(c, dtype=DTYPE) for c in components))
        return cls(jnp.stack(parts, axis=-1))

    @classmethod
    def from_array(cls, data):
        data = jnp.asarray(data, dtype=DTYPE)
        if data.ndim == 0 or data.shape[-1] != cls.size:
            raise ValueError(f"{cls.__name__} needs shape (..., {cls.size}), got {data.shape}")
        return cls(data)

    @classmethod
    def zero(cls, batch_shape: Tuple[int, ...] = ()):
        """The additive identity."""
        return cls(jnp.zeros(batch_shape + (cls.size,), dtype=DTYPE))

    @classmethod
    def one(cls, batch_shape: Tuple[int, ...] = ()):
        """The multiplicative identity."""
        return cls(jnp.ones(batch_shape + (cls.size,), dtype=DTYPE))

    @classmethod
    def splat(cls, value: Scalar):
        """Every component set to *value*."""
        return cls(jnp.repeat(_broadcast(value), cls.size, axis=-1))

    # PyTree boiler-plate
    def tree_flatten(self):
        return (self.data,), None

    @classmethod
    def tree_unflatten(cls, aux, children):
        (data,) = children
        return cls(data)

    # Component access
    @property
    def batch_shape(self) -> Tuple[int, ...]:
        return self.data.shape[:-1]

    def __getitem__(self, index: int) -> Array:
        try:
            index = operator.index(index)
        except TypeError:
            raise TypeError(f"{type(self).__name__} indices must be integers, not {type(index).__name__}") from None
        if not 0 <= index < self.size:
            raise IndexError(f"{type(self).__name__} index {index} out of range 0..{self.size - 1}")
        return self.data[..., index]

    def to_flat(self) -> Array:
        """The components as one contiguous float32 array, in field order."""
        return jnp.ravel(self.data)

    # Equality: exact with ==, epsilon-based with nearly_equals
    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return bool(jnp.array_equal(self.data, other.data))

    def nearly_equals(self, other, epsilon: float = EPSILON) -> bool:
        return nearly_equal(self, other, epsilon)


class VectorN(Components):
    """Algebra common to vectors of every dimension."""

    def dot(self, other) -> Array:
        return jnp.sum(self.data * other.data, axis=-1)

    def magnitude_squared(self) -> Array:
        return self.dot(self)

    def magnitude(self) -> Array:
        return jnp.sqrt(self.magnitude_squared())

    def normalized(self):
        """Unit vector in the same direction; a zero vector is returned unchanged."""
        mag_sq = self.magnitude_squared()[..., None]
        is_zero = mag_sq == 0.0
        # Double where keeps gradients finite at zero length
        safe_mag = jnp.sqrt(jnp.where(is_zero, 1.0, mag_sq))
        return type(self)(jnp.where(is_zero, self.data, self.data / safe_mag))

    def lerp(self, other, t: Scalar):
        """Linear interpolation towards *other*; *t* is clamped to [0, 1]."""
        t = jnp.clip(_broadcast(t), 0.0, 1.0)
        return type(self)(self.data * (1.0 - t) + other.data * t)

    # Componentwise arithmetic against the same type or a broadcast scalar
    def _binary(self, other, op):
        if type(other) is type(self):
            return type(self)(op(self.data, other.data))
        if _is_scalar(other, self.batch_shape):
            return type(self)(op(self.data, _broadcast(other)))
        return NotImplemented

    def __add__(self, other):
        return self._binary(other, jnp.add)

    def __sub__(self, other):
        return self._binary(other, jnp.subtract)

    def __mul__(self, other):
        return self._binary(other, jnp.multiply)

    def __truediv__(self, other):
        return self._binary(other, jnp.divide)

    def __radd__(self, other):
        return self._binary(other, lambda a, b: b + a)

    def __rsub__(self, other):
        return self._binary(other, lambda a, b: b - a)

    def __rmul__(self, other):
        return self._binary(other, lambda a, b: b * a)

    def __rtruediv__(self, other):
        return self._binary(other, lambda a, b: b / a)

    def __neg__(self):
        return type(self)(-self.data)


@register_pytree_node_class
@dataclass(frozen=True, eq=False)
class Vector2(VectorN):
    """Two float32 components (x, y)."""
    data: Array  # shape (..., 2)

    size = 2
    x = _component(0)
    y = _component(1)

    def cross(self, other: "Vector2") -> Array:
        """z component of the 3D cross product of (x, y, 0) and (other.x, other.y, 0)."""
        return self.x * other.y - self.y * other.x

    def extend(self, z: Scalar) -> "Vector3":
        return Vector3(jnp.concatenate([self.data, _broadcast(z) + jnp.zeros_like(self.data[..., :1])], axis=-1))


@register_pytree_node_class
@dataclass(frozen=True, eq=False)
class Vector3(VectorN):
    """Three float32 components (x, y, z)."""
    data: Array  # shape (..., 3)

    size = 3
    x = _component(0)
    y = _component(1)
    z = _component(2)

    @classmethod
    def from_point(cls, point: "Point") -> "Vector3":
        """Displacement of *point* from the origin."""
        return cls(point.data)

    def cross(self, other: "Vector3") -> "Vector3":
        """Right-handed cross product."""
        return Vector3(cross3(self.data, other.data))

    def extend(self, w: Scalar) -> "Vector4":
        return Vector4(jnp.concatenate([self.data, _broadcast(w) + jnp.zeros_like(self.data[..., :1])], axis=-1))

    def truncate(self) -> Vector2:
        return Vector2(self.data[..., :2])


@register_pytree_node_class
@dataclass(frozen=True, eq=False)
class Vector4(VectorN):
    """Four float32 components (x, y, z, w).

    As a homogeneous coordinate, w == 0 marks a direction and w == 1 a
    position.
    """
    data: Array  # shape (..., 4)

    size = 4
    x = _component(0)
    y = _component(1)
    z = _component(2)
    w = _component(3)

    @classmethod
    def from_point(cls, point: "Point") -> "Vector4":
        """Homogeneous position (w = 1)."""
        return Vector3(point.data).extend(1.0)

    @classmethod
    def from_direction(cls, vector: Vector3) -> "Vector4":
        """Homogeneous direction (w = 0)."""
        return vector.extend(0.0)

    def truncate(self) -> Vector3:
        """The x, y, z components, dropping w."""
        return Vector3(self.data[..., :3])

    def to_point(self) -> "Point":
        """The position this homogeneous coordinate stands for (x, y, z divided by w)."""
        from .point import Point

        return Point.from_homogeneous(self)
