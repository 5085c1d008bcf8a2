"""4x4 transform matrices as plain JAX arrays.

Matrices are arrays of shape (..., 4, 4) indexed ``[..., row, col]``; points
and vectors are column vectors multiplied on the right (``M @ p``), so the
translation of an affine matrix lives in column 3 and its last row is
[0, 0, 0, 1]. ``multiply(A, B)`` applies B first, then A.

All functions are pure, JIT-able and broadcast over leading batch
dimensions. None of them validates its numeric input: degenerate parameters
(zero field of view, empty depth range, singular matrices) come back as
inf/NaN entries instead of raising.
"""

from typing import Sequence, Tuple

import jax
import jax.numpy as jnp

from ..config import DTYPE
from ..core.vector import cross3

Array = jax.Array


def _as_array(x) -> Array:
    return jnp.asarray(x, dtype=DTYPE)


def _from_rows(rows: Sequence[Sequence]) -> Array:
    """Assemble (..., 4, 4) from four rows of four scalars (or batches of scalars)."""
    stacked = [jnp.stack(jnp.broadcast_arrays(*(_as_array(e) for e in row)), axis=-1) for row in rows]
    return jnp.stack(jnp.broadcast_arrays(*stacked), axis=-2)


def _affine(R: Array, t: Array) -> Array:
    """Embed a (..., 3, 3) linear part and (..., 3) translation."""
    batch_shape = jnp.broadcast_shapes(t.shape[:-1], R.shape[:-2])
    R = jnp.broadcast_to(R, batch_shape + (3, 3))
    t = jnp.broadcast_to(t, batch_shape + (3,))

    T = jnp.zeros(batch_shape + (4, 4), dtype=DTYPE)
    T = T.at[..., :3, :3].set(R)
    T = T.at[..., :3, 3].set(t)
    T = T.at[..., 3, 3].set(1.0)
    return T


def _dot(a: Array, b: Array) -> Array:
    return jnp.sum(a * b, axis=-1)


def _normalize(v: Array) -> Array:
    # A zero vector stays zero
    mag_sq = jnp.sum(v * v, axis=-1, keepdims=True)
    is_zero = mag_sq == 0.0
    return jnp.where(is_zero, v, v / jnp.sqrt(jnp.where(is_zero, 1.0, mag_sq)))


# Construction

def identity(batch_shape: Tuple[int, ...] = ()) -> Array:
    return jnp.broadcast_to(jnp.eye(4, dtype=DTYPE), batch_shape + (4, 4))


def zero(batch_shape: Tuple[int, ...] = ()) -> Array:
    return jnp.zeros(batch_shape + (4, 4), dtype=DTYPE)


def translation(v: Array) -> Array:
    """
    Translation by *v*.

    Args:
        v: (..., 3) offset

    Returns:
        (..., 4, 4) identity with column 3 set to (v, 1)
    """
    v = _as_array(v)
    return _affine(jnp.eye(3, dtype=DTYPE), v)


def rotation_x(angle_radians: Array) -> Array:
    """Rotation about +x; positive angles turn +y towards +z."""
    angle = _as_array(angle_radians)
    c, s = jnp.cos(angle), jnp.sin(angle)
    return _from_rows([
        [1.0, 0.0, 0.0, 0.0],
        [0.0, c, -s, 0.0],
        [0.0, s, c, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def rotation_y(angle_radians: Array) -> Array:
    """Rotation about +y; positive angles turn +z towards +x."""
    angle = _as_array(angle_radians)
    c, s = jnp.cos(angle), jnp.sin(angle)
    return _from_rows([
        [c, 0.0, s, 0.0],
        [0.0, 1.0, 0.0, 0.0],
        [-s, 0.0, c, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def rotation_z(angle_radians: Array) -> Array:
    """Rotation about +z; positive angles turn +x towards +y."""
    angle = _as_array(angle_radians)
    c, s = jnp.cos(angle), jnp.sin(angle)
    return _from_rows([
        [c, -s, 0.0, 0.0],
        [s, c, 0.0, 0.0],
        [0.0, 0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def rotation(axis: Array, angle_radians: Array) -> Array:
    """
    Rotation by *angle_radians* about *axis* (Rodrigues' formula).

    The axis is normalized first; a zero axis gives the identity.

    Args:
        axis: (..., 3) rotation axis
        angle_radians: (...) angle, counter-clockwise looking down the axis

    Returns:
        (..., 4, 4) rotation matrix
    """
    k = _normalize(_as_array(axis))
    angle = _as_array(angle_radians)[..., None, None]

    zeros = jnp.zeros(k.shape[:-1], dtype=DTYPE)
    K = jnp.stack([
        jnp.stack([zeros, -k[..., 2], k[..., 1]], axis=-1),
        jnp.stack([k[..., 2], zeros, -k[..., 0]], axis=-1),
        jnp.stack([-k[..., 1], k[..., 0], zeros], axis=-1),
    ], axis=-2)

    # R = I + sin(θ) K + (1 - cos(θ)) K²
    R = jnp.eye(3, dtype=DTYPE) + jnp.sin(angle) * K + (1.0 - jnp.cos(angle)) * jnp.matmul(K, K)
    return _affine(R, jnp.zeros(R.shape[:-1], dtype=DTYPE))


def uniform_scale(factor: Array) -> Array:
    """Scale all three axes by *factor*."""
    f = _as_array(factor)
    return _from_rows([
        [f, 0.0, 0.0, 0.0],
        [0.0, f, 0.0, 0.0],
        [0.0, 0.0, f, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def scale(factors: Array) -> Array:
    """Scale each axis by the matching component of (..., 3) *factors*."""
    f = _as_array(factors)
    return _from_rows([
        [f[..., 0], 0.0, 0.0, 0.0],
        [0.0, f[..., 1], 0.0, 0.0],
        [0.0, 0.0, f[..., 2], 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def look_at(eye: Array, target: Array, up: Array) -> Array:
    """
    Right-handed view matrix for a camera at *eye* looking at *target*.

    The camera looks down its local -z axis; +x is to the right and +y is
    the component of *up* orthogonal to the viewing direction. An *up*
    parallel to the viewing direction is not detected and yields a
    degenerate (zero) x axis.

    Args:
        eye: (..., 3) camera position
        target: (..., 3) point the camera looks at
        up: (..., 3) world up hint

    Returns:
        (..., 4, 4) world-to-view matrix
    """
    eye, target, up = _as_array(eye), _as_array(target), _as_array(up)

    z_axis = _normalize(target - eye)             # forward
    x_axis = _normalize(cross3(z_axis, up))       # right
    y_axis = cross3(x_axis, z_axis)               # orthogonal up

    R = jnp.stack(jnp.broadcast_arrays(x_axis, y_axis, -z_axis), axis=-2)
    t = jnp.stack(jnp.broadcast_arrays(-_dot(x_axis, eye), -_dot(y_axis, eye), _dot(z_axis, eye)), axis=-1)
    return _affine(R, t)


def perspective(aspect_ratio: Array, fov_radians: Array, znear: Array, zfar: Array) -> Array:
    """
    Symmetric-frustum perspective projection (OpenGL clip conventions).

    View-space depths -znear and -zfar map to NDC depth -1 and +1 after the
    divide, and clip-space w equals -z_view.

    Args:
        aspect_ratio: width / height
        fov_radians: vertical field of view
        znear: distance to the near plane
        zfar: distance to the far plane

    Returns:
        (..., 4, 4) view-to-clip matrix
    """
    aspect_ratio, fov_radians, znear, zfar = (_as_array(x) for x in (aspect_ratio, fov_radians, znear, zfar))

    f = 1.0 / jnp.tan(fov_radians / 2.0)
    depth = znear - zfar
    return _from_rows([
        [f / aspect_ratio, 0.0, 0.0, 0.0],
        [0.0, f, 0.0, 0.0],
        [0.0, 0.0, (zfar + znear) / depth, (2.0 * zfar * znear) / depth],
        [0.0, 0.0, -1.0, 0.0],
    ])


def orthographic(left: Array, right: Array, bottom: Array, top: Array, znear: Array, zfar: Array) -> Array:
    """
    Orthographic projection of the box [left, right] x [bottom, top] x [-znear, -zfar]
    onto the NDC cube, with the same -z forward convention as perspective().
    """
    left, right, bottom, top, znear, zfar = (
        _as_array(x) for x in (left, right, bottom, top, znear, zfar)
    )

    width = right - left
    height = top - bottom
    depth = zfar - znear
    return _from_rows([
        [2.0 / width, 0.0, 0.0, -(right + left) / width],
        [0.0, 2.0 / height, 0.0, -(top + bottom) / height],
        [0.0, 0.0, -2.0 / depth, -(zfar + znear) / depth],
        [0.0, 0.0, 0.0, 1.0],
    ])


def from_flat(values: Array) -> Array:
    """(..., 16) scalars listed column by column -> (..., 4, 4)."""
    values = _as_array(values)
    if values.ndim == 0 or values.shape[-1] != 16:
        raise ValueError(f"values must have shape (..., 16), got {values.shape}")
    return jnp.swapaxes(values.reshape(values.shape[:-1] + (4, 4)), -1, -2)


def to_flat(m: Array) -> Array:
    """(..., 4, 4) -> (..., 16) scalars listed column by column."""
    return jnp.swapaxes(m, -1, -2).reshape(m.shape[:-2] + (16,))


# Algebra

def multiply(A: Array, B: Array) -> Array:
    """
    Compose two transforms.

    Args:
        A: (..., 4, 4) applied second
        B: (..., 4, 4) applied first

    Returns:
        (..., 4, 4) result of A @ B
    """
    return jnp.matmul(A, B)


def transpose(m: Array) -> Array:
    return jnp.swapaxes(m, -1, -2)


def apply_point(m: Array, points: Array) -> Array:
    """
    Apply the linear part and translation of *m* to (..., 3) points.

    The bottom row is ignored, so no perspective divide happens; use
    project_point() for that.
    """
    return jnp.einsum("...ij,...j->...i", m[..., :3, :3], points) + m[..., :3, 3]


def apply_vector(m: Array, vectors: Array) -> Array:
    """Apply only the linear part of *m* to (..., 3) direction vectors."""
    return jnp.einsum("...ij,...j->...i", m[..., :3, :3], vectors)


def apply_homogeneous(m: Array, vectors: Array) -> Array:
    """Full 4x4 product with (..., 4) homogeneous vectors."""
    return jnp.einsum("...ij,...j->...i", m, vectors)


def project_point(m: Array, points: Array) -> Array:
    """Apply *m* to (..., 3) points in homogeneous form, then divide by w."""
    ones = jnp.ones_like(points[..., 0:1])
    transformed_h = apply_homogeneous(m, jnp.concatenate([points, ones], axis=-1))
    return transformed_h[..., :3] / transformed_h[..., 3:]


def _adjugate(m: Array) -> Tuple[Array, Array]:
    """Adjugate and determinant by cofactor expansion."""
    m00, m01, m02, m03 = m[..., 0, 0], m[..., 0, 1], m[..., 0, 2], m[..., 0, 3]
    m10, m11, m12, m13 = m[..., 1, 0], m[..., 1, 1], m[..., 1, 2], m[..., 1, 3]
    m20, m21, m22, m23 = m[..., 2, 0], m[..., 2, 1], m[..., 2, 2], m[..., 2, 3]
    m30, m31, m32, m33 = m[..., 3, 0], m[..., 3, 1], m[..., 3, 2], m[..., 3, 3]

    # Each entry is a signed sum of six triple products (the 3x3 minor);
    # signs follow the checkerboard parity of (row, col).
    a00 = (m11 * m22 * m33 - m11 * m23 * m32 - m21 * m12 * m33
           + m21 * m13 * m32 + m31 * m12 * m23 - m31 * m13 * m22)
    a10 = (-m10 * m22 * m33 + m10 * m23 * m32 + m20 * m12 * m33
           - m20 * m13 * m32 - m30 * m12 * m23 + m30 * m13 * m22)
    a20 = (m10 * m21 * m33 - m10 * m23 * m31 - m20 * m11 * m33
           + m20 * m13 * m31 + m30 * m11 * m23 - m30 * m13 * m21)
    a30 = (-m10 * m21 * m32 + m10 * m22 * m31 + m20 * m11 * m32
           - m20 * m12 * m31 - m30 * m11 * m22 + m30 * m12 * m21)

    a01 = (-m01 * m22 * m33 + m01 * m23 * m32 + m21 * m02 * m33
           - m21 * m03 * m32 - m31 * m02 * m23 + m31 * m03 * m22)
    a11 = (m00 * m22 * m33 - m00 * m23 * m32 - m20 * m02 * m33
           + m20 * m03 * m32 + m30 * m02 * m23 - m30 * m03 * m22)
    a21 = (-m00 * m21 * m33 + m00 * m23 * m31 + m20 * m01 * m33
           - m20 * m03 * m31 - m30 * m01 * m23 + m30 * m03 * m21)
    a31 = (m00 * m21 * m32 - m00 * m22 * m31 - m20 * m01 * m32
           + m20 * m02 * m31 + m30 * m01 * m22 - m30 * m02 * m21)

    a02 = (m01 * m12 * m33 - m01 * m13 * m32 - m11 * m02 * m33
           + m11 * m03 * m32 + m31 * m02 * m13 - m31 * m03 * m12)
    a12 = (-m00 * m12 * m33 + m00 * m13 * m32 + m10 * m02 * m33
           - m10 * m03 * m32 - m30 * m02 * m13 + m30 * m03 * m12)
    a22 = (m00 * m11 * m33 - m00 * m13 * m31 - m10 * m01 * m33
           + m10 * m03 * m31 + m30 * m01 * m13 - m30 * m03 * m11)
    a32 = (-m00 * m11 * m32 + m00 * m12 * m31 + m10 * m01 * m32
           - m10 * m02 * m31 - m30 * m01 * m12 + m30 * m02 * m11)

    a03 = (-m01 * m12 * m23 + m01 * m13 * m22 + m11 * m02 * m23
           - m11 * m03 * m22 - m21 * m02 * m13 + m21 * m03 * m12)
    a13 = (m00 * m12 * m23 - m00 * m13 * m22 - m10 * m02 * m23
           + m10 * m03 * m22 + m20 * m02 * m13 - m20 * m03 * m12)
    a23 = (-m00 * m11 * m23 + m00 * m13 * m21 + m10 * m01 * m23
           - m10 * m03 * m21 - m20 * m01 * m13 + m20 * m03 * m11)
    a33 = (m00 * m11 * m22 - m00 * m12 * m21 - m10 * m01 * m22
           + m10 * m02 * m21 + m20 * m01 * m12 - m20 * m02 * m11)

    adj = jnp.stack([
        jnp.stack([a00, a01, a02, a03], axis=-1),
        jnp.stack([a10, a11, a12, a13], axis=-1),
        jnp.stack([a20, a21, a22, a23], axis=-1),
        jnp.stack([a30, a31, a32, a33], axis=-1),
    ], axis=-2)

    # First row of m against first column of the adjugate
    det = m00 * a00 + m01 * a10 + m02 * a20 + m03 * a30
    return adj, det


def determinant(m: Array) -> Array:
    _, det = _adjugate(_as_array(m))
    return det


def invert(m: Array) -> Array:
    """
    General 4x4 inverse, adjugate / determinant.

    Total: a singular matrix has det == 0, so 1/det is inf and every entry
    of the result becomes inf or NaN. Callers that need to recover from
    singular input must check determinant() themselves.

    Args:
        m: (..., 4, 4) matrix

    Returns:
        (..., 4, 4) inverse matrix
    """
    adj, det = _adjugate(_as_array(m))
    inv_det = 1.0 / det
    return adj * inv_det[..., None, None]
