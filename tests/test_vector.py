"""Tests for the vector and point types."""

import hypothesis
import jax
import jax.numpy as jnp
import numpy as np
import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from jax_gfxmath.core import Point, Vector2, Vector3, Vector4, nearly_equal

# Use hypothesis profile for CI
hypothesis.settings.register_profile("ci", max_examples=10, deadline=None)

finite = st.floats(min_value=-100.0, max_value=100.0, width=32, allow_subnormal=False)
vector3s = st.tuples(finite, finite, finite).map(lambda c: Vector3.new(*c))


# Basic tests
def test_products():
    """Dot and cross products of a known pair."""
    a = Vector3.new(3.0, -5.0, 4.0)
    b = Vector3.new(2.0, 6.0, 5.0)

    assert float(a.dot(b)) == -4.0
    assert a.cross(b) == Vector3.new(-49.0, -7.0, 28.0)


def test_cross_is_right_handed():
    """x × y = z for the basis vectors."""
    x = Vector3.new(1.0, 0.0, 0.0)
    y = Vector3.new(0.0, 1.0, 0.0)
    assert x.cross(y) == Vector3.new(0.0, 0.0, 1.0)
    assert y.cross(x) == Vector3.new(0.0, 0.0, -1.0)


def test_cross_with_self_is_exactly_zero():
    """Eager and jitted cross products agree and vanish exactly for parallel input."""
    v = Vector3.new(0.3, -7.1, 2.2)
    assert v.cross(v) == Vector3.zero()
    assert jax.jit(lambda a: a.cross(a))(v) == Vector3.zero()


def test_vector2_cross_is_scalar():
    """2D cross returns the z component of the 3D cross product."""
    a = Vector2.new(1.0, 0.0)
    b = Vector2.new(0.0, 1.0)
    assert float(a.cross(b)) == 1.0
    assert float(b.cross(a)) == -1.0
    assert float(Vector2.new(2.0, 3.0).cross(Vector2.new(4.0, 5.0))) == -2.0


def test_components_are_float32():
    """Integer input is stored as float32."""
    v = Vector4.new(1, 2, 3, 4)
    assert v.data.dtype == jnp.float32
    assert v.data.shape == (4,)
    assert float(v.w) == 4.0


def test_new_accepts_non_finite():
    """Construction does no validation."""
    v = Vector3.new(jnp.nan, jnp.inf, -jnp.inf)
    assert jnp.isnan(v.x)
    assert jnp.isinf(v.y)


def test_new_component_count():
    with pytest.raises(TypeError):
        Vector3.new(1.0, 2.0)


def test_from_array_shape():
    np.testing.assert_allclose(Vector2.from_array([1.0, 2.0]).data, [1.0, 2.0])
    with pytest.raises(ValueError):
        Vector3.from_array(jnp.zeros(4))
    with pytest.raises(ValueError):
        Vector3.from_array(1.0)


def test_zero_one_splat():
    assert Vector3.zero() == Vector3.new(0.0, 0.0, 0.0)
    assert Vector2.one() == Vector2.new(1.0, 1.0)
    assert Vector4.splat(2.5) == Vector4.new(2.5, 2.5, 2.5, 2.5)


def test_magnitude():
    v = Vector3.new(3.0, 4.0, 0.0)
    assert float(v.magnitude_squared()) == 25.0
    assert float(v.magnitude()) == 5.0


def test_normalized():
    v = Vector3.new(3.0, 4.0, 0.0).normalized()
    assert v.nearly_equals(Vector3.new(0.6, 0.8, 0.0))


def test_normalized_zero_vector():
    """Normalizing a zero vector returns it unchanged instead of NaNs."""
    assert Vector3.zero().normalized() == Vector3.zero()
    assert Vector2.zero().normalized() == Vector2.zero()


def test_lerp():
    a = Vector3.new(1.0, 0.0, 0.0)
    b = Vector3.new(0.0, 1.0, 0.0)

    assert a.lerp(b, 0.75) == Vector3.new(0.25, 0.75, 0.0)
    assert a.lerp(b, 0.0) == a
    assert a.lerp(b, 1.0) == b


def test_lerp_clamps_factor():
    """Out-of-range factors are clamped, not rejected."""
    a = Vector2.new(1.0, 2.0)
    b = Vector2.new(3.0, 4.0)
    assert a.lerp(b, -1.0) == a
    assert a.lerp(b, 5.0) == b


def test_vector_arithmetic():
    a = Vector3.new(1.0, 2.0, 3.0)
    b = Vector3.new(4.0, 5.0, 6.0)

    assert a + b == Vector3.new(5.0, 7.0, 9.0)
    assert b - a == Vector3.new(3.0, 3.0, 3.0)
    assert a * b == Vector3.new(4.0, 10.0, 18.0)
    assert b / a == Vector3.new(4.0, 2.5, 2.0)
    assert -a == Vector3.new(-1.0, -2.0, -3.0)


def test_scalar_arithmetic():
    v = Vector2.new(2.0, 4.0)

    assert v + 1.0 == Vector2.new(3.0, 5.0)
    assert 1.0 + v == Vector2.new(3.0, 5.0)
    assert v - 1.0 == Vector2.new(1.0, 3.0)
    assert 1.0 - v == Vector2.new(-1.0, -3.0)
    assert v * 2 == Vector2.new(4.0, 8.0)
    assert 2 * v == Vector2.new(4.0, 8.0)
    assert v / 2.0 == Vector2.new(1.0, 2.0)
    assert 8.0 / v == Vector2.new(4.0, 2.0)


def test_array_operands_must_be_scalar_per_entry():
    """An array operand is a scalar per batch entry, never a second vector."""
    v = Vector3.new(1.0, 2.0, 3.0)
    with pytest.raises(TypeError):
        v + jnp.array([1.0, 1.0, 1.0])
    with pytest.raises(TypeError):
        v * np.array([2.0, 2.0, 2.0])
    with pytest.raises(TypeError):
        np.array([2.0, 2.0, 2.0]) * v

    # 0-d arrays and numpy scalars still broadcast
    assert v + jnp.array(1.0) == Vector3.new(2.0, 3.0, 4.0)
    assert np.float32(2.0) * v == Vector3.new(2.0, 4.0, 6.0)

    # One scalar per batch entry
    batch = Vector3.from_array(jnp.ones((2, 3)))
    scaled = batch * jnp.array([2.0, 3.0])
    np.testing.assert_array_equal(scaled.data, [[2.0, 2.0, 2.0], [3.0, 3.0, 3.0]])
    with pytest.raises(TypeError):
        batch * jnp.array([1.0, 2.0, 3.0])


def test_divide_by_zero_is_not_an_error():
    v = Vector2.new(1.0, -1.0) / 0.0
    assert bool(jnp.all(jnp.isinf(v.data)))


def test_compound_assignment_rebinds():
    """+= produces a new value; the original is untouched."""
    a = Vector3.new(1.0, 1.0, 1.0)
    original = a
    a += Vector3.new(1.0, 2.0, 3.0)
    a *= 2.0

    assert a == Vector3.new(4.0, 6.0, 8.0)
    assert original == Vector3.new(1.0, 1.0, 1.0)


def test_mixed_types_are_rejected():
    with pytest.raises(TypeError):
        Vector3.new(1.0, 2.0, 3.0) + Vector2.new(1.0, 2.0)
    with pytest.raises(TypeError):
        Vector3.new(1.0, 2.0, 3.0) * "2"


def test_indexing():
    v = Vector3.new(1.0, 2.0, 3.0)
    assert float(v[0]) == 1.0
    assert float(v[2]) == 3.0

    with pytest.raises(IndexError):
        v[3]
    with pytest.raises(IndexError):
        v[-1]
    with pytest.raises(TypeError):
        v["x"]

    # Integer-like indices such as numpy integers are accepted
    assert float(v[np.int64(1)]) == 2.0
    assert float(v[np.argmax(np.array([0.0, 0.0, 5.0]))]) == 3.0


def test_unpacking_follows_indexing():
    x, y, z, w = Vector4.new(1.0, 2.0, 3.0, 4.0)
    assert [float(c) for c in (x, y, z, w)] == [1.0, 2.0, 3.0, 4.0]


def test_homogeneous_conversions():
    p = Point.new(1.0, 2.0, 3.0)
    d = Vector3.new(4.0, 5.0, 6.0)

    assert Vector4.from_point(p) == Vector4.new(1.0, 2.0, 3.0, 1.0)
    assert Vector4.from_direction(d) == Vector4.new(4.0, 5.0, 6.0, 0.0)
    assert Vector4.new(1.0, 2.0, 3.0, 9.0).truncate() == Vector3.new(1.0, 2.0, 3.0)
    assert Vector3.from_point(p) == Vector3.new(1.0, 2.0, 3.0)
    assert Vector2.new(1.0, 2.0).extend(3.0) == Vector3.new(1.0, 2.0, 3.0)
    assert d.truncate() == Vector2.new(4.0, 5.0)


def test_to_flat():
    flat = Vector4.new(1.0, 2.0, 3.0, 4.0).to_flat()
    assert flat.dtype == jnp.float32
    np.testing.assert_array_equal(flat, [1.0, 2.0, 3.0, 4.0])


def test_equality_is_per_type():
    """A point and a vector with equal components are not equal."""
    assert Point.new(1.0, 2.0, 3.0) != Vector3.new(1.0, 2.0, 3.0)
    assert not nearly_equal(Point.new(1.0, 2.0, 3.0), Vector3.new(1.0, 2.0, 3.0))


# Point tests
def test_point_affine_operations():
    p = Point.new(1.0, 2.0, 3.0)
    q = Point.new(4.0, 6.0, 8.0)
    v = Vector3.new(1.0, 1.0, 1.0)

    assert p + v == Point.new(2.0, 3.0, 4.0)
    assert p - v == Point.new(0.0, 1.0, 2.0)
    assert q - p == Vector3.new(3.0, 4.0, 5.0)
    assert isinstance(q - p, Vector3)


def test_point_rejects_non_affine_operations():
    p = Point.new(1.0, 2.0, 3.0)
    with pytest.raises(TypeError):
        p + p
    with pytest.raises(TypeError):
        p * 2.0
    with pytest.raises(TypeError):
        2.0 * p
    with pytest.raises(TypeError):
        Vector3.new(1.0, 1.0, 1.0) - p


def test_point_conversions():
    v = Vector3.new(1.0, 2.0, 3.0)
    assert Point.from_vector(v).to_vector() == v
    assert Point.from_homogeneous(Vector4.new(2.0, 4.0, 6.0, 2.0)) == Point.new(1.0, 2.0, 3.0)
    assert Vector4.new(2.0, 4.0, 6.0, 2.0).to_point() == Point.new(1.0, 2.0, 3.0)
    assert Vector4.from_point(Point.new(1.0, 2.0, 3.0)).to_point() == Point.new(1.0, 2.0, 3.0)
    assert Point.zero() == Point.new(0.0, 0.0, 0.0)
    assert Point.one() == Point.new(1.0, 1.0, 1.0)

    with pytest.raises(IndexError):
        Point.zero()[3]


# Batched tests
def test_batched_vectors():
    """Components may carry leading batch dimensions."""
    a = Vector3.from_array(jnp.tile(jnp.array([3.0, 4.0, 0.0]), (5, 1)))
    b = Vector3.from_array(jnp.tile(jnp.array([0.0, 0.0, 1.0]), (5, 1)))

    assert a.batch_shape == (5,)
    np.testing.assert_allclose(a.magnitude(), jnp.full(5, 5.0))
    np.testing.assert_allclose(a.cross(b).data, jnp.tile(jnp.array([4.0, -3.0, 0.0]), (5, 1)))
    np.testing.assert_allclose(a.x, jnp.full(5, 3.0))

    # One interpolation factor per batch entry
    t = jnp.linspace(0.0, 1.0, 5)
    np.testing.assert_allclose(a.lerp(b, t).z, t)


# JIT tests
def test_vectors_are_pytrees():
    """Vector values pass through jit and vmap."""
    a = Vector3.new(3.0, -5.0, 4.0)
    b = Vector3.new(2.0, 6.0, 5.0)

    crossed = jax.jit(lambda u, v: u.cross(v))(a, b)
    assert crossed == Vector3.new(-49.0, -7.0, 28.0)

    batch = Vector3.from_array(jnp.array([[3.0, 4.0, 0.0], [0.0, 0.0, 2.0]]))
    normalized = jax.vmap(lambda v: v.normalized())(batch)
    np.testing.assert_allclose(normalized.magnitude(), jnp.ones(2), rtol=1e-6, atol=1e-6)


def test_grad_through_normalized_zero():
    """The zero-length branch of normalized() keeps gradients finite."""
    def f(x):
        return Vector3.new(x, 0.0, 0.0).normalized().x

    assert bool(jnp.isfinite(jax.grad(f)(0.0)))


# Property-based tests with hypothesis
@given(vector3s)
@settings(deadline=None)
def test_cross_with_self_is_zero(v):
    assert v.cross(v) == Vector3.zero()
    assert jax.jit(lambda u: u.cross(u))(v) == Vector3.zero()


@given(vector3s, vector3s)
@settings(deadline=None)
def test_cross_is_orthogonal(v, w):
    d = float(v.dot(v.cross(w)))
    scale = float(v.magnitude_squared() * w.magnitude())
    assert abs(d) <= 1e-5 * scale + 1e-6


@given(vector3s)
@settings(deadline=None)
def test_normalized_has_unit_length(v):
    assume(float(v.magnitude()) > 1e-3)
    assert abs(float(v.normalized().magnitude()) - 1.0) < 1e-5


@given(vector3s, vector3s)
@settings(deadline=None)
def test_lerp_endpoints(a, b):
    assert a.lerp(b, 0.0) == a
    assert a.lerp(b, 1.0) == b
