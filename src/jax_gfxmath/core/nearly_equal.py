"""Epsilon comparison of floating-point values and pytrees of them."""

from typing import Any

import jax
import jax.numpy as jnp

from ..config import EPSILON

Array = jax.Array


def close(a: Array, b: Array, epsilon: float = EPSILON) -> Array:
    """
    Elementwise closeness test, usable inside traced code.

    Two values are close when they are equal (this covers matching infinities)
    or when both are finite and ``|a - b| <= epsilon * max(1, |a|, |b|)``: an
    absolute tolerance near zero and a relative one for larger magnitudes.

    Args:
        a: array of any shape
        b: array broadcastable against *a*
        epsilon: tolerance

    Returns:
        Boolean array of the broadcast shape
    """
    a = jnp.asarray(a)
    b = jnp.asarray(b)
    scale = jnp.maximum(1.0, jnp.maximum(jnp.abs(a), jnp.abs(b)))
    within = jnp.isfinite(a) & jnp.isfinite(b) & (jnp.abs(a - b) <= epsilon * scale)
    return (a == b) | within


def nearly_equal(a: Any, b: Any, epsilon: float = EPSILON) -> bool:
    """
    Compare two values field by field using an epsilon.

    Works on scalars, arrays and any pytree (vectors, points, matrices,
    cameras, tuples of those ...). Values with different tree structure,
    which includes values of different types, or leaves of different shapes
    are never nearly equal.
    """
    leaves_a, tree_a = jax.tree_util.tree_flatten(a)
    leaves_b, tree_b = jax.tree_util.tree_flatten(b)
    if tree_a != tree_b:
        return False

    for x, y in zip(leaves_a, leaves_b):
        x, y = jnp.asarray(x), jnp.asarray(y)
        if x.shape != y.shape:
            return False
        if not bool(jnp.all(close(x, y, epsilon))):
            return False
    return True


def assert_nearly_equal(left: Any, right: Any, epsilon: float = EPSILON) -> None:
    """Raise AssertionError unless *left* and *right* are nearly equal."""
    if not nearly_equal(left, right, epsilon):
        raise AssertionError(
            f"assertion failed: `(left ~= right)`\nleft: `{left!r}`,\nright: `{right!r}`"
        )
