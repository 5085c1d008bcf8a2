"""Camera PyTree data structure.

A Camera bundles what look_at() and perspective() need, so a whole view can
be passed through jit / vmap / grad as one value.
"""

import logging
import math
from numbers import Real
from typing import Optional

import jax
import jax.numpy as jnp
from flax import struct

from ..config import DTYPE
from .point import Point
from .vector import Vector3

Array = jax.Array

logger = logging.getLogger(__name__)


@struct.dataclass
class Camera:
    """Immutable description of a perspective camera.

    Attributes:
        eye: Camera position in world space.
        target: Point the camera looks at.
        up: World up hint; only its component orthogonal to the view
            direction matters.
        aspect_ratio: Viewport width / height.
        fov_radians: Vertical field of view.
        znear: Distance to the near clipping plane.
        zfar: Distance to the far clipping plane.
    """
    eye: Point
    target: Point
    up: Vector3
    aspect_ratio: Array
    fov_radians: Array
    znear: Array
    zfar: Array

    @classmethod
    def create(
        cls,
        eye: Point,
        target: Point,
        up: Optional[Vector3] = None,
        *,
        aspect_ratio: float = 1.0,
        fov_radians: float = math.pi / 3.0,
        znear: float = 0.1,
        zfar: float = 100.0,
    ) -> "Camera":
        """Build a camera, warning about (but keeping) degenerate projections."""
        if up is None:
            up = Vector3.new(0.0, 1.0, 0.0)

        if isinstance(znear, Real) and isinstance(zfar, Real) and znear == zfar:
            logger.warning(f"znear == zfar ({znear}): projection depth terms will be infinite")
        if isinstance(fov_radians, Real) and not 0.0 < fov_radians < math.pi:
            logger.warning(f"Field of view {fov_radians} rad is outside (0, pi): projection will be degenerate")

        return cls(
            eye=eye,
            target=target,
            up=up,
            aspect_ratio=jnp.asarray(aspect_ratio, dtype=DTYPE),
            fov_radians=jnp.asarray(fov_radians, dtype=DTYPE),
            znear=jnp.asarray(znear, dtype=DTYPE),
            zfar=jnp.asarray(zfar, dtype=DTYPE),
        )
