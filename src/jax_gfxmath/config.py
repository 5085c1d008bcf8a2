"""Numeric configuration shared by every module.

The package never touches ``jax.config``; instead every constructor casts its
inputs to ``DTYPE`` so results stay single precision even when the host
application has enabled x64.
"""

import jax.numpy as jnp

# Scalar type of every vector, point and matrix component
DTYPE = jnp.float32

# Default tolerance used by nearly_equal
EPSILON = 1e-6
