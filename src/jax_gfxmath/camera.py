"""Camera transforms: world -> view -> clip -> normalized device coordinates.

These functions compose look_at() and perspective() the way a renderer
does, ``clip = projection @ view @ world``.
"""

from .core import Camera, Point, Vector4
from .transforms import Matrix4


def view_matrix(camera: Camera) -> Matrix4:
    """World-to-view matrix of *camera*."""
    return Matrix4.look_at(camera.eye, camera.target, camera.up)


def projection_matrix(camera: Camera) -> Matrix4:
    """View-to-clip matrix of *camera*."""
    return Matrix4.perspective(camera.aspect_ratio, camera.fov_radians, camera.znear, camera.zfar)


def view_projection(camera: Camera) -> Matrix4:
    """World-to-clip matrix: the view is applied first, then the projection."""
    return projection_matrix(camera) @ view_matrix(camera)


def world_to_clip(camera: Camera, point: Point) -> Vector4:
    """Homogeneous clip-space position of a world-space *point*.

    Points in front of the camera have w > 0.
    """
    return view_projection(camera) @ Vector4.from_point(point)


def world_to_ndc(camera: Camera, point: Point) -> Point:
    """Normalized device coordinates of *point* (clip position divided by w).

    Visible points land in the cube [-1, 1]^3; depth -1 is the near plane.
    """
    return view_projection(camera).project_point(point)
