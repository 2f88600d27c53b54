"""OpenGL style view and projection matrices for the navigation camera."""
from __future__ import annotations

import numpy as np

from panoview.core.errors import DegenerateViewError
from panoview.core.geometry_utils import Vector3
from panoview.core.view_parameters import Frustum


def look_at_matrix(eye: Vector3, center: Vector3, up: Vector3) -> np.ndarray:
    """
    4x4 view matrix looking from ``eye`` towards ``center`` (gluLookAt).

    :raises DegenerateViewError: if eye == center or up is parallel to the
        view direction
    """
    eye_v = np.asarray(eye, dtype=float)
    forward = np.asarray(center, dtype=float) - eye_v
    norm = np.linalg.norm(forward)
    if norm == 0:
        raise DegenerateViewError("Eye and look-at target coincide.")
    forward /= norm

    side = np.cross(forward, np.asarray(up, dtype=float))
    side_norm = np.linalg.norm(side)
    if side_norm == 0:
        raise DegenerateViewError("Up vector is parallel to the view direction.")
    side /= side_norm
    true_up = np.cross(side, forward)

    matrix = np.identity(4)
    matrix[0, :3] = side
    matrix[1, :3] = true_up
    matrix[2, :3] = -forward
    matrix[:3, 3] = -matrix[:3, :3] @ eye_v
    return matrix


def frustum_matrix(frustum: Frustum) -> np.ndarray:
    """4x4 perspective projection matrix (glFrustum)."""
    left, right = frustum.left, frustum.right
    bottom, top = frustum.bottom, frustum.top
    near, far = frustum.near, frustum.far
    if right == left or top == bottom or far == near or near <= 0:
        raise DegenerateViewError(f"Degenerate frustum: {frustum}")

    matrix = np.zeros((4, 4))
    matrix[0, 0] = 2 * near / (right - left)
    matrix[0, 2] = (right + left) / (right - left)
    matrix[1, 1] = 2 * near / (top - bottom)
    matrix[1, 2] = (top + bottom) / (top - bottom)
    matrix[2, 2] = -(far + near) / (far - near)
    matrix[2, 3] = -2 * far * near / (far - near)
    matrix[3, 2] = -1.0
    return matrix
