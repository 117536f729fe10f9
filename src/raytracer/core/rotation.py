"""Orientation basis construction for the camera.

A rotation is a 3x3 orthonormal matrix whose columns are the camera's right,
up and forward axes expressed in world space. Multiplying a camera-local
direction ``(x, y, z)`` by the matrix yields the world-space direction.

The basis is built on the host with NumPy (once per camera) and uploaded to a
Taichi matrix field; kernels apply it with :func:`raytracer.core.vector.rotate`.
"""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

from raytracer.core.vector import EPSILON, as_vector

# The default direction of "up" in world space.
UP_DIRECTION: tuple[float, float, float] = (0.0, 1.0, 0.0)


def build_rotation(
    direction: Sequence[float] | npt.ArrayLike,
    up: Sequence[float] | npt.ArrayLike = UP_DIRECTION,
) -> npt.NDArray[np.float64]:
    """Build an orthonormal basis looking along ``direction``.

    The forward axis is the normalized direction. The right axis is
    ``up x forward`` and the camera's up axis is ``forward x right``. When
    ``direction`` is parallel to ``up`` the cross product vanishes; the world
    axis least aligned with ``direction`` then stands in for ``up``.

    Args:
        direction: The view direction. Must be non-zero.
        up: The world "up" reference vector. Must be non-zero.

    Returns:
        A (3, 3) float64 matrix with columns (right, up, forward).

    Raises:
        ValueError: If ``direction`` or ``up`` is the zero vector.
    """
    forward = as_vector(direction)
    norm = float(np.linalg.norm(forward))
    if norm == 0.0:
        raise ValueError("Cannot build a rotation from a zero direction")
    forward = forward / norm

    reference = as_vector(up)
    if not np.any(reference):
        raise ValueError("The up vector must be non-zero")

    right = np.cross(reference, forward)
    right_norm = float(np.linalg.norm(right))
    if right_norm < EPSILON * float(np.linalg.norm(reference)):
        axis = np.zeros(3)
        axis[int(np.argmin(np.abs(forward)))] = 1.0
        right = np.cross(axis, forward)
        right_norm = float(np.linalg.norm(right))
    right = right / right_norm

    camera_up = np.cross(forward, right)

    return np.column_stack((right, camera_up, forward))


def rotate_vector(
    rotation: npt.NDArray[np.float64],
    v: Sequence[float] | npt.ArrayLike,
) -> npt.NDArray[np.float64]:
    """Host-side counterpart of the kernel ``rotate`` function."""
    return rotation @ as_vector(v)


def is_orthonormal(rotation: npt.NDArray[np.float64], eps: float = 1e-9) -> bool:
    """Check that the columns of ``rotation`` are mutually orthogonal unit vectors."""
    gram = rotation.T @ rotation
    return bool(np.allclose(gram, np.eye(3), atol=eps))
