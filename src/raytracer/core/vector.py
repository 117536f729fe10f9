"""Vector algebra and tolerance predicates for the ray tracer.

Kernel-side vectors are Taichi ``tm.vec3`` values (f32). The functions in this
module wrap the Taichi math primitives under the names the rest of the engine
uses and add the handful of operations a Whitted-style tracer needs on top of
them (``direction_to``, ``reflect``, ``rotate``, ``offset_ray_origin``).

All geometric comparisons go through a single tolerance, :data:`EPSILON`, and
the predicates ``approx_zero``, ``approx_equal`` and ``is_forward``. The
intersection routines use nothing else to decide degenerate cases.

Host-side mirrors (``vector_approx_equal``, ``normalized``) operate on tuples
or NumPy arrays and are used for scene validation and in tests.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.core.vector import reflect, vec3
    >>> @ti.kernel
    ... def mirror() -> vec3:
    ...     return reflect(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
"""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Tolerance shared by every geometric comparison. Sized for f32 fields.
EPSILON = 1e-4

# Relative step that lifts secondary ray origins off their surface
RAY_EPSILON = 1e-4


# =============================================================================
# Tolerance Predicates
# =============================================================================


@ti.func
def approx_zero(x: ti.f32) -> ti.i32:
    """Return 1 if ``|x|`` is below EPSILON."""
    return ti.abs(x) < EPSILON


@ti.func
def approx_equal(a: vec3, b: vec3) -> ti.i32:
    """Component-wise approximate equality.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        1 if every component differs by less than EPSILON, 0 otherwise.
    """
    d = ti.abs(a - b)
    return ti.max(d.x, d.y, d.z) < EPSILON


@ti.func
def is_forward(t: ti.f32) -> ti.i32:
    """Return 1 if a ray parameter lies strictly ahead of the origin.

    Parameters at or below EPSILON are treated as self-intersections or hits
    behind the ray origin.
    """
    return t > EPSILON


# =============================================================================
# Vector Operations
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The caller must guarantee ``v`` is not the zero vector.
    """
    return tm.normalize(v)


@ti.func
def direction_to(origin: vec3, target: vec3) -> vec3:
    """Unit vector pointing from ``origin`` toward ``target``."""
    return tm.normalize(target - origin)


@ti.func
def reflect(v: vec3, normal: vec3) -> vec3:
    """Reflect ``v`` about ``normal``.

    Computes ``v - 2 n (n . v)``. Both arguments must be unit vectors.

    Args:
        v: The vector to reflect.
        normal: The reflecting surface normal.

    Returns:
        The mirrored vector.
    """
    return v - 2.0 * normal * tm.dot(normal, v)


@ti.func
def offset_ray_origin(point: vec3, normal: vec3, direction: vec3) -> vec3:
    """Offset a secondary ray's origin to avoid self-intersection.

    Pushes the point along the surface normal, to the side the ray leaves
    on. The step is RAY_EPSILON times the point's largest coordinate (at
    least 1), so it stays above f32 rounding of hit points far from the
    world origin.

    Args:
        point: The intersection point.
        normal: The unit surface normal.
        direction: The direction the new ray will travel.

    Returns:
        The offset origin point.
    """
    offset_dir = normal
    if tm.dot(direction, normal) < 0.0:
        offset_dir = -normal
    scale = ti.max(1.0, ti.abs(point.x), ti.abs(point.y), ti.abs(point.z))
    return point + RAY_EPSILON * scale * offset_dir


@ti.func
def rotate(m: tm.mat3, v: vec3) -> vec3:
    """Apply a rotation basis (3x3 matrix, basis vectors as columns) to ``v``."""
    return m @ v


@ti.func
def is_unit(v: vec3) -> ti.i32:
    """Return 1 if ``v`` has unit length within EPSILON."""
    return ti.abs(tm.length(v) - 1.0) < EPSILON


# =============================================================================
# Host-side Helpers
# =============================================================================


def as_vector(values: Sequence[float] | npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Convert a 3-sequence into a float64 NumPy vector.

    Raises:
        ValueError: If ``values`` does not hold exactly three finite numbers.
    """
    array = np.asarray(values, dtype=np.float64)
    if array.shape != (3,):
        raise ValueError(f"Expected a 3-component vector, got shape {array.shape}")
    if not np.all(np.isfinite(array)):
        raise ValueError(f"Vector components must be finite, got {array.tolist()}")
    return array


def as_tuple(values: Sequence[float] | npt.ArrayLike) -> tuple[float, float, float]:
    """Convert a 3-sequence into a tuple of Python floats."""
    x, y, z = as_vector(values)
    return (float(x), float(y), float(z))


def normalized(values: Sequence[float] | npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Return ``values`` scaled to unit length.

    Raises:
        ValueError: If the vector has zero length.
    """
    array = as_vector(values)
    norm = float(np.linalg.norm(array))
    if norm == 0.0:
        raise ValueError("Cannot normalize the zero vector")
    return array / norm


def vector_approx_equal(
    a: Sequence[float] | npt.ArrayLike,
    b: Sequence[float] | npt.ArrayLike,
    eps: float = EPSILON,
) -> bool:
    """Host-side component-wise approximate equality."""
    diff = np.abs(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64))
    return bool(np.all(diff < eps))
