"""Core rendering module.

Components:
    vector: vec3 math as Taichi functions plus NumPy host helpers
    color: Color type, clamping arithmetic and 8-bit conversion
    rotation: Camera rotation matrix construction
    ray: Ray data structure and single-object tracing
    integrator: Recursive shading and the per-pixel render kernels
    raytracer: Raytracer aggregate tying camera, scene and settings together

Only the field-free modules are imported here. Import ray, integrator and
raytracer directly once Taichi is initialized.
"""

from .color import (
    BLACK,
    NAMED_COLORS,
    WHITE,
    Color,
    color_to_rgb8,
    from_rgb8,
    named_color,
    to_color,
)
from .rotation import UP_DIRECTION, build_rotation, is_orthonormal, rotate_vector
from .vector import (
    EPSILON,
    as_tuple,
    as_vector,
    normalized,
    vec3,
    vector_approx_equal,
)

__all__ = [
    # Vectors
    "EPSILON",
    "vec3",
    "as_vector",
    "as_tuple",
    "normalized",
    "vector_approx_equal",
    # Colors
    "Color",
    "BLACK",
    "WHITE",
    "NAMED_COLORS",
    "to_color",
    "from_rgb8",
    "named_color",
    "color_to_rgb8",
    # Rotation
    "UP_DIRECTION",
    "build_rotation",
    "rotate_vector",
    "is_orthonormal",
]
