"""Geometry module for shape primitives.

Components:
    primitive: PrimitiveKind tag, Intersection record, host-side descriptions
    plane: Ray-plane intersection
    triangle: Moller-Trumbore ray-triangle intersection
    sphere: Ray-sphere intersection

All intersection routines are Taichi functions (@ti.func) returning an
Intersection record:
    rec = hit_shape(ray_origin, ray_direction, *shape_data)
"""

from .plane import hit_plane
from .primitive import (
    Intersection,
    PlaneInfo,
    Primitive,
    PrimitiveKind,
    SphereInfo,
    TriangleInfo,
    no_intersection,
    primitive_to_dict,
)
from .sphere import hit_sphere
from .triangle import hit_triangle

__all__ = [
    "Intersection",
    "PlaneInfo",
    "Primitive",
    "PrimitiveKind",
    "SphereInfo",
    "TriangleInfo",
    "hit_plane",
    "hit_sphere",
    "hit_triangle",
    "no_intersection",
    "primitive_to_dict",
]
