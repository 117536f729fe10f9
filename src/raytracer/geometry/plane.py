"""Infinite plane primitive.

A plane is stored as a point on it plus a unit normal. A ray parallel to the
plane (``|dir . normal| < EPSILON``) never hits it, even when the ray lies in
the plane.
"""

import taichi as ti
import taichi.math as tm

from raytracer.core.vector import approx_zero, is_forward
from raytracer.geometry.primitive import Intersection

vec3 = tm.vec3


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    point: vec3,
    normal: vec3,
) -> Intersection:
    """Intersect a ray with a plane.

    Solves ``(origin + t*dir - point) . normal = 0`` for ``t``.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        point: Any point on the plane.
        normal: The unit plane normal.

    Returns:
        An Intersection; the normal is the plane's normal as stored.
    """
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0)

    denom = tm.dot(ray_direction, normal)
    if approx_zero(denom) == 0:
        t = tm.dot(point - ray_origin, normal) / denom
        if is_forward(t):
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction

    return Intersection(hit=did_hit, t=hit_t, point=hit_point, normal=normal)
