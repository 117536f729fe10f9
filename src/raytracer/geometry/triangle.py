"""Triangle primitive with Moller-Trumbore intersection.

The edge vectors ``l12`` and ``l13`` and the unit face normal are precomputed
on the host (see :class:`raytracer.geometry.primitive.TriangleInfo`), so the
kernel only needs ``t1`` and the two edges. Shading is flat: every hit on a
triangle reports the same normal.
"""

import taichi as ti
import taichi.math as tm

from raytracer.core.vector import approx_zero, is_forward
from raytracer.geometry.primitive import Intersection

vec3 = tm.vec3


@ti.func
def hit_triangle(
    ray_origin: vec3,
    ray_direction: vec3,
    t1: vec3,
    l12: vec3,
    l13: vec3,
    normal: vec3,
) -> Intersection:
    """Intersect a ray with a triangle.

    Barycentric coordinates ``u`` and ``v`` must satisfy ``u in [0, 1]``,
    ``v >= 0`` and ``u + v <= 1``; the distance ``t`` must be forward.
    A ray parallel to the triangle's plane (``|a| < EPSILON``) misses.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        t1: The first vertex.
        l12: Edge from the first to the second vertex.
        l13: Edge from the first to the third vertex.
        normal: Precomputed unit face normal.

    Returns:
        An Intersection record.
    """
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0)

    h = tm.cross(ray_direction, l13)
    a = tm.dot(l12, h)
    if approx_zero(a) == 0:
        f = 1.0 / a
        s = ray_origin - t1
        u = f * tm.dot(s, h)
        if u >= 0.0 and u <= 1.0:
            q = tm.cross(s, l12)
            v = f * tm.dot(ray_direction, q)
            if v >= 0.0 and u + v <= 1.0:
                t = f * tm.dot(l13, q)
                if is_forward(t):
                    did_hit = 1
                    hit_t = t
                    hit_point = ray_origin + t * ray_direction

    return Intersection(hit=did_hit, t=hit_t, point=hit_point, normal=normal)
