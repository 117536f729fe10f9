"""Sphere primitive with a cancellation-free quadratic solve.

For a unit ray direction the intersection condition
``|origin + t*dir - center|^2 = r^2`` reduces to ``t^2 + b*t + c = 0`` with

    b = 2 * dir . (origin - center)
    c = |origin - center|^2 - r^2

The two roots are computed as ``q`` and ``c / q`` where
``q = -0.5 * (b + sign(b) * sqrt(b^2 - 4c))``, which avoids subtracting two
nearly equal numbers when ``b^2`` dominates ``4c``. A discriminant within
EPSILON of zero is a tangent hit with the single root ``-b / 2``.
"""

import taichi as ti
import taichi.math as tm

from raytracer.core.vector import EPSILON, is_forward
from raytracer.geometry.primitive import Intersection

vec3 = tm.vec3


@ti.func
def _solve_quadratic(b: ti.f32, c: ti.f32):
    """Roots of ``t^2 + b*t + c = 0`` as ``(count, t0, t1)`` with t0 <= t1."""
    count = 0
    t0 = 0.0
    t1 = 0.0

    discriminant = b * b - 4.0 * c
    if ti.abs(discriminant) < EPSILON:
        count = 1
        t0 = -0.5 * b
        t1 = t0
    elif discriminant > 0.0:
        sqrt_d = ti.sqrt(discriminant)
        q = -0.5 * (b - sqrt_d)
        if b > 0.0:
            q = -0.5 * (b + sqrt_d)
        count = 2
        t0 = q
        t1 = c / q
        if t0 > t1:
            temp = t0
            t0 = t1
            t1 = temp

    return count, t0, t1


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    radius: ti.f32,
) -> Intersection:
    """Intersect a ray with a sphere.

    The nearest forward root wins. A ray starting inside the sphere hits the
    far side; the reported normal always points away from the center.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        center: Sphere center.
        radius: Sphere radius (positive).

    Returns:
        An Intersection record.
    """
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0)
    hit_normal = vec3(0.0)

    oc = ray_origin - center
    b = 2.0 * tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - radius * radius

    count, t0, t1 = _solve_quadratic(b, c)
    if count > 0:
        t = t0
        valid = is_forward(t)
        if valid == 0:
            t = t1
            valid = is_forward(t)

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction
            hit_normal = tm.normalize(hit_point - center)

    return Intersection(hit=did_hit, t=hit_t, point=hit_point, normal=hit_normal)
