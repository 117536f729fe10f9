"""Ray data structure and ray-object tracing.

A ray is an origin plus a unit direction. :func:`make_ray` normalizes the
direction it is given, so every ray built through it satisfies the unit
invariant the intersection routines rely on.

:func:`trace_object` intersects a ray with one stored scene object and
bundles the hit with that object's base color; :func:`trace_scene` keeps the
nearest such hit over every object in the scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.core.ray import make_ray, ray_at
    >>> # Within a Taichi kernel:
    >>> # ray = make_ray(vec3(0.0), vec3(0.0, 0.0, 2.0))
    >>> # point = ray_at(ray, 5.0)  # (0, 0, 5)
"""

import taichi as ti
import taichi.math as tm

from raytracer.core.vector import normalize
from raytracer.scene.intersection import intersect_object, num_objects, object_colors

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3, unit length when built
            with make_ray).
    """

    origin: vec3
    direction: vec3


@ti.dataclass
class RayHit:
    """A ray's hit on a scene object.

    Attributes:
        hit: 1 if the ray struck the object, 0 otherwise.
        t: Distance along the ray. Only valid if hit == 1.
        point: World-space hit position. Only valid if hit == 1.
        normal: Unit surface normal. Only valid if hit == 1.
        color: Base color of the struck object. Only valid if hit == 1.
        object_index: Index of the struck object, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    color: vec3
    object_index: ti.i32


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray, normalizing ``direction``.

    Args:
        origin: The starting point of the ray.
        direction: Any non-zero direction vector.

    Returns:
        A new Ray with a unit direction.
    """
    return Ray(origin=origin, direction=normalize(direction))


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at distance t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def _miss() -> RayHit:
    return RayHit(
        hit=0,
        t=0.0,
        point=vec3(0.0),
        normal=vec3(0.0),
        color=vec3(0.0),
        object_index=-1,
    )


@ti.func
def trace_object(ray: Ray, index: ti.i32) -> RayHit:
    """Intersect ``ray`` with scene object ``index``."""
    result = _miss()
    rec = intersect_object(index, ray.origin, ray.direction)
    if rec.hit == 1:
        result = RayHit(
            hit=1,
            t=rec.t,
            point=ray_at(ray, rec.t),
            normal=rec.normal,
            color=object_colors[index],
            object_index=index,
        )
    return result


@ti.func
def trace_scene(ray: Ray) -> RayHit:
    """Find the nearest object hit by a ray.

    Objects are traced in scene order and ranked by distance along the ray.
    On ties the object added first wins.

    Args:
        ray: A ray with a unit direction.

    Returns:
        The nearest hit, or a miss record (hit == 0, object_index == -1).
    """
    result = _miss()
    for i in range(num_objects[None]):
        rec = trace_object(ray, i)
        if rec.hit == 1:
            if result.hit == 0 or rec.t < result.t:
                result = rec
    return result
