"""Scene storage and scene-level intersection queries.

Objects and lights live in module-level Taichi fields laid out as structure
of arrays. Every object carries a PrimitiveKind tag plus the union of the
data the three primitive kinds need:

    kind      point     edge_a   edge_b   normal        radius
    PLANE     point     -        -        unit normal   -
    TRIANGLE  t1        l12      l13      face normal   -
    SPHERE    center    -        -        -             radius

and its material as four RGB triples (color, specular, lambert, ambient).

The fields are filled from the host with the ``add_*`` functions (usually via
``raytracer.scene.manager.upload_scene``) and are read-only while a kernel
runs.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.scene.intersection import add_sphere, add_light, clear_scene
    >>> clear_scene()
    >>> add_sphere((0, 0, 5), 1.0, color=(1, 0, 0), lambert=(0.9, 0.9, 0.9))
    0
    >>> add_light((0, 5, 0), 1.0)
    0
"""

import taichi as ti
import taichi.math as tm

from raytracer.core.color import BLACK, Color, to_color
from raytracer.core.vector import is_forward, length, offset_ray_origin
from raytracer.geometry.plane import hit_plane
from raytracer.geometry.primitive import Intersection, PrimitiveKind, no_intersection
from raytracer.geometry.sphere import hit_sphere
from raytracer.geometry.triangle import hit_triangle

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of objects and lights supported in the scene
MAX_OBJECTS = 1024
MAX_LIGHTS = 64

# Object storage: Structure of Arrays layout
object_kinds = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_points = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_edges_a = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_edges_b = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_radii = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
num_objects = ti.field(dtype=ti.i32, shape=())

# Material storage, one RGB triple per coefficient
object_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_speculars = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_lamberts = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_ambients = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)

# Point lights
light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all objects and lights.

    Only the counts are reset; stale field data is overwritten by later adds.
    """
    num_objects[None] = 0
    num_lights[None] = 0


def _add_object(
    kind: PrimitiveKind,
    point,
    edge_a=(0.0, 0.0, 0.0),
    edge_b=(0.0, 0.0, 0.0),
    normal=(0.0, 0.0, 0.0),
    radius: float = 0.0,
    color: Color = BLACK,
    specular: Color = BLACK,
    lambert: Color = BLACK,
    ambient: Color = BLACK,
) -> int:
    idx = num_objects[None]
    if idx >= MAX_OBJECTS:
        raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")
    object_kinds[idx] = int(kind)
    object_points[idx] = point
    object_edges_a[idx] = edge_a
    object_edges_b[idx] = edge_b
    object_normals[idx] = normal
    object_radii[idx] = radius
    object_colors[idx] = to_color(color)
    object_speculars[idx] = to_color(specular)
    object_lamberts[idx] = to_color(lambert)
    object_ambients[idx] = to_color(ambient)
    num_objects[None] = idx + 1
    return idx


def add_plane(point, normal, **material) -> int:
    """Add a plane through ``point`` with unit ``normal``.

    Material coefficients are passed as keyword arguments (``color``,
    ``specular``, ``lambert``, ``ambient``); each may be a scalar or an RGB
    triple.

    Returns:
        The index of the added object.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    return _add_object(PrimitiveKind.PLANE, point, normal=normal, **material)


def add_triangle(t1, l12, l13, normal, **material) -> int:
    """Add a triangle given its first vertex, two edges and unit face normal.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    return _add_object(
        PrimitiveKind.TRIANGLE, t1, edge_a=l12, edge_b=l13, normal=normal, **material
    )


def add_sphere(center, radius: float, **material) -> int:
    """Add a sphere.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    return _add_object(PrimitiveKind.SPHERE, center, radius=radius, **material)


def add_light(position, intensity: float) -> int:
    """Add a point light.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = position
    light_intensities[idx] = intensity
    num_lights[None] = idx + 1
    return idx


def get_object_count() -> int:
    """Get the number of objects in the scene."""
    return int(num_objects[None])


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


# =============================================================================
# Kernel-side Queries
# =============================================================================


@ti.func
def intersect_object(index: ti.i32, ray_origin: vec3, ray_direction: vec3) -> Intersection:
    """Intersect a ray with a single stored object, dispatching on its kind."""
    rec = no_intersection()
    kind = object_kinds[index]
    if kind == int(PrimitiveKind.SPHERE):
        rec = hit_sphere(ray_origin, ray_direction, object_points[index], object_radii[index])
    elif kind == int(PrimitiveKind.TRIANGLE):
        rec = hit_triangle(
            ray_origin,
            ray_direction,
            object_points[index],
            object_edges_a[index],
            object_edges_b[index],
            object_normals[index],
        )
    else:
        rec = hit_plane(ray_origin, ray_direction, object_points[index], object_normals[index])
    return rec


@ti.func
def occluded(ray_origin: vec3, ray_direction: vec3, max_distance: ti.f32) -> ti.i32:
    """Test if any object blocks the ray before ``max_distance``.

    Used for light visibility probes; returns early on the first blocker.
    """
    blocked = 0
    for i in range(num_objects[None]):
        if blocked == 0:
            rec = intersect_object(i, ray_origin, ray_direction)
            if rec.hit == 1 and rec.t < max_distance:
                blocked = 1
    return blocked


@ti.func
def first_visible_light(point: vec3, normal: vec3) -> ti.i32:
    """Index of the first light in scene order that ``point`` can see.

    A probe ray is cast toward each light from ``point`` lifted off its
    surface (see offset_ray_origin); the light is visible when nothing
    intersects the probe before reaching it. Lights that coincide with the
    point are skipped.

    Args:
        point: The shaded surface point.
        normal: The unit surface normal at ``point``.

    Returns:
        The light index, or -1 if no light is visible.
    """
    found = -1
    for i in range(num_lights[None]):
        if found == -1:
            if is_forward(length(light_positions[i] - point)):
                origin = offset_ray_origin(point, normal, light_positions[i] - point)
                to_light = light_positions[i] - origin
                distance = length(to_light)
                if distance <= 0.0:
                    found = i
                elif occluded(origin, to_light / distance, distance) == 0:
                    found = i
    return found
