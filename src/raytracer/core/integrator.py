"""Whitted-style shading and image synthesis kernels.

For a ray with a remaining recursion budget ``depth`` the shaded color is
defined recursively:

    trace(ray, 0)     = no contribution
    trace(ray, depth) = no contribution                    if the ray hits nothing
                      = clamp(clamp(A + S * trace(r', depth - 1)) + B)   otherwise

where, for the nearest hit with base color ``C``:

    A  = C * lambert * brightness   (first visible light only, 0 if none)
    B  = C * ambient
    S  = specular coefficient (0 when the specular term is skipped)
    r' = ray from the hit point along reflect(normalize(hit_point), normal)

Every product and sum is clamped to [0, 1]; a nested "no contribution" counts
as black. A pixel whose primary ray yields no contribution takes the
background color.

Taichi functions cannot recurse, so :func:`trace` evaluates the formula in
two loops. A forward pass follows the reflection chain and counts the levels
that hit something. A backward fold then walks those levels from the deepest
outward, re-following the chain from the primary ray to reach each level.
This needs no per-level storage, so any depth a kernel's i32 argument holds
is accepted; the cost grows with the square of the levels actually reached.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.core.integrator import setup_render_target, render_image
    >>> from raytracer.camera.pinhole import Camera, setup_camera
    >>>
    >>> setup_camera(Camera(64, 48))
    >>> setup_render_target(64, 48, background=(0.0, 0.0, 0.0))
    >>> render_image(depth=5)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from raytracer.camera.pinhole import get_ray
from raytracer.core.color import Color, clamp_color, color_add, color_mul, color_scale, is_black
from raytracer.core.ray import Ray, RayHit, make_ray, trace_scene
from raytracer.core.vector import (
    approx_zero,
    direction_to,
    dot,
    length_squared,
    normalize,
    offset_ray_origin,
    reflect,
)
from raytracer.scene.intersection import (
    first_visible_light,
    light_intensities,
    light_positions,
    object_ambients,
    object_lamberts,
    object_speculars,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Largest recursion depth a kernel's i32 depth argument holds
MAX_RECURSE_DEPTH = 2**31 - 1

DEFAULT_RECURSE_DEPTH = 5

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Indexed [row, column], row 0 at the top
_image = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

_background = ti.Vector.field(3, dtype=ti.f32, shape=())

_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Single-ray probe results (see trace_ray)
_probe_hit = ti.field(dtype=ti.i32, shape=())
_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_render_target(width: int, height: int, background: Color = (0.0, 0.0, 0.0)) -> None:
    """Set the active image size and background color, clearing the buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).
        background: Color of pixels whose primary ray contributes nothing.

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _background[None] = background
    _render_target_initialized[None] = 1
    _image.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Shading
# =============================================================================


@ti.func
def lambertian(point: vec3, normal: vec3, lambert: vec3) -> vec3:
    """Diffuse response at ``point`` from the first visible light.

    ``brightness = max(0, direction_to(point, light) . normal * intensity)``,
    capped at 1, scales the lambert coefficient. Zero when the coefficient
    is black or no light is visible.
    """
    diffuse = vec3(0.0)
    if is_black(lambert) == 0:
        light = first_visible_light(point, normal)
        if light >= 0:
            brightness = dot(direction_to(point, light_positions[light]), normal)
            brightness = tm.clamp(brightness * light_intensities[light], 0.0, 1.0)
            diffuse = color_scale(lambert, brightness)
    return diffuse


@ti.func
def specular_term(rec: RayHit) -> vec3:
    """Specular coefficient of a hit.

    Black when the hit point is the world origin, which has no reflection
    direction.
    """
    s = object_speculars[rec.object_index]
    if approx_zero(length_squared(rec.point)) == 1:
        s = vec3(0.0)
    return s


@ti.func
def reflected_ray(rec: RayHit) -> Ray:
    """The secondary ray leaving a hit along reflect(normalize(point), normal)."""
    direction = reflect(normalize(rec.point), rec.normal)
    return make_ray(offset_ray_origin(rec.point, rec.normal, direction), direction)


@ti.func
def _follow_reflections(ray: Ray, bounces: ti.i32) -> Ray:
    current = Ray(origin=ray.origin, direction=ray.direction)
    for bounce in range(bounces):
        rec = trace_scene(current)
        if rec.hit == 1:
            current = reflected_ray(rec)
    return current


@ti.func
def trace(ray_origin: vec3, ray_direction: vec3, depth: ti.i32):
    """Shade a ray with at most ``depth`` levels of reflection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        depth: Remaining recursion budget.

    Returns:
        A tuple (has_contribution, color). has_contribution is 0 when depth
        is 0 or the ray hits nothing.
    """
    primary = make_ray(ray_origin, ray_direction)

    # Forward pass: count the levels that hit something
    levels = 0
    ray = Ray(origin=primary.origin, direction=primary.direction)
    while levels < depth:
        rec = trace_scene(ray)
        if rec.hit == 0:
            break
        levels += 1
        if is_black(specular_term(rec)) == 1:
            break
        ray = reflected_ray(rec)

    # Backward fold: color_k = clamp(clamp(A_k + S_k * color_{k+1}) + B_k)
    color = vec3(0.0)
    for k in range(levels):
        rec = trace_scene(_follow_reflections(primary, levels - 1 - k))
        if rec.hit == 1:
            i = rec.object_index
            a = color_mul(rec.color, lambertian(rec.point, rec.normal, object_lamberts[i]))
            b = color_mul(rec.color, object_ambients[i])
            color = color_add(color_add(a, color_mul(specular_term(rec), color)), b)

    has_contribution = 0
    if levels > 0:
        has_contribution = 1

    return has_contribution, clamp_color(color)


@ti.func
def render_pixel(column: ti.i32, row: ti.i32, width: ti.i32, height: ti.i32, depth: ti.i32) -> vec3:
    """Shade a single pixel, falling back to the background color."""
    ray = get_ray(column, row, width, height)
    has_contribution, color = trace(ray.origin, ray.direction, depth)
    result = _background[None]
    if has_contribution == 1:
        result = color
    return result


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_parallel(width: ti.i32, height: ti.i32, depth: ti.i32):
    for row, col in ti.ndrange(height, width):
        _image[row, col] = render_pixel(col, row, width, height, depth)


@ti.kernel
def _render_serial(width: ti.i32, height: ti.i32, depth: ti.i32):
    ti.loop_config(serialize=True)
    for row, col in ti.ndrange(height, width):
        _image[row, col] = render_pixel(col, row, width, height, depth)


@ti.kernel
def _trace_single(origin: vec3, direction: vec3, depth: ti.i32):
    # Single outer iteration keeps the trace loops serial
    for _ in range(1):
        has_contribution, color = trace(origin, tm.normalize(direction), depth)
        _probe_hit[None] = has_contribution
        _probe_color[None] = color


# =============================================================================
# Public Rendering API
# =============================================================================


def _clamp_depth(depth: int) -> int:
    return max(0, min(int(depth), MAX_RECURSE_DEPTH))


def render_image(depth: int = DEFAULT_RECURSE_DEPTH, parallel: bool = True) -> None:
    """Render every pixel of the active image into the buffer.

    The camera must already be uploaded with setup_camera and the scene with
    upload_scene. Both strategies produce identical images.

    Args:
        depth: Recursion budget per primary ray (0 renders the background).
        parallel: Run the pixel loop in parallel (True) or serially (False).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if parallel:
        _render_parallel(width, height, _clamp_depth(depth))
    else:
        _render_serial(width, height, _clamp_depth(depth))


def trace_ray(origin, direction, depth: int = DEFAULT_RECURSE_DEPTH) -> Color | None:
    """Shade a single ray against the uploaded scene.

    Args:
        origin: Ray origin.
        direction: Ray direction (normalized here).
        depth: Recursion budget.

    Returns:
        The shaded color, or None when the ray contributes nothing.
    """
    _trace_single(vec3(*origin), vec3(*direction), _clamp_depth(depth))
    if _probe_hit[None] == 0:
        return None
    c = _probe_color[None]
    return (float(c[0]), float(c[1]), float(c[2]))


def get_image_numpy() -> np.ndarray:
    """Get the rendered image as a NumPy array.

    The array shape is (height, width, 3), dtype float32, row 0 at the top,
    values in [0, 1].

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    image = _image.to_numpy()[:height, :width, :]
    return np.clip(image, 0.0, 1.0).astype(np.float32)
