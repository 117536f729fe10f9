"""Color model: RGB triples normalized to [0, 1].

Every kernel-side operation in this module returns an already clamped color,
so no call site can push an out-of-range intermediate into the image buffer.
Material coefficients are colors as well, which allows tinted reflections;
a scalar coefficient is simply broadcast to all three channels on the host.

Host-side helpers convert user input (scalars, RGB triples, 8-bit triples and
color names) into normalized tuples, and rendered float images into 8-bit
pixels.
"""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Type alias for RGB colors (same layout as vec3)
vec3 = tm.vec3

Color = tuple[float, float, float]

BLACK: Color = (0.0, 0.0, 0.0)
WHITE: Color = (1.0, 1.0, 1.0)

NAMED_COLORS: dict[str, tuple[int, int, int]] = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "green": (0, 255, 0),
    "blue": (0, 0, 255),
    "yellow": (255, 255, 0),
    "cyan": (0, 255, 255),
    "magenta": (255, 0, 255),
    "orange": (255, 165, 0),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
}


# =============================================================================
# Kernel-side Color Arithmetic
# =============================================================================


@ti.func
def clamp_color(c: vec3) -> vec3:
    """Clamp every channel into [0, 1]."""
    return tm.clamp(c, 0.0, 1.0)


@ti.func
def color_add(a: vec3, b: vec3) -> vec3:
    """Channel-wise sum, clamped."""
    return clamp_color(a + b)


@ti.func
def color_mul(a: vec3, b: vec3) -> vec3:
    """Channel-wise product, clamped."""
    return clamp_color(a * b)


@ti.func
def color_scale(c: vec3, s: ti.f32) -> vec3:
    """Scale all channels by ``s``, clamped."""
    return clamp_color(c * s)


@ti.func
def is_black(c: vec3) -> ti.i32:
    """Return 1 if no channel is positive (a zero coefficient)."""
    return ti.max(c.x, c.y, c.z) <= 0.0


# =============================================================================
# Host-side Conversion
# =============================================================================


def to_color(value: float | Sequence[float]) -> Color:
    """Normalize a coefficient or color given as a scalar or an RGB triple.

    Scalars are broadcast to all channels. The result is clamped to [0, 1].

    Args:
        value: A number, or a sequence of three numbers, nominally in [0, 1].

    Returns:
        A clamped (r, g, b) tuple.

    Raises:
        ValueError: If ``value`` is neither a number nor a 3-sequence of numbers.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        channels = [float(value)] * 3
    else:
        try:
            channels = [float(c) for c in value]
        except (TypeError, ValueError) as err:
            raise ValueError(f"Expected a number or an RGB triple, got {value!r}") from err
        if len(channels) != 3:
            raise ValueError(f"Expected an RGB triple, got {len(channels)} channels")
    r, g, b = (min(max(c, 0.0), 1.0) for c in channels)
    return (r, g, b)


def from_rgb8(red: int, green: int, blue: int) -> Color:
    """Convert 8-bit channels into a normalized color.

    Raises:
        ValueError: If a channel is outside [0, 255].
    """
    channels = (red, green, blue)
    for channel in channels:
        if not 0 <= channel <= 255:
            raise ValueError(f"8-bit color channel out of range: {channel}")
    return (red / 255.0, green / 255.0, blue / 255.0)


def named_color(name: str) -> Color:
    """Look up a color by name (case-insensitive).

    Raises:
        KeyError: If the name is not a known color.
    """
    return from_rgb8(*NAMED_COLORS[name.lower()])


def color_to_rgb8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert normalized float colors into rounded 8-bit channels.

    Works on a single color or a whole (H, W, 3) image.
    """
    scaled = np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0) * 255.0
    return np.rint(scaled).astype(np.uint8)
