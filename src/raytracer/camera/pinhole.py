"""Pinhole camera model mapping pixels to primary rays.

The camera sits at ``position`` and looks along ``view_direction``. Its
orientation is an orthonormal basis (see :mod:`raytracer.core.rotation`)
with the camera's right, up and forward axes as columns.

The image plane lies at distance ``1 / tan(fov / 2)`` in front of the camera
and spans ``[-aspect, aspect] x [-1, 1]`` in camera-local units, so ``fov``
is the horizontal field of view of a square image and the vertical field of
view in general.

Pixel coordinates are measured from the image center. Column ``c`` maps to
``px = c - width / 2`` and row ``r`` (counted from the top) maps to
``py = height / 2 - 1 - r``; the ray passes through the center of the pixel,
``((px + 0.5) * pixel_width, (py + 0.5) * pixel_height)``.

The :class:`Camera` class computes everything on the host with NumPy.
:func:`setup_camera` uploads the result into Taichi fields so kernels can call
:func:`get_ray`.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.camera.pinhole import Camera, setup_camera, get_ray
    >>>
    >>> camera = Camera(640, 480, position=(0, 0, 0), view_direction=(0, 0, 1))
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(320, 240, 640, 480)
"""

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raytracer.core.ray import Ray, make_ray
from raytracer.core.rotation import UP_DIRECTION, build_rotation
from raytracer.core.vector import as_tuple, as_vector, rotate

vec3 = tm.vec3

DEFAULT_FOV = 90.0


# =============================================================================
# Camera Data Structures
# =============================================================================


class CameraErrorKind(Enum):
    """Reasons a camera cannot be constructed."""

    DIRECTION_ZERO = "direction_zero"


class CameraError(ValueError):
    """Raised when a camera is built from invalid orientation data."""

    def __init__(self, kind: CameraErrorKind, message: str | None = None):
        self.kind = kind
        if message is None:
            message = "Camera view direction must be non-zero"
        super().__init__(message)


@dataclass(frozen=True)
class Viewport:
    """Image-plane geometry derived from the pixel grid and field of view.

    Attributes:
        width: Number of horizontal pixels.
        height: Number of vertical pixels.
        aspect_ratio: width / height.
        pixel_width: Distance between two pixel centers in x (camera units).
        pixel_height: Distance between two pixel centers in y (camera units).
        distance: Distance from the camera to the image plane.
    """

    width: int
    height: int
    aspect_ratio: float
    pixel_width: float
    pixel_height: float
    distance: float

    @classmethod
    def build(cls, width: int, height: int, fov: float) -> "Viewport":
        """Compute the viewport for a ``width`` x ``height`` image.

        Raises:
            ValueError: If a size is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size must be positive, got {width}x{height}")
        aspect_ratio = width / height
        return cls(
            width=int(width),
            height=int(height),
            aspect_ratio=aspect_ratio,
            pixel_width=2.0 * aspect_ratio / width,
            pixel_height=2.0 / height,
            distance=1.0 / math.tan(math.radians(fov) / 2.0),
        )


class Camera:
    """A pinhole camera: position, orientation, field of view and viewport.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        position: Camera position in world space.
        view_direction: Direction the camera looks in. Need not be normalized.
        fov: Field of view in degrees, in (0, 180).
        up: World "up" reference used to orient the camera.

    Raises:
        CameraError: With kind DIRECTION_ZERO if ``view_direction`` is zero.
        ValueError: If a size is not positive or ``fov`` is out of range.
    """

    def __init__(
        self,
        width: int,
        height: int,
        position=(0.0, 0.0, 0.0),
        view_direction=(0.0, 0.0, 1.0),
        fov: float = DEFAULT_FOV,
        up=UP_DIRECTION,
    ):
        direction = as_vector(view_direction)
        if not np.any(direction):
            raise CameraError(CameraErrorKind.DIRECTION_ZERO)
        if not 0.0 < fov < 180.0:
            raise ValueError(f"Field of view must be in (0, 180) degrees, got {fov}")

        self._position = as_tuple(position)
        self._direction = as_tuple(direction / np.linalg.norm(direction))
        self._up = as_tuple(up)
        self._fov = float(fov)
        self._rotation = build_rotation(direction, self._up)
        self._viewport = Viewport.build(width, height, self._fov)

    @property
    def position(self) -> tuple[float, float, float]:
        return self._position

    @property
    def direction(self) -> tuple[float, float, float]:
        """Unit view direction."""
        return self._direction

    @property
    def up(self) -> tuple[float, float, float]:
        return self._up

    @property
    def fov(self) -> float:
        return self._fov

    @property
    def rotation(self) -> npt.NDArray[np.float64]:
        """Camera basis (columns: right, up, forward)."""
        return self._rotation.copy()

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def width(self) -> int:
        return self._viewport.width

    @property
    def height(self) -> int:
        return self._viewport.height

    def set_width(self, width: int) -> None:
        """Change the image width, keeping position, rotation and fov."""
        self._viewport = Viewport.build(width, self._viewport.height, self._fov)

    def set_height(self, height: int) -> None:
        """Change the image height, keeping position, rotation and fov."""
        self._viewport = Viewport.build(self._viewport.width, height, self._fov)

    def pixels(self) -> tuple[int, int]:
        """Return ``(width, height)`` in pixels."""
        return (self._viewport.width, self._viewport.height)

    def pixel_coordinates(self, column: int, row: int) -> tuple[float, float]:
        """Center-relative pixel coordinates of grid cell (column, row)."""
        px = column - self._viewport.width / 2.0
        py = self._viewport.height / 2.0 - 1.0 - row
        return (px, py)

    def ray_from_pixel(
        self, px: float, py: float
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Compute the primary ray through center-relative pixel (px, py).

        Returns:
            ``(origin, direction)`` as float64 arrays; direction is unit length.
        """
        vp = self._viewport
        local = np.array(
            [
                (px + 0.5) * vp.pixel_width,
                (py + 0.5) * vp.pixel_height,
                vp.distance,
            ]
        )
        direction = self._rotation @ local
        direction /= np.linalg.norm(direction)
        return np.array(self._position), direction

    def to_dict(self) -> dict:
        return {
            "pos": list(self._position),
            "dir": list(self._direction),
            "width": self.width,
            "height": self.height,
            "fov": self._fov,
            "up": list(self._up),
        }


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_rotation = ti.Matrix.field(3, 3, dtype=ti.f32, shape=())
_pixel_width = ti.field(dtype=ti.f32, shape=())
_pixel_height = ti.field(dtype=ti.f32, shape=())
_distance = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> None:
    """Upload camera state into Taichi fields.

    Must be called (from Python scope) before any kernel uses get_ray, and
    again whenever the camera changes.
    """
    vp = camera.viewport
    _camera_position[None] = camera.position
    _camera_rotation.from_numpy(camera.rotation.astype(np.float32))
    _pixel_width[None] = vp.pixel_width
    _pixel_height[None] = vp.pixel_height
    _distance[None] = vp.distance


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def ray_from_pixel(px: ti.f32, py: ti.f32) -> Ray:
    """Primary ray through center-relative pixel coordinates (px, py)."""
    local = vec3(
        (px + 0.5) * _pixel_width[None],
        (py + 0.5) * _pixel_height[None],
        _distance[None],
    )
    return make_ray(_camera_position[None], rotate(_camera_rotation[None], local))


@ti.func
def get_ray(column: ti.i32, row: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Primary ray for grid cell (column, row), row 0 being the top.

    Args:
        column: Pixel column, 0 = left.
        row: Pixel row, 0 = top.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the camera position through the pixel center.
    """
    px = ti.cast(column, ti.f32) - ti.cast(width, ti.f32) * 0.5
    py = ti.cast(height, ti.f32) * 0.5 - 1.0 - ti.cast(row, ti.f32)
    return ray_from_pixel(px, py)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with position, rotation (3x3 nested list), pixel_width,
        pixel_height and distance.
    """
    pos = _camera_position[None]
    return {
        "position": (float(pos[0]), float(pos[1]), float(pos[2])),
        "rotation": _camera_rotation.to_numpy().tolist(),
        "pixel_width": float(_pixel_width[None]),
        "pixel_height": float(_pixel_height[None]),
        "distance": float(_distance[None]),
    }
