"""Scene manager: host-side scene description and upload to Taichi fields.

A scene is a list of objects (a primitive plus a material) and a list of
point lights. The order of both lists is significant: the nearest-hit search
breaks ties by object order and shading uses the first visible light.

Materials use per-channel coefficients. ``color`` is the object's base color;
``specular``, ``lambert`` and ``ambient`` scale the reflected, diffuse and
ambient terms. Each may be given as a scalar (applied to all channels) or as
an RGB triple; all are clamped to [0, 1].

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.scene.manager import Material, SceneManager
    >>> scene = SceneManager()
    >>> scene.add_sphere((0, 0, 5), 1.0, Material(color=(1, 0, 0), lambert=0.9))
    0
    >>> scene.add_light((0, 5, 0), intensity=1.0)
    0
    >>> scene.upload()
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from raytracer.core.color import BLACK, WHITE, Color, to_color
from raytracer.core.vector import as_tuple
from raytracer.geometry.primitive import (
    PlaneInfo,
    Primitive,
    SphereInfo,
    TriangleInfo,
    primitive_to_dict,
)
from raytracer.scene.intersection import (
    MAX_LIGHTS,
    MAX_OBJECTS,
    add_light,
    add_plane,
    add_sphere,
    add_triangle,
    clear_scene,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Material:
    """Surface response of an object.

    Attributes:
        color: Base color of the surface.
        specular: Fraction of the reflected ray's color added to the surface.
        lambert: Diffuse (matte) response to the visible light.
        ambient: Base light, independent of the lights in the scene.
    """

    color: Color = WHITE
    specular: Color = BLACK
    lambert: Color = BLACK
    ambient: Color = BLACK

    def __post_init__(self) -> None:
        for name in ("color", "specular", "lambert", "ambient"):
            object.__setattr__(self, name, to_color(getattr(self, name)))

    def to_dict(self) -> dict[str, list[float]]:
        return {
            "color": list(self.color),
            "specular": list(self.specular),
            "lambert": list(self.lambert),
            "ambient": list(self.ambient),
        }


@dataclass(frozen=True)
class Light:
    """A point light.

    Attributes:
        position: Light position in world space.
        intensity: Scales the diffuse brightness; typically in [0, 1].
    """

    position: tuple[float, float, float]
    intensity: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", as_tuple(self.position))
        object.__setattr__(self, "intensity", float(self.intensity))

    def to_dict(self) -> dict[str, Any]:
        return {"pos": list(self.position), "intensity": self.intensity}


@dataclass(frozen=True)
class SceneObject:
    """A primitive together with its material."""

    primitive: Primitive
    material: Material = field(default_factory=Material)

    def to_dict(self) -> dict[str, Any]:
        data = primitive_to_dict(self.primitive)
        data["material"] = self.material.to_dict()
        return data


def upload_scene(objects: list[SceneObject], lights: list[Light]) -> None:
    """Replace the contents of the scene fields with ``objects`` and ``lights``.

    Raises:
        RuntimeError: If the scene exceeds MAX_OBJECTS or MAX_LIGHTS.
    """
    if len(objects) > MAX_OBJECTS:
        raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")
    if len(lights) > MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    clear_scene()
    for obj in objects:
        prim = obj.primitive
        mat = obj.material
        material = {
            "color": mat.color,
            "specular": mat.specular,
            "lambert": mat.lambert,
            "ambient": mat.ambient,
        }
        if isinstance(prim, SphereInfo):
            add_sphere(prim.center, prim.radius, **material)
        elif isinstance(prim, TriangleInfo):
            add_triangle(prim.t1, prim.l12, prim.l13, prim.normal, **material)
        elif isinstance(prim, PlaneInfo):
            add_plane(prim.point, prim.normal, **material)
        else:
            raise TypeError(f"Unsupported primitive: {type(prim).__name__}")

    for light in lights:
        add_light(light.position, light.intensity)

    logger.debug("Uploaded %d objects and %d lights", len(objects), len(lights))


class SceneManager:
    """Builds a scene on the host and uploads it for rendering.

    Attributes:
        objects: Objects in insertion order.
        lights: Lights in insertion order.

    Example:
        >>> scene = SceneManager()
        >>> mirror = Material(specular=0.9)
        >>> scene.add_plane((0, -1, 0), (0, 1, 0), mirror)
        0
        >>> scene.add_triangle((-1, 0, 4), (1, 0, 4), (0, 2, 4), Material(lambert=1.0))
        1
    """

    def __init__(self) -> None:
        self.objects: list[SceneObject] = []
        self.lights: list[Light] = []

    def clear(self) -> None:
        """Remove all objects and lights (host side only)."""
        self.objects.clear()
        self.lights.clear()

    # =========================================================================
    # Building
    # =========================================================================

    def add_object(self, primitive: Primitive, material: Material | None = None) -> int:
        """Add a primitive with a material and return its object index.

        Raises:
            RuntimeError: If the maximum number of objects is exceeded.
        """
        if len(self.objects) >= MAX_OBJECTS:
            raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")
        self.objects.append(SceneObject(primitive, material or Material()))
        return len(self.objects) - 1

    def add_sphere(self, center, radius: float, material: Material | None = None) -> int:
        """Add a sphere.

        Raises:
            ValueError: If the radius is not positive.
        """
        return self.add_object(SphereInfo(center, radius), material)

    def add_triangle(self, t1, t2, t3, material: Material | None = None) -> int:
        """Add a triangle.

        Raises:
            ValueError: If the vertices are collinear.
        """
        return self.add_object(TriangleInfo(t1, t2, t3), material)

    def add_plane(self, point, normal, material: Material | None = None) -> int:
        """Add a plane through ``point`` with the given normal.

        Raises:
            ValueError: If the normal is zero.
        """
        return self.add_object(PlaneInfo(point, normal), material)

    def add_light(self, position, intensity: float = 1.0) -> int:
        """Add a point light and return its index.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
        """
        if len(self.lights) >= MAX_LIGHTS:
            raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
        self.lights.append(Light(position, intensity))
        return len(self.lights) - 1

    # =========================================================================
    # Upload and Queries
    # =========================================================================

    def upload(self) -> None:
        """Write the scene into the Taichi fields used by the kernels."""
        upload_scene(self.objects, self.lights)

    def get_object_count(self) -> int:
        return len(self.objects)

    def get_light_count(self) -> int:
        return len(self.lights)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export objects and lights in the scene-file layout."""
        return {
            "objects": [obj.to_dict() for obj in self.objects],
            "lights": [light.to_dict() for light in self.lights],
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Replace the scene with the ``objects`` and ``lights`` of ``data``.

        Raises:
            SceneConfigError: If the data is malformed.
        """
        from raytracer.scene.config import parse_lights, parse_objects

        objects = parse_objects(data.get("objects", []))
        lights = parse_lights(data.get("lights", []))
        self.clear()
        self.objects.extend(objects)
        self.lights.extend(lights)

    @staticmethod
    def get_max_objects() -> int:
        return MAX_OBJECTS

    @staticmethod
    def get_max_lights() -> int:
        return MAX_LIGHTS
