"""JSON scene files.

A scene file is a JSON object with these top-level keys:

    camera   exactly one camera: {"width", "height", "pos", "dir", "fov"?, "up"?}
    objects  list of {"type": "sphere" | "triangle" | "plane", ..., "material"}
    lights   list of {"pos", "intensity"}
    global   optional {"recurse_depth"?, "background"?}

Primitive keys are ``pos`` and ``r`` for spheres, ``t1``, ``t2`` and ``t3``
for triangles, and ``point`` and ``normal`` (or ``equation`` as
``[a, b, c, d]`` for ``ax + by + cz + d = 0``) for planes.

Materials require a ``color``, given as a color name or an 8-bit
``[r, g, b]`` triple. The coefficients ``lambert``, ``specular`` and
``ambient`` are numbers or ``[r, g, b]`` triples in [0, 1]. A ``template``
("matte", "metal", "mirror", "plastic") supplies default coefficients;
explicit coefficients override it. Without a template all three coefficients
are required.

Keys are case-insensitive. A key that appears twice (after lowercasing), a
missing required key, an unknown key or a value of the wrong type is an
error. Errors are collected across the whole file and reported together in a
single :class:`SceneConfigError`, each prefixed with the path of the
offending value, e.g. ``objects[2].material.color``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.scene.config import load_scene
    >>> tracer = load_scene("examples/scenes/spheres.json")
    >>> image = tracer.render()
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from raytracer.camera.pinhole import DEFAULT_FOV, Camera
from raytracer.core.color import NAMED_COLORS, Color, color_to_rgb8, from_rgb8, to_color
from raytracer.core.integrator import DEFAULT_RECURSE_DEPTH, MAX_RECURSE_DEPTH
from raytracer.core.raytracer import Raytracer
from raytracer.core.rotation import UP_DIRECTION
from raytracer.geometry.primitive import PlaneInfo, Primitive, SphereInfo, TriangleInfo
from raytracer.scene.manager import Light, Material, SceneObject

logger = logging.getLogger(__name__)

# Default coefficients (lambert, specular, ambient) for each material template
MATERIAL_TEMPLATES: dict[str, dict[str, float]] = {
    "matte": {"lambert": 0.9, "specular": 0.0, "ambient": 0.1},
    "metal": {"lambert": 0.3, "specular": 0.7, "ambient": 0.05},
    "mirror": {"lambert": 0.0, "specular": 0.95, "ambient": 0.0},
    "plastic": {"lambert": 0.7, "specular": 0.2, "ambient": 0.1},
}


class SceneConfigError(ValueError):
    """A scene file or dictionary is malformed.

    Attributes:
        errors: One message per problem found, each starting with a key path.
    """

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("\n".join(self.errors))


class _Pairs:
    """Key/value pairs of a JSON object, in file order, duplicates kept."""

    def __init__(self, pairs):
        self.pairs = list(pairs)


def _type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "list"
    if isinstance(value, (Mapping, _Pairs)):
        return "object"
    return type(value).__name__


def _wrong_type(path: str, expected: str, value: Any) -> SceneConfigError:
    return SceneConfigError(
        f"{path}: expected type '{expected}' but found type '{_type_name(value)}'"
    )


class _Options:
    """Lowercased options of one JSON object, consumed key by key."""

    def __init__(self, data: Any, path: str):
        if isinstance(data, _Pairs):
            pairs = data.pairs
        elif isinstance(data, Mapping):
            pairs = list(data.items())
        else:
            raise _wrong_type(path, "object", data)

        self.path = path
        self._values: dict[str, Any] = {}
        for key, value in pairs:
            name = str(key).lower()
            if name in self._values:
                raise SceneConfigError(f"{path or '<root>'}: duplicate key '{name}'")
            self._values[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def key_path(self, name: str) -> str:
        return f"{self.path}.{name}" if self.path else name

    def take(self, name: str) -> Any:
        if name not in self._values:
            raise SceneConfigError(f"{self.path or '<root>'}: missing option '{name}'")
        return self._values.pop(name)

    def take_optional(self, name: str, default: Any = None) -> Any:
        return self._values.pop(name, default)

    def check_empty(self) -> None:
        if self._values:
            names = ", ".join(f"'{name}'" for name in self._values)
            raise SceneConfigError(f"{self.path or '<root>'}: unknown option(s) {names}")


# =============================================================================
# Value Readers
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _read_float(value: Any, path: str) -> float:
    if not _is_number(value):
        raise _wrong_type(path, "number", value)
    return float(value)


def _read_int(value: Any, path: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise _wrong_type(path, "integer", value)
    return value


def _read_size(value: Any, path: str) -> int:
    size = _read_int(value, path)
    if size <= 0:
        raise SceneConfigError(f"{path}: must be positive, got {size}")
    return size


def _read_string(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise _wrong_type(path, "string", value)
    return value


def _read_vec3(value: Any, path: str) -> tuple[float, float, float]:
    if not isinstance(value, list) or len(value) != 3 or not all(map(_is_number, value)):
        raise _wrong_type(path, "[number, number, number]", value)
    x, y, z = (float(v) for v in value)
    return (x, y, z)


def _read_color(value: Any, path: str) -> Color:
    if isinstance(value, str):
        if value.lower() not in NAMED_COLORS:
            raise SceneConfigError(f"{path}: unknown color '{value}'")
        r, g, b = NAMED_COLORS[value.lower()]
        return from_rgb8(r, g, b)
    if isinstance(value, list) and len(value) == 3 and all(
        isinstance(v, int) and not isinstance(v, bool) for v in value
    ):
        try:
            return from_rgb8(*value)
        except ValueError as err:
            raise SceneConfigError(f"{path}: {err}") from err
    raise _wrong_type(path, "color name or [u8, u8, u8]", value)


def _read_coefficient(value: Any, path: str) -> Color:
    if _is_number(value):
        return to_color(value)
    if isinstance(value, list) and len(value) == 3 and all(map(_is_number, value)):
        return to_color(value)
    raise _wrong_type(path, "number or [number, number, number]", value)


# =============================================================================
# Scene Elements
# =============================================================================


def parse_camera(data: Any, path: str = "camera") -> Camera:
    """Build a Camera from its scene-file description."""
    options = _Options(data, path)
    width = _read_size(options.take("width"), options.key_path("width"))
    height = _read_size(options.take("height"), options.key_path("height"))
    position = _read_vec3(options.take("pos"), options.key_path("pos"))
    direction = _read_vec3(options.take("dir"), options.key_path("dir"))
    fov = DEFAULT_FOV
    if "fov" in options:
        fov = _read_float(options.take("fov"), options.key_path("fov"))
    up = UP_DIRECTION
    if "up" in options:
        up = _read_vec3(options.take("up"), options.key_path("up"))
    options.check_empty()

    try:
        return Camera(width, height, position, direction, fov, up=up)
    except ValueError as err:
        raise SceneConfigError(f"{path}: {err}") from err


def parse_material(data: Any, path: str) -> Material:
    """Build a Material, applying a template when one is named."""
    options = _Options(data, path)
    color = _read_color(options.take("color"), options.key_path("color"))

    coefficients: dict[str, Color] = {}
    if "template" in options:
        name = _read_string(options.take("template"), options.key_path("template"))
        template = MATERIAL_TEMPLATES.get(name.lower())
        if template is None:
            raise SceneConfigError(f"{options.key_path('template')}: unknown material '{name}'")
        coefficients = {key: to_color(value) for key, value in template.items()}

    for key in ("lambert", "specular", "ambient"):
        if key in options or key not in coefficients:
            coefficients[key] = _read_coefficient(options.take(key), options.key_path(key))

    options.check_empty()
    return Material(color=color, **coefficients)


def _parse_primitive(kind: str, options: _Options) -> Primitive:
    if kind == "sphere":
        center = _read_vec3(options.take("pos"), options.key_path("pos"))
        radius = _read_float(options.take("r"), options.key_path("r"))
        return SphereInfo(center, radius)
    if kind == "triangle":
        t1 = _read_vec3(options.take("t1"), options.key_path("t1"))
        t2 = _read_vec3(options.take("t2"), options.key_path("t2"))
        t3 = _read_vec3(options.take("t3"), options.key_path("t3"))
        return TriangleInfo(t1, t2, t3)

    if "equation" in options:
        value = options.take("equation")
        if not isinstance(value, list) or len(value) != 4 or not all(map(_is_number, value)):
            raise _wrong_type(options.key_path("equation"), "[a, b, c, d]", value)
        a, b, c, d = (float(v) for v in value)
        return PlaneInfo.from_cartesian(a, b, c, d)
    point = _read_vec3(options.take("point"), options.key_path("point"))
    normal = _read_vec3(options.take("normal"), options.key_path("normal"))
    return PlaneInfo(point, normal)


def parse_object(data: Any, path: str) -> SceneObject:
    """Build a SceneObject (primitive plus material)."""
    options = _Options(data, path)
    kind = _read_string(options.take("type"), options.key_path("type")).lower()
    if kind not in ("sphere", "triangle", "plane"):
        raise SceneConfigError(f"{options.key_path('type')}: unknown object '{kind}'")

    material_data = options.take("material")
    try:
        primitive = _parse_primitive(kind, options)
    except ValueError as err:
        if isinstance(err, SceneConfigError):
            raise
        raise SceneConfigError(f"{path}: {err}") from err
    options.check_empty()

    material = parse_material(material_data, options.key_path("material"))
    return SceneObject(primitive, material)


def parse_light(data: Any, path: str) -> Light:
    """Build a point Light."""
    options = _Options(data, path)
    position = _read_vec3(options.take("pos"), options.key_path("pos"))
    intensity = _read_float(options.take("intensity"), options.key_path("intensity"))
    options.check_empty()
    return Light(position, intensity)


def _parse_list(data: Any, path: str, parse_item) -> list:
    if not isinstance(data, list):
        raise _wrong_type(path, "list", data)

    items = []
    errors: list[str] = []
    for i, item in enumerate(data):
        try:
            items.append(parse_item(item, f"{path}[{i}]"))
        except SceneConfigError as err:
            errors.extend(err.errors)
    if errors:
        raise SceneConfigError(errors)
    return items


def parse_objects(data: Any, path: str = "objects") -> list[SceneObject]:
    """Parse a list of objects, collecting the errors of every item."""
    return _parse_list(data, path, parse_object)


def parse_lights(data: Any, path: str = "lights") -> list[Light]:
    """Parse a list of lights, collecting the errors of every item."""
    return _parse_list(data, path, parse_light)


def _parse_global(data: Any, path: str = "global") -> tuple[int, Color]:
    options = _Options(data, path)
    depth = DEFAULT_RECURSE_DEPTH
    if "recurse_depth" in options:
        key = options.key_path("recurse_depth")
        depth = _read_int(options.take("recurse_depth"), key)
        if not 0 <= depth <= MAX_RECURSE_DEPTH:
            raise SceneConfigError(f"{key}: must be in [0, {MAX_RECURSE_DEPTH}], got {depth}")
    background: Color = (0.0, 0.0, 0.0)
    if "background" in options:
        background = _read_color(options.take("background"), options.key_path("background"))
    options.check_empty()
    return depth, background


# =============================================================================
# Whole Scenes
# =============================================================================


def scene_from_dict(data: Any) -> Raytracer:
    """Build a Raytracer from a scene dictionary.

    Raises:
        SceneConfigError: Listing every problem found.
    """
    root = _Options(data, "")
    errors: list[str] = []

    def collect(fn, *args):
        try:
            return fn(*args)
        except SceneConfigError as err:
            errors.extend(err.errors)
            return None

    cameras = root.take_optional("camera", [])
    if not isinstance(cameras, list):
        cameras = [cameras]
    camera = None
    if len(cameras) != 1:
        errors.append(f"camera: there must be exactly one camera in a scene, found {len(cameras)}")
    else:
        camera = collect(parse_camera, cameras[0], "camera")

    objects = collect(parse_objects, root.take_optional("objects", []))
    lights = collect(parse_lights, root.take_optional("lights", []))
    settings = collect(_parse_global, root.take_optional("global", {}))
    collect(root.check_empty)

    if errors:
        raise SceneConfigError(errors)

    depth, background = settings
    logger.debug(
        "Parsed scene: %d objects, %d lights, depth %d", len(objects), len(lights), depth
    )
    return Raytracer(camera, objects, lights, background_color=background, recurse_depth=depth)


def load_scene(path: str | Path) -> Raytracer:
    """Read a JSON scene file and build a Raytracer.

    Raises:
        OSError: If the file cannot be read.
        SceneConfigError: If the file is not valid JSON or not a valid scene.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f, object_pairs_hook=_Pairs)
        except json.JSONDecodeError as err:
            raise SceneConfigError(f"{path}: invalid JSON: {err}") from err
    logger.info("Loaded scene file %s", path)
    return scene_from_dict(data)


def scene_to_dict(tracer: Raytracer) -> dict[str, Any]:
    """Export a Raytracer in the scene-file layout.

    Colors are written as 8-bit triples, so colors that are not multiples of
    1/255 are rounded.
    """
    objects = []
    for obj in tracer.objects:
        data = obj.to_dict()
        data["material"]["color"] = color_to_rgb8(obj.material.color).tolist()
        objects.append(data)

    return {
        "camera": tracer.camera.to_dict(),
        "objects": objects,
        "lights": [light.to_dict() for light in tracer.lights],
        "global": {
            "recurse_depth": tracer.recurse_depth,
            "background": color_to_rgb8(tracer.background_color).tolist(),
        },
    }


def save_scene(tracer: Raytracer, path: str | Path) -> None:
    """Write a Raytracer's scene as a JSON file."""
    with Path(path).open("w", encoding="utf-8") as f:
        json.dump(scene_to_dict(tracer), f, indent=2)
