"""Closed set of primitive shapes and their shared intersection record.

Primitives exist in two forms. On the host they are frozen dataclasses
(:class:`PlaneInfo`, :class:`TriangleInfo`, :class:`SphereInfo`) that validate
their input and precompute derived quantities once. In kernels they are
flattened into the scene's struct-of-arrays fields and tagged with a
:class:`PrimitiveKind`; ``raytracer.scene.intersection.intersect_object``
dispatches on that tag.

Every intersection routine returns an :class:`Intersection`, where ``t`` is the
distance along the (unit) ray direction.
"""

from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np
import taichi as ti
import taichi.math as tm

from raytracer.core.vector import EPSILON, as_tuple, as_vector, normalized

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

Vec3Tuple = tuple[float, float, float]


class PrimitiveKind(IntEnum):
    """Tag stored per object in the scene fields."""

    PLANE = 0
    TRIANGLE = 1
    SPHERE = 2


@ti.dataclass
class Intersection:
    """Result of a ray-primitive test.

    Attributes:
        hit: 1 if the ray struck the primitive, 0 otherwise.
        t: Distance along the ray direction. Only valid if hit == 1.
        point: World-space hit position. Only valid if hit == 1.
        normal: Unit surface normal at the hit. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def no_intersection() -> Intersection:
    """An Intersection record describing a miss."""
    return Intersection(hit=0, t=0.0, point=vec3(0.0), normal=vec3(0.0))


# =============================================================================
# Host-side Descriptions
# =============================================================================


@dataclass(frozen=True)
class PlaneInfo:
    """An infinite plane through ``point`` with unit ``normal``.

    The normal is normalized on construction; a zero normal is rejected.
    """

    point: Vec3Tuple
    normal: Vec3Tuple

    def __post_init__(self) -> None:
        object.__setattr__(self, "point", as_tuple(self.point))
        try:
            unit = normalized(self.normal)
        except ValueError as err:
            raise ValueError("Plane normal must be non-zero") from err
        object.__setattr__(self, "normal", as_tuple(unit))

    @property
    def kind(self) -> PrimitiveKind:
        return PrimitiveKind.PLANE

    @classmethod
    def from_cartesian(cls, a: float, b: float, c: float, d: float) -> "PlaneInfo":
        """Build the plane ``a*x + b*y + c*z + d = 0``.

        The stored point is the foot of the perpendicular from the origin,
        ``-d * n / |n|^2`` with ``n = (a, b, c)``.
        """
        n = as_vector((a, b, c))
        norm_sq = float(np.dot(n, n))
        if norm_sq == 0.0:
            raise ValueError("Plane normal must be non-zero")
        return cls(point=as_tuple(-d * n / norm_sq), normal=as_tuple(n))


@dataclass(frozen=True)
class TriangleInfo:
    """A triangle with vertices ``t1``, ``t2``, ``t3``.

    The edges ``l12 = t2 - t1`` and ``l13 = t3 - t1`` and the unit face
    normal ``normalize(l12 x l13)`` are computed once here.
    """

    t1: Vec3Tuple
    t2: Vec3Tuple
    t3: Vec3Tuple
    l12: Vec3Tuple = field(init=False)
    l13: Vec3Tuple = field(init=False)
    normal: Vec3Tuple = field(init=False)

    def __post_init__(self) -> None:
        p1, p2, p3 = as_vector(self.t1), as_vector(self.t2), as_vector(self.t3)
        l12 = p2 - p1
        l13 = p3 - p1
        face = np.cross(l12, l13)
        if float(np.linalg.norm(face)) < EPSILON * EPSILON:
            raise ValueError("Degenerate triangle: vertices are collinear")

        object.__setattr__(self, "t1", as_tuple(p1))
        object.__setattr__(self, "t2", as_tuple(p2))
        object.__setattr__(self, "t3", as_tuple(p3))
        object.__setattr__(self, "l12", as_tuple(l12))
        object.__setattr__(self, "l13", as_tuple(l13))
        object.__setattr__(self, "normal", as_tuple(normalized(face)))

    @property
    def kind(self) -> PrimitiveKind:
        return PrimitiveKind.TRIANGLE


@dataclass(frozen=True)
class SphereInfo:
    """A sphere defined by center and (positive) radius."""

    center: Vec3Tuple
    radius: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", as_tuple(self.center))
        radius = float(self.radius)
        if not radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        object.__setattr__(self, "radius", radius)

    @property
    def kind(self) -> PrimitiveKind:
        return PrimitiveKind.SPHERE


Primitive = PlaneInfo | TriangleInfo | SphereInfo


def primitive_to_dict(primitive: Primitive) -> dict:
    """Serialize a primitive to the scene-file layout."""
    if isinstance(primitive, SphereInfo):
        return {"type": "sphere", "pos": list(primitive.center), "r": primitive.radius}
    if isinstance(primitive, TriangleInfo):
        return {
            "type": "triangle",
            "t1": list(primitive.t1),
            "t2": list(primitive.t2),
            "t3": list(primitive.t3),
        }
    return {
        "type": "plane",
        "point": list(primitive.point),
        "normal": list(primitive.normal),
    }

