"""Built-in demo scene.

A small scene exercising every primitive kind and material feature: a
reflective floor plane, a back wall, three spheres (matte, metal, mirror), a
triangle and two point lights, of which only the first visible one shades
each point.

The camera sits at the origin looking down +z, slightly tilted toward the
floor.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.scene.demo import create_demo_scene
    >>> tracer = create_demo_scene(320, 240)
    >>> image = tracer.render()
"""

from dataclasses import dataclass

from raytracer.camera.pinhole import Camera
from raytracer.core.raytracer import Raytracer
from raytracer.scene.manager import Material, SceneManager


@dataclass
class DemoSceneParams:
    """Parameters for the demo scene.

    Attributes:
        light_intensity: Intensity of the main light.
        fill_intensity: Intensity of the fill light (used where the main
            light is occluded).
        floor_color: RGB color of the floor.
        sphere_color: RGB color of the matte sphere.
        background: Background color.
    """

    light_intensity: float = 1.0
    fill_intensity: float = 0.4
    floor_color: tuple[float, float, float] = (0.8, 0.8, 0.8)
    sphere_color: tuple[float, float, float] = (0.9, 0.2, 0.2)
    background: tuple[float, float, float] = (0.05, 0.05, 0.1)


def build_demo_manager(params: DemoSceneParams | None = None) -> SceneManager:
    """Build the demo scene contents."""
    if params is None:
        params = DemoSceneParams()

    scene = SceneManager()

    # Floor and back wall
    scene.add_plane(
        (0.0, -1.0, 0.0),
        (0.0, 1.0, 0.0),
        Material(color=params.floor_color, lambert=0.7, specular=0.2, ambient=0.1),
    )
    scene.add_plane(
        (0.0, 0.0, 14.0),
        (0.0, 0.0, -1.0),
        Material(color=(0.3, 0.4, 0.8), lambert=0.8, ambient=0.15),
    )

    scene.add_sphere(
        (-2.2, 0.0, 7.0),
        1.0,
        Material(color=params.sphere_color, lambert=0.9, ambient=0.1),
    )
    scene.add_sphere(
        (0.0, 0.2, 8.0),
        1.2,
        Material(color=(0.9, 0.75, 0.3), lambert=0.3, specular=(0.7, 0.6, 0.3), ambient=0.05),
    )
    scene.add_sphere(
        (2.3, -0.2, 6.5),
        0.8,
        Material(color=(1.0, 1.0, 1.0), specular=0.95),
    )
    scene.add_triangle(
        (-1.0, -1.0, 10.0),
        (1.5, -1.0, 10.5),
        (0.2, 2.5, 11.0),
        Material(color=(0.2, 0.9, 0.3), lambert=0.8, ambient=0.1),
    )

    scene.add_light((-4.0, 6.0, 2.0), params.light_intensity)
    scene.add_light((5.0, 3.0, 4.0), params.fill_intensity)

    return scene


def create_demo_scene(
    width: int = 640,
    height: int = 480,
    params: DemoSceneParams | None = None,
    recurse_depth: int = 5,
) -> Raytracer:
    """Create a Raytracer for the demo scene."""
    if params is None:
        params = DemoSceneParams()

    scene = build_demo_manager(params)
    camera = Camera(width, height, position=(0.0, 0.5, 0.0), view_direction=(0.0, -0.05, 1.0))

    return Raytracer(
        camera,
        scene.objects,
        scene.lights,
        background_color=params.background,
        recurse_depth=recurse_depth,
    )
