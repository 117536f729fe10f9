"""Scene aggregate: camera, scene contents and render settings.

:class:`Raytracer` owns everything a render needs and drives the Taichi
pipeline: it uploads the camera and scene into fields, sizes the render
target, launches the pixel kernel and copies the image back as a NumPy array.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.camera.pinhole import Camera
    >>> from raytracer.core.raytracer import Raytracer
    >>> from raytracer.geometry import SphereInfo
    >>> from raytracer.scene.manager import Light, Material, SceneObject
    >>>
    >>> camera = Camera(320, 240, position=(0, 0, 0), view_direction=(0, 0, 1))
    >>> sphere = SceneObject(SphereInfo((0, 0, 5), 1.0), Material(lambert=0.9))
    >>> tracer = Raytracer(camera, [sphere], [Light((0, 5, 0), 1.0)])
    >>> image = tracer.render()  # (240, 320, 3) float32
"""

import logging
import time

import numpy as np

from raytracer.camera.pinhole import Camera, setup_camera
from raytracer.core.color import BLACK, Color, to_color
from raytracer.core.integrator import (
    DEFAULT_RECURSE_DEPTH,
    MAX_RECURSE_DEPTH,
    get_image_numpy,
    render_image,
    setup_render_target,
)
from raytracer.scene.manager import Light, SceneObject, upload_scene

logger = logging.getLogger(__name__)


class Raytracer:
    """Renders a fixed scene from a camera.

    Args:
        camera: The camera; its width and height define the image size.
        objects: Scene objects, in order.
        lights: Point lights, in order.
        background_color: Color of pixels whose ray contributes nothing.
        recurse_depth: Maximum number of reflection levels per primary ray.

    Raises:
        ValueError: If recurse_depth is outside [0, MAX_RECURSE_DEPTH].
    """

    def __init__(
        self,
        camera: Camera,
        objects: list[SceneObject],
        lights: list[Light],
        background_color: Color = BLACK,
        recurse_depth: int = DEFAULT_RECURSE_DEPTH,
    ):
        self.camera = camera
        self.objects = list(objects)
        self.lights = list(lights)
        self.background_color = to_color(background_color)
        self._recurse_depth = 0
        self.set_recurse_depth(recurse_depth)

    @property
    def recurse_depth(self) -> int:
        return self._recurse_depth

    def set_width(self, width: int) -> None:
        """Change the output width (camera viewport is rebuilt)."""
        self.camera.set_width(width)

    def set_height(self, height: int) -> None:
        """Change the output height (camera viewport is rebuilt)."""
        self.camera.set_height(height)

    def set_recurse_depth(self, depth: int) -> None:
        """Set the recursion limit.

        Raises:
            ValueError: If depth is outside [0, MAX_RECURSE_DEPTH].
        """
        if not 0 <= depth <= MAX_RECURSE_DEPTH:
            raise ValueError(
                f"Recursion depth must be in [0, {MAX_RECURSE_DEPTH}], got {depth}"
            )
        self._recurse_depth = int(depth)

    def render(self, parallel: bool = True) -> np.ndarray:
        """Render the scene.

        Args:
            parallel: Run the per-pixel loop in parallel. The sequential
                variant produces an identical image.

        Returns:
            A float32 array of shape (height, width, 3) in [0, 1], row 0 at
            the top.
        """
        width, height = self.camera.pixels()
        logger.info(
            "Rendering %dx%d: %d objects, %d lights, depth %d (%s)",
            width,
            height,
            len(self.objects),
            len(self.lights),
            self._recurse_depth,
            "parallel" if parallel else "sequential",
        )

        start = time.perf_counter()
        setup_camera(self.camera)
        upload_scene(self.objects, self.lights)
        setup_render_target(width, height, self.background_color)
        render_image(self._recurse_depth, parallel=parallel)
        image = get_image_numpy()
        logger.info("Render finished in %.3f s", time.perf_counter() - start)

        return image

    def raycast(self) -> np.ndarray:
        """Render sequentially."""
        return self.render(parallel=False)

    def par_raycast(self) -> np.ndarray:
        """Render in parallel."""
        return self.render(parallel=True)
