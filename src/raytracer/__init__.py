"""Whitted-style ray tracer built on Taichi.

Renders scenes of spheres, triangles and planes lit by point lights, with
Lambertian, ambient and mirror-reflection shading, to PNG images.

Subpackages:
    core: Vector and color math, camera rotation, the tracing kernels and the
        Raytracer aggregate
    geometry: Primitive descriptions and ray intersection routines
    scene: Scene objects, GPU scene storage, JSON scene files, demo scene
    camera: Pinhole camera and primary ray generation
    preview: PNG export

Modules holding Taichi fields (camera.pinhole, scene.intersection,
core.integrator and everything importing them) must be imported after
``ti.init``.
"""

__version__ = "0.1.0"
