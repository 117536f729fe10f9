"""Scene module: contents, storage and scene files.

Components:
    manager: Material, Light and SceneObject descriptions and SceneManager
    intersection: Struct-of-arrays object and light fields, nearest-hit and
        shadow queries
    config: JSON scene file loading, validation and export
    demo: Built-in demo scene

These modules hold or depend on Taichi fields and are not imported here;
import them directly after ``ti.init``.
"""
