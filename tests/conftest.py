"""Pytest configuration for raytracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Modules declaring fields are imported inside the tests, after this
    fixture has run.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_scene_data():
    """Clear scene fields before and after each test."""
    # Import here to ensure Taichi is initialized
    from raytracer.scene.intersection import clear_scene

    clear_scene()
    yield
    clear_scene()


@pytest.fixture
def unit_camera():
    """1x1 camera at the origin looking down +z; its only ray is (0, 0, 1)."""
    from raytracer.camera.pinhole import Camera

    return Camera(1, 1, position=(0.0, 0.0, 0.0), view_direction=(0.0, 0.0, 1.0))
