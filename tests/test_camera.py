"""Unit tests for the pinhole camera.

Tests cover:
- Construction errors (zero direction, bad sizes, bad fov)
- Viewport geometry and resize behavior
- Host-side pixel-to-ray mapping
- Kernel-side get_ray matching the host computation
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestCameraConstruction:
    """Tests for Camera validation."""

    def test_zero_direction(self):
        from raytracer.camera.pinhole import Camera, CameraError, CameraErrorKind

        with pytest.raises(CameraError) as excinfo:
            Camera(10, 10, view_direction=(0.0, 0.0, 0.0))
        assert excinfo.value.kind == CameraErrorKind.DIRECTION_ZERO

    def test_camera_error_is_value_error(self):
        from raytracer.camera.pinhole import Camera

        with pytest.raises(ValueError):
            Camera(10, 10, view_direction=(0.0, 0.0, 0.0))

    def test_zero_direction_checked_first(self):
        """A zero direction is reported even when other arguments are bad too."""
        from raytracer.camera.pinhole import Camera, CameraError

        with pytest.raises(CameraError):
            Camera(0, 0, view_direction=(0.0, 0.0, 0.0), fov=500.0)

    @pytest.mark.parametrize("fov", [0.0, 180.0, -10.0])
    def test_fov_out_of_range(self, fov):
        from raytracer.camera.pinhole import Camera

        with pytest.raises(ValueError, match="Field of view"):
            Camera(10, 10, fov=fov)

    @pytest.mark.parametrize("size", [(0, 10), (10, 0), (-1, 5)])
    def test_non_positive_size(self, size):
        from raytracer.camera.pinhole import Camera

        with pytest.raises(ValueError, match="positive"):
            Camera(*size)

    def test_direction_is_normalized(self):
        from raytracer.camera.pinhole import Camera

        camera = Camera(10, 10, view_direction=(0.0, 0.0, 4.0))
        assert camera.direction == (0.0, 0.0, 1.0)

    def test_rotation_is_a_copy(self):
        from raytracer.camera.pinhole import Camera

        camera = Camera(10, 10)
        rotation = camera.rotation
        rotation[0, 0] = 42.0
        assert camera.rotation[0, 0] == 1.0


class TestViewport:
    """Tests for viewport geometry."""

    def test_default_fov_distance(self):
        from raytracer.camera.pinhole import Camera

        camera = Camera(200, 100)
        vp = camera.viewport
        assert vp.aspect_ratio == 2.0
        assert vp.pixel_width == pytest.approx(2.0 * 2.0 / 200)
        assert vp.pixel_height == pytest.approx(2.0 / 100)
        assert vp.distance == pytest.approx(1.0)

    def test_narrow_fov_distance(self):
        from raytracer.camera.pinhole import Camera

        camera = Camera(10, 10, fov=60.0)
        assert camera.viewport.distance == pytest.approx(1.0 / math.tan(math.radians(30.0)))

    def test_set_width_rebuilds_viewport(self):
        from raytracer.camera.pinhole import Camera

        camera = Camera(100, 100, position=(1.0, 2.0, 3.0), view_direction=(1.0, 0.0, 0.0))
        rotation = camera.rotation
        camera.set_width(300)

        assert camera.pixels() == (300, 100)
        assert camera.viewport.aspect_ratio == 3.0
        assert camera.position == (1.0, 2.0, 3.0)
        np.testing.assert_array_equal(camera.rotation, rotation)

    def test_set_height_rebuilds_viewport(self):
        from raytracer.camera.pinhole import Camera

        camera = Camera(100, 100, fov=70.0)
        camera.set_height(50)

        assert camera.pixels() == (100, 50)
        assert camera.viewport.pixel_height == pytest.approx(2.0 / 50)
        assert camera.fov == 70.0

    def test_set_width_rejects_zero(self):
        from raytracer.camera.pinhole import Camera

        camera = Camera(100, 100)
        with pytest.raises(ValueError):
            camera.set_width(0)


class TestHostRayGeneration:
    """Tests for Camera.ray_from_pixel and pixel_coordinates."""

    def test_pixel_coordinates(self):
        from raytracer.camera.pinhole import Camera

        camera = Camera(4, 2)
        assert camera.pixel_coordinates(0, 0) == (-2.0, 0.0)
        assert camera.pixel_coordinates(3, 1) == (1.0, -1.0)

    def test_single_pixel_looks_forward(self, unit_camera):
        origin, direction = unit_camera.ray_from_pixel(*unit_camera.pixel_coordinates(0, 0))
        np.testing.assert_allclose(origin, [0.0, 0.0, 0.0])
        np.testing.assert_allclose(direction, [0.0, 0.0, 1.0], atol=1e-12)

    def test_rays_are_symmetric(self):
        """Opposite corner pixels get mirrored directions."""
        from raytracer.camera.pinhole import Camera

        camera = Camera(4, 4)
        _, top_left = camera.ray_from_pixel(*camera.pixel_coordinates(0, 0))
        _, bottom_right = camera.ray_from_pixel(*camera.pixel_coordinates(3, 3))

        assert top_left[0] < 0.0 and top_left[1] > 0.0
        np.testing.assert_allclose(top_left[:2], -bottom_right[:2], atol=1e-12)
        assert top_left[2] == pytest.approx(bottom_right[2])

    def test_corner_ray_direction(self):
        from raytracer.camera.pinhole import Camera

        camera = Camera(2, 2)
        _, direction = camera.ray_from_pixel(*camera.pixel_coordinates(1, 0))
        np.testing.assert_allclose(direction, np.array([0.5, 0.5, 1.0]) / math.sqrt(1.5))

    def test_ray_follows_rotation(self):
        from raytracer.camera.pinhole import Camera

        camera = Camera(1, 1, position=(1.0, 2.0, 3.0), view_direction=(-1.0, 0.0, 0.0))
        origin, direction = camera.ray_from_pixel(-0.5, -0.5)
        np.testing.assert_allclose(origin, [1.0, 2.0, 3.0])
        np.testing.assert_allclose(direction, [-1.0, 0.0, 0.0], atol=1e-12)

    def test_directions_are_unit(self):
        from raytracer.camera.pinhole import Camera

        camera = Camera(8, 6, view_direction=(0.3, -0.2, 1.0), fov=75.0)
        for column, row in [(0, 0), (7, 5), (3, 2)]:
            _, direction = camera.ray_from_pixel(*camera.pixel_coordinates(column, row))
            assert np.linalg.norm(direction) == pytest.approx(1.0)

    def test_to_dict(self):
        from raytracer.camera.pinhole import Camera

        camera = Camera(32, 16, position=(0.0, 1.0, 0.0), view_direction=(0.0, 0.0, 2.0), fov=60.0)
        assert camera.to_dict() == {
            "pos": [0.0, 1.0, 0.0],
            "dir": [0.0, 0.0, 1.0],
            "width": 32,
            "height": 16,
            "fov": 60.0,
            "up": [0.0, 1.0, 0.0],
        }


class TestKernelRayGeneration:
    """Tests for setup_camera and get_ray."""

    def test_setup_camera_uploads_state(self):
        from raytracer.camera.pinhole import Camera, get_camera_info, setup_camera

        setup_camera(Camera(100, 50, position=(1.0, 2.0, 3.0)))
        info = get_camera_info()

        assert info["position"] == pytest.approx((1.0, 2.0, 3.0))
        assert info["pixel_width"] == pytest.approx(0.04)
        assert info["pixel_height"] == pytest.approx(0.04)
        assert info["distance"] == pytest.approx(1.0)
        np.testing.assert_allclose(info["rotation"], np.eye(3), atol=1e-6)

    def test_get_ray_matches_host(self):
        from raytracer.camera.pinhole import Camera, get_ray, setup_camera

        camera = Camera(
            16, 9, position=(0.5, 1.0, -2.0), view_direction=(0.2, -0.1, 1.0), fov=65.0
        )
        setup_camera(camera)

        pixels = [(0, 0), (15, 8), (7, 4), (3, 6)]
        n = len(pixels)
        origins = ti.Vector.field(3, dtype=ti.f32, shape=n)
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
        columns = ti.field(dtype=ti.i32, shape=n)
        rows = ti.field(dtype=ti.i32, shape=n)
        for i, (column, row) in enumerate(pixels):
            columns[i] = column
            rows[i] = row

        @ti.kernel
        def test_kernel():
            for i in range(n):
                ray = get_ray(columns[i], rows[i], 16, 9)
                origins[i] = ray.origin
                directions[i] = ray.direction

        test_kernel()
        for i, (column, row) in enumerate(pixels):
            origin, direction = camera.ray_from_pixel(*camera.pixel_coordinates(column, row))
            np.testing.assert_allclose(origins.to_numpy()[i], origin, atol=1e-5)
            np.testing.assert_allclose(directions.to_numpy()[i], direction, atol=1e-5)
