"""Unit tests for camera rotation construction."""

import numpy as np
import pytest

from raytracer.core.rotation import UP_DIRECTION, build_rotation, is_orthonormal, rotate_vector


class TestBuildRotation:
    """Tests for build_rotation."""

    def test_identity_for_plus_z(self):
        rotation = build_rotation((0.0, 0.0, 1.0))
        np.testing.assert_allclose(rotation, np.eye(3), atol=1e-12)

    def test_columns_are_right_up_forward(self):
        rotation = build_rotation((1.0, 0.0, 0.0))

        right, up, forward = rotation[:, 0], rotation[:, 1], rotation[:, 2]
        np.testing.assert_allclose(forward, [1.0, 0.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(up, [0.0, 1.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(right, [0.0, 0.0, -1.0], atol=1e-12)

    def test_forward_column_is_normalized_direction(self):
        direction = np.array([2.0, -1.0, 3.0])
        rotation = build_rotation(direction)
        np.testing.assert_allclose(rotation[:, 2], direction / np.linalg.norm(direction))

    @pytest.mark.parametrize(
        "direction",
        [
            (0.0, 0.0, 1.0),
            (1.0, 2.0, 3.0),
            (-0.3, -0.9, 0.1),
            (0.0, 1.0, 0.0),
            (0.0, -5.0, 0.0),
        ],
    )
    def test_orthonormal(self, direction):
        rotation = build_rotation(direction)
        assert is_orthonormal(rotation)
        assert np.linalg.det(rotation) == pytest.approx(1.0)

    def test_parallel_to_up_falls_back(self):
        """Looking straight up still produces a valid basis."""
        rotation = build_rotation(UP_DIRECTION)
        assert is_orthonormal(rotation)
        np.testing.assert_allclose(rotation[:, 2], [0.0, 1.0, 0.0], atol=1e-12)

    def test_explicit_up(self):
        rotation = build_rotation((0.0, 0.0, 1.0), up=(1.0, 0.0, 0.0))
        np.testing.assert_allclose(rotation[:, 1], [1.0, 0.0, 0.0], atol=1e-12)

    def test_deterministic(self):
        a = build_rotation((0.4, 0.1, -0.7))
        b = build_rotation((0.4, 0.1, -0.7))
        np.testing.assert_array_equal(a, b)

    def test_zero_direction(self):
        with pytest.raises(ValueError, match="zero direction"):
            build_rotation((0.0, 0.0, 0.0))

    def test_zero_up(self):
        with pytest.raises(ValueError, match="up vector"):
            build_rotation((0.0, 0.0, 1.0), up=(0.0, 0.0, 0.0))


def test_rotate_vector_maps_forward():
    rotation = build_rotation((0.0, 0.0, -1.0))
    np.testing.assert_allclose(rotate_vector(rotation, (0.0, 0.0, 1.0)), [0.0, 0.0, -1.0])


def test_is_orthonormal_rejects_scaled_basis():
    assert not is_orthonormal(2.0 * np.eye(3))
