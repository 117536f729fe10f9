"""Unit tests for the SceneManager and scene descriptions.

Tests cover:
- Material normalization
- Building a scene and object/light indices
- Validation errors on construction
- Upload into the scene fields
- Dict export and import
"""

import pytest


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from raytracer.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestMaterial:
    """Tests for the Material description."""

    def test_defaults(self):
        from raytracer.scene.manager import Material

        mat = Material()
        assert mat.color == (1.0, 1.0, 1.0)
        assert mat.specular == (0.0, 0.0, 0.0)
        assert mat.lambert == (0.0, 0.0, 0.0)
        assert mat.ambient == (0.0, 0.0, 0.0)

    def test_scalars_broadcast_and_clamp(self):
        from raytracer.scene.manager import Material

        mat = Material(color=(2.0, 0.5, -1.0), lambert=0.7, specular=(0.1, 0.2, 0.3))
        assert mat.color == (1.0, 0.5, 0.0)
        assert mat.lambert == (0.7, 0.7, 0.7)
        assert mat.specular == (0.1, 0.2, 0.3)

    def test_to_dict(self):
        from raytracer.scene.manager import Material

        assert Material(lambert=0.5).to_dict() == {
            "color": [1.0, 1.0, 1.0],
            "specular": [0.0, 0.0, 0.0],
            "lambert": [0.5, 0.5, 0.5],
            "ambient": [0.0, 0.0, 0.0],
        }


class TestBuilding:
    """Tests for adding objects and lights."""

    def test_indices(self, fresh_scene):
        from raytracer.scene.manager import Material

        assert fresh_scene.add_sphere((0, 0, 5), 1.0, Material(lambert=0.9)) == 0
        assert fresh_scene.add_plane((0, -1, 0), (0, 1, 0)) == 1
        assert fresh_scene.add_triangle((0, 0, 0), (1, 0, 0), (0, 1, 0)) == 2
        assert fresh_scene.add_light((0, 5, 0), 0.8) == 0
        assert fresh_scene.add_light((0, -5, 0)) == 1

        assert fresh_scene.get_object_count() == 3
        assert fresh_scene.get_light_count() == 2
        assert fresh_scene.lights[1].intensity == 1.0

    def test_default_material(self, fresh_scene):
        from raytracer.scene.manager import Material

        fresh_scene.add_sphere((0, 0, 5), 1.0)
        assert fresh_scene.objects[0].material == Material()

    def test_invalid_sphere(self, fresh_scene):
        with pytest.raises(ValueError, match="radius"):
            fresh_scene.add_sphere((0, 0, 5), -1.0)
        assert fresh_scene.get_object_count() == 0

    def test_invalid_triangle(self, fresh_scene):
        with pytest.raises(ValueError, match="collinear"):
            fresh_scene.add_triangle((0, 0, 0), (1, 0, 0), (2, 0, 0))

    def test_invalid_plane(self, fresh_scene):
        with pytest.raises(ValueError, match="non-zero"):
            fresh_scene.add_plane((0, 0, 0), (0, 0, 0))

    def test_light_capacity(self, fresh_scene):
        for i in range(fresh_scene.get_max_lights()):
            fresh_scene.add_light((float(i), 0.0, 0.0))
        with pytest.raises(RuntimeError, match="Maximum number of lights"):
            fresh_scene.add_light((0.0, 0.0, 0.0))

    def test_clear(self, fresh_scene):
        fresh_scene.add_sphere((0, 0, 5), 1.0)
        fresh_scene.add_light((0, 5, 0))
        fresh_scene.clear()
        assert fresh_scene.get_object_count() == 0
        assert fresh_scene.get_light_count() == 0


class TestUpload:
    """Tests for writing the scene into the fields."""

    def test_upload_populates_fields(self, fresh_scene):
        from raytracer.geometry import PrimitiveKind
        from raytracer.scene.intersection import (
            get_light_count,
            get_object_count,
            object_kinds,
            object_radii,
            object_speculars,
        )
        from raytracer.scene.manager import Material

        fresh_scene.add_plane((0, -1, 0), (0, 1, 0))
        fresh_scene.add_sphere((0, 0, 5), 2.0, Material(specular=(0.1, 0.2, 0.3)))
        fresh_scene.add_light((0, 5, 0))
        fresh_scene.upload()

        assert get_object_count() == 2
        assert get_light_count() == 1
        assert object_kinds[0] == int(PrimitiveKind.PLANE)
        assert object_kinds[1] == int(PrimitiveKind.SPHERE)
        assert object_radii[1] == pytest.approx(2.0)
        assert object_speculars[1].to_numpy().tolist() == pytest.approx([0.1, 0.2, 0.3])

    def test_upload_replaces_previous_scene(self, fresh_scene):
        from raytracer.scene.intersection import get_object_count

        fresh_scene.add_sphere((0, 0, 5), 1.0)
        fresh_scene.add_sphere((0, 0, 9), 1.0)
        fresh_scene.upload()

        fresh_scene.clear()
        fresh_scene.add_sphere((0, 0, 5), 1.0)
        fresh_scene.upload()
        assert get_object_count() == 1

    def test_upload_triangle_stores_edges(self, fresh_scene):
        from raytracer.scene.intersection import object_edges_a, object_edges_b, object_normals

        fresh_scene.add_triangle((1, 1, 1), (2, 1, 1), (1, 2, 1))
        fresh_scene.upload()

        assert object_edges_a[0].to_numpy().tolist() == pytest.approx([1.0, 0.0, 0.0])
        assert object_edges_b[0].to_numpy().tolist() == pytest.approx([0.0, 1.0, 0.0])
        assert object_normals[0].to_numpy().tolist() == pytest.approx([0.0, 0.0, 1.0])


class TestSerialization:
    """Tests for to_dict / from_dict."""

    def test_to_dict(self, fresh_scene):
        from raytracer.scene.manager import Material

        fresh_scene.add_sphere((0, 0, 5), 1.5, Material(ambient=0.2))
        fresh_scene.add_light((1, 2, 3), 0.5)
        data = fresh_scene.to_dict()

        assert data["objects"][0]["type"] == "sphere"
        assert data["objects"][0]["pos"] == [0.0, 0.0, 5.0]
        assert data["objects"][0]["r"] == 1.5
        assert data["objects"][0]["material"]["ambient"] == [0.2, 0.2, 0.2]
        assert data["lights"] == [{"pos": [1.0, 2.0, 3.0], "intensity": 0.5}]

    def test_from_dict(self, fresh_scene):
        fresh_scene.add_sphere((9, 9, 9), 1.0)
        fresh_scene.from_dict(
            {
                "objects": [
                    {
                        "type": "plane",
                        "point": [0, -1, 0],
                        "normal": [0, 2, 0],
                        "material": {"color": "white", "template": "matte"},
                    }
                ],
                "lights": [{"pos": [0, 5, 0], "intensity": 1.0}],
            }
        )

        assert fresh_scene.get_object_count() == 1
        assert fresh_scene.objects[0].primitive.normal == (0.0, 1.0, 0.0)
        assert fresh_scene.objects[0].material.lambert == pytest.approx((0.9, 0.9, 0.9))
        assert fresh_scene.get_light_count() == 1

    def test_from_dict_error_keeps_scene(self, fresh_scene):
        from raytracer.scene.config import SceneConfigError

        fresh_scene.add_sphere((9, 9, 9), 1.0)
        with pytest.raises(SceneConfigError):
            fresh_scene.from_dict({"objects": [{"type": "cube"}]})
        assert fresh_scene.get_object_count() == 1
