"""Tests for the XML scene loader"""

import numpy as np
import pytest

from src.scenekit.config.settings import ASSETS_DIR, SCENES_DIR
from src.scenekit.core.resource_cache import ResourceCache
from src.scenekit.loaders.scene_loader import SceneLoader


@pytest.fixture
def asset_cache():
    """Global resource cache rooted at the bundled assets."""
    cache = ResourceCache(resource_dirs=[ASSETS_DIR])
    ResourceCache.set_instance(cache)
    yield cache
    ResourceCache.set_instance(None)


def test_load_demo_scene(asset_cache):
    """The bundled demo scene loads with its animations bound"""
    result = SceneLoader(asset_cache).load_scene(SCENES_DIR / "demo.xml")
    scene = result.scene

    assert result.failed_nodes == []
    assert result.metadata == {"name": "Demo"}
    assert scene.get_object_count() == 3
    assert scene.animated_object_count == 2

    ground = scene.find_object("Ground")
    assert np.allclose(ground.scale, (20.0, 0.5, 20.0))
    assert not ground.has_attribute_animations()

    cube = scene.find_object("BouncingCube")
    bounce = cube.get_object_animation()
    assert bounce is not None and bounce.name == "animations/Bounce.xml"
    assert set(cube.attribute_animation_instances) == {"Position", "Color"}
    assert cube.get_attribute_animation_speed("Color") == 0.5

    spinner = scene.find_object("Spinner")
    assert spinner.get_object_animation() is None
    assert set(spinner.attribute_animation_instances) == {"Rotation", "Scale"}


def test_relative_path_resolves_against_project_root(asset_cache):
    """Relative scene paths are looked up from the project root"""
    result = SceneLoader(asset_cache).load_scene("assets/scenes/demo.xml")
    assert result.scene.get_object_count() == 3
    assert SCENES_DIR.resolve() in asset_cache.resource_dirs


def test_demo_scene_plays(asset_cache):
    """Updating the scene drives attributes and sends event frames"""
    scene = SceneLoader(asset_cache).load_scene(SCENES_DIR / "demo.xml").scene
    cube = scene.find_object("BouncingCube")
    events = []
    cube.subscribe_animation_event("Apex", lambda obj, event_type, data: events.append(data))

    scene.update(0.25)
    assert np.allclose(cube.position, (0.0, 1.0, 0.0))
    assert events == []

    scene.update(0.5)
    assert np.allclose(cube.position, (0.0, 1.0, 0.0))
    assert events == [{"height": 2.0}]

    # The spinner's scale animation plays once and is then removed
    spinner = scene.find_object("Spinner")
    scene.update(2.0)
    assert spinner.get_attribute_animation("Scale") is None
    assert np.allclose(spinner.scale, (1.0, 1.0, 1.0))
    assert spinner.get_attribute_animation("Rotation") is not None


def test_save_and_reload(asset_cache, tmp_path):
    """A saved scene reloads with the same objects and bindings"""
    loader = SceneLoader(asset_cache)
    scene = loader.load_scene(SCENES_DIR / "demo.xml").scene
    path = tmp_path / "copy.xml"

    assert loader.save_scene(scene, path, name="Copy")

    result = loader.load_scene(path)
    copy = result.scene
    assert result.metadata == {"name": "Copy"}
    assert [obj.name for obj in copy.objects] == ["Ground", "BouncingCube", "Spinner"]
    assert copy.find_object("BouncingCube").get_object_animation() is \
        scene.find_object("BouncingCube").get_object_animation()
    assert set(copy.find_object("Spinner").attribute_animation_instances) == {"Rotation", "Scale"}


def test_failed_nodes_are_reported(asset_cache, tmp_path):
    """Nodes that fail to load are left out of the scene"""
    path = tmp_path / "broken.xml"
    path.write_text(
        '<scene>'
        '<node><attribute name="Name" value="Good" /></node>'
        '<node><attribute name="Name" value="Bad" /><attribute name="Position" value="up" /></node>'
        '</scene>')

    result = SceneLoader(asset_cache).load_scene(path)

    assert result.failed_nodes == ["Bad"]
    assert [obj.name for obj in result.scene.objects] == ["Good"]


def test_missing_scene_file(asset_cache, tmp_path):
    """Missing files raise FileNotFoundError"""
    with pytest.raises(FileNotFoundError):
        SceneLoader(asset_cache).load_scene(tmp_path / "missing.xml")


def test_not_a_scene_document(asset_cache, tmp_path):
    """Other documents and malformed XML raise ValueError"""
    other = tmp_path / "other.xml"
    other.write_text('<objectAnimation />')
    malformed = tmp_path / "malformed.xml"
    malformed.write_text('<scene>')

    loader = SceneLoader(asset_cache)
    with pytest.raises(ValueError):
        loader.load_scene(other)
    with pytest.raises(ValueError):
        loader.load_scene(malformed)
