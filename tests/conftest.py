"""Shared fixtures for scenekit tests"""

import pytest
from pyrr import Vector3

from src.scenekit.animation.animatable import Animatable
from src.scenekit.animation.attribute_animation import AttributeAnimation, WrapMode
from src.scenekit.core.attributes import AttributeMode
from src.scenekit.core.resource_cache import ResourceCache
from src.scenekit.core.variant import VariantType


class Widget(Animatable):
    """Small animatable with one attribute of each interesting kind."""

    def __init__(self):
        super().__init__()
        self.x = 0.0
        self.y = 0.0
        self.offset = Vector3([0.0, 0.0, 0.0])
        self.label = ""
        self.y_writes = 0

    def _get_y(self):
        return self.y

    def _set_y(self, value):
        self.y = value
        self.y_writes += 1


Widget.register_attribute("X", VariantType.FLOAT, field="x", default=0.0, mode=AttributeMode.DEFAULT)
Widget.register_accessor_attribute("Y", VariantType.FLOAT, getter=Widget._get_y, setter=Widget._set_y,
                                   default=0.0, mode=AttributeMode.FILE)
Widget.register_attribute("Offset", VariantType.VECTOR3, field="offset", mode=AttributeMode.DEFAULT)
Widget.register_attribute("Label", VariantType.STRING, field="label", mode=AttributeMode.FILE)


class Bare(Animatable):
    """Animatable that exposes no attribute schema at all."""

    def get_attributes(self):
        return None


def make_curve(value_type, frames, wrap_mode=WrapMode.ONCE):
    """Build a curve from (time, value) pairs."""
    curve = AttributeAnimation(value_type)
    curve.wrap_mode = wrap_mode
    for time, value in frames:
        assert curve.set_key_frame(time, value)
    return curve


@pytest.fixture
def widget_class():
    return Widget


@pytest.fixture
def widget():
    return Widget()


@pytest.fixture
def bare_class():
    return Bare


@pytest.fixture
def curve_factory():
    return make_curve


@pytest.fixture
def resource_cache(tmp_path):
    """Fresh global resource cache rooted at a temporary directory."""
    cache = ResourceCache(resource_dirs=[tmp_path])
    ResourceCache.set_instance(cache)
    yield cache
    ResourceCache.set_instance(None)
