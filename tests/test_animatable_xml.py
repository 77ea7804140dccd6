"""Tests for Animatable XML load and save"""

from xml.etree.ElementTree import Element, fromstring

import numpy as np
import pytest

from src.scenekit.animation.attribute_animation import InterpolationMethod, WrapMode
from src.scenekit.animation.object_animation import ObjectAnimation
from src.scenekit.core.variant import VariantType


def _key_frames(curve):
    return [(k.time, np.asarray(k.value, dtype=float).tolist()) for k in curve.key_frames]


def _bundle(curve_factory, name=""):
    bundle = ObjectAnimation(name)
    bundle.add_attribute_animation(
        "X", curve_factory(VariantType.FLOAT, [(0.0, 0.0), (1.0, 4.0)], WrapMode.LOOP), 2.0)
    bundle.add_attribute_animation(
        "Offset", curve_factory(VariantType.VECTOR3, [(0.0, (0, 0, 0)), (2.0, (1, 2, 3))], WrapMode.CLAMP), 0.5)
    return bundle


def test_save_writes_attributes(widget):
    """Reflected attributes are saved as attribute elements"""
    widget.x = 1.5
    widget.label = "hello"
    node = Element("node")

    assert widget.save_xml(node)

    values = {elem.get("name"): elem.get("value") for elem in node.findall("attribute")}
    assert values["X"] == "1.5"
    assert values["Label"] == "hello"
    assert values["Offset"] == "0 0 0"
    assert values["Object Animation"] == "ObjectAnimation;"


def test_anonymous_object_animation_round_trip(widget_class, curve_factory):
    """An inline object animation survives save and reload"""
    source = widget_class()
    bundle = _bundle(curve_factory)
    source.set_object_animation(bundle)

    node = Element("node")
    assert source.save_xml(node)
    assert len(node.findall("objectAnimation")) == 1
    assert node.findall("attributeAnimation") == []

    target = widget_class()
    assert target.load_xml(node)

    loaded = target.get_object_animation()
    assert loaded is not None and loaded is not bundle
    assert loaded.is_anonymous()
    assert set(target.attribute_animation_instances) == {"X", "Offset"}
    assert target.get_attribute_animation_speed("X") == 2.0
    assert target.get_attribute_animation_speed("Offset") == 0.5

    for name in ("X", "Offset"):
        original = bundle.get_attribute_animation(name)
        restored = target.get_attribute_animation(name)
        assert restored.get_object_animation() is loaded
        assert restored.value_type == original.value_type
        assert restored.wrap_mode == original.wrap_mode
        assert _key_frames(restored) == _key_frames(original)


def test_bundle_bindings_are_not_saved_twice(widget, curve_factory):
    """Bindings imported from the object animation are not written standalone"""
    widget.set_object_animation(_bundle(curve_factory))
    widget.set_attribute_animation_speed("X", 9.0)
    widget.set_attribute_animation("Y", curve_factory(VariantType.FLOAT, [(0.0, 0.0), (1.0, 1.0)]), 3.0)

    node = Element("node")
    assert widget.save_xml(node)

    standalone = node.findall("attributeAnimation")
    assert [elem.get("name") for elem in standalone] == ["Y"]
    assert standalone[0].get("speed") == "3"
    assert len(node.find("objectAnimation").findall("attributeAnimation")) == 2


def test_named_object_animation_saved_by_reference(widget_class, resource_cache, curve_factory, tmp_path):
    """A named object animation is referenced, never embedded"""
    (tmp_path / "animations").mkdir()
    assert _bundle(curve_factory).save_file(tmp_path / "animations" / "Pulse.xml")

    named = resource_cache.get_resource(ObjectAnimation, "animations/Pulse.xml")
    assert named is not None and named.name == "animations/Pulse.xml"

    source = widget_class()
    source.set_object_animation(named)
    node = Element("node")
    assert source.save_xml(node)

    assert node.find("objectAnimation") is None
    assert node.findall("attributeAnimation") == []
    values = {elem.get("name"): elem.get("value") for elem in node.findall("attribute")}
    assert values["Object Animation"] == "ObjectAnimation;animations/Pulse.xml"

    target = widget_class()
    assert target.load_xml(node)
    assert target.get_object_animation() is named
    assert set(target.attribute_animation_instances) == {"X", "Offset"}


def test_direct_attribute_animation_round_trip(widget_class, curve_factory):
    """Directly bound curves are saved with name and speed"""
    source = widget_class()
    curve = curve_factory(VariantType.FLOAT, [(0.0, 1.0), (0.5, 3.0), (2.0, -1.0)], WrapMode.ONCE)
    curve.set_interpolation_method(InterpolationMethod.SPLINE)
    curve.set_event_frame(0.5, "Peak", {"value": 3.0})
    source.set_attribute_animation("Y", curve, 1.25)

    node = Element("node")
    assert source.save_xml(node)

    target = widget_class()
    assert target.load_xml(node)

    restored = target.get_attribute_animation("Y")
    assert target.get_object_animation() is None
    assert target.get_attribute_animation_speed("Y") == 1.25
    assert restored.get_object_animation() is None
    assert restored.wrap_mode == WrapMode.ONCE
    assert restored.interpolation_method == InterpolationMethod.SPLINE
    assert _key_frames(restored) == _key_frames(curve)
    assert len(restored.event_frames) == 1
    assert restored.event_frames[0].event_type == "Peak"
    assert restored.event_frames[0].data == {"value": 3.0}


def test_load_clears_previous_bindings(widget, curve_factory):
    """Reloading never leaves stale bindings behind"""
    widget.set_object_animation(_bundle(curve_factory))
    widget.set_attribute_animation("Y", curve_factory(VariantType.FLOAT, [(0.0, 0.0), (1.0, 1.0)]))
    removed = []
    widget.register_animation_removed_callback(removed.append)

    assert widget.load_xml(fromstring('<node><attribute name="X" value="7" /></node>'))

    assert widget.get_object_animation() is None
    assert not widget.has_attribute_animations()
    assert not widget.animated_network_attributes
    assert len(removed) == 3
    assert widget.x == 7.0


def test_load_attribute_animation_defaults_speed(widget):
    """A missing speed attribute means normal speed"""
    node = fromstring(
        '<node>'
        '<attributeAnimation name="X" wrapMode="Clamp">'
        '<keyFrame time="0" type="Float" value="0" />'
        '<keyFrame time="1" type="Float" value="10" />'
        '</attributeAnimation>'
        '</node>')

    assert widget.load_xml(node)
    assert widget.get_attribute_animation_speed("X") == 1.0

    widget.update_attribute_animations(0.5)
    assert widget.x == pytest.approx(5.0)


def test_load_fails_on_bad_curve(widget):
    """A malformed curve fails the whole load"""
    node = fromstring(
        '<node>'
        '<attributeAnimation name="X" speed="1">'
        '<keyFrame time="0" type="Bogus" value="0" />'
        '</attributeAnimation>'
        '</node>')

    assert not widget.load_xml(node)
    assert widget.get_attribute_animation("X") is None


def test_load_fails_on_bad_object_animation(widget):
    """A malformed object animation fails the whole load"""
    node = fromstring(
        '<node>'
        '<objectAnimation>'
        '<attributeAnimation name="X" speed="fast">'
        '<keyFrame time="0" type="Float" value="0" />'
        '</attributeAnimation>'
        '</objectAnimation>'
        '</node>')

    assert not widget.load_xml(node)
    assert widget.get_object_animation() is None


def test_load_fails_on_bad_attribute_value(widget):
    """An unparsable attribute value fails the load"""
    assert not widget.load_xml(fromstring('<node><attribute name="X" value="abc" /></node>'))


def test_load_skips_unknown_attributes(widget, caplog):
    """Unknown attribute names are reported and skipped"""
    node = fromstring('<node><attribute name="Nope" value="1" /><attribute name="X" value="2" /></node>')

    assert widget.load_xml(node)
    assert widget.x == 2.0
    assert "Nope" in caplog.text


def test_load_rejects_mismatched_binding_without_failing(widget):
    """A curve that does not fit its attribute is not bound"""
    node = fromstring(
        '<node>'
        '<attributeAnimation name="Label" speed="1">'
        '<keyFrame time="0" type="Float" value="0" />'
        '</attributeAnimation>'
        '</node>')

    assert widget.load_xml(node)
    assert widget.get_attribute_animation("Label") is None


def test_load_with_undecodable_object_animation_file(widget, resource_cache, tmp_path):
    """A referenced file that is not text is reported, never raised"""
    (tmp_path / "Bad.xml").write_bytes(b"\xff\xfe\x00<")
    node = fromstring(
        '<node>'
        '<attribute name="Object Animation" value="ObjectAnimation;Bad.xml" />'
        '<attribute name="X" value="3" />'
        '</node>')

    assert widget.load_xml(node)
    assert widget.get_object_animation() is None
    assert widget.x == 3.0
    assert resource_cache.get_cache_stats()['load_failures'] == 1


def test_failed_load_leaves_object_without_animations(widget, curve_factory):
    """Bindings are cleared before attributes are read, even if the load fails"""
    widget.set_attribute_animation("X", curve_factory(VariantType.FLOAT, [(0.0, 0.0), (1.0, 1.0)]))

    assert not widget.load_xml(fromstring('<node><attribute name="X" value="abc" /></node>'))
    assert not widget.has_attribute_animations()
