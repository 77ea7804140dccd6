"""
Object Animation

A named, shareable bundle of attribute animations that can be applied to
any object whose schema has matching attributes.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple
from xml.etree.ElementTree import Element, SubElement

from ..config.settings import DEFAULT_ANIMATION_SPEED
from ..core.resource import Resource
from ..core.variant import VariantType, format_value
from ..core.xml_utils import xml_get_float
from .attribute_animation import AttributeAnimation

logger = logging.getLogger(__name__)


class ObjectAnimation(Resource):
    """
    Mapping from attribute name to (curve, playback speed).

    Curves added to a bundle carry a back-reference to it, which is how an
    animated object tells bundle-imported bindings from direct ones.
    """

    ROOT_ELEMENT = "objectAnimation"

    def __init__(self, name: str = ""):
        super().__init__(name)
        self._attribute_animations: Dict[str, AttributeAnimation] = {}
        self._speeds: Dict[str, float] = {}

    def add_attribute_animation(self, name: str, attribute_animation: AttributeAnimation,
                                speed: float = DEFAULT_ANIMATION_SPEED) -> bool:
        """
        Add or replace the curve for an attribute.

        Args:
            name: Attribute name
            attribute_animation: Curve to play
            speed: Playback speed multiplier

        Returns:
            False if the curve already belongs to another bundle
        """
        if attribute_animation is None:
            return False

        owner = attribute_animation.get_object_animation()
        if owner is not None and owner is not self:
            logger.error("Attribute animation for '%s' already belongs to another object animation", name)
            return False

        previous = self._attribute_animations.get(name)
        if previous is not None and previous is not attribute_animation:
            previous.set_object_animation(None)

        attribute_animation.set_object_animation(self)
        self._attribute_animations[name] = attribute_animation
        self._speeds[name] = float(speed)
        return True

    def remove_attribute_animation(self, name: str) -> None:
        attribute_animation = self._attribute_animations.pop(name, None)
        self._speeds.pop(name, None)
        if attribute_animation is not None:
            attribute_animation.set_object_animation(None)

    def get_attribute_animation(self, name: str) -> Optional[AttributeAnimation]:
        return self._attribute_animations.get(name)

    def get_attribute_animation_speed(self, name: str) -> float:
        return self._speeds.get(name, DEFAULT_ANIMATION_SPEED)

    def set_attribute_animation_speed(self, name: str, speed: float) -> None:
        if name in self._attribute_animations:
            self._speeds[name] = float(speed)

    def entries(self) -> List[Tuple[str, AttributeAnimation, float]]:
        """Snapshot of (attribute name, curve, speed) entries."""
        return [(name, animation, self._speeds[name])
                for name, animation in self._attribute_animations.items()]

    def get_num_attribute_animations(self) -> int:
        return len(self._attribute_animations)

    def __contains__(self, name: str):
        return name in self._attribute_animations

    def load_xml(self, source: Element) -> bool:
        """Load <attributeAnimation name="..." speed="..."> children."""
        for name in list(self._attribute_animations):
            self.remove_attribute_animation(name)

        for elem in source.findall("attributeAnimation"):
            name = elem.get("name", "")
            attribute_animation = AttributeAnimation()
            if not attribute_animation.load_xml(elem):
                logger.error("Failed to load attribute animation '%s' of object animation", name)
                return False

            try:
                speed = xml_get_float(elem, "speed", DEFAULT_ANIMATION_SPEED)
            except ValueError:
                logger.error("Invalid speed for attribute animation '%s'", name)
                return False

            self.add_attribute_animation(name, attribute_animation, speed)

        return True

    def save_xml(self, dest: Element) -> bool:
        for name, attribute_animation, speed in self.entries():
            elem = SubElement(dest, "attributeAnimation", name=name,
                              speed=format_value(VariantType.FLOAT, speed))
            if not attribute_animation.save_xml(elem):
                return False

        return True

    def __repr__(self):
        return f"ObjectAnimation(name='{self.name}', attributes={list(self._attribute_animations)})"
