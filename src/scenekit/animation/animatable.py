"""
Animatable

Base class for objects that can drive their own attributes with attribute
animations, either bound one by one or imported from a shared object
animation.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Set
from xml.etree.ElementTree import Element, SubElement

from ..config.settings import DEBUG_ATTRIBUTE_ANIMATION, DEFAULT_ANIMATION_SPEED
from ..core.attributes import AttributeInfo
from ..core.resource_cache import ResourceCache
from ..core.serializable import Serializable
from ..core.variant import ResourceRef, VariantType, format_value
from ..core.xml_utils import xml_get_float
from .attribute_animation import AttributeAnimation
from .attribute_animation_instance import AttributeAnimationInstance
from .object_animation import ObjectAnimation

logger = logging.getLogger(__name__)

AnimationCallback = Callable[['Animatable'], None]
AnimationEventCallback = Callable[['Animatable', str, Dict[str, Any]], None]


class Animatable(Serializable):
    """
    Serializable object with attribute animation support.

    Features:
    - At most one active object animation, shared with other objects
    - One animation instance per attribute name
    - Index of animated attributes that are network replicated
    - Per-frame update that evicts finished animations
    - Added/removed notifications when an attribute gains or loses its animation
    """

    def __init__(self):
        self.animation_enabled = True
        self.object_animation: Optional[ObjectAnimation] = None
        # Cache holding a reference on our behalf to the current object animation
        self._object_animation_cache: Optional[ResourceCache] = None
        self.attribute_animation_instances: Dict[str, AttributeAnimationInstance] = {}
        self.animated_network_attributes: Set[AttributeInfo] = set()

        self._on_animation_added: List[AnimationCallback] = []
        self._on_animation_removed: List[AnimationCallback] = []
        self._event_subscribers: Dict[str, List[AnimationEventCallback]] = {}

    def set_animation_enabled(self, enabled: bool) -> None:
        """Pause or resume all attribute animations of this object."""
        self.animation_enabled = enabled

    def set_object_animation(self, object_animation: Optional[ObjectAnimation]) -> None:
        """
        Replace the active object animation.

        Bindings imported from the previous object animation are removed and
        every attribute animation of the new one is bound. A previous object
        animation obtained through the resource cache is released.
        """
        if object_animation is self.object_animation:
            return

        if self.object_animation is not None:
            self._on_object_animation_removed(self.object_animation)
            self._release_cached_object_animation()

        self.object_animation = object_animation

        if object_animation is not None:
            self._on_object_animation_added(object_animation)

    def get_object_animation(self) -> Optional[ObjectAnimation]:
        return self.object_animation

    def set_attribute_animation(self, name: str, attribute_animation: Optional[AttributeAnimation],
                                speed: float = DEFAULT_ANIMATION_SPEED) -> bool:
        """
        Bind an attribute animation to an attribute, or unbind it with None.

        Binding the curve that is already playing only changes its speed.

        Args:
            name: Attribute name
            attribute_animation: Curve to play, or None to remove the binding
            speed: Playback speed multiplier

        Returns:
            False if the binding was rejected; state is unchanged in that case
        """
        current_instance = self.attribute_animation_instances.get(name)

        if attribute_animation is None:
            if current_instance is None:
                return True

            self.animated_network_attributes.discard(current_instance.attribute_info)
            del self.attribute_animation_instances[name]
            self.on_attribute_animation_removed()
            return True

        if current_instance is not None and current_instance.attribute_animation is attribute_animation:
            current_instance.speed = speed
            return True

        if current_instance is not None:
            attribute_info = current_instance.attribute_info
        else:
            attributes = self.get_attributes()
            if attributes is None:
                logger.error("%s has no attributes", self.get_type_name())
                return False

            attribute_info = next((info for info in attributes if info.name == name), None)
            if attribute_info is None:
                logger.error("Invalid name: %s", name)
                return False

        if attribute_animation.value_type != attribute_info.type:
            logger.error("Invalid value type %s for attribute '%s' of type %s",
                         attribute_animation.value_type.value, name, attribute_info.type.value)
            return False

        if attribute_info.is_network:
            self.animated_network_attributes.add(attribute_info)

        self.attribute_animation_instances[name] = AttributeAnimationInstance(
            self, attribute_info, attribute_animation, speed)

        if current_instance is None:
            self.on_attribute_animation_added()
        return True

    def remove_attribute_animation(self, name: str) -> None:
        self.set_attribute_animation(name, None)

    def set_attribute_animation_speed(self, name: str, speed: float) -> None:
        """Change playback speed of a bound attribute; unbound names are ignored."""
        instance = self.attribute_animation_instances.get(name)
        if instance is not None:
            instance.speed = speed

    def get_attribute_animation(self, name: str) -> Optional[AttributeAnimation]:
        instance = self.attribute_animation_instances.get(name)
        return instance.attribute_animation if instance is not None else None

    def get_attribute_animation_speed(self, name: str) -> float:
        instance = self.attribute_animation_instances.get(name)
        return instance.speed if instance is not None else 1.0

    def get_attribute_animation_instance(self, name: str) -> Optional[AttributeAnimationInstance]:
        return self.attribute_animation_instances.get(name)

    def has_attribute_animations(self) -> bool:
        return bool(self.attribute_animation_instances)

    def is_animated_network_attribute(self, attribute_info: AttributeInfo) -> bool:
        return attribute_info in self.animated_network_attributes

    def update_attribute_animations(self, time_step: float) -> None:
        """
        Advance every attribute animation and remove the finished ones.

        Args:
            time_step: Time elapsed since last frame (seconds)
        """
        if not self.animation_enabled:
            return

        finished_names = []
        for name, instance in list(self.attribute_animation_instances.items()):
            if instance.update(time_step):
                finished_names.append(name)

        for name in finished_names:
            if DEBUG_ATTRIBUTE_ANIMATION:
                logger.debug("Attribute animation '%s' of %s finished", name, self.get_type_name())
            self.set_attribute_animation(name, None)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def register_animation_added_callback(self, callback: AnimationCallback) -> None:
        """Callback signature: callback(animatable)"""
        self._on_animation_added.append(callback)

    def register_animation_removed_callback(self, callback: AnimationCallback) -> None:
        """Callback signature: callback(animatable)"""
        self._on_animation_removed.append(callback)

    def unregister_animation_callbacks(self, callback: AnimationCallback) -> None:
        for callbacks in (self._on_animation_added, self._on_animation_removed):
            while callback in callbacks:
                callbacks.remove(callback)

    def subscribe_animation_event(self, event_type: str, callback: AnimationEventCallback) -> None:
        """
        Receive event frames of the given type.

        Callback signature: callback(animatable, event_type, data)
        """
        self._event_subscribers.setdefault(event_type, []).append(callback)

    def send_animation_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """Deliver an event frame reached by one of this object's animations."""
        for callback in list(self._event_subscribers.get(event_type, ())):
            callback(self, event_type, data)

    def on_attribute_animation_added(self) -> None:
        """Called when an attribute gains an animation."""
        self._notify(self._on_animation_added)

    def on_attribute_animation_removed(self) -> None:
        """Called when an attribute loses its animation."""
        self._notify(self._on_animation_removed)

    def _notify(self, callbacks: List[AnimationCallback]) -> None:
        for callback in list(callbacks):
            try:
                callback(self)
            except Exception:
                logger.exception("Error in attribute animation callback")

    def _on_object_animation_added(self, object_animation: ObjectAnimation) -> None:
        for name, attribute_animation, speed in object_animation.entries():
            self.set_attribute_animation(name, attribute_animation, speed)

    def _on_object_animation_removed(self, object_animation: ObjectAnimation) -> None:
        names = [name for name, instance in self.attribute_animation_instances.items()
                 if instance.attribute_animation.get_object_animation() is object_animation]
        for name in names:
            self.set_attribute_animation(name, None)

    def _is_owned_by_object_animation(self, instance: AttributeAnimationInstance) -> bool:
        owner = instance.attribute_animation.get_object_animation()
        return owner is not None and owner is self.object_animation

    # ------------------------------------------------------------------
    # Object Animation attribute
    # ------------------------------------------------------------------

    def set_object_animation_attr(self, value: ResourceRef) -> None:
        """
        Resolve an object animation by name through the resource cache.

        The cache reference taken here is held until the object animation is
        replaced or removed.
        """
        if not value.name:
            return

        cache = ResourceCache.get_instance()
        object_animation = cache.get_resource(ObjectAnimation, value.name)
        if object_animation is not None and object_animation is self.object_animation \
                and self._object_animation_cache is not None:
            # Already holding a reference
            cache.release_resource(ObjectAnimation, value.name)
            return

        self.set_object_animation(object_animation)
        if object_animation is not None:
            self._object_animation_cache = cache

    def _release_cached_object_animation(self) -> None:
        if self._object_animation_cache is not None:
            self._object_animation_cache.release_resource(ObjectAnimation, self.object_animation.name)
            self._object_animation_cache = None

    def get_object_animation_attr(self) -> ResourceRef:
        name = self.object_animation.name if self.object_animation is not None else ""
        return ResourceRef(ObjectAnimation.__name__, name)

    # ------------------------------------------------------------------
    # XML
    # ------------------------------------------------------------------

    def load_xml(self, source: Element) -> bool:
        """
        Load attributes, object animation and attribute animations.

        Any previously bound animation is removed first, so reloading never
        leaves stale bindings behind. The removal happens before the plain
        attributes are read, because the "Object Animation" attribute binds a
        named object animation. A load that then fails leaves the object
        without animations.
        """
        self.set_object_animation(None)
        for name in list(self.attribute_animation_instances):
            self.set_attribute_animation(name, None)

        if not super().load_xml(source):
            return False

        elem = source.find("objectAnimation")
        if elem is not None:
            object_animation = ObjectAnimation()
            if not object_animation.load_xml(elem):
                logger.error("Failed to load object animation of %s", self.get_type_name())
                return False
            self.set_object_animation(object_animation)

        for elem in source.findall("attributeAnimation"):
            name = elem.get("name", "")
            attribute_animation = AttributeAnimation()
            if not attribute_animation.load_xml(elem):
                logger.error("Failed to load attribute animation '%s' of %s", name, self.get_type_name())
                return False

            try:
                speed = xml_get_float(elem, "speed", DEFAULT_ANIMATION_SPEED)
            except ValueError:
                logger.error("Invalid speed for attribute animation '%s'", name)
                return False

            self.set_attribute_animation(name, attribute_animation, speed)

        return True

    def save_xml(self, dest: Element) -> bool:
        """
        Save attributes and animations.

        Only an anonymous object animation is written inline; a named one is
        saved through the "Object Animation" attribute. Bindings imported from
        the object animation are not written on their own.
        """
        if not super().save_xml(dest):
            return False

        if self.object_animation is not None and self.object_animation.is_anonymous():
            elem = SubElement(dest, "objectAnimation")
            if not self.object_animation.save_xml(elem):
                return False

        for name, instance in self.attribute_animation_instances.items():
            if self._is_owned_by_object_animation(instance):
                continue

            elem = SubElement(dest, "attributeAnimation", name=name,
                              speed=format_value(VariantType.FLOAT, instance.speed))
            if not instance.attribute_animation.save_xml(elem):
                return False

        return True


Animatable.register_accessor_attribute(
    "Object Animation",
    VariantType.RESOURCE_REF,
    getter=Animatable.get_object_animation_attr,
    setter=Animatable.set_object_animation_attr,
    default=ResourceRef(ObjectAnimation.__name__),
)
