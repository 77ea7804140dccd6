"""
Serializable

Base class for objects with a reflective attribute schema. Attributes are
registered per class and inherited by subclasses; values are read and
written by name and persisted as <attribute name="..." value="..."/> XML
elements.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional
from xml.etree.ElementTree import Element

from .attributes import AttributeInfo, AttributeMode
from .variant import VariantType, coerce_value, format_value, parse_value
from .xml_utils import xml_add_attribute

logger = logging.getLogger(__name__)

# Attributes registered directly on each class (not including bases)
_attribute_registry: Dict[type, List[AttributeInfo]] = {}

# Flattened schemas per class, rebuilt after any registration
_schema_cache: Dict[type, Optional[List[AttributeInfo]]] = {}
_network_schema_cache: Dict[type, Optional[List[AttributeInfo]]] = {}


class Serializable:
    """
    Object whose attributes can be enumerated, read and written by name.

    Subclasses register their attributes once, at import time:

        SceneObject.register_attribute("Position", VariantType.VECTOR3, field="position")
    """

    @classmethod
    def register_attribute(
        cls,
        name: str,
        value_type: VariantType,
        field: str,
        default: Any = None,
        mode: AttributeMode = AttributeMode.DEFAULT,
    ) -> AttributeInfo:
        """
        Register an attribute backed by an instance field.

        Args:
            name: Attribute name as seen by documents and animations
            value_type: Value type of the attribute
            field: Name of the instance attribute holding the value
            default: Default value
            mode: Serialization and replication flags

        Returns:
            The registered descriptor
        """
        info = AttributeInfo(name, value_type, default=default, mode=mode, field=field)
        cls._register(info)
        return info

    @classmethod
    def register_accessor_attribute(
        cls,
        name: str,
        value_type: VariantType,
        getter: Callable[[Any], Any],
        setter: Callable[[Any, Any], None],
        default: Any = None,
        mode: AttributeMode = AttributeMode.DEFAULT,
    ) -> AttributeInfo:
        """Register an attribute read and written through accessor functions."""
        info = AttributeInfo(name, value_type, default=default, mode=mode, getter=getter, setter=setter)
        cls._register(info)
        return info

    @classmethod
    def _register(cls, info: AttributeInfo) -> None:
        _attribute_registry.setdefault(cls, []).append(info)
        _schema_cache.clear()
        _network_schema_cache.clear()

    @classmethod
    def get_class_attributes(cls) -> Optional[List[AttributeInfo]]:
        """Ordered attribute descriptors for a class, base classes first."""
        if cls not in _schema_cache:
            attributes: List[AttributeInfo] = []
            for klass in reversed(cls.__mro__):
                attributes.extend(_attribute_registry.get(klass, ()))
            _schema_cache[cls] = attributes or None
        return _schema_cache[cls]

    def get_type_name(self) -> str:
        return type(self).__name__

    def get_attributes(self) -> Optional[List[AttributeInfo]]:
        """
        Get the attribute schema of this object.

        Returns:
            Ordered list of descriptors, or None if the object has no attributes
        """
        return type(self).get_class_attributes()

    def get_network_attributes(self) -> Optional[List[AttributeInfo]]:
        """Get the subset of attributes flagged for network replication."""
        cls = type(self)
        if cls not in _network_schema_cache:
            attributes = [info for info in self.get_attributes() or () if info.is_network]
            _network_schema_cache[cls] = attributes or None
        return _network_schema_cache[cls]

    def find_attribute(self, name: str) -> Optional[AttributeInfo]:
        for info in self.get_attributes() or ():
            if info.name == name:
                return info
        return None

    def on_set_attribute(self, info: AttributeInfo, value: Any) -> None:
        """Write an attribute value through its descriptor."""
        value = coerce_value(info.type, value)
        if info.setter is not None:
            info.setter(self, value)
        else:
            setattr(self, info.field, value)

    def on_get_attribute(self, info: AttributeInfo) -> Any:
        """Read an attribute value through its descriptor."""
        if info.getter is not None:
            return info.getter(self)
        return getattr(self, info.field, info.default)

    def set_attribute(self, name: str, value: Any) -> bool:
        """
        Set an attribute value by name.

        Returns:
            True if the attribute exists and was written
        """
        info = self.find_attribute(name)
        if info is None:
            logger.error("%s has no attribute '%s'", self.get_type_name(), name)
            return False
        self.on_set_attribute(info, value)
        return True

    def get_attribute(self, name: str) -> Any:
        """Get an attribute value by name, or None if it does not exist."""
        info = self.find_attribute(name)
        if info is None:
            return None
        return self.on_get_attribute(info)

    def load_xml(self, source: Element) -> bool:
        """
        Load attribute values from <attribute> children of an XML element.

        Unknown attribute names are skipped. A value that cannot be parsed
        fails the whole load.

        Returns:
            True on success
        """
        for elem in source.findall("attribute"):
            name = elem.get("name", "")
            info = self.find_attribute(name)
            if info is None:
                logger.warning("Unknown attribute '%s' in %s data, skipping", name, self.get_type_name())
                continue

            text = elem.get("value", "")
            try:
                value = parse_value(info.type, text)
            except ValueError:
                logger.error("Invalid value '%s' for attribute '%s' of %s", text, name, self.get_type_name())
                return False

            self.on_set_attribute(info, value)

        return True

    def save_xml(self, dest: Element) -> bool:
        """Write every file-serialized attribute as an <attribute> child."""
        for info in self.get_attributes() or ():
            if not info.is_file:
                continue
            value = self.on_get_attribute(info)
            if value is None:
                continue
            xml_add_attribute(dest, info.name, format_value(info.type, value))

        return True
