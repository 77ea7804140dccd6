"""Core engine components"""
from .variant import VariantType, ResourceRef
from .attributes import AttributeInfo, AttributeMode
from .serializable import Serializable
from .resource import Resource
from .resource_cache import ResourceCache
from .scene import Scene, SceneObject

__all__ = [
    "VariantType",
    "ResourceRef",
    "AttributeInfo",
    "AttributeMode",
    "Serializable",
    "Resource",
    "ResourceCache",
    "Scene",
    "SceneObject",
]
