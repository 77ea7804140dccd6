"""
Scenekit - Animatable Scene Objects

Scene objects with reflected attributes that can be driven over time by
keyframe attribute animations, individually or through shared object
animations.
"""

# Configuration
from .config.settings import *

# Core
from .core.variant import VariantType, ResourceRef
from .core.attributes import AttributeInfo, AttributeMode
from .core.serializable import Serializable
from .core.resource import Resource
from .core.resource_cache import ResourceCache
from .core.scene import Scene, SceneObject

# Animation
from .animation import (
    Animatable,
    AttributeAnimation,
    AttributeAnimationInstance,
    InterpolationMethod,
    ObjectAnimation,
    WrapMode,
)

# Loaders
from .loaders import SceneLoader, SceneLoadResult

__version__ = "0.2.0"
__all__ = [
    # Config (exported via *)
    # Core
    "VariantType",
    "ResourceRef",
    "AttributeInfo",
    "AttributeMode",
    "Serializable",
    "Resource",
    "ResourceCache",
    "Scene",
    "SceneObject",
    # Animation
    "Animatable",
    "AttributeAnimation",
    "AttributeAnimationInstance",
    "InterpolationMethod",
    "ObjectAnimation",
    "WrapMode",
    # Loaders
    "SceneLoader",
    "SceneLoadResult",
]
