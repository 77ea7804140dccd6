"""
Animation System

Attribute animation curves, shared object animations and the animatable
base class that binds them to object attributes.
"""

from .attribute_animation import AttributeAnimation, KeyFrame, EventFrame, WrapMode, InterpolationMethod
from .object_animation import ObjectAnimation
from .attribute_animation_instance import AttributeAnimationInstance
from .animatable import Animatable

__all__ = [
    'AttributeAnimation',
    'KeyFrame',
    'EventFrame',
    'WrapMode',
    'InterpolationMethod',
    'ObjectAnimation',
    'AttributeAnimationInstance',
    'Animatable',
]
