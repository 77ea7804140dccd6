"""
Scene Management

Handles scene objects and their per-frame attribute animation update.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import numpy as np
from pyrr import Matrix44, Quaternion, Vector3, Vector4

from ..animation.animatable import Animatable
from .attributes import AttributeMode
from .variant import VariantType


class SceneObject(Animatable):
    """
    Represents an object in the scene.

    Each object has:
    - Position, rotation and scale in world space
    - Color
    - Bounding sphere radius
    - Attribute animations driving any of the above
    """

    def __init__(self, position: Optional[Vector3] = None, color: Tuple[float, ...] = (1.0, 1.0, 1.0),
                 bounding_radius: float = None, name: str = "Object"):
        """
        Initialize scene object.

        Args:
            position: World space position
            color: RGB or RGBA color tuple (0.0 to 1.0)
            bounding_radius: Radius of bounding sphere (1.0 if None)
            name: Debug name for this object
        """
        super().__init__()
        self.position = Vector3(position) if position is not None else Vector3([0.0, 0.0, 0.0])
        self.rotation = Quaternion()
        self.scale = Vector3([1.0, 1.0, 1.0])
        self.color = Vector4(list(color) + [1.0] * (4 - len(color)))
        self.bounding_radius = bounding_radius if bounding_radius is not None else 1.0
        self.name = name
        self.scene: Optional['Scene'] = None

    def get_model_matrix(self) -> Matrix44:
        """
        Get the model matrix for this object.

        Returns:
            4x4 transformation matrix (scale, then rotation, then translation)
        """
        matrix = Matrix44.from_scale(self.scale)
        matrix = matrix @ Matrix44.from_quaternion(self.rotation)
        matrix = matrix @ Matrix44.from_translation(self.position)
        return matrix

    def on_attribute_animation_added(self) -> None:
        if len(self.attribute_animation_instances) == 1 and self.scene is not None:
            self.scene.mark_animated(self)
        super().on_attribute_animation_added()

    def on_attribute_animation_removed(self) -> None:
        if not self.attribute_animation_instances and self.scene is not None:
            self.scene.unmark_animated(self)
        super().on_attribute_animation_removed()

    def __repr__(self):
        return f"SceneObject(name='{self.name}', animations={len(self.attribute_animation_instances)})"


SceneObject.register_attribute("Name", VariantType.STRING, field="name", default="Object",
                               mode=AttributeMode.FILE)
SceneObject.register_attribute("Position", VariantType.VECTOR3, field="position",
                               default=Vector3([0.0, 0.0, 0.0]), mode=AttributeMode.DEFAULT)
SceneObject.register_attribute("Rotation", VariantType.QUATERNION, field="rotation",
                               default=Quaternion(), mode=AttributeMode.DEFAULT)
SceneObject.register_attribute("Scale", VariantType.VECTOR3, field="scale",
                               default=Vector3([1.0, 1.0, 1.0]), mode=AttributeMode.DEFAULT)
SceneObject.register_attribute("Color", VariantType.COLOR, field="color",
                               default=Vector4([1.0, 1.0, 1.0, 1.0]), mode=AttributeMode.FILE)
SceneObject.register_attribute("Bounding Radius", VariantType.FLOAT, field="bounding_radius",
                               default=1.0, mode=AttributeMode.FILE)


class Scene:
    """
    Manages all objects in the scene.

    Only objects that currently have attribute animations are visited by
    the per-frame update.
    """

    def __init__(self):
        """Initialize empty scene."""
        self.objects: List[SceneObject] = []
        self.update_enabled = True
        self._animated_objects: Dict[int, SceneObject] = {}

    def add_object(self, obj: SceneObject):
        """
        Add an object to the scene.

        Args:
            obj: SceneObject to add
        """
        if obj.scene is not None:
            obj.scene.remove_object(obj)
        obj.scene = self
        self.objects.append(obj)
        if obj.has_attribute_animations():
            self.mark_animated(obj)

    def remove_object(self, obj: SceneObject):
        """Remove an object from the scene."""
        if obj in self.objects:
            self.objects.remove(obj)
        self.unmark_animated(obj)
        if obj.scene is self:
            obj.scene = None

    def clear(self):
        """Remove all objects from the scene"""
        for obj in self.objects:
            obj.scene = None
        self.objects.clear()
        self._animated_objects.clear()

    def mark_animated(self, obj: SceneObject) -> None:
        self._animated_objects[id(obj)] = obj

    def unmark_animated(self, obj: SceneObject) -> None:
        self._animated_objects.pop(id(obj), None)

    @property
    def animated_object_count(self) -> int:
        return len(self._animated_objects)

    def update(self, time_step: float):
        """
        Advance attribute animations of all animated objects.

        Args:
            time_step: Time elapsed since last frame (seconds)
        """
        if not self.update_enabled:
            return

        # Objects leave the animated set when their last animation finishes
        for obj in list(self._animated_objects.values()):
            obj.update_attribute_animations(time_step)

    def find_object(self, name: str) -> Optional[SceneObject]:
        """Find the first object with the given name."""
        for obj in self.objects:
            if obj.name == name:
                return obj
        return None

    def get_object_count(self) -> int:
        """Get number of objects in scene"""
        return len(self.objects)

    def get_positions(self) -> np.ndarray:
        """Positions of all objects as an (N, 3) array."""
        if not self.objects:
            return np.zeros((0, 3))
        return np.array([obj.position for obj in self.objects], dtype=float)
