"""
Variant Values

Typed attribute values: the value type enum, the text codec used by XML
documents, coercion of plain Python values and interpolation helpers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import numpy as np
from pyrr import Quaternion, Vector3, Vector4, quaternion

from ..config.settings import FLOAT_FORMAT


class VariantType(Enum):
    """Value types an attribute or animation curve can hold."""
    NONE = "None"
    INT = "Int"
    BOOL = "Bool"
    FLOAT = "Float"
    VECTOR2 = "Vector2"
    VECTOR3 = "Vector3"
    VECTOR4 = "Vector4"
    QUATERNION = "Quaternion"
    COLOR = "Color"
    STRING = "String"
    RESOURCE_REF = "ResourceRef"


@dataclass(frozen=True)
class ResourceRef:
    """Reference to a named resource of a given type."""

    resource_type: str
    name: str = ""

    def __str__(self):
        return f"{self.resource_type};{self.name}"


_INTERPOLATABLE = {
    VariantType.FLOAT,
    VariantType.VECTOR2,
    VariantType.VECTOR3,
    VariantType.VECTOR4,
    VariantType.QUATERNION,
    VariantType.COLOR,
}

_COMPONENTS = {
    VariantType.VECTOR2: 2,
    VariantType.VECTOR3: 3,
    VariantType.VECTOR4: 4,
    VariantType.QUATERNION: 4,
    VariantType.COLOR: 4,
}


def is_interpolatable(value_type: VariantType) -> bool:
    """Whether values of this type can be blended between keyframes."""
    return value_type in _INTERPOLATABLE


def _float_to_str(value: float) -> str:
    return format(float(value), FLOAT_FORMAT)


def _components(value, count: int) -> np.ndarray:
    """Copy a sequence into a new float array with exactly ``count`` entries."""
    array = np.array(value, dtype=float).reshape(-1)
    if array.shape != (count,):
        raise ValueError(f"Expected {count} components, got {value!r}")
    return array


def coerce_value(value_type: VariantType, value: Any) -> Any:
    """
    Convert a plain Python value into the representation used for a type.

    Args:
        value_type: Target value type
        value: Number, sequence, pyrr object or string

    Returns:
        Value in canonical form (pyrr Vector3/Vector4/Quaternion for vectors).
        Vector values are always new arrays, never views of ``value``.
    """
    if isinstance(value, str) and value_type not in (VariantType.STRING, VariantType.RESOURCE_REF):
        return parse_value(value_type, value)

    if value_type == VariantType.FLOAT:
        return float(value)
    if value_type == VariantType.INT:
        return int(value)
    if value_type == VariantType.BOOL:
        return bool(value)
    if value_type == VariantType.VECTOR2:
        return _components(value, 2)
    if value_type == VariantType.VECTOR3:
        return Vector3(_components(value, 3))
    if value_type == VariantType.VECTOR4:
        return Vector4(_components(value, 4))
    if value_type == VariantType.COLOR:
        array = np.asarray(value, dtype=float).reshape(-1)
        if array.shape == (3,):
            array = np.append(array, 1.0)
        return Vector4(_components(array, 4))
    if value_type == VariantType.QUATERNION:
        return Quaternion(_components(value, 4))
    if value_type == VariantType.STRING:
        return str(value)
    if value_type == VariantType.RESOURCE_REF:
        if isinstance(value, ResourceRef):
            return value
        return parse_value(value_type, str(value))

    raise ValueError(f"Cannot coerce value to {value_type}")


def parse_value(value_type: VariantType, text: str) -> Any:
    """
    Parse the XML text form of a value.

    Raises:
        ValueError: If the text does not describe a value of this type
    """
    text = text.strip() if value_type != VariantType.STRING else text

    if value_type == VariantType.FLOAT:
        return float(text)
    if value_type == VariantType.INT:
        return int(text)
    if value_type == VariantType.BOOL:
        lowered = text.lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no", ""):
            return False
        raise ValueError(f"Invalid bool value: {text!r}")
    if value_type == VariantType.QUATERNION:
        w, x, y, z = _components([float(part) for part in text.split()], 4)
        return Quaternion([x, y, z, w])
    if value_type in _COMPONENTS:
        return coerce_value(value_type, [float(part) for part in text.split()])
    if value_type == VariantType.STRING:
        return text
    if value_type == VariantType.RESOURCE_REF:
        resource_type, _, name = text.partition(";")
        return ResourceRef(resource_type, name)

    raise ValueError(f"Cannot parse value of type {value_type}")


def format_value(value_type: VariantType, value: Any) -> str:
    """Format a value for XML output."""
    if value_type == VariantType.FLOAT:
        return _float_to_str(value)
    if value_type == VariantType.INT:
        return str(int(value))
    if value_type == VariantType.BOOL:
        return "true" if value else "false"
    if value_type == VariantType.QUATERNION:
        # Stored x y z w, written w x y z
        x, y, z, w = _components(value, 4)
        return " ".join(_float_to_str(c) for c in (w, x, y, z))
    if value_type in _COMPONENTS:
        return " ".join(_float_to_str(c) for c in coerce_value(value_type, value))
    if value_type == VariantType.STRING:
        return str(value)
    if value_type == VariantType.RESOURCE_REF:
        return str(coerce_value(value_type, value))

    raise ValueError(f"Cannot format value of type {value_type}")


def infer_type(value: Any) -> VariantType:
    """Guess the value type of a plain Python value."""
    if isinstance(value, ResourceRef):
        return VariantType.RESOURCE_REF
    if isinstance(value, bool):
        return VariantType.BOOL
    if isinstance(value, int):
        return VariantType.INT
    if isinstance(value, float):
        return VariantType.FLOAT
    if isinstance(value, str):
        return VariantType.STRING
    if isinstance(value, Quaternion):
        return VariantType.QUATERNION
    if isinstance(value, Vector3):
        return VariantType.VECTOR3
    if isinstance(value, Vector4):
        return VariantType.VECTOR4

    size = np.asarray(value).size
    return {2: VariantType.VECTOR2, 3: VariantType.VECTOR3, 4: VariantType.VECTOR4}.get(size, VariantType.NONE)


def values_equal(value_type: VariantType, a: Any, b: Any) -> bool:
    """Compare two values of the same type."""
    if value_type in _COMPONENTS:
        return bool(np.allclose(np.asarray(a, dtype=float), np.asarray(b, dtype=float)))
    return a == b


def lerp_value(value_type: VariantType, a: Any, b: Any, t: float) -> Any:
    """
    Linearly interpolate between two values.

    Quaternions are blended with a spherical interpolation. Types that are not
    interpolatable snap to ``a``.
    """
    if not is_interpolatable(value_type):
        return a

    if value_type == VariantType.FLOAT:
        return float(a) * (1.0 - t) + float(b) * t

    if value_type == VariantType.QUATERNION:
        q0 = np.asarray(a, dtype=float)
        q1 = np.asarray(b, dtype=float)
        blended = np.asarray(quaternion.slerp(q0, q1, t), dtype=float)
        return Quaternion(_normalized(blended))

    v0 = np.asarray(a, dtype=float)
    v1 = np.asarray(b, dtype=float)
    return coerce_value(value_type, v0 * (1.0 - t) + v1 * t)


def _normalized(array: np.ndarray) -> np.ndarray:
    length = np.linalg.norm(array)
    return array / length if length > 0.0 else array


def default_value(value_type: VariantType) -> Optional[Any]:
    """Zero value for a type."""
    defaults = {
        VariantType.INT: 0,
        VariantType.BOOL: False,
        VariantType.FLOAT: 0.0,
        VariantType.VECTOR2: np.zeros(2),
        VariantType.VECTOR3: Vector3([0.0, 0.0, 0.0]),
        VariantType.VECTOR4: Vector4([0.0, 0.0, 0.0, 0.0]),
        VariantType.QUATERNION: Quaternion(),
        VariantType.COLOR: Vector4([1.0, 1.0, 1.0, 1.0]),
        VariantType.STRING: "",
    }
    return defaults.get(value_type)
