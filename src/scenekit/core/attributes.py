"""
Attribute Descriptors

Schema metadata for reflected object attributes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Flag
from typing import Any, Callable, Optional

from .variant import VariantType


class AttributeMode(Flag):
    """How an attribute is used by serialization and replication."""
    EDIT = 0
    FILE = 1           # Saved to and loaded from documents
    NET = 2            # Replicated to remote observers
    DEFAULT = 3        # FILE | NET
    LATEST_DATA = 4    # Only the latest value matters on the network
    NO_EDIT = 8        # Hidden from editors


@dataclass(eq=False)
class AttributeInfo:
    """
    Descriptor for one reflected attribute.

    Descriptors are compared and hashed by identity, so the same instance
    returned from a class schema can be used as a set member.

    Either ``field`` names the instance attribute holding the value, or
    ``getter``/``setter`` are called with the owning object.
    """

    name: str
    type: VariantType
    default: Any = None
    mode: AttributeMode = AttributeMode.DEFAULT
    field: Optional[str] = None
    getter: Optional[Callable[[Any], Any]] = None
    setter: Optional[Callable[[Any, Any], None]] = None

    @property
    def is_network(self) -> bool:
        return bool(self.mode & AttributeMode.NET)

    @property
    def is_file(self) -> bool:
        return bool(self.mode & AttributeMode.FILE)

    def __repr__(self):
        return f"AttributeInfo(name='{self.name}', type={self.type.value}, mode={self.mode})"
