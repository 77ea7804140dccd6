"""
Attribute Animation

Keyframe curve producing a typed value as a function of time. A curve is
definition data only: playback time lives in the instance that plays it,
so one curve can drive any number of objects.
"""

from __future__ import annotations

import logging
import weakref
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from xml.etree.ElementTree import Element, SubElement

import numpy as np

from ..config.settings import DEFAULT_INTERPOLATION, DEFAULT_SPLINE_TENSION, DEFAULT_WRAP_MODE
from ..core.resource import Resource
from ..core.variant import (
    VariantType,
    coerce_value,
    format_value,
    infer_type,
    is_interpolatable,
    lerp_value,
    parse_value,
    values_equal,
)
from ..core.xml_utils import xml_get_float

if TYPE_CHECKING:
    from .object_animation import ObjectAnimation

logger = logging.getLogger(__name__)


class WrapMode(Enum):
    """What happens when playback runs past the last keyframe."""
    LOOP = "Loop"
    ONCE = "Once"     # Play once, then report finished
    CLAMP = "Clamp"   # Hold the last value forever


class InterpolationMethod(Enum):
    """Keyframe interpolation methods."""
    LINEAR = "Linear"
    SPLINE = "Spline"


class KeyFrame:
    """Value at a point in time."""

    def __init__(self, time: float, value):
        self.time = time
        self.value = value

    def __repr__(self):
        return f"KeyFrame(t={self.time:.3f}, v={self.value})"


class EventFrame:
    """Event sent to the animated object when playback crosses ``time``."""

    def __init__(self, time: float, event_type: str, data: Optional[Dict[str, Any]] = None):
        self.time = time
        self.event_type = event_type
        self.data = data or {}

    def __repr__(self):
        return f"EventFrame(t={self.time:.3f}, type='{self.event_type}')"


class AttributeAnimation(Resource):
    """
    Time-keyed value curve for a single attribute.

    Keyframes are kept sorted by time. The value type is fixed either
    explicitly or by the first keyframe.
    """

    ROOT_ELEMENT = "attributeAnimation"

    def __init__(self, value_type: VariantType = VariantType.NONE, name: str = ""):
        super().__init__(name)
        self.value_type = value_type
        self.wrap_mode = WrapMode(DEFAULT_WRAP_MODE)
        self.interpolation_method = InterpolationMethod(DEFAULT_INTERPOLATION)
        self.spline_tension = DEFAULT_SPLINE_TENSION
        self.key_frames: List[KeyFrame] = []
        self.event_frames: List[EventFrame] = []
        self._spline_tangents: List[np.ndarray] = []
        self._spline_tangents_dirty = False
        self._object_animation = None

    @property
    def begin_time(self) -> float:
        return self.key_frames[0].time if self.key_frames else 0.0

    @property
    def end_time(self) -> float:
        return self.key_frames[-1].time if self.key_frames else 0.0

    @property
    def is_interpolatable(self) -> bool:
        return is_interpolatable(self.value_type)

    def is_valid(self) -> bool:
        """A curve needs at least one keyframe to produce values."""
        return bool(self.key_frames)

    def get_object_animation(self) -> Optional['ObjectAnimation']:
        """Bundle this curve belongs to, if any (non-owning)."""
        return self._object_animation() if self._object_animation is not None else None

    def set_object_animation(self, object_animation: Optional['ObjectAnimation']) -> None:
        self._object_animation = weakref.ref(object_animation) if object_animation is not None else None

    def set_value_type(self, value_type: VariantType) -> None:
        """Set the value type. Changing it discards all keyframes."""
        if value_type == self.value_type:
            return
        self.value_type = value_type
        self.key_frames.clear()
        self._spline_tangents_dirty = True

    def set_interpolation_method(self, method: InterpolationMethod) -> None:
        self.interpolation_method = method
        self._spline_tangents_dirty = True

    def set_spline_tension(self, tension: float) -> None:
        self.spline_tension = tension
        self._spline_tangents_dirty = True

    def set_key_frame(self, time: float, value) -> bool:
        """
        Add a keyframe, replacing any keyframe at the same time.

        Args:
            time: Time in seconds
            value: Value at this time, coerced to the curve's value type

        Returns:
            False if the value does not fit the curve's value type
        """
        if self.value_type == VariantType.NONE:
            self.set_value_type(infer_type(value))
            if self.value_type == VariantType.NONE:
                logger.error("Can not infer keyframe value type from %r", value)
                return False

        try:
            value = coerce_value(self.value_type, value)
        except (TypeError, ValueError):
            logger.error("Keyframe value %r does not match value type %s", value, self.value_type.value)
            return False

        time = float(time)
        index = len(self.key_frames)
        for i, key_frame in enumerate(self.key_frames):
            if key_frame.time == time:
                key_frame.value = value
                self._spline_tangents_dirty = True
                return True
            if key_frame.time > time:
                index = i
                break

        self.key_frames.insert(index, KeyFrame(time, value))
        self._spline_tangents_dirty = True
        return True

    def set_event_frame(self, time: float, event_type: str, data: Optional[Dict[str, Any]] = None) -> None:
        """Add an event frame; frames at the same time keep insertion order."""
        frame = EventFrame(float(time), event_type, data)
        index = len(self.event_frames)
        for i, existing in enumerate(self.event_frames):
            if existing.time > frame.time:
                index = i
                break
        self.event_frames.insert(index, frame)

    def has_event_frames(self) -> bool:
        return bool(self.event_frames)

    def get_event_frames(self, begin_time: float, end_time: float) -> List[EventFrame]:
        """Event frames with ``begin_time <= time < end_time``."""
        return [frame for frame in self.event_frames if begin_time <= frame.time < end_time]

    def get_animation_value(self, scaled_time: float):
        """
        Sample the curve.

        Args:
            scaled_time: Time already mapped into [begin_time, end_time]

        Returns:
            Value at this time, or None if the curve has no keyframes. Vector
            values are copies, so callers may modify them freely.
        """
        if not self.key_frames:
            return None
        if scaled_time <= self.begin_time:
            return coerce_value(self.value_type, self.key_frames[0].value)
        if scaled_time >= self.end_time:
            return coerce_value(self.value_type, self.key_frames[-1].value)

        index = 1
        while index < len(self.key_frames) and scaled_time >= self.key_frames[index].time:
            index += 1
        index = min(index, len(self.key_frames) - 1)

        if not self.is_interpolatable:
            return coerce_value(self.value_type, self.key_frames[index - 1].value)

        k0 = self.key_frames[index - 1]
        k1 = self.key_frames[index]
        span = k1.time - k0.time
        t = (scaled_time - k0.time) / span if span > 0.0 else 0.0
        t = min(max(t, 0.0), 1.0)

        if self.interpolation_method == InterpolationMethod.SPLINE and self.value_type != VariantType.QUATERNION:
            return self._interpolate_spline(index - 1, index, t)
        return lerp_value(self.value_type, k0.value, k1.value, t)

    def _interpolate_spline(self, index0: int, index1: int, t: float):
        """Cubic Hermite interpolation between two keyframes."""
        if self._spline_tangents_dirty:
            self._update_spline_tangents()

        t2 = t * t
        t3 = t2 * t
        h1 = 2.0 * t3 - 3.0 * t2 + 1.0
        h2 = -2.0 * t3 + 3.0 * t2
        h3 = t3 - 2.0 * t2 + t
        h4 = t3 - t2

        v0 = np.asarray(self.key_frames[index0].value, dtype=float)
        v1 = np.asarray(self.key_frames[index1].value, dtype=float)
        result = (v0 * h1 + v1 * h2
                  + self._spline_tangents[index0] * h3
                  + self._spline_tangents[index1] * h4)
        return coerce_value(self.value_type, result)

    def _update_spline_tangents(self) -> None:
        values = [np.asarray(k.value, dtype=float) for k in self.key_frames]
        size = len(values)
        self._spline_tangents = [np.zeros_like(v) for v in values]

        if size > 2:
            for i in range(1, size - 1):
                self._spline_tangents[i] = (values[i + 1] - values[i - 1]) * self.spline_tension

            # Open curves keep zero tangents at both ends
            if values_equal(self.value_type, self.key_frames[0].value, self.key_frames[-1].value):
                closing = (values[1] - values[size - 2]) * self.spline_tension
                self._spline_tangents[0] = closing
                self._spline_tangents[size - 1] = closing

        self._spline_tangents_dirty = False

    def load_xml(self, source: Element) -> bool:
        """
        Load curve definition from an XML element.

        Expected layout:
            <... interpolationMethod="Linear" splineTension="0.5" wrapMode="Loop">
                <keyFrame time="0" type="Vector3" value="0 0 0" />
                <eventFrame time="1" eventType="Bounce">
                    <parameter name="height" type="Float" value="2" />
                </eventFrame>
            </...>
        """
        self.value_type = VariantType.NONE
        self.key_frames.clear()
        self.event_frames.clear()

        try:
            self.interpolation_method = InterpolationMethod(
                source.get("interpolationMethod", DEFAULT_INTERPOLATION))
            self.wrap_mode = WrapMode(source.get("wrapMode", DEFAULT_WRAP_MODE))
            self.spline_tension = xml_get_float(source, "splineTension", DEFAULT_SPLINE_TENSION)

            for elem in source.findall("keyFrame"):
                value_type = VariantType(elem.get("type", ""))
                if self.value_type == VariantType.NONE:
                    self.value_type = value_type
                elif value_type != self.value_type:
                    logger.error("Keyframe type %s differs from curve type %s",
                                 value_type.value, self.value_type.value)
                    return False
                time = xml_get_float(elem, "time", 0.0)
                self.set_key_frame(time, parse_value(value_type, elem.get("value", "")))

            for elem in source.findall("eventFrame"):
                data = {}
                for param in elem.findall("parameter"):
                    param_type = VariantType(param.get("type", VariantType.STRING.value))
                    data[param.get("name", "")] = parse_value(param_type, param.get("value", ""))
                self.set_event_frame(xml_get_float(elem, "time", 0.0), elem.get("eventType", ""), data)
        except ValueError as e:
            logger.error("Invalid attribute animation data: %s", e)
            return False

        self._spline_tangents_dirty = True
        return True

    def save_xml(self, dest: Element) -> bool:
        """Write curve definition into an XML element."""
        dest.set("interpolationMethod", self.interpolation_method.value)
        dest.set("splineTension", format_value(VariantType.FLOAT, self.spline_tension))
        dest.set("wrapMode", self.wrap_mode.value)

        for key_frame in self.key_frames:
            SubElement(dest, "keyFrame",
                       time=format_value(VariantType.FLOAT, key_frame.time),
                       type=self.value_type.value,
                       value=format_value(self.value_type, key_frame.value))

        for event_frame in self.event_frames:
            elem = SubElement(dest, "eventFrame",
                              time=format_value(VariantType.FLOAT, event_frame.time),
                              eventType=event_frame.event_type)
            for key, value in event_frame.data.items():
                value_type = infer_type(value)
                if value_type == VariantType.NONE:
                    value_type = VariantType.STRING
                SubElement(elem, "parameter", name=key, type=value_type.value,
                           value=format_value(value_type, value))

        return True

    def __repr__(self):
        return (f"AttributeAnimation(type={self.value_type.value}, wrap={self.wrap_mode.value}, "
                f"keyframes={len(self.key_frames)})")
