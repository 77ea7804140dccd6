"""
Attribute Animation Instance

Playback state for one curve bound to one attribute of one object.
"""

from __future__ import annotations

import math
import weakref
from typing import TYPE_CHECKING, List, Optional, Tuple

from ..core.attributes import AttributeInfo
from .attribute_animation import AttributeAnimation, EventFrame, WrapMode

if TYPE_CHECKING:
    from .animatable import Animatable


class AttributeAnimationInstance:
    """
    Plays an attribute animation on an animatable object.

    Manages:
    - Elapsed time, scaled by the playback speed
    - Mapping elapsed time into the curve's range by wrap mode
    - Writing sampled values back into the object's attribute
    - Sending event frames crossed during an update
    """

    def __init__(
        self,
        animatable: 'Animatable',
        attribute_info: AttributeInfo,
        attribute_animation: AttributeAnimation,
        speed: float,
    ):
        """
        Initialize animation instance.

        Args:
            animatable: Object owning the animated attribute (held weakly)
            attribute_info: Descriptor of the animated attribute
            attribute_animation: Curve to play
            speed: Playback speed multiplier
        """
        self._animatable = weakref.ref(animatable)
        self.attribute_info = attribute_info
        self.attribute_animation = attribute_animation
        self.speed = speed
        self.current_time: float = 0.0
        self.last_scaled_time: float = self._calculate_scaled_time(0.0)[0]

    @property
    def animatable(self) -> Optional['Animatable']:
        return self._animatable()

    def update(self, time_step: float) -> bool:
        """
        Advance playback and apply the value to the attribute.

        Args:
            time_step: Time elapsed since last update (seconds)

        Returns:
            True once the animation has finished
        """
        animation = self.attribute_animation
        previous_time = self.current_time
        self.current_time += time_step * self.speed

        if not animation.is_valid():
            return True

        scaled_time, finished = self._calculate_scaled_time(self.current_time)

        animatable = self.animatable
        if animatable is not None:
            animatable.on_set_attribute(self.attribute_info, animation.get_animation_value(scaled_time))

            if animation.has_event_frames():
                for frame in self._crossed_event_frames(previous_time, scaled_time):
                    animatable.send_animation_event(frame.event_type, frame.data)

        self.last_scaled_time = scaled_time
        return finished

    def _calculate_scaled_time(self, current_time: float) -> Tuple[float, bool]:
        """Map elapsed time into [begin_time, end_time] by wrap mode."""
        animation = self.attribute_animation
        begin_time = animation.begin_time
        end_time = animation.end_time

        if animation.wrap_mode == WrapMode.LOOP:
            span = end_time - begin_time
            if span <= 0.0:
                return begin_time, False
            time = math.fmod(current_time - begin_time, span)
            if time < 0.0:
                time += span
            return begin_time + time, False

        finished = animation.wrap_mode == WrapMode.ONCE and current_time >= end_time
        return min(max(current_time, begin_time), end_time), finished

    def _crossed_event_frames(self, previous_time: float, scaled_time: float) -> List[EventFrame]:
        """Event frames passed while elapsed time moved from ``previous_time`` to now."""
        animation = self.attribute_animation
        if animation.wrap_mode != WrapMode.LOOP:
            return animation.get_event_frames(self.last_scaled_time, scaled_time)

        begin_time = animation.begin_time
        end_time = animation.end_time
        span = end_time - begin_time
        if span <= 0.0:
            return []

        wraps = (math.floor((self.current_time - begin_time) / span)
                 - math.floor((previous_time - begin_time) / span))
        if wraps <= 0:
            return animation.get_event_frames(self.last_scaled_time, scaled_time)

        # Rest of the current pass, any whole passes, then the start of the new one
        frames = animation.get_event_frames(self.last_scaled_time, end_time)
        frames += animation.get_event_frames(begin_time, end_time) * (wraps - 1)
        frames += animation.get_event_frames(begin_time, scaled_time)
        return frames

    def __repr__(self):
        return (f"AttributeAnimationInstance(attribute='{self.attribute_info.name}', "
                f"time={self.current_time:.2f}s, speed={self.speed})")
