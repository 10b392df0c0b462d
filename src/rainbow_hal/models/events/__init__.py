"""
Event system for the Rainbow HAT driver layer
"""

from rainbow_hal.models.events.types import EventType
from rainbow_hal.models.events.base import Event
from rainbow_hal.models.events.sources import EventSource

from rainbow_hal.models.events.hat import (
    ButtonPressEvent,
    TemperatureMeasuredEvent,
    PressureMeasuredEvent,
    HatEvent,
)

__all__ = [
    "EventType",
    "Event",
    "EventSource",

    "ButtonPressEvent",
    "TemperatureMeasuredEvent",
    "PressureMeasuredEvent",
    "HatEvent",
]
