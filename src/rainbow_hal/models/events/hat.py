"""
Rainbow HAT events

Exactly one payload per event class. HatEvent is the closed union the
controller publishes.
"""

from dataclasses import dataclass
from typing import Union

from rainbow_hal.models.enums import ButtonID
from rainbow_hal.models.events.base import Event
from rainbow_hal.models.events.sources import EventSource
from rainbow_hal.models.events.types import EventType


@dataclass(init=False)
class ButtonPressEvent(Event):
    """Button read LOW during a poll tick"""
    button: ButtonID

    def __init__(self, button: ButtonID):
        super().__init__(
            type=EventType.BUTTON_PRESS,
            source=EventSource.BUTTONS,
        )
        self.button = button


@dataclass(init=False)
class TemperatureMeasuredEvent(Event):
    """Compensated temperature in degrees Celsius"""
    celsius: float

    def __init__(self, celsius: float):
        super().__init__(
            type=EventType.TEMPERATURE_MEASURED,
            source=EventSource.ENVIRONMENT_SENSOR,
        )
        self.celsius = celsius


@dataclass(init=False)
class PressureMeasuredEvent(Event):
    """Compensated barometric pressure in hPa"""
    hpa: float

    def __init__(self, hpa: float):
        super().__init__(
            type=EventType.PRESSURE_MEASURED,
            source=EventSource.ENVIRONMENT_SENSOR,
        )
        self.hpa = hpa


HatEvent = Union[ButtonPressEvent, TemperatureMeasuredEvent, PressureMeasuredEvent]
