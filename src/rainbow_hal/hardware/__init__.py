from .errors import (
    HatError,
    BusUnavailableError,
    DeviceNotFoundError,
    DisplayInputError,
    PinConflictError,
    ReleasedResourceError,
)
from .led.apa102_strip import LedStripDriver
from .sensor.bmp280 import EnvironmentSensor
from .display.ht16k33 import SegmentDisplay
from .hat_controller import HatController


__all__ = [
    "HatError",
    "BusUnavailableError",
    "DeviceNotFoundError",
    "DisplayInputError",
    "PinConflictError",
    "ReleasedResourceError",
    "LedStripDriver",
    "EnvironmentSensor",
    "SegmentDisplay",
    "HatController",
]
