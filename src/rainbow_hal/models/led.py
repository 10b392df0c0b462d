"""
LED state model

One LedState per physical APA102 LED. Mutated in place by the strip driver,
read at flush time.
"""

import math
from dataclasses import dataclass
from typing import Optional

from rainbow_hal.utils.colors import hex_to_rgb, clamp_channel

BRIGHTNESS_HEADER = 0xE0
BRIGHTNESS_LEVELS = 31


def clamp_brightness(value: float) -> float:
    """Clamp a brightness fraction into [0.0, 1.0]."""
    return max(0.0, min(1.0, float(value)))


def quantize_brightness(value: float) -> int:
    """
    Quantize a brightness fraction to the 5-bit wire level (0-31).

    Out-of-range input is clamped first; the wire format has no
    representation for it.
    """
    return min(BRIGHTNESS_LEVELS, math.floor(BRIGHTNESS_LEVELS * clamp_brightness(value)))


def brightness_byte(value: float) -> int:
    """Global-brightness byte sent ahead of each LED: 0xE0 | level."""
    return BRIGHTNESS_HEADER | quantize_brightness(value)


@dataclass
class LedState:
    brightness: float = 0.0
    red: int = 0
    green: int = 0
    blue: int = 0

    def __post_init__(self):
        self.brightness = clamp_brightness(self.brightness)
        self.red = clamp_channel(self.red)
        self.green = clamp_channel(self.green)
        self.blue = clamp_channel(self.blue)

    @property
    def brightness_byte(self) -> int:
        return brightness_byte(self.brightness)

    def set_brightness(self, value: float) -> None:
        self.brightness = clamp_brightness(value)

    def set_red(self, value: int) -> None:
        self.red = clamp_channel(value)

    def set_green(self, value: int) -> None:
        self.green = clamp_channel(value)

    def set_blue(self, value: int) -> None:
        self.blue = clamp_channel(value)

    def set_rgb(self, red: int, green: int, blue: int, brightness: Optional[float] = None) -> None:
        self.red = clamp_channel(red)
        self.green = clamp_channel(green)
        self.blue = clamp_channel(blue)
        if brightness is not None:
            self.brightness = clamp_brightness(brightness)

    def set_rgb_hex(self, value: str, brightness: Optional[float] = None) -> None:
        """Set colour from "#rrggbb". Raises ValueError on malformed input."""
        self.set_rgb(*hex_to_rgb(value), brightness=brightness)

    def turn_on(self) -> None:
        """Full white at full brightness."""
        self.set_rgb(255, 255, 255, brightness=1.0)

    def turn_off(self) -> None:
        self.set_rgb(0, 0, 0, brightness=0.0)

    @property
    def is_on(self) -> bool:
        return quantize_brightness(self.brightness) > 0 and any((self.red, self.green, self.blue))
