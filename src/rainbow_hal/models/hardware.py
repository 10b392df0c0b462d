"""
Hardware Configuration Models

Typed containers that mirror hardware.yaml. Defaults are the Rainbow HAT
board revision, so HatConfig() alone describes a real board.

Validation is limited to value ranges; cross-field checks (a line used
twice) live in HardwareConfigParser.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Tuple

from rainbow_hal.models.enums import ButtonID, BasicLedID

# ============================================================
#  APA102 LED strip
# ============================================================

@dataclass(frozen=True)
class LedStripConfig:
    """Bit-banged APA102 strip: data, clock and chip-select lines."""
    data_pin: int = 10
    clock_pin: int = 11
    cs_pin: int = 8
    count: int = 7
    start_frame_pulses: int = 36
    end_frame_pulses: int = 32

    def __post_init__(self):
        if self.count < 1:
            raise ValueError("LedStripConfig.count must be >= 1")


# ============================================================
#  Basic LEDs / buttons / buzzer
# ============================================================

@dataclass(frozen=True)
class BasicLedConfig:
    id: BasicLedID
    gpio: int


@dataclass(frozen=True)
class ButtonConfig:
    id: ButtonID
    gpio: int


@dataclass(frozen=True)
class BuzzerConfig:
    gpio: int = 13
    frequency_hz: float = 50.0
    duty_cycle: float = 5.0         # percent
    duration: float = 0.5           # seconds per buzz

    def __post_init__(self):
        if not (0.0 <= self.duty_cycle <= 100.0):
            raise ValueError("BuzzerConfig.duty_cycle must be 0-100 (percent)")
        if self.frequency_hz <= 0:
            raise ValueError("BuzzerConfig.frequency_hz must be > 0")


def _default_basic_leds() -> List[BasicLedConfig]:
    return [
        BasicLedConfig(BasicLedID.RED, 6),
        BasicLedConfig(BasicLedID.GREEN, 19),
        BasicLedConfig(BasicLedID.BLUE, 26),
    ]


def _default_buttons() -> List[ButtonConfig]:
    # Poll order: first LOW wins
    return [
        ButtonConfig(ButtonID.A, 21),
        ButtonConfig(ButtonID.B, 20),
        ButtonConfig(ButtonID.C, 16),
    ]


# ============================================================
#  Register-bus devices
# ============================================================

@dataclass(frozen=True)
class EnvironmentSensorConfig:
    address: int = 0x77
    chip_id: int = 0x58


@dataclass(frozen=True)
class DisplayConfig:
    address: int = 0x70
    brightness: int = 15            # 0-15

    def __post_init__(self):
        if not (0 <= self.brightness <= 15):
            raise ValueError("DisplayConfig.brightness must be 0-15")


# ============================================================
#  Timing
# ============================================================

@dataclass(frozen=True)
class PollingConfig:
    """Intervals in seconds."""
    buttons: float = 0.05
    temperature: float = 5.0
    pressure: float = 5.0

    def __post_init__(self):
        for name in ("buttons", "temperature", "pressure"):
            if getattr(self, name) <= 0:
                raise ValueError(f"PollingConfig.{name} must be > 0")


# ============================================================
#  Root Hardware Model
# ============================================================

@dataclass(frozen=True)
class HatConfig:
    """The root model representing the entire hardware.yaml."""

    led_strip: LedStripConfig = field(default_factory=LedStripConfig)
    basic_leds: List[BasicLedConfig] = field(default_factory=_default_basic_leds)
    buttons: List[ButtonConfig] = field(default_factory=_default_buttons)
    buzzer: BuzzerConfig = field(default_factory=BuzzerConfig)
    i2c_bus: int = 1
    environment_sensor: EnvironmentSensorConfig = field(default_factory=EnvironmentSensorConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    retry_cooldown: float = 1.0     # seconds before a not-ready action is retried
    demo_text: str = "BEAR"

    def __post_init__(self):
        if len(self.demo_text) > 4:
            raise ValueError("HatConfig.demo_text must fit the 4-character display")

    def gpio_assignments(self) -> List[Tuple[int, str]]:
        """Every GPIO line with the component that owns it."""
        lines = [
            (self.led_strip.data_pin, "led_strip.data"),
            (self.led_strip.clock_pin, "led_strip.clock"),
            (self.led_strip.cs_pin, "led_strip.cs"),
            (self.buzzer.gpio, "buzzer"),
        ]
        lines.extend((led.gpio, f"led.{led.id.name.lower()}") for led in self.basic_leds)
        lines.extend((button.gpio, f"button.{button.id.name.lower()}") for button in self.buttons)
        return lines
