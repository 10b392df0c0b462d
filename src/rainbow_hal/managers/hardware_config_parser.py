"""
HardwareConfigParser
====================

- Does NOT load YAML; ConfigManager hands over the raw dict
- Converts dict -> typed HatConfig
- Missing sections fall back to the board defaults
- Validates that no GPIO line is assigned twice
"""

from __future__ import annotations

from typing import Any, Dict, List

from rainbow_hal.hardware.errors import PinConflictError
from rainbow_hal.models.enums import BasicLedID, ButtonID
from rainbow_hal.models.hardware import (
    HatConfig,
    LedStripConfig,
    BasicLedConfig,
    ButtonConfig,
    BuzzerConfig,
    EnvironmentSensorConfig,
    DisplayConfig,
    PollingConfig,
)
from rainbow_hal.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CONFIG)


class HardwareConfigParser:
    """
    Example:
        config = HardwareConfigParser(yaml.safe_load(text)).parse()
    """

    def __init__(self, data: Dict[str, Any]):
        if not isinstance(data, dict):
            raise ValueError(f"Hardware config must be a mapping, got {type(data).__name__}")
        self.data = data

    # ------------------------------------------------------
    # ENTRY POINT
    # ------------------------------------------------------

    def parse(self) -> HatConfig:
        defaults = HatConfig()
        actions = self.data.get("actions") or {}

        config = HatConfig(
            led_strip=self._parse_led_strip(self.data.get("led_strip")),
            basic_leds=self._parse_basic_leds(self.data.get("basic_leds")) or defaults.basic_leds,
            buttons=self._parse_buttons(self.data.get("buttons")) or defaults.buttons,
            buzzer=self._parse_buzzer(self.data.get("buzzer")),
            i2c_bus=int((self.data.get("i2c") or {}).get("bus", defaults.i2c_bus)),
            environment_sensor=EnvironmentSensorConfig(**(self.data.get("environment_sensor") or {})),
            display=DisplayConfig(**(self.data.get("display") or {})),
            polling=PollingConfig(**(self.data.get("polling") or {})),
            retry_cooldown=float(actions.get("retry_cooldown", defaults.retry_cooldown)),
            demo_text=str(actions.get("demo_text", defaults.demo_text)),
        )
        self.validate(config)
        return config

    # ------------------------------------------------------
    # SECTIONS
    # ------------------------------------------------------

    def _parse_led_strip(self, entry) -> LedStripConfig:
        if not entry:
            return LedStripConfig()
        defaults = LedStripConfig()
        return LedStripConfig(
            data_pin=entry.get("data", defaults.data_pin),
            clock_pin=entry.get("clock", defaults.clock_pin),
            cs_pin=entry.get("cs", defaults.cs_pin),
            count=entry.get("count", defaults.count),
        )

    def _parse_basic_leds(self, entries) -> List[BasicLedConfig]:
        leds = []
        for entry in entries or []:
            try:
                leds.append(BasicLedConfig(id=BasicLedID[entry["id"].upper()], gpio=entry["gpio"]))
            except (KeyError, AttributeError) as e:
                log.warn(f"Invalid LED entry: {entry}, error: {e}")
        return leds

    def _parse_buttons(self, entries) -> List[ButtonConfig]:
        buttons = []
        for entry in entries or []:
            try:
                buttons.append(ButtonConfig(id=ButtonID[entry["id"].upper()], gpio=entry["gpio"]))
            except (KeyError, AttributeError) as e:
                log.warn(f"Invalid button entry: {entry}, error: {e}")
        return buttons

    def _parse_buzzer(self, entry) -> BuzzerConfig:
        if not entry:
            return BuzzerConfig()
        return BuzzerConfig(**entry)

    # ------------------------------------------------------
    # VALIDATION
    # ------------------------------------------------------

    @staticmethod
    def validate(config: HatConfig) -> None:
        """
        Raises:
            PinConflictError: a GPIO line is assigned to two components
        """
        used: Dict[int, str] = {}
        for pin, component in config.gpio_assignments():
            if pin in used:
                raise PinConflictError(
                    f"GPIO conflict: {component} pin {pin} already used by {used[pin]}",
                    details={"pin": pin}
                )
            used[pin] = component
