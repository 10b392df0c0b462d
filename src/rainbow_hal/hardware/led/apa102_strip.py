"""
APA102 LED strip - bit-banged driver
====================================
Seven APA102 LEDs on three GPIO lines (data, clock, chip-select).

Wire format per flush:
- chip-select LOW
- start frame: data LOW, 36 clock pulses
- per LED, MSB first: 0xE0 | brightness(5 bit), blue, green, red
- end frame: data LOW, 32 clock pulses (latches all LEDs)
- chip-select HIGH

- _leds: List[LedState] is the source of truth, mutations only touch it
- flush() streams the whole array; setters flush only with write_through
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Sequence

from rainbow_hal.hardware.gpio.gpio_manager_interface import IGPIOManager
from rainbow_hal.models.enums import GPIOInitialState, ReadinessState
from rainbow_hal.models.hardware import LedStripConfig
from rainbow_hal.models.led import LedState
from rainbow_hal.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.LED)


RAINBOW_COLORS = (
    "#ee4035",
    "#ee4035",
    "#f37736",
    "#fdf498",
    "#7bc043",
    "#0392cf",
    "#0392cf",
)
RAINBOW_BRIGHTNESS = 0.1


# ==================== Encoding ====================

def encode_led(led: LedState) -> bytes:
    """4 wire bytes for one LED: brightness, blue, green, red."""
    return bytes([led.brightness_byte, led.blue, led.green, led.red])


def encode_leds(leds: Iterable[LedState]) -> bytes:
    return b"".join(encode_led(led) for led in leds)


def byte_to_bits(value: int) -> List[int]:
    """MSB-first bit list of one byte."""
    return [(value >> shift) & 1 for shift in range(7, -1, -1)]


# ==================== Driver ====================

class LedStripDriver:
    """
    APA102 strip bit-banged over IGPIOManager.

    Example:
        strip = LedStripDriver(gpio, LedStripConfig())
        strip.initialize()
        strip.set_led(None, 255, 0, 0, brightness=0.2, write_through=True)
    """

    def __init__(self, gpio: IGPIOManager, config: Optional[LedStripConfig] = None):
        self._gpio = gpio
        self.config = config or LedStripConfig()
        self._leds: List[LedState] = [LedState() for _ in range(self.config.count)]
        self.readiness = ReadinessState.UNINITIALIZED

    # ==================== Lifecycle ====================

    def initialize(self) -> ReadinessState:
        """Claim data / clock / chip-select lines and push the (dark) initial state."""
        self.readiness = ReadinessState.INITIALIZING
        self._gpio.register_output(self.config.data_pin, "led_strip.data", GPIOInitialState.LOW)
        self._gpio.register_output(self.config.clock_pin, "led_strip.clock", GPIOInitialState.LOW)
        self._gpio.register_output(self.config.cs_pin, "led_strip.cs", GPIOInitialState.HIGH)
        self.readiness = ReadinessState.READY

        log.info(
            "APA102 strip initialized",
            data=self.config.data_pin,
            clock=self.config.clock_pin,
            cs=self.config.cs_pin,
            count=self.config.count,
        )
        self.flush()
        return self.readiness

    def dispose(self) -> None:
        """All LEDs off and flushed, then release the lines."""
        if self.readiness == ReadinessState.READY:
            self.turn_off()
        for pin in (self.config.clock_pin, self.config.data_pin, self.config.cs_pin):
            self._gpio.release(pin)
        self.readiness = ReadinessState.UNINITIALIZED
        log.info("APA102 strip disposed")

    # ==================== State ====================

    @property
    def led_count(self) -> int:
        return len(self._leds)

    @property
    def leds(self) -> Sequence[LedState]:
        return tuple(self._leds)

    def set_led(
        self,
        index: Optional[int],
        red: int,
        green: int,
        blue: int,
        brightness: Optional[float] = None,
        write_through: bool = False,
    ) -> None:
        """Set colour (and optionally brightness 0.0-1.0) of one LED, or all when index is None."""
        for led in self._select(index):
            led.set_rgb(red, green, blue, brightness=brightness)
        self._maybe_flush(write_through)

    def turn_on(self, index: Optional[int] = None) -> None:
        for led in self._select(index):
            led.turn_on()
        self.flush()

    def turn_off(self, index: Optional[int] = None) -> None:
        for led in self._select(index):
            led.turn_off()
        self.flush()

    def set_brightness(self, percent: int, write_through: bool = False, index: Optional[int] = None) -> None:
        """Brightness in percent (0-100)."""
        for led in self._select(index):
            led.set_brightness(percent / 100)
        self._maybe_flush(write_through)

    def set_red(self, value: int, write_through: bool = False, index: Optional[int] = None) -> None:
        for led in self._select(index):
            led.set_red(value)
        self._maybe_flush(write_through)

    def set_green(self, value: int, write_through: bool = False, index: Optional[int] = None) -> None:
        for led in self._select(index):
            led.set_green(value)
        self._maybe_flush(write_through)

    def set_blue(self, value: int, write_through: bool = False, index: Optional[int] = None) -> None:
        for led in self._select(index):
            led.set_blue(value)
        self._maybe_flush(write_through)

    def show_colors(self) -> None:
        """Themed rainbow across the strip."""
        for led, colour in zip(self._leds, RAINBOW_COLORS):
            led.set_rgb_hex(colour, RAINBOW_BRIGHTNESS)
        self.flush()

    # ==================== Wire ====================

    def flush(self) -> None:
        """Stream the current LED array to the strip."""
        if self.readiness != ReadinessState.READY:
            log.warn("Flush ignored, strip not ready", state=self.readiness.name)
            return

        cs = self.config.cs_pin
        self._gpio.write(cs, 0)
        self._clock_frame(self.config.start_frame_pulses)
        for byte in encode_leds(self._leds):
            self._write_byte(byte)
        self._clock_frame(self.config.end_frame_pulses)
        self._gpio.write(cs, 1)
        log.debug("APA102 frame flushed", leds=len(self._leds))

    update_all = flush

    def _clock_frame(self, pulses: int) -> None:
        self._gpio.write(self.config.data_pin, 0)
        for _ in range(pulses):
            self._pulse_clock()

    def _write_byte(self, value: int) -> None:
        for bit in byte_to_bits(value):
            self._gpio.write(self.config.data_pin, bit)
            self._pulse_clock()

    def _pulse_clock(self) -> None:
        self._gpio.write(self.config.clock_pin, 1)
        self._gpio.write(self.config.clock_pin, 0)

    # ==================== Helpers ====================

    def _select(self, index: Optional[int]) -> List[LedState]:
        if index is None:
            return self._leds
        if not 0 <= index < len(self._leds):
            raise IndexError(f"LED index {index} out of range (0-{len(self._leds) - 1})")
        return [self._leds[index]]

    def _maybe_flush(self, write_through: bool) -> None:
        if write_through:
            self.flush()
