"""
Buzzer Component - Hardware Abstraction Layer

Passive piezo on a duty-cycle output. buzz() starts the output and schedules
a one-shot stop on the event loop; it never sleeps.
"""

import asyncio
from typing import Optional

from rainbow_hal.hardware.gpio.gpio_manager_interface import IGPIOManager, IPWMChannel
from rainbow_hal.models.hardware import BuzzerConfig
from rainbow_hal.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.HARDWARE)


class Buzzer:
    """
    Duty-cycle buzzer

    Args:
        gpio: GPIO manager providing the PWM channel
        config: BuzzerConfig (pin, frequency, duty cycle percent, buzz duration)
    """

    def __init__(self, gpio: IGPIOManager, config: Optional[BuzzerConfig] = None):
        self._gpio = gpio
        self.config = config or BuzzerConfig()
        self._channel: IPWMChannel = gpio.register_pwm(self.config.gpio, "buzzer", self.config.frequency_hz)
        self._stop_handle: Optional[asyncio.TimerHandle] = None

    @property
    def active(self) -> bool:
        return self._channel.active

    @property
    def pending_stop(self) -> bool:
        return self._stop_handle is not None

    def buzz(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        Buzz for config.duration seconds.

        A buzz while one is running restarts the stop timer.
        """
        loop = loop or asyncio.get_running_loop()
        self.cancel()
        self._channel.start(self.config.duty_cycle)
        self._stop_handle = loop.call_later(self.config.duration, self._on_stop_timer)
        log.debug("Buzz", duration=self.config.duration, duty=self.config.duty_cycle)

    def stop(self) -> None:
        self.cancel()
        if self._channel.active:
            self._channel.stop()

    def cancel(self) -> None:
        """Cancel the pending stop timer (output keeps its state)."""
        if self._stop_handle:
            self._stop_handle.cancel()
            self._stop_handle = None

    def release(self) -> None:
        self.cancel()
        self._gpio.release(self.config.gpio)

    def _on_stop_timer(self) -> None:
        self._stop_handle = None
        self._channel.stop()
