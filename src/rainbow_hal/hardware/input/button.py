"""
Button Component - Hardware Abstraction Layer

Capacitive touch pad on a pulled-up input line. Reads are raw levels:
no debounce and no edge detection, LOW means pressed.
"""

from rainbow_hal.hardware.gpio.gpio_manager_interface import IGPIOManager
from rainbow_hal.models.enums import ButtonID, GPIOPullMode
from rainbow_hal.models.hardware import ButtonConfig


class Button:
    """
    Single button line

    Args:
        gpio: GPIO manager that owns the line
        config: ButtonConfig with id and BCM pin

    Example:
        btn = Button(gpio, ButtonConfig(ButtonID.A, 21))
        if btn.is_pressed():
            print("A pressed!")
    """

    def __init__(self, gpio: IGPIOManager, config: ButtonConfig):
        self._gpio = gpio
        self.id: ButtonID = config.id
        self.pin = config.gpio
        self._gpio.register_input(self.pin, f"button.{self.id.name.lower()}", GPIOPullMode.PULL_UP)

    def is_pressed(self) -> bool:
        """Current raw level is LOW."""
        return self._gpio.read(self.pin) == 0

    def release(self) -> None:
        self._gpio.release(self.pin)

    def __repr__(self) -> str:
        return f"<Button {self.id.name} pin={self.pin}>"
