"""
GPIO Manager - Infrastructure Layer Component

Centralized GPIO pin allocation and lifecycle management.
Provides conflict detection and resource tracking for all GPIO operations.

- Sits between the HAT drivers and the RPi.GPIO hardware driver
- Manages pin registry and prevents conflicts
- Centralizes GPIO.setup() and cleanup() operations
"""

from typing import Dict
from rainbow_hal.hardware.errors import BusUnavailableError, PinConflictError, ReleasedResourceError
from rainbow_hal.hardware.gpio.gpio_manager_interface import IGPIOManager, IPWMChannel
from rainbow_hal.models.enums import GPIOPullMode, GPIOInitialState
from rainbow_hal.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.HARDWARE)


class HardwarePWMChannel(IPWMChannel):
    """RPi.GPIO software PWM bound to one pin"""

    def __init__(self, gpio, pin: int, frequency_hz: float):
        self._gpio = gpio
        self._pin = pin
        self._pwm = gpio.PWM(pin, frequency_hz)
        self._active = False
        self._released = False

    @property
    def pin(self) -> int:
        return self._pin

    @property
    def active(self) -> bool:
        return self._active

    def start(self, duty_cycle: float) -> None:
        self._ensure_open()
        if self._active:
            self._pwm.ChangeDutyCycle(duty_cycle)
        else:
            self._pwm.start(duty_cycle)
            self._active = True

    def stop(self) -> None:
        self._ensure_open()
        if self._active:
            self._pwm.stop()
            self._active = False

    def release(self) -> None:
        if self._released:
            return
        if self._active:
            self._pwm.stop()
            self._active = False
        self._released = True

    def _ensure_open(self) -> None:
        if self._released:
            raise ReleasedResourceError("PWM channel used after release", details={"pin": self._pin})


class HardwareGPIOManager(IGPIOManager):
    """
    Infrastructure component managing GPIO pin allocation and lifecycle.

    Responsibilities:
    - Initialize RPi.GPIO library (BCM mode, disable warnings)
    - Track registered pins (prevent conflicts)
    - Provide pin registration API for drivers
    - Clean up all registered pins on shutdown
    """

    def __init__(self):
        """Initialize GPIO library and empty pin registry"""
        try:
            import RPi.GPIO as GPIO
        except ImportError as e:
            raise BusUnavailableError("RPi.GPIO not available") from e

        self._gpio = GPIO
        self._registry: Dict[int, str] = {}  # pin -> component_name
        self._pwm: Dict[int, HardwarePWMChannel] = {}

        self._gpio.setmode(self._gpio.BCM)
        self._gpio.setwarnings(False)

        log.info("GPIO manager initialized (BCM mode)")


    # -------------------------------
    # Registration
    # -------------------------------

    def register_input(
        self,
        pin: int,
        component: str,
        pull_mode: GPIOPullMode = GPIOPullMode.PULL_UP
    ) -> None:
        """
        Register and setup input pin (buttons)

        Args:
            pin: BCM GPIO pin number
            component: Component name for tracking (e.g., "Button(A)")
            pull_mode: Pull resistor configuration (default: PULL_UP)

        Raises:
            PinConflictError: If pin already registered by another component
        """
        self._check_available(pin, component)

        # Map our enum to RPi.GPIO constants
        gpio_pull = {
            GPIOPullMode.PULL_UP: self._gpio.PUD_UP,
            GPIOPullMode.PULL_DOWN: self._gpio.PUD_DOWN,
            GPIOPullMode.NO_PULL: self._gpio.PUD_OFF
        }[pull_mode]

        self._gpio.setup(pin, self._gpio.IN, pull_up_down=gpio_pull)
        self._registry[pin] = component

        log.info(
            "GPIO pin registered (INPUT)",
            pin=pin,
            component=component,
            pull=pull_mode.name
        )

    def register_output(
        self,
        pin: int,
        component: str,
        initial: GPIOInitialState = GPIOInitialState.LOW
    ) -> None:
        """
        Register and setup output pin (LEDs, APA102 data/clock/cs)

        Raises:
            PinConflictError: If pin already registered by another component
        """
        self._check_available(pin, component)

        gpio_initial = {
            GPIOInitialState.LOW: self._gpio.LOW,
            GPIOInitialState.HIGH: self._gpio.HIGH
        }[initial]

        self._gpio.setup(pin, self._gpio.OUT, initial=gpio_initial)
        self._registry[pin] = component

        log.info(
            "GPIO pin registered (OUTPUT)",
            pin=pin,
            component=component,
            initial=initial.name
        )

    def register_pwm(self, pin: int, component: str, frequency_hz: float) -> IPWMChannel:
        """
        Register a duty-cycle output (buzzer). The channel starts stopped.

        Raises:
            PinConflictError: If pin already registered by another component
        """
        self._check_available(pin, component)

        self._gpio.setup(pin, self._gpio.OUT, initial=self._gpio.LOW)
        channel = HardwarePWMChannel(self._gpio, pin, frequency_hz)
        self._registry[pin] = component
        self._pwm[pin] = channel

        log.info(
            "GPIO pin registered (PWM)",
            pin=pin,
            component=component,
            frequency=f"{frequency_hz} Hz"
        )
        return channel


    # -------------------------------
    # IO
    # -------------------------------

    def read(self, pin: int) -> int:
        self._ensure_registered(pin)
        return int(self._gpio.input(pin))

    def write(self, pin: int, value: int) -> None:
        self._ensure_registered(pin)
        self._gpio.output(pin, self._gpio.HIGH if value else self._gpio.LOW)


    # -------------------------------
    # Lifecycle
    # -------------------------------

    def release(self, pin: int) -> None:
        """Release one pin back to the OS."""
        if pin not in self._registry:
            return
        channel = self._pwm.pop(pin, None)
        if channel:
            channel.release()
        self._gpio.cleanup(pin)
        component = self._registry.pop(pin)
        log.debug("GPIO pin released", pin=pin, component=component)

    def cleanup(self) -> None:
        """
        Cleanup all registered GPIO pins

        Called on shutdown to release GPIO resources.
        """
        pin_count = len(self._registry)
        log.info(f"Cleaning up {pin_count} GPIO pins")

        for channel in self._pwm.values():
            channel.release()
        self._pwm.clear()
        self._gpio.cleanup()
        self._registry.clear()

        log.info("GPIO cleanup complete")

    def get_registry(self) -> Dict[int, str]:
        """
        Get current pin allocations (for debugging)

        Returns:
            Dict mapping pin number to component name
        """
        return self._registry.copy()


    def _check_available(self, pin: int, component: str) -> None:
        """
        Check if pin is available for registration

        Raises:
            PinConflictError: If pin already registered
        """
        if pin in self._registry:
            existing_owner = self._registry[pin]
            error_msg = (
                f"GPIO pin conflict detected: Pin {pin} requested by '{component}' "
                f"is already registered to '{existing_owner}'"
            )
            log.error(error_msg)
            raise PinConflictError(error_msg, details={"pin": pin})

    def _ensure_registered(self, pin: int) -> None:
        if pin not in self._registry:
            raise ReleasedResourceError("GPIO pin is not registered", details={"pin": pin})
