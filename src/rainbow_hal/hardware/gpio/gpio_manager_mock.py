from typing import Dict, List, Set, Tuple
from rainbow_hal.hardware.errors import PinConflictError, ReleasedResourceError
from rainbow_hal.hardware.gpio.gpio_manager_interface import IGPIOManager, IPWMChannel
from rainbow_hal.models.enums import GPIOPullMode, GPIOInitialState
from rainbow_hal.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.HARDWARE)


class MockPWMChannel(IPWMChannel):

    def __init__(self, pin: int, frequency_hz: float):
        self._pin = pin
        self.frequency_hz = frequency_hz
        self.duty_cycle = 0.0
        self._active = False
        self.released = False
        self.history: List[Tuple[str, float]] = []

    @property
    def pin(self) -> int:
        return self._pin

    @property
    def active(self) -> bool:
        return self._active

    def start(self, duty_cycle: float) -> None:
        self._ensure_open()
        self.duty_cycle = duty_cycle
        self._active = True
        self.history.append(("start", duty_cycle))

    def stop(self) -> None:
        self._ensure_open()
        self._active = False
        self.history.append(("stop", 0.0))

    def release(self) -> None:
        self._active = False
        self.released = True

    def _ensure_open(self) -> None:
        if self.released:
            raise ReleasedResourceError("PWM channel used after release", details={"pin": self._pin})


class MockGPIOManager(IGPIOManager):
    """
    In-memory GPIO for development machines and tests.

    - Inputs idle HIGH (pull-up), drive them with set_input()
    - Every write is appended to write_log as (pin, value)
    - IO on a released pin raises ReleasedResourceError
    """

    def __init__(self):
        self._registry: Dict[int, str] = {}  # pin -> component_name
        self._values: Dict[int, int] = {}
        self._released: Set[int] = set()
        self.pwm_channels: Dict[int, MockPWMChannel] = {}
        self.write_log: List[Tuple[int, int]] = []
        log.info("Mock GPIO manager initialized")

    # -------------------------------
    # Registration
    # -------------------------------
    def register_input(
        self,
        pin: int,
        component: str,
        pull_mode: GPIOPullMode = GPIOPullMode.PULL_UP
    ) -> None:
        self._check_available(pin, component)
        self._registry[pin] = component
        self._values[pin] = 0 if pull_mode == GPIOPullMode.PULL_DOWN else 1
        self._released.discard(pin)

    def register_output(
        self,
        pin: int,
        component: str,
        initial: GPIOInitialState = GPIOInitialState.LOW
    ) -> None:
        self._check_available(pin, component)
        self._registry[pin] = component
        self._values[pin] = int(initial == GPIOInitialState.HIGH)
        self._released.discard(pin)

    def register_pwm(self, pin: int, component: str, frequency_hz: float) -> IPWMChannel:
        self._check_available(pin, component)
        self._registry[pin] = component
        self._released.discard(pin)
        channel = MockPWMChannel(pin, frequency_hz)
        self.pwm_channels[pin] = channel
        return channel


    # -------------------------------
    # IO
    # -------------------------------

    def read(self, pin: int) -> int:
        self._ensure_usable(pin)
        return self._values.get(pin, 0)

    def write(self, pin: int, value: int) -> None:
        self._ensure_usable(pin)
        self._values[pin] = int(bool(value))
        self.write_log.append((pin, self._values[pin]))

    def set_input(self, pin: int, value: int) -> None:
        """Drive an input pin from the outside (simulated button)."""
        self._values[pin] = int(bool(value))

    def value(self, pin: int) -> int:
        """Last written / driven level, without the usability check."""
        return self._values.get(pin, 0)

    # -------------------------------
    # Lifecycle
    # -------------------------------

    def release(self, pin: int) -> None:
        if pin not in self._registry:
            return
        channel = self.pwm_channels.get(pin)
        if channel:
            channel.release()
        del self._registry[pin]
        self._released.add(pin)

    def cleanup(self) -> None:
        pin_count = len(self._registry)
        for pin in list(self._registry):
            self.release(pin)
        log.info(f"Mock GPIO Manager cleanup finished ({pin_count} pins)")

    def get_registry(self) -> Dict[int, str]:
        return self._registry.copy()

    def is_released(self, pin: int) -> bool:
        return pin in self._released


    # -------------------------------
    # Internals
    # -------------------------------

    def _check_available(self, pin: int, component: str) -> None:
        if pin in self._registry:
            raise PinConflictError(
                f"GPIO {pin} already registered by {self._registry[pin]}",
                details={"pin": pin, "requested_by": component}
            )

    def _ensure_usable(self, pin: int) -> None:
        if pin in self._released:
            raise ReleasedResourceError("GPIO pin used after release", details={"pin": pin})
        if pin not in self._registry:
            raise ReleasedResourceError("GPIO pin is not registered", details={"pin": pin})
