from typing import Protocol, Dict
from rainbow_hal.models.enums import GPIOPullMode, GPIOInitialState


class IPWMChannel(Protocol):
    """Duty-cycle output on a single line (buzzer)"""

    @property
    def pin(self) -> int:
        ...

    @property
    def active(self) -> bool:
        """True while the output is pulsing."""
        ...

    def start(self, duty_cycle: float) -> None:
        """Start pulsing at duty_cycle percent (0-100)."""
        ...

    def stop(self) -> None:
        ...

    def release(self) -> None:
        ...


class IGPIOManager(Protocol):

    # -------------------------------
    # Registration
    # -------------------------------

    def register_input(
        self,
        pin: int,
        component: str,
        pull_mode: GPIOPullMode = GPIOPullMode.PULL_UP
    ) -> None:
        ...

    def register_output(
        self,
        pin: int,
        component: str,
        initial: GPIOInitialState = GPIOInitialState.LOW
    ) -> None:
        ...

    def register_pwm(self, pin: int, component: str, frequency_hz: float) -> IPWMChannel:
        ...


    # -------------------------------
    # IO
    # -------------------------------

    def read(self, pin: int) -> int:
        """Read GPIO pin value (0 or 1)"""
        ...

    def write(self, pin: int, value: int) -> None:
        """Write value to GPIO pin (0 or 1)"""
        ...


    # -------------------------------
    # Lifecycle / Debug
    # -------------------------------

    def release(self, pin: int) -> None:
        """Release a single pin; further IO on it is an error."""
        ...

    def cleanup(self) -> None:
        ...

    def get_registry(self) -> Dict[int, str]:
        ...
