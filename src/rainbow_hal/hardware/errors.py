"""
Hardware error types

- HatError: base for every driver-layer error, carries a details dict
- BusUnavailableError: a GPIO / register-bus / duty-cycle controller is missing
- DeviceNotFoundError: nothing answers at the expected register-bus address
- DisplayInputError: text does not fit on the segment display
- PinConflictError: a GPIO line is registered twice
- ReleasedResourceError: a line, channel or bus handle is used after release
"""

from typing import Any, Dict, Optional


class HatError(Exception):
    """
    Base exception for driver-layer errors.

    Attributes:
        message: Human-readable error message
        details: Dictionary with additional error context

    Example:
        raise HatError(
            "Register read failed",
            details={'address': '0x77', 'register': '0xD0'}
        )
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class BusUnavailableError(HatError):
    """
    A platform controller (GPIO, register bus, duty-cycle output) is missing.

    Unrecoverable: HatController.initialize() lets it propagate to the
    owning process.
    """
    pass


class DeviceNotFoundError(HatError):
    """
    No device answered at the expected register-bus address.

    Aborts bring-up of that one device; siblings continue.
    """
    pass


class DisplayInputError(HatError, ValueError):
    """Text longer than the display capacity. Never silently truncated."""
    pass


class PinConflictError(HatError, ValueError):
    """GPIO line already registered by another component."""
    pass


class ReleasedResourceError(HatError):
    """A GPIO line, duty-cycle channel or bus handle was used after release."""
    pass
