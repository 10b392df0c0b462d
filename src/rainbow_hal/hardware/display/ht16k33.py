"""
HT16K33 segment display - 4 character, 14 segment
==================================================
Register-bus driver for the alphanumeric display at 0x70.

Display RAM holds 2 bytes per cell (segment mask, little-endian). show()
writes the whole frame in one transaction: the RAM address byte 0x00
followed by 8 bytes.
"""

from __future__ import annotations
from typing import List, Optional

from rainbow_hal.hardware.display.charset import DEFAULT_CHAR, char_to_mask
from rainbow_hal.hardware.errors import DeviceNotFoundError, DisplayInputError
from rainbow_hal.hardware.i2c.i2c_bus_interface import II2CBus
from rainbow_hal.hardware.i2c.i2c_device import I2CDevice
from rainbow_hal.models.enums import ReadinessState
from rainbow_hal.models.hardware import DisplayConfig
from rainbow_hal.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.DISPLAY)


CELL_COUNT = 4

CMD_SYSTEM_SETUP = 0x20
CMD_DISPLAY_SETUP = 0x80
CMD_BRIGHTNESS = 0xE0

OSCILLATOR_ON = 0x01
DISPLAY_ON = 0x01
BLINK_OFF = 0x00

RAM_ADDRESS = 0x00


# ==================== Encoding ====================

def setup_commands(brightness: int = 15) -> List[int]:
    """Oscillator on, display on without blinking, brightness."""
    return [
        CMD_SYSTEM_SETUP | OSCILLATOR_ON,
        CMD_DISPLAY_SETUP | DISPLAY_ON | (BLINK_OFF << 1),
        CMD_BRIGHTNESS | (brightness & 0x0F),
    ]


def encode_cells(text: str, right_aligned: bool = True) -> List[int]:
    """
    Segment masks for the 4 cells.

    Raises:
        DisplayInputError: text longer than 4 characters
    """
    if len(text) > CELL_COUNT:
        raise DisplayInputError(
            f"Maximum message length is {CELL_COUNT} characters",
            details={"text": text, "length": len(text)}
        )
    cells = [char_to_mask(DEFAULT_CHAR)] * CELL_COUNT
    offset = CELL_COUNT - len(text) if right_aligned else 0
    for i, char in enumerate(text):
        cells[offset + i] = char_to_mask(char)
    return cells


def encode_frame(text: str, right_aligned: bool = True) -> bytes:
    """8 display-RAM bytes, each cell packed low byte first."""
    frame = bytearray()
    for mask in encode_cells(text, right_aligned):
        frame += mask.to_bytes(2, "little")
    return bytes(frame)


# ==================== Driver ====================

class SegmentDisplay:
    """
    HT16K33 over II2CBus.

    Example:
        display = SegmentDisplay(bus)
        display.initialize()
        display.show("BEAR")
    """

    def __init__(self, bus: II2CBus, config: Optional[DisplayConfig] = None):
        self._bus = bus
        self.config = config or DisplayConfig()
        self._device: Optional[I2CDevice] = None
        self._text = ""
        self.readiness = ReadinessState.UNINITIALIZED

    # ==================== Lifecycle ====================

    def initialize(self) -> ReadinessState:
        """
        Probe and configure the display.

        Raises:
            DeviceNotFoundError: Nothing answers at the configured address
        """
        self.readiness = ReadinessState.INITIALIZING
        address = self.config.address

        if not self._bus.probe(address):
            self.readiness = ReadinessState.FAILED
            raise DeviceNotFoundError(
                "HT16K33 not found",
                details={"bus": self._bus.bus_number, "address": f"0x{address:02X}"}
            )

        self._device = I2CDevice(self._bus, address)
        for command in setup_commands(self.config.brightness):
            self._device.write(bytes([command]))
        self.readiness = ReadinessState.READY

        log.info("HT16K33 ready", address=f"0x{address:02X}", brightness=self.config.brightness)
        return self.readiness

    def dispose(self) -> None:
        """Blank the display, then release the device."""
        if self.readiness == ReadinessState.READY:
            self.clear()
        if self._device:
            self._device.release()
            self._device = None
        self.readiness = ReadinessState.UNINITIALIZED
        log.info("HT16K33 disposed")

    # ==================== Output ====================

    @property
    def text(self) -> str:
        """Last text written to the display."""
        return self._text

    def show(self, text: str, right_aligned: bool = True) -> None:
        """
        Show up to 4 characters.

        Raises:
            DisplayInputError: text longer than 4 characters (nothing written)
        """
        frame = encode_frame(text, right_aligned)
        if self.readiness != ReadinessState.READY:
            log.warn("Show ignored, display not ready", text=text, state=self.readiness.name)
            return
        self._device.write(bytes([RAM_ADDRESS]) + frame)
        self._text = text
        log.debug("Display updated", text=text, right_aligned=right_aligned)

    def clear(self) -> None:
        self.show("")
