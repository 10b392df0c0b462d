"""
SMBus I2C bus - smbus2 backed register bus

Uses combined i2c_rdwr transactions so a register pointer write and the
following read happen under one repeated start, the same way the BMP280 and
HT16K33 datasheets describe their reads.
"""

from smbus2 import SMBus, i2c_msg

from rainbow_hal.hardware.errors import BusUnavailableError, ReleasedResourceError
from rainbow_hal.hardware.i2c.i2c_bus_interface import II2CBus
from rainbow_hal.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.HARDWARE)


class SMBusI2CBus(II2CBus):

    def __init__(self, bus_number: int = 1):
        self._bus_number = bus_number
        try:
            self._bus = SMBus(bus_number)
        except (FileNotFoundError, PermissionError, OSError) as e:
            raise BusUnavailableError(
                "I2C bus not available",
                details={"bus": bus_number, "error": str(e)}
            ) from e
        self._closed = False
        log.info("I2C bus opened", bus=bus_number)

    @property
    def bus_number(self) -> int:
        return self._bus_number

    def probe(self, address: int) -> bool:
        self._ensure_open()
        try:
            self._bus.read_byte(address)
            return True
        except OSError:
            return False

    def write(self, address: int, data: bytes) -> None:
        self._ensure_open()
        self._bus.i2c_rdwr(i2c_msg.write(address, list(data)))

    def write_read(self, address: int, data: bytes, length: int) -> bytes:
        self._ensure_open()
        write = i2c_msg.write(address, list(data))
        read = i2c_msg.read(address, length)
        self._bus.i2c_rdwr(write, read)
        return bytes(list(read))

    def close(self) -> None:
        if self._closed:
            return
        self._bus.close()
        self._closed = True
        log.info("I2C bus closed", bus=self._bus_number)

    def _ensure_open(self) -> None:
        if self._closed:
            raise ReleasedResourceError("I2C bus used after close", details={"bus": self._bus_number})
