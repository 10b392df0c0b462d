from rainbow_hal.hardware.errors import ReleasedResourceError
from rainbow_hal.hardware.i2c.i2c_bus_interface import II2CBus


class I2CDevice:
    """
    Handle for one device on the register bus.

    Register reads are a pointer write followed by a read in one combined
    transaction. Multi-byte values are little-endian.
    """

    def __init__(self, bus: II2CBus, address: int):
        self._bus = bus
        self._address = address
        self._released = False

    @property
    def address(self) -> int:
        return self._address

    @property
    def released(self) -> bool:
        return self._released

    def write(self, data: bytes) -> None:
        self._ensure_open()
        self._bus.write(self._address, bytes(data))

    def write_read(self, data: bytes, length: int) -> bytes:
        self._ensure_open()
        return self._bus.write_read(self._address, bytes(data), length)

    def write_register(self, register: int, value: int) -> None:
        self.write(bytes([register & 0xFF, value & 0xFF]))

    def read_register(self, register: int) -> int:
        return self.write_read(bytes([register & 0xFF]), 1)[0]

    def read_registers(self, register: int, length: int) -> bytes:
        return self.write_read(bytes([register & 0xFF]), length)

    def read_u16_le(self, register: int, signed: bool = False) -> int:
        return int.from_bytes(self.read_registers(register, 2), "little", signed=signed)

    def release(self) -> None:
        """Detach from the bus. The bus itself is owned (and closed) elsewhere."""
        self._released = True

    def _ensure_open(self) -> None:
        if self._released:
            raise ReleasedResourceError(
                "I2C device used after release",
                details={"address": f"0x{self._address:02X}"}
            )
