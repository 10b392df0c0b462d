"""
Mock I2C bus - in-memory register files

Each simulated device is a 256-byte register file with an auto-incrementing
register pointer: the first byte of a write sets the pointer, remaining bytes
are stored from there on, and reads continue from the pointer. That is enough
for both the BMP280 and the HT16K33 display RAM.
"""

from typing import Dict, List, Optional, Tuple

from rainbow_hal.hardware.errors import ReleasedResourceError
from rainbow_hal.hardware.i2c.i2c_bus_interface import II2CBus
from rainbow_hal.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.HARDWARE)


# Datasheet worked example (BMP280 rev 1.14, section 8.2)
BMP280_EXAMPLE_CALIBRATION = {
    0x88: (27504, False),   # dig_T1
    0x8A: (26435, True),    # dig_T2
    0x8C: (-1000, True),    # dig_T3
    0x8E: (36477, False),   # dig_P1
    0x90: (-10685, True),   # dig_P2
    0x92: (3024, True),     # dig_P3
    0x94: (2855, True),     # dig_P4
    0x96: (140, True),      # dig_P5
    0x98: (-7, True),       # dig_P6
    0x9A: (15500, True),    # dig_P7
    0x9C: (-14600, True),   # dig_P8
    0x9E: (6000, True),     # dig_P9
}
BMP280_EXAMPLE_ADC_T = 519888
BMP280_EXAMPLE_ADC_P = 415148


class MockRegisterDevice:
    """Register file for one simulated bus device."""

    def __init__(self, address: int, name: str = "device"):
        self.address = address
        self.name = name
        self.registers = bytearray(256)
        self.pointer = 0
        self.writes: List[bytes] = []

    def write(self, data: bytes) -> None:
        self.writes.append(bytes(data))
        if not data:
            return
        self.pointer = data[0]
        for value in data[1:]:
            self.registers[self.pointer] = value
            self.pointer = (self.pointer + 1) & 0xFF

    def read(self, length: int) -> bytes:
        out = bytearray()
        for _ in range(length):
            out.append(self.registers[self.pointer])
            self.pointer = (self.pointer + 1) & 0xFF
        return bytes(out)

    def poke(self, register: int, data: bytes) -> None:
        """Set register contents without recording a bus write."""
        for offset, value in enumerate(data):
            self.registers[(register + offset) & 0xFF] = value

    def set_u16_le(self, register: int, value: int, signed: bool) -> None:
        self.poke(register, value.to_bytes(2, "little", signed=signed))

    def set_raw20(self, msb_register: int, raw: int) -> None:
        """Store a 20-bit ADC value as msb / lsb / xlsb."""
        self.poke(msb_register, bytes([(raw >> 12) & 0xFF, (raw >> 4) & 0xFF, (raw & 0x0F) << 4]))

    # -------------------------------
    # Presets
    # -------------------------------

    @classmethod
    def bmp280(
        cls,
        address: int = 0x77,
        chip_id: int = 0x58,
        adc_t: int = BMP280_EXAMPLE_ADC_T,
        adc_p: int = BMP280_EXAMPLE_ADC_P,
    ) -> "MockRegisterDevice":
        device = cls(address, "bmp280")
        device.poke(0xD0, bytes([chip_id]))
        for register, (value, signed) in BMP280_EXAMPLE_CALIBRATION.items():
            device.set_u16_le(register, value, signed)
        device.set_raw20(0xF7, adc_p)
        device.set_raw20(0xFA, adc_t)
        return device

    @classmethod
    def ht16k33(cls, address: int = 0x70) -> "MockRegisterDevice":
        return cls(address, "ht16k33")


class MockI2CBus(II2CBus):
    """
    In-memory I2C bus for development machines and tests.

    - Devices are attached with attach(); probe() answers only for them
    - Every transaction is appended to transactions as (address, bytes)
    - Any call after close() raises ReleasedResourceError
    """

    def __init__(self, bus_number: int = 1, devices: Optional[List[MockRegisterDevice]] = None):
        self._bus_number = bus_number
        self._devices: Dict[int, MockRegisterDevice] = {}
        self.transactions: List[Tuple[int, bytes]] = []
        self.closed = False
        for device in devices or []:
            self.attach(device)
        log.info("Mock I2C bus initialized", bus=bus_number, devices=len(self._devices))

    @classmethod
    def with_hat_devices(cls, bus_number: int = 1) -> "MockI2CBus":
        """Bus populated like a Rainbow HAT: BMP280 at 0x77, HT16K33 at 0x70."""
        return cls(bus_number, [MockRegisterDevice.bmp280(), MockRegisterDevice.ht16k33()])

    @property
    def bus_number(self) -> int:
        return self._bus_number

    def attach(self, device: MockRegisterDevice) -> None:
        self._devices[device.address] = device

    def detach(self, address: int) -> None:
        self._devices.pop(address, None)

    def device(self, address: int) -> MockRegisterDevice:
        return self._devices[address]

    # -------------------------------
    # II2CBus
    # -------------------------------

    def probe(self, address: int) -> bool:
        self._ensure_open()
        return address in self._devices

    def write(self, address: int, data: bytes) -> None:
        self._ensure_open()
        self._target(address).write(bytes(data))
        self.transactions.append((address, bytes(data)))

    def write_read(self, address: int, data: bytes, length: int) -> bytes:
        self._ensure_open()
        device = self._target(address)
        device.write(bytes(data))
        self.transactions.append((address, bytes(data)))
        return device.read(length)

    def close(self) -> None:
        self.closed = True

    # -------------------------------
    # Internals
    # -------------------------------

    def _ensure_open(self) -> None:
        if self.closed:
            raise ReleasedResourceError("I2C bus used after close", details={"bus": self._bus_number})

    def _target(self, address: int) -> MockRegisterDevice:
        device = self._devices.get(address)
        if device is None:
            raise OSError(121, f"Remote I/O error: no device at 0x{address:02X}")
        return device
