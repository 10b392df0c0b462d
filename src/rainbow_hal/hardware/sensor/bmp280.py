"""
BMP280 environment sensor - temperature and barometric pressure
================================================================
Register-bus driver for the Bosch BMP280 at 0x77.

Bring-up:
- probe the address (nothing answers -> DeviceNotFoundError)
- chip-id register 0xD0 must read 0x58 (otherwise FAILED, not an exception)
- read the 12 calibration coefficients (little-endian 16-bit)
- ctrl_meas 0xF4 = 0x3F: x1 oversampling (temperature, pressure), normal mode

Compensation follows the datasheet: floating point for temperature, the
64-bit integer sequence for pressure. Both are pure functions so they can be
checked against the datasheet worked example without any bus.
"""

from __future__ import annotations
from typing import Optional, Tuple

from rainbow_hal.hardware.errors import DeviceNotFoundError
from rainbow_hal.hardware.i2c.i2c_bus_interface import II2CBus
from rainbow_hal.hardware.i2c.i2c_device import I2CDevice
from rainbow_hal.models.calibration import CalibrationCoefficients
from rainbow_hal.models.enums import ReadinessState
from rainbow_hal.models.hardware import EnvironmentSensorConfig
from rainbow_hal.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SENSOR)


REG_CHIP_ID = 0xD0
REG_CTRL_MEAS = 0xF4
REG_PRESSURE_MSB = 0xF7
REG_TEMPERATURE_MSB = 0xFA

CTRL_MEAS_NORMAL = 0x3F

TEMPERATURE_RESOLUTION = 5120.0

# (register, attribute, signed)
CALIBRATION_REGISTERS = (
    (0x88, "dig_t1", False),
    (0x8A, "dig_t2", True),
    (0x8C, "dig_t3", True),
    (0x8E, "dig_p1", False),
    (0x90, "dig_p2", True),
    (0x92, "dig_p3", True),
    (0x94, "dig_p4", True),
    (0x96, "dig_p5", True),
    (0x98, "dig_p6", True),
    (0x9A, "dig_p7", True),
    (0x9C, "dig_p8", True),
    (0x9E, "dig_p9", True),
)


# ==================== Compensation ====================

def raw_sample(msb: int, lsb: int, xlsb: int) -> int:
    """20-bit ADC value from the three measurement registers."""
    return (msb << 12) | (lsb << 4) | (xlsb >> 4)


def compensate_temperature(raw: int, cal: CalibrationCoefficients) -> Tuple[float, float]:
    """
    Datasheet floating-point temperature compensation.

    Returns:
        (celsius, t_fine) - t_fine is the undivided value the pressure
        formula needs.
    """
    var1 = (raw / 16384.0 - cal.dig_t1 / 1024.0) * cal.dig_t2
    var2 = ((raw / 131072.0 - cal.dig_t1 / 8192.0) ** 2) * cal.dig_t3
    t_fine = var1 + var2
    return t_fine / TEMPERATURE_RESOLUTION, t_fine


def _div_trunc(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator < 0) == (denominator < 0) else -quotient


def compensate_pressure_pa256(raw: int, t_fine: float, cal: CalibrationCoefficients) -> int:
    """
    Datasheet 64-bit pressure compensation.

    Returns:
        Pressure in Pa as unsigned Q24.8 (Pa * 256), or 0 when the
        denominator term is zero.
    """
    var1 = int(round(t_fine)) - 128000
    var2 = var1 * var1 * cal.dig_p6
    var2 = var2 + ((var1 * cal.dig_p5) << 17)
    var2 = var2 + (cal.dig_p4 << 35)
    var1 = ((var1 * var1 * cal.dig_p3) >> 8) + ((var1 * cal.dig_p2) << 12)
    var1 = (((1 << 47) + var1) * cal.dig_p1) >> 33
    if var1 == 0:
        return 0

    p = 1048576 - raw
    p = _div_trunc(((p << 31) - var2) * 3125, var1)
    var1 = (cal.dig_p9 * (p >> 13) * (p >> 13)) >> 25
    var2 = (cal.dig_p8 * p) >> 19
    return ((p + var1 + var2) >> 8) + (cal.dig_p7 << 4)


def compensate_pressure(raw: int, t_fine: float, cal: CalibrationCoefficients) -> float:
    """Pressure in hPa (0.0 on the zero-denominator guard)."""
    return compensate_pressure_pa256(raw, t_fine, cal) / 256.0 / 100.0


def read_calibration(device: I2CDevice) -> CalibrationCoefficients:
    values = {
        name: device.read_u16_le(register, signed=signed)
        for register, name, signed in CALIBRATION_REGISTERS
    }
    return CalibrationCoefficients(**values)


# ==================== Driver ====================

class EnvironmentSensor:
    """
    BMP280 over II2CBus.

    Reads while not READY log and return 0.0; sensor trouble never faults
    the caller.
    """

    def __init__(self, bus: II2CBus, config: Optional[EnvironmentSensorConfig] = None):
        self._bus = bus
        self.config = config or EnvironmentSensorConfig()
        self._device: Optional[I2CDevice] = None
        self._calibration: Optional[CalibrationCoefficients] = None
        self.readiness = ReadinessState.UNINITIALIZED

    # ==================== Lifecycle ====================

    def initialize(self) -> ReadinessState:
        """
        Probe, verify signature, read calibration, enable normal mode.

        Raises:
            DeviceNotFoundError: Nothing answers at the configured address
        """
        self.readiness = ReadinessState.INITIALIZING
        address = self.config.address

        if not self._bus.probe(address):
            self.readiness = ReadinessState.FAILED
            raise DeviceNotFoundError(
                "BMP280 not found",
                details={"bus": self._bus.bus_number, "address": f"0x{address:02X}"}
            )

        self._device = I2CDevice(self._bus, address)
        chip_id = self._device.read_register(REG_CHIP_ID)
        if chip_id != self.config.chip_id:
            self.readiness = ReadinessState.FAILED
            log.error(
                "BMP280 signature mismatch",
                address=f"0x{address:02X}",
                expected=f"0x{self.config.chip_id:02X}",
                found=f"0x{chip_id:02X}",
            )
            return self.readiness

        self._calibration = read_calibration(self._device)
        self._device.write_register(REG_CTRL_MEAS, CTRL_MEAS_NORMAL)
        self.readiness = ReadinessState.READY

        log.info("BMP280 ready", address=f"0x{address:02X}", chip_id=f"0x{chip_id:02X}")
        return self.readiness

    def dispose(self) -> None:
        if self._device:
            self._device.release()
            self._device = None
        self._calibration = None
        self.readiness = ReadinessState.UNINITIALIZED
        log.info("BMP280 disposed")

    @property
    def is_ready(self) -> bool:
        return self.readiness == ReadinessState.READY

    # ==================== Reads ====================

    def read_temperature(self) -> float:
        """Temperature in degrees Celsius (0.0 when not ready)."""
        if not self._check_ready("temperature"):
            return 0.0
        celsius, _ = compensate_temperature(self._read_raw(REG_TEMPERATURE_MSB), self._calibration)
        return celsius

    def read_pressure(self) -> float:
        """Pressure in hPa (0.0 when not ready or on the zero-denominator guard)."""
        if not self._check_ready("pressure"):
            return 0.0
        # one burst over 0xF7..0xFC so both samples come from the same conversion
        data = self._device.read_registers(REG_PRESSURE_MSB, 6)
        raw_pressure = raw_sample(*data[0:3])
        raw_temperature = raw_sample(*data[3:6])
        _, t_fine = compensate_temperature(raw_temperature, self._calibration)
        pa256 = compensate_pressure_pa256(raw_pressure, t_fine, self._calibration)
        if pa256 == 0:
            log.warn("BMP280 pressure guard hit, denominator is zero")
            return 0.0
        return pa256 / 256.0 / 100.0

    # ==================== Helpers ====================

    def _read_raw(self, msb_register: int) -> int:
        msb, lsb, xlsb = self._device.read_registers(msb_register, 3)
        return raw_sample(msb, lsb, xlsb)

    def _check_ready(self, what: str) -> bool:
        if self.readiness == ReadinessState.READY:
            return True
        log.warn(f"BMP280 {what} read while not ready", state=self.readiness.name)
        return False
