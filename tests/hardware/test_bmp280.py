import pytest

from rainbow_hal.hardware.errors import DeviceNotFoundError
from rainbow_hal.hardware.i2c.i2c_bus_mock import MockI2CBus, MockRegisterDevice
from rainbow_hal.hardware.i2c.i2c_device import I2CDevice
from rainbow_hal.hardware.sensor.bmp280 import (
    EnvironmentSensor,
    compensate_pressure,
    compensate_pressure_pa256,
    compensate_temperature,
    raw_sample,
    read_calibration,
)
from rainbow_hal.models.calibration import CalibrationCoefficients
from rainbow_hal.models.enums import ReadinessState

# BMP280 datasheet worked example
DATASHEET_CALIBRATION = CalibrationCoefficients(
    dig_t1=27504, dig_t2=26435, dig_t3=-1000,
    dig_p1=36477, dig_p2=-10685, dig_p3=3024, dig_p4=2855, dig_p5=140,
    dig_p6=-7, dig_p7=15500, dig_p8=-14600, dig_p9=6000,
)
ADC_T = 519888
ADC_P = 415148


# ==================== Compensation ====================

def test_raw_sample_assembles_20_bits():
    assert raw_sample(0x7E, 0xED, 0x00) == ADC_T
    assert raw_sample(0x65, 0x5A, 0xC0) == ADC_P
    assert raw_sample(0xFF, 0xFF, 0xFF) == 0xFFFFF


def test_temperature_matches_datasheet_example():
    celsius, t_fine = compensate_temperature(ADC_T, DATASHEET_CALIBRATION)
    assert celsius == pytest.approx(25.08, abs=0.01)
    assert t_fine == pytest.approx(128422.3, abs=1.0)


def test_pressure_matches_datasheet_example():
    _, t_fine = compensate_temperature(ADC_T, DATASHEET_CALIBRATION)
    hpa = compensate_pressure(ADC_P, t_fine, DATASHEET_CALIBRATION)
    assert hpa == pytest.approx(1006.53, abs=0.01)


def test_pressure_zero_denominator_returns_zero():
    cal = CalibrationCoefficients(**{**DATASHEET_CALIBRATION.as_dict(), "dig_p1": 0})
    _, t_fine = compensate_temperature(ADC_T, cal)
    assert compensate_pressure_pa256(ADC_P, t_fine, cal) == 0
    assert compensate_pressure(ADC_P, t_fine, cal) == 0.0


def test_read_calibration_from_registers(hat_bus):
    device = I2CDevice(hat_bus, 0x77)
    assert read_calibration(device) == DATASHEET_CALIBRATION


# ==================== Driver ====================

def test_initialize_reaches_ready_and_enables_normal_mode(hat_bus):
    sensor = EnvironmentSensor(hat_bus)
    assert sensor.initialize() == ReadinessState.READY
    assert hat_bus.device(0x77).registers[0xF4] == 0x3F


def test_reads_when_ready(hat_bus):
    sensor = EnvironmentSensor(hat_bus)
    sensor.initialize()
    assert sensor.read_temperature() == pytest.approx(25.08, abs=0.01)
    assert sensor.read_pressure() == pytest.approx(1006.53, abs=0.01)


def test_pressure_is_one_burst_read(hat_bus):
    sensor = EnvironmentSensor(hat_bus)
    sensor.initialize()
    hat_bus.transactions.clear()

    sensor.read_pressure()

    assert hat_bus.transactions == [(0x77, bytes([0xF7]))]


def test_reads_before_initialize_return_zero(hat_bus):
    sensor = EnvironmentSensor(hat_bus)
    assert sensor.read_temperature() == 0.0
    assert sensor.read_pressure() == 0.0
    assert hat_bus.transactions == []


def test_signature_mismatch_marks_failed():
    bus = MockI2CBus(devices=[MockRegisterDevice.bmp280(chip_id=0x60)])
    sensor = EnvironmentSensor(bus)

    assert sensor.initialize() == ReadinessState.FAILED
    assert sensor.read_temperature() == 0.0
    assert sensor.read_pressure() == 0.0
    # control register never written
    assert bus.device(0x77).registers[0xF4] == 0x00


def test_missing_device_raises():
    sensor = EnvironmentSensor(MockI2CBus())
    with pytest.raises(DeviceNotFoundError) as exc:
        sensor.initialize()
    assert exc.value.details["address"] == "0x77"
    assert sensor.readiness == ReadinessState.FAILED


def test_dispose_returns_to_uninitialized(hat_bus):
    sensor = EnvironmentSensor(hat_bus)
    sensor.initialize()
    sensor.dispose()
    assert sensor.readiness == ReadinessState.UNINITIALIZED
    assert sensor.read_temperature() == 0.0
