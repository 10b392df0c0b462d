from rainbow_hal.runtime.runtime_info import RuntimeInfo
from rainbow_hal.hardware.i2c.i2c_bus_interface import II2CBus
from rainbow_hal.hardware.i2c.i2c_bus_mock import MockI2CBus


def create_i2c_bus(bus_number: int = 1) -> II2CBus:
    if RuntimeInfo.has_i2c(bus_number):
        from rainbow_hal.hardware.i2c.i2c_bus_smbus import SMBusI2CBus
        return SMBusI2CBus(bus_number)
    else:
        return MockI2CBus.with_hat_devices(bus_number)
