from .i2c_bus_interface import II2CBus
from .i2c_bus_mock import MockI2CBus, MockRegisterDevice
from .i2c_device import I2CDevice
from .i2c_bus_factory import create_i2c_bus


__all__ = [
    "II2CBus",
    "MockI2CBus",
    "MockRegisterDevice",
    "I2CDevice",
    "create_i2c_bus",
]
