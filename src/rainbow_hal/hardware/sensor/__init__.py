from .bmp280 import (
    EnvironmentSensor,
    compensate_temperature,
    compensate_pressure,
    compensate_pressure_pa256,
    raw_sample,
    read_calibration,
)


__all__ = [
    "EnvironmentSensor",
    "compensate_temperature",
    "compensate_pressure",
    "compensate_pressure_pa256",
    "raw_sample",
    "read_calibration",
]
