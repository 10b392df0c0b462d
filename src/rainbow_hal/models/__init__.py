from rainbow_hal.models.enums import (
    LogLevel,
    LogCategory,
    GPIOPullMode,
    GPIOInitialState,
    ReadinessState,
    ButtonID,
    BasicLedID,
    HatAction,
)
from rainbow_hal.models.led import LedState
from rainbow_hal.models.calibration import CalibrationCoefficients
from rainbow_hal.models.hardware import (
    HatConfig,
    LedStripConfig,
    BasicLedConfig,
    ButtonConfig,
    BuzzerConfig,
    EnvironmentSensorConfig,
    DisplayConfig,
    PollingConfig,
)

__all__ = [
    "LogLevel",
    "LogCategory",
    "GPIOPullMode",
    "GPIOInitialState",
    "ReadinessState",
    "ButtonID",
    "BasicLedID",
    "HatAction",
    "LedState",
    "CalibrationCoefficients",
    "HatConfig",
    "LedStripConfig",
    "BasicLedConfig",
    "ButtonConfig",
    "BuzzerConfig",
    "EnvironmentSensorConfig",
    "DisplayConfig",
    "PollingConfig",
]
