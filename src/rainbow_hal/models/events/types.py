from enum import Enum, auto


class EventType(Enum):
    # Input
    BUTTON_PRESS = auto()

    # Environment sensor
    TEMPERATURE_MEASURED = auto()
    PRESSURE_MEASURED = auto()
