from enum import Enum, auto


class EventSource(Enum):
    """Event source identifiers"""
    BUTTONS = auto()            # Button poll timer
    ENVIRONMENT_SENSOR = auto() # Temperature / pressure poll timers
