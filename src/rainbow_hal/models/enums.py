"""
Enums for the Rainbow HAT driver layer
"""

from enum import Enum, auto


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Configuration loading, validation
    HARDWARE = auto()    # GPIO, register bus, duty-cycle outputs
    LED = auto()         # APA102 strip and basic LEDs
    SENSOR = auto()      # BMP280 temperature / pressure
    DISPLAY = auto()     # HT16K33 segment display
    INPUT = auto()       # Button polling
    EVENT = auto()       # Event bus events and handling
    TASK = auto()        # Periodic and one-shot timers
    SYSTEM = auto()      # Startup, readiness, errors
    SHUTDOWN = auto()

    GENERAL = auto()    # Default general category


class GPIOPullMode(Enum):
    """GPIO pull-up/down resistor configuration"""
    PULL_UP = auto()     # Internal pull-up resistor (pin reads HIGH when open)
    PULL_DOWN = auto()   # Internal pull-down resistor (pin reads LOW when open)
    NO_PULL = auto()     # No pull resistor (floating)


class GPIOInitialState(Enum):
    """GPIO output pin initial state"""
    LOW = auto()         # Start LOW (0V)
    HIGH = auto()        # Start HIGH (3.3V)


class ReadinessState(Enum):
    """
    Device lifecycle

    Only READY gives public reads/writes defined behaviour. Calls while
    INITIALIZING are deferred by the controller, calls after FAILED are
    logged no-ops.
    """
    UNINITIALIZED = auto()
    INITIALIZING = auto()
    READY = auto()
    FAILED = auto()


class ButtonID(Enum):
    """Capacitive buttons, in poll order"""
    A = auto()
    B = auto()
    C = auto()


class BasicLedID(Enum):
    """Single-colour LEDs above the buttons"""
    RED = auto()
    GREEN = auto()
    BLUE = auto()


class HatAction(Enum):
    """Actions accepted by HatController.perform_action()"""
    TURN_ON_RED = auto()
    TURN_ON_GREEN = auto()
    TURN_ON_BLUE = auto()
    TURN_OFF_RED = auto()
    TURN_OFF_GREEN = auto()
    TURN_OFF_BLUE = auto()
    TOGGLE_RED = auto()
    TOGGLE_GREEN = auto()
    TOGGLE_BLUE = auto()
    LEDS_ON = auto()        # APA102 strip fully on
    LEDS_OFF = auto()       # APA102 strip fully off
    BUZZ = auto()
    SHOW_RAINBOW = auto()
    SHOW_DEMO = auto()
