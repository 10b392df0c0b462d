from .gpio_manager_interface import IGPIOManager, IPWMChannel
from .gpio_manager_hardware import HardwareGPIOManager
from .gpio_manager_mock import MockGPIOManager, MockPWMChannel
from .gpio_manager_factory import create_gpio_manager


__all__ = [
    "IGPIOManager",
    "IPWMChannel",
    "HardwareGPIOManager",
    "MockGPIOManager",
    "MockPWMChannel",
    "create_gpio_manager",
]
