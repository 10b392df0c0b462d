# factory.py
from rainbow_hal.runtime.runtime_info import RuntimeInfo
from rainbow_hal.hardware.gpio.gpio_manager_interface import IGPIOManager
from rainbow_hal.hardware.gpio.gpio_manager_hardware import HardwareGPIOManager
from rainbow_hal.hardware.gpio.gpio_manager_mock import MockGPIOManager

def create_gpio_manager() -> 'IGPIOManager':
    if RuntimeInfo.has_gpio():
        return HardwareGPIOManager()
    else:
        return MockGPIOManager()
