from .config_manager import ConfigManager, FACTORY_DEFAULTS_PATH
from .hardware_config_parser import HardwareConfigParser


__all__ = ["ConfigManager", "FACTORY_DEFAULTS_PATH", "HardwareConfigParser"]
