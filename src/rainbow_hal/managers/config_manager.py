"""
Config Manager

Loads hardware.yaml into a typed HatConfig, falling back to the packaged
factory defaults when the requested file is missing or malformed.
"""

import yaml
from pathlib import Path
from typing import Optional, Union

from rainbow_hal.managers.hardware_config_parser import HardwareConfigParser
from rainbow_hal.models.hardware import HatConfig
from rainbow_hal.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CONFIG)

FACTORY_DEFAULTS_PATH = Path(__file__).resolve().parent.parent / "config" / "hardware.yaml"


class ConfigManager:
    """
    Example:
        config = ConfigManager("/etc/rainbow_hal/hardware.yaml").load()
        controller = HatController(config)
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        defaults_path: Union[str, Path] = FACTORY_DEFAULTS_PATH,
    ):
        self.config_path = Path(config_path) if config_path else Path(defaults_path)
        self.factory_defaults_path = Path(defaults_path)
        self.data: dict = {}
        self.config: Optional[HatConfig] = None

    def load(self) -> HatConfig:
        """
        Load and parse the YAML configuration

        Returns:
            HatConfig

        Raises:
            Whatever the factory defaults raise if they too cannot be loaded
        """
        try:
            self.data = self._read(self.config_path)
            self.config = HardwareConfigParser(self.data).parse()
            log.info("Configuration loaded", path=str(self.config_path))

        except (OSError, yaml.YAMLError, ValueError, TypeError, KeyError, AttributeError) as ex:
            log.error(f"Failed to load {self.config_path.name}", error=str(ex), error_type=type(ex).__name__)
            log.warn("Falling back to factory defaults")

            self.data = self._read(self.factory_defaults_path)
            self.config = HardwareConfigParser(self.data).parse()

        return self.config

    @staticmethod
    def _read(path: Path) -> dict:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is None:
            raise ValueError(f"{path.name} is empty")
        return data
