import pytest
import yaml

from rainbow_hal.hardware.errors import PinConflictError
from rainbow_hal.managers.config_manager import ConfigManager, FACTORY_DEFAULTS_PATH
from rainbow_hal.managers.hardware_config_parser import HardwareConfigParser
from rainbow_hal.models.enums import ButtonID
from rainbow_hal.models.hardware import HatConfig


def _write(tmp_path, data):
    path = tmp_path / "hardware.yaml"
    path.write_text(yaml.safe_dump(data) if not isinstance(data, str) else data, encoding="utf-8")
    return path


def test_factory_defaults_match_board_layout():
    assert FACTORY_DEFAULTS_PATH.exists()
    assert ConfigManager().load() == HatConfig()


def test_missing_file_falls_back_to_defaults(tmp_path):
    config = ConfigManager(tmp_path / "nope.yaml").load()
    assert config == HatConfig()


def test_malformed_yaml_falls_back_to_defaults(tmp_path):
    path = _write(tmp_path, "led_strip: [unclosed\n  : :")
    assert ConfigManager(path).load() == HatConfig()


def test_empty_file_falls_back_to_defaults(tmp_path):
    path = _write(tmp_path, "")
    assert ConfigManager(path).load() == HatConfig()


def test_custom_values(tmp_path):
    path = _write(tmp_path, {
        "buzzer": {"gpio": 12, "duration": 0.2},
        "polling": {"buttons": 0.1},
        "display": {"brightness": 4},
        "actions": {"demo_text": "HI"},
    })

    config = ConfigManager(path).load()

    assert config.buzzer.gpio == 12
    assert config.buzzer.duration == 0.2
    assert config.polling.buttons == 0.1
    assert config.polling.temperature == 5.0
    assert config.display.brightness == 4
    assert config.demo_text == "HI"
    assert config.led_strip == HatConfig().led_strip


def test_pin_conflict_in_custom_file_falls_back(tmp_path):
    path = _write(tmp_path, {"buzzer": {"gpio": 6}})
    assert ConfigManager(path).load() == HatConfig()


def test_parser_rejects_duplicate_pins():
    with pytest.raises(PinConflictError) as exc:
        HardwareConfigParser({"buttons": [{"id": "A", "gpio": 10}]}).parse()
    assert exc.value.details == {"pin": 10}


def test_parser_skips_invalid_button_entries():
    config = HardwareConfigParser({
        "buttons": [{"id": "Z", "gpio": 5}, {"id": "b", "gpio": 20}],
    }).parse()
    assert [b.id for b in config.buttons] == [ButtonID.B]


def test_parser_requires_mapping():
    with pytest.raises(ValueError):
        HardwareConfigParser(["not", "a", "mapping"])


def test_demo_text_longer_than_display_is_rejected():
    with pytest.raises(ValueError):
        HatConfig(demo_text="RAINBOW")
