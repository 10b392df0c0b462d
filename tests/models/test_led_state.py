import math

import pytest

from rainbow_hal.models.led import LedState, brightness_byte, quantize_brightness


@pytest.mark.parametrize("brightness", [i / 100 for i in range(101)])
def test_brightness_byte_matches_quantization(brightness):
    assert brightness_byte(brightness) == 0xE0 | min(31, math.floor(31 * brightness))


@pytest.mark.parametrize(
    "brightness, expected",
    [
        (-0.5, 0xE0),
        (-100, 0xE0),
        (1.0, 0xFF),
        (1.7, 0xFF),
        (42, 0xFF),
    ],
)
def test_out_of_range_brightness_is_clamped(brightness, expected):
    assert brightness_byte(brightness) == expected


def test_quantize_half_brightness():
    assert quantize_brightness(0.5) == 15


def test_led_state_clamps_channels():
    led = LedState(brightness=2.0, red=300, green=-5, blue=128)
    assert led.brightness == 1.0
    assert (led.red, led.green, led.blue) == (255, 0, 128)


def test_set_rgb_hex():
    led = LedState()
    led.set_rgb_hex("#ee4035", 0.1)
    assert (led.red, led.green, led.blue) == (0xEE, 0x40, 0x35)
    assert led.brightness_byte == 0xE3


def test_set_rgb_hex_rejects_garbage():
    led = LedState()
    with pytest.raises(ValueError):
        led.set_rgb_hex("#zzzzzz")
    with pytest.raises(ValueError):
        led.set_rgb_hex("#fff")


def test_turn_on_and_off():
    led = LedState()
    assert not led.is_on
    led.turn_on()
    assert led.is_on
    assert led.brightness_byte == 0xFF
    led.turn_off()
    assert not led.is_on
    assert (led.red, led.green, led.blue, led.brightness) == (0, 0, 0, 0.0)
