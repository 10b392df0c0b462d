import pytest

from rainbow_hal.hardware.gpio.gpio_manager_mock import MockGPIOManager
from rainbow_hal.hardware.i2c.i2c_bus_mock import MockI2CBus
from rainbow_hal.lifecycle.task_registry import TaskRegistry
from rainbow_hal.models.hardware import HatConfig, PollingConfig, BuzzerConfig


@pytest.fixture(autouse=True)
def fresh_task_registry():
    """Each test starts with an empty task registry."""
    TaskRegistry._instance = None
    yield
    TaskRegistry._instance = None


@pytest.fixture
def gpio():
    return MockGPIOManager()


@pytest.fixture
def hat_bus():
    """Register bus with a BMP280 (datasheet example values) and an HT16K33."""
    return MockI2CBus.with_hat_devices()


@pytest.fixture
def fast_config():
    """Board layout with short timers so controller tests run quickly."""
    return HatConfig(
        polling=PollingConfig(buttons=0.01, temperature=0.02, pressure=0.02),
        buzzer=BuzzerConfig(duration=0.03),
        retry_cooldown=0.05,
    )


def decode_apa102_frames(write_log, data_pin=10, clock_pin=11, cs_pin=8):
    """
    Replay (pin, value) writes and sample the data line on every rising
    clock edge. One list of bits per chip-select LOW..HIGH window.
    """
    frames = []
    bits = None
    data = 0
    for pin, value in write_log:
        if pin == data_pin:
            data = value
        elif pin == clock_pin and value == 1 and bits is not None:
            bits.append(data)
        elif pin == cs_pin:
            if value == 0:
                bits = []
            elif bits is not None:
                frames.append(bits)
                bits = None
    return frames


def bits_to_bytes(bits):
    out = []
    for i in range(0, len(bits), 8):
        byte = 0
        for bit in bits[i:i + 8]:
            byte = (byte << 1) | bit
        out.append(byte)
    return out


def split_apa102_frame(bits, led_count=7, start_pulses=36, end_pulses=32):
    """(start bits, per-LED 4-byte lists, end bits)"""
    start = bits[:start_pulses]
    payload = bits[start_pulses:start_pulses + 32 * led_count]
    end = bits[start_pulses + 32 * led_count:]
    data = bits_to_bytes(payload)
    leds = [data[i:i + 4] for i in range(0, len(data), 4)]
    assert len(end) == end_pulses
    return start, leds, end
