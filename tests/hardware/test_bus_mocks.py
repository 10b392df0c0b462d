import pytest

from rainbow_hal.hardware.errors import PinConflictError, ReleasedResourceError
from rainbow_hal.hardware.i2c.i2c_bus_mock import MockI2CBus, MockRegisterDevice
from rainbow_hal.hardware.i2c.i2c_device import I2CDevice
from rainbow_hal.models.enums import GPIOPullMode


# ==================== GPIO ====================

def test_duplicate_pin_registration_conflicts(gpio):
    gpio.register_output(6, "led.red")
    with pytest.raises(PinConflictError):
        gpio.register_input(6, "button.a")


def test_inputs_idle_high_with_pull_up(gpio):
    gpio.register_input(21, "button.a", GPIOPullMode.PULL_UP)
    gpio.register_input(20, "button.b", GPIOPullMode.PULL_DOWN)
    assert gpio.read(21) == 1
    assert gpio.read(20) == 0


def test_io_after_release_raises(gpio):
    gpio.register_output(6, "led.red")
    gpio.write(6, 1)
    gpio.release(6)

    assert gpio.is_released(6)
    with pytest.raises(ReleasedResourceError):
        gpio.write(6, 0)
    with pytest.raises(ReleasedResourceError):
        gpio.read(6)


def test_pwm_channel_released_with_pin(gpio):
    channel = gpio.register_pwm(13, "buzzer", 50)
    channel.start(5.0)
    gpio.release(13)

    assert channel.released
    with pytest.raises(ReleasedResourceError):
        channel.start(5.0)


def test_cleanup_releases_everything(gpio):
    gpio.register_output(6, "led.red")
    gpio.register_input(21, "button.a")
    gpio.cleanup()
    assert gpio.get_registry() == {}
    assert gpio.is_released(6) and gpio.is_released(21)


# ==================== I2C ====================

def test_probe_only_answers_for_attached_devices(hat_bus):
    assert hat_bus.probe(0x77)
    assert hat_bus.probe(0x70)
    assert not hat_bus.probe(0x40)


def test_register_pointer_auto_increments():
    device = MockRegisterDevice(0x10)
    bus = MockI2CBus(devices=[device])
    bus.write(0x10, bytes([0x20, 1, 2, 3]))
    assert bus.write_read(0x10, bytes([0x21]), 2) == bytes([2, 3])


def test_i2c_device_reads_little_endian(hat_bus):
    device = I2CDevice(hat_bus, 0x77)
    assert device.read_register(0xD0) == 0x58
    assert device.read_u16_le(0x88) == 27504
    assert device.read_u16_le(0x8C, signed=True) == -1000
    assert device.read_u16_le(0x8C) == 0xFC18


def test_i2c_device_after_release_raises(hat_bus):
    device = I2CDevice(hat_bus, 0x77)
    device.release()
    with pytest.raises(ReleasedResourceError):
        device.read_register(0xD0)


def test_bus_after_close_raises(hat_bus):
    hat_bus.close()
    with pytest.raises(ReleasedResourceError):
        hat_bus.probe(0x77)
    with pytest.raises(ReleasedResourceError):
        hat_bus.write(0x70, b"\x00")


def test_transaction_to_missing_device_is_os_error():
    bus = MockI2CBus()
    with pytest.raises(OSError):
        bus.write(0x70, b"\x21")
