import asyncio
import threading
import time

import pytest

from conftest import decode_apa102_frames, split_apa102_frame
from rainbow_hal.hardware.errors import BusUnavailableError, HatError, ReleasedResourceError
from rainbow_hal.hardware.gpio.gpio_manager_mock import MockGPIOManager
from rainbow_hal.hardware.hat_controller import HatController
from rainbow_hal.hardware.i2c.i2c_bus_mock import MockI2CBus, MockRegisterDevice
from rainbow_hal.lifecycle.task_registry import TaskRegistry
from rainbow_hal.models.enums import BasicLedID, ButtonID, HatAction, ReadinessState
from rainbow_hal.models.events import EventType

RED, GREEN, BLUE = 6, 19, 26
BUTTON_A, BUTTON_B, BUTTON_C = 21, 20, 16
BUZZER = 13


@pytest.fixture
async def hat(fast_config, gpio, hat_bus):
    controller = HatController(fast_config, gpio=gpio, bus=hat_bus)
    await controller.initialize()
    yield controller
    await controller.dispose()


class FlakySensorBus(MockI2CBus):
    """HAT bus whose BMP280 answers the probe but NAKs the calibration read."""

    def write_read(self, address, data, length):
        if address == 0x77 and data[0] == 0x88:
            raise OSError(121, "Remote I/O error")
        return super().write_read(address, data, length)


class RecordingGPIO(MockGPIOManager):
    """Remembers whether any poll timer was still running at each release."""

    def __init__(self):
        super().__init__()
        self.timers = []
        self.released_while_running = []

    def release(self, pin):
        if any(timer.running for timer in self.timers):
            self.released_while_running.append(pin)
        super().release(pin)


# ==================== Bring-up ====================

async def test_initialize_reaches_ready(hat):
    assert hat.is_ready
    assert hat.device_readiness == {
        "led_strip": ReadinessState.READY,
        "environment_sensor": ReadinessState.READY,
        "display": ReadinessState.READY,
    }
    assert [timer.running for timer in hat.timers] == [True, True, True]


async def test_missing_display_does_not_stop_bring_up(fast_config, gpio):
    bus = MockI2CBus(devices=[MockRegisterDevice.bmp280()])
    controller = HatController(fast_config, gpio=gpio, bus=bus)

    await controller.initialize()

    assert controller.is_ready
    assert controller.device_readiness["display"] == ReadinessState.FAILED
    assert controller.perform_action(HatAction.SHOW_DEMO)
    assert bus.transactions == [t for t in bus.transactions if t[0] == 0x77]
    await controller.dispose()


async def test_missing_bus_propagates(fast_config, gpio, monkeypatch):
    def no_bus(bus_number=1):
        raise BusUnavailableError("no bus", details={"bus": bus_number})

    monkeypatch.setattr("rainbow_hal.hardware.hat_controller.create_i2c_bus", no_bus)
    controller = HatController(fast_config, gpio=gpio)

    with pytest.raises(BusUnavailableError):
        await controller.initialize()
    assert controller.readiness == ReadinessState.FAILED
    assert controller.timers == []


async def test_sensor_io_error_only_fails_the_sensor(fast_config, gpio):
    bus = FlakySensorBus(devices=[MockRegisterDevice.bmp280(), MockRegisterDevice.ht16k33()])
    controller = HatController(fast_config, gpio=gpio, bus=bus)

    assert await controller.initialize() == ReadinessState.READY

    assert controller.device_readiness == {
        "led_strip": ReadinessState.READY,
        "environment_sensor": ReadinessState.FAILED,
        "display": ReadinessState.READY,
    }
    assert [timer.running for timer in controller.timers] == [True, True, True]
    assert controller.sensor.read_temperature() == 0.0
    assert controller.perform_action(HatAction.SHOW_DEMO)
    assert controller.display.text == "BEAR"
    await controller.dispose()


# ==================== Actions ====================

async def test_basic_led_actions(hat, gpio):
    assert hat.perform_action(HatAction.TURN_ON_RED)
    assert gpio.value(RED) == 1
    assert hat.basic_led_state(BasicLedID.RED)

    assert hat.perform_action(HatAction.TURN_OFF_RED)
    assert gpio.value(RED) == 0

    hat.perform_action(HatAction.TOGGLE_GREEN)
    assert gpio.value(GREEN) == 1
    hat.perform_action(HatAction.TOGGLE_GREEN)
    assert gpio.value(GREEN) == 0


async def test_strip_actions(hat):
    hat.perform_action(HatAction.LEDS_ON)
    assert all(led.is_on for led in hat.led_strip.leds)

    hat.perform_action(HatAction.LEDS_OFF)
    assert not any(led.is_on for led in hat.led_strip.leds)

    hat.perform_action(HatAction.SHOW_RAINBOW)
    assert hat.led_strip.leds[0].red == 0xEE


async def test_show_demo(hat, gpio):
    hat.perform_action(HatAction.SHOW_DEMO)

    assert [gpio.value(pin) for pin in (RED, GREEN, BLUE)] == [1, 1, 1]
    assert hat.display.text == "BEAR"
    assert all(led.is_on for led in hat.led_strip.leds)


async def test_buzz_stops_after_duration(hat, gpio):
    channel = gpio.pwm_channels[BUZZER]

    assert hat.perform_action(HatAction.BUZZ)
    assert channel.active

    await asyncio.sleep(0.08)

    assert not channel.active
    assert channel.history == [("start", 5.0), ("stop", 0.0)]


async def test_unknown_action_is_ignored(hat):
    assert not hat.perform_action("JUMP")
    assert hat.pending_retries == 0


# ==================== Deferred retry ====================

async def test_action_before_ready_is_retried_once(fast_config, gpio, hat_bus):
    controller = HatController(fast_config, gpio=gpio, bus=hat_bus)

    assert not controller.perform_action(HatAction.TURN_ON_BLUE)
    assert controller.pending_retries == 1

    await controller.initialize()
    await asyncio.sleep(fast_config.retry_cooldown + 0.05)

    assert controller.pending_retries == 0
    assert controller.basic_led_state(BasicLedID.BLUE)
    assert gpio.value(BLUE) == 1
    await controller.dispose()


async def test_retry_is_dropped_when_still_not_ready(fast_config, gpio, hat_bus):
    controller = HatController(fast_config, gpio=gpio, bus=hat_bus)

    controller.perform_action(HatAction.TURN_ON_BLUE)
    await asyncio.sleep(fast_config.retry_cooldown + 0.05)

    assert controller.pending_retries == 0
    assert not controller.basic_led_state(BasicLedID.BLUE)
    assert BLUE not in gpio.get_registry()


async def test_dispose_cancels_pending_retry(fast_config, gpio, hat_bus):
    controller = HatController(fast_config, gpio=gpio, bus=hat_bus)
    controller.perform_action(HatAction.TURN_ON_RED)

    await controller.dispose()
    await asyncio.sleep(fast_config.retry_cooldown + 0.05)

    assert controller.pending_retries == 0
    assert RED not in gpio.get_registry()


# ==================== Events ====================

async def test_first_pressed_button_wins(hat, gpio):
    gpio.set_input(BUTTON_B, 0)
    gpio.set_input(BUTTON_C, 0)
    assert hat.poll_buttons() == ButtonID.B

    gpio.set_input(BUTTON_A, 0)
    assert hat.poll_buttons() == ButtonID.A


async def test_no_button_pressed(hat):
    assert hat.poll_buttons() is None


async def test_button_press_is_published(hat, gpio):
    pressed = []
    hat.event_bus.subscribe(EventType.BUTTON_PRESS, lambda e: pressed.append(e.button))

    await asyncio.sleep(0.03)
    assert pressed == []

    gpio.set_input(BUTTON_C, 0)
    await asyncio.sleep(0.05)

    assert pressed
    assert set(pressed) == {ButtonID.C}


async def test_measurements_are_published(hat):
    temperatures = []
    pressures = []
    hat.event_bus.subscribe(EventType.TEMPERATURE_MEASURED, lambda e: temperatures.append(e.celsius))
    hat.event_bus.subscribe(EventType.PRESSURE_MEASURED, lambda e: pressures.append(e.hpa))

    await asyncio.sleep(0.08)

    assert temperatures and pressures
    assert temperatures[-1] == pytest.approx(25.08, abs=0.01)
    assert pressures[-1] == pytest.approx(1006.53, abs=0.01)
    assert hat.temperature == pytest.approx(25.08, abs=0.01)
    assert hat.pressure == pytest.approx(1006.53, abs=0.01)


# ==================== Disposal ====================

async def test_timers_stop_before_any_release(fast_config, hat_bus):
    gpio = RecordingGPIO()
    controller = HatController(fast_config, gpio=gpio, bus=hat_bus)
    await controller.initialize()
    gpio.timers = controller.timers
    await asyncio.sleep(0.03)

    await controller.dispose()

    assert gpio.released_while_running == []
    assert all(not timer.running for timer in gpio.timers)
    assert TaskRegistry.instance().active() == []
    assert TaskRegistry.instance().failed() == []


async def test_dispose_leaves_hardware_dark_and_released(fast_config, gpio, hat_bus):
    controller = HatController(fast_config, gpio=gpio, bus=hat_bus)
    await controller.initialize()
    controller.perform_action(HatAction.SHOW_DEMO)
    controller.perform_action(HatAction.BUZZ)

    await controller.dispose()

    assert [gpio.value(pin) for pin in (RED, GREEN, BLUE)] == [0, 0, 0]
    _, leds, _ = split_apa102_frame(decode_apa102_frames(gpio.write_log)[-1])
    assert all(led[0] == 0xE0 for led in leds)
    assert hat_bus.transactions[-1] == (0x70, bytes(9))
    assert hat_bus.closed
    assert gpio.get_registry() == {}
    assert not gpio.pwm_channels[BUZZER].active

    with pytest.raises(ReleasedResourceError):
        gpio.write(RED, 1)
    with pytest.raises(ReleasedResourceError):
        hat_bus.probe(0x77)


async def test_pending_buzzer_stop_does_not_fire_after_dispose(fast_config, gpio, hat_bus):
    controller = HatController(fast_config, gpio=gpio, bus=hat_bus)
    await controller.initialize()
    controller.perform_action(HatAction.BUZZ)

    await controller.dispose()
    await asyncio.sleep(0.06)

    channel = gpio.pwm_channels[BUZZER]
    assert channel.released
    assert channel.history == [("start", 5.0), ("stop", 0.0)]


async def test_controller_is_single_use(fast_config, gpio, hat_bus):
    controller = HatController(fast_config, gpio=gpio, bus=hat_bus)
    await controller.initialize()
    await controller.dispose()

    assert not controller.perform_action(HatAction.LEDS_ON)
    assert controller.pending_retries == 0
    with pytest.raises(HatError):
        await controller.initialize()


async def test_dispose_without_initialize_is_safe(fast_config, gpio, hat_bus):
    controller = HatController(fast_config, gpio=gpio, bus=hat_bus)
    await controller.dispose()
    assert not hat_bus.closed


# ==================== Worker threads ====================

async def test_action_from_worker_thread_before_ready_is_retried(fast_config, gpio, hat_bus):
    controller = HatController(fast_config, gpio=gpio, bus=hat_bus)
    worker = threading.Thread(target=controller.perform_action, args=(HatAction.TURN_ON_BLUE,))
    worker.start()
    worker.join()

    # retry is armed on the controller's loop
    await asyncio.sleep(0)
    assert controller.pending_retries == 1

    await controller.initialize()
    await asyncio.sleep(fast_config.retry_cooldown + 0.05)

    assert controller.pending_retries == 0
    assert gpio.value(BLUE) == 1
    await controller.dispose()


def test_action_before_any_loop_is_armed_by_initialize(fast_config, gpio, hat_bus):
    controller = HatController(fast_config, gpio=gpio, bus=hat_bus)

    assert not controller.perform_action(HatAction.TURN_ON_GREEN)
    assert controller.pending_retries == 1

    async def run():
        await controller.initialize()
        await asyncio.sleep(fast_config.retry_cooldown + 0.05)
        lit = controller.basic_led_state(BasicLedID.GREEN)
        await controller.dispose()
        return lit

    assert asyncio.run(run())
    assert controller.pending_retries == 0


async def test_action_waiting_on_lock_is_dropped_after_dispose(hat):
    results = []
    errors = []

    def worker():
        try:
            results.append(hat.perform_action(HatAction.LEDS_ON))
        except Exception as e:
            errors.append(e)

    # hold the I/O lock so the worker passes the readiness check, then blocks
    with hat._io_lock:
        thread = threading.Thread(target=worker)
        thread.start()
        time.sleep(0.05)
        await hat.dispose()
    thread.join(timeout=1.0)

    assert errors == []
    assert results == [False]
