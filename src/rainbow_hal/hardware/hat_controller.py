"""
HatController - Rainbow HAT facade
==================================
Owns every driver and every GPIO / register-bus / duty-cycle handle.

Lifecycle:
- initialize(): lines -> buzzer -> LED strip -> BMP280 -> HT16K33 -> poll
  timers -> READY
- perform_action(): dispatches a HatAction; before READY a call is retried
  once after the cooldown, then dropped
- dispose(): cancel timers -> dispose drivers -> release lines and bus

Poll timers (buttons, temperature, pressure) run on the event loop as
independent PeriodicTasks and publish HatEvents on the EventBus.
"""

from __future__ import annotations

import asyncio
import threading
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Set

from rainbow_hal.hardware.display.ht16k33 import SegmentDisplay
from rainbow_hal.hardware.errors import BusUnavailableError, HatError
from rainbow_hal.hardware.gpio.gpio_manager_factory import create_gpio_manager
from rainbow_hal.hardware.gpio.gpio_manager_interface import IGPIOManager
from rainbow_hal.hardware.i2c.i2c_bus_factory import create_i2c_bus
from rainbow_hal.hardware.i2c.i2c_bus_interface import II2CBus
from rainbow_hal.hardware.input.button import Button
from rainbow_hal.hardware.led.apa102_strip import LedStripDriver
from rainbow_hal.hardware.output.buzzer import Buzzer
from rainbow_hal.hardware.sensor.bmp280 import EnvironmentSensor
from rainbow_hal.lifecycle.periodic_task import PeriodicTask
from rainbow_hal.lifecycle.task_registry import TaskCategory, TaskRegistry
from rainbow_hal.models.enums import BasicLedID, ButtonID, GPIOInitialState, HatAction, ReadinessState
from rainbow_hal.models.events import ButtonPressEvent, PressureMeasuredEvent, TemperatureMeasuredEvent
from rainbow_hal.models.hardware import HatConfig
from rainbow_hal.services.event_bus import EventBus
from rainbow_hal.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SYSTEM)
log_input = log.with_category(LogCategory.INPUT)
log_sensor = log.with_category(LogCategory.SENSOR)
log_shutdown = log.with_category(LogCategory.SHUTDOWN)


class ActionAttempt(Enum):
    """A not-ready action moves FIRST -> RETRY once; a not-ready RETRY is dropped."""
    FIRST = auto()
    RETRY = auto()


class HatController:
    """
    Example:
        hat = HatController(ConfigManager().load())
        hat.event_bus.subscribe(EventType.BUTTON_PRESS, on_button)
        await hat.initialize()
        hat.perform_action(HatAction.SHOW_RAINBOW)
        ...
        await hat.dispose()

    Args:
        config: HatConfig (board defaults when omitted)
        gpio: GPIO manager; created via create_gpio_manager() when omitted
        bus: Register bus; created via create_i2c_bus() when omitted
        event_bus: Outbound event channel
        loop: Event loop that owns timers and retries; defaults to the loop
            running at construction, else the one running initialize()
    """

    def __init__(
        self,
        config: Optional[HatConfig] = None,
        gpio: Optional[IGPIOManager] = None,
        bus: Optional[II2CBus] = None,
        event_bus: Optional[EventBus] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.config = config or HatConfig()
        self.event_bus = event_bus or EventBus()
        self._gpio = gpio
        self._bus = bus

        self.readiness = ReadinessState.UNINITIALIZED
        self._loop: Optional[asyncio.AbstractEventLoop] = loop or _running_loop()
        self._io_lock = threading.RLock()

        self.led_strip: Optional[LedStripDriver] = None
        self.sensor: Optional[EnvironmentSensor] = None
        self.display: Optional[SegmentDisplay] = None
        self._buttons: List[Button] = []
        self._buzzer: Optional[Buzzer] = None
        self._led_pins: Dict[BasicLedID, int] = {led.id: led.gpio for led in self.config.basic_leds}
        self._led_states: Dict[BasicLedID, bool] = {led_id: False for led_id in self._led_pins}

        self._brought_up = False
        self._disposed = False
        self._timers: List[PeriodicTask] = []
        self._retry_handles: Set[asyncio.TimerHandle] = set()
        # Actions issued before any loop was known; armed by initialize()
        self._unarmed_retries: List[HatAction] = []

        self._temperature = 0.0
        self._pressure = 0.0

        self._actions: Dict[HatAction, Callable[[], None]] = {
            HatAction.TURN_ON_RED: lambda: self._set_basic_led(BasicLedID.RED, True),
            HatAction.TURN_ON_GREEN: lambda: self._set_basic_led(BasicLedID.GREEN, True),
            HatAction.TURN_ON_BLUE: lambda: self._set_basic_led(BasicLedID.BLUE, True),
            HatAction.TURN_OFF_RED: lambda: self._set_basic_led(BasicLedID.RED, False),
            HatAction.TURN_OFF_GREEN: lambda: self._set_basic_led(BasicLedID.GREEN, False),
            HatAction.TURN_OFF_BLUE: lambda: self._set_basic_led(BasicLedID.BLUE, False),
            HatAction.TOGGLE_RED: lambda: self._toggle_basic_led(BasicLedID.RED),
            HatAction.TOGGLE_GREEN: lambda: self._toggle_basic_led(BasicLedID.GREEN),
            HatAction.TOGGLE_BLUE: lambda: self._toggle_basic_led(BasicLedID.BLUE),
            HatAction.LEDS_ON: lambda: self.led_strip.turn_on(),
            HatAction.LEDS_OFF: lambda: self.led_strip.turn_off(),
            HatAction.BUZZ: self._buzz,
            HatAction.SHOW_RAINBOW: lambda: self.led_strip.show_colors(),
            HatAction.SHOW_DEMO: self._show_demo,
        }

    # ==================== Properties ====================

    @property
    def is_ready(self) -> bool:
        return self.readiness == ReadinessState.READY

    @property
    def device_readiness(self) -> Dict[str, ReadinessState]:
        def state(driver) -> ReadinessState:
            return driver.readiness if driver else ReadinessState.UNINITIALIZED

        return {
            "led_strip": state(self.led_strip),
            "environment_sensor": state(self.sensor),
            "display": state(self.display),
        }

    @property
    def temperature(self) -> float:
        """Last measured temperature in degrees Celsius."""
        return self._temperature

    @property
    def pressure(self) -> float:
        """Last measured pressure in hPa."""
        return self._pressure

    @property
    def timers(self) -> List[PeriodicTask]:
        return list(self._timers)

    @property
    def pending_retries(self) -> int:
        return len(self._retry_handles) + len(self._unarmed_retries)

    def basic_led_state(self, led_id: BasicLedID) -> bool:
        return self._led_states[led_id]

    # ==================== Lifecycle ====================

    async def initialize(self) -> ReadinessState:
        """
        Bring up all hardware and start the poll timers.

        A missing or unresponsive register-bus device (DeviceNotFoundError,
        OSError) only fails that device.

        Raises:
            BusUnavailableError: GPIO or register-bus controller missing
            HatError: called again after dispose()
        """
        if self.readiness in (ReadinessState.INITIALIZING, ReadinessState.READY):
            return self.readiness
        if self._disposed:
            raise HatError("HatController cannot be reused after dispose")

        self.readiness = ReadinessState.INITIALIZING
        log.info("Initializing Rainbow HAT")
        with self._io_lock:
            self._loop = asyncio.get_running_loop()
            unarmed, self._unarmed_retries = self._unarmed_retries, []
        for action in unarmed:
            self._arm_retry(self._loop, action)

        self._brought_up = True
        try:
            if self._gpio is None:
                self._gpio = create_gpio_manager()
            if self._bus is None:
                self._bus = create_i2c_bus(self.config.i2c_bus)

            with self._io_lock:
                self._setup_lines()
                self.led_strip = LedStripDriver(self._gpio, self.config.led_strip)
                self.led_strip.initialize()
                self.sensor = EnvironmentSensor(self._bus, self.config.environment_sensor)
                self._initialize_device("BMP280", self.sensor)
                self.display = SegmentDisplay(self._bus, self.config.display)
                self._initialize_device("HT16K33", self.display)
        except Exception:
            self.readiness = ReadinessState.FAILED
            log.error("Rainbow HAT bring-up failed")
            raise

        self._start_timers()
        self.readiness = ReadinessState.READY

        log.info(
            "Rainbow HAT ready",
            **{name: state.name for name, state in self.device_readiness.items()}
        )
        return self.readiness

    async def dispose(self) -> None:
        """
        Tear down in order: timers, drivers, handles.

        Every timer has fully stopped before any line or bus handle is
        released.
        """
        # 1. Timers (periodic + one-shot)
        for handle in self._retry_handles:
            handle.cancel()
        self._retry_handles.clear()
        with self._io_lock:
            self._unarmed_retries.clear()
            self._disposed = True
        if not self._brought_up:
            return

        log_shutdown.info("Disposing Rainbow HAT")
        self.readiness = ReadinessState.UNINITIALIZED
        if self._buzzer:
            self._buzzer.cancel()
        await asyncio.gather(*(timer.stop() for timer in self._timers))
        self._timers.clear()

        with self._io_lock:
            # 2. Child drivers (each turns its outputs off first)
            for driver in (self.led_strip, self.sensor, self.display):
                if driver:
                    driver.dispose()

            # 3. Lines, duty-cycle output, bus
            for led_id, pin in self._led_pins.items():
                if self._gpio is None:
                    break
                if self._led_states[led_id]:
                    self._gpio.write(pin, 0)
                    self._led_states[led_id] = False
                self._gpio.release(pin)
            for button in self._buttons:
                button.release()
            self._buttons.clear()
            if self._buzzer:
                self._buzzer.stop()
                self._buzzer.release()
                self._buzzer = None
            if self._bus:
                self._bus.close()

        self.led_strip = self.sensor = self.display = None
        self._brought_up = False
        log_shutdown.info("Rainbow HAT disposed", tasks=TaskRegistry.instance().summary())

    # ==================== Actions ====================

    def perform_action(self, action: HatAction) -> bool:
        """
        Perform an action.

        Returns:
            True if the action ran now. Before READY the action is retried
            once after config.retry_cooldown and False is returned.
        """
        return self._dispatch(action, ActionAttempt.FIRST)

    def _dispatch(self, action: HatAction, attempt: ActionAttempt) -> bool:
        if self._disposed:
            log.warn("Action dropped, HAT disposed", action=_name(action))
            return False
        if self.readiness != ReadinessState.READY:
            if attempt is ActionAttempt.FIRST and self.readiness in (
                ReadinessState.UNINITIALIZED, ReadinessState.INITIALIZING
            ):
                log.warn("Action before ready, retrying once", action=_name(action), cooldown=self.config.retry_cooldown)
                self._schedule_retry(action)
            else:
                log.warn("Action dropped, HAT not ready", action=_name(action), state=self.readiness.name)
            return False

        handler = self._actions.get(action) if isinstance(action, HatAction) else None
        if handler is None:
            log.warn(f"Unknown action should be performed: {action}")
            return False

        with self._io_lock:
            # dispose() may have torn the drivers down while we waited
            if self._disposed or self.readiness != ReadinessState.READY:
                log.warn("Action dropped, HAT no longer ready", action=action.name, state=self.readiness.name)
                return False
            handler()
        log.debug("Action performed", action=action.name)
        return True

    def _schedule_retry(self, action: HatAction) -> None:
        with self._io_lock:
            loop = self._loop or _running_loop()
            if loop is None:
                if not self._disposed:
                    self._unarmed_retries.append(action)
                return
        self._arm_retry(loop, action)

    def _arm_retry(self, loop: asyncio.AbstractEventLoop, action: HatAction) -> None:
        def arm() -> None:
            if self._disposed:
                return
            handle: Optional[asyncio.TimerHandle] = None

            def fire() -> None:
                self._retry_handles.discard(handle)
                self._dispatch(action, ActionAttempt.RETRY)

            handle = loop.call_later(self.config.retry_cooldown, fire)
            self._retry_handles.add(handle)

        self._call_on_loop(loop, arm)

    # ==================== Action helpers ====================

    def _set_basic_led(self, led_id: BasicLedID, on: bool) -> None:
        self._gpio.write(self._led_pins[led_id], 1 if on else 0)
        self._led_states[led_id] = on

    def _toggle_basic_led(self, led_id: BasicLedID) -> None:
        self._set_basic_led(led_id, not self._led_states[led_id])

    def _buzz(self) -> None:
        loop = self._loop

        def start() -> None:
            # queued from another thread, so dispose() may have run meanwhile
            if self._buzzer is not None and self.is_ready:
                self._buzzer.buzz(loop)

        self._call_on_loop(loop, start)

    def _show_demo(self) -> None:
        for led_id in self._led_pins:
            self._set_basic_led(led_id, True)
        self.led_strip.show_colors()
        self.display.show(self.config.demo_text)

    # ==================== Poll ticks ====================

    def poll_buttons(self) -> Optional[ButtonID]:
        """First button reading LOW, in poll order (A, B, C)."""
        with self._io_lock:
            for button in self._buttons:
                if button.is_pressed():
                    return button.id
        return None

    async def _button_tick(self) -> None:
        button_id = self.poll_buttons()
        if button_id is None:
            return
        log_input.debug(f"'{button_id.name}'-Button tapped!")
        await self.event_bus.publish(ButtonPressEvent(button_id))

    async def _temperature_tick(self) -> None:
        with self._io_lock:
            self._temperature = self.sensor.read_temperature()
        log_sensor.info(f"Temperature: {self._temperature:.2f} C")
        await self.event_bus.publish(TemperatureMeasuredEvent(self._temperature))

    async def _pressure_tick(self) -> None:
        with self._io_lock:
            self._pressure = self.sensor.read_pressure()
        log_sensor.info(f"Pressure: {self._pressure:.2f} hPa")
        await self.event_bus.publish(PressureMeasuredEvent(self._pressure))

    # ==================== Bring-up helpers ====================

    def _setup_lines(self) -> None:
        for led_id, pin in self._led_pins.items():
            self._gpio.register_output(pin, f"led.{led_id.name.lower()}", GPIOInitialState.LOW)
        self._buttons = [Button(self._gpio, button) for button in self.config.buttons]
        self._buzzer = Buzzer(self._gpio, self.config.buzzer)
        log.info(
            "Lines ready",
            leds=len(self._led_pins),
            buttons=len(self._buttons),
            buzzer=self.config.buzzer.gpio,
        )

    def _initialize_device(self, name: str, driver) -> None:
        """Bring up one register-bus device; its own failures only fail that device."""
        try:
            driver.initialize()
        except BusUnavailableError:
            raise
        except (HatError, OSError) as e:
            driver.readiness = ReadinessState.FAILED
            log.error(
                f"{name} unavailable, continuing without it",
                error=str(e),
                error_type=type(e).__name__,
            )

    def _start_timers(self) -> None:
        polling = self.config.polling
        self._timers = [
            PeriodicTask("button-poll", polling.buttons, self._button_tick, TaskCategory.INPUT),
            PeriodicTask("temperature-poll", polling.temperature, self._temperature_tick, TaskCategory.SENSOR),
            PeriodicTask("pressure-poll", polling.pressure, self._pressure_tick, TaskCategory.SENSOR),
        ]
        for timer in self._timers:
            timer.start()

    @staticmethod
    def _call_on_loop(loop: asyncio.AbstractEventLoop, fn: Callable[[], None]) -> None:
        """Run fn on loop's thread (directly when already there)."""
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            fn()
        else:
            loop.call_soon_threadsafe(fn)


def _name(action) -> str:
    return action.name if isinstance(action, HatAction) else str(action)


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
