import asyncio

import pytest

from rainbow_hal.lifecycle.periodic_task import PeriodicTask
from rainbow_hal.lifecycle.task_registry import TaskCategory, TaskRegistry


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        PeriodicTask("bad", 0, lambda: None)


async def test_sync_callback_ticks():
    calls = []
    task = PeriodicTask("sync", 0.01, lambda: calls.append(1), TaskCategory.INPUT)
    task.start()
    await asyncio.sleep(0.06)
    await task.stop()

    assert len(calls) >= 2
    assert task.ticks == len(calls)
    assert not task.running


async def test_slow_callback_never_overlaps():
    active = 0
    max_active = 0

    async def slow():
        nonlocal active, max_active
        active += 1
        max_active = max(max_active, active)
        try:
            await asyncio.sleep(0.03)
        finally:
            active -= 1

    task = PeriodicTask("slow", 0.005, slow)
    task.start()
    await asyncio.sleep(0.12)
    await task.stop()

    assert max_active == 1
    assert active == 0


async def test_failing_callback_keeps_running():
    calls = []

    def flaky():
        calls.append(1)
        raise RuntimeError("sensor glitch")

    task = PeriodicTask("flaky", 0.01, flaky)
    task.start()
    await asyncio.sleep(0.06)
    assert task.running
    await task.stop()

    assert len(calls) >= 2
    assert TaskRegistry.instance().failed() == []


async def test_stop_waits_for_exit_and_no_more_ticks():
    calls = []
    task = PeriodicTask("stopper", 0.01, lambda: calls.append(1))
    task.start()
    await asyncio.sleep(0.03)
    await task.stop()
    seen = len(calls)

    await asyncio.sleep(0.03)

    assert len(calls) == seen
    assert TaskRegistry.instance().active() == []
    assert len(TaskRegistry.instance().cancelled()) == 1


async def test_start_twice_keeps_one_task():
    task = PeriodicTask("twice", 0.01, lambda: None)
    task.start()
    task.start()
    assert len(TaskRegistry.instance().active()) == 1
    assert len(TaskRegistry.instance().list_all()) == 1
    await task.stop()


async def test_stop_before_start_is_noop():
    task = PeriodicTask("idle", 0.01, lambda: None)
    await task.stop()
    assert not task.running


async def test_registry_summary_counts_cancelled():
    task = PeriodicTask("summary", 0.01, lambda: None, TaskCategory.SENSOR)
    task.start()
    await task.stop()
    assert TaskRegistry.instance().summary() == "Tasks: total=1, running=0, failed=0, cancelled=1"
