"""Tests for the repeating auto-save timer."""

import asyncio

import pytest

from tilefarm.autosave import AutoSaveScheduler


class CountingSave:
    def __init__(self, result: bool = True, fail: bool = False):
        self.calls = 0
        self.result = result
        self.fail = fail

    async def __call__(self) -> bool:
        self.calls += 1
        if self.fail:
            raise RuntimeError("boom")
        return self.result


@pytest.mark.asyncio
async def test_timer_saves_repeatedly_until_stopped():
    save = CountingSave()
    scheduler = AutoSaveScheduler(save, default_interval_ms=10)

    scheduler.start()
    assert scheduler.is_running is True
    assert scheduler.interval_ms == 10
    await asyncio.sleep(0.08)
    await scheduler.shutdown()

    assert scheduler.is_running is False
    assert save.calls >= 2
    assert scheduler.saves_succeeded == save.calls

    calls_after_stop = save.calls
    await asyncio.sleep(0.03)
    assert save.calls == calls_after_stop


@pytest.mark.asyncio
async def test_restart_replaces_previous_timer():
    save = CountingSave()
    scheduler = AutoSaveScheduler(save, default_interval_ms=10)

    scheduler.start()
    first = scheduler._task
    scheduler.start(interval_ms=1000)

    await asyncio.sleep(0.01)
    assert first.cancelled() or first.done()
    assert scheduler.interval_ms == 1000

    # Only the long timer remains, so nothing fires in the short window.
    await asyncio.sleep(0.05)
    assert save.calls == 0
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_stop_is_idempotent():
    scheduler = AutoSaveScheduler(CountingSave(), default_interval_ms=10)

    scheduler.stop()
    scheduler.start()
    scheduler.stop()
    scheduler.stop()
    await scheduler.shutdown()

    assert scheduler.is_running is False
    assert scheduler.interval_ms is None


@pytest.mark.asyncio
async def test_failing_save_does_not_kill_timer():
    save = CountingSave(fail=True)
    scheduler = AutoSaveScheduler(save, default_interval_ms=10)

    scheduler.start()
    await asyncio.sleep(0.06)

    assert scheduler.is_running is True
    assert save.calls >= 2
    assert scheduler.saves_succeeded == 0
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_rejects_non_positive_interval():
    scheduler = AutoSaveScheduler(CountingSave(), default_interval_ms=10)
    with pytest.raises(ValueError):
        scheduler.start(interval_ms=0)
    assert scheduler.is_running is False


@pytest.mark.asyncio
async def test_explicit_zero_default_is_not_replaced_by_config():
    scheduler = AutoSaveScheduler(CountingSave(), default_interval_ms=0)

    assert scheduler.default_interval_ms == 0
    with pytest.raises(ValueError):
        scheduler.start()
    assert scheduler.is_running is False
