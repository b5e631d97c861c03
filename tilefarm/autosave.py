"""Repeating auto-save timer on the asyncio event loop.

Only one timer is ever armed: ``start`` cancels the previous task before it
creates a new one, so reconfiguring the interval cannot leave two timers
saving side by side.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Awaitable, Callable, Optional

from .config import Config
from .logging_utils import log_error, log_info

SaveCallback = Callable[[], Awaitable[bool]]


class AutoSaveScheduler:
    """Invoke ``save`` every ``interval_ms`` until stopped."""

    def __init__(self, save: SaveCallback, default_interval_ms: Optional[int] = None):
        self._save = save
        self.default_interval_ms = (
            default_interval_ms if default_interval_ms is not None else Config.AUTOSAVE_INTERVAL_MS
        )
        self._task: Optional[asyncio.Task] = None
        self._interval_ms: Optional[int] = None
        self.saves_attempted = 0
        self.saves_succeeded = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def interval_ms(self) -> Optional[int]:
        return self._interval_ms if self.is_running else None

    def start(self, interval_ms: Optional[int] = None) -> None:
        """Arm the timer, replacing any existing schedule.

        Must be called from inside a running event loop.
        """
        interval = interval_ms if interval_ms is not None else self.default_interval_ms
        if interval <= 0:
            raise ValueError("Auto-save interval must be a positive number of milliseconds")

        self.stop()
        loop = asyncio.get_running_loop()
        self._interval_ms = interval
        self._task = loop.create_task(self._run(interval), name="tilefarm-autosave")
        log_info(f"[AutoSave] Auto-save started with {interval}ms interval")

    def stop(self) -> None:
        """Cancel the timer. Safe to call when already stopped."""
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        self._interval_ms = None
        log_info("[AutoSave] Auto-save stopped")

    async def shutdown(self) -> None:
        """Cancel and wait until the timer task has fully finished."""
        task = self._task
        self.stop()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _run(self, interval_ms: int) -> None:
        while True:
            await asyncio.sleep(interval_ms / 1000)
            self.saves_attempted += 1
            try:
                if await self._save():
                    self.saves_succeeded += 1
            except Exception as exc:
                # A broken save callback must not kill the timer.
                log_error(f"[AutoSave] Auto-save failed: {exc}")
