"""Rest countdown between sets."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from liftlog.duration import format_rest_time

log = logging.getLogger("liftlog.rest_timer")


class RestTimer:
    """A single countdown. Starting again replaces the running one.

    ``on_complete`` fires once when the countdown reaches zero, after which the
    timer is inactive again (``remaining is None``).
    """

    def __init__(self, on_complete: Optional[Callable[[], None]] = None, interval: float = 1.0):
        self.on_complete = on_complete
        self.interval = interval
        self.remaining: Optional[int] = None
        self.started_at: Optional[float] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_active(self) -> bool:
        return self.remaining is not None

    @property
    def display(self) -> Optional[str]:
        return format_rest_time(self.remaining) if self.remaining is not None else None

    def start(self, seconds: int) -> None:
        """Start counting down from ``seconds``.

        Outside a running event loop nothing ticks on its own; the owner drives
        the countdown with ``tick()``.
        """
        if seconds <= 0:
            raise ValueError("rest time must be positive")
        self._cancel_task()
        self.remaining = int(seconds)
        self.started_at = time.monotonic()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.debug(f"Rest timer set to {seconds}s without an event loop")
            return
        self._task = loop.create_task(self._run())
        log.debug(f"Rest timer started for {seconds}s")

    def pause(self) -> None:
        self._cancel_task()
        self.remaining = None
        self.started_at = None

    def tick(self) -> None:
        """Advance one second; completes the countdown when it hits zero."""
        if self.remaining is None:
            return
        if self.remaining <= 1:
            self.remaining = None
            self.started_at = None
            if self.on_complete:
                self.on_complete()
            return
        self.remaining -= 1

    async def _run(self) -> None:
        while self.remaining is not None:
            await asyncio.sleep(self.interval)
            self.tick()
        self._task = None

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
