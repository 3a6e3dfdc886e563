"""
revival/timers.py
Clock and cancellable one-shot timers for the Dead Chat engine.

The engine only wakes up on inbound Discord events and on the hint timer
armed here. A HintTimer holds at most one pending callback; arming it again
invalidates the previous one before the old task can observe anything.
"""

from __future__ import annotations
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

log = logging.getLogger("deadchat.timers")


class Clock:
    """Wall clock in aware UTC, same base as discord.Message.created_at."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: datetime):
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta) -> None:
        self._now += delta


class HintTimer:
    """Single-slot cancel-and-replace timer."""

    def __init__(self) -> None:
        self._task: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def generation(self) -> int:
        return self._generation

    def arm(self, delay: timedelta, callback: Callable[[], Awaitable[None]]) -> int:
        """
        Schedule `callback` after `delay`, replacing any pending timer.
        Returns the generation token of the new timer.
        """
        self.cancel()
        self._generation += 1
        generation = self._generation
        self._task = asyncio.create_task(self._run(generation, delay, callback))
        return generation

    def cancel(self) -> None:
        # Bumping the generation invalidates a task that already woke up
        # but has not reached its freshness check yet.
        if self._task is not None:
            self._task.cancel()
            self._task = None
            self._generation += 1

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _run(self, generation: int, delay: timedelta, callback: Callable[[], Awaitable[None]]) -> None:
        try:
            await asyncio.sleep(max(0.0, delay.total_seconds()))
        except asyncio.CancelledError:
            return
        if not self.is_current(generation):
            log.debug("Stale hint timer (gen %d) woke up, ignoring.", generation)
            return
        self._task = None
        try:
            await callback()
        except Exception as e:
            log.error("Hint timer callback failed: %s", e)
