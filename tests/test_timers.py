from __future__ import annotations

import asyncio
import unittest
from datetime import datetime
from datetime import timedelta
from datetime import timezone

from revival.timers import FrozenClock
from revival.timers import HintTimer

TICK = timedelta(milliseconds=10)


class FrozenClockTests(unittest.TestCase):
    def test_advance(self):
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        clock = FrozenClock(start)
        clock.advance(timedelta(minutes=5))
        self.assertEqual(clock.now(), start + timedelta(minutes=5))


class HintTimerTests(unittest.IsolatedAsyncioTestCase):
    async def test_fires_once_after_delay(self):
        timer = HintTimer()
        fired: list[str] = []

        async def _cb():
            fired.append("x")

        timer.arm(TICK, _cb)
        self.assertTrue(timer.pending)
        await asyncio.sleep(0.05)
        self.assertEqual(fired, ["x"])
        self.assertFalse(timer.pending)

    async def test_rearm_replaces_pending_timer(self):
        timer = HintTimer()
        fired: list[int] = []

        async def _first():
            fired.append(1)

        async def _second():
            fired.append(2)

        first_gen = timer.arm(TICK, _first)
        second_gen = timer.arm(TICK, _second)
        self.assertFalse(timer.is_current(first_gen))
        self.assertTrue(timer.is_current(second_gen))
        await asyncio.sleep(0.05)
        self.assertEqual(fired, [2])

    async def test_cancel_prevents_callback(self):
        timer = HintTimer()
        fired: list[int] = []

        async def _cb():
            fired.append(1)

        timer.arm(TICK, _cb)
        timer.cancel()
        self.assertFalse(timer.pending)
        await asyncio.sleep(0.05)
        self.assertEqual(fired, [])

    async def test_callback_error_is_contained(self):
        timer = HintTimer()

        async def _boom():
            raise RuntimeError("boom")

        with self.assertLogs("deadchat.timers", level="ERROR"):
            timer.arm(TICK, _boom)
            await asyncio.sleep(0.05)
        self.assertFalse(timer.pending)


if __name__ == "__main__":
    unittest.main()
