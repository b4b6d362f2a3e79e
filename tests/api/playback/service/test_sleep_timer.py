"""Tests for the sleep timer countdown and cancellation."""

import asyncio
import unittest
from datetime import timedelta
from typing import override

from api.playback.service.sleep_timer import SleepTimer


class TestSleepTimer(unittest.IsolatedAsyncioTestCase):
    @override
    async def asyncSetUp(self) -> None:
        self.timer = SleepTimer(tick_interval=0.01)
        self.fired = 0
        self.ticks: list[timedelta] = []

    @override
    async def asyncTearDown(self) -> None:
        self.timer.dispose()

    async def _on_expire(self) -> None:
        self.fired += 1

    async def _on_tick(self, remaining: timedelta) -> None:
        self.ticks.append(remaining)

    async def test_fires_once_after_duration(self) -> None:
        self.timer.arm(timedelta(seconds=0.05), self._on_expire)
        self.assertTrue(self.timer.is_armed)

        await asyncio.sleep(0.15)

        self.assertEqual(self.fired, 1)
        self.assertFalse(self.timer.is_armed)
        self.assertIsNone(self.timer.remaining)

    async def test_rearm_supersedes(self) -> None:
        self.timer.arm(timedelta(seconds=0.05), self._on_expire)
        self.timer.arm(timedelta(seconds=0.25), self._on_expire)

        await asyncio.sleep(0.1)
        self.assertEqual(self.fired, 0)

        await asyncio.sleep(0.3)
        self.assertEqual(self.fired, 1)

    async def test_cancel(self) -> None:
        self.timer.arm(timedelta(seconds=0.05), self._on_expire)

        self.assertTrue(self.timer.cancel())
        self.assertFalse(self.timer.cancel())
        await asyncio.sleep(0.1)

        self.assertEqual(self.fired, 0)

    async def test_ticks_count_down(self) -> None:
        self.timer.arm(timedelta(seconds=0.1), self._on_expire, self._on_tick)

        await asyncio.sleep(0.25)

        self.assertGreater(len(self.ticks), 1)
        self.assertEqual(self.ticks, sorted(self.ticks, reverse=True))
        self.assertTrue(all(t <= timedelta(seconds=0.1) for t in self.ticks))

    async def test_remaining_while_armed(self) -> None:
        self.timer.arm(timedelta(minutes=5), self._on_expire)

        remaining = self.timer.remaining

        self.assertIsNotNone(remaining)
        assert remaining is not None
        self.assertGreater(remaining, timedelta(minutes=4))

    async def test_non_positive_duration(self) -> None:
        for duration in (timedelta(), timedelta(seconds=-1)):
            with self.subTest(duration=duration), self.assertRaises(ValueError):
                self.timer.arm(duration, self._on_expire)
        self.assertFalse(self.timer.is_armed)

    async def test_failing_action_is_logged(self) -> None:
        async def explode() -> None:
            raise RuntimeError("boom")

        with self.assertLogs("api.playback.service.sleep_timer", level="ERROR"):
            self.timer.arm(timedelta(seconds=0.02), explode)
            await asyncio.sleep(0.1)

        self.assertFalse(self.timer.is_armed)
