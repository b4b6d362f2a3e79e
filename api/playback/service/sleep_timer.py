from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta

import config

logger = logging.getLogger(__name__)

type ExpireCallback = Callable[[], Awaitable[None]]
type TickCallback = Callable[[timedelta], Awaitable[None]]


class SleepTimer:
    """A single cancellable delayed action with a countdown.

    Arming always supersedes the previous timer, so at most one action is
    pending at any time.
    """

    def __init__(self, tick_interval: float | None = None) -> None:
        self.tick_interval = (
            tick_interval
            if tick_interval is not None
            else config.SLEEP_TIMER_TICK_INTERVAL
        )
        self._task: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._deadline: float | None = None

    @property
    def is_armed(self) -> bool:
        return self._task is not None

    @property
    def remaining(self) -> timedelta | None:
        """Time left before firing, None when disarmed."""
        if self._deadline is None or self._loop is None:
            return None
        return timedelta(seconds=max(0.0, self._deadline - self._loop.time()))

    def arm(
        self,
        duration: timedelta,
        on_expire: ExpireCallback,
        on_tick: TickCallback | None = None,
    ) -> None:
        """Schedule ``on_expire`` after ``duration``, replacing any armed timer."""
        if duration <= timedelta():
            raise ValueError(f"Sleep timer duration must be positive, got {duration}")

        self.cancel()

        loop = asyncio.get_running_loop()
        self._loop = loop
        self._deadline = loop.time() + duration.total_seconds()
        self._task = loop.create_task(
            self._run(on_expire, on_tick), name="sleep-timer"
        )
        logger.info("Sleep timer armed for %s", duration)

    def cancel(self) -> bool:
        """Cancel the pending action. Returns False if nothing was armed."""
        task = self._task
        self._task = None
        self._deadline = None
        if task is None:
            return False
        task.cancel()
        logger.info("Sleep timer cancelled")
        return True

    def dispose(self) -> None:
        self.cancel()

    async def _run(self, on_expire: ExpireCallback, on_tick: TickCallback | None) -> None:
        while (left := self.remaining) is not None and left > timedelta():
            await asyncio.sleep(min(self.tick_interval, left.total_seconds()))
            left = self.remaining
            if on_tick and left:
                try:
                    await on_tick(left)
                except Exception:
                    logger.exception("Sleep timer tick callback failed")

        # Clear state first: the expire action may call cancel() on this timer.
        self._task = None
        self._deadline = None
        logger.info("Sleep timer fired")
        try:
            await on_expire()
        except Exception:
            logger.exception("Sleep timer action failed")
