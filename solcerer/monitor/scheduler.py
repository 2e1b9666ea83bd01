"""
Polling Loop
============

One PollingLoop per source type. The timer fires every `interval` seconds
whether or not the previous tick has finished; a tick that would overlap a
still-running one is skipped with a warning.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

TickFn = Callable[[], Awaitable[object]]
SleepFn = Callable[[float], Awaitable[None]]


class PollingLoop:
    """
    Fixed-interval loop with a single-flight guard.

    Args:
        name: Loop name for logs ("social", "price", "whale")
        tick: Coroutine function run on every timer fire
        interval: Seconds between timer fires
        startup_delay: Seconds to wait before the first fire
        sleep: Injectable async sleep
        clock: Injectable monotonic clock
    """

    def __init__(
        self,
        name: str,
        tick: TickFn,
        interval: float,
        startup_delay: float = 0,
        sleep: SleepFn = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.interval = interval
        self.startup_delay = startup_delay
        self._tick = tick
        self._sleep = sleep
        self._clock = clock

        self.running = False
        self.ticks_started = 0
        self.ticks_skipped = 0
        self.ticks_failed = 0
        self.last_duration: Optional[float] = None

        self._task: Optional[asyncio.Task] = None
        self._tick_task: Optional[asyncio.Task] = None

    @property
    def in_flight(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    def start(self):
        """Schedule the loop on the running event loop."""
        if self._task is not None and not self._task.done():
            return
        self.running = True
        self._task = asyncio.create_task(self._run(), name=f"{self.name}-loop")
        logger.info(
            f"[{self.name}] loop started (every {self.interval}s, "
            f"first tick in {self.startup_delay}s)"
        )

    async def _run(self):
        await self._sleep(self.startup_delay)
        while self.running:
            self.fire()
            await self._sleep(self.interval)

    def fire(self) -> Optional[asyncio.Task]:
        """
        Start a tick unless the previous one is still running.

        Returns:
            The tick task, or None if skipped
        """
        if self.in_flight:
            self.ticks_skipped += 1
            logger.warning(f"[{self.name}] previous tick still running, skipping")
            return None

        self.ticks_started += 1
        self._tick_task = asyncio.create_task(self.run_once(), name=f"{self.name}-tick")
        return self._tick_task

    async def run_once(self):
        """Run one tick. Exceptions are logged, never raised."""
        started = self._clock()
        try:
            await self._tick()
        except asyncio.CancelledError:
            raise
        except Exception:
            self.ticks_failed += 1
            logger.exception(f"[{self.name}] tick failed")
        finally:
            self.last_duration = self._clock() - started
            logger.debug(f"[{self.name}] tick took {self.last_duration:.1f}s")

    async def wait(self):
        """Wait for the timer task to finish (after stop or running=False)."""
        if self._task is not None:
            await self._task

    async def stop(self):
        """Stop the timer and cancel any in-flight tick."""
        self.running = False
        pending = [t for t in (self._task, self._tick_task) if t is not None and not t.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._task = None
        self._tick_task = None
        logger.info(f"[{self.name}] loop stopped")
