"""Tests for PollingLoop."""

import asyncio

from solcerer.monitor import PollingLoop


class TestPollingLoopTimer:
    async def test_startup_delay_then_interval(self):
        ticks = []
        sleeps = []

        async def tick():
            ticks.append(1)

        async def fake_sleep(seconds):
            sleeps.append(seconds)
            if len(sleeps) >= 3:
                loop.running = False
            await asyncio.sleep(0)

        loop = PollingLoop("social", tick, interval=60, startup_delay=10, sleep=fake_sleep)
        loop.start()
        await loop.wait()

        assert sleeps == [10, 60, 60]
        assert len(ticks) == 2
        assert loop.ticks_started == 2

    async def test_stop_cancels_timer(self):
        async def tick():
            pass

        loop = PollingLoop("price", tick, interval=60, startup_delay=3600)
        loop.start()
        await asyncio.sleep(0)
        await loop.stop()

        assert not loop.running
        assert loop.ticks_started == 0


class TestPollingLoopSingleFlight:
    async def test_overlapping_tick_is_skipped(self):
        release = asyncio.Event()
        runs = []

        async def slow_tick():
            runs.append("start")
            await release.wait()

        loop = PollingLoop("whale", slow_tick, interval=120)
        first = loop.fire()
        await asyncio.sleep(0)

        assert loop.in_flight
        assert loop.fire() is None
        assert loop.ticks_skipped == 1

        release.set()
        await first
        assert not loop.in_flight
        assert loop.fire() is not None
        await loop.stop()
        assert runs[0] == "start"

    async def test_failed_tick_is_logged_and_loop_continues(self, caplog):
        calls = []

        async def flaky_tick():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("upstream exploded")

        loop = PollingLoop("social", flaky_tick, interval=60)

        await loop.run_once()
        await loop.run_once()

        assert len(calls) == 2
        assert loop.ticks_failed == 1
        assert "tick failed" in caplog.text

    async def test_duration_uses_clock(self):
        readings = iter([100.0, 104.5])

        async def tick():
            pass

        loop = PollingLoop("price", tick, interval=60, clock=lambda: next(readings))
        await loop.run_once()

        assert loop.last_duration == 4.5
