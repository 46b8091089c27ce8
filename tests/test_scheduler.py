from __future__ import annotations

import asyncio
import unittest

from goalfeed.dispatcher import GoalDispatcher
from goalfeed.monitor import GameMonitor
from goalfeed.scheduler import PeriodicTask, Scheduler
from tests._fakes import InMemoryRegistry, RecordingBroadcaster, RecordingGoalStore, ScriptedService


async def _run_for(scheduler: Scheduler, seconds: float) -> None:
    stop_event = asyncio.Event()
    runner = asyncio.create_task(scheduler.run(stop_event))
    await asyncio.sleep(seconds)
    stop_event.set()
    await asyncio.wait_for(runner, timeout=5)


class SchedulerTests(unittest.IsolatedAsyncioTestCase):
    async def test_slow_ticks_overlap_instead_of_delaying(self) -> None:
        running = 0
        peak = 0
        started = 0

        async def slow() -> None:
            nonlocal running, peak, started
            started += 1
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.3)
            running -= 1

        await _run_for(Scheduler([PeriodicTask("slow", 0.05, slow)]), 0.4)

        self.assertGreaterEqual(started, 3)
        self.assertGreater(peak, 1)
        self.assertEqual(0, running)

    async def test_failing_tick_does_not_stop_the_ticker(self) -> None:
        calls = 0

        async def flaky() -> None:
            nonlocal calls
            calls += 1
            raise RuntimeError("tick failed")

        with self.assertLogs("goalfeed.scheduler", level="ERROR"):
            await _run_for(Scheduler([PeriodicTask("flaky", 0.05, flaky)]), 0.3)

        self.assertGreaterEqual(calls, 2)

    async def test_tasks_tick_independently(self) -> None:
        counts = {"fast": 0, "slow": 0}

        def counter(name):
            async def tick() -> None:
                counts[name] += 1
            return tick

        await _run_for(
            Scheduler([
                PeriodicTask("fast", 0.05, counter("fast")),
                PeriodicTask("slow", 10, counter("slow")),
            ]),
            0.3,
        )

        self.assertGreaterEqual(counts["fast"], 3)
        self.assertEqual(0, counts["slow"])

    async def test_stale_key_triggers_discovery_before_its_interval(self) -> None:
        registry = InMemoryRegistry()
        registry.active.add("1-GONE")
        service = ScriptedService(league_id=1, name="NHL")
        monitor = GameMonitor(
            {1: service},
            registry,
            GoalDispatcher(RecordingBroadcaster(), RecordingGoalStore()),
        )
        scheduler = Scheduler([
            PeriodicTask("discovery", 60, monitor.check_leagues_for_active_games),
            PeriodicTask("watch", 0.05, monitor.watch_active_games),
            PeriodicTask("refresh", 0.05, monitor.refresh_if_needed),
        ])

        await _run_for(scheduler, 0.4)

        self.assertEqual(set(), registry.get_active_game_keys())
        self.assertGreaterEqual(service.discover_calls, 1)

    def test_non_positive_interval_is_rejected(self) -> None:
        async def noop() -> None:
            return None

        with self.assertRaises(ValueError):
            Scheduler([PeriodicTask("bad", 0, noop)])


if __name__ == "__main__":
    unittest.main()
