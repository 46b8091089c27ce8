"""Fixed-interval tickers that fire each tick as an independent task."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeriodicTask:
    name: str
    interval_seconds: float
    func: Callable[[], Awaitable[object]]


class Scheduler:
    """Runs each PeriodicTask on its own interval until `stop_event` is set.

    A tick never waits for the previous tick of the same task, so slow runs
    may overlap. Tasks are expected to tolerate that.
    """

    def __init__(self, tasks: list[PeriodicTask]) -> None:
        for task in tasks:
            if task.interval_seconds <= 0:
                raise ValueError(f"Interval for {task.name} must be > 0")
        self.tasks = list(tasks)
        self._in_flight: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    async def _run_tick(self, task: PeriodicTask) -> None:
        try:
            await task.func()
        except Exception:
            logger.exception("Task %s failed", task.name)

    def _spawn(self, task: PeriodicTask) -> None:
        tick = asyncio.create_task(self._run_tick(task), name=f"tick:{task.name}")
        self._in_flight.add(tick)
        tick.add_done_callback(self._in_flight.discard)

    async def _ticker(self, task: PeriodicTask, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=task.interval_seconds)
            except asyncio.TimeoutError:
                self._spawn(task)

    async def run(self, stop_event: asyncio.Event) -> None:
        logger.info(
            "Scheduler started: %s",
            ", ".join(f"{task.name}={task.interval_seconds}s" for task in self.tasks),
        )
        await asyncio.gather(*(self._ticker(task, stop_event) for task in self.tasks))
        if self._in_flight:
            logger.info("Waiting for %d in-flight task(s)", len(self._in_flight))
            await asyncio.gather(*self._in_flight, return_exceptions=True)
        logger.info("Scheduler stopped.")
