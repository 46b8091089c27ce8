"""Wire settings, collaborators, the game monitor and the scheduler together."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import redis

from goalfeed.dispatcher import GoalDispatcher
from goalfeed.leagues import build_league_services
from goalfeed.monitor import GameMonitor
from goalfeed.registry import ActiveGameRegistry, RedisActiveGameRegistry
from goalfeed.scheduler import PeriodicTask, Scheduler
from goalfeed.settings import Settings
from goalfeed.targets.broadcast import RedisBroadcaster
from goalfeed.targets.database import SqlGoalStore, initialize_database

logger = logging.getLogger(__name__)


@dataclass
class Engine:
    registry: ActiveGameRegistry
    dispatcher: GoalDispatcher
    monitor: GameMonitor
    scheduler: Scheduler


def build_tasks(monitor: GameMonitor, dispatcher: GoalDispatcher, settings: Settings) -> list[PeriodicTask]:
    tasks = [
        PeriodicTask("discovery", settings.discovery_interval_seconds, monitor.check_leagues_for_active_games),
        PeriodicTask("watch", settings.watch_interval_seconds, monitor.watch_active_games),
        PeriodicTask("refresh", settings.refresh_interval_seconds, monitor.refresh_if_needed),
    ]
    if settings.test_goal_enabled:
        tasks.append(
            PeriodicTask("test-goal", settings.test_goal_interval_seconds, dispatcher.send_test_goal)
        )
    return tasks


def build_engine(settings: Settings) -> Engine:
    client = redis.Redis.from_url(settings.redis_url, socket_timeout=5, socket_connect_timeout=5)
    registry = RedisActiveGameRegistry(client, game_ttl_seconds=settings.game_ttl_seconds)
    dispatcher = GoalDispatcher(
        RedisBroadcaster(client, settings.broadcast_channel),
        SqlGoalStore(),
    )
    services = build_league_services(
        settings.leagues,
        pregame_window_minutes=settings.pregame_window_minutes,
    )
    monitor = GameMonitor(
        services,
        registry,
        dispatcher,
        watch_concurrency=settings.watch_concurrency,
    )
    scheduler = Scheduler(build_tasks(monitor, dispatcher, settings))
    return Engine(registry=registry, dispatcher=dispatcher, monitor=monitor, scheduler=scheduler)


async def run_engine(engine: Engine, stop_event: asyncio.Event) -> None:
    """Initialize storage, run a first discovery pass, then tick until stopped."""
    logger.info("Init DB")
    await asyncio.to_thread(initialize_database)
    logger.info("Puck drop! Monitoring leagues: %s", ", ".join(
        service.league_name for service in engine.monitor.services.values()
    ))
    logger.info("Initializing active games")
    await engine.monitor.check_leagues_for_active_games()
    await engine.scheduler.run(stop_event)
