"""Discovery and watch passes over the active game registry."""

from __future__ import annotations

import asyncio
import logging
from types import MappingProxyType
from typing import Mapping

from goalfeed.dispatcher import GoalDispatcher
from goalfeed.leagues.base import LeagueService, ProviderUnavailable
from goalfeed.registry import ActiveGameRegistry, GameNotFound, RegistryError
from goalfeed.schemas import Game, GameStatus

logger = logging.getLogger(__name__)

DEFAULT_WATCH_CONCURRENCY = 32


class RefreshSignal:
    """Best-effort request for an out-of-cycle discovery pass.

    Any number of producers may call `request`; the housekeeping task is the
    only consumer.
    """

    def __init__(self) -> None:
        self._requested = False

    def request(self) -> None:
        self._requested = True

    def is_requested(self) -> bool:
        return self._requested

    def consume(self) -> bool:
        requested = self._requested
        self._requested = False
        return requested


def _label(service: LeagueService, game: Game) -> str:
    return f"[{service.league_name} - {game.matchup}]"


class GameMonitor:
    def __init__(
        self,
        services: Mapping[int, LeagueService],
        registry: ActiveGameRegistry,
        dispatcher: GoalDispatcher,
        *,
        refresh: RefreshSignal | None = None,
        watch_concurrency: int = DEFAULT_WATCH_CONCURRENCY,
    ) -> None:
        self.services = MappingProxyType(dict(services))
        self.registry = registry
        self.dispatcher = dispatcher
        self.refresh = refresh or RefreshSignal()
        self._watch_semaphore = asyncio.Semaphore(watch_concurrency)
        self._in_flight: set[str] = set()

    async def check_leagues_for_active_games(self) -> None:
        logger.info("Updating active games")
        await asyncio.gather(
            *(self._check_for_new_active_games(service) for service in self.services.values())
        )

    async def refresh_if_needed(self) -> bool:
        if not self.refresh.consume():
            return False
        logger.info("Refresh requested, re-running discovery")
        await self.check_leagues_for_active_games()
        return True

    async def _check_for_new_active_games(self, service: LeagueService) -> None:
        logger.info("Checking for active %s games", service.league_name)
        try:
            games = await asyncio.to_thread(service.get_active_games)
            if not games:
                return
            active_keys = await asyncio.to_thread(self.registry.get_active_game_keys)
            for game in games:
                if game.game_key in active_keys:
                    continue
                logger.info(
                    "Adding %s game (%s) to active monitored games",
                    service.league_name,
                    game.matchup,
                )
                await asyncio.to_thread(self.registry.set_game, game)
                await asyncio.to_thread(self.registry.append_active_game, game)
                active_keys.add(game.game_key)
        except ProviderUnavailable as exc:
            logger.warning("No %s games this cycle: %s", service.league_name, exc)
        except RegistryError:
            logger.exception("Registry failure while adding %s games", service.league_name)
        except Exception:
            logger.exception("Discovery failed for %s", service.league_name)

    async def watch_active_games(self) -> None:
        try:
            game_keys = await asyncio.to_thread(self.registry.get_active_game_keys)
        except RegistryError:
            logger.exception("Could not list active games")
            return
        await asyncio.gather(*(self._check_game_bounded(game_key) for game_key in game_keys))

    async def _check_game_bounded(self, game_key: str) -> None:
        # One check per key at a time in this process; later ticks skip it.
        if game_key in self._in_flight:
            logger.debug("[%s] Previous check still running, skipping", game_key)
            return
        self._in_flight.add(game_key)
        try:
            async with self._watch_semaphore:
                await self.check_game(game_key)
        except RegistryError:
            logger.exception("[%s] Registry failure while checking game", game_key)
        except Exception:
            logger.exception("[%s] Game check failed", game_key)
        finally:
            self._in_flight.discard(game_key)

    async def _retire(self, game: Game) -> None:
        # Final state stays readable until its TTL; only the active set drives polling.
        await asyncio.to_thread(self.registry.set_game, game)
        await asyncio.to_thread(self.registry.delete_active_game, game)

    async def check_game(self, game_key: str) -> None:
        try:
            game = await asyncio.to_thread(self.registry.get_game, game_key)
        except GameNotFound:
            logger.warning("[%s] Game not found, dropping from active games", game_key)
            await asyncio.to_thread(self.registry.delete_active_game_key, game_key)
            self.refresh.request()
            return

        service = self.services.get(game.league_id)
        if service is None:
            logger.error("[%s] No service registered for league_id=%s", game_key, game.league_id)
            return

        label = _label(service, game)
        logger.info("%s Checking", label)
        game.is_fetching = True
        await asyncio.to_thread(self.registry.set_game, game)

        try:
            update = await asyncio.to_thread(service.get_game_update, game)
        except ProviderUnavailable as exc:
            logger.warning("%s Update unavailable: %s", label, exc)
            game.is_fetching = False
            await asyncio.to_thread(self.registry.set_game, game)
            return

        events = await asyncio.to_thread(service.get_events, update)
        game.current_state = update.new_state
        game.is_fetching = False

        if game.current_state.status == GameStatus.ENDED:
            logger.info("%s Game has ended", label)
            await asyncio.gather(
                self.dispatcher.fire_goal_events(events, game),
                self._retire(game),
            )
            return

        await asyncio.gather(
            self.dispatcher.fire_goal_events(events, game),
            asyncio.to_thread(self.registry.set_game, game),
        )
