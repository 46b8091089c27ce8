"""Fan detected goals out to subscribers and to the goal history."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from goalfeed.leagues.leagues import LEAGUE_ID_TEST
from goalfeed.schemas import Event, Game, Team
from goalfeed.targets.broadcast import Broadcaster
from goalfeed.targets.database import GoalStore

logger = logging.getLogger(__name__)

TEST_MARKER = "TEST"
TEST_TEAM_HASH = "TESTTEST"


def scoring_team(event: Event, game: Game) -> Team | None:
    """Resolve which side of `game` the event belongs to, or None."""
    home = game.current_state.home.team
    away = game.current_state.away.team
    if event.team_code == home.team_code:
        return home
    if event.team_code == away.team_code:
        return away
    return None


def build_test_event() -> Event:
    return Event(
        team_code=TEST_MARKER,
        team_name=TEST_MARKER,
        league_id=LEAGUE_ID_TEST,
        league_name=TEST_MARKER,
        team_hash=TEST_TEAM_HASH,
    )


class GoalDispatcher:
    def __init__(self, broadcaster: Broadcaster, goal_store: GoalStore) -> None:
        self.broadcaster = broadcaster
        self.goal_store = goal_store

    async def fire_goal_events(self, events: Iterable[Event], game: Game) -> None:
        await asyncio.gather(*(self._dispatch(event, game) for event in events))

    async def send_test_goal(self) -> None:
        logger.info("Sending test goal")
        await self._broadcast(build_test_event())

    async def _dispatch(self, event: Event, game: Game) -> None:
        logger.info("Goal %s (%s)", event.team_code, event.league_name)
        await asyncio.gather(self._broadcast(event), self._persist(event, game))

    async def _broadcast(self, event: Event) -> None:
        try:
            await asyncio.to_thread(self.broadcaster.send_event, event)
        except Exception:
            logger.exception("Failed broadcasting goal team=%s", event.team_code)

    async def _persist(self, event: Event, game: Game) -> None:
        team = scoring_team(event, game)
        if team is None:
            logger.warning(
                "Goal team=%s matches neither side of %s (%s), not recording",
                event.team_code,
                game.game_key,
                game.matchup,
            )
            return
        try:
            await asyncio.to_thread(self.goal_store.insert_goal, team)
        except Exception:
            logger.exception("Failed recording goal team=%s game=%s", team.team_code, game.game_key)
