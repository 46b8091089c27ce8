"""League service backed by the public ESPN site API."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from goalfeed.leagues.base import LeagueService, ProviderUnavailable
from goalfeed.leagues.espn_client import fetch_scoreboard, fetch_summary
from goalfeed.leagues.espn_parser import parse_scoreboard, parse_summary
from goalfeed.leagues.leagues import LEAGUE_IDS, LEAGUE_PATHS
from goalfeed.schemas import Event, Game, GameStatus, GameUpdate, TeamState

logger = logging.getLogger(__name__)

DEFAULT_PREGAME_WINDOW_MINUTES = 15


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_in_pregame_window(
    game_start_utc: datetime | None,
    *,
    now_utc: datetime,
    pregame_window_minutes: int = DEFAULT_PREGAME_WINDOW_MINUTES,
) -> bool:
    if game_start_utc is None:
        return False
    if game_start_utc.tzinfo is None:
        game_start_utc = game_start_utc.replace(tzinfo=timezone.utc)
    game_start_utc = game_start_utc.astimezone(timezone.utc)
    window_start = game_start_utc - timedelta(minutes=pregame_window_minutes)
    return window_start <= now_utc


def _goals_scored(old: TeamState, new: TeamState) -> int:
    return max(new.score - old.score, 0)


class EspnLeagueService(LeagueService):
    def __init__(
        self,
        league_key: str,
        *,
        pregame_window_minutes: int = DEFAULT_PREGAME_WINDOW_MINUTES,
    ) -> None:
        league_key = league_key.upper()
        if league_key not in LEAGUE_PATHS:
            raise ValueError(f"Unsupported league key: {league_key}")
        self.league_key = league_key
        self.league_id = LEAGUE_IDS[league_key]
        self.pregame_window_minutes = pregame_window_minutes

    @property
    def league_name(self) -> str:
        return self.league_key

    def _is_active(self, game: Game, now_utc: datetime) -> bool:
        status = game.current_state.status
        if status == GameStatus.IN_PROGRESS:
            return True
        if status == GameStatus.SCHEDULED:
            return _is_in_pregame_window(
                game.start_time_utc,
                now_utc=now_utc,
                pregame_window_minutes=self.pregame_window_minutes,
            )
        return False

    def get_active_games(self) -> list[Game]:
        payload = fetch_scoreboard(self.league_key)
        if payload.get("error"):
            raise ProviderUnavailable(
                f"{self.league_key} scoreboard unavailable: {payload.get('error')} "
                f"(details={payload.get('details')})"
            )

        now_utc = _utcnow()
        games = parse_scoreboard(payload, self.league_key)
        active = [game for game in games if self._is_active(game, now_utc)]
        logger.debug(
            "Parsed %s %s games, %s active",
            len(games),
            self.league_key,
            len(active),
        )
        return active

    def get_game_update(self, game: Game) -> GameUpdate:
        payload = fetch_summary(self.league_key, game.provider_game_id)
        if payload.get("error"):
            raise ProviderUnavailable(
                f"{self.league_key} summary unavailable for event "
                f"{game.provider_game_id}: {payload.get('error')}"
            )

        new_state = parse_summary(payload, self.league_key)
        if new_state is None:
            raise ProviderUnavailable(
                f"{self.league_key} summary for event {game.provider_game_id} "
                "has no parsable competition"
            )
        return GameUpdate(old_state=game.current_state, new_state=new_state)

    def get_events(self, update: GameUpdate) -> list[Event]:
        events: list[Event] = []
        for old, new in (
            (update.old_state.home, update.new_state.home),
            (update.old_state.away, update.new_state.away),
        ):
            for _ in range(_goals_scored(old, new)):
                events.append(Event.for_team(new.team))
        return events
