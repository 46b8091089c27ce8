"""Canonical game/event contract shared by providers, registry and dispatcher."""

from __future__ import annotations

import hashlib
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class GameStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"


def team_hash(league_name: str, team_code: str) -> str:
    return hashlib.md5(f"{league_name}{team_code}".encode("utf-8")).hexdigest()


class Team(BaseModel):
    team_code: str
    team_name: str
    league_id: int
    league_name: str
    ext_id: Optional[str] = None

    @property
    def team_hash(self) -> str:
        return team_hash(self.league_name, self.team_code)


class TeamState(BaseModel):
    team: Team
    score: int = 0


class GameState(BaseModel):
    home: TeamState
    away: TeamState
    status: GameStatus = GameStatus.SCHEDULED
    period: Optional[str] = None
    clock: Optional[str] = None


class Game(BaseModel):
    """
    A monitored game instance. `game_key` is the identity used by the registry.
    """

    league_id: int
    provider_game_id: str
    start_time_utc: Optional[datetime] = None
    current_state: GameState
    is_fetching: bool = False

    @property
    def game_key(self) -> str:
        return f"{self.league_id}-{self.provider_game_id}"

    @property
    def matchup(self) -> str:
        return (
            f"{self.current_state.away.team.team_code} @ "
            f"{self.current_state.home.team.team_code}"
        )


class GameUpdate(BaseModel):
    old_state: GameState
    new_state: GameState


class Event(BaseModel):
    team_code: str
    team_name: str
    league_id: int
    league_name: str
    team_hash: str

    @classmethod
    def for_team(cls, team: Team) -> "Event":
        return cls(
            team_code=team.team_code,
            team_name=team.team_name,
            league_id=team.league_id,
            league_name=team.league_name,
            team_hash=team.team_hash,
        )


class ActiveGameOut(BaseModel):
    game_key: str
    league_id: int
    provider_game_id: str
    status: GameStatus
    home_team: str
    away_team: str
    home_score: int
    away_score: int
    period: Optional[str]
    clock: Optional[str]
    is_fetching: bool

    @classmethod
    def from_game(cls, game: Game) -> "ActiveGameOut":
        state = game.current_state
        return cls(
            game_key=game.game_key,
            league_id=game.league_id,
            provider_game_id=game.provider_game_id,
            status=state.status,
            home_team=state.home.team.team_code,
            away_team=state.away.team.team_code,
            home_score=state.home.score,
            away_score=state.away.score,
            period=state.period,
            clock=state.clock,
            is_fetching=game.is_fetching,
        )


class GoalOut(BaseModel):
    id: int
    league_id: int
    league_name: str
    team_code: str
    team_name: str
    team_hash: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
