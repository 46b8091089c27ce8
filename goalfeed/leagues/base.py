from __future__ import annotations

from abc import ABC, abstractmethod

from goalfeed.schemas import Event, Game, GameUpdate


class ProviderUnavailable(RuntimeError):
    pass


class LeagueService(ABC):
    """Per-league source of active games, game updates and goal events."""

    league_id: int

    @property
    @abstractmethod
    def league_name(self) -> str:
        ...

    @abstractmethod
    def get_active_games(self) -> list[Game]:
        """Games that are live or about to start. Raises ProviderUnavailable."""

    @abstractmethod
    def get_game_update(self, game: Game) -> GameUpdate:
        """Freshest known state for `game`. Raises ProviderUnavailable."""

    @abstractmethod
    def get_events(self, update: GameUpdate) -> list[Event]:
        """Scoring events that happened between the old and new state."""
