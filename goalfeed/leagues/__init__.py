from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from goalfeed.leagues.base import LeagueService, ProviderUnavailable
from goalfeed.leagues.espn_service import EspnLeagueService


def build_league_services(
    league_keys: Iterable[str],
    *,
    pregame_window_minutes: int = 15,
) -> Mapping[int, LeagueService]:
    """Build the read-only league_id -> service mapping used by the engine."""

    services: dict[int, LeagueService] = {}
    for league_key in league_keys:
        service = EspnLeagueService(league_key, pregame_window_minutes=pregame_window_minutes)
        services[service.league_id] = service
    return MappingProxyType(services)


__all__ = [
    "EspnLeagueService",
    "LeagueService",
    "ProviderUnavailable",
    "build_league_services",
]
