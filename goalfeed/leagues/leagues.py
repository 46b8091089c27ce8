"""Supported leagues mapping for ESPN endpoints."""

from __future__ import annotations

LEAGUE_ID_TEST = 0
LEAGUE_ID_NHL = 1
LEAGUE_ID_MLB = 2

LEAGUE_PATHS: dict[str, str] = {
    "NHL": "sports/hockey/nhl",
    "MLB": "sports/baseball/mlb",
}

LEAGUE_IDS: dict[str, int] = {
    "NHL": LEAGUE_ID_NHL,
    "MLB": LEAGUE_ID_MLB,
}


def get_league_path(league_key: str) -> str | None:
    """Return ESPN path segment for a league key (e.g., NHL).

    Returns None when the league is not supported.
    """

    return LEAGUE_PATHS.get(league_key.upper())


def parse_leagues(raw: str) -> list[str]:
    leagues = [league.strip().upper() for league in raw.split(",") if league.strip()]
    invalid = [league for league in leagues if league not in LEAGUE_PATHS]
    if invalid:
        raise ValueError(
            f"Unsupported leagues: {', '.join(invalid)}. "
            f"Supported: {', '.join(sorted(LEAGUE_PATHS))}"
        )
    return leagues
