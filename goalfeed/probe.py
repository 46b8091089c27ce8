"""Quick probe: which games does a league provider consider active right now?"""

from __future__ import annotations

import argparse
import logging

from goalfeed.leagues import EspnLeagueService, ProviderUnavailable
from goalfeed.leagues.leagues import LEAGUE_PATHS


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print the games a league provider would admit for monitoring.",
    )
    parser.add_argument(
        "--league",
        type=str,
        default="NHL",
        help="League key (e.g., NHL, MLB).",
    )
    parser.add_argument(
        "--pregame-window-minutes",
        type=int,
        default=15,
        help="Admit scheduled games starting within this many minutes.",
    )
    return parser.parse_args()


def _normalize_league(raw: str) -> str:
    value = raw.strip().upper()
    if value not in LEAGUE_PATHS:
        supported = ", ".join(sorted(LEAGUE_PATHS))
        raise SystemExit(
            f"Unsupported league: {value}. Supported leagues: {supported}"
        )
    return value


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = _parse_args()
    league = _normalize_league(args.league)
    service = EspnLeagueService(league, pregame_window_minutes=args.pregame_window_minutes)

    try:
        games = service.get_active_games()
    except ProviderUnavailable as exc:
        logging.error("Provider error: %s", exc)
        raise SystemExit(1)

    logging.info("Found %s active %s games", len(games), league)
    for game in games:
        state = game.current_state
        logging.info(
            "  %s %s %s-%s (%s)",
            game.game_key,
            game.matchup,
            state.away.score,
            state.home.score,
            state.status.value,
        )


if __name__ == "__main__":
    main()
