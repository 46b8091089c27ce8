"""Parser for ESPN scoreboard and summary payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from goalfeed.leagues.leagues import LEAGUE_IDS
from goalfeed.schemas import Game, GameState, GameStatus, Team, TeamState


def _safe_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_start_time(event: dict[str, Any]) -> datetime | None:
    date_value = event.get("date")
    if isinstance(date_value, str):
        try:
            return datetime.fromisoformat(date_value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return None


def _normalize_status(status: dict[str, Any]) -> GameStatus:
    # Postponed and canceled games will not produce goals either.
    status_type = status.get("type", {}) if isinstance(status, dict) else {}
    state = status_type.get("state") or status_type.get("name")
    if isinstance(state, str):
        state_lower = state.lower()
        if "postpon" in state_lower or "cancel" in state_lower:
            return GameStatus.ENDED
        if state_lower in {"pre", "scheduled"}:
            return GameStatus.SCHEDULED
        if state_lower in {"in", "in_progress", "in progress"}:
            return GameStatus.IN_PROGRESS
        if state_lower in {"post", "final", "finals"}:
            return GameStatus.ENDED
    description = status_type.get("description") or ""
    if isinstance(description, str):
        description_lower = description.lower()
        if "postpon" in description_lower or "cancel" in description_lower:
            return GameStatus.ENDED
        if "final" in description_lower:
            return GameStatus.ENDED
        if "in progress" in description_lower:
            return GameStatus.IN_PROGRESS
    return GameStatus.SCHEDULED


def _extract_event_ids(event: dict[str, Any]) -> Iterable[str]:
    event_id = event.get("id")
    if isinstance(event_id, str) and event_id:
        yield event_id
    competitions = event.get("competitions")
    if isinstance(competitions, list):
        for competition in competitions:
            if isinstance(competition, dict):
                competition_id = competition.get("id")
                if isinstance(competition_id, str) and competition_id:
                    yield competition_id


def _team_state(competitor: dict[str, Any], league_key: str, score: int) -> TeamState:
    team = competitor.get("team")
    if not isinstance(team, dict):
        team = {}

    name = team.get("displayName") or team.get("name") or "TBD"
    code = team.get("abbreviation") or name
    ext_id = team.get("id")
    return TeamState(
        team=Team(
            team_code=str(code),
            team_name=str(name),
            league_id=LEAGUE_IDS[league_key],
            league_name=league_key,
            ext_id=str(ext_id) if ext_id is not None else None,
        ),
        score=score,
    )


def parse_competition_state(competition: dict[str, Any], league_key: str) -> GameState | None:
    """Build a GameState from one ESPN competition block.

    Returns None when the home or away competitor is missing, or when a
    game in progress lacks a numeric score for either side.
    """

    competitors = competition.get("competitors")
    if not isinstance(competitors, list):
        return None

    home = None
    away = None
    for competitor in competitors:
        if not isinstance(competitor, dict):
            continue
        home_away = competitor.get("homeAway")
        if home_away == "home":
            home = competitor
        elif home_away == "away":
            away = competitor
    if home is None or away is None:
        return None

    status = competition.get("status")
    if not isinstance(status, dict):
        status = {}
    period = status.get("period")
    clock = status.get("displayClock")
    game_status = _normalize_status(status)

    home_score = _safe_int(home.get("score"))
    away_score = _safe_int(away.get("score"))
    if home_score is None or away_score is None:
        if game_status == GameStatus.IN_PROGRESS:
            return None
        home_score = home_score or 0
        away_score = away_score or 0

    return GameState(
        home=_team_state(home, league_key, home_score),
        away=_team_state(away, league_key, away_score),
        status=game_status,
        period=str(period) if period is not None else None,
        clock=str(clock) if clock is not None else None,
    )


def parse_scoreboard(scoreboard_json: dict, league_key: str) -> list[Game]:
    """Parse ESPN scoreboard JSON into a list of Games."""

    events = scoreboard_json.get("events")
    if not isinstance(events, list):
        return []

    league_key = league_key.upper()
    league_id = LEAGUE_IDS[league_key]
    seen_event_ids: set[str] = set()
    parsed_games: list[Game] = []

    for event in events:
        if not isinstance(event, dict):
            continue

        competitions = event.get("competitions")
        if not isinstance(competitions, list) or not competitions:
            competitions = [event]

        for competition in competitions:
            if not isinstance(competition, dict):
                continue

            provider_game_id = None
            for candidate_id in _extract_event_ids(event):
                provider_game_id = candidate_id
                break
            if provider_game_id is None:
                for candidate_id in _extract_event_ids(competition):
                    provider_game_id = candidate_id
                    break
            if provider_game_id is None:
                continue
            if provider_game_id in seen_event_ids:
                continue

            state = parse_competition_state(competition, league_key)
            if state is None:
                continue

            seen_event_ids.add(provider_game_id)
            parsed_games.append(
                Game(
                    league_id=league_id,
                    provider_game_id=provider_game_id,
                    start_time_utc=_parse_start_time(event),
                    current_state=state,
                )
            )

    return parsed_games


def parse_summary(summary_json: dict, league_key: str) -> GameState | None:
    """Parse the header competition of an ESPN summary document."""

    header = summary_json.get("header")
    if not isinstance(header, dict):
        return None
    competitions = header.get("competitions")
    if not isinstance(competitions, list) or not competitions:
        return None
    competition = competitions[0]
    if not isinstance(competition, dict):
        return None
    return parse_competition_state(competition, league_key.upper())
