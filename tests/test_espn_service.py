from __future__ import annotations

import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from goalfeed.leagues import build_league_services
from goalfeed.leagues.base import ProviderUnavailable
from goalfeed.leagues.espn_service import EspnLeagueService, _is_in_pregame_window
from goalfeed.schemas import GameStatus, GameUpdate, team_hash
from tests._fakes import make_game, make_state

NOW = datetime(2026, 2, 10, 2, 50, tzinfo=timezone.utc)


def _event(event_id: str, state: str, date: str) -> dict:
    return {
        "id": event_id,
        "date": date,
        "competitions": [
            {
                "id": event_id,
                "status": {"type": {"state": state}},
                "competitors": [
                    {"homeAway": "home", "team": {"abbreviation": "BOS", "displayName": "Boston"}, "score": "0"},
                    {"homeAway": "away", "team": {"abbreviation": "TOR", "displayName": "Toronto"}, "score": "0"},
                ],
            }
        ],
    }


class PregameWindowTests(unittest.TestCase):
    def test_within_window_is_active(self) -> None:
        start = datetime(2026, 2, 10, 3, 0, tzinfo=timezone.utc)
        self.assertTrue(_is_in_pregame_window(start, now_utc=NOW, pregame_window_minutes=15))

    def test_well_before_window_is_not_active(self) -> None:
        start = datetime(2026, 2, 10, 5, 0, tzinfo=timezone.utc)
        self.assertFalse(_is_in_pregame_window(start, now_utc=NOW, pregame_window_minutes=15))

    def test_missing_start_time_is_not_active(self) -> None:
        self.assertFalse(_is_in_pregame_window(None, now_utc=NOW))


class EspnLeagueServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.service = EspnLeagueService("nhl")

    def test_unsupported_league_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            EspnLeagueService("XFL")

    def test_get_active_games_keeps_live_and_imminent_games(self) -> None:
        payload = {
            "events": [
                _event("1", "in", "2026-02-10T01:00Z"),
                _event("2", "pre", "2026-02-10T03:00Z"),
                _event("3", "pre", "2026-02-10T06:00Z"),
                _event("4", "post", "2026-02-09T23:00Z"),
            ]
        }

        with patch("goalfeed.leagues.espn_service.fetch_scoreboard", return_value=payload) as mock_fetch, patch(
            "goalfeed.leagues.espn_service._utcnow", return_value=NOW
        ):
            games = self.service.get_active_games()

        mock_fetch.assert_called_once_with("NHL")
        self.assertEqual(["1", "2"], [game.provider_game_id for game in games])

    def test_get_active_games_raises_on_fetch_error(self) -> None:
        with patch(
            "goalfeed.leagues.espn_service.fetch_scoreboard",
            return_value={"ok": False, "error": "Failed to fetch ESPN document", "details": "timed out"},
        ):
            with self.assertRaises(ProviderUnavailable) as ctx:
                self.service.get_active_games()

        self.assertIn("timed out", str(ctx.exception))

    def test_get_game_update_pairs_old_and_new_state(self) -> None:
        game = make_game("401", home="BOS", away="TOR")
        summary = {"header": {"competitions": _event("401", "in", "2026-02-10T01:00Z")["competitions"]}}
        summary["header"]["competitions"][0]["competitors"][0]["score"] = "1"

        with patch("goalfeed.leagues.espn_service.fetch_summary", return_value=summary) as mock_fetch:
            update = self.service.get_game_update(game)

        mock_fetch.assert_called_once_with("NHL", "401")
        self.assertEqual(0, update.old_state.home.score)
        self.assertEqual(1, update.new_state.home.score)
        self.assertEqual(GameStatus.IN_PROGRESS, update.new_state.status)

    def test_get_game_update_raises_on_unparsable_summary(self) -> None:
        with patch("goalfeed.leagues.espn_service.fetch_summary", return_value={"header": {}}):
            with self.assertRaises(ProviderUnavailable):
                self.service.get_game_update(make_game("401"))

    def test_missing_live_score_does_not_regress_stored_state(self) -> None:
        game = make_game("401", home="BOS", away="TOR", home_score=2)
        blank = {"header": {"competitions": _event("401", "in", "2026-02-10T01:00Z")["competitions"]}}
        del blank["header"]["competitions"][0]["competitors"][0]["score"]
        intact = {"header": {"competitions": _event("401", "in", "2026-02-10T01:00Z")["competitions"]}}
        intact["header"]["competitions"][0]["competitors"][0]["score"] = "2"

        with patch("goalfeed.leagues.espn_service.fetch_summary", return_value=blank):
            with self.assertRaises(ProviderUnavailable):
                self.service.get_game_update(game)
        self.assertEqual(2, game.current_state.home.score)

        with patch("goalfeed.leagues.espn_service.fetch_summary", return_value=intact):
            update = self.service.get_game_update(game)

        self.assertEqual(2, update.new_state.home.score)
        self.assertEqual([], self.service.get_events(update))

    def test_get_events_reports_one_event_per_new_goal(self) -> None:
        update = GameUpdate(
            old_state=make_state("BOS", "TOR", home_score=1, away_score=0),
            new_state=make_state("BOS", "TOR", home_score=3, away_score=1),
        )

        events = self.service.get_events(update)

        self.assertEqual(["BOS", "BOS", "TOR"], [event.team_code for event in events])
        self.assertEqual(team_hash("NHL", "BOS"), events[0].team_hash)

    def test_get_events_ignores_unchanged_and_corrected_scores(self) -> None:
        update = GameUpdate(
            old_state=make_state("BOS", "TOR", home_score=2, away_score=1),
            new_state=make_state("BOS", "TOR", home_score=1, away_score=1),
        )

        self.assertEqual([], self.service.get_events(update))


class BuildLeagueServicesTests(unittest.TestCase):
    def test_services_are_keyed_by_league_id_and_read_only(self) -> None:
        services = build_league_services(["NHL", "MLB"])

        self.assertEqual({1: "NHL", 2: "MLB"}, {k: v.league_name for k, v in services.items()})
        with self.assertRaises(TypeError):
            services[3] = services[1]


if __name__ == "__main__":
    unittest.main()
