from __future__ import annotations

import unittest

from goalfeed.leagues.espn_parser import parse_scoreboard, parse_summary
from goalfeed.schemas import GameStatus


def _competition(comp_id: str, state: str, home=("BOS", "3"), away=("TOR", "2"), **status_extra) -> dict:
    return {
        "id": comp_id,
        "status": {"type": {"state": state}, **status_extra},
        "competitors": [
            {
                "homeAway": "home",
                "team": {"id": "1", "abbreviation": home[0], "displayName": f"{home[0]} City"},
                "score": home[1],
            },
            {
                "homeAway": "away",
                "team": {"id": "2", "abbreviation": away[0], "displayName": f"{away[0]} Town"},
                "score": away[1],
            },
        ],
    }


class ParseScoreboardTests(unittest.TestCase):
    def test_parse_scoreboard_builds_games_keyed_by_event_id(self) -> None:
        payload = {
            "events": [
                {
                    "id": "401",
                    "date": "2026-02-10T03:00Z",
                    "competitions": [_competition("401", "in", period=2, displayClock="12:34")],
                }
            ]
        }

        games = parse_scoreboard(payload, "nhl")

        self.assertEqual(1, len(games))
        game = games[0]
        self.assertEqual("1-401", game.game_key)
        self.assertEqual(GameStatus.IN_PROGRESS, game.current_state.status)
        self.assertEqual("BOS", game.current_state.home.team.team_code)
        self.assertEqual(3, game.current_state.home.score)
        self.assertEqual("TOR", game.current_state.away.team.team_code)
        self.assertEqual("2", game.current_state.period)
        self.assertEqual("12:34", game.current_state.clock)
        self.assertEqual("NHL", game.current_state.home.team.league_name)
        self.assertIsNotNone(game.start_time_utc)

    def test_parse_scoreboard_skips_competitions_without_both_sides(self) -> None:
        broken = _competition("402", "in")
        broken["competitors"] = broken["competitors"][:1]
        payload = {
            "events": [
                {"id": "402", "date": "2026-02-10T03:00Z", "competitions": [broken]},
                {"id": "403", "date": "2026-02-10T03:00Z", "competitions": [_competition("403", "pre")]},
            ]
        }

        games = parse_scoreboard(payload, "NHL")

        self.assertEqual(["403"], [game.provider_game_id for game in games])

    def test_parse_scoreboard_dedupes_event_ids(self) -> None:
        event = {"id": "404", "date": "2026-02-10T03:00Z", "competitions": [_competition("404", "in")]}

        games = parse_scoreboard({"events": [event, dict(event)]}, "MLB")

        self.assertEqual(1, len(games))
        self.assertEqual("2-404", games[0].game_key)

    def test_missing_scores_default_to_zero(self) -> None:
        competition = _competition("405", "pre", home=("NYY", None), away=("BOS", ""))

        games = parse_scoreboard({"events": [{"id": "405", "competitions": [competition]}]}, "MLB")

        self.assertEqual(0, games[0].current_state.home.score)
        self.assertEqual(0, games[0].current_state.away.score)
        self.assertIsNone(games[0].start_time_utc)

    def test_final_postponed_and_canceled_are_ended(self) -> None:
        for state in ("post", "final", "postponed", "canceled"):
            payload = {"events": [{"id": "9", "competitions": [_competition("9", state)]}]}
            games = parse_scoreboard(payload, "NHL")
            self.assertEqual(GameStatus.ENDED, games[0].current_state.status, state)

    def test_non_list_events_returns_empty(self) -> None:
        self.assertEqual([], parse_scoreboard({"events": None}, "NHL"))


class ParseSummaryTests(unittest.TestCase):
    def test_parse_summary_reads_header_competition(self) -> None:
        payload = {"header": {"id": "401", "competitions": [_competition("401", "post")]}}

        state = parse_summary(payload, "NHL")

        self.assertIsNotNone(state)
        self.assertEqual(GameStatus.ENDED, state.status)
        self.assertEqual(2, state.away.score)

    def test_parse_summary_without_header_returns_none(self) -> None:
        self.assertIsNone(parse_summary({}, "NHL"))
        self.assertIsNone(parse_summary({"header": {"competitions": []}}, "NHL"))

    def test_parse_summary_rejects_live_game_without_score(self) -> None:
        for home in (("BOS", None), ("BOS", ""), ("BOS", "n/a")):
            payload = {"header": {"competitions": [_competition("401", "in", home=home)]}}
            self.assertIsNone(parse_summary(payload, "NHL"), home)


if __name__ == "__main__":
    unittest.main()
