"""Test match report building and CSV export."""

import csv
import io
import unittest

from matchday.models import (
    CardColor, CardEvent, ClockPhase, GoalAgainstEvent, GoalForEvent, Half,
    MatchMetadata, MatchSnapshot, Milestone, MilestoneEvent, PenaltyEvent,
    PenaltyOutcome, SubstitutionEvent
)
from matchday.services import ReportService


class TestReportService(unittest.TestCase):
    """Test summary reports built from snapshots."""

    def setUp(self):
        """Set up a finished 1-1 match."""
        self.snapshot = MatchSnapshot(
            metadata=MatchMetadata(
                match_id="m1",
                opposition="Rovers",
                location="away",
                match_date="2024-09-14",
                starting_lineup=("p4", "p7", "p9"),
                substitutes=("p12",),
            ),
            phase=ClockPhase.COMPLETED,
            current_half=Half.SECOND,
            accumulated_seconds=5500,
            first_half_added_seconds=120,
            second_half_added_seconds=180,
            half_time_elapsed_seconds=2820,
            events=(
                MilestoneEvent("ko", 0, Milestone.KICK_OFF),
                GoalForEvent("g1", 1500, scorer_id="p9", assist_id="p7"),
                CardEvent("c1", 2790, "p4", CardColor.YELLOW),
                MilestoneEvent("ht", 2820, Milestone.HALF_TIME_WHISTLE),
                MilestoneEvent("sh", 2820, Milestone.SECOND_HALF_KICK_OFF),
                GoalAgainstEvent("g2", 3000),
                SubstitutionEvent("s1", 4000, "p4", "p12"),
                PenaltyEvent("pen", 5000, True, PenaltyOutcome.SCORED, player_id="p9"),
                MilestoneEvent("ft", 5500, Milestone.FULL_TIME_WHISTLE),
            ),
        )
        self.service = ReportService(player_names={"p9": "Nine"})

    def test_report_headline_values(self):
        """Score, result and time summaries."""
        report = self.service.build_report(self.snapshot)
        self.assertEqual(report.match_id, "m1")
        self.assertEqual(report.opposition, "Rovers")
        self.assertEqual(report.location, "away")
        self.assertEqual(report.phase, "completed")
        self.assertEqual((report.score_for, report.score_against), (1, 1))
        self.assertEqual(report.result, "draw")
        self.assertEqual(report.elapsed_seconds, 5500)
        self.assertEqual(report.total_time, "90+5'")
        self.assertEqual(report.half_summary, "91' (45'+2 / 45'+3)")
        self.assertEqual(report.card_counts, {"yellow": 1, "red": 0})

    def test_timeline_is_split_by_half_with_minute_markers(self):
        """Entries carry the display minute of their own half."""
        report = self.service.build_report(self.snapshot)
        self.assertEqual([e.event_id for e in report.first_half], ["ko", "g1", "c1", "ht"])
        self.assertEqual([e.event_id for e in report.second_half], ["sh", "g2", "s1", "pen", "ft"])

        minutes = {e.event_id: e.minute for e in report.first_half + report.second_half}
        self.assertEqual(minutes["g1"], "25'")
        self.assertEqual(minutes["c1"], "45+1:30'")
        self.assertEqual(minutes["g2"], "48'")
        self.assertEqual(minutes["pen"], "81'")

    def test_descriptions_use_player_names(self):
        """Known ids are replaced by names; unknown ids pass through."""
        report = self.service.build_report(self.snapshot)
        descriptions = {e.event_id: e.description for e in report.first_half + report.second_half}
        self.assertEqual(descriptions["g1"], "Goal (open play) by Nine, assist p7")
        self.assertEqual(descriptions["c1"], "Yellow card: p4")
        self.assertEqual(descriptions["g2"], "Goal conceded (open play)")
        self.assertEqual(descriptions["s1"], "p12 on for p4")
        self.assertEqual(descriptions["pen"], "Penalty for scored (Nine)")
        self.assertEqual(descriptions["ht"], "Half time")

    def test_player_tallies(self):
        """Contributions are collected per player, top scorers first."""
        players = self.service.build_report(self.snapshot).players
        self.assertEqual([p.player_id for p in players], ["p9", "p7", "p12", "p4"])
        nine = players[0]
        self.assertEqual((nine.goals, nine.penalties_scored), (1, 1))
        four = players[-1]
        self.assertEqual(four.yellow_cards, 1)
        self.assertTrue(four.subbed_off)
        self.assertTrue(players[2].subbed_on)

    def test_time_on_pitch(self):
        """Starters play from kick-off; substitutes from their substitution stamp."""
        players = {p.player_id: p for p in self.service.build_report(self.snapshot).players}
        self.assertEqual(players["p9"].time_on_pitch_seconds, 5500)
        self.assertEqual(players["p9"].time_off_pitch_seconds, 0)
        self.assertEqual(players["p4"].time_on_pitch_seconds, 4000)
        self.assertEqual(players["p4"].time_off_pitch_seconds, 1500)
        self.assertEqual(players["p12"].time_on_pitch_seconds, 1500)
        self.assertEqual(players["p12"].time_off_pitch_seconds, 4000)

    def test_time_on_pitch_with_rolling_substitutions(self):
        """A player taken off and brought back accumulates both spells."""
        snapshot = MatchSnapshot(
            metadata=MatchMetadata(
                match_id="rolling", starting_lineup=("a", "b"), substitutes=("c", "d")
            ),
            phase=ClockPhase.FIRST_HALF_PAUSED,
            accumulated_seconds=1000,
            events=(
                SubstitutionEvent("s1", 200, "a", "c"),
                SubstitutionEvent("s2", 700, "c", "a"),
            ),
        )
        players = {p.player_id: p for p in self.service.build_report(snapshot).players}
        self.assertEqual(players["a"].time_on_pitch_seconds, 200 + 300)
        self.assertEqual(players["b"].time_on_pitch_seconds, 1000)
        self.assertEqual(players["c"].time_on_pitch_seconds, 500)
        self.assertEqual(players["d"].time_on_pitch_seconds, 0)
        self.assertEqual(players["d"].time_off_pitch_seconds, 1000)

    def test_running_match_is_ongoing(self):
        """A live snapshot reads the clock at the pinned instant."""
        snapshot = MatchSnapshot(
            metadata=MatchMetadata(match_id="live"),
            phase=ClockPhase.FIRST_HALF_RUNNING,
            running_since_ts=1000.0,
            accumulated_seconds=60,
            events=(GoalForEvent("g1", 30),),
        )
        report = self.service.build_report(snapshot, at_ts=1100.0)
        self.assertEqual(report.result, "ongoing")
        self.assertEqual(report.elapsed_seconds, 160)
        self.assertEqual(report.second_half, [])

    def test_csv_export(self):
        """CSV has one row per event followed by the score and total time."""
        rows = list(csv.reader(io.StringIO(self.service.export_report_csv(self.snapshot))))
        self.assertEqual(rows[0], ["Minute", "Half", "Event", "Details"])
        self.assertEqual(rows[2], ["25'", "first", "goal_for", "Goal (open play) by Nine, assist p7"])
        self.assertEqual(len(rows), 1 + 9 + 3)
        self.assertEqual(rows[10], [])
        self.assertEqual(rows[11], ["Score", "", "draw", "1-1"])
        self.assertEqual(rows[12], ["Total time", "", "", "90+5'"])

    def test_unknown_event_type_is_rejected(self):
        """describe() refuses event classes it does not know."""
        with self.assertRaises(TypeError):
            self.service.describe(object())


if __name__ == "__main__":
    unittest.main()
