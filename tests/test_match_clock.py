import unittest
from unittest.mock import patch

from matchday.errors import InvalidTransition, PreconditionViolation
from matchday.models import ClockPhase, ClockState, Half
from matchday.services import MatchClock

NOW_TS = "matchday.services.match_clock.now_ts"


class MatchClockTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = MatchClock(90)

    def _at(self, ts):
        return patch(NOW_TS, return_value=ts)

    def test_new_clock_is_not_started(self) -> None:
        self.assertIs(self.clock.phase, ClockPhase.NOT_STARTED)
        self.assertIs(self.clock.current_half, Half.FIRST)
        self.assertEqual(self.clock.elapsed_seconds(), 0)
        self.assertEqual(self.clock.half_duration_seconds, 2700)
        self.assertEqual(self.clock.regulation_seconds, 5400)
        self.assertFalse(self.clock.is_running)
        self.assertFalse(self.clock.is_paused)

    def test_odd_duration_is_rejected(self) -> None:
        with self.assertRaises(PreconditionViolation):
            MatchClock(91)
        with self.assertRaises(PreconditionViolation):
            MatchClock(0)

    def test_elapsed_follows_wall_clock_while_running(self) -> None:
        with self._at(1000):
            self.clock.start()
        self.assertIs(self.clock.phase, ClockPhase.FIRST_HALF_RUNNING)
        self.assertTrue(self.clock.is_running)

        with self._at(1000):
            self.assertEqual(self.clock.elapsed_seconds(), 0)
        with self._at(1125.9):
            self.assertEqual(self.clock.elapsed_seconds(), 125)

    def test_pause_and_resume_without_time_passing_is_idempotent(self) -> None:
        with self._at(1000):
            self.clock.start()
        with self._at(1300):
            before = self.clock.elapsed_seconds()
            self.clock.pause()
            self.clock.resume()
            self.assertEqual(self.clock.elapsed_seconds(), before)

    def test_paused_time_is_not_counted(self) -> None:
        with self._at(1000):
            self.clock.start()
        with self._at(1000):
            self.clock.pause()
        self.assertIs(self.clock.phase, ClockPhase.FIRST_HALF_PAUSED)
        with self._at(5000):
            self.assertEqual(self.clock.elapsed_seconds(), 0)
            self.clock.resume()
        with self._at(5010):
            self.assertEqual(self.clock.elapsed_seconds(), 10)

    def test_elapsed_is_monotonic_across_commands(self) -> None:
        readings = []
        script = [
            (1000, self.clock.start), (1200, self.clock.pause), (1500, self.clock.resume),
            (2000, self.clock.trigger_half_time), (2600, self.clock.start_second_half),
            (3000, self.clock.pause), (3100, self.clock.resume), (4000, self.clock.trigger_full_time),
        ]
        for ts, command in script:
            with self._at(ts):
                readings.append(self.clock.elapsed_seconds())
                command()
                readings.append(self.clock.elapsed_seconds())
        self.assertEqual(readings, sorted(readings))
        # 200 + 500 in the first half, 400 + 900 in the second
        self.assertEqual(readings[-1], 2000)

    def test_wall_clock_stepping_backwards_never_reduces_elapsed(self) -> None:
        with self._at(1000):
            self.clock.start()
        with self._at(1100):
            self.clock.pause()
            self.clock.resume()
        with self._at(900):
            self.assertEqual(self.clock.elapsed_seconds(), 100)

    def test_half_time_freezes_and_records_the_first_half(self) -> None:
        with self._at(1000):
            self.clock.start()
        with self._at(3820):
            self.clock.trigger_half_time()
        self.assertIs(self.clock.phase, ClockPhase.HALF_TIME)
        self.assertEqual(self.clock.half_time_elapsed_seconds, 2820)
        with self._at(9999):
            self.assertEqual(self.clock.elapsed_seconds(), 2820)

        with self._at(10000):
            self.clock.start_second_half()
        self.assertIs(self.clock.current_half, Half.SECOND)
        self.assertIs(self.clock.phase, ClockPhase.SECOND_HALF_RUNNING)
        with self._at(10060):
            self.assertEqual(self.clock.elapsed_seconds(), 2880)

    def test_half_time_can_be_called_while_paused(self) -> None:
        with self._at(1000):
            self.clock.start()
        with self._at(1500):
            self.clock.pause()
        with self._at(2000):
            self.clock.trigger_half_time()
        self.assertEqual(self.clock.half_time_elapsed_seconds, 500)

    def test_full_time_freezes_the_clock(self) -> None:
        with self._at(0):
            self.clock.start()
        with self._at(2700):
            self.clock.trigger_half_time()
        with self._at(3600):
            self.clock.start_second_half()
        with self._at(6300):
            self.clock.pause()
        with self._at(6400):
            self.clock.trigger_full_time()
        self.assertIs(self.clock.phase, ClockPhase.COMPLETED)
        with self._at(99999):
            self.assertEqual(self.clock.elapsed_seconds(), 5400)

    def test_illegal_commands_leave_state_unchanged(self) -> None:
        illegal = {
            ClockPhase.NOT_STARTED: ["pause", "resume", "trigger_half_time", "start_second_half", "trigger_full_time"],
            ClockPhase.FIRST_HALF_RUNNING: ["start", "resume", "start_second_half", "trigger_full_time"],
            ClockPhase.HALF_TIME: ["start", "pause", "resume", "trigger_half_time", "trigger_full_time"],
        }
        setup = {
            ClockPhase.NOT_STARTED: [],
            ClockPhase.FIRST_HALF_RUNNING: ["start"],
            ClockPhase.HALF_TIME: ["start", "trigger_half_time"],
        }
        for phase, commands in illegal.items():
            for command in commands:
                with self.subTest(phase=phase, command=command), self._at(1000):
                    clock = MatchClock(90)
                    for step in setup[phase]:
                        getattr(clock, step)()
                    before = clock.state
                    with self.assertRaises(InvalidTransition):
                        getattr(clock, command)()
                    self.assertEqual(clock.state, before)

    def test_completed_clock_rejects_everything(self) -> None:
        with self._at(1000):
            self.clock.start()
            self.clock.trigger_half_time()
            self.clock.start_second_half()
            self.clock.trigger_full_time()
        before = self.clock.state
        for command in ("start", "pause", "resume", "trigger_half_time", "start_second_half", "trigger_full_time"):
            with self.assertRaises(InvalidTransition):
                getattr(self.clock, command)()
        with self.assertRaises(InvalidTransition):
            self.clock.set_added_time("first", 60)
        self.assertEqual(self.clock.state, before)

    def test_invalid_transition_message_names_command_and_phase(self) -> None:
        with self.assertRaises(InvalidTransition) as ctx:
            self.clock.pause()
        self.assertEqual(ctx.exception.phase, "not_started")
        self.assertIn("pause", str(ctx.exception))

    def test_set_added_time(self) -> None:
        self.clock.set_added_time("first", 120)
        self.clock.set_added_time(Half.SECOND, 180)
        self.assertEqual(self.clock.first_half_added_seconds, 120)
        self.assertEqual(self.clock.second_half_added_seconds, 180)

        # Overwrites, does not accumulate
        self.clock.set_added_time("first", 60)
        self.assertEqual(self.clock.first_half_added_seconds, 60)

        for bad in (-1, 1.5, None, True):
            with self.assertRaises(PreconditionViolation):
                self.clock.set_added_time("first", bad)
        with self.assertRaises(PreconditionViolation):
            self.clock.set_added_time("third", 60)

    def test_display_time_uses_current_half(self) -> None:
        with self._at(0):
            self.clock.start()
        with self._at(2820):
            self.assertEqual(self.clock.display_time(), "45+2'")
            self.clock.set_added_time("first", 120)
            self.clock.trigger_half_time()
        with self._at(4000):
            self.clock.start_second_half()
        with self._at(4060):
            # 2880s played, rebased by the 120s declared for the first half
            self.assertEqual(self.clock.display_time(), "46'")

    def test_undeclared_first_half_overrun_rebases_second_half(self) -> None:
        with self._at(0):
            self.clock.start()
        with self._at(2880):
            self.clock.trigger_half_time()
        self.assertEqual(self.clock.first_half_added_seconds, 180)
        with self._at(5000):
            self.clock.start_second_half()
            self.assertEqual(self.clock.display_time(), "45'")
        with self._at(5060):
            self.assertEqual(self.clock.display_time(), "46'")

    def test_overrun_played_replaces_declared_added_time(self) -> None:
        with self._at(0):
            self.clock.start()
            self.clock.set_added_time("first", 60)
        with self._at(2850):
            self.clock.trigger_half_time()
        self.assertEqual(self.clock.first_half_added_seconds, 150)

    def test_short_first_half_keeps_declared_added_time(self) -> None:
        with self._at(0):
            self.clock.start()
            self.clock.set_added_time("first", 60)
        with self._at(2600):
            self.clock.trigger_half_time()
        self.assertEqual(self.clock.first_half_added_seconds, 60)
        self.assertEqual(self.clock.half_time_elapsed_seconds, 2600)

    def test_half_time_and_full_time_suggestions(self) -> None:
        self.assertFalse(self.clock.should_suggest_half_time())
        with self._at(0):
            self.clock.start()
            self.clock.set_added_time("first", 60)
        with self._at(2759):
            self.assertFalse(self.clock.should_suggest_half_time())
        with self._at(2760):
            self.assertTrue(self.clock.should_suggest_half_time())
            self.assertFalse(self.clock.should_suggest_full_time())
            self.clock.trigger_half_time()
            self.assertFalse(self.clock.should_suggest_half_time())
            self.clock.start_second_half()
        with self._at(2760 + 2700):
            self.assertTrue(self.clock.should_suggest_full_time())

    def test_state_property_is_a_copy(self) -> None:
        state = self.clock.state
        state.accumulated_seconds = 500
        self.assertEqual(self.clock.elapsed_seconds(), 0)

    def test_restored_running_clock_counts_the_gap(self) -> None:
        with self._at(1000):
            self.clock.start()
        with self._at(1100):
            self.clock.pause()
            self.clock.resume()
        restored = MatchClock.from_state(ClockState.from_json(self.clock.state.to_json()))
        with self._at(1700):
            self.assertEqual(restored.elapsed_seconds(), 700)
            self.assertEqual(restored.elapsed_seconds(), self.clock.elapsed_seconds())


if __name__ == "__main__":
    unittest.main()
