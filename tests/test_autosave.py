import time
import unittest
from unittest.mock import MagicMock, patch

from matchday.models import MatchMetadata
from matchday.services import AutosaveLoop, InMemoryMatchStore, MatchSession


class AutosaveLoopTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = MatchSession(MatchMetadata(match_id="m1"))
        self.store = InMemoryMatchStore()
        self.loop = AutosaveLoop(self.session, self.store, interval_seconds=0.01)

    def test_tick_saves_only_when_the_snapshot_changes(self) -> None:
        self.assertTrue(self.loop.tick())
        self.assertEqual(self.store.list_match_ids(), ["m1"])
        self.assertFalse(self.loop.tick())

        with patch("matchday.services.match_clock.now_ts", return_value=1000):
            self.session.start_match()
        self.assertTrue(self.loop.tick())
        self.assertEqual(self.loop.last_saved_digest, self.session.snapshot().digest())

    def test_running_clock_alone_does_not_trigger_writes(self) -> None:
        with patch("matchday.services.match_clock.now_ts", return_value=1000):
            self.session.start_match()
        self.assertTrue(self.loop.tick())
        with patch("matchday.services.match_clock.now_ts", return_value=1600):
            self.assertFalse(self.loop.tick())

    def test_refused_save_is_reported_and_retried(self) -> None:
        store = MagicMock()
        store.save.side_effect = [False, True]
        loop = AutosaveLoop(self.session, store)

        self.assertFalse(loop.tick())
        self.assertIsNotNone(loop.last_error)
        self.assertIsNone(loop.last_saved_digest)

        self.assertTrue(loop.tick())
        self.assertIsNone(loop.last_error)
        self.assertEqual(store.save.call_count, 2)

    def test_store_exception_does_not_escape(self) -> None:
        store = MagicMock()
        store.save.side_effect = RuntimeError("boom")
        loop = AutosaveLoop(self.session, store)
        self.assertFalse(loop.tick())
        self.assertEqual(loop.last_error, "boom")

    def test_interval_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            AutosaveLoop(self.session, self.store, interval_seconds=0)

    def test_background_thread_saves_and_stops(self) -> None:
        self.loop.start()
        self.assertTrue(self.loop.running)
        deadline = time.monotonic() + 2
        while self.loop.last_saved_digest is None and time.monotonic() < deadline:
            time.sleep(0.01)
        self.loop.stop(timeout=2)
        self.assertFalse(self.loop.running)
        self.assertIsNotNone(self.store.load("m1"))

    def test_stop_performs_final_save(self) -> None:
        self.loop.stop()
        self.assertEqual(self.store.list_match_ids(), ["m1"])


if __name__ == "__main__":
    unittest.main()
