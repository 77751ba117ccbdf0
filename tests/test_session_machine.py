import unittest

from mathsprint.app import events
from mathsprint.app.session_machine import RoundSettings, Screen, SessionMachine
from mathsprint.app.timers import ManualScheduler
from mathsprint.errors import InvalidTransitionError
from mathsprint.results.schema import Configuration
from mathsprint.stats.scoring import Outcome
from mathsprint.storage.store import MemoryBlobStore, RecordStore

from tests.support import ScriptedRng, StepClock, only


class SessionMachineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.scheduler = ManualScheduler()
        self.blobs = MemoryBlobStore()
        self.store = RecordStore(self.blobs)
        self.store.load()
        ids = iter(f"game-{i}" for i in range(1000))
        self.machine = SessionMachine(
            self.store,
            self.scheduler,
            settings=RoundSettings(),
            config=only(add=True),
            rng=ScriptedRng(ints=(7, 5)),
            clock=StepClock(),
            id_factory=lambda: next(ids),
        )
        self.seen = []
        for name in (events.SCREEN_CHANGED, events.PROBLEM_CHANGED, events.ROUND_FINISHED):
            self.machine.bus.subscribe(name, lambda payload, name=name: self.seen.append((name, payload)))

    def finish_round(self) -> None:
        self.scheduler.advance(60_000)

    def test_starts_on_menu(self) -> None:
        self.assertIs(self.machine.screen, Screen.MENU)
        self.assertIsNone(self.machine.problem)
        self.assertEqual(self.scheduler.pending(), 0)

    def test_start_resets_round(self) -> None:
        self.machine.start()
        self.assertIs(self.machine.screen, Screen.PLAYING)
        self.assertEqual(self.machine.time_left, 60)
        self.assertEqual(self.machine.score, 0)
        self.assertEqual(self.machine.problem.question, "7 + 5")
        self.assertEqual(self.machine.progress_percent, 100.0)
        self.assertIn((events.SCREEN_CHANGED, Screen.PLAYING), self.seen)

    def test_countdown_ticks_once_per_second(self) -> None:
        self.machine.start()
        self.scheduler.advance(999)
        self.assertEqual(self.machine.time_left, 60)
        self.scheduler.advance(1)
        self.assertEqual(self.machine.time_left, 59)
        self.scheduler.advance(29_000)
        self.assertEqual(self.machine.time_left, 30)
        self.assertEqual(self.machine.progress_percent, 50.0)

    def test_correct_answer_locks_until_feedback_delay(self) -> None:
        self.machine.start()
        first = self.machine.problem
        self.assertIs(self.machine.submit("12"), Outcome.CORRECT)
        self.assertEqual(self.machine.score, 1)
        self.assertTrue(self.machine.is_locked)
        self.assertIs(self.machine.problem, first)

        self.assertIs(self.machine.submit("12"), Outcome.LOCKED)
        self.assertEqual(self.machine.score, 1)
        self.assertEqual(len(self.machine.round.tracker.history), 1)

        self.scheduler.advance(149)
        self.assertTrue(self.machine.is_locked)
        self.scheduler.advance(1)
        self.assertFalse(self.machine.is_locked)
        self.assertIsNot(self.machine.problem, first)
        self.assertIs(self.machine.submit("12"), Outcome.CORRECT)
        self.assertEqual(self.machine.score, 2)

    def test_wrong_answer_shows_failure_for_longer(self) -> None:
        self.machine.start()
        self.assertIs(self.machine.submit("11"), Outcome.INCORRECT)
        self.assertTrue(self.machine.failure_active)
        self.scheduler.advance(399)
        self.assertTrue(self.machine.failure_active)
        self.assertIs(self.machine.submit("12"), Outcome.LOCKED)
        self.scheduler.advance(1)
        self.assertFalse(self.machine.failure_active)
        self.assertFalse(self.machine.is_locked)
        self.assertEqual(self.machine.score, 0)

    def test_unparseable_answer_changes_nothing(self) -> None:
        self.machine.start()
        problem = self.machine.problem
        self.assertIs(self.machine.submit("abc"), Outcome.IGNORED)
        self.assertEqual(self.machine.score, 0)
        self.assertEqual(self.machine.round.tracker.history, [])
        self.assertIs(self.machine.problem, problem)
        self.assertFalse(self.machine.is_locked)

    def test_overlong_answer_keeps_round_unchanged(self) -> None:
        self.machine.start()
        problem = self.machine.problem
        self.assertIs(self.machine.submit("9" * 5000), Outcome.IGNORED)
        self.assertEqual(self.machine.round.tracker.history, [])
        self.assertIs(self.machine.problem, problem)
        self.assertFalse(self.machine.is_locked)

    def test_finishing_without_round_stores_nothing(self) -> None:
        self.machine._finish_round()
        self.assertIs(self.machine.screen, Screen.MENU)
        self.assertEqual(self.store.list(), [])

    def test_submit_outside_round_is_ignored(self) -> None:
        self.assertIs(self.machine.submit("12"), Outcome.IGNORED)

    def test_round_end_persists_record(self) -> None:
        self.machine.start()
        self.machine.submit("12")
        self.scheduler.advance(150)
        self.machine.submit("1")
        self.scheduler.advance(400)
        self.machine.submit("12")
        self.finish_round()

        self.assertIs(self.machine.screen, Screen.RESULT)
        self.assertEqual(self.scheduler.pending(), 0)
        records = self.store.list()
        self.assertEqual(len(records), 1)
        rec = records[0]
        self.assertEqual((rec.id, rec.score, rec.accuracy), ("game-0", 2, 67))
        self.assertEqual(rec.config, only(add=True))
        self.assertIn("game-0", self.blobs.blobs[self.store.key])
        self.assertEqual(self.machine.last_record, rec)
        self.assertEqual([h.user_answer for h in self.machine.summary().missed], [1])
        self.assertIn((events.ROUND_FINISHED, rec), self.seen)

    def test_empty_round_scores_zero_accuracy(self) -> None:
        self.machine.start()
        self.finish_round()
        rec = self.store.list()[0]
        self.assertEqual((rec.score, rec.accuracy), (0, 0))

    def test_round_end_cancels_pending_feedback(self) -> None:
        self.machine.start()
        self.scheduler.advance(59_900)
        self.machine.submit("12")
        self.scheduler.advance(100)
        self.assertIs(self.machine.screen, Screen.RESULT)
        self.assertFalse(self.machine.is_locked)
        self.assertEqual(self.scheduler.pending(), 0)

    def test_abandon_discards_round(self) -> None:
        self.machine.start()
        self.machine.submit("12")
        self.machine.abandon()
        self.assertIs(self.machine.screen, Screen.MENU)
        self.assertIsNone(self.machine.round)
        self.assertEqual(self.scheduler.pending(), 0)
        self.finish_round()
        self.assertEqual(self.store.list(), [])
        self.assertNotIn(self.store.key, self.blobs.blobs)

    def test_stale_feedback_cannot_touch_next_round(self) -> None:
        self.machine.start()
        self.machine.submit("11")
        self.machine.abandon()
        self.machine.start()
        problem = self.machine.problem
        self.scheduler.advance(400)
        self.assertIs(self.machine.problem, problem)
        self.assertFalse(self.machine.failure_active)

    def test_play_again_keeps_single_countdown(self) -> None:
        self.machine.start()
        self.machine.submit("12")
        self.finish_round()
        self.machine.play_again()
        self.assertEqual(self.machine.score, 0)
        self.assertEqual(self.machine.round.tracker.history, [])
        self.assertEqual(self.scheduler.pending(), 1)
        self.scheduler.advance(1000)
        self.assertEqual(self.machine.time_left, 59)

    def test_history_capped_at_fifty(self) -> None:
        self.machine.start()
        for _ in range(55):
            self.finish_round()
            self.machine.play_again()
        self.machine.abandon()
        records = self.store.list()
        self.assertEqual(len(records), 50)
        self.assertEqual(records[0].id, "game-54")
        self.assertEqual(records[-1].id, "game-5")

    def test_toggle_guards_last_operator(self) -> None:
        self.assertEqual(self.machine.toggle("add"), only(add=True))
        self.machine.toggle("negatives")
        self.machine.toggle("doubleDigits")
        self.assertTrue(self.machine.config.negatives)
        self.assertTrue(self.machine.config.double_digits)
        self.machine.toggle("mul")
        self.machine.toggle("add")
        self.assertEqual(self.machine.config.active_operators(), ["mul"])

    def test_round_keeps_config_snapshot(self) -> None:
        self.machine.start()
        self.finish_round()
        self.machine.open_settings()
        self.machine.toggle("sub")
        self.assertEqual(self.store.list()[0].config, only(add=True))
        self.assertEqual(self.machine.config, only(add=True, sub=True))

    def test_invalid_transitions_raise(self) -> None:
        with self.assertRaises(InvalidTransitionError):
            self.machine.abandon()
        with self.assertRaises(InvalidTransitionError):
            self.machine.play_again()
        with self.assertRaises(InvalidTransitionError):
            self.machine.back()
        self.machine.start()
        with self.assertRaises(InvalidTransitionError):
            self.machine.start()
        with self.assertRaises(InvalidTransitionError):
            self.machine.toggle("sub")
        with self.assertRaises(InvalidTransitionError):
            self.machine.view_history()

    def test_history_screen_round_trip(self) -> None:
        self.machine.start()
        self.finish_round()
        self.machine.open_settings()
        groups = self.machine.view_history()
        self.assertIs(self.machine.screen, Screen.HISTORY)
        self.assertEqual([g.key for g in groups], ["+"])
        self.machine.back()
        self.assertIs(self.machine.screen, Screen.MENU)

    def test_default_configuration_has_all_operators(self) -> None:
        machine = SessionMachine(self.store, self.scheduler)
        self.assertEqual(machine.config, Configuration())
        self.assertEqual(machine.config.active_operators(), ["add", "sub", "mul", "div"])


if __name__ == "__main__":
    unittest.main()
