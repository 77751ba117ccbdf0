import threading
import time
import unittest

from mathsprint.app.timers import ManualScheduler, ThreadingScheduler


class ManualSchedulerTests(unittest.TestCase):
    def test_fires_in_due_order(self) -> None:
        s = ManualScheduler()
        fired = []
        s.call_later(300, lambda: fired.append("b"))
        s.call_later(100, lambda: fired.append("a"))
        s.call_later(300, lambda: fired.append("c"))
        s.advance(299)
        self.assertEqual(fired, ["a"])
        s.advance(1)
        self.assertEqual(fired, ["a", "b", "c"])
        self.assertEqual(s.now_ms, 300)
        self.assertEqual(s.pending(), 0)

    def test_repeating_and_cancel(self) -> None:
        s = ManualScheduler()
        ticks = []
        handle = s.call_repeating(1000, lambda: ticks.append(s.now_ms))
        s.advance(3500)
        self.assertEqual(ticks, [1000, 2000, 3000])
        handle.cancel()
        handle.cancel()
        s.advance(5000)
        self.assertEqual(len(ticks), 3)
        self.assertFalse(handle.active)

    def test_callback_can_cancel_other_timers(self) -> None:
        s = ManualScheduler()
        fired = []
        later = s.call_later(200, lambda: fired.append("later"))
        s.call_later(100, later.cancel)
        s.advance(1000)
        self.assertEqual(fired, [])

    def test_callback_can_schedule_more(self) -> None:
        s = ManualScheduler()
        fired = []
        s.call_later(100, lambda: s.call_later(50, lambda: fired.append(s.now_ms)))
        s.advance(1000)
        self.assertEqual(fired, [150])

    def test_repeating_needs_positive_interval(self) -> None:
        with self.assertRaises(ValueError):
            ManualScheduler().call_repeating(0, lambda: None)


class ThreadingSchedulerTests(unittest.TestCase):
    def test_call_later_fires(self) -> None:
        s = ThreadingScheduler()
        done = threading.Event()
        handle = s.call_later(10, done.set)
        self.assertTrue(done.wait(2.0))
        time.sleep(0.01)
        self.assertFalse(handle.active)

    def test_cancelled_timer_does_not_fire(self) -> None:
        s = ThreadingScheduler()
        fired = threading.Event()
        handle = s.call_later(50, fired.set)
        handle.cancel()
        self.assertFalse(fired.wait(0.2))

    def test_repeating_until_cancelled(self) -> None:
        s = ThreadingScheduler()
        count = []
        enough = threading.Event()

        def tick() -> None:
            count.append(1)
            if len(count) >= 3:
                handle.cancel()
                enough.set()

        handle = s.call_repeating(10, tick)
        self.assertTrue(enough.wait(2.0))
        time.sleep(0.05)
        self.assertEqual(len(count), 3)


if __name__ == "__main__":
    unittest.main()
