import unittest
from unittest.mock import patch

from courtsense.errors import ClockRunningError
from courtsense.services import ClockState, ManualScheduler, OffenseClock

NOW = "courtsense.services.clock_service.now_ms"


class OffenseClockTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = OffenseClock()

    def test_starts_idle(self) -> None:
        self.assertEqual(self.clock.state, ClockState.IDLE)
        self.assertEqual(self.clock.elapsed_ms, 0)
        self.assertFalse(self.clock.is_running)

    def test_elapsed_recomputed_from_start_mark(self) -> None:
        with patch(NOW, return_value=10_000):
            self.clock.start()
        with patch(NOW, return_value=12_345):
            self.assertEqual(self.clock.elapsed_ms, 2_345)
            self.assertEqual(self.clock.elapsed_seconds, 2)
            self.assertEqual(self.clock.display(), "0:02.34")
        with patch(NOW, return_value=15_000):
            self.clock.pause()

        self.assertEqual(self.clock.state, ClockState.PAUSED)
        self.assertEqual(self.clock.elapsed_ms, 5_000)

    def test_resume_continues_from_paused_value(self) -> None:
        with patch(NOW, return_value=0):
            self.clock.start()
        with patch(NOW, return_value=3_000):
            self.clock.pause()
        # Time spent paused is not counted
        with patch(NOW, return_value=60_000):
            self.clock.start()
        with patch(NOW, return_value=61_500):
            self.clock.pause()
        self.assertEqual(self.clock.elapsed_ms, 4_500)

    def test_start_while_running_keeps_anchor(self) -> None:
        with patch(NOW, return_value=1_000):
            self.clock.start()
        with patch(NOW, return_value=2_000):
            self.clock.start()
        with patch(NOW, return_value=4_000):
            self.assertEqual(self.clock.elapsed_ms, 3_000)

    def test_adjust_only_when_stopped_and_clamped(self) -> None:
        self.assertEqual(self.clock.adjust(3), 3_000)
        self.assertEqual(self.clock.state, ClockState.PAUSED)
        self.assertEqual(self.clock.adjust(-10), 0)
        self.assertEqual(self.clock.state, ClockState.IDLE)

        with patch(NOW, return_value=0):
            self.clock.start()
        with self.assertRaises(ClockRunningError):
            self.clock.adjust(1)

    def test_elapsed_never_negative_for_any_sequence(self) -> None:
        steps = [("adjust", -5), ("start", 100), ("pause", 50), ("adjust", -1), ("start", 400),
                 ("pause", 1_700), ("adjust", 2), ("adjust", -9)]
        for action, value in steps:
            if action == "adjust":
                self.clock.adjust(value)
            else:
                with patch(NOW, return_value=value):
                    getattr(self.clock, action)()
            self.assertGreaterEqual(self.clock.elapsed_ms, 0)

    def test_reset_returns_to_idle(self) -> None:
        self.clock.adjust(7)
        self.clock.reset()
        self.assertEqual(self.clock.state, ClockState.IDLE)
        self.assertEqual(self.clock.elapsed_ms, 0)


class OffenseClockSchedulingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.scheduler = ManualScheduler()
        self.ticks = []
        self.clock = OffenseClock(scheduler=self.scheduler, on_tick=self.ticks.append)

    def test_tick_reports_recomputed_elapsed(self) -> None:
        with patch(NOW, return_value=1_000):
            self.clock.start()
        self.assertEqual(self.scheduler.active_count, 1)
        with patch(NOW, return_value=1_010):
            self.scheduler.tick()
        with patch(NOW, return_value=1_500):
            self.scheduler.tick()
        self.assertEqual(self.ticks, [10, 500])

    def test_pause_reset_and_teardown_cancel_handle(self) -> None:
        with patch(NOW, return_value=0):
            self.clock.start()
            self.clock.pause()
        self.assertEqual(self.scheduler.active_count, 0)

        with patch(NOW, return_value=0):
            self.clock.start()
        self.clock.reset()
        self.assertEqual(self.scheduler.active_count, 0)

        with patch(NOW, return_value=0):
            self.clock.start()
            self.clock.teardown()
        self.assertEqual(self.scheduler.active_count, 0)
        self.scheduler.tick()
        self.assertEqual(self.ticks, [])


if __name__ == "__main__":
    unittest.main()
