"""Offense clock for the Court Sense offense tracker."""

import logging
from enum import Enum
from typing import Callable, Optional

from ..errors import ClockRunningError
from ..utils import CLOCK_TICK_SECONDS, fmt_clock, now_ms
from .scheduler import ScheduledHandle, Scheduler

logger = logging.getLogger(__name__)


class ClockState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class OffenseClock:
    """
    Tracks elapsed time of the live offense.

    While running, elapsed time is always recomputed as ``now - start_mark``
    rather than accumulated per tick, so a suspended display never drifts.
    An optional scheduler drives ``on_tick`` for hosts that render the clock.
    """

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        on_tick: Optional[Callable[[int], None]] = None,
        tick_seconds: float = CLOCK_TICK_SECONDS,
    ):
        self._scheduler = scheduler
        self._on_tick = on_tick
        self._tick_seconds = tick_seconds
        self._handle: Optional[ScheduledHandle] = None
        self._start_mark: Optional[int] = None
        self._elapsed_ms = 0

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        return self._start_mark is not None

    @property
    def state(self) -> ClockState:
        if self.is_running:
            return ClockState.RUNNING
        if self._elapsed_ms == 0:
            return ClockState.IDLE
        return ClockState.PAUSED

    @property
    def elapsed_ms(self) -> int:
        """Elapsed offense time in milliseconds."""
        if self._start_mark is not None:
            return max(0, now_ms() - self._start_mark)
        return self._elapsed_ms

    @property
    def elapsed_seconds(self) -> int:
        """Elapsed time floored to whole seconds, the persisted resolution."""
        return self.elapsed_ms // 1000

    def display(self) -> str:
        return fmt_clock(self.elapsed_ms)

    # ------------------------------------------------------------------
    # Core controls
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Start or resume the clock from its current elapsed value."""
        if self.is_running:
            return
        self._start_mark = now_ms() - self._elapsed_ms
        if self._scheduler is not None:
            self._handle = self._scheduler.schedule(self._tick, self._tick_seconds)

    resume = start

    def pause(self) -> None:
        """Freeze the elapsed value and stop periodic updates."""
        if self._start_mark is None:
            return
        self._elapsed_ms = max(0, now_ms() - self._start_mark)
        self._start_mark = None
        self._cancel_tick()

    def toggle(self) -> None:
        if self.is_running:
            self.pause()
        else:
            self.start()

    def adjust(self, delta_seconds: int) -> int:
        """
        Nudge the stopped clock by whole seconds, clamped at zero.

        Returns:
            The new elapsed value in milliseconds

        Raises:
            ClockRunningError: If the clock is running
        """
        if self.is_running:
            raise ClockRunningError("Pause the clock before adjusting it")
        self._elapsed_ms = max(0, self._elapsed_ms + int(delta_seconds) * 1000)
        return self._elapsed_ms

    def set_elapsed(self, elapsed_ms: int) -> None:
        """Restore a stopped clock to an exact value (used when a flow is cancelled)."""
        if self.is_running:
            raise ClockRunningError("Pause the clock before restoring it")
        self._elapsed_ms = max(0, int(elapsed_ms))

    def reset(self) -> None:
        """Return to idle with zero elapsed time."""
        self._cancel_tick()
        self._start_mark = None
        self._elapsed_ms = 0

    def teardown(self) -> None:
        """Release the periodic callback without changing the elapsed value."""
        if self.is_running:
            self.pause()
        self._cancel_tick()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _tick(self) -> None:
        if self._on_tick is not None and self.is_running:
            self._on_tick(self.elapsed_ms)

    def _cancel_tick(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
