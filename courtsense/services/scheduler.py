"""
Periodic callback scheduling for the offense clock.

The clock only needs "call this every N seconds until I cancel it". Keeping
that behind a small interface lets the web server, a desktop loop and the
tests each provide their own timer.
"""
import logging
import threading
from typing import Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)


class ScheduledHandle(Protocol):
    """Cancellation handle returned by a scheduler."""

    def cancel(self) -> None:
        ...

    @property
    def cancelled(self) -> bool:
        ...


class Scheduler(Protocol):
    """Interface for repeating callbacks."""

    def schedule(self, callback: Callable[[], None], period: float) -> ScheduledHandle:
        ...


class _ThreadingHandle:
    def __init__(self, callback: Callable[[], None], period: float):
        self._callback = callback
        self._period = period
        self._lock = threading.Lock()
        self._cancelled = False
        self._timer: Optional[threading.Timer] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _arm(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._timer = threading.Timer(self._period, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        if self._cancelled:
            return
        try:
            self._callback()
        except Exception:
            logger.exception("Scheduled callback failed; cancelling")
            self.cancel()
            return
        self._arm()

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class ThreadingScheduler:
    """Runs callbacks on re-armed daemon ``threading.Timer`` instances."""

    def schedule(self, callback: Callable[[], None], period: float) -> _ThreadingHandle:
        if period <= 0:
            raise ValueError("Schedule period must be positive")
        handle = _ThreadingHandle(callback, period)
        handle._arm()
        return handle


class _ManualHandle:
    def __init__(self, callback: Callable[[], None], period: float):
        self.callback = callback
        self.period = period
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class ManualScheduler:
    """
    Deterministic scheduler driven by explicit :meth:`tick` calls.

    Used by tests and by hosts that already own an event loop and want to
    pump the clock themselves.
    """

    def __init__(self) -> None:
        self._handles: List[_ManualHandle] = []

    def schedule(self, callback: Callable[[], None], period: float) -> _ManualHandle:
        handle = _ManualHandle(callback, period)
        self._handles.append(handle)
        return handle

    @property
    def active_count(self) -> int:
        return sum(1 for handle in self._handles if not handle.cancelled)

    def tick(self, times: int = 1) -> None:
        """Fire every active callback ``times`` times."""
        for _ in range(times):
            self._handles = [h for h in self._handles if not h.cancelled]
            for handle in list(self._handles):
                if not handle.cancelled:
                    handle.callback()
