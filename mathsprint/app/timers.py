from __future__ import annotations

"""Cancellable one-shot and repeating timers.

Two schedulers share one interface (`call_later`, `call_repeating`):

- `ManualScheduler` keeps a virtual clock that only moves on `advance()`.
  Tests and headless drivers use it for deterministic timing.
- `ThreadingScheduler` runs callbacks on `threading.Timer` threads but
  serialises every callback through `lock`, so round state only ever sees
  one caller at a time. Front ends take the same lock around user actions.
"""

import threading
from typing import Callable, List, Optional, Protocol

Callback = Callable[[], None]


class TimerHandle:
    """Handle returned by a scheduler; `cancel()` is idempotent."""

    def __init__(self, interval_ms: int, repeating: bool) -> None:
        self.interval_ms = int(interval_ms)
        self.repeating = repeating
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        self._active = False


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callback) -> TimerHandle: ...

    def call_repeating(self, interval_ms: int, callback: Callback) -> TimerHandle: ...


class _ManualTimer(TimerHandle):
    def __init__(self, due_ms: int, seq: int, interval_ms: int, repeating: bool, callback: Callback) -> None:
        super().__init__(interval_ms, repeating)
        self.due_ms = due_ms
        self.seq = seq
        self.callback = callback


class ManualScheduler:
    """Virtual-clock scheduler. Time moves only through `advance`."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._timers: List[_ManualTimer] = []
        self._seq = 0

    def _add(self, delay_ms: int, callback: Callback, repeating: bool) -> TimerHandle:
        if delay_ms <= 0 and repeating:
            raise ValueError("repeating interval must be positive")
        self._seq += 1
        t = _ManualTimer(self.now_ms + max(0, int(delay_ms)), self._seq, int(delay_ms), repeating, callback)
        self._timers.append(t)
        return t

    def call_later(self, delay_ms: int, callback: Callback) -> TimerHandle:
        return self._add(delay_ms, callback, repeating=False)

    def call_repeating(self, interval_ms: int, callback: Callback) -> TimerHandle:
        return self._add(interval_ms, callback, repeating=True)

    def pending(self) -> int:
        return sum(1 for t in self._timers if t.active)

    def advance(self, ms: int) -> None:
        """Move the clock forward `ms`, firing due timers in due-time order."""
        target = self.now_ms + int(ms)
        while True:
            self._timers = [t for t in self._timers if t.active]
            due = [t for t in self._timers if t.due_ms <= target]
            if not due:
                break
            t = min(due, key=lambda x: (x.due_ms, x.seq))
            self.now_ms = t.due_ms
            if t.repeating:
                t.due_ms += t.interval_ms
            else:
                t.cancel()
            t.callback()
        self.now_ms = target


class _ThreadTimer(TimerHandle):
    def __init__(self, interval_ms: int, repeating: bool) -> None:
        super().__init__(interval_ms, repeating)
        self._timer: Optional[threading.Timer] = None

    def cancel(self) -> None:
        super().cancel()
        if self._timer:
            self._timer.cancel()
            self._timer = None


class ThreadingScheduler:
    """Wall-clock scheduler on daemon `threading.Timer` threads."""

    def __init__(self) -> None:
        self.lock = threading.RLock()

    def _arm(self, handle: _ThreadTimer, callback: Callback) -> None:
        def fire() -> None:
            with self.lock:
                if not handle.active:
                    return
                if handle.repeating:
                    self._arm(handle, callback)
                else:
                    handle._active = False
                callback()

        timer = threading.Timer(handle.interval_ms / 1000.0, fire)
        timer.daemon = True
        handle._timer = timer
        timer.start()

    def call_later(self, delay_ms: int, callback: Callback) -> TimerHandle:
        handle = _ThreadTimer(max(0, int(delay_ms)), repeating=False)
        self._arm(handle, callback)
        return handle

    def call_repeating(self, interval_ms: int, callback: Callback) -> TimerHandle:
        if interval_ms <= 0:
            raise ValueError("repeating interval must be positive")
        handle = _ThreadTimer(int(interval_ms), repeating=True)
        self._arm(handle, callback)
        return handle
