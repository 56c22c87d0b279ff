from __future__ import annotations

from collections.abc import Callable

from domain.ports.host import Clock, FrameScheduler


class ManualFrameScheduler(FrameScheduler):
    def __init__(self) -> None:
        self._callbacks: dict[int, Callable[[], None]] = {}
        self._next_handle = 1
        self.frame = 0

    @property
    def pending(self) -> int:
        return len(self._callbacks)

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._callbacks[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._callbacks.pop(handle, None)

    def tick(self) -> int:
        # Requests made by these callbacks wait for the next tick.
        due = sorted(self._callbacks)
        self.frame += 1
        ran = 0
        for handle in due:
            callback = self._callbacks.pop(handle, None)
            if callback is None:
                continue
            callback()
            ran += 1
        return ran

    def run_frames(self, count: int) -> None:
        for _ in range(count):
            self.tick()

    def drain(self, limit: int = 100) -> None:
        for _ in range(limit):
            if not self._callbacks:
                return
            self.tick()
        msg = f"Frame callbacks still pending after {limit} ticks"
        raise RuntimeError(msg)


class ManualClock(Clock):
    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds
