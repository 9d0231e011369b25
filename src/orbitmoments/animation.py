"""Cooperative animation clock: next-frame callbacks plus fixed-delay timers.

Single-threaded. Nothing runs until the owner advances the clock, which keeps
rail transitions deterministic. The Streamlit shell flushes after every event
(the browser animates the CSS transition); tests advance time explicitly.
"""

import heapq
import itertools
from collections.abc import Callable

Callback = Callable[[], None]


class AnimationScheduler:
    """Frame and timer queue driven by ``advance(ms)`` or ``flush()``."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._frames: list[Callback] = []
        self._timers: list[tuple[int, int, Callback]] = []
        self._seq = itertools.count()

    def request_frame(self, callback: Callback) -> None:
        """Run ``callback`` on the next frame (before any timer due at the same time)."""
        self._frames.append(callback)

    def call_later(self, delay_ms: int, callback: Callback) -> None:
        heapq.heappush(self._timers, (self.now_ms + delay_ms, next(self._seq), callback))

    @property
    def pending(self) -> int:
        return len(self._frames) + len(self._timers)

    def _run_frames(self) -> None:
        while self._frames:
            frames, self._frames = self._frames, []
            for cb in frames:
                cb()

    def advance(self, ms: int) -> None:
        """Move the clock forward ``ms`` milliseconds, running everything that falls due."""
        target = self.now_ms + ms
        self._run_frames()
        while self._timers and self._timers[0][0] <= target:
            due, _, cb = heapq.heappop(self._timers)
            self.now_ms = due
            cb()
            self._run_frames()
        self.now_ms = target

    def flush(self) -> None:
        """Run until idle, jumping the clock to each timer in turn."""
        self._run_frames()
        while self._timers:
            due, _, cb = heapq.heappop(self._timers)
            self.now_ms = max(self.now_ms, due)
            cb()
            self._run_frames()
