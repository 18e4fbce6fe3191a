"""Frame schedulers — the host's "call me on the next display frame".

Semantics follow a browser's animation-frame queue: a callback requested
now fires once, on the next frame, with that frame's timestamp in
milliseconds.  A callback requested while a frame is being delivered
waits for the following frame.

ManualFrameScheduler is driven by the host (or a test) calling
``tick(timestamp_ms)``.  ThreadedFrameScheduler runs its own daemon thread
at a fixed frame rate for headless services; it delivers frames strictly
one after another, so at most one frame callback is ever in flight.
"""

from __future__ import annotations

import itertools
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from loguru import logger

FrameCallback = Callable[[float], None]


class FrameScheduler(ABC):
    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> int:
        """Schedule ``callback`` for the next frame; return a cancel handle."""

    @abstractmethod
    def cancel_frame(self, handle: int) -> None:
        """Drop a pending callback.  Unknown or already-fired handles are ignored."""


class _PendingFrames:
    """Handle bookkeeping shared by both schedulers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._pending: dict[int, FrameCallback] = {}

    def add(self, callback: FrameCallback) -> int:
        with self._lock:
            handle = next(self._ids)
            self._pending[handle] = callback
            return handle

    def cancel(self, handle: int) -> None:
        with self._lock:
            self._pending.pop(handle, None)

    def take_all(self) -> list[tuple[int, FrameCallback]]:
        with self._lock:
            return list(self._pending.items())

    def claim(self, handle: int) -> Optional[FrameCallback]:
        # A callback cancelled by an earlier callback in the same frame
        # must not run.
        with self._lock:
            return self._pending.pop(handle, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)


class ManualFrameScheduler(FrameScheduler):
    """Frames happen when the host says so."""

    def __init__(self) -> None:
        self._frames = _PendingFrames()

    @property
    def pending(self) -> int:
        return len(self._frames)

    def request_frame(self, callback: FrameCallback) -> int:
        return self._frames.add(callback)

    def cancel_frame(self, handle: int) -> None:
        self._frames.cancel(handle)

    def tick(self, timestamp_ms: float) -> int:
        """Deliver one frame.  Returns how many callbacks ran."""
        ran = 0
        for handle, _ in self._frames.take_all():
            callback = self._frames.claim(handle)
            if callback is None:
                continue
            callback(timestamp_ms)
            ran += 1
        return ran


class ThreadedFrameScheduler(FrameScheduler):
    """Fixed-rate frame source on a daemon thread."""

    def __init__(self, frame_rate: float = 60.0) -> None:
        self._interval = 1.0 / max(frame_rate, 1.0)
        self._frames = _PendingFrames()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def pending(self) -> int:
        return len(self._frames)

    def request_frame(self, callback: FrameCallback) -> int:
        return self._frames.add(callback)

    def cancel_frame(self, handle: int) -> None:
        self._frames.cancel(handle)

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="motion-frames", daemon=True)
        self._thread.start()
        logger.info(f"Frame scheduler started ({1.0 / self._interval:.0f} fps)")

    def stop(self, timeout: float = 1.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
            logger.info("Frame scheduler stopped")

    def _run(self) -> None:
        next_frame = time.monotonic()
        while not self._stop.is_set():
            now = time.monotonic()
            if now < next_frame:
                self._stop.wait(next_frame - now)
                continue
            # Skip frames we missed rather than bursting to catch up
            next_frame = max(next_frame + self._interval, now)
            timestamp_ms = now * 1000.0
            for handle, _ in self._frames.take_all():
                callback = self._frames.claim(handle)
                if callback is None:
                    continue
                try:
                    callback(timestamp_ms)
                except Exception as e:
                    logger.exception(f"Frame callback failed: {e}")
