"""Environment sampling — viewport, pointer and pointer velocity.

The sampler is the single owner of pointer history.  The controller only
reads from it (``build()``) once per frame.

Pointer velocity is a finite difference between consecutive samples,
clamped and exponentially smoothed:

    dt       = max(0.001, (now - prev_t) / 1000)
    raw      = (dx / dt, dy / dt), each axis clamped to +/-4000 units/s
    smoothed = prev + (raw - prev) * 0.35

Losing the pointer clears the history, so re-entry starts from (0, 0)
instead of differencing across the gap.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from .types import Environment, Vec2

MIN_SAMPLE_INTERVAL = 0.001  # seconds
MAX_POINTER_SPEED = 4000.0  # units/second per axis
VELOCITY_SMOOTHING = 0.35
MIN_VIEWPORT = 1.0


def _clamp_axis(v: float) -> float:
    return max(-MAX_POINTER_SPEED, min(MAX_POINTER_SPEED, v))


class PointerVelocityEstimator:
    """Turns discrete (x, y, t_ms) samples into a smoothed velocity."""

    def __init__(self) -> None:
        self._last: Optional[tuple[float, float, float]] = None
        self._velocity: Optional[Vec2] = None

    @property
    def has_sample(self) -> bool:
        return self._last is not None

    @property
    def velocity(self) -> Optional[Vec2]:
        return self._velocity

    def sample(self, x: float, y: float, timestamp_ms: float) -> Vec2:
        previous = self._last
        self._last = (x, y, timestamp_ms)
        if previous is None:
            self._velocity = Vec2(0.0, 0.0)
            return self._velocity

        px, py, pt = previous
        dt = max(MIN_SAMPLE_INTERVAL, (timestamp_ms - pt) / 1000.0)
        raw_x = _clamp_axis((x - px) / dt)
        raw_y = _clamp_axis((y - py) / dt)
        prev = self._velocity or Vec2(0.0, 0.0)
        self._velocity = Vec2(
            prev.x + (raw_x - prev.x) * VELOCITY_SMOOTHING,
            prev.y + (raw_y - prev.y) * VELOCITY_SMOOTHING,
        )
        return self._velocity

    def clear(self) -> None:
        self._last = None
        self._velocity = None


def _perf_ms() -> float:
    return time.perf_counter() * 1000.0


class EnvironmentSampler:
    """Holds the latest host input and assembles per-frame Environments."""

    def __init__(
        self,
        width: float = 1280.0,
        height: float = 720.0,
        clock: Callable[[], float] = _perf_ms,
    ) -> None:
        self._clock = clock
        self._width = MIN_VIEWPORT
        self._height = MIN_VIEWPORT
        self.resize(width, height)
        self._mouse: Optional[Vec2] = None
        self._estimator = PointerVelocityEstimator()

    @property
    def viewport(self) -> tuple[float, float]:
        return self._width, self._height

    @property
    def mouse(self) -> Optional[Vec2]:
        return self._mouse

    @property
    def mouse_velocity(self) -> Optional[Vec2]:
        return self._estimator.velocity

    def resize(self, width: float, height: float) -> None:
        self._width = max(float(width), MIN_VIEWPORT)
        self._height = max(float(height), MIN_VIEWPORT)

    def update_pointer(self, position: Optional[Vec2], timestamp_ms: Optional[float] = None) -> None:
        """Record a pointer sample, or forget the pointer when ``position`` is None."""
        if position is None:
            self._mouse = None
            self._estimator.clear()
            return
        now = self._clock() if timestamp_ms is None else timestamp_ms
        self._estimator.sample(position.x, position.y, now)
        self._mouse = position

    def build(self, time: float, delta_time: float) -> Environment:
        return Environment(
            width=self._width,
            height=self._height,
            time=time,
            delta_time=delta_time,
            mouse=self._mouse,
            mouse_velocity=self._estimator.velocity,
        )
