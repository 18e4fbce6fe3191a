"""MotionController — owns the active runner and drives it once per frame.

Two event sources change controller state:

  configure(strategy_type, config, seed, disabled)
      The reconfiguration transition.  Runs only when the tuple differs
      from the previous call (config compared by identity, the rest by
      value).  Disabled or unknown strategies stop motion; otherwise a new
      runner is built, seeded at the live position so a swap never
      teleports the element, reset, and stepped once with a zero delta so
      a position exists before the first frame arrives.

  on_frame(timestamp_ms)
      The per-frame transition.  Scheduled frames arrive through the
      FrameScheduler; a host may also call it directly, which replaces the
      pending frame.  The first frame after a (re)configuration only
      records the baseline timestamp (delta 0); later frames step the
      runner by the elapsed seconds and publish the result.

Every scheduled frame carries the loop generation it was requested in.
Teardown nulls the runner and bumps the generation, so a callback the
scheduler claimed before the cancel arrives stale and is dropped; at most
one frame loop is ever live.

Outputs are published on the EventBus:
  motion_frame    {position, velocity, time, delta_time, strategy}
  motion_stopped  {strategy, position}

snapshot() also reports the heading of the last step when the strategy
has one.
"""

from __future__ import annotations

import threading
from functools import partial
from typing import Any, Callable, Optional

from loguru import logger
from pydantic import ValidationError

from .diagnostics import TraceSink
from .environment import EnvironmentSampler
from .event_bus import MOTION_FRAME, MOTION_STOPPED, EventBus
from .registry import get_strategy_factory
from .scheduler import FrameScheduler
from .types import (
    ORIGIN,
    ConfigLike,
    Environment,
    StepResult,
    StrategyFactory,
    StrategyRunner,
    Vec2,
    with_initial_position,
)


class MotionController:
    """Single-element motion orchestrator."""

    def __init__(
        self,
        scheduler: FrameScheduler,
        sampler: EnvironmentSampler,
        event_bus: EventBus | None = None,
        lookup: Callable[[str], Optional[StrategyFactory]] = get_strategy_factory,
        trace_sink: TraceSink | None = None,
        trace_every: int = 10,
    ) -> None:
        self._scheduler = scheduler
        self._sampler = sampler
        self._event_bus = event_bus
        self._lookup = lookup
        self._trace_sink = trace_sink
        self._trace_every = max(int(trace_every), 1)
        self._lock = threading.RLock()

        self._runner: StrategyRunner | None = None
        self._strategy_type: str | None = None
        self._key: tuple | None = None
        self._frame_handle: int | None = None
        self._frame_generation = 0
        self._loop_enabled = False

        self._live_position: Vec2 = ORIGIN
        self._has_live_position = False
        self._velocity: Vec2 = ORIGIN
        self._last_result: StepResult | None = None
        self._clock = 0.0
        self._last_timestamp: float | None = None
        self._frame_count = 0

    # -- read-only state ---------------------------------------------------

    @property
    def active(self) -> bool:
        return self._runner is not None

    @property
    def strategy_type(self) -> str | None:
        return self._strategy_type if self._runner is not None else None

    @property
    def position(self) -> Vec2:
        return self._live_position

    live_position = position

    @property
    def has_live_position(self) -> bool:
        return self._has_live_position

    @property
    def velocity(self) -> Vec2:
        return self._velocity

    @property
    def last_result(self) -> StepResult | None:
        return self._last_result

    @property
    def simulation_clock(self) -> float:
        return self._clock

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def sampler(self) -> EnvironmentSampler:
        return self._sampler

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "active": self.active,
                "strategy": self.strategy_type,
                "position": self._live_position.to_dict(),
                "velocity": self._velocity.to_dict(),
                "time": self._clock,
                "frames": self._frame_count,
                "heading": self._last_result.heading if self._last_result is not None else None,
            }

    # -- reconfiguration ---------------------------------------------------

    def configure(
        self,
        strategy_type: str,
        config: ConfigLike = None,
        seed: int | None = None,
        disabled: bool = False,
    ) -> bool:
        """Apply a (strategy, config, seed, disabled) tuple.

        Returns True when a runner is active afterwards.
        """
        with self._lock:
            if self._same_key(strategy_type, config, seed, disabled):
                return self.active
            self._key = (strategy_type, config, seed, disabled)

            factory = None if disabled else self._lookup(strategy_type)
            if factory is None:
                if not disabled:
                    logger.warning(f"Unknown motion strategy '{strategy_type}'; motion stopped")
                self._stop()
                return False

            seeded = config
            if self._has_live_position:
                seeded = with_initial_position(config, self._live_position)
            try:
                runner = factory(seeded, seed)
            except ValidationError as e:
                logger.warning(f"Invalid config for strategy '{strategy_type}': {e}")
                self._stop()
                return False

            self._runner = runner
            self._strategy_type = strategy_type
            self._clock = 0.0
            self._last_timestamp = None

            env = self._sampler.build(0.0, 0.0)
            runner.reset(env)
            self._emit(runner.step(env.with_delta(0.0)), env)

            self._loop_enabled = True
            if self._frame_handle is None:
                self._schedule_frame()
            logger.info(
                f"Motion strategy '{strategy_type}' active at "
                f"({self._live_position.x:.1f}, {self._live_position.y:.1f}) seed={seed}"
            )
            return True

    def _same_key(self, strategy_type: str, config: ConfigLike, seed: int | None, disabled: bool) -> bool:
        if self._key is None:
            return False
        old_type, old_config, old_seed, old_disabled = self._key
        return (
            old_type == strategy_type
            and old_config is config
            and old_seed == seed
            and old_disabled == disabled
        )

    def teardown(self) -> None:
        """Stop motion and forget the configuration.  Safe to call twice."""
        with self._lock:
            self._stop()
            self._key = None

    def _stop(self) -> None:
        was_active = self._runner is not None
        self._runner = None
        self._loop_enabled = False
        self._cancel_frame()
        if was_active:
            logger.info(f"Motion strategy '{self._strategy_type}' stopped")
            self._publish(MOTION_STOPPED, {
                "strategy": self._strategy_type,
                "position": self._live_position.to_dict(),
            })

    # -- host input ---------------------------------------------------------

    def update_pointer(self, position: Vec2 | None, timestamp_ms: float | None = None) -> None:
        """Forward a pointer sample (None = pointer left) to the sampler."""
        with self._lock:
            self._sampler.update_pointer(position, timestamp_ms)

    def resize(self, width: float, height: float) -> None:
        with self._lock:
            self._sampler.resize(width, height)

    # -- frame loop ----------------------------------------------------------

    def on_frame(self, timestamp_ms: float) -> None:
        """Deliver a frame directly.  Supersedes any pending scheduled frame."""
        with self._lock:
            self._cancel_frame()
            self._advance(timestamp_ms)

    def _on_scheduled_frame(self, generation: int, timestamp_ms: float) -> None:
        with self._lock:
            # The scheduler may hand over a callback it claimed before a
            # teardown or reconfiguration cancelled it.
            if generation != self._frame_generation:
                return
            self._frame_handle = None
            self._advance(timestamp_ms)

    def _schedule_frame(self) -> None:
        self._frame_generation += 1
        callback = partial(self._on_scheduled_frame, self._frame_generation)
        self._frame_handle = self._scheduler.request_frame(callback)

    def _cancel_frame(self) -> None:
        self._frame_generation += 1
        if self._frame_handle is not None:
            self._scheduler.cancel_frame(self._frame_handle)
            self._frame_handle = None

    def _advance(self, timestamp_ms: float) -> None:
        runner = self._runner
        if runner is None:
            if self._loop_enabled:
                self._schedule_frame()
            return

        if self._last_timestamp is None:
            self._last_timestamp = timestamp_ms
        delta = max((timestamp_ms - self._last_timestamp) / 1000.0, 0.0)
        self._last_timestamp = timestamp_ms
        self._clock += delta

        env = self._sampler.build(self._clock, delta)
        self._emit(runner.step(env), env)
        self._schedule_frame()

    def _emit(self, result: StepResult, env: Environment) -> None:
        self._last_result = result
        self._live_position = result.position
        self._has_live_position = True
        self._velocity = result.velocity
        self._frame_count += 1

        self._publish(MOTION_FRAME, {
            "position": result.position.to_dict(),
            "velocity": result.velocity.to_dict(),
            "time": env.time,
            "delta_time": env.delta_time,
            "strategy": self._strategy_type,
        })

        if self._trace_sink is not None and self._frame_count % self._trace_every == 0:
            self._trace_sink.append({
                "event": "frame",
                "strategy": self._strategy_type,
                "frame": self._frame_count,
                "t": env.time,
                "dt": env.delta_time,
                "x": result.position.x,
                "y": result.position.y,
                "vx": result.velocity.x,
                "vy": result.velocity.y,
                "width": env.width,
                "height": env.height,
                "mouse": env.mouse.to_dict() if env.mouse is not None else None,
            })

    def _publish(self, event_type: str, data: dict) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event_type, data)
