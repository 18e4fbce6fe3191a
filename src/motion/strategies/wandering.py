"""Wandering strategy — Brownian drift with pointer avoidance.

Per step the target velocity is the sum of four terms:

  drift      slow persistent heading; re-aimed every 8-12 simulated seconds
             by at most +/-22.5 degrees, magnitude ``base_speed * 0.3``
  diffusion  independent uniform noise per axis (the random walk)
  avoidance  push away from the pointer, quadratic falloff to zero at
             ``avoidance_distance``, plus a little random deflection
  boundary   linear push away from any edge closer than ``boundary_padding``

The sum is rescaled to exactly ``base_speed`` (wandering never accelerates),
blended into the previous velocity for momentum, and integrated in units of
the nominal 60 fps frame the speed constants were tuned against.  A final
hard clamp keeps the element fully on screen.
"""

from __future__ import annotations

import math
from typing import Optional

from ..types import ConfigLike, Environment, StepResult, StrategyConfig, StrategyRunner, Vec2
from ._common import axis_bounds, clamp, create_rng

# Reference frame duration the speed constants are expressed against
NOMINAL_FRAME_INTERVAL = 1.0 / 60.0

# Longest step we integrate in one go (tab resumes, debugger pauses)
MAX_DELTA_TIME = 0.1

DRIFT_INTERVAL_MIN = 8.0
DRIFT_INTERVAL_SPREAD = 4.0
DRIFT_MAX_TURN = math.pi / 8.0  # 22.5 degrees either way
DRIFT_SPEED_FRACTION = 0.3

AVOIDANCE_DEFLECTION = 0.2  # full width, i.e. +/-0.1 per axis
EDGE_FORCE = 0.2
MOMENTUM = 0.95


class WanderingConfig(StrategyConfig):
    base_speed: float = 0.5
    avoidance_distance: float = 120.0
    avoidance_strength: float = 0.8
    wander_strength: float = 0.3
    boundary_padding: float = 50.0
    element_size: float = 80.0

    @property
    def half_size(self) -> float:
        return max(self.element_size, 0.0) / 2.0


def avoidance_force(distance: float, avoidance_distance: float, strength: float) -> float:
    """Magnitude of the pointer repulsion at ``distance``.

    Zero outside (0, avoidance_distance); a zero radius or a pointer sitting
    exactly on the element disables the term.
    """
    if avoidance_distance <= 0 or not (0 < distance < avoidance_distance):
        return 0.0
    falloff = 1.0 - distance / avoidance_distance
    return strength * falloff * falloff


def edge_push(coord: float, lo: float, hi: float, padding: float) -> float:
    """Signed push away from the ends of the usable [lo, hi] range."""
    if padding <= 0:
        return 0.0
    push = 0.0
    if coord < lo + padding:
        push += EDGE_FORCE * min(1.0 - (coord - lo) / padding, 1.0)
    if coord > hi - padding:
        push -= EDGE_FORCE * min(1.0 - (hi - coord) / padding, 1.0)
    return push


class WanderingRunner(StrategyRunner):
    """Stateful runner for :class:`WanderingConfig`."""

    def __init__(self, config: WanderingConfig, seed: Optional[int] = None) -> None:
        self.config = config
        self._rng = create_rng(seed)
        self.position = Vec2()
        self.velocity = Vec2()
        self.drift_angle = 0.0
        self.last_drift_change = 0.0
        self._next_drift_interval = DRIFT_INTERVAL_MIN
        self._time = 0.0

    def _draw_drift_interval(self) -> float:
        return DRIFT_INTERVAL_MIN + self._rng.random() * DRIFT_INTERVAL_SPREAD

    def reset(self, env: Environment) -> None:
        cfg = self.config
        half = cfg.half_size
        x_lo, x_hi = axis_bounds(env.width, half)
        y_lo, y_hi = axis_bounds(env.height, half)

        start = cfg.initial_position
        if start is None:
            start = Vec2(self._rng.uniform(x_lo, x_hi), self._rng.uniform(y_lo, y_hi))
        self.position = start
        self.velocity = Vec2(
            (self._rng.random() - 0.5) * cfg.base_speed * 2,
            (self._rng.random() - 0.5) * cfg.base_speed * 2,
        )
        self.drift_angle = self._rng.random() * math.pi * 2
        self._time = max(env.time, 0.0)
        self.last_drift_change = self._time
        self._next_drift_interval = self._draw_drift_interval()

    def step(self, env: Environment) -> StepResult:
        cfg = self.config
        dt = clamp(env.delta_time, 0.0, MAX_DELTA_TIME)
        self._time += dt
        rng = self._rng
        pos = self.position

        # 1. drift
        if self._time - self.last_drift_change >= self._next_drift_interval:
            self.drift_angle += (rng.random() - 0.5) * 2 * DRIFT_MAX_TURN
            self.last_drift_change = self._time
            self._next_drift_interval = self._draw_drift_interval()
        drift = cfg.base_speed * DRIFT_SPEED_FRACTION
        vx = self.velocity.x + math.cos(self.drift_angle) * drift
        vy = self.velocity.y + math.sin(self.drift_angle) * drift

        # 2. diffusion
        vx += (rng.random() - 0.5) * cfg.wander_strength
        vy += (rng.random() - 0.5) * cfg.wander_strength

        # 3. avoidance
        if env.mouse is not None:
            dx = pos.x - env.mouse.x
            dy = pos.y - env.mouse.y
            distance = math.hypot(dx, dy)
            force = avoidance_force(distance, cfg.avoidance_distance, cfg.avoidance_strength)
            if force > 0:
                vx += dx / distance * force
                vy += dy / distance * force
                vx += (rng.random() - 0.5) * AVOIDANCE_DEFLECTION
                vy += (rng.random() - 0.5) * AVOIDANCE_DEFLECTION

        # 4. boundary
        half = cfg.half_size
        x_lo, x_hi = axis_bounds(env.width, half)
        y_lo, y_hi = axis_bounds(env.height, half)
        vx += edge_push(pos.x, x_lo, x_hi, cfg.boundary_padding)
        vy += edge_push(pos.y, y_lo, y_hi, cfg.boundary_padding)

        # 5. constant speed
        speed = math.hypot(vx, vy)
        if speed > 0:
            vx = vx / speed * cfg.base_speed
            vy = vy / speed * cfg.base_speed
        target = Vec2(vx, vy)

        # 6. momentum, per nominal frame
        frames = dt / NOMINAL_FRAME_INTERVAL
        keep = MOMENTUM ** frames
        self.velocity = Vec2(
            self.velocity.x * keep + vx * (1 - keep),
            self.velocity.y * keep + vy * (1 - keep),
        )

        # 7-8. integrate, then clamp on screen
        self.position = Vec2(
            clamp(pos.x + self.velocity.x * frames, x_lo, x_hi),
            clamp(pos.y + self.velocity.y * frames, y_lo, y_hi),
        )

        return StepResult(
            position=self.position,
            velocity=self.velocity,
            meta={"target_velocity": target, "drift_angle": self.drift_angle},
        )


def create_wandering_strategy(config: ConfigLike, seed: Optional[int] = None) -> WanderingRunner:
    return WanderingRunner(WanderingConfig.coerce(config), seed)
