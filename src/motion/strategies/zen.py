"""Zen strategy — calm heading drift with breathing speed and pauses.

The heading is steered by an Ornstein-Uhlenbeck process (mean-reverting
angular velocity, ``tau`` relaxation, ``sigma`` noise) and limited by
``max_turn_rate``.  Speed "breathes" sinusoidally around ``base_speed``;
every so often the element slows to a pause.  Soft walls, a gentle flow
field and linear pointer avoidance shape the desired velocity, which is
low-pass filtered by ``ema``.  Walls at ``pad`` reflect with 0.8 restitution.
A zero-delta step reports the current state untouched, so a runner
started at an arbitrary position stays there until time advances.
"""

from __future__ import annotations

import math
from typing import Optional

from pydantic import BaseModel

from ..types import ConfigLike, Environment, StepResult, StrategyRunner, Vec2
from ._common import (
    OrbitSettings,
    clamp,
    create_rng,
    limit_angle_delta,
    linear_avoidance,
    maybe_flip_turn_sign,
    reflect_off_pointer,
    resolve_orbit,
    soft_walls,
)

MAX_DELTA_TIME = 0.033
PAUSE_DAMPING = 0.88
WALL_RESTITUTION = 0.8


class PauseDuration(BaseModel):
    min: float = 1.5
    max: float = 4.0


class ZenConfig(OrbitSettings):
    base_speed: float = 38.0
    max_turn_rate: float = 0.9
    ema: float = 0.08
    pad: float = 60.0
    wall_k: float = 120.0
    tau: float = 3.0
    sigma: float = 0.6
    breathe_amp: float = 0.15
    breathe_hz: float = 0.08
    pause_probability: float = 0.02
    pause_duration: PauseDuration = PauseDuration()
    flow_strength: float = 6.0
    flow_scale: float = 0.004
    flow_time_scale: float = 1.0
    mouse_avoidance_radius: float = 140.0
    mouse_avoidance_strength: float = 40.0


class ZenRunner(StrategyRunner):
    def __init__(self, config: ZenConfig, seed: Optional[int] = None) -> None:
        self.config = config
        self._rng = rng = create_rng(seed)
        self.time = 0.0
        self.position = Vec2()
        self.velocity = Vec2()
        self.heading = rng.random() * math.pi * 2
        self.drift_velocity = 0.0
        self.turn_sign = -1 if rng.random() < 0.5 else 1
        self.orbit_phase = rng.random() * math.pi * 2
        self.paused_until = 0.0

    def reset(self, env: Environment) -> None:
        cfg = self.config
        self.time = 0.0
        start_pad = max(cfg.pad, 0.0)
        self.position = Vec2(
            start_pad if cfg.initial_x is None else cfg.initial_x,
            start_pad if cfg.initial_y is None else cfg.initial_y,
        )
        self.heading = math.atan2(env.height * 0.5 - self.position.y, env.width * 0.5 - self.position.x)
        self.velocity = Vec2(math.cos(self.heading) * cfg.base_speed, math.sin(self.heading) * cfg.base_speed)
        self.drift_velocity = 0.0
        if cfg.orbit_direction is not None:
            self.turn_sign = cfg.orbit_direction
        else:
            self.turn_sign = -1 if self._rng.random() < 0.5 else 1
        self.paused_until = 0.0

    def _flow(self, p: Vec2) -> Vec2:
        cfg = self.config

        def f(n: float) -> float:
            return math.sin(n) * math.cos(n * 0.7)

        t = self.time
        return Vec2(
            cfg.flow_strength * f(p.x * cfg.flow_scale + t * cfg.flow_time_scale * 0.1 + 13.37),
            cfg.flow_strength * f(p.y * cfg.flow_scale - t * cfg.flow_time_scale * 0.07 + 42.42),
        )

    def step(self, env: Environment) -> StepResult:
        cfg = self.config
        rng = self._rng
        dt = clamp(env.delta_time, 0.0, MAX_DELTA_TIME)
        if dt == 0.0:
            return StepResult(position=self.position, velocity=self.velocity, heading=self.heading)
        self.time += dt

        if self.time > self.paused_until and rng.random() < cfg.pause_probability * dt:
            window = max(cfg.pause_duration.max - cfg.pause_duration.min, 0.0)
            self.paused_until = self.time + cfg.pause_duration.min + rng.random() * window
        paused = self.time < self.paused_until

        orbit = resolve_orbit(
            cfg, cfg.base_speed, env, self.position, self.heading,
            self.turn_sign, self.time, self.orbit_phase,
        )
        min_turn_rate = max(cfg.min_turn_rate or 0.0, 0.0)
        self.turn_sign = maybe_flip_turn_sign(cfg, rng, dt, self.turn_sign)

        relaxation = dt / max(cfg.tau, 0.001)
        self.drift_velocity += (
            -self.drift_velocity * relaxation + cfg.sigma * math.sqrt(dt) * rng.gauss(0.0, 1.0)
        )
        direction = cfg.orbit_direction if cfg.orbit_direction is not None else self.turn_sign
        signed_turn = direction * min_turn_rate
        jitter = (cfg.turn_jitter or 0.0) * rng.gauss(0.0, 1.0)
        target_heading = self.heading + (self.drift_velocity + signed_turn + jitter) * dt

        desired_delta = limit_angle_delta(target_heading - self.heading)
        if orbit is not None:
            centering = max(cfg.turn_centering or 0.0, 0.0)
            orbit_delta = limit_angle_delta(orbit.tangent_heading - self.heading)
            desired_delta += clamp(orbit_delta, -centering * dt, centering * dt)

        max_delta = max(cfg.max_turn_rate, min_turn_rate) * dt
        self.heading += clamp(desired_delta, -max_delta, max_delta)

        breathe = 1 + cfg.breathe_amp * math.cos(2 * math.pi * cfg.breathe_hz * self.time)
        target_speed = cfg.base_speed * breathe
        desired = Vec2(math.cos(self.heading) * target_speed, math.sin(self.heading) * target_speed)
        desired = desired + soft_walls(self.position, env, cfg.pad, cfg.wall_k)
        desired = desired + self._flow(self.position)
        desired = desired + linear_avoidance(
            self.position, env.mouse, cfg.mouse_avoidance_radius, cfg.mouse_avoidance_strength,
        )
        if orbit is not None and orbit.blend > 0:
            desired = desired * (1 - orbit.blend) + orbit.velocity * orbit.blend

        v = self.velocity + (desired - self.velocity) * cfg.ema
        if paused:
            v = v * PAUSE_DAMPING
        p = self.position + v * dt

        radius = cfg.mouse_avoidance_radius if cfg.mouse_collision_radius is None else cfg.mouse_collision_radius
        damping = 0.6 if cfg.mouse_collision_damping is None else cfg.mouse_collision_damping
        p, v, hit = reflect_off_pointer(p, v, env.mouse, radius, damping)
        if hit:
            self.heading = math.atan2(v.y, v.x)

        p, v = self._bounce(p, v, env)
        self.position, self.velocity = p, v
        return StepResult(position=p, velocity=v, heading=self.heading)

    def _bounce(self, p: Vec2, v: Vec2, env: Environment) -> tuple[Vec2, Vec2]:
        pad = self.config.pad
        x, y, vx, vy = p.x, p.y, v.x, v.y
        bounced = False
        if x < pad:
            x, vx, bounced = pad, vx * -WALL_RESTITUTION, True
        if x > env.width - pad:
            x, vx, bounced = env.width - pad, vx * -WALL_RESTITUTION, True
        if y < pad:
            y, vy, bounced = pad, vy * -WALL_RESTITUTION, True
        if y > env.height - pad:
            y, vy, bounced = env.height - pad, vy * -WALL_RESTITUTION, True
        if bounced:
            self.heading = math.atan2(vy, vx)
        return Vec2(x, y), Vec2(vx, vy)


def create_zen_strategy(config: ConfigLike, seed: Optional[int] = None) -> ZenRunner:
    return ZenRunner(ZenConfig.coerce(config), seed)
