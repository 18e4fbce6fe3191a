"""Flow-field strategy — ride the curl of a smooth pseudo-noise field.

The curl of a scalar field is divergence-free, so the element swirls
without collecting in sinks.  The desired velocity is the current velocity
bent by the local curl and rescaled to ``base_speed``; soft walls, linear
pointer avoidance and optional orbit blending are added before an EMA
(``smoothing`` is the fraction of the previous velocity kept).
A zero-delta step reports the current state untouched.
"""

from __future__ import annotations

import math
from typing import Optional

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
WALL_RESTITUTION = 0.7
_CURL_EPS = 0.0001


class FlowFieldConfig(OrbitSettings):
    base_speed: float = 45.0
    curl_strength: float = 0.6
    noise_scale: float = 0.003
    noise_time_scale: float = 0.5
    smoothing: float = 0.9
    pad: float = 60.0
    wall_k: float = 120.0
    mouse_avoidance_radius: float = 140.0
    mouse_avoidance_strength: float = 40.0


def pseudo_noise(x: float, y: float, t: float) -> float:
    return math.sin(x + t * 0.1) * math.cos(y * 0.7 - t * 0.05)


def curl(x: float, y: float, t: float, scale: float) -> Vec2:
    """Central-difference curl of :func:`pseudo_noise` at (x, y)."""
    nx, ny = x * scale, y * scale
    a = pseudo_noise(nx, ny + _CURL_EPS, t)
    b = pseudo_noise(nx, ny - _CURL_EPS, t)
    c = pseudo_noise(nx + _CURL_EPS, ny, t)
    d = pseudo_noise(nx - _CURL_EPS, ny, t)
    return Vec2((a - b) / (2 * _CURL_EPS), (d - c) / (2 * _CURL_EPS))


class FlowFieldRunner(StrategyRunner):
    def __init__(self, config: FlowFieldConfig, seed: Optional[int] = None) -> None:
        self.config = config
        self._rng = rng = create_rng(seed)
        self.time = 0.0
        self.position = Vec2()
        self.velocity = Vec2()
        self.turn_sign = -1 if rng.random() < 0.5 else 1
        self.orbit_phase = rng.random() * math.pi * 2

    def reset(self, env: Environment) -> None:
        cfg = self.config
        self.time = 0.0
        start_pad = max(cfg.pad, 0.0)
        self.position = Vec2(
            start_pad if cfg.initial_x is None else cfg.initial_x,
            start_pad if cfg.initial_y is None else cfg.initial_y,
        )
        angle = math.atan2(env.height * 0.5 - self.position.y, env.width * 0.5 - self.position.x)
        self.velocity = Vec2(math.cos(angle) * cfg.base_speed, math.sin(angle) * cfg.base_speed)
        if cfg.orbit_direction is not None:
            self.turn_sign = cfg.orbit_direction
        else:
            self.turn_sign = -1 if self._rng.random() < 0.5 else 1

    def _fallback_heading(self) -> float:
        if self.velocity.length() > 0.001:
            return math.atan2(self.velocity.y, self.velocity.x)
        return self._rng.random() * math.pi * 2

    def step(self, env: Environment) -> StepResult:
        cfg = self.config
        rng = self._rng
        dt = clamp(env.delta_time, 0.0, MAX_DELTA_TIME)
        if dt == 0.0:
            return StepResult(position=self.position, velocity=self.velocity)
        self.time += dt

        flow = curl(self.position.x, self.position.y, self.time * cfg.noise_time_scale, cfg.noise_scale)
        desired = flow * cfg.curl_strength + self.velocity
        speed = desired.length() or 1.0
        desired = desired * (cfg.base_speed / speed)

        desired = desired + soft_walls(self.position, env, cfg.pad, cfg.wall_k)
        desired = desired + linear_avoidance(
            self.position, env.mouse, cfg.mouse_avoidance_radius, cfg.mouse_avoidance_strength,
        )

        orbit = None
        if (cfg.orbit_blend or 0) > 0 or (cfg.turn_centering or 0) > 0:
            orbit = resolve_orbit(
                cfg, cfg.base_speed, env, self.position, self._fallback_heading(),
                self.turn_sign, self.time, self.orbit_phase,
            )
        if orbit is not None and orbit.blend > 0:
            desired = desired * (1 - orbit.blend) + orbit.velocity * orbit.blend

        self.turn_sign = maybe_flip_turn_sign(cfg, rng, dt, self.turn_sign)
        speed_before_turn = desired.length() or cfg.base_speed
        direction = cfg.orbit_direction if cfg.orbit_direction is not None else self.turn_sign
        signed_turn = direction * max(cfg.min_turn_rate or 0.0, 0.0)
        jitter = (cfg.turn_jitter or 0.0) * rng.gauss(0.0, 1.0)
        heading = math.atan2(desired.y, desired.x) + (signed_turn + jitter) * dt
        if orbit is not None:
            centering = max(cfg.turn_centering or 0.0, 0.0)
            heading += clamp(
                limit_angle_delta(orbit.tangent_heading - heading), -centering * dt, centering * dt,
            )
        desired = Vec2(math.cos(heading) * speed_before_turn, math.sin(heading) * speed_before_turn)

        alpha = clamp(cfg.smoothing, 0.0, 1.0)
        v = self.velocity + (desired - self.velocity) * (1 - alpha)
        p = self.position + v * dt

        radius = cfg.mouse_avoidance_radius if cfg.mouse_collision_radius is None else cfg.mouse_collision_radius
        damping = 0.6 if cfg.mouse_collision_damping is None else cfg.mouse_collision_damping
        p, v, _ = reflect_off_pointer(p, v, env.mouse, radius, damping)

        pad = cfg.pad
        x, y, vx, vy = p.x, p.y, v.x, v.y
        if x < pad:
            x, vx = pad, vx * -WALL_RESTITUTION
        if x > env.width - pad:
            x, vx = env.width - pad, vx * -WALL_RESTITUTION
        if y < pad:
            y, vy = pad, vy * -WALL_RESTITUTION
        if y > env.height - pad:
            y, vy = env.height - pad, vy * -WALL_RESTITUTION

        self.position, self.velocity = Vec2(x, y), Vec2(vx, vy)
        return StepResult(position=self.position, velocity=self.velocity)


def create_flow_field_strategy(config: ConfigLike, seed: Optional[int] = None) -> FlowFieldRunner:
    return FlowFieldRunner(FlowFieldConfig.coerce(config), seed)
