"""Helpers shared by the built-in strategies.

The orbit machinery (``OrbitSettings`` / ``resolve_orbit``) is used by the
zen and flow-field models: it blends the free motion with a circular path
around a point expressed as a fraction of the viewport.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Literal, Optional

from ..types import Environment, StrategyConfig, Vec2

# Below this many units an orbit/collision normal is considered undefined
_EPSILON = 0.001


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def create_rng(seed: Optional[int]) -> random.Random:
    """Runner-owned generator; unseeded only when no seed was supplied."""
    return random.Random(seed) if seed is not None else random.Random()


def wall_force(distance: float, pad: float, k: float) -> float:
    """Soft wall push: zero outside ``pad``, ``k / (delta^2 + 1)`` inside."""
    delta = pad - distance
    if delta <= 0:
        return 0.0
    return k / (delta * delta + 1.0)


def limit_angle_delta(delta: float) -> float:
    """Wrap an angle difference into [-pi, pi)."""
    return (delta + math.pi) % (2.0 * math.pi) - math.pi


def axis_bounds(size: float, margin: float) -> tuple[float, float]:
    """Usable [lo, hi] range along one axis, collapsed to the centre when
    the viewport is smaller than twice the margin."""
    size = max(size, 0.0)
    margin = max(margin, 0.0)
    lo, hi = margin, size - margin
    if hi < lo:
        lo = hi = size / 2.0
    return lo, hi


def reflect_off_pointer(
    position: Vec2,
    velocity: Vec2,
    mouse: Optional[Vec2],
    radius: float,
    damping: float,
) -> tuple[Vec2, Vec2, bool]:
    """Push ``position`` out to ``radius`` around the pointer and mirror the
    velocity about the contact normal.  Returns (position, velocity, hit)."""
    if mouse is None:
        return position, velocity, False
    dx = position.x - mouse.x
    dy = position.y - mouse.y
    distance = math.hypot(dx, dy)
    if not (0 < distance < radius):
        return position, velocity, False
    nx = dx / distance
    ny = dy / distance
    dot = velocity.x * nx + velocity.y * ny
    return (
        Vec2(mouse.x + nx * radius, mouse.y + ny * radius),
        Vec2((velocity.x - 2 * dot * nx) * damping, (velocity.y - 2 * dot * ny) * damping),
        True,
    )


def linear_avoidance(position: Vec2, mouse: Optional[Vec2], radius: float, strength: float) -> Vec2:
    """Repulsion that falls off linearly to zero at ``radius``."""
    if mouse is None or radius <= 0:
        return Vec2()
    dx = position.x - mouse.x
    dy = position.y - mouse.y
    distance = math.hypot(dx, dy)
    if not (0 < distance < radius):
        return Vec2()
    force = strength * (1 - distance / radius)
    return Vec2(dx / distance * force, dy / distance * force)


def soft_walls(position: Vec2, env: Environment, pad: float, k: float) -> Vec2:
    if pad <= 0:
        return Vec2()
    return Vec2(
        wall_force(position.x, pad, k) - wall_force(env.width - position.x, pad, k),
        wall_force(position.y, pad, k) - wall_force(env.height - position.y, pad, k),
    )


class OrbitSettings(StrategyConfig):
    """Turning / orbit / collision parameters common to zen and flow-field."""

    mouse_collision_radius: Optional[float] = None
    mouse_collision_damping: Optional[float] = None
    min_turn_rate: Optional[float] = None
    turn_persistence: Optional[float] = None
    turn_jitter: Optional[float] = None
    turn_centering: Optional[float] = None
    orbit_blend: Optional[float] = None
    orbit_center_x: Optional[float] = None
    orbit_center_y: Optional[float] = None
    orbit_radius: Optional[float] = None
    orbit_min_radius: Optional[float] = None
    orbit_radius_drift_amp: Optional[float] = None
    orbit_radius_drift_hz: Optional[float] = None
    orbit_build_up_amp: Optional[float] = None
    orbit_build_up_period: Optional[float] = None
    orbit_radial_gain: Optional[float] = None
    orbit_tangential_speed: Optional[float] = None
    orbit_direction: Optional[Literal[-1, 1]] = None


@dataclass(frozen=True)
class Orbit:
    blend: float
    tangent_heading: float
    velocity: Vec2


def resolve_orbit(
    config: OrbitSettings,
    base_speed: float,
    env: Environment,
    position: Vec2,
    fallback_heading: float,
    turn_sign: int,
    time: float,
    phase: float,
) -> Optional[Orbit]:
    """Velocity that steers toward a (possibly breathing) circle.

    Returns None when neither orbit blending nor turn centering is enabled.
    """
    blend = clamp(config.orbit_blend or 0.0, 0.0, 1.0)
    centering = max(config.turn_centering or 0.0, 0.0)
    if blend == 0 and centering == 0:
        return None

    cx = env.width * (0.5 if config.orbit_center_x is None else config.orbit_center_x)
    cy = env.height * (0.5 if config.orbit_center_y is None else config.orbit_center_y)
    dx = position.x - cx
    dy = position.y - cy
    distance = math.hypot(dx, dy)
    if distance > _EPSILON:
        ux, uy = dx / distance, dy / distance
    else:
        ux, uy = math.cos(fallback_heading), math.sin(fallback_heading)

    direction = config.orbit_direction if config.orbit_direction is not None else turn_sign
    if direction >= 0:
        tx, ty = -uy, ux
    else:
        tx, ty = uy, -ux

    base_radius = config.orbit_radius
    if base_radius is None:
        base_radius = min(env.width, env.height) * 0.3
    min_radius = max(48.0 if config.orbit_min_radius is None else config.orbit_min_radius, 48.0)
    drift_amp = config.orbit_radius_drift_amp or 0.0
    drift_hz = config.orbit_radius_drift_hz or 0.0
    build_amp = max(config.orbit_build_up_amp or 0.0, 0.0)
    build_period = max(config.orbit_build_up_period or 0.0, 0.0)
    build_phase = (time % build_period) / build_period if build_period > 0 else 0.0
    radius = max(
        min_radius,
        base_radius
        + drift_amp * math.sin(2 * math.pi * drift_hz * time + phase)
        + build_amp * build_phase,
    )

    radial_error = distance - radius
    gain = 0.2 if config.orbit_radial_gain is None else config.orbit_radial_gain
    tangential = base_speed if config.orbit_tangential_speed is None else config.orbit_tangential_speed
    return Orbit(
        blend=blend,
        tangent_heading=math.atan2(ty, tx),
        velocity=Vec2(
            -gain * radial_error * ux + tangential * tx,
            -gain * radial_error * uy + tangential * ty,
        ),
    )


def maybe_flip_turn_sign(config: OrbitSettings, rng: random.Random, dt: float, turn_sign: int) -> int:
    """Occasionally reverse the preferred turning direction."""
    min_turn_rate = max(config.min_turn_rate or 0.0, 0.0)
    persistence = max(12.0 if config.turn_persistence is None else config.turn_persistence, 0.1)
    if min_turn_rate > 0 and rng.random() < dt / persistence:
        return -turn_sign
    return turn_sign
