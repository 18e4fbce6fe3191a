"""Unit tests for the zen strategy.

Covers config parsing (camelCase profiles), start position, zero-delta
continuity, determinism per seed, pad containment, pointer collision and
pauses.
"""
from __future__ import annotations

import math

import pytest

from motion.strategies.zen import ZenConfig, create_zen_strategy
from motion.types import Environment, Vec2

pytestmark = pytest.mark.unit


def _env(dt=1 / 60, mouse=None, width=1280.0, height=720.0):
    return Environment(width=width, height=height, delta_time=dt, mouse=mouse)


def _run(runner, frames=300, **kw):
    out = []
    for _ in range(frames):
        out.append(runner.step(_env(**kw)))
    return out


class TestConfig:

    def test_defaults(self):
        cfg = ZenConfig.coerce(None)
        assert cfg.base_speed == 38.0
        assert cfg.pad == 60.0
        assert cfg.pause_duration.min == 1.5

    def test_camel_case_and_unknown_keys(self):
        cfg = ZenConfig.coerce({"baseSpeed": 20, "pauseDuration": {"min": 0.5, "max": 1}, "elementSize": 80})
        assert cfg.base_speed == 20
        assert cfg.pause_duration.max == 1

    def test_orbit_direction_validated(self):
        with pytest.raises(ValueError):
            ZenConfig.coerce({"orbitDirection": 2})


class TestStart:

    def test_starts_at_pad_by_default(self):
        runner = create_zen_strategy({}, 1)
        runner.reset(_env(0.0))
        assert runner.position == Vec2(60.0, 60.0)

    def test_initial_position_override(self):
        runner = create_zen_strategy({"initial_x": 300.0, "initial_y": 200.0}, 1)
        runner.reset(_env(0.0))
        result = runner.step(_env(0.0))
        assert result.position == Vec2(300.0, 200.0)

    def test_heads_toward_centre(self):
        runner = create_zen_strategy({}, 1)
        runner.reset(_env(0.0))
        assert runner.velocity.x > 0 and runner.velocity.y > 0
        assert runner.velocity.length() == pytest.approx(38.0)


class TestDeterminism:

    def test_same_seed_same_path(self):
        a = create_zen_strategy({}, 99)
        b = create_zen_strategy({}, 99)
        a.reset(_env(0.0))
        b.reset(_env(0.0))
        pa = [r.position for r in _run(a, 120)]
        pb = [r.position for r in _run(b, 120)]
        assert pa == pb

    def test_different_seed_different_path(self):
        a = create_zen_strategy({}, 1)
        b = create_zen_strategy({}, 2)
        a.reset(_env(0.0))
        b.reset(_env(0.0))
        assert _run(a, 120)[-1].position != _run(b, 120)[-1].position


class TestContainment:

    def test_stays_inside_pad(self):
        runner = create_zen_strategy({"baseSpeed": 300}, 5)
        runner.reset(_env(0.0))
        for r in _run(runner, 1500):
            assert 60.0 <= r.position.x <= 1280.0 - 60.0
            assert 60.0 <= r.position.y <= 720.0 - 60.0

    def test_oversized_delta_is_clamped(self):
        runner = create_zen_strategy({"initial_x": 400, "initial_y": 300}, 5)
        runner.reset(_env(0.0))
        r = runner.step(_env(10.0))
        moved = (r.position - Vec2(400, 300)).length()
        # At most one 33 ms step at (breathing) base speed plus wall/flow terms
        assert moved < 38.0 * 2 * 0.033 + 1.0

    def test_negative_delta_does_not_move(self):
        runner = create_zen_strategy({"initial_x": 400, "initial_y": 300}, 5)
        runner.reset(_env(0.0))
        assert runner.step(_env(-1.0)).position == Vec2(400.0, 300.0)


class TestPointer:

    def test_collision_pushes_out_to_radius(self):
        runner = create_zen_strategy({"initial_x": 400, "initial_y": 300}, 3)
        runner.reset(_env(0.0))
        mouse = Vec2(410.0, 300.0)
        r = runner.step(_env(1 / 60, mouse=mouse))
        assert (r.position - mouse).length() == pytest.approx(140.0)
        assert r.heading == pytest.approx(math.atan2(r.velocity.y, r.velocity.x))


class TestPauses:

    def test_pause_window_opens(self):
        runner = create_zen_strategy(
            {"pauseProbability": 1000, "pauseDuration": {"min": 2, "max": 3}, "initial_x": 400, "initial_y": 300}, 8,
        )
        runner.reset(_env(0.0))
        runner.step(_env(1 / 60))
        assert runner.time + 2 - 1e-9 <= runner.paused_until <= runner.time + 3 + 1e-9


class TestZeroDelta:

    def test_inside_pad_near_pointer_is_untouched(self):
        runner = create_zen_strategy({"initialX": 45.0, "initialY": 30.0}, 1)
        runner.reset(_env(0.0))
        velocity = runner.velocity
        r = runner.step(_env(0.0, mouse=Vec2(50.0, 30.0)))
        assert r.position == Vec2(45.0, 30.0)
        assert r.velocity == velocity
        assert runner.time == 0.0
