"""Unit tests for the flow-field strategy and its curl helper."""
from __future__ import annotations

import math

import pytest

from motion.strategies.flow_field import FlowFieldConfig, create_flow_field_strategy, curl
from motion.types import Environment, Vec2

pytestmark = pytest.mark.unit


def _env(dt=1 / 60, mouse=None):
    return Environment(width=1280.0, height=720.0, delta_time=dt, mouse=mouse)


class TestCurl:

    @pytest.mark.parametrize("x,y,t", [(0.0, 0.0, 0.0), (1.3, -0.4, 2.0), (5.0, 7.5, 10.0)])
    def test_matches_analytic_gradient(self, x, y, t):
        a = x + t * 0.1
        b = y * 0.7 - t * 0.05
        dn_dx = math.cos(a) * math.cos(b)
        dn_dy = -0.7 * math.sin(a) * math.sin(b)
        c = curl(x, y, t, 1.0)
        assert c.x == pytest.approx(dn_dy, abs=1e-5)
        assert c.y == pytest.approx(-dn_dx, abs=1e-5)

    def test_scale_applies_to_coordinates(self):
        scaled = curl(200.0, 100.0, 0.0, 0.01)
        unit = curl(2.0, 1.0, 0.0, 1.0)
        assert scaled.x == pytest.approx(unit.x, abs=1e-6)
        assert scaled.y == pytest.approx(unit.y, abs=1e-6)


class TestRunner:

    def test_defaults(self):
        cfg = FlowFieldConfig.coerce({})
        assert cfg.base_speed == 45.0
        assert cfg.smoothing == 0.9

    def test_zero_delta_keeps_initial_position(self):
        runner = create_flow_field_strategy({"initialX": 500, "initialY": 250}, 4)
        runner.reset(_env(0.0))
        assert runner.step(_env(0.0)).position == Vec2(500.0, 250.0)

    def test_same_seed_same_path(self):
        def path(seed):
            runner = create_flow_field_strategy({"minTurnRate": 0.5, "turnJitter": 0.2}, seed)
            runner.reset(_env(0.0))
            return [runner.step(_env()).position for _ in range(200)]

        assert path(7) == path(7)

    def test_stays_inside_pad(self):
        runner = create_flow_field_strategy({"baseSpeed": 400}, 2)
        runner.reset(_env(0.0))
        for _ in range(1500):
            p = runner.step(_env()).position
            assert 60.0 <= p.x <= 1220.0
            assert 60.0 <= p.y <= 660.0

    def test_orbit_blend_circles_the_centre(self):
        runner = create_flow_field_strategy(
            {"orbitBlend": 1.0, "orbitRadius": 200, "initialX": 840, "initialY": 360, "smoothing": 0.0}, 1,
        )
        runner.reset(_env(0.0))
        for _ in range(600):
            p = runner.step(_env()).position
        distance = (p - Vec2(640.0, 360.0)).length()
        assert 120.0 < distance < 280.0

    def test_zero_delta_inside_pad_near_pointer_is_untouched(self):
        runner = create_flow_field_strategy({"initialX": 45.0, "initialY": 700.0}, 1)
        runner.reset(_env(0.0))
        r = runner.step(_env(0.0, mouse=Vec2(45.0, 690.0)))
        assert r.position == Vec2(45.0, 700.0)
