"""Unit tests for app.main — app creation, routing, health and lifespan."""
from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.config import settings


@pytest.fixture
def app():
    """Import the actual app instance (no lifespan execution)."""
    from app.main import app as real_app
    return real_app


@pytest.mark.unit
class TestAppCreation:

    def test_app_is_fastapi_instance(self, app):
        assert isinstance(app, FastAPI)
        assert app.title == "DRIFTWHEEL"

    def test_routes_registered(self, app):
        paths = {route.path for route in app.routes}
        assert "/api/motion/state" in paths
        assert "/api/motion/configure" in paths
        assert "/api/diagnostics/wheel-trace" in paths
        assert "/health" in paths

    def test_health_without_lifespan(self, app):
        resp = TestClient(app).get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "operational"
        assert data["system"] == "DRIFTWHEEL"
        assert data["motion"] is False


@pytest.mark.unit
class TestSubsystemHelpers:

    def test_disabled_motion_creates_nothing(self, monkeypatch):
        from app.main import _create_motion_controller

        monkeypatch.setattr(settings, "motion_enabled", False)
        assert _create_motion_controller(FastAPI()) == (None, None)

    def test_unreadable_profiles_fall_back(self, monkeypatch, tmp_path):
        from app.main import _load_profiles
        from motion.profiles import DEFAULT_PROFILES

        bad = tmp_path / "profiles.json"
        bad.write_text("{nope")
        monkeypatch.setattr(settings, "motion_profiles_path", str(bad))
        assert _load_profiles() is DEFAULT_PROFILES

    def test_missing_profiles_file_falls_back(self, monkeypatch, tmp_path):
        from app.main import _load_profiles
        from motion.profiles import DEFAULT_PROFILES

        monkeypatch.setattr(settings, "motion_profiles_path", str(tmp_path / "absent.json"))
        assert _load_profiles() is DEFAULT_PROFILES


@pytest.mark.integration
class TestLifespan:

    def test_controller_runs_during_lifespan(self, app, monkeypatch):
        monkeypatch.setattr(settings, "motion_enabled", True)
        monkeypatch.setattr(settings, "motion_profiles_path", "")
        monkeypatch.setattr(settings, "motion_variant", "")
        monkeypatch.setattr(settings, "motion_seed", 7)
        monkeypatch.setattr(settings, "debug", False)
        with TestClient(app) as client:
            state = client.get("/api/motion/state").json()
            assert state["active"] is True
            assert state["strategy"] == "wandering"
            assert client.get("/health").json()["motion"] is True
        assert app.state.motion_controller is None
