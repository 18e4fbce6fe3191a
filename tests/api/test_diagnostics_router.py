"""Unit tests for the diagnostics API router (/api/diagnostics/wheel-trace).

Settings are patched per test: DEBUG gates both endpoints and the log
directory points at pytest's tmp_path.
"""
from __future__ import annotations

import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.config import settings
from app.routers.diagnostics import router


def _make_app():
    app = FastAPI()
    app.include_router(router)
    return app


@pytest.fixture
def debug_client(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "debug", True)
    monkeypatch.setattr(settings, "diagnostics_log_dir", tmp_path)
    return TestClient(_make_app())


@pytest.mark.unit
class TestDisabled:

    def test_post_forbidden_outside_debug(self, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, "debug", False)
        monkeypatch.setattr(settings, "diagnostics_log_dir", tmp_path)
        resp = TestClient(_make_app()).post("/api/diagnostics/wheel-trace", json={"a": 1})
        assert resp.status_code == 403
        assert resp.json()["detail"] == "diagnostics-disabled"
        assert not any(tmp_path.iterdir())

    def test_get_forbidden_outside_debug(self, monkeypatch):
        monkeypatch.setattr(settings, "debug", False)
        resp = TestClient(_make_app()).get("/api/diagnostics/wheel-trace")
        assert resp.status_code == 403


@pytest.mark.unit
class TestAppend:

    def test_append_writes_line(self, debug_client, tmp_path):
        resp = debug_client.post("/api/diagnostics/wheel-trace", json={"event": "wheel", "x": 3})
        assert resp.status_code == 200
        assert resp.json() == {"ok": True}
        lines = (tmp_path / settings.diagnostics_log_name).read_text().splitlines()
        record = json.loads(lines[0])
        assert record["event"] == "wheel"
        assert "serverTs" in record

    @pytest.mark.parametrize("payload", ["[1, 2]", "42", "\"text\"", "null", "{broken"])
    def test_non_object_payload_rejected(self, debug_client, payload):
        resp = debug_client.post(
            "/api/diagnostics/wheel-trace",
            content=payload,
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "invalid-payload"


@pytest.mark.unit
class TestRead:

    def test_empty_log(self, debug_client):
        resp = debug_client.get("/api/diagnostics/wheel-trace")
        assert resp.status_code == 200
        assert resp.text == ""
        assert resp.headers["content-type"].startswith("application/x-ndjson")

    def test_round_trip(self, debug_client):
        for i in range(3):
            debug_client.post("/api/diagnostics/wheel-trace", json={"i": i})
        resp = debug_client.get("/api/diagnostics/wheel-trace")
        records = [json.loads(line) for line in resp.text.splitlines()]
        assert [r["i"] for r in records] == [0, 1, 2]

    def test_tail_limit(self, debug_client, monkeypatch):
        monkeypatch.setattr(settings, "diagnostics_max_read_bytes", 128)
        for i in range(20):
            debug_client.post("/api/diagnostics/wheel-trace", json={"i": i})
        resp = debug_client.get("/api/diagnostics/wheel-trace")
        assert len(resp.content) <= 128
        assert resp.text.rstrip("\n").endswith("19}")
