"""Unit tests for profile documents and variant resolution."""
from __future__ import annotations

import json

import pytest

from motion.profiles import DEFAULT_PROFILES, MotionProfile, load_profiles, resolve_profile
from motion.registry import get_strategy_factory

pytestmark = pytest.mark.unit


class TestResolve:

    def test_default_strategy(self):
        profile = resolve_profile(DEFAULT_PROFILES)
        assert profile.name == "wandering"
        assert profile.type == "wandering"
        assert profile.parameters["baseSpeed"] == 0.5

    def test_variant_overrides_parameters(self):
        profile = resolve_profile(DEFAULT_PROFILES, "calm")
        assert profile.type == "zen"
        assert profile.parameters["baseSpeed"] == 28
        assert profile.parameters["tau"] == 3.0

    def test_named_strategy_with_other_type(self):
        doc = {**DEFAULT_PROFILES, "defaultStrategy": "orbit"}
        profile = resolve_profile(doc)
        assert profile == MotionProfile("orbit", "flow-field", DEFAULT_PROFILES["strategies"]["orbit"]["parameters"])

    def test_unknown_variant_falls_back_to_default(self):
        assert resolve_profile(DEFAULT_PROFILES, "nope").name == "wandering"

    def test_missing_strategy_raises(self):
        with pytest.raises(KeyError):
            resolve_profile({"defaultStrategy": "ghost", "strategies": {}})

    def test_does_not_mutate_document(self):
        before = json.dumps(DEFAULT_PROFILES, sort_keys=True)
        resolve_profile(DEFAULT_PROFILES, "lively")
        assert json.dumps(DEFAULT_PROFILES, sort_keys=True) == before

    def test_every_builtin_type_is_registered(self):
        for strategy in DEFAULT_PROFILES["strategies"].values():
            assert get_strategy_factory(strategy["type"]) is not None


class TestLoad:

    def test_empty_path_returns_builtin(self):
        assert load_profiles(None) is DEFAULT_PROFILES
        assert load_profiles("") is DEFAULT_PROFILES

    def test_reads_json_file(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({"defaultStrategy": "a", "strategies": {"a": {"type": "zen"}}}))
        profile = resolve_profile(load_profiles(path))
        assert profile == MotionProfile("a", "zen", {})

    def test_bad_json_raises_value_error(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            load_profiles(path)
