"""Unit tests for the strategy registry."""
from __future__ import annotations

import pytest

from motion.registry import STRATEGY_REGISTRY, get_strategy_factory, register_strategy
from motion.strategies import (
    create_flow_field_strategy,
    create_wandering_strategy,
    create_zen_strategy,
)

pytestmark = pytest.mark.unit


class TestLookup:

    def test_builtin_strategies(self):
        assert get_strategy_factory("wandering") is create_wandering_strategy
        assert get_strategy_factory("zen") is create_zen_strategy
        assert get_strategy_factory("flow-field") is create_flow_field_strategy

    def test_unknown_returns_none(self):
        assert get_strategy_factory("teleport") is None
        assert get_strategy_factory("") is None

    def test_lookup_is_case_sensitive(self):
        assert get_strategy_factory("Wandering") is None


class TestRegister:

    def test_register_and_lookup(self):
        def factory(config, seed=None):
            return create_wandering_strategy(config, seed)

        try:
            assert register_strategy("custom-test", factory) is factory
            assert get_strategy_factory("custom-test") is factory
        finally:
            STRATEGY_REGISTRY.pop("custom-test", None)

    def test_duplicate_name_rejected(self):
        with pytest.raises(ValueError):
            register_strategy("wandering", create_zen_strategy)
        assert get_strategy_factory("wandering") is create_wandering_strategy

    def test_factories_build_independent_runners(self):
        a = create_wandering_strategy({}, 1)
        b = create_wandering_strategy({}, 1)
        assert a is not b
