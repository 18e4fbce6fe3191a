"""Strategy registry — strategy-type name to runner factory.

Populated once at import time.  Lookups never raise: an unknown name is
reported as None and the controller treats it as "no active motion".
"""

from __future__ import annotations

from typing import Optional

from .strategies import create_flow_field_strategy, create_wandering_strategy, create_zen_strategy
from .types import StrategyFactory

STRATEGY_REGISTRY: dict[str, StrategyFactory] = {
    "wandering": create_wandering_strategy,
    "zen": create_zen_strategy,
    "flow-field": create_flow_field_strategy,
}


def get_strategy_factory(strategy_type: str) -> Optional[StrategyFactory]:
    return STRATEGY_REGISTRY.get(strategy_type)


def register_strategy(name: str, factory: StrategyFactory) -> StrategyFactory:
    """Add a factory at startup.  Names are unique for the process."""
    if name in STRATEGY_REGISTRY:
        raise ValueError(f"Duplicate strategy type: {name}")
    STRATEGY_REGISTRY[name] = factory
    return factory
