"""Built-in motion models."""
from .flow_field import FlowFieldConfig, FlowFieldRunner, create_flow_field_strategy
from .wandering import WanderingConfig, WanderingRunner, create_wandering_strategy
from .zen import ZenConfig, ZenRunner, create_zen_strategy

__all__ = [
    "FlowFieldConfig",
    "FlowFieldRunner",
    "WanderingConfig",
    "WanderingRunner",
    "ZenConfig",
    "ZenRunner",
    "create_flow_field_strategy",
    "create_wandering_strategy",
    "create_zen_strategy",
]
