"""Named motion profiles.

A profile document names a set of strategies with their parameters, a
default, and optional variants that pick a strategy and override some of
its parameters::

    {
      "defaultStrategy": "wandering",
      "strategies": {"wandering": {"type": "wandering", "parameters": {...}}},
      "variants":   {"calm": {"strategy": "zen", "parameters": {"baseSpeed": 30}}}
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


@dataclass(frozen=True)
class MotionProfile:
    name: str
    type: str
    parameters: dict[str, Any] = field(default_factory=dict)


DEFAULT_PROFILES: dict[str, Any] = {
    "defaultStrategy": "wandering",
    "strategies": {
        "wandering": {
            "type": "wandering",
            "parameters": {
                "baseSpeed": 0.5,
                "avoidanceDistance": 120,
                "avoidanceStrength": 0.8,
                "wanderStrength": 0.3,
                "boundaryPadding": 50,
                "elementSize": 80,
            },
        },
        "zen": {
            "type": "zen",
            "parameters": {
                "baseSpeed": 38,
                "maxTurnRate": 0.9,
                "ema": 0.08,
                "pad": 60,
                "wallK": 120,
                "tau": 3.0,
                "sigma": 0.6,
                "breatheAmp": 0.15,
                "breatheHz": 0.08,
                "pauseProbability": 0.02,
                "pauseDuration": {"min": 1.5, "max": 4.0},
                "flowStrength": 6,
                "flowScale": 0.004,
                "flowTimeScale": 1.0,
                "mouseAvoidanceRadius": 140,
                "mouseAvoidanceStrength": 40,
            },
        },
        "orbit": {
            "type": "flow-field",
            "parameters": {
                "baseSpeed": 45,
                "curlStrength": 0.6,
                "noiseScale": 0.003,
                "noiseTimeScale": 0.5,
                "smoothing": 0.9,
                "pad": 60,
                "wallK": 120,
                "mouseAvoidanceRadius": 140,
                "mouseAvoidanceStrength": 40,
                "orbitBlend": 0.35,
                "turnCentering": 0.4,
            },
        },
    },
    "variants": {
        "calm": {"strategy": "zen", "parameters": {"baseSpeed": 28}},
        "lively": {"strategy": "wandering", "parameters": {"baseSpeed": 0.8, "wanderStrength": 0.45}},
    },
}


def resolve_profile(document: dict[str, Any], variant: Optional[str] = None) -> MotionProfile:
    """Pick the strategy for ``variant`` (or the default) and merge overrides.

    Raises KeyError when the chosen strategy is not defined in the document.
    """
    variant_doc = (document.get("variants") or {}).get(variant, {}) if variant else {}
    name = variant_doc.get("strategy") or document.get("defaultStrategy")
    strategies = document.get("strategies") or {}
    if name not in strategies:
        raise KeyError(f"Unknown strategy '{name}' for variant '{variant}'")
    strategy = strategies[name]
    return MotionProfile(
        name=name,
        type=strategy.get("type", name),
        parameters={**(strategy.get("parameters") or {}), **(variant_doc.get("parameters") or {})},
    )


def load_profiles(path: Optional[Path | str] = None) -> dict[str, Any]:
    """Read a profile document, or return the built-in one when ``path`` is empty."""
    if not path:
        return DEFAULT_PROFILES
    return json.loads(Path(path).read_text(encoding="utf-8"))
