"""Headless trajectory simulation for tuning and regression checks.

Steps a runner at a fixed frame interval without any scheduler, keeping a
thinned sample log plus min/max summaries of position and speed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .types import Environment, StrategyRunner, Vec2


@dataclass
class TrajectoryReport:
    samples: list[dict] = field(default_factory=list)
    summary: dict[str, float] = field(default_factory=dict)
    positions: Optional[np.ndarray] = None  # (steps, 2)
    speeds: Optional[np.ndarray] = None  # (steps,)

    def to_dict(self) -> dict:
        return {"summary": self.summary, "log": self.samples}


def simulate(
    runner: StrategyRunner,
    duration_ms: float = 120_000.0,
    step_ms: float = 1000.0 / 60.0,
    width: float = 1280.0,
    height: float = 720.0,
    mouse: Optional[Vec2] = None,
    sample_every: int = 10,
) -> TrajectoryReport:
    """Reset ``runner`` and step it for ``duration_ms``.

    The first step has a zero delta, matching what the controller does
    right after a reconfiguration.
    """
    steps = max(int(duration_ms // step_ms), 0)
    positions = np.zeros((steps, 2), dtype=float)
    speeds = np.zeros(steps, dtype=float)
    samples: list[dict] = []

    runner.reset(Environment(width=width, height=height, mouse=mouse))
    elapsed_ms = 0.0
    last_logged = 0
    for i in range(steps):
        delta_ms = 0.0 if i == 0 else step_ms
        elapsed_ms += delta_ms
        result = runner.step(Environment(
            width=width,
            height=height,
            time=elapsed_ms / 1000.0,
            delta_time=delta_ms / 1000.0,
            mouse=mouse,
        ))
        positions[i] = (result.position.x, result.position.y)
        speeds[i] = result.velocity.length()
        if i - last_logged >= sample_every:
            samples.append({
                "t": elapsed_ms,
                "x": result.position.x,
                "y": result.position.y,
                "speed": float(speeds[i]),
            })
            last_logged = i

    return TrajectoryReport(
        samples=samples,
        summary=summarize(positions, speeds),
        positions=positions,
        speeds=speeds,
    )


def summarize(positions: np.ndarray, speeds: np.ndarray) -> dict[str, float]:
    if len(positions) == 0:
        return {}
    mins = positions.min(axis=0)
    maxs = positions.max(axis=0)
    return {
        "minX": float(mins[0]),
        "maxX": float(maxs[0]),
        "minY": float(mins[1]),
        "maxY": float(maxs[1]),
        "minSpeed": float(speeds.min()),
        "maxSpeed": float(speeds.max()),
        "meanSpeed": float(speeds.mean()),
    }
