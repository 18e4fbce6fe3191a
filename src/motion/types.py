"""Value types shared by the controller, the sampler and every strategy.

Coordinates are viewport units (CSS pixels in the browser host), +x right,
+y down.  Times inside an Environment are seconds; raw host timestamps are
milliseconds and are converted by the controller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


@dataclass(frozen=True)
class Vec2:
    """2-D vector used for both positions and velocities."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, k: float) -> Vec2:
        return Vec2(self.x * k, self.y * k)

    def length(self) -> float:
        return (self.x * self.x + self.y * self.y) ** 0.5

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


Position = Vec2
Velocity = Vec2

ORIGIN = Vec2(0.0, 0.0)


@dataclass(frozen=True)
class Environment:
    """Immutable per-frame snapshot handed to ``StrategyRunner.step``.

    ``mouse`` is None while the pointer is outside the tracking area;
    ``mouse_velocity`` is None until the sampler has seen a pointer sample.
    """

    width: float
    height: float
    time: float = 0.0
    delta_time: float = 0.0
    mouse: Optional[Vec2] = None
    mouse_velocity: Optional[Vec2] = None

    def with_delta(self, delta_time: float) -> Environment:
        return replace(self, delta_time=delta_time)


@dataclass
class StepResult:
    """What a runner emits for one frame."""

    position: Vec2
    velocity: Vec2
    heading: Optional[float] = None
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "position": self.position.to_dict(),
            "velocity": self.velocity.to_dict(),
        }
        if self.heading is not None:
            d["heading"] = self.heading
        return d


class StrategyConfig(BaseModel):
    """Base for strategy parameter records.

    Accepts snake_case or camelCase keys (profile documents are authored in
    camelCase) and ignores keys a strategy does not know about, so one
    profile can carry parameters for several strategy types.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    initial_x: Optional[float] = None
    initial_y: Optional[float] = None

    @classmethod
    def coerce(cls, config: ConfigLike) -> StrategyConfig:
        """Build this config type from a mapping, another model or None."""
        if isinstance(config, cls):
            return config
        if isinstance(config, BaseModel):
            return cls.model_validate(config.model_dump())
        return cls.model_validate(dict(config or {}))

    @property
    def initial_position(self) -> Optional[Vec2]:
        if self.initial_x is None or self.initial_y is None:
            return None
        return Vec2(self.initial_x, self.initial_y)


ConfigLike = Union[Mapping[str, Any], BaseModel, None]


def with_initial_position(config: ConfigLike, position: Vec2) -> ConfigLike:
    """Return a copy of ``config`` that starts the runner at ``position``."""
    if isinstance(config, BaseModel):
        return config.model_copy(update={"initial_x": position.x, "initial_y": position.y})
    seeded = {k: v for k, v in dict(config or {}).items() if k not in ("initialX", "initialY")}
    seeded["initial_x"] = position.x
    seeded["initial_y"] = position.y
    return seeded


class StrategyRunner(ABC):
    """Stateful unit of simulation for one motion model.

    Runners never raise on numeric edge cases: negative or oversized
    delta times and degenerate viewports are clamped internally.
    """

    @abstractmethod
    def reset(self, env: Environment) -> None:
        """(Re)initialise internal state for a fresh trajectory."""

    @abstractmethod
    def step(self, env: Environment) -> StepResult:
        """Advance by ``env.delta_time`` seconds and return the new state."""


StrategyFactory = Callable[[ConfigLike, Optional[int]], StrategyRunner]
