"""Motion core — strategy runners, frame scheduling, pointer sampling."""
from .controller import MotionController
from .diagnostics import TraceSink
from .environment import EnvironmentSampler, PointerVelocityEstimator
from .event_bus import MOTION_FRAME, MOTION_STOPPED, EventBus
from .profiles import DEFAULT_PROFILES, MotionProfile, load_profiles, resolve_profile
from .registry import STRATEGY_REGISTRY, get_strategy_factory, register_strategy
from .scheduler import FrameScheduler, ManualFrameScheduler, ThreadedFrameScheduler
from .trajectory import TrajectoryReport, simulate
from .types import ORIGIN, Environment, StepResult, StrategyConfig, StrategyRunner, Vec2

__all__ = [
    "DEFAULT_PROFILES",
    "Environment",
    "EnvironmentSampler",
    "EventBus",
    "FrameScheduler",
    "ManualFrameScheduler",
    "MOTION_FRAME",
    "MOTION_STOPPED",
    "MotionController",
    "MotionProfile",
    "ORIGIN",
    "PointerVelocityEstimator",
    "STRATEGY_REGISTRY",
    "StepResult",
    "StrategyConfig",
    "StrategyRunner",
    "ThreadedFrameScheduler",
    "TraceSink",
    "TrajectoryReport",
    "Vec2",
    "get_strategy_factory",
    "load_profiles",
    "register_strategy",
    "resolve_profile",
    "simulate",
]
