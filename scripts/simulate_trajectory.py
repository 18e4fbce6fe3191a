#!/usr/bin/env python3
"""Simulate a motion profile headlessly and write the trajectory log.

Steps the chosen strategy at a fixed frame interval (no scheduler, no
wall clock) and writes ``{"metadata", "summary", "log"}`` JSON, where
``log`` holds every 10th sample.  Useful for tuning parameters and for
checking that a seed reproduces the same path.

Usage:
    python scripts/simulate_trajectory.py [--variant NAME] [--strategy NAME]
        [--duration MS] [--step MS] [--seed N] [--width PX] [--height PX]
        [--mouse X,Y] [--profiles FILE] [--output FILE]
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Ensure src/ is on the path
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_PROJECT_ROOT / "src"))

from loguru import logger

from motion.profiles import load_profiles, resolve_profile
from motion.registry import get_strategy_factory
from motion.trajectory import simulate
from motion.types import Vec2


def _parse_mouse(value: str | None) -> Vec2 | None:
    if not value:
        return None
    x, y = value.split(",", 1)
    return Vec2(float(x), float(y))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Headless motion trajectory simulator")
    parser.add_argument("--variant", default=None, help="Profile variant (default: document default)")
    parser.add_argument("--strategy", default=None, help="Strategy name inside the profile document")
    parser.add_argument("--duration", type=float, default=120_000.0, help="Duration in ms")
    parser.add_argument("--step", type=float, default=16.67, help="Frame interval in ms")
    parser.add_argument("--seed", type=int, default=12345)
    parser.add_argument("--width", type=float, default=1280.0)
    parser.add_argument("--height", type=float, default=720.0)
    parser.add_argument("--mouse", default=None, help="Fixed pointer position as X,Y")
    parser.add_argument("--profiles", default=None, help="Profile document (JSON)")
    parser.add_argument("--output", default=None, help="Write log here instead of stdout")
    args = parser.parse_args(argv)

    document = load_profiles(args.profiles)
    if args.strategy:
        document = {**document, "defaultStrategy": args.strategy}
    try:
        profile = resolve_profile(document, None if args.strategy else args.variant)
    except KeyError as e:
        logger.error(str(e))
        return 1

    factory = get_strategy_factory(profile.type)
    if factory is None:
        logger.error(f"Unsupported strategy type: {profile.type}")
        return 1

    runner = factory(profile.parameters, args.seed)
    report = simulate(
        runner,
        duration_ms=args.duration,
        step_ms=args.step,
        width=args.width,
        height=args.height,
        mouse=_parse_mouse(args.mouse),
    )

    payload = {
        "metadata": {
            "strategy": profile.name,
            "type": profile.type,
            "seed": args.seed,
            "durationMs": args.duration,
            "stepMs": args.step,
            "width": args.width,
            "height": args.height,
            "parameters": profile.parameters,
        },
        **report.to_dict(),
    }
    text = json.dumps(payload, indent=2)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        logger.info(f"Wrote {len(report.samples)} samples to {args.output}")
    else:
        print(text)

    s = report.summary
    if s:
        logger.info(
            f"{profile.name}: x [{s['minX']:.1f}, {s['maxX']:.1f}] "
            f"y [{s['minY']:.1f}, {s['maxY']:.1f}] "
            f"speed [{s['minSpeed']:.2f}, {s['maxSpeed']:.2f}]"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
