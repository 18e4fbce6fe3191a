"""Motion API — drive the headless controller over HTTP.

Endpoints:
  GET  /api/motion/state       current snapshot
  POST /api/motion/configure   switch strategy / parameters / seed / disabled
  POST /api/motion/pointer     report a pointer sample (omit x/y when it leaves)
  POST /api/motion/viewport    report the viewport size
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from motion.profiles import DEFAULT_PROFILES, resolve_profile
from motion.types import Vec2

router = APIRouter(prefix="/api/motion", tags=["motion"])


class ConfigureRequest(BaseModel):
    """Either an explicit strategy type or a profile variant."""
    strategy: Optional[str] = None   # registry key, e.g. "wandering"
    variant: Optional[str] = None    # profile variant when strategy is omitted
    parameters: dict[str, Any] = {}
    seed: Optional[int] = None
    disabled: bool = False


class PointerUpdate(BaseModel):
    x: Optional[float] = None
    y: Optional[float] = None
    timestamp_ms: Optional[float] = None


class ViewportUpdate(BaseModel):
    width: float
    height: float


def _get_controller(request: Request):
    controller = getattr(request.app.state, "motion_controller", None)
    if controller is None:
        raise HTTPException(503, "Motion controller not available")
    return controller


@router.get("/state")
async def get_state(request: Request):
    return _get_controller(request).snapshot()


@router.post("/configure")
async def configure(body: ConfigureRequest, request: Request):
    """Apply a new configuration.  Unknown strategies stop motion (active=false)."""
    controller = _get_controller(request)
    if body.strategy:
        strategy_type = body.strategy
        parameters = dict(body.parameters)
    else:
        document = getattr(request.app.state, "motion_profiles", None) or DEFAULT_PROFILES
        try:
            profile = resolve_profile(document, body.variant)
        except KeyError as e:
            raise HTTPException(404, str(e))
        strategy_type = profile.type
        parameters = {**profile.parameters, **body.parameters}

    active = controller.configure(strategy_type, parameters, seed=body.seed, disabled=body.disabled)
    return {**controller.snapshot(), "active": active}


@router.post("/pointer")
async def update_pointer(body: PointerUpdate, request: Request):
    controller = _get_controller(request)
    if (body.x is None) != (body.y is None):
        raise HTTPException(400, "x and y must be given together")
    position = Vec2(body.x, body.y) if body.x is not None else None
    controller.update_pointer(position, body.timestamp_ms)
    sampler = controller.sampler
    velocity = sampler.mouse_velocity
    return {
        "mouse": sampler.mouse.to_dict() if sampler.mouse is not None else None,
        "mouse_velocity": velocity.to_dict() if velocity is not None else None,
    }


@router.post("/viewport")
async def update_viewport(body: ViewportUpdate, request: Request):
    controller = _get_controller(request)
    controller.resize(body.width, body.height)
    width, height = controller.sampler.viewport
    return {"width": width, "height": height}
