"""API routers."""
from .diagnostics import router as diagnostics_router
from .motion import router as motion_router

__all__ = ["diagnostics_router", "motion_router"]
