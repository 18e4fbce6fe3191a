"""DRIFTWHEEL - headless motion service.

Main FastAPI application.  Hosts one MotionController stepped by a
ThreadedFrameScheduler; clients report pointer and viewport input and
read positions back (HTTP or by subscribing to the event bus in-process).
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.config import settings
from app.routers import diagnostics_router, motion_router

VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Subsystem startup helpers
# ---------------------------------------------------------------------------

def _load_profiles() -> dict:
    """Load the motion profile document, falling back to the built-in one."""
    from motion.profiles import DEFAULT_PROFILES, load_profiles

    if not settings.motion_profiles_path:
        return DEFAULT_PROFILES
    try:
        document = load_profiles(settings.motion_profiles_path)
        logger.info(f"Motion profiles loaded from {settings.motion_profiles_path}")
        return document
    except (OSError, ValueError) as e:
        logger.warning(f"Motion profiles unreadable ({e}); using built-in profiles")
        return DEFAULT_PROFILES


def _create_motion_controller(app: FastAPI):
    """Create, configure and start the controller.  Returns (controller, scheduler) or (None, None)."""
    if not settings.motion_enabled:
        logger.info("Motion controller disabled (MOTION_ENABLED=false)")
        return None, None

    from motion import EnvironmentSampler, EventBus, MotionController, ThreadedFrameScheduler, TraceSink
    from motion.profiles import resolve_profile

    document = _load_profiles()
    app.state.motion_profiles = document

    event_bus = EventBus()
    scheduler = ThreadedFrameScheduler(frame_rate=settings.motion_frame_rate)
    sampler = EnvironmentSampler(settings.viewport_width, settings.viewport_height)
    trace_sink = None
    if settings.debug:
        trace_sink = TraceSink(settings.diagnostics_log_path, settings.diagnostics_max_read_bytes)
        logger.info(f"Motion trace: {settings.diagnostics_log_path}")

    controller = MotionController(
        scheduler,
        sampler,
        event_bus=event_bus,
        trace_sink=trace_sink,
        trace_every=settings.diagnostics_trace_every,
    )
    try:
        profile = resolve_profile(document, settings.motion_variant or None)
    except KeyError as e:
        logger.warning(f"Motion profile not found: {e}; controller idle")
    else:
        controller.configure(profile.type, profile.parameters, seed=settings.motion_seed)

    scheduler.start()
    app.state.event_bus = event_bus
    return controller, scheduler


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("=" * 60)
    logger.info(f"  {settings.app_name} v{VERSION} - INITIALIZING")
    logger.info("=" * 60)

    controller, scheduler = _create_motion_controller(app)
    app.state.motion_controller = controller

    logger.info(f"  {settings.app_name} ONLINE")

    yield

    logger.info(f"{settings.app_name} shutting down...")
    if controller is not None:
        controller.teardown()
    if scheduler is not None:
        scheduler.stop()
    app.state.motion_controller = None


# Create FastAPI app
app = FastAPI(
    title="DRIFTWHEEL",
    description="Real-time motion simulation for a wandering page element",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(motion_router)
app.include_router(diagnostics_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    controller = getattr(app.state, "motion_controller", None)
    return {
        "status": "operational",
        "version": VERSION,
        "system": settings.app_name,
        "motion": controller is not None and controller.active,
    }
