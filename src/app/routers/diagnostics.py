"""Diagnostics API — development trace log for the wandering element.

Clients append arbitrary JSON objects (one per request) and can read back
the tail of the log as NDJSON.  Both endpoints answer 403 unless the
service runs with DEBUG=true.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response
from loguru import logger

from app.config import settings
from motion.diagnostics import TraceSink

router = APIRouter(prefix="/api/diagnostics", tags=["diagnostics"])


def _sink() -> TraceSink:
    return TraceSink(settings.diagnostics_log_path, settings.diagnostics_max_read_bytes)


def _require_debug() -> None:
    if not settings.debug:
        raise HTTPException(403, "diagnostics-disabled")


@router.post("/wheel-trace")
async def append_trace(request: Request):
    """Append one trace record."""
    _require_debug()
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        raise HTTPException(400, "invalid-payload")
    try:
        _sink().append(body)
    except OSError as e:
        logger.warning(f"Trace append failed: {e}")
        raise HTTPException(500, "trace-write-failed")
    return {"ok": True}


@router.get("/wheel-trace")
async def read_trace():
    """Return the tail of the trace log as NDJSON."""
    _require_debug()
    return Response(
        content=_sink().read_tail(),
        media_type="application/x-ndjson; charset=utf-8",
    )
