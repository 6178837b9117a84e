"""Health check endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from container_service.__version__ import __version__

router = APIRouter(tags=["health"])


@router.get("/api/health")
async def health_check(request: Request) -> JSONResponse:
    """Report whether the build engine is reachable."""
    builder = request.app.state.builder
    engine_ok = await run_in_threadpool(builder.engine_healthy)
    return JSONResponse(
        status_code=200 if engine_ok else 503,
        content={
            "healthy": engine_ok,
            "version": __version__,
            "details": {"engine": "reachable" if engine_ok else "unreachable"},
        },
    )
