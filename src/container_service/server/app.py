"""Application factory.

Creates a FastAPI app wired to an :class:`ImageBuilder` and the request
metrics.

Usage::

    from container_service.server import create_app

    app = create_app(ServiceConfig.from_env())
    # uvicorn.run(app, host="0.0.0.0", port=8080)
"""
from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from container_service.__version__ import __version__
from container_service.builder.engine import DockerBuildEngine
from container_service.builder.orchestrator import ImageBuilder
from container_service.core.config import ServiceConfig
from container_service.observability.metrics import BuildMetrics, RequestMetrics

logger = structlog.get_logger(__name__)


async def _validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"message": "bad request", "error": str(exc)},
    )


def create_app(
    config: ServiceConfig | None = None,
    *,
    builder: ImageBuilder | None = None,
    request_metrics: RequestMetrics | None = None,
) -> FastAPI:
    """Create the container-service HTTP application.

    Args:
        config: Service configuration; defaults to :meth:`ServiceConfig.from_env`.
        builder: Image builder; a Docker-backed one is created when omitted.
        request_metrics: Request instruments; a private registry is used
            when omitted.

    Returns:
        A configured :class:`FastAPI` application.
    """
    config = config if config is not None else ServiceConfig.from_env()
    if builder is None:
        timeout = config.docker_timeout
        builder = ImageBuilder(
            lambda: DockerBuildEngine.from_env(timeout=timeout),
            metrics=BuildMetrics(),
        )
    if request_metrics is None:
        request_metrics = RequestMetrics()

    app = FastAPI(title="Container Service", version=__version__)

    # Store references on app.state for router access.
    app.state.config = config
    app.state.builder = builder
    app.state.request_metrics = request_metrics

    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    # Import routers lazily to avoid circular imports.
    from container_service.server.routers.build import router as build_router
    from container_service.server.routers.health import router as health_router
    from container_service.server.routers.preview import router as preview_router

    app.include_router(health_router)
    app.include_router(build_router)
    app.include_router(preview_router)

    logger.info("app_created", clone_base_dir=str(config.clone_base_dir.absolute()))
    return app
