"""Prometheus scrape endpoint with its own server lifecycle.

The endpoint runs on a dedicated :class:`uvicorn.Server` in a daemon thread,
independent of the main application and of any build in progress.

Usage::

    server = MetricsServer(registry, port=2112)
    server.start()
    ...
    server.stop()
"""

from __future__ import annotations

import threading

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

logger = structlog.get_logger(__name__)


def create_metrics_app(registry: CollectorRegistry) -> FastAPI:
    """Return an app exposing *registry* at ``GET /metrics``."""
    app = FastAPI(title="container-service metrics", docs_url=None, redoc_url=None)

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    return app


class MetricsServer:
    """Supervises the metrics HTTP server thread.

    :meth:`start` and :meth:`stop` are idempotent.

    Args:
        registry: Registry whose instruments are exposed.
        host: Interface to bind.
        port: Port to listen on.
    """

    def __init__(
        self,
        registry: CollectorRegistry,
        host: str = "0.0.0.0",
        port: int = 2112,
    ) -> None:
        self._registry = registry
        self._host = host
        self._port = port
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        config = uvicorn.Config(
            create_metrics_app(self._registry),
            host=self._host,
            port=self._port,
            log_config=None,
            access_log=False,
            lifespan="off",
        )
        self._server = uvicorn.Server(config)
        self._thread = threading.Thread(
            target=self._server.run,
            name="metrics-server",
            daemon=True,
        )
        self._thread.start()
        logger.info("metrics_server_started", host=self._host, port=self._port, path="/metrics")

    def stop(self, timeout: float = 5.0) -> None:
        if self._server is None or self._thread is None:
            return
        self._server.should_exit = True
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("metrics_server_stop_timeout", timeout=timeout)
        else:
            logger.info("metrics_server_stopped")
        self._server = None
        self._thread = None
