"""Process entry point: ``container-service``."""
from __future__ import annotations

import argparse
from typing import Sequence

import structlog
import uvicorn
from prometheus_client import CollectorRegistry

from container_service.builder.engine import DockerBuildEngine
from container_service.builder.orchestrator import ImageBuilder
from container_service.core.config import ServiceConfig
from container_service.observability.endpoint import MetricsServer
from container_service.observability.metrics import BuildMetrics, RequestMetrics
from container_service.server.app import create_app
from container_service.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="HTTP service that builds container images from Dockerfiles",
    )
    parser.add_argument("--host", help="Interface for the API server.")
    parser.add_argument("--port", type=int, help="Port for the API server.")
    parser.add_argument("--metrics-port", type=int, help="Port for the /metrics endpoint.")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides CONTAINER_SERVICE_LOG_LEVEL).",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "console"],
        help="Log renderer (overrides CONTAINER_SERVICE_LOG_JSON).",
    )
    return parser


def load_config(args: argparse.Namespace) -> ServiceConfig:
    """Environment configuration with command-line overrides applied."""
    config = ServiceConfig.from_env()
    overrides: dict[str, object] = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.metrics_port is not None:
        overrides["metrics_port"] = args.metrics_port
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_format:
        overrides["log_json"] = args.log_format == "json"
    return config.model_copy(update=overrides)


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    config = load_config(args)
    configure_logging(config.log_level, json=config.log_json)

    registry = CollectorRegistry()
    timeout = config.docker_timeout
    builder = ImageBuilder(
        lambda: DockerBuildEngine.from_env(timeout=timeout),
        metrics=BuildMetrics(registry),
    )
    app = create_app(config, builder=builder, request_metrics=RequestMetrics(registry))

    metrics_server = MetricsServer(registry, host=config.metrics_host, port=config.metrics_port)
    metrics_server.start()
    try:
        logger.info("service_starting", host=config.host, port=config.port)
        uvicorn.run(app, host=config.host, port=config.port, log_config=None)
    finally:
        metrics_server.stop()


if __name__ == "__main__":
    main()
