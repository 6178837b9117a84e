from __future__ import annotations

import logging
import sys
from typing import cast

import structlog

# Engine client loggers; chatty below WARNING.
_NOISY_LOGGERS = ("docker", "urllib3")


def configure_logging(level: str = "INFO", json: bool = True) -> None:
    """Route service, uvicorn and Docker client logs through one structlog pipeline.

    Build progress lines (``build_log_line`` events from
    :class:`~container_service.builder.renderer.StructlogSink`) and request
    logs end up as one JSON object per line on stdout, ready for a log
    collector; ``json=False`` switches to the console renderer for local
    runs. The root handler is replaced on every call, so the API server and
    the metrics server share it. docker-py and urllib3 are held at WARNING
    or above.

    Args:
        level: Level name for the service loggers; unknown names mean INFO.
        json: Render JSON lines when True, console output when False.
    """
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> structlog.BoundLogger:
    """Return the structlog logger for *name* (usually the module's ``__name__``)."""
    return cast(structlog.BoundLogger, structlog.get_logger(name))
