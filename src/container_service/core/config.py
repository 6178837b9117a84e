from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from container_service.core.constants import (
    DEFAULT_CLONE_BASE_DIR,
    DEFAULT_METRICS_PORT,
    DEFAULT_PORT,
)
from container_service.core.exceptions import ConfigurationError

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class ServiceConfig(BaseModel):
    clone_base_dir: Path = Path(DEFAULT_CLONE_BASE_DIR)
    host: str = "0.0.0.0"
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    metrics_host: str = "0.0.0.0"
    metrics_port: int = Field(default=DEFAULT_METRICS_PORT, ge=1, le=65535)
    docker_timeout: int | None = Field(default=None, ge=1)
    """Socket timeout for the Docker client; ``None`` keeps docker-py's default."""
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = True

    def clone_path(self, owner: str, name: str) -> Path:
        """Absolute directory a repository is cloned into before building."""
        return self.clone_base_dir.absolute() / owner / name

    @classmethod
    def from_env(cls) -> ServiceConfig:
        """Create a :class:`ServiceConfig` from environment variables.

        Reads the following env vars (all optional):

        * ``CLONE_BASE_DIR`` → ``clone_base_dir``
        * ``CONTAINER_SERVICE_HOST`` / ``CONTAINER_SERVICE_PORT`` → ``host`` / ``port``
        * ``CONTAINER_SERVICE_METRICS_HOST`` / ``CONTAINER_SERVICE_METRICS_PORT``
        * ``CONTAINER_SERVICE_DOCKER_TIMEOUT`` → ``docker_timeout`` (seconds)
        * ``CONTAINER_SERVICE_LOG_LEVEL`` → ``log_level``
        * ``CONTAINER_SERVICE_LOG_JSON`` → ``log_json`` (``true``/``false``)

        Any variable that is not set or is empty is left at its default value.

        Raises:
            ConfigurationError: If a variable holds an invalid value.
        """
        kwargs: dict[str, Any] = {}

        clone_base_dir = os.environ.get("CLONE_BASE_DIR")
        if clone_base_dir:
            kwargs["clone_base_dir"] = Path(clone_base_dir)

        for env_name, field in (
            ("CONTAINER_SERVICE_HOST", "host"),
            ("CONTAINER_SERVICE_METRICS_HOST", "metrics_host"),
        ):
            value = os.environ.get(env_name)
            if value:
                kwargs[field] = value

        for env_name, field in (
            ("CONTAINER_SERVICE_PORT", "port"),
            ("CONTAINER_SERVICE_METRICS_PORT", "metrics_port"),
            ("CONTAINER_SERVICE_DOCKER_TIMEOUT", "docker_timeout"),
        ):
            value = os.environ.get(env_name)
            if value:
                try:
                    kwargs[field] = int(value)
                except ValueError as exc:
                    raise ConfigurationError(
                        f"{env_name} must be an integer, got {value!r}",
                        code="INVALID_ENV",
                        details={"variable": env_name},
                    ) from exc

        log_level = os.environ.get("CONTAINER_SERVICE_LOG_LEVEL")
        if log_level:
            kwargs["log_level"] = log_level.upper()

        log_json = os.environ.get("CONTAINER_SERVICE_LOG_JSON")
        if log_json:
            lowered = log_json.strip().lower()
            if lowered in _TRUTHY:
                kwargs["log_json"] = True
            elif lowered in _FALSY:
                kwargs["log_json"] = False
            else:
                raise ConfigurationError(
                    f"CONTAINER_SERVICE_LOG_JSON must be a boolean, got {log_json!r}",
                    code="INVALID_ENV",
                    details={"variable": "CONTAINER_SERVICE_LOG_JSON"},
                )

        try:
            return cls(**kwargs)
        except ValidationError as exc:
            raise ConfigurationError(str(exc), code="INVALID_ENV") from exc
