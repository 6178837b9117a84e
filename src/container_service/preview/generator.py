from __future__ import annotations

from contextlib import nullcontext
from typing import ContextManager

import structlog
from pydantic import BaseModel

from container_service.core.constants import ProjectType
from container_service.core.exceptions import PreviewError
from container_service.observability.metrics import RequestMetrics
from container_service.preview.nodejs import nodejs_dockerfile
from container_service.preview.python import python_dockerfile

logger = structlog.get_logger(__name__)

REQUIRED_PARAMETERS: dict[ProjectType, tuple[str, ...]] = {
    ProjectType.JAVASCRIPT: (
        "node_version",
        "install_command",
        "build_command",
        "output_directory",
    ),
    ProjectType.PYTHON: ("install_command", "expose_port", "deploy_command"),
}


class PreviewRequest(BaseModel):
    """Parameters for a Dockerfile preview; which ones apply depends on ``project_type``."""

    project_type: str
    node_version: str = ""
    install_command: str = ""
    build_command: str = ""
    output_directory: str = ""
    environment_vars: str = ""
    expose_port: str = ""
    deploy_command: str = ""


def generate_preview(request: PreviewRequest, metrics: RequestMetrics | None = None) -> str:
    """Return preview Dockerfile text for *request*.

    Raises:
        PreviewError: If the project type is unknown or a parameter the
            project type needs is empty.
    """
    try:
        project_type = ProjectType(request.project_type)
    except ValueError as exc:
        raise PreviewError(
            "invalid project type",
            code="INVALID_PROJECT_TYPE",
            details={"project_type": request.project_type},
        ) from exc

    missing = [
        name for name in REQUIRED_PARAMETERS[project_type]
        if not getattr(request, name).strip()
    ]
    if missing:
        raise PreviewError(
            f"missing required parameters: {', '.join(missing)}",
            code="MISSING_PARAMETERS",
            details={"missing": missing},
        )

    timer: ContextManager[None] = (
        metrics.time_preview_generation(project_type) if metrics is not None else nullcontext()
    )
    with timer:
        if project_type is ProjectType.JAVASCRIPT:
            dockerfile = nodejs_dockerfile(
                request.node_version,
                request.install_command,
                request.build_command,
                request.output_directory,
                request.environment_vars,
            )
        else:
            dockerfile = python_dockerfile(
                request.install_command,
                request.expose_port,
                request.deploy_command,
                request.environment_vars,
            )

    logger.debug("preview_generated", project_type=project_type.value)
    return dockerfile
