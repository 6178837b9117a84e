"""Preview Dockerfiles for common project types."""
from __future__ import annotations

from container_service.preview.generator import PreviewRequest, generate_preview
from container_service.preview.nodejs import nodejs_dockerfile
from container_service.preview.python import python_dockerfile
from container_service.preview.template import DockerfileTemplate

__all__ = [
    "DockerfileTemplate",
    "PreviewRequest",
    "generate_preview",
    "nodejs_dockerfile",
    "python_dockerfile",
]
