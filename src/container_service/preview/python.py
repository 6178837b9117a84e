"""Dockerfile preview for Python projects."""

from __future__ import annotations

import json

from container_service.preview.nodejs import env_instruction
from container_service.preview.template import DockerfileTemplate

PYTHON_TEMPLATE = DockerfileTemplate(
    """FROM python:alpine{env}
WORKDIR /app
COPY requirements.txt ./
RUN {install_command}
COPY . ./
EXPOSE {expose_port}
CMD {cmd}"""
)


def exec_form(command: str) -> str:
    """Convert a shell-style command into an exec-form JSON array.

    >>> exec_form("gunicorn -b 0.0.0.0:8000 app:app")
    '["gunicorn", "-b", "0.0.0.0:8000", "app:app"]'
    """
    return json.dumps(command.split())


def python_dockerfile(
    install_command: str,
    expose_port: str,
    deploy_command: str,
    environment_vars: str = "",
) -> str:
    return PYTHON_TEMPLATE.render(
        env=env_instruction(environment_vars),
        install_command=install_command,
        expose_port=expose_port,
        cmd=exec_form(deploy_command),
    )
