"""Dockerfile preview for JavaScript projects: node build stage, nginx runtime."""

from __future__ import annotations

from container_service.preview.template import DockerfileTemplate

NODEJS_TEMPLATE = DockerfileTemplate(
    """FROM node:{node_version}-alpine AS builder{env}
WORKDIR /app
COPY package*.json ./
RUN {install_command}
COPY . ./
RUN chmod -R a+x node_modules
RUN {build_command}

FROM nginx:alpine
COPY --from=builder /app/{output_directory} /usr/share/nginx/html
EXPOSE 80
CMD ["nginx", "-g", "daemon off;"]"""
)


def env_instruction(environment_vars: str) -> str:
    """Return the ``ENV`` line inserted after ``FROM``, or ``""`` when unset."""
    return f"\nENV {environment_vars}" if environment_vars else ""


def nodejs_dockerfile(
    node_version: str,
    install_command: str,
    build_command: str,
    output_directory: str,
    environment_vars: str = "",
) -> str:
    """Render a two-stage Dockerfile that builds static assets and serves them with nginx."""
    return NODEJS_TEMPLATE.render(
        node_version=node_version,
        env=env_instruction(environment_vars),
        install_command=install_command,
        build_command=build_command,
        output_directory=output_directory.strip("/"),
    )
