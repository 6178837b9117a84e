"""HTTP surface of the container service: build, preview and health routes."""
from __future__ import annotations

from container_service.server.app import create_app

__all__ = ["create_app"]
