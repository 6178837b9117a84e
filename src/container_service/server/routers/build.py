"""Image build endpoint."""
from __future__ import annotations

import shutil
from pathlib import Path

import structlog
from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["build"])


class BuildRequest(BaseModel):
    repo_owner: str = Field(..., pattern=r"^[A-Za-z0-9._-]+$")
    repo_name: str = Field(..., pattern=r"^[A-Za-z0-9._-]+$")
    dockerfile: str = Field(..., min_length=1)

    @field_validator("repo_owner", "repo_name")
    @classmethod
    def _not_relative(cls, value: str) -> str:
        if value in {".", ".."}:
            raise ValueError("must not be a relative path component")
        return value

    @property
    def image_tag(self) -> str:
        # Docker repository names must be lowercase.
        return f"{self.repo_owner}/{self.repo_name}".lower()


def _remove_clone(path: Path) -> None:
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError:
        logger.warning("clone_path_cleanup_failed", clone_path=str(path), exc_info=True)


@router.post("/build")
async def build_image(body: BuildRequest, request: Request) -> JSONResponse:
    """Build the cloned repository with the submitted Dockerfile."""
    state = request.app.state
    with state.request_metrics.time_build_request():
        clone_path = state.config.clone_path(body.repo_owner, body.repo_name)
        image_tag = body.image_tag
        logger.info("build_request_received", image_tag=image_tag, clone_path=str(clone_path))

        try:
            result = await run_in_threadpool(
                state.builder.build, image_tag, clone_path, body.dockerfile
            )
        finally:
            _remove_clone(clone_path)

        if not result.succeeded:
            return JSONResponse(
                status_code=500,
                content={
                    "message": "internal server error",
                    "error": str(result.error),
                    "error_type": type(result.error).__name__,
                    "image_tag": image_tag,
                    "logs": result.logs,
                },
            )

        return JSONResponse(content={
            "message": result.status_message,
            "image_tag": image_tag,
            "logs": result.logs,
        })
