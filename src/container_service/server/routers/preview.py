"""Dockerfile preview endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from container_service.core.exceptions import PreviewError
from container_service.preview import PreviewRequest, generate_preview

router = APIRouter(tags=["preview"])


@router.get("/preview")
async def preview_dockerfile(
    request: Request,
    project_type: str = Query(...),
    node_version: str = Query(""),
    install_command: str = Query(""),
    build_command: str = Query(""),
    output_directory: str = Query(""),
    environment_vars: str = Query(""),
    expose_port: str = Query(""),
    deploy_command: str = Query(""),
) -> Response:
    """Return a preview Dockerfile for the given project type as plain text."""
    metrics = request.app.state.request_metrics
    with metrics.time_preview_request():
        params = PreviewRequest(
            project_type=project_type,
            node_version=node_version,
            install_command=install_command,
            build_command=build_command,
            output_directory=output_directory,
            environment_vars=environment_vars,
            expose_port=expose_port,
            deploy_command=deploy_command,
        )
        try:
            dockerfile = generate_preview(params, metrics=metrics)
        except PreviewError as exc:
            return JSONResponse(status_code=400, content={"error": str(exc), "code": exc.code})
        return PlainTextResponse(dockerfile)
