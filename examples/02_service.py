# RUN: python examples/02_service.py
"""Serve the HTTP API backed by MockBuildEngine.

Then test with:
    curl "http://localhost:8080/preview?project_type=python&install_command=pip%20install%20.&expose_port=8000&deploy_command=python%20app.py"

    mkdir -p /tmp/clones/octo/hello
    curl -X POST http://localhost:8080/build \
         -H "Content-Type: application/json" \
         -d '{"repo_owner": "octo", "repo_name": "hello", "dockerfile": "FROM scratch"}'
"""

from pathlib import Path

import uvicorn

from container_service import ImageBuilder, MockBuildEngine, ServiceConfig
from container_service.server import create_app
from container_service.utils.logging import configure_logging


def _engine() -> MockBuildEngine:
    engine = MockBuildEngine()
    engine.emit_record({"stream": "Step 1/1 : FROM scratch\n"})
    engine.emit_record({"aux": {"ID": "sha256:0000"}})
    return engine


configure_logging("INFO", json=False)
app = create_app(
    ServiceConfig(clone_base_dir=Path("/tmp/clones")),
    builder=ImageBuilder(_engine),
)


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8080, log_config=None)
