# RUN: python examples/01_build_image.py
"""Build an image with MockBuildEngine: no Docker daemon needed.

Demonstrates: ImageBuilder.build(), live sinks, the aggregated log,
and how a malformed engine stream surfaces as BuildResult.error.
"""

import tempfile
from pathlib import Path

from container_service import BuildMetrics, ImageBuilder, MockBuildEngine, StreamSink
from container_service.utils.logging import configure_logging


def main() -> None:
    configure_logging("WARNING", json=False)

    # 1. A source tree to build
    source = Path(tempfile.mkdtemp()) / "hello"
    source.mkdir()
    (source / "app.py").write_text("print('hello')\n")

    # 2. Script the engine's progress stream
    engine = MockBuildEngine()
    engine.emit_record({"stream": "Step 1/2 : FROM python:alpine\n"})
    engine.emit_record({"status": "Pulling from library/python", "id": "alpine"})
    engine.emit_record({"stream": "Step 2/2 : COPY . /app\n"})
    engine.emit_record({"aux": {"ID": "sha256:5d0da3dc9764"}})

    # 3. Build, echoing lines to stdout as they arrive
    metrics = BuildMetrics()
    builder = ImageBuilder(lambda: engine, metrics=metrics, live_sinks=[StreamSink()])
    result = builder.build("octo/hello", source, "FROM python:alpine\nCOPY . /app\n")
    print(f"\nSucceeded : {result.succeeded}")
    print(f"Message   : {result.status_message}")

    # 4. A truncated record aborts the build but keeps the lines seen so far
    broken = MockBuildEngine()
    broken.emit_record({"stream": "Step 1/2 : FROM python:alpine\n"})
    broken.emit_raw(b'{"stream": "Step 2/2')
    result = ImageBuilder(lambda: broken, metrics=metrics, live_sinks=[]).build(
        "octo/hello", source, "FROM python:alpine\n"
    )
    print(f"\nError     : {type(result.error).__name__}: {result.error}")
    print(f"Partial log:\n{result.logs}")

    builds = metrics.registry.get_sample_value("docker_image_builds_total", {"status": "failure"})
    print(f"Failed builds recorded: {builds}")


if __name__ == "__main__":
    main()
