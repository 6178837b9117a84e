"""Image build pipeline: archiving, engine invocation, event decoding and rendering."""
from __future__ import annotations

from container_service.builder.archive import create_tar_archive
from container_service.builder.decoder import EventStreamDecoder
from container_service.builder.engine import BuildEngine, DockerBuildEngine
from container_service.builder.orchestrator import ImageBuilder
from container_service.builder.renderer import (
    BufferSink,
    EventRenderer,
    LineSink,
    StreamSink,
    StructlogSink,
)

__all__ = [
    "BufferSink",
    "BuildEngine",
    "DockerBuildEngine",
    "EventRenderer",
    "EventStreamDecoder",
    "ImageBuilder",
    "LineSink",
    "StreamSink",
    "StructlogSink",
    "create_tar_archive",
]
