"""Container service — build tagged images from a Dockerfile and a source tree."""

from container_service.__version__ import __version__

from container_service.builder.archive import create_tar_archive
from container_service.builder.decoder import EventStreamDecoder
from container_service.builder.engine import BuildEngine, DockerBuildEngine
from container_service.builder.mock import MockBuildEngine
from container_service.builder.orchestrator import ImageBuilder
from container_service.builder.renderer import (
    BufferSink,
    EventRenderer,
    LineSink,
    StreamSink,
    StructlogSink,
)
from container_service.core.config import ServiceConfig
from container_service.core.constants import BuildOutcome, ProjectType
from container_service.core.exceptions import (
    ArchiveError,
    BuildInvocationError,
    ConfigurationError,
    ContainerServiceError,
    EngineUnavailableError,
    EventInterpretationError,
    PreviewError,
    SpecWriteError,
    StreamDecodeError,
)
from container_service.core.types import (
    BuildEventRecord,
    BuildJob,
    BuildResult,
    LogLine,
    StructuredEvent,
    UninterpretedEvent,
)
from container_service.observability.metrics import BuildMetrics, RequestMetrics
from container_service.preview import PreviewRequest, generate_preview

__all__ = [
    "__version__",
    # Build pipeline
    "ImageBuilder",
    "BuildEngine",
    "DockerBuildEngine",
    "MockBuildEngine",
    "EventStreamDecoder",
    "EventRenderer",
    "LineSink",
    "BufferSink",
    "StreamSink",
    "StructlogSink",
    "create_tar_archive",
    # Config / constants
    "ServiceConfig",
    "BuildOutcome",
    "ProjectType",
    # Types
    "BuildJob",
    "BuildResult",
    "BuildEventRecord",
    "LogLine",
    "StructuredEvent",
    "UninterpretedEvent",
    # Metrics
    "BuildMetrics",
    "RequestMetrics",
    # Preview
    "PreviewRequest",
    "generate_preview",
    # Exceptions
    "ContainerServiceError",
    "ConfigurationError",
    "EngineUnavailableError",
    "SpecWriteError",
    "ArchiveError",
    "BuildInvocationError",
    "StreamDecodeError",
    "EventInterpretationError",
    "PreviewError",
]
