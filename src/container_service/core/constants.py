from __future__ import annotations

from enum import StrEnum

# Build-spec file written at the root of every source tree before packaging.
BUILD_SPEC_FILENAME = "Dockerfile"

# Free-text field of a build-engine record.
STREAM_FIELD = "stream"

# Millisecond-precision wall-clock format used for rendered log lines.
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

BUILD_COMPLETE_MESSAGE = "image build complete"

DEFAULT_CLONE_BASE_DIR = "/temp"
DEFAULT_PORT = 8080
DEFAULT_METRICS_PORT = 2112


class BuildOutcome(StrEnum):
    STARTED = "started"
    SUCCESS = "success"
    FAILURE = "failure"


class ProjectType(StrEnum):
    JAVASCRIPT = "javascript"
    PYTHON = "python"


class RecordKind(StrEnum):
    LOG = "log"
    EVENT = "event"
    RAW = "raw"
