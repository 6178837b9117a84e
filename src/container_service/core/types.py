from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from container_service.core.constants import (
    BUILD_SPEC_FILENAME,
    RecordKind,
)
from container_service.core.exceptions import ContainerServiceError


class BuildJob(BaseModel):
    """A single build request, owned by one orchestration call."""

    image_tag: str
    source_path: Path
    build_spec_text: str

    @property
    def spec_path(self) -> Path:
        return self.source_path / BUILD_SPEC_FILENAME


# ---------------------------------------------------------------------------
# Build event records
# ---------------------------------------------------------------------------


class LogLine(BaseModel):
    """Free-text output of a build step."""

    timestamp: datetime
    text: str

    @property
    def kind(self) -> RecordKind:
        return RecordKind.LOG


class ProgressDetail(BaseModel):
    current: int | None = None
    total: int | None = None

    model_config = ConfigDict(extra="allow")


class ErrorDetail(BaseModel):
    code: int | None = None
    message: str | None = None

    model_config = ConfigDict(extra="allow")


class StructuredEvent(BaseModel):
    """A Docker JSON message that is not plain step output.

    Covers pull/push progress (``status``, ``id``, ``progress``), build
    failures (``error``, ``errorDetail``) and auxiliary payloads such as the
    final image ID (``aux``).  Unknown keys are retained.
    """

    status: str | None = None
    id: str | None = None
    progress: str | None = None
    progress_detail: ProgressDetail | None = Field(default=None, alias="progressDetail")
    error: str | None = None
    error_detail: ErrorDetail | None = Field(default=None, alias="errorDetail")
    aux: dict[str, Any] | None = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @property
    def kind(self) -> RecordKind:
        return RecordKind.EVENT

    @property
    def error_message(self) -> str | None:
        """The engine-reported error, preferring the detailed message."""
        if self.error_detail is not None and self.error_detail.message:
            return self.error_detail.message
        return self.error or None

    @property
    def is_error(self) -> bool:
        return self.error_message is not None


class UninterpretedEvent(BaseModel):
    """A well-formed record whose content did not fit :class:`StructuredEvent`."""

    raw: Any
    reason: str

    @property
    def kind(self) -> RecordKind:
        return RecordKind.RAW


BuildEventRecord = Union[LogLine, StructuredEvent, UninterpretedEvent]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class BuildResult(BaseModel):
    """Outcome of one build call.

    ``logs`` always holds every line rendered before the call returned,
    including on failure.
    """

    image_tag: str
    status_message: str = ""
    logs: str = ""
    error: ContainerServiceError | None = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def succeeded(self) -> bool:
        return self.error is None
