from __future__ import annotations

from typing import Any


class ContainerServiceError(Exception):
    """Base exception for all container-service errors.

    Attributes:
        code: Optional machine-readable error code (e.g. ``"ARCHIVE_ERROR"``).
        details: Arbitrary key/value context about the error.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}

    @property
    def is_terminal(self) -> bool:
        """Whether this error aborts the remaining build pipeline."""
        return True


class ConfigurationError(ContainerServiceError): ...


class PreviewError(ContainerServiceError): ...


# ---------------------------------------------------------------------------
# Build pipeline errors
# ---------------------------------------------------------------------------


class EngineUnavailableError(ContainerServiceError):
    """No connection or handle to the build engine could be obtained."""


class SpecWriteError(ContainerServiceError):
    """The build-spec file could not be written into the source tree."""


class ArchiveError(ContainerServiceError):
    """The source tree could not be packaged.

    Attributes:
        path: The filesystem entry that could not be read or stat'ed.
    """

    def __init__(
        self,
        message: str,
        path: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code=code, details=details)
        self.path = path


class BuildInvocationError(ContainerServiceError):
    """The build engine rejected the request or reported a failed build."""


class StreamDecodeError(ContainerServiceError):
    """The engine's response stream contained a malformed record.

    Attributes:
        records_processed: Number of records decoded before the failure.
    """

    def __init__(
        self,
        message: str,
        records_processed: int,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code=code, details=details)
        self.records_processed = records_processed


class EventInterpretationError(ContainerServiceError):
    """A well-formed record could not be mapped onto the structured event shape.

    Never terminal: the record is rendered with a fallback layout and
    decoding continues.

    Attributes:
        raw: The decoded record that failed interpretation.
    """

    def __init__(
        self,
        message: str,
        raw: Any,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code=code, details=details)
        self.raw = raw

    @property
    def is_terminal(self) -> bool:  # noqa: D102
        return False
