from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import IO, Any, Iterable, Iterator

import docker
import structlog
from docker.errors import DockerException
from urllib3.exceptions import HTTPError as TransportError

from container_service.core.constants import BUILD_SPEC_FILENAME
from container_service.core.exceptions import (
    BuildInvocationError,
    EngineUnavailableError,
)

logger = structlog.get_logger(__name__)

# Transport failures surfaced while talking to the daemon.
_ENGINE_ERRORS = (DockerException, OSError, TransportError)


class BuildEngine(ABC):
    """Abstract handle to a container build engine.

    ``build`` submits a tar build context and returns the engine's raw
    response body as an iterable of chunks (newline-delimited JSON).
    """

    @abstractmethod
    def build(
        self,
        archive: IO[bytes],
        tag: str,
        *,
        dockerfile: str = BUILD_SPEC_FILENAME,
        remove_intermediate: bool = False,
    ) -> Iterable[bytes | str]: ...

    @abstractmethod
    def ping(self) -> bool: ...

    def close(self) -> None:
        """Release the connection to the engine."""

    def __enter__(self) -> BuildEngine:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class DockerBuildEngine(BuildEngine):
    """Build engine backed by the local Docker daemon via docker-py."""

    def __init__(self, client: docker.DockerClient) -> None:
        self._client = client

    @classmethod
    def from_env(cls, timeout: int | None = None) -> DockerBuildEngine:
        """Connect using ``DOCKER_HOST`` and friends, and verify with a ping.

        Raises:
            EngineUnavailableError: If the daemon cannot be reached.
        """
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            client = docker.from_env(**kwargs)
            client.ping()
        except _ENGINE_ERRORS as exc:
            raise EngineUnavailableError(
                f"cannot connect to Docker: {exc}",
                code="ENGINE_UNAVAILABLE",
            ) from exc
        return cls(client)

    def build(
        self,
        archive: IO[bytes],
        tag: str,
        *,
        dockerfile: str = BUILD_SPEC_FILENAME,
        remove_intermediate: bool = False,
    ) -> Iterable[bytes | str]:
        logger.debug("docker_build_submitted", tag=tag, dockerfile=dockerfile)
        try:
            stream = self._client.api.build(
                fileobj=archive,
                custom_context=True,
                tag=tag,
                dockerfile=dockerfile,
                rm=remove_intermediate,
                decode=False,
            )
        except _ENGINE_ERRORS as exc:
            raise BuildInvocationError(
                f"failed to build image: {exc}",
                code="BUILD_INVOCATION_ERROR",
                details={"tag": tag},
            ) from exc
        return self._iter_chunks(stream, tag)

    @staticmethod
    def _iter_chunks(stream: Iterable[bytes | str], tag: str) -> Iterator[bytes | str]:
        # docker-py defers HTTP status errors until the first read.
        try:
            yield from stream
        except _ENGINE_ERRORS as exc:
            raise BuildInvocationError(
                f"failed to build image: {exc}",
                code="BUILD_INVOCATION_ERROR",
                details={"tag": tag},
            ) from exc

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except _ENGINE_ERRORS:
            logger.warning("docker_ping_failed", exc_info=True)
            return False

    def close(self) -> None:
        self._client.close()
