"""Image build orchestration: spec file, archive, engine call, event stream."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable

import structlog

from container_service.builder.archive import create_tar_archive
from container_service.builder.decoder import EventStreamDecoder
from container_service.builder.engine import BuildEngine, DockerBuildEngine
from container_service.builder.renderer import (
    BufferSink,
    EventRenderer,
    LineSink,
    StructlogSink,
)
from container_service.core.constants import (
    BUILD_COMPLETE_MESSAGE,
    BUILD_SPEC_FILENAME,
    RecordKind,
)
from container_service.core.exceptions import (
    ArchiveError,
    BuildInvocationError,
    ContainerServiceError,
    EngineUnavailableError,
    SpecWriteError,
)
from container_service.core.types import BuildJob, BuildResult
from container_service.observability.metrics import BuildMetrics

logger = structlog.get_logger(__name__)

EngineFactory = Callable[[], BuildEngine]


class ImageBuilder:
    """Builds and tags a container image from a Dockerfile and a source tree.

    Each :meth:`build` call is one synchronous attempt: the Dockerfile is
    written into the source tree, the tree is archived and submitted to the
    engine, and the engine's progress stream is decoded, rendered to the
    live sinks and aggregated into the returned log.

    Concurrent calls share nothing but the metrics instruments. Builds of
    the same tag are neither serialised nor deduplicated; callers that need
    that must coordinate themselves.

    Args:
        engine_factory: Returns a connected :class:`BuildEngine`; called once
            per build. Defaults to :meth:`DockerBuildEngine.from_env`.
        metrics: Build instruments; a private registry is used when omitted.
        live_sinks: Sinks that receive rendered lines as they arrive.
            Defaults to a single :class:`StructlogSink`.
        clock: Wall-clock source for log line timestamps.
    """

    def __init__(
        self,
        engine_factory: EngineFactory | None = None,
        *,
        metrics: BuildMetrics | None = None,
        live_sinks: list[LineSink] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._engine_factory: EngineFactory = engine_factory or DockerBuildEngine.from_env
        self.metrics = metrics if metrics is not None else BuildMetrics()
        self._live_sinks: list[LineSink] = (
            list(live_sinks) if live_sinks is not None else [StructlogSink()]
        )
        self._clock = clock

    def build(
        self,
        image_tag: str,
        source_path: str | Path,
        build_spec_text: str,
    ) -> BuildResult:
        """Build *source_path* with *build_spec_text* and tag it *image_tag*.

        Never raises for pipeline failures: the terminal error is returned in
        :attr:`BuildResult.error` together with every log line rendered
        before the failure. The source directory is left in place.
        """
        job = BuildJob(
            image_tag=image_tag,
            source_path=Path(source_path),
            build_spec_text=build_spec_text,
        )
        aggregate = BufferSink()

        with self.metrics.track() as tracker, structlog.contextvars.bound_contextvars(
            image_tag=image_tag
        ):
            logger.info("build_started", source_path=str(job.source_path))
            try:
                self._run(job, aggregate)
            except ContainerServiceError as exc:
                tracker.mark_failed()
                logger.error(
                    "build_failed",
                    error=str(exc),
                    error_type=type(exc).__name__,
                    lines=len(aggregate.lines),
                )
                return BuildResult(image_tag=image_tag, logs=aggregate.getvalue(), error=exc)

            logger.info("build_succeeded", lines=len(aggregate.lines))
            return BuildResult(
                image_tag=image_tag,
                status_message=BUILD_COMPLETE_MESSAGE,
                logs=aggregate.getvalue(),
            )

    def engine_healthy(self) -> bool:
        """Whether a build engine can be reached and answers a ping."""
        try:
            with self._connect() as engine:
                return engine.ping()
        except EngineUnavailableError as exc:
            logger.warning("engine_unavailable", error=str(exc))
            return False

    # ------------------------------------------------------------------ #
    # Pipeline steps
    # ------------------------------------------------------------------ #

    def _run(self, job: BuildJob, aggregate: BufferSink) -> None:
        with self._connect() as engine:
            self._write_spec(job)
            with create_tar_archive(job.source_path) as archive:
                chunks = engine.build(
                    archive,
                    job.image_tag,
                    dockerfile=BUILD_SPEC_FILENAME,
                    remove_intermediate=False,
                )
                self._consume(chunks, aggregate)

    def _connect(self) -> BuildEngine:
        try:
            return self._engine_factory()
        except EngineUnavailableError:
            raise
        except Exception as exc:
            raise EngineUnavailableError(
                f"cannot connect to build engine: {exc}",
                code="ENGINE_UNAVAILABLE",
            ) from exc

    @staticmethod
    def _write_spec(job: BuildJob) -> None:
        # A missing tree is an archiving failure, not a spec write failure.
        if not job.source_path.is_dir():
            raise ArchiveError(
                f"source path is not a directory: {job.source_path}",
                path=str(job.source_path),
                code="ARCHIVE_ERROR",
            )
        try:
            job.spec_path.write_text(job.build_spec_text, encoding="utf-8")
        except OSError as exc:
            raise SpecWriteError(
                f"failed to write {BUILD_SPEC_FILENAME}: {exc}",
                code="SPEC_WRITE_ERROR",
                details={"path": str(job.spec_path)},
            ) from exc

    def _consume(self, chunks: Iterable[bytes | str], aggregate: BufferSink) -> None:
        decoder = EventStreamDecoder(clock=self._clock)
        renderer = EventRenderer(self._live_sinks)
        engine_errors: list[str] = []

        for record in decoder.iter_records(chunks):
            aggregate.write_line(renderer.emit(record))
            if record.kind is RecordKind.EVENT and record.error_message is not None:  # type: ignore[union-attr]
                engine_errors.append(record.error_message)  # type: ignore[union-attr]

        logger.debug("build_stream_finished", records=decoder.records_decoded)
        if engine_errors:
            raise BuildInvocationError(
                f"failed to build image: {engine_errors[-1]}",
                code="BUILD_INVOCATION_ERROR",
                details={"errors": engine_errors},
            )
