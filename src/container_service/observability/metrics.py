"""Prometheus instruments for builds, HTTP requests and previews.

Instruments are registered on an explicitly supplied
:class:`prometheus_client.CollectorRegistry` rather than the process-wide
default, so every component (and every test) can own its registry.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator

import structlog
from prometheus_client import CollectorRegistry, Counter, Histogram

from container_service.core.constants import BuildOutcome, ProjectType

logger = structlog.get_logger(__name__)


class BuildTracker:
    """Handle yielded by :meth:`BuildMetrics.track` for one build call."""

    def __init__(self) -> None:
        self.failed = False

    def mark_failed(self) -> None:
        self.failed = True


class BuildMetrics:
    """Counters and a duration histogram around image builds.

    Metric updates are side effects only: an error raised by the metrics
    backend is logged and never reaches the build.

    Args:
        registry: Registry to register the instruments on. A fresh private
            registry is created when omitted.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        self._builds = Counter(
            "docker_image_builds_total",
            "Total number of Docker image builds attempted",
            ["status"],
            registry=self.registry,
        )
        self._duration = Histogram(
            "docker_image_build_duration_seconds",
            "Duration of Docker image builds in seconds",
            registry=self.registry,
        )

    def record(self, outcome: BuildOutcome) -> None:
        self._safely(lambda: self._builds.labels(status=outcome.value).inc())

    def observe_duration(self, seconds: float) -> None:
        self._safely(self._duration.observe, seconds)

    @contextmanager
    def track(self) -> Iterator[BuildTracker]:
        """Bracket one build call.

        Records ``started`` on entry. On exit records ``failure`` if the
        block raised or :meth:`BuildTracker.mark_failed` was called, else
        ``success``, followed by a single duration sample covering the
        whole block.
        """
        tracker = BuildTracker()
        start = time.perf_counter()
        self.record(BuildOutcome.STARTED)
        try:
            yield tracker
        except BaseException:
            tracker.mark_failed()
            raise
        finally:
            self.record(BuildOutcome.FAILURE if tracker.failed else BuildOutcome.SUCCESS)
            self.observe_duration(time.perf_counter() - start)

    @staticmethod
    def _safely(fn: Callable[..., Any], *args: Any) -> None:
        try:
            fn(*args)
        except Exception:
            logger.warning("metrics_update_failed", exc_info=True)


class RequestMetrics:
    """Request-level instruments for the HTTP routes and preview generation."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        self.build_requests = Counter(
            "build_requests_total",
            "Total number of Docker image build requests received",
            registry=self.registry,
        )
        self.build_request_duration = Histogram(
            "build_request_duration_seconds",
            "Duration of Docker image build request handling in seconds",
            registry=self.registry,
        )
        self.preview_requests = Counter(
            "preview_requests_total",
            "Total number of Dockerfile preview requests received",
            registry=self.registry,
        )
        self.preview_request_duration = Histogram(
            "preview_request_duration_seconds",
            "Duration of Dockerfile preview request processing in seconds",
            registry=self.registry,
        )
        self.preview_generations = Counter(
            "dockerfile_preview_generations_total",
            "Total number of Dockerfile preview generations",
            ["project_type"],
            registry=self.registry,
        )
        self.preview_generation_duration = Histogram(
            "dockerfile_preview_duration_seconds",
            "Duration of Dockerfile preview generation in seconds",
            ["project_type"],
            registry=self.registry,
        )

    @contextmanager
    def time_build_request(self) -> Iterator[None]:
        self.build_requests.inc()
        with self.build_request_duration.time():
            yield

    @contextmanager
    def time_preview_request(self) -> Iterator[None]:
        self.preview_requests.inc()
        with self.preview_request_duration.time():
            yield

    @contextmanager
    def time_preview_generation(self, project_type: ProjectType) -> Iterator[None]:
        self.preview_generations.labels(project_type=project_type.value).inc()
        with self.preview_generation_duration.labels(project_type=project_type.value).time():
            yield
