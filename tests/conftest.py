"""Shared test fixtures."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Iterator

import pytest
import structlog
from prometheus_client import CollectorRegistry

from container_service.builder.mock import MockBuildEngine
from container_service.builder.orchestrator import ImageBuilder
from container_service.builder.renderer import BufferSink
from container_service.observability.metrics import BuildMetrics


def _make_clock(start: datetime | None = None, step_ms: int = 5) -> Callable[[], datetime]:
    """Deterministic clock advancing *step_ms* milliseconds per call."""
    current = [start or datetime(2024, 5, 1, 12, 0, 0)]

    def _clock() -> datetime:
        value = current[0]
        current[0] = value + timedelta(milliseconds=step_ms)
        return value

    return _clock


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def build_metrics(registry: CollectorRegistry) -> BuildMetrics:
    return BuildMetrics(registry)


@pytest.fixture
def mock_engine() -> MockBuildEngine:
    return MockBuildEngine()


@pytest.fixture
def live_sink() -> BufferSink:
    return BufferSink()


@pytest.fixture
def builder(
    mock_engine: MockBuildEngine,
    build_metrics: BuildMetrics,
    live_sink: BufferSink,
) -> ImageBuilder:
    return ImageBuilder(
        lambda: mock_engine,
        metrics=build_metrics,
        live_sinks=[live_sink],
        clock=_make_clock(),
    )


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "src"
    path.mkdir()
    return path


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return _make_clock()


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo configure_logging() calls so tests do not leak logging state."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)
