"""Rendering of build event records and the sinks that receive them."""

from __future__ import annotations

import json
import sys
from abc import ABC, abstractmethod
from typing import Any, TextIO

import structlog

from container_service.core.constants import TIMESTAMP_FORMAT, RecordKind
from container_service.core.types import (
    BuildEventRecord,
    LogLine,
    StructuredEvent,
    UninterpretedEvent,
)

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------


class LineSink(ABC):
    """Destination for rendered build log lines."""

    @abstractmethod
    def write_line(self, line: str) -> None:
        """Write one rendered line (without trailing newline)."""


class BufferSink(LineSink):
    """Collects every line in memory; the aggregated build log."""

    def __init__(self) -> None:
        self._lines: list[str] = []

    def write_line(self, line: str) -> None:
        self._lines.append(line)

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def getvalue(self) -> str:
        """Return all lines, each terminated by a newline."""
        return "".join(f"{line}\n" for line in self._lines)


class StreamSink(LineSink):
    """Writes lines to a text stream, ``sys.stdout`` by default."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def write_line(self, line: str) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(line + "\n")
        stream.flush()


class StructlogSink(LineSink):
    """Emits each line as a structlog event."""

    def __init__(self, log_level: str = "info") -> None:
        self._log_level = log_level
        self._logger = structlog.get_logger("container_service.build_log")

    def write_line(self, line: str) -> None:
        log_fn = getattr(self._logger, self._log_level, self._logger.info)
        log_fn("build_log_line", line=line)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def _compact(data: Any) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)


def format_timestamp(record: LogLine) -> str:
    ts = record.timestamp
    return f"{ts.strftime(TIMESTAMP_FORMAT)}.{ts.microsecond // 1000:03d}"


def _format_log_line(record: LogLine) -> str:
    text = record.text.rstrip("\r\n")
    return f"[{format_timestamp(record)}] {text}"


def _format_structured(record: StructuredEvent) -> str:
    message = record.error_message
    if message is not None:
        return f"ERROR: {message.rstrip()}"

    parts = [p for p in (record.status, record.progress) if p]
    if parts:
        line = " ".join(parts)
        return f"{record.id}: {line}" if record.id else line

    if record.aux is not None:
        image_id = record.aux.get("ID")
        if isinstance(image_id, str):
            return f"aux: {image_id}"
        return f"aux: {_compact(record.aux)}"

    return _compact(record.model_dump(by_alias=True, exclude_none=True))


def _format_uninterpreted(record: UninterpretedEvent) -> str:
    return (
        f"Error interpreting event: {record.reason}, "
        f"using default log : {_compact(record.raw)}"
    )


class EventRenderer:
    """Formats build event records and fans the lines out to sinks.

    Sinks receive lines in the order records are emitted. A sink that
    raises is logged and skipped for that line; the other sinks still
    receive it.

    Example::

        buffer = BufferSink()
        renderer = EventRenderer([StreamSink(), buffer])
        for record in decoder.iter_records(chunks):
            renderer.emit(record)
        log = buffer.getvalue()
    """

    def __init__(self, sinks: list[LineSink] | None = None) -> None:
        self._sinks: list[LineSink] = list(sinks) if sinks else []

    def add_sink(self, sink: LineSink) -> EventRenderer:
        """Register a new sink.  Returns ``self`` for chaining."""
        self._sinks.append(sink)
        return self

    def render(self, record: BuildEventRecord) -> str:
        """Return the single-line rendering of *record*. Never raises."""
        try:
            if record.kind is RecordKind.LOG:
                return _format_log_line(record)  # type: ignore[arg-type]
            if record.kind is RecordKind.EVENT:
                return _format_structured(record)  # type: ignore[arg-type]
            return _format_uninterpreted(record)  # type: ignore[arg-type]
        except Exception:
            logger.warning("render_failed", record_kind=str(record.kind), exc_info=True)
            return repr(record)

    def emit(self, record: BuildEventRecord) -> str:
        """Render *record* and write the line to every sink."""
        line = self.render(record)
        for sink in self._sinks:
            try:
                sink.write_line(line)
            except Exception:
                logger.warning(
                    "sink_write_failed",
                    sink=type(sink).__name__,
                    exc_info=True,
                )
        return line
