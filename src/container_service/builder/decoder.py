"""Decoding of the build engine's newline-delimited JSON progress stream."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Callable, Iterable, Iterator

import structlog
from pydantic import ValidationError

from container_service.core.constants import STREAM_FIELD
from container_service.core.exceptions import (
    EventInterpretationError,
    StreamDecodeError,
)
from container_service.core.types import (
    BuildEventRecord,
    LogLine,
    StructuredEvent,
    UninterpretedEvent,
)

logger = structlog.get_logger(__name__)

_FRAGMENT_PREVIEW = 200


def _summarize_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<record>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


class EventStreamDecoder:
    """Turns a chunked response body into classified build event records.

    Each line of the body holds one JSON value. A line that is not valid
    JSON ends decoding with :class:`StreamDecodeError`; no attempt is made
    to resynchronise. Valid JSON that is not an object, or an object whose
    content does not fit :class:`StructuredEvent`, is only logged and
    yielded as :class:`UninterpretedEvent`.

    One decoder instance is meant for one stream.

    Args:
        clock: Source of wall-clock timestamps for log lines.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._last_timestamp: datetime | None = None
        self.records_decoded = 0

    def iter_records(self, chunks: Iterable[bytes | str]) -> Iterator[BuildEventRecord]:
        """Yield one record per decoded line, in stream order.

        Chunk boundaries are arbitrary; a record may span several chunks and
        a chunk may hold several records. Log lines with empty text are
        decoded and counted but not yielded.

        Raises:
            StreamDecodeError: On the first malformed line.
        """
        buffer = bytearray()
        for chunk in chunks:
            buffer += chunk.encode("utf-8") if isinstance(chunk, str) else chunk
            while True:
                newline = buffer.find(b"\n")
                if newline < 0:
                    break
                line = bytes(buffer[:newline])
                del buffer[: newline + 1]
                record = self._decode_line(line)
                if record is not None:
                    yield record

        # Final record without a trailing newline.
        if buffer.strip():
            record = self._decode_line(bytes(buffer))
            if record is not None:
                yield record

    def classify(self, data: dict[str, Any]) -> BuildEventRecord | None:
        """Classify one decoded record, or return ``None`` if it is skipped."""
        text = data.get(STREAM_FIELD)
        if isinstance(text, str):
            if not text:
                logger.debug("empty_log_line_skipped")
                return None
            return LogLine(timestamp=self._next_timestamp(), text=text)

        try:
            return StructuredEvent.model_validate(data)
        except ValidationError as exc:
            return self._uninterpreted(data, _summarize_validation_error(exc))

    def _uninterpreted(self, data: Any, reason: str) -> UninterpretedEvent:
        err = EventInterpretationError(reason, raw=data, code="EVENT_INTERPRETATION_ERROR")
        logger.warning(
            "event_interpretation_failed",
            error=str(err),
            record=data,
            records_decoded=self.records_decoded,
        )
        return UninterpretedEvent(raw=data, reason=str(err))

    def _decode_line(self, line: bytes) -> BuildEventRecord | None:
        stripped = line.strip()
        if not stripped:
            return None
        try:
            data = json.loads(stripped)
        except ValueError as exc:
            raise self._framing_error(f"error decoding event: {exc}", stripped) from exc
        self.records_decoded += 1
        if not isinstance(data, dict):
            return self._uninterpreted(data, f"expected a JSON object, got {type(data).__name__}")
        return self.classify(data)

    def _framing_error(self, message: str, fragment: bytes) -> StreamDecodeError:
        return StreamDecodeError(
            message,
            records_processed=self.records_decoded,
            code="STREAM_DECODE_ERROR",
            details={
                "fragment": fragment[:_FRAGMENT_PREVIEW].decode("utf-8", errors="replace"),
            },
        )

    def _next_timestamp(self) -> datetime:
        now = self._clock()
        now = now.replace(microsecond=now.microsecond - now.microsecond % 1000)
        if self._last_timestamp is not None and now < self._last_timestamp:
            now = self._last_timestamp
        self._last_timestamp = now
        return now
