from __future__ import annotations

import json
from typing import IO, Any, Iterable

from container_service.builder.engine import BuildEngine
from container_service.core.constants import BUILD_SPEC_FILENAME


class MockBuildEngine(BuildEngine):
    """In-memory build engine for testing.

    Usage::

        engine = MockBuildEngine()
        engine.emit_record({"stream": "Step 1/2 : FROM scratch\\n"})
        engine.emit_record({"aux": {"ID": "sha256:abc"}})
        engine.emit_raw(b'{"stream": "trunc')            # malformed framing

        builder = ImageBuilder(engine_factory=lambda: engine)

    Every ``build`` call is recorded in :attr:`calls`, including the bytes of
    the submitted archive.

    Args:
        error: Exception raised by ``build`` instead of returning the stream.
        healthy: Value returned by ``ping``.
    """

    def __init__(self, *, error: Exception | None = None, healthy: bool = True) -> None:
        self.error = error
        self.healthy = healthy
        self.closed = False
        self.calls: list[dict[str, Any]] = []
        self._chunks: list[bytes | str] = []

    # ------------------------------------------------------------------ #
    # Registration helpers
    # ------------------------------------------------------------------ #

    def emit_record(self, record: dict[str, Any]) -> None:
        """Queue one record as a newline-terminated JSON line."""
        self._chunks.append(json.dumps(record).encode("utf-8") + b"\n")

    def emit_raw(self, data: bytes | str) -> None:
        """Queue a raw chunk verbatim."""
        self._chunks.append(data)

    # ------------------------------------------------------------------ #
    # BuildEngine implementation
    # ------------------------------------------------------------------ #

    def build(
        self,
        archive: IO[bytes],
        tag: str,
        *,
        dockerfile: str = BUILD_SPEC_FILENAME,
        remove_intermediate: bool = False,
    ) -> Iterable[bytes | str]:
        self.calls.append({
            "tag": tag,
            "dockerfile": dockerfile,
            "remove_intermediate": remove_intermediate,
            "archive": archive.read(),
        })
        if self.error is not None:
            raise self.error
        return iter(list(self._chunks))

    def ping(self) -> bool:
        return self.healthy

    def close(self) -> None:
        self.closed = True
