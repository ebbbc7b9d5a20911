"""
Failed-event sink.

An event that fails to shred is never partially stored. Its original input
line and its complete error list go to the failed-events sink instead, so an
operator can triage every defect of the event in one look.

Architecture:
    ::

            ┌────────────┐     ┌────────────┐     ┌─────────────────────┐
            │ ShredJob   │────▶│ RejectSink │────▶│ bad/part-00000.jsonl│
            │ Err(...)   │     │ .write()   │     │ one JSON per line   │
            └────────────┘     └────────────┘     └─────────────────────┘

    Line format::

        {"line": "<original input>",
         "errors": [{"field": "context[1]", "message": "...", "category": "CONSTRAINT"}],
         "source": "events.jsonl", "line_number": 42,
         "failed_at": "2014-01-01T00:00:01+00:00"}

Guardrails:
    - SYNC-ONLY, not thread-safe: the job writes from its coordinating thread.
    - The stream is owned by the caller; the sink never closes it.

Tags:
    reject, failed-events, bad-rows, data-quality, jsonshred
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, TextIO

from jsonshred.core.errors import StorageError
from jsonshred.core.result import ProcessingMessage


@dataclass
class Reject:
    """
    An input record that failed to shred.

    Attributes:
        line: The original input text, byte-for-byte.
        errors: Every processing message raised by the record.
        source_locator: File path or URL the record came from.
        line_number: 1-based line number within the source.
    """

    line: str
    errors: list[ProcessingMessage] = field(default_factory=list)
    source_locator: str | None = None
    line_number: int | None = None

    def to_dict(self, failed_at: datetime | None = None) -> dict[str, Any]:
        return {
            "line": self.line,
            "errors": [message.to_dict() for message in self.errors],
            "source": self.source_locator,
            "line_number": self.line_number,
            "failed_at": (failed_at or datetime.now(timezone.utc)).isoformat(),
        }


class RejectSink:
    """Write rejects as JSON lines to a text stream. Tracks a running count."""

    def __init__(self, stream: TextIO):
        self.stream = stream
        self._count = 0

    @property
    def count(self) -> int:
        """Number of rejects written."""
        return self._count

    def write(self, reject: Reject) -> None:
        """Write single reject."""
        try:
            self.stream.write(json.dumps(reject.to_dict(), default=str) + "\n")
        except OSError as e:
            raise StorageError(f"Cannot write failed event: {e}", cause=e) from e
        self._count += 1

    def write_batch(self, rejects: list[Reject]) -> int:
        """
        Write multiple rejects.

        Returns:
            Count of rejects written
        """
        for reject in rejects:
            self.write(reject)
        return len(rejects)


__all__ = ["Reject", "RejectSink"]
