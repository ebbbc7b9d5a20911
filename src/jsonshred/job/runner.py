"""
Batch shredding job.

Reads canonical events as JSON lines, shreds them on a thread pool, and routes
each event whole: its rows to the per-table good output, or its original line
and full error list to the failed-events sink.

Architecture:
    ::

        events.jsonl ──▶ batches of N lines ──▶ ThreadPoolExecutor.map(_process)
                                                        │  (input order kept)
                                        ┌───────────────┴───────────────┐
                                        ▼                               ▼
                                  Ok(documents)                    Err(messages)
                                        │                               │
                               GoodSink.write()                RejectSink.write()
                          good/<table>.jsonl                bad/part-00000.jsonl

Events are independent: lineage is self-contained per ``root_id``, so workers
share nothing but the read-only repository. Each event's rows are all built
before any is written, so an event never lands half in the good output.

Examples:
    >>> summary = shred_file("events.jsonl", "out/", repository, workers=8)
    >>> summary.failed_events
    3
"""

from __future__ import annotations

import itertools
import json
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from jsonshred.core.errors import ErrorCategory, StorageError
from jsonshred.core.logging import LogContext, get_logger
from jsonshred.core.rejects import Reject, RejectSink
from jsonshred.core.result import Err, Ok, ProcessingMessage, fail
from jsonshred.iglu.repository import SchemaRepository
from jsonshred.job.sinks import GoodSink
from jsonshred.shredder.lineage import DEFAULT_REF_ROOT
from jsonshred.shredder.models import CanonicalEvent
from jsonshred.shredder.shredder import ShredResult, Shredder

logger = get_logger(__name__)

LINE_FIELD = "line"
DEFAULT_BATCH_SIZE = 1_000
BAD_FILE_NAME = "part-00000.jsonl"


@dataclass
class JobSummary:
    """Counts for one job run."""

    events: int = 0
    shredded_events: int = 0
    failed_events: int = 0
    documents: int = 0
    tables: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "events": self.events,
            "shredded_events": self.shredded_events,
            "failed_events": self.failed_events,
            "documents": self.documents,
            "tables": dict(self.tables),
        }


def parse_event(line: str) -> CanonicalEvent | Err[CanonicalEvent]:
    """Decode one input line into an event, or an Err attributed to ``line``."""
    try:
        record = json.loads(line)
    except ValueError as e:
        return fail(LINE_FIELD, f"Invalid JSON: {e}", ErrorCategory.PARSE)
    except RecursionError:
        return fail(LINE_FIELD, "Invalid JSON: nesting too deep", ErrorCategory.PARSE)

    if not isinstance(record, dict):
        return fail(LINE_FIELD, "Expected a JSON object per line", ErrorCategory.SHAPE)

    try:
        return CanonicalEvent.from_dict(record)
    except ValueError as e:
        return fail(LINE_FIELD, str(e), ErrorCategory.SHAPE)


class ShredJob:
    """Shred a stream of JSON-lines events into good and bad sinks."""

    def __init__(
        self,
        shredder: Shredder,
        good_sink: GoodSink,
        bad_sink: RejectSink,
        *,
        workers: int = 1,
        batch_size: int = DEFAULT_BATCH_SIZE,
        source: str | None = None,
    ):
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self.shredder = shredder
        self.good_sink = good_sink
        self.bad_sink = bad_sink
        self.workers = workers
        self.batch_size = batch_size
        self.source = source

    def _reject(self, line: str, number: int, errors: list[ProcessingMessage]) -> None:
        self.bad_sink.write(Reject(
            line=line,
            errors=errors,
            source_locator=self.source,
            line_number=number,
        ))

    def _process(self, line: str) -> ShredResult:
        event = parse_event(line)
        if isinstance(event, Err):
            return event
        return self.shredder.shred(event)

    def run(self, lines: Iterable[str]) -> JobSummary:
        summary = JobSummary()
        numbered = (
            (number, line.rstrip("\r\n"))
            for number, line in enumerate(lines, start=1)
            if line.strip()
        )

        with LogContext(source=self.source), ThreadPoolExecutor(max_workers=self.workers) as pool:
            for batch in _batched(numbered, self.batch_size):
                results = pool.map(self._process, [line for _, line in batch])
                for (number, line), result in zip(batch, results):
                    summary.events += 1
                    match result:
                        case Ok(documents):
                            try:
                                self.good_sink.write(documents)
                            except ValueError as e:
                                logger.warning("rows_unbuildable", line_number=number, error=str(e))
                                self._reject(line, number, [
                                    ProcessingMessage(LINE_FIELD, str(e), ErrorCategory.INTERNAL)
                                ])
                                summary.failed_events += 1
                            else:
                                summary.shredded_events += 1
                                summary.documents += len(documents)
                        case Err(errors):
                            self._reject(line, number, list(errors))
                            summary.failed_events += 1
                logger.debug("batch_shredded", events=summary.events)

        summary.tables = dict(sorted(self.good_sink.rows.items()))
        logger.info(
            "job_complete",
            events=summary.events,
            shredded=summary.shredded_events,
            failed=summary.failed_events,
            documents=summary.documents,
        )
        return summary


def _batched(items: Iterable[tuple[int, str]], size: int) -> Iterator[list[tuple[int, str]]]:
    iterator = iter(items)
    while batch := list(itertools.islice(iterator, size)):
        yield batch


def _open_output(path: Path) -> TextIO:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return path.open("w", encoding="utf-8")
    except OSError as e:
        raise StorageError(f"Cannot open {path}: {e}", cause=e).with_context(path=str(path))


def shred_file(
    input_path: str | Path,
    output_dir: str | Path,
    repository: SchemaRepository,
    *,
    workers: int = 1,
    ref_root: str = DEFAULT_REF_ROOT,
    table_schema: str | None = None,
) -> JobSummary:
    """Shred ``input_path`` into ``<output_dir>/good`` and ``<output_dir>/bad``."""
    input_path = Path(input_path)
    output_dir = Path(output_dir)
    shredder = Shredder(repository, ref_root=ref_root)

    with input_path.open("r", encoding="utf-8") as source:
        with (
            _open_output(output_dir / "bad" / BAD_FILE_NAME) as bad_stream,
            GoodSink(output_dir / "good", table_schema=table_schema) as good_sink,
        ):
            job = ShredJob(
                shredder,
                good_sink,
                RejectSink(bad_stream),
                workers=workers,
                source=str(input_path),
            )
            return job.run(source)


__all__ = ["JobSummary", "ShredJob", "parse_event", "shred_file", "LINE_FIELD"]
