"""Per-table JSON-lines output for successfully shredded events."""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Any, TextIO

from jsonshred.core.errors import StorageError
from jsonshred.core.logging import get_logger
from jsonshred.shredder.models import ShreddedDocument
from jsonshred.shredder.tables import table_name, to_row

logger = get_logger(__name__)


class GoodSink:
    """
    Route shredded documents to ``<directory>/<table>.jsonl``, one row per line.

    Rows are built from the schema each document was validated against, so the
    sink never consults a repository. Files are opened lazily on the first row
    for a table and kept open until ``close()``. Use as a context manager.
    """

    def __init__(self, directory: str | Path, *, table_schema: str | None = None):
        self.directory = Path(directory)
        self.table_schema = table_schema
        self.rows: Counter[str] = Counter()
        self._files: dict[str, TextIO] = {}

    def rows_for(self, documents: list[ShreddedDocument]) -> list[tuple[str, dict[str, Any]]]:
        """
        Build the ``(table, row)`` pairs for one event's documents.

        Raises:
            ValueError: a document has no schema key, lineage, or definition.
        """
        rows = []
        for document in documents:
            if document.definition is None:
                raise ValueError(f"Document for {document.schema} carries no schema definition")
            rows.append((
                table_name(document.schema, self.table_schema),
                to_row(document, document.definition),
            ))
        return rows

    def write(self, documents: list[ShreddedDocument]) -> None:
        """Write every row of one event, or none of them if any row cannot be built."""
        for table, row in self.rows_for(documents):
            self._stream(table).write(json.dumps(row) + "\n")
            self.rows[table] += 1

    def _stream(self, table: str) -> TextIO:
        stream = self._files.get(table)
        if stream is None:
            path = self.directory / f"{table}.jsonl"
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                stream = path.open("w", encoding="utf-8")
            except OSError as e:
                raise StorageError(f"Cannot open {path}: {e}", cause=e).with_context(path=str(path))
            logger.debug("table_opened", table=table, path=str(path))
            self._files[table] = stream
        return stream

    def close(self) -> None:
        for stream in self._files.values():
            stream.close()
        self._files.clear()

    def __enter__(self) -> GoodSink:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


__all__ = ["GoodSink"]
