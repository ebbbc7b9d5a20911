"""
The shredder: turn one canonical event into a flat list of shredded documents.

Shredding an event means:

1. Parse the two fields holding embedded JSON (``ue_properties`` and
   ``contexts``)
2. Validate each self-describing instance against its JSON Schema
3. Break the contexts array into one document per element
4. Collect the unstructured event and the contexts into a single list
5. Stamp every document with the event's lineage

Architecture:
    ::

        CanonicalEvent
          │
          ├── ue_properties ─ extract ─ validate ────────────────┐  UE lane
          │                                                      │
          ├── contexts ─ extract ─ is array? ─ validate each ─┐  │  context lane
          │                                   (sequence)      │  │
          │                                                   ▼  ▼
          │                                             concat (accumulate)
          │                                                     │
          └──────────────────────────────────────────▶ attach_lineage
                                                                │
                                        Ok([doc, ...]) | Err([message, ...])

Both lanes always run. If either fails, the result carries every message from
both and no documents: an event is shredded completely or not at all.

Examples:
    >>> shredder = Shredder(repository)
    >>> result = shredder.shred(CanonicalEvent(
    ...     event_id="e1",
    ...     collector_tstamp="2014-01-01T00:00:00Z",
    ...     contexts='[{"schema": "iglu:com.acme/click/jsonschema/1-0-0", '
    ...              '"data": {"target": "button"}}]',
    ... ))
    >>> [d.schema.name for d in result.unwrap()]
    ['click']

Tags:
    shredding, self-describing-json, lineage, validation, jsonshred
"""

from __future__ import annotations

from typing import Any

from jsonshred.core.errors import ErrorCategory
from jsonshred.core.logging import LogContext, get_logger
from jsonshred.core.result import Ok, Validated, concat, fail, sequence
from jsonshred.iglu.repository import SchemaRepository
from jsonshred.shredder.extractor import extract_json, is_empty
from jsonshred.shredder.lineage import DEFAULT_REF_ROOT, attach_lineage
from jsonshred.shredder.models import CanonicalEvent, ShreddedDocument
from jsonshred.shredder.validator import JsonValidator, json_type

logger = get_logger(__name__)

UE_FIELD = "ue_properties"
CONTEXTS_FIELD = "context"

ShredResult = Validated[list[ShreddedDocument]]


class Shredder:
    """
    Shred canonical events against one schema repository.

    A single instance is safe to share across threads; it holds no per-event
    state.
    """

    def __init__(
        self,
        repository: SchemaRepository | None = None,
        *,
        validator: JsonValidator | None = None,
        ref_root: str = DEFAULT_REF_ROOT,
    ):
        if validator is None:
            if repository is None:
                raise ValueError("Shredder needs a repository or a validator")
            validator = JsonValidator(repository)
        self.validator = validator
        self.ref_root = ref_root

    def shred(self, event: CanonicalEvent) -> ShredResult:
        """Shred one event into documents, or every error found in it."""
        with LogContext(event_id=event.event_id):
            ue = self._shred_unstruct(event.ue_properties)
            contexts = self._shred_contexts(event.contexts)

            result = concat(ue, contexts).map(
                lambda documents: attach_lineage(documents, event, self.ref_root)
            )
            if result.is_err():
                logger.debug("event_failed", error_count=len(result.errors))
            return result

    def _shred_unstruct(self, raw: str | None) -> ShredResult:
        extracted = extract_json(UE_FIELD, raw)
        if extracted is None:
            return Ok([])
        return extracted.flat_map(self._validate_unstruct)

    def _validate_unstruct(self, value: Any) -> ShredResult:
        if is_empty(value):
            return Ok([])
        return self.validator.validate(value, field=UE_FIELD).map(lambda document: [document])

    def _shred_contexts(self, raw: str | None) -> ShredResult:
        extracted = extract_json(CONTEXTS_FIELD, raw)
        if extracted is None:
            return Ok([])
        return extracted.flat_map(self._validate_contexts)

    def _validate_contexts(self, value: Any) -> ShredResult:
        if is_empty(value):
            return Ok([])
        if not isinstance(value, list):
            return fail(
                CONTEXTS_FIELD,
                f"context is not an array: expected a JSON array, got {json_type(value)}",
                ErrorCategory.SHAPE,
            )
        return sequence(
            self.validator.validate(element, field=f"{CONTEXTS_FIELD}[{index}]")
            for index, element in enumerate(value)
        )


def shred(event: CanonicalEvent, repository: SchemaRepository) -> ShredResult:
    """One-shot helper: shred ``event`` against ``repository``."""
    return Shredder(repository).shred(event)


__all__ = ["Shredder", "ShredResult", "shred", "UE_FIELD", "CONTEXTS_FIELD"]
