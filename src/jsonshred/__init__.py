"""
jsonshred: validate and shred self-describing JSON out of canonical events.

A canonical event carries up to two fields of embedded JSON text: one
unstructured event and an array of contexts, each wrapped in a
``{"schema": "iglu:...", "data": {...}}`` envelope. ``Shredder.shred`` parses
both, validates every instance against the JSON Schema its envelope names,
and returns either every document tagged with the event's lineage, or every
error found in the event.

Examples:
    >>> from jsonshred import CanonicalEvent, InMemorySchemaRepository, Shredder
    >>> repository = InMemorySchemaRepository({
    ...     "iglu:com.acme/click/jsonschema/1-0-0": {"type": "object"},
    ... })
    >>> result = Shredder(repository).shred(CanonicalEvent(
    ...     event_id="e1",
    ...     collector_tstamp="2014-01-01T00:00:00Z",
    ...     ue_properties='{"schema": "iglu:com.acme/click/jsonschema/1-0-0", "data": {}}',
    ... ))
    >>> result.is_ok()
    True
"""

from jsonshred.core.errors import ErrorCategory, ShredError
from jsonshred.core.result import Err, Ok, ProcessingMessage, Validated
from jsonshred.iglu import (
    CachingSchemaRepository,
    ChainedSchemaRepository,
    FileSystemSchemaRepository,
    InMemorySchemaRepository,
    SchemaKey,
    SchemaRepository,
)
from jsonshred.shredder import (
    CanonicalEvent,
    JsonValidator,
    ShreddedDocument,
    Shredder,
    TypeHierarchy,
    shred,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ErrorCategory",
    "ShredError",
    "Ok",
    "Err",
    "ProcessingMessage",
    "Validated",
    "SchemaKey",
    "SchemaRepository",
    "InMemorySchemaRepository",
    "FileSystemSchemaRepository",
    "ChainedSchemaRepository",
    "CachingSchemaRepository",
    "CanonicalEvent",
    "ShreddedDocument",
    "TypeHierarchy",
    "JsonValidator",
    "Shredder",
    "shred",
]
