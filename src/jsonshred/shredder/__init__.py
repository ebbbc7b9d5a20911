"""Shred canonical events into schema-tagged, lineage-annotated documents."""

from jsonshred.shredder.extractor import extract_json
from jsonshred.shredder.lineage import DEFAULT_REF_ROOT, attach_lineage
from jsonshred.shredder.models import CanonicalEvent, ShreddedDocument, TypeHierarchy
from jsonshred.shredder.shredder import CONTEXTS_FIELD, UE_FIELD, ShredResult, Shredder, shred
from jsonshred.shredder.tables import columns, table_name, to_row
from jsonshred.shredder.validator import JsonValidator

__all__ = [
    "CanonicalEvent",
    "ShreddedDocument",
    "TypeHierarchy",
    "extract_json",
    "JsonValidator",
    "attach_lineage",
    "DEFAULT_REF_ROOT",
    "Shredder",
    "ShredResult",
    "shred",
    "UE_FIELD",
    "CONTEXTS_FIELD",
    "table_name",
    "columns",
    "to_row",
]
