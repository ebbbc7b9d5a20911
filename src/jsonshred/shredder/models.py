"""
Shredder data types: the canonical event going in, shredded documents coming out.

Architecture:
    ::

        CanonicalEvent                     ShreddedDocument
        ┌──────────────────────────┐       ┌──────────────────────────────┐
        │ event_id          → root_id      │ schema: SchemaKey            │
        │ collector_tstamp  → root_tstamp  │ data: validated payload      │
        │ ue_properties: str | None│  ──▶  │ hierarchy: TypeHierarchy     │
        │ contexts: str | None     │       │   root_id, root_tstamp,      │
        └──────────────────────────┘       │   ref_root, ref_tree,        │
                                           │   ref_parent                 │
                                           └──────────────────────────────┘

Both are frozen: the lineage pass builds new documents rather than mutating.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from jsonshred.iglu.schema_key import SchemaKey


@dataclass(frozen=True)
class CanonicalEvent:
    """
    An enriched event with up to two embedded JSON payloads.

    Attributes:
        event_id: Unique event identifier, copied to ``root_id``.
        collector_tstamp: Event timestamp, copied verbatim to ``root_tstamp``.
        ue_properties: JSON text of the self-describing unstructured event.
        contexts: JSON text of an array of self-describing contexts.
    """

    event_id: str
    collector_tstamp: str
    ue_properties: str | None = None
    contexts: str | None = None

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> CanonicalEvent:
        """
        Build an event from a decoded JSON record.

        Raises:
            ValueError: ``event_id`` or ``collector_tstamp`` is missing or not
                a string, or a payload field is neither a string nor null.
        """
        for required in ("event_id", "collector_tstamp"):
            value = record.get(required)
            if not isinstance(value, str) or not value:
                raise ValueError(f"{required} must be a non-empty string")

        for optional in ("ue_properties", "contexts"):
            value = record.get(optional)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{optional} must be a JSON string or null")

        return cls(
            event_id=record["event_id"],
            collector_tstamp=record["collector_tstamp"],
            ue_properties=record.get("ue_properties"),
            contexts=record.get("contexts"),
        )


@dataclass(frozen=True)
class TypeHierarchy:
    """Lineage linking a shredded document back to its root event."""

    root_id: str
    root_tstamp: str
    ref_root: str
    ref_tree: tuple[str, ...]
    ref_parent: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "root_id": self.root_id,
            "root_tstamp": self.root_tstamp,
            "ref_root": self.ref_root,
            "ref_tree": list(self.ref_tree),
            "ref_parent": self.ref_parent,
        }


@dataclass(frozen=True)
class ShreddedDocument:
    """
    One validated, schema-tagged JSON document.

    ``definition`` is the JSON Schema the document was validated against, kept
    so rows can be built without another repository lookup.
    """

    schema: SchemaKey | None
    data: Any
    hierarchy: TypeHierarchy | None = None
    definition: dict[str, Any] | None = field(default=None, compare=False, repr=False)

    def with_hierarchy(self, hierarchy: TypeHierarchy) -> ShreddedDocument:
        return replace(self, hierarchy=hierarchy)

    def to_json(self) -> dict[str, Any]:
        """Self-describing form: schema URI, payload, and lineage."""
        document: dict[str, Any] = {
            "schema": self.schema.to_uri() if self.schema else None,
            "data": self.data,
        }
        if self.hierarchy is not None:
            document["hierarchy"] = self.hierarchy.to_dict()
        return document


__all__ = ["CanonicalEvent", "TypeHierarchy", "ShreddedDocument"]
