"""
Lineage tagging: stamp every shredded document with its root event's identity.

Runs as a pure pass over the finished document list, after every document has
validated. Unstructured events and contexts hang directly off the root event,
so they share ``ref_parent = ref_root`` and ``ref_tree = (ref_root,)``.

Downstream tables are distributed on ``root_id`` and sorted on
``root_tstamp``; both must equal the event's values exactly for the join back
to the root events table to work.
"""

from __future__ import annotations

from collections.abc import Iterable

from jsonshred.shredder.models import CanonicalEvent, ShreddedDocument, TypeHierarchy

DEFAULT_REF_ROOT = "events"


def root_hierarchy(event: CanonicalEvent, ref_root: str = DEFAULT_REF_ROOT) -> TypeHierarchy:
    """Hierarchy for a document attached directly to the root event."""
    return TypeHierarchy(
        root_id=event.event_id,
        root_tstamp=event.collector_tstamp,
        ref_root=ref_root,
        ref_tree=(ref_root,),
        ref_parent=ref_root,
    )


def attach_lineage(
    documents: Iterable[ShreddedDocument],
    event: CanonicalEvent,
    ref_root: str = DEFAULT_REF_ROOT,
) -> list[ShreddedDocument]:
    """Return copies of ``documents`` carrying the event's lineage."""
    hierarchy = root_hierarchy(event, ref_root)
    return [document.with_hierarchy(hierarchy) for document in documents]


__all__ = ["DEFAULT_REF_ROOT", "root_hierarchy", "attach_lineage"]
