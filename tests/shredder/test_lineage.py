"""Tests for lineage tagging and the shredder data types."""

import pytest

from jsonshred.iglu.schema_key import SchemaKey
from jsonshred.shredder.lineage import attach_lineage, root_hierarchy
from jsonshred.shredder.models import CanonicalEvent, ShreddedDocument, TypeHierarchy

CLICK = SchemaKey.parse("iglu:com.acme/click/jsonschema/1-0-0")


class TestRootHierarchy:
    def test_copies_event_identity(self, make_event):
        hierarchy = root_hierarchy(make_event(event_id="e1", collector_tstamp="2014-01-01 00:00:00.000"))
        assert hierarchy == TypeHierarchy(
            root_id="e1",
            root_tstamp="2014-01-01 00:00:00.000",
            ref_root="events",
            ref_tree=("events",),
            ref_parent="events",
        )

    def test_to_dict(self, make_event):
        assert root_hierarchy(make_event()).to_dict()["ref_tree"] == ["events"]


class TestAttachLineage:
    def test_returns_new_documents(self, make_event):
        original = ShreddedDocument(schema=CLICK, data={"target": "a"})
        (tagged,) = attach_lineage([original], make_event(event_id="e2"))
        assert original.hierarchy is None
        assert tagged.hierarchy.root_id == "e2"
        assert tagged.data is original.data

    def test_empty(self, make_event):
        assert attach_lineage([], make_event()) == []


class TestCanonicalEvent:
    def test_from_dict(self):
        event = CanonicalEvent.from_dict({
            "event_id": "e1",
            "collector_tstamp": "2014-01-01T00:00:00Z",
            "contexts": "[]",
            "app_id": "ignored",
        })
        assert event.contexts == "[]"
        assert event.ue_properties is None

    @pytest.mark.parametrize(
        "record",
        [
            {"collector_tstamp": "t"},
            {"event_id": "", "collector_tstamp": "t"},
            {"event_id": 1, "collector_tstamp": "t"},
            {"event_id": "e1", "collector_tstamp": "t", "contexts": []},
        ],
    )
    def test_from_dict_rejects(self, record):
        with pytest.raises(ValueError):
            CanonicalEvent.from_dict(record)


class TestShreddedDocument:
    def test_to_json(self, make_event):
        document = ShreddedDocument(CLICK, {"target": "a"}).with_hierarchy(root_hierarchy(make_event()))
        assert document.to_json() == {
            "schema": "iglu:com.acme/click/jsonschema/1-0-0",
            "data": {"target": "a"},
            "hierarchy": {
                "root_id": "e1",
                "root_tstamp": "2014-01-01T00:00:00Z",
                "ref_root": "events",
                "ref_tree": ["events"],
                "ref_parent": "events",
            },
        }

    def test_to_json_untagged(self):
        assert ShreddedDocument(None, {"a": 1}).to_json() == {"schema": None, "data": {"a": 1}}
