"""Tests for jsonshred.shredder.shredder module."""

import pytest

from jsonshred.core.errors import ErrorCategory
from jsonshred.core.result import Err, Ok
from jsonshred.iglu.schema_key import SchemaKey
from jsonshred.shredder.shredder import Shredder, shred
from jsonshred.shredder.validator import JsonValidator

CLICK_URI = "iglu:com.acme/click/jsonschema/1-0-0"
USER_URI = "iglu:com.acme/user/jsonschema/1-0-0"


def click(target="button"):
    return {"schema": CLICK_URI, "data": {"target": target}}


def user(user_id="u1"):
    return {"schema": USER_URI, "data": {"userId": user_id}}


@pytest.fixture
def shredder(repository) -> Shredder:
    return Shredder(repository)


class TestAbsentFields:
    def test_no_payloads(self, shredder, make_event):
        assert shredder.shred(make_event()) == Ok([])

    @pytest.mark.parametrize("value", ["", "  ", "null", "{}", "[]"])
    def test_empty_values_are_absent(self, shredder, make_event, value):
        assert shredder.shred(make_event(ue_properties=value, contexts=value)) == Ok([])


class TestUnstructuredLane:
    def test_single_document(self, shredder, make_event):
        documents = shredder.shred(make_event(ue_properties=click())).unwrap()
        assert len(documents) == 1
        assert documents[0].schema == SchemaKey.parse(CLICK_URI)
        assert documents[0].hierarchy.ref_parent == "events"
        assert documents[0].hierarchy.ref_tree == ("events",)

    def test_array_is_a_shape_error(self, shredder, make_event):
        result = shredder.shred(make_event(ue_properties=[click()]))
        (message,) = result.errors
        assert message.field == "ue_properties"
        assert message.category is ErrorCategory.SHAPE

    def test_parse_error(self, shredder, make_event):
        result = shredder.shred(make_event(ue_properties='{"schema": '))
        (message,) = result.errors
        assert (message.field, message.category) == ("ue_properties", ErrorCategory.PARSE)


class TestContextLane:
    def test_concrete_scenario(self, shredder, make_event):
        event = make_event(
            event_id="e1",
            collector_tstamp="2014-01-01T00:00:00Z",
            ue_properties=None,
            contexts='[{"schema":"iglu:com.acme/click/jsonschema/1-0-0","data":{"target":"button"}}]',
        )
        result = shredder.shred(event)
        assert isinstance(result, Ok)
        (document,) = result.value
        assert document.schema == SchemaKey("com.acme", "click", "jsonschema", "1-0-0")
        assert document.data["target"] == "button"
        assert document.hierarchy.root_id == "e1"
        assert document.hierarchy.root_tstamp == "2014-01-01T00:00:00Z"
        assert document.hierarchy.ref_parent == "events"

    def test_not_an_array(self, shredder, make_event):
        result = shredder.shred(make_event(contexts='{"not":"an array"}'))
        assert isinstance(result, Err)
        (message,) = result.errors
        assert message.field == "context"
        assert message.category is ErrorCategory.SHAPE
        assert "context is not an array" in message.message
        assert "got object" in message.message

    def test_one_document_per_element_in_order(self, shredder, make_event):
        contexts = [click("a"), user("u1"), click("b")]
        documents = shredder.shred(make_event(contexts=contexts)).unwrap()
        assert [d.data for d in documents] == [c["data"] for c in contexts]
        assert all(d.hierarchy.ref_tree == ("events",) for d in documents)
        assert all(d.hierarchy.ref_parent == "events" for d in documents)

    def test_errors_indexed_by_element(self, shredder, make_event):
        contexts = [click(), {"data": {}}, click(target=5), "oops"]
        result = shredder.shred(make_event(contexts=contexts))
        assert [m.field for m in result.errors] == ["context[1]", "context[2]", "context[3]"]
        assert [m.category for m in result.errors] == [
            ErrorCategory.SHAPE,
            ErrorCategory.CONSTRAINT,
            ErrorCategory.SHAPE,
        ]


class TestAccumulation:
    def test_both_lanes_fail(self, shredder, make_event):
        event = make_event(
            ue_properties={"schema": CLICK_URI, "data": {}},
            contexts=[user(), {"schema": "iglu:com.acme/unknown/jsonschema/1-0-0", "data": {}}],
        )
        result = shredder.shred(event)
        assert [(m.field, m.category) for m in result.errors] == [
            ("ue_properties", ErrorCategory.CONSTRAINT),
            ("context[1]", ErrorCategory.RESOLUTION),
        ]

    def test_one_lane_failing_drops_all_documents(self, shredder, make_event):
        event = make_event(ue_properties=click(), contexts=[user(), {"schema": USER_URI}])
        result = shredder.shred(event)
        assert isinstance(result, Err)
        assert [m.field for m in result.errors] == ["context[1]"]

    def test_parse_errors_in_both_fields(self, shredder, make_event):
        result = shredder.shred(make_event(ue_properties="{", contexts="["))
        assert [(m.field, m.category) for m in result.errors] == [
            ("ue_properties", ErrorCategory.PARSE),
            ("context", ErrorCategory.PARSE),
        ]

    def test_unresolvable_unstructured_with_valid_contexts(self, shredder, make_event):
        unknown = "iglu:com.acme/unknown/jsonschema/1-0-0"
        event = make_event(
            ue_properties={"schema": unknown, "data": {}},
            contexts=[click(), user()],
        )
        result = shredder.shred(event)
        assert isinstance(result, Err)
        (message,) = result.errors
        assert (message.field, message.category) == ("ue_properties", ErrorCategory.RESOLUTION)
        assert unknown in message.message

    def test_repository_failure_never_raises(self, make_event):
        class Unreachable:
            name = "unreachable"

            def resolve(self, key: SchemaKey):
                raise ConnectionError("registry unreachable")

        result = Shredder(Unreachable()).shred(make_event(contexts=[click()]))
        assert [(m.field, m.category) for m in result.errors] == [
            ("context[0]", ErrorCategory.RESOLUTION),
        ]


class TestCombinedOutput:
    def test_unstructured_first_then_contexts(self, shredder, make_event):
        event = make_event(event_id="e9", ue_properties=click("ue"), contexts=[user("u1"), user("u2")])
        documents = shredder.shred(event).unwrap()
        assert [d.schema.name for d in documents] == ["click", "user", "user"]
        assert {d.hierarchy.root_id for d in documents} == {"e9"}

    def test_shred_is_idempotent(self, shredder, make_event):
        event = make_event(ue_properties=click(), contexts=[user(), click("b")])
        assert shredder.shred(event) == shredder.shred(event)

    def test_failure_is_idempotent(self, shredder, make_event):
        event = make_event(ue_properties="{", contexts=[{"schema": CLICK_URI, "data": {}}])
        assert shredder.shred(event) == shredder.shred(event)

    def test_custom_ref_root(self, repository, make_event):
        documents = Shredder(repository, ref_root="root_events").shred(
            make_event(contexts=[click()])
        ).unwrap()
        hierarchy = documents[0].hierarchy
        assert (hierarchy.ref_root, hierarchy.ref_tree, hierarchy.ref_parent) == (
            "root_events",
            ("root_events",),
            "root_events",
        )


class TestConstruction:
    def test_requires_repository_or_validator(self):
        with pytest.raises(ValueError):
            Shredder()

    def test_accepts_validator(self, repository, make_event):
        shredder = Shredder(validator=JsonValidator(repository))
        assert shredder.shred(make_event(contexts=[click()])).is_ok()

    def test_module_level_shred(self, repository, make_event):
        assert len(shred(make_event(contexts=[click()]), repository).unwrap()) == 1
