"""Tests for jsonshred.shredder.extractor module."""

import pytest

from jsonshred.core.errors import ErrorCategory
from jsonshred.core.result import Ok
from jsonshred.shredder.extractor import extract_json, is_empty


class TestExtractJson:
    @pytest.mark.parametrize("instance", [None, "", "   ", "\n"])
    def test_absent(self, instance):
        assert extract_json("ue_properties", instance) is None

    def test_object(self):
        assert extract_json("ue_properties", '{"a": 1}') == Ok({"a": 1})

    def test_array(self):
        assert extract_json("context", "[1, 2]") == Ok([1, 2])

    def test_scalars_parse(self):
        assert extract_json("context", "null") == Ok(None)
        assert extract_json("context", '"text"') == Ok("text")

    def test_syntax_error(self):
        result = extract_json("ue_properties", '{"a": ')
        assert result.is_err()
        (message,) = result.errors
        assert message.field == "ue_properties"
        assert message.category is ErrorCategory.PARSE
        assert message.message.startswith("Invalid JSON: Expecting value at line 1 column")

    @pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
    def test_non_standard_constants(self, constant):
        result = extract_json("context", f'{{"x": {constant}}}')
        assert result.is_err()
        assert "non-standard constant" in result.errors[0].message

    def test_deep_nesting_does_not_raise(self):
        result = extract_json("context", "[" * 100_000 + "]" * 100_000)
        assert result is not None


class TestIsEmpty:
    @pytest.mark.parametrize("value", [None, {}, []])
    def test_empty(self, value):
        assert is_empty(value)

    @pytest.mark.parametrize("value", [0, "", False, {"a": 1}, [None]])
    def test_not_empty(self, value):
        assert not is_empty(value)
