"""Tests for jsonshred.core.errors module."""

from jsonshred.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidSchemaError,
    InvalidSchemaKeyError,
    RepositoryUnavailableError,
    SchemaNotFoundError,
    SchemaResolutionError,
    ShredError,
    StorageError,
    categorize_error,
    is_retryable,
)


class TestErrorContext:
    def test_to_dict_drops_none(self):
        context = ErrorContext(repository="local", metadata={"attempt": 2})
        assert context.to_dict() == {"repository": "local", "attempt": 2}


class TestShredError:
    def test_defaults(self):
        error = ShredError("boom")
        assert error.message == "boom"
        assert error.category is ErrorCategory.INTERNAL
        assert error.retryable is False

    def test_with_context_known_and_extra_keys(self):
        error = ShredError("boom").with_context(path="/tmp/x", table="t")
        assert error.context.path == "/tmp/x"
        assert error.context.metadata == {"table": "t"}

    def test_cause_is_chained(self):
        cause = OSError("disk full")
        error = StorageError("write failed", cause=cause)
        assert error.__cause__ is cause
        assert error.to_dict()["cause"] == "disk full"

    def test_to_dict(self):
        error = ConfigError("no repositories").with_context(repository="local")
        assert error.to_dict() == {
            "error_type": "ConfigError",
            "message": "no repositories",
            "category": "CONFIG",
            "retryable": False,
            "context": {"repository": "local"},
        }


class TestResolutionErrors:
    def test_hierarchy(self):
        for cls in (SchemaNotFoundError, InvalidSchemaError, RepositoryUnavailableError):
            assert issubclass(cls, SchemaResolutionError)

    def test_not_found_records_uri(self):
        error = SchemaNotFoundError("iglu:com.acme/click/jsonschema/1-0-0")
        assert error.category is ErrorCategory.RESOLUTION
        assert error.context.schema_uri == "iglu:com.acme/click/jsonschema/1-0-0"
        assert "Schema not found" in error.message

    def test_unavailable_is_retryable(self):
        assert RepositoryUnavailableError("timeout").retryable is True
        assert InvalidSchemaError("bad").retryable is False

    def test_invalid_key_is_shape(self):
        error = InvalidSchemaKeyError("iglu:nope", "expected vendor/name/format/version")
        assert error.category is ErrorCategory.SHAPE
        assert error.message == (
            "Invalid schema reference 'iglu:nope': expected vendor/name/format/version"
        )


class TestHelpers:
    def test_is_retryable(self):
        assert is_retryable(RepositoryUnavailableError("x"))
        assert is_retryable(TimeoutError())
        assert not is_retryable(ValueError())

    def test_categorize_error(self):
        assert categorize_error(StorageError("x")) is ErrorCategory.STORAGE
        assert categorize_error(PermissionError()) is ErrorCategory.STORAGE
        assert categorize_error(ValueError()) is ErrorCategory.PARSE
        assert categorize_error(RuntimeError()) is ErrorCategory.INTERNAL
