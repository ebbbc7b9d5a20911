"""
Structured error types for jsonshred.

Two layers of failure exist in the shredder. Per-event defects (bad JSON, a
missing envelope, an unknown schema, a constraint violation) are *data*: they
travel as ``ProcessingMessage`` values inside ``Err`` results and are never
raised out of ``shred()``. The exceptions in this module belong to the
collaborator seams instead: schema repositories, configuration, and output
sinks raise them, and the validator converts the repository ones into
RESOLUTION messages.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                        ShredError                           │
        │     (category, retryable, context, cause)                   │
        ├─────────────────────────────────────────────────────────────┤
        │                                                             │
        │  SchemaResolutionError         InvalidSchemaKeyError        │
        │  (RESOLUTION)                  (SHAPE)                      │
        │       │                                                     │
        │  SchemaNotFoundError                                        │
        │  InvalidSchemaError                                         │
        │  RepositoryUnavailableError (retryable)                     │
        │                                                             │
        │  ConfigError (CONFIG)          StorageError (STORAGE)       │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = SchemaNotFoundError("iglu:com.acme/click/jsonschema/1-0-0")
    >>> error.category
    <ErrorCategory.RESOLUTION: 'RESOLUTION'>
    >>> error.retryable
    False

    >>> error = RepositoryUnavailableError("registry timed out")
    >>> error.with_context(repository="central").context.repository
    'central'

Tags:
    error-handling, exception-hierarchy, error-context, jsonshred
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories.

    The first four classify per-event shredding failures and appear on every
    ``ProcessingMessage``. The rest classify exceptions raised at the
    collaborator seams.

    Attributes:
        PARSE: Malformed JSON text in an embedded field
        SHAPE: Valid JSON with the wrong structure for its position
        RESOLUTION: Schema reference unknown or unresolvable
        CONSTRAINT: Payload violates one or more JSON Schema rules
        CONFIG: Missing or invalid settings
        STORAGE: Output sink failures
        INTERNAL: Bugs, unexpected state
    """

    # Shredding failures (carried as data)
    PARSE = "PARSE"
    SHAPE = "SHAPE"
    RESOLUTION = "RESOLUTION"
    CONSTRAINT = "CONSTRAINT"

    # Infrastructure
    CONFIG = "CONFIG"
    STORAGE = "STORAGE"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        repository: Name of the schema repository involved
        schema_uri: Iglu URI that was being resolved
        path: Filesystem path involved, if any
        metadata: Additional key-value pairs
    """

    repository: str | None = None
    schema_uri: str | None = None
    path: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["repository", "schema_uri", "path"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ShredError(Exception):
    """
    Base exception for all jsonshred errors.

    Subclasses set ``default_category`` and ``default_retryable`` to give
    sensible defaults for their seam.

    Examples:
        >>> error = ShredError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["retryable"]
        False
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ShredError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SchemaNotFoundError(uri).with_context(repository="local")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# SCHEMA RESOLUTION ERRORS
# =============================================================================


class SchemaResolutionError(ShredError):
    """
    A schema key could not be turned into a usable schema document.

    The validator reports any of these as a single RESOLUTION message for the
    offending instance.
    """

    default_category = ErrorCategory.RESOLUTION
    default_retryable = False


class SchemaNotFoundError(SchemaResolutionError):
    """No repository holds the requested schema key."""

    def __init__(self, schema_uri: str, message: str | None = None, **kwargs: Any):
        self.schema_uri = schema_uri
        super().__init__(message or f"Schema not found: {schema_uri}", **kwargs)
        self.context.schema_uri = schema_uri


class InvalidSchemaError(SchemaResolutionError):
    """The stored schema document is unreadable or is not a valid JSON Schema."""


class RepositoryUnavailableError(SchemaResolutionError):
    """The repository could not be reached. Retrying later may succeed."""

    default_retryable = True


class InvalidSchemaKeyError(ShredError):
    """A string is not a well-formed Iglu schema URI."""

    default_category = ErrorCategory.SHAPE

    def __init__(self, value: str, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid schema reference {value!r}: {reason}")


# =============================================================================
# CONFIGURATION / STORAGE ERRORS
# =============================================================================


class ConfigError(ShredError):
    """Configuration error. Never retryable."""

    default_category = ErrorCategory.CONFIG


class StorageError(ShredError):
    """Output sink error (disk, permissions)."""

    default_category = ErrorCategory.STORAGE


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, ShredError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, ShredError):
        return error.category
    if isinstance(error, OSError):
        return ErrorCategory.STORAGE
    if isinstance(error, ValueError):
        return ErrorCategory.PARSE
    return ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ShredError",
    "SchemaResolutionError",
    "SchemaNotFoundError",
    "InvalidSchemaError",
    "RepositoryUnavailableError",
    "InvalidSchemaKeyError",
    "ConfigError",
    "StorageError",
    "is_retryable",
    "categorize_error",
]
