"""
Validate self-describing JSON against the schema its envelope names.

A self-describing instance is an envelope::

    {"schema": "iglu:com.acme/click/jsonschema/1-0-0", "data": {"target": "button"}}

``JsonValidator.validate`` resolves the key through a ``SchemaRepository``,
compiles the schema with ``jsonschema`` (draft picked from ``$schema``, Draft 4
otherwise, format checking on) and checks ``data`` against it. Every failure
comes back as a ``ProcessingMessage``; nothing is raised.

Architecture:
    ::

        instance ──▶ envelope shape ──▶ SchemaKey.parse ──▶ repository.resolve
                       │ SHAPE             │ RESOLUTION         │ RESOLUTION
                       ▼                   ▼                    ▼
                                                       compile (check_schema)
                                                                │ RESOLUTION
                                                                ▼
                                                 iter_errors(data), all of them
                                                                │ CONSTRAINT
                                                                ▼
                                              Ok(ShreddedDocument(key, data))

Guardrails:
    - Compiled validators are cached per key. Published schema versions are
      immutable, so the cache never needs invalidating.
    - A key that is not registered at exactly that version fails resolution;
      there is no fallback to a neighbouring version.

Tags:
    json-schema, validation, iglu, self-describing-json, jsonshred
"""

from __future__ import annotations

import threading
from typing import Any

from jsonschema import Draft4Validator, FormatChecker
from jsonschema.exceptions import SchemaError, ValidationError
from jsonschema.protocols import Validator
from jsonschema.validators import validator_for
from referencing.exceptions import Unresolvable

from jsonshred.core.errors import (
    ErrorCategory,
    InvalidSchemaKeyError,
    SchemaResolutionError,
    is_retryable,
)
from jsonshred.core.logging import get_logger
from jsonshred.core.result import Err, Ok, ProcessingMessage, Validated, fail
from jsonshred.iglu.repository import SchemaRepository
from jsonshred.iglu.schema_key import SchemaKey
from jsonshred.shredder.models import ShreddedDocument

logger = get_logger(__name__)


def _sort_key(error: ValidationError) -> tuple[tuple[str, ...], str]:
    return tuple(str(part) for part in error.absolute_path), error.message


def describe(error: ValidationError) -> str:
    """Render one constraint violation as ``<json path>: <message>``."""
    return f"{error.json_path}: {error.message}"


class JsonValidator:
    """Schema-agnostic validator for self-describing JSON instances."""

    def __init__(self, repository: SchemaRepository):
        self.repository = repository
        self._compiled: dict[SchemaKey, Validator] = {}
        self._lock = threading.Lock()

    def validate(
        self,
        instance: Any,
        *,
        field: str,
        schema_required: bool = True,
    ) -> Validated[ShreddedDocument]:
        """
        Validate one envelope.

        Args:
            instance: Parsed JSON, expected to be a ``{"schema", "data"}`` object.
            field: Input field the instance came from, for error attribution.
            schema_required: When False, an object without a ``schema`` key is
                passed through untagged instead of failing.
        """
        if not isinstance(instance, dict):
            return fail(
                field,
                f"Expected a self-describing JSON object, got {json_type(instance)}",
                ErrorCategory.SHAPE,
            )

        if "schema" not in instance:
            if schema_required:
                return fail(field, "Missing schema reference", ErrorCategory.SHAPE)
            return Ok(ShreddedDocument(schema=None, data=instance))

        try:
            key = SchemaKey.parse(instance["schema"])
        except InvalidSchemaKeyError as e:
            return fail(field, f"Unresolvable schema: {e.message}", ErrorCategory.RESOLUTION)

        if "data" not in instance:
            return fail(field, f"Missing data for schema {key}", ErrorCategory.SHAPE)

        data = instance["data"]
        if not isinstance(data, dict):
            return fail(
                field,
                f"Data for schema {key} must be a JSON object, got {json_type(data)}",
                ErrorCategory.SHAPE,
            )

        return self._compile(key, field).flat_map(
            lambda validator: self._check(validator, key, data, field)
        )

    def _check(
        self,
        validator: Validator,
        key: SchemaKey,
        data: dict[str, Any],
        field: str,
    ) -> Validated[ShreddedDocument]:
        try:
            errors = sorted(validator.iter_errors(data), key=_sort_key)
        except Unresolvable as e:
            return fail(
                field,
                f"Unresolvable schema {key}: cannot resolve reference {e}",
                ErrorCategory.RESOLUTION,
            )
        except RecursionError:
            return fail(
                field,
                f"Data for schema {key} is nested too deeply to validate",
                ErrorCategory.CONSTRAINT,
            )

        if errors:
            return Err(tuple(
                ProcessingMessage(field, describe(error), ErrorCategory.CONSTRAINT)
                for error in errors
            ))
        return Ok(ShreddedDocument(schema=key, data=data, definition=validator.schema))

    def _compile(self, key: SchemaKey, field: str) -> Validated[Validator]:
        with self._lock:
            compiled = self._compiled.get(key)
        if compiled is not None:
            return Ok(compiled)

        try:
            schema = self.repository.resolve(key)
        except SchemaResolutionError as e:
            logger.debug("schema_unresolvable", schema=key.to_uri(), error=e.message)
            return fail(field, f"Unresolvable schema {key}: {e.message}", ErrorCategory.RESOLUTION)
        except Exception as e:
            # Any repository failure ends this instance, never the whole shred call.
            logger.warning(
                "schema_resolution_failed",
                schema=key.to_uri(),
                error=str(e),
                error_type=type(e).__name__,
                retryable=is_retryable(e),
            )
            return fail(
                field,
                f"Unresolvable schema {key}: {type(e).__name__}: {e}",
                ErrorCategory.RESOLUTION,
            )

        try:
            cls = validator_for(schema, default=Draft4Validator)
            cls.check_schema(schema)
            compiled = cls(schema, format_checker=FormatChecker())
        except SchemaError as e:
            return fail(
                field,
                f"Unresolvable schema {key}: not a valid JSON Schema ({e.message})",
                ErrorCategory.RESOLUTION,
            )
        except Exception as e:
            logger.warning("schema_compile_failed", schema=key.to_uri(), error=str(e))
            return fail(
                field,
                f"Unresolvable schema {key}: not a valid JSON Schema ({type(e).__name__}: {e})",
                ErrorCategory.RESOLUTION,
            )

        with self._lock:
            self._compiled.setdefault(key, compiled)
        return Ok(compiled)


def json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


__all__ = ["JsonValidator", "describe", "json_type"]
