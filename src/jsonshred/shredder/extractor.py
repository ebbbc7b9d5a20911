"""Parse the raw JSON text held in an event field, returning failures as data."""

from __future__ import annotations

import json
from typing import Any

from jsonshred.core.errors import ErrorCategory
from jsonshred.core.result import Ok, Validated, fail


def _reject_constant(name: str) -> Any:
    # json.loads accepts NaN/Infinity by default; they are not JSON.
    raise ValueError(f"non-standard constant {name}")


def extract_json(field: str, instance: str | None) -> Validated[Any] | None:
    """
    Parse ``instance`` as JSON.

    Returns ``None`` when the field is absent (``None`` or blank text), an
    ``Ok`` with the parsed value, or an ``Err`` with one PARSE message
    attributed to ``field``. Never raises.
    """
    if instance is None or not instance.strip():
        return None

    try:
        return Ok(json.loads(instance, parse_constant=_reject_constant))
    except json.JSONDecodeError as e:
        return fail(
            field,
            f"Invalid JSON: {e.msg} at line {e.lineno} column {e.colno}",
            ErrorCategory.PARSE,
        )
    except ValueError as e:
        return fail(field, f"Invalid JSON: {e}", ErrorCategory.PARSE)
    except RecursionError:
        return fail(field, "Invalid JSON: nesting too deep", ErrorCategory.PARSE)


def is_empty(value: Any) -> bool:
    """True for JSON ``null`` and empty objects or arrays."""
    return value is None or (isinstance(value, (dict, list)) and not value)


__all__ = ["extract_json", "is_empty"]
