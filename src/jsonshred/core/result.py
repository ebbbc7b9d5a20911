"""
Accumulating result envelope for shredding.

Every step of the shredder returns a ``Validated[T]``: either ``Ok[T]`` holding
a value, or ``Err[T]`` holding a non-empty tuple of ``ProcessingMessage``.
Unlike an exception, an ``Err`` does not stop sibling work. Two independent
results are merged with ``combine`` and N results with ``sequence``; both keep
*every* message from every failing side, so one pass over an event reports
all of its defects.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     Validated[T]                            │
        ├──────────────────────┬──────────────────────────────────────┤
        │       Ok[T]          │        Err[T]                        │
        │  • value: T          │  • errors: tuple[ProcessingMessage]  │
        ├──────────────────────┴──────────────────────────────────────┤
        │  combine(a, b, f)                                           │
        │    Ok(x)  + Ok(y)   → Ok(f(x, y))                           │
        │    Ok(x)  + Err(e2) → Err(e2)                               │
        │    Err(e1)+ Ok(y)   → Err(e1)                               │
        │    Err(e1)+ Err(e2) → Err(e1 + e2)                          │
        │                                                             │
        │  sequence([r1, r2, ...]) → Ok([v1, v2, ...]) | Err(all)     │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> from jsonshred.core.result import Ok, fail, sequence
    >>> sequence([Ok(1), Ok(2)])
    Ok([1, 2])
    >>> merged = sequence([fail("a", "bad"), Ok(2), fail("b", "worse")])
    >>> [m.field for m in merged.errors]
    ['a', 'b']

    Pattern matching:

    >>> match Ok(5).map(lambda x: x * 2):
    ...     case Ok(value):
    ...         print(value)
    ...     case Err(errors):
    ...         print(errors)
    10

Guardrails:
    ❌ DON'T: Raise inside map/flat_map functions
    ✅ DO: Return an Err from flat_map if the step can fail

    ❌ DON'T: Short-circuit independent checks with flat_map
    ✅ DO: Use combine/sequence so every failure is reported

Tags:
    result-pattern, error-accumulation, validation, jsonshred
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from jsonshred.core.errors import ErrorCategory, ShredError


T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")


@dataclass(frozen=True, slots=True)
class ProcessingMessage:
    """
    A single shredding failure, attributed to the input field it came from.

    ``field`` is ``"ue_properties"``, ``"context"``, ``"context[3]"`` or
    ``"line"``; ``message`` is human-readable.
    """

    field: str
    message: str
    category: ErrorCategory = ErrorCategory.CONSTRAINT

    def with_field(self, field: str) -> ProcessingMessage:
        """Return a copy attributed to a different field."""
        return ProcessingMessage(field, self.message, self.category)

    def to_dict(self) -> dict[str, str]:
        return {
            "field": self.field,
            "message": self.message,
            "category": self.category.value,
        }


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Validated[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def flat_map(self, f: Callable[[T], Validated[U]]) -> Validated[U]:
        """Chain to another Validated-returning function."""
        return f(self.value)

    def map_errors(self, f: Callable[[ProcessingMessage], ProcessingMessage]) -> Validated[T]:
        """No-op for Ok."""
        return self

    def combine(self, other: Validated[U], f: Callable[[T, U], V]) -> Validated[V]:
        """Merge with an independent result, accumulating errors."""
        if isinstance(other, Ok):
            return Ok(f(self.value, other.value))
        return Err(other.errors)

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    Failed result carrying one or more processing messages.

    ``errors`` is never empty; constructing an ``Err`` with no messages is a
    programming error and raises ``ValueError``.
    """

    errors: tuple[ProcessingMessage, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.errors, tuple):
            object.__setattr__(self, "errors", tuple(self.errors))
        if not self.errors:
            raise ValueError("Err requires at least one ProcessingMessage")

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise. Use only when you're sure it's Ok."""
        summary = "; ".join(f"{m.field}: {m.message}" for m in self.errors)
        raise ShredError(f"Called unwrap on Err ({len(self.errors)} errors): {summary}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[T], U]) -> Validated[U]:
        """No-op for Err."""
        return Err(self.errors)

    def flat_map(self, f: Callable[[T], Validated[U]]) -> Validated[U]:
        """No-op for Err."""
        return Err(self.errors)

    def map_errors(self, f: Callable[[ProcessingMessage], ProcessingMessage]) -> Validated[T]:
        """Transform every message, e.g. to re-attribute the field."""
        return Err(tuple(f(m) for m in self.errors))

    def combine(self, other: Validated[U], f: Callable[[T, U], V]) -> Validated[V]:
        """Merge with an independent result, accumulating errors."""
        if isinstance(other, Err):
            return Err(self.errors + other.errors)
        return Err(self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {"ok": False, "errors": [m.to_dict() for m in self.errors]}

    def __repr__(self) -> str:
        return f"Err({list(self.errors)!r})"


Validated = Ok[T] | Err[T]


# =============================================================================
# CONSTRUCTORS AND COLLECTORS
# =============================================================================


def fail(
    field: str,
    message: str,
    category: ErrorCategory = ErrorCategory.CONSTRAINT,
) -> Err[Any]:
    """Build a single-message Err."""
    return Err((ProcessingMessage(field, message, category),))


def sequence(results: Iterable[Validated[T]]) -> Validated[list[T]]:
    """
    Collect results into a result of list, accumulating ALL errors.

    Every input is inspected; the output is Ok only if every input is Ok.
    Values and messages keep input order.

    Examples:
        >>> sequence([])
        Ok([])
    """
    values: list[T] = []
    errors: list[ProcessingMessage] = []

    for result in results:
        match result:
            case Ok(value):
                values.append(value)
            case Err(errs):
                errors.extend(errs)

    if errors:
        return Err(tuple(errors))
    return Ok(values)


def concat(left: Validated[list[T]], right: Validated[list[T]]) -> Validated[list[T]]:
    """Combine two list results by concatenation."""
    return left.combine(right, lambda a, b: [*a, *b])


__all__ = [
    "ProcessingMessage",
    "Ok",
    "Err",
    "Validated",
    "fail",
    "sequence",
    "concat",
]
