"""
Schema keys: the (vendor, name, format, version) tuple naming one schema.

Self-describing JSON carries its key as an Iglu URI in the envelope's
``schema`` field::

    {"schema": "iglu:com.acme/click/jsonschema/1-0-0", "data": {...}}

Versions are SchemaVer ``MODEL-REVISION-ADDITION``. Only MODEL affects the
target table (``com_acme_click_1``); a given key resolves to exactly one schema
document and no version coercion takes place.

Examples:
    >>> key = SchemaKey.parse("iglu:com.acme/click/jsonschema/1-0-0")
    >>> key.vendor, key.name, key.model
    ('com.acme', 'click', 1)
    >>> key.to_path()
    'com.acme/click/jsonschema/1-0-0'
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from jsonshred.core.errors import InvalidSchemaKeyError


IGLU_PREFIX = "iglu:"

_VENDOR = r"[a-zA-Z0-9\-_.]+"
_PART = r"[a-zA-Z0-9\-_]+"
_VERSION = r"[0-9]+-[0-9]+-[0-9]+"

_PATH_PATTERN = re.compile(rf"^({_VENDOR})/({_PART})/({_PART})/({_VERSION})$")
_VERSION_PATTERN = re.compile(rf"^{_VERSION}$")


@dataclass(frozen=True, order=True)
class SchemaKey:
    """Immutable identifier of a single schema version."""

    vendor: str
    name: str
    format: str
    version: str

    def __post_init__(self) -> None:
        if not _VERSION_PATTERN.match(self.version):
            raise InvalidSchemaKeyError(self.version, "version must be MODEL-REVISION-ADDITION")

    @classmethod
    def parse(cls, uri: str) -> SchemaKey:
        """Parse an ``iglu:vendor/name/format/version`` URI."""
        if not isinstance(uri, str):
            raise InvalidSchemaKeyError(repr(uri), "schema reference must be a string")
        if not uri.startswith(IGLU_PREFIX):
            raise InvalidSchemaKeyError(uri, f"expected {IGLU_PREFIX!r} prefix")
        return cls.from_path(uri[len(IGLU_PREFIX):], original=uri)

    @classmethod
    def from_path(cls, path: str, *, original: str | None = None) -> SchemaKey:
        """Parse a ``vendor/name/format/version`` repository path."""
        match = _PATH_PATTERN.match(path)
        if match is None:
            raise InvalidSchemaKeyError(
                original or path, "expected vendor/name/format/version"
            )
        return cls(*match.groups())

    @property
    def model(self) -> int:
        """The MODEL component of the version."""
        return int(self.version.split("-", 1)[0])

    def to_path(self) -> str:
        return f"{self.vendor}/{self.name}/{self.format}/{self.version}"

    def to_uri(self) -> str:
        return f"{IGLU_PREFIX}{self.to_path()}"

    def to_dict(self) -> dict[str, str]:
        return {
            "vendor": self.vendor,
            "name": self.name,
            "format": self.format,
            "version": self.version,
        }

    def __str__(self) -> str:
        return self.to_uri()


__all__ = ["SchemaKey", "IGLU_PREFIX"]
