"""
Project shredded documents onto one-table-per-schema rows.

Each schema key maps to a table named after its vendor, name and MODEL
version, e.g. ``iglu:com.zendesk.zendesk/ticket_commented/jsonschema/1-0-0`` →
``atomic.com_zendesk_zendesk_ticket_commented_1``. Rows carry the schema columns, the
lineage columns, then one column per property the *resolved schema* declares,
in declaration order::

    schema_vendor, schema_name, schema_format, schema_version,
    root_id, root_tstamp, ref_root, ref_tree, ref_parent,
    <property 1>, <property 2>, ...

Properties missing from the payload become ``None``. Payload fields the schema
does not declare have no column and are left out. A declared property named
like a lineage column is shadowed by the lineage value.
"""

from __future__ import annotations

import json
import re
from typing import Any

from jsonshred.iglu.schema_key import SchemaKey
from jsonshred.shredder.models import ShreddedDocument

SCHEMA_COLUMNS = ("schema_vendor", "schema_name", "schema_format", "schema_version")
LINEAGE_COLUMNS = ("root_id", "root_tstamp", "ref_root", "ref_tree", "ref_parent")

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[.\-\s]+")


def _snake(value: str) -> str:
    return _SEPARATORS.sub("_", _CAMEL_BOUNDARY.sub(r"\1_\2", value)).lower()


def table_name(key: SchemaKey, table_schema: str | None = None) -> str:
    """Warehouse table for ``key``, optionally qualified with ``table_schema``."""
    base = f"{_snake(key.vendor)}_{_snake(key.name)}_{key.model}"
    return f"{table_schema}.{base}" if table_schema else base


def property_columns(schema: dict[str, Any]) -> list[str]:
    """Top-level properties declared by ``schema``, in declaration order."""
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return []
    reserved = set(SCHEMA_COLUMNS) | set(LINEAGE_COLUMNS)
    return [name for name in properties if name not in reserved]


def columns(schema: dict[str, Any]) -> list[str]:
    """Full column list for the table holding documents of ``schema``."""
    return [*SCHEMA_COLUMNS, *LINEAGE_COLUMNS, *property_columns(schema)]


def to_row(document: ShreddedDocument, schema: dict[str, Any]) -> dict[str, Any]:
    """
    Flatten a lineage-tagged document into a row for its schema's table.

    Raises:
        ValueError: the document has no schema key or no lineage yet.
    """
    if document.schema is None or document.hierarchy is None:
        raise ValueError("Only schema-tagged documents with lineage can become rows")

    key = document.schema
    hierarchy = document.hierarchy
    row: dict[str, Any] = {
        "schema_vendor": key.vendor,
        "schema_name": key.name,
        "schema_format": key.format,
        "schema_version": key.version,
        "root_id": hierarchy.root_id,
        "root_tstamp": hierarchy.root_tstamp,
        "ref_root": hierarchy.ref_root,
        "ref_tree": json.dumps(list(hierarchy.ref_tree)),
        "ref_parent": hierarchy.ref_parent,
    }
    for name in property_columns(schema):
        row[name] = document.data.get(name)
    return row


def project(row: dict[str, Any], schema: dict[str, Any]) -> dict[str, Any]:
    """Recover the payload fields of a row: the inverse of ``to_row`` on properties."""
    return {name: row[name] for name in property_columns(schema) if row.get(name) is not None}


__all__ = [
    "SCHEMA_COLUMNS",
    "LINEAGE_COLUMNS",
    "table_name",
    "property_columns",
    "columns",
    "to_row",
    "project",
]
