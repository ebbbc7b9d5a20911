"""Schema keys and schema repositories (Iglu conventions)."""

from jsonshred.iglu.repository import (
    CachingSchemaRepository,
    ChainedSchemaRepository,
    FileSystemSchemaRepository,
    InMemorySchemaRepository,
    SchemaRepository,
    build_repository,
)
from jsonshred.iglu.schema_key import IGLU_PREFIX, SchemaKey

__all__ = [
    "IGLU_PREFIX",
    "SchemaKey",
    "SchemaRepository",
    "InMemorySchemaRepository",
    "FileSystemSchemaRepository",
    "ChainedSchemaRepository",
    "CachingSchemaRepository",
    "build_repository",
]
