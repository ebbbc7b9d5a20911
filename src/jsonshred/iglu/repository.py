"""
Schema repositories: resolve a ``SchemaKey`` to its JSON Schema document.

The shredder only depends on the ``SchemaRepository`` protocol. The
implementations here cover embedding (in-memory), static Iglu repositories on
disk, priority chains of repositories, and a read-through cache shared by
concurrent shredding calls.

Architecture:
    ::

        SchemaRepository (Protocol)
        ├── InMemorySchemaRepository    dict-backed
        ├── FileSystemSchemaRepository  <root>/schemas/<vendor>/<name>/<format>/<version>
        ├── ChainedSchemaRepository     first hit wins, in priority order
        └── CachingSchemaRepository     read-through over a CacheBackend

        resolve(key) → dict
          raises SchemaNotFoundError         key unknown everywhere
                 InvalidSchemaError          stored document unusable
                 RepositoryUnavailableError  storage unreachable (retryable)

Every repository verifies that a resolved schema's optional ``self`` block
names the key that was asked for; a mismatch is an ``InvalidSchemaError``.

Examples:
    >>> repo = CachingSchemaRepository(
    ...     ChainedSchemaRepository([
    ...         FileSystemSchemaRepository("./iglu-local"),
    ...         FileSystemSchemaRepository("/srv/iglu-central"),
    ...     ])
    ... )
    >>> schema = repo.resolve(SchemaKey.parse("iglu:com.acme/click/jsonschema/1-0-0"))

Guardrails:
    - Only successful lookups are cached; a schema published later is picked
      up on the next call.
    - Repositories never retry; ``RepositoryUnavailableError`` is terminal for
      the shredding call that hit it.

Tags:
    schema-registry, iglu, repository, cache, jsonshred
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from jsonshred.core.cache import CacheBackend, InMemoryCache
from jsonshred.core.errors import (
    ConfigError,
    InvalidSchemaError,
    RepositoryUnavailableError,
    SchemaNotFoundError,
)
from jsonshred.core.logging import get_logger
from jsonshred.iglu.schema_key import SchemaKey

if TYPE_CHECKING:
    from jsonshred.core.settings import ShredderSettings

logger = get_logger(__name__)


@runtime_checkable
class SchemaRepository(Protocol):
    """Anything that can turn a schema key into a schema document."""

    name: str

    def resolve(self, key: SchemaKey) -> dict[str, Any]:
        """Return the schema for ``key`` or raise a ``SchemaResolutionError``."""
        ...


def verify_self_description(key: SchemaKey, schema: Any, repository: str) -> dict[str, Any]:
    """Check a resolved document is an object whose ``self`` block matches ``key``."""
    if not isinstance(schema, dict):
        raise InvalidSchemaError(
            f"Schema {key} is not a JSON object"
        ).with_context(repository=repository, schema_uri=key.to_uri())

    described = schema.get("self")
    if described is None:
        return schema

    expected = key.to_dict()
    if not isinstance(described, dict) or any(described.get(k) != v for k, v in expected.items()):
        raise InvalidSchemaError(
            f"Schema stored as {key} describes itself as {described!r}"
        ).with_context(repository=repository, schema_uri=key.to_uri())
    return schema


class InMemorySchemaRepository:
    """Dict-backed repository, for tests and embedding."""

    def __init__(
        self,
        schemas: Mapping[SchemaKey | str, dict[str, Any]] | None = None,
        *,
        name: str = "memory",
    ):
        self.name = name
        self._schemas: dict[SchemaKey, dict[str, Any]] = {}
        for key, schema in (schemas or {}).items():
            self.add(key, schema)

    def add(self, key: SchemaKey | str, schema: dict[str, Any]) -> None:
        if isinstance(key, str):
            key = SchemaKey.parse(key)
        self._schemas[key] = schema

    def resolve(self, key: SchemaKey) -> dict[str, Any]:
        try:
            schema = self._schemas[key]
        except KeyError:
            raise SchemaNotFoundError(key.to_uri()).with_context(repository=self.name) from None
        return verify_self_description(key, schema, self.name)

    def __len__(self) -> int:
        return len(self._schemas)


class FileSystemSchemaRepository:
    """
    Static Iglu repository on local disk.

    Layout: ``<root>/schemas/<vendor>/<name>/<format>/<version>``, one JSON
    Schema document per file, no extension.
    """

    def __init__(self, root: str | Path, *, name: str | None = None):
        self.root = Path(root)
        self.name = name or self.root.name or str(self.root)

    def path_for(self, key: SchemaKey) -> Path:
        return self.root / "schemas" / key.vendor / key.name / key.format / key.version

    def resolve(self, key: SchemaKey) -> dict[str, Any]:
        path = self.path_for(key)
        try:
            text = path.read_text(encoding="utf-8")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            raise SchemaNotFoundError(key.to_uri()).with_context(
                repository=self.name, path=str(path)
            ) from None
        except UnicodeDecodeError as e:
            raise InvalidSchemaError(
                f"Schema file for {key} is not UTF-8: {e.reason} at byte {e.start}", cause=e
            ).with_context(repository=self.name, schema_uri=key.to_uri(), path=str(path))
        except OSError as e:
            raise RepositoryUnavailableError(
                f"Cannot read {path}: {e.strerror or e}", cause=e
            ).with_context(repository=self.name, schema_uri=key.to_uri(), path=str(path))

        try:
            schema = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidSchemaError(
                f"Schema file for {key} is not valid JSON: {e.msg} at line {e.lineno}",
                cause=e,
            ).with_context(repository=self.name, schema_uri=key.to_uri(), path=str(path))
        except RecursionError as e:
            raise InvalidSchemaError(
                f"Schema file for {key} is nested too deeply", cause=e
            ).with_context(repository=self.name, schema_uri=key.to_uri(), path=str(path))

        logger.debug("schema_loaded", repository=self.name, schema=key.to_uri(), path=str(path))
        return verify_self_description(key, schema, self.name)


class ChainedSchemaRepository:
    """
    Resolve against several repositories in priority order.

    A ``SchemaNotFoundError`` or ``RepositoryUnavailableError`` moves on to the
    next repository. An ``InvalidSchemaError`` stops the search: the key exists
    but its document is broken, and a lower-priority copy must not shadow that.
    """

    def __init__(self, repositories: Iterable[SchemaRepository], *, name: str = "chain"):
        self.repositories = list(repositories)
        self.name = name

    def resolve(self, key: SchemaKey) -> dict[str, Any]:
        unavailable: list[str] = []

        for repository in self.repositories:
            try:
                return repository.resolve(key)
            except SchemaNotFoundError:
                continue
            except RepositoryUnavailableError as e:
                logger.warning(
                    "repository_unavailable",
                    repository=repository.name,
                    schema=key.to_uri(),
                    error=e.message,
                )
                unavailable.append(repository.name)

        searched = ", ".join(r.name for r in self.repositories) or "<none>"
        if unavailable:
            raise RepositoryUnavailableError(
                f"Schema {key} not found; unavailable repositories: {', '.join(unavailable)}"
            ).with_context(repository=self.name, schema_uri=key.to_uri())
        raise SchemaNotFoundError(
            key.to_uri(), f"Schema not found in [{searched}]: {key}"
        ).with_context(repository=self.name)


class CachingSchemaRepository:
    """Read-through cache in front of another repository."""

    def __init__(self, inner: SchemaRepository, cache: CacheBackend | None = None):
        self.inner = inner
        self.cache = cache if cache is not None else InMemoryCache()
        self.name = inner.name

    def resolve(self, key: SchemaKey) -> dict[str, Any]:
        cache_key = key.to_uri()
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        schema = self.inner.resolve(key)
        self.cache.set(cache_key, schema)
        logger.debug("schema_cached", schema=cache_key, repository=self.name)
        return schema


def build_repository(settings: ShredderSettings) -> SchemaRepository:
    """Wire the configured repository roots into a cached chain."""
    if not settings.schema_repositories:
        raise ConfigError(
            "No schema repositories configured (set JSONSHRED_SCHEMA_REPOSITORIES)"
        )

    repositories = [FileSystemSchemaRepository(root) for root in settings.schema_repositories]
    cache = InMemoryCache(
        max_size=settings.cache_max_size,
        default_ttl_seconds=settings.cache_ttl_seconds,
    )
    return CachingSchemaRepository(ChainedSchemaRepository(repositories), cache)


__all__ = [
    "SchemaRepository",
    "InMemorySchemaRepository",
    "FileSystemSchemaRepository",
    "ChainedSchemaRepository",
    "CachingSchemaRepository",
    "verify_self_description",
    "build_repository",
]
