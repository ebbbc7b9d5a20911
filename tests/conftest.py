"""
Shared pytest fixtures and configuration for jsonshred tests.

This module provides:
- An in-memory schema repository with the click/user schemas
- The static Iglu repository under ``tests/fixtures/iglu``
- Canonical event builders
- Settings and logging isolation between tests

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments.

    def test_something(repository, make_event):
        result = Shredder(repository).shred(make_event(contexts=...))
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Callable

import pytest
import structlog

# Ensure jsonshred package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from jsonshred.core.settings import clear_settings_cache
from jsonshred.iglu import FileSystemSchemaRepository, InMemorySchemaRepository
from jsonshred.shredder.models import CanonicalEvent


FIXTURES = Path(__file__).parent / "fixtures"
IGLU_ROOT = FIXTURES / "iglu"

CLICK_URI = "iglu:com.acme/click/jsonschema/1-0-0"
USER_URI = "iglu:com.acme/user/jsonschema/1-0-0"

CLICK_SCHEMA: dict[str, Any] = {
    "self": {"vendor": "com.acme", "name": "click", "format": "jsonschema", "version": "1-0-0"},
    "type": "object",
    "properties": {
        "target": {"type": "string", "maxLength": 64},
        "x": {"type": "integer", "minimum": 0},
    },
    "required": ["target"],
}

USER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {"userId": {"type": "string"}},
    "required": ["userId"],
}


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if test_path.parts[0] in {"job", "cli"}:
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch):
    """Drop cached settings and any JSONSHRED_* variables from the host."""
    for name in list(os.environ):
        if name.startswith("JSONSHRED_"):
            monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any configure_logging() a test (or the CLI) performed."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Repositories
# =============================================================================


@pytest.fixture
def repository() -> InMemorySchemaRepository:
    """Repository holding the click and user schemas."""
    return InMemorySchemaRepository({CLICK_URI: CLICK_SCHEMA, USER_URI: USER_SCHEMA})


@pytest.fixture
def iglu_root() -> Path:
    return IGLU_ROOT


@pytest.fixture
def iglu_repository() -> FileSystemSchemaRepository:
    return FileSystemSchemaRepository(IGLU_ROOT)


# =============================================================================
# Event Builders
# =============================================================================


@pytest.fixture
def make_event() -> Callable[..., CanonicalEvent]:
    """Build a CanonicalEvent; dict/list payloads are JSON-encoded."""

    def _make(
        *,
        event_id: str = "e1",
        collector_tstamp: str = "2014-01-01T00:00:00Z",
        ue_properties: Any = None,
        contexts: Any = None,
    ) -> CanonicalEvent:
        if ue_properties is not None and not isinstance(ue_properties, str):
            ue_properties = json.dumps(ue_properties)
        if contexts is not None and not isinstance(contexts, str):
            contexts = json.dumps(contexts)
        return CanonicalEvent(
            event_id=event_id,
            collector_tstamp=collector_tstamp,
            ue_properties=ue_properties,
            contexts=contexts,
        )

    return _make
