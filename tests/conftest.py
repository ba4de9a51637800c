"""
Pytest fixtures for pagetree tests.

This module provides:
1. Widget registry and engine fixtures
2. Editor fixtures backed by an in-memory store
3. Helpers for building raw layout documents
"""

from typing import Any

import pytest

from pagetree.config import Settings
from pagetree.core.kv_store import InMemoryStore
from pagetree.services.layout_editor import LayoutEditor
from pagetree.services.layout_engine import LayoutEngine
from pagetree.services.layout_storage import LayoutStorage
from pagetree.services.widget_registry import WidgetRegistry


# ==================== CONFIGURATION ====================


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment's storage configuration."""
    return Settings(environment="testing", storage_backend="memory")


# ==================== ENGINE ====================


@pytest.fixture
def registry() -> WidgetRegistry:
    """Registry with the standard widget set"""
    return WidgetRegistry.with_standard_widgets()


@pytest.fixture
def engine(registry) -> LayoutEngine:
    """Empty layout engine"""
    return LayoutEngine(registry)


@pytest.fixture
def populated_engine(engine) -> tuple[LayoutEngine, dict[str, str]]:
    """
    Engine holding:

        row
        ├── heading
        └── card
            ├── paragraph
            └── button
        column
        divider
    """
    ids: dict[str, str] = {}
    ids["row"] = engine.add_root("container.row")
    ids["heading"] = engine.add_child(ids["row"], "text.heading")
    ids["card"] = engine.add_child(ids["row"], "container.card")
    ids["paragraph"] = engine.add_child(ids["card"], "text.paragraph")
    ids["button"] = engine.add_child(ids["card"], "basic.button")
    ids["column"] = engine.add_root("container.column")
    ids["divider"] = engine.add_root("basic.divider")
    return engine, ids


# ==================== EDITOR ====================


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def storage(memory_store):
    """Background-writing storage over the in-memory store"""
    storage = LayoutStorage(memory_store, key="test-layout")
    yield storage
    storage.close()


@pytest.fixture
def editor(registry, storage, test_settings):
    """Editor starting from an empty store"""
    editor = LayoutEditor(registry=registry, storage=storage, settings=test_settings)
    yield editor
    editor.close()


# ==================== DOCUMENTS ====================


def node_doc(
    widget_type: str = "container.row",
    children: list[str] | None = None,
    parent: str | None = None,
    **config: Any,
) -> dict[str, Any]:
    """Raw node entry for a layout document."""
    return {
        "widget_type": widget_type,
        "properties": config.get("properties", {}),
        "css_classes": config.get("css_classes", []),
        "styles": config.get("styles", {}),
        "children": children or [],
        "parent": parent,
    }


@pytest.fixture
def make_node():
    return node_doc
