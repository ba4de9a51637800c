"""
Unit tests for the LayoutEditor session.

Covers history integration, change notification and autosave.
"""

import json
import logging
from datetime import date
from unittest.mock import MagicMock

import pytest

from pagetree.core.exceptions import DanglingReferenceError, InvalidConfigError, NodeNotFoundError
from pagetree.core.kv_store import InMemoryStore
from pagetree.models.contracts.layout import Layout, WidgetConfig
from pagetree.models.contracts.widgets import WidgetDefinition
from pagetree.services import layout_codec
from pagetree.services.layout_editor import LayoutEditor
from pagetree.services.layout_storage import LayoutStorage
from pagetree.services.widget_registry import WidgetRegistry


# ==================== HISTORY ====================


class TestEditorHistory:
    """Edits are recorded and can be undone/redone."""

    def test_undo_redo_add(self, editor):
        row = editor.add_root("container.row")
        child = editor.add_child(row, "text.paragraph")

        assert editor.undo() is True
        assert child not in editor.engine
        assert editor.undo() is True
        assert len(editor.engine) == 0
        assert editor.undo() is False

        assert editor.redo() is True
        assert editor.redo() is True
        assert editor.engine.children_of(row) == [child]
        assert editor.redo() is False

    def test_undo_remove_restores_subtree(self, editor):
        row = editor.add_root("container.row")
        card = editor.add_child(row, "container.card")
        editor.add_child(card, "basic.button")
        before = editor.export_json()

        editor.remove(row)
        editor.undo()

        assert editor.export_json() == before

    def test_boundary_move_creates_no_history(self, editor):
        """Moving the first widget up leaves history untouched."""
        first = editor.add_root("text")
        editor.add_root("text")
        depth = editor.history.undo_depth

        assert editor.move_up(first) is False

        assert editor.history.undo_depth == depth

    def test_identical_config_creates_no_history(self, editor):
        node_id = editor.add_root("basic.button")
        depth = editor.history.undo_depth

        assert editor.set_config(node_id, editor.get(node_id).config) is False

        assert editor.history.undo_depth == depth

    def test_new_edit_clears_redo(self, editor):
        editor.add_root("text")
        editor.undo()
        assert editor.can_redo

        editor.add_root("text")

        assert not editor.can_redo

    def test_failed_edit_leaves_history_alone(self, editor):
        editor.add_root("text")
        depth = editor.history.undo_depth

        with pytest.raises(NodeNotFoundError):
            editor.remove("ghost")

        assert editor.history.undo_depth == depth

    def test_history_capacity_from_settings(self, registry, storage, test_settings):
        settings = test_settings.model_copy(update={"history_capacity": 3})
        editor = LayoutEditor(registry=registry, storage=storage, settings=settings)

        for _ in range(5):
            editor.add_root("text")

        assert editor.history.undo_depth == 3

    def test_undo_with_custom_registry(self, storage, test_settings):
        registry = WidgetRegistry([WidgetDefinition(widget_type="custom.banner", display_name="Banner")])
        editor = LayoutEditor(registry=registry, storage=storage, settings=test_settings)
        first = editor.add_root("custom.banner")
        editor.add_root("custom.banner")

        assert editor.undo() is True
        assert editor.engine.root_ids == [first]


# ==================== VALIDATION ====================


class TestEditorRejectsNonJson:
    """A rejected config leaves the session fully usable."""

    def test_add_child_with_object_property(self, editor):
        row = editor.add_root("container.row")
        listener = MagicMock()
        editor.subscribe(listener)
        depth = editor.history.undo_depth

        with pytest.raises(InvalidConfigError):
            editor.add_child(row, "text.paragraph", {"properties": {"x": object()}})

        assert len(editor.engine) == 1
        assert editor.history.undo_depth == depth
        listener.assert_not_called()

        divider = editor.add_root("basic.divider")
        assert json.loads(editor.export_json())["root_nodes"] == [row, divider]

    def test_set_config_with_date(self, editor):
        node_id = editor.add_root("text")
        before = editor.export_json()

        with pytest.raises(InvalidConfigError):
            editor.set_config(node_id, {"properties": {"when": date(2024, 1, 1)}})

        assert editor.export_json() == before

    def test_set_metadata_with_set(self, editor):
        with pytest.raises(InvalidConfigError):
            editor.set_metadata("tags", {"a", "b"})

        assert editor.layout.metadata == {}
        assert not editor.can_undo


# ==================== LISTENERS ====================


class TestEditorListeners:
    """Subscribers are notified with the serialized layout."""

    def test_listener_receives_document(self, editor):
        received = []
        editor.subscribe(received.append)

        row = editor.add_root("container.row")

        assert len(received) == 1
        assert received[0]["version"] == 1
        assert received[0]["root_nodes"] == [row]

    def test_noop_does_not_notify(self, editor):
        node_id = editor.add_root("text")
        listener = MagicMock()
        editor.subscribe(listener)

        editor.move_down(node_id)

        listener.assert_not_called()

    def test_undo_redo_notify(self, editor):
        editor.add_root("text")
        listener = MagicMock()
        editor.subscribe(listener)

        editor.undo()
        editor.redo()

        assert listener.call_count == 2

    def test_unsubscribe(self, editor):
        listener = MagicMock()
        unsubscribe = editor.subscribe(listener)

        unsubscribe()
        editor.add_root("text")

        listener.assert_not_called()

    def test_listeners_get_independent_documents(self, editor):
        def vandal(document):
            document["root_nodes"].clear()

        received = []
        editor.subscribe(vandal)
        editor.subscribe(received.append)

        node_id = editor.add_root("text")

        assert received[0]["root_nodes"] == [node_id]
        assert editor.engine.root_ids == [node_id]

    def test_failing_listener_is_logged(self, editor, caplog):
        received = []
        editor.subscribe(MagicMock(side_effect=RuntimeError("boom")))
        editor.subscribe(received.append)

        with caplog.at_level(logging.ERROR, logger="pagetree.services.layout_editor"):
            editor.add_root("text")

        assert len(received) == 1
        assert "listener failed" in caplog.text


# ==================== PERSISTENCE ====================


class TestEditorPersistence:
    """Autosave and startup loading."""

    def test_testing_environment_autosaves_in_memory(self, registry, test_settings):
        editor = LayoutEditor(registry=registry, settings=test_settings)
        try:
            assert isinstance(editor.storage.store, InMemoryStore)
        finally:
            editor.close()

    def test_autosave_after_edit(self, editor, memory_store):
        node_id = editor.add_root("text.heading")
        editor.storage.flush()

        saved = json.loads(memory_store.load("test-layout"))

        assert saved["root_nodes"] == [node_id]

    def test_autosave_after_undo(self, editor, memory_store):
        editor.add_root("text")
        editor.undo()
        editor.storage.flush()

        assert json.loads(memory_store.load("test-layout"))["root_nodes"] == []

    def test_loads_saved_layout(self, registry, memory_store, test_settings, engine):
        row = engine.add_root("container.row")
        engine.add_child(row, "text")
        memory_store.save("test-layout", layout_codec.encode_json(engine.layout))

        storage = LayoutStorage(memory_store, key="test-layout", background=False)
        editor = LayoutEditor(registry=registry, storage=storage, settings=test_settings)

        assert editor.layout == engine.layout
        assert not editor.can_undo

    def test_invalid_saved_layout_falls_back_to_empty(self, registry, memory_store, test_settings):
        memory_store.save("test-layout", '{"version": 1, "root_nodes": ["ghost"], "nodes": {}}')

        storage = LayoutStorage(memory_store, key="test-layout", background=False)
        editor = LayoutEditor(registry=registry, storage=storage, settings=test_settings)

        assert editor.layout == Layout()

    def test_save_failure_does_not_affect_edit(self, registry, test_settings):
        store = MagicMock()
        store.load.return_value = None
        store.save.side_effect = ConnectionError("down")
        storage = LayoutStorage(store, background=False)
        editor = LayoutEditor(registry=registry, storage=storage, settings=test_settings)

        node_id = editor.add_root("text")

        assert node_id in editor.engine
        store.save.assert_called_once()


# ==================== IMPORT / EXPORT ====================


class TestEditorImportExport:
    """import_json / export_json / clear"""

    def test_export_import_round_trip(self, editor, registry, test_settings, storage):
        row = editor.add_root("container.row", WidgetConfig(css_classes=["hero"]))
        editor.add_child(row, "text.paragraph")
        exported = editor.export_json(pretty=True)

        other = LayoutEditor(
            registry=registry,
            storage=storage,
            initial_layout=Layout(),
            settings=test_settings,
        )
        other.import_json(exported)

        assert other.export_json() == editor.export_json()
        assert other.can_undo

    def test_import_is_undoable(self, editor):
        editor.add_root("text")
        before = editor.export_json()
        replacement = LayoutEditor(
            registry=editor.registry,
            storage=LayoutStorage(MagicMock(**{"load.return_value": None}), background=False),
            initial_layout=Layout(),
            settings=editor.settings,
        )
        replacement.add_root("container.grid")

        editor.import_json(replacement.export_json())
        editor.undo()

        assert editor.export_json() == before

    def test_invalid_import_keeps_layout(self, editor):
        node_id = editor.add_root("text")
        depth = editor.history.undo_depth

        with pytest.raises(DanglingReferenceError):
            editor.import_json({"version": 1, "root_nodes": ["x"], "nodes": {}})

        assert editor.engine.root_ids == [node_id]
        assert editor.history.undo_depth == depth

    def test_clear(self, editor, memory_store):
        editor.add_root("text")
        listener = MagicMock()
        editor.subscribe(listener)

        editor.clear()

        assert len(editor.engine) == 0
        assert not editor.can_undo
        assert memory_store.load("test-layout") is None
        listener.assert_called_once()

    def test_set_metadata(self, editor):
        assert editor.set_metadata("title", "Home") is True
        assert editor.set_metadata("title", "Home") is False
        assert editor.history.undo_depth == 1
